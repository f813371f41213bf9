"""
Shared theme, CSS injection, palette, session context and small UI helpers
for the Functional Labs Streamlit frontend.
"""

from __future__ import annotations

import streamlit as st

from clinic_api.context import SessionContext

# ---------------------------------------------------------------------------
# Color palettes (light + dark)
# ---------------------------------------------------------------------------
COLORS_LIGHT: dict[str, str] = {
    "primary": "#0D9488",       # teal-600
    "accent": "#F97316",        # orange-500
    "danger": "#EF4444",        # red-500
    "danger_light": "#FEE2E2",  # red-100
    "warning": "#F59E0B",       # amber-500
    "warning_light": "#FEF3C7", # amber-100
    "success": "#10B981",       # emerald-500
    "success_light": "#D1FAE5", # emerald-100
    "info": "#3B82F6",          # blue-500
    "text": "#1E293B",          # slate-800
    "text_muted": "#475569",    # slate-600
    "bg_card": "#FFFFFF",
    "bg_page": "#F8FAFC",       # slate-50
    "border": "#E2E8F0",        # slate-200
}

COLORS_DARK: dict[str, str] = {
    "primary": "#14B8A6",       # teal-400
    "accent": "#FB923C",        # orange-400
    "danger": "#F87171",        # red-400
    "danger_light": "#450A0A",  # red-950
    "warning": "#FBBF24",       # amber-400
    "warning_light": "#451A03", # amber-950
    "success": "#34D399",       # emerald-400
    "success_light": "#022C22", # emerald-950
    "info": "#60A5FA",          # blue-400
    "text": "#F1F5F9",          # slate-100
    "text_muted": "#94A3B8",    # slate-400
    "bg_card": "#1E293B",       # slate-800
    "bg_page": "#0F172A",       # slate-900
    "border": "#334155",        # slate-700
}


def get_colors() -> dict[str, str]:
    """Return the active palette based on ``st.session_state.dark_mode``."""
    if st.session_state.get("dark_mode", False):
        return COLORS_DARK
    return COLORS_LIGHT


def zone_colors() -> dict[str, str]:
    c = get_colors()
    return {
        "optimal": c["success"],
        "functional_deviation": c["warning"],
        "abnormal": c["danger"],
    }


# Translucent fills for the chart background bands.
ZONE_FILLS = {
    "optimal": "rgba(16,185,129,0.12)",
    "functional_deviation": "rgba(245,158,11,0.12)",
    "abnormal": "rgba(239,68,68,0.10)",
}


# ---------------------------------------------------------------------------
# Plotly helpers
# ---------------------------------------------------------------------------
def plotly_layout_defaults(title: str = "", height: int = 400) -> dict:
    """Return a dict of common Plotly layout kwargs for consistent styling."""
    c = get_colors()
    axis = dict(
        tickfont=dict(size=12, color=c["text"]),
        linecolor=c["border"],
        gridcolor=c["border"],
    )
    dark = st.session_state.get("dark_mode", False)
    return dict(
        title=dict(text=title, font=dict(size=16, color=c["text"])),
        template="plotly_dark" if dark else "plotly_white",
        height=height,
        margin=dict(l=40, r=20, t=50, b=40),
        font=dict(family="Inter, system-ui, sans-serif", size=13, color=c["text"]),
        plot_bgcolor=c["bg_card"] if dark else "rgba(0,0,0,0)",
        paper_bgcolor="rgba(0,0,0,0)",
        xaxis=dict(**axis),
        yaxis=dict(**axis),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )


# ---------------------------------------------------------------------------
# CSS injection
# ---------------------------------------------------------------------------
_CSS_TEMPLATE = """
<style>
[data-testid="stAppViewContainer"] { background-color: %(bg_page)s; }

.kpi-tile {
    background: %(bg_card)s;
    border: 1px solid %(border)s;
    border-radius: 12px;
    padding: 16px 18px;
    text-align: center;
}
.kpi-value { font-size: 1.6rem; font-weight: 800; }
.kpi-label { color: %(text_muted)s; font-size: 0.8rem; text-transform: uppercase; letter-spacing: 0.04em; }

.zone-badge {
    display: inline-block;
    padding: 2px 10px;
    border-radius: 999px;
    font-size: 0.75rem;
    font-weight: 700;
}
.zone-optimal   { background: %(success_light)s; color: %(success)s; }
.zone-deviation { background: %(warning_light)s; color: %(warning)s; }
.zone-abnormal  { background: %(danger_light)s;  color: %(danger)s; }

.dir-up     { color: %(danger)s;  font-weight: 700; }
.dir-down   { color: %(info)s;    font-weight: 700; }
.dir-stable { color: %(success)s; font-weight: 700; }

.section-title {
    font-size: 1.1rem;
    font-weight: 700;
    color: %(text)s;
    margin: 18px 0 8px 0;
    padding-bottom: 4px;
    border-bottom: 2px solid %(primary)s;
}
</style>
"""


def apply_theme() -> None:
    """Inject global CSS into the page. Call once at the top of every page."""
    if "dark_mode" not in st.session_state:
        st.session_state.dark_mode = False
    st.markdown(_CSS_TEMPLATE % get_colors(), unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Session context
# ---------------------------------------------------------------------------
def current_context() -> SessionContext | None:
    return st.session_state.get("context")


def context_guard(require_patient: bool = True) -> SessionContext:
    """Stop page execution until a clinic user (and patient) is selected."""
    context = current_context()
    if context is None:
        st.warning("Choose a clinic and user on the **Home** page to continue.")
        st.stop()
    if require_patient and not context.patient_id:
        st.warning("Select a patient in the sidebar to continue.")
        st.stop()
    return context


def render_context_sidebar() -> None:
    """Sidebar with the active clinic/user, patient switcher and dark-mode toggle."""
    context = current_context()
    if context is None:
        return

    with st.sidebar:
        st.markdown(f"**Clinic** `{context.clinic_id}`  \n**User** `{context.user_id}`")
        patient_id = st.text_input("Patient ID", value=context.patient_id or "", key="patient_switch")
        if (patient_id or None) != context.patient_id:
            st.session_state.context = context.for_patient(patient_id.strip() or None)
            st.rerun()
        st.divider()

        dark = st.toggle("🌙 Dark mode", value=st.session_state.get("dark_mode", False), key="dark_mode_toggle")
        if dark != st.session_state.get("dark_mode", False):
            st.session_state.dark_mode = dark
            st.rerun()

        if st.button("Switch clinic", use_container_width=True, type="secondary"):
            st.session_state.context = None
            st.rerun()
        st.divider()


# ---------------------------------------------------------------------------
# Reusable HTML helpers
# ---------------------------------------------------------------------------
def zone_badge(zone: str | None) -> str:
    """Return an HTML span styled as a zone badge."""
    if zone == "optimal":
        return '<span class="zone-badge zone-optimal">OPTIMAL</span>'
    if zone == "functional_deviation":
        return '<span class="zone-badge zone-deviation">DEVIATION</span>'
    if zone == "abnormal":
        return '<span class="zone-badge zone-abnormal">ABNORMAL</span>'
    return '<span class="zone-badge">—</span>'


def direction_arrow(direction: str) -> str:
    """Return an HTML arrow element for trend direction."""
    if direction == "up":
        return '<span class="dir-up">&#9650; Up</span>'
    if direction == "down":
        return '<span class="dir-down">&#9660; Down</span>'
    return '<span class="dir-stable">&#9654; Stable</span>'


def kpi_tile(label: str, value: str | int | float, color: str) -> str:
    """Return HTML for a single KPI tile."""
    return (
        f'<div class="kpi-tile">'
        f'  <div class="kpi-value" style="color:{color};">{value}</div>'
        f'  <div class="kpi-label">{label}</div>'
        f'</div>'
    )


def section_title(text: str) -> None:
    st.markdown(f'<div class="section-title">{text}</div>', unsafe_allow_html=True)
