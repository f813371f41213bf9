import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import streamlit as st

from clinic_api.context import SessionContext
from utils.api_client import ApiClient, ApiError
from utils.theme import apply_theme, current_context, get_colors, kpi_tile, render_context_sidebar

st.set_page_config(
    page_title="Functional Labs",
    page_icon="🧪",
    layout="wide",
    initial_sidebar_state="expanded",
)
apply_theme()
COLORS = get_colors()

if "context" not in st.session_state:
    st.session_state.context = None

context = current_context()

# ── Context chosen ────────────────────────────────────────────────────────
if context:
    render_context_sidebar()
    st.markdown(
        f"""
        <div style="margin-bottom:8px;">
            <span style="font-size:1.8rem;font-weight:800;color:{COLORS['text']};">Functional Labs</span>
        </div>
        <p style="color:{COLORS['text_muted']};margin-top:0;">
            Clinic <b>{context.clinic_id}</b> · signed in as <b>{context.user_id}</b>
        </p>
        """,
        unsafe_allow_html=True,
    )

    if not context.patient_id:
        st.info("Enter a patient ID in the sidebar to view labs and check out.")
        st.stop()

    client = ApiClient(context)
    try:
        overview = client.trends_overview()
        membership = client.membership_balance()
    except ApiError as exc:
        st.error(f"Could not load patient snapshot: {exc}")
        st.stop()

    rising = sum(1 for row in overview if row["direction"] == "up")
    falling = sum(1 for row in overview if row["direction"] == "down")
    abnormal = sum(1 for row in overview if row.get("latest_zone") == "abnormal")
    credits = f"${float(membership['credits_balance']):.2f}" if membership["has_active_membership"] else "—"

    cols = st.columns(4)
    tiles = [
        ("Markers Trending", len(overview), COLORS["primary"]),
        ("Rising ▲ / Falling ▼", f"{rising} / {falling}", COLORS["info"]),
        ("Latest Abnormal", abnormal, COLORS["danger"] if abnormal else COLORS["success"]),
        ("Membership Credits", credits, COLORS["text"]),
    ]
    for col, (label, value, color) in zip(cols, tiles):
        col.markdown(kpi_tile(label, value, color), unsafe_allow_html=True)

# ── Context selection ─────────────────────────────────────────────────────
else:
    _spacer_l, center, _spacer_r = st.columns([1, 2, 1])
    with center:
        st.markdown(
            f"""
            <h1 style="text-align:center;color:{COLORS['text']};margin:40px 0 4px 0;">🧪 Functional Labs</h1>
            <p style="text-align:center;color:{COLORS['text_muted']};margin-bottom:32px;">
                Lab trends with functional ranges, and split-tender checkout.
            </p>
            """,
            unsafe_allow_html=True,
        )
        with st.form("context_form"):
            clinic_id = st.text_input("Clinic ID")
            user_id = st.text_input("User ID")
            patient_id = st.text_input("Patient ID (optional)")
            submitted = st.form_submit_button("Continue", use_container_width=True, type="primary")
        if submitted:
            if not clinic_id.strip() or not user_id.strip():
                st.error("Clinic ID and User ID are required.")
            else:
                st.session_state.context = SessionContext(
                    user_id=user_id.strip(),
                    clinic_id=clinic_id.strip(),
                    patient_id=patient_id.strip() or None,
                )
                st.rerun()
