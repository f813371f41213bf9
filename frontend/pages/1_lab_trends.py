import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from clinic_api.services.series_filter import WINDOWS
from utils.api_client import ApiClient, ApiError
from utils.theme import (
    ZONE_FILLS,
    apply_theme,
    context_guard,
    direction_arrow,
    get_colors,
    kpi_tile,
    plotly_layout_defaults,
    render_context_sidebar,
    section_title,
    zone_badge,
    zone_colors,
)

WINDOW_LABELS = {"1m": "1 month", "3m": "3 months", "6m": "6 months", "1y": "1 year", "all": "All time"}
CHART_WIDTH, CHART_HEIGHT = 800, 300

st.set_page_config(page_title="Lab Trends", page_icon="📈", layout="wide")
apply_theme()
context = context_guard()
render_context_sidebar()
COLORS = get_colors()
client = ApiClient(context)

st.markdown(
    f"""
    <span style="font-size:1.6rem;font-weight:800;color:{COLORS['text']};">📈 Lab Trends</span>
    <p style="color:{COLORS['text_muted']};margin-top:0;">
        Results against conventional and functional ranges for patient <b>{context.patient_id}</b>.
    </p>
    """,
    unsafe_allow_html=True,
)

try:
    overview = client.trends_overview()
    results = client.lab_results()
except ApiError as exc:
    st.error(f"Failed to load lab data: {exc}")
    st.stop()

if not results:
    st.info("No lab results recorded yet. Add one on the **Lab Entry** page.")
    st.stop()

# ── Movers ────────────────────────────────────────────────────────────────
if overview:
    rising = sum(1 for row in overview if row["direction"] == "up")
    falling = sum(1 for row in overview if row["direction"] == "down")
    stable = len(overview) - rising - falling
    c1, c2, c3 = st.columns(3)
    c1.markdown(kpi_tile("Rising ▲", rising, COLORS["danger"]), unsafe_allow_html=True)
    c2.markdown(kpi_tile("Falling ▼", falling, COLORS["info"]), unsafe_allow_html=True)
    c3.markdown(kpi_tile("Stable ▶", stable, COLORS["success"]), unsafe_allow_html=True)

    section_title("Latest Changes")
    rows_html = "".join(
        f"<tr><td><b>{row['lab_marker']}</b></td><td>{row['category']}</td>"
        f"<td>{row['previous']}</td><td>{row['current']}</td>"
        f"<td>{row['delta_percent']:+.1f}%</td><td>{direction_arrow(row['direction'])}</td>"
        f"<td>{zone_badge(row.get('latest_zone'))}</td></tr>"
        for row in overview
    )
    st.markdown(
        "<table style='width:100%;font-size:0.88rem;'><thead><tr>"
        "<th>Marker</th><th>Category</th><th>Previous</th><th>Current</th><th>Delta</th><th>Direction</th><th>Zone</th>"
        f"</tr></thead><tbody>{rows_html}</tbody></table>",
        unsafe_allow_html=True,
    )

# ── Marker chart ──────────────────────────────────────────────────────────
section_title("Marker History")
markers = sorted({row["lab_marker"] for row in results})
m_col, w_col = st.columns([3, 2])
with m_col:
    selected = st.selectbox("Marker", markers, key="trend_marker")
with w_col:
    window = st.radio(
        "Window",
        list(WINDOWS),
        index=list(WINDOWS).index(st.session_state.get("trend_window", "all")),
        format_func=WINDOW_LABELS.get,
        horizontal=True,
    )
    st.session_state.trend_window = window

try:
    chart = client.marker_chart(selected, window=window, width=CHART_WIDTH, height=CHART_HEIGHT)
except ApiError as exc:
    st.error(f"Failed to load chart: {exc}")
    st.stop()

if not chart["points"]:
    st.info(f"No {selected} results in the last {WINDOW_LABELS[window]}.")
    st.stop()

# The API returns pixel coordinates; plotly needs data space, so plot the raw
# values against the same y extent and draw the bands it computed.
fig = go.Figure()
for band in chart["bands"]:
    fig.add_hrect(y0=band["low"], y1=band["high"], fillcolor=ZONE_FILLS[band["zone"]], line=dict(width=0), layer="below")

points = pd.DataFrame(chart["points"])
points["date"] = pd.to_datetime(points["date"])
palette = zone_colors()
fig.add_trace(go.Scatter(
    x=points["date"],
    y=points["value"],
    mode="lines+markers",
    line=dict(color=COLORS["primary"], width=2.5),
    marker=dict(size=10, color=[palette.get(z, COLORS["primary"]) for z in points["zone"]], line=dict(width=2, color="white")),
    hovertemplate="<b>%{x|%b %d, %Y}</b><br>Value: %{y}<extra></extra>",
))
fig.update_layout(
    **plotly_layout_defaults(selected, height=CHART_HEIGHT + 80),
    showlegend=False,
)
fig.update_yaxes(range=[chart["y_min"], chart["y_max"]], title=chart.get("unit") or "Value")
st.plotly_chart(fig, use_container_width=True)

overall = chart["endpoint_trend"]
change = overall["percentage_change"]
st.markdown(
    f"Over this window: {direction_arrow(overall['direction'])} "
    + (f"({change:+.1f}%)" if change is not None else "(no baseline)"),
    unsafe_allow_html=True,
)

table = points[["date", "value", "zone"]].sort_values("date", ascending=False)
table["date"] = table["date"].dt.date
st.dataframe(table, use_container_width=True, hide_index=True)
