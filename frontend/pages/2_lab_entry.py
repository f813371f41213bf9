import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from datetime import date

import pandas as pd
import streamlit as st

from clinic_api.forms import LAB_RESULT_FORM
from utils.api_client import ApiClient, ApiError, cached_marker_categories, cached_markers
from utils.form_renderer import render_form
from utils.theme import apply_theme, context_guard, get_colors, render_context_sidebar, section_title

st.set_page_config(page_title="Lab Entry", page_icon="🧾", layout="wide")
apply_theme()
context = context_guard()
render_context_sidebar()
COLORS = get_colors()
client = ApiClient(context)

st.markdown(
    f"<span style='font-size:1.6rem;font-weight:800;color:{COLORS['text']};'>🧾 Lab Entry</span>",
    unsafe_allow_html=True,
)

# ── Catalog prefill ───────────────────────────────────────────────────────
m_ok, catalog = cached_markers()
defaults = {}
if m_ok and catalog:
    names = ["(type a marker)"] + [m["marker_name"] for m in catalog]
    picked = st.selectbox("Start from catalog marker", names)
    if picked != names[0]:
        marker = next(m for m in catalog if m["marker_name"] == picked)
        defaults = {
            "lab_marker": marker["marker_name"],
            "unit": marker["unit"],
            "conventional_range_low": marker["conventional_low"],
            "conventional_range_high": marker["conventional_high"],
            "functional_range_low": marker["functional_low"],
            "functional_range_high": marker["functional_high"],
        }
    st.caption("Ranges left blank are filled from the catalog when the marker name matches.")

section_title("New Result")
payload = render_form(LAB_RESULT_FORM, key=f"lab_form_{defaults.get('lab_marker', 'blank')}", defaults=defaults, submit_label="Save result")
if payload:
    try:
        saved = client.create_lab_result(payload)
    except ApiError as exc:
        st.error(f"Could not save result: {exc}")
    else:
        st.success(f"Saved {saved['lab_marker']} = {saved['result_value']} ({saved['zone'] or 'unclassified'})")

# ── Existing results ──────────────────────────────────────────────────────
section_title("Recorded Results")
if "lab_flash" in st.session_state:
    st.success(st.session_state.pop("lab_flash"))
c_ok, categories = cached_marker_categories()
category_options = ["All categories"] + ([c["category"] for c in categories] if c_ok else [])

f1, f2, f3, f4 = st.columns(4)
with f1:
    marker_filter = st.text_input("Marker", key="lab_filter_marker")
with f2:
    category = st.selectbox("Category", category_options, key="lab_filter_category")
with f3:
    start = st.date_input("From", value=None, key="lab_filter_start")
with f4:
    end = st.date_input("To", value=None, key="lab_filter_end")

try:
    rows = client.lab_results(
        lab_marker=marker_filter.strip() or None,
        category=None if category == category_options[0] else category,
        start_date=start.isoformat() if start else None,
        end_date=end.isoformat() if end else None,
    )
except ApiError as exc:
    st.error(f"Failed to load results: {exc}")
    st.stop()

if not rows:
    st.caption("No results match.")
    st.stop()

df = pd.DataFrame(rows)
st.dataframe(
    df[["result_date", "lab_marker", "result_value", "unit", "zone", "source", "note"]],
    use_container_width=True,
    hide_index=True,
)

# ── Edit / delete ─────────────────────────────────────────────────────────
labels = {f"{r['result_date']} · {r['lab_marker']} · {r['result_value']}": r for r in rows}
picked_row = st.selectbox("Select a result to edit or delete", ["—"] + list(labels))
if picked_row == "—":
    st.stop()

row = labels[picked_row]
section_title("Edit Result")
edit_defaults = {spec.name: row.get(spec.name) for spec in LAB_RESULT_FORM.fields}
edit_defaults["result_date"] = date.fromisoformat(row["result_date"])
changes = render_form(LAB_RESULT_FORM, key=f"edit_lab_{row['id']}", defaults=edit_defaults, submit_label="Update result")
if changes:
    try:
        updated = client.update_lab_result(row["id"], changes)
    except ApiError as exc:
        st.error(f"Update failed: {exc}")
    else:
        st.session_state.lab_flash = f"Updated {updated['lab_marker']} = {updated['result_value']} ({updated['zone'] or 'unclassified'})"
        st.rerun()

if st.button("Delete result", type="secondary"):
    try:
        client.delete_lab_result(row["id"])
    except ApiError as exc:
        st.error(f"Delete failed: {exc}")
    else:
        st.rerun()
