import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import pandas as pd
import streamlit as st

from clinic_api.forms import GIFT_CARD_FORM, MEMBERSHIP_FORM
from clinic_api.services.card_codes import is_valid_card_code, normalize_card_code
from utils.api_client import ApiClient, ApiError
from utils.form_renderer import render_form
from utils.theme import apply_theme, context_guard, get_colors, render_context_sidebar, section_title

st.set_page_config(page_title="Gift Cards & Memberships", page_icon="🎁", layout="wide")
apply_theme()
context = context_guard(require_patient=False)
render_context_sidebar()
COLORS = get_colors()
client = ApiClient(context)

st.markdown(
    f"<span style='font-size:1.6rem;font-weight:800;color:{COLORS['text']};'>🎁 Gift Cards & Memberships</span>",
    unsafe_allow_html=True,
)

tab_cards, tab_members = st.tabs(["Gift cards", "Memberships"])

with tab_cards:
    section_title("Check Balance")
    raw_code = st.text_input("Card code", placeholder="XXXX-XXXX-XXXX-XXXX", key="lookup_code")
    if raw_code:
        code = normalize_card_code(raw_code)
        if not is_valid_card_code(code):
            st.caption(f"{code} · a code has 16 letters and digits")
        elif st.button("Look up"):
            try:
                balance = client.gift_card_balance(code)
            except ApiError as exc:
                st.error(str(exc))
            else:
                status = "valid" if balance["valid"] else ("expired" if balance["is_expired"] else "not usable")
                st.info(f"{balance['card_code']} · ${float(balance['current_balance']):.2f} of ${float(balance['original_amount']):.2f} · {status}")

    section_title("Issue Gift Card")
    payload = render_form(GIFT_CARD_FORM, key="gift_card_form", defaults={"card_type": "digital"}, submit_label="Issue card")
    if payload:
        if context.patient_id:
            payload["patient_id"] = context.patient_id
        try:
            card = client.create_gift_card(payload)
        except ApiError as exc:
            st.error(f"Could not issue card: {exc}")
        else:
            st.success(f"Issued {card['card_code']} for ${float(card['original_amount']):.2f}")

    section_title("Issued Cards")
    active_only = st.checkbox("Active only", value=False)
    try:
        cards = client.gift_cards(active_only=active_only)
    except ApiError as exc:
        st.error(f"Failed to load gift cards: {exc}")
        cards = []
    if cards:
        df = pd.DataFrame(cards)
        st.dataframe(
            df[["card_code", "card_type", "original_amount", "current_balance", "recipient_name", "expiration_date", "is_active"]],
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.caption("No gift cards yet.")

with tab_members:
    if not context.patient_id:
        st.info("Select a patient in the sidebar to manage memberships.")
    else:
        section_title("Current Membership")
        try:
            balance = client.membership_balance()
        except ApiError as exc:
            st.error(f"Could not check membership: {exc}")
            balance = None
        if balance and balance["has_active_membership"]:
            st.info(
                f"{balance['membership_name']} ({balance.get('membership_tier') or 'no tier'}) · "
                f"credits ${float(balance['credits_balance']):.2f} · {float(balance['discount_percentage']):g}% discount"
            )
        elif balance:
            st.caption("No active membership.")
            section_title("Enroll")
            payload = render_form(MEMBERSHIP_FORM, key="membership_form", submit_label="Enroll patient")
            if payload:
                try:
                    client.create_membership(payload)
                except ApiError as exc:
                    st.error(f"Enrollment failed: {exc}")
                else:
                    st.rerun()
