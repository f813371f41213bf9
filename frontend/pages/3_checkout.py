import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parent.parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import streamlit as st

from clinic_api.schemas.payments import GiftCardBalance, MembershipBalance
from clinic_api.services.payment_allocator import AllocationError, PaymentAllocator, PaymentMethod
from utils.api_client import ApiClient, ApiError
from utils.theme import apply_theme, context_guard, get_colors, kpi_tile, render_context_sidebar, section_title

st.set_page_config(page_title="Checkout", page_icon="💳", layout="wide")
apply_theme()
context = context_guard()
render_context_sidebar()
COLORS = get_colors()
client = ApiClient(context)

st.markdown(
    f"<span style='font-size:1.6rem;font-weight:800;color:{COLORS['text']};'>💳 Checkout</span>",
    unsafe_allow_html=True,
)


def _refresh_membership(allocator: PaymentAllocator) -> None:
    token = allocator.begin_membership_check()
    try:
        result = MembershipBalance(**client.membership_balance(context.patient_id))
    except ApiError as exc:
        st.error(f"Could not check membership credits: {exc}")
        return
    allocator.apply_membership_check(token, result)


def _check_gift_card(allocator: PaymentAllocator, code: str) -> None:
    token = allocator.begin_gift_card_check()
    try:
        result = GiftCardBalance(**client.gift_card_balance(code))
    except ApiError as exc:
        if exc.status_code != 404:
            st.error(f"Could not check gift card: {exc}")
            return
        result = GiftCardBalance(valid=False, card_code=code)
    if allocator.apply_gift_card_check(token, result) and not result.valid:
        st.error("Gift card is not valid for payment (inactive, expired, empty or unknown).")


# ── Start a session ───────────────────────────────────────────────────────
allocator: PaymentAllocator | None = st.session_state.get("allocator")
if allocator is not None and allocator.context != context:
    allocator = st.session_state.allocator = None

if allocator is None:
    receipt = st.session_state.get("last_receipt")
    if receipt:
        st.success(f"Receipt {receipt['receipt_number']} · ${float(receipt['total_amount']):.2f}")
    with st.form("start_checkout"):
        total = st.text_input("Amount due ($)")
        started = st.form_submit_button("Start checkout", type="primary")
    if started:
        try:
            allocator = PaymentAllocator(total, context=context)
        except AllocationError as exc:
            st.error(str(exc))
            st.stop()
        if allocator.total <= 0:
            st.error("Amount due must be greater than zero")
            st.stop()
        _refresh_membership(allocator)
        st.session_state.allocator = allocator
        st.rerun()
    st.stop()

# ── Balance summary ───────────────────────────────────────────────────────
c1, c2, c3 = st.columns(3)
c1.markdown(kpi_tile("Total", f"${allocator.total:.2f}", COLORS["text"]), unsafe_allow_html=True)
c2.markdown(kpi_tile("Paid", f"${allocator.paid:.2f}", COLORS["info"]), unsafe_allow_html=True)
c3.markdown(
    kpi_tile("Remaining", f"${allocator.remaining_balance:.2f}", COLORS["success"] if allocator.is_complete else COLORS["warning"]),
    unsafe_allow_html=True,
)

if allocator.membership and allocator.membership.has_active_membership:
    plan = allocator.membership
    st.caption(f"Membership: {plan.membership_name} · credits ${plan.credits_balance:.2f} · {plan.discount_percentage}% discount")

# ── Add a payment ─────────────────────────────────────────────────────────
if not allocator.is_complete:
    section_title("Add Payment")
    method = st.selectbox("Method", [m.value for m in PaymentMethod], key="pay_method")

    if method == PaymentMethod.GIFT_CARD.value:
        g1, g2 = st.columns([3, 1])
        with g1:
            code = st.text_input("Gift card code", placeholder="XXXX-XXXX-XXXX-XXXX", key="pay_card_code")
        with g2:
            st.write("")
            if st.button("Check balance", use_container_width=True) and code.strip():
                _check_gift_card(allocator, code)
        if allocator.gift_card:
            st.success(f"Card {allocator.gift_card.card_code} · balance ${allocator.gift_card.current_balance:.2f}")

    a1, a2 = st.columns([3, 1])
    with a2:
        st.write("")
        if st.button("Max", use_container_width=True):
            st.session_state.pay_amount = f"{allocator.max_amount(method):.2f}"
    with a1:
        amount = st.text_input("Amount ($)", key="pay_amount")

    if st.button("Add payment", type="primary"):
        try:
            allocator.add_allocation(method, amount)
        except AllocationError as exc:
            st.error(str(exc))
        else:
            st.rerun()

# ── Allocations ───────────────────────────────────────────────────────────
section_title("Payments")
if not allocator.allocations:
    st.caption("No payments added yet.")
for index, allocation in enumerate(allocator.allocations):
    r1, r2, r3 = st.columns([3, 2, 1])
    detail = (allocation.details or {}).get("card_code") or ""
    r1.write(f"**{allocation.method.value}** {detail}")
    r2.write(f"${allocation.amount:.2f}")
    if r3.button("Remove", key=f"remove_{index}"):
        allocator.remove_allocation(index)
        st.rerun()

# ── Complete ──────────────────────────────────────────────────────────────
b1, b2 = st.columns(2)
with b1:
    if st.button("Complete payment", type="primary", disabled=not allocator.is_complete, use_container_width=True):
        try:
            receipt = client.checkout(allocator.submission().as_payload())
        except (AllocationError, ApiError) as exc:
            st.error(f"Checkout failed: {exc}")
        else:
            st.session_state.allocator = None
            st.session_state.last_receipt = receipt
            st.rerun()
with b2:
    if st.button("Cancel", use_container_width=True):
        st.session_state.allocator = None
        st.rerun()