from decimal import Decimal

import pytest

from clinic_api.schemas.payments import GiftCardBalance, MembershipBalance
from clinic_api.services.payment_allocator import (
    AllocationError,
    CheckoutState,
    PaymentAllocator,
    PaymentMethod,
    to_money,
)

CARD = "ABCD-EFGH-JKLM-NPQR"


def _card(balance="75", valid=True):
    return GiftCardBalance(valid=valid, card_code=CARD, current_balance=Decimal(balance))


def _membership(credits="40"):
    return MembershipBalance(has_active_membership=True, membership_id="m-1", credits_balance=Decimal(credits))


def _verify(allocator, card):
    token = allocator.begin_gift_card_check()
    assert allocator.apply_gift_card_check(token, card)


def test_cash_and_gift_card_complete_the_checkout():
    allocator = PaymentAllocator("100")
    allocator.add_allocation(PaymentMethod.CASH, "40")
    assert allocator.remaining_balance == Decimal("60.00")
    assert allocator.state == CheckoutState.COLLECTING

    _verify(allocator, _card("75"))
    allocator.add_allocation(PaymentMethod.GIFT_CARD, "60")

    assert allocator.remaining_balance == Decimal("0.00")
    assert allocator.state == CheckoutState.COMPLETE
    assert not allocator.can_add(PaymentMethod.CASH, "1")
    with pytest.raises(AllocationError, match="already complete"):
        allocator.add_allocation(PaymentMethod.CASH, "1")

    payload = allocator.submission().as_payload()
    assert payload["total_amount"] == "100.00"
    assert payload["allocations"] == [
        {"method": "Cash", "amount": "40.00"},
        {"method": "Gift Card", "amount": "60.00", "details": {"card_code": CARD}},
    ]


def test_membership_credit_cannot_exceed_credits():
    allocator = PaymentAllocator("50")
    token = allocator.begin_membership_check()
    allocator.apply_membership_check(token, _membership("40"))

    assert not allocator.can_add(PaymentMethod.MEMBERSHIP_CREDIT, "60")
    assert not allocator.can_add(PaymentMethod.MEMBERSHIP_CREDIT, "45")
    assert allocator.allocations == ()

    allocator.add_allocation(PaymentMethod.MEMBERSHIP_CREDIT, "40")
    assert allocator.allocations[0].details == {"membership_id": "m-1"}
    assert allocator.remaining_balance == Decimal("10.00")


def test_membership_credit_requires_active_membership():
    allocator = PaymentAllocator("50")
    token = allocator.begin_membership_check()
    allocator.apply_membership_check(token, MembershipBalance(has_active_membership=False))
    assert allocator.rejection_reason(PaymentMethod.MEMBERSHIP_CREDIT, "10") == "Patient has no active membership"


@pytest.mark.parametrize("amount", ["0", "-5", "abc", "100.01"])
def test_rejects_bad_amounts(amount):
    allocator = PaymentAllocator("100")
    assert not allocator.can_add(PaymentMethod.CASH, amount)
    with pytest.raises(AllocationError):
        allocator.add_allocation(PaymentMethod.CASH, amount)
    assert allocator.allocations == ()


def test_gift_card_needs_a_valid_balance_check():
    allocator = PaymentAllocator("100")
    assert not allocator.can_add(PaymentMethod.GIFT_CARD, "10")

    token = allocator.begin_gift_card_check()
    allocator.apply_gift_card_check(token, _card(valid=False))
    assert allocator.gift_card is None
    assert not allocator.can_add(PaymentMethod.GIFT_CARD, "10")

    _verify(allocator, _card("30"))
    assert not allocator.can_add(PaymentMethod.GIFT_CARD, "31")
    assert allocator.can_add(PaymentMethod.GIFT_CARD, "30")


def test_gift_card_must_be_rechecked_and_counts_prior_use():
    allocator = PaymentAllocator("200")
    _verify(allocator, _card("75"))
    allocator.add_allocation(PaymentMethod.GIFT_CARD, "50")
    assert allocator.gift_card is None

    _verify(allocator, _card("75"))
    assert allocator.max_amount(PaymentMethod.GIFT_CARD) == Decimal("25.00")
    assert not allocator.can_add(PaymentMethod.GIFT_CARD, "30")
    allocator.add_allocation(PaymentMethod.GIFT_CARD, "25")
    assert allocator.paid == Decimal("75.00")


def test_stale_balance_check_is_discarded():
    allocator = PaymentAllocator("100")
    first = allocator.begin_gift_card_check()
    second = allocator.begin_gift_card_check()

    assert not allocator.apply_gift_card_check(first, _card("500"))
    assert allocator.gift_card is None
    assert allocator.apply_gift_card_check(second, _card("20"))
    assert allocator.gift_card.current_balance == Decimal("20")


def test_max_amount_per_method():
    allocator = PaymentAllocator("100")
    assert allocator.max_amount(PaymentMethod.CASH) == Decimal("100.00")
    assert allocator.max_amount(PaymentMethod.GIFT_CARD) == Decimal("0.00")
    _verify(allocator, _card("75"))
    assert allocator.max_amount(PaymentMethod.GIFT_CARD) == Decimal("75.00")


def test_remove_allocation_reopens_session():
    allocator = PaymentAllocator("20")
    allocator.add_allocation("Cash", "20")
    assert allocator.is_complete
    removed = allocator.remove_allocation(0)
    assert removed.amount == Decimal("20.00")
    assert allocator.state == CheckoutState.COLLECTING
    with pytest.raises(AllocationError):
        allocator.remove_allocation(0)


def test_submission_requires_complete_session():
    allocator = PaymentAllocator("20")
    allocator.add_allocation(PaymentMethod.CHECK, "5")
    with pytest.raises(AllocationError, match="Remaining balance"):
        allocator.submission()


def test_remaining_within_tolerance_is_complete():
    allocator = PaymentAllocator("100.00")
    allocator.add_allocation(PaymentMethod.CREDIT_CARD, "99.99")
    assert allocator.is_complete


def test_unknown_method_is_rejected():
    allocator = PaymentAllocator("10")
    assert allocator.rejection_reason("Bitcoin", "5") == "Unknown payment method: Bitcoin"


def test_to_money_quantizes():
    assert to_money("10.005") == Decimal("10.00")
    assert to_money(3) == Decimal("3.00")
    with pytest.raises(AllocationError):
        to_money("NaN")
