"""Split-tender checkout: allocate a fixed total across payment instruments.

One allocator lives for one checkout session. It moves from *collecting* to
*complete* once the remaining balance is within the payment tolerance, and
only then produces a submission for the checkout endpoint, which executes the
whole batch atomically. Nothing here talks to the network or the database;
balance-check results are handed in by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TYPE_CHECKING

from clinic_api.config import settings
from clinic_api.context import SessionContext

if TYPE_CHECKING:
    from clinic_api.schemas.payments import GiftCardBalance, MembershipBalance

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class PaymentMethod(str, Enum):
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    CHECK = "Check"
    GIFT_CARD = "Gift Card"
    MEMBERSHIP_CREDIT = "Membership Credit"
    OTHER = "Other"


class CheckoutState(str, Enum):
    COLLECTING = "collecting"
    COMPLETE = "complete"


class AllocationError(ValueError):
    """An allocation request the session refuses; ``str(exc)`` is shown to the user."""


def to_money(value) -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, AttributeError) as exc:
        raise AllocationError("Enter a valid amount") from exc
    if not amount.is_finite():
        raise AllocationError("Enter a valid amount")
    return amount.quantize(CENT)


@dataclass(frozen=True)
class PaymentAllocation:
    method: PaymentMethod
    amount: Decimal
    details: dict[str, str] | None = None

    def as_payload(self) -> dict:
        payload = {"method": self.method.value, "amount": str(self.amount)}
        if self.details:
            payload["details"] = dict(self.details)
        return payload


@dataclass(frozen=True)
class PaymentSubmission:
    total_amount: Decimal
    allocations: tuple[PaymentAllocation, ...]
    patient_id: str | None = None

    def as_payload(self) -> dict:
        return {
            "total_amount": str(self.total_amount),
            "allocations": [a.as_payload() for a in self.allocations],
            "patient_id": self.patient_id,
        }


class RequestSequence:
    """Hands out increasing tokens; only the latest one is current.

    A balance check takes a token before it starts and presents it with its
    result, so a slow response that was overtaken by a newer check is dropped.
    """

    def __init__(self) -> None:
        self._latest = 0

    def next(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest


class PaymentAllocator:
    def __init__(
        self,
        total,
        context: SessionContext | None = None,
        tolerance: Decimal | None = None,
    ) -> None:
        self.total = to_money(total)
        if self.total < 0:
            raise AllocationError("Total cannot be negative")
        self.context = context
        self.tolerance = Decimal(str(settings.payment_tolerance)) if tolerance is None else tolerance
        self.gift_card: GiftCardBalance | None = None
        self.membership: MembershipBalance | None = None
        self._allocations: list[PaymentAllocation] = []
        self._gift_card_checks = RequestSequence()
        self._membership_checks = RequestSequence()

    # -- balances -------------------------------------------------------

    @property
    def allocations(self) -> tuple[PaymentAllocation, ...]:
        return tuple(self._allocations)

    @property
    def paid(self) -> Decimal:
        return sum((a.amount for a in self._allocations), Decimal("0.00"))

    @property
    def remaining_balance(self) -> Decimal:
        return max(Decimal("0.00"), self.total - self.paid)

    @property
    def is_complete(self) -> bool:
        return self.remaining_balance <= self.tolerance

    @property
    def state(self) -> CheckoutState:
        return CheckoutState.COMPLETE if self.is_complete else CheckoutState.COLLECTING

    def _committed(self, method: PaymentMethod, key: str, value: str | None) -> Decimal:
        """Amount already allocated in this session against one card or membership."""
        return sum(
            (
                a.amount
                for a in self._allocations
                if a.method == method and a.details and a.details.get(key) == value
            ),
            Decimal("0.00"),
        )

    def _gift_card_available(self, card: GiftCardBalance) -> Decimal:
        committed = self._committed(PaymentMethod.GIFT_CARD, "card_code", card.card_code)
        return Decimal(card.current_balance) - committed

    def _credits_available(self, membership: MembershipBalance) -> Decimal:
        committed = self._committed(PaymentMethod.MEMBERSHIP_CREDIT, "membership_id", membership.membership_id)
        return Decimal(membership.credits_balance) - committed

    # -- validation -----------------------------------------------------

    def rejection_reason(
        self,
        method: PaymentMethod | str,
        amount,
        gift_card: GiftCardBalance | None = None,
        membership: MembershipBalance | None = None,
    ) -> str | None:
        try:
            method = PaymentMethod(method)
        except ValueError:
            return f"Unknown payment method: {method}"
        if self.is_complete:
            return "Payment is already complete"
        try:
            value = to_money(amount)
        except AllocationError as exc:
            return str(exc)
        if value <= 0:
            return "Amount must be greater than zero"
        remaining = self.remaining_balance
        if value > remaining:
            return f"Amount exceeds the remaining balance of ${remaining:.2f}"

        if method == PaymentMethod.GIFT_CARD:
            card = gift_card or self.gift_card
            if card is None or not card.valid:
                return "Verify a valid gift card before applying it"
            available = self._gift_card_available(card)
            if value > available:
                return f"Gift card balance of ${available:.2f} does not cover ${value:.2f}"

        if method == PaymentMethod.MEMBERSHIP_CREDIT:
            plan = membership or self.membership
            if plan is None or not plan.has_active_membership:
                return "Patient has no active membership"
            available = self._credits_available(plan)
            if value > available:
                return f"Membership credits of ${available:.2f} do not cover ${value:.2f}"
        return None

    def can_add(self, method, amount, gift_card=None, membership=None) -> bool:
        return self.rejection_reason(method, amount, gift_card, membership) is None

    def max_amount(
        self,
        method: PaymentMethod | str,
        gift_card: GiftCardBalance | None = None,
        membership: MembershipBalance | None = None,
    ) -> Decimal:
        """Largest amount the given method could cover right now."""
        limit = self.remaining_balance
        method = PaymentMethod(method)
        if method == PaymentMethod.GIFT_CARD:
            card = gift_card or self.gift_card
            limit = min(limit, self._gift_card_available(card)) if card and card.valid else Decimal("0.00")
        elif method == PaymentMethod.MEMBERSHIP_CREDIT:
            plan = membership or self.membership
            if plan and plan.has_active_membership:
                limit = min(limit, self._credits_available(plan))
            else:
                limit = Decimal("0.00")
        return max(limit, Decimal("0.00"))

    # -- mutation -------------------------------------------------------

    def add_allocation(
        self,
        method: PaymentMethod | str,
        amount,
        gift_card: GiftCardBalance | None = None,
        membership: MembershipBalance | None = None,
    ) -> PaymentAllocation:
        reason = self.rejection_reason(method, amount, gift_card, membership)
        if reason:
            logger.info("Allocation rejected: %s", reason)
            raise AllocationError(reason)

        method = PaymentMethod(method)
        details = None
        if method == PaymentMethod.GIFT_CARD:
            details = {"card_code": (gift_card or self.gift_card).card_code}
            # A card must be verified again before it is applied a second time.
            self.gift_card = None
        elif method == PaymentMethod.MEMBERSHIP_CREDIT:
            details = {"membership_id": (membership or self.membership).membership_id}

        allocation = PaymentAllocation(method=method, amount=to_money(amount), details=details)
        self._allocations.append(allocation)
        return allocation

    def remove_allocation(self, index: int) -> PaymentAllocation:
        if not 0 <= index < len(self._allocations):
            raise AllocationError(f"No payment at position {index + 1}")
        return self._allocations.pop(index)

    def submission(self) -> PaymentSubmission:
        if not self.is_complete:
            raise AllocationError(f"Remaining balance of ${self.remaining_balance:.2f} must be paid first")
        return PaymentSubmission(
            total_amount=self.total,
            allocations=self.allocations,
            patient_id=self.context.patient_id if self.context else None,
        )

    # -- balance checks -------------------------------------------------

    def begin_gift_card_check(self) -> int:
        return self._gift_card_checks.next()

    def apply_gift_card_check(self, token: int, result: GiftCardBalance) -> bool:
        if not self._gift_card_checks.is_current(token):
            logger.debug("Discarding stale gift card check %s", token)
            return False
        self.gift_card = result if result.valid else None
        return True

    def begin_membership_check(self) -> int:
        return self._membership_checks.next()

    def apply_membership_check(self, token: int, result: MembershipBalance) -> bool:
        if not self._membership_checks.is_current(token):
            logger.debug("Discarding stale membership check %s", token)
            return False
        self.membership = result
        return True
