import logging
import secrets
import time
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from clinic_api.config import settings
from clinic_api.context import SessionContext
from clinic_api.models.payments import PosTransaction
from clinic_api.schemas.payments import CheckoutRequest
from clinic_api.services.errors import CheckoutError, ServiceError
from clinic_api.services.gift_cards import redeem_gift_card
from clinic_api.services.memberships import deduct_membership_credits
from clinic_api.services.payment_allocator import CENT, PaymentMethod

logger = logging.getLogger(__name__)


def _receipt_number() -> str:
    return f"REC-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


def process_checkout(
    db: Session,
    context: SessionContext,
    request: CheckoutRequest,
    today: date | None = None,
) -> PosTransaction:
    """Execute every allocation of a completed checkout in one transaction.

    Gift cards are redeemed and membership credits deducted before the
    transaction row is written; if any step fails nothing is committed.
    """
    total = request.total_amount.quantize(CENT)
    paid = sum((a.amount for a in request.allocations), Decimal("0")).quantize(CENT)
    tolerance = Decimal(str(settings.payment_tolerance))
    if abs(total - paid) > tolerance:
        raise CheckoutError(f"Allocations total ${paid:.2f} but ${total:.2f} is due")

    try:
        for allocation in request.allocations:
            details = allocation.details or {}
            if allocation.method == PaymentMethod.GIFT_CARD:
                if not details.get("card_code"):
                    raise CheckoutError("Gift card allocation is missing card_code")
                redeem_gift_card(db, details["card_code"], allocation.amount, today=today)
            elif allocation.method == PaymentMethod.MEMBERSHIP_CREDIT:
                if not details.get("membership_id"):
                    raise CheckoutError("Membership allocation is missing membership_id")
                deduct_membership_credits(db, details["membership_id"], allocation.amount)

        transaction = PosTransaction(
            clinic_id=context.clinic_id,
            patient_id=request.patient_id or context.patient_id,
            receipt_number=_receipt_number(),
            total_amount=total,
            allocations=[a.model_dump(mode="json") for a in request.allocations],
            payment_status="completed",
            notes=request.notes,
            processed_by=context.user_id,
        )
        db.add(transaction)
        db.commit()
    except ServiceError as exc:
        db.rollback()
        logger.warning("Checkout rejected for clinic %s: %s", context.clinic_id, exc.message)
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(transaction)
    logger.info("Checkout %s completed: %s across %d allocations", transaction.receipt_number, total, len(request.allocations))
    return transaction
