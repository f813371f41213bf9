import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from clinic_api.context import SessionContext
from clinic_api.models.payments import Membership
from clinic_api.schemas.payments import MembershipBalance, MembershipCreate
from clinic_api.services.errors import MembershipError

logger = logging.getLogger(__name__)


def create_membership(db: Session, context: SessionContext, payload: MembershipCreate) -> Membership:
    existing = (
        db.query(Membership)
        .filter(Membership.patient_id == payload.patient_id, Membership.status == "active")
        .first()
    )
    if existing:
        raise MembershipError("Patient already has an active membership", status_code=409)

    membership = Membership(clinic_id=context.clinic_id, status="active", **payload.model_dump())
    db.add(membership)
    db.commit()
    db.refresh(membership)
    logger.info("Created membership %s for patient %s", membership.id, membership.patient_id)
    return membership


def check_membership_balance(db: Session, patient_id: str) -> MembershipBalance:
    membership = (
        db.query(Membership)
        .filter(Membership.patient_id == patient_id, Membership.status == "active")
        .first()
    )
    if not membership:
        return MembershipBalance(has_active_membership=False)
    return MembershipBalance(
        has_active_membership=True,
        membership_id=membership.id,
        membership_name=membership.membership_name,
        membership_tier=membership.membership_tier,
        credits_balance=membership.credits_balance,
        discount_percentage=membership.discount_percentage,
        start_date=membership.start_date,
        end_date=membership.end_date,
        auto_renew=membership.auto_renew,
    )


def deduct_membership_credits(db: Session, membership_id: str, amount: Decimal) -> Membership:
    """Debit credits. Flushes but does not commit, so callers control the transaction."""
    membership = db.query(Membership).filter(Membership.id == membership_id).first()
    if not membership:
        raise MembershipError("Membership not found", status_code=404)
    if membership.status != "active":
        raise MembershipError("Membership is not active")
    if membership.credits_balance < amount:
        raise MembershipError(
            "Insufficient credits",
            current_balance=str(membership.credits_balance),
            requested_amount=str(amount),
        )

    membership.credits_balance = membership.credits_balance - amount
    membership.updated_at = datetime.utcnow()
    db.add(membership)
    db.flush()
    logger.info("Deducted %s credits from membership %s", amount, membership.id)
    return membership
