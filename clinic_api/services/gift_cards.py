import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from clinic_api.config import settings
from clinic_api.context import SessionContext
from clinic_api.models.payments import GiftCard
from clinic_api.schemas.payments import GiftCardBalance, GiftCardCreate
from clinic_api.services.card_codes import generate_card_code, normalize_card_code
from clinic_api.services.errors import GiftCardError

logger = logging.getLogger(__name__)


def _find(db: Session, card_code: str) -> GiftCard | None:
    return db.query(GiftCard).filter(GiftCard.card_code == normalize_card_code(card_code)).first()


def _is_expired(card: GiftCard, today: date) -> bool:
    return card.expiration_date is not None and card.expiration_date < today


def _unique_code(db: Session) -> str:
    for _ in range(settings.gift_card_code_attempts):
        code = generate_card_code()
        if not db.query(GiftCard.id).filter(GiftCard.card_code == code).first():
            return code
    raise GiftCardError("Failed to generate unique card code", status_code=500)


def create_gift_card(db: Session, context: SessionContext, payload: GiftCardCreate, today: date | None = None) -> GiftCard:
    card = GiftCard(
        clinic_id=context.clinic_id,
        card_code=_unique_code(db),
        card_type=payload.card_type or "digital",
        original_amount=payload.original_amount,
        current_balance=payload.original_amount,
        purchaser_name=payload.purchaser_name,
        purchaser_email=payload.purchaser_email,
        recipient_name=payload.recipient_name,
        recipient_email=payload.recipient_email,
        patient_id=payload.patient_id,
        expiration_date=payload.expiration_date,
        is_active=True,
        activation_date=today or date.today(),
        message=payload.message,
    )
    db.add(card)
    db.commit()
    db.refresh(card)
    logger.info("Issued gift card %s for %s", card.id, card.original_amount)
    return card


def check_gift_card_balance(db: Session, card_code: str, today: date | None = None) -> GiftCardBalance:
    card = _find(db, card_code)
    if not card:
        raise GiftCardError("Gift card not found", status_code=404, valid=False)

    expired = _is_expired(card, today or date.today())
    return GiftCardBalance(
        valid=card.is_active and not expired and card.current_balance > 0,
        card_code=card.card_code,
        current_balance=card.current_balance,
        original_amount=card.original_amount,
        is_active=card.is_active,
        is_expired=expired,
        expiration_date=card.expiration_date,
        last_used_date=card.last_used_date,
        recipient_name=card.recipient_name,
    )


def redeem_gift_card(db: Session, card_code: str, amount: Decimal, today: date | None = None) -> GiftCard:
    """Debit a card. Flushes but does not commit, so callers control the transaction."""
    today = today or date.today()
    card = _find(db, card_code)
    if not card:
        raise GiftCardError("Gift card not found", status_code=404)
    if not card.is_active:
        raise GiftCardError("Gift card is not active")
    if _is_expired(card, today):
        raise GiftCardError("Gift card has expired")
    if card.current_balance < amount:
        raise GiftCardError(
            "Insufficient balance",
            current_balance=str(card.current_balance),
            requested_amount=str(amount),
        )

    card.current_balance = card.current_balance - amount
    card.last_used_date = today
    card.is_active = card.current_balance > 0
    card.updated_at = datetime.utcnow()
    db.add(card)
    db.flush()
    logger.info("Redeemed %s from gift card %s (remaining %s)", amount, card.id, card.current_balance)
    return card
