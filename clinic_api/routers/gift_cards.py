from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic_api.context import SessionContext
from clinic_api.database import get_db
from clinic_api.models.payments import GiftCard
from clinic_api.routers.deps import get_request_context, to_http_error
from clinic_api.schemas.payments import GiftCardBalance, GiftCardCreate, GiftCardOut, GiftCardRedeem
from clinic_api.services.errors import GiftCardError
from clinic_api.services.gift_cards import check_gift_card_balance, create_gift_card, redeem_gift_card

router = APIRouter(prefix="/api/gift-cards", tags=["gift-cards"])


@router.post("", response_model=GiftCardOut, status_code=201)
def issue_gift_card(
    payload: GiftCardCreate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    try:
        return create_gift_card(db, context, payload)
    except GiftCardError as exc:
        raise to_http_error(exc) from exc


@router.get("", response_model=list[GiftCardOut])
def list_gift_cards(
    active_only: bool = False,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    query = db.query(GiftCard).filter(GiftCard.clinic_id == context.clinic_id)
    if active_only:
        query = query.filter(GiftCard.is_active.is_(True))
    return query.order_by(GiftCard.created_at.desc()).all()


@router.get("/balance", response_model=GiftCardBalance)
def gift_card_balance(
    card_code: str,
    db: Session = Depends(get_db),
    _: SessionContext = Depends(get_request_context),
):
    try:
        return check_gift_card_balance(db, card_code)
    except GiftCardError as exc:
        raise to_http_error(exc) from exc


@router.post("/redeem", response_model=GiftCardOut)
def redeem(
    payload: GiftCardRedeem,
    db: Session = Depends(get_db),
    _: SessionContext = Depends(get_request_context),
):
    try:
        card = redeem_gift_card(db, payload.card_code, payload.redemption_amount)
        db.commit()
    except GiftCardError as exc:
        db.rollback()
        raise to_http_error(exc) from exc
    db.refresh(card)
    return card
