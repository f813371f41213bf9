from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic_api.context import SessionContext
from clinic_api.database import get_db
from clinic_api.models.payments import PosTransaction
from clinic_api.routers.deps import get_request_context, to_http_error
from clinic_api.schemas.payments import CheckoutRequest, PosTransactionOut
from clinic_api.services.checkout import process_checkout
from clinic_api.services.errors import ServiceError

router = APIRouter(prefix="/api/pos", tags=["pos"])


@router.post("/checkout", response_model=PosTransactionOut, status_code=201)
def checkout(
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    try:
        return process_checkout(db, context, payload)
    except ServiceError as exc:
        raise to_http_error(exc) from exc


@router.get("/transactions", response_model=list[PosTransactionOut])
def transactions(
    patient_id: str | None = None,
    limit: int = 50,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    query = db.query(PosTransaction).filter(PosTransaction.clinic_id == context.clinic_id)
    if patient_id:
        query = query.filter(PosTransaction.patient_id == patient_id)
    return query.order_by(PosTransaction.created_at.desc()).limit(limit).all()
