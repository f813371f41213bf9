from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from clinic_api.context import SessionContext
from clinic_api.database import get_db
from clinic_api.routers.deps import get_request_context, to_http_error
from clinic_api.schemas.payments import MembershipBalance, MembershipCreate, MembershipDeduct, MembershipOut
from clinic_api.services.errors import MembershipError
from clinic_api.services.memberships import check_membership_balance, create_membership, deduct_membership_credits

router = APIRouter(prefix="/api/memberships", tags=["memberships"])


@router.post("", response_model=MembershipOut, status_code=201)
def enroll(
    payload: MembershipCreate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    try:
        return create_membership(db, context, payload)
    except MembershipError as exc:
        raise to_http_error(exc) from exc


@router.get("/balance", response_model=MembershipBalance)
def membership_balance(
    patient_id: str | None = None,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    patient_id = patient_id or context.patient_id
    if not patient_id:
        raise HTTPException(status_code=400, detail="patient_id is required")
    return check_membership_balance(db, patient_id)


@router.post("/deduct", response_model=MembershipOut)
def deduct(
    payload: MembershipDeduct,
    db: Session = Depends(get_db),
    _: SessionContext = Depends(get_request_context),
):
    try:
        membership = deduct_membership_credits(db, payload.membership_id, payload.amount)
        db.commit()
    except MembershipError as exc:
        db.rollback()
        raise to_http_error(exc) from exc
    db.refresh(membership)
    return membership
