import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from clinic_api.context import SessionContext
from clinic_api.database import get_db
from clinic_api.models.lab_marker import LabMarker
from clinic_api.models.lab_result import LabResultRecord
from clinic_api.routers.deps import get_request_context
from clinic_api.schemas.labs import LabResultCreate, LabResultOut, LabResultUpdate
from clinic_api.services.marker_matcher import RANGE_FIELDS, apply_catalog_ranges
from clinic_api.services.zone_classifier import ReferenceRanges, resolve_zone

router = APIRouter(prefix="/api/labs", tags=["labs"])
logger = logging.getLogger(__name__)

NOT_NULL_FIELDS = ("lab_marker", "result_date", "result_value", "source")
CATALOG_FIELDS = ("unit", *RANGE_FIELDS)


def _refresh_zone(record: LabResultRecord) -> None:
    zone = resolve_zone(record.result_value, ReferenceRanges.from_record(record), record.zone)
    record.zone = zone.value if zone else None


def _to_out(record: LabResultRecord) -> LabResultOut:
    out = LabResultOut.model_validate(record)
    zone = resolve_zone(record.result_value, ReferenceRanges.from_record(record), record.zone)
    return out.model_copy(update={"zone": zone.value if zone else None})


def _get_owned(db: Session, context: SessionContext, result_id: str) -> LabResultRecord:
    record = (
        db.query(LabResultRecord)
        .filter(LabResultRecord.id == result_id, LabResultRecord.clinic_id == context.clinic_id)
        .first()
    )
    if not record:
        raise HTTPException(status_code=404, detail="Lab result not found")
    return record


@router.post("", response_model=LabResultOut, status_code=201)
def create_lab_result(
    payload: LabResultCreate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    values = apply_catalog_ranges(db, payload.model_dump())
    record = LabResultRecord(clinic_id=context.clinic_id, created_by=context.user_id, **values)
    _refresh_zone(record)
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("Recorded %s=%s for patient %s (%s)", record.lab_marker, record.result_value, record.patient_id, record.zone)
    return _to_out(record)


@router.get("", response_model=list[LabResultOut])
def list_lab_results(
    patient_id: str | None = None,
    lab_marker: str | None = None,
    category: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    query = db.query(LabResultRecord).filter(LabResultRecord.clinic_id == context.clinic_id)
    patient_id = patient_id or context.patient_id
    if patient_id:
        query = query.filter(LabResultRecord.patient_id == patient_id)
    if lab_marker:
        query = query.filter(LabResultRecord.lab_marker == lab_marker)
    if category:
        query = query.join(LabMarker, LabResultRecord.marker_id == LabMarker.id).filter(LabMarker.category == category)
    if start_date:
        query = query.filter(LabResultRecord.result_date >= start_date)
    if end_date:
        query = query.filter(LabResultRecord.result_date <= end_date)

    rows = query.order_by(LabResultRecord.result_date.desc(), LabResultRecord.created_at.desc()).all()
    return [_to_out(row) for row in rows]


@router.put("/{result_id}", response_model=LabResultOut)
def update_lab_result(
    result_id: str,
    payload: LabResultUpdate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    record = _get_owned(db, context, result_id)
    changes = payload.model_dump(exclude_unset=True)
    for field in NOT_NULL_FIELDS:
        if field in changes and changes[field] is None:
            del changes[field]
    if "lab_marker" in changes and changes["lab_marker"] != record.lab_marker:
        # Unit and ranges belong to the old marker unless this request restates them.
        current = {field: getattr(record, field) for field in LabResultUpdate.model_fields}
        current.update(dict.fromkeys(CATALOG_FIELDS))
        changes = apply_catalog_ranges(db, {**current, **changes})
        record.zone = None

    for field, value in changes.items():
        setattr(record, field, value)
    record.updated_at = datetime.utcnow()
    _refresh_zone(record)
    db.commit()
    db.refresh(record)
    return _to_out(record)


@router.delete("/{result_id}", status_code=204)
def delete_lab_result(
    result_id: str,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    record = _get_owned(db, context, result_id)
    db.delete(record)
    db.commit()
    logger.info("Deleted lab result %s", result_id)
    return Response(status_code=204)
