from collections import defaultdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic_api.context import SessionContext
from clinic_api.database import get_db
from clinic_api.models.lab_marker import LabMarker
from clinic_api.models.lab_result import LabResultRecord
from clinic_api.routers.deps import get_request_context
from clinic_api.schemas.labs import LabMarkerOut

router = APIRouter(prefix="/api/markers", tags=["markers"])


@router.get("", response_model=list[LabMarkerOut])
def list_markers(category: str | None = None, db: Session = Depends(get_db)):
    query = db.query(LabMarker)
    if category:
        query = query.filter(LabMarker.category == category)
    return query.order_by(LabMarker.category.asc(), LabMarker.marker_name.asc()).all()


@router.get("/categories")
def categories(db: Session = Depends(get_db)):
    grouped: dict[str, list[str]] = defaultdict(list)
    for marker in db.query(LabMarker).order_by(LabMarker.marker_name.asc()).all():
        grouped[marker.category].append(marker.marker_name)

    return [
        {"category": category, "total": len(names), "markers": names}
        for category, names in sorted(grouped.items(), key=lambda kv: kv[0])
    ]


@router.get("/unmatched")
def unmatched(
    patient_id: str | None = None,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    query = db.query(LabResultRecord.lab_marker).filter(
        LabResultRecord.clinic_id == context.clinic_id,
        LabResultRecord.marker_id.is_(None),
    )
    patient_id = patient_id or context.patient_id
    if patient_id:
        query = query.filter(LabResultRecord.patient_id == patient_id)

    counts: dict[str, int] = defaultdict(int)
    for (name,) in query.all():
        counts[name] += 1

    return [
        {"lab_marker": name, "count": count}
        for name, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]
