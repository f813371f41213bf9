from collections import defaultdict
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from clinic_api.context import SessionContext
from clinic_api.database import get_db
from clinic_api.models.lab_result import LabResultRecord
from clinic_api.routers.deps import get_request_context
from clinic_api.schemas.labs import TrendOverviewItem
from clinic_api.services.chart_mapper import build_chart
from clinic_api.services.series_filter import filter_by_range, filter_by_window
from clinic_api.services.trend_analyzer import SeriesPoint, step_trend
from clinic_api.services.zone_classifier import ReferenceRanges, resolve_zone

router = APIRouter(prefix="/api/trends", tags=["trends"])


def _patient_rows(db: Session, context: SessionContext, patient_id: str | None, lab_marker: str | None = None):
    patient_id = patient_id or context.patient_id
    if not patient_id:
        raise HTTPException(status_code=400, detail="patient_id is required")
    query = db.query(LabResultRecord).filter(
        LabResultRecord.clinic_id == context.clinic_id,
        LabResultRecord.patient_id == patient_id,
    )
    if lab_marker:
        query = query.filter(LabResultRecord.lab_marker == lab_marker)
    return query.order_by(LabResultRecord.result_date.asc(), LabResultRecord.created_at.asc()).all()


def _to_point(row: LabResultRecord) -> SeriesPoint:
    zone = resolve_zone(row.result_value, ReferenceRanges.from_record(row), row.zone)
    return SeriesPoint(date=row.result_date, value=row.result_value, zone=zone.value if zone else None, ref=row.id)


@router.get("/overview", response_model=list[TrendOverviewItem])
def overview(
    patient_id: str | None = None,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    grouped = defaultdict(list)
    for row in _patient_rows(db, context, patient_id):
        grouped[row.lab_marker].append(row)

    output = []
    for name, rows in grouped.items():
        if len(rows) < 2:
            continue
        trend = step_trend([_to_point(row) for row in rows])
        if not trend.is_finite:
            continue
        previous, latest = rows[-2], rows[-1]
        latest_point = _to_point(latest)
        output.append(
            TrendOverviewItem(
                marker_id=latest.marker_id,
                lab_marker=name,
                category=latest.marker.category if latest.marker else "Other",
                previous=previous.result_value,
                current=latest.result_value,
                delta_percent=round(trend.percentage_change, 2),
                direction=trend.direction,
                latest_zone=latest_point.zone,
                previous_result_date=previous.result_date.isoformat(),
                latest_result_date=latest.result_date.isoformat(),
            )
        )

    output.sort(key=lambda x: abs(x.delta_percent), reverse=True)
    return output


@router.get("/{lab_marker}")
def marker_chart(
    lab_marker: str,
    patient_id: str | None = None,
    window: str = "all",
    start_date: date | None = None,
    end_date: date | None = None,
    width: float = Query(default=800, gt=0),
    height: float = Query(default=300, gt=0),
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_request_context),
):
    """Chart model for one marker.

    Each point carries its raw ``date``/``value`` and pixel ``x``/``y`` for a
    ``width`` x ``height`` canvas with y growing downward. The pixel pair serves
    consumers that draw directly; plotly clients plot the raw values against
    ``y_min``/``y_max`` and the bands.
    """
    rows = _patient_rows(db, context, patient_id, lab_marker)
    try:
        rows = filter_by_window(rows, window, date.today(), date_of=lambda row: row.result_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    rows = filter_by_range(rows, start_date, end_date, date_of=lambda row: row.result_date)

    ranges = ReferenceRanges.from_record(rows[0]) if rows else ReferenceRanges()
    chart = build_chart([_to_point(row) for row in rows], ranges, width=width, height=height)
    return {
        "lab_marker": lab_marker,
        "window": window,
        "unit": rows[-1].unit if rows else None,
        **chart.as_dict(),
    }
