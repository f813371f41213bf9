from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat


class LabResultCreate(BaseModel):
    patient_id: str
    lab_marker: str = Field(min_length=1)
    result_date: date
    result_value: FiniteFloat
    unit: str | None = None
    conventional_range_low: FiniteFloat | None = None
    conventional_range_high: FiniteFloat | None = None
    functional_range_low: FiniteFloat | None = None
    functional_range_high: FiniteFloat | None = None
    source: str = "Manual Entry"
    note: str | None = None


class LabResultUpdate(BaseModel):
    lab_marker: str | None = Field(default=None, min_length=1)
    result_date: date | None = None
    result_value: FiniteFloat | None = None
    unit: str | None = None
    conventional_range_low: FiniteFloat | None = None
    conventional_range_high: FiniteFloat | None = None
    functional_range_low: FiniteFloat | None = None
    functional_range_high: FiniteFloat | None = None
    source: str | None = None
    note: str | None = None


class LabResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    clinic_id: str
    patient_id: str
    marker_id: int | None
    lab_marker: str
    result_date: date
    result_value: float
    unit: str | None
    conventional_range_low: float | None
    conventional_range_high: float | None
    functional_range_low: float | None
    functional_range_high: float | None
    zone: str | None
    source: str
    note: str | None
    created_by: str | None
    created_at: datetime
    updated_at: datetime | None


class LabMarkerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    marker_name: str
    category: str
    description: str | None
    unit: str | None
    conventional_low: float | None
    conventional_high: float | None
    functional_low: float | None
    functional_high: float | None


class TrendOverviewItem(BaseModel):
    marker_id: int | None
    lab_marker: str
    category: str
    previous: float
    current: float
    delta_percent: float
    direction: str
    latest_zone: str | None
    previous_result_date: str
    latest_result_date: str
