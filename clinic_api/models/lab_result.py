from datetime import date, datetime
from uuid import uuid4

from sqlalchemy import Date, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_api.database import Base


class LabResultRecord(Base):
    __tablename__ = "lab_trend_results"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    clinic_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    patient_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    marker_id: Mapped[int | None] = mapped_column(ForeignKey("lab_markers.id"), index=True, nullable=True)
    lab_marker: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    result_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    result_value: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    conventional_range_low: Mapped[float | None] = mapped_column(Float, nullable=True)
    conventional_range_high: Mapped[float | None] = mapped_column(Float, nullable=True)
    functional_range_low: Mapped[float | None] = mapped_column(Float, nullable=True)
    functional_range_high: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Cache of the last classification; readers recompute from the ranges.
    zone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    source: Mapped[str] = mapped_column(String(100), nullable=False, default="Manual Entry")
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    marker = relationship("LabMarker", back_populates="results")
