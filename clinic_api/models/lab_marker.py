from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_api.database import Base


class LabMarker(Base):
    __tablename__ = "lab_markers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    marker_name: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    category: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    aliases: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    conventional_low: Mapped[float | None] = mapped_column(Float, nullable=True)
    conventional_high: Mapped[float | None] = mapped_column(Float, nullable=True)
    functional_low: Mapped[float | None] = mapped_column(Float, nullable=True)
    functional_high: Mapped[float | None] = mapped_column(Float, nullable=True)

    results = relationship("LabResultRecord", back_populates="marker")
