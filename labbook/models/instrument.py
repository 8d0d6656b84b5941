# labbook/models/instrument.py
"""
Instrument inventory models.

An instrument's ``status`` is set by administrators and is never derived
from its bookings. ``calibration_due`` is advisory only.
"""

from datetime import date

from sqlalchemy import Column, Date, ForeignKey, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.constants import MAX_NAME_LENGTH
from ..core.enums import InstrumentStatus
from ..database import Base
from .base_enum import create_safe_enum
from .types import TimestampMixin, UTCDateTime, utc_now


class Instrument(Base, TimestampMixin):
    __tablename__ = "instruments"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(MAX_NAME_LENGTH), nullable=False, unique=True)
    type = Column(String(100), nullable=False, default="")
    model = Column(String(255), nullable=True)
    location = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    specifications = Column(Text, nullable=True)
    image = Column(String(1024), nullable=True)
    status = Column(
        create_safe_enum(InstrumentStatus, "instrument_status"),
        nullable=False,
        default=InstrumentStatus.AVAILABLE,
    )
    calibration_due = Column(Date, nullable=True)

    maintenance_history = relationship(
        "MaintenanceRecord",
        back_populates="instrument",
        cascade="all, delete-orphan",
        order_by="MaintenanceRecord.performed_on",
        passive_deletes=True,
    )

    def calibration_overdue(self, on_day: date) -> bool:
        return self.calibration_due is not None and self.calibration_due < on_day

    def __repr__(self) -> str:
        return f"<Instrument {self.id} {self.name} ({self.status.value})>"


class MaintenanceRecord(Base):
    """One entry of an instrument's maintenance log."""

    __tablename__ = "instrument_maintenance"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    instrument_id = Column(
        String(26),
        ForeignKey("instruments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    performed_on = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(UTCDateTime(), default=utc_now, nullable=False)

    instrument = relationship("Instrument", back_populates="maintenance_history")
