# labbook/schemas/instrument.py
from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from ..core.enums import InstrumentStatus
from ._strict_base import StrictRequestModel, StrictResponseModel


class MaintenanceRecordCreate(StrictRequestModel):
    performed_on: date
    description: str = Field(..., min_length=1)


class MaintenanceRecordResponse(StrictResponseModel):
    id: str
    performed_on: date
    description: str
    created_at: datetime


class InstrumentCreate(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: str = ""
    model: Optional[str] = None
    location: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    specifications: Optional[str] = None
    image: Optional[str] = None
    status: InstrumentStatus = InstrumentStatus.AVAILABLE
    calibration_due: Optional[date] = None


class InstrumentUpdate(StrictRequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    model: Optional[str] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    specifications: Optional[str] = None
    image: Optional[str] = None
    status: Optional[InstrumentStatus] = None
    calibration_due: Optional[date] = None


class InstrumentStatusUpdate(StrictRequestModel):
    status: InstrumentStatus


class InstrumentResponse(StrictResponseModel):
    id: str
    name: str
    type: str
    model: Optional[str] = None
    location: str
    description: Optional[str] = None
    specifications: Optional[str] = None
    image: Optional[str] = None
    status: InstrumentStatus
    calibration_due: Optional[date] = None
    maintenance_history: List[MaintenanceRecordResponse] = Field(default_factory=list)
