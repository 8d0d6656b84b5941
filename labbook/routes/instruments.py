# labbook/routes/instruments.py
"""Instrument roster routes. Reads are open to any user; writes are admin only."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..api.dependencies import get_current_user, get_instrument_service
from ..core.exceptions import DomainException
from ..errors import handle_domain_exception
from ..schemas.instrument import (
    InstrumentCreate,
    InstrumentResponse,
    InstrumentStatusUpdate,
    InstrumentUpdate,
    MaintenanceRecordCreate,
    MaintenanceRecordResponse,
)
from ..schemas.user import CurrentUser
from ..services.instrument_service import InstrumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/instruments", tags=["instruments"])


@router.get("", response_model=List[InstrumentResponse])
def list_instruments(
    current_user: CurrentUser = Depends(get_current_user),
    instrument_service: InstrumentService = Depends(get_instrument_service),
):
    return instrument_service.list_instruments()


@router.post("", response_model=InstrumentResponse, status_code=status.HTTP_201_CREATED)
def create_instrument(
    instrument_data: InstrumentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    instrument_service: InstrumentService = Depends(get_instrument_service),
):
    try:
        return instrument_service.create_instrument(current_user, instrument_data)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{instrument_id}", response_model=InstrumentResponse)
def get_instrument(
    instrument_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    instrument_service: InstrumentService = Depends(get_instrument_service),
):
    try:
        return instrument_service.get_instrument(instrument_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{instrument_id}", response_model=InstrumentResponse)
def update_instrument(
    instrument_id: str,
    instrument_data: InstrumentUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    instrument_service: InstrumentService = Depends(get_instrument_service),
):
    try:
        return instrument_service.update_instrument(current_user, instrument_id, instrument_data)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/{instrument_id}/status", response_model=InstrumentResponse)
def set_instrument_status(
    instrument_id: str,
    status_data: InstrumentStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    instrument_service: InstrumentService = Depends(get_instrument_service),
):
    try:
        return instrument_service.set_status(current_user, instrument_id, status_data.status)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{instrument_id}/maintenance",
    response_model=MaintenanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_maintenance_record(
    instrument_id: str,
    record_data: MaintenanceRecordCreate,
    current_user: CurrentUser = Depends(get_current_user),
    instrument_service: InstrumentService = Depends(get_instrument_service),
):
    try:
        return instrument_service.add_maintenance_record(current_user, instrument_id, record_data)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{instrument_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_instrument(
    instrument_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    instrument_service: InstrumentService = Depends(get_instrument_service),
):
    try:
        instrument_service.delete_instrument(current_user, instrument_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
