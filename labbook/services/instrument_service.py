# labbook/services/instrument_service.py
"""
Instrument inventory.

Administrators maintain the roster, each instrument's status and its
maintenance log. Bookings keep the instrument name they were made with, so
renaming or deleting an instrument never rewrites booking history.
"""

from datetime import date
import logging
from typing import List

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, ForbiddenException, NotFoundException
from ..core.enums import InstrumentStatus
from ..models.instrument import Instrument, MaintenanceRecord
from ..repositories.factory import RepositoryFactory
from ..schemas.instrument import InstrumentCreate, InstrumentUpdate, MaintenanceRecordCreate
from ..schemas.user import CurrentUser
from .base import BaseService

logger = logging.getLogger(__name__)


class InstrumentService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.instrument_repository = RepositoryFactory.create_instrument_repository(db)

    def list_instruments(self) -> List[Instrument]:
        return self.instrument_repository.list_ordered()

    def get_instrument(self, instrument_id: str) -> Instrument:
        instrument = self.instrument_repository.get_by_id(instrument_id)
        if instrument is None:
            raise NotFoundException(
                f"Instrument {instrument_id} not found",
                code="INSTRUMENT_NOT_FOUND",
                details={"instrument_id": instrument_id},
            )
        return instrument

    @BaseService.measure_operation("create_instrument")
    def create_instrument(self, actor: CurrentUser, data: InstrumentCreate) -> Instrument:
        self._require_admin(actor)
        self._ensure_name_free(data.name)

        with self.transaction():
            instrument = self.instrument_repository.create(**data.model_dump())

        self.log_operation("create_instrument", instrument_id=instrument.id, admin_id=actor.id)
        return instrument

    @BaseService.measure_operation("update_instrument")
    def update_instrument(
        self, actor: CurrentUser, instrument_id: str, data: InstrumentUpdate
    ) -> Instrument:
        """Partial update; only fields present in the payload change."""
        self._require_admin(actor)
        instrument = self.get_instrument(instrument_id)
        updates = {field: getattr(data, field) for field in data.model_fields_set}
        if updates.get("name") and updates["name"] != instrument.name:
            self._ensure_name_free(updates["name"])

        with self.transaction():
            for key, value in updates.items():
                setattr(instrument, key, value)
            self.instrument_repository.flush()

        self.log_operation(
            "update_instrument", instrument_id=instrument.id, fields=sorted(updates)
        )
        return instrument

    @BaseService.measure_operation("set_instrument_status")
    def set_status(
        self, actor: CurrentUser, instrument_id: str, status: InstrumentStatus
    ) -> Instrument:
        self._require_admin(actor)
        instrument = self.get_instrument(instrument_id)

        with self.transaction():
            instrument.status = InstrumentStatus(status)
            self.instrument_repository.flush()

        self.log_operation(
            "set_instrument_status", instrument_id=instrument.id, new_status=instrument.status.value
        )
        return instrument

    @BaseService.measure_operation("delete_instrument")
    def delete_instrument(self, actor: CurrentUser, instrument_id: str) -> None:
        """Remove an instrument from the roster. Its bookings are left untouched."""
        self._require_admin(actor)
        self.get_instrument(instrument_id)

        with self.transaction():
            self.instrument_repository.delete(instrument_id)

        self.log_operation("delete_instrument", instrument_id=instrument_id, admin_id=actor.id)

    @BaseService.measure_operation("add_maintenance_record")
    def add_maintenance_record(
        self, actor: CurrentUser, instrument_id: str, data: MaintenanceRecordCreate
    ) -> MaintenanceRecord:
        self._require_admin(actor)
        instrument = self.get_instrument(instrument_id)

        with self.transaction():
            record = self.instrument_repository.add_maintenance_record(
                instrument, performed_on=data.performed_on, description=data.description
            )

        self.log_operation("add_maintenance_record", instrument_id=instrument.id, record_id=record.id)
        return record

    @staticmethod
    def is_calibration_overdue(instrument: Instrument, on_day: date) -> bool:
        """Advisory only; an overdue instrument can still be booked."""
        return instrument.calibration_overdue(on_day)

    def _ensure_name_free(self, name: str) -> None:
        if self.instrument_repository.get_by_name(name) is not None:
            raise ConflictException(
                f"An instrument named '{name}' already exists",
                code="INSTRUMENT_NAME_TAKEN",
                details={"name": name},
            )

    @staticmethod
    def _require_admin(actor: CurrentUser) -> None:
        if not actor.is_admin:
            raise ForbiddenException("Only administrators can manage instruments")
