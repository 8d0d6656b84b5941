# labbook/repositories/instrument_repository.py
from typing import List, Optional

from sqlalchemy.orm import Query, Session, selectinload

from ..models.instrument import Instrument, MaintenanceRecord
from .base_repository import BaseRepository


class InstrumentRepository(BaseRepository[Instrument]):
    """Repository for the instrument roster and maintenance log."""

    def __init__(self, db: Session):
        super().__init__(db, Instrument)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Instrument.maintenance_history))

    def list_ordered(self) -> List[Instrument]:
        query = self._apply_eager_loading(self.db.query(Instrument)).order_by(Instrument.name)
        return self._execute_query(query)

    def get_by_name(self, name: str) -> Optional[Instrument]:
        return self.find_one_by(name=name)

    def add_maintenance_record(self, instrument: Instrument, **kwargs) -> MaintenanceRecord:
        record = MaintenanceRecord(instrument_id=instrument.id, **kwargs)
        instrument.maintenance_history.append(record)
        self.flush()
        return record
