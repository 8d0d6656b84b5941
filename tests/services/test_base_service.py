# tests/services/test_base_service.py
import pytest
from sqlalchemy.exc import OperationalError

from labbook.core.exceptions import PersistenceException, ValidationException
from labbook.services.base import BaseService
from labbook.services.cache_service import CacheService


class _ProbeService(BaseService):
    @BaseService.measure_operation("probe")
    def probe(self, fail: bool = False) -> str:
        if fail:
            raise ValidationException("bad probe")
        return "ok"


def test_measure_operation_records_successes_and_failures(db):
    service = _ProbeService(db)
    service.probe()
    with pytest.raises(ValidationException):
        service.probe(fail=True)

    metrics = service.get_metrics()["probe"]
    assert metrics["count"] >= 2
    assert metrics["failure_count"] >= 1
    assert 0 < metrics["success_rate"] < 1


def test_transaction_wraps_storage_errors(db):
    service = _ProbeService(db)
    with pytest.raises(PersistenceException):
        with service.transaction():
            raise OperationalError("INSERT", {}, Exception("database is locked"))


def test_transaction_passes_domain_errors_through(db):
    service = _ProbeService(db)
    with pytest.raises(ValidationException):
        with service.transaction():
            raise ValidationException("not storage")


def test_invalidate_pattern(db):
    cache = CacheService()
    cache.set("bookings:all", [], ttl=60)
    _ProbeService(db, cache).invalidate_pattern("bookings:*")
    assert cache.get("bookings:all") is None
