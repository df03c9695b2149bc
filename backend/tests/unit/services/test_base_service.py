# backend/tests/unit/services/test_base_service.py
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundException, ServiceException
from app.monitoring.prometheus_metrics import REGISTRY
from app.services.base import BaseService


class TestBaseServiceTransaction:
    def test_commits_on_success(self):
        db = Mock(spec=Session)
        with BaseService(db).transaction():
            pass
        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_driver_errors_become_service_exception(self):
        db = Mock(spec=Session)
        with pytest.raises(ServiceException):
            with BaseService(db).transaction():
                raise OperationalError("UPDATE time_slots", {}, Exception("locked"))
        db.rollback.assert_called_once()

    def test_domain_errors_propagate_unchanged(self):
        db = Mock(spec=Session)
        with pytest.raises(NotFoundException):
            with BaseService(db).transaction():
                raise NotFoundException("gone")
        db.rollback.assert_called_once()
        db.commit.assert_not_called()


class TestMeasureOperation:
    def test_records_prometheus_samples(self):
        class ProbeService(BaseService):
            @BaseService.measure_operation("probe")
            def probe(self, fail: bool = False) -> str:
                if fail:
                    raise ValueError("boom")
                return "ok"

        def sample(name: str, **labels) -> float:
            labels = {"service": "ProbeService", "operation": "probe", **labels}
            return REGISTRY.get_sample_value(name, labels) or 0.0

        service = ProbeService(Mock(spec=Session))
        ok_before = sample("mindbridge_service_operations_total", status="success")
        errors_before = sample("mindbridge_errors_total", error_type="ValueError")

        assert service.probe() == "ok"
        with pytest.raises(ValueError):
            service.probe(fail=True)

        assert sample("mindbridge_service_operations_total", status="success") == ok_before + 1
        assert sample("mindbridge_errors_total", error_type="ValueError") == errors_before + 1

    def test_slow_operation_warns(self):
        class SlowService(BaseService):
            @BaseService.measure_operation("slow")
            def slow(self) -> None:
                return None

        service = SlowService(Mock(spec=Session))

        with patch("app.services.base.time.time", side_effect=[0.0, 2.0]):
            with patch.object(service.logger, "warning") as mock_warning:
                service.slow()

        mock_warning.assert_called_once()
