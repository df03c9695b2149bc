# backend/tests/unit/core/test_prometheus_middleware.py
from app.middleware.prometheus_middleware import normalize_path


def test_ids_and_dates_are_collapsed():
    path = "/api/v1/professionals/01HQ3V4ZJ8M6P9X2K7R5T0W1YB/availability/2025-03-10"
    assert normalize_path(path) == "/api/v1/professionals/:id/availability/:date"


def test_static_paths_untouched():
    assert normalize_path("/api/v1/sessions/student-quota") == "/api/v1/sessions/student-quota"
