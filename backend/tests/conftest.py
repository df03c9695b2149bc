# backend/tests/conftest.py
"""
Pytest configuration for the MindBridge backend.

Every test gets a fresh in-memory SQLite schema and a frozen platform
clock (Monday 2025-03-10 10:30, Asia/Colombo).
"""

import os

# CRITICAL: Set the database and gateway settings BEFORE any app imports!
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["PAYHERE_MERCHANT_ID"] = "1211149"
os.environ["PAYHERE_MERCHANT_SECRET"] = "test-merchant-secret"

from datetime import datetime
from typing import Iterator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session

from app import models  # noqa: F401  (registers every table on Base.metadata)
from app.api.dependencies.database import get_db
from app.core import timezone_utils
from app.database import Base, SessionLocal, engine
from app.main import app
from app.models.user import User
from app.services import availability_service, session_service
from tests.factories.builders import FROZEN_NOW, make_professional, make_user

# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def db() -> Iterator[Session]:
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def frozen_clock(monkeypatch) -> datetime:
    """Pin the platform clock everywhere it is read."""

    def _now() -> datetime:
        return FROZEN_NOW

    monkeypatch.setattr(timezone_utils, "platform_now", _now)
    monkeypatch.setattr(availability_service, "platform_now", _now)
    monkeypatch.setattr(session_service, "platform_now", _now)
    return FROZEN_NOW


# ============================================================================
# Users
# ============================================================================


@pytest.fixture
def professional(db: Session) -> User:
    return make_professional(db)


@pytest.fixture
def client_user(db: Session) -> User:
    return make_user(db, name="Nimal Silva", is_student=False)


@pytest.fixture
def student_user(db: Session) -> User:
    # Registered on the 15th
    return make_user(db, name="Kasuni Fernando", is_student=True)


# ============================================================================
# HTTP
# ============================================================================


@pytest.fixture
def client(db: Session) -> Iterator[TestClient]:
    """TestClient bound to the per-test database session."""

    def _override_get_db() -> Iterator[Session]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
