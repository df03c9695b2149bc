# backend/tests/factories/builders.py
"""Row builders and clock constants shared by the test suite."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Optional

import pytz
from sqlalchemy.orm import Session

from app.auth import create_access_token
from app.core.enums import RoleName
from app.models.client import ClientProfile
from app.models.professional import ProfessionalProfile
from app.models.session import CounselingSession, SessionStatus
from app.models.time_slot import TimeSlot
from app.models.user import User

COLOMBO = pytz.timezone("Asia/Colombo")
FROZEN_NOW = COLOMBO.localize(datetime(2025, 3, 10, 10, 30))
TODAY = FROZEN_NOW.date()
TOMORROW = TODAY + timedelta(days=1)
NEXT_WEEK = TODAY + timedelta(days=7)


def make_user(
    db: Session,
    *,
    name: str,
    role: RoleName = RoleName.CLIENT,
    is_student: Optional[bool] = None,
    created_at: Optional[datetime] = None,
    is_active: bool = True,
) -> User:
    user = User(
        email=f"{name.lower().replace(' ', '.')}@example.com",
        name=name,
        role=role.value,
        is_active=is_active,
        created_at=created_at or datetime(2024, 6, 15, 9, 0, tzinfo=pytz.UTC),
    )
    db.add(user)
    db.flush()
    if is_student is not None:
        db.add(ClientProfile(user_id=user.id, is_student=is_student))
    db.commit()
    db.refresh(user)
    return user


def make_professional(
    db: Session, *, name: str = "Dr Perera", is_available: bool = True
) -> User:
    user = make_user(db, name=name, role=RoleName.COUNSELOR)
    db.add(
        ProfessionalProfile(
            user_id=user.id,
            title="Counselor",
            is_available=is_available,
            session_fee=Decimal("3000.00"),
        )
    )
    db.commit()
    db.refresh(user)
    return user


def make_slot(
    db: Session,
    professional: User,
    slot_date: date,
    slot_time: str,
    *,
    is_available: bool = True,
    is_booked: bool = False,
) -> TimeSlot:
    slot = TimeSlot(
        professional_id=professional.id,
        date=slot_date,
        time=slot_time,
        is_available=is_available,
        is_booked=is_booked,
    )
    db.add(slot)
    db.commit()
    return slot


def make_session(
    db: Session,
    client: User,
    professional: User,
    session_date: date,
    session_time: str = "10:00",
    *,
    price: Decimal = Decimal("0"),
    status: SessionStatus = SessionStatus.CONFIRMED,
    book_slot: bool = True,
) -> CounselingSession:
    if book_slot:
        db.add(
            TimeSlot(
                professional_id=professional.id,
                date=session_date,
                time=session_time,
                is_available=True,
                is_booked=status != SessionStatus.CANCELLED,
            )
        )
    session = CounselingSession(
        client_id=client.id,
        professional_id=professional.id,
        date=session_date,
        time=session_time,
        duration_minutes=50,
        price=price,
        status=status.value,
    )
    db.add(session)
    db.commit()
    return session



def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}
