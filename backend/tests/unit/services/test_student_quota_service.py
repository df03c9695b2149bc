# backend/tests/unit/services/test_student_quota_service.py
"""Free-session quota window and counting."""

from datetime import date, datetime
from decimal import Decimal

import pytest
import pytz

from app.core.exceptions import NotFoundException
from app.models.session import SessionStatus
from app.services.student_quota_service import (
    StudentQuotaService,
    clamp_to_month,
    quota_period,
    registration_anchor_day,
)
from tests.factories.builders import make_professional, make_session, make_user


class TestQuotaPeriod:
    def test_anchor_before_today_starts_this_month(self):
        assert quota_period(15, date(2025, 3, 20)) == (date(2025, 3, 15), date(2025, 4, 15))

    def test_anchor_after_today_starts_last_month(self):
        assert quota_period(15, date(2025, 3, 10)) == (date(2025, 2, 15), date(2025, 3, 15))

    def test_anchor_day_is_period_start(self):
        assert quota_period(15, date(2025, 3, 15)) == (date(2025, 3, 15), date(2025, 4, 15))

    def test_day_before_anchor_is_last_day_of_period(self):
        start, end = quota_period(15, date(2025, 3, 14))
        assert start == date(2025, 2, 15)
        assert end == date(2025, 3, 15)

    def test_anchor_31_clamps_in_february(self):
        assert quota_period(31, date(2025, 3, 5)) == (date(2025, 2, 28), date(2025, 3, 31))

    def test_anchor_31_clamps_in_leap_february(self):
        assert quota_period(31, date(2024, 2, 29)) == (date(2024, 2, 29), date(2024, 3, 31))

    def test_anchor_31_in_april(self):
        assert quota_period(31, date(2025, 4, 30)) == (date(2025, 4, 30), date(2025, 5, 31))

    def test_january_rolls_back_to_december(self):
        assert quota_period(20, date(2025, 1, 5)) == (date(2024, 12, 20), date(2025, 1, 20))

    def test_december_rolls_forward_to_january(self):
        assert quota_period(1, date(2024, 12, 31)) == (date(2024, 12, 1), date(2025, 1, 1))

    def test_clamp_to_month(self):
        assert clamp_to_month(2023, 2, 30) == date(2023, 2, 28)
        assert clamp_to_month(2023, 6, 30) == date(2023, 6, 30)


class TestRegistrationAnchorDay:
    def test_naive_timestamp_is_treated_as_utc(self):
        # 20:00 UTC on the 14th is already the 15th in Colombo (UTC+5:30)
        assert registration_anchor_day(datetime(2024, 6, 14, 20, 0)) == 15

    def test_aware_timestamp(self):
        assert registration_anchor_day(datetime(2024, 6, 14, 12, 0, tzinfo=pytz.UTC)) == 14


class TestStudentQuotaService:
    def test_non_student_gets_empty_quota(self, db, client_user):
        result = StudentQuotaService(db).get_remaining_student_sessions(client_user.id)
        assert result == {
            "remaining_sessions": 0,
            "next_reset_date": "",
            "total_sessions_this_period": 0,
            "is_student": False,
        }

    def test_client_without_profile_is_not_a_student(self, db):
        user = make_user(db, name="No Profile")
        result = StudentQuotaService(db).get_remaining_student_sessions(user.id)
        assert result["is_student"] is False

    def test_unknown_user(self, db):
        with pytest.raises(NotFoundException):
            StudentQuotaService(db).get_remaining_student_sessions("01HZZZZZZZZZZZZZZZZZZZZZZZ")

    def test_three_free_sessions_leave_one(self, db, student_user):
        professional = make_professional(db)
        booked = (
            (date(2025, 2, 15), "09:00"),
            (date(2025, 2, 28), "10:00"),
            (date(2025, 3, 14), "11:00"),
        )
        for day, hour in booked:
            make_session(db, student_user, professional, day, hour, book_slot=False)

        result = StudentQuotaService(db).get_remaining_student_sessions(
            student_user.id, today=date(2025, 3, 10)
        )

        assert result == {
            "remaining_sessions": 1,
            "next_reset_date": "2025-03-15",
            "total_sessions_this_period": 3,
            "is_student": True,
        }

    def test_ignores_paid_cancelled_and_out_of_window_sessions(self, db, student_user):
        professional = make_professional(db)
        make_session(db, student_user, professional, date(2025, 2, 20), "09:00", book_slot=False)
        make_session(
            db,
            student_user,
            professional,
            date(2025, 2, 21),
            "09:00",
            price=Decimal("2400.00"),
            book_slot=False,
        )
        make_session(
            db,
            student_user,
            professional,
            date(2025, 2, 22),
            "09:00",
            status=SessionStatus.CANCELLED,
            book_slot=False,
        )
        # Previous period and the reset day itself
        make_session(db, student_user, professional, date(2025, 2, 14), "09:00", book_slot=False)
        make_session(db, student_user, professional, date(2025, 3, 15), "09:00", book_slot=False)

        result = StudentQuotaService(db).get_remaining_student_sessions(student_user.id)

        assert result["total_sessions_this_period"] == 1
        assert result["remaining_sessions"] == 3

    def test_remaining_never_negative(self, db, student_user):
        professional = make_professional(db)
        for hour in ("09:00", "10:00", "11:00", "12:00", "13:00"):
            make_session(db, student_user, professional, date(2025, 3, 1), hour, book_slot=False)

        result = StudentQuotaService(db).get_remaining_student_sessions(student_user.id)

        assert result["remaining_sessions"] == 0
        assert result["total_sessions_this_period"] == 5

    def test_defaults_to_platform_today(self, db, student_user):
        # Frozen clock: 2025-03-10, anchor 15
        result = StudentQuotaService(db).get_remaining_student_sessions(student_user.id)
        assert result["next_reset_date"] == "2025-03-15"
        assert result["remaining_sessions"] == 4

    def test_registered_on_31st(self, db):
        user = make_user(
            db,
            name="Late Month",
            is_student=True,
            created_at=datetime(2024, 1, 31, 4, 0, tzinfo=pytz.UTC),
        )
        result = StudentQuotaService(db).get_remaining_student_sessions(
            user.id, today=date(2025, 2, 28)
        )
        assert result["next_reset_date"] == "2025-03-31"
