# backend/tests/routes/test_sessions_routes.py
"""HTTP contract of /api/v1/sessions."""

from datetime import date

from app.models.session import SessionStatus
from app.models.time_slot import TimeSlot
from tests.factories.builders import TOMORROW, auth_headers, make_session, make_slot

BOOK_URL = "/api/v1/sessions/book"


def _book_body(professional_id, **overrides):
    body = {
        "professionalId": professional_id,
        "date": TOMORROW.isoformat(),
        "timeSlot": "10:00",
        "price": "3000.00",
    }
    body.update(overrides)
    return body


class TestBookSession:
    def test_book_returns_201_with_ids(self, client, db, professional, client_user):
        make_slot(db, professional, TOMORROW, "10:00")

        resp = client.post(
            BOOK_URL, json=_book_body(professional.id), headers=auth_headers(client_user)
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["booking_id"] == data["session_id"] == data["session"]["id"]
        assert data["session"]["status"] == "confirmed"
        assert data["session"]["price"] == "3000.00"
        assert data["session"]["duration_minutes"] == 50
        slot = db.query(TimeSlot).filter_by(professional_id=professional.id).one()
        db.refresh(slot)
        assert slot.is_booked is True

    def test_snake_case_body_is_accepted(self, client, db, professional, client_user):
        make_slot(db, professional, TOMORROW, "10:00")
        body = {
            "professional_id": professional.id,
            "date": TOMORROW.isoformat(),
            "time_slot": "10:00",
            "price": 3000,
        }

        resp = client.post(BOOK_URL, json=body, headers=auth_headers(client_user))

        assert resp.status_code == 201

    def test_student_gets_discount(self, client, db, professional, student_user):
        make_slot(db, professional, TOMORROW, "10:00")

        resp = client.post(
            BOOK_URL, json=_book_body(professional.id), headers=auth_headers(student_user)
        )

        assert resp.status_code == 201
        assert resp.json()["session"]["price"] == "2400.00"

    def test_free_session_for_student(self, client, db, professional, student_user):
        make_slot(db, professional, TOMORROW, "10:00")

        resp = client.post(
            BOOK_URL, json=_book_body(professional.id, price=0), headers=auth_headers(student_user)
        )

        assert resp.status_code == 201
        assert resp.json()["session"]["price"] == "0.00"

    def test_free_session_refused_for_non_student(self, client, db, professional, client_user):
        make_slot(db, professional, TOMORROW, "10:00")

        resp = client.post(
            BOOK_URL, json=_book_body(professional.id, price=0), headers=auth_headers(client_user)
        )

        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "FREE_SESSION_NOT_ALLOWED"

    def test_closed_slot_is_rejected(self, client, db, professional, client_user):
        make_slot(db, professional, TOMORROW, "10:00", is_available=False)

        resp = client.post(
            BOOK_URL, json=_book_body(professional.id), headers=auth_headers(client_user)
        )

        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["code"] == "SLOT_NOT_AVAILABLE"
        assert set(detail) == {"message", "code", "details"}

    def test_second_booking_of_same_slot_fails(self, client, db, professional, client_user):
        make_slot(db, professional, TOMORROW, "10:00")
        headers = auth_headers(client_user)

        first = client.post(BOOK_URL, json=_book_body(professional.id), headers=headers)
        second = client.post(BOOK_URL, json=_book_body(professional.id), headers=headers)

        assert first.status_code == 201
        assert second.status_code == 400
        assert second.json()["detail"]["code"] == "SLOT_NOT_AVAILABLE"

    def test_unknown_professional(self, client, client_user):
        body = _book_body("01HQ3V4ZJ8M6P9X2K7R5T0W1YB")

        resp = client.post(BOOK_URL, json=body, headers=auth_headers(client_user))

        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "PROFESSIONAL_NOT_FOUND"

    def test_paused_professional(self, client, db, professional, client_user):
        professional.professional_profile.is_available = False
        db.commit()
        make_slot(db, professional, TOMORROW, "10:00")

        resp = client.post(
            BOOK_URL, json=_book_body(professional.id), headers=auth_headers(client_user)
        )

        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "PROFESSIONAL_UNAVAILABLE"

    def test_bad_time_format_is_422(self, client, professional, client_user):
        resp = client.post(
            BOOK_URL,
            json=_book_body(professional.id, timeSlot="10am"),
            headers=auth_headers(client_user),
        )
        assert resp.status_code == 422

    def test_requires_token(self, client, professional):
        resp = client.post(BOOK_URL, json=_book_body(professional.id))

        assert resp.status_code == 401
        assert resp.json()["detail"]["code"] == "NOT_AUTHENTICATED"

    def test_professional_cannot_book(self, client, professional):
        resp = client.post(
            BOOK_URL, json=_book_body(professional.id), headers=auth_headers(professional)
        )

        assert resp.status_code == 403
        assert resp.json()["detail"]["code"] == "CLIENT_REQUIRED"


class TestStudentQuota:
    def test_student_quota(self, client, db, professional, student_user):
        make_session(db, student_user, professional, date(2025, 3, 1), "09:00")

        resp = client.get("/api/v1/sessions/student-quota", headers=auth_headers(student_user))

        assert resp.status_code == 200
        assert resp.json() == {
            "remaining_sessions": 3,
            "next_reset_date": "2025-03-15",
            "total_sessions_this_period": 1,
            "is_student": True,
        }

    def test_non_student_quota(self, client, client_user):
        resp = client.get("/api/v1/sessions/student-quota", headers=auth_headers(client_user))

        assert resp.status_code == 200
        assert resp.json()["is_student"] is False
        assert resp.json()["remaining_sessions"] == 0
        assert resp.json()["next_reset_date"] == ""


class TestSessionReads:
    def test_mine_lists_client_sessions(self, client, db, professional, client_user):
        make_session(db, client_user, professional, TOMORROW, "09:00", price=3000)

        resp = client.get("/api/v1/sessions/mine", headers=auth_headers(client_user))

        assert resp.status_code == 200
        assert len(resp.json()["sessions"]) == 1

    def test_get_session_for_participant(self, client, db, professional, client_user):
        session = make_session(db, client_user, professional, TOMORROW, "09:00", price=3000)

        resp = client.get(f"/api/v1/sessions/{session.id}", headers=auth_headers(professional))

        assert resp.status_code == 200
        assert resp.json()["id"] == session.id

    def test_malformed_id_is_422(self, client, client_user):
        resp = client.get("/api/v1/sessions/not-a-ulid", headers=auth_headers(client_user))
        assert resp.status_code == 422


class TestCancelSession:
    def test_cancel_frees_the_slot(self, client, db, professional, client_user):
        session = make_session(db, client_user, professional, date(2025, 3, 20), "09:00")

        resp = client.post(
            f"/api/v1/sessions/{session.id}/cancel", headers=auth_headers(client_user)
        )

        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"
        slot = db.query(TimeSlot).filter_by(professional_id=professional.id).one()
        db.refresh(slot)
        assert slot.is_booked is False

    def test_delete_is_an_alias(self, client, db, professional, client_user):
        session = make_session(db, client_user, professional, date(2025, 3, 20), "09:00")

        resp = client.delete(f"/api/v1/sessions/{session.id}", headers=auth_headers(professional))

        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"

    def test_late_cancellation_is_400(self, client, db, professional, client_user):
        session = make_session(db, client_user, professional, TOMORROW, "09:00")

        resp = client.post(
            f"/api/v1/sessions/{session.id}/cancel", headers=auth_headers(client_user)
        )

        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "LATE_CANCELLATION"

    def test_stranger_is_403(self, client, db, professional, client_user, student_user):
        session = make_session(db, client_user, professional, date(2025, 3, 20), "09:00")

        resp = client.post(
            f"/api/v1/sessions/{session.id}/cancel", headers=auth_headers(student_user)
        )

        assert resp.status_code == 403

    def test_unknown_session_is_404(self, client, client_user):
        resp = client.post(
            "/api/v1/sessions/01HQ3V4ZJ8M6P9X2K7R5T0W1YB/cancel",
            headers=auth_headers(client_user),
        )

        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "SESSION_NOT_FOUND"


class TestSessionStatus:
    def test_professional_completes_session(self, client, db, professional, client_user):
        session = make_session(db, client_user, professional, date(2025, 3, 20), "09:00")

        resp = client.patch(
            f"/api/v1/sessions/{session.id}/status",
            json={"status": SessionStatus.COMPLETED.value},
            headers=auth_headers(professional),
        )

        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"

    def test_client_cannot_change_status(self, client, db, professional, client_user):
        session = make_session(db, client_user, professional, date(2025, 3, 20), "09:00")

        resp = client.patch(
            f"/api/v1/sessions/{session.id}/status",
            json={"status": "completed"},
            headers=auth_headers(client_user),
        )

        assert resp.status_code == 403
        assert resp.json()["detail"]["code"] == "PROFESSIONAL_REQUIRED"
