# backend/tests/routes/test_professionals_routes.py
"""HTTP contract of /api/v1/professionals."""

from datetime import date

from tests.factories.builders import TODAY, TOMORROW, auth_headers, make_session, make_slot

UNKNOWN_ID = "01HQ3V4ZJ8M6P9X2K7R5T0W1YB"


class TestPublicAvailability:
    def test_first_read_generates_closed_defaults(self, client, professional, client_user):
        url = f"/api/v1/professionals/{professional.id}/availability/{TOMORROW.isoformat()}"

        resp = client.get(url, headers=auth_headers(client_user))

        assert resp.status_code == 200
        data = resp.json()
        assert data["date"] == TOMORROW.isoformat()
        times = [slot["time"] for slot in data["availability"]]
        assert times == [f"{h:02d}:00" for h in range(9, 18)]
        assert not any(slot["is_available"] for slot in data["availability"])

    def test_today_hides_slots_inside_lead_time(self, client, professional, client_user):
        url = f"/api/v1/professionals/{professional.id}/availability/{TODAY.isoformat()}"

        resp = client.get(url, headers=auth_headers(client_user))

        assert [s["time"] for s in resp.json()["availability"]][0] == "12:00"

    def test_engaged_date_lists_open_slots_only(self, client, db, professional, client_user):
        make_slot(db, professional, TOMORROW, "09:00")
        make_slot(db, professional, TOMORROW, "10:00", is_available=False)
        url = f"/api/v1/professionals/{professional.id}/availability/{TOMORROW.isoformat()}"

        resp = client.get(url, headers=auth_headers(client_user))

        assert [s["time"] for s in resp.json()["availability"]] == ["09:00"]

    def test_unknown_professional_is_404(self, client, client_user):
        url = f"/api/v1/professionals/{UNKNOWN_ID}/availability/{TOMORROW.isoformat()}"

        resp = client.get(url, headers=auth_headers(client_user))

        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "PROFESSIONAL_NOT_FOUND"

    def test_monthly_summary(self, client, db, professional, client_user):
        make_slot(db, professional, date(2025, 3, 12), "09:00")
        make_slot(db, professional, date(2025, 3, 12), "10:00", is_available=False)
        make_slot(db, professional, date(2025, 3, 13), "09:00", is_available=False)

        resp = client.get(
            f"/api/v1/professionals/{professional.id}/availability",
            params={"year": 2025, "month": 3},
            headers=auth_headers(client_user),
        )

        assert resp.status_code == 200
        days = resp.json()["days"]
        assert days["2025-03-12"] == {"is_available": True, "total_slots": 2, "available_slots": 1}
        assert days["2025-03-13"]["is_available"] is False
        assert "2025-03-14" not in days

    def test_monthly_rejects_bad_month(self, client, professional, client_user):
        resp = client.get(
            f"/api/v1/professionals/{professional.id}/availability",
            params={"year": 2025, "month": 13},
            headers=auth_headers(client_user),
        )
        assert resp.status_code == 422

    def test_requires_token(self, client, professional):
        resp = client.get(
            f"/api/v1/professionals/{professional.id}/availability",
            params={"year": 2025, "month": 3},
        )
        assert resp.status_code == 401


class TestProfessionalSelfService:
    def test_open_and_close_slots(self, client, professional):
        headers = auth_headers(professional)
        body = {"slots": [{"date": TOMORROW.isoformat(), "time": "14:00"}]}

        opened = client.post("/api/v1/professionals/me/availability", json=body, headers=headers)
        closed = client.post("/api/v1/professionals/me/unavailability", json=body, headers=headers)

        assert opened.status_code == 200
        assert opened.json()["count"] == 1
        assert opened.json()["slots"][0]["is_available"] is True
        assert closed.json()["slots"][0]["is_available"] is False

    def test_opening_past_date_is_400(self, client, professional):
        body = {"slots": [{"date": "2025-03-01", "time": "14:00"}]}

        resp = client.post(
            "/api/v1/professionals/me/availability", json=body, headers=auth_headers(professional)
        )

        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "PAST_DATE"

    def test_booked_slot_is_not_closed(self, client, db, professional, client_user):
        make_session(db, client_user, professional, TOMORROW, "09:00")
        body = {"slots": [{"date": TOMORROW.isoformat(), "time": "09:00"}]}

        resp = client.post(
            "/api/v1/professionals/me/unavailability", json=body, headers=auth_headers(professional)
        )

        assert resp.json() == {"slots": [], "count": 0}

    def test_open_whole_date(self, client, professional):
        resp = client.put(
            f"/api/v1/professionals/me/availability/{TOMORROW.isoformat()}",
            json={"is_available": True},
            headers=auth_headers(professional),
        )

        assert resp.status_code == 200
        assert resp.json()["count"] == 9
        assert all(slot["is_available"] for slot in resp.json()["slots"])

    def test_pause_bookings(self, client, professional):
        resp = client.patch(
            "/api/v1/professionals/me/booking-status",
            json={"is_available": False},
            headers=auth_headers(professional),
        )

        assert resp.status_code == 200
        assert resp.json() == {"professional_id": professional.id, "is_available": False}

    def test_client_cannot_manage_availability(self, client, client_user):
        resp = client.patch(
            "/api/v1/professionals/me/booking-status",
            json={"is_available": False},
            headers=auth_headers(client_user),
        )

        assert resp.status_code == 403
        assert resp.json()["detail"]["code"] == "PROFESSIONAL_REQUIRED"

    def test_schedule_includes_client_details(
        self, client, db, professional, client_user, student_user
    ):
        make_session(db, client_user, professional, TOMORROW, "09:00", price=3000)
        make_session(db, student_user, professional, TOMORROW, "10:00")

        resp = client.get("/api/v1/professionals/me/sessions", headers=auth_headers(professional))

        assert resp.status_code == 200
        rows = resp.json()["sessions"]
        assert [(r["client_name"], r["client_is_student"]) for r in rows] == [
            ("Nimal Silva", False),
            ("Kasuni Fernando", True),
        ]
