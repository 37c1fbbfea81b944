"""Integration tests for absence check-ins."""
import pytest
from datetime import date

from church_attendance.db.models import AbsenteeCheckin, StreamAccessCode
from tests.utils import make_checkin, make_member, make_stream_password


@pytest.fixture
def member(db_session):
    return make_member(db_session, "m1", "Ruth", "Moab", phone="(555) 123-4567")


@pytest.mark.integration
class TestPublicAbsence:

    def test_member_gets_stream_code(self, client, db_session, member, provider_log):
        make_stream_password(db_session)

        response = client.post(
            "/api/v1/absence",
            json={
                "name": "Ruth Moab",
                "phone": "555.123.4567",
                "reason": "sick",
                "prayerRequest": "Pray for my mother",
                "serviceDate": "2024-05-05",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["checkin"]["smsSent"] is True
        assert data["checkin"]["serviceDate"] == "2024-05-05"
        assert len(data["accessCode"]) == 6
        assert db_session.query(StreamAccessCode).filter_by(code=data["accessCode"]).count() == 1
        assert len(provider_log.to("api.twilio.com")) == 1

    def test_non_member_is_forbidden(self, client, db_session, member):
        response = client.post(
            "/api/v1/absence",
            json={"name": "Stranger", "phone": "555-999-0000", "reason": "sick"},
        )

        assert response.status_code == 403
        assert response.json()["notMember"] is True
        assert db_session.query(AbsenteeCheckin).count() == 0

    def test_checkin_survives_missing_stream(self, client, db_session, member):
        response = client.post(
            "/api/v1/absence",
            json={"name": "Ruth Moab", "phone": "5551234567", "reason": "vacation"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["checkin"]["smsSent"] is False
        assert data["smsError"] == "No active live stream password configured"
        assert "accessCode" not in data
        assert db_session.query(AbsenteeCheckin).count() == 1

    def test_unknown_reason_is_a_400(self, client, member):
        response = client.post(
            "/api/v1/absence",
            json={"name": "Ruth Moab", "phone": "5551234567", "reason": "fishing"},
        )
        assert response.status_code == 400
        assert "error" in response.json()


@pytest.mark.integration
class TestStaffAbsence:

    def test_manual_absence_with_link(self, staff_client, db_session, provider_log):
        make_stream_password(db_session)

        response = staff_client.post(
            "/api/v1/manual-absence",
            json={
                "memberName": "Boaz Judah",
                "memberPhone": "+1 (555) 222-3333",
                "reason": "business",
                "serviceDate": "2024-05-05",
                "sendLink": True,
            },
        )

        assert response.status_code == 200
        assert response.json()["smsSent"] is True
        checkin = db_session.query(AbsenteeCheckin).one()
        assert checkin.phone == "5552223333"
        assert checkin.livestream_sent is True

    def test_manual_absence_requires_staff(self, client):
        response = client.post(
            "/api/v1/manual-absence",
            json={"memberName": "Boaz", "reason": "business", "serviceDate": "2024-05-05"},
        )
        assert response.status_code == 401

    def test_delete_absentee(self, staff_client, db_session):
        checkin = make_checkin(db_session, "Ruth Moab", "5551234567", date(2024, 5, 5))

        response = staff_client.delete("/api/v1/absentee", params={"id": checkin.id})

        assert response.status_code == 200
        assert response.json()["deleted"] == {"id": checkin.id, "name": "Ruth Moab"}
        assert staff_client.delete("/api/v1/absentee", params={"id": checkin.id}).status_code == 404
