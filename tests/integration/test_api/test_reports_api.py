"""Integration tests for absence reports."""
import json
import pytest
from datetime import date

from church_attendance.services.attendance import record_attendance
from tests.utils import make_checkin, make_member


@pytest.fixture
def history(db_session):
    make_member(db_session, "m1", "Ruth", "Moab", phone="5551234567")
    make_member(db_session, "m2", "Boaz", "Judah")
    record_attendance(db_session, "2024-05-05", "Sunday Morning", ["m1", "m2"])
    record_attendance(db_session, "2024-05-12", "Sunday Morning", ["m2"])
    make_checkin(db_session, "Ruth Moab", "(555) 123-4567", date(2024, 5, 12), reason="sick")
    return db_session


@pytest.mark.integration
class TestMemberAbsenceReport:

    def test_report(self, staff_client, history):
        response = staff_client.get(
            "/api/v1/member-absence-report",
            params={"memberId": "m1", "fromDate": "2024-05-01", "toDate": "2024-05-31"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["totalServicesInPeriod"] == 2
        assert data["summary"]["totalAbsences"] == 1
        [absence] = data["absences"]
        assert absence["date"] == "2024-05-12"
        assert absence["absenteeSubmission"]["reasonLabel"] == "Sick / Prayer Request"

    def test_missing_dates(self, staff_client, history):
        response = staff_client.get("/api/v1/member-absence-report", params={"memberId": "m1"})
        assert response.status_code == 400
        assert response.json() == {"error": "fromDate and toDate are required"}

    def test_unknown_member(self, staff_client):
        response = staff_client.get(
            "/api/v1/member-absence-report",
            params={"memberId": "ghost", "fromDate": "2024-05-01", "toDate": "2024-05-31"},
        )
        assert response.status_code == 404


@pytest.mark.integration
class TestAbsenteeReports:

    def test_dashboard(self, staff_client, history):
        response = staff_client.get(
            "/api/v1/absentee-dashboard", params={"fromDate": "2024-05-12", "toDate": "2024-05-18"}
        )
        assert response.json()["summary"]["sick"] == 1

    def test_bad_range(self, staff_client):
        response = staff_client.get("/api/v1/absentee-dashboard", params={"fromDate": "not-a-date"})
        assert response.status_code == 400

    def test_emailed_report(self, staff_client, history, provider_log):
        response = staff_client.post(
            "/api/v1/absentee-report",
            json={"fromDate": "2024-05-12", "toDate": "2024-05-18", "email": "elder@nlpc.net"},
        )

        assert response.json() == {"success": True, "message": "Report sent to elder@nlpc.net", "total": 1}
        payload = json.loads(provider_log.to("api.mailersend.com")[0].content)
        assert payload["to"] == [{"email": "elder@nlpc.net"}]
