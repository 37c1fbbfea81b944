"""Integration tests for the member directory."""
import pytest

from church_attendance.db.models import Attendance
from church_attendance.services.attendance import record_attendance
from tests.utils import make_member


@pytest.mark.integration
class TestMembersApi:

    def test_requires_staff(self, client):
        assert client.get("/api/v1/members").status_code == 401

    def test_active_members_by_default(self, staff_client, db_session):
        make_member(db_session, "m1", "Ruth", "Moab")
        make_member(db_session, "m2", "Orpah", "Moab", status="Inactive")

        active = staff_client.get("/api/v1/members").json()["members"]
        everyone = staff_client.get("/api/v1/members", params={"all": "true"}).json()["members"]

        assert [m["id"] for m in active] == ["m1"]
        assert {m["id"] for m in everyone} == {"m1", "m2"}

    def test_create_get_update(self, staff_client):
        created = staff_client.post(
            "/api/v1/members", json={"first_name": "Ruth", "last_name": "Moab", "phone": "555-123-4567"}
        )
        assert created.status_code == 201
        member = created.json()
        assert member["id"].startswith("member_")
        assert member["status"] == "Active"

        updated = staff_client.put(f"/api/v1/members/{member['id']}", json={"city": "Bethlehem"})
        assert updated.json()["city"] == "Bethlehem"
        assert updated.json()["phone"] == "555-123-4567"

        fetched = staff_client.get(f"/api/v1/members/{member['id']}")
        assert fetched.json()["city"] == "Bethlehem"

    def test_create_requires_names(self, staff_client):
        response = staff_client.post("/api/v1/members", json={"first_name": "Ruth"})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required field: last_name"}

    def test_unknown_member(self, staff_client):
        assert staff_client.get("/api/v1/members/nobody").status_code == 404

    def test_delete_removes_attendance(self, staff_client, db_session):
        make_member(db_session, "m1", "Ruth", "Moab")
        record_attendance(db_session, "2024-05-05", "Sunday Morning", ["m1"])

        response = staff_client.delete("/api/v1/members/m1")

        assert response.json() == {"success": True, "message": "Deleted Ruth Moab"}
        assert db_session.query(Attendance).count() == 0

    def test_import_upserts_and_reports_bad_rows(self, staff_client, db_session):
        make_member(db_session, "pc_1", "Ruth", "Moab", phone="5550000000")

        response = staff_client.post(
            "/api/v1/import-members",
            json={
                "members": [
                    {"person_id": "1", "first_name": "Ruth", "last_name": "Moab", "phone": "5551234567"},
                    {"id": "pc_2", "first_name": "Boaz", "last_name": "Judah"},
                    {"id": "pc_3", "first_name": "Nameless"},
                ]
            },
        )

        data = response.json()
        assert data["imported"] == 2
        assert data["total"] == 3
        assert data["errors"] == [{"id": "pc_3", "reason": "Missing first or last name"}]
        assert staff_client.get("/api/v1/members/pc_1").json()["phone"] == "5551234567"
