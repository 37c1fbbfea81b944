"""Integration tests for livestream password rotation."""
import json
import pytest

from church_attendance.db.models import VimeoPassword


@pytest.mark.integration
class TestVimeoPassword:

    def test_no_password_yet(self, staff_client):
        response = staff_client.get("/api/v1/vimeo-password")
        assert response.json() == {"success": True, "hasPassword": False}

    def test_rotating_twice_leaves_one_active(self, staff_client, db_session, provider_log):
        first = staff_client.post("/api/v1/vimeo-password", json={"videoId": "123456"})
        second = staff_client.post("/api/v1/vimeo-password", json={"videoId": "123456", "password": "Gr8Faith"})

        assert first.status_code == 200
        assert second.json()["vimeoUpdated"] is True
        assert db_session.query(VimeoPassword).filter(VimeoPassword.active.is_(True)).count() == 1

        current = staff_client.get("/api/v1/vimeo-password").json()["current"]
        assert current["password"] == "Gr8Faith"

        [_, last_call] = provider_log.to("api.vimeo.com")
        assert last_call.method == "PATCH"
        assert json.loads(last_call.content)["privacy"]["view"] == "password"

    def test_vimeo_failure_still_saves_locally(self, staff_client, db_session, provider_log):
        provider_log.failing_hosts.add("api.vimeo.com")

        response = staff_client.post("/api/v1/vimeo-password", json={"videoId": "123456"})

        data = response.json()
        assert response.status_code == 200
        assert data["vimeoUpdated"] is False
        assert data["vimeoError"]
        assert data["message"] == "Password saved locally (Vimeo update pending)"
        assert staff_client.get("/api/v1/vimeo-password").json()["hasPassword"] is True

    def test_missing_video_id(self, staff_client):
        response = staff_client.post("/api/v1/vimeo-password", json={})
        assert response.status_code == 400
        assert response.json()["error"].startswith("Video ID is required")

    def test_update_settings(self, staff_client):
        staff_client.post("/api/v1/vimeo-password", json={"videoId": "123456"})

        response = staff_client.put(
            "/api/v1/vimeo-password", json={"videoUrl": "https://vimeo.com/event/999"}
        )

        assert response.status_code == 200
        assert response.json()["password"]["videoUrl"] == "https://vimeo.com/event/999"

    def test_update_without_active_password(self, staff_client):
        response = staff_client.put("/api/v1/vimeo-password", json={"videoUrl": "https://vimeo.com/1"})
        assert response.status_code == 404


@pytest.mark.integration
class TestRotationSchedule:

    def test_default_schedule(self, staff_client):
        schedule = staff_client.get("/api/v1/rotation-schedule").json()["schedule"]
        assert schedule["day_of_week"] == 0
        assert schedule["dayName"] == "Sunday"
        assert schedule["formattedTime"] == "08:00:00"
        assert schedule["enabled"] is False

    def test_update_and_run(self, staff_client, db_session):
        staff_client.post("/api/v1/vimeo-password", json={"videoId": "123456"})

        updated = staff_client.put(
            "/api/v1/rotation-schedule", json={"dayOfWeek": 6, "timeOfDay": "19:30", "enabled": True}
        )
        assert updated.json()["schedule"]["dayName"] == "Saturday"
        assert updated.json()["schedule"]["formattedTime"] == "19:30:00"

        run = staff_client.post("/api/v1/rotation-schedule/run")
        assert run.json()["rotated"] is True

        rows = db_session.query(VimeoPassword).order_by(VimeoPassword.id).all()
        assert [row.rotation_type for row in rows] == ["manual", "scheduled"]
        assert [row.active for row in rows] == [False, True]

    def test_invalid_day(self, staff_client):
        response = staff_client.put("/api/v1/rotation-schedule", json={"dayOfWeek": 7})
        assert response.status_code == 400
        assert response.json() == {"error": "dayOfWeek must be 0-6 (Sunday-Saturday)"}

    def test_disabled_schedule_does_nothing(self, staff_client):
        run = staff_client.post("/api/v1/rotation-schedule/run")
        assert run.json() == {"success": True, "rotated": False, "message": "Scheduled rotation is disabled"}
