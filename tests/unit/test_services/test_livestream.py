"""Unit tests for livestream password rotation and its schedule."""
import json
import pytest
from datetime import datetime, time, timezone

from church_attendance.core import config
from church_attendance.core.exceptions import NotFoundError, ValidationError
from church_attendance.db.models import PasswordRotationSchedule, VimeoPassword
from church_attendance.services import livestream as livestream_service
from church_attendance.services import schedule as schedule_service
from tests.utils import make_stream_password


def _active_rows(db_session):
    return db_session.query(VimeoPassword).filter(VimeoPassword.active.is_(True)).all()


@pytest.mark.unit
class TestRotatePassword:

    def test_rotate_pushes_to_vimeo_and_saves(self, db_session, vimeo, provider_log):
        result = livestream_service.rotate_password(db_session, vimeo, video_id="123456", password="Hq7mT2xa")

        assert result["success"] is True
        assert result["vimeoUpdated"] is True
        assert result["vimeoError"] is None
        assert result["password"]["password"] == "Hq7mT2xa"
        [request] = provider_log.to("api.vimeo.com")
        assert json.loads(request.content)["password"] == "Hq7mT2xa"

    def test_rotating_twice_leaves_one_active(self, db_session, vimeo):
        livestream_service.rotate_password(db_session, vimeo, video_id="123456")
        second = livestream_service.rotate_password(db_session, vimeo, video_id="123456")

        active = _active_rows(db_session)
        assert len(active) == 1
        assert active[0].password == second["password"]["password"]
        assert db_session.query(VimeoPassword).count() == 2

    def test_generated_password(self, db_session, vimeo):
        result = livestream_service.rotate_password(db_session, vimeo, video_id="123456")
        assert len(result["password"]["password"]) == 8

    def test_vimeo_failure_still_saves_locally(self, db_session, vimeo, provider_log):
        provider_log.failing_hosts.add("api.vimeo.com")

        result = livestream_service.rotate_password(db_session, vimeo, video_id="123456", password="Hq7mT2xa")

        assert result["vimeoUpdated"] is False
        assert "Vimeo API error" in result["vimeoError"]
        assert result["message"] == "Password saved locally (Vimeo update pending)"
        assert _active_rows(db_session)[0].password == "Hq7mT2xa"

    def test_vimeo_not_configured(self, db_session, unconfigured_vimeo):
        result = livestream_service.rotate_password(db_session, unconfigured_vimeo, video_id="123456")

        assert result["vimeoUpdated"] is False
        assert result["vimeoError"] == "VIMEO_ACCESS_TOKEN not configured - password saved locally only"
        assert len(_active_rows(db_session)) == 1

    def test_video_id_required(self, db_session, vimeo, monkeypatch):
        monkeypatch.setattr(config.settings, "VIMEO_VIDEO_ID", None)
        with pytest.raises(ValidationError, match="Video ID is required"):
            livestream_service.rotate_password(db_session, vimeo)

    def test_video_id_falls_back_to_settings(self, db_session, vimeo, monkeypatch):
        monkeypatch.setattr(config.settings, "VIMEO_VIDEO_ID", "987654")

        result = livestream_service.rotate_password(db_session, vimeo)

        assert result["password"]["videoId"] == "987654"
        assert result["password"]["videoUrl"] == "https://vimeo.com/event/987654"


@pytest.mark.unit
class TestUpdateActivePassword:

    def test_update_url_and_expiry(self, db_session):
        make_stream_password(db_session)
        expires = datetime(2024, 5, 6, 4, 0, tzinfo=timezone.utc)

        row = livestream_service.update_active_password(
            db_session, {"video_url": "https://vimeo.com/event/1", "expires_at": expires}
        )

        assert row.video_url == "https://vimeo.com/event/1"
        assert row.expires_at is not None

    def test_nothing_to_update(self, db_session):
        make_stream_password(db_session)
        with pytest.raises(ValidationError, match="No updates provided"):
            livestream_service.update_active_password(db_session, {})

    def test_no_active_password(self, db_session):
        with pytest.raises(NotFoundError, match="No active password found to update"):
            livestream_service.update_active_password(db_session, {"video_url": "https://vimeo.com/1"})


@pytest.mark.unit
class TestRotationSchedule:

    def test_default_schedule_is_created(self, db_session):
        schedule = schedule_service.get_schedule(db_session)

        assert schedule.day_of_week == 0
        assert schedule.time_of_day == time(8, 0)
        assert schedule.enabled is False
        assert db_session.query(PasswordRotationSchedule).count() == 1

        data = schedule_service.serialize_schedule(schedule)
        assert data["dayName"] == "Sunday"
        assert data["formattedTime"] == "08:00:00"

    def test_get_schedule_is_a_singleton(self, db_session):
        schedule_service.get_schedule(db_session)
        schedule_service.get_schedule(db_session)
        assert db_session.query(PasswordRotationSchedule).count() == 1

    def test_update_schedule(self, db_session):
        schedule = schedule_service.update_schedule(db_session, day_of_week=6, time_of_day=time(21, 30), enabled=True)

        assert schedule.day_of_week == 6
        assert schedule.time_of_day == time(21, 30)
        assert schedule.enabled is True

    @pytest.mark.parametrize("day", [-1, 7])
    def test_invalid_day(self, db_session, day):
        with pytest.raises(ValidationError, match="dayOfWeek must be 0-6"):
            schedule_service.update_schedule(db_session, day_of_week=day)

    def test_update_requires_a_change(self, db_session):
        with pytest.raises(ValidationError, match="No updates provided"):
            schedule_service.update_schedule(db_session)

    def test_run_when_disabled_does_nothing(self, db_session, vimeo, provider_log):
        result = schedule_service.run_scheduled_rotation(db_session, vimeo)

        assert result == {"success": True, "rotated": False, "message": "Scheduled rotation is disabled"}
        assert provider_log.requests == []
        assert _active_rows(db_session) == []

    def test_run_rotates_current_video(self, db_session, vimeo):
        make_stream_password(db_session, video_id="555", password="OldPass1")
        schedule_service.update_schedule(db_session, enabled=True)
        run_at = datetime(2024, 5, 5, 12, 0, tzinfo=timezone.utc)

        result = schedule_service.run_scheduled_rotation(db_session, vimeo, now=run_at)

        assert result["rotated"] is True
        assert result["vimeoUpdated"] is True
        [active] = _active_rows(db_session)
        assert active.video_id == "555"
        assert active.password != "OldPass1"
        assert active.rotation_type == "scheduled"
        assert schedule_service.get_schedule(db_session).last_run is not None

    def test_run_without_any_video(self, db_session, vimeo, monkeypatch):
        monkeypatch.setattr(config.settings, "VIMEO_VIDEO_ID", None)
        schedule_service.update_schedule(db_session, enabled=True)

        with pytest.raises(ValidationError, match="No video ID configured"):
            schedule_service.run_scheduled_rotation(db_session, vimeo)
