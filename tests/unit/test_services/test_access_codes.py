"""Unit tests for livestream access codes."""
import pytest
from datetime import datetime, timedelta, timezone
from itertools import chain, repeat

from church_attendance.core import config
from church_attendance.core.exceptions import (
    AccessCodeExpired,
    AccessCodeNotFound,
    AccessCodeRevoked,
    InternalError,
    NoActiveStreamError,
)
from church_attendance.core.utils import to_utc
from church_attendance.db.models import StreamAccessCode, VimeoPassword
from church_attendance.services import access_codes as access_code_service
from tests.utils import make_stream_password

ISSUED_AT = datetime(2024, 5, 5, 13, 0, tzinfo=timezone.utc)


def _factory(*codes):
    """Code factory returning ``codes`` in order, then the last one forever."""
    return chain(codes, repeat(codes[-1])).__next__


@pytest.fixture
def stream(db_session):
    return make_stream_password(db_session)


@pytest.mark.unit
class TestIssueAccessCode:

    def test_issue_sets_expiry(self, db_session, stream):
        row = access_code_service.issue_access_code(db_session, "Ruth Moab", "5551234567", now=ISSUED_AT)

        assert len(row.code) == 6
        assert row.use_count == 0
        assert row.revoked is False
        assert to_utc(row.expires_at) == ISSUED_AT + timedelta(hours=24)

    def test_issue_without_active_stream(self, db_session):
        with pytest.raises(NoActiveStreamError):
            access_code_service.issue_access_code(db_session, "Ruth Moab", "5551234567")

    def test_collision_draws_a_new_code(self, db_session, stream):
        access_code_service.issue_access_code(db_session, "Boaz", None, code_factory=_factory("AAAAAA"))

        row = access_code_service.issue_access_code(
            db_session, "Ruth", None, code_factory=_factory("AAAAAA", "AAAAAA", "BBBBBB")
        )

        assert row.code == "BBBBBB"
        assert db_session.query(StreamAccessCode).count() == 2

    def test_gives_up_after_max_attempts(self, db_session, stream, monkeypatch):
        monkeypatch.setattr(config.settings, "ACCESS_CODE_MAX_ATTEMPTS", 3)
        access_code_service.issue_access_code(db_session, "Boaz", None, code_factory=_factory("AAAAAA"))

        with pytest.raises(InternalError, match="Failed to generate a unique access code"):
            access_code_service.issue_access_code(db_session, "Ruth", None, code_factory=_factory("AAAAAA"))

        assert db_session.query(StreamAccessCode).count() == 1


@pytest.mark.unit
class TestValidateAccessCode:

    def test_valid_code_returns_stream(self, db_session, stream):
        row = access_code_service.issue_access_code(db_session, "Ruth Moab", None, now=ISSUED_AT)

        result = access_code_service.validate_access_code(db_session, row.code, now=ISSUED_AT + timedelta(hours=1))

        assert result["valid"] is True
        assert result["memberName"] == "Ruth Moab"
        assert result["videoId"] == "123456"
        assert result["password"] == "Hq7mT2xa"

    def test_lookup_is_case_insensitive(self, db_session, stream):
        access_code_service.issue_access_code(db_session, "Ruth", None, now=ISSUED_AT, code_factory=_factory("K7P2QX"))
        result = access_code_service.validate_access_code(db_session, "k7p2qx", now=ISSUED_AT)
        assert result["valid"] is True

    def test_every_use_is_counted(self, db_session, stream):
        row = access_code_service.issue_access_code(db_session, "Ruth", None, now=ISSUED_AT)
        times = [ISSUED_AT + timedelta(hours=h) for h in (1, 2, 3)]

        for moment in times:
            access_code_service.validate_access_code(db_session, row.code, now=moment)

        db_session.refresh(row)
        assert row.use_count == 3
        assert to_utc(row.first_used_at) == times[0]
        assert to_utc(row.last_used_at) == times[-1]

    def test_unknown_code(self, db_session, stream):
        with pytest.raises(AccessCodeNotFound) as exc_info:
            access_code_service.validate_access_code(db_session, "ZZZZZZ")
        assert exc_info.value.to_dict()["valid"] is False

    def test_expired_code(self, db_session, stream):
        row = access_code_service.issue_access_code(db_session, "Ruth", None, now=ISSUED_AT)

        with pytest.raises(AccessCodeExpired) as exc_info:
            access_code_service.validate_access_code(db_session, row.code, now=ISSUED_AT + timedelta(hours=25))
        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {"valid": False, "expired": True}

    def test_revoked_code(self, db_session, stream):
        row = access_code_service.issue_access_code(db_session, "Ruth", None, now=ISSUED_AT)
        access_code_service.revoke_access_code(db_session, row.code, notes="Shared publicly")

        with pytest.raises(AccessCodeRevoked):
            access_code_service.validate_access_code(db_session, row.code, now=ISSUED_AT)

    def test_revocation_is_checked_before_expiry(self, db_session, stream):
        row = access_code_service.issue_access_code(db_session, "Ruth", None, now=ISSUED_AT)
        access_code_service.revoke_access_code(db_session, row.code)

        with pytest.raises(AccessCodeRevoked):
            access_code_service.validate_access_code(db_session, row.code, now=ISSUED_AT + timedelta(days=3))

    def test_no_active_stream(self, db_session, stream):
        row = access_code_service.issue_access_code(db_session, "Ruth", None, now=ISSUED_AT)
        db_session.query(VimeoPassword).update({VimeoPassword.active: False})
        db_session.commit()

        with pytest.raises(NoActiveStreamError) as exc_info:
            access_code_service.validate_access_code(db_session, row.code, now=ISSUED_AT)
        assert exc_info.value.details == {"valid": False}

    def test_failed_validation_does_not_count(self, db_session, stream):
        row = access_code_service.issue_access_code(db_session, "Ruth", None, now=ISSUED_AT)
        with pytest.raises(AccessCodeExpired):
            access_code_service.validate_access_code(db_session, row.code, now=ISSUED_AT + timedelta(days=2))

        db_session.refresh(row)
        assert row.use_count == 0
        assert row.first_used_at is None


@pytest.mark.unit
class TestRevokeAndList:

    def test_revoke_unknown_code(self, db_session):
        with pytest.raises(AccessCodeNotFound):
            access_code_service.revoke_access_code(db_session, "ZZZZZZ")

    def test_revoke_records_time_and_notes(self, db_session, stream):
        row = access_code_service.issue_access_code(db_session, "Ruth", None)
        revoked = access_code_service.revoke_access_code(db_session, row.code, notes="Shared publicly")

        assert revoked.revoked is True
        assert revoked.revoked_at is not None
        assert revoked.notes == "Shared publicly"

    def test_list_active_only(self, db_session, stream):
        now = datetime.now(timezone.utc)
        fresh = access_code_service.issue_access_code(db_session, "Ruth", None, now=now)
        access_code_service.issue_access_code(db_session, "Boaz", None, now=now - timedelta(days=2))
        revoked = access_code_service.issue_access_code(db_session, "Naomi", None, now=now)
        access_code_service.revoke_access_code(db_session, revoked.code)

        active = access_code_service.list_access_codes(db_session, active_only=True, now=now)
        assert [r.code for r in active] == [fresh.code]
        assert len(access_code_service.list_access_codes(db_session)) == 3
