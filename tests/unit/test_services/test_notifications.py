"""Unit tests for broadcasts, absentee follow-ups and emailed reports."""
import json
import pytest
from datetime import date, datetime, timezone
from urllib.parse import parse_qs

from church_attendance.core import config
from church_attendance.core.exceptions import ProviderNotConfigured
from church_attendance.services import notifications as notification_service
from church_attendance.services.attendance import record_attendance
from church_attendance.services.reports import build_absentee_report
from tests.utils import make_checkin, make_member


@pytest.fixture
def congregation(db_session):
    make_member(db_session, "m1", "Ruth", "Moab", phone="5551234567", email="ruth@example.com")
    make_member(db_session, "m2", "Boaz", "Judah", phone="5552223333")
    make_member(db_session, "m3", "Naomi", "Elimelech", email="naomi@example.com")
    make_member(db_session, "m4", "Obed", "Boaz")
    make_member(db_session, "m5", "Orpah", "Moab", phone="5554445555", status="Inactive")
    return db_session


@pytest.mark.unit
class TestBroadcast:

    def test_both_channels(self, congregation, sms, email, provider_log):
        result = notification_service.broadcast(congregation, sms, email, "Snow day, no service", "both")

        assert result["totalMembers"] == 4
        assert result["emailSent"] == 2
        assert result["smsSent"] == 2
        assert result["skipped"] == 1
        recipients = sorted(parse_qs(r.content.decode())["To"][0] for r in provider_log.to("api.twilio.com"))
        assert recipients == ["+15551234567", "+15552223333"]

    def test_selected_members_only(self, congregation, sms, email, provider_log):
        result = notification_service.broadcast(congregation, sms, email, "Hello", "email", member_ids=["m1"])

        assert result["totalMembers"] == 1
        assert result["emailSent"] == 1
        assert provider_log.to("api.twilio.com") == []

    def test_failures_do_not_stop_the_batch(self, congregation, sms, email, provider_log):
        provider_log.failing_hosts.add("api.twilio.com")

        result = notification_service.broadcast(congregation, sms, email, "Hello", "both")

        assert result["smsFailed"] == 2
        assert result["emailSent"] == 2

    def test_subject_and_sender(self, congregation, sms, email, provider_log):
        notification_service.broadcast(
            congregation, sms, email, "Hello", "email", subject="Picnic", from_email="pastor@nlpc.net"
        )
        payload = json.loads(provider_log.to("api.mailersend.com")[0].content)
        assert payload["subject"] == "Picnic"
        assert payload["from"]["email"] == "pastor@nlpc.net"

    def test_unconfigured_channels_are_skipped(self, congregation, unconfigured_sms, unconfigured_email):
        result = notification_service.broadcast(congregation, unconfigured_sms, unconfigured_email, "Hello", "both")
        assert result["emailSent"] == 0
        assert result["emailFailed"] == 0
        assert result["smsSent"] == 0


@pytest.mark.unit
class TestNotifyAbsentees:

    def test_absentees_are_members_not_present(self, congregation, sms, email, provider_log):
        record_attendance(congregation, "2024-05-05", "Sunday Morning", ["m1", "m4"])

        result = notification_service.notify_absentees(
            congregation, sms, email, date(2024, 5, 5), "Sunday Morning", "sms"
        )

        assert result["totalAbsentees"] == 2
        [request] = provider_log.to("api.twilio.com")
        body = parse_qs(request.content.decode())["Body"][0]
        assert body.startswith("Hi Boaz, We missed you at Sunday Morning on Sunday, May 5.")

    def test_custom_message_and_explicit_members(self, congregation, sms, email, provider_log):
        result = notification_service.notify_absentees(
            congregation, sms, email, date(2024, 5, 5), "Sunday Morning", "email",
            message="Call the office", member_ids=["m3"],
        )

        assert result["totalAbsentees"] == 1
        assert result["emailSent"] == 1
        assert "Call the office" in json.loads(provider_log.to("api.mailersend.com")[0].content)["html"]


@pytest.mark.unit
class TestEmailedReports:

    def test_service_report(self, congregation, email, provider_log):
        record_attendance(congregation, "2024-05-05", "Sunday Morning", ["m1"])

        result = notification_service.send_service_report(congregation, email, date(2024, 5, 5), "Sunday Morning")

        assert result == {"message": f"Report sent to {config.settings.PASTOR_EMAIL}", "present": 1, "absent": 3}
        payload = json.loads(provider_log.to("api.mailersend.com")[0].content)
        assert payload["subject"] == "Attendance Report: Sunday Morning - Sunday, May 5, 2024"
        assert "Ruth Moab" in payload["html"]

    def test_service_report_timestamp_uses_church_timezone(self, congregation, email, provider_log, monkeypatch):
        monkeypatch.setattr(config.settings, "TIMEZONE", "America/Chicago")
        monkeypatch.setattr(notification_service, "utcnow", lambda: datetime(2024, 5, 6, 2, 30, tzinfo=timezone.utc))

        notification_service.send_service_report(congregation, email, date(2024, 5, 5), "Sunday Morning")

        payload = json.loads(provider_log.to("api.mailersend.com")[0].content)
        assert "Generated 2024-05-05 21:30" in payload["html"]

    def test_service_report_requires_email(self, congregation, unconfigured_email):
        with pytest.raises(ProviderNotConfigured) as exc_info:
            notification_service.send_service_report(congregation, unconfigured_email, date(2024, 5, 5), "Sunday Morning")
        assert exc_info.value.status_code == 503

    def test_absentee_report_email_escapes_names(self, db_session, email, provider_log):
        make_checkin(db_session, "<b>Ruth</b>", None, date(2024, 5, 5), prayer_request="Healing & peace")
        report = build_absentee_report(db_session, date(2024, 5, 5), date(2024, 5, 11))

        notification_service.email_absentee_report(email, report, "pastor@nlpc.net")

        payload = json.loads(provider_log.to("api.mailersend.com")[0].content)
        assert payload["to"] == [{"email": "pastor@nlpc.net"}]
        assert "&lt;b&gt;Ruth&lt;/b&gt;" in payload["html"]
        assert "Healing &amp; peace" in payload["html"]
