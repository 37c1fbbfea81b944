"""Shared API dependencies."""
from zoneinfo import ZoneInfo

from church_attendance.core import config
from church_attendance.core.security import verify_staff_token
from church_attendance.db import get_db
from church_attendance.integrations import EmailSender, SmsSender, VimeoClient

# Timezone configuration
TIMEZONE = ZoneInfo(config.settings.TIMEZONE)


def get_sms_sender() -> SmsSender:
    return SmsSender.from_settings(config.settings)


def get_email_sender() -> EmailSender:
    return EmailSender.from_settings(config.settings)


def get_vimeo_client() -> VimeoClient:
    return VimeoClient.from_settings(config.settings)


__all__ = [
    "get_db",
    "verify_staff_token",
    "get_sms_sender",
    "get_email_sender",
    "get_vimeo_client",
    "TIMEZONE",
]
