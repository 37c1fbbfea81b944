"""Outbound provider clients (SMS, email, video hosting)."""
from church_attendance.integrations.sms import SmsSender, format_phone
from church_attendance.integrations.email import EmailSender
from church_attendance.integrations.vimeo import VimeoClient

__all__ = ["SmsSender", "EmailSender", "VimeoClient", "format_phone"]
