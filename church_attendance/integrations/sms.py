"""
SMS delivery through the Twilio REST API.

Degrades gracefully when credentials are missing: ``configured`` is False and
``send`` raises :class:`ProviderNotConfigured`, which callers on a best-effort
path turn into an ``smsError`` or a ``skipped`` tally.
"""
from typing import Optional

import httpx

from church_attendance.core.config import Settings
from church_attendance.core.exceptions import ProviderError, ProviderNotConfigured
from church_attendance.core.logging_config import get_logger
from church_attendance.core.sanitization import digits_only, mask_phone

logger = get_logger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


def format_phone(phone: Optional[str]) -> Optional[str]:
    """
    Format a stored phone number as E.164 for Twilio.

    10 digits get the North American ``+1`` prefix; anything else is
    prefixed with ``+`` as-is. Returns None when there are no digits.
    """
    cleaned = digits_only(phone)
    if not cleaned:
        return None
    if len(cleaned) == 10:
        return "+1" + cleaned
    return "+" + cleaned


class SmsSender:
    """Thin wrapper around Twilio's Messages resource."""

    provider = "twilio"

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmsSender":
        return cls(
            settings.TWILIO_ACCOUNT_SID,
            settings.TWILIO_AUTH_TOKEN,
            settings.TWILIO_PHONE_NUMBER,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def send(self, to: str, body: str) -> str:
        """Send one message and return the Twilio message SID."""
        if not self.configured:
            raise ProviderNotConfigured("SMS service not configured", provider=self.provider)

        phone_number = format_phone(to)
        if not phone_number:
            raise ProviderError("Invalid phone number", provider=self.provider)

        masked = mask_phone(phone_number)
        url = f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    url,
                    data={"To": phone_number, "From": self.from_number, "Body": body},
                    auth=(self.account_sid, self.auth_token),
                )
        except httpx.HTTPError as exc:
            logger.error("sms_send_failed", to=masked, error=str(exc))
            raise ProviderError(f"SMS request failed: {exc}", provider=self.provider)

        if response.status_code >= 300:
            logger.error("sms_send_failed", to=masked, status_code=response.status_code)
            raise ProviderError(
                f"Twilio error: {response.status_code} - {response.text}",
                provider=self.provider,
            )

        # Twilio accepted the message; an unreadable body only loses the sid
        try:
            payload = response.json()
        except ValueError:
            payload = None
        sid = payload.get("sid", "") if isinstance(payload, dict) else ""
        logger.info("sms_sent", to=masked, sid=sid)
        return sid
