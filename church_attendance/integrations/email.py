"""Transactional email through the MailerSend REST API."""
from typing import Optional

import httpx

from church_attendance.core.config import Settings
from church_attendance.core.exceptions import ProviderError, ProviderNotConfigured
from church_attendance.core.logging_config import get_logger

logger = get_logger(__name__)

MAILERSEND_API_URL = "https://api.mailersend.com/v1/email"


class EmailSender:
    provider = "mailersend"

    def __init__(
        self,
        api_key: Optional[str],
        from_address: str,
        from_name: str,
        allowed_domain: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.from_address = from_address
        self.from_name = from_name
        self.allowed_domain = allowed_domain
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailSender":
        return cls(
            settings.MAILERSEND_API_KEY,
            settings.EMAIL_FROM_ADDRESS,
            settings.EMAIL_FROM_NAME,
            allowed_domain=settings.EMAIL_ALLOWED_DOMAIN,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def resolve_sender(self, from_email: Optional[str]) -> str:
        """Only addresses on the church's verified domain may be used as sender."""
        if from_email and self.allowed_domain and from_email.endswith("@" + self.allowed_domain):
            return from_email
        return self.from_address

    def send(self, to: str, subject: str, html: str, from_email: Optional[str] = None) -> None:
        if not self.configured:
            raise ProviderNotConfigured("Email service not configured", provider=self.provider)

        payload = {
            "from": {"email": self.resolve_sender(from_email), "name": self.from_name},
            "to": [{"email": to}],
            "subject": subject,
            "html": html,
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    MAILERSEND_API_URL,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as exc:
            logger.error("email_send_failed", to=to, error=str(exc))
            raise ProviderError(f"Email request failed: {exc}", provider=self.provider)

        if response.status_code >= 300:
            logger.error("email_send_failed", to=to, status_code=response.status_code)
            raise ProviderError(
                f"MailerSend error: {response.status_code} - {response.text}",
                provider=self.provider,
            )

        logger.info("email_sent", to=to, subject=subject)
