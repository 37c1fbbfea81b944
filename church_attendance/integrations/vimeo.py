"""Vimeo REST client used to change the livestream's view password."""
from typing import Optional

import httpx

from church_attendance.core.config import Settings
from church_attendance.core.exceptions import ProviderError, ProviderNotConfigured
from church_attendance.core.logging_config import get_logger

logger = get_logger(__name__)

VIMEO_API_BASE = "https://api.vimeo.com"


class VimeoClient:
    provider = "vimeo"

    def __init__(
        self,
        access_token: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.access_token = access_token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "VimeoClient":
        return cls(settings.VIMEO_ACCESS_TOKEN, timeout=settings.PROVIDER_TIMEOUT_SECONDS)

    @property
    def configured(self) -> bool:
        return bool(self.access_token)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if not self.configured:
            raise ProviderNotConfigured("VIMEO_ACCESS_TOKEN not configured", provider=self.provider)

        try:
            with httpx.Client(
                base_url=VIMEO_API_BASE, timeout=self.timeout, transport=self._transport
            ) as client:
                response = client.request(
                    method,
                    path,
                    headers={
                        "Authorization": f"Bearer {self.access_token}",
                        "Accept": "application/vnd.vimeo.*+json;version=3.4",
                    },
                    **kwargs,
                )
        except httpx.HTTPError as exc:
            raise ProviderError(f"Vimeo request failed: {exc}", provider=self.provider)

        if response.status_code >= 300:
            raise ProviderError(
                f"Vimeo API error: {response.status_code} - {response.text}",
                provider=self.provider,
            )
        return response

    def set_video_password(self, video_id: str, password: str) -> None:
        """Put the video behind a password and set that password."""
        self._request(
            "PATCH",
            f"/videos/{video_id}",
            json={"privacy": {"view": "password"}, "password": password},
        )
        logger.info("vimeo_password_updated", video_id=video_id)
