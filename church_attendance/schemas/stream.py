"""Stream access code schemas."""
from typing import Optional

from pydantic import BaseModel


class StreamCodeVerifyRequest(BaseModel):
    # Validated in the endpoint so a malformed code still answers {"valid": false}
    code: Optional[str] = None
