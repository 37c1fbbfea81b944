"""Rate limiting configuration."""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address


def get_client_ip(request):
    """Get client IP for rate limiting, considering proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


# Uses Redis if REDIS_URL is set, falls back to memory for local dev
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["200/minute"],
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    strategy="fixed-window"
)

# Public endpoints are reachable without a staff session, so they get the
# tight limits. A Sunday morning rush of check-ins from the church WiFi all
# shares one NAT address.
RATE_LIMITS = {
    "absence": "30/minute",
    "verify_code": "20/minute",
    "auth": "10/minute",

    # Staff endpoints
    "staff_read": "200/minute",
    "staff_write": "100/minute",
}
