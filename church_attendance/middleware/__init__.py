"""HTTP middleware."""
from church_attendance.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
