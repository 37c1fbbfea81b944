"""Main API router for v1."""
from fastapi import APIRouter

from church_attendance.api.v1.endpoints import (
    absences,
    attendance,
    auth,
    livestream,
    members,
    notifications,
    reports,
    stream,
    users,
)

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(members.router, tags=["Members"])
api_router.include_router(attendance.router, tags=["Attendance"])
api_router.include_router(absences.router, tags=["Absences"])
api_router.include_router(reports.router, tags=["Reports"])
api_router.include_router(stream.router, tags=["Livestream Access"])
api_router.include_router(livestream.router, tags=["Livestream"])
api_router.include_router(notifications.router, tags=["Notifications"])
api_router.include_router(users.router, tags=["Users"])
