"""
Scheduled livestream password rotation.

Run from cron at the slot configured in the rotation schedule:

    python -m church_attendance.jobs.rotate_password
"""
import sys

from church_attendance.api.deps import get_vimeo_client
from church_attendance.core.config import settings
from church_attendance.core.exceptions import AppError
from church_attendance.core.logging_config import get_logger, setup_logging
from church_attendance.db import Database
from church_attendance.services.schedule import run_scheduled_rotation

logger = get_logger(__name__)


def main(database: Database = None) -> int:
    database = database or Database.from_settings(settings)
    if database is None:
        logger.error("scheduled_rotation_failed", error="Database not configured")
        return 1

    try:
        with database.session_scope() as db:
            result = run_scheduled_rotation(db, get_vimeo_client())
    except AppError as e:
        logger.error("scheduled_rotation_failed", error=e.message)
        return 1

    logger.info("scheduled_rotation_result", rotated=result["rotated"], message=result["message"])
    return 0


if __name__ == "__main__":
    setup_logging(level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    sys.exit(main())
