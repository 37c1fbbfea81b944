from .absences import delete_absentee, record_manual_absence, submit_absence
from .access_codes import (
    issue_access_code,
    list_access_codes,
    revoke_access_code,
    validate_access_code,
)
from .attendance import (
    RecordResult,
    get_attendance,
    get_attendance_members,
    record_attendance,
)
from .livestream import get_active_password, rotate_password, update_active_password
from .members import (
    create_member,
    delete_member,
    find_member_by_phone,
    get_member,
    import_members,
    list_members,
    update_member,
)
from .notifications import broadcast, email_absentee_report, notify_absentees, send_service_report
from .reports import absentee_dashboard, build_absentee_report, compute_member_absences
from .schedule import get_schedule, run_scheduled_rotation, update_schedule
from .users import (
    authenticate,
    check_setup,
    create_user,
    delete_user,
    list_users,
    setup_first_admin,
    update_user,
)

__all__ = [
    # absences
    "submit_absence",
    "record_manual_absence",
    "delete_absentee",
    # access codes
    "issue_access_code",
    "validate_access_code",
    "revoke_access_code",
    "list_access_codes",
    # attendance
    "RecordResult",
    "record_attendance",
    "get_attendance",
    "get_attendance_members",
    # livestream
    "get_active_password",
    "rotate_password",
    "update_active_password",
    # members
    "list_members",
    "get_member",
    "create_member",
    "update_member",
    "delete_member",
    "import_members",
    "find_member_by_phone",
    # notifications
    "broadcast",
    "notify_absentees",
    "send_service_report",
    "email_absentee_report",
    # reports
    "compute_member_absences",
    "absentee_dashboard",
    "build_absentee_report",
    # schedule
    "get_schedule",
    "update_schedule",
    "run_scheduled_rotation",
    # users
    "check_setup",
    "setup_first_admin",
    "authenticate",
    "list_users",
    "create_user",
    "update_user",
    "delete_user",
]
