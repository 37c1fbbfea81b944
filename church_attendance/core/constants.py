"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""
from datetime import time

# Absence Reasons
# Reasons a member can give when checking in as absent
ABSENCE_REASONS = ("sick", "vacation", "business", "other")

REASON_LABELS = {
    "sick": "Sick / Prayer Request",
    "vacation": "Vacation",
    "business": "Business Travel",
    "other": "Other",
}

# Member Status
MEMBER_STATUS_ACTIVE = "Active"

# Stream Access Codes
# Upper-case letters and digits without the look-alikes 0, O, I, 1 and L
ACCESS_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
ACCESS_CODE_LENGTH = 6
ACCESS_CODE_TTL_HOURS = 24
ACCESS_CODE_MAX_ATTEMPTS = 10

# Livestream Passwords
STREAM_PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789"
STREAM_PASSWORD_LENGTH = 8

ROTATION_MANUAL = "manual"
ROTATION_SCHEDULED = "scheduled"
ROTATION_TYPES = (ROTATION_MANUAL, ROTATION_SCHEDULED)

# Rotation Schedule
# 0 = Sunday, matching the admin UI
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
DEFAULT_ROTATION_DAY = 0
DEFAULT_ROTATION_TIME = time(8, 0)
SCHEDULE_ROW_ID = 1

# Notification Methods
NOTIFY_METHODS = ("email", "sms", "both")

# Users
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

# JWT Token Configuration
# Token expiration time in minutes (12 hours, one Sunday)
ACCESS_TOKEN_EXPIRE_MINUTES = 720
STAFF_COOKIE_NAME = "staff_token"
