"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import MemberStatus, OfficerPosition

MEETING_FINE_AMOUNT = 500
# A meeting fine fires on every Nth consecutive absence.
MEETING_FINE_EVERY = 3

DEFAULT_FUNERAL_WORK_FINE = 1000
DEFAULT_CEMETERY_WORK_FINE = 1000
DEFAULT_FUNERAL_ATTENDANCE_FINE = 100
DEFAULT_COMMON_WORK_FINE = 500

DEFAULT_SETTINGS_CACHE_TTL_SECONDS = 300

# Cemetery assignment slot used to continue the duty rotation.
ROTATION_ASSIGNMENT_SLOTS = 15
RECENT_FUNERALS_SCAN_LIMIT = 50

ATTENDANCE_EXEMPT_STATUSES = frozenset({MemberStatus.FREE, MemberStatus.ATTENDANCE_FREE})

# Auditor is deliberately absent: auditors are fined for funeral absence.
FUNERAL_EXEMPT_POSITIONS = (
    OfficerPosition.CHAIRMAN,
    OfficerPosition.SECRETARY,
    OfficerPosition.VICE_CHAIRMAN,
    OfficerPosition.VICE_SECRETARY,
    OfficerPosition.TREASURER,
    OfficerPosition.LOAN_TREASURER,
    OfficerPosition.SPEAKER_HANDLER,
)

COMMON_WORK_EXEMPT_ROLES = frozenset(
    {"chairman", "secretary", "treasurer", "loan-treasurer", "vice-secretary", "vice-chairman"}
)
COMMON_WORK_EXEMPT_STATUSES = frozenset({MemberStatus.FREE})

# Members never expected at communal work (not on the roster at all).
COMMON_WORK_ROSTER_EXCLUDED_ROLES = COMMON_WORK_EXEMPT_ROLES | {"auditor"}
