"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import TimesheetStatus

# Owner may bulk-edit entries only before or after a review cycle.
EDITABLE_STATUSES = frozenset({TimesheetStatus.DRAFT, TimesheetStatus.REJECTED})

# Approvers may act (approve/reject/modify hours) only mid-review.
REVIEWABLE_STATUSES = frozenset({TimesheetStatus.SUBMITTED, TimesheetStatus.APPROVED_BY_TEAM_LEAD})

IMPERSONATION_HEADER = "X-Mock-User"
PRINCIPAL_HEADER = "X-User-Id"
SYNTHESIZED_EMAIL_DOMAIN = "example.com"

MAX_HOURS_PER_ENTRY = 24
DEFAULT_HISTORY_PAGE_SIZE = 100
DEFAULT_APPROVABLE_LIMIT = 500
