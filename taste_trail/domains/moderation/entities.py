from datetime import datetime
from enum import Enum
from typing import Optional


class ReportType(str, Enum):
    REVIEW = "REVIEW"
    RESTAURANT = "RESTAURANT"
    USER = "USER"
    COMMENT = "COMMENT"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    INVESTIGATING = "INVESTIGATING"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


class ModerationActionType(str, Enum):
    WARNING = "WARNING"
    TEMPORARY_BAN = "TEMPORARY_BAN"
    PERMANENT_BAN = "PERMANENT_BAN"
    CONTENT_REMOVAL = "CONTENT_REMOVAL"
    ACCOUNT_REINSTATEMENT = "ACCOUNT_REINSTATEMENT"


class ModerationCommand(str, Enum):
    BAN = "ban"
    TEMPBAN = "tempban"
    WARN = "warn"
    PROMOTE = "promote"
    VERIFY = "verify"


class ResolutionAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


BAN_ACTIONS = (ModerationActionType.PERMANENT_BAN, ModerationActionType.TEMPORARY_BAN)

# Status moves allowed through the status endpoint; resolution has its own route
STATUS_TRANSITIONS = {
    ReportStatus.PENDING: {ReportStatus.INVESTIGATING},
    ReportStatus.INVESTIGATING: {ReportStatus.PENDING},
}

REASON_SEVERITY = {
    "Spam": 2,
    "Harassment": 4,
    "Inappropriate Content": 3,
    "Fake Information": 4,
    "Copyright Violation": 3,
    "Violence": 5,
    "Hate Speech": 5,
    "Nudity": 4,
    "Other": 1,
}

REASON_ACTION = {
    "Harassment": ModerationActionType.CONTENT_REMOVAL,
    "Hate Speech": ModerationActionType.CONTENT_REMOVAL,
    "Violence": ModerationActionType.CONTENT_REMOVAL,
    "Fake Information": ModerationActionType.CONTENT_REMOVAL,
    "Spam": ModerationActionType.WARNING,
    "Inappropriate Content": ModerationActionType.WARNING,
}

HIDEABLE_TYPES = (ReportType.REVIEW, ReportType.COMMENT)


def severity_for_reason(reason: str) -> int:
    return REASON_SEVERITY.get(reason, 1)


def action_for_reason(reason: str) -> ModerationActionType:
    return REASON_ACTION.get(reason, ModerationActionType.WARNING)


def is_ban_active(action: str, expires_at: Optional[datetime], now: datetime) -> bool:
    """A ban without expiry is permanent; a timed ban holds until the expiry instant."""
    if action not in {a.value for a in BAN_ACTIONS}:
        return False
    return expires_at is None or expires_at > now
