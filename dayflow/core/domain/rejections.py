"""Reasons an eligible-only action can be refused. Returned, never raised."""

from enum import Enum


class RejectReason(str, Enum):
    INSUFFICIENT_XP = "insufficient_xp"
    ALREADY_USED_THIS_WEEK = "already_used_this_week"
    WEEKEND_NOT_ALLOWED = "weekend_not_allowed"
    NOT_USED = "not_used"
    DIFFERENT_WEEK = "different_week"
    NOT_TODAY = "not_today"
