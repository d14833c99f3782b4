"""User-facing texts for rejections and failures shown as toasts."""

from dayflow.core.domain.rejections import RejectReason

REASON_MESSAGES: dict[RejectReason, str] = {
    RejectReason.INSUFFICIENT_XP: "You don't have enough XP for that.",
    RejectReason.ALREADY_USED_THIS_WEEK: "You already used your weekly pass this week.",
    RejectReason.WEEKEND_NOT_ALLOWED: "The weekly pass can only be used on weekdays.",
    RejectReason.NOT_USED: "There is no weekly pass to undo.",
    RejectReason.DIFFERENT_WEEK: "That weekly pass belongs to another week.",
    RejectReason.NOT_TODAY: "A weekly pass can only be undone on the day it was used.",
}

PERSISTENCE_FAILED = "Your progress could not be saved. Please try again."


def reason_message(reason: RejectReason | None) -> str:
    if reason is None:
        return ""
    return REASON_MESSAGES[reason]
