"""
Message Formatting

User-facing texts of reminders, digests and action acknowledgements.
Telegram messages use HTML parse mode, so user content is escaped.
"""
from datetime import datetime, timezone
from html import escape
from typing import Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..models.queue_entry import QueueEntry

MINUTES_PER_DAY = 1440


def entry_title(entity_title: str) -> str:
    return f"🔔 {entity_title}"


def entry_body(offset_label: str) -> str:
    return f"Reminder: {offset_label} before"


def reminder_text(entry: QueueEntry) -> str:
    """Single reminder message"""
    return f"{escape(entry.title)}\n{escape(entry.body)}"


def digest_text(entries: Sequence[QueueEntry]) -> str:
    """Summary of the reminders that completed delivery in one run"""
    lines = [f"• <b>{escape(e.title)}</b>\n  {escape(e.body)}" for e in entries]
    return f"📋 <b>Notification summary ({len(entries)})</b>\n\n" + "\n\n".join(lines)


def delay_label(minutes: int) -> str:
    """Human label for a snooze delay: minutes, hours or tomorrow"""
    if minutes < 60:
        return f"{minutes} min"
    if minutes < MINUTES_PER_DAY:
        return f"{round(minutes / 60, 1):g} h"
    return "tomorrow"


def format_datetime(value: datetime, tz_name: str = "UTC") -> str:
    """dd/mm/yyyy HH:MM in the display timezone"""
    try:
        tz = ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        tz = timezone.utc
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz).strftime("%d/%m/%Y %H:%M")


def snoozed_notice(original_text: str, fire_at: datetime, tz_name: str = "UTC") -> str:
    """Original message followed by the snooze status line"""
    return (
        f"{escape(original_text)}\n\n"
        f"⏸ <i>Snoozed, next delivery at {format_datetime(fire_at, tz_name)}</i>"
    )


def cancelled_notice(original_text: str) -> str:
    """Original message followed by the cancellation status line"""
    return f"{escape(original_text)}\n\n❌ <i>Reminder cancelled</i>"
