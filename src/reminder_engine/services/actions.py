"""
Action Service

User actions on a single queue entry (snooze, cancel), usually triggered
from the inline buttons of a Telegram reminder.

Actions overwrite status and fire time unconditionally: the user's choice
wins over whatever the dispatcher last wrote.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from ..errors import ActionValidationError, InvalidSnoozeDuration
from ..notifications.base_sender import MessageAction
from ..storage.queue_storage import QueueStorage
from .formatting import delay_label

logger = logging.getLogger("reminders.services.actions")

SNOOZE = "snooze"
CANCEL = "cancel"
ACTIONS = (SNOOZE, CANCEL)

# Snooze buttons offered under every reminder (minutes)
SNOOZE_CHOICES = (10, 60, 1440)


@dataclass
class ActionResult:
    """Outcome of a user action, message is shown back to the user"""
    ok: bool
    action: str
    entry_id: UUID
    message: str
    label: Optional[str] = None
    fire_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "action": self.action,
            "entry_id": str(self.entry_id),
            "message": self.message,
            "label": self.label,
            "fire_at": self.fire_at.isoformat() if self.fire_at else None,
        }


def entry_actions(entry_id: UUID) -> List[MessageAction]:
    """Buttons attached to a reminder message"""
    buttons = [
        MessageAction(f"⏸ {delay_label(minutes)}", f"{SNOOZE}:{minutes}:{entry_id}")
        for minutes in SNOOZE_CHOICES
    ]
    buttons.append(MessageAction("❌ Cancel", f"{CANCEL}:{entry_id}"))
    return buttons


def parse_entry_id(value) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        raise ActionValidationError(f"Invalid entry id: {value!r}")


def parse_minutes(value) -> int:
    """Positive integer minutes from an int or a decimal string"""
    if isinstance(value, bool):
        raise InvalidSnoozeDuration("Invalid snooze duration")
    if isinstance(value, int):
        minutes = value
    elif isinstance(value, str) and value.strip().isdigit():
        minutes = int(value.strip())
    else:
        raise InvalidSnoozeDuration("Invalid snooze duration")
    if minutes <= 0:
        raise InvalidSnoozeDuration("Invalid snooze duration")
    return minutes


def parse_callback_data(data: str) -> Tuple[str, UUID, dict]:
    """
    Parse button callback data.

    Formats: 'snooze:<minutes>:<entry_id>' and 'cancel:<entry_id>'.
    """
    parts = (data or "").split(":")
    action = parts[0]
    if action == SNOOZE and len(parts) == 3:
        return SNOOZE, parse_entry_id(parts[2]), {"minutes": parse_minutes(parts[1])}
    if action == CANCEL and len(parts) == 2:
        return CANCEL, parse_entry_id(parts[1]), {}
    raise ActionValidationError(f"Unrecognized action: {data!r}")


class ActionService:
    """Applies snooze/cancel to queue entries"""

    def __init__(self, queue_storage: QueueStorage):
        self.queue_storage = queue_storage

    async def handle(
        self,
        action: str,
        entry_id,
        params: Optional[dict] = None,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        """
        Validate and apply an action.

        Raises ActionValidationError for malformed input before touching the
        store. Store failures come back as a failed ActionResult.
        """
        params = params or {}
        if action not in ACTIONS:
            raise ActionValidationError(f"Unsupported action: {action!r}")
        entry_id = parse_entry_id(entry_id)

        if action == SNOOZE:
            if "minutes" not in params:
                raise InvalidSnoozeDuration("Missing snooze duration")
            minutes = parse_minutes(params["minutes"])
            return await self.snooze(entry_id, minutes, now)
        return await self.cancel(entry_id)

    async def snooze(
        self, entry_id: UUID, minutes: int, now: Optional[datetime] = None
    ) -> ActionResult:
        """Postpone an entry by minutes from now"""
        now = now or datetime.now(timezone.utc)
        fire_at = now + timedelta(minutes=minutes)
        label = delay_label(minutes)

        try:
            updated = await self.queue_storage.snooze(entry_id, fire_at)
        except Exception as e:
            logger.error(f"Snooze failed for entry {entry_id}: {e}")
            return ActionResult(False, SNOOZE, entry_id, "❌ Snooze failed")

        if not updated:
            logger.warning(f"Snooze for unknown entry {entry_id}")
            return ActionResult(False, SNOOZE, entry_id, "❌ Reminder not found")

        logger.info(f"Entry {entry_id} snoozed for {minutes} min until {fire_at.isoformat()}")
        return ActionResult(
            True, SNOOZE, entry_id, f"⏸ Snoozed for {label}", label=label, fire_at=fire_at
        )

    async def cancel(self, entry_id: UUID) -> ActionResult:
        """Cancel an entry"""
        try:
            updated = await self.queue_storage.cancel(entry_id)
        except Exception as e:
            logger.error(f"Cancel failed for entry {entry_id}: {e}")
            return ActionResult(False, CANCEL, entry_id, "❌ Cancel failed")

        if not updated:
            logger.warning(f"Cancel for unknown entry {entry_id}")
            return ActionResult(False, CANCEL, entry_id, "❌ Reminder not found")

        logger.info(f"Entry {entry_id} cancelled")
        return ActionResult(True, CANCEL, entry_id, "❌ Reminder cancelled")
