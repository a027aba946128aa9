from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional, Sequence
from uuid import UUID

import pytest

from reminder_engine.models import (
    DeliveryLogRecord,
    NotificationRule,
    OffsetPreset,
    QueueEntry,
    QueueStatus,
    UserNotificationSettings,
)
from reminder_engine.notifications.base_sender import BaseSender, MessageAction, SendResult

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeRuleStorage:
    def __init__(self, rules=None, presets=None, fail_rules=False, fail_presets=False):
        self.rules: list[NotificationRule] = list(rules or [])
        self.presets: dict[str, OffsetPreset] = dict(presets or {})
        self.fail_rules = fail_rules
        self.fail_presets = fail_presets

    async def list_enabled(self) -> list[NotificationRule]:
        if self.fail_rules:
            raise ConnectionError("rules unavailable")
        return [rule for rule in self.rules if rule.enabled]

    async def get_presets(self) -> dict[str, OffsetPreset]:
        if self.fail_presets:
            raise ConnectionError("presets unavailable")
        return dict(self.presets)


class FakeQueueStorage:
    """Row store semantics: callers only ever see copies of stored rows."""

    def __init__(self, entries: Sequence[QueueEntry] = ()):
        self.rows: dict[UUID, QueueEntry] = {}
        self.fail: set[str] = set()
        for entry in entries:
            self.rows[entry.id] = replace(entry)

    def _check(self, op: str) -> None:
        if op in self.fail:
            raise ConnectionError(f"{op} failed")

    def row(self, entry_id: UUID) -> QueueEntry:
        return self.rows[entry_id]

    async def insert_if_absent(self, entry: QueueEntry) -> bool:
        self._check("insert")
        for row in self.rows.values():
            if row.rule_id == entry.rule_id and row.fire_at == entry.fire_at:
                return False
        self.rows[entry.id] = replace(entry)
        return True

    async def delete_pending_for_rule(self, rule_id: UUID, after: datetime) -> int:
        self._check("delete")
        doomed = [
            row.id for row in self.rows.values()
            if row.rule_id == rule_id and row.status == QueueStatus.PENDING and row.fire_at > after
        ]
        for entry_id in doomed:
            del self.rows[entry_id]
        return len(doomed)

    async def get_by_id(self, entry_id: UUID) -> Optional[QueueEntry]:
        row = self.rows.get(entry_id)
        return replace(row) if row else None

    async def wake_snoozed(self, now: datetime) -> int:
        self._check("wake")
        count = 0
        for row in self.rows.values():
            if row.status == QueueStatus.SNOOZED and row.fire_at <= now:
                row.status = QueueStatus.PENDING
                count += 1
        return count

    async def list_due_pending(self, now: datetime, limit: int) -> list[QueueEntry]:
        self._check("pending")
        rows = [r for r in self.rows.values() if r.status == QueueStatus.PENDING and r.fire_at <= now]
        rows.sort(key=lambda r: r.fire_at)
        return [replace(r) for r in rows[:limit]]

    async def list_retrying(self, max_attempts: int, limit: int) -> list[QueueEntry]:
        self._check("sending")
        rows = [r for r in self.rows.values() if r.status == QueueStatus.SENDING and r.send_count < max_attempts]
        rows.sort(key=lambda r: r.fire_at)
        return [replace(r) for r in rows[:limit]]

    async def transition(self, entry_id, expected_status, expected_count, new_status, new_count) -> bool:
        self._check("transition")
        row = self.rows.get(entry_id)
        if row is None or row.status != expected_status or row.send_count != expected_count:
            return False
        row.status = new_status
        row.send_count = new_count
        return True

    async def snooze(self, entry_id: UUID, fire_at: datetime) -> bool:
        self._check("snooze")
        row = self.rows.get(entry_id)
        if row is None:
            return False
        row.status = QueueStatus.SNOOZED
        row.fire_at = fire_at
        return True

    async def cancel(self, entry_id: UUID) -> bool:
        self._check("cancel")
        row = self.rows.get(entry_id)
        if row is None:
            return False
        row.status = QueueStatus.CANCELLED
        return True


class FakeLogStorage:
    def __init__(self, fail: bool = False):
        self.records: list[DeliveryLogRecord] = []
        self.fail = fail

    async def create(self, record: DeliveryLogRecord) -> None:
        if self.fail:
            raise ConnectionError("log insert failed")
        self.records.append(record)

    def for_entry(self, entry_id: UUID) -> list[DeliveryLogRecord]:
        return [r for r in self.records if r.queue_id == entry_id]


class FakeSettingsStorage:
    def __init__(self, settings: Sequence[UserNotificationSettings] = ()):
        self.settings = {s.user_id: s for s in settings}
        self.lookups: list[UUID] = []

    async def get_by_user(self, user_id: UUID) -> Optional[UserNotificationSettings]:
        self.lookups.append(user_id)
        return self.settings.get(user_id)


class FakeSender(BaseSender):
    def __init__(self, succeed: bool = True, raise_error: bool = False):
        self.succeed = succeed
        self.raise_error = raise_error
        self.messages: list[tuple[str, str, Optional[Sequence[MessageAction]]]] = []

    async def send(self, address, content, actions=None) -> SendResult:
        self.messages.append((address, content, actions))
        if self.raise_error:
            raise RuntimeError("transport exploded")
        if self.succeed:
            return SendResult(success=True, raw_response='{"ok":true}')
        return SendResult(success=False, error="Telegram API error: 400", raw_response='{"ok":false}')

    async def close(self):
        pass


class FakeTelegramSender(FakeSender):
    def __init__(self):
        super().__init__()
        self.answers: list[tuple[str, str]] = []
        self.edits: list[tuple[int, int, str]] = []

    async def answer_callback_query(self, callback_query_id: str, text: str) -> bool:
        self.answers.append((callback_query_id, text))
        return True

    async def edit_message_text(self, chat_id: int, message_id: int, text: str) -> bool:
        self.edits.append((chat_id, message_id, text))
        return True


def telegram_settings(user_id: UUID, chat_id: str = "1001", enabled: bool = True) -> UserNotificationSettings:
    return UserNotificationSettings(user_id=user_id, telegram_chat_id=chat_id, telegram_enabled=enabled)


@pytest.fixture
def now() -> datetime:
    return NOW
