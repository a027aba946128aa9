"""
Queue Storage

PostgreSQL storage for the notification queue.

All status changes made by the dispatcher are predicate-gated so that
overlapping runs and user actions never trip over each other's rows.
"""
import logging
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from .base import BaseStorage, affected_rows
from ..models.queue_entry import QueueEntry, QueueStatus

logger = logging.getLogger("reminders.storage.queue")


class QueueStorage(BaseStorage):
    """Storage for QueueEntry entities"""

    async def insert_if_absent(self, entry: QueueEntry) -> bool:
        """
        Insert a queue entry unless (rule_id, fire_at) already exists.

        Returns True when a new row was created.
        """
        query = """
            INSERT INTO notification_queue (
                id, rule_id, user_id, app, entity_id, title, body,
                channel, fire_at, status, send_count, created_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
            ON CONFLICT (rule_id, fire_at) DO NOTHING
            RETURNING id
        """
        inserted_id = await self.fetchval(
            query,
            entry.id, entry.rule_id, entry.user_id, entry.app, entry.entity_id,
            entry.title, entry.body, entry.channel, entry.fire_at,
            entry.status.value, entry.send_count, entry.created_at
        )
        return inserted_id is not None

    async def delete_pending_for_rule(self, rule_id: UUID, after: datetime) -> int:
        """Delete a rule's pending entries firing strictly after the given time"""
        query = """
            DELETE FROM notification_queue
            WHERE rule_id = $1 AND status = 'pending' AND fire_at > $2
        """
        result = await self.execute(query, rule_id, after)
        return affected_rows(result)

    async def get_by_id(self, entry_id: UUID) -> Optional[QueueEntry]:
        """Get entry by ID"""
        row = await self.fetchrow("SELECT * FROM notification_queue WHERE id = $1", entry_id)
        return self._row_to_entry(row) if row else None

    async def wake_snoozed(self, now: datetime) -> int:
        """Move snoozed entries whose fire time has come back to pending"""
        query = """
            UPDATE notification_queue
            SET status = 'pending'
            WHERE status = 'snoozed' AND fire_at <= $1
        """
        result = await self.execute(query, now)
        return affected_rows(result)

    async def list_due_pending(self, now: datetime, limit: int) -> List[QueueEntry]:
        """Pending entries due at now, oldest fire time first"""
        query = """
            SELECT * FROM notification_queue
            WHERE status = 'pending' AND fire_at <= $1
            ORDER BY fire_at
            LIMIT $2
        """
        rows = await self.fetch(query, now, limit)
        return [self._row_to_entry(row) for row in rows]

    async def list_retrying(self, max_attempts: int, limit: int) -> List[QueueEntry]:
        """Sending entries below the attempt ceiling, oldest fire time first"""
        query = """
            SELECT * FROM notification_queue
            WHERE status = 'sending' AND send_count < $1
            ORDER BY fire_at
            LIMIT $2
        """
        rows = await self.fetch(query, max_attempts, limit)
        return [self._row_to_entry(row) for row in rows]

    async def transition(
        self,
        entry_id: UUID,
        expected_status: QueueStatus,
        expected_count: int,
        new_status: QueueStatus,
        new_count: int,
    ) -> bool:
        """
        Compare-and-swap status and send_count.

        Returns False when the row no longer has the expected values.
        """
        query = """
            UPDATE notification_queue
            SET status = $4, send_count = $5
            WHERE id = $1 AND status = $2 AND send_count = $3
        """
        result = await self.execute(
            query, entry_id, expected_status.value, expected_count,
            new_status.value, new_count
        )
        return affected_rows(result) == 1

    async def snooze(self, entry_id: UUID, fire_at: datetime) -> bool:
        """Postpone an entry regardless of its current status"""
        query = """
            UPDATE notification_queue
            SET status = 'snoozed', fire_at = $2
            WHERE id = $1
        """
        result = await self.execute(query, entry_id, fire_at)
        return affected_rows(result) == 1

    async def cancel(self, entry_id: UUID) -> bool:
        """Cancel an entry regardless of its current status"""
        query = """
            UPDATE notification_queue
            SET status = 'cancelled'
            WHERE id = $1
        """
        result = await self.execute(query, entry_id)
        return affected_rows(result) == 1

    def _row_to_entry(self, row) -> QueueEntry:
        """Convert database row to QueueEntry"""
        return QueueEntry(
            id=row["id"],
            rule_id=row["rule_id"],
            user_id=row["user_id"],
            app=row["app"],
            entity_id=row["entity_id"],
            title=row["title"],
            body=row["body"],
            channel=row["channel"],
            fire_at=row["fire_at"],
            status=QueueStatus(row["status"]),
            send_count=row["send_count"],
            created_at=row["created_at"],
        )
