"""
Rule Storage

PostgreSQL storage for notification rules and offset presets.
"""
import json
import logging
from typing import Dict, List

from .base import BaseStorage
from ..models.notification_rule import NotificationRule, OffsetPreset

logger = logging.getLogger("reminders.storage.rules")


class RuleStorage(BaseStorage):
    """Read access to NotificationRule and OffsetPreset rows"""

    async def list_enabled(self) -> List[NotificationRule]:
        """List all enabled rules"""
        query = """
            SELECT * FROM notification_rules
            WHERE enabled = true
            ORDER BY created_at
        """
        rows = await self.fetch(query)
        return [self._row_to_rule(row) for row in rows]

    async def get_presets(self) -> Dict[str, OffsetPreset]:
        """Load offset presets keyed by preset key"""
        rows = await self.fetch(
            "SELECT key, minutes, label FROM notification_offset_presets"
        )
        return {
            row["key"]: OffsetPreset(key=row["key"], minutes=row["minutes"], label=row["label"])
            for row in rows
        }

    def _row_to_rule(self, row) -> NotificationRule:
        """Convert database row to NotificationRule"""
        selected = row["selected_offsets"]
        if isinstance(selected, str):
            selected = json.loads(selected)

        return NotificationRule(
            id=row["id"],
            user_id=row["user_id"],
            app=row["app"],
            entity_id=row["entity_id"],
            entity_title=row["entity_title"] or "",
            due_at=row["due_at"],
            offset_minutes=row["offset_minutes"],
            offset_label=row["offset_label"],
            selected_offsets=list(selected) if selected is not None else None,
            channel=row["channel"],
            enabled=row["enabled"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
