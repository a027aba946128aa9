"""
Settings Storage

Read access to per-user notification settings.
"""
import logging
from typing import Optional
from uuid import UUID

from .base import BaseStorage
from ..models.user_settings import UserNotificationSettings

logger = logging.getLogger("reminders.storage.settings")


class SettingsStorage(BaseStorage):
    """Storage for UserNotificationSettings"""

    async def get_by_user(self, user_id: UUID) -> Optional[UserNotificationSettings]:
        """Get settings for a user"""
        query = """
            SELECT user_id, telegram_chat_id, telegram_enabled,
                   email_address, email_enabled
            FROM user_notification_settings
            WHERE user_id = $1
        """
        row = await self.fetchrow(query, user_id)
        if not row:
            return None
        return UserNotificationSettings(
            user_id=row["user_id"],
            telegram_chat_id=row["telegram_chat_id"],
            telegram_enabled=row["telegram_enabled"],
            email_address=row["email_address"],
            email_enabled=row["email_enabled"],
        )
