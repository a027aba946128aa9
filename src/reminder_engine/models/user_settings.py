"""
User Notification Settings Model

Per-user channel addresses and enabled flags (read-only here).
"""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID


# Channel order used when a message is not tied to a specific channel (digest)
CHANNEL_PRIORITY = ("telegram", "email")


@dataclass
class UserNotificationSettings:
    """Channel configuration of one user"""
    user_id: UUID
    telegram_chat_id: Optional[str] = None
    telegram_enabled: bool = False
    email_address: Optional[str] = None
    email_enabled: bool = False

    def address_for(self, channel: str) -> Optional[str]:
        """Address for channel, or None when the channel is disabled or unconfigured"""
        if channel == "telegram" and self.telegram_enabled and self.telegram_chat_id:
            return self.telegram_chat_id
        if channel == "email" and self.email_enabled and self.email_address:
            return self.email_address
        return None

    def preferred_channel(self) -> Optional[str]:
        """First enabled and configured channel, by priority"""
        for channel in CHANNEL_PRIORITY:
            if self.address_for(channel):
                return channel
        return None
