"""
Base Sender

Abstract interface for notification delivery channels.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass
class SendResult:
    """Result of a send attempt"""
    success: bool
    error: Optional[str] = None
    raw_response: Optional[str] = None


@dataclass(frozen=True)
class MessageAction:
    """Button offered under a message; data comes back through the webhook"""
    label: str
    data: str


class BaseSender(ABC):
    """Abstract notification sender"""

    @abstractmethod
    async def send(
        self,
        address: str,
        content: str,
        actions: Optional[Sequence[MessageAction]] = None,
    ) -> SendResult:
        """
        Send a notification.

        Args:
            address: Channel-specific address (chat id, email address)
            content: Message text to send
            actions: Optional buttons; channels without buttons ignore them
        Returns:
            SendResult with success flag, error and raw provider response.
            Transport errors are reported in the result, never raised.
        """
        ...

    @abstractmethod
    async def close(self):
        """Cleanup resources"""
        ...
