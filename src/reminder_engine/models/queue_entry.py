"""
Queue Entry Model

One scheduled delivery of a reminder, unique per (rule_id, fire_at).
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class QueueStatus(str, Enum):
    """Delivery state of a queue entry"""
    PENDING = "pending"
    SENDING = "sending"
    SENT = "sent"
    SNOOZED = "snoozed"
    CANCELLED = "cancelled"


@dataclass
class QueueEntry:
    """
    Queue entry.

    Lifecycle:
    - pending: created by the filler, waits for fire_at
    - sending: delivered at least once, retried until send_count hits the ceiling
    - sent: terminal, ceiling reached
    - snoozed: postponed by the user, woken back to pending at fire_at
    - cancelled: terminal, cancelled by the user
    """
    id: UUID = field(default_factory=uuid4)
    rule_id: Optional[UUID] = None
    user_id: UUID = field(default_factory=uuid4)
    app: str = ""
    entity_id: str = ""
    title: str = ""
    body: str = ""
    channel: str = "telegram"
    fire_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: QueueStatus = QueueStatus.PENDING
    send_count: int = 0

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))