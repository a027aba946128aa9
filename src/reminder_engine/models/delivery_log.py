"""
Delivery Log Model

Immutable audit record, one per delivery attempt.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4


@dataclass
class DeliveryLogRecord:
    """Log entry for a single delivery attempt of a queue entry"""
    id: UUID = field(default_factory=uuid4)
    queue_id: UUID = field(default_factory=uuid4)
    user_id: UUID = field(default_factory=uuid4)
    app: str = ""
    entity_id: str = ""
    title: str = ""
    channel: str = ""
    fired_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: str = "failed"                               # 'sent' or 'failed'
    response: Optional[str] = None                       # raw notifier payload
    error_msg: Optional[str] = None
