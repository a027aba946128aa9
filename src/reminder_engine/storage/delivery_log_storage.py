"""
Delivery Log Storage

PostgreSQL storage for the append-only delivery log.
"""
import logging

from .base import BaseStorage
from ..models.delivery_log import DeliveryLogRecord

logger = logging.getLogger("reminders.storage.delivery_log")


class DeliveryLogStorage(BaseStorage):
    """Storage for DeliveryLogRecord entities"""

    async def create(self, record: DeliveryLogRecord) -> None:
        """Append a delivery attempt"""
        query = """
            INSERT INTO notification_log (
                id, queue_id, user_id, app, entity_id, title,
                channel, fired_at, status, response, error_msg
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
        """
        await self.execute(
            query,
            record.id, record.queue_id, record.user_id, record.app,
            record.entity_id, record.title, record.channel, record.fired_at,
            record.status, record.response, record.error_msg
        )
