"""
Dispatcher Service

Delivery state machine for the notification queue. One run executes:

0. wake     snoozed entries with fire_at <= now become pending
1. send     due pending entries: send_count = 1
2. retry    sending entries below the ceiling: send_count += 1
3. digest   one summary per user of the entries that reached 'sent' in this run

An entry becomes 'sent' exactly when send_count reaches max_attempts,
whatever the outcome of the individual attempts. Every attempt is written
to the delivery log.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from ..errors import JobFetchError
from ..models.delivery_log import DeliveryLogRecord
from ..models.job_result import DispatchResult
from ..models.queue_entry import QueueEntry, QueueStatus
from ..models.user_settings import UserNotificationSettings
from ..notifications.base_sender import BaseSender, SendResult
from ..storage.delivery_log_storage import DeliveryLogStorage
from ..storage.queue_storage import QueueStorage
from ..storage.settings_storage import SettingsStorage
from .actions import entry_actions
from .formatting import digest_text, reminder_text

logger = logging.getLogger("reminders.services.dispatcher")

SettingsCache = Dict[UUID, Optional[UserNotificationSettings]]


class DispatcherService:
    """Runs the delivery phases over the queue"""

    def __init__(
        self,
        queue_storage: QueueStorage,
        log_storage: DeliveryLogStorage,
        settings_storage: SettingsStorage,
        senders: Optional[Dict[str, BaseSender]] = None,
        batch_size: int = 25,
        max_attempts: int = 5,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.queue_storage = queue_storage
        self.log_storage = log_storage
        self.settings_storage = settings_storage
        # channel -> sender instance
        self._senders: Dict[str, BaseSender] = senders or {}
        self.batch_size = batch_size
        self.max_attempts = max_attempts

    def register_sender(self, channel: str, sender: BaseSender):
        """Register a sender for a channel"""
        self._senders[channel] = sender
        logger.info(f"Registered notification sender: {channel}")

    def get_sender(self, channel: str) -> Optional[BaseSender]:
        return self._senders.get(channel)

    async def dispatch(self, now: Optional[datetime] = None) -> DispatchResult:
        """
        Run one dispatch cycle.

        Both batches are selected before any item is processed, so an entry
        moved to 'sending' by phase 1 is not retried in the same run.
        Raises JobFetchError if the wake-up or a batch selection fails.
        """
        now = now or datetime.now(timezone.utc)
        result = DispatchResult()

        try:
            result.woken = await self.queue_storage.wake_snoozed(now)
        except Exception as e:
            logger.error(f"Failed to wake snoozed entries: {e}")
            raise JobFetchError("wake", e) from e
        if result.woken:
            logger.info(f"Woke {result.woken} snoozed entries")

        try:
            pending = await self.queue_storage.list_due_pending(now, self.batch_size)
        except Exception as e:
            logger.error(f"Failed to select pending entries: {e}")
            raise JobFetchError("pending", e) from e

        try:
            retrying = await self.queue_storage.list_retrying(self.max_attempts, self.batch_size)
        except Exception as e:
            logger.error(f"Failed to select sending entries: {e}")
            raise JobFetchError("sending", e) from e

        pending_ids = {entry.id for entry in pending}
        retrying = [entry for entry in retrying if entry.id not in pending_ids]
        result.total = len(pending) + len(retrying)

        settings_cache: SettingsCache = {}
        just_sent: List[QueueEntry] = []

        for entry in pending:
            await self._process(entry, 1, now, settings_cache, result, just_sent)

        for entry in retrying:
            await self._process(entry, entry.send_count + 1, now, settings_cache, result, just_sent)

        await self._send_digests(just_sent, settings_cache, result)

        logger.info(
            f"Dispatch done: total={result.total} sent={result.sent} failed={result.failed} "
            f"skipped={result.skipped} errors={result.errors} woken={result.woken} "
            f"digest_users={result.digest_users} digest_items={result.digest_items}"
        )
        return result

    async def _get_settings(
        self, cache: SettingsCache, user_id: UUID
    ) -> Optional[UserNotificationSettings]:
        """Settings lookup, at most once per user per run"""
        if user_id in cache:
            return cache[user_id]
        try:
            settings = await self.settings_storage.get_by_user(user_id)
        except Exception as e:
            logger.warning(f"Settings lookup failed for user {user_id}: {e}")
            settings = None
        cache[user_id] = settings
        return settings

    async def _deliver(
        self, entry: QueueEntry, settings: Optional[UserNotificationSettings]
    ) -> SendResult:
        address = settings.address_for(entry.channel) if settings else None
        if not address:
            return SendResult(success=False, error="Channel not configured or disabled")

        sender = self._senders.get(entry.channel)
        if not sender:
            return SendResult(
                success=False, error=f"No sender registered for channel '{entry.channel}'"
            )

        try:
            return await sender.send(address, reminder_text(entry), entry_actions(entry.id))
        except Exception as e:
            logger.error(f"Sender {entry.channel} raised for entry {entry.id}: {e}")
            return SendResult(success=False, error=str(e))

    async def _process(
        self,
        entry: QueueEntry,
        new_count: int,
        now: datetime,
        settings_cache: SettingsCache,
        result: DispatchResult,
        just_sent: List[QueueEntry],
    ):
        """Claim, deliver and log one entry"""
        new_status = QueueStatus.SENT if new_count >= self.max_attempts else QueueStatus.SENDING

        try:
            claimed = await self.queue_storage.transition(
                entry.id, entry.status, entry.send_count, new_status, new_count
            )
        except Exception as e:
            result.errors += 1
            logger.error(f"Failed to update entry {entry.id}: {e}")
            return

        if not claimed:
            # Snoozed, cancelled or taken by an overlapping run since selection
            result.skipped += 1
            logger.info(f"Entry {entry.id} changed since selection, skipped")
            return

        settings = await self._get_settings(settings_cache, entry.user_id)
        send_result = await self._deliver(entry, settings)

        if send_result.success:
            result.sent += 1
        else:
            result.failed += 1
            logger.warning(
                f"Delivery failed for entry {entry.id} "
                f"(attempt {new_count}/{self.max_attempts}): {send_result.error}"
            )

        record = DeliveryLogRecord(
            queue_id=entry.id,
            user_id=entry.user_id,
            app=entry.app,
            entity_id=entry.entity_id,
            title=entry.title,
            channel=entry.channel,
            fired_at=now,
            status="sent" if send_result.success else "failed",
            response=send_result.raw_response or None,
            error_msg=send_result.error or None,
        )
        try:
            await self.log_storage.create(record)
        except Exception as e:
            result.errors += 1
            logger.error(f"Failed to write delivery log for entry {entry.id}: {e}")

        entry.status = new_status
        entry.send_count = new_count
        if new_status == QueueStatus.SENT:
            just_sent.append(entry)

    async def _send_digests(
        self,
        just_sent: List[QueueEntry],
        settings_cache: SettingsCache,
        result: DispatchResult,
    ):
        """One summary message per user; entry statuses are left untouched"""
        result.digest_items = len(just_sent)
        if not just_sent:
            return

        by_user: Dict[UUID, List[QueueEntry]] = {}
        for entry in just_sent:
            by_user.setdefault(entry.user_id, []).append(entry)

        for user_id, entries in by_user.items():
            settings = await self._get_settings(settings_cache, user_id)
            channel = settings.preferred_channel() if settings else None
            sender = self._senders.get(channel) if channel else None
            if not sender:
                logger.debug(f"No digest channel for user {user_id}")
                continue

            result.digest_users += 1
            try:
                sent = await sender.send(settings.address_for(channel), digest_text(entries))
            except Exception as e:
                sent = SendResult(success=False, error=str(e))
            if not sent.success:
                logger.warning(f"Digest failed for user {user_id}: {sent.error}")
