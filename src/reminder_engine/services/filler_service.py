"""
Filler Service

Materializes queue entries from enabled notification rules.

For every rule the due time is resolved (embedded or via the app's entity
resolver), fire_at = due_at - offset is computed per offset, and each fire
time inside (now, now + horizon] is inserted if absent. Re-running the pass
never duplicates entries: (rule_id, fire_at) is unique.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from ..errors import JobFetchError
from ..models.job_result import FillResult
from ..models.notification_rule import NotificationRule, OffsetPreset
from ..models.queue_entry import QueueEntry, QueueStatus
from ..storage.queue_storage import QueueStorage
from ..storage.rule_storage import RuleStorage
from .entity_resolvers import EntityResolverRegistry, ResolvedEntity
from .formatting import entry_body, entry_title

logger = logging.getLogger("reminders.services.filler")


class FillerService:
    """Rule-to-queue materialization pass"""

    def __init__(
        self,
        rule_storage: RuleStorage,
        queue_storage: QueueStorage,
        resolvers: Optional[EntityResolverRegistry] = None,
        horizon: timedelta = timedelta(days=7),
        safety_window: timedelta = timedelta(minutes=2),
    ):
        self.rule_storage = rule_storage
        self.queue_storage = queue_storage
        self.resolvers = resolvers or EntityResolverRegistry()
        self.horizon = horizon
        self.safety_window = safety_window

    async def fill(self, now: Optional[datetime] = None) -> FillResult:
        """
        Run one filler pass.

        Raises JobFetchError when the rule set or the preset map cannot be
        loaded. Failures of a single rule are counted and logged.
        """
        now = now or datetime.now(timezone.utc)

        try:
            rules = await self.rule_storage.list_enabled()
        except Exception as e:
            logger.error(f"Failed to load notification rules: {e}")
            raise JobFetchError("rules", e) from e

        try:
            presets = await self.rule_storage.get_presets()
        except Exception as e:
            logger.error(f"Failed to load offset presets: {e}")
            raise JobFetchError("presets", e) from e

        result = FillResult(total=len(rules))
        for rule in rules:
            try:
                await self._fill_rule(rule, presets, now, result)
            except Exception as e:
                result.errors += 1
                logger.error(f"Fill failed for rule {rule.id}: {e}")

        logger.info(
            f"Fill done: rules={result.total} inserted={result.inserted} "
            f"skipped={result.skipped} duplicates={result.duplicates} "
            f"deleted={result.deleted} errors={result.errors}"
        )
        return result

    async def _resolve(self, rule: NotificationRule) -> Optional[ResolvedEntity]:
        if rule.due_at is not None:
            return ResolvedEntity(title=rule.entity_title, due_at=rule.due_at)
        return await self.resolvers.resolve(rule.app, rule.entity_id)

    async def _fill_rule(
        self,
        rule: NotificationRule,
        presets: Dict[str, OffsetPreset],
        now: datetime,
        result: FillResult,
    ):
        entity = await self._resolve(rule)
        if entity is None:
            logger.debug(f"Rule {rule.id}: entity {rule.app}/{rule.entity_id} not resolvable, skipped")
            result.skipped += 1
            return

        # Offset selection may have changed: drop pending entries that are not
        # about to fire, the insert loop below recreates the ones still wanted.
        # An emptied selection only deletes.
        if rule.has_selected_offsets:
            deleted = await self.queue_storage.delete_pending_for_rule(
                rule.id, now + self.safety_window
            )
            if deleted:
                logger.info(f"Rule {rule.id}: removed {deleted} stale pending entries")
            result.deleted += deleted

        offsets = rule.resolve_offsets(presets)
        if not offsets:
            logger.warning(f"Rule {rule.id} has no usable offsets, skipped")
            result.skipped += 1
            return

        horizon_end = now + self.horizon
        title = entity.title or rule.entity_title
        for offset in offsets:
            fire_at = entity.due_at - timedelta(minutes=offset.minutes)
            if fire_at <= now or fire_at > horizon_end:
                result.skipped += 1
                continue

            entry = QueueEntry(
                rule_id=rule.id,
                user_id=rule.user_id,
                app=rule.app,
                entity_id=rule.entity_id,
                title=entry_title(title),
                body=entry_body(offset.label),
                channel=rule.channel,
                fire_at=fire_at,
                status=QueueStatus.PENDING,
                send_count=0,
            )
            try:
                created = await self.queue_storage.insert_if_absent(entry)
            except Exception as e:
                result.errors += 1
                logger.error(f"Insert failed for rule {rule.id} fire_at={fire_at.isoformat()}: {e}")
                continue

            if created:
                result.inserted += 1
            else:
                result.duplicates += 1
