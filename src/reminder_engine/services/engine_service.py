"""
Engine Service

Main composite service that manages all storages and services.
Singleton pattern - one instance per process.
"""
import logging
from datetime import timedelta
from typing import Optional

from ..config import Config
from ..storage.base import BaseStorage, Database
from ..storage.rule_storage import RuleStorage
from ..storage.queue_storage import QueueStorage
from ..storage.delivery_log_storage import DeliveryLogStorage
from ..storage.settings_storage import SettingsStorage
from ..notifications.telegram_sender import TelegramSender
from ..notifications.email_sender import EmailSender
from .entity_resolvers import EntityResolverRegistry, TableEntityResolver
from .filler_service import FillerService
from .dispatcher_service import DispatcherService
from .actions import ActionService
from .scheduler_service import SchedulerService

logger = logging.getLogger("reminders.services.engine")

# Singleton instance
_engine_service: Optional["EngineService"] = None


class EngineService:
    """
    Composite engine service.

    Manages:
    - All storage connections (PostgreSQL)
    - Filler, dispatcher and action services
    - Background scheduler
    - Graceful shutdown
    """

    def __init__(self):
        """Initialize engine service with all storages"""
        self.database = Database(Config.get_postgres_dsn())

        # Storages share one pool
        self.rule_storage = RuleStorage(self.database)
        self.queue_storage = QueueStorage(self.database)
        self.delivery_log_storage = DeliveryLogStorage(self.database)
        self.settings_storage = SettingsStorage(self.database)
        self.entity_storage = BaseStorage(self.database)

        # Entity resolvers for rules without an embedded due time
        self.entity_resolvers = EntityResolverRegistry()
        for app, table in Config.ENTITY_SOURCES.items():
            self.entity_resolvers.register(app, TableEntityResolver(self.entity_storage, table))

        self.filler_service = FillerService(
            rule_storage=self.rule_storage,
            queue_storage=self.queue_storage,
            resolvers=self.entity_resolvers,
            horizon=timedelta(days=Config.FILL_HORIZON_DAYS),
            safety_window=timedelta(minutes=Config.FILL_SAFETY_WINDOW_MINUTES),
        )

        self.dispatcher_service = DispatcherService(
            queue_storage=self.queue_storage,
            log_storage=self.delivery_log_storage,
            settings_storage=self.settings_storage,
            batch_size=Config.DISPATCH_BATCH_SIZE,
            max_attempts=Config.DISPATCH_MAX_ATTEMPTS,
        )

        # Register notification senders
        if Config.TELEGRAM_BOT_TOKEN:
            self.telegram_sender = TelegramSender(Config.TELEGRAM_BOT_TOKEN)
            self.dispatcher_service.register_sender("telegram", self.telegram_sender)
        else:
            self.telegram_sender = None
            logger.info("Telegram sender disabled (no TELEGRAM_BOT_TOKEN)")

        if Config.SMTP_HOST:
            self.email_sender = EmailSender(
                smtp_host=Config.SMTP_HOST,
                smtp_port=Config.SMTP_PORT,
                smtp_user=Config.SMTP_USER,
                smtp_password=Config.SMTP_PASSWORD,
            )
            self.dispatcher_service.register_sender("email", self.email_sender)
        else:
            self.email_sender = None
            logger.info("Email sender disabled (no SMTP_HOST)")

        self.action_service = ActionService(self.queue_storage)

        # Initialize scheduler (started in initialize(), stopped in close())
        self.scheduler_service = SchedulerService(enabled=Config.SCHEDULER_ENABLED)
        self.scheduler_service.add_job("fill", Config.FILL_CRON, self.filler_service.fill)
        self.scheduler_service.add_job("dispatch", Config.DISPATCH_CRON, self.dispatcher_service.dispatch)

        self._initialized = False
        logger.info("EngineService created")

    async def initialize(self, start_scheduler: bool = True):
        """Connect to PostgreSQL and optionally start the background scheduler"""
        if self._initialized:
            logger.info("EngineService already initialized")
            return

        logger.info("Initializing EngineService...")

        await self.database.connect()

        if start_scheduler:
            await self.scheduler_service.start()

        self._initialized = True
        logger.info("EngineService initialized successfully")

    async def close(self):
        """Close all connections"""
        logger.info("Closing EngineService...")

        await self.scheduler_service.stop()
        await self.database.close()
        if self.telegram_sender:
            await self.telegram_sender.close()
        if self.email_sender:
            await self.email_sender.close()

        self._initialized = False
        logger.info("EngineService closed")

    @property
    def is_initialized(self) -> bool:
        """Check if service is initialized"""
        return self._initialized


def get_engine_service() -> EngineService:
    """Get or create engine service singleton"""
    global _engine_service
    if _engine_service is None:
        _engine_service = EngineService()
    return _engine_service


async def init_engine_service() -> EngineService:
    """Initialize and return engine service"""
    service = get_engine_service()
    await service.initialize()
    return service
