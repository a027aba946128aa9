"""
Reminder Engine Storage Layer

PostgreSQL storage implementations for reminder entities.
"""
from .base import BaseStorage, Database
from .rule_storage import RuleStorage
from .queue_storage import QueueStorage
from .delivery_log_storage import DeliveryLogStorage
from .settings_storage import SettingsStorage

__all__ = [
    'BaseStorage',
    'Database',
    'RuleStorage',
    'QueueStorage',
    'DeliveryLogStorage',
    'SettingsStorage',
]
