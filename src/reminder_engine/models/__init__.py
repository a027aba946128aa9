"""
Reminder Engine Data Models

Domain models for rules, queue entries, delivery log and user settings.
"""
from .notification_rule import NotificationRule, OffsetPreset, RuleOffset
from .queue_entry import QueueEntry, QueueStatus
from .delivery_log import DeliveryLogRecord
from .user_settings import UserNotificationSettings, CHANNEL_PRIORITY
from .job_result import FillResult, DispatchResult

__all__ = [
    'NotificationRule',
    'OffsetPreset',
    'RuleOffset',
    'QueueEntry',
    'QueueStatus',
    'DeliveryLogRecord',
    'UserNotificationSettings',
    'CHANNEL_PRIORITY',
    'FillResult',
    'DispatchResult',
]
