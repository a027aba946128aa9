"""
Reminder Notification Senders

Delivery channels: Telegram, Email.
"""
from .base_sender import BaseSender, MessageAction, SendResult
from .telegram_sender import TelegramSender
from .email_sender import EmailSender

__all__ = [
    'BaseSender',
    'MessageAction',
    'SendResult',
    'TelegramSender',
    'EmailSender',
]
