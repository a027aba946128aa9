"""
Email Sender

Sends notifications via SMTP using aiosmtplib.
"""
import logging
import re
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import unescape
from typing import Optional, Sequence

import aiosmtplib

from .base_sender import BaseSender, MessageAction, SendResult

logger = logging.getLogger("reminders.notifications.email")

_TAG_RE = re.compile(r"<[^>]+>")


class EmailSender(BaseSender):
    """Send messages via SMTP"""

    def __init__(
        self,
        smtp_host: str = "",
        smtp_port: int = 587,
        smtp_user: str = "",
        smtp_password: str = "",
        from_name: str = "Reminders",
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.from_name = from_name

    async def send(
        self,
        address: str,
        content: str,
        actions: Optional[Sequence[MessageAction]] = None,
    ) -> SendResult:
        """
        Send email notification.

        Content is Telegram-flavoured HTML; it is flattened to plain text and
        the first line becomes the subject. Buttons are not supported.
        """
        if not address:
            return SendResult(success=False, error="No email address for delivery")

        if not self.smtp_host or not self.smtp_user:
            return SendResult(success=False, error="SMTP not configured")

        text = unescape(_TAG_RE.sub("", content))
        subject = text.split("\n", 1)[0][:120] or "Reminder"

        try:
            msg = MIMEMultipart("alternative")
            msg["From"] = f"{self.from_name} <{self.smtp_user}>"
            msg["To"] = address
            msg["Subject"] = subject

            msg.attach(MIMEText(text, "plain", "utf-8"))

            _, response = await aiosmtplib.send(
                msg,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                use_tls=False,
                start_tls=True,
            )

            logger.info(f"Email sent to {address}")
            return SendResult(success=True, raw_response=str(response))

        except Exception as e:
            logger.error(f"Email send error: {e}")
            return SendResult(success=False, error=str(e))

    async def close(self):
        pass
