"""
Telegram Sender

Sends notifications via Telegram Bot API using httpx.
"""
import logging
from typing import Optional, Sequence

import httpx

from .base_sender import BaseSender, MessageAction, SendResult

logger = logging.getLogger("reminders.notifications.telegram")

TELEGRAM_API_BASE = "https://api.telegram.org/bot{token}"


class TelegramSender(BaseSender):
    """Send messages via Telegram Bot API"""

    def __init__(self, bot_token: str, client: Optional[httpx.AsyncClient] = None):
        self.bot_token = bot_token
        self.api_base = TELEGRAM_API_BASE.format(token=bot_token)
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self._client

    @staticmethod
    def _keyboard(actions: Optional[Sequence[MessageAction]]) -> dict:
        """One row of inline buttons (empty keyboard removes existing buttons)"""
        row = [{"text": a.label, "callback_data": a.data} for a in actions or ()]
        return {"inline_keyboard": [row] if row else []}

    async def send(
        self,
        address: str,
        content: str,
        actions: Optional[Sequence[MessageAction]] = None,
    ) -> SendResult:
        """Send an HTML message to a Telegram chat"""
        if not address:
            return SendResult(success=False, error="No chat_id for Telegram delivery")

        if not self.bot_token:
            return SendResult(success=False, error="TELEGRAM_BOT_TOKEN not configured")

        payload = {
            "chat_id": address,
            "text": content,
            "parse_mode": "HTML",
        }
        if actions:
            payload["reply_markup"] = self._keyboard(actions)

        try:
            client = self._get_client()
            response = await client.post(f"{self.api_base}/sendMessage", json=payload)
            raw = response.text

            if response.status_code == 200:
                data = response.json()
                if data.get("ok"):
                    logger.info(f"Telegram message sent to chat_id={address}")
                    return SendResult(success=True, raw_response=raw)
                err = data.get("description", "Unknown Telegram error")
                logger.error(f"Telegram API error: {err}")
                return SendResult(success=False, error=f"Telegram API error: {err}", raw_response=raw)

            err = f"HTTP {response.status_code}: {raw[:200]}"
            logger.error(f"Telegram request failed: {err}")
            return SendResult(success=False, error=f"Telegram API error: {err}", raw_response=raw)

        except Exception as e:
            logger.error(f"Telegram send error: {e}")
            return SendResult(success=False, error=str(e))

    async def answer_callback_query(self, callback_query_id: str, text: str) -> bool:
        """Acknowledge a button press (Telegram requires an answer for every callback)"""
        try:
            client = self._get_client()
            response = await client.post(
                f"{self.api_base}/answerCallbackQuery",
                json={
                    "callback_query_id": callback_query_id,
                    "text": text,
                    "show_alert": False,
                },
            )
            return response.status_code == 200
        except Exception as e:
            logger.error(f"answerCallbackQuery failed: {e}")
            return False

    async def edit_message_text(self, chat_id: int, message_id: int, text: str) -> bool:
        """Replace a message's text and drop its buttons"""
        try:
            client = self._get_client()
            response = await client.post(
                f"{self.api_base}/editMessageText",
                json={
                    "chat_id": chat_id,
                    "message_id": message_id,
                    "text": text,
                    "parse_mode": "HTML",
                    "reply_markup": self._keyboard(None),
                },
            )
            return response.status_code == 200
        except Exception as e:
            logger.error(f"editMessageText failed: {e}")
            return False

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
