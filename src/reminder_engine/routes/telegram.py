"""
Telegram Webhook Routes

Handles callback queries from the inline buttons under reminder messages:
  snooze:<minutes>:<entry_id>  postpone the reminder
  cancel:<entry_id>            cancel the reminder

Every callback is answered (Telegram shows a spinner until it is), and the
original message is edited to show the new state without buttons.
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from ..config import Config
from ..errors import ActionValidationError, InvalidSnoozeDuration
from ..notifications.telegram_sender import TelegramSender
from ..services.actions import SNOOZE, parse_callback_data
from ..services.engine_service import EngineService, get_engine_service
from ..services.formatting import cancelled_notice, snoozed_notice

logger = logging.getLogger("reminders.routes.telegram")
router = APIRouter(prefix="/telegram", tags=["telegram"])


def _secret_matches(received: Optional[str]) -> bool:
    secret = Config.TELEGRAM_WEBHOOK_SECRET
    if not secret:
        return True
    return hmac.compare_digest((received or "").encode(), secret.encode())


async def _answer(sender: Optional[TelegramSender], callback_query_id: Optional[str], text: str):
    if sender and callback_query_id:
        await sender.answer_callback_query(callback_query_id, text)


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _rejected(error: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"ok": False, "error": error})


@router.post("/webhook")
async def telegram_webhook(
    request: Request,
    x_telegram_bot_api_secret_token: Optional[str] = Header(None),
    engine: EngineService = Depends(get_engine_service),
):
    """Telegram Bot webhook endpoint"""
    if not _secret_matches(x_telegram_bot_api_secret_token):
        logger.warning("Telegram webhook called with invalid secret token")
        raise HTTPException(status_code=403, detail="Forbidden")

    try:
        update = await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid JSON")

    if not isinstance(update, dict):
        raise HTTPException(status_code=400, detail="Invalid update")

    callback = update.get("callback_query")
    if not callback:
        # Other update types (plain messages, edits) are not handled here
        return {"ok": True}

    sender = engine.telegram_sender
    if not isinstance(callback, dict):
        logger.warning("Rejected malformed callback_query")
        return _rejected("malformed callback_query")

    callback_query_id = callback.get("id")
    data = callback.get("data")
    message = _as_dict(callback.get("message"))
    chat_id = _as_dict(message.get("chat")).get("id")
    message_id = message.get("message_id")
    original_text = message.get("text")
    if not isinstance(original_text, str):
        original_text = ""

    logger.info(f"Callback data='{data}' chat={chat_id} msg={message_id}")

    if not isinstance(data, str) or not data or not chat_id or not message_id:
        await _answer(sender, callback_query_id, "❌ Invalid data")
        return _rejected("missing fields")

    try:
        action, entry_id, params = parse_callback_data(data)
    except InvalidSnoozeDuration as e:
        logger.warning(f"Rejected callback data '{data}': {e}")
        await _answer(sender, callback_query_id, "❌ Invalid snooze duration")
        return _rejected(str(e))
    except ActionValidationError as e:
        logger.warning(f"Rejected callback data '{data}': {e}")
        await _answer(sender, callback_query_id, "❓ Unrecognized action")
        return _rejected(str(e))

    result = await engine.action_service.handle(action, entry_id, params)
    await _answer(sender, callback_query_id, result.message)

    if not result.ok:
        return {"ok": False, "error": result.message}

    if action == SNOOZE:
        new_text = snoozed_notice(original_text, result.fire_at, Config.DISPLAY_TIMEZONE)
    else:
        new_text = cancelled_notice(original_text)
    if sender:
        await sender.edit_message_text(chat_id, message_id, new_text)

    return result.to_dict()
