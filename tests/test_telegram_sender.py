from __future__ import annotations

import asyncio
import json

import httpx

from reminder_engine.notifications.base_sender import MessageAction
from reminder_engine.notifications.telegram_sender import TelegramSender


def _sender(handler) -> tuple[TelegramSender, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(record))
    return TelegramSender("test-token", client=client), requests


def test_send_success_with_buttons() -> None:
    sender, requests = _sender(lambda r: httpx.Response(200, json={"ok": True, "result": {"message_id": 7}}))

    result = asyncio.run(sender.send("1001", "hello", [MessageAction("⏸ 10 min", "snooze:10:abc")]))

    assert result.success
    assert '"message_id":7' in result.raw_response.replace(" ", "")
    request = requests[0]
    assert str(request.url) == "https://api.telegram.org/bottest-token/sendMessage"
    body = json.loads(request.content)
    assert body["chat_id"] == "1001"
    assert body["parse_mode"] == "HTML"
    assert body["reply_markup"] == {
        "inline_keyboard": [[{"text": "⏸ 10 min", "callback_data": "snooze:10:abc"}]]
    }


def test_send_api_error_is_reported() -> None:
    sender, _ = _sender(lambda r: httpx.Response(200, json={"ok": False, "description": "chat not found"}))

    result = asyncio.run(sender.send("1001", "hello"))

    assert not result.success
    assert result.error == "Telegram API error: chat not found"
    assert "chat not found" in result.raw_response


def test_send_http_error_is_reported() -> None:
    sender, _ = _sender(lambda r: httpx.Response(403, text="Forbidden: bot was blocked"))

    result = asyncio.run(sender.send("1001", "hello"))

    assert not result.success
    assert "HTTP 403" in result.error
    assert result.raw_response == "Forbidden: bot was blocked"


def test_transport_error_is_reported_not_raised() -> None:
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    sender, _ = _sender(boom)

    result = asyncio.run(sender.send("1001", "hello"))

    assert not result.success
    assert "no route" in result.error


def test_send_without_token_or_address() -> None:
    sender, requests = _sender(lambda r: httpx.Response(200, json={"ok": True}))

    assert not asyncio.run(sender.send("", "hello")).success
    assert not asyncio.run(TelegramSender("").send("1001", "hello")).success
    assert not requests


def test_edit_message_removes_buttons() -> None:
    sender, requests = _sender(lambda r: httpx.Response(200, json={"ok": True}))

    assert asyncio.run(sender.edit_message_text(5, 9, "done"))
    assert asyncio.run(sender.answer_callback_query("cb-1", "ok"))

    edit = json.loads(requests[0].content)
    assert edit["reply_markup"] == {"inline_keyboard": []}
    assert (edit["chat_id"], edit["message_id"]) == (5, 9)
    answer = json.loads(requests[1].content)
    assert answer == {"callback_query_id": "cb-1", "text": "ok", "show_alert": False}
