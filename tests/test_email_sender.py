from __future__ import annotations

import asyncio

import aiosmtplib
import pytest

from reminder_engine.notifications.base_sender import MessageAction
from reminder_engine.notifications.email_sender import EmailSender


def _sender(**overrides) -> EmailSender:
    values = dict(smtp_host="smtp.test", smtp_port=587, smtp_user="bot@example.com", smtp_password="pw")
    values.update(overrides)
    return EmailSender(**values)


@pytest.fixture
def smtp_calls(monkeypatch):
    calls: list[tuple] = []

    async def fake_send(message, **kwargs):
        calls.append((message, kwargs))
        return {}, "250 2.0.0 OK queued"

    monkeypatch.setattr(aiosmtplib, "send", fake_send)
    return calls


def _plain_body(message) -> str:
    [part] = message.get_payload()
    return part.get_payload(decode=True).decode("utf-8")


def test_html_reminder_becomes_plain_text_email(smtp_calls) -> None:
    content = "🔔 Rent &amp; utilities\nReminder: <b>1 hour</b> before"

    result = asyncio.run(_sender().send("user@example.com", content, [MessageAction("❌ Cancel", "cancel:x")]))

    assert result.success
    assert result.raw_response == "250 2.0.0 OK queued"
    [(message, kwargs)] = smtp_calls
    assert message["To"] == "user@example.com"
    assert message["From"] == "Reminders <bot@example.com>"
    assert message["Subject"] == "🔔 Rent & utilities"
    assert _plain_body(message) == "🔔 Rent & utilities\nReminder: 1 hour before"
    assert (kwargs["hostname"], kwargs["port"], kwargs["start_tls"]) == ("smtp.test", 587, True)


def test_digest_subject_is_first_line_capped(smtp_calls) -> None:
    content = "📋 <b>Notification summary (2)</b>\n\n• <b>A</b>\n• <b>B</b>"
    long_content = "x" * 300 + "\nbody"

    asyncio.run(_sender().send("user@example.com", content))
    asyncio.run(_sender().send("user@example.com", long_content))

    assert smtp_calls[0][0]["Subject"] == "📋 Notification summary (2)"
    assert smtp_calls[1][0]["Subject"] == "x" * 120


def test_smtp_failure_is_returned_not_raised(monkeypatch) -> None:
    async def refuse(message, **kwargs):
        raise aiosmtplib.SMTPException("connection refused")

    monkeypatch.setattr(aiosmtplib, "send", refuse)

    result = asyncio.run(_sender().send("user@example.com", "🔔 Pay rent"))

    assert not result.success
    assert "connection refused" in result.error
    assert result.raw_response is None


def test_missing_address_is_not_sent(smtp_calls) -> None:
    result = asyncio.run(_sender().send("", "🔔 Pay rent"))

    assert not result.success
    assert result.error == "No email address for delivery"
    assert smtp_calls == []


def test_unconfigured_smtp_is_not_sent(smtp_calls) -> None:
    result = asyncio.run(_sender(smtp_host="").send("user@example.com", "🔔 Pay rent"))

    assert not result.success
    assert result.error == "SMTP not configured"
    assert smtp_calls == []
