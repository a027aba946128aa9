from __future__ import annotations

from reminder_engine.migrations.migrate import MIGRATIONS_DIR, pending_migrations
from reminder_engine.run import build_parser


def test_bundled_migrations_are_found() -> None:
    names = [path.name for path in pending_migrations(set())]

    assert "001_reminders.sql" in names
    assert names == sorted(names)


def test_applied_migrations_are_skipped(tmp_path) -> None:
    for name in ("002_b.sql", "001_a.sql", "notes.txt"):
        (tmp_path / name).write_text("SELECT 1;")

    pending = pending_migrations({"001_a.sql"}, tmp_path)

    assert [path.name for path in pending] == ["002_b.sql"]
    assert MIGRATIONS_DIR.name == "migrations"


def test_parser_commands() -> None:
    parser = build_parser()

    assert parser.parse_args(["fill"]).command == "fill"
    assert parser.parse_args(["dispatch"]).command == "dispatch"
    serve = parser.parse_args(["serve", "--port", "9000"])
    assert (serve.command, serve.port) == ("serve", 9000)
    assert parser.parse_args([]).command is None
