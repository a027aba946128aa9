"""
Reminder Engine Runner

    reminder-engine serve       HTTP API with the background scheduler
    reminder-engine fill        one filler run, summary printed as JSON
    reminder-engine dispatch    one dispatcher run, summary printed as JSON
    reminder-engine migrate     apply pending database migrations

fill and dispatch exit with status 1 when the run is aborted, so an
external cron can alert on it.
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import uvicorn

from .config import Config
from .errors import JobFetchError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("reminders")


async def _run_job(name: str) -> int:
    from .services.engine_service import get_engine_service

    engine = get_engine_service()
    await engine.initialize(start_scheduler=False)
    try:
        job = engine.filler_service.fill if name == "fill" else engine.dispatcher_service.dispatch
        result = await job()
    except JobFetchError as e:
        logger.error(f"{name} run aborted: {e}")
        print(json.dumps({"ok": False, "error": str(e)}))
        return 1
    finally:
        await engine.close()

    print(json.dumps(result.to_dict()))
    return 0


async def _migrate() -> int:
    from .migrations.migrate import apply_migrations

    await apply_migrations()
    return 0


def serve(host: str, port: int, reload: bool = False):
    logger.info(f"Starting Reminder Engine on {host}:{port}")
    uvicorn.run("reminder_engine.app:app", host=host, port=port, reload=reload)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reminder-engine", description="Scheduled reminder queue")
    commands = parser.add_subparsers(dest="command")

    serve_cmd = commands.add_parser("serve", help="run the HTTP API and scheduler")
    serve_cmd.add_argument("--host", default=Config.API_HOST)
    serve_cmd.add_argument("--port", type=int, default=Config.API_PORT)
    serve_cmd.add_argument("--reload", action="store_true")

    commands.add_parser("fill", help="materialize queue entries once")
    commands.add_parser("dispatch", help="deliver due entries once")
    commands.add_parser("migrate", help="apply database migrations")
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """Console entry point"""
    args = build_parser().parse_args(argv)
    command = args.command or "serve"

    if command == "serve":
        serve(
            getattr(args, "host", Config.API_HOST),
            getattr(args, "port", Config.API_PORT),
            getattr(args, "reload", False),
        )
        return 0
    if command == "migrate":
        return asyncio.run(_migrate())
    return asyncio.run(_run_job(command))


if __name__ == "__main__":
    sys.exit(run())
