"""
Reminder Engine Configuration

Configuration class for the reminder queue jobs and the Telegram webhook.
"""
import os
from pathlib import Path
from typing import Dict
from urllib.parse import quote_plus
from dotenv import load_dotenv

# Load .env file from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


def _parse_sources(raw: str) -> Dict[str, str]:
    """Parse 'app=table,app2=table2' into a mapping"""
    sources = {}
    for chunk in raw.split(","):
        app, _, table = chunk.partition("=")
        app, table = app.strip(), table.strip()
        if app and table:
            sources[app] = table
    return sources


class Config:
    """Configuration class for Reminder Engine"""

    # Base paths
    BASE_DIR = Path(__file__).parent.parent.parent

    # Database settings
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "reminders")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    # API settings
    API_HOST = os.getenv("API_HOST", "127.0.0.1")
    API_PORT = int(os.getenv("API_PORT", "8100"))

    # Shared secret for the HTTP job triggers (empty = no check)
    JOBS_SECRET = os.getenv("JOBS_SECRET", "")

    # Telegram Bot
    TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
    TELEGRAM_WEBHOOK_SECRET = os.getenv("TELEGRAM_WEBHOOK_SECRET", "")

    # SMTP (Email notifications)
    SMTP_HOST = os.getenv("SMTP_HOST", "")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")

    # Filler settings
    FILL_HORIZON_DAYS = int(os.getenv("FILL_HORIZON_DAYS", "7"))
    FILL_SAFETY_WINDOW_MINUTES = int(os.getenv("FILL_SAFETY_WINDOW_MINUTES", "2"))

    # Dispatcher settings
    DISPATCH_BATCH_SIZE = int(os.getenv("DISPATCH_BATCH_SIZE", "25"))
    DISPATCH_MAX_ATTEMPTS = int(os.getenv("DISPATCH_MAX_ATTEMPTS", "5"))

    # Scheduler settings
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
    FILL_CRON = os.getenv("FILL_CRON", "0 */6 * * *")
    DISPATCH_CRON = os.getenv("DISPATCH_CRON", "*/5 * * * *")

    # Timezone used in user-facing timestamps
    DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "UTC")

    # Entity lookup tables per application, e.g. "tasks=cm_tasks,habits=cm_habits"
    ENTITY_SOURCES = _parse_sources(os.getenv("ENTITY_SOURCES", ""))

    @staticmethod
    def get_postgres_dsn() -> str:
        """Get PostgreSQL DSN with password handling"""
        if Config.DB_PASSWORD:
            password = quote_plus(Config.DB_PASSWORD)
            return f"postgresql://{Config.DB_USER}:{password}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"
        return f"postgresql://{Config.DB_USER}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"
