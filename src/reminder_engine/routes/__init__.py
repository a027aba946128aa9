"""
Reminder Engine API Routes

FastAPI route handlers for the reminder engine.
"""
from .health import router as health_router
from .jobs import router as jobs_router
from .telegram import router as telegram_router

__all__ = [
    'health_router',
    'jobs_router',
    'telegram_router',
]
