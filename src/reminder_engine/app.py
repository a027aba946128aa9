"""
Reminder Engine Application

FastAPI application exposing the job triggers and the Telegram webhook.
"""
import logging

from fastapi import FastAPI

from .services.engine_service import get_engine_service, init_engine_service
from .routes import health_router, jobs_router, telegram_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("reminders.app")

# Suppress noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("asyncpg").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    app = FastAPI(
        title="Reminder Engine API",
        description="Scheduled reminder queue: fill, dispatch, snooze and cancel",
        version="0.1.0"
    )

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup"""
        logger.info("Starting Reminder Engine...")

        try:
            await init_engine_service()
            logger.info("Reminder Engine started successfully")
        except Exception as e:
            logger.error(f"Failed to start Reminder Engine: {e}")
            raise

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        logger.info("Shutting down Reminder Engine...")

        try:
            engine = get_engine_service()
            await engine.close()
            logger.info("Reminder Engine shutdown complete")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")

    # Include routers
    app.include_router(health_router, prefix="/api/v1", tags=["health"])
    app.include_router(jobs_router, prefix="/api/v1", tags=["jobs"])
    app.include_router(telegram_router, prefix="/api/v1", tags=["telegram"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": "Reminder Engine",
            "version": "0.1.0",
            "status": "running"
        }

    return app


app = create_app()
