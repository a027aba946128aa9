"""
Health Check Routes

Endpoints for service health monitoring.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..services.engine_service import EngineService, get_engine_service

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "reminder-engine",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/ready")
async def readiness_check(engine: EngineService = Depends(get_engine_service)):
    """
    Readiness check - storages connected and senders configured.
    Used by Kubernetes/orchestrators for readiness probes.
    """
    return {
        "ready": engine.is_initialized,
        "scheduler_running": engine.scheduler_service.is_running,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
