"""
Job Routes

HTTP triggers for the filler and dispatcher runs, for external schedulers.
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import Config
from ..errors import JobFetchError
from ..services.engine_service import EngineService, get_engine_service

logger = logging.getLogger("reminders.routes.jobs")
router = APIRouter(prefix="/jobs", tags=["jobs"])


# ============================================
# Response Models
# ============================================

class FillResponse(BaseModel):
    """Filler run summary"""
    ok: bool = True
    total: int
    inserted: int
    skipped: int
    duplicates: int
    deleted: int
    errors: int


class DispatchResponse(BaseModel):
    """Dispatcher run summary"""
    ok: bool = True
    total: int
    woken: int
    sent: int
    failed: int
    skipped: int
    errors: int
    digest_users: int
    digest_items: int


# ============================================
# Routes
# ============================================

async def verify_jobs_secret(x_jobs_secret: Optional[str] = Header(None)):
    """Require X-Jobs-Secret when JOBS_SECRET is configured"""
    if not Config.JOBS_SECRET:
        return
    if not hmac.compare_digest((x_jobs_secret or "").encode(), Config.JOBS_SECRET.encode()):
        logger.warning("Rejected job trigger with invalid secret")
        raise HTTPException(status_code=403, detail="Forbidden")


def _fatal(job: str, error: JobFetchError) -> JSONResponse:
    logger.error(f"{job} run aborted: {error}")
    return JSONResponse(status_code=500, content={"ok": False, "error": str(error)})


@router.post("/fill", response_model=FillResponse, dependencies=[Depends(verify_jobs_secret)])
async def run_fill(engine: EngineService = Depends(get_engine_service)):
    """Materialize queue entries from enabled rules"""
    try:
        result = await engine.filler_service.fill()
    except JobFetchError as e:
        return _fatal("fill", e)
    return FillResponse(**result.to_dict())


@router.post("/dispatch", response_model=DispatchResponse, dependencies=[Depends(verify_jobs_secret)])
async def run_dispatch(engine: EngineService = Depends(get_engine_service)):
    """Deliver due and retrying queue entries"""
    try:
        result = await engine.dispatcher_service.dispatch()
    except JobFetchError as e:
        return _fatal("dispatch", e)
    return DispatchResponse(**result.to_dict())
