"""
Admin API endpoints.

Platform overview for the system administrator.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from eti.api.deps import get_repository
from eti.api.v1.dashboard import DashboardStats
from eti.api.v1.session import require_admin
from eti.core.config import settings
from eti.services.record_store import CANDIDATES, JOBS
from eti.services.repository import RecordRepository
from eti.services.scoring import dashboard_stats
from eti.services.session import SessionState

router = APIRouter()


class StoreStatus(BaseModel):
    ready: bool
    candidates: Optional[str] = None  # "live" | "demo"
    jobs: Optional[str] = None


class AdminOverview(BaseModel):
    stats: DashboardStats
    total_jobs: int
    store: StoreStatus
    ai_configured: bool
    ai_model: str


@router.get("/overview", response_model=AdminOverview)
async def overview(
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_admin),
):
    return AdminOverview(
        stats=DashboardStats(**dashboard_stats(repository.candidates)),
        total_jobs=len(repository.jobs),
        store=StoreStatus(
            ready=repository.ready,
            candidates=repository.mode(CANDIDATES),
            jobs=repository.mode(JOBS),
        ),
        ai_configured=bool(settings.GEMINI_API_KEY),
        ai_model=settings.GEMINI_MODEL,
    )
