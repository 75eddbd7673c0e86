"""
Dashboard API endpoints.

Provides the HR overview: headline counts and the most recent candidates.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from eti.api.deps import get_repository
from eti.api.v1.session import require_management
from eti.schemas import Candidate, CandidateStatus, RiskLevel
from eti.services.repository import RecordRepository
from eti.services.scoring import dashboard_stats, recent_candidates, risk_color, risk_severity
from eti.services.session import SessionState

router = APIRouter()


# ============== Pydantic Schemas ==============


class DashboardStats(BaseModel):
    """Schema for dashboard overview stats."""

    total_candidates: int
    verified: int
    host_community: int
    high_risk: int


class CandidateSummary(BaseModel):
    """Schema for a row in the recent candidates table."""

    id: str
    name: str
    role: str
    status: CandidateStatus
    timestamp: str
    integrity_score: Optional[int] = None
    risk_level: Optional[RiskLevel] = None
    risk_severity: int = -1
    risk_color: str


# ============== Helper Functions ==============


def summarize(candidate: Candidate) -> CandidateSummary:
    report = candidate.report
    level = report.risk_assessment.level if report else None
    return CandidateSummary(
        id=candidate.id,
        name=candidate.name,
        role=candidate.role,
        status=candidate.status,
        timestamp=candidate.timestamp,
        integrity_score=report.integrity_score if report else None,
        risk_level=level,
        risk_severity=risk_severity(level),
        risk_color=risk_color(level),
    )


# ============== API Endpoints ==============


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    """Counts recomputed from the current candidate list on every call."""
    return DashboardStats(**dashboard_stats(repository.candidates))


@router.get("/recent", response_model=list[CandidateSummary])
async def get_recent_candidates(
    limit: int = 5,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    return [summarize(c) for c in recent_candidates(repository.candidates, limit)]
