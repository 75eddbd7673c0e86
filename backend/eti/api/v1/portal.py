"""
Candidate portal endpoints.

Self-service profile analysis: upload a CV, get a compliance summary, job
recommendations and a basic score. Nothing here is persisted.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from eti.api.deps import get_repository
from eti.api.v1.session import get_session
from eti.core.config import settings
from eti.schemas import ComplianceReport, DocumentKind, JobMatchResult, OsintReport
from eti.services import gemini_gateway, workflow
from eti.services.intake import read_uploads
from eti.services.repository import RecordRepository
from eti.services.session import SessionState

router = APIRouter()


# ============== Pydantic Schemas ==============


class ProfileAnalysisResponse(BaseModel):
    report: ComplianceReport
    recommendations: list[JobMatchResult]
    basic_score: Optional[int] = None
    failed_job_ids: list[str] = []


class SelfCheckRequest(BaseModel):
    report: ComplianceReport


# ============== API Endpoints ==============


@router.post("/profile", response_model=ProfileAnalysisResponse)
async def analyze_profile(
    files: list[UploadFile] = File(default=[]),
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(get_session),
):
    """
    Analyze the candidate's own documents and match them to open jobs.

    Matches run one job at a time over the first MAX_MATCH_JOBS listings;
    a failed match is skipped and reported in failed_job_ids.
    """
    documents = await read_uploads(files, default_kind=DocumentKind.SUPPORT)
    analysis = workflow.profile_candidate(documents, repository.jobs, settings.MAX_MATCH_JOBS)
    return ProfileAnalysisResponse(
        report=analysis.report,
        recommendations=analysis.recommendations,
        basic_score=analysis.basic_score,
        failed_job_ids=analysis.failed_job_ids,
    )


@router.post("/osint", response_model=OsintReport)
async def self_osint(data: SelfCheckRequest, _state: SessionState = Depends(get_session)):
    """Digital footprint self-check for the candidate."""
    return gemini_gateway.generate_osint_report(
        data.report.candidate_name,
        workflow.self_check_context(data.report),
    )
