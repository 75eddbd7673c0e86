"""
Job API endpoints.

Job listings for every role; posting and sourcing for HR managers and admins.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from eti.api.deps import get_repository
from eti.api.v1.session import get_session, require_management
from eti.schemas import EmploymentType, Job, SourcingResult
from eti.services import gemini_gateway
from eti.services.repository import RecordRepository
from eti.services.scoring import filter_jobs, job_facets
from eti.services.session import SessionState

router = APIRouter()


# ============== Pydantic Schemas ==============


class JobCreateRequest(BaseModel):
    """Schema for posting a job."""

    title: str
    company: str = "Unknown"
    location: str = "Uganda"
    type: EmploymentType = EmploymentType.FULL_TIME
    description: str
    required_skills: list[str] = Field(default_factory=list)

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class JobListResponse(BaseModel):
    total: int
    jobs: list[Job]
    facets: dict[str, list[str]]


# ============== API Endpoints ==============


@router.get("", response_model=JobListResponse)
async def list_jobs(
    type: Optional[EmploymentType] = None,
    location: Optional[str] = None,
    company: Optional[str] = None,
    sort: Literal["newest", "oldest", "relevance"] = "newest",
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(get_session),
):
    """
    Job listings with optional filters.

    Sort: newest / oldest by posted date; relevance keeps store order
    (relevance is scored per candidate in the portal).
    """
    all_jobs = repository.jobs
    jobs = filter_jobs(
        all_jobs,
        job_type=type.value if type else None,
        location=location,
        company=company,
        sort=sort,
    )
    return JobListResponse(total=len(jobs), jobs=jobs, facets=job_facets(all_jobs))


@router.post("", response_model=Job, status_code=status.HTTP_201_CREATED)
async def post_job(
    data: JobCreateRequest,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    job = Job(
        title=data.title,
        company=data.company or "Unknown",
        location=data.location or "Uganda",
        type=data.type,
        description=data.description,
        required_skills=[skill.strip() for skill in data.required_skills if skill.strip()],
    )
    return repository.create_job(job)


@router.post("/{job_id}/sourcing", response_model=SourcingResult)
async def sourcing_strategies(
    job_id: str,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    """Generate a Boolean search string and candidate leads for a job."""
    job = repository.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return gemini_gateway.generate_sourcing_strategies(job)
