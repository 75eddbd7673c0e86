"""
Candidate workflow.

Turns uploaded evidence and gateway output into Candidate records, and runs
the sequential job-matching fold used by the candidate portal.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from eti.core.errors import AnalysisError, ValidationGap
from eti.schemas import (
    Candidate,
    CandidateSource,
    CandidateStatus,
    ComplianceReport,
    Document,
    Job,
    JobMatchResult,
    SourcedProfile,
)
from eti.services import gemini_gateway
from eti.services.scoring import DEFAULT_MATCH_LIMIT, average_match_score, rank_matches, status_for_risk

logger = logging.getLogger("workflow")

UNKNOWN_CANDIDATE = "Unknown Candidate"
PENDING_ROLE = "Pending Assessment"


@dataclass
class MatchBatch:
    """Outcome of matching one candidate against a list of jobs."""

    results: list[JobMatchResult] = field(default_factory=list)
    failed_job_ids: list[str] = field(default_factory=list)


@dataclass
class ProfileAnalysis:
    report: ComplianceReport
    recommendations: list[JobMatchResult]
    basic_score: Optional[int]
    failed_job_ids: list[str]


# ============== Scanner ==============


def scan_candidate(
    documents: list[Document],
    selfie: Optional[Document],
    email: Optional[str] = None,
) -> Candidate:
    """
    Analyze uploaded documents plus the ID selfie and build a new Candidate.

    Status comes from the risk level alone: HIGH/CRITICAL -> REJECTED,
    otherwise VERIFIED. This path never produces PENDING.
    """
    if not documents:
        raise ValidationGap("Please upload candidate documents (ID, CV).")
    if selfie is None:
        raise ValidationGap("Verification Required: Please take a photo holding the ID card.")

    all_documents = [*documents, selfie]
    report = gemini_gateway.analyze_documents(all_documents)

    candidate = Candidate(
        name=report.candidate_name or UNKNOWN_CANDIDATE,
        role=PENDING_ROLE,
        status=status_for_risk(report.risk_assessment.level),
        source=CandidateSource.UPLOAD,
        report=report,
        documents=all_documents,
        email=email or None,
        email_verified=False,
    )
    logger.info("Scan complete for %s -> %s", candidate.name, candidate.status.value)
    return candidate


# ============== OSINT ==============


def osint_context(candidate: Candidate) -> str:
    report = candidate.report
    district = report.district_of_origin if report else "Unknown"
    integrity = report.integrity_score if report else "Unknown"
    return f"Role: {candidate.role}. District: {district}. Integrity Score: {integrity}."


def self_check_context(report: ComplianceReport) -> str:
    return (
        "Candidate Self-Check Request. "
        f"District: {report.district_of_origin}. Integrity: {report.integrity_score}"
    )


def run_osint(candidate: Candidate) -> Candidate:
    """Return a copy of the candidate with a fresh OSINT report attached."""
    osint = gemini_gateway.generate_osint_report(candidate.name, osint_context(candidate))
    return candidate.model_copy(update={"osint": osint})


# ============== Job Matching ==============


def match_jobs(
    documents: list[Document],
    jobs: Sequence[Job],
    limit: int = DEFAULT_MATCH_LIMIT,
) -> MatchBatch:
    """
    Match documents against the first `limit` jobs, one call at a time.

    A failed match is logged and skipped; the rest of the batch still runs.
    """
    batch = MatchBatch()
    for job in list(jobs)[:limit]:
        try:
            batch.results.append(gemini_gateway.match_candidate_to_job(documents, job))
        except AnalysisError as e:
            logger.warning("Failed to match job %s: %s", job.id, e)
            batch.failed_job_ids.append(job.id)
    return batch


def profile_candidate(
    documents: list[Document],
    jobs: Sequence[Job],
    limit: int = DEFAULT_MATCH_LIMIT,
) -> ProfileAnalysis:
    """Candidate portal flow: compliance report, ranked job recommendations, basic score."""
    if not documents:
        raise ValidationGap("Upload your CV or supporting documents first.")

    report = gemini_gateway.analyze_documents(documents)
    batch = match_jobs(documents, jobs, limit)
    return ProfileAnalysis(
        report=report,
        recommendations=rank_matches(batch.results),
        basic_score=average_match_score(batch.results, limit),
        failed_job_ids=batch.failed_job_ids,
    )


# ============== HR Import ==============


def import_sourced_profile(profile: SourcedProfile, job: Optional[Job] = None) -> Candidate:
    """Candidate record for a lead found by a sourcing run. Awaits documents, so PENDING."""
    role = profile.current_role or (job.title if job else PENDING_ROLE)
    return Candidate(
        name=profile.name,
        role=role,
        status=CandidateStatus.PENDING,
        source=CandidateSource.LINKEDIN,
    )


def import_parsed_profile(report: ComplianceReport, role: Optional[str] = None) -> Candidate:
    """Candidate record built from pasted profile text parsed by the gateway."""
    return Candidate(
        name=report.candidate_name or UNKNOWN_CANDIDATE,
        role=role or PENDING_ROLE,
        status=CandidateStatus.PENDING,
        source=CandidateSource.LINKEDIN,
        report=report,
    )


# ============== Record Edits ==============


def set_status(candidate: Candidate, status: CandidateStatus) -> Candidate:
    return candidate.model_copy(update={"status": status})


def add_documents(candidate: Candidate, documents: list[Document]) -> Candidate:
    return candidate.model_copy(update={"documents": [*(candidate.documents or []), *documents]})


def remove_document(candidate: Candidate, index: int) -> Candidate:
    existing = list(candidate.documents or [])
    if index < 0 or index >= len(existing):
        raise IndexError(f"No document at index {index}")
    del existing[index]
    return candidate.model_copy(update={"documents": existing})
