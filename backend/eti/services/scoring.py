"""
Scoring & derivation.

Pure functions over the current candidate/job lists. Nothing here is cached;
callers recompute on every request.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Optional, Sequence, Union

from eti.schemas import (
    Candidate,
    CandidateStatus,
    Job,
    JobMatchResult,
    RiskLevel,
)

# Used for conditional styling only, never for ordering records
RISK_SEVERITY: dict[RiskLevel, int] = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}

RISK_COLORS: dict[RiskLevel, str] = {
    RiskLevel.LOW: "bg-emerald-100 text-emerald-800 border-emerald-200",
    RiskLevel.MEDIUM: "bg-yellow-100 text-yellow-800 border-yellow-200",
    RiskLevel.HIGH: "bg-orange-100 text-orange-800 border-orange-200",
    RiskLevel.CRITICAL: "bg-red-100 text-red-800 border-red-200",
}
DEFAULT_RISK_COLOR = "bg-gray-100 text-gray-800"

HIGH_RISK_LEVELS = {RiskLevel.HIGH, RiskLevel.CRITICAL}

DEFAULT_MATCH_LIMIT = 5

# Ceiling on overall score when the candidate has fewer years than required:
# overall <= EXPERIENCE_CEILING_SCALE * candidate_years / required_years
EXPERIENCE_CEILING_SCALE = 80

_YEARS_PATTERN = re.compile(r"(\d{1,2})\s*\+?\s*(?:years|yrs)", re.IGNORECASE)


def _as_level(level: Union[RiskLevel, str, None]) -> Optional[RiskLevel]:
    if level is None:
        return None
    try:
        return RiskLevel(level)
    except ValueError:
        return None


def risk_severity(level: Union[RiskLevel, str, None]) -> int:
    """Severity rank LOW < MEDIUM < HIGH < CRITICAL; unknown levels rank -1."""
    parsed = _as_level(level)
    return RISK_SEVERITY[parsed] if parsed else -1


def risk_color(level: Union[RiskLevel, str, None]) -> str:
    parsed = _as_level(level)
    return RISK_COLORS.get(parsed, DEFAULT_RISK_COLOR) if parsed else DEFAULT_RISK_COLOR


def status_for_risk(level: Union[RiskLevel, str]) -> CandidateStatus:
    """
    Automatic decision for a completed scan.

    The risk level is the only input: HIGH/CRITICAL reject, anything else
    verifies. The integrity score is display-only and never consulted here.
    """
    parsed = _as_level(level)
    if parsed in HIGH_RISK_LEVELS:
        return CandidateStatus.REJECTED
    return CandidateStatus.VERIFIED


def is_high_risk(candidate: Candidate) -> bool:
    report = candidate.report
    return report is not None and report.risk_assessment.level in HIGH_RISK_LEVELS


def dashboard_stats(candidates: Sequence[Candidate]) -> dict[str, int]:
    """Aggregate counts shown on the HR dashboard."""
    return {
        "total_candidates": len(candidates),
        "verified": sum(1 for c in candidates if c.status == CandidateStatus.VERIFIED),
        "host_community": sum(1 for c in candidates if c.report is not None and c.report.is_host_community),
        "high_risk": sum(1 for c in candidates if is_high_risk(c)),
    }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def average_match_score(
    results: Iterable[Union[JobMatchResult, int]],
    limit: int = DEFAULT_MATCH_LIMIT,
) -> Optional[int]:
    """
    Average overall score of the first `limit` match results, rounded to the
    nearest integer (halves round up). None when there are no results.
    """
    scores = [r.overall_score if isinstance(r, JobMatchResult) else int(r) for r in results][:limit]
    if not scores:
        return None
    return round_half_up(sum(scores) / len(scores))


def rank_matches(results: Iterable[JobMatchResult]) -> list[JobMatchResult]:
    return sorted(results, key=lambda r: r.overall_score, reverse=True)


def recent_candidates(candidates: Sequence[Candidate], limit: int = 5) -> list[Candidate]:
    return list(candidates[:limit])


def search_candidates(candidates: Sequence[Candidate], term: Optional[str]) -> list[Candidate]:
    """Case-insensitive match on name or id."""
    if not term:
        return list(candidates)
    needle = term.lower()
    return [c for c in candidates if needle in c.name.lower() or needle in c.id.lower()]


def filter_jobs(
    jobs: Sequence[Job],
    job_type: Optional[str] = None,
    location: Optional[str] = None,
    company: Optional[str] = None,
    sort: str = "newest",
) -> list[Job]:
    result = [
        job
        for job in jobs
        if (not job_type or job.type.value == job_type)
        and (not location or job.location == location)
        and (not company or job.company == company)
    ]
    if sort == "newest":
        result.sort(key=lambda j: j.posted_date, reverse=True)
    elif sort == "oldest":
        result.sort(key=lambda j: j.posted_date)
    return result


def job_facets(jobs: Sequence[Job]) -> dict[str, list[str]]:
    """Distinct filter values, in first-seen order."""
    return {
        "types": list(dict.fromkeys(job.type.value for job in jobs)),
        "locations": list(dict.fromkeys(job.location for job in jobs)),
        "companies": list(dict.fromkeys(job.company for job in jobs)),
    }


# ============== Experience Weighting ==============


def required_years_from_text(text: Optional[str]) -> Optional[int]:
    """Largest 'N years' figure in a job description, if any."""
    matches = [int(value) for value in _YEARS_PATTERN.findall(text or "")]
    return max(matches) if matches else None


def _as_years(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        years = int(value)
    except (TypeError, ValueError):
        return None
    return years if years >= 0 else None


def candidate_years_from_analysis(candidate_years: Any, analysis: Optional[str]) -> Optional[int]:
    """
    The candidate's years as reported, else the smallest 'N years' figure in
    the experience analysis. The analysis may also quote the job's figure,
    which is never below the candidate's when there is a shortfall.
    """
    years = _as_years(candidate_years)
    if years is not None:
        return years
    matches = [int(value) for value in _YEARS_PATTERN.findall(analysis or "")]
    return min(matches) if matches else None


def experience_ceiling(candidate_years: Any, required_years: Any) -> Optional[int]:
    """Highest overall score allowed for an experience shortfall, or None when there is none."""
    have = _as_years(candidate_years)
    need = _as_years(required_years)
    if have is None or not need or have >= need:
        return None
    return math.floor(EXPERIENCE_CEILING_SCALE * have / need)


def enforce_experience_weighting(
    result: JobMatchResult,
    candidate_years: Any,
    required_years: Any,
) -> JobMatchResult:
    """
    Cap the overall score on an experience shortfall and make sure the
    experience analysis names the gap. Skill overlap cannot lift the cap.
    """
    ceiling = experience_ceiling(candidate_years, required_years)
    if ceiling is None:
        return result

    have = _as_years(candidate_years)
    need = _as_years(required_years)
    analysis = result.experience_analysis or ""
    if "gap" not in analysis.lower():
        gap_note = f"Job requires {need} years, candidate has {have}: a {need - have}-year experience gap."
        analysis = f"{analysis} {gap_note}".strip()

    return result.model_copy(
        update={
            "overall_score": min(result.overall_score, ceiling),
            "experience_analysis": analysis,
        }
    )
