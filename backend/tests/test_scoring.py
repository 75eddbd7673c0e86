import pytest
from pydantic import ValidationError

from eti.schemas import (
    Candidate,
    CandidateStatus,
    ComplianceReport,
    Job,
    JobMatchResult,
    OsintReport,
    RiskLevel,
)
from eti.services.scoring import (
    DEFAULT_RISK_COLOR,
    average_match_score,
    candidate_years_from_analysis,
    dashboard_stats,
    enforce_experience_weighting,
    experience_ceiling,
    filter_jobs,
    job_facets,
    rank_matches,
    required_years_from_text,
    risk_color,
    risk_severity,
    search_candidates,
    status_for_risk,
)


def make_candidate(name, level=None, status=CandidateStatus.PENDING, host=False, integrity=70):
    report = None
    if level is not None:
        report = ComplianceReport(
            candidate_name=name,
            is_host_community=host,
            integrity_score=integrity,
            risk_assessment={"level": level, "reason": "test"},
        )
    return Candidate(name=name, status=status, report=report)


def make_match(job_id, score):
    return JobMatchResult(job_id=job_id, overall_score=score, skills_match_score=50)


# ============== Risk ==============


def test_risk_severity_order():
    levels = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]
    assert [risk_severity(level) for level in levels] == [0, 1, 2, 3]
    assert risk_severity("UNKNOWN") == -1
    assert risk_severity(None) == -1


def test_risk_color_defaults_to_gray():
    assert "red" in risk_color(RiskLevel.CRITICAL)
    assert risk_color("SOMETHING") == DEFAULT_RISK_COLOR


@pytest.mark.parametrize(
    "level,expected",
    [
        (RiskLevel.LOW, CandidateStatus.VERIFIED),
        (RiskLevel.MEDIUM, CandidateStatus.VERIFIED),
        (RiskLevel.HIGH, CandidateStatus.REJECTED),
        (RiskLevel.CRITICAL, CandidateStatus.REJECTED),
    ],
)
def test_status_for_risk(level, expected):
    assert status_for_risk(level) == expected


# ============== Dashboard ==============


def test_dashboard_stats():
    candidates = [
        make_candidate("A", RiskLevel.LOW, CandidateStatus.VERIFIED, host=True),
        make_candidate("B", RiskLevel.HIGH, CandidateStatus.REJECTED),
        make_candidate("C", RiskLevel.CRITICAL, CandidateStatus.REJECTED, host=True),
        make_candidate("D"),
    ]

    assert dashboard_stats(candidates) == {
        "total_candidates": 4,
        "verified": 1,
        "host_community": 2,
        "high_risk": 2,
    }


def test_high_risk_count_never_drops_when_a_high_risk_candidate_is_added():
    candidates = [make_candidate("A", RiskLevel.LOW), make_candidate("B", RiskLevel.HIGH)]
    before = dashboard_stats(candidates)["high_risk"]

    after = dashboard_stats([*candidates, make_candidate("C", RiskLevel.CRITICAL)])["high_risk"]

    assert after == before + 1


def test_search_candidates_by_name_or_id():
    alice = make_candidate("Alice Akello")
    bob = make_candidate("Bob Opio")

    assert search_candidates([alice, bob], "akello") == [alice]
    assert search_candidates([alice, bob], bob.id) == [bob]
    assert search_candidates([alice, bob], None) == [alice, bob]


# ============== Matching ==============


def test_average_match_score_rounds():
    results = [make_match(f"j{i}", score) for i, score in enumerate([80, 60, 70, 90])]
    assert average_match_score(results) == 75


def test_average_match_score_rounds_halves_up():
    assert average_match_score([70, 71]) == 71


def test_average_match_score_uses_first_five_only():
    assert average_match_score([50, 50, 50, 50, 50, 100]) == 50


def test_average_match_score_empty():
    assert average_match_score([]) is None


def test_rank_matches_highest_first():
    ranked = rank_matches([make_match("a", 40), make_match("b", 90), make_match("c", 65)])
    assert [r.job_id for r in ranked] == ["b", "c", "a"]


# ============== Experience Weighting ==============


def test_required_years_from_text():
    assert required_years_from_text("Minimum 5 years in QHSE, 2 yrs offshore") == 5
    assert required_years_from_text("8+ years experience") == 8
    assert required_years_from_text("No experience needed") is None
    assert required_years_from_text(None) is None


def test_candidate_years_from_analysis():
    assert candidate_years_from_analysis(4, "Candidate has 2 years.") == 4
    assert candidate_years_from_analysis(None, "Job requires 5 years, candidate has 2 years.") == 2
    assert candidate_years_from_analysis("n/a", "Candidate has 3 yrs offshore.") == 3
    assert candidate_years_from_analysis(None, "Strong HSE background.") is None


def test_experience_ceiling():
    assert experience_ceiling(2, 5) == 32
    assert experience_ceiling(5, 5) is None
    assert experience_ceiling(7, 5) is None
    assert experience_ceiling(None, 5) is None
    assert experience_ceiling(2, 0) is None


def test_experience_gap_caps_score_despite_full_skill_match():
    result = JobMatchResult(
        job_id="j1",
        overall_score=88,
        skills_match_score=100,
        experience_analysis="Strong HSE background.",
    )

    weighted = enforce_experience_weighting(result, 2, 5)

    assert weighted.overall_score < 40
    assert "gap" in weighted.experience_analysis.lower()
    assert weighted.skills_match_score == 100


def test_experience_weighting_keeps_existing_gap_note():
    result = JobMatchResult(
        job_id="j1",
        overall_score=20,
        skills_match_score=40,
        experience_analysis="Job requires 5 years, candidate has 2. Severe gap.",
    )

    weighted = enforce_experience_weighting(result, 2, 5)

    assert weighted.overall_score == 20
    assert weighted.experience_analysis == result.experience_analysis


# ============== Jobs ==============


def test_filter_jobs_and_facets():
    jobs = [
        Job(title="QHSE", company="Total", location="Hoima", type="Full-time", description="d", posted_date="2025-01-02"),
        Job(title="Driver", company="CNOOC", location="Buliisa", type="Contract", description="d", posted_date="2025-01-03"),
        Job(title="Clerk", company="Total", location="Kampala", type="Casual", description="d", posted_date="2025-01-01"),
    ]

    assert [j.title for j in filter_jobs(jobs, company="Total")] == ["QHSE", "Clerk"]
    assert [j.title for j in filter_jobs(jobs, job_type="Contract")] == ["Driver"]
    assert [j.title for j in filter_jobs(jobs, sort="oldest")] == ["Clerk", "QHSE", "Driver"]
    assert job_facets(jobs)["companies"] == ["Total", "CNOOC"]


# ============== Record invariants ==============


def test_osint_records_require_match():
    with pytest.raises(ValidationError):
        OsintReport(
            criminal_record_match=False,
            digital_footprint_score=10,
            criminal_records=[{"caseId": "C1", "offense": "Fraud", "status": "Pending"}],
        )


def test_scores_are_bounded():
    with pytest.raises(ValidationError):
        ComplianceReport(candidate_name="X", integrity_score=101, risk_assessment={"level": "LOW"})
    with pytest.raises(ValidationError):
        OsintReport(criminal_record_match=False, digital_footprint_score=-1)


def test_records_serialize_camel_case():
    record = make_candidate("Grace", RiskLevel.LOW).to_record()

    assert record["report"]["riskAssessment"]["level"] == "LOW"
    assert "emailVerified" in record
    assert Candidate.model_validate(record).report.risk_assessment.level == RiskLevel.LOW
