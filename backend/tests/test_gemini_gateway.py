import json
from unittest.mock import patch

import pytest

from conftest import compliance_payload, gemini_response, match_payload, osint_payload
from eti.core.config import settings
from eti.core.errors import AnalysisError, ConfigurationError, ValidationGap
from eti.schemas import ChatTurn, DocumentKind, Job, RiskLevel
from eti.services import gemini_gateway
from eti.services.intake import build_document


@pytest.fixture
def id_document():
    return build_document("national_id.jpg", b"id-bytes", mime_type="image/jpeg", kind=DocumentKind.IDENTITY)


@pytest.fixture
def selfie():
    return build_document("selfie.jpg", b"face-bytes", mime_type="image/jpeg", kind=DocumentKind.SELFIE)


@pytest.fixture
def qhse_job():
    return Job(
        id="j1",
        title="QHSE Supervisor",
        company="TotalEnergies EP",
        location="Hoima",
        description="At least 5 years in oil & gas with NEBOSH.",
        required_skills=["NEBOSH", "HSE"],
    )


def sent_config(genai_mock):
    return genai_mock.model.generate_content.call_args.kwargs["generation_config"]


def test_missing_api_key_fails_before_any_call(monkeypatch, id_document):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")

    with patch("eti.services.gemini_gateway.genai") as genai_mock:
        with pytest.raises(ConfigurationError):
            gemini_gateway.analyze_documents([id_document])

    genai_mock.GenerativeModel.assert_not_called()


def test_analyze_documents(mock_genai, id_document):
    mock_genai.model.generate_content.return_value = gemini_response(compliance_payload())

    report = gemini_gateway.analyze_documents([id_document])

    assert report.candidate_name == "Grace Atim"
    assert report.risk_assessment.level == RiskLevel.LOW
    parts = mock_genai.model.generate_content.call_args.args[0]
    assert parts[0] == {"mime_type": "image/jpeg", "data": b"id-bytes"}
    assert "identityVerification" not in sent_config(mock_genai)["response_schema"]["properties"]


def test_selfie_adds_face_match(mock_genai, id_document, selfie):
    payload = compliance_payload(identityVerification={"isMatch": False, "confidence": 12, "reason": "Different person"})
    mock_genai.model.generate_content.return_value = gemini_response(payload)

    report = gemini_gateway.analyze_documents([id_document, selfie])

    schema = sent_config(mock_genai)["response_schema"]
    assert "identityVerification" in schema["required"]
    assert report.identity_verification.is_match is False


def test_selfie_alone_is_rejected(mock_genai, selfie):
    with pytest.raises(ValidationGap):
        gemini_gateway.analyze_documents([selfie])
    mock_genai.GenerativeModel.assert_not_called()


@pytest.mark.parametrize("text", ["not json at all", "", '{"candidateName": "X"}'])
def test_bad_responses_become_analysis_errors(mock_genai, id_document, text):
    mock_genai.model.generate_content.return_value = gemini_response(text)

    with pytest.raises(AnalysisError):
        gemini_gateway.analyze_documents([id_document])


def test_transport_failure_becomes_analysis_error(mock_genai, id_document):
    mock_genai.model.generate_content.side_effect = RuntimeError("503 upstream")

    with pytest.raises(AnalysisError):
        gemini_gateway.analyze_documents([id_document])


def test_fenced_json_is_accepted(mock_genai, id_document):
    fenced = "Here you go:\n```json\n" + json.dumps(compliance_payload(level="HIGH")) + "\n```"
    mock_genai.model.generate_content.return_value = gemini_response(fenced)

    assert gemini_gateway.analyze_documents([id_document]).risk_assessment.level == RiskLevel.HIGH


def test_osint_report_with_grounding_sources(mock_genai):
    mock_genai.model.generate_content.return_value = gemini_response(
        osint_payload(), sources=["https://example.ug/news", "https://example.ug/news"]
    )

    report = gemini_gateway.generate_osint_report("Grace Atim", "Role: QHSE.")

    assert report.sources == ["https://example.ug/news"]
    assert mock_genai.GenerativeModel.call_args.kwargs["tools"] == "google_search_retrieval"
    assert "response_schema" not in sent_config(mock_genai)


def test_osint_without_grounding_uses_schema(mock_genai, monkeypatch):
    monkeypatch.setattr(settings, "OSINT_SEARCH_GROUNDING", False)
    mock_genai.model.generate_content.return_value = gemini_response(osint_payload())

    report = gemini_gateway.generate_osint_report("Grace Atim", "Role: QHSE.")

    assert report.sources is None
    assert sent_config(mock_genai)["response_schema"] is gemini_gateway.OSINT_SCHEMA


def test_osint_records_without_match_are_rejected(mock_genai):
    payload = osint_payload(criminalRecords=[{"caseId": "C1", "offense": "Fraud", "status": "Pending"}])
    mock_genai.model.generate_content.return_value = gemini_response(payload)

    with pytest.raises(AnalysisError):
        gemini_gateway.generate_osint_report("Grace Atim", "")


def test_job_match_enforces_experience_gap(mock_genai, id_document, qhse_job):
    payload = match_payload(
        score=85,
        skillsMatchScore=100,
        candidateExperienceYears=2,
        requiredExperienceYears=5,
        experienceAnalysis="Solid HSE skills.",
    )
    mock_genai.model.generate_content.return_value = gemini_response(payload)

    result = gemini_gateway.match_candidate_to_job([id_document], qhse_job)

    assert result.job_id == "j1"
    assert result.overall_score < 40
    assert "gap" in result.experience_analysis.lower()


def test_job_match_reads_required_years_from_description(mock_genai, id_document, qhse_job):
    payload = match_payload(score=90, candidateExperienceYears=1)
    mock_genai.model.generate_content.return_value = gemini_response(payload)

    result = gemini_gateway.match_candidate_to_job([id_document], qhse_job)

    assert result.overall_score == 16


def test_job_match_requires_experience_years_from_model(mock_genai, id_document, qhse_job):
    mock_genai.model.generate_content.return_value = gemini_response(match_payload())

    gemini_gateway.match_candidate_to_job([id_document], qhse_job)

    required = sent_config(mock_genai)["response_schema"]["required"]
    assert "candidateExperienceYears" in required
    assert "requiredExperienceYears" in required


def test_job_match_reads_candidate_years_from_analysis(mock_genai, id_document, qhse_job):
    payload = match_payload(score=85, skillsMatchScore=100, experienceAnalysis="Candidate has 2 years in HSE.")
    del payload["candidateExperienceYears"]
    del payload["requiredExperienceYears"]
    mock_genai.model.generate_content.return_value = gemini_response(payload)

    result = gemini_gateway.match_candidate_to_job([id_document], qhse_job)

    assert result.overall_score < 40
    assert "gap" in result.experience_analysis.lower()


def test_job_match_without_candidate_years_fails(mock_genai, id_document, qhse_job):
    payload = match_payload(score=85, experienceAnalysis="Strong HSE background.")
    del payload["candidateExperienceYears"]
    mock_genai.model.generate_content.return_value = gemini_response(payload)

    with pytest.raises(AnalysisError):
        gemini_gateway.match_candidate_to_job([id_document], qhse_job)


def test_sourcing_strategies(mock_genai, qhse_job):
    mock_genai.model.generate_content.return_value = gemini_response(
        {
            "searchString": '("QHSE" OR "HSE") AND NEBOSH AND Hoima',
            "explanation": "Target certified HSE staff near the Albertine region.",
            "profiles": [{"name": "Peter Byaruhanga", "currentRole": "HSE Officer"}],
        }
    )

    result = gemini_gateway.generate_sourcing_strategies(qhse_job)

    assert result.profiles[0].current_role == "HSE Officer"
    assert sent_config(mock_genai)["temperature"] == 0.7


def test_parse_profile_text_requires_text(mock_genai):
    with pytest.raises(ValidationGap):
        gemini_gateway.parse_profile_text("   ")


def test_chat_sends_history(mock_genai):
    chat_session = mock_genai.model.start_chat.return_value
    chat_session.send_message.return_value.text = "NEBOSH IGC is the usual baseline."

    reply = gemini_gateway.chat(
        "Which HSE certificate do I need?",
        [ChatTurn(role="user", text="Hi"), ChatTurn(role="model", text="Hello!")],
    )

    history = mock_genai.model.start_chat.call_args.kwargs["history"]
    assert reply == "NEBOSH IGC is the usual baseline."
    assert history[-2:] == [
        {"role": "user", "parts": ["Hi"]},
        {"role": "model", "parts": ["Hello!"]},
    ]
    chat_session.send_message.assert_called_once_with("Which HSE certificate do I need?")


def test_chat_empty_reply_falls_back(mock_genai):
    mock_genai.model.start_chat.return_value.send_message.return_value.text = ""

    assert gemini_gateway.chat("Hello", []) == gemini_gateway.CHAT_FALLBACK_REPLY
