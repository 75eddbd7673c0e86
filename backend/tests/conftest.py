import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eti.api.deps import get_repository
from eti.core.config import settings
from eti.db.base import Base
from eti.main import app
from eti.models import CandidateRecord, JobRecord  # noqa: F401
from eti.services.record_store import FallbackRecordStore, SqlRecordStore
from eti.services.repository import RecordRepository


def compliance_payload(level="LOW", name="Grace Atim", **overrides):
    payload = {
        "candidateName": name,
        "districtOfOrigin": "Hoima",
        "isHostCommunity": True,
        "certificationsValid": True,
        "integrityScore": 88,
        "riskAssessment": {"level": level, "reason": "Documents are consistent."},
        "auditNotes": "Oil & Gas profile.",
        "missingDocuments": [],
    }
    payload.update(overrides)
    return payload


def osint_payload(**overrides):
    payload = {
        "criminalRecordMatch": False,
        "criminalDetails": "No negative matches found in global or local criminal databases.",
        "criminalRecords": [],
        "digitalFootprintScore": 55,
        "lifestyleAnalysis": "Consistent with reported role.",
        "familyBackground": "No political exposure found.",
        "socialMediaSentiment": "POSITIVE",
        "redFlags": [],
        "improvementTips": ["Add certifications to LinkedIn."],
    }
    payload.update(overrides)
    return payload


def match_payload(score=70, **overrides):
    payload = {
        "overallScore": score,
        "skillsMatchScore": 60,
        "candidateExperienceYears": 6,
        "requiredExperienceYears": 0,
        "experienceAnalysis": "Experience fits the role.",
        "locationAnalysis": "Based in Hoima.",
        "matchedSkills": ["HSE"],
        "missingSkills": [],
        "reason": "Good fit.",
    }
    payload.update(overrides)
    return payload


def gemini_response(payload, sources=None):
    """A stand-in for a generate_content response."""
    response = MagicMock()
    response.text = payload if isinstance(payload, str) else json.dumps(payload)
    candidates = []
    if sources:
        chunks = [MagicMock(web=MagicMock(uri=uri)) for uri in sources]
        candidates = [MagicMock(grounding_metadata=MagicMock(grounding_chunks=chunks))]
    response.candidates = candidates
    return response


@pytest.fixture
def gemini_key(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(settings, "OSINT_SEARCH_GROUNDING", True)


@pytest.fixture
def mock_genai(gemini_key):
    """Patched google.generativeai module; configure the model via .model."""
    with patch("eti.services.gemini_gateway.genai") as genai_mock:
        genai_mock.model = genai_mock.GenerativeModel.return_value
        yield genai_mock


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def sql_store(session_factory):
    return SqlRecordStore(session_factory)


@pytest.fixture
def repository(sql_store):
    repo = RecordRepository(FallbackRecordStore(sql_store))
    repo.attach()
    yield repo
    repo.detach()


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def hr_headers(client):
    res = client.post("/api/v1/session/login", json={"role": "HR_MANAGER"})
    return _auth(res.json()["token"])


@pytest.fixture
def candidate_headers(client):
    res = client.post("/api/v1/session/login", json={"role": "CANDIDATE"})
    return _auth(res.json()["token"])


@pytest.fixture
def admin_headers(client):
    res = client.post("/api/v1/session/admin-login", json={"access_code": settings.ADMIN_ACCESS_CODE})
    return _auth(res.json()["token"])
