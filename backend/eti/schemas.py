"""
Domain records shared by the gateway, the record store and the API.

Every model serializes with camelCase keys, which is also the shape stored
in the record store and the shape the Gemini response schemas declare.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def new_record_id() -> str:
    """Client-side id, replaced by the store-assigned id on a successful write."""
    return uuid.uuid4().hex[:9]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """Serialize to the camelCase JSON dict stored in the record store."""
        return self.model_dump(mode="json", by_alias=True)


# ============== Enums ==============


class DocumentKind(str, Enum):
    IDENTITY = "identity"
    CV = "cv"
    SUPPORT = "support"
    HR_UPLOAD = "hr_upload"
    SELFIE = "selfie"
    UNKNOWN = "unknown"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class CandidateStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class CandidateSource(str, Enum):
    UPLOAD = "UPLOAD"
    LINKEDIN = "LINKEDIN"


class EmploymentType(str, Enum):
    FULL_TIME = "Full-time"
    CONTRACT = "Contract"
    CASUAL = "Casual"


class CaseStatus(str, Enum):
    CONVICTED = "Convicted"
    ACQUITTED = "Acquitted"
    PENDING = "Pending"
    WANTED = "Wanted"
    CLOSED = "Closed"


class Sentiment(str, Enum):
    POSITIVE = "POSITIVE"
    NEUTRAL = "NEUTRAL"
    NEGATIVE = "NEGATIVE"


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    HR_MANAGER = "HR_MANAGER"
    CANDIDATE = "CANDIDATE"


class AppView(str, Enum):
    LANDING = "LANDING"
    DASHBOARD = "DASHBOARD"
    SCANNER = "SCANNER"
    CANDIDATES = "CANDIDATES"
    JOBS = "JOBS"
    CANDIDATE_PORTAL = "CANDIDATE_PORTAL"
    ADMIN_PANEL = "ADMIN_PANEL"


# ============== Documents ==============


class Document(CamelModel):
    """An uploaded file, base64-encoded. Immutable once built."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    kind: DocumentKind = DocumentKind.UNKNOWN
    content: str  # base64, no data-URL prefix
    mime_type: str = "application/octet-stream"


# ============== Compliance ==============


class RiskAssessment(CamelModel):
    level: RiskLevel
    reason: str = ""


class IdentityVerification(CamelModel):
    is_match: bool
    confidence: int = Field(ge=0, le=100)
    reason: str = ""


class ComplianceReport(CamelModel):
    candidate_name: str
    district_of_origin: str = ""
    is_host_community: bool = False
    certifications_valid: bool = False
    integrity_score: int = Field(ge=0, le=100)
    risk_assessment: RiskAssessment
    audit_notes: str = ""
    missing_documents: list[str] = Field(default_factory=list)
    identity_verification: Optional[IdentityVerification] = None


# ============== OSINT ==============


class CriminalRecord(CamelModel):
    case_id: str
    offense: str
    date: str = ""
    court: str = ""
    status: CaseStatus


class OsintReport(CamelModel):
    criminal_record_match: bool
    criminal_details: str = ""
    criminal_records: list[CriminalRecord] = Field(default_factory=list)
    digital_footprint_score: int = Field(ge=0, le=100)
    lifestyle_analysis: str = ""
    family_background: str = ""
    social_media_sentiment: Sentiment = Sentiment.NEUTRAL
    red_flags: list[str] = Field(default_factory=list)
    improvement_tips: list[str] = Field(default_factory=list)
    sources: Optional[list[str]] = None

    @model_validator(mode="after")
    def _records_require_match(self) -> "OsintReport":
        if not self.criminal_record_match and self.criminal_records:
            raise ValueError("criminalRecords must be empty when criminalRecordMatch is false")
        return self


# ============== Candidates & Jobs ==============


class Candidate(CamelModel):
    id: str = Field(default_factory=new_record_id)
    name: str
    role: str = "Pending Assessment"
    status: CandidateStatus = CandidateStatus.PENDING
    timestamp: str = Field(default_factory=utc_now_iso)
    source: CandidateSource = CandidateSource.UPLOAD
    report: Optional[ComplianceReport] = None
    osint: Optional[OsintReport] = None
    documents: Optional[list[Document]] = None
    basic_score: Optional[int] = None
    email: Optional[str] = None
    email_verified: bool = False


class Job(CamelModel):
    id: str = Field(default_factory=new_record_id)
    title: str
    company: str = "Unknown"
    location: str = "Uganda"
    type: EmploymentType = EmploymentType.FULL_TIME
    description: str
    required_skills: list[str] = Field(default_factory=list)
    posted_date: str = Field(default_factory=utc_now_iso)


class JobMatchResult(CamelModel):
    """Candidate x job fit. Recomputed on demand, never persisted."""

    job_id: str
    overall_score: int = Field(ge=0, le=100)
    skills_match_score: int = Field(ge=0, le=100)
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    reason: str = ""
    experience_analysis: Optional[str] = None
    location_analysis: Optional[str] = None


class SourcedProfile(CamelModel):
    name: str
    headline: str = ""
    current_role: str = ""
    match_explanation: str = ""
    profile_url: str = ""


class SourcingResult(CamelModel):
    search_string: str
    explanation: str = ""
    profiles: list[SourcedProfile] = Field(default_factory=list)


class ChatTurn(CamelModel):
    role: Literal["user", "model"]
    text: str
