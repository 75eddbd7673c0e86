"""
Gemini Analysis Gateway.

Every operation is one completion call to Google Gemini: inline document
parts and/or a prompt go out, a JSON reply comes back and is validated
against the matching domain model before anyone else sees it. Failures of
any kind surface as AnalysisError; a missing API key surfaces as
ConfigurationError before the network is touched.
"""

import base64
import json
import logging
import re
from typing import Any, Optional, Type, TypeVar

import google.generativeai as genai
from pydantic import BaseModel, ValidationError

from eti.core.config import settings
from eti.core.errors import AnalysisError, ConfigurationError, ValidationGap
from eti.schemas import (
    ChatTurn,
    ComplianceReport,
    Document,
    Job,
    JobMatchResult,
    OsintReport,
    SourcingResult,
)
from eti.services.intake import has_identity_and_selfie, is_identity_bearing
from eti.services.scoring import (
    candidate_years_from_analysis,
    enforce_experience_weighting,
    required_years_from_text,
)

# Configure logging for the gateway
logger = logging.getLogger("gemini")
logger.setLevel(logging.INFO)

# Console handler for terminal output
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[GEMINI] %(levelname)s %(message)s"))
    logger.addHandler(handler)

ModelT = TypeVar("ModelT", bound=BaseModel)

CHAT_FALLBACK_REPLY = "I'm sorry, I couldn't process that."

ASSISTANT_PRIMER = [
    {
        "role": "user",
        "parts": [
            "You are the ETI Assistant for Salus International & HRBL. Assist HR managers with "
            "compliance and OSINT questions, and candidates with career branding."
        ],
    },
    {"role": "model", "parts": ["Understood. I am ready to assist."]},
]


# ============== Response Schemas ==============

RISK_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "level": {"type": "STRING", "enum": ["LOW", "MEDIUM", "HIGH", "CRITICAL"]},
        "reason": {"type": "STRING"},
    },
    "required": ["level", "reason"],
}

IDENTITY_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "isMatch": {"type": "BOOLEAN", "description": "True if the selfie shows the person on the ID"},
        "confidence": {"type": "INTEGER", "description": "0-100 confidence in the face match"},
        "reason": {"type": "STRING"},
    },
    "required": ["isMatch", "confidence", "reason"],
}

COMPLIANCE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "candidateName": {"type": "STRING", "description": "Name extracted from ID or documents"},
        "districtOfOrigin": {"type": "STRING", "description": "District from the National ID or LC1 letter"},
        "isHostCommunity": {
            "type": "BOOLEAN",
            "description": "True if the district is a local-content zone for the sector (e.g. Hoima for Oil & Gas)",
        },
        "certificationsValid": {
            "type": "BOOLEAN",
            "description": "True if technical certificates (OPITO, NEBOSH, CPA, ERB) look authentic",
        },
        "integrityScore": {
            "type": "INTEGER",
            "description": "0-100 score from document consistency and fraud markers",
        },
        "riskAssessment": RISK_SCHEMA,
        "auditNotes": {"type": "STRING", "description": "Summary of the checks against sector regulations"},
        "missingDocuments": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Required documents that are missing or illegible",
        },
    },
    "required": [
        "candidateName",
        "districtOfOrigin",
        "isHostCommunity",
        "certificationsValid",
        "integrityScore",
        "riskAssessment",
        "auditNotes",
    ],
}

CRIMINAL_RECORD_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "caseId": {"type": "STRING"},
        "offense": {"type": "STRING"},
        "date": {"type": "STRING"},
        "court": {"type": "STRING"},
        "status": {"type": "STRING", "enum": ["Convicted", "Acquitted", "Pending", "Wanted", "Closed"]},
    },
    "required": ["caseId", "offense", "status"],
}

OSINT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "criminalRecordMatch": {"type": "BOOLEAN"},
        "criminalDetails": {"type": "STRING"},
        "criminalRecords": {
            "type": "ARRAY",
            "items": CRIMINAL_RECORD_SCHEMA,
            "description": "Empty unless criminalRecordMatch is true",
        },
        "digitalFootprintScore": {"type": "INTEGER", "description": "0-100 online visibility"},
        "lifestyleAnalysis": {"type": "STRING"},
        "familyBackground": {"type": "STRING", "description": "Family ties or political exposure (PEP)"},
        "socialMediaSentiment": {"type": "STRING", "enum": ["POSITIVE", "NEUTRAL", "NEGATIVE"]},
        "redFlags": {"type": "ARRAY", "items": {"type": "STRING"}},
        "improvementTips": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["criminalRecordMatch", "criminalDetails", "digitalFootprintScore", "socialMediaSentiment"],
}

JOB_MATCH_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "overallScore": {"type": "INTEGER", "description": "0-100 overall fit"},
        "skillsMatchScore": {"type": "INTEGER", "description": "0-100 from required skills only"},
        "candidateExperienceYears": {"type": "INTEGER", "description": "Years of relevant experience in the CV"},
        "requiredExperienceYears": {"type": "INTEGER", "description": "Years the job asks for, 0 if unstated"},
        "experienceAnalysis": {"type": "STRING"},
        "locationAnalysis": {"type": "STRING"},
        "matchedSkills": {"type": "ARRAY", "items": {"type": "STRING"}},
        "missingSkills": {"type": "ARRAY", "items": {"type": "STRING"}},
        "reason": {"type": "STRING"},
    },
    "required": [
        "overallScore",
        "skillsMatchScore",
        "candidateExperienceYears",
        "requiredExperienceYears",
        "experienceAnalysis",
        "reason",
    ],
}

SOURCING_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "searchString": {"type": "STRING", "description": "Boolean search string for LinkedIn / job boards"},
        "explanation": {"type": "STRING"},
        "profiles": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "headline": {"type": "STRING"},
                    "currentRole": {"type": "STRING"},
                    "matchExplanation": {"type": "STRING"},
                    "profileUrl": {"type": "STRING"},
                },
                "required": ["name"],
            },
        },
    },
    "required": ["searchString", "explanation", "profiles"],
}


# ============== Prompts ==============

COMPLIANCE_PROMPT = """You are the Intelligent Compliance Engine for Equatorial Talent Intelligence (ETI).
Audit the attached candidate documents (National ID, LC1 letters, transcripts, professional
certificates, CVs) for the Ugandan market: Oil & Gas, Banking, Telecom, Engineering, Agriculture.

Decide the most likely sector first, then apply its rules:
1. Oil & Gas (PAU): district of origin decides Host Community status (Hoima, Buliisa, Nwoya).
   Look for OPITO / NEBOSH / TUV certificates.
2. Banking (BOU): 'Fit and Proper' indicators, CPA / ACCA certificates, fraud markers.
3. Telecom & Engineering (UCC / ERB): ERB registration or UIPE membership, telecom certificates.
4. Agriculture (MAAIF): agricultural qualifications and commercial experience.
5. All sectors: cross-check ID details against every other document for the integrity score.

The risk level drives the hiring decision; set it from the evidence, not from the integrity score alone.
Return strict JSON."""

FACE_MATCH_PROMPT = """One attachment is a selfie of the candidate holding their ID card.
Compare the face in the selfie with the ID photo and fill identityVerification
(isMatch, confidence 0-100, reason). A mismatch is at least HIGH risk."""

OSINT_PROMPT = """Run an open-source intelligence (OSINT) background check on: {name}.
Context from the candidate file: {context}

1. Criminal & sanctions: Interpol Red Notices, Uganda Police wanted lists, AML watchlists,
   global sanctions, court cases, fraud allegations, employment disciplinary actions.
   Describe what was checked in 'criminalDetails'. If nothing is found, say
   "No negative matches found in global or local criminal databases."
2. Digital footprint & lifestyle: professional and social media presence, conduct inconsistent
   with corporate values, lifestyle versus reported role, extremist affiliations.
3. Family background and political exposure (PEP).
4. Give 3-4 specific tips the candidate can use to improve their professional online brand.

Only list criminal records you can attribute to a real source. Never invent records.
If criminalRecordMatch is false, criminalRecords must be an empty list."""

OSINT_JSON_SHAPE = """Reply with a single JSON object and nothing else, with keys:
criminalRecordMatch (bool), criminalDetails (string), criminalRecords (list of
{caseId, offense, date, court, status in Convicted|Acquitted|Pending|Wanted|Closed}),
digitalFootprintScore (0-100 int), lifestyleAnalysis (string), familyBackground (string),
socialMediaSentiment (POSITIVE|NEUTRAL|NEGATIVE), redFlags (list of strings),
improvementTips (list of strings)."""

JOB_MATCH_PROMPT = """Act as a Senior Recruitment & Compliance Officer for Salus International / HRBL.

TARGET JOB:
Title: {title}
Company: {company}
Location: {location}
Description: {description}
Required Skills: {skills}

Score the candidate documents against this job with these weights:
1. EXPERIENCE (40%): total years of relevant experience against what the role implies.
   Less experience than required costs heavily; a junior applying for a senior role scores under 10/40.
   State the gap in 'experienceAnalysis' (e.g. "Job requires 5 years, candidate has 2. Severe gap.").
   Fill candidateExperienceYears and requiredExperienceYears.
2. LOCATION & MOBILITY (30%): residence versus job location. Different locations with no mention of
   relocation cost 20 points. Flag cross-region moves (e.g. Kampala vs Hoima) in 'locationAnalysis'.
   Host Community origin is a plus for Oil & Gas.
3. SKILLS & CERTIFICATIONS (30%): keyword match on technical skills and mandatory certificates.

A large experience shortfall pulls overallScore down sharply no matter how many skills match.
'reason' summarises the decision with reference to the experience and location weights."""

SOURCING_PROMPT = """You are a talent sourcing specialist for the Ugandan market.
Build a sourcing strategy for this opening:
Title: {title}
Company: {company}
Location: {location}
Description: {description}
Required Skills: {skills}

Return a Boolean search string for LinkedIn and job boards, a short explanation of the
strategy, and up to 5 example profiles that fit (name, headline, currentRole,
matchExplanation, profileUrl)."""

PROFILE_TEXT_PROMPT = """Extract a compliance profile from this pasted candidate profile
(LinkedIn export, CV text or recruiter notes). Use only what the text states; leave fields you
cannot determine empty, list what is missing in missingDocuments, and set the risk level from
the evidence available.

PROFILE TEXT:
{text}"""


# ============== Helpers ==============


def configure_gemini() -> None:
    """
    Configure the Gemini API with the API key.

    Raises ConfigurationError when GEMINI_API_KEY is not set.
    """
    if not settings.GEMINI_API_KEY:
        logger.error("GEMINI_API_KEY not set - refusing gateway call")
        raise ConfigurationError("GEMINI_API_KEY is not set")

    genai.configure(api_key=settings.GEMINI_API_KEY)


def _document_parts(documents: list[Document]) -> list[dict]:
    return [
        {"mime_type": doc.mime_type, "data": base64.b64decode(doc.content)}
        for doc in documents
    ]


def _generate(
    operation: str,
    contents: list,
    *,
    schema: Optional[dict] = None,
    temperature: Optional[float] = None,
    grounded: bool = False,
):
    """Run one completion and return the raw SDK response."""
    configure_gemini()

    generation_config: dict[str, Any] = {}
    if schema is not None:
        generation_config["response_mime_type"] = "application/json"
        generation_config["response_schema"] = schema
    if temperature is not None:
        generation_config["temperature"] = temperature

    logger.info("Sending %s request (%d parts, grounded=%s)", operation, len(contents), grounded)
    try:
        if grounded:
            model = genai.GenerativeModel(settings.GEMINI_MODEL, tools="google_search_retrieval")
        else:
            model = genai.GenerativeModel(settings.GEMINI_MODEL)
        response = model.generate_content(contents, generation_config=generation_config)
        text = response.text
    except Exception as e:
        logger.error("%s failed: %s", operation, e)
        raise AnalysisError(f"{operation} failed: {e}") from e

    if not text or not text.strip():
        logger.error("%s returned an empty response", operation)
        raise AnalysisError(f"{operation} returned no content")

    logger.info("%s response received (%d chars)", operation, len(text))
    return response


def _extract_json(text: str) -> dict:
    """Parse a JSON object from model text, tolerating code fences and prose."""
    cleaned = text.strip()
    fenced = re.search(r"```(?:json)?\s*(.*?)```", cleaned, re.DOTALL)
    if fenced:
        cleaned = fenced.group(1).strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end < start:
        raise AnalysisError("Response did not contain a JSON object")

    try:
        payload = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Response was not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise AnalysisError("Response JSON was not an object")
    return payload


def _validate(model_cls: Type[ModelT], payload: dict, operation: str) -> ModelT:
    try:
        return model_cls.model_validate(payload)
    except ValidationError as e:
        logger.error("%s response failed schema validation: %s", operation, e.error_count())
        raise AnalysisError(f"{operation} response did not match the expected schema") from e


def _grounding_sources(response) -> list[str]:
    """Collect web URIs from the grounding metadata of a search-augmented reply."""
    sources: list[str] = []
    for candidate in getattr(response, "candidates", None) or []:
        metadata = getattr(candidate, "grounding_metadata", None)
        for chunk in getattr(metadata, "grounding_chunks", None) or []:
            uri = getattr(getattr(chunk, "web", None), "uri", None)
            if uri and uri not in sources:
                sources.append(uri)
    return sources


# ============== Gateway Operations ==============


def analyze_documents(documents: list[Document]) -> ComplianceReport:
    """
    Extract a compliance report from candidate documents.

    When an identity document and a selfie are both attached, the model is
    also asked for a face-match judgment (identityVerification).
    """
    if not any(is_identity_bearing(doc) for doc in documents):
        raise ValidationGap("At least one identity document is required for analysis.")

    schema = COMPLIANCE_SCHEMA
    prompt = COMPLIANCE_PROMPT
    if has_identity_and_selfie(documents):
        schema = {
            **COMPLIANCE_SCHEMA,
            "properties": {**COMPLIANCE_SCHEMA["properties"], "identityVerification": IDENTITY_SCHEMA},
            "required": [*COMPLIANCE_SCHEMA["required"], "identityVerification"],
        }
        prompt = f"{COMPLIANCE_PROMPT}\n\n{FACE_MATCH_PROMPT}"

    response = _generate(
        "analyze_documents",
        [*_document_parts(documents), prompt],
        schema=schema,
        temperature=0.2,
    )
    report = _validate(ComplianceReport, _extract_json(response.text), "analyze_documents")
    logger.info("Compliance report for %s: risk %s", report.candidate_name, report.risk_assessment.level.value)
    return report


def generate_osint_report(name: str, context: str) -> OsintReport:
    """
    Run an OSINT check for a named candidate.

    Uses Google Search grounding when OSINT_SEARCH_GROUNDING is on; source
    URLs from the grounding metadata are attached to the report.
    """
    if not name or not name.strip():
        raise ValidationGap("A candidate name is required for an OSINT scan.")

    prompt = OSINT_PROMPT.format(name=name, context=context)
    if settings.OSINT_SEARCH_GROUNDING:
        # Search tools cannot be combined with a response schema
        response = _generate(
            "generate_osint_report",
            [f"{prompt}\n\n{OSINT_JSON_SHAPE}"],
            temperature=0.4,
            grounded=True,
        )
        payload = _extract_json(response.text)
        sources = _grounding_sources(response)
        if sources:
            payload["sources"] = sources
    else:
        response = _generate(
            "generate_osint_report",
            [prompt],
            schema=OSINT_SCHEMA,
            temperature=0.4,
        )
        payload = _extract_json(response.text)

    return _validate(OsintReport, payload, "generate_osint_report")


def match_candidate_to_job(documents: list[Document], job: Job) -> JobMatchResult:
    """Score candidate documents against one job (experience 40 / location 30 / skills 30)."""
    if not documents:
        raise ValidationGap("Upload at least one document before matching jobs.")

    prompt = JOB_MATCH_PROMPT.format(
        title=job.title,
        company=job.company,
        location=job.location,
        description=job.description,
        skills=", ".join(job.required_skills) or "Not specified",
    )
    response = _generate(
        "match_candidate_to_job",
        [*_document_parts(documents), prompt],
        schema=JOB_MATCH_SCHEMA,
    )
    payload = _extract_json(response.text)

    candidate_years = payload.pop("candidateExperienceYears", None)
    required_years = payload.pop("requiredExperienceYears", None)
    if not required_years:
        required_years = required_years_from_text(job.description)

    payload["jobId"] = job.id
    payload.setdefault("matchedSkills", [])
    payload.setdefault("missingSkills", [])
    result = _validate(JobMatchResult, payload, "match_candidate_to_job")

    candidate_years = candidate_years_from_analysis(candidate_years, result.experience_analysis)
    if candidate_years is None and required_years:
        raise AnalysisError(
            f"match_candidate_to_job gave no candidate experience for a job requiring {required_years} years"
        )
    return enforce_experience_weighting(result, candidate_years, required_years)


def generate_sourcing_strategies(job: Job) -> SourcingResult:
    prompt = SOURCING_PROMPT.format(
        title=job.title,
        company=job.company,
        location=job.location,
        description=job.description,
        skills=", ".join(job.required_skills) or "Not specified",
    )
    response = _generate("generate_sourcing_strategies", [prompt], schema=SOURCING_SCHEMA, temperature=0.7)
    return _validate(SourcingResult, _extract_json(response.text), "generate_sourcing_strategies")


def parse_profile_text(text: str) -> ComplianceReport:
    if not text or not text.strip():
        raise ValidationGap("Paste the profile text to parse.")

    response = _generate(
        "parse_profile_text",
        [PROFILE_TEXT_PROMPT.format(text=text.strip())],
        schema=COMPLIANCE_SCHEMA,
        temperature=0.2,
    )
    return _validate(ComplianceReport, _extract_json(response.text), "parse_profile_text")


def chat(message: str, history: list[ChatTurn]) -> str:
    """Stateless assistant turn; the caller sends all prior turns every time."""
    if not message or not message.strip():
        raise ValidationGap("Message cannot be empty.")

    configure_gemini()
    gemini_history = ASSISTANT_PRIMER + [
        {"role": turn.role, "parts": [turn.text]} for turn in history
    ]
    try:
        model = genai.GenerativeModel(settings.GEMINI_MODEL)
        session = model.start_chat(history=gemini_history)
        result = session.send_message(message)
        text = result.text
    except Exception as e:
        logger.error("chat failed: %s", e)
        raise AnalysisError(f"chat failed: {e}") from e

    return text or CHAT_FALLBACK_REPLY
