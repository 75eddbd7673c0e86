"""
Candidate API endpoints.

Document scanning, candidate records, stored documents and OSINT scans
for HR managers and admins.
"""

import logging
import unicodedata
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from pydantic import BaseModel

from eti.api.deps import get_repository
from eti.api.v1.session import SessionResponse, require_management, session_response
from eti.schemas import Candidate, CandidateStatus, DocumentKind, SourcedProfile
from eti.services import gemini_gateway, workflow
from eti.services import session as session_machine
from eti.services.intake import decode_document, read_upload, read_uploads
from eti.services.repository import RecordRepository
from eti.services.scoring import search_candidates
from eti.services.session import SessionState

logger = logging.getLogger("candidates")

router = APIRouter()


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the UTF-8 name (RFC 5987)."""
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = "".join(ch for ch in fallback if ch.isprintable() and ch not in '"\\') or "document"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


# ============== Pydantic Schemas ==============


class ScanResponse(BaseModel):
    """New candidate plus a session that has it selected."""

    candidate: Candidate
    session: SessionResponse


class StatusUpdateRequest(BaseModel):
    status: CandidateStatus


class SourcedImportRequest(BaseModel):
    profile: SourcedProfile
    job_id: Optional[str] = None


class ProfileTextImportRequest(BaseModel):
    text: str
    role: Optional[str] = None


# ============== Helper Functions ==============


def _get_candidate_or_404(repository: RecordRepository, candidate_id: str) -> Candidate:
    candidate = repository.get_candidate(candidate_id)
    if candidate is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Candidate not found",
        )
    return candidate


# ============== API Endpoints ==============


@router.get("", response_model=list[Candidate])
async def list_candidates(
    search: Optional[str] = None,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    """All candidates, newest first, optionally filtered by name or id."""
    return search_candidates(repository.candidates, search)


@router.post("/scan", response_model=ScanResponse, status_code=status.HTTP_201_CREATED)
async def scan_documents(
    files: list[UploadFile] = File(default=[]),
    selfie: Optional[UploadFile] = File(None),
    email: Optional[str] = Form(None),
    repository: RecordRepository = Depends(get_repository),
    state: SessionState = Depends(require_management),
):
    """
    Run a compliance scan over uploaded documents and an ID selfie.

    Creates the candidate (VERIFIED for LOW/MEDIUM risk, REJECTED for
    HIGH/CRITICAL) and opens its report in the returned session.
    """
    documents = await read_uploads(files)
    selfie_document = await read_upload(selfie, kind=DocumentKind.SELFIE) if selfie else None

    candidate = workflow.scan_candidate(documents, selfie_document, email)
    stored = repository.create_candidate(candidate)

    return ScanResponse(
        candidate=stored,
        session=session_response(session_machine.select_candidate(state, stored.id)),
    )


@router.post("/import/sourced", response_model=Candidate, status_code=status.HTTP_201_CREATED)
async def import_sourced_candidate(
    data: SourcedImportRequest,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    """Import a lead from a sourcing run as a PENDING candidate."""
    job = repository.get_job(data.job_id) if data.job_id else None
    candidate = workflow.import_sourced_profile(data.profile, job)
    return repository.create_candidate(candidate)


@router.post("/import/profile-text", response_model=Candidate, status_code=status.HTTP_201_CREATED)
async def import_profile_text(
    data: ProfileTextImportRequest,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    """Parse pasted profile text with Gemini and import it as a PENDING candidate."""
    report = gemini_gateway.parse_profile_text(data.text)
    candidate = workflow.import_parsed_profile(report, data.role)
    return repository.create_candidate(candidate)


@router.get("/{candidate_id}", response_model=Candidate)
async def get_candidate(
    candidate_id: str,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    return _get_candidate_or_404(repository, candidate_id)


@router.patch("/{candidate_id}/status", response_model=Candidate)
async def update_status(
    candidate_id: str,
    data: StatusUpdateRequest,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    candidate = _get_candidate_or_404(repository, candidate_id)
    return repository.update_candidate(workflow.set_status(candidate, data.status))


@router.post("/{candidate_id}/documents", response_model=Candidate)
async def upload_documents(
    candidate_id: str,
    files: list[UploadFile] = File(...),
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    """Attach HR-uploaded documents to an existing candidate."""
    candidate = _get_candidate_or_404(repository, candidate_id)
    documents = await read_uploads(files, kind=DocumentKind.HR_UPLOAD)
    if not documents:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No readable documents were uploaded",
        )
    return repository.update_candidate(workflow.add_documents(candidate, documents))


@router.delete("/{candidate_id}/documents/{index}", response_model=Candidate)
async def delete_document(
    candidate_id: str,
    index: int,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    candidate = _get_candidate_or_404(repository, candidate_id)
    try:
        updated = workflow.remove_document(candidate, index)
    except IndexError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return repository.update_candidate(updated)


@router.get("/{candidate_id}/documents/{index}/download")
async def download_document(
    candidate_id: str,
    index: int,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    """Stream a stored document back as its original bytes."""
    candidate = _get_candidate_or_404(repository, candidate_id)
    documents = candidate.documents or []
    if index < 0 or index >= len(documents):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")

    document = documents[index]
    try:
        content = decode_document(document)
    except ValueError as e:
        logger.error("Stored document %s/%d is corrupt: %s", candidate_id, index, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Stored document could not be decoded",
        )

    return Response(
        content=content,
        media_type=document.mime_type,
        headers={"Content-Disposition": content_disposition(document.name)},
    )


@router.post("/{candidate_id}/osint", response_model=Candidate)
async def run_osint_scan(
    candidate_id: str,
    repository: RecordRepository = Depends(get_repository),
    _state: SessionState = Depends(require_management),
):
    """Run an OSINT scan and attach the result to the candidate."""
    candidate = _get_candidate_or_404(repository, candidate_id)
    return repository.update_candidate(workflow.run_osint(candidate))
