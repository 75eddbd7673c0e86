"""
Document intake.

Turns uploaded files into portable Document records (base64 content plus
MIME type) and rebuilds the original bytes for downloads.
"""

import base64
import binascii
import logging
import mimetypes
from typing import Optional

from fastapi import UploadFile

from eti.schemas import Document, DocumentKind

logger = logging.getLogger("intake")

DEFAULT_MIME_TYPE = "application/octet-stream"


def infer_kind(filename: str, default: DocumentKind = DocumentKind.UNKNOWN) -> DocumentKind:
    """Guess the document kind from its filename ("cv" anywhere means a CV)."""
    if "cv" in (filename or "").lower():
        return DocumentKind.CV
    return default


def guess_mime_type(filename: str, declared: Optional[str] = None) -> str:
    if declared:
        return declared
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or DEFAULT_MIME_TYPE


def build_document(
    filename: str,
    content: Optional[bytes],
    mime_type: Optional[str] = None,
    kind: Optional[DocumentKind] = None,
    default_kind: DocumentKind = DocumentKind.UNKNOWN,
) -> Optional[Document]:
    """
    Build a Document from raw file bytes.

    An explicit kind wins over the filename heuristic. Returns None when the
    content is empty or missing; the file is dropped rather than retried.
    """
    if not content:
        logger.warning("Dropping unreadable upload %r", filename)
        return None

    return Document(
        name=filename or "document",
        kind=kind or infer_kind(filename, default_kind),
        content=base64.b64encode(content).decode("ascii"),
        mime_type=guess_mime_type(filename, mime_type),
    )


async def read_upload(
    upload: UploadFile,
    kind: Optional[DocumentKind] = None,
    default_kind: DocumentKind = DocumentKind.UNKNOWN,
) -> Optional[Document]:
    """Read a FastAPI upload into a Document, or None if it cannot be read."""
    try:
        content = await upload.read()
    except (OSError, ValueError) as e:
        logger.warning("Failed to read upload %r: %s", upload.filename, e)
        return None

    return build_document(
        upload.filename or "document",
        content,
        mime_type=upload.content_type,
        kind=kind,
        default_kind=default_kind,
    )


async def read_uploads(
    uploads: list[UploadFile],
    kind: Optional[DocumentKind] = None,
    default_kind: DocumentKind = DocumentKind.UNKNOWN,
) -> list[Document]:
    documents: list[Document] = []
    for upload in uploads:
        document = await read_upload(upload, kind=kind, default_kind=default_kind)
        if document is not None:
            documents.append(document)
    return documents


def to_data_url(document: Document) -> str:
    return f"data:{document.mime_type};base64,{document.content}"


def decode_data_url(data_url: str) -> bytes:
    """Decode a base64 data URL back into bytes."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def decode_document(document: Document) -> bytes:
    return decode_data_url(to_data_url(document))


def is_identity_bearing(document: Document) -> bool:
    return document.kind != DocumentKind.SELFIE


def has_identity_and_selfie(documents: list[Document]) -> bool:
    kinds = [doc.kind for doc in documents]
    return DocumentKind.SELFIE in kinds and any(kind != DocumentKind.SELFIE for kind in kinds)
