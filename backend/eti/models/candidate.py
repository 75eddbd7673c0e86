from sqlalchemy import Column, Integer, String, Boolean, JSON

from eti.db.base import Base


class CandidateRecord(Base):
    """Candidate profile with compliance report, OSINT findings and stored documents."""

    __tablename__ = "candidates"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    role = Column(String)  # Target job role, "Pending Assessment" until assigned
    status = Column(String, default="PENDING")  # "PENDING", "VERIFIED", "REJECTED"
    source = Column(String, default="UPLOAD")  # "UPLOAD", "LINKEDIN"
    email = Column(String, nullable=True)
    email_verified = Column(Boolean, default=False)

    # ISO-8601 string; the live feed is ordered on it
    timestamp = Column(String, index=True)

    # Average job-match score from the portal flow
    basic_score = Column(Integer, nullable=True)

    # Structured AI output stored as JSON (camelCase keys, as returned by the gateway)
    report = Column(JSON, nullable=True)
    osint = Column(JSON, nullable=True)

    # Format: [{ "name": ..., "kind": ..., "content": <base64>, "mimeType": ... }, ...]
    documents = Column(JSON, default=list)
