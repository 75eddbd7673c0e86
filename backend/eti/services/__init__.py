from eti.services.gemini_gateway import (
    analyze_documents,
    generate_osint_report,
    match_candidate_to_job,
    generate_sourcing_strategies,
    parse_profile_text,
    chat,
)
from eti.services.record_store import FallbackRecordStore, SqlRecordStore, DisabledRecordStore
from eti.services.repository import RecordRepository

__all__ = [
    "analyze_documents",
    "generate_osint_report",
    "match_candidate_to_job",
    "generate_sourcing_strategies",
    "parse_profile_text",
    "chat",
    "FallbackRecordStore",
    "SqlRecordStore",
    "DisabledRecordStore",
    "RecordRepository",
]
