from eti.models.candidate import CandidateRecord
from eti.models.job import JobRecord

__all__ = ["CandidateRecord", "JobRecord"]
