"""
Candidate/Job repository.

Keeps the latest ordered snapshot of both collections as validated records
and exposes the create/update operations the routers use. Backend failures
are the store's concern; nothing raised here blocks a request.
"""

import logging
from functools import partial
from typing import Optional

from pydantic import ValidationError

from eti.schemas import Candidate, Job
from eti.services.record_store import (
    CANDIDATES,
    COLLECTIONS,
    JOBS,
    RecordStore,
    Snapshot,
    Unsubscribe,
)

logger = logging.getLogger("repository")

RECORD_TYPES = {CANDIDATES: Candidate, JOBS: Job}


class RecordRepository:
    def __init__(self, store: RecordStore):
        self._store = store
        self._records: dict[str, list] = {name: [] for name in COLLECTIONS}
        self._unsubscribers: list[Unsubscribe] = []
        self.ready = False

    def attach(self) -> None:
        """Subscribe to both collections and mark the repository ready."""
        if self.ready:
            return
        for collection in COLLECTIONS:
            self._unsubscribers.append(
                self._store.subscribe(collection, partial(self._on_snapshot, collection))
            )
        self.ready = True
        logger.info(
            "Repository attached: candidates=%s (%d), jobs=%s (%d)",
            self.mode(CANDIDATES),
            len(self._records[CANDIDATES]),
            self.mode(JOBS),
            len(self._records[JOBS]),
        )

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.ready = False

    def mode(self, collection: str) -> Optional[str]:
        return self._store.mode(collection)

    def _on_snapshot(self, collection: str, snapshot: Snapshot) -> None:
        record_type = RECORD_TYPES[collection]
        parsed = []
        for raw in snapshot:
            try:
                parsed.append(record_type.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed %s record %s: %s", collection, raw.get("id"), e.error_count())
        self._records[collection] = parsed

    # ============== Reads ==============

    @property
    def candidates(self) -> list[Candidate]:
        return list(self._records[CANDIDATES])

    @property
    def jobs(self) -> list[Job]:
        return list(self._records[JOBS])

    def get_candidate(self, candidate_id: str) -> Optional[Candidate]:
        return next((c for c in self._records[CANDIDATES] if c.id == candidate_id), None)

    def get_job(self, job_id: str) -> Optional[Job]:
        return next((j for j in self._records[JOBS] if j.id == job_id), None)

    # ============== Writes ==============

    def create_candidate(self, candidate: Candidate) -> Candidate:
        """Insert a candidate; the returned record carries the store-assigned id."""
        stored = self._store.add(CANDIDATES, candidate.to_record())
        return Candidate.model_validate(stored)

    def update_candidate(self, candidate: Candidate) -> Candidate:
        fields = candidate.to_record()
        fields.pop("id", None)
        self._store.update(CANDIDATES, candidate.id, fields)
        return candidate

    def create_job(self, job: Job) -> Job:
        stored = self._store.add(JOBS, job.to_record())
        return Job.model_validate(stored)
