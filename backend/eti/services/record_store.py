"""
Record store capability.

The rest of the application talks to one small interface:

    subscribe(collection, on_snapshot) -> unsubscribe
    add(collection, record)            -> stored record (with store id)
    update(collection, record_id, fields)

SqlRecordStore is the live backend. FallbackRecordStore wraps any store and
keeps the application usable when it is empty or unreachable: demo data on
the read path, local-only mutation on the write path.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from eti.core.errors import StoreUnavailable
from eti.models import CandidateRecord, JobRecord
from eti.services.demo_data import demo_records

logger = logging.getLogger("record_store")

CANDIDATES = "candidates"
JOBS = "jobs"
COLLECTIONS = (CANDIDATES, JOBS)

MODE_LIVE = "live"
MODE_DEMO = "demo"

Snapshot = list[dict]
Listener = Callable[[Snapshot], None]
Unsubscribe = Callable[[], None]


class RecordStore(ABC):
    """Ordered live collections with insert and update-by-id."""

    @abstractmethod
    def subscribe(self, collection: str, on_snapshot: Listener) -> Unsubscribe:
        """Deliver the current snapshot now and again after every change."""

    @abstractmethod
    def add(self, collection: str, record: dict) -> dict:
        """Insert a record and return it merged with its stored id."""

    @abstractmethod
    def update(self, collection: str, record_id: str, fields: dict) -> None:
        """Replace the given fields (never the id) of an existing record."""

    def mode(self, collection: str) -> str:
        return MODE_LIVE


# ============== SQL Backend ==============

# camelCase record key -> (ORM model, column attribute)
FIELD_MAPS: dict[str, dict[str, str]] = {
    CANDIDATES: {
        "name": "name",
        "role": "role",
        "status": "status",
        "source": "source",
        "email": "email",
        "emailVerified": "email_verified",
        "timestamp": "timestamp",
        "basicScore": "basic_score",
        "report": "report",
        "osint": "osint",
        "documents": "documents",
    },
    JOBS: {
        "title": "title",
        "company": "company",
        "location": "location",
        "type": "type",
        "description": "description",
        "requiredSkills": "required_skills",
        "postedDate": "posted_date",
    },
}

MODELS = {CANDIDATES: CandidateRecord, JOBS: JobRecord}

# Newest first
ORDER_COLUMNS = {CANDIDATES: CandidateRecord.timestamp, JOBS: JobRecord.posted_date}


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")


def _to_columns(collection: str, fields: dict) -> dict:
    mapping = FIELD_MAPS[collection]
    return {mapping[key]: value for key, value in fields.items() if key in mapping}


def _to_record(collection: str, row) -> dict:
    """Row -> camelCase record. NULL columns are left out so record defaults apply."""
    record = {"id": row.id}
    for key, column in FIELD_MAPS[collection].items():
        value = getattr(row, column)
        if value is not None:
            record[key] = value
    return record


class SqlRecordStore(RecordStore):
    """SQLAlchemy-backed live store that pushes snapshots to in-process subscribers."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._listeners: dict[str, list[Listener]] = {name: [] for name in COLLECTIONS}

    def snapshot(self, collection: str) -> Snapshot:
        _check_collection(collection)
        try:
            with self._session_factory() as db:
                rows = db.query(MODELS[collection]).order_by(ORDER_COLUMNS[collection].desc()).all()
                return [_to_record(collection, row) for row in rows]
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to read {collection}: {e}") from e

    def subscribe(self, collection: str, on_snapshot: Listener) -> Unsubscribe:
        current = self.snapshot(collection)
        listeners = self._listeners[collection]
        listeners.append(on_snapshot)
        on_snapshot(current)

        def unsubscribe() -> None:
            if on_snapshot in listeners:
                listeners.remove(on_snapshot)

        return unsubscribe

    def add(self, collection: str, record: dict) -> dict:
        _check_collection(collection)
        payload = {key: value for key, value in record.items() if key != "id"}
        new_id = uuid.uuid4().hex
        try:
            with self._session_factory() as db:
                db.add(MODELS[collection](id=new_id, **_to_columns(collection, payload)))
                db.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to insert into {collection}: {e}") from e

        self._notify(collection)
        return {**payload, "id": new_id}

    def update(self, collection: str, record_id: str, fields: dict) -> None:
        _check_collection(collection)
        columns = _to_columns(collection, {k: v for k, v in fields.items() if k != "id"})
        try:
            with self._session_factory() as db:
                row = db.get(MODELS[collection], record_id)
                if row is None:
                    raise StoreUnavailable(f"No {collection} record with id {record_id}")
                for column, value in columns.items():
                    setattr(row, column, value)
                db.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to update {collection}/{record_id}: {e}") from e

        self._notify(collection)

    def _notify(self, collection: str) -> None:
        if not self._listeners[collection]:
            return
        try:
            current = self.snapshot(collection)
        except StoreUnavailable as e:
            logger.warning("Refresh of %s after write failed: %s", collection, e)
            return
        for listener in list(self._listeners[collection]):
            listener(list(current))


class DisabledRecordStore(RecordStore):
    """Stands in for a store with no credentials configured; every call fails."""

    def subscribe(self, collection: str, on_snapshot: Listener) -> Unsubscribe:
        raise StoreUnavailable("Record store is disabled")

    def add(self, collection: str, record: dict) -> dict:
        raise StoreUnavailable("Record store is disabled")

    def update(self, collection: str, record_id: str, fields: dict) -> None:
        raise StoreUnavailable("Record store is disabled")


# ============== Fallback Wrapper ==============


class FallbackRecordStore(RecordStore):
    """
    Wraps a store so that it never fails.

    Per collection, either the live snapshot or the demo dataset is visible,
    never both. Writes the inner store rejects are applied to the visible
    list only.
    """

    def __init__(self, inner: RecordStore, demo_loader: Callable[[str], Snapshot] = demo_records):
        self._inner = inner
        self._demo_loader = demo_loader
        self._visible: dict[str, Snapshot] = {}
        self._modes: dict[str, str] = {}
        self._listeners: dict[str, list[Listener]] = {name: [] for name in COLLECTIONS}
        self._inner_unsubscribe: dict[str, Unsubscribe] = {}

    def mode(self, collection: str) -> Optional[str]:
        return self._modes.get(collection)

    def subscribe(self, collection: str, on_snapshot: Listener) -> Unsubscribe:
        _check_collection(collection)
        listeners = self._listeners[collection]
        listeners.append(on_snapshot)

        if collection in self._inner_unsubscribe or collection in self._modes:
            on_snapshot(list(self._visible.get(collection, [])))
        else:
            try:
                self._inner_unsubscribe[collection] = self._inner.subscribe(
                    collection,
                    lambda snapshot: self._on_inner_snapshot(collection, snapshot),
                )
            except StoreUnavailable as e:
                logger.warning("Subscription to %s failed (%s); showing demo data", collection, e)
                self._use_demo(collection)

        def unsubscribe() -> None:
            if on_snapshot in listeners:
                listeners.remove(on_snapshot)

        return unsubscribe

    def add(self, collection: str, record: dict) -> dict:
        _check_collection(collection)
        try:
            return self._inner.add(collection, record)
        except StoreUnavailable as e:
            logger.warning("Insert into %s failed (%s); keeping record locally", collection, e)

        local = dict(record)
        self._visible.setdefault(collection, []).insert(0, local)
        self._emit(collection)
        return dict(local)

    def update(self, collection: str, record_id: str, fields: dict) -> None:
        _check_collection(collection)
        try:
            self._inner.update(collection, record_id, fields)
            return
        except StoreUnavailable as e:
            logger.warning("Update of %s/%s failed (%s); applying locally", collection, record_id, e)

        changes = {key: value for key, value in fields.items() if key != "id"}
        records = self._visible.setdefault(collection, [])
        for index, existing in enumerate(records):
            if existing.get("id") == record_id:
                records[index] = {**existing, **changes}
                self._emit(collection)
                return
        logger.warning("No local %s record %s to update", collection, record_id)

    def _on_inner_snapshot(self, collection: str, snapshot: Snapshot) -> None:
        if not snapshot:
            if self._modes.get(collection) == MODE_DEMO:
                return
            logger.info("Live %s collection is empty; showing demo data", collection)
            self._use_demo(collection)
            return

        self._modes[collection] = MODE_LIVE
        self._visible[collection] = list(snapshot)
        self._emit(collection)

    def _use_demo(self, collection: str) -> None:
        self._modes[collection] = MODE_DEMO
        self._visible[collection] = self._demo_loader(collection)
        self._emit(collection)

    def _emit(self, collection: str) -> None:
        current = self._visible.get(collection, [])
        for listener in list(self._listeners[collection]):
            listener(list(current))
