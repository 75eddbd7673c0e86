"""
ETI Database Seeder

Writes the demo candidates and jobs into the live record store so a fresh
deployment shows stored records instead of the in-memory fallback.

Usage (from backend/):
    python seed_db.py
"""

from sqlalchemy.orm import sessionmaker

from eti.db.base import Base
from eti.db.session import SessionLocal, engine
from eti.services.demo_data import demo_records
from eti.services.record_store import CANDIDATES, JOBS, SqlRecordStore


def seed_database(session_factory: sessionmaker = SessionLocal, bind=engine) -> dict[str, int]:
    """Seed the store with demo data. Returns the number of records written per collection."""

    # Create all tables
    Base.metadata.create_all(bind=bind)

    store = SqlRecordStore(session_factory)
    written = {CANDIDATES: 0, JOBS: 0}

    for collection in (CANDIDATES, JOBS):
        # Check if already seeded
        if store.snapshot(collection):
            print(f"{collection} already seeded. Skipping...")
            continue

        print(f"Seeding {collection}...")
        for record in demo_records(collection):
            store.add(collection, record)
            written[collection] += 1

    return written


if __name__ == "__main__":
    counts = seed_database()
    print(f"Done: {counts[CANDIDATES]} candidates, {counts[JOBS]} jobs written.")
