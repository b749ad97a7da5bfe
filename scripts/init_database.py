#!/usr/bin/env python3
"""
Create app tables in Postgres: participants, guardians, emergency_contacts,
submissions, activities.

Uses DATABASE_URL environment variable. Does NOT drop existing tables.
"""

from __future__ import annotations
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

# Make sure src is on sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import OperationalError

# Import all models so SQLAlchemy knows about them
from src.database.models import (
    Base,
    Participant,
    Guardian,
    EmergencyContact,
    Submission,
    Activity,
)
from src.database.postgres_real import _normalize_connection_string


def main() -> int:
    url = os.environ.get("DATABASE_URL")
    if not url:
        print("DATABASE_URL is not set", file=sys.stderr)
        return 1

    url = _normalize_connection_string(url)

    try:
        engine = create_engine(url, pool_pre_ping=True)

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")

        before = set(inspect(engine).get_table_names())
        Base.metadata.create_all(bind=engine)
        after = set(inspect(engine).get_table_names())

        expected = [model.__tablename__ for model in (Participant, Guardian, EmergencyContact, Submission, Activity)]
        for name in expected:
            state = "created" if name not in before and name in after else "present" if name in after else "MISSING"
            print(f"  {name:<20} {state}")

        if any(name not in after for name in expected):
            print("Some tables could not be created", file=sys.stderr)
            return 3
        return 0

    except OperationalError as e:
        print(f"Failed to connect to database: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
