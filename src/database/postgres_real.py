"""
Real Postgres-backed DB for production when DATABASE_URL is set.
Implements the same interface as src.database.postgres (in-memory stub).
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
from uuid import uuid4

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from src.database.models import (
    Activity,
    Base,
    EmergencyContact,
    Guardian,
    Participant,
    Submission,
)
from src.database.views import ActivityRow, SubmissionDetail
from src.intake.contracts import StoredSubmission, SubmissionBundle


def _normalize_connection_string(s: str) -> str:
    """Strip common mistakes: 'psql \'...\'', extra quotes, whitespace."""
    s = s.strip()
    if re.match(r"^psql\s+", s, re.IGNORECASE):
        s = re.sub(r"^psql\s+", "", s, flags=re.IGNORECASE).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    # SQLAlchemy needs the psycopg v3 driver spelled out.
    if s.startswith("postgres://"):
        s = "postgresql+psycopg://" + s[len("postgres://"):]
    elif s.startswith("postgresql://"):
        s = "postgresql+psycopg://" + s[len("postgresql://"):]
    return s


class PostgresDB:
    """
    Postgres data access using SQLAlchemy. Use when DATABASE_URL is set.
    """

    def __init__(self, connection_string: str, **engine_kwargs: Any) -> None:
        connection_string = _normalize_connection_string(connection_string)
        if connection_string.startswith("sqlite"):
            self.engine = create_engine(connection_string, **engine_kwargs)
        else:
            self.engine = create_engine(
                connection_string, pool_pre_ping=True, pool_size=5, max_overflow=10, **engine_kwargs
            )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        s = self.SessionLocal()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    # ------------------------------------------------------------------ #
    # Submissions
    # ------------------------------------------------------------------ #
    def create_submission_bundle(self, bundle: SubmissionBundle) -> StoredSubmission:
        """Insert participant, guardian, emergency, submission and activities in one transaction."""
        with self._session() as s:
            participant = Participant(id=str(uuid4()), **bundle.participant.model_dump())
            s.add(participant)
            s.flush()

            guardian_id: Optional[str] = None
            if bundle.guardian is not None:
                guardian = Guardian(id=str(uuid4()), **bundle.guardian.model_dump())
                s.add(guardian)
                s.flush()
                guardian_id = guardian.id

            emergency_id: Optional[str] = None
            if bundle.emergency is not None:
                emergency = EmergencyContact(id=str(uuid4()), **bundle.emergency.model_dump())
                s.add(emergency)
                s.flush()
                emergency_id = emergency.id

            submission = Submission(
                id=str(uuid4()),
                participant_id=participant.id,
                guardian_id=guardian_id,
                emergency_id=emergency_id,
                **bundle.submission.model_dump(),
            )
            s.add(submission)
            s.flush()

            activities = [
                Activity(
                    id=str(uuid4()),
                    participant_id=participant.id,
                    submission_id=submission.id,
                    **a.model_dump(),
                )
                for a in bundle.activities
            ]
            if activities:
                s.add_all(activities)
                s.flush()

            return StoredSubmission(
                submission_id=submission.id,
                participant_id=participant.id,
                guardian_id=guardian_id,
                emergency_id=emergency_id,
                activity_ids=[a.id for a in activities],
            )

    def get_submission_by_tally_id(self, tally_submission_id: str) -> Optional[StoredSubmission]:
        with self._session() as s:
            stmt = select(Submission).where(Submission.tally_submission_id == tally_submission_id)
            sub = s.execute(stmt).scalar_one_or_none()
            if sub is None:
                return None
            activity_ids = s.execute(select(Activity.id).where(Activity.submission_id == sub.id)).scalars().all()
            return StoredSubmission(
                submission_id=sub.id,
                participant_id=sub.participant_id,
                guardian_id=sub.guardian_id,
                emergency_id=sub.emergency_id,
                activity_ids=list(activity_ids),
            )

    def set_submission_insurance(self, submission_id: str, payload: Dict[str, Any]) -> None:
        with self._session() as s:
            sub = s.get(Submission, str(submission_id))
            if sub is None:
                raise KeyError(f"Submission not found: {submission_id}")
            sub.yas_insurance = payload

    def get_submission_detail(self, submission_id: str) -> Optional[SubmissionDetail]:
        with self._session() as s:
            sub = s.get(Submission, str(submission_id))
            if sub is None:
                return None
            participant = s.get(Participant, sub.participant_id)
            activities = list(
                s.execute(select(Activity).where(Activity.submission_id == sub.id)).scalars().all()
            )
            guardian = s.get(Guardian, sub.guardian_id) if sub.guardian_id else None
            emergency = s.get(EmergencyContact, sub.emergency_id) if sub.emergency_id else None
            return SubmissionDetail(
                submission=sub,
                participant=participant,
                activities=activities,
                guardian=guardian,
                emergency=emergency,
            )

    def list_submission_ids_for_group(self, group: str) -> List[str]:
        with self._session() as s:
            stmt = select(Submission.id).where(Submission.group == group).order_by(Submission.created_at)
            return list(s.execute(stmt).scalars().all())

    # ------------------------------------------------------------------ #
    # Boards
    # ------------------------------------------------------------------ #
    def list_activity_rows(self, branch: str, activity_date: str) -> List[ActivityRow]:
        with self._session() as s:
            stmt = (
                select(Activity, Submission, Participant)
                .join(Submission, Activity.submission_id == Submission.id)
                .join(Participant, Submission.participant_id == Participant.id)
                .where(Submission.branch == branch, Activity.activity_date == activity_date)
            )
            return [
                ActivityRow(
                    activity_id=a.id,
                    activity_name=a.activity_name,
                    activity_date=a.activity_date,
                    activity_time=a.activity_time,
                    submission_id=sub.id,
                    branch=sub.branch,
                    group=sub.group,
                    participant_id=p.id,
                    fullname=p.fullname,
                    health_declaration=p.health_declaration,
                    phone_number=p.phone_number,
                )
                for a, sub, p in s.execute(stmt).all()
            ]
