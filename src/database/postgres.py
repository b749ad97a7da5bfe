"""
Lightweight in-memory PostgresDB replacement for local development.

This provides the same interface as src.database.postgres_real so the
webhook, document and dashboard routes can run without a real database.
It is NOT intended for production use.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import uuid

from src.database.views import ActivityRow, SubmissionDetail
from src.intake.contracts import StoredSubmission, SubmissionBundle


class DuplicateSubmissionError(ValueError):
    """Mirrors the unique constraint on submissions.tally_submission_id."""


@dataclass
class Participant:
    id: str
    fullname: Optional[str] = None
    dob: Optional[str] = None
    age: Optional[str] = None
    nric: Optional[str] = None
    nationality: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None
    race: Optional[str] = None
    health_declaration: Optional[str] = None
    participant_signature: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Guardian:
    id: str
    guardian_name: str
    guardian_nric: str
    guardian_email: str
    guardian_phone: str
    guardian_signature: str
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class EmergencyContact:
    id: str
    emergency_fullname: str
    emergency_phone: str
    emergency_relationship: str
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Submission:
    id: str
    participant_id: str
    tally_submission_id: Optional[str] = None
    tally_respondent_id: Optional[str] = None
    branch: Optional[str] = None
    group: Optional[str] = None
    booking_status: Optional[str] = None
    activity_amount: Optional[str] = None
    guardian_id: Optional[str] = None
    emergency_id: Optional[str] = None
    yas_insurance: Optional[Dict[str, Any]] = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Activity:
    id: str
    participant_id: str
    submission_id: str
    activity_name: Optional[str] = None
    activity_date: Optional[str] = None
    activity_time: Optional[str] = None


class PostgresDB:
    """
    In-memory stand-in for the Postgres-backed data access layer.

    Writes for one bundle are staged and only become visible once every
    record has been built, so a failure leaves nothing behind.
    """

    def __init__(self) -> None:
        self.participants: Dict[str, Participant] = {}
        self.guardians: Dict[str, Guardian] = {}
        self.emergency_contacts: Dict[str, EmergencyContact] = {}
        self.submissions: Dict[str, Submission] = {}
        self.activities: List[Activity] = []

    # ------------------------------------------------------------------ #
    # Schema / lifecycle
    # ------------------------------------------------------------------ #
    def create_tables(self) -> None:
        """
        No-op for the in-memory implementation. Kept for compatibility
        with the startup hook in `src/api/main.py`.
        """
        return None

    # ------------------------------------------------------------------ #
    # Submissions
    # ------------------------------------------------------------------ #
    def create_submission_bundle(self, bundle: SubmissionBundle) -> StoredSubmission:
        tally_id = bundle.submission.tally_submission_id
        if tally_id and self._find_by_tally_id(tally_id) is not None:
            raise DuplicateSubmissionError(f"Submission already exists for tally_submission_id={tally_id}")

        participant = Participant(id=str(uuid.uuid4()), **bundle.participant.model_dump())
        guardian = (
            Guardian(id=str(uuid.uuid4()), **bundle.guardian.model_dump()) if bundle.guardian is not None else None
        )
        emergency = (
            EmergencyContact(id=str(uuid.uuid4()), **bundle.emergency.model_dump())
            if bundle.emergency is not None
            else None
        )
        submission = Submission(
            id=str(uuid.uuid4()),
            participant_id=participant.id,
            guardian_id=guardian.id if guardian else None,
            emergency_id=emergency.id if emergency else None,
            **bundle.submission.model_dump(),
        )
        activities = [
            Activity(
                id=str(uuid.uuid4()),
                participant_id=participant.id,
                submission_id=submission.id,
                **a.model_dump(),
            )
            for a in bundle.activities
        ]

        self.participants[participant.id] = participant
        if guardian:
            self.guardians[guardian.id] = guardian
        if emergency:
            self.emergency_contacts[emergency.id] = emergency
        self.submissions[submission.id] = submission
        self.activities.extend(activities)

        return StoredSubmission(
            submission_id=submission.id,
            participant_id=participant.id,
            guardian_id=submission.guardian_id,
            emergency_id=submission.emergency_id,
            activity_ids=[a.id for a in activities],
        )

    def _find_by_tally_id(self, tally_submission_id: str) -> Optional[Submission]:
        for sub in self.submissions.values():
            if sub.tally_submission_id == tally_submission_id:
                return sub
        return None

    def get_submission_by_tally_id(self, tally_submission_id: str) -> Optional[StoredSubmission]:
        sub = self._find_by_tally_id(tally_submission_id)
        if sub is None:
            return None
        return StoredSubmission(
            submission_id=sub.id,
            participant_id=sub.participant_id,
            guardian_id=sub.guardian_id,
            emergency_id=sub.emergency_id,
            activity_ids=[a.id for a in self.activities if a.submission_id == sub.id],
        )

    def set_submission_insurance(self, submission_id: str, payload: Dict[str, Any]) -> None:
        sub = self.submissions.get(str(submission_id))
        if sub is None:
            raise KeyError(f"Submission not found: {submission_id}")
        sub.yas_insurance = payload

    def get_submission_detail(self, submission_id: str) -> Optional[SubmissionDetail]:
        sub = self.submissions.get(str(submission_id))
        if sub is None:
            return None
        return SubmissionDetail(
            submission=sub,
            participant=self.participants[sub.participant_id],
            activities=[a for a in self.activities if a.submission_id == sub.id],
            guardian=self.guardians.get(sub.guardian_id) if sub.guardian_id else None,
            emergency=self.emergency_contacts.get(sub.emergency_id) if sub.emergency_id else None,
        )

    def list_submission_ids_for_group(self, group: str) -> List[str]:
        subs = [s for s in self.submissions.values() if s.group == group]
        subs.sort(key=lambda s: s.created_at)
        return [s.id for s in subs]

    # ------------------------------------------------------------------ #
    # Boards
    # ------------------------------------------------------------------ #
    def list_activity_rows(self, branch: str, activity_date: str) -> List[ActivityRow]:
        rows: List[ActivityRow] = []
        for a in self.activities:
            if a.activity_date != activity_date:
                continue
            sub = self.submissions[a.submission_id]
            if sub.branch != branch:
                continue
            p = self.participants[sub.participant_id]
            rows.append(
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
            )
        return rows

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Plain-dict dump of every table, for debugging and tests."""
        return {
            "participants": [asdict(p) for p in self.participants.values()],
            "guardians": [asdict(g) for g in self.guardians.values()],
            "emergency_contacts": [asdict(e) for e in self.emergency_contacts.values()],
            "submissions": [asdict(s) for s in self.submissions.values()],
            "activities": [asdict(a) for a in self.activities],
        }
