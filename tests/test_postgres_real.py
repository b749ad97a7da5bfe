import pytest
from sqlalchemy import Text, func, select
from sqlalchemy.exc import IntegrityError

from src.database.models import Activity, EmergencyContact, Guardian, Participant, Submission
from src.database.postgres_real import PostgresDB, _normalize_connection_string
from src.intake.contracts import (
    ActivityRecord,
    GuardianRecord,
    ParticipantRecord,
    SubmissionBundle,
    SubmissionRecord,
)


@pytest.fixture
def real_db(tmp_path):
    db = PostgresDB(f"sqlite:///{tmp_path / 'indemnity.db'}")
    db.create_tables()
    return db


def _bundle(tally_id="sub-1", group="Group A", with_guardian=True):
    return SubmissionBundle(
        participant=ParticipantRecord(fullname="Jane Tan", nric="140302-08-1234", health_declaration="Asthma / Asma"),
        guardian=GuardianRecord(
            guardian_name="Tan Ah Kow",
            guardian_nric="800101-08-5555",
            guardian_email="g@example.com",
            guardian_phone="+60123456789",
            guardian_signature="https://files.example.com/g.png",
        )
        if with_guardian
        else None,
        submission=SubmissionRecord(tally_submission_id=tally_id, branch="BOTANI", group=group),
        activities=[
            ActivityRecord(activity_name="ATV", activity_date="2024-06-01", activity_time="10:00"),
            ActivityRecord(activity_name="Paintball", activity_date="2024-06-02"),
        ],
    )


def _count(db, model):
    with db._session() as s:
        return s.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("postgres://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("psql 'postgresql://u:p@h/db'", "postgresql+psycopg://u:p@h/db"),
        ('  "postgresql+psycopg://u:p@h/db"  ', "postgresql+psycopg://u:p@h/db"),
        ("sqlite:///x.db", "sqlite:///x.db"),
    ],
)
def test_normalize_connection_string(raw, expected):
    assert _normalize_connection_string(raw) == expected


def test_bundle_insert_links_all_records(real_db):
    stored = real_db.create_submission_bundle(_bundle())

    assert stored.guardian_id is not None
    assert stored.emergency_id is None
    assert len(stored.activity_ids) == 2

    detail = real_db.get_submission_detail(stored.submission_id)
    assert detail.participant.fullname == "Jane Tan"
    assert detail.guardian.guardian_name == "Tan Ah Kow"
    assert detail.emergency is None
    assert detail.submission.participant_id == stored.participant_id
    assert {a.activity_name for a in detail.activities} == {"ATV", "Paintball"}
    assert all(a.participant_id == stored.participant_id for a in detail.activities)


def test_duplicate_tally_id_rolls_back_whole_bundle(real_db):
    real_db.create_submission_bundle(_bundle())

    with pytest.raises(IntegrityError):
        real_db.create_submission_bundle(_bundle())

    assert _count(real_db, Participant) == 1
    assert _count(real_db, Guardian) == 1
    assert _count(real_db, Submission) == 1
    assert _count(real_db, Activity) == 2


def test_lookup_by_tally_id_and_insurance_update(real_db):
    stored = real_db.create_submission_bundle(_bundle(with_guardian=False))

    found = real_db.get_submission_by_tally_id("sub-1")
    assert found.submission_id == stored.submission_id
    assert sorted(found.activity_ids) == sorted(stored.activity_ids)
    assert real_db.get_submission_by_tally_id("missing") is None

    real_db.set_submission_insurance(stored.submission_id, {"policyNo": "YAS-9"})
    assert real_db.get_submission_detail(stored.submission_id).submission.yas_insurance == {"policyNo": "YAS-9"}

    with pytest.raises(KeyError):
        real_db.set_submission_insurance("missing", {})


def test_group_ids_and_activity_rows(real_db):
    first = real_db.create_submission_bundle(_bundle("sub-1", group="Group A"))
    second = real_db.create_submission_bundle(_bundle("sub-2", group="Group A"))
    real_db.create_submission_bundle(_bundle("sub-3", group="Group B"))

    assert set(real_db.list_submission_ids_for_group("Group A")) == {first.submission_id, second.submission_id}
    assert real_db.list_submission_ids_for_group("Group C") == []

    rows = real_db.list_activity_rows("BOTANI", "2024-06-01")
    assert len(rows) == 3
    assert {r.activity_name for r in rows} == {"ATV"}
    assert {r.group for r in rows} == {"Group A", "Group B"}
    assert rows[0].fullname == "Jane Tan"
    assert real_db.list_activity_rows("GOPENG GLAMPING PARK", "2024-06-01") == []


@pytest.mark.parametrize(
    "column",
    [
        Participant.__table__.c.phone_number,
        Participant.__table__.c.dob,
        Participant.__table__.c.gender,
        Participant.__table__.c.race,
        Guardian.__table__.c.guardian_phone,
        EmergencyContact.__table__.c.emergency_phone,
        EmergencyContact.__table__.c.emergency_relationship,
        Submission.__table__.c.booking_status,
        Submission.__table__.c.activity_amount,
        Activity.__table__.c.activity_date,
        Activity.__table__.c.activity_time,
    ],
    ids=lambda column: f"{column.table.name}.{column.name}",
)
def test_free_text_answer_columns_are_unbounded(column):
    assert isinstance(column.type, Text)


def test_long_free_text_answers_are_stored(real_db):
    bundle = _bundle()
    bundle.participant.phone_number = "+60 12-345 6789 (mother), +60 19-876 5432 (father, after 6pm)"
    bundle.submission.activity_amount = "RM 120 per pax x 35 pax, deposit RM 500 paid by bank transfer"
    bundle.submission.booking_status = "Confirmed - awaiting balance payment on arrival"

    stored = real_db.create_submission_bundle(bundle)

    detail = real_db.get_submission_detail(stored.submission_id)
    assert detail.participant.phone_number == bundle.participant.phone_number
    assert detail.submission.activity_amount == bundle.submission.activity_amount
