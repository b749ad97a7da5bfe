"""
Kanban board views over activity rows.

Boards are keyed by branch and date; sessions are ordered by start time with
untimed activities last, and participants who declared a medical condition are
listed first so staff see them before the activity starts.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from src.database.views import ActivityRow, SubmissionDetail
from src.documents.health_declaration import health_flags, parse_health_declaration

NO_TIME = "No Time"
NO_ACTIVITY = "No Activity"


def format_to_12_hour(time_str: Optional[str]) -> Optional[str]:
    """'13:05' -> '1:05 PM'. Untimed and unparsable values are returned as-is."""
    if not time_str or time_str == NO_TIME:
        return time_str
    hour_part, _, minute_part = time_str.partition(":")
    try:
        hour = int(hour_part)
    except ValueError:
        return time_str
    minute = (minute_part or "00")[:2].rjust(2, "0")
    suffix = "PM" if hour >= 12 else "AM"
    hour = hour % 12 or 12
    return f"{hour}:{minute} {suffix}"


def _session_sort_key(time_key: str):
    return (time_key == NO_TIME, time_key)


def has_health_condition(row: ActivityRow) -> bool:
    return health_flags(parse_health_declaration(row.health_declaration)).has_condition


def _participant_entry(row: ActivityRow) -> Dict[str, Any]:
    return {
        "participant_id": row.participant_id,
        "submission_id": row.submission_id,
        "fullname": row.fullname,
        "phone_number": row.phone_number,
        "group": row.group,
        "health_declaration": row.health_declaration,
        "medical_flag": has_health_condition(row),
    }


def unique_participants(rows: List[ActivityRow]) -> List[Dict[str, Any]]:
    """One entry per participant, medical flags first, otherwise by name."""
    seen: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        seen.setdefault(row.participant_id, _participant_entry(row))
    return sorted(seen.values(), key=lambda p: (not p["medical_flag"], (p["fullname"] or "").lower()))


def _sessions(rows: List[ActivityRow]) -> List[Dict[str, Any]]:
    by_time: Dict[str, List[ActivityRow]] = {}
    for row in rows:
        by_time.setdefault(row.activity_time or NO_TIME, []).append(row)

    sessions = []
    for time_key in sorted(by_time, key=_session_sort_key):
        session_rows = by_time[time_key]
        names: List[str] = []
        for row in session_rows:
            name = row.activity_name or NO_ACTIVITY
            if name not in names:
                names.append(name)
        sessions.append(
            {
                "activity_time": time_key,
                "label": format_to_12_hour(time_key),
                "activities": [
                    _activity_summary(name, [r for r in rows if (r.activity_name or NO_ACTIVITY) == name])
                    for name in names
                ],
            }
        )
    return sessions


def _activity_summary(name: str, rows: List[ActivityRow]) -> Dict[str, Any]:
    return {
        "activity_name": name,
        "pax": len(rows),
        "groups": len({r.group for r in rows}),
    }


def activity_board(rows: List[ActivityRow]) -> Dict[str, Any]:
    """Sessions of the day, with head count and group count per activity."""
    return {"total": len(rows), "sessions": _sessions(rows)}


def activity_detail(rows: List[ActivityRow], activity_name: str) -> Dict[str, Any]:
    matching = [r for r in rows if (r.activity_name or NO_ACTIVITY) == activity_name]
    participants = unique_participants(matching)
    return {
        "activity_name": activity_name,
        "pax": len(participants),
        "with_health_condition": sum(1 for p in participants if p["medical_flag"]),
        "participants": participants,
    }


def list_groups(rows: List[ActivityRow]) -> List[str]:
    return sorted({r.group for r in rows if r.group})


def group_board(rows: List[ActivityRow], group: str) -> Dict[str, Any]:
    matching = [r for r in rows if r.group == group]
    participants = unique_participants(matching)
    return {
        "group": group,
        "pax": len(participants),
        "with_health_condition": sum(1 for p in participants if p["medical_flag"]),
        "sessions": _sessions(matching),
        "participants": participants,
    }


_PARTICIPANT_FIELDS = (
    "id", "fullname", "dob", "age", "nric", "nationality", "phone_number", "email",
    "address", "gender", "race", "health_declaration",
)
_SUBMISSION_FIELDS = (
    "id", "tally_submission_id", "branch", "group", "booking_status", "activity_amount", "yas_insurance",
)
_ACTIVITY_FIELDS = ("id", "activity_name", "activity_date", "activity_time")
_GUARDIAN_FIELDS = ("id", "guardian_name", "guardian_nric", "guardian_email", "guardian_phone")
_EMERGENCY_FIELDS = ("id", "emergency_fullname", "emergency_phone", "emergency_relationship")


def _fields(obj: Any, names) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    return {name: getattr(obj, name, None) for name in names}


def client_info(detail: SubmissionDetail) -> Dict[str, Any]:
    """Everything staff need on one participant card; signatures are left out."""
    flags = health_flags(parse_health_declaration(detail.participant.health_declaration))
    activities = sorted(
        detail.activities,
        key=lambda a: (a.activity_date or "", a.activity_time or ""),
    )
    return {
        "submission": _fields(detail.submission, _SUBMISSION_FIELDS),
        "participant": _fields(detail.participant, _PARTICIPANT_FIELDS),
        "medical_flag": flags.has_condition,
        "activities": [_fields(a, _ACTIVITY_FIELDS) for a in activities],
        "guardian": _fields(detail.guardian, _GUARDIAN_FIELDS),
        "emergency": _fields(detail.emergency, _EMERGENCY_FIELDS),
    }
