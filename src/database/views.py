"""
Read shapes shared by both gateway implementations.

The gateways hand back their own entity objects (ORM rows or in-memory
dataclasses); these containers only group them for callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class SubmissionDetail:
    submission: Any
    participant: Any
    activities: List[Any] = field(default_factory=list)
    guardian: Optional[Any] = None
    emergency: Optional[Any] = None


@dataclass
class ActivityRow:
    """One activity joined with its submission and participant, for boards."""

    activity_id: str
    activity_name: Optional[str]
    activity_date: Optional[str]
    activity_time: Optional[str]
    submission_id: str
    branch: Optional[str]
    group: Optional[str]
    participant_id: str
    fullname: Optional[str]
    health_declaration: Optional[str]
    phone_number: Optional[str]
