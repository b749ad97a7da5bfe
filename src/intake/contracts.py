"""
Inbound webhook contracts and the typed records produced from a form submission.

The webhook models mirror the payload posted by the form provider; the record
models mirror the five tables of the persistence layer.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FieldOption(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    text: Optional[str] = None


class RawField(BaseModel):
    """One answered question as delivered by the form provider."""

    model_config = ConfigDict(extra="ignore")

    label: Optional[str] = None
    id: Optional[str] = None
    value: Any = None
    options: List[FieldOption] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_key_as_id(cls, data: Any) -> Any:
        # Tally names the question identifier "key".
        if isinstance(data, dict) and not data.get("id") and data.get("key"):
            data = {**data, "id": data["key"]}
        if isinstance(data, dict) and data.get("options") is None:
            data = {**data, "options": []}
        return data


class TallySubmissionData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    submission_id: Optional[str] = Field(default=None, alias="submissionId")
    respondent_id: Optional[str] = Field(default=None, alias="respondentId")
    form_id: Optional[str] = Field(default=None, alias="formId")
    form_name: Optional[str] = Field(default=None, alias="formName")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    fields: List[RawField]


class TallyWebhookPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    event_id: Optional[str] = Field(default=None, alias="eventId")
    event_type: Optional[str] = Field(default=None, alias="eventType")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    data: TallySubmissionData


# ---------------------------------------------------------------------- #
# Records
# ---------------------------------------------------------------------- #
class ParticipantRecord(BaseModel):
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


class GuardianRecord(BaseModel):
    guardian_name: str
    guardian_nric: str
    guardian_email: str
    guardian_phone: str
    guardian_signature: str


class EmergencyContactRecord(BaseModel):
    emergency_fullname: str
    emergency_phone: str
    emergency_relationship: str


class SubmissionRecord(BaseModel):
    tally_submission_id: Optional[str] = None
    tally_respondent_id: Optional[str] = None
    branch: Optional[str] = None
    group: Optional[str] = None
    booking_status: Optional[str] = None
    activity_amount: Optional[str] = None


class ActivityRecord(BaseModel):
    activity_name: Optional[str] = None
    activity_date: Optional[str] = None
    activity_time: Optional[str] = None


class SubmissionBundle(BaseModel):
    """Everything one webhook delivery writes, in dependency order."""

    participant: ParticipantRecord
    guardian: Optional[GuardianRecord] = None
    emergency: Optional[EmergencyContactRecord] = None
    submission: SubmissionRecord
    activities: List[ActivityRecord] = Field(default_factory=list)


class StoredSubmission(BaseModel):
    """Identifiers handed back by the gateway after a bundle is persisted."""

    submission_id: str
    participant_id: str
    guardian_id: Optional[str] = None
    emergency_id: Optional[str] = None
    activity_ids: List[str] = Field(default_factory=list)


class InsuranceOutcome(BaseModel):
    status: str  # "created" | "failed" | "skipped"
    error: Optional[str] = None
    response: Optional[Dict[str, Any]] = None


class IngestResult(BaseModel):
    stored: StoredSubmission
    duplicate: bool = False
    insurance: InsuranceOutcome = Field(default_factory=lambda: InsuranceOutcome(status="skipped"))
