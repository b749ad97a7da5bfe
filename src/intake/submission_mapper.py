"""
Submission mapper: turns one webhook delivery into persisted records and an
insurance policy request.

Flow per delivery:
  1. normalize the raw fields into an AnswerMap
  2. build participant / guardian / emergency / submission / activity records
  3. skip redeliveries of an already stored submission
  4. persist the bundle in one transaction
  5. request the activity insurance policy (never undoes step 4)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from src.integrations.insurance.client import YasInsuranceClient
from src.integrations.insurance.request_builder import build_policy_request
from src.intake.contracts import (
    ActivityRecord,
    EmergencyContactRecord,
    GuardianRecord,
    IngestResult,
    InsuranceOutcome,
    ParticipantRecord,
    SubmissionBundle,
    SubmissionRecord,
    TallyWebhookPayload,
)
from src.intake.field_normalizer import AnswerMap, parse_answers

logger = logging.getLogger(__name__)

ACTIVITY_SLOTS = 7

PARTICIPANT_KEYS = {
    "fullname": "fullname",
    "dob": "dob",
    "age": "age",
    "nric": "nric",
    "nationality": "nationality",
    "phone_number": "phonenumber",
    "email": "email",
    "address": "address",
    "gender": "gender",
    "race": "race",
    "health_declaration": "healthdeclaration",
    "participant_signature": "participantsignature",
}

GUARDIAN_KEYS = {
    "guardian_name": "guardianname",
    "guardian_nric": "guardiannric",
    "guardian_email": "guardianemail",
    "guardian_phone": "guardianphone",
    "guardian_signature": "guardiansignature",
}

EMERGENCY_KEYS = {
    "emergency_fullname": "emergencyfullname",
    "emergency_phone": "emergencyphone",
    "emergency_relationship": "emergencyrelationship",
}

SUBMISSION_KEYS = {
    "branch": "BRANCH",
    "group": "groupname",
    "booking_status": "bookingstatus",
    "activity_amount": "activityamount",
}


class IntakeValidationError(ValueError):
    """The webhook body is missing required structure."""


def _value(answers: Mapping[str, Optional[str]], key: str) -> Optional[str]:
    value = answers.get(key)
    return value or None


def _pick(answers: Mapping[str, Optional[str]], keys: Mapping[str, str]) -> Dict[str, Optional[str]]:
    return {field: _value(answers, key) for field, key in keys.items()}


def _pick_if_complete(answers: Mapping[str, Optional[str]], keys: Mapping[str, str]) -> Optional[Dict[str, str]]:
    picked = _pick(answers, keys)
    if all(picked.values()):
        return picked  # type: ignore[return-value]
    return None


def build_activities(answers: Mapping[str, Optional[str]]) -> List[ActivityRecord]:
    activities: List[ActivityRecord] = []
    for i in range(1, ACTIVITY_SLOTS + 1):
        name = _value(answers, f"activity{i}")
        date = _value(answers, f"activitydate{i}")
        time = _value(answers, f"actime{i}")
        if name or date or time:
            activities.append(ActivityRecord(activity_name=name, activity_date=date, activity_time=time))
    return activities


def build_submission_bundle(
    answers: Mapping[str, Optional[str]],
    tally_submission_id: Optional[str] = None,
    tally_respondent_id: Optional[str] = None,
) -> SubmissionBundle:
    guardian = _pick_if_complete(answers, GUARDIAN_KEYS)
    emergency = _pick_if_complete(answers, EMERGENCY_KEYS)
    return SubmissionBundle(
        participant=ParticipantRecord(**_pick(answers, PARTICIPANT_KEYS)),
        guardian=GuardianRecord(**guardian) if guardian else None,
        emergency=EmergencyContactRecord(**emergency) if emergency else None,
        submission=SubmissionRecord(
            tally_submission_id=tally_submission_id,
            tally_respondent_id=tally_respondent_id,
            **_pick(answers, SUBMISSION_KEYS),
        ),
        activities=build_activities(answers),
    )


def parse_webhook_payload(payload: Any) -> TallyWebhookPayload:
    if not isinstance(payload, dict):
        raise IntakeValidationError("Invalid payload, no fields")
    data = payload.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("fields"), list):
        raise IntakeValidationError("Invalid payload, no fields")
    return TallyWebhookPayload.model_validate(payload)


class SubmissionIngestor:
    def __init__(self, db, insurance_client: Optional[YasInsuranceClient] = None) -> None:
        self.db = db
        self.insurance_client = insurance_client

    async def ingest(self, payload: TallyWebhookPayload) -> IngestResult:
        answers = parse_answers(payload.data.fields)
        logger.info("Mapped %d answers for submission %s", len(answers), payload.data.submission_id)

        tally_id = payload.data.submission_id
        if tally_id:
            existing = self.db.get_submission_by_tally_id(tally_id)
            if existing is not None:
                logger.info("Ignoring redelivery of submission %s", tally_id)
                return IngestResult(stored=existing, duplicate=True)

        bundle = build_submission_bundle(answers, tally_id, payload.data.respondent_id)
        stored = self.db.create_submission_bundle(bundle)
        logger.info(
            "Stored submission %s (participant=%s guardian=%s emergency=%s activities=%d)",
            stored.submission_id,
            stored.participant_id,
            stored.guardian_id,
            stored.emergency_id,
            len(stored.activity_ids),
        )

        insurance = await self._request_insurance(answers, stored.submission_id)
        return IngestResult(stored=stored, insurance=insurance)

    async def _request_insurance(self, answers: AnswerMap, submission_id: str) -> InsuranceOutcome:
        if self.insurance_client is None:
            logger.warning("Insurance client not configured; skipping policy for %s", submission_id)
            return InsuranceOutcome(status="skipped")

        try:
            policy = build_policy_request(answers)
            response = await self.insurance_client.create_policy(policy)
        except Exception as e:
            # The stored submission stands; staff can re-issue the policy manually.
            logger.error("Insurance policy failed for submission %s: %s", submission_id, e)
            return InsuranceOutcome(status="failed", error=str(e))

        logger.info("Insurance response for submission %s: %s", submission_id, response)
        try:
            self.db.set_submission_insurance(submission_id, response)
        except Exception as e:
            # The policy exists upstream; the response stays in the log for manual recovery.
            logger.error(
                "Policy created but not recorded for submission %s: %s (response=%s)", submission_id, e, response
            )
            return InsuranceOutcome(status="created", error=f"Policy created but not recorded: {e}", response=response)
        return InsuranceOutcome(status="created", response=response)
