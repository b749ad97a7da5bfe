"""
Builds partner policy-creation requests from an indemnity submission.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping, Optional, Tuple

import phonenumbers
from pydantic import BaseModel, Field

from src.utils.config_loader import BranchInsuranceConfig, InsuranceConfig

logger = logging.getLogger(__name__)

MINOR_MIN_AGE = 6
MINOR_MAX_AGE = 16
DEFAULT_NATIONALITY_CODE = "MY"

_NATIONALITY_CODE_RE = re.compile(r"\((.*?)\)")


class PolicyPhone(BaseModel):
    country_code: Optional[str] = None
    number: Optional[str] = None


class PolicyRequest(BaseModel):
    """Insurer-facing view of one participant, independent of the form layout."""

    fullname: Optional[str] = None
    date_of_birth: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    phone: PolicyPhone = Field(default_factory=PolicyPhone)
    email: Optional[str] = None
    address: Optional[str] = None
    nric: Optional[str] = None
    nationality: str = DEFAULT_NATIONALITY_CODE
    branch: Optional[str] = None
    coverage_start: Optional[str] = None


def parse_age(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def is_minor(age: Any) -> bool:
    """Minors (for insurance) are aged 6 to 16 inclusive."""
    numeric = parse_age(age)
    if numeric is None:
        return False
    return MINOR_MIN_AGE <= numeric <= MINOR_MAX_AGE


def extract_nationality_code(nationality: Optional[str]) -> str:
    """'Malaysian (MY)' -> 'MY'; anything without a parenthesized code -> 'MY'."""
    if not nationality:
        return DEFAULT_NATIONALITY_CODE
    match = _NATIONALITY_CODE_RE.search(nationality)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return DEFAULT_NATIONALITY_CODE


def split_phone_number(full_number: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Split an international number into (calling code, national number)."""
    if not full_number:
        return None, full_number
    try:
        parsed = phonenumbers.parse(full_number, None)
    except phonenumbers.NumberParseException:
        return None, full_number
    return str(parsed.country_code), str(parsed.national_number)


def _answer(answers: Mapping[str, Optional[str]], key: str) -> Optional[str]:
    value = answers.get(key)
    return value if value else None


def build_policy_request(answers: Mapping[str, Optional[str]]) -> PolicyRequest:
    """
    Derive the insurer request from the submission's answers.

    Minors get the guardian's phone and email; when the guardian left one blank
    the participant's own value is used instead.
    """
    minor = is_minor(answers.get("age"))
    own_phone = _answer(answers, "phonenumber")
    own_email = _answer(answers, "email")
    if minor:
        phone = _answer(answers, "guardianphone") or own_phone
        email = _answer(answers, "guardianemail") or own_email
    else:
        phone, email = own_phone, own_email

    country_code, number = split_phone_number(phone)
    return PolicyRequest(
        fullname=_answer(answers, "fullname"),
        date_of_birth=_answer(answers, "dob"),
        age=_answer(answers, "age"),
        gender=_answer(answers, "gender"),
        phone=PolicyPhone(country_code=country_code, number=number),
        email=email,
        address=_answer(answers, "address"),
        nric=_answer(answers, "nric"),
        nationality=extract_nationality_code(answers.get("nationality")),
        branch=_answer(answers, "BRANCH"),
        coverage_start=_answer(answers, "activitydate1"),
    )


def build_policy_body(
    request: PolicyRequest,
    branch_config: BranchInsuranceConfig,
    config: InsuranceConfig,
) -> Dict[str, Any]:
    applicant: Dict[str, Any] = {
        "documentType": config.document_type,
        "documentNo": request.nric,
        "fullName": request.fullname,
        "nationality": request.nationality,
    }
    # Domestic IC numbers already encode the birth date.
    if request.nationality != config.domestic_nationality:
        applicant["dob"] = request.date_of_birth

    return {
        "mobileCountryCode": request.phone.country_code,
        "mobileNo": request.phone.number,
        "promoCode": branch_config.promo_code,
        "effectiveStartDates": [request.coverage_start],
        "productPlanType": config.product_plan_type,
        "email": request.email,
        "itemId": "",
        "dealer": "",
        "partner": branch_config.partner,
        "eventName": branch_config.event_name,
        "themeCode": "",
        "applicant": applicant,
        "declaration": {
            "allowPrivacyPromote3P": True,
            "allowPrivacyPromote": True,
        },
    }
