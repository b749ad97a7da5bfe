"""Pytest fixtures for intake, insurance and dashboard tests."""

from typing import Any, Dict

import pytest

from src.database.postgres import PostgresDB
from src.utils.config_loader import load_insurance_config


@pytest.fixture
def db():
    """In-memory PostgresDB stub for tests."""
    return PostgresDB()


@pytest.fixture
def insurance_config():
    return load_insurance_config()


@pytest.fixture
def minor_answers() -> Dict[str, Any]:
    return {
        "BRANCH": "GOPENG GLAMPING PARK",
        "groupname": "Sekolah Seri Gopeng",
        "bookingstatus": "Confirmed",
        "activityamount": "2",
        "fullname": "Jane Tan",
        "age": "10",
        "dob": "2014-03-02",
        "nric": "140302-08-1234",
        "nationality": ["nat-my"],
        "phonenumber": "+60198765432",
        "email": "jane@example.com",
        "gender": "Female",
        "address": "12 Jalan Gopeng",
        "healthdeclaration": "Asthma / Asma",
        "participantsignature": [{"url": "https://files.example.com/p-sig.png", "name": "p-sig.png"}],
        "guardianname": "Tan Ah Kow",
        "guardiannric": "800101-08-5555",
        "guardianemail": "guardian@example.com",
        "guardianphone": "+60123456789",
        "guardiansignature": [{"url": "https://files.example.com/g-sig.png"}],
        "emergencyfullname": "Lim Mei",
        "emergencyphone": "+60111111111",
        "emergencyrelationship": "Aunt",
        "activity1": "ATV",
        "activitydate1": "2024-06-01",
        "actime1": "10:00",
        "activity2": "Water Rafting",
        "activitydate2": "2024-06-01",
        "actime2": "14:30",
    }


@pytest.fixture
def nationality_options():
    return {
        "nationality": [
            {"id": "nat-my", "text": "Malaysian (MY)"},
            {"id": "nat-sg", "text": "Singaporean (SG)"},
        ]
    }
