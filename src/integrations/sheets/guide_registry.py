"""
Guide certification registry backed by a Google Sheet.

Staff verify a guide by national ID; the registry sheet holds one row per
guide with four columns (level, validity, certificate, card) for each of the
seven activity categories.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
DEFAULT_RANGE = "'DATABASE'!A2:AZ"

IC_COLUMN = 3
FIRST_CATEGORY_COLUMN = 6
# Order matters: each category occupies the next four columns.
CATEGORIES = ("WWRFTR", "WA", "ATV", "PB", "SHJTCE", "TMTB", "DRIVER")
CATEGORY_SUFFIXES = ("", "VALID", "CERT", "CARD")

SETUP_MESSAGE = (
    "Server configuration error. Please set GOOGLE_CLIENT_EMAIL, GOOGLE_PRIVATE_KEY, "
    "and SHEET_ID in the environment."
)


class GuideRegistryConfigurationError(RuntimeError):
    pass


def normalize_ic_number(value: Optional[str]) -> str:
    return re.sub(r"[\s-]", "", value or "")


def _cell(row: Sequence[Any], index: int) -> Optional[str]:
    return row[index] if index < len(row) else None


def map_guide_row(row: Sequence[Any]) -> Dict[str, Optional[str]]:
    record: Dict[str, Optional[str]] = {
        "RegNo": _cell(row, 0),
        "name": _cell(row, 1),
        "nickname": _cell(row, 2),
    }
    column = FIRST_CATEGORY_COLUMN
    for category in CATEGORIES:
        for suffix in CATEGORY_SUFFIXES:
            record[f"{category}{suffix}"] = _cell(row, column)
            column += 1
    return record


def find_guide(rows: List[Sequence[Any]], ic_number: str) -> Optional[Dict[str, Optional[str]]]:
    for row in rows:
        if _cell(row, IC_COLUMN) == ic_number:
            return map_guide_row(row)
    return None


class GuideRegistryClient:
    def __init__(
        self,
        client_email: Optional[str] = None,
        private_key: Optional[str] = None,
        sheet_id: Optional[str] = None,
        sheet_range: str = DEFAULT_RANGE,
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
        credentials: Any = None,
    ) -> None:
        self.client_email = client_email or os.getenv("GOOGLE_CLIENT_EMAIL", "")
        self.private_key = (private_key or os.getenv("GOOGLE_PRIVATE_KEY", "")).replace("\\n", "\n")
        self.sheet_id = sheet_id or os.getenv("SHEET_ID", "")
        self.sheet_range = sheet_range
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._credentials = credentials

    def _check_config(self) -> None:
        if self._credentials is not None and self.sheet_id:
            return
        if not (self.client_email and self.private_key and self.sheet_id):
            logger.error(
                "Guide registry env missing: GOOGLE_CLIENT_EMAIL=%s GOOGLE_PRIVATE_KEY=%s SHEET_ID=%s",
                bool(self.client_email),
                bool(self.private_key),
                bool(self.sheet_id),
            )
            raise GuideRegistryConfigurationError(SETUP_MESSAGE)

    def _access_token(self) -> str:
        if self._credentials is None:
            self._credentials = service_account.Credentials.from_service_account_info(
                {
                    "type": "service_account",
                    "client_email": self.client_email,
                    "private_key": self.private_key,
                    "token_uri": "https://oauth2.googleapis.com/token",
                },
                scopes=SHEETS_SCOPES,
            )
        if not self._credentials.valid:
            self._credentials.refresh(GoogleAuthRequest())
        return self._credentials.token

    def fetch_rows(self) -> List[List[Any]]:
        self._check_config()
        url = f"{SHEETS_API_URL}/{self.sheet_id}/values/{quote(self.sheet_range, safe='')}"
        headers = {"Authorization": f"Bearer {self._access_token()}"}
        with httpx.Client(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = client.get(url, headers=headers)
            response.raise_for_status()
            data = response.json()
        return data.get("values") or []

    def lookup(self, ic_number: str) -> Optional[Dict[str, Optional[str]]]:
        return find_guide(self.fetch_rows(), ic_number)
