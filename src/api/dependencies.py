import os
import hmac
import logging
from typing import Optional

from fastapi import Cookie, HTTPException, Request, status
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"
SESSION_VALUE = "authenticated"
SESSION_MAX_AGE = 60 * 60


def get_admin_password() -> str:
    return os.getenv("ADMIN_PASSWORD", "")


def check_admin_password(candidate: Optional[str]) -> bool:
    expected = get_admin_password()
    # An unset password must never match an empty submission.
    return bool(expected) and bool(candidate) and hmac.compare_digest(candidate, expected)


async def require_session(session: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE)) -> None:
    if session != SESSION_VALUE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login required",
        )


def get_db(request: Request):
    return request.app.state.db


def get_insurance_client(request: Request):
    return request.app.state.insurance_client


def get_guide_registry(request: Request):
    return request.app.state.guide_registry
