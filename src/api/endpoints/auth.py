import logging
from typing import Optional

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.dependencies import SESSION_COOKIE, SESSION_MAX_AGE, SESSION_VALUE, check_admin_password

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    password: Optional[str] = None


@router.post("/auth/login", tags=["Auth"])
async def login(request: LoginRequest):
    if not check_admin_password(request.password):
        logger.warning("Rejected staff login attempt")
        return JSONResponse({"success": False}, status_code=status.HTTP_401_UNAUTHORIZED)

    response = JSONResponse({"success": True})
    response.set_cookie(
        SESSION_COOKIE,
        SESSION_VALUE,
        max_age=SESSION_MAX_AGE,
        path="/",
        httponly=True,
        secure=True,
        samesite="strict",
    )
    return response
