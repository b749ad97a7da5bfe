import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, status
from google.auth.exceptions import GoogleAuthError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.dependencies import get_guide_registry
from src.integrations.sheets.guide_registry import GuideRegistryConfigurationError, normalize_ic_number

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_MESSAGE = "Record not found. Please contact admin."


class CheckIcRequest(BaseModel):
    icNumber: Optional[str] = None


@router.post("/check-ic", tags=["Guides"])
def check_ic(request: CheckIcRequest, registry=Depends(get_guide_registry)):
    """
    Look up a guide's certifications by national ID.
    """
    ic_number = normalize_ic_number(request.icNumber)
    if not ic_number:
        return JSONResponse({"message": "IC number is required"}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        record = registry.lookup(ic_number)
    except GuideRegistryConfigurationError as e:
        return JSONResponse({"message": str(e)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    except (httpx.HTTPError, GoogleAuthError, ValueError) as e:
        logger.error("Error in check-ic lookup: %s", e)
        return JSONResponse({"message": "Server error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if record is None:
        return {"message": NOT_FOUND_MESSAGE}
    return record
