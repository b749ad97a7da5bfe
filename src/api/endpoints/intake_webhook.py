import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.api.dependencies import get_db, get_insurance_client
from src.error_handler import ErrorHandler
from src.intake.submission_mapper import IntakeValidationError, SubmissionIngestor, parse_webhook_payload

logger = logging.getLogger(__name__)

router = APIRouter()
error_handler = ErrorHandler()


@router.post("/tally-to-supabase", tags=["Intake"])
async def tally_webhook(request: Request, db=Depends(get_db), insurance_client=Depends(get_insurance_client)):
    """
    Receives a completed indemnity form from the form provider and stores it.
    """
    try:
        body: Any = await request.json()
        payload = parse_webhook_payload(body)
    except (ValueError, ValidationError) as e:
        # IntakeValidationError and JSON decode errors are both ValueErrors.
        logger.error("Invalid webhook payload: %s", e)
        message = str(e) if isinstance(e, IntakeValidationError) else "Invalid payload, no fields"
        return JSONResponse({"error": message}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        result = await SubmissionIngestor(db, insurance_client).ingest(payload)
    except Exception as e:
        return JSONResponse(
            error_handler.handle_exception(e, context={"submission_id": payload.data.submission_id}),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response: Dict[str, Any] = {
        "success": True,
        "submission_id": result.stored.submission_id,
        "duplicate": result.duplicate,
        "insurance": result.insurance.model_dump(exclude={"response"}, exclude_none=True),
    }
    return response
