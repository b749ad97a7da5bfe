import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from src.api.dependencies import get_db, require_session
from src.documents.indemnity_pdf import (
    PdfRenderingUnavailable,
    generate_pdf_from_html,
    group_filename,
    indemnity_filename,
    render_indemnity_html,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_session)])


class GeneratePdfRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    submission_id: Optional[str] = Field(default=None, alias="submissionId")
    group: Optional[str] = None


def content_disposition(filename: str) -> str:
    """
    Attachment header with an ASCII fallback name and the UTF-8 name in `filename*` (RFC 6266).
    """
    fallback = "".join(c if c.isascii() and c.isprintable() and c not in '"\\' else "_" for c in filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _pdf_response(pdf: bytes, filename: str) -> Response:
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename)},
    )


@router.post("/generate-pdf", tags=["Documents"])
def generate_pdf(request: GeneratePdfRequest, db=Depends(get_db)):
    """
    Render the indemnity form for one submission, or for the first submission of a group.
    """
    if request.submission_id:
        submission_id = request.submission_id
        filename = None
    elif request.group:
        ids = db.list_submission_ids_for_group(request.group)
        if not ids:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No submissions for group {request.group}")
        # Only the first submission of a group is rendered.
        submission_id = ids[0]
        filename = group_filename(request.group)
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No submissionId or group provided")

    detail = db.get_submission_detail(submission_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Submission not found: {submission_id}")

    try:
        pdf = generate_pdf_from_html(render_indemnity_html(detail))
    except PdfRenderingUnavailable as e:
        logger.error("PDF generation failed for %s: %s", submission_id, e)
        return JSONResponse({"error": str(e)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return _pdf_response(pdf, filename or indemnity_filename(detail))
