from __future__ import annotations

import logging
from pathlib import Path
from typing import Final

from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.database.views import SubmissionDetail
from src.documents.health_declaration import health_flags, parse_health_declaration

logger = logging.getLogger(__name__)

TEMPLATE_DIR: Final[Path] = Path(__file__).resolve().parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


class PdfRenderingUnavailable(RuntimeError):
    """Raised when WeasyPrint (or PDF rendering) is not available."""


def render_indemnity_html(detail: SubmissionDetail) -> str:
    items = parse_health_declaration(detail.participant.health_declaration)
    template = _env.get_template("indemnity.html")
    return template.render(
        submission=detail.submission,
        participant=detail.participant,
        activities=detail.activities,
        guardian=detail.guardian,
        emergency=detail.emergency,
        health=health_flags(items),
    )


def generate_pdf_from_html(html: str) -> bytes:
    """
    Convert an HTML string into a PDF byte stream using WeasyPrint.

    Raises PdfRenderingUnavailable if WeasyPrint is not installed or fails.
    """
    try:
        from weasyprint import HTML
    except (ImportError, OSError) as exc:
        logger.error("WeasyPrint is not available: %s", exc)
        raise PdfRenderingUnavailable(
            "PDF rendering is not available. Install 'weasyprint' and its system libraries."
        ) from exc

    try:
        return HTML(string=html, base_url=".").write_pdf()
    except Exception as exc:
        logger.exception("Failed to generate PDF from HTML: %r", exc)
        raise PdfRenderingUnavailable(f"PDF rendering failed: {exc!r}") from exc


def indemnity_filename(detail: SubmissionDetail) -> str:
    return f"indemnity_{detail.participant.nric or detail.submission.id}.pdf"


def group_filename(group: str) -> str:
    return f"indemnity_group_{group}.pdf"
