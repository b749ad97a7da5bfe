"""Error handling helpers for the API route boundary."""
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.error("Unhandled exception (%s): %s", context or {}, exc, exc_info=True)
        return {"error": str(exc) or exc.__class__.__name__}
