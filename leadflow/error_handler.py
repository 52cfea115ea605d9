"""Error handling helpers for the lead submission API."""
from typing import Any, Dict
import logging

from leadflow.integrations.policy.response_wrappers import IntegrationError

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, IntegrationError):
            logger.error("Lead submission error at step %s: %s", exc.step, exc.message)
            return {"success": False, "error": exc.message or "Failed to process lead submission"}

        logger.error("Unhandled exception in lead submission: %s (context: %s)", exc, context or {}, exc_info=True)
        return {"success": False, "error": str(exc) or "Failed to process lead submission"}
