"""Turn captured failures into user-facing payloads."""
from typing import Any, Dict
import logging

from catalog.integrations.response_wrappers import (
    DeserializationError,
    EmptyBodyError,
    IntegrationResponseError,
    TransportError,
)
from catalog.usecases.products import ProductNotFoundError

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: BaseException, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, TransportError):
            message = "We couldn't reach the catalogue right now. Please try again."
            retryable = True
        elif isinstance(exc, EmptyBodyError):
            message = "The catalogue is empty at the moment. Please try again later."
            retryable = True
        elif isinstance(exc, DeserializationError):
            message = "The catalogue could not be read."
            retryable = False
        elif isinstance(exc, ProductNotFoundError):
            message = "This product is no longer available."
            retryable = False
        else:
            logger.error("Unhandled exception in catalogue pipeline: %s", exc, exc_info=exc)
            message = "An internal error occurred while processing your request. Please try again later."
            retryable = False

        metadata: Dict[str, Any] = {"error": str(exc), "type": type(exc).__name__, "context": context or {}}
        if isinstance(exc, TransportError) and exc.status_code is not None:
            metadata["status_code"] = exc.status_code
        if isinstance(exc, IntegrationResponseError) and exc.payload:
            metadata["payload_keys"] = sorted(exc.payload.keys())

        return {
            "message": message,
            "retryable": retryable,
            "fallback": True,
            "metadata": metadata,
        }
