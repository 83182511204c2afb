"""
Error responses for the Capital Code assistant API.

Every failure body is `{"error": str, "details"?: str}` with a Spanish,
user-facing message. Internal details are only exposed outside production.
"""

import logging
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.catalog import CONTACT_INFO
from config.settings import get_settings

logger = logging.getLogger(__name__)

CONTACT_FALLBACK = (
    f"Si lo prefieres, escríbenos a {CONTACT_INFO['email']} "
    f"o llámanos al {CONTACT_INFO['phone']}."
)

INVALID_FORMAT_MESSAGE = "Formato de mensaje inválido"
EMPTY_MESSAGE = "Mensaje vacío"
RATE_LIMITED_MESSAGE = (
    "Estamos recibiendo muchas solicitudes. Por favor, inténtalo de nuevo en unos minutos."
)
UNAVAILABLE_MESSAGE = (
    "Lo siento, nuestro asistente no está disponible en este momento. " + CONTACT_FALLBACK
)
TIMEOUT_MESSAGE = (
    "Lo siento, la respuesta está tardando demasiado. Por favor, intenta de nuevo. " + CONTACT_FALLBACK
)
INTERNAL_ERROR_MESSAGE = (
    "Lo siento, ocurrió un error al procesar tu mensaje. Por favor, intenta de nuevo. "
    + CONTACT_FALLBACK
)
CUSTOMER_NOT_FOUND = "customer_not_found"


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    """Build a failure body; details are dropped in production."""
    content = {"error": error}
    if details and not get_settings().is_production:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or unparsable bodies are client errors (400), not 422."""
    logger.info(f"Rejected malformed request to {request.url.path}")
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return error_response(status.HTTP_400_BAD_REQUEST, INVALID_FORMAT_MESSAGE, details)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unexpected errors."""
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE, str(exc))
