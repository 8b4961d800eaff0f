"""Global exception handlers — map service exceptions to HTTP status codes.

The services raise ``ValueError`` for business-rule violations (record not
found, duplicate MRN, illegal status change).  Rather than catching these
in every route, global handlers inspect the message and pick the status.
Template validation failures and store outages get dedicated handlers.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from awv_db.gateway import GatewayError
from awv_templates.editor import TemplateValidationError

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    # Duplicate MRN
    ("already exists", 409),
    # Illegal visit status change
    ("cannot transition", 409),
    # Responses sent to a completed / cancelled visit
    ("immutable", 409),
    ("not found", 404),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (ids, MRNs, statuses) stay in the server log; the
# client receives only a generic description.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Request conflicts with the current state of the resource",
    400: "Invalid request",
}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map service ``ValueError`` to a contextual HTTP error response.

    Falls back to 400 for unrecognised messages.  The raw exception message
    is logged server-side but never sent to the client.
    """
    msg = str(exc)
    status = 400  # default
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def template_validation_error_handler(
    request: Request, exc: TemplateValidationError
) -> JSONResponse:
    """Return 422 with the offending field so the editor can focus it."""
    logger.info("Template rejected at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "location": exc.location},
    )


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown reference entry) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Store unavailable or write rejected — no retry, generic 503."""
    logger.error("GatewayError at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Storage temporarily unavailable"},
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
