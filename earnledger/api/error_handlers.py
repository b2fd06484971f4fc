"""Error Handlers — map the EarnLedgerError hierarchy onto HTTP responses.

Invariants:
    - EarnLedgerError -> its http_status with the to_response() envelope
    - RequestValidationError -> 400 VALIDATION_ERROR with per-field details
    - Anything else -> 500 INTERNAL_ERROR, message never includes internals
    - Under /api/postback the body is text/plain (the advertiser network reads
      status + text only); everywhere else it is JSON
    - 5xx logged at ERROR, 4xx at WARNING

Design Decisions:
    - Kept out of main.py so the entry point only wires routers and lifespan
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from earnledger.core.errors import EarnLedgerError, ErrorSeverity

logger = logging.getLogger(__name__)

POSTBACK_PREFIX = "/api/postback"


def _respond(request: Request, status_code: int, body: dict) -> Response:
    if request.url.path.startswith(POSTBACK_PREFIX):
        return PlainTextResponse(body["error"]["message"], status_code=status_code)
    return JSONResponse(status_code=status_code, content=body)


def _envelope(code: str, message: str, category: str, severity: ErrorSeverity) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category,
            "severity": severity.value,
        },
    }


async def handle_earnledger_error(request: Request, exc: EarnLedgerError) -> Response:
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{type(exc).__name__}: {exc.message}",
        extra={
            "error_code": exc.code, "path": request.url.path,
            "user_id": exc.context.user_id,
        },
    )
    return _respond(request, exc.http_status, exc.to_response())


async def handle_request_validation(
    request: Request, exc: RequestValidationError,
) -> Response:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Invalid request: {[d['field'] for d in details]}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    body = _envelope(
        "VALIDATION_ERROR", "Invalid request data", "validation", ErrorSeverity.ERROR,
    )
    body["error"]["details"] = details
    return _respond(request, status.HTTP_400_BAD_REQUEST, body)


async def handle_unexpected(request: Request, exc: Exception) -> Response:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.url.path}",
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    body = _envelope(
        "INTERNAL_ERROR", "An unexpected error occurred", "internal",
        ErrorSeverity.CRITICAL,
    )
    return _respond(request, status.HTTP_500_INTERNAL_SERVER_ERROR, body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EarnLedgerError, handle_earnledger_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
