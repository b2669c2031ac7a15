"""
Exception handlers rendering every rejection with the same body shape:

    {"detail": str, "error": code, "field": optional str}
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.config.logging import rest_api_logger as logger
from shared.utils.exceptions import AppException


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body/query schema errors (422), reduced to the first failing field."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc) or None
    logger.warning("Request validation failed", path=request.url.path, field=field)
    return JSONResponse(
        status_code=422,
        content={
            "detail": first.get("msg", "Invalid request"),
            "error": "request_validation_error",
            "field": field,
            "errors": [
                {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg")} for e in errors
            ],
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
