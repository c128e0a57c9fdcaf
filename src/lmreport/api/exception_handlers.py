"""Exception handlers translating errors into the failure envelope."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from lmreport.api.schemas import APIResponse
from lmreport.exceptions import LicenseReportError


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse.fail(message).model_dump(mode="json"),
    )


async def license_report_exception_handler(
    request: Request, exc: LicenseReportError
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return _fail(exc.status_code, exc.message)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    message = "Invalid request: " + "; ".join(problems)
    logger.warning(f"{request.method} {request.url.path}: {message}")
    return _fail(400, message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return _fail(exc.status_code, str(exc.detail))


async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    logger.exception(f"Unhandled exception: {exc}")
    return _fail(500, "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LicenseReportError, license_report_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
