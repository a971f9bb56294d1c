"""
FastAPI application: events API, health probes and JSON error responses.

Every error leaves as ``{"detail": "..."}``: request validation 422, values
the query builder refuses to bind 400, anything unhandled 500.
"""

import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from fleetquery.api.main import api_router
from fleetquery.core.config import settings
from fleetquery.engines.sql import BindError

_log = logging.getLogger(__name__)


def _route_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        environment=settings.ENVIRONMENT,
        enable_tracing=True,
    )

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    generate_unique_id_function=_route_id,
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """One "param: message" entry per invalid input, joined with "; "."""
    problems = []
    for err in exc.errors():
        where = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query"))
        message = err.get("msg", "Invalid value")
        problems.append(f"{where}: {message}" if where else message)
    return _error(422, "; ".join(problems))


@app.exception_handler(BindError)
async def bind_error_handler(request: Request, exc: BindError) -> JSONResponse:
    _log.warning("Rejected parameter on %s %s: %s", request.method, request.url.path, exc)
    return _error(400, str(exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _log.exception("Unhandled error on %s %s", request.method, request.url.path)
    if settings.ENVIRONMENT == "local":
        return _error(500, f"Internal server error: {exc}")
    return _error(500, "Internal server error")


app.include_router(api_router, prefix=settings.API_V1_STR)
