# miroku/services/api/errors.py
from __future__ import annotations

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from miroku.common.logging import get_logger
from miroku.domain.errors import (
    Conflict,
    InvalidArgument,
    MirokuError,
    NotFound,
    PartialFailure,
    UpstreamUnavailable,
)

logger = get_logger(__name__)

STATUS_BY_ERROR = {
    NotFound: HTTPStatus.NOT_FOUND,
    Conflict: HTTPStatus.CONFLICT,
    InvalidArgument: HTTPStatus.BAD_REQUEST,
    UpstreamUnavailable: HTTPStatus.BAD_GATEWAY,
    PartialFailure: HTTPStatus.MULTI_STATUS,
}


def status_for(exc: MirokuError) -> HTTPStatus:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return HTTPStatus.INTERNAL_SERVER_ERROR


def error_response(exc: MirokuError, **extra) -> JSONResponse:
    status = status_for(exc)
    body = {"detail": exc.message, **extra}
    if isinstance(exc, PartialFailure):
        body["errors"] = [f"{subject}: {message}" for subject, message in exc.errors]
    return JSONResponse(status_code=int(status), content=body)


async def _handle_miroku_error(request: Request, exc: MirokuError) -> JSONResponse:
    if isinstance(exc, UpstreamUnavailable):
        logger.warning("%s %s: catalog unavailable: %s", request.method, request.url.path, exc.message)
    return error_response(exc)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MirokuError, _handle_miroku_error)
