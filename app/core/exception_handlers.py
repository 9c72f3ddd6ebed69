import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.core.exceptions import (
    DuplicateRecord,
    RecordNotFound,
    StoreFailure,
    TodoAppError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    RecordNotFound: status.HTTP_404_NOT_FOUND,
    DuplicateRecord: status.HTTP_409_CONFLICT,
    StoreFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def todo_app_error_handler(request: Request, exc: TodoAppError) -> JSONResponse:
    status_code = _STATUS_BY_ERROR.get(
        type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TodoAppError, todo_app_error_handler)
