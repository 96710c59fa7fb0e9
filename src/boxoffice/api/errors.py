"""Exception handlers — every domain error becomes {"error": message}.

Learn: Routes and services raise BoxOfficeError subclasses and never build
error responses by hand. A database error that escapes a read path (no
atomic() around it) is reported the same way as a failed write.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from boxoffice.errors import BoxOfficeError, StorageError

logger = structlog.get_logger()


async def handle_domain_error(request: Request, exc: BoxOfficeError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error("api.storage_error", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def handle_storage_failure(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("api.storage_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=StorageError.status_code,
        content={"error": "Storage operation failed"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BoxOfficeError, handle_domain_error)
    app.add_exception_handler(SQLAlchemyError, handle_storage_failure)
