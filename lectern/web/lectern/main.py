"""Main entry point for the Lectern web application."""

import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from lectern.core import BootConfiguration, di, LecternContainer
from lectern.core.config.web import LecternWebSettings
from lectern.workflow import Conflict, Forbidden, NotFound, StorageError, ValidationError, WorkflowError

from .route import router
from .view import Failure

logger = logging.getLogger(__name__)

StatusFor: dict[type[WorkflowError], int] = {
    NotFound: status.HTTP_404_NOT_FOUND,
    Forbidden: status.HTTP_403_FORBIDDEN,
    Conflict: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _failure(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(Failure(message=message).model_dump(), status_code=status_code, headers=headers)


async def workflow_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, WorkflowError)
    status_code = next(
        (code for kind, code in StatusFor.items() if isinstance(exc, kind)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    logger.info(
        "workflow error",
        extra={"path": request.url.path, "error": type(exc).__name__, "status_code": status_code},
    )
    return _failure(status_code, exc.message)


async def http_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HTTPException)
    return _failure(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _failure(status.HTTP_422_UNPROCESSABLE_ENTITY, message)


@di.inject
def _create_app(
    config: LecternWebSettings = di.Provide["config.web.lectern", di.as_(LecternWebSettings)],
) -> FastAPI:
    app = FastAPI(
        title="Lectern",
        description="Academic workflow engine",
        version="0.1.0",
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(WorkflowError, workflow_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv("__Lectern_BOOT")
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = LecternContainer()
        LecternContainer.boot(ct, **dict(boot_cf))
        ct.wire(modules=["lectern.web.lectern.main", "lectern.auth.middleware"])
        return _create_app(config=LecternWebSettings(**ct.config.web.lectern()))
    return _create_app()
