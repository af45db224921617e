"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from discipline_engine import __version__
from discipline_engine.api.routes import (
    corrective_actions_router,
    employees_router,
    health_router,
    signing_router,
    violation_categories_router,
)
from discipline_engine.api.schemas import ErrorResponse
from discipline_engine.database import dispose_db, init_db
from discipline_engine.errors import (
    AuthorizationError,
    ConflictError,
    DisciplineError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[DisciplineError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


def status_for(exc: DisciplineError) -> int:
    """HTTP status for a domain error, by nearest registered base class."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    init_db()
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Discipline Engine API",
        description="Corrective action record lifecycle",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(DisciplineError)
    async def discipline_exception_handler(
        request: Request, exc: DisciplineError
    ) -> JSONResponse:
        """Map domain errors to their HTTP status."""
        body = ErrorResponse(detail=exc.detail, code=exc.code, context=exc.context or None)
        return JSONResponse(status_code=status_for(exc), content=body.model_dump(mode="json"))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed request bodies like any other validation error."""
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        body = ErrorResponse(
            detail="; ".join(errors),
            code=ValidationError.code,
            context={"errors": errors},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(corrective_actions_router, prefix="/api/v1")
    app.include_router(signing_router, prefix="/api/v1")
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(violation_categories_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
