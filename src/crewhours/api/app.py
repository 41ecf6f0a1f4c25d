"""FastAPI application factory."""
from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel
from crewhours import __version__
from crewhours.logging import logger
from crewhours.domain.exceptions import (
    ConflictError, CrewHoursError, EmptyExportError, InvalidTransitionError, NotFoundError,
    PersistenceError, ValidationError,
)

_STATUS_CODES: list[tuple[type[CrewHoursError], int]] = [
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidTransitionError, 409),
    (ValidationError, 422),
    (EmptyExportError, 422),
    (PersistenceError, 500),
]


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from crewhours.infra.db.engine import engine  # registers pragmas and table mappers
        SQLModel.metadata.create_all(engine)
        logger.info("API started (v%s)", __version__)
        yield

    app = FastAPI(
        title="Crew Hours Reconciliation API",
        version=__version__,
        lifespan=lifespan,
    )

    # Import routers inside create_app() to avoid circular imports at module load time
    from crewhours.api.routers.batches import router as batches_router
    from crewhours.api.routers.exports import router as exports_router
    from crewhours.api.routers.matches import router as matches_router
    from crewhours.api.routers.aggregation import router as aggregation_router
    from crewhours.api.routers.performance import router as performance_router
    from crewhours.api.routers.approval import router as approval_router

    app.include_router(batches_router)
    app.include_router(exports_router)
    app.include_router(matches_router)
    app.include_router(aggregation_router)
    app.include_router(performance_router)
    app.include_router(approval_router)

    def _register(exc_type: type[CrewHoursError], status_code: int) -> None:
        @app.exception_handler(exc_type)
        def _handler(request: Request, exc: CrewHoursError) -> JSONResponse:
            return JSONResponse(status_code=status_code, content={"status": "failed", "detail": exc.message})

    for exc_type, status_code in _STATUS_CODES:
        _register(exc_type, status_code)

    @app.get("/health", tags=["ops"])
    def health() -> dict:
        return {"status": "ok"}

    return app
