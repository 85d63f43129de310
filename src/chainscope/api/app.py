"""FastAPI app factory for the chainscope explorer API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chainscope.api.entities import router as entities_router
from chainscope.api.events import router as events_router
from chainscope.store.errors import (
    EntityNotFound,
    IdentityCollisionViolatesInvariant,
    InvalidNaturalKey,
    InvalidPaginationInput,
    StoreUnavailable,
    UnknownEnumValue,
)

_ERROR_STATUS = (
    (UnknownEnumValue, 422),
    (InvalidNaturalKey, 422),
    (InvalidPaginationInput, 422),
    (EntityNotFound, 404),
    (StoreUnavailable, 503),
    (IdentityCollisionViolatesInvariant, 500),
)


def _error_handler(status_code: int):
    async def _handle(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "error": type(exc).__name__},
        )

    return _handle


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance.
    """
    app = FastAPI(title="chainscope explorer API", version="0.1")
    app.include_router(entities_router)
    app.include_router(events_router)
    for error_type, status_code in _ERROR_STATUS:
        app.add_exception_handler(error_type, _error_handler(status_code))

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok"}

    return app


# For uvicorn, expose `app` at module level
app = create_app()
