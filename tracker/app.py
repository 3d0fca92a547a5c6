"""
FastAPI application entry point for the tracker API.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tracker.config import INSECURE_DEFAULT_SECRET, Settings, get_settings
from tracker.dependencies import get_store, store_for
from tracker.gate import auth_gate
from tracker.routes import health_router, router
from tracker.store import (
    CollectionNotFoundError,
    DanglingReferenceError,
    DuplicateIdError,
    RecordNotFoundError,
    StoreError,
)

logger = logging.getLogger(__name__)

STORE_ERROR_STATUS = {
    CollectionNotFoundError: 404,
    RecordNotFoundError: 404,
    DuplicateIdError: 409,
    DanglingReferenceError: 422,
}


def _message(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        return _message(STORE_ERROR_STATUS.get(type(exc), 500), str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        response = _message(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _message(
            422, "Invalid request body", errors=jsonable_encoder(exc.errors())
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    if settings.jwt_secret == INSECURE_DEFAULT_SECRET:
        logger.warning("JWT_SECRET is not set; using the insecure default key")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Restore/seed the database files before serving.
        override = app.dependency_overrides.get(get_store)
        if override is not None:
            override()
        else:
            store_for(app)
        yield

    app = FastAPI(title="Tracker API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = None

    # Added first so CORS ends up outermost and answers preflights itself.
    app.middleware("http")(auth_gate(settings))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
