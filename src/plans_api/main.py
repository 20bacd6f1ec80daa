from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import configure_logging
from .repositories import Repository, StoreError, open_repository
from .routers import plans as plans_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "plans",
        "description": "CRUD operations for plans and the todos and notes nested in them.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Open the document store at startup and close it at shutdown.

    A store injected through create_app() is used as-is and left open. If the
    configured store cannot be opened the error propagates and the server
    refuses to start.
    """
    settings: Settings = app.state.settings
    opened = False
    if getattr(app.state, "repository", None) is None:
        try:
            app.state.repository = open_repository(settings)
        except StoreError:
            logger.exception("Document store connection failed")
            raise
        opened = True
    logger.info("Plans backend started (store: %s)", settings.store_backend)

    yield

    if opened:
        app.state.repository.close()
        app.state.repository = None
    logger.info("Plans backend stopped")


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use; read from the environment when omitted.
        repository: Store handle to serve from. When omitted the store named in
            settings is opened during application startup.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Plans Backend",
        description="Backend API service for plans holding todos and notes.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """
        Render every HTTP error as {"message": <detail>}.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request bodies that cannot be parsed.

        Response format:
            {
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.get("/health", summary="Health Check", tags=["health"])
    def health_check():
        """
        Liveness endpoint.

        Returns:
            {"status": "ok"}
        """
        return {"status": "ok"}

    app.include_router(plans_router.router)
    return app


app = create_app()
