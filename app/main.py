"""FastAPI app factory: health, resource listing and byte-exact resource routes."""
from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response

from app.api import router as api_router
from app.api.models import HealthResponse
from app.config import Settings, get_settings
from app.domain.store import Store
from app.logging_conf import get_logger, setup_logging

# Configure logging before anything else.
setup_logging()
logger = get_logger("app")


def create_app(*, store: Store | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the ASGI app.

    A pre-built `store` is served as-is; otherwise the store is loaded from
    `settings.resource_root` when the app starts.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "store", None) is None:
            app.state.store = Store.from_directory(
                settings.resource_root, preload=settings.preload
            )
        logger.info(
            "startup",
            extra={"event": "startup", "resources": len(app.state.store)},
        )
        yield
        logger.info("shutdown", extra={"event": "shutdown"})

    app = FastAPI(
        title="Byte-exact Resource Server",
        version=settings.app_version,
        lifespan=lifespan,
        # Keep service routes under "_" so they rarely shadow stored resources.
        docs_url="/_docs",
        redoc_url=None,
        openapi_url="/_openapi.json",
    )
    app.state.store = store

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """JSON request logging with correlation id.

        - Propagates an incoming X-Request-ID or mints one
        - Logs start and end events with method/path/status/elapsed_ms
        - Echoes X-Request-ID on the response
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.info(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    # Registered before the catch-all resource route so it always wins.
    @app.get("/health", response_model=HealthResponse, summary="Liveness/readiness check")
    async def health(request: Request) -> HealthResponse:
        store = getattr(request.app.state, "store", None)
        return HealthResponse(ok=store is not None, resources=len(store) if store else 0)

    app.include_router(api_router)

    return app


# ASGI entrypoint for uvicorn: `uvicorn app.main:app --port 8000`
app = create_app()
