"""FastAPI application factory."""

import asyncio
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobboard import __version__
from jobboard.auth import AuthenticationError, TokenService
from jobboard.config import AppConfig, EnvironmentConfig
from jobboard.feeds import FeedImporter, FeedScheduler
from jobboard.logging import get_logger, log_context
from jobboard.persistence import close_database, init_database
from jobboard.services.container import ServiceContainer, build_services
from jobboard.services.errors import DomainError

from .routes import ROUTERS

logger = get_logger(__name__, component="api")


def create_app(
    app_config: AppConfig,
    env_config: EnvironmentConfig,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Build the HTTP + WebSocket application.

    The database is opened, the broadcaster bound to the serving event loop
    and (when enabled) the feed scheduler started inside the lifespan, so
    constructing the app has no side effects.

    Args:
        app_config: Validated application configuration
        env_config: Secrets and deployment values
        services: Prebuilt service graph (a fresh one is built when omitted)
    """
    services = services or build_services()
    token_service = TokenService(
        env_config.jwt_secret,
        algorithm=app_config.auth.algorithm,
        ttl_seconds=app_config.auth.token_ttl_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_database(env_config.database_url)
        services.broadcaster.bind_loop(asyncio.get_running_loop())

        scheduler = None
        if app_config.feed.enabled:
            importer = FeedImporter(
                app_config.feed.source,
                broadcaster=services.broadcaster,
                timeout=app_config.feed.request_timeout,
            )
            scheduler = FeedScheduler(importer.run_once, app_config.feed.interval_seconds)
            scheduler.start()

        logger.info(
            "Job board API started",
            extra={"event": "service.started", "feed_enabled": app_config.feed.enabled},
        )
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.shutdown(wait=False)
            await services.tasks.shutdown()
            services.broadcaster.unbind_loop()
            close_database()
            logger.info("Job board API stopped", extra={"event": "service.stopping"})

    app = FastAPI(title="Job Board", version=__version__, lifespan=lifespan)
    app.state.services = services
    app.state.token_service = token_service
    app.state.app_config = app_config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        with log_context(request_id=request_id, method=request.method, path=request.url.path):
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    f"Unhandled error: {e}",
                    extra={
                        "event": "http.request.failed",
                        "status_code": 500,
                        "error_type": type(e).__name__,
                    },
                    exc_info=True,
                )
                return JSONResponse(
                    status_code=500,
                    content={"detail": "Internal Server Error", "error": "internal_error", "requestId": request_id},
                    headers={"x-request-id": request_id},
                )

            duration_ms = (time.perf_counter() - started) * 1000
            response.headers["x-request-id"] = request_id
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={
                    "event": "http.request.completed",
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            return response

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        logger.info(
            f"Request rejected: {exc.message}",
            extra={"event": "http.request.rejected", "error": exc.kind, "status_code": exc.status_code},
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "error": exc.kind})

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content={"detail": exc.message, "error": "unauthorized"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok", "connections": len(services.broadcaster.registry.all_connections())}

    for router in ROUTERS:
        app.include_router(router)

    return app
