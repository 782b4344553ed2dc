from __future__ import annotations

import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from psychometric.infrastructure.config import get_settings
from psychometric.infrastructure.logging import LogContext, get_logger
from psychometric.web.dependencies import build_assessment_engine
from psychometric.web.routes import api

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the shared assessment engine before the first request is served."""
    settings = get_settings()
    engine, db_engine = build_assessment_engine(settings.database, settings.assessment)
    app.state.assessment_engine = engine
    try:
        yield
    finally:
        app.state.assessment_engine = None
        db_engine.dispose()
        logger.info("Database engine disposed")


def create_application() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app.title,
        version=settings.app.version,
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Tag every log record of a request with its id and log the response time."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        start = time.perf_counter()
        with LogContext(request_id=request_id):
            response = await call_next(request)
            logger.info(
                "%s %s -> %s (%.0fms)",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - start) * 1000,
            )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.include_router(api.router)
    logger.info("Created %s application (%s)", settings.app.title, settings.app.environment)
    return app


app = create_application()
