"""
Main API module for the URL shortener.

Responsibilities:
    - POST /shorten        : allocate a unique short code for a URL
    - GET  /s/{code}       : redirect to the original URL and record a hit
    - GET  /stats/{code}   : hit count and latest hit for a code
    - GET  /health         : liveness check

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - In-memory storage by default; PostgreSQL via STORAGE_BACKEND=postgres.
    - UrlManager validates and drives the CodeAllocator; Analytics resolves
      codes and aggregates hits.
    - Client errors are translated in the routes; every other
      UrlShortenerError is logged and answered with 500 by one handler.

Run:
    uvicorn main:app --host 0.0.0.0 --port 3000
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from url_shortener.analytics.analytics import Analytics
from url_shortener.config import Settings
from url_shortener.exceptions import InvalidUrlError, UrlNotFoundError, UrlShortenerError
from url_shortener.manager.url_manager import UrlManager
from url_shortener.storage.base import BaseStorage
from url_shortener.storage.storage_factory import get_storage


class ShortenRequest(BaseModel):
    """Request payload for creating a short URL."""
    url: str


class ShortenResponse(BaseModel):
    url: str
    short_url: str
    code: str


class StatsResponse(BaseModel):
    url: str
    short_url: str
    hits: int
    last_hit: Optional[datetime] = None


def create_app(settings: Optional[Settings] = None, storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        settings: Configuration snapshot; read from the environment when omitted.
        storage: Storage backend; selected from `settings` when omitted.

    Returns:
        FastAPI: A configured application with its own storage and services.

    Raises:
        ConfigurationError: Unknown digest or unusable code length.
        ValueError: Unknown storage backend or postgres without DATABASE_URL.
    """
    settings = settings or Settings()

    # basic console logging
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=settings.LOG_LEVEL,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    log = logging.getLogger("url_shortener")

    # Misconfiguration fails here, before any request is served.
    strategy = settings.strategy()
    if storage is None:
        storage = get_storage(settings.STORAGE_BACKEND, dsn=settings.DATABASE_URL)
    url_manager = UrlManager(storage, strategy, host=settings.HOST, max_attempts=settings.max_attempts)
    analytics = Analytics(storage)
    log.info(
        "URL shortener using %s storage, %r codes, host %s",
        settings.STORAGE_BACKEND, strategy, settings.HOST,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        storage.init_schema()
        yield
        # Shutdown
        storage.close()

    app = FastAPI(
        title="URL Shortener",
        description="Deterministic, collision-avoiding URL shortener with hit statistics",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        route = request.scope.get("route")
        log.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            getattr(route, "path", request.url.path),
            response.status_code,
            (time.perf_counter() - start) * 1000.0,
        )
        return response

    @app.exception_handler(UrlShortenerError)
    async def internal_error(request: Request, exc: UrlShortenerError) -> JSONResponse:
        log.error("%s %s failed [%s]: %s", request.method, request.url.path, exc.error_code, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/shorten", response_model=ShortenResponse)
    def post_shorten(req: ShortenRequest) -> ShortenResponse:
        """
        Return a shortened URL that redirects to the provided url.

        Raises:
            HTTPException: 400 if the URL is malformed.
        """
        try:
            record = url_manager.shorten(req.url)
        except InvalidUrlError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return ShortenResponse(url=record.url, short_url=record.short_url, code=record.code)

    @app.get("/s/{code}")
    def get_url(code: str) -> Response:
        """Redirect (303) to the original URL for `code`, recording a hit."""
        try:
            record = analytics.resolve(code)
        except UrlNotFoundError:
            raise HTTPException(status_code=404, detail="Not found")
        return RedirectResponse(url=record.url, status_code=303)

    @app.get("/stats/{code}", response_model=StatsResponse)
    def get_stats(code: str) -> StatsResponse:
        """Number of hits and the most recent hit for `code`."""
        try:
            stats = analytics.stats(code)
        except UrlNotFoundError:
            raise HTTPException(status_code=404, detail="Not found")
        return StatsResponse(url=stats.url, short_url=stats.short_url, hits=stats.hits, last_hit=stats.last_hit)

    return app


# `uvicorn main:app` and `from main import app` keep working.
app = create_app()
