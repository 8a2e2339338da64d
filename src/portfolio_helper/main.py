"""FastAPI application entry point."""

import math
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from portfolio_helper.api.routers import (
    margin_rates_router,
    portfolios_router,
    quotes_router,
    stream_router,
)
from portfolio_helper.app_context import AppContext
from portfolio_helper.config.logging_config import setup_logging
from portfolio_helper.config.settings import get_settings
from portfolio_helper.core.exceptions import AppError, NotFoundError, RateLimitedError, ValidationError


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the FastAPI app.

    ``context`` lets callers supply a pre-built AppContext (tests inject
    fake providers); otherwise one is created from the settings at startup.
    Either way the lifespan starts it and closes it on shutdown.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        ctx = context or AppContext(settings)
        ctx.start()
        app.state.context = ctx
        try:
            yield
        finally:
            ctx.close()

    app = FastAPI(
        title=settings.app_name,
        description="Live portfolio valuation from local holdings and cash files",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(portfolios_router)
    app.include_router(quotes_router)
    app.include_router(margin_rates_router)
    app.include_router(stream_router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Global handler for application errors."""
        headers = None
        if isinstance(exc, NotFoundError):
            status_code = 404
        elif isinstance(exc, RateLimitedError):
            status_code = 429
            if exc.retry_after_seconds is not None:
                headers = {"Retry-After": str(math.ceil(exc.retry_after_seconds))}
        elif isinstance(exc, ValidationError):
            status_code = 400
        else:
            status_code = 500
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "message": exc.message},
            headers=headers,
        )

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
