"""Main FastAPI application entry point."""

import asyncio
import contextlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import get_invitation_sweeper
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


async def invitation_sweep_loop(interval_seconds: int) -> None:
    """Periodically expire stale invitations.

    Expiry is enforced at acceptance time regardless, so a failed or
    skipped sweep only delays the stored status change.
    """
    sweeper = get_invitation_sweeper()
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await sweeper.sweep_expired()
        except Exception:
            logger.exception("invitation_sweep_failed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    sweep_task: asyncio.Task[None] | None = None
    if settings.invitation_sweep_enabled:
        sweep_task = asyncio.create_task(
            invitation_sweep_loop(settings.invitation_sweep_interval_seconds)
        )
    yield
    if sweep_task:
        sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweep_task


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Invitation acceptance\n\n"
            "Turns a scanned invitation code into product access for an account.\n\n"
            "### Flow\n"
            "- **Validate**: look up a code without changing it\n"
            "- **Accept**: with a session, grant to that account; without one, "
            "an account is created automatically\n"
            "- **Complete**: finish an acceptance that waited for sign-in or email "
            "confirmation\n\n"
            "### Authentication\n"
            "Send the Supabase access token when you have one:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST endpoints: 10 requests/minute"
        ),
        version="1.0.0",
        debug=settings.debug,
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "invitations",
                "description": "Invitation validation and acceptance",
            },
            {
                "name": "entitlements",
                "description": "Products granted to the caller",
            },
            {
                "name": "admin",
                "description": "Operational endpoints (X-Admin-Key)",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Outermost: rewrite the client address from X-Forwarded-For sent by trusted proxies
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.forwarded_allow_ips_list)

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
