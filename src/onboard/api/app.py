"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from onboard.api.models import APIResponse
from onboard.api.routes import auth as auth_routes
from onboard.api.routes import meta, workload
from onboard.api.sessions import SessionStore
from onboard.auth import Credentials, OAuthProvider
from onboard.config import AppSettings
from onboard.reconcile import IdentityResolutionError
from onboard.tracker.exceptions import TrackerError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from fastapi import Response

    from onboard.api.dependencies import ClientFactory
    from onboard.config import SetupScheme

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Frame-Options": "SAMEORIGIN",
    "X-XSS-Protection": "1; mode=block",
    "X-Content-Type-Options": "nosniff",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup: SetupScheme = app.state.setup
    logger.info("Serving onboarding for %s", setup.workflow_spec().full_name)
    yield
    # Shutdown
    app.state.auth.close()


def create_app(
    setup: SetupScheme,
    auth: OAuthProvider | None = None,
    client_factory: ClientFactory | None = None,
    settings: AppSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        setup: Loaded setup scheme (workload and OAuth credentials).
        auth: OAuth provider. Built from the setup's credentials if omitted.
        client_factory: Builds a tracker client from an access token.
            Defaults to the provider's GitHub client.
        settings: Process settings. Read from the environment if omitted.

    Returns:
        The configured application.
    """
    if settings is None:
        settings = AppSettings.from_env()
    if auth is None:
        auth = OAuthProvider(
            Credentials(setup.client_id, setup.client_secret),
            api_url=settings.api_url,
            redirect_url=settings.redirect_url,
        )

    app = FastAPI(
        title="Technical Onboarding",
        description="Sets up a GitHub onboarding board for new hires",
        version=meta.VERSION,
        lifespan=lifespan,
    )

    app.state.setup = setup
    app.state.auth = auth
    app.state.sessions = SessionStore()
    app.state.client_factory = client_factory or auth.client_for

    @app.middleware("http")
    async def security_headers(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    # Exception handlers
    @app.exception_handler(IdentityResolutionError)
    async def identity_error_handler(
        _request: Request, exc: IdentityResolutionError
    ) -> JSONResponse:
        logger.error("Identity resolution failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=APIResponse[None](data=None, error="Failed to resolve user").model_dump(),
        )

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(_request: Request, exc: TrackerError) -> JSONResponse:
        logger.error("GitHub request failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=APIResponse[None](data=None, error="GitHub request failed").model_dump(),
        )

    # Include routers
    app.include_router(meta.router)
    app.include_router(auth_routes.router)
    app.include_router(workload.router)

    return app
