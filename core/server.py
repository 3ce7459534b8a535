"""
FastAPI Application Factory.

Creates and configures the FastAPI application with middleware and the
core API routers.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.app_context import AppContext

_logger = logging.getLogger(__name__)

DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def _allowed_origins(context: AppContext) -> list[str]:
    """CORS origins: BASE_URL, plus the Next.js dev server in debug mode."""
    config = context.config
    base_url = config.get("server.base_url", "")
    is_debug = config.get("app.debug", False)

    allowed_origins: list[str] = []

    if base_url:
        allowed_origins.append(base_url)

    if is_debug:
        allowed_origins.extend(DEV_ORIGINS)

    if not allowed_origins:
        # Never fall back to ["*"]: cookies are sent with credentials
        _logger.warning(
            "BASE_URL not configured and not in debug mode. "
            "CORS will reject all cross-origin requests."
        )

    return allowed_origins


def create_base_app(
    context: AppContext,
    title: str = "Plex Guard API",
    description: str = "Admin console backend",
    version: str = "1.0.0",
) -> FastAPI:
    """
    Create and configure the base FastAPI application.

    Args:
        context: Application context for logging and configuration.
        title: API title for OpenAPI documentation.
        description: API description for OpenAPI documentation.
        version: API version string.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(title=title, description=description, version=version)

    # Store references in app state for access in route handlers
    app.state.context = context

    allowed_origins = _allowed_origins(context)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    _logger.info(f"CORS configured with {len(allowed_origins)} origin(s): {allowed_origins}")

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    _register_core_routes(app)

    return app


def _register_core_routes(app: FastAPI) -> None:
    """Register core API routes (auth, config proxy, health check)."""
    from api.admin_auth import router as admin_auth_router
    from api.config_proxy import router as config_proxy_router

    app.include_router(admin_auth_router)
    app.include_router(config_proxy_router)

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """Health check endpoint."""
        context: AppContext = request.app.state.context
        return {"status": "ok", "service": context.config.get("server.app_name", "Plex Guard")}
