"""API module - REST endpoints."""
from api.admin_auth import router as admin_auth_router, get_current_session, CurrentSession
from api.config_proxy import router as config_proxy_router

__all__ = [
    "admin_auth_router",
    "get_current_session",
    "CurrentSession",
    "config_proxy_router",
]
