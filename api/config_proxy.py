"""
Config Proxy API.

``GET``/``PUT /pg/config`` forward the configuration document to the
upstream settings service unchanged. Failures come back as
``{"error": <message>}`` with 503 when the upstream is unreachable.
"""

import logging
from typing import Annotated, Any

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from core.http_client import get_http_client_from_app
from core.services.config_proxy import (
    UPDATE_FAILED_MESSAGE,
    ConfigProxy,
    ConfigProxyError,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/pg/config", tags=["Config Proxy"])


def get_http_client(request: Request) -> httpx.AsyncClient:
    """FastAPI dependency: shared httpx client from app.state."""
    return get_http_client_from_app(request.app)


def get_config_proxy(
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> ConfigProxy:
    """FastAPI dependency: ConfigProxy bound to the shared client."""
    return ConfigProxy(client)


ConfigProxyDep = Annotated[ConfigProxy, Depends(get_config_proxy)]


def _error_response(error: ConfigProxyError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


@router.get("")
async def get_config(proxy: ConfigProxyDep) -> Any:
    """Fetch the configuration document from the upstream service."""
    try:
        data = await proxy.fetch_config()
    except ConfigProxyError as e:
        return _error_response(e)
    return JSONResponse(content=data)


@router.put("")
async def put_config(request: Request, proxy: ConfigProxyDep) -> Any:
    """Forward a configuration update to the upstream service."""
    try:
        body = await request.json()
    except ValueError:
        logger.warning("Config update with invalid JSON body")
        return JSONResponse(status_code=500, content={"error": UPDATE_FAILED_MESSAGE})

    try:
        data = await proxy.update_config(body)
    except ConfigProxyError as e:
        return _error_response(e)
    return JSONResponse(content=data)
