"""
Upstream HTTP Client Lifecycle.

One httpx.AsyncClient is shared by the config proxy for calls to the
Plex Guard settings service. It is opened in the FastAPI lifespan, kept in
``app.state.http_client`` and closed on shutdown.
"""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator, Optional

import httpx

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


class HttpClientManager:
    """Owns the upstream httpx.AsyncClient between start() and stop()."""

    def __init__(
        self,
        timeout: float = 10.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 5,
        keepalive_expiry: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            timeout: Default per-request timeout in seconds.
            max_connections: Connection pool size.
            max_keepalive_connections: Idle connections kept open.
            keepalive_expiry: Seconds before an idle connection is dropped.
            transport: Custom transport; tests pass httpx.MockTransport.
        """
        self._timeout = timeout
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
            keepalive_expiry=keepalive_expiry,
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> httpx.AsyncClient:
        """
        Open the client.

        Raises:
            RuntimeError: If called twice without stop().
        """
        if self._client is not None:
            raise RuntimeError("HTTP client already started")

        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            limits=self._limits,
            transport=self._transport,
        )
        logger.info(f"Upstream HTTP client started (timeout={self._timeout}s)")
        return self._client

    async def stop(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Upstream HTTP client closed")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("HTTP client not started")
        return self._client

    @property
    def is_running(self) -> bool:
        return self._client is not None and not self._client.is_closed


@asynccontextmanager
async def create_http_client_context(
    app: "FastAPI",
    timeout: float = 10.0,
    max_connections: int = 20,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncGenerator[HttpClientManager, None]:
    """Lifespan helper: publish the client on app.state while the app runs."""
    manager = HttpClientManager(
        timeout=timeout, max_connections=max_connections, transport=transport
    )

    try:
        app.state.http_client = await manager.start()
        yield manager
    finally:
        await manager.stop()
        if hasattr(app.state, "http_client"):
            delattr(app.state, "http_client")


def get_http_client_from_app(app: "FastAPI") -> httpx.AsyncClient:
    """
    Return the shared client from app.state.

    Raises:
        RuntimeError: Outside the application lifespan.
    """
    client = getattr(app.state, "http_client", None)
    if client is None:
        raise RuntimeError("HTTP client not available outside the application lifespan")
    return client
