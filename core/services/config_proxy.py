"""
Config Proxy Service.

Forwards reads and writes of the console configuration document to the
upstream Plex Guard settings service. Transport failures are split into
"service unreachable" (connection refused / DNS / connect timeout) and
everything else, so the console can tell the operator to start the backend.
"""

import logging
from typing import Any

import httpx

from core.app_context import ConfigLoader

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = (
    "Backend server is not reachable. Please ensure the backend service is running."
)
CONNECTION_FAILED_MESSAGE = (
    "Unable to connect to backend service. "
    "Please check if the backend is running and accessible."
)
FETCH_FAILED_MESSAGE = "Failed to fetch configuration"
UPDATE_FAILED_MESSAGE = "Failed to update configuration"
UNPARSEABLE_ERROR_MESSAGE = "Something went wrong check the server logs for more details"


# =============================================================================
# Exceptions
# =============================================================================

class ConfigProxyError(Exception):
    """Base exception for config proxy failures."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class BackendUnreachableError(ConfigProxyError):
    """Raised when the upstream service refuses or cannot accept a connection."""

    def __init__(self, message: str = UNREACHABLE_MESSAGE) -> None:
        super().__init__(message, status_code=503)


class BackendResponseError(ConfigProxyError):
    """Raised when the upstream service answers with a non-2xx status."""


# =============================================================================
# Proxy Client
# =============================================================================

class ConfigProxy:
    """
    Thin forwarder for ``GET``/``PUT {backend}/config``.

    The httpx client is injected (app.state.http_client in the web app) and
    is not closed by this class.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        config_loader: ConfigLoader | None = None,
    ) -> None:
        if config_loader is None:
            config_loader = ConfigLoader()
            config_loader.load()

        self._client = http_client
        self._base_url = str(config_loader.get("backend.url", "http://localhost:3001")).rstrip("/")
        self._timeout = float(config_loader.get("backend.timeout", 10.0))

    @property
    def config_url(self) -> str:
        return f"{self._base_url}/config"

    async def _send(self, method: str, fallback_message: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(
                method, self.config_url, timeout=self._timeout, **kwargs
            )
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.error(f"Config backend unreachable at {self._base_url}: {e}")
            raise BackendUnreachableError() from e
        except httpx.TransportError as e:
            logger.error(f"Config backend transport error: {e}")
            raise ConfigProxyError(CONNECTION_FAILED_MESSAGE) from e
        except httpx.HTTPError as e:
            logger.error(f"Config backend request failed: {e}")
            raise ConfigProxyError(fallback_message) from e

    async def fetch_config(self) -> Any:
        """
        Fetch the configuration document.

        Raises:
            BackendUnreachableError: Upstream not reachable.
            ConfigProxyError: Any other failure, including non-2xx responses.
        """
        response = await self._send("GET", FETCH_FAILED_MESSAGE)

        if response.is_error:
            logger.error(f"Config backend responded with {response.status_code}")
            raise ConfigProxyError(FETCH_FAILED_MESSAGE)

        try:
            return response.json()
        except ValueError as e:
            logger.error("Config backend returned invalid JSON")
            raise ConfigProxyError(FETCH_FAILED_MESSAGE) from e

    async def update_config(self, document: Any) -> Any:
        """
        Replace the configuration document.

        Raises:
            BackendUnreachableError: Upstream not reachable.
            BackendResponseError: Upstream rejected the update; carries its status
                and its ``message``/``error`` field when present.
            ConfigProxyError: Any other failure.
        """
        response = await self._send("PUT", UPDATE_FAILED_MESSAGE, json=document)

        if response.is_error:
            try:
                error_data = response.json()
            except ValueError:
                raise BackendResponseError(UNPARSEABLE_ERROR_MESSAGE, response.status_code)

            message = UPDATE_FAILED_MESSAGE
            if isinstance(error_data, dict):
                message = error_data.get("message") or error_data.get("error") or UPDATE_FAILED_MESSAGE
            if isinstance(message, list):
                # class-validator style: one message per failed constraint
                message = "; ".join(str(m) for m in message)
            logger.warning(f"Config update rejected by backend ({response.status_code})")
            raise BackendResponseError(str(message), response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ConfigProxyError(UPDATE_FAILED_MESSAGE) from e
