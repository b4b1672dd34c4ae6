"""
HTTP Client for CLI.

Provides the async REST client used to talk to the provisioning engine.
Every call raises httpx.HTTPError on transport failure or error status;
nothing is retried here.
"""

from typing import Any

import httpx

from hanlon.core.config import get_server_base_url
from hanlon.core.exceptions import ConfigurationError
from hanlon.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class APIClient:
    """
    HTTP client for engine API communication.

    Features:
    - Base URL from config/settings/application.yaml (or HANLON_SERVER_URI)
    - Structured logging of requests/responses
    - JSON helpers that raise on error status

    Usage:
        client = APIClient(base_url="http://localhost:8026/hanlon/api/v1")
        policies = await client.get_json("/policy")
        created = await client.post_json("/policy", {"label": "test"})
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Engine REST root. If None, read from configuration.
            timeout: Request timeout in seconds. If None, read from configuration.
            transport: Optional httpx transport (used by tests).
        """
        if base_url is None:
            try:
                base_url, config_timeout = get_server_base_url()
            except (RuntimeError, FileNotFoundError, ValueError) as e:
                raise ConfigurationError(
                    "Could not determine engine URL from config/settings/application.yaml"
                ) from e
            if timeout is None:
                timeout = config_timeout

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else 30.0
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make an HTTP request to the engine.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path relative to the REST root (e.g., /policy)
            **kwargs: Additional arguments for httpx

        Returns:
            httpx.Response with a success status

        Raises:
            httpx.HTTPError: On request failure or error status
        """
        client = await self._get_client()

        log_with_source(
            logger,
            "cli",
            "debug",
            "API request",
            method=method,
            path=path,
        )

        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                "cli",
                "error",
                "API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise

        log_with_source(
            logger,
            "cli",
            "debug",
            "API response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    async def get_json(self, path: str, **kwargs: Any) -> Any:
        """GET and decode the JSON body."""
        response = await self.request("GET", path, **kwargs)
        return response.json()

    async def get_text(self, path: str, **kwargs: Any) -> str:
        """GET and return the raw body."""
        response = await self.request("GET", path, **kwargs)
        return response.text

    async def post_json(self, path: str, body: Any) -> Any:
        """POST a JSON body and decode the JSON response."""
        response = await self.request("POST", path, json=body)
        return response.json()

    async def put_json(self, path: str, body: Any) -> Any:
        """PUT a JSON body and decode the JSON response."""
        response = await self.request("PUT", path, json=body)
        return response.json()

    async def delete(self, path: str) -> str:
        """DELETE and return the response text."""
        response = await self.request("DELETE", path)
        return response.text
