"""HTTP request operation."""

import logging
import ssl
from typing import Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)


class HttpOperation:
    """
    A single HTTP request, repeated for every dispatch.

    Use as an async context manager; the entered object is the operation.
    The outcome of a call is the response status code.
    """

    def __init__(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        insecure_ssl: bool = False,
        fail_on_status: bool = True,
        connection_limit: int = 100,
    ):
        """
        Initialize the operation.

        Args:
            url: Request URL
            method: HTTP method
            headers: Extra request headers
            insecure_ssl: Disable TLS certificate verification
            fail_on_status: Treat 4xx/5xx responses as failures
            connection_limit: Maximum pooled connections
        """
        self.url = url
        self.method = method.upper()
        self.headers = dict(headers or {})
        self.insecure_ssl = insecure_ssl
        self.fail_on_status = fail_on_status
        self.connection_limit = max(connection_limit, 1)
        self._ssl_ctx = self._create_ssl_context()
        self._session: Optional[aiohttp.ClientSession] = None

    def _create_ssl_context(self) -> Optional[ssl.SSLContext]:
        """Create SSL context if insecure mode is enabled."""
        if self.insecure_ssl:
            ctx = ssl.create_default_context()
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
            return ctx
        return None

    async def __aenter__(self) -> "HttpOperation":
        connector = aiohttp.TCPConnector(limit=self.connection_limit)
        self._session = aiohttp.ClientSession(connector=connector)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __call__(self) -> int:
        if self._session is None:
            raise RuntimeError("HttpOperation must be entered before it is called")
        async with self._session.request(
            self.method, self.url, headers=self.headers, ssl=self._ssl_ctx or True
        ) as response:
            await response.read()
            if self.fail_on_status:
                response.raise_for_status()
            return response.status
