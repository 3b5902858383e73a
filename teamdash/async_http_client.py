"""
Shared async HTTP transport for the source clients.

One ``AsyncSecureHTTPClient`` is owned by the application context, opened at
startup and closed at shutdown, so Jira, GitLab, Firebase, SonarQube, Snyk
and Slack calls share a single httpx connection pool. TLS verification is
always on.

Usage:
    async with AsyncSecureHTTPClient(timeout=10) as http:
        response = await http.get("https://gitlab.com/api/v4/projects/123")
"""

import httpx

from teamdash import __version__

USER_AGENT = f"teamdash/{__version__}"


class AsyncSecureHTTPClient:
    """
    Lazily-opened wrapper around ``httpx.AsyncClient``.

    Args:
        max_connections: Pool size across every source
        max_keepalive_connections: Idle connections kept open
        timeout: Per-request timeout in seconds (connect, read, write, pool)
        http2: Negotiate HTTP/2 (needs the ``h2`` package)
        transport: Replacement transport, e.g. ``httpx.MockTransport`` in tests
    """

    DEFAULT_TIMEOUT = 30
    DEFAULT_MAX_CONNECTIONS = 50
    DEFAULT_MAX_KEEPALIVE = 10

    def __init__(
        self,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        max_keepalive_connections: int = DEFAULT_MAX_KEEPALIVE,
        timeout: float = DEFAULT_TIMEOUT,
        http2: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.limits = httpx.Limits(max_connections=max_connections, max_keepalive_connections=max_keepalive_connections)
        self.timeout = httpx.Timeout(timeout)
        self.http2 = http2
        self.transport = transport
        self.client: httpx.AsyncClient | None = None

    @property
    def is_open(self) -> bool:
        return self.client is not None

    def open(self) -> "AsyncSecureHTTPClient":
        if self.client is None:
            self.client = httpx.AsyncClient(
                verify=True,
                limits=self.limits,
                timeout=self.timeout,
                http2=self.http2,
                transport=self.transport,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            )
        return self

    async def aclose(self) -> None:
        client, self.client = self.client, None
        if client is not None:
            await client.aclose()

    async def __aenter__(self) -> "AsyncSecureHTTPClient":
        return self.open()

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request on the shared pool; ``kwargs`` go straight to httpx."""
        if self.client is None:
            raise RuntimeError("HTTP client is not open; call open() or use it as an async context manager")
        return await self.client.request(method, url, **kwargs)

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)
