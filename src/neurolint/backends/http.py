"""HTTP backend for the NeuroLint transform service.

POSTs ``{code, filePath, layers}`` to ``{api_url}/api/transform`` with a
bearer token and parses ``{transformed, layers}``. Every failure is raised
as TransformError: non-2xx responses carry ``status_code``, transport
failures carry a ``code`` such as ECONNREFUSED or ETIMEDOUT.
"""

from __future__ import annotations

import time
from types import TracebackType

import httpx
from pydantic import ValidationError

from neurolint import __version__
from neurolint.backends.base import TransformBackend, TransformRequest, TransformResponse
from neurolint.core.constants import DEFAULT_API_URL, TRANSFORM_TIMEOUT_SECONDS
from neurolint.core.errors import TransformError
from neurolint.core.logging import get_logger

_logger = get_logger("backend.http")


def _transport_code(error: httpx.TransportError) -> str:
    """Map an httpx transport failure onto a retryable error code."""
    if isinstance(error, httpx.TimeoutException):
        return "ETIMEDOUT"
    if isinstance(error, httpx.ConnectError):
        message = str(error).lower()
        if "name or service not known" in message or "nodename nor servname" in message \
                or "getaddrinfo" in message:
            return "ENOTFOUND"
        return "ECONNREFUSED"
    if isinstance(error, (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError)):
        return "ECONNRESET"
    return "EUNKNOWN"


class HttpTransformBackend(TransformBackend):
    """Transform files via the NeuroLint HTTP API.

    Uses one lazily created httpx.AsyncClient for the whole run so
    connections are pooled across files.

    Attributes:
        api_url: Base URL of the service.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        api_key: str | None = None,
        timeout: float = TRANSFORM_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP backend.

        Args:
            api_url: Base URL for the transform service.
            api_key: Bearer token sent with every request.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "http"

    async def _get_client(self) -> httpx.AsyncClient:
        # Created lazily so the client binds to the running event loop
        if self._client is None or self._client.is_closed:
            headers = {
                "Content-Type": "application/json",
                "User-Agent": f"neurolint-cli/{__version__}",
            }
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def transform(self, request: TransformRequest) -> TransformResponse:
        """Send one file to ``/api/transform``.

        Raises:
            TransformError: On transport failure, non-2xx status, or a
                malformed response body.
        """
        start_time = time.monotonic()
        _logger.debug(
            "http_request",
            endpoint=f"{self.api_url}/api/transform",
            file_path=request.file_path,
            layers=request.layers,
            code_length=len(request.code),
        )

        client = await self._get_client()
        try:
            response = await client.post(
                "/api/transform",
                json=request.model_dump(by_alias=True),
            )
        except httpx.TransportError as e:
            code = _transport_code(e)
            _logger.warning(
                "transport_error",
                endpoint=self.api_url,
                file_path=request.file_path,
                code=code,
                error_message=str(e),
            )
            raise TransformError(
                f"{code}: request to {self.api_url} failed: {e}", code=code
            ) from e

        duration = time.monotonic() - start_time
        if not response.is_success:
            _logger.warning(
                "api_error_response",
                file_path=request.file_path,
                status_code=response.status_code,
                duration_seconds=round(duration, 3),
                response_text=response.text[:500] if response.text else None,
            )
            raise TransformError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            result = TransformResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransformError(f"Malformed transform response: {e}") from e

        _logger.debug(
            "http_response",
            file_path=request.file_path,
            status_code=response.status_code,
            duration_seconds=round(duration, 3),
            layers=len(result.layers),
        )
        return result

    async def health_check(self) -> bool:
        """Probe the service's health endpoints."""
        client = await self._get_client()
        for endpoint in ("/health", "/api/health"):
            try:
                response = await client.get(endpoint)
            except httpx.HTTPError:
                return False
            if response.status_code == 200:
                return True
        return False

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> HttpTransformBackend:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
