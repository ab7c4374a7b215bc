"""HTTP client for the Ollama native API.

One call per inbound request, no retries. Every transport error, non-200
status or undecodable body becomes a ``BackendError`` whose detail is meant
for the logs only.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Mapping, Optional

import httpx

from .exceptions import BackendError

if TYPE_CHECKING:
    from ..config_loader import ProxyConfig

logger = logging.getLogger("ollama-openai")

CHAT_PATH = "/api/chat"
GENERATE_PATH = "/api/generate"
TAGS_PATH = "/api/tags"

# Bytes of a failed backend body kept in the (log-only) error detail
ERROR_BODY_LIMIT = 500


def format_httpx_error(exc: Exception, url: str, timeout: Optional[float] = None) -> str:
    """Produce a detailed, log-oriented description of an httpx error."""
    parts = [exc.__class__.__name__]
    message = str(exc).strip()
    if message:
        parts.append(message)

    try:
        request = getattr(exc, "request", None)
    except RuntimeError:
        # httpx raises when .request was never attached
        request = None
    if request is not None:
        parts.append(f"request={request.method} {request.url}")
    else:
        parts.append(f"url={url}")

    if isinstance(exc, httpx.TimeoutException) and timeout is not None:
        parts.append(f"timeout={timeout}s")

    return "; ".join(parts)


def _error_body(data: bytes) -> str:
    return data[:ERROR_BODY_LIMIT].decode("utf-8", errors="replace")


class OllamaStream:
    """An open streaming response from Ollama.

    Owns both the response and its client; ``aclose`` releases the backend
    connection and is safe to call more than once.
    """

    def __init__(self, url: str, client: httpx.AsyncClient, response: httpx.Response) -> None:
        self.url = url
        self._client = client
        self._response = response
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def lines(self) -> AsyncIterator[str]:
        async for line in self._response.aiter_lines():
            yield line

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Closing Ollama stream for {self.url}")
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


class OllamaClient:
    """Calls the Ollama chat, generate and tags endpoints.

    ``transport`` replaces the network, e.g. an ``httpx.ASGITransport`` around
    ``ollama_openai.testing.FakeOllama``.
    """

    def __init__(
        self,
        config: ProxyConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = config.ollama_url.rstrip("/")
        self.timeout = config.request_timeout
        self.transport = transport

    def build_url(self, path: str) -> str:
        """Build the full URL for a backend request."""
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
            follow_redirects=True,
        )

    async def _request_json(
        self, method: str, path: str, body: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        url = self.build_url(path)
        logger.debug(f"Sending {method} {url} (timeout {self.timeout}s)")
        async with self._make_client() as client:
            try:
                resp = await client.request(method, url, json=body)
            except httpx.HTTPError as exc:
                raise BackendError(
                    f"failed to make request to Ollama: {format_httpx_error(exc, url, self.timeout)}"
                ) from exc

        logger.debug(f"Received response from {url}: status {resp.status_code}")
        if resp.status_code != 200:
            raise BackendError(
                f"Ollama API error: status {resp.status_code}: {_error_body(resp.content)}",
                status=resp.status_code,
            )
        try:
            payload = resp.json()
        except ValueError as exc:
            raise BackendError(f"failed to decode Ollama response from {url}: {exc}") from exc
        if not isinstance(payload, dict):
            raise BackendError(
                f"failed to decode Ollama response from {url}: expected object, got {type(payload).__name__}"
            )
        return payload

    async def chat(self, body: Mapping[str, Any]) -> dict[str, Any]:
        """POST /api/chat with ``stream: false``."""
        return await self._request_json("POST", CHAT_PATH, body)

    async def generate(self, body: Mapping[str, Any]) -> dict[str, Any]:
        """POST /api/generate with ``stream: false``."""
        return await self._request_json("POST", GENERATE_PATH, body)

    async def tags(self) -> list[dict[str, Any]]:
        """GET /api/tags and return its ``models`` entries."""
        payload = await self._request_json("GET", TAGS_PATH)
        models = payload.get("models") or []
        if not isinstance(models, list):
            raise BackendError(f"unexpected /api/tags payload: models is {type(models).__name__}")
        return [entry for entry in models if isinstance(entry, dict)]

    async def open_stream(self, path: str, body: Mapping[str, Any]) -> OllamaStream:
        """Start a streaming POST and return once response headers arrived.

        Raises:
            BackendError: (code ``ollama_stream_error``) if the connection
                fails or Ollama answers with a non-200 status. Nothing has
                been sent to the client at that point.
        """
        url = self.build_url(path)
        client = self._make_client()
        try:
            request = client.build_request("POST", url, json=body)
            logger.debug(f"Sending streaming request to {url}")
            resp = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            await client.aclose()
            raise BackendError(
                f"failed to open Ollama stream: {format_httpx_error(exc, url, self.timeout)}",
                code="ollama_stream_error",
            ) from exc
        except BaseException:
            await client.aclose()
            raise

        if resp.status_code != 200:
            try:
                data = await resp.aread()
            except httpx.HTTPError:
                data = b""
            finally:
                await resp.aclose()
                await client.aclose()
            raise BackendError(
                f"Ollama API error: status {resp.status_code}: {_error_body(data)}",
                code="ollama_stream_error",
                status=resp.status_code,
            )

        logger.info(f"Streaming request to {url} accepted, status {resp.status_code}")
        return OllamaStream(url, client, resp)

    async def stream_chat(self, body: Mapping[str, Any]) -> OllamaStream:
        return await self.open_stream(CHAT_PATH, body)

    async def stream_generate(self, body: Mapping[str, Any]) -> OllamaStream:
        return await self.open_stream(GENERATE_PATH, body)
