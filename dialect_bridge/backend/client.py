# dialect_bridge/backend/client.py
"""Async HTTP transport for Ollama-style chat endpoints, with retry and streaming."""

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
from tenacity import RetryError

from dialect_bridge.errors import ConfigurationError, ConnectivityError, ProtocolError

from .frames import FrameReader
from .retry import build_retrying

logger = logging.getLogger(__name__)


class Transport:
    """
    Sends chat payloads to one backend server.

    Handles:
    - Retries with exponential backoff on network errors and non-2xx answers
    - NDJSON streaming via FrameReader, closing the response on every exit
    - Per-attempt timeouts

    The underlying httpx.AsyncClient can be injected (tests pass one built on
    httpx.MockTransport); an injected client is not closed by aclose().
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_prefix: str = "/api",
        timeout_ms: int = 120_000,
        max_retries: int = 3,
        backoff_base_ms: int = 1000,
        backoff_cap_ms: int = 10_000,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize transport.

        Args:
            base_url: Server base URL (e.g., "http://localhost:11434")
            api_prefix: Path prefix for API routes ("/api" for Ollama)
            timeout_ms: Timeout per attempt in milliseconds
            max_retries: Retries after the first attempt
            backoff_base_ms: First backoff wait; doubles on each retry
            backoff_cap_ms: Maximum single backoff wait
            client: Optional pre-built httpx client

        Raises:
            ConfigurationError: If base_url is not an http(s) URL
        """
        if not base_url or not base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Invalid base URL {base_url!r}: must start with http:// or https://",
                details={"base_url": base_url},
            )
        self.base_url = base_url.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self.timeout = httpx.Timeout(timeout_ms / 1000)
        self.max_retries = max_retries
        self.backoff_base_ms = backoff_base_ms
        self.backoff_cap_ms = backoff_cap_ms
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.timeout)

    def url(self, route: str) -> str:
        return f"{self.base_url}{self.api_prefix}/{route.lstrip('/')}"

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request(self, payload: dict[str, Any]) -> Any:
        """
        POST a non-streaming chat request and return the decoded JSON body.

        Raises:
            ConnectivityError: Network failure or non-2xx after all retries
            ProtocolError: Body is not valid JSON (not retried)
        """
        body = {**payload, "stream": False}
        response = await self._send(body, operation="chat", stream=False)
        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError(
                f"Invalid JSON in response from {self.url('chat')}: {e}",
                raw=response.text,
            ) from e

    async def stream(self, payload: dict[str, Any]) -> AsyncIterator[dict[str, Any]]:
        """
        POST a streaming chat request and yield decoded frames in arrival order.

        Establishing the stream is retried like request(); once frames flow,
        a dropped connection or undecodable body ends the stream with
        ConnectivityError. Stops after the first frame with done=true.
        Malformed lines are logged and skipped by FrameReader.
        """
        body = {**payload, "stream": True}
        response = await self._send(body, operation="chat_stream", stream=True)
        reader = FrameReader()
        try:
            async for chunk in response.aiter_bytes():
                for frame in reader.feed(chunk):
                    yield frame
                    if frame.get("done"):
                        return
            for frame in reader.finish():
                yield frame
                if frame.get("done"):
                    return
        except httpx.HTTPError as e:
            raise ConnectivityError(
                server_url=self.base_url,
                model=payload.get("model"),
                operation="chat_stream",
                attempts=1,
                cause=e,
            ) from e
        finally:
            await response.aclose()
            if reader.skipped:
                logger.debug(f"Stream finished with {reader.skipped} malformed line(s) skipped")

    async def _send(self, body: dict[str, Any], *, operation: str, stream: bool) -> httpx.Response:
        url = self.url("chat")
        retrying = build_retrying(self.max_retries, self.backoff_base_ms, self.backoff_cap_ms)
        try:
            async for attempt in retrying:
                with attempt:
                    request = self._client.build_request(
                        "POST", url, json=body, timeout=self.timeout
                    )
                    response = await self._client.send(request, stream=stream)
                    if not response.is_success:
                        try:
                            await response.aread()
                        finally:
                            await response.aclose()
                        response.raise_for_status()
                    return response
        except RetryError as e:
            last = e.last_attempt
            cause = last.exception()
            status_code = (
                cause.response.status_code if isinstance(cause, httpx.HTTPStatusError) else None
            )
            logger.warning(
                f"{operation} to {url} failed after {last.attempt_number} attempt(s): {cause}"
            )
            raise ConnectivityError(
                server_url=self.base_url,
                model=body.get("model"),
                operation=operation,
                attempts=last.attempt_number,
                cause=cause,
                status_code=status_code,
            ) from cause
        raise AssertionError("unreachable: retry loop exited without result")
