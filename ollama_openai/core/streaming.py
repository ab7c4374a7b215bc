"""Bounded producer/consumer hand-off between an Ollama stream and the client.

The producer task reads backend lines, translates them with a stream adapter
and publishes SSE frames onto a bounded queue. The consumer (the HTTP
response body) drains the queue in order. An end sentinel on the queue is
the only completion signal.

Failure handling:
- A backend error mid-stream ends the output without ``[DONE]`` and is only
  logged; the client is already committed to an event stream.
- If the consumer stops draining for ``stall_timeout`` seconds, or the
  client disconnects, the producer stops reading and releases the backend
  connection.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Protocol, Union

import httpx

logger = logging.getLogger("ollama-openai")

DEFAULT_QUEUE_SIZE = 100
DEFAULT_STALL_TIMEOUT = 30.0

_END = object()


class StreamAdapter(Protocol):
    finished: bool

    def feed_line(self, line: Union[str, bytes]) -> list[bytes]: ...


class BackendStream(Protocol):
    url: str

    def lines(self) -> AsyncIterator[str]: ...

    async def aclose(self) -> None: ...


class StreamPump:
    """Moves translated frames from one backend stream to one client."""

    def __init__(
        self,
        backend: BackendStream,
        adapter: StreamAdapter,
        *,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        stall_timeout: float = DEFAULT_STALL_TIMEOUT,
        disconnect_checker: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> None:
        self.backend = backend
        self.adapter = adapter
        self.stall_timeout = stall_timeout
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=max(1, queue_size))
        self._disconnect_checker = disconnect_checker
        self._task: Optional[asyncio.Task[None]] = None
        self._closing = False

        self.frames_published = 0
        self.stalled = False
        self.client_disconnected = False
        self.backend_error: Optional[BaseException] = None

    @property
    def completed(self) -> bool:
        """True when the backend signalled ``done`` and [DONE] was queued."""
        return bool(self.adapter.finished)

    async def _publish(self, item: Any) -> bool:
        if self._closing:
            return False
        try:
            await asyncio.wait_for(self._queue.put(item), timeout=self.stall_timeout)
        except asyncio.TimeoutError:
            self.stalled = True
            logger.warning(
                "Client stopped reading stream from %s for %.1fs; abandoning backend stream",
                self.backend.url,
                self.stall_timeout,
            )
            return False
        # wait_for can drop a cancel that lands after put() finished
        return not self._closing

    async def _produce(self) -> None:
        cancelled = False
        try:
            async for line in self.backend.lines():
                if self._closing:
                    break
                if self._disconnect_checker and await self._disconnect_checker():
                    self.client_disconnected = True
                    logger.info(f"Client disconnected from stream for {self.backend.url}")
                    break
                for frame in self.adapter.feed_line(line):
                    if not await self._publish(frame):
                        return
                    self.frames_published += 1
                if self.adapter.finished:
                    break
            if not self.adapter.finished and not self.client_disconnected and not self._closing:
                logger.warning(
                    "Ollama stream from %s ended without a done chunk after %d frames",
                    self.backend.url,
                    self.frames_published,
                )
        except asyncio.CancelledError:
            cancelled = True
            logger.info(f"Stream from {self.backend.url} cancelled by client")
            raise
        except httpx.HTTPError as exc:
            self.backend_error = exc
            logger.error(
                "Ollama stream from %s failed after %d frames: %s (%s)",
                self.backend.url,
                self.frames_published,
                exc,
                exc.__class__.__name__,
            )
        finally:
            await self.backend.aclose()
            if not cancelled and not self.stalled and not self._closing:
                await self._publish(_END)

    async def drain(self) -> AsyncIterator[bytes]:
        """Yield frames in arrival order until the producer closes the queue."""
        if self._task is not None:
            raise RuntimeError("StreamPump.drain() may only be called once")
        self._task = asyncio.create_task(self._produce())
        try:
            while True:
                # A stalled producer exits without queueing the sentinel
                if self.stalled and self._queue.empty():
                    break
                item = await self._queue.get()
                if item is _END:
                    break
                yield item
            # Surfaces unexpected producer failures to the response
            await self._task
        finally:
            if not self._task.done():
                self._closing = True
                self._task.cancel()
                await asyncio.gather(self._task, return_exceptions=True)
            logger.debug(
                "Stream for %s drained: frames=%d completed=%s",
                self.backend.url,
                self.frames_published,
                self.completed,
            )

    async def aclose(self) -> None:
        """Release the backend stream if ``drain`` never ran."""
        if self._task is None:
            await self.backend.aclose()
