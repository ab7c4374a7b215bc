"""Fake Ollama ASGI app for simulating deterministic backend responses."""

from __future__ import annotations

import asyncio
import json
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

DEFAULT_MODEL = "llama3.2:latest"
DEFAULT_CREATED_AT = "2024-01-01T00:00:00Z"


class StreamError(Exception):
    """Raised to simulate a backend connection dropping mid-stream."""


@dataclass
class BackendResponse:
    """A queued response to return from the fake Ollama.

    Standard fields:
        status_code: HTTP status code (default 200)
        json_body: JSON body for non-streaming replies
        body: Raw bytes/string body (overrides json_body)
        stream_lines: NDJSON objects (or raw strings) for streaming replies
        chunk_delay_s: Delay between streamed lines

    Error simulation:
        error_after_lines: Raise ``StreamError`` after N lines
        noise_lines: Raw lines interleaved before every streamed object
    """

    status_code: int = 200
    json_body: Any = None
    body: bytes | str | None = None
    stream_lines: list[Any] | None = None
    chunk_delay_s: float | None = None
    error_after_lines: int | None = None
    noise_lines: list[str] = field(default_factory=list)


def _encode_line(line: Any) -> bytes:
    if isinstance(line, bytes):
        return line if line.endswith(b"\n") else line + b"\n"
    if isinstance(line, str):
        return (line + "\n").encode("utf-8")
    return (json.dumps(line, ensure_ascii=False) + "\n").encode("utf-8")


def build_chat_chunks(
    pieces: Iterable[str], model: str = DEFAULT_MODEL
) -> list[dict[str, Any]]:
    """Ollama /api/chat stream chunks: one per piece, then a done chunk."""
    chunks: list[dict[str, Any]] = [
        {
            "model": model,
            "created_at": DEFAULT_CREATED_AT,
            "message": {"role": "assistant", "content": piece},
            "done": False,
        }
        for piece in pieces
    ]
    chunks.append(
        {
            "model": model,
            "created_at": DEFAULT_CREATED_AT,
            "message": {"role": "assistant", "content": ""},
            "done": True,
        }
    )
    return chunks


def build_generate_chunks(
    pieces: Iterable[str], model: str = DEFAULT_MODEL
) -> list[dict[str, Any]]:
    """Ollama /api/generate stream chunks: one per piece, then a done chunk."""
    chunks: list[dict[str, Any]] = [
        {"model": model, "created_at": DEFAULT_CREATED_AT, "response": piece, "done": False}
        for piece in pieces
    ]
    chunks.append(
        {"model": model, "created_at": DEFAULT_CREATED_AT, "response": "", "done": True}
    )
    return chunks


class FakeOllama:
    """ASGI app emulating Ollama's /api/chat, /api/generate and /api/tags.

    Every call pops the next queued ``BackendResponse``; requests are
    recorded in ``received`` for call-count and payload assertions.
    """

    def __init__(self, responses: Optional[Iterable[BackendResponse]] = None) -> None:
        self.app = FastAPI(title="FakeOllama")
        self._queue: Deque[BackendResponse] = deque(responses or [])
        self.received: list[dict[str, Any]] = []
        self.app.post("/api/chat")(self._handle)
        self.app.post("/api/generate")(self._handle)
        self.app.get("/api/tags")(self._handle)

    def enqueue(self, response: BackendResponse) -> None:
        """Add a response to the queue."""
        self._queue.append(response)

    def clear(self) -> None:
        """Clear all queued responses and received requests."""
        self._queue.clear()
        self.received.clear()

    @property
    def call_count(self) -> int:
        return len(self.received)

    def requests_to(self, path: str) -> list[dict[str, Any]]:
        return [entry for entry in self.received if entry["path"] == path]

    # -------------------------------------------------------------------------
    # Convenience methods for common response types
    # -------------------------------------------------------------------------

    def enqueue_chat_response(self, content: str, *, model: str = DEFAULT_MODEL) -> None:
        self.enqueue(
            BackendResponse(
                json_body={
                    "model": model,
                    "created_at": DEFAULT_CREATED_AT,
                    "message": {"role": "assistant", "content": content},
                    "done": True,
                }
            )
        )

    def enqueue_generate_response(self, text: str, *, model: str = DEFAULT_MODEL) -> None:
        self.enqueue(
            BackendResponse(
                json_body={
                    "model": model,
                    "created_at": DEFAULT_CREATED_AT,
                    "response": text,
                    "done": True,
                }
            )
        )

    def enqueue_chat_stream(
        self,
        pieces: Iterable[str],
        *,
        model: str = DEFAULT_MODEL,
        chunk_delay_s: float | None = None,
        noise_lines: list[str] | None = None,
    ) -> None:
        self.enqueue(
            BackendResponse(
                stream_lines=build_chat_chunks(pieces, model),
                chunk_delay_s=chunk_delay_s,
                noise_lines=list(noise_lines or []),
            )
        )

    def enqueue_generate_stream(
        self,
        pieces: Iterable[str],
        *,
        model: str = DEFAULT_MODEL,
        chunk_delay_s: float | None = None,
    ) -> None:
        self.enqueue(
            BackendResponse(
                stream_lines=build_generate_chunks(pieces, model),
                chunk_delay_s=chunk_delay_s,
            )
        )

    def enqueue_tags(self, names: Iterable[str]) -> None:
        models = [
            {
                "name": name,
                "model": name,
                "modified_at": DEFAULT_CREATED_AT,
                "size": 0,
                "digest": "",
            }
            for name in names
        ]
        self.enqueue(BackendResponse(json_body={"models": models}))

    def enqueue_error(self, status_code: int, message: str = "backend failure") -> None:
        self.enqueue(BackendResponse(status_code=status_code, json_body={"error": message}))

    def enqueue_mid_stream_error(self, pieces: Iterable[str], *, after: int) -> None:
        """Queue a chat stream that drops after ``after`` lines, before done."""
        self.enqueue(
            BackendResponse(
                stream_lines=build_chat_chunks(pieces),
                error_after_lines=after,
            )
        )

    # -------------------------------------------------------------------------
    # Request handling
    # -------------------------------------------------------------------------

    async def _handle(self, request: Request) -> Response:
        payload: Any = None
        if request.method == "POST":
            try:
                payload = await request.json()
            except ValueError:
                payload = None

        self.received.append(
            {
                "method": request.method,
                "path": request.url.path,
                "headers": dict(request.headers),
                "json": payload,
            }
        )

        if not self._queue:
            return JSONResponse({"error": "No backend responses queued"}, status_code=500)

        response = self._queue.popleft()

        if response.stream_lines is not None and response.status_code == 200:
            return StreamingResponse(
                self._stream_lines(response),
                status_code=response.status_code,
                media_type="application/x-ndjson",
            )

        if response.body is not None:
            body = response.body.encode("utf-8") if isinstance(response.body, str) else response.body
        else:
            body = json.dumps(response.json_body).encode("utf-8")
        return Response(
            content=body,
            status_code=response.status_code,
            media_type="application/json",
        )

    async def _stream_lines(self, response: BackendResponse):
        for index, line in enumerate(response.stream_lines or []):
            if response.error_after_lines is not None and index >= response.error_after_lines:
                raise StreamError(f"Simulated connection reset after {index} lines")
            for noise in response.noise_lines:
                yield _encode_line(noise)
            yield _encode_line(line)
            if response.chunk_delay_s:
                await asyncio.sleep(response.chunk_delay_s)
