"""Tests for the Ollama NDJSON -> OpenAI SSE stream adapters."""

import json

import pytest

from ollama_openai.core.sse import SSE_DONE, iter_sse_data
from ollama_openai.testing import build_chat_chunks, build_generate_chunks
from ollama_openai.translation.stream_adapter import (
    OllamaChatStreamAdapter,
    OllamaGenerateStreamAdapter,
)


def _lines(chunks):
    return [json.dumps(chunk) for chunk in chunks]


def _feed_all(adapter, lines):
    frames = []
    for line in lines:
        frames.extend(adapter.feed_line(line))
    return frames


class TestChatStreamAdapter:
    """Chat chunk translation."""

    def test_frames_follow_backend_order(self):
        adapter = OllamaChatStreamAdapter(model="llama3")
        frames = _feed_all(adapter, _lines(build_chat_chunks(["Hel", "lo", "!"])))
        events = iter_sse_data(b"".join(frames))

        assert events[-1] == "[DONE]"
        contents = [e["choices"][0]["delta"].get("content") for e in events[:-1]]
        assert contents == ["Hel", "lo", "!", None]

    def test_every_frame_is_sse_framed(self):
        adapter = OllamaChatStreamAdapter(model="llama3")
        frames = _feed_all(adapter, _lines(build_chat_chunks(["a"])))
        for frame in frames:
            assert frame.startswith(b"data: ")
            assert frame.endswith(b"\n\n")
        assert frames[-1] == SSE_DONE

    def test_shared_id_and_created(self):
        adapter = OllamaChatStreamAdapter(model="llama3")
        frames = _feed_all(adapter, _lines(build_chat_chunks(["a", "b", "c"])))
        chunks = [e for e in iter_sse_data(b"".join(frames)) if isinstance(e, dict)]
        assert {c["id"] for c in chunks} == {adapter.completion_id}
        assert {c["created"] for c in chunks} == {adapter.created}
        assert adapter.completion_id.startswith("chatcmpl-")

    def test_distinct_adapters_have_distinct_ids(self):
        ids = {OllamaChatStreamAdapter(model="m").completion_id for _ in range(50)}
        assert len(ids) == 50

    def test_finish_reason_only_on_done(self):
        adapter = OllamaChatStreamAdapter(model="m")
        frames = _feed_all(adapter, _lines(build_chat_chunks(["a", "b"])))
        chunks = [e for e in iter_sse_data(b"".join(frames)) if isinstance(e, dict)]
        assert [c["choices"][0]["finish_reason"] for c in chunks] == [None, None, "stop"]

    def test_empty_content_omitted_from_delta(self):
        adapter = OllamaChatStreamAdapter(model="m")
        frames = adapter.feed_line(json.dumps({"message": {"role": "assistant", "content": ""}, "done": False}))
        chunk = iter_sse_data(frames[0])[0]
        assert chunk["choices"][0]["delta"] == {}
        assert chunk["choices"][0]["finish_reason"] is None

    def test_model_echoed(self):
        adapter = OllamaChatStreamAdapter(model="requested-name")
        frames = adapter.feed_line(json.dumps({"model": "actual:latest", "message": {"content": "x"}, "done": False}))
        assert iter_sse_data(frames[0])[0]["model"] == "requested-name"

    @pytest.mark.parametrize("noise", ["", "   ", "keep-alive", "{not json", "[1, 2]", '"str"'])
    def test_noise_lines_skipped(self, noise):
        adapter = OllamaChatStreamAdapter(model="m")
        assert adapter.feed_line(noise) == []
        assert not adapter.finished

    def test_noise_between_chunks_does_not_abort(self):
        adapter = OllamaChatStreamAdapter(model="m")
        lines = _lines(build_chat_chunks(["a", "b"]))
        lines.insert(1, "garbage")
        lines.insert(0, "")
        frames = _feed_all(adapter, lines)
        events = iter_sse_data(b"".join(frames))
        assert events[-1] == "[DONE]"
        assert adapter.lines_skipped == 1
        assert adapter.chunks_emitted == 3

    def test_input_after_done_ignored(self):
        adapter = OllamaChatStreamAdapter(model="m")
        _feed_all(adapter, _lines(build_chat_chunks(["a"])))
        assert adapter.finished
        assert adapter.feed_line(json.dumps({"message": {"content": "late"}, "done": False})) == []

    def test_no_done_no_terminator(self):
        adapter = OllamaChatStreamAdapter(model="m")
        frames = _feed_all(adapter, _lines(build_chat_chunks(["a", "b"])[:-1]))
        assert SSE_DONE not in frames
        assert not adapter.finished

    def test_bytes_lines_accepted(self):
        adapter = OllamaChatStreamAdapter(model="m")
        frames = adapter.feed_line(json.dumps({"message": {"content": "é"}, "done": False}).encode())
        assert iter_sse_data(frames[0])[0]["choices"][0]["delta"]["content"] == "é"

    def test_fixed_id_and_created_respected(self):
        adapter = OllamaChatStreamAdapter(model="m", completion_id="chatcmpl-7", created=123)
        chunk = iter_sse_data(adapter.feed_line(json.dumps({"message": {"content": "x"}}))[0])[0]
        assert chunk["id"] == "chatcmpl-7"
        assert chunk["created"] == 123


class TestGenerateStreamAdapter:
    """Text completion chunk translation."""

    def test_text_completion_chunks(self):
        adapter = OllamaGenerateStreamAdapter(model="llama3")
        frames = _feed_all(adapter, _lines(build_generate_chunks(["Once", " upon"])))
        events = iter_sse_data(b"".join(frames))

        assert events[-1] == "[DONE]"
        chunks = events[:-1]
        assert [c["object"] for c in chunks] == ["text_completion"] * 3
        assert [c["choices"][0]["text"] for c in chunks] == ["Once", " upon", ""]
        assert [c["choices"][0]["finish_reason"] for c in chunks] == [None, None, "stop"]
        assert all(c["choices"][0]["logprobs"] is None for c in chunks)
        assert adapter.completion_id.startswith("cmpl-")
