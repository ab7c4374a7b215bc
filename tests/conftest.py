"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

from typing import Any

import pytest

from ollama_openai.config_loader import ProxyConfig
from ollama_openai.testing import DEFAULT_OLLAMA_URL, ProxyHarness

# Variables load_config reads; cleared so the developer's shell cannot leak in
CONFIG_ENV_VARS = (
    "HOST",
    "PORT",
    "API_KEY",
    "OLLAMA_URL",
    "OLLAMA_MODEL",
    "OLLAMA_TIMEOUT",
    "LOG_LEVEL",
    "OLLAMA_OPENAI_CONFIG",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run with no config env vars and an empty working directory."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


# =============================================================================
# Harness Configuration Builders
# =============================================================================


def build_config(**overrides: Any) -> ProxyConfig:
    """ProxyConfig pointed at the fake Ollama host.

    Args:
        **overrides: ProxyConfig fields to change

    Returns:
        Config for ProxyHarness
    """
    values: dict[str, Any] = {
        "ollama_url": DEFAULT_OLLAMA_URL,
        "ollama_model": "llama3.2:latest",
        "stream_stall_timeout": 5.0,
    }
    values.update(overrides)
    return ProxyConfig(**values)


# =============================================================================
# Harness Fixtures
# =============================================================================


@pytest.fixture
def harness() -> ProxyHarness:
    """Create a harness with authentication disabled.

    Usage:
        async def test_chat(harness):
            harness.ollama.enqueue_chat_response("Hello")
            async with harness.make_async_client() as client:
                ...
    """
    return ProxyHarness(build_config())


@pytest.fixture
def auth_harness() -> ProxyHarness:
    """Create a harness that requires ``Bearer secret-key``."""
    return ProxyHarness(build_config(api_key="secret-key"))

