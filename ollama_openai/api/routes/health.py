"""Liveness endpoint."""

HEALTH_MESSAGE = "OpenAI Compatible API is running"


async def health() -> dict:
    """GET /health; never touches Ollama and needs no API key."""
    return {"status": "ok", "message": HEALTH_MESSAGE}
