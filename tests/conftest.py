"""Pytest configuration and shared fixtures for stick-gpt tests.

This module provides common fixtures used across all test modules,
including isolated settings, a scripted model client and tool registries.
"""

from unittest.mock import AsyncMock

import pytest

from stick_gpt.config import StickGptSettings
from stick_gpt.conversation import ToolCallRequest
from stick_gpt.llm import ModelReply
from stick_gpt.tools import Tool, ToolRegistry


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove environment variables that would leak into settings."""
    for name in (
        "OPENAI_API_KEY",
        "STICK_OPENAI_API_KEY",
        "STICK_PROVIDER",
        "STICK_MODEL",
        "STICK_TEMPERATURE",
        "STICK_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_settings():
    """Create settings isolated from .env files, using the Ollama backend.

    Returns:
        StickGptSettings: Settings instance configured for testing.
    """
    return StickGptSettings(
        _env_file=None,
        provider="ollama",
        model="llama3.2:latest",
        ollama_host="http://localhost:11434",
        temperature=0.2,
        max_tokens=256,
        max_iterations=5,
        log_level="DEBUG",
    )


@pytest.fixture
def mock_client():
    """Create a model client whose complete() replies are scripted per test.

    Tests set ``mock_client.complete.side_effect`` to a list of ModelReply.
    """
    client = AsyncMock()
    client.name = "mock"
    client.complete.return_value = ModelReply(content="Hello!")
    return client


@pytest.fixture
def time_tool():
    """A get_current_time tool returning a fixed timestamp."""
    return Tool(
        name="get_current_time",
        description="Get the current date and time",
        handler=lambda args: {
            "success": True,
            "timestamp": "2024-01-01T10:00:00.000Z",
            "formatted": "Mon Jan  1 10:00:00 2024",
        },
        parameters={"type": "object", "properties": {}, "required": []},
    )


@pytest.fixture
def echo_tool():
    """A tool returning its text argument."""
    return Tool(
        name="echo",
        description="Echo the given text",
        handler=lambda args: {"success": True, "text": args["text"]},
        parameters={
            "type": "object",
            "properties": {"text": {"type": "string"}},
            "required": ["text"],
        },
    )


@pytest.fixture
def registry(time_tool, echo_tool):
    """A registry holding the time and echo tools."""
    return ToolRegistry([time_tool, echo_tool])


@pytest.fixture
def tool_reply():
    """Factory building a ModelReply that requests (id, name, arguments) calls."""

    def _tool_reply(*calls: tuple[str, str, str], content: str = "") -> ModelReply:
        return ModelReply(
            content=content,
            tool_calls=[ToolCallRequest(id=i, name=n, arguments=a) for i, n, a in calls],
        )

    return _tool_reply
