"""Unit tests for the OllamaClient backend."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from stick_gpt.conversation import ToolCallRequest, Turn
from stick_gpt.exceptions import ModelRequestError
from stick_gpt.llm import OllamaClient
from stick_gpt.llm.ollama_client import _convert_turns_to_ollama_format


async def _stream(chunks):
    for chunk in chunks:
        yield chunk


@pytest.fixture
def mock_ollama_async_client():
    """Create a mock ollama.AsyncClient."""
    with patch("stick_gpt.llm.ollama_client.ollama.AsyncClient") as mock_class:
        mock_instance = AsyncMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def ollama_client(mock_ollama_async_client):
    """Create an OllamaClient with mocked AsyncClient."""
    return OllamaClient(host="http://localhost:11434")


def test_client_initialization():
    """Test that OllamaClient initializes correctly."""
    with patch("stick_gpt.llm.ollama_client.ollama.AsyncClient"):
        client = OllamaClient(host="http://test:11434")
        assert client.host == "http://test:11434"
        assert client.name == "ollama"
        assert client._client is not None


@pytest.mark.asyncio
async def test_check_connection_success(ollama_client, mock_ollama_async_client):
    mock_ollama_async_client.list.return_value = {"models": []}

    assert await ollama_client.check_connection() is True
    mock_ollama_async_client.list.assert_called_once()


@pytest.mark.asyncio
async def test_check_connection_failure(ollama_client, mock_ollama_async_client):
    mock_ollama_async_client.list.side_effect = Exception("Connection refused")

    assert await ollama_client.check_connection() is False


class TestTurnConversion:
    """Tests for converting turns to Ollama format."""

    def test_convert_empty_list(self):
        assert _convert_turns_to_ollama_format([]) == []

    def test_convert_plain_turns(self):
        result = _convert_turns_to_ollama_format(
            [Turn.system("You are helpful"), Turn.user("Hello!")]
        )

        assert result == [
            {"role": "system", "content": "You are helpful"},
            {"role": "user", "content": "Hello!"},
        ]

    def test_convert_assistant_with_tool_calls(self):
        """Test that argument text is sent back as an object."""
        turn = Turn.assistant(
            "", [ToolCallRequest(id="c1", name="read_file", arguments='{"path": "a.txt"}')]
        )

        result = _convert_turns_to_ollama_format([turn])

        assert result[0]["tool_calls"] == [
            {"function": {"name": "read_file", "arguments": {"path": "a.txt"}}}
        ]

    def test_convert_malformed_arguments(self):
        turn = Turn.assistant("", [ToolCallRequest(id="c1", name="x", arguments="{oops")])

        result = _convert_turns_to_ollama_format([turn])

        assert result[0]["tool_calls"][0]["function"]["arguments"] == {}

    def test_convert_tool_turn(self):
        result = _convert_turns_to_ollama_format(
            [Turn.tool("c1", '{"success": true}', name="read_file")]
        )

        assert result == [
            {"role": "tool", "content": '{"success": true}', "tool_name": "read_file"}
        ]


class TestComplete:
    """Tests for collecting streamed replies."""

    @pytest.mark.asyncio
    async def test_collect_content(self, ollama_client, mock_ollama_async_client):
        """Test that content chunks are joined into one reply."""
        mock_ollama_async_client.chat.return_value = _stream(
            [
                {"message": {"role": "assistant", "content": "Hello"}, "done": False},
                {"message": {"role": "assistant", "content": " there"}, "done": False},
                {"message": {"role": "assistant", "content": ""}, "done": True},
            ]
        )

        reply = await ollama_client.complete(
            model="llama3.2:latest",
            turns=[Turn.user("Hi")],
            temperature=0.5,
            max_tokens=100,
        )

        assert reply.content == "Hello there"
        assert reply.has_tool_calls is False
        kwargs = mock_ollama_async_client.chat.call_args.kwargs
        assert kwargs["model"] == "llama3.2:latest"
        assert kwargs["stream"] is True
        assert kwargs["tools"] is None
        assert kwargs["options"] == {"temperature": 0.5, "num_predict": 100}

    @pytest.mark.asyncio
    async def test_collect_tool_calls(self, ollama_client, mock_ollama_async_client):
        """Test that tool calls get ids and JSON argument text."""
        mock_ollama_async_client.chat.return_value = _stream(
            [
                {
                    "message": {
                        "role": "assistant",
                        "content": "",
                        "tool_calls": [
                            {"function": {"name": "read_file", "arguments": {"path": "a"}}}
                        ],
                    },
                    "done": False,
                },
                {"message": {"role": "assistant", "content": "", "tool_calls": None}, "done": True},
            ]
        )
        tools = [{"type": "function", "function": {"name": "read_file"}}]

        reply = await ollama_client.complete(
            model="llama3.2:latest", turns=[Turn.user("read a")], tools=tools
        )

        assert len(reply.tool_calls) == 1
        call = reply.tool_calls[0]
        assert call.name == "read_file"
        assert json.loads(call.arguments) == {"path": "a"}
        assert call.id.startswith("call_")
        assert mock_ollama_async_client.chat.call_args.kwargs["tools"] == tools

    @pytest.mark.asyncio
    async def test_pydantic_chunks(self, ollama_client, mock_ollama_async_client):
        """Test that response objects are converted with model_dump()."""
        chunk = MagicMock()
        chunk.model_dump.return_value = {
            "message": {"role": "assistant", "content": "Hi"},
            "done": True,
        }
        mock_ollama_async_client.chat.return_value = _stream([chunk])

        reply = await ollama_client.complete(model="m", turns=[Turn.user("Hi")])

        assert reply.content == "Hi"

    @pytest.mark.asyncio
    async def test_request_error(self, ollama_client, mock_ollama_async_client):
        mock_ollama_async_client.chat.side_effect = Exception("Connection refused")

        with pytest.raises(ModelRequestError, match="Connection refused"):
            await ollama_client.complete(model="m", turns=[Turn.user("Hi")])

    @pytest.mark.asyncio
    async def test_no_done_marker(self, ollama_client, mock_ollama_async_client):
        mock_ollama_async_client.chat.return_value = _stream(
            [{"message": {"role": "assistant", "content": "Hel"}, "done": False}]
        )

        with pytest.raises(ModelRequestError, match="completion marker"):
            await ollama_client.complete(model="m", turns=[Turn.user("Hi")])
