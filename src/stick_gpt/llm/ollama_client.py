"""Async Ollama model backend.

This module provides an async wrapper around the ollama.AsyncClient. Chat
requests always use streaming; the chunks of one reply are collected into a
single ModelReply before it is handed to the orchestrator.
"""

import json
import logging
import uuid
from typing import Any, AsyncIterator, Sequence

import ollama

from stick_gpt.conversation.types import ToolCallRequest, Turn
from stick_gpt.exceptions import ModelRequestError
from stick_gpt.llm.base import ModelClient, ModelReply

logger = logging.getLogger(__name__)


def _arguments_as_dict(arguments: str) -> dict[str, Any]:
    # Ollama expects argument objects, not JSON text.
    try:
        value = json.loads(arguments) if arguments else {}
    except json.JSONDecodeError:
        return {}
    return value if isinstance(value, dict) else {}


def _convert_turns_to_ollama_format(turns: Sequence[Turn]) -> list[dict[str, Any]]:
    """Convert turns to Ollama API message format.

    Args:
        turns: Conversation turns, system prompt first

    Returns:
        List of message dicts: [{"role": "...", "content": "..."}, ...]
    """
    ollama_messages = []

    for turn in turns:
        ollama_msg: dict[str, Any] = {
            "role": turn.role,
            "content": turn.content,
        }

        if turn.tool_calls:
            ollama_msg["tool_calls"] = [
                {
                    "function": {
                        "name": call.name,
                        "arguments": _arguments_as_dict(call.arguments),
                    }
                }
                for call in turn.tool_calls
            ]

        if turn.role == "tool" and turn.name:
            ollama_msg["tool_name"] = turn.name

        ollama_messages.append(ollama_msg)

    return ollama_messages


def _tool_call_from_chunk(raw_call: dict[str, Any]) -> ToolCallRequest:
    function = raw_call.get("function") or {}
    arguments = function.get("arguments")
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments or {})

    return ToolCallRequest(
        # Ollama does not always assign call ids; results are matched by position
        id=raw_call.get("id") or f"call_{uuid.uuid4().hex[:10]}",
        name=function.get("name", ""),
        arguments=arguments,
    )


class OllamaClient(ModelClient):
    """Async model client for the Ollama API.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
        """
        self.host = host
        self._client = ollama.AsyncClient(host=host)
        logger.info(f"OllamaClient initialized with host: {host}")

    @property
    def name(self) -> str:
        return "ollama"

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat_stream(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        options: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Stream chat responses from Ollama.

        Args:
            model: The model name to use for the chat
            messages: List of message dicts in Ollama format
            tools: Optional function-calling schemas
            options: Optional model parameters (temperature, num_predict)

        Yields:
            dict: Response chunks from Ollama. Each chunk contains a message
                  dict (role, content, optional tool_calls) and a done flag.

        Raises:
            Exception: If the Ollama API request fails
        """
        logger.debug(f"Starting chat stream with model: {model}")
        logger.debug(f"Message count: {len(messages)}")

        async for chunk in await self._client.chat(
            model=model,
            messages=messages,
            tools=tools,
            stream=True,
            options=options,
        ):
            if hasattr(chunk, "model_dump"):
                chunk_dict = chunk.model_dump()
            elif isinstance(chunk, dict):
                chunk_dict = chunk
            else:
                chunk_dict = vars(chunk)

            yield chunk_dict

        logger.debug("Chat stream completed")

    async def complete(
        self,
        model: str,
        turns: Sequence[Turn],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> ModelReply:
        """Collect one complete reply from Ollama's streaming API."""
        options: dict[str, Any] = {"temperature": temperature}
        if max_tokens is not None:
            options["num_predict"] = max_tokens

        content_parts: list[str] = []
        tool_calls: list[ToolCallRequest] = []
        done = False

        try:
            async for chunk in self.chat_stream(
                model=model,
                messages=_convert_turns_to_ollama_format(turns),
                tools=tools or None,
                options=options,
            ):
                message = chunk.get("message") or {}
                content = message.get("content") or ""
                if content:
                    content_parts.append(content)

                for raw_call in message.get("tool_calls") or []:
                    tool_calls.append(_tool_call_from_chunk(raw_call))

                if chunk.get("done"):
                    done = True
        except Exception as e:
            logger.error(f"Ollama chat request failed: {e}")
            raise ModelRequestError(f"Failed to get response from Ollama: {e}") from e

        if not done:
            raise ModelRequestError("Ollama stream ended without completion marker")

        reply = ModelReply(content="".join(content_parts), tool_calls=tool_calls)
        logger.debug(
            f"Received reply: {len(reply.content)} characters, "
            f"{len(reply.tool_calls)} tool calls"
        )
        return reply
