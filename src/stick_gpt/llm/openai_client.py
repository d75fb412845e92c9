"""Async OpenAI Chat Completions backend."""

import logging
from typing import Any, Sequence

import openai

from stick_gpt.conversation.types import ToolCallRequest, Turn
from stick_gpt.exceptions import ModelRequestError
from stick_gpt.llm.base import ModelClient, ModelReply

logger = logging.getLogger(__name__)


def _convert_turns_to_openai_format(turns: Sequence[Turn]) -> list[dict[str, Any]]:
    """Convert turns to Chat Completions message format."""
    messages = []

    for turn in turns:
        if turn.role == "tool":
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": turn.tool_call_id,
                    "content": turn.content,
                }
            )
        elif turn.tool_calls:
            messages.append(
                {
                    "role": "assistant",
                    "content": turn.content or None,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": call.arguments},
                        }
                        for call in turn.tool_calls
                    ],
                }
            )
        else:
            messages.append({"role": turn.role, "content": turn.content})

    return messages


class OpenAIClient(ModelClient):
    """Async model client for the OpenAI Chat Completions API.

    Attributes:
        _client: The underlying openai.AsyncOpenAI instance
    """

    def __init__(self, api_key: str, base_url: str | None = None) -> None:
        self._client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url)
        logger.info("OpenAIClient initialized")

    @property
    def name(self) -> str:
        return "openai"

    async def complete(
        self,
        model: str,
        turns: Sequence[Turn],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> ModelReply:
        request: dict[str, Any] = {
            "model": model,
            "messages": _convert_turns_to_openai_format(turns),
            "temperature": temperature,
        }
        if max_tokens is not None:
            request["max_tokens"] = max_tokens
        if tools:
            request["tools"] = tools

        logger.debug(f"Sending {len(request['messages'])} messages to {model}")

        try:
            response = await self._client.chat.completions.create(**request)
        except openai.OpenAIError as e:
            logger.error(f"OpenAI chat request failed: {e}")
            raise ModelRequestError(f"Failed to get response from OpenAI: {e}") from e

        if not response.choices:
            raise ModelRequestError("OpenAI response contained no choices")

        message = response.choices[0].message
        tool_calls = [
            ToolCallRequest(
                id=call.id,
                name=call.function.name,
                arguments=call.function.arguments or "{}",
            )
            for call in message.tool_calls or []
        ]

        return ModelReply(content=message.content or "", tool_calls=tool_calls)

    async def close(self) -> None:
        await self._client.close()
        logger.debug("OpenAIClient closed")
