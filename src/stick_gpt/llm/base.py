"""Abstract model boundary used by the chat orchestrator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Sequence

from stick_gpt.conversation.types import ToolCallRequest, Turn


@dataclass
class ModelReply:
    """One reply from the model.

    Attributes:
        content: Text content, empty when the reply only carries tool calls
        tool_calls: Tool calls requested by the model, in order
    """

    content: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0


class ModelClient(ABC):
    """Base class for chat model backends.

    Implementations translate turns and tool schemas into their wire format,
    perform one request, and translate the answer back into a ModelReply.
    Any failure must be raised as ModelRequestError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., 'openai', 'ollama')."""
        ...

    @abstractmethod
    async def complete(
        self,
        model: str,
        turns: Sequence[Turn],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> ModelReply:
        """Request one reply from the model.

        Args:
            model: Model identifier
            turns: Full request history, system prompt first
            tools: Function-calling schemas, or None when no tools are available
            temperature: Sampling temperature
            max_tokens: Maximum number of output tokens

        Returns:
            ModelReply with content and any requested tool calls

        Raises:
            ModelRequestError: If the request fails or the response is malformed
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None
