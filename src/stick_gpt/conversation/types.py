"""Data types for conversation history.

This module defines the Turn and ToolCallRequest records that make up a
conversation. Both are frozen: once a turn is appended it is never mutated.
"""

from dataclasses import dataclass, field
from typing import Any

ROLES = ("system", "user", "assistant", "tool")


@dataclass(frozen=True)
class ToolCallRequest:
    """A model-issued request to execute a named tool.

    Attributes:
        id: Identifier the tool result turn refers back to
        name: Name of the requested tool
        arguments: Argument payload as JSON text, exactly as the model sent it
    """

    id: str
    name: str
    arguments: str = "{}"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "arguments": self.arguments}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolCallRequest":
        return cls(
            id=data["id"],
            name=data["name"],
            arguments=data.get("arguments", "{}"),
        )


@dataclass(frozen=True)
class Turn:
    """One role-tagged entry in a conversation.

    Attributes:
        role: One of "system", "user", "assistant", "tool"
        content: Text content, empty when an assistant turn only carries tool calls
        tool_calls: Tool calls requested by an assistant turn
        tool_call_id: On tool turns, the id of the originating ToolCallRequest
        name: On tool turns, the name of the tool that produced the result
    """

    role: str
    content: str = ""
    tool_calls: tuple[ToolCallRequest, ...] = field(default_factory=tuple)
    tool_call_id: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        """Validate the role and normalise tool_calls to a tuple."""
        if self.role not in ROLES:
            raise ValueError(f"Unknown turn role: {self.role}")
        if not isinstance(self.tool_calls, tuple):
            object.__setattr__(self, "tool_calls", tuple(self.tool_calls))

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(role="user", content=content)

    @classmethod
    def system(cls, content: str) -> "Turn":
        return cls(role="system", content=content)

    @classmethod
    def assistant(
        cls, content: str | None, tool_calls: list[ToolCallRequest] | None = None
    ) -> "Turn":
        return cls(role="assistant", content=content or "", tool_calls=tuple(tool_calls or ()))

    @classmethod
    def tool(cls, tool_call_id: str, content: str, name: str | None = None) -> "Turn":
        return cls(role="tool", content=content, tool_call_id=tool_call_id, name=name)

    def to_dict(self) -> dict[str, Any]:
        """Convert the turn to a JSON-serializable dictionary.

        Optional fields are omitted when unset so persisted files stay close
        to the chat message format.
        """
        data: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id
        if self.name is not None:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Turn":
        """Convert a dictionary produced by to_dict() back into a Turn.

        Raises:
            ValueError: If the role is missing or unknown
        """
        role = data.get("role")
        if role not in ROLES:
            raise ValueError(f"Unknown turn role: {role}")

        return cls(
            role=role,
            content=data.get("content") or "",
            tool_calls=tuple(
                ToolCallRequest.from_dict(call) for call in data.get("tool_calls") or []
            ),
            tool_call_id=data.get("tool_call_id"),
            name=data.get("name"),
        )
