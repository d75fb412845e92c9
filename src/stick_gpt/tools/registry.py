"""Tool registry for named capabilities exposed to the model.

The registry is keyed by tool name. Registering a name that already exists
replaces the earlier tool (last write wins) while keeping its original
position in the listing order.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Protocol, runtime_checkable

from stick_gpt.exceptions import ToolNotFoundError, ToolRegistrationError
from stick_gpt.tools.arguments import schema_problems

logger = logging.getLogger(__name__)


def empty_parameters_schema() -> dict[str, Any]:
    """JSON Schema used for tools that declare no parameters."""
    return {"type": "object", "properties": {}, "required": []}


@dataclass(frozen=True)
class Tool:
    """A named capability the model can call.

    Attributes:
        name: Unique tool name used by the model to request the tool
        description: Model-facing documentation
        handler: Callable taking the argument dict; may be sync or async
        parameters: JSON Schema describing the expected arguments
    """

    name: str
    description: str
    handler: Callable[[dict[str, Any]], Any]
    parameters: dict[str, Any] | None = field(default=None)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Tool":
        """Build a Tool from a plain mapping.

        Raises:
            ToolRegistrationError: If name, description or handler is missing
        """
        missing = [key for key in ("name", "description", "handler") if not data.get(key)]
        if missing:
            raise ToolRegistrationError(
                f"Tool must have name, description, and handler properties "
                f"(missing: {', '.join(missing)})"
            )
        return cls(
            name=data["name"],
            description=data["description"],
            handler=data["handler"],
            parameters=data.get("parameters"),
        )

    def to_schema(self) -> dict[str, Any]:
        """Return the function-calling schema for this tool."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters or empty_parameters_schema(),
            },
        }


@runtime_checkable
class ToolProvider(Protocol):
    """A source of tools that are described and executed together.

    Any object exposing describe() and invoke() can be registered with
    ToolRegistry.register_provider(); its tools are then looked up exactly
    like built-in tools.
    """

    def describe(self) -> list[dict[str, Any]]:
        """Return the tools as ``{"name", "description", "parameters"}`` dicts."""
        ...

    def invoke(self, name: str, args: dict[str, Any]) -> Any:
        """Execute the named tool with the given arguments."""
        ...


class ToolRegistry:
    """Holds registered tools and resolves them by name."""

    def __init__(self, tools: list[Tool | Mapping[str, Any]] | None = None):
        self._tools: dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(list(self._tools.values()))

    def register(self, tool: Tool | Mapping[str, Any]) -> Tool:
        """Register a tool.

        Args:
            tool: A Tool, or a mapping with name, description, handler and
                  optional parameters

        Returns:
            The registered Tool

        Raises:
            ToolRegistrationError: If the definition is incomplete or its
                parameter schema is malformed
        """
        if not isinstance(tool, Tool):
            if not isinstance(tool, Mapping):
                raise ToolRegistrationError(
                    f"Cannot register {type(tool).__name__} as a tool"
                )
            tool = Tool.from_mapping(tool)

        if not tool.name or not tool.description:
            raise ToolRegistrationError("Tool must have a non-empty name and description")
        if not callable(tool.handler):
            raise ToolRegistrationError(f"Handler of tool '{tool.name}' is not callable")
        problems = schema_problems(tool.parameters)
        if problems:
            raise ToolRegistrationError(
                f"Invalid parameter schema for tool '{tool.name}': {'; '.join(problems)}"
            )

        if tool.name in self._tools:
            logger.warning(f"Tool '{tool.name}' registered twice, replacing earlier definition")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")
        return tool

    def register_provider(self, provider: ToolProvider) -> list[Tool]:
        """Register every tool described by a ToolProvider.

        Args:
            provider: Object exposing describe() and invoke()

        Returns:
            The registered tools
        """
        registered = []
        for schema in provider.describe():
            name = schema.get("name")

            def handler(args: dict[str, Any], _name: str | None = name) -> Any:
                return provider.invoke(_name, args)

            registered.append(
                self.register(
                    {
                        "name": name,
                        "description": schema.get("description"),
                        "parameters": schema.get("parameters"),
                        "handler": handler,
                    }
                )
            )
        logger.info(f"Registered {len(registered)} tools from {type(provider).__name__}")
        return registered

    def lookup(self, name: str) -> Tool:
        """Resolve a tool by name.

        Raises:
            ToolNotFoundError: If no tool with that name is registered
        """
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def names(self) -> list[str]:
        return list(self._tools)

    def describe_all(self) -> list[dict[str, Any]]:
        """Return the model-facing schema list, in registration order."""
        return [tool.to_schema() for tool in self._tools.values()]
