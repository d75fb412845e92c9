"""Execution of single tool calls against a ToolRegistry."""

import inspect
import logging
from typing import Any

from stick_gpt.exceptions import ArgumentParseError, ToolExecutionError, ToolNotFoundError
from stick_gpt.tools.arguments import validate_arguments
from stick_gpt.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolInvoker:
    """Executes tool calls and converts failures into structured results.

    Nothing raised while resolving, validating or running a tool crosses
    invoke(): an unknown tool, invalid arguments or a failing handler all
    come back as ``{"error": message}``. Handler return values are passed
    through unchanged.

    Attributes:
        registry: The registry tools are resolved from
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    async def invoke(self, name: str, args: dict[str, Any]) -> Any:
        """Invoke a tool by name.

        Args:
            name: The tool name requested by the model
            args: Parsed arguments

        Returns:
            The handler's return value, or ``{"error": message}``
        """
        try:
            return await self._call(name, args)
        except ToolNotFoundError as e:
            logger.warning(f"Model requested unknown tool: {name}")
            return {"error": str(e)}
        except ArgumentParseError as e:
            logger.warning(f"Invalid arguments for tool {name}: {e}")
            return {"error": str(e)}
        except ToolExecutionError as e:
            logger.warning(f"Tool {name} failed: {e}")
            return {"error": str(e)}

    async def _call(self, name: str, args: dict[str, Any]) -> Any:
        tool = self.registry.lookup(name)
        validate_arguments(args, tool.parameters)

        logger.debug(f"Invoking tool {name} with {args}")
        try:
            result = tool.handler(args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise ToolExecutionError(name, e) from e
        return result
