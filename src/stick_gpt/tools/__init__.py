"""Tool registration, validation and execution layer.

This package provides the ToolRegistry that holds named capabilities, the
ToolInvoker that runs single tool calls with error containment, the built-in
tools, and the MCP tool provider.
"""

from stick_gpt.tools.builtin import BUILTIN_TOOLS
from stick_gpt.tools.invoker import ToolInvoker
from stick_gpt.tools.providers import McpToolProvider, write_example_config
from stick_gpt.tools.registry import Tool, ToolProvider, ToolRegistry

__all__ = [
    "BUILTIN_TOOLS",
    "McpToolProvider",
    "Tool",
    "ToolInvoker",
    "ToolProvider",
    "ToolRegistry",
    "write_example_config",
]
