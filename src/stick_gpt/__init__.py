"""stick-gpt: Local LLM agent with tool calling and MCP integrations.

This package provides a tool-calling chat orchestrator, built-in local tools,
OpenAI and Ollama model backends, and a command-line interface.
"""

from stick_gpt.agents import ChatOrchestrator
from stick_gpt.app import create_agent
from stick_gpt.tools import BUILTIN_TOOLS, McpToolProvider, Tool, ToolRegistry

__version__ = "1.0.0"

__all__ = [
    "BUILTIN_TOOLS",
    "ChatOrchestrator",
    "McpToolProvider",
    "Tool",
    "ToolRegistry",
    "create_agent",
    "__version__",
]
