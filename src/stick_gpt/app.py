"""Agent factory.

This module contains the create_agent() factory function that builds a model
client, a tool registry and a ChatOrchestrator from settings.
"""

import logging
from pathlib import Path
from typing import Callable

from stick_gpt.agents import ChatOrchestrator
from stick_gpt.config import StickGptSettings
from stick_gpt.conversation import ToolCallRequest
from stick_gpt.exceptions import ConfigurationError
from stick_gpt.llm import ModelClient, OllamaClient, OpenAIClient
from stick_gpt.tools import BUILTIN_TOOLS, McpToolProvider, ToolRegistry

logger = logging.getLogger(__name__)

PROVIDERS = ("openai", "ollama")


def create_client(settings: StickGptSettings) -> ModelClient:
    """Create the model client for the configured provider.

    Raises:
        ConfigurationError: If the provider is unknown or its credential is missing
    """
    if settings.provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError(
                "OpenAI API key is required. Set OPENAI_API_KEY environment "
                "variable or pass it in the settings."
            )
        return OpenAIClient(api_key=settings.openai_api_key)

    if settings.provider == "ollama":
        return OllamaClient(host=settings.ollama_host)

    raise ConfigurationError(
        f"Unknown provider '{settings.provider}' (expected one of: {', '.join(PROVIDERS)})"
    )


def create_registry(
    builtin_tools: bool = True, mcp_config: Path | str | None = None
) -> ToolRegistry:
    """Create a tool registry with built-in and MCP tools.

    Args:
        builtin_tools: Whether to register the built-in tools
        mcp_config: Optional MCP config file or directory

    Raises:
        McpConfigError: If the MCP config path cannot be loaded
    """
    registry = ToolRegistry()

    if builtin_tools:
        for tool in BUILTIN_TOOLS:
            registry.register(tool)

    if mcp_config is not None:
        provider = McpToolProvider()
        provider.load(mcp_config)
        registry.register_provider(provider)

    return registry


def create_agent(
    settings: StickGptSettings | None = None,
    builtin_tools: bool = True,
    mcp_config: Path | str | None = None,
    on_tool_call: Callable[[ToolCallRequest], None] | None = None,
) -> ChatOrchestrator:
    """Create and configure a ChatOrchestrator.

    Args:
        settings: Optional settings instance. If not provided, settings are
                  loaded from environment variables and .env.
        builtin_tools: Whether to register the built-in tools
        mcp_config: Optional MCP config file or directory
        on_tool_call: Callback invoked before each tool call

    Returns:
        ChatOrchestrator: Configured orchestrator

    Raises:
        ConfigurationError: If the model client cannot be created or the
            iteration limit is below 1
    """
    if settings is None:
        settings = StickGptSettings()

    if settings.max_iterations is not None and settings.max_iterations < 1:
        raise ConfigurationError(
            f"max_iterations must be at least 1, got {settings.max_iterations}"
        )

    client = create_client(settings)
    registry = create_registry(builtin_tools=builtin_tools, mcp_config=mcp_config)

    logger.info(
        f"Created agent with provider {client.name}, model {settings.resolved_model}, "
        f"{len(registry)} tools"
    )

    return ChatOrchestrator(
        client,
        registry,
        model=settings.resolved_model,
        system_prompt=settings.system_prompt,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        max_iterations=settings.max_iterations,
        parallel_tool_calls=settings.parallel_tool_calls,
        on_tool_call=on_tool_call,
    )
