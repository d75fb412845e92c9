"""MCP (Model Context Protocol) tool provider.

McpToolProvider loads MCP configuration files and exposes the tools they
declare through the ToolProvider interface. Talking to an actual MCP server
is not implemented yet: invoking one of these tools returns a structured
"not implemented" result.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from stick_gpt.exceptions import McpConfigError
from stick_gpt.tools.registry import empty_parameters_schema

logger = logging.getLogger(__name__)


class McpToolDefinition(BaseModel):
    """A tool declared in an MCP configuration file."""

    name: str = Field(default="unknown_tool", description="Tool name")
    description: str = Field(default="MCP tool", description="Model-facing description")
    parameters: dict[str, Any] = Field(
        default_factory=empty_parameters_schema,
        description="JSON Schema of the tool arguments",
    )


class McpConfig(BaseModel):
    """Schema of an MCP configuration file."""

    name: str = Field(default="", description="Configuration name")
    version: str = Field(default="", description="Configuration version")
    description: str = Field(default="", description="Human-readable description")
    tools: list[McpToolDefinition] = Field(default_factory=list)


EXAMPLE_CONFIG = McpConfig(
    name="example-mcp",
    version="1.0.0",
    description="Example MCP configuration",
    tools=[
        McpToolDefinition(
            name="example_tool",
            description="An example MCP tool",
            parameters={
                "type": "object",
                "properties": {
                    "input": {"type": "string", "description": "Example input parameter"}
                },
                "required": ["input"],
            },
        )
    ],
)


class McpToolProvider:
    """Tool provider backed by MCP configuration files.

    Attributes:
        configs: Configurations loaded so far, in load order
    """

    def __init__(self) -> None:
        self.configs: list[McpConfig] = []
        self._tools: dict[str, McpToolDefinition] = {}

    def load_config(self, config_path: Path | str) -> McpConfig:
        """Load a single MCP configuration file.

        Args:
            config_path: Path to a JSON configuration file

        Returns:
            The parsed configuration

        Raises:
            McpConfigError: If the file is missing, not JSON, or invalid
        """
        path = Path(config_path)
        if not path.is_file():
            raise McpConfigError(f"MCP config file not found: {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            config = McpConfig.model_validate(data)
        except json.JSONDecodeError as e:
            raise McpConfigError(f"MCP config {path} is not valid JSON: {e}") from e
        except ValidationError as e:
            raise McpConfigError(f"MCP config {path} is invalid: {e}") from e

        self.configs.append(config)
        for tool in config.tools:
            self._tools[tool.name] = tool

        logger.info(f"Loaded MCP config from {path} ({len(config.tools)} tools)")
        return config

    def load_config_directory(self, config_dir: Path | str) -> list[McpConfig]:
        """Load every ``*.json`` file in a directory.

        Files that fail to load are logged and skipped.

        Raises:
            McpConfigError: If the directory does not exist
        """
        directory = Path(config_dir)
        if not directory.is_dir():
            raise McpConfigError(f"Config directory not found: {directory}")

        loaded = []
        for file_path in sorted(directory.glob("*.json")):
            try:
                loaded.append(self.load_config(file_path))
            except McpConfigError as e:
                logger.warning(f"Skipping MCP config {file_path.name}: {e}")
                continue

        logger.info(f"Loaded {len(loaded)} MCP config(s) from {directory}")
        return loaded

    def load(self, path: Path | str) -> list[McpConfig]:
        """Load a configuration file, or every configuration in a directory."""
        if Path(path).is_dir():
            return self.load_config_directory(path)
        return [self.load_config(path)]

    def describe(self) -> list[dict[str, Any]]:
        return [tool.model_dump() for tool in self._tools.values()]

    def invoke(self, name: str, args: dict[str, Any]) -> dict[str, Any]:
        return {
            "success": False,
            "message": "MCP tool execution is not yet fully implemented",
            "tool": name,
            "args": args,
        }


def write_example_config(output_path: Path | str) -> Path:
    """Write an example MCP configuration file.

    Returns:
        The path written to
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(EXAMPLE_CONFIG.model_dump(), indent=2) + "\n", encoding="utf-8"
    )
    logger.info(f"Example MCP config written to {path}")
    return path
