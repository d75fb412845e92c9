"""Built-in tools for the agent.

Each handler takes the argument dict and returns a result dict with a
``success`` flag. Expected failures (missing files, failing commands) are
reported in the result rather than raised.
"""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from stick_gpt.tools.registry import Tool, empty_parameters_schema

logger = logging.getLogger(__name__)


def _path_parameters(description: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {"path": {"type": "string", "description": description}},
        "required": ["path"],
    }


def _format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def read_file(args: dict[str, Any]) -> dict[str, Any]:
    try:
        content = Path(args["path"]).read_text(encoding="utf-8")
        return {"success": True, "content": content}
    except (OSError, UnicodeDecodeError) as e:
        return {"success": False, "error": str(e)}


def write_file(args: dict[str, Any]) -> dict[str, Any]:
    try:
        Path(args["path"]).write_text(args["content"], encoding="utf-8")
        return {"success": True, "message": f"File written to {args['path']}"}
    except OSError as e:
        return {"success": False, "error": str(e)}


def list_directory(args: dict[str, Any]) -> dict[str, Any]:
    """List directory entries with type, size and modification time."""
    try:
        contents = []
        for entry in sorted(Path(args["path"]).iterdir()):
            stats = entry.stat()
            contents.append(
                {
                    "name": entry.name,
                    "type": "directory" if entry.is_dir() else "file",
                    "size": stats.st_size,
                    "modified": _format_timestamp(
                        datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc)
                    ),
                }
            )
        return {"success": True, "contents": contents}
    except OSError as e:
        return {"success": False, "error": str(e)}


async def execute_command(args: dict[str, Any]) -> dict[str, Any]:
    """Run a shell command and capture its output.

    A non-zero exit status is reported as a failure, with whatever output
    the command produced.
    """
    command = args["command"]
    logger.info(f"Executing shell command: {command}")

    try:
        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
    except OSError as e:
        return {"success": False, "error": str(e)}

    stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
    stderr = stderr_bytes.decode("utf-8", errors="replace").strip()

    if process.returncode != 0:
        return {
            "success": False,
            "error": f"Command failed with exit code {process.returncode}: {command}",
            "stdout": stdout,
            "stderr": stderr,
        }
    return {"success": True, "stdout": stdout, "stderr": stderr}


def get_current_time(args: dict[str, Any]) -> dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "success": True,
        "timestamp": _format_timestamp(now),
        "formatted": now.astimezone().strftime("%c"),
    }


def web_search(args: dict[str, Any]) -> dict[str, Any]:
    # Placeholder until a search API is wired in.
    return {
        "success": False,
        "message": "Web search is not yet implemented. This would require an external search API.",
    }


BUILTIN_TOOLS: list[Tool] = [
    Tool(
        name="read_file",
        description="Read the contents of a file from the filesystem",
        handler=read_file,
        parameters=_path_parameters("The path to the file to read"),
    ),
    Tool(
        name="write_file",
        description="Write content to a file on the filesystem",
        handler=write_file,
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "The path to the file to write"},
                "content": {
                    "type": "string",
                    "description": "The content to write to the file",
                },
            },
            "required": ["path", "content"],
        },
    ),
    Tool(
        name="list_directory",
        description="List the contents of a directory",
        handler=list_directory,
        parameters=_path_parameters("The path to the directory to list"),
    ),
    Tool(
        name="execute_command",
        description="Execute a shell command and return the output",
        handler=execute_command,
        parameters={
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The shell command to execute",
                }
            },
            "required": ["command"],
        },
    ),
    Tool(
        name="get_current_time",
        description="Get the current date and time",
        handler=get_current_time,
        parameters=empty_parameters_schema(),
    ),
    Tool(
        name="web_search",
        description="Search the web for information (placeholder)",
        handler=web_search,
        parameters={
            "type": "object",
            "properties": {"query": {"type": "string", "description": "The search query"}},
            "required": ["query"],
        },
    ),
]
