"""CLI entry point for stick-gpt.

This module provides the command-line interface for chatting with the agent.
It can be invoked as `stick-gpt` (via the script entry point) or
`python -m stick_gpt`.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from stick_gpt import __version__
from stick_gpt.agents import ChatOrchestrator
from stick_gpt.app import PROVIDERS, create_agent, create_registry
from stick_gpt.config import StickGptSettings
from stick_gpt.conversation import ToolCallRequest
from stick_gpt.exceptions import StickGptError
from stick_gpt.llm import OllamaClient
from stick_gpt.tools import write_example_config

logger = logging.getLogger(__name__)

console = Console()

EXIT_COMMANDS = ("exit", "quit")


def _add_agent_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m",
        "--model",
        type=str,
        default=None,
        help=(
            "Model to use (default: gpt-4o-mini on openai, llama3.2:latest on ollama, "
            "can be set via STICK_MODEL)"
        ),
    )
    parser.add_argument(
        "-t",
        "--temperature",
        type=float,
        default=None,
        help="Temperature for generation (default: 0.7, can be set via STICK_TEMPERATURE)",
    )
    parser.add_argument(
        "-s",
        "--system",
        type=str,
        default=None,
        help="Custom system prompt",
    )
    parser.add_argument(
        "--provider",
        type=str,
        default=None,
        choices=PROVIDERS,
        help="Model backend (default: openai, can be set via STICK_PROVIDER)",
    )
    parser.add_argument(
        "--no-tools",
        dest="tools",
        action="store_false",
        help="Disable built-in tools",
    )
    parser.add_argument(
        "--mcp-config",
        type=Path,
        default=None,
        help="Path to MCP configuration file or directory",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="stick-gpt",
        description="Local GPT agent with tool calling and MCP integrations",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"stick-gpt {__version__}",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING, can be set via STICK_LOG_LEVEL)",
    )

    subparsers = parser.add_subparsers(dest="command")

    chat_parser = subparsers.add_parser("chat", help="Start an interactive chat session")
    _add_agent_options(chat_parser)
    chat_parser.add_argument(
        "--history",
        type=Path,
        default=None,
        help="Conversation file to restore on start and save after each answer",
    )

    ask_parser = subparsers.add_parser("ask", help="Ask a single question and get a response")
    ask_parser.add_argument("question", type=str, help="The question to ask")
    _add_agent_options(ask_parser)

    tools_parser = subparsers.add_parser("tools", help="List available tools")
    tools_parser.add_argument(
        "--mcp-config",
        type=Path,
        default=None,
        help="Also list tools from this MCP configuration file or directory",
    )

    example_parser = subparsers.add_parser(
        "mcp-example", help="Create an example MCP configuration file"
    )
    example_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("./mcp-config.json"),
        help="Output path (default: ./mcp-config.json)",
    )

    return parser


def build_settings(args: argparse.Namespace) -> StickGptSettings:
    """Build settings; CLI args override environment variables."""
    settings_kwargs = {}
    for arg_name, setting_name in (
        ("model", "model"),
        ("temperature", "temperature"),
        ("system", "system_prompt"),
        ("provider", "provider"),
        ("log_level", "log_level"),
    ):
        value = getattr(args, arg_name, None)
        if value is not None:
            settings_kwargs[setting_name] = value

    return StickGptSettings(**settings_kwargs)


def print_tool_call(call: ToolCallRequest) -> None:
    console.print(f"\n[dim][Tool Call] {escape(call.name)}({escape(call.arguments)})[/dim]")


def _create_agent(args: argparse.Namespace, settings: StickGptSettings) -> ChatOrchestrator:
    return create_agent(
        settings,
        builtin_tools=args.tools,
        mcp_config=args.mcp_config,
        on_tool_call=print_tool_call,
    )


def _chat_loop(runner: asyncio.Runner, agent: ChatOrchestrator, history: Path | None) -> None:
    console.print(
        "[yellow]Type your message or \"exit\" to quit, \"reset\" to clear conversation[/yellow]\n"
    )

    # Input stays on the main thread so Ctrl+C at the prompt raises KeyboardInterrupt.
    try:
        while True:
            try:
                line = console.input("[cyan]You: [/cyan]")
            except (EOFError, KeyboardInterrupt):
                break

            user_input = line.strip()

            if user_input.lower() in EXIT_COMMANDS:
                break

            if user_input.lower() == "reset":
                agent.reset()
                if history is not None:
                    agent.save_conversation(history)
                console.print("\n[yellow]✓ Conversation reset[/yellow]\n")
                continue

            if not user_input:
                continue

            try:
                with console.status("Thinking..."):
                    response = runner.run(agent.send(user_input))
            except StickGptError as e:
                console.print(f"\n[red]Error: {escape(str(e))}[/red]\n")
                continue
            except KeyboardInterrupt:
                break

            console.print(f"\n[green]Assistant:[/green] {escape(response)}\n")
            if history is not None:
                agent.save_conversation(history)
    finally:
        runner.run(agent.client.close())
        console.print("\n[blue]Goodbye! 👋[/blue]\n")


def run_chat(args: argparse.Namespace, settings: StickGptSettings) -> int:
    """Run the interactive chat command."""
    console.print("\n[bold blue]🤖 Stick.GPT - Local GPT Agent[/bold blue]\n")

    try:
        agent = _create_agent(args, settings)
        if args.history is not None and agent.load_conversation(args.history):
            console.print(
                f"[dim]Restored {len(agent.get_history())} turns from {args.history}[/dim]"
            )
    except (StickGptError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    console.print(f"[dim]Model: {escape(agent.model)} ({agent.client.name})[/dim]")
    console.print(f"[dim]Tools: {len(agent.registry)} available[/dim]\n")

    with asyncio.Runner() as runner:
        if isinstance(agent.client, OllamaClient):
            if not runner.run(agent.client.check_connection()):
                console.print(
                    f"[yellow]Could not connect to Ollama at {escape(agent.client.host)} "
                    f"- check if server is running[/yellow]\n"
                )
        _chat_loop(runner, agent, args.history)
    return 0


async def _ask(agent: ChatOrchestrator, question: str) -> str:
    try:
        with console.status("Thinking..."):
            return await agent.send(question)
    finally:
        await agent.client.close()


def run_ask(args: argparse.Namespace, settings: StickGptSettings) -> int:
    """Run the single-question command."""
    try:
        agent = _create_agent(args, settings)
        response = asyncio.run(_ask(agent, args.question))
    except StickGptError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    console.print(f"\n[green]Assistant:[/green] {escape(response)}\n")
    return 0


def run_tools(args: argparse.Namespace) -> int:
    """List the registered tools."""
    try:
        registry = create_registry(builtin_tools=True, mcp_config=args.mcp_config)
    except StickGptError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    console.print("\n[bold blue]📦 Available Tools:[/bold blue]\n")
    for tool in registry:
        console.print(f"  [cyan]{escape(tool.name)}[/cyan] [dim]- {escape(tool.description)}[/dim]")
    console.print()
    return 0


def run_mcp_example(args: argparse.Namespace) -> int:
    """Write an example MCP configuration file."""
    try:
        path = write_example_config(args.output)
    except OSError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        return 1

    console.print(f"[green]✓ Example config written to {escape(str(path))}[/green]")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the stick-gpt CLI.

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = build_settings(args)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        return 1

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug(f"Settings: {json.dumps(settings.model_dump(exclude={'openai_api_key'}))}")

    if args.command == "chat":
        return run_chat(args, settings)
    if args.command == "ask":
        return run_ask(args, settings)
    if args.command == "tools":
        return run_tools(args)
    return run_mcp_example(args)


if __name__ == "__main__":
    sys.exit(main())
