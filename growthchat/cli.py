"""Developer CLI for growthchat.

Provides subcommands for trying the chat command interpreter.

Commands:
    growthchat parse MESSAGE   - Classify one message and show the command
    growthchat chat            - Interactive session against in-memory services
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import InterpreterSettings
from .core.dispatch import OperationDispatcher
from .core.errors import InvalidMessageError
from .core.intent.parser import EntityClassifier
from .core.interpreter import ChatInterpreter
from .core.services import build_memory_services

console = Console()

LOG_FILE = "growthchat.log"
EXIT_COMMANDS = frozenset({"quit", "exit", ":q"})


def _setup_logging(settings: InterpreterSettings) -> None:
    """Configure rotating file logging.

    Logs are written to settings.log_dir. Uses INFO level by default;
    GROWTHCHAT_DEBUG=1 or --debug selects DEBUG.
    """
    log_dir = settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    # Restrict directory permissions to owner only (700)
    log_dir.chmod(0o700)

    log_file = log_dir / LOG_FILE
    log_level = logging.DEBUG if settings.debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for existing in root_logger.handlers:
        if getattr(existing, "baseFilename", None) == str(log_file.resolve()):
            return

    # 5MB max, keep 3 backups
    handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root_logger.addHandler(handler)


def _parse_now(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid ISO datetime: {value!r}") from None


def _format_value(value: object) -> str:
    if isinstance(value, (frozenset, set)):
        return ", ".join(sorted(str(v) for v in value))
    if isinstance(value, (list, tuple)):
        return " → ".join(str(v) for v in value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def parse_message(args: argparse.Namespace) -> int:
    """Classify a single message.

    Args:
        args: Parsed arguments (message, now, json, explain, settings)

    Returns:
        Exit code (0 when a command was recognized, 1 otherwise)
    """
    settings: InterpreterSettings = args.settings
    classifier = EntityClassifier(max_input_length=settings.max_input_length)
    now = _parse_now(args.now)

    command = classifier.classify(args.message, now=now)

    if args.json:
        console.print_json(json.dumps(command.to_dict() if command else None))
        return 0 if command else 1

    if command is None:
        console.print("[yellow]No command recognized.[/yellow]")
        return 1

    confidence_style = "green" if command.confidence >= settings.confidence_threshold else "yellow"
    console.print(
        f"[bold]{command.entity_type.value}[/bold] / [bold]{command.intent.value}[/bold] "
        f"[{confidence_style}]({command.confidence:.2f})[/{confidence_style}]"
    )
    console.print(f"[dim]Matched:[/dim] {escape(repr(command.raw_excerpt))}")

    if command.parameters:
        table = Table(title="Parameters")
        table.add_column("Name", style="cyan")
        table.add_column("Value")
        for key in sorted(command.parameters):
            table.add_row(key, _format_value(command.parameters[key]))
        console.print(table)

    if command.missing_parameters:
        console.print(f"[yellow]Missing:[/yellow] {', '.join(command.missing_parameters)}")

    if args.explain:
        candidates = Table(title="Candidates")
        candidates.add_column("Entity", style="cyan")
        candidates.add_column("Intent")
        candidates.add_column("Lexical", justify="right")
        candidates.add_column("Weight", justify="right")
        candidates.add_column("Evidence", justify="right")
        candidates.add_column("Rules", style="dim")
        for candidate in classifier.explain(args.message, now=now):
            candidates.add_row(
                candidate["entity_type"],
                candidate["intent"],
                f"{candidate['lexical_weight']:.2f}",
                f"{candidate['total_weight']:.2f}",
                str(candidate["evidence"]),
                escape(", ".join(candidate["rules"])),
            )
        console.print(candidates)

    return 0


def chat_session(args: argparse.Namespace) -> int:
    """Run an interactive chat session against in-memory services.

    Args:
        args: Parsed arguments (threshold, settings)

    Returns:
        Exit code (0 for success)
    """
    settings: InterpreterSettings = args.settings
    threshold = args.threshold if args.threshold is not None else settings.confidence_threshold

    interpreter = ChatInterpreter(
        EntityClassifier(max_input_length=settings.max_input_length),
        OperationDispatcher(build_memory_services(), confidence_threshold=threshold),
    )

    console.print("[bold]growthchat[/bold] [dim](type 'quit' to exit)[/dim]")
    while True:
        try:
            line = console.input("[bold cyan]you>[/bold cyan] ")
        except EOFError:
            console.print()
            break

        line = line.strip()
        if not line:
            continue
        if line.lower() in EXIT_COMMANDS:
            break

        try:
            reply = asyncio.run(interpreter.handle(line))
        except InvalidMessageError as e:
            console.print(f"[red]Error:[/red] {e}")
            continue

        style = "green" if reply.handled else "yellow"
        console.print(f"[{style}]{escape(reply.text)}[/{style}]")
        for suggestion in reply.suggestions[1:]:
            console.print(f"[dim]  - {escape(suggestion.text)}[/dim]")

    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="growthchat",
        description="growthchat: chat command interpreter for growth journaling",
    )
    parser.add_argument(
        "--project",
        "-p",
        dest="project_path",
        default=".",
        help="Path to project directory holding .growthchat/config.yaml (default: .)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable DEBUG logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # =========================================================================
    # parse command
    # =========================================================================
    parse_parser = subparsers.add_parser("parse", help="Classify a single message")
    parse_parser.add_argument("message", help="Chat message to classify")
    parse_parser.add_argument(
        "--now",
        help="Reference time as an ISO datetime (default: current time)",
    )
    parse_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the parsed command as JSON",
    )
    parse_parser.add_argument(
        "--explain",
        action="store_true",
        help="Show every candidate considered",
    )
    parse_parser.set_defaults(func=parse_message)

    # =========================================================================
    # chat command
    # =========================================================================
    chat_parser = subparsers.add_parser("chat", help="Interactive session with in-memory services")
    chat_parser.add_argument(
        "--threshold",
        "-t",
        type=float,
        help="Confidence threshold for dispatch (default: from settings)",
    )
    chat_parser.set_defaults(func=chat_session)

    return parser


def run_cli(args: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not hasattr(parsed, "func"):
        parser.print_help()
        return 0

    try:
        settings = InterpreterSettings.load(Path(parsed.project_path).resolve())
        if parsed.debug:
            settings.debug = True
        _setup_logging(settings)
        parsed.settings = settings
        return parsed.func(parsed)
    except KeyboardInterrupt:
        console.print("\n[dim]Cancelled.[/dim]")
        return 130
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1


def main() -> None:
    """Console script entry point."""
    sys.exit(run_cli())


__all__ = [
    "chat_session",
    "create_parser",
    "main",
    "parse_message",
    "run_cli",
]
