#!/usr/bin/env python3
"""
Quicklaunch - Rule-Based Command Dispatcher
===========================================

Text-mode shell around the action dispatcher.

Usage:
    python main.py "!ls"          # Dispatch one piece of text
    python main.py                # Interactive text mode
    python main.py --list         # Show configured actions
    python main.py --help         # Show help
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from actions import (
    ActionDispatcher, ActionStore, DispatchResult, DispatchStatus,
    get_action_store, release_action_store,
)
from core import ConfigError, ErrorHandler, load_settings
from infra import ConfigChannel, SpawnContext, configure_logging


console = Console()


def print_actions(store: ActionStore) -> None:
    """Print the actions in match order."""
    table = Table(title="Actions", show_lines=False)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Pattern", style="yellow")
    table.add_column("Command")

    for action in store.actions:
        table.add_row(str(action.unique_id), action.type.name, action.pattern, action.command)

    console.print(table)


def report(result: DispatchResult, errors: ErrorHandler) -> int:
    """Print a dispatch result and return the process exit code."""
    if result.status == DispatchStatus.SUCCEEDED:
        console.print(f"[bold green]Launched:[/bold green] {result.command}")
        return 0
    if result.status == DispatchStatus.NOTHING_FOUND:
        console.print(f"[yellow]No action matches[/yellow] {result.text!r}")
        return 1

    console.print(f"[bold red]Error:[/bold red] {errors.handle(result.error)}")
    return 2


def run_text_mode(dispatcher: ActionDispatcher, context: SpawnContext, errors: ErrorHandler) -> None:
    """Read lines and dispatch them until EOF or 'quit'."""
    console.print(Panel(
        "Text Input Mode\nType text to dispatch. Type 'list' to show actions, 'quit' to exit.",
        border_style="blue",
    ))

    channel = dispatcher.store.channel
    while True:
        try:
            text = console.input("[bold blue]> [/bold blue]")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        if text.strip() == "quit":
            break
        # Pick up edits made to the channel file since the last command
        try:
            channel.reload()
        except ConfigError as e:
            console.print(f"[bold red]Error:[/bold red] {errors.handle(e)}")
        if text.strip() == "list":
            print_actions(dispatcher.store)
            continue
        if text:
            report(dispatcher.execute(text, context), errors)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Quicklaunch - run commands from prefix and regex actions"
    )
    parser.add_argument("text", nargs="?", help="Text to dispatch (omit for interactive mode)")
    parser.add_argument("--list", action="store_true", help="List configured actions")
    parser.add_argument("--settings", help="Path to settings.yaml")
    parser.add_argument("--channel", help="Path to the actions channel file")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except ConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        return 2

    if args.log_level:
        settings.log_level = args.log_level
    if args.channel:
        settings.channel_path = args.channel

    configure_logging(
        level=settings.log_level_number,
        log_dir=settings.log_dir,
        file=settings.log_to_file,
    )

    try:
        channel = ConfigChannel(path=str(settings.resolved_channel_path()))
    except ConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        return 2

    store = get_action_store(channel)
    try:
        errors = ErrorHandler()
        dispatcher = ActionDispatcher(store)
        context = SpawnContext(display=settings.display)

        if args.list:
            print_actions(store)
            return 0
        if args.text is not None:
            return report(dispatcher.execute(args.text, context), errors)

        run_text_mode(dispatcher, context, errors)
        return 0
    finally:
        release_action_store(store)


if __name__ == "__main__":
    sys.exit(main())
