"""CLI commands for the queries NLU engine.

Provides subcommands to run an engine configuration against text.

Commands:
    queries --config ENGINE parse TEXT          - Detect the intent and slots of TEXT
    queries --config ENGINE extract-slot TEXT INTENT SLOT
                                                - Extract one slot of a known intent
    queries --config ENGINE tag TEXT INTENT     - Tag the entities of INTENT in TEXT
    queries version                             - Show the model version
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .config import EngineSettings
from .core.engine import NLUEngine
from .core.errors import QueriesError

console = Console()


def _load_settings(args: argparse.Namespace) -> EngineSettings:
    if args.settings_path:
        return EngineSettings.load(Path(args.settings_path))
    return EngineSettings()


def _load_engine(args: argparse.Namespace) -> NLUEngine | None:
    if not args.config_path:
        console.print("[red]Error:[/red] --config is required for this command")
        return None
    return NLUEngine.from_path(Path(args.config_path), args.settings)


def _print_json(data: object) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False))


def parse_text(args: argparse.Namespace) -> int:
    """Parse text and print the result.

    Args:
        args: Parsed arguments (text, intents)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    engine = _load_engine(args)
    if engine is None:
        return 1
    result = engine.parse(args.text, args.intents or None)
    _print_json(result.to_dict())
    return 0


def extract_slot(args: argparse.Namespace) -> int:
    """Extract one slot and print it.

    Args:
        args: Parsed arguments (text, intent, slot)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    engine = _load_engine(args)
    if engine is None:
        return 1
    slot = engine.extract_slot(args.text, args.intent, args.slot)
    _print_json(slot.to_dict() if slot is not None else None)
    return 0


def tag_text(args: argparse.Namespace) -> int:
    """Tag the entities of an intent and print them.

    Args:
        args: Parsed arguments (text, intent, threshold)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    engine = _load_engine(args)
    if engine is None:
        return 1
    tagged = engine.tag(args.text, args.intent, args.threshold)
    _print_json([t.to_dict() for t in tagged])
    return 0


def show_version(args: argparse.Namespace) -> int:
    """Print the model version."""
    console.print(NLUEngine.model_version())
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="queries",
        description="queries: offline intent parsing and slot filling",
    )
    parser.add_argument(
        "--config",
        "-c",
        dest="config_path",
        help="Path to the engine configuration (.json, .yaml)",
    )
    parser.add_argument(
        "--settings",
        "-s",
        dest="settings_path",
        help="Path to a YAML settings file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # =========================================================================
    # parse command
    # =========================================================================
    parse_parser = subparsers.add_parser("parse", help="Detect intent and slots")
    parse_parser.add_argument("text", help="Text to parse")
    parse_parser.add_argument(
        "--intent",
        "-i",
        dest="intents",
        action="append",
        help="Restrict detection to this intent (repeatable)",
    )
    parse_parser.set_defaults(func=parse_text)

    # =========================================================================
    # extract-slot command
    # =========================================================================
    slot_parser = subparsers.add_parser("extract-slot", help="Extract one slot of a known intent")
    slot_parser.add_argument("text", help="Text holding the slot value")
    slot_parser.add_argument("intent", help="Intent owning the slot")
    slot_parser.add_argument("slot", help="Slot name")
    slot_parser.set_defaults(func=extract_slot)

    # =========================================================================
    # tag command
    # =========================================================================
    tag_parser = subparsers.add_parser("tag", help="Tag the entities of an intent")
    tag_parser.add_argument("text", help="Text to tag")
    tag_parser.add_argument("intent", help="Intent whose entities are tagged")
    tag_parser.add_argument(
        "--threshold",
        "-t",
        type=int,
        help="Low-data threshold (default: from settings)",
    )
    tag_parser.set_defaults(func=tag_text)

    # =========================================================================
    # version command
    # =========================================================================
    version_parser = subparsers.add_parser("version", help="Show the model version")
    version_parser.set_defaults(func=show_version)

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
        parsed.settings = _load_settings(parsed)
        logging.basicConfig(
            level=parsed.settings.log_level.upper(),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        return parsed.func(parsed)
    except KeyboardInterrupt:
        console.print("\n[dim]Cancelled.[/dim]")
        return 130
    except (QueriesError, ValidationError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1


def main() -> None:
    """Entry point for the ``queries`` console script."""
    sys.exit(run_cli())


__all__ = [
    "create_parser",
    "run_cli",
    "main",
    "parse_text",
    "extract_slot",
    "tag_text",
    "show_version",
]
