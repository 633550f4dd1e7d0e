"""
qsheet.cli - Command-line interface.

Main entry point for the qsheet CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from qsheet import __version__
from qsheet.commands import config_cmd, edit, seed_cmd, serve, show
from qsheet.sheet.entities import Difficulty

EDIT_COMMANDS = ("add", "rename", "update", "delete", "reorder", "move")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="qsheet",
        description="Hierarchical question sheet editor (topics, sub-topics, questions)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  qsheet show                          # Print the sheet outline
  qsheet show --ids                    # Include entity ids
  qsheet add topic "Graphs"            # Add a topic (prints its id)
  qsheet add question SUB "Two Sum" --difficulty Easy
  qsheet move question Q --from SUB1 --to SUB2 --index 0
  qsheet serve                         # REST API on 127.0.0.1:5055

Data:
  qsheet seed                          # Reload the sheet from the remote source
  qsheet seed --offline                # Reload the built-in sheet
  qsheet reset                         # Delete the stored sheet

Configuration:
  qsheet config init                   # Create .qsheet.toml in current directory
  qsheet config show                   # View all settings

For detailed command help: qsheet <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"qsheet {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "--storage",
        type=Path,
        help="Override the sheet storage file",
        metavar="PATH",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Never fetch the remote sheet; seed from the built-in sheet",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # show command
    show_parser = subparsers.add_parser("show", help="Print the sheet")
    show_parser.add_argument("--topic", help="Only this topic", metavar="ID")
    show_parser.add_argument("-j", "--json", action="store_true", help="Nested JSON output")
    show_parser.add_argument("--ids", action="store_true", help="Include entity ids")

    # check command
    subparsers.add_parser("check", help="Check the stored sheet for structural problems")

    # add command
    add_parser = subparsers.add_parser("add", help="Add a topic, sub-topic or question")
    add_sub = add_parser.add_subparsers(dest="kind", help="What to add")
    add_topic = add_sub.add_parser("topic", help="Add a topic at the end of the sheet")
    add_topic.add_argument("name", help="Topic name")
    add_subtopic = add_sub.add_parser("subtopic", help="Add a sub-topic to a topic")
    add_subtopic.add_argument("parent", help="Topic id")
    add_subtopic.add_argument("name", help="Sub-topic name")
    add_question = add_sub.add_parser("question", help="Add a question to a sub-topic")
    add_question.add_argument("parent", help="Sub-topic id")
    add_question.add_argument("name", help="Question title")
    add_question.add_argument("--difficulty", choices=Difficulty.values())
    add_question.add_argument("--link", help="Problem URL (http or https)")

    # rename command
    rename_parser = subparsers.add_parser("rename", help="Rename a topic, sub-topic or question")
    rename_sub = rename_parser.add_subparsers(dest="kind", help="What to rename")
    for kind in ("topic", "subtopic", "question"):
        kind_parser = rename_sub.add_parser(kind, help=f"Rename a {kind}")
        kind_parser.add_argument("id", help=f"{kind.capitalize()} id")
        kind_parser.add_argument("name", help="New name")

    # update command
    update_parser = subparsers.add_parser(
        "update",
        help="Update question fields",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Omitted options keep their current value; an empty string clears
difficulty or link:
  qsheet update Q --difficulty Hard
  qsheet update Q --link ""
""",
    )
    update_parser.add_argument("id", help="Question id")
    update_parser.add_argument("--title", help="New title")
    update_parser.add_argument("--difficulty", choices=Difficulty.values() + [""])
    update_parser.add_argument("--link", help="New problem URL")

    # delete command
    delete_parser = subparsers.add_parser(
        "delete", help="Delete a topic, sub-topic or question (with descendants)"
    )
    delete_sub = delete_parser.add_subparsers(dest="kind", help="What to delete")
    for kind in ("topic", "subtopic", "question"):
        kind_parser = delete_sub.add_parser(kind, help=f"Delete a {kind}")
        kind_parser.add_argument("id", help=f"{kind.capitalize()} id")

    # reorder command
    reorder_parser = subparsers.add_parser("reorder", help="Move an item within its container")
    reorder_sub = reorder_parser.add_subparsers(dest="kind", help="What to reorder")
    reorder_topics = reorder_sub.add_parser("topics", help="Reorder topics")
    reorder_topics.add_argument("source", type=int, help="Current index")
    reorder_topics.add_argument("destination", type=int, help="New index (clamped)")
    for kind, owner in (("subtopics", "Topic"), ("questions", "Sub-topic")):
        kind_parser = reorder_sub.add_parser(kind, help=f"Reorder {kind} of a container")
        kind_parser.add_argument("container", help=f"{owner} id")
        kind_parser.add_argument("source", type=int, help="Current index")
        kind_parser.add_argument("destination", type=int, help="New index (clamped)")

    # move command
    move_parser = subparsers.add_parser("move", help="Move an item to another container")
    move_sub = move_parser.add_subparsers(dest="kind", help="What to move")
    for kind, owner in (("subtopic", "topic"), ("question", "sub-topic")):
        kind_parser = move_sub.add_parser(kind, help=f"Move a {kind} to another {owner}")
        kind_parser.add_argument("id", help=f"{kind.capitalize()} id")
        kind_parser.add_argument(
            "--from", dest="source", required=True, help=f"Current {owner} id", metavar="ID"
        )
        kind_parser.add_argument(
            "--to", dest="destination", required=True, help=f"Target {owner} id", metavar="ID"
        )
        kind_parser.add_argument(
            "--index", type=int, help="Position in the target (default: end)", metavar="N"
        )

    # seed command
    seed_parser = subparsers.add_parser("seed", help="Replace the stored sheet with seed data")
    seed_parser.add_argument("--url", help="Remote sheet URL (default from config)")

    # reset command
    subparsers.add_parser("reset", help="Delete the stored sheet")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API server")
    serve_parser.add_argument("--host", help="Bind address (default from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default from config)")

    # config command
    config_parser = subparsers.add_parser("config", help="View and create configuration")
    config_sub = config_parser.add_subparsers(dest="config_action", help="Config action")
    config_sub.add_parser("show", help="Show the effective configuration")
    config_sub.add_parser("path", help="Show the config file location")
    init_parser = config_sub.add_parser("init", help="Create .qsheet.toml with defaults")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing file")

    return parser


def configure_logging(args: argparse.Namespace) -> None:
    """Route library log records to stderr at a level set by -v/-q."""
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install qsheet[completion]
    # Then activate: eval "$(register-python-argcomplete qsheet)"
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args)

    try:
        if args.command == "show":
            return show.run(args)
        elif args.command == "check":
            return show.run_check(args)
        elif args.command in EDIT_COMMANDS:
            return edit.run(args)
        elif args.command == "seed":
            return seed_cmd.run(args)
        elif args.command == "reset":
            return seed_cmd.run_reset(args)
        elif args.command == "serve":
            return serve.run(args)
        elif args.command == "config":
            return config_cmd.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
