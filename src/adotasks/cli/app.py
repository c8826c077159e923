"""
CLI App - Main entry point for the adotasks command line tool.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence

import requests

from adotasks import __version__
from adotasks.adapters import AzureDevOpsRepository, EnvironmentConfigProvider
from adotasks.core.exceptions import (
    AzureDevOpsError,
    ConfigError,
    ConfigFileError,
    OperationCancelledError,
)

from .exit_codes import ExitCode
from .logging import setup_logging
from .output import Console


logger = logging.getLogger("adotasks.cli")

Command = Callable[[argparse.Namespace, AzureDevOpsRepository, Console], int]


def create_parser() -> argparse.ArgumentParser:
    """
    Create the command-line argument parser for adotasks.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="adotasks",
        description="Search and update your Azure DevOps work items",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check that the organization, project and PAT are accepted
  adotasks ping

  # List your open work items
  adotasks list

  # Search titles, including closed items
  adotasks list --query login --closed

  # Show one work item
  adotasks show 42

  # List the states work item 42 can be moved to
  adotasks states 42

  # Resolve work item 42, only if nobody changed it since revision 7
  adotasks set-state 42 Resolved --revision 7

  # Machine-readable output
  adotasks --output json list

Environment variables:
  AZURE_DEVOPS_ORG       Organization (team) name
  AZURE_DEVOPS_PROJECT   Project name
  AZURE_DEVOPS_PAT       Personal access token
  ADOTASKS_VERBOSE       Enable debug logging (true/false)
  ADOTASKS_LOG_FORMAT    Log format (text or json)
  ADOTASKS_LOG_FILE      Also write logs to this file
""",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", "-c", type=str, help="Path to a config file (.yaml, .yml or .toml)")
    parser.add_argument("--team", type=str, help="Azure DevOps organization (overrides config)")
    parser.add_argument("--project", type=str, help="Azure DevOps project (overrides config)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument(
        "--log-format",
        type=str,
        choices=["text", "json"],
        default=None,
        help="Log format (default: text)",
    )
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format for results (default: text)",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    ping = subparsers.add_parser("ping", help="Check connectivity and credentials")
    ping.set_defaults(func=run_ping)

    list_cmd = subparsers.add_parser("list", help="List work items assigned to you")
    list_cmd.add_argument("--query", "-q", type=str, help="Text the title must contain")
    list_cmd.add_argument("--closed", action="store_true", help="Include closed and removed items")
    list_cmd.set_defaults(func=run_list)

    show = subparsers.add_parser("show", help="Show one work item")
    show.add_argument("id", type=str, help="Work item id")
    show.set_defaults(func=run_show)

    states = subparsers.add_parser("states", help="List the valid states of a work item")
    states.add_argument("id", type=str, help="Work item id")
    states.set_defaults(func=run_states)

    set_state = subparsers.add_parser("set-state", help="Move a work item to another state")
    set_state.add_argument("id", type=str, help="Work item id")
    set_state.add_argument("state", type=str, help="Target state name (e.g. Active, Resolved)")
    set_state.add_argument(
        "--revision",
        type=int,
        default=None,
        help="Only apply if the item is still at this revision",
    )
    set_state.set_defaults(func=run_set_state)

    return parser


# =============================================================================
# Commands
# =============================================================================


def run_ping(args: argparse.Namespace, repository: AzureDevOpsRepository, console: Console) -> int:
    """Test the connection to the configured project."""
    console.section(f"Connecting to {repository.url}")
    connection = repository.create_cancellable_connection()
    try:
        connection.test()
    except AzureDevOpsError as e:
        console.connection_error(repository.url, reason=f"HTTP {e.status_code}")
        return _finish(console, ExitCode.CONNECTION_ERROR)

    if console.json_mode:
        console.emit_json({"success": True, "url": repository.url})
    else:
        console.success("Connection OK")
    return ExitCode.SUCCESS


def run_list(args: argparse.Namespace, repository: AzureDevOpsRepository, console: Console) -> int:
    """List the work items assigned to the current user."""
    items = repository.get_issues(args.query, with_closed=args.closed)
    logger.debug(f"Listing {len(items)} work item(s)")
    console.work_items(items)
    return ExitCode.SUCCESS


def run_show(args: argparse.Namespace, repository: AzureDevOpsRepository, console: Console) -> int:
    """Show the details of one work item."""
    item = repository.find_task(args.id)
    if item is None:
        console.error(f"Work item {args.id} not found")
        return _finish(console, ExitCode.NOT_FOUND)

    console.work_item(item)
    return ExitCode.SUCCESS


def run_states(args: argparse.Namespace, repository: AzureDevOpsRepository, console: Console) -> int:
    """List the states a work item can be moved to."""
    item = repository.find_task(args.id)
    if item is None:
        console.error(f"Work item {args.id} not found")
        return _finish(console, ExitCode.NOT_FOUND)

    console.section(f"States for {item.work_item_type or 'work item'} {item.id}")
    console.states(repository.get_states_for_type(item.work_item_type))
    return ExitCode.SUCCESS


def run_set_state(args: argparse.Namespace, repository: AzureDevOpsRepository, console: Console) -> int:
    """Move a work item to another state."""
    applied = repository.set_task_state(args.id, args.state, expected_revision=args.revision)

    if console.json_mode:
        console.emit_json({"id": args.id, "state": args.state, "applied": applied})
    elif applied:
        console.success(f"Work item {args.id} moved to '{args.state}'")
    else:
        # the API answers 404 for a missing item and for a failed revision test alike
        console.error(f"Work item {args.id} was not updated (not found, or its revision has changed)")

    return ExitCode.SUCCESS if applied else ExitCode.NOT_FOUND


# =============================================================================
# Entry Point
# =============================================================================


def _finish(console: Console, code: int) -> int:
    """Report collected errors in JSON mode and return ``code``."""
    if console.json_mode:
        console.emit_json({"success": False})
    return code


def run(args: argparse.Namespace) -> int:
    """
    Load configuration, set up logging and run the selected command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code.
    """
    console = Console(
        color=not args.no_color,
        json_mode=args.output == "json",
    )

    config_provider = EnvironmentConfigProvider(
        config_file=args.config,
        cli_overrides=vars(args),
    )
    try:
        config = config_provider.load()
    except ConfigFileError as e:
        console.config_errors([str(e)])
        return _finish(console, ExitCode.CONFIG_ERROR)

    log_level = logging.DEBUG if config.verbose else logging.INFO
    try:
        setup_logging(
            level=log_level,
            log_format=config.log_format,
            log_file=config.log_file,
            include_context=config.verbose,
        )
    except OSError as e:
        console.config_errors([f"Cannot open log file {config.log_file}: {e.strerror or e}"])
        return _finish(console, ExitCode.CONFIG_ERROR)
    logger.debug(f"Configuration loaded by {config_provider.name}")

    errors = config_provider.validate()
    if errors:
        console.config_errors(errors)
        return _finish(console, ExitCode.CONFIG_ERROR)

    repository = AzureDevOpsRepository(config.tracker)
    command: Command = args.func

    try:
        return command(args, repository, console)
    except (OperationCancelledError, KeyboardInterrupt):
        console.warning("Cancelled by user")
        return _finish(console, ExitCode.CANCELLED)
    except ConfigError as e:
        console.config_errors([str(e)])
        return _finish(console, ExitCode.CONFIG_ERROR)
    except AzureDevOpsError as e:
        logger.debug(f"Response body: {e.reason}")
        console.error(f"{e} ({e.issue_key})" if e.issue_key else str(e))
        return _finish(console, ExitCode.ERROR)
    except requests.exceptions.RequestException as e:
        logger.debug(f"Transport error: {e}")
        console.connection_error(repository.url, reason=type(e).__name__)
        return _finish(console, ExitCode.CONNECTION_ERROR)


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the adotasks CLI.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    return run(args)
