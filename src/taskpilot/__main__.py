"""CLI entry point for taskpilot."""

import argparse
import asyncio
import logging
from pathlib import Path

from . import __version__
from .cli.commands import COMMANDS
from .cli.output import error, info
from .config import Settings, credentials_from_settings
from .errors import APIError, AuthConfigMissingError, TaskPilotError
from .logging import setup_logging
from .models import TaskPilotConfig
from .providers import GitHubProvider, TaskProvider, build_registry
from .providers.github import parse_repo_id
from .services.config_service import ConfigService
from .utils.rate_limiter import ConcurrencyLimiter

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="taskpilot",
        description="Manage Trello cards and GitHub issues from the terminal",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Path to project root containing taskpilot.yml (default: current directory)",
    )
    parser.add_argument(
        "-p",
        "--provider",
        choices=["trello", "github"],
        default=None,
        help="Backend to use (default: from taskpilot.yml or TASKPILOT_PROVIDER)",
    )
    parser.add_argument(
        "-b",
        "--board",
        default=None,
        help="Board id, or owner/repo for GitHub (default: from taskpilot.yml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show raw vendor error details",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("boards", help="List boards (Trello) or repositories (GitHub)")
    sub.add_parser("columns", help="List the board's columns")
    sub.add_parser("labels", help="List the board's labels")
    sub.add_parser("members", help="List the board's members")

    list_cmd = sub.add_parser("list", help="List tasks")
    list_cmd.add_argument("--column", help="Column name (case-insensitive)")
    list_cmd.add_argument("--assignee", help="Member id")
    list_cmd.add_argument("--label", help="Label id")
    list_cmd.add_argument("--status", choices=["open", "in_progress", "done", "archived"])
    list_cmd.add_argument("--archived", action="store_true", help="Only archived tasks")

    show = sub.add_parser("show", help="Show one task")
    show.add_argument("task_id")
    show.add_argument("--comments", action="store_true", help="Include comments")

    create = sub.add_parser("create", help="Create a task")
    create.add_argument("title")
    create.add_argument("-d", "--description", default=None)
    create.add_argument("-c", "--column", default=None, help="Column id (default: first column)")
    create.add_argument("-l", "--label", action="append", help="Label id or name (repeatable)")
    create.add_argument("-a", "--assignee", action="append", help="Member id (repeatable)")

    move = sub.add_parser("move", help="Move a task to another column")
    move.add_argument("task_id")
    move.add_argument("column")

    for name, help_text in (("archive", "Archive a task"), ("unarchive", "Restore a task")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("task_id")

    comment = sub.add_parser("comment", help="Comment on a task")
    comment.add_argument("task_id")
    comment.add_argument("text")

    batch_move = sub.add_parser("batch-move", help="Move several tasks to one column")
    batch_move.add_argument("column")
    batch_move.add_argument("task_ids", nargs="+")
    batch_move.add_argument("--parallel", action="store_true", help="Run moves concurrently")
    batch_move.add_argument("--limit", type=int, default=None, help="Concurrency for --parallel")

    return parser.parse_args(argv)


def configure_provider(
    provider: TaskProvider, config: TaskPilotConfig, board_id: str | None
) -> None:
    """Apply project configuration to a freshly created provider."""
    if isinstance(provider, GitHubProvider):
        provider.set_status_label_prefix(config.github.status_label_prefix)
        provider.set_column_configs(config.github.columns)
        if board_id:
            provider.set_repo(*parse_repo_id(board_id))


async def run(settings: Settings, args: argparse.Namespace) -> int:
    """Build the provider for this invocation and dispatch the command."""
    config_service = ConfigService(settings.project_root)
    config = config_service.get_config()
    if config_service.has_config_error:
        error(config_service.config_error or "Invalid configuration")
        info("Continuing with default configuration")

    provider_type = settings.provider or config.provider
    if provider_type is None:
        error("No provider selected. Pass --provider or set 'provider' in taskpilot.yml")
        return 1
    board_id = args.board or config.board

    limiter = ConcurrencyLimiter(settings.max_concurrency)
    registry = build_registry(timeout=settings.timeout, limiter=limiter)
    provider = registry.create(provider_type)

    try:
        provider.set_auth(credentials_from_settings(settings, provider_type))
        configure_provider(provider, config, board_id)
        await provider.initialize()
        return await COMMANDS[args.command](provider, board_id, args)
    except AuthConfigMissingError as e:
        error(str(e))
        return 1
    except APIError as e:
        error(e.describe(debug=settings.debug))
        return 1
    except TaskPilotError as e:
        error(e.to_user_message())
        return 1
    finally:
        await provider.aclose()


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    # Build settings from CLI args
    settings_kwargs: dict = {}
    if args.project_root:
        settings_kwargs["project_root"] = args.project_root
    if args.provider:
        settings_kwargs["provider"] = args.provider
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file
    if args.debug:
        settings_kwargs["debug"] = True

    settings = Settings(**settings_kwargs)

    setup_logging(settings.verbose, settings.log_file)
    logger.debug("Running command %s", args.command)

    raise SystemExit(asyncio.run(run(settings, args)))


if __name__ == "__main__":
    main()
