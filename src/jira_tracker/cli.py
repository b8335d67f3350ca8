"""Command-line interface for Jira Tracker.

COMMANDS:
---------
- serve: Run the HTTP server that owns the tracker state.
- show:  Print the trackers stored in the state file.
- sum:   Print the total time stored in the state file.

The state file is shared: ``show`` and ``sum`` read the same file the server
writes after every change, and the server reloads it when it is edited.
"""

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from jira_tracker import __version__
from jira_tracker.config import Settings
from jira_tracker.tracker import StateFile, StateFileError, TrackerState, format_duration

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, level: int = logging.WARNING) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else level
    fmt = "%(name)s: %(message)s" if verbose else "%(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=[RichHandler(rich_tracebacks=True, console=console, show_path=verbose)],
        force=True,
    )


def _open_state(settings: Settings) -> TrackerState:
    try:
        return TrackerState.open(StateFile(settings.get_state_file()))
    except StateFileError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def cmd_serve(args: argparse.Namespace, settings: Settings) -> None:
    """Run the HTTP server."""
    import uvicorn

    from jira_tracker.api import create_app

    if not args.verbose:
        setup_logging(level=logging.INFO)

    host = args.host or settings.tracker_host
    port = args.port or settings.tracker_port
    try:
        app = create_app(settings, watch=not args.no_watch)
    except StateFileError as e:
        logger.error(f"Cannot load state: {e}")
        sys.exit(1)

    logger.info(f"Serving on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_config=None)


def cmd_show(args: argparse.Namespace, settings: Settings) -> None:
    """Print the stored trackers."""
    trackers = _open_state(settings).list()

    if args.json:
        print(json.dumps([t.model_dump(mode="json") for t in trackers], indent=2))
        return

    if not trackers:
        console.print("[dim]No trackers[/dim]")
        return

    table = Table(title="Trackers")
    table.add_column("Key", style="cyan")
    table.add_column("Description")
    table.add_column("Duration", justify="right")
    table.add_column("Created")
    for tracker in trackers:
        key = f"[bold green]{tracker.key} ▶[/bold green]" if tracker.running else tracker.key
        table.add_row(
            key,
            tracker.description or "",
            format_duration(tracker.duration),
            tracker.start_time.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


def cmd_sum(args: argparse.Namespace, settings: Settings) -> None:
    """Print the total stored time."""
    console.print(format_duration(_open_state(settings).sum()))


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="jira-tracker",
        description="Track working time on Jira issues and submit it to Tempo.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP server",
        description="Serve the tracker API. Settings come from the environment or a .env file."
    )
    serve_parser.add_argument(
        "--host",
        help="Bind address (default: TRACKER_HOST or 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port", type=int,
        help="Port (default: TRACKER_PORT or 8080)"
    )
    serve_parser.add_argument(
        "--no-watch", action="store_true",
        help="Do not reload the state when the state file changes"
    )
    serve_parser.set_defaults(func=cmd_serve)

    # show
    show_parser = subparsers.add_parser(
        "show",
        help="Show stored trackers"
    )
    show_parser.add_argument(
        "--json", action="store_true",
        help="Output as JSON"
    )
    show_parser.set_defaults(func=cmd_show)

    # sum
    sum_parser = subparsers.add_parser(
        "sum",
        help="Show the total stored time"
    )
    sum_parser.set_defaults(func=cmd_sum)

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    settings = Settings()
    args.func(args, settings)


if __name__ == "__main__":
    main()
