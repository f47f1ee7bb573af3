"""
patchtracker - Command line client for the patch tracker server.

Records a range of local git commits as a reviewable patch-set, uploads the
patch bodies, and drives their review state.

Usage:
    # Record origin/master..HEAD and upload the diffs
    patchtracker record --upload

    # Review state of the commits on this branch
    patchtracker status

    # Acknowledge every recorded commit, or a whole set
    patchtracker ack -m "Looks good"
    patchtracker ack --set 42

    # Fetch a patch-set into a new branch
    patchtracker download 42 --branch review-42

    # List sets waiting for review
    patchtracker list new

Configuration is read from ~/.patchtracker.yml (or --config), then from the
TRACKER_URL, TRACKER_USER, TRACKER_PASSWORD and TRACKER_BASE_REF variables.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from ..adapters.config import YamlConfigProvider
from ..adapters.git import GitAdapter
from ..adapters.tracker import TrackerAdapter
from ..application.sync import SyncOrchestrator
from ..core.domain.events import DomainEvent, EventBus
from ..core.exceptions import BackendCommandError, ConfigError, FatalUsageError
from ..core.ports.config_provider import AppConfig
from .exit_codes import ExitCode
from .output import Console


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patchtracker",
        description="Sync local git commits with a patch tracker server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--directory", "-d",
        type=str,
        default=".",
        help="Git repository to work in (default: current directory)",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        help="YAML config file (default: ~/.patchtracker.yml)",
    )
    parser.add_argument("--url", type=str, help="Tracker server URL")
    parser.add_argument(
        "--base",
        type=str,
        help="Upstream ref the branch is compared to (default: origin/master)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    record = sub.add_parser("record", help="Record the commit range as a patch-set")
    record.add_argument("--upload", "-u", action="store_true", help="Upload patch bodies too")
    record.add_argument(
        "--obsoletes", "-o",
        type=str,
        help="Id of the patch-set this one supersedes",
    )

    sub.add_parser("upload", help="Upload patch bodies of the commit range")

    download = sub.add_parser("download", help="Download a patch-set")
    download.add_argument("set_id", help="Patch-set id")
    download.add_argument(
        "--branch", "-b",
        type=str,
        help="Create this branch and apply the patches on it",
    )

    for action in ("ack", "nack", "push"):
        act = sub.add_parser(action, help=f"Mark patches as {action}")
        act.add_argument("--set", "-s", dest="set_id", type=str, help="Act on a whole patch-set")
        act.add_argument("--message", "-m", type=str, help="Message sent with the action")

    sub.add_parser("status", help="Show review state of local commits")

    apply = sub.add_parser("apply", help="Download and apply a single patch")
    apply.add_argument("commit", help="Full 40 character commit hash")
    apply.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    obsolete = sub.add_parser("obsolete", help="Mark a patch-set as obsolete")
    obsolete.add_argument("set_id", help="Patch-set id")

    listing = sub.add_parser("list", help="List patch-sets")
    listing.add_argument("value", nargs="?", help="Status (new, ack, nack, push) or filter value")
    listing.add_argument("--id", "-i", dest="filter_name", type=str, help="Field to filter on")

    return parser


def load_config(args: argparse.Namespace) -> AppConfig:
    """
    Load configuration for a command line.

    Raises:
        ConfigError: If the file is unreadable or the settings are invalid
    """
    provider = YamlConfigProvider(
        config_file=Path(args.config) if args.config else None,
        cli_overrides={"url": args.url, "base": args.base, "verbose": args.verbose},
    )
    errors = provider.validate()
    if errors:
        raise ConfigError("; ".join(errors))
    return provider.load()


def create_orchestrator(config: AppConfig, console: Console) -> SyncOrchestrator:
    event_bus = EventBus()
    if config.sync.verbose:
        logger = logging.getLogger("events")
        event_bus.subscribe(DomainEvent, lambda event: logger.debug(f"{event.event_type}: {event}"))

    return SyncOrchestrator(
        tracker=TrackerAdapter(config.tracker),
        vcs=GitAdapter(),
        config=config,
        event_bus=event_bus,
        confirm=console.confirm,
    )


def run(args: argparse.Namespace, orchestrator: SyncOrchestrator, console: Console) -> int:
    """Dispatch a parsed command line to the orchestrator."""
    directory = args.directory
    command = args.command

    if command == "record":
        result = orchestrator.record(directory, obsoletes=args.obsoletes, upload=args.upload)
    elif command == "upload":
        result = orchestrator.upload(directory)
    elif command == "download":
        result = orchestrator.download(directory, args.set_id, branch=args.branch)
    elif command in ("ack", "nack", "push"):
        result = orchestrator.act(command, directory, set_id=args.set_id, message=args.message)
    elif command == "status":
        result = orchestrator.status(directory)
    elif command == "apply":
        result = orchestrator.apply(directory, args.commit, assume_yes=args.yes)
    elif command == "obsolete":
        result = orchestrator.obsolete_patchset(args.set_id)
    elif command == "list":
        result = orchestrator.list_sets(args.value, args.filter_name)
    else:
        raise FatalUsageError(f"Unknown command: {command}")

    if command == "list" and result.success:
        console.patch_sets(result.data.get("sets", []))
    else:
        console.workflow_result(result, url=orchestrator.tracker_url)

    return ExitCode.SUCCESS if result.success else ExitCode.PARTIAL


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger("main")
    console = Console(color=not args.no_color, verbose=args.verbose)

    try:
        config = load_config(args)
        orchestrator = create_orchestrator(config, console)
        return int(run(args, orchestrator, console))
    except (FatalUsageError, ConfigError) as e:
        console.error(e.message)
        return int(ExitCode.ERROR)
    except BackendCommandError as e:
        logger.debug(f"git command failed: {e.command}")
        console.error(f"ERROR: {e.message}")
        return int(ExitCode.ERROR)
    except KeyboardInterrupt:
        console.print()
        return int(ExitCode.INTERRUPTED)


if __name__ == "__main__":
    sys.exit(main())
