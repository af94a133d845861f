"""Main entry point for vmfleet.

Usage:
    vmfleet tag [--dry-run]
    vmfleet zone-shutdown [--dry-run]
    vmfleet undo TaggedVMs_<stamp>.csv [--dry-run]
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console

from .azure.auth import AzureError, PreconditionError
from .commands.helpers import open_session, run_startup_checks
from .commands.tag import handle_tag
from .commands.undo import handle_undo
from .commands.zone_shutdown import handle_zone_shutdown
from .config import get_settings
from .logging_config import setup_logging
from .ui.renderer import Renderer

logger = logging.getLogger(__name__)

console = Console()


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="vmfleet",
        description="Bulk-tag Azure VMs with an undo log, or shut down VMs by availability zone",
    )
    parser.add_argument(
        "--dry-run", "--whatif",
        dest="dry_run",
        action="store_true",
        help="Simulate mode: log every mutating call as 'Would run: ...' and change nothing"
    )
    parser.add_argument("--output-dir", help="Directory for CSV, script and log artifacts")
    parser.add_argument("--subscription", help="Subscription ID (skips the subscription prompt)")
    parser.add_argument("--debug", action="store_true", help="Verbose diagnostics and tracebacks")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("tag", help="Apply one tag to selected VMs and write an undo log")
    subparsers.add_parser("zone-shutdown", help="Stop or deallocate VMs by availability zone")
    undo = subparsers.add_parser("undo", help="Restore tags from a TaggedVMs CSV undo log")
    undo.add_argument("csv", help="Path to the TaggedVMs_<stamp>.csv undo log")
    return parser


def main(argv: Optional[List[str]] = None, renderer: Optional[Renderer] = None) -> int:
    """Parse arguments, run one workflow and return its exit code."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    overrides = {}
    if args.output_dir:
        overrides["fleet_output_dir"] = args.output_dir
    if args.subscription:
        overrides["azure_subscription_id"] = args.subscription
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging("DEBUG" if args.debug else settings.fleet_log_level)
    logger.debug(f"Settings: {settings.get_safe_dict()}")

    renderer = renderer or Renderer(console)
    if not run_startup_checks(renderer, settings):
        renderer.error("Startup checks failed. Fix the configuration and retry.")
        return 1

    session = None
    try:
        session = open_session(renderer, settings)
        if args.command == "tag":
            return handle_tag(renderer, settings, dry_run=args.dry_run, session=session)
        if args.command == "zone-shutdown":
            return handle_zone_shutdown(renderer, settings, dry_run=args.dry_run, session=session)
        return handle_undo(renderer, settings, args.csv, dry_run=args.dry_run, session=session)

    except PreconditionError as e:
        renderer.error(str(e), title="PRECONDITION FAILED")
        return 1

    except AzureError as e:
        logger.error(f"Unhandled Azure error: {e.to_dict()}")
        renderer.error(f"{e.error_type}: {e}")
        if args.debug:
            renderer.console.print_exception()
        return 1

    except (KeyboardInterrupt, EOFError):
        renderer.warning("Cancelled.", title="CANCELLED")
        return 1

    finally:
        if session is not None:
            session.close()


if __name__ == "__main__":
    sys.exit(main())
