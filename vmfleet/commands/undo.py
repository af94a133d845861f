"""vmfleet undo: replay a tag undo log in-process.

Equivalent to running the generated UndoTags script, but with the run log
and simulate mode of the other commands.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from ..azure.auth import AzureSession, PreconditionError
from ..azure.fleet import FleetClient
from ..logging_config import RunLog
from ..tagging import read_tag_changes_csv, revert_tag_changes
from .helpers import artifact_path, open_session

if TYPE_CHECKING:
    from ..config import Settings
    from ..ui.renderer import Renderer

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def handle_undo(
    renderer: "Renderer",
    settings: "Settings",
    csv_path: str,
    dry_run: bool = False,
    session: Optional[AzureSession] = None,
    now: Optional[datetime] = None,
) -> int:
    """Revert the tag changes recorded in an undo log CSV.

    Returns 1 if any VM could not be reverted, like the generated undo script.
    """
    path = Path(csv_path)
    try:
        changes = read_tag_changes_csv(path)
    except (OSError, KeyError, ValueError) as e:
        raise PreconditionError(f"Cannot read undo log {path}: {e}")

    if not changes:
        renderer.info(f"{path} has no records. Nothing to revert.")
        return 0

    now = now or datetime.now()
    session = session or open_session(renderer, settings)
    renderer.header("UNDO TAGS", subscription=session.subscription_name or session.subscription_id, dry_run=dry_run)
    renderer.show_tag_changes(changes)

    if not renderer.confirm(f"Restore the old tags on {len(changes)} VM(s)?"):
        return 0

    log_path = artifact_path(settings, f"UndoTags_{now.strftime(TIMESTAMP_FORMAT)}.log")
    with RunLog(log_path, renderer.console) as run_log:
        run_log.info(f"Undo started from {path}; simulate mode {'on' if dry_run else 'off'}")
        client = FleetClient(session, run_log=run_log, dry_run=dry_run)
        failures = revert_tag_changes(client, changes, run_log)
        run_log.info(f"Undo completed: {len(changes) - failures} reverted, {failures} failed")

    if failures:
        renderer.warning(f"{failures} of {len(changes)} VM(s) could not be reverted. See {log_path}")
        return 1

    renderer.success(f"Reverted {len(changes)} VM(s)\n\nRun log: {log_path}")
    return 0
