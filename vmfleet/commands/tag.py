"""vmfleet tag: bulk-tag VMs and write an undo log.

Subscription selection, VM listing grouped by resource group, index/range
selection, tag key/value validation, per-VM merge with before/after
snapshot, then the CSV undo log and the generated undo script.
"""

import logging
import time
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from rich.markup import escape

from ..azure.auth import AzureSession, PreconditionError
from ..azure.fleet import FleetClient
from ..logging_config import RunLog
from ..script_templates import render_undo_script, write_script
from ..selection import parse_index_selection, validate_tag_key, validate_tag_value
from ..tagging import apply_tag, write_tag_changes_csv
from .helpers import artifact_path, format_duration, open_session, prompt_until_valid, sort_inventory

if TYPE_CHECKING:
    from ..config import Settings
    from ..ui.renderer import Renderer

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def handle_tag(
    renderer: "Renderer",
    settings: "Settings",
    dry_run: bool = False,
    session: Optional[AzureSession] = None,
    now: Optional[datetime] = None,
) -> int:
    """Run the tag-and-undo workflow.

    Args:
        renderer: UI renderer instance
        settings: Loaded settings
        dry_run: Simulate mode: log merges instead of issuing them
        session: Existing session (a new one is opened if None)
        now: Run timestamp (defaults to the current time)

    Returns:
        Exit code

    Raises:
        PreconditionError: Login, listing or empty inventory failure
    """
    started = time.monotonic()
    now = now or datetime.now()
    stamp = now.strftime(TIMESTAMP_FORMAT)

    session = session or open_session(renderer, settings)
    renderer.header("TAG VMs", subscription=session.subscription_name or session.subscription_id, dry_run=dry_run)

    with RunLog(artifact_path(settings, f"TaggedVMs_{stamp}.log"), renderer.console) as run_log:
        run_log.info(
            f"Tag run started; subscription {session.subscription_id}; "
            f"simulate mode {'on' if dry_run else 'off'}"
        )
        client = FleetClient(session, run_log=run_log, dry_run=dry_run)

        vms = sort_inventory(client.list_vms())
        if not vms:
            raise PreconditionError(f"No VMs found in subscription {session.subscription_id}")

        renderer.show_vms(vms)
        indices = prompt_until_valid(
            renderer,
            "VM # or range (e.g. 0,2,5-8): ",
            lambda raw: parse_index_selection(raw, len(vms)),
        )
        selected = [vms[i] for i in indices]

        key = prompt_until_valid(renderer, "Tag key: ", validate_tag_key)
        value = prompt_until_valid(renderer, "Tag value: ", validate_tag_value)

        names = ", ".join(vm.name for vm in selected)
        renderer.info(f"Tag: [bold]{escape(key)}={escape(value)}[/bold]\nVMs ({len(selected)}): {escape(names)}", title="PLAN")
        if not renderer.confirm(f"Apply tag to {len(selected)} VM(s)?"):
            run_log.info("Cancelled by operator; no tags applied")
            return 0

        run_log.info(f"Selected {len(selected)} VM(s): {names}")
        run_log.info(f"Tag to apply: {key}={value}")

        changes = apply_tag(client, selected, key, value, run_log)
        if not changes:
            renderer.warning("No VMs were tagged, so no undo log was written.")
            run_log.info("No VMs tagged")
            return 0

        csv_path = write_tag_changes_csv(changes, artifact_path(settings, f"TaggedVMs_{stamp}.csv"))
        undo_path = write_script(
            artifact_path(settings, f"UndoTags_{stamp}.py"),
            render_undo_script(changes, csv_path.name, now, session.subscription_id),
        )
        logger.info(f"Tag run wrote {len(changes)} undo records to {csv_path}")
        run_log.info(f"Wrote undo log {csv_path} and undo script {undo_path}")
        run_log.info(f"Tag run completed in {format_duration(time.monotonic() - started)}")

    renderer.show_tag_changes(changes)
    renderer.success(
        f"Tagged {len(changes)} of {len(selected)} VM(s)\n\n"
        f"Undo log:    {csv_path}\n"
        f"Undo script: {undo_path}\n"
        f"Run log:     {run_log.path}",
        title="SIMULATED" if dry_run else "DONE",
    )
    return 0
