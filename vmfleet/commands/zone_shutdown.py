"""vmfleet zone-shutdown: DR shutdown of VMs grouped by availability zone.

The operator picks one menu entry (a zone, non-zonal, all, a specific VM or
none), confirms, and every target is stopped (ephemeral OS disk) or
deallocated. Stopped VMs can be waited on and deallocated afterwards. A
restart script listing exactly the confirmed targets is written at the end.
"""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional, Sequence, TYPE_CHECKING

from rich.markup import escape

from ..azure.auth import AzureSession, PreconditionError
from ..azure.fleet import FleetClient
from ..azure.models import VmInfo
from ..logging_config import RunLog
from ..script_templates import render_restart_script, write_script
from ..selection import ValidationResult
from ..shutdown import ShutdownSequencer
from ..zones import MENU_NONE, MENU_SPECIFIC, MenuEntry, build_zone_menu, find_vms_by_name
from .helpers import artifact_path, format_duration, open_session, prompt_until_valid, sort_inventory

if TYPE_CHECKING:
    from ..config import Settings
    from ..ui.renderer import Renderer

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


def validate_menu_choice(raw: str, menu: Sequence[MenuEntry]) -> ValidationResult:
    """Menu choices are numbered from 1."""
    raw = (raw or "").strip()
    if not raw.isdigit() or not 1 <= int(raw) <= len(menu):
        return ValidationResult.failure(f"Enter a number from 1 to {len(menu)}")
    return ValidationResult.success(menu[int(raw) - 1])


def validate_vm_name(raw: str, vms: Sequence[VmInfo]) -> ValidationResult:
    """Resolve a VM name against the full inventory."""
    matches = find_vms_by_name(vms, raw)
    if not matches:
        return ValidationResult.failure(f"No VM named {raw!r}")
    return ValidationResult.success(matches)


def handle_zone_shutdown(
    renderer: "Renderer",
    settings: "Settings",
    dry_run: bool = False,
    session: Optional[AzureSession] = None,
    now: Optional[datetime] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Run the zone shutdown/restart workflow.

    Args:
        renderer: UI renderer instance
        settings: Loaded settings
        dry_run: Simulate mode: log shutdown commands instead of issuing them
        session: Existing session (a new one is opened if None)
        now: Run timestamp (defaults to the current time)
        sleep: Sleep function used between power state polls

    Returns:
        Exit code

    Raises:
        PreconditionError: Login, listing or empty inventory failure
    """
    started = time.monotonic()
    now = now or datetime.now()
    stamp = now.strftime(TIMESTAMP_FORMAT)

    session = session or open_session(renderer, settings)
    renderer.header("ZONE SHUTDOWN", subscription=session.subscription_name or session.subscription_id, dry_run=dry_run)

    with RunLog(artifact_path(settings, f"DR-Zone-Shutdown-{stamp}.log"), renderer.console) as run_log:
        run_log.info(
            f"Zone shutdown started; subscription {session.subscription_id}; "
            f"simulate mode {'on' if dry_run else 'off'}"
        )
        client = FleetClient(session, run_log=run_log, dry_run=dry_run)

        vms = sort_inventory(client.list_vms())
        if not vms:
            raise PreconditionError(f"No VMs found in subscription {session.subscription_id}")

        menu = build_zone_menu(vms)
        renderer.show_menu(menu)
        entry = prompt_until_valid(renderer, "Choice #: ", lambda raw: validate_menu_choice(raw, menu))

        if entry.kind == MENU_NONE:
            run_log.info("Selection: none; no VMs touched")
            renderer.info("Nothing selected. No VMs were touched.")
            return 0

        if entry.kind == MENU_SPECIFIC:
            targets: List[VmInfo] = prompt_until_valid(
                renderer, "VM name: ", lambda raw: validate_vm_name(raw, vms)
            )
            selection = f"Specific VM: {targets[0].name}"
        else:
            targets = list(entry.vms)
            selection = entry.label
        run_log.info(f"Selection: {selection} ({len(targets)} VMs)")
        logger.info(f"Zone shutdown selection {selection!r} resolved to {len(targets)} targets")

        if not targets:
            renderer.warning(f"{selection} has no VMs. Nothing to do.")
            return 0

        renderer.show_vms(targets, title=f"TARGETS: {escape(selection.upper())}")
        if not renderer.confirm(f"Shut down {len(targets)} VM(s)?"):
            run_log.info("Cancelled by operator; no VMs touched")
            return 0
        run_log.info("Confirmed targets: " + ", ".join(f"{vm.resource_group}/{vm.name}" for vm in targets))

        sequencer = ShutdownSequencer(
            client,
            run_log,
            poll_timeout=settings.fleet_poll_timeout,
            poll_interval=settings.fleet_poll_interval,
            sleep=sleep,
        )
        result = sequencer.shutdown(targets)
        renderer.show_shutdown_summary(result)

        if result.stopped:
            renderer.info(
                f"{len(result.stopped)} VM(s) with ephemeral OS disks were stopped, not deallocated.",
                title="STOPPED VMs",
            )
            if renderer.confirm("Wait for them to reach 'stopped'?", default=True):
                confirmed, unconfirmed = sequencer.wait_for_stopped(result.stopped)
                if unconfirmed:
                    renderer.warning(
                        "Not confirmed stopped: " + ", ".join(r.name for r in unconfirmed)
                        + "\nThey are left as they are and still listed in the restart script."
                    )
                if confirmed and renderer.confirm(f"Deallocate {len(confirmed)} stopped VM(s)?"):
                    sequencer.deallocate_stopped(confirmed)

        restart_path = write_script(
            artifact_path(settings, f"DR-Zone-Restart-{stamp}.py"),
            render_restart_script(targets, now, selection, session.subscription_id),
        )
        run_log.info(f"Wrote restart script {restart_path}")
        run_log.info(
            f"Zone shutdown completed at {datetime.now():%Y-%m-%d %H:%M:%S} "
            f"in {format_duration(time.monotonic() - started)}"
        )

    renderer.success(
        f"Processed {len(result.records)} VM(s), {len(result.failed)} failed\n\n"
        f"Restart script: {restart_path}\n"
        f"Run log:        {run_log.path}",
        title="SIMULATED" if dry_run else "DONE",
    )
    return 0
