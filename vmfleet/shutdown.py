"""Disaster-recovery shutdown sequencing.

Per VM the OS disk is probed first: a VM with an ephemeral ('Local') OS
disk is stopped, any other VM is deallocated. Stop and deallocate requests
are fire-and-forget; the only synchronous wait is wait_for_stopped, which
polls stopped VMs one at a time until they report PowerState/stopped or
the timeout runs out. Stopped VMs that confirm can then be deallocated in
a follow-up pass.
"""

import logging
import time
from typing import Callable, List, Sequence, Tuple

from .azure.auth import AzureError
from .azure.fleet import EPHEMERAL_LOCAL, FleetClient
from .azure.models import ShutdownAction, ShutdownRecord, ShutdownResult, VmInfo
from .logging_config import RunLog

logger = logging.getLogger(__name__)

DEFAULT_POLL_TIMEOUT = 300
DEFAULT_POLL_INTERVAL = 10


class ShutdownSequencer:
    """Shuts down a target set of VMs, one VM at a time."""

    def __init__(
        self,
        client: FleetClient,
        run_log: RunLog,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the sequencer.

        Args:
            client: Fleet client (carries the simulate flag)
            run_log: Run log for commands, errors and timeouts
            poll_timeout: Seconds to wait per VM for PowerState/stopped
            poll_interval: Seconds between polls
            sleep: Sleep function (replaceable in tests)
            clock: Monotonic clock (replaceable in tests)
        """
        self.client = client
        self.run_log = run_log
        self.poll_timeout = poll_timeout
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    def choose_action(self, ephemeral_option) -> ShutdownAction:
        """'Local' (ephemeral OS disk) -> stop, anything else -> deallocate."""
        if ephemeral_option == EPHEMERAL_LOCAL:
            return ShutdownAction.STOP
        return ShutdownAction.DEALLOCATE

    def shutdown(self, targets: Sequence[VmInfo]) -> ShutdownResult:
        """Issue a stop or deallocate request for every target."""
        result = ShutdownResult()

        for vm in targets:
            record = ShutdownRecord.for_vm(vm)
            result.records.append(record)

            try:
                record.ephemeral_option = self.client.get_ephemeral_os_disk_option(vm.resource_group, vm.name)
            except AzureError as e:
                record.error = e.message
                result.failed.append(record)
                self.run_log.error(f"Failed to read OS disk settings for {vm.name}: {e.message}",
                                   command=e.details.get("command"))
                continue

            record.action = self.choose_action(record.ephemeral_option)
            try:
                if record.action == ShutdownAction.STOP:
                    self.run_log.info(f"{vm.name} has an ephemeral OS disk; stopping")
                    self.client.stop_vm(vm.resource_group, vm.name)
                else:
                    self.client.deallocate_vm(vm.resource_group, vm.name)
            except AzureError as e:
                record.error = e.message
                result.failed.append(record)
                self.run_log.error(f"Failed to {record.action.value} {vm.name}: {e.message}",
                                   command=e.details.get("command"))
                continue

            if record.action == ShutdownAction.STOP:
                result.stopped.append(record)

        logger.info(
            f"Shutdown pass: {len(result.records)} targets, "
            f"{len(result.stopped)} stopped, {len(result.failed)} failed"
        )
        return result

    def wait_for_stopped(self, records: Sequence[ShutdownRecord]) -> Tuple[List[ShutdownRecord], List[ShutdownRecord]]:
        """Poll each stopped VM until it reports 'stopped' or times out.

        Under simulate mode nothing was stopped, so every record is taken
        as confirmed without polling.

        Returns:
            Tuple of (confirmed, unconfirmed). Timeouts and polling errors
            are unconfirmed; a VM found already deallocated is in neither.
        """
        confirmed: List[ShutdownRecord] = []
        unconfirmed: List[ShutdownRecord] = []

        if self.client.dry_run:
            for record in records:
                self.run_log.info(f"Would wait for {record.name} to reach 'stopped'")
            return list(records), unconfirmed

        for record in records:
            state = self._poll_until_stopped(record)
            if state == "stopped":
                self.run_log.info(f"{record.name} is stopped")
                confirmed.append(record)
            elif state == "deallocated":
                self.run_log.info(f"{record.name} is already deallocated")
            else:
                unconfirmed.append(record)

        return confirmed, unconfirmed

    def _poll_until_stopped(self, record: ShutdownRecord) -> str:
        deadline = self._clock() + self.poll_timeout
        while True:
            try:
                state = self.client.get_power_state(record.resource_group, record.name)
            except AzureError as e:
                self.run_log.error(f"Failed to read power state of {record.name}: {e.message}",
                                   command=e.details.get("command"))
                return "error"

            if state in ("stopped", "deallocated"):
                return state

            if self._clock() >= deadline:
                self.run_log.warning(
                    f"Timed out after {self.poll_timeout:g}s waiting for {record.name} to stop "
                    f"(last state: {state}); not confirmed"
                )
                return "timeout"

            self._sleep(self.poll_interval)

    def deallocate_stopped(self, records: Sequence[ShutdownRecord]) -> List[ShutdownRecord]:
        """Deallocate VMs that were stopped first.

        Returns:
            Records whose deallocate request failed
        """
        failed: List[ShutdownRecord] = []
        for record in records:
            try:
                self.client.deallocate_vm(record.resource_group, record.name)
            except AzureError as e:
                failed.append(record)
                self.run_log.error(f"Failed to deallocate {record.name}: {e.message}",
                                   command=e.details.get("command"))
        return failed
