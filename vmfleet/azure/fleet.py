"""Provider calls for VM fleet operations.

Thin wrapper over the Azure compute and resource SDK clients. Every call
has an az CLI equivalent command text; it is written to the run log for
mutating calls and attached to the error of any failing call, so that a
failure can always be reported with the command that caused it.

Under simulate mode (dry_run) mutating calls are logged with a
"Would run:" prefix and never issued. Read calls always run.
"""

import logging
import shlex
from typing import Any, Callable, Dict, List, Optional

from .auth import AzureError, AzureSession, PreconditionError, wrap_azure_error
from .models import TagMap, VmInfo
from ..logging_config import RunLog

logger = logging.getLogger(__name__)

EPHEMERAL_LOCAL = "Local"


def az_command(*args: str) -> str:
    """Render an az CLI command line for logs."""
    return shlex.join(["az", *args])


def parse_resource_id(resource_id: str) -> Dict[str, str]:
    """Parse an Azure resource ID into its components.

    Args:
        resource_id: Full Azure resource ID

    Returns:
        Dictionary with subscription_id, resource_group, provider, type, name
    """
    parts = resource_id.strip("/").split("/")
    result = {}

    for i, part in enumerate(parts):
        if part.lower() == "subscriptions" and i + 1 < len(parts):
            result["subscription_id"] = parts[i + 1]
        elif part.lower() == "resourcegroups" and i + 1 < len(parts):
            result["resource_group"] = parts[i + 1]
        elif part.lower() == "providers" and i + 1 < len(parts):
            result["provider"] = parts[i + 1]
            if i + 2 < len(parts):
                result["type"] = parts[i + 2]
            if i + 3 < len(parts):
                result["name"] = parts[i + 3]

    return result


def normalize_power_state(code: Optional[str]) -> str:
    """'PowerState/stopped' -> 'stopped'."""
    if not code:
        return "unknown"
    return code.split("/", 1)[-1].lower()


class FleetClient:
    """Azure VM and tag calls for one session."""

    def __init__(self, session: AzureSession, run_log: Optional[RunLog] = None, dry_run: bool = False):
        """Initialize the client.

        Args:
            session: Login session for this run
            run_log: Run log receiving the command text of mutating calls
            dry_run: Log mutating calls instead of issuing them
        """
        self.session = session
        self.run_log = run_log
        self.dry_run = dry_run

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _call(self, command: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        """Run an SDK call, wrapping failures with the command text."""
        logger.debug(f"Azure call: {command}")
        try:
            return func(*args, **kwargs)
        except Exception as e:
            wrapped = wrap_azure_error(e)
            wrapped.details["command"] = command
            raise wrapped

    def _mutate(self, command: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        """Log and run a mutating call; a no-op under simulate mode."""
        if self.run_log is not None:
            self.run_log.command(command, dry_run=self.dry_run)
        if self.dry_run:
            return None
        return self._call(command, func, *args, **kwargs)

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    def list_vms(self) -> List[VmInfo]:
        """List every VM in the subscription.

        Raises:
            PreconditionError: If the listing fails
        """
        command = az_command("vm", "list", "--subscription", self.session.subscription_id)
        try:
            vms = self._call(command, lambda: list(self.session.compute.virtual_machines.list_all()))
        except AzureError as e:
            raise PreconditionError(f"Failed to list VMs: {e.message}", details=e.details)

        inventory = []
        for vm in vms:
            parsed = parse_resource_id(vm.id)
            inventory.append(VmInfo(
                resource_id=vm.id,
                name=vm.name,
                resource_group=parsed.get("resource_group", ""),
                location=vm.location or "",
                zones=list(vm.zones or []),
            ))

        logger.info(f"Found {len(inventory)} VMs in subscription {self.session.subscription_id}")
        return inventory

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def get_resource_tags(self, resource_id: str) -> TagMap:
        """Fetch the full tag map of a resource."""
        command = az_command("tag", "list", "--resource-id", resource_id)
        result = self._call(command, self.session.resources.tags.get_at_scope, resource_id)
        properties = getattr(result, "properties", None)
        return TagMap.from_azure(getattr(properties, "tags", None))

    def merge_tag(self, resource_id: str, key: str, value: str) -> None:
        """Add or overwrite a single tag, preserving all others."""
        from azure.mgmt.resource.resources.models import Tags, TagsPatchResource

        command = az_command(
            "tag", "update", "--resource-id", resource_id,
            "--operation", "Merge", "--tags", f"{key}={value}",
        )
        parameters = TagsPatchResource(operation="Merge", properties=Tags(tags={key: value}))
        self._mutate(command, self._wait, self.session.resources.tags.begin_update_at_scope, resource_id, parameters)

    def replace_tags(self, resource_id: str, tags: TagMap) -> None:
        """Set the resource's tag map to exactly ``tags``.

        An empty map is applied by deleting all tags at the scope.
        """
        if len(tags) == 0:
            command = az_command("tag", "delete", "--resource-id", resource_id, "--yes")
            self._mutate(command, self._wait, self.session.resources.tags.begin_delete_at_scope, resource_id)
            return

        from azure.mgmt.resource.resources.models import Tags, TagsPatchResource

        command = az_command(
            "tag", "update", "--resource-id", resource_id, "--operation", "Replace",
            "--tags", *[f"{k}={v}" for k, v in tags.items()],
        )
        parameters = TagsPatchResource(operation="Replace", properties=Tags(tags=tags.as_dict()))
        self._mutate(command, self._wait, self.session.resources.tags.begin_update_at_scope, resource_id, parameters)

    @staticmethod
    def _wait(begin: Callable[..., Any], *args) -> Any:
        return begin(*args).result()

    # -------------------------------------------------------------------------
    # Power
    # -------------------------------------------------------------------------

    def get_ephemeral_os_disk_option(self, resource_group: str, name: str) -> Optional[str]:
        """Return the OS disk diff-disk option ('Local' for ephemeral), or None."""
        command = az_command(
            "vm", "show", "--resource-group", resource_group, "--name", name,
            "--query", "storageProfile.osDisk.diffDiskSettings.option",
        )
        vm = self._call(command, self.session.compute.virtual_machines.get, resource_group, name)
        storage_profile = getattr(vm, "storage_profile", None)
        os_disk = getattr(storage_profile, "os_disk", None)
        settings = getattr(os_disk, "diff_disk_settings", None)
        option = getattr(settings, "option", None)
        if option is None:
            return None
        return str(getattr(option, "value", option))

    def stop_vm(self, resource_group: str, name: str) -> None:
        """Request a stop (power off, compute stays allocated). Does not wait."""
        command = az_command("vm", "stop", "--resource-group", resource_group, "--name", name, "--no-wait")
        self._mutate(command, self.session.compute.virtual_machines.begin_power_off, resource_group, name)

    def deallocate_vm(self, resource_group: str, name: str) -> None:
        """Request a deallocation. Does not wait."""
        command = az_command("vm", "deallocate", "--resource-group", resource_group, "--name", name, "--no-wait")
        self._mutate(command, self.session.compute.virtual_machines.begin_deallocate, resource_group, name)

    def start_vm(self, resource_group: str, name: str) -> None:
        """Request a start. Does not wait."""
        command = az_command("vm", "start", "--resource-group", resource_group, "--name", name, "--no-wait")
        self._mutate(command, self.session.compute.virtual_machines.begin_start, resource_group, name)

    def get_power_state(self, resource_group: str, name: str) -> str:
        """Return the normalized power state ('running', 'stopped', 'deallocated', ...)."""
        command = az_command(
            "vm", "get-instance-view", "--resource-group", resource_group, "--name", name,
            "--query", "instanceView.statuses[?starts_with(code, 'PowerState/')].code",
        )
        view = self._call(command, self.session.compute.virtual_machines.instance_view, resource_group, name)
        for status in getattr(view, "statuses", None) or []:
            code = getattr(status, "code", "") or ""
            if code.startswith("PowerState/"):
                return normalize_power_state(code)
        return "unknown"
