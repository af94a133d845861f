"""Helper functions shared by the vmfleet commands."""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, TYPE_CHECKING

from rich.markup import escape

from ..azure.auth import AzureSession, PreconditionError, get_azure_credential, list_subscriptions
from ..azure.models import VmInfo
from ..config import Settings, validate_azure_config
from ..selection import ValidationResult, parse_simple_selection, validate_subscription_id

if TYPE_CHECKING:
    from ..ui.renderer import Renderer


def run_startup_checks(renderer: "Renderer", settings: Settings) -> bool:
    """Run startup configuration checks.

    Args:
        renderer: UI renderer instance
        settings: Loaded settings

    Returns:
        True if all critical checks pass
    """
    checks: List[Dict[str, Any]] = []
    has_critical_failure = False

    python_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    if sys.version_info >= (3, 9):
        checks.append({"name": "Python Version", "status": "ok", "message": f"v{python_version}"})
    else:
        checks.append({"name": "Python Version", "status": "error", "message": f"v{python_version} (requires 3.9+)"})
        has_critical_failure = True

    is_valid, message = validate_azure_config(settings)
    checks.append({"name": "Azure Credentials", "status": "ok" if is_valid else "error", "message": message})
    if not is_valid:
        has_critical_failure = True

    if settings.azure_subscription_id and not validate_subscription_id(settings.azure_subscription_id):
        checks.append({
            "name": "Subscription",
            "status": "error",
            "message": f"AZURE_SUBSCRIPTION_ID is not a GUID: {settings.azure_subscription_id}",
        })
        has_critical_failure = True

    output_dir = Path(settings.fleet_output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        checks.append({"name": "Output Directory", "status": "error", "message": str(e)})
        has_critical_failure = True
    else:
        if os.access(output_dir, os.W_OK):
            checks.append({"name": "Output Directory", "status": "ok", "message": str(output_dir.resolve())})
        else:
            checks.append({"name": "Output Directory", "status": "error", "message": f"Not writable: {output_dir}"})
            has_critical_failure = True

    # Only show checks if there are warnings or errors
    if any(c["status"] != "ok" for c in checks):
        renderer.show_startup_check(checks)

    return not has_critical_failure


def prompt_until_valid(
    renderer: "Renderer",
    prompt_text: str,
    validate: Callable[[str], ValidationResult],
) -> Any:
    """Prompt repeatedly until ``validate`` accepts the input.

    Returns:
        The validated value
    """
    while True:
        result = validate(renderer.get_input(prompt_text))
        if result.ok:
            return result.value
        renderer.console.print(f"[red]{escape(result.reason)}[/red]")


def open_session(renderer: "Renderer", settings: Settings, subscription_id: Optional[str] = None) -> AzureSession:
    """Authenticate and pick the subscription for this run.

    An explicit subscription (argument or AZURE_SUBSCRIPTION_ID) skips the
    prompt; a single visible subscription is picked automatically.

    Raises:
        PreconditionError: Login failed or no subscription is available
    """
    credential = get_azure_credential(settings)
    subscriptions = list_subscriptions(credential)

    wanted = subscription_id or settings.azure_subscription_id
    if wanted:
        name = next((s.display_name for s in subscriptions if s.subscription_id.lower() == wanted.lower()), "")
        return AzureSession(credential=credential, subscription_id=wanted, subscription_name=name)

    if not subscriptions:
        raise PreconditionError("No Azure subscriptions are visible to this login")

    if len(subscriptions) == 1:
        chosen = subscriptions[0]
    else:
        renderer.show_subscriptions(subscriptions)

        def validate(raw: str) -> ValidationResult:
            result = parse_simple_selection(raw, len(subscriptions))
            if result.ok and len(result.value) != 1:
                return ValidationResult.failure("Pick exactly one subscription")
            return result

        index = prompt_until_valid(renderer, "Subscription #: ", validate)[0]
        chosen = subscriptions[index]

    return AzureSession(
        credential=credential,
        subscription_id=chosen.subscription_id,
        subscription_name=chosen.display_name,
    )


def sort_inventory(vms: Sequence[VmInfo]) -> List[VmInfo]:
    """Order VMs by resource group, then name, so groups list together."""
    return sorted(vms, key=lambda vm: (vm.resource_group.lower(), vm.name.lower()))


def artifact_path(settings: Settings, name: str) -> Path:
    """Path of a run artifact inside the configured output directory."""
    return Path(settings.fleet_output_dir) / name


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g., "1.5s", "2m 30s", "1h 5m")
    """
    if seconds < 1:
        return f"{seconds*1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"
