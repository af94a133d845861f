"""High-level UI renderer that combines Frame with input handling."""

from typing import Any, Callable, Dict, List, Optional, Sequence
from prompt_toolkit import prompt
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

from ..azure.models import ShutdownResult, SubscriptionInfo, TagChange, VmInfo
from ..zones import MENU_ALL, MENU_NON_ZONAL, MENU_ZONE, MenuEntry
from .colors import Colors
from .frame import Frame


class Renderer:
    """High-level UI renderer combining output and input."""

    def __init__(
        self,
        console: Optional[Console] = None,
        input_func: Optional[Callable[[str], str]] = None,
    ):
        """Initialize the renderer.

        Args:
            console: Rich console instance
            input_func: Line input function (defaults to prompt_toolkit's prompt)
        """
        self.console = console or Console()
        self.frame = Frame(self.console)
        self._input = input_func or prompt

    # -------------------------------------------------------------------------
    # Input Methods
    # -------------------------------------------------------------------------

    def get_input(self, prompt_text: str) -> str:
        """Get single-line input from the operator.

        EOF and Ctrl+C propagate so the caller can abandon the run.

        Args:
            prompt_text: Prompt to display

        Returns:
            Stripped input string
        """
        return self._input(prompt_text).strip()

    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt for yes/no confirmation.

        Args:
            message: Confirmation message
            default: Default value if empty response

        Returns:
            True if confirmed, False otherwise
        """
        suffix = "[Y/n]" if default else "[y/N]"
        full_message = f"{message} {suffix}: "

        try:
            response = self._input(full_message).strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False

        if not response:
            return default
        return response in ("y", "yes")

    # -------------------------------------------------------------------------
    # List Display Methods
    # -------------------------------------------------------------------------

    def show_subscriptions(self, subscriptions: Sequence[SubscriptionInfo]) -> None:
        """Display subscriptions with their selection index."""
        table = Table(box=box.SIMPLE, show_edge=False)
        table.add_column("#", justify="right", style="bold")
        table.add_column("Name")
        table.add_column("Subscription ID", style="dim")
        table.add_column("State")

        for index, sub in enumerate(subscriptions):
            table.add_row(str(index), escape(sub.display_name), sub.subscription_id, sub.state)

        self.frame.table(table, "SUBSCRIPTIONS")

    def show_vms(self, vms: Sequence[VmInfo], title: str = "VIRTUAL MACHINES") -> None:
        """Display VMs with their selection index.

        Args:
            vms: VMs in display (and index) order
            title: Panel title
        """
        table = Table(box=box.SIMPLE, show_edge=False)
        table.add_column("#", justify="right", style="bold")
        table.add_column("Resource Group", style="cyan")
        table.add_column("Name")
        table.add_column("Zones")
        table.add_column("Location", style="dim")

        for index, vm in enumerate(vms):
            zones = ", ".join(vm.zones) if vm.zones else Colors.muted("-")
            table.add_row(str(index), escape(vm.resource_group), escape(vm.name), zones, vm.location)

        self.frame.table(table, title)

    def show_menu(self, entries: Sequence[MenuEntry]) -> None:
        """Display the zone menu, numbered from 1."""
        lines = []
        for number, entry in enumerate(entries, start=1):
            line = f"[bold]{number}.[/bold] {entry.label}"
            if entry.kind in (MENU_ZONE, MENU_NON_ZONAL, MENU_ALL):
                line += f" {Colors.muted(f'({len(entry.vms)} VMs)')}"
            lines.append(line)

        panel = Panel(
            "\n".join(lines),
            title="[bold]SHUTDOWN TARGET[/bold]",
            border_style="dim cyan",
            box=box.ROUNDED,
        )
        self.console.print(panel)
        self.console.print()

    def show_tag_changes(self, changes: Sequence[TagChange]) -> None:
        """Display before/after tag snapshots."""
        table = Table(box=box.SIMPLE, show_edge=False)
        table.add_column("VM")
        table.add_column("Resource Group", style="cyan")
        table.add_column("Old Tags", style="dim")
        table.add_column("New Tags")

        for change in changes:
            table.add_row(
                escape(change.name),
                escape(change.resource_group),
                escape(change.old_tags.to_json()),
                escape(change.new_tags.to_json()),
            )

        self.frame.table(table, "TAG CHANGES")

    def show_shutdown_summary(self, result: ShutdownResult) -> None:
        """Display what the shutdown pass did per VM."""
        table = Table(box=box.SIMPLE, show_edge=False)
        table.add_column("")
        table.add_column("VM")
        table.add_column("Resource Group", style="cyan")
        table.add_column("Action")
        table.add_column("Detail", style="dim")

        for record in result.records:
            status = "ok" if record.succeeded else "error"
            action = record.action.value if record.action else "-"
            table.add_row(
                Colors.status_icon(status),
                escape(record.name),
                escape(record.resource_group),
                action,
                escape(record.error or record.ephemeral_option or ""),
            )

        self.frame.table(table, "SHUTDOWN SUMMARY")

    def show_startup_check(self, checks: List[Dict[str, Any]]) -> None:
        """Display startup checks.

        Args:
            checks: List of check results with keys: name, status, message
        """
        lines = []
        for check in checks:
            line = f"{Colors.status_icon(check.get('status', 'error'))} [bold]{check.get('name', 'Unknown')}[/bold]"
            if check.get("message"):
                line += f" - {escape(check['message'])}"
            lines.append(line)

        panel = Panel(
            "\n".join(lines),
            title="[bold]STARTUP CHECKS[/bold]",
            border_style="dim cyan",
            box=box.ROUNDED,
        )
        self.console.print(panel)
        self.console.print()

    # -------------------------------------------------------------------------
    # Delegate Methods to Frame
    # -------------------------------------------------------------------------

    def header(self, *args, **kwargs) -> None:
        """Display header (delegates to frame)."""
        self.frame.header(*args, **kwargs)

    def info(self, *args, **kwargs) -> None:
        """Display info (delegates to frame)."""
        self.frame.info(*args, **kwargs)

    def success(self, *args, **kwargs) -> None:
        """Display success (delegates to frame)."""
        self.frame.success(*args, **kwargs)

    def warning(self, *args, **kwargs) -> None:
        """Display warning (delegates to frame)."""
        self.frame.warning(*args, **kwargs)

    def error(self, *args, **kwargs) -> None:
        """Display error (delegates to frame)."""
        self.frame.error(*args, **kwargs)
