"""Frame-based UI components for structured terminal output."""

from typing import Optional
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from .colors import Colors


class Frame:
    """Provides frame-based terminal output with consistent styling."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the frame renderer.

        Args:
            console: Rich console instance (creates new if not provided)
        """
        self.console = console or Console()
        self.theme = Colors.get_theme()

    def header(self, workflow: str, subscription: str = "", dry_run: bool = False) -> None:
        """Display the workflow header.

        Args:
            workflow: Workflow name (e.g. "TAG VMs")
            subscription: Active subscription label
            dry_run: Whether simulate mode is on
        """
        title = Text()
        title.append("VMFLEET", style=f"bold {self.theme.primary}")
        title.append(f" // {workflow}", style=self.theme.border)

        info_table = Table.grid(padding=(0, 2))
        info_table.add_column(style="dim", width=13)
        info_table.add_column()

        if subscription:
            info_table.add_row(
                "SUBSCRIPTION", f"[{self.theme.secondary}]{escape(subscription)}[/{self.theme.secondary}]"
            )
        mode = Colors.style("SIMULATE (no changes)", self.theme.dry_run) if dry_run else "LIVE"
        info_table.add_row("MODE", mode)

        panel = Panel(
            info_table,
            title=title,
            border_style=self.theme.border,
            box=box.ROUNDED,
            padding=(0, 1),
        )
        self.console.print(panel)
        self.console.print()

    def table(self, table: Table, title: str) -> None:
        """Display a table inside a titled panel."""
        panel = Panel(
            table,
            title=f"[bold]{title}[/bold]",
            border_style=self.theme.border,
            box=box.ROUNDED,
        )
        self.console.print(panel)
        self.console.print()

    def info(self, message: str, title: str = "INFO") -> None:
        """Display an info message.

        Args:
            message: Info message content
            title: Panel title
        """
        panel = Panel(
            message,
            title=f"[bold blue]{title}[/bold blue]",
            border_style="blue",
            box=box.ROUNDED,
        )
        self.console.print(panel)
        self.console.print()

    def success(self, message: str, title: str = "SUCCESS") -> None:
        """Display a success message.

        Args:
            message: Success message content
            title: Panel title
        """
        panel = Panel(
            message,
            title=f"[bold green]{title}[/bold green]",
            border_style="green",
            box=box.ROUNDED,
        )
        self.console.print(panel)
        self.console.print()

    def warning(self, message: str, title: str = "WARNING") -> None:
        """Display a warning message.

        Args:
            message: Warning message content
            title: Panel title
        """
        panel = Panel(
            message,
            title=f"[bold yellow]{title}[/bold yellow]",
            border_style="yellow",
            box=box.ROUNDED,
        )
        self.console.print(panel)
        self.console.print()

    def error(self, message: str, title: str = "ERROR") -> None:
        """Display an error message.

        Args:
            message: Error message content
            title: Panel title
        """
        panel = Panel(
            message,
            title=f"[bold red]{title}[/bold red]",
            border_style="red",
            box=box.ROUNDED,
        )
        self.console.print(panel)
        self.console.print()
