"""Color definitions and theme management for vmfleet."""

from dataclasses import dataclass


@dataclass
class Theme:
    """Color theme definition."""

    # Primary colors
    primary: str = "bright_cyan"
    secondary: str = "cyan"

    # Status colors
    success: str = "green"
    warning: str = "yellow"
    error: str = "red"
    info: str = "blue"

    # UI element colors
    border: str = "dim cyan"
    muted: str = "dim"

    # Simulate mode banner
    dry_run: str = "bold magenta"


class Colors:
    """Centralized color management for CLI output."""

    _current_theme = Theme()

    @classmethod
    def get_theme(cls) -> Theme:
        """Get the current theme."""
        return cls._current_theme

    @classmethod
    def style(cls, text: str, style: str) -> str:
        """Apply a Rich style to text."""
        return f"[{style}]{text}[/{style}]"

    @classmethod
    def muted(cls, text: str) -> str:
        return cls.style(text, cls._current_theme.muted)

    @classmethod
    def status_icon(cls, status: str) -> str:
        """Get a styled status icon."""
        theme = cls._current_theme
        icons = {
            "ok": f"[{theme.success}]✓[/{theme.success}]",
            "error": f"[{theme.error}]✗[/{theme.error}]",
            "warning": f"[{theme.warning}]⚠[/{theme.warning}]",
            "info": f"[{theme.info}]ℹ[/{theme.info}]",
        }
        return icons.get(status, "")
