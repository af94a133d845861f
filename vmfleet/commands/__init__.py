"""Workflow commands for vmfleet."""

from .tag import handle_tag
from .undo import handle_undo
from .zone_shutdown import handle_zone_shutdown

__all__ = ["handle_tag", "handle_undo", "handle_zone_shutdown"]
