"""UI components for vmfleet."""

from .colors import Colors, Theme
from .frame import Frame
from .renderer import Renderer

__all__ = ["Colors", "Theme", "Frame", "Renderer"]
