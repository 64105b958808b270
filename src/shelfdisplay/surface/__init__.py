"""Render surface subsystem.

Provides:
- RenderSurface protocol for character-grid monitors
- BufferSurface in-memory implementation
- Color palette and text helpers
- PIL rasterization for snapshots
"""

from .base import RenderSurface
from .buffer import BufferSurface, Cell
from .colors import Color, Colors
from .image import render_image, save_snapshot

__all__ = [
    "RenderSurface",
    "BufferSurface",
    "Cell",
    "Color",
    "Colors",
    "render_image",
    "save_snapshot",
]
