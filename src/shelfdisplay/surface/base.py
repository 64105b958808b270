"""Render surface interface.

A surface is a fixed-size character grid. Coordinates are zero-based:
x is the column, y the row. Writes outside the grid are clipped.
"""

from typing import Protocol, runtime_checkable

from .colors import Color


@runtime_checkable
class RenderSurface(Protocol):
    """What a view may do to its monitor."""

    def write(self, x: int, y: int, text: str) -> None:
        """Write text starting at (x, y) with the current colors."""
        ...

    def set_foreground(self, color: Color) -> None:
        ...

    def set_background(self, color: Color) -> None:
        ...

    def clear(self) -> None:
        """Fill the grid with spaces in the current background color."""
        ...

    def get_size(self) -> tuple[int, int]:
        """Return (width, height) in characters."""
        ...
