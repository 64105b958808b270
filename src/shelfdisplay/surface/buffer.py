"""In-memory character grid surface.

Used as the render target in tests and in demo mode, and as the source
for PNG snapshots.
"""

import logging
from dataclasses import dataclass

from .colors import Color, Colors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cell:
    """One character cell."""

    char: str = " "
    fg: Color = Colors.WHITE
    bg: Color = Colors.BLACK


class BufferSurface:
    """Character grid held in memory.

    Usage:
        surface = BufferSurface(39, 13)
        surface.set_foreground(Colors.LIME)
        surface.write(0, 0, "Hello")
        assert surface.line(0).startswith("Hello")
    """

    def __init__(self, width: int, height: int, surface_id: str = "buffer") -> None:
        if width < 1 or height < 1:
            raise ValueError("Surface must be at least 1x1")
        self.surface_id = surface_id
        self._width = width
        self._height = height
        self._fg = Colors.WHITE
        self._bg = Colors.BLACK
        self._cells: list[list[Cell]] = []
        self.write_count = 0
        self.clear_count = 0
        self.clear()

    def __repr__(self) -> str:
        return f"BufferSurface({self.surface_id!r}, {self._width}x{self._height})"

    # -- RenderSurface --------------------------------------------------------

    def write(self, x: int, y: int, text: str) -> None:
        """Write text at (x, y), clipping at the grid edges."""
        self.write_count += 1
        if y < 0 or y >= self._height:
            return
        row = self._cells[y]
        for offset, char in enumerate(str(text)):
            col = x + offset
            if col >= self._width:
                break
            if col < 0:
                continue
            row[col] = Cell(char, self._fg, self._bg)

    def set_foreground(self, color: Color) -> None:
        self._fg = color

    def set_background(self, color: Color) -> None:
        self._bg = color

    def clear(self) -> None:
        self.clear_count += 1
        blank = Cell(" ", self._fg, self._bg)
        self._cells = [[blank] * self._width for _ in range(self._height)]

    def get_size(self) -> tuple[int, int]:
        return self._width, self._height

    # -- Inspection -----------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def resize(self, width: int, height: int) -> None:
        """Change the grid size (a monitor was rebuilt); contents are lost."""
        if width < 1 or height < 1:
            raise ValueError("Surface must be at least 1x1")
        logger.debug("Resizing %s to %dx%d", self.surface_id, width, height)
        self._width = width
        self._height = height
        self.clear()

    def cell(self, x: int, y: int) -> Cell:
        return self._cells[y][x]

    def line(self, y: int) -> str:
        """Return the text of row y."""
        return "".join(cell.char for cell in self._cells[y])

    def lines(self) -> list[str]:
        return [self.line(y) for y in range(self._height)]

    def text(self) -> str:
        """Return the whole grid, rows joined by newlines, right-stripped."""
        return "\n".join(line.rstrip() for line in self.lines())

    def find(self, needle: str) -> tuple[int, int] | None:
        """Return the (x, y) of the first occurrence of needle."""
        for y, line in enumerate(self.lines()):
            x = line.find(needle)
            if x >= 0:
                return x, y
        return None

    def contains(self, needle: str) -> bool:
        return self.find(needle) is not None

    def foreground_at(self, x: int, y: int) -> Color:
        return self._cells[y][x].fg
