"""Clock view.

Needs no provider, so it is always mountable and is the default view
when nothing better fits a surface.
"""

import logging
from datetime import datetime
from typing import ClassVar

from ..surface.colors import Color, Colors
from ..surface.text import write_centered
from .base import BaseView, ViewCapability, ViewDescriptor
from .schema import ConfigField, FieldType

logger = logging.getLogger(__name__)


# Block digits, 3x5 cells each
BLOCK_DIGITS = {
    "0": ["###", "# #", "# #", "# #", "###"],
    "1": [" # ", "## ", " # ", " # ", "###"],
    "2": ["###", "  #", "###", "#  ", "###"],
    "3": ["###", "  #", "###", "  #", "###"],
    "4": ["# #", "# #", "###", "  #", "  #"],
    "5": ["###", "#  ", "###", "  #", "###"],
    "6": ["###", "#  ", "###", "# #", "###"],
    "7": ["###", "  #", "  #", "  #", "  #"],
    "8": ["###", "# #", "###", "# #", "###"],
    "9": ["###", "# #", "###", "  #", "###"],
    ":": [" ", "#", " ", "#", " "],
}

DIGIT_HEIGHT = 5


def get_time_color(hour: int) -> Color:
    """Palette color for the time of day."""
    if 6 <= hour < 12:
        return Colors.YELLOW
    if 12 <= hour < 18:
        return Colors.WHITE
    if 18 <= hour < 22:
        return Colors.ORANGE
    return Colors.LIGHT_BLUE


class ClockView(BaseView):
    """Time and date, drawn in block digits when the surface allows."""

    descriptor = ViewDescriptor(
        id="clock",
        name="Clock",
        description="Time and date",
        poll_interval_ms=1000,
        config_schema=(
            ConfigField(
                key="format_24h",
                type=FieldType.BOOLEAN,
                label="24-Hour Format",
                default=True,
            ),
            ConfigField(
                key="show_date",
                type=FieldType.BOOLEAN,
                label="Show Date",
                default=True,
            ),
            ConfigField(
                key="show_seconds",
                type=FieldType.BOOLEAN,
                label="Show Seconds",
                default=False,
            ),
            ConfigField(
                key="color_mode",
                type=FieldType.SELECT,
                label="Color Mode",
                default="auto",
                options=("auto", "static"),
            ),
        ),
    )
    capabilities = frozenset({ViewCapability.CONFIG})
    uses_provider: ClassVar[bool] = False

    async def get_data(self) -> datetime:
        return self.context.wall_clock()

    def format_time(self, now: datetime) -> str:
        if self._config.get("format_24h", True):
            text = f"{now.hour:02d}:{now.minute:02d}"
        else:
            hour = now.hour % 12 or 12
            text = f"{hour:2d}:{now.minute:02d}"
        return text

    def render(self, now: datetime) -> None:
        width, height = self.surface.get_size()
        color = get_time_color(now.hour) if self._config.get("color_mode") == "auto" else Colors.WHITE
        time_text = self.format_time(now).strip()

        show_date = self._config.get("show_date", True)
        block_width = self._block_width(time_text)
        needed_rows = DIGIT_HEIGHT + (2 if show_date else 0)

        if block_width <= width and needed_rows <= height:
            top = max(0, (height - needed_rows) // 2)
            self._draw_blocks(time_text, (width - block_width) // 2, top, color)
            next_row = top + DIGIT_HEIGHT + 1
        else:
            top = max(0, (height - (2 if show_date else 1)) // 2)
            write_centered(self.surface, top, time_text, color)
            next_row = top + 1

        if self._config.get("show_seconds", False):
            self.surface.set_foreground(Colors.GRAY)
            self.surface.write(max(0, width - 2), 0, f"{now.second:02d}")

        if not self._config.get("format_24h", True) and width >= 2:
            self.surface.set_foreground(Colors.GRAY)
            self.surface.write(0, 0, "PM" if now.hour >= 12 else "AM")

        if show_date and next_row < height:
            write_centered(self.surface, next_row, now.strftime("%d.%m.%Y"), Colors.GRAY)

    def _block_width(self, text: str) -> int:
        return sum(len(BLOCK_DIGITS[char][0]) + 1 for char in text if char in BLOCK_DIGITS) - 1

    def _draw_blocks(self, text: str, x: int, y: int, color: Color) -> None:
        self.surface.set_background(color)
        for char in text:
            pattern = BLOCK_DIGITS.get(char)
            if pattern is None:
                continue
            for row, line in enumerate(pattern):
                for col, cell in enumerate(line):
                    if cell == "#":
                        self.surface.write(x + col, y + row, " ")
            x += len(pattern[0]) + 1
        self.surface.set_background(Colors.BLACK)
