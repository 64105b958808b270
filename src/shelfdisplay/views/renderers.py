"""Shared render helpers for views.

Provides:
- Empty, error and needs-configuration placeholders
- Header row (with the touchable "[*]" view-switcher hint) and footer row
- Progress and timer bars, sparklines
"""

from dataclasses import dataclass

from ..surface.base import RenderSurface
from ..surface.colors import Color, Colors
from ..surface.text import format_duration, truncate_middle, write_centered

HEADER_INDICATOR = "[*]"


@dataclass(frozen=True)
class Header:
    """Header row content.

    Attributes:
        text: Primary text
        color: Primary text color
        secondary: Text following the primary (counts, etc.)
        secondary_color: Secondary text color
    """

    text: str
    color: Color = Colors.WHITE
    secondary: str | None = None
    secondary_color: Color = Colors.GRAY


@dataclass(frozen=True)
class Footer:
    """Footer row content."""

    text: str
    color: Color = Colors.GRAY


def render_empty(surface: RenderSurface, message: str = "No data") -> None:
    """Centered gray placeholder for "nothing to show"."""
    _, height = surface.get_size()
    write_centered(surface, height // 2, message, Colors.GRAY)


def render_error(surface: RenderSurface, message: str = "Error") -> None:
    """Centered red error message."""
    _, height = surface.get_size()
    write_centered(surface, height // 2, message, Colors.RED)


def render_needs_config(surface: RenderSurface, missing: list[str]) -> None:
    """Placeholder for a view whose required settings are unset."""
    _, height = surface.get_size()
    middle = height // 2
    write_centered(surface, max(0, middle - 1), "Needs configuration", Colors.ORANGE)
    if missing and middle + 1 < height:
        write_centered(surface, middle + 1, "Set: " + ", ".join(missing), Colors.GRAY)


def render_header(surface: RenderSurface, header: Header | str | None) -> int:
    """Draw the header row.

    Returns:
        First content row (1 with a header, 0 without)
    """
    if header is None:
        return 0

    width, _ = surface.get_size()
    content_width = width - len(HEADER_INDICATOR)

    if isinstance(header, str):
        header = Header(header)

    text = truncate_middle(header.text, content_width)
    surface.set_foreground(header.color)
    surface.write(0, 0, text)

    if header.secondary:
        remaining = content_width - len(text)
        if remaining > 0:
            surface.set_foreground(header.secondary_color)
            surface.write(len(text), 0, truncate_middle(header.secondary, remaining))

    if width > len(HEADER_INDICATOR):
        surface.set_foreground(Colors.GRAY)
        surface.write(width - len(HEADER_INDICATOR), 0, HEADER_INDICATOR)
    return 1


def render_footer(surface: RenderSurface, footer: Footer | str | None) -> None:
    """Draw the footer on the last row."""
    if footer is None:
        return
    if isinstance(footer, str):
        footer = Footer(footer)
    width, height = surface.get_size()
    surface.set_foreground(footer.color)
    surface.write(0, height - 1, truncate_middle(footer.text, width))


def draw_bar(
    surface: RenderSurface,
    x: int,
    y: int,
    width: int,
    fraction: float,
    color: Color,
    empty_color: Color = Colors.GRAY,
) -> None:
    """Horizontal bar filled to fraction (0-1)."""
    if width <= 0:
        return
    fraction = max(0.0, min(1.0, fraction))
    filled = int(width * fraction)

    if filled > 0:
        surface.set_background(color)
        surface.write(x, y, " " * filled)
    if width - filled > 0:
        surface.set_background(empty_color)
        surface.write(x + filled, y, " " * (width - filled))
    surface.set_background(Colors.BLACK)


def draw_timer_bar(
    surface: RenderSurface,
    y: int,
    elapsed: float,
    total: float,
    color: Color = Colors.BLUE,
) -> None:
    """Period progress bar followed by the remaining time."""
    width, _ = surface.get_size()
    progress = min(1.0, elapsed / total) if total > 0 else 1.0
    label = format_duration(max(0.0, total - elapsed))

    bar_width = max(4, width - len(label) - 2)
    draw_bar(surface, 0, y, bar_width, progress, color)
    surface.set_foreground(Colors.LIGHT_GRAY)
    surface.write(bar_width + 1, y, label)


SPARK_LEVELS = " .:-=+*#"


def sparkline(values: list[float], width: int) -> str:
    """Render the last width values as one row of ASCII levels."""
    values = values[-width:] if width > 0 else []
    if not values:
        return ""
    low = min(values)
    high = max(values)
    span = high - low
    top = len(SPARK_LEVELS) - 1
    if span <= 0:
        return SPARK_LEVELS[top // 2] * len(values)
    return "".join(SPARK_LEVELS[round((value - low) / span * top)] for value in values)
