"""Formatted records consumed by the layout strategies."""

from dataclasses import dataclass, field
from typing import Any

from ..surface.colors import Color, Colors


@dataclass(frozen=True)
class RenderItem:
    """One item as a view wants it drawn.

    Attributes:
        lines: Text lines, first line is the primary label
        line_colors: Color per line (missing entries use the layout default)
        touch_action: Tag passed to the touch handler (None = "select")
        touch_payload: Opaque value passed to the touch handler
    """

    lines: tuple[str, ...] = ()
    line_colors: tuple[Color | None, ...] = ()
    touch_action: str | None = None
    touch_payload: Any = None

    @classmethod
    def of(
        cls,
        *lines: str,
        colors: tuple[Color | None, ...] | list[Color | None] = (),
        action: str | None = None,
        payload: Any = None,
    ) -> "RenderItem":
        """Build an item from positional lines.

        Example:
            RenderItem.of("Iron Ingot", "1.2K", colors=(Colors.WHITE, Colors.GRAY))
        """
        return cls(
            lines=tuple(str(line) for line in lines),
            line_colors=tuple(colors),
            touch_action=action,
            touch_payload=payload,
        )

    def line(self, index: int) -> str:
        """Return line index, or "" if the item has fewer lines."""
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return ""

    def color(self, index: int, default: Color = Colors.WHITE) -> Color:
        """Return the color of line index, or default."""
        if 0 <= index < len(self.line_colors):
            color = self.line_colors[index]
            if color is not None:
                return color
        return default


@dataclass(frozen=True)
class LayoutResult:
    """What a layout strategy drew.

    Attributes:
        strategy: "grid", "compact", "list" or "paginated"
        shown: Number of items drawn
        overflow: Number of items that did not fit
        columns: Grid columns used (1 for list strategies)
    """

    strategy: str
    shown: int
    overflow: int = 0
    columns: int = 1
    extra: dict[str, Any] = field(default_factory=dict)
