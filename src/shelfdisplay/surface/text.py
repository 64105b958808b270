"""Text helpers for fixed-width monitors."""

from .base import RenderSurface
from .colors import Color

ELLIPSIS = "..."

_SUFFIXES = (
    (1_000_000_000_000, "T"),
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)


def truncate_middle(text: str, max_length: int) -> str:
    """Shorten text by replacing its middle with an ellipsis.

    >>> truncate_middle("minecraft:iron_ingot", 11)
    'mine...ngot'
    """
    text = str(text)
    if max_length < 1:
        return ""
    if len(text) <= max_length:
        return text
    if max_length <= len(ELLIPSIS):
        return text[:max_length]

    prefix = (max_length - len(ELLIPSIS)) // 2
    suffix = max_length - len(ELLIPSIS) - prefix
    return text[:prefix] + ELLIPSIS + text[-suffix:]


def truncate_end(text: str, max_length: int) -> str:
    """Shorten text keeping its readable prefix."""
    text = str(text)
    if max_length < 1:
        return ""
    if len(text) <= max_length:
        return text
    if max_length <= len(ELLIPSIS):
        return text[:max_length]
    return text[: max_length - len(ELLIPSIS)] + ELLIPSIS


def format_number(value: float, decimals: int = 1) -> str:
    """Compact number formatting (1234567 -> '1.2M')."""
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    for threshold, suffix in _SUFFIXES:
        if magnitude >= threshold:
            return f"{sign}{magnitude / threshold:.{decimals}f}{suffix}"
    if magnitude == int(magnitude):
        return f"{sign}{int(magnitude)}"
    return f"{sign}{magnitude:.{decimals}f}"


def prettify_name(resource_id: str) -> str:
    """Turn a registry id into a display name.

    >>> prettify_name("minecraft:iron_ingot")
    'Iron Ingot'
    """
    name = resource_id.split(":", 1)[-1]
    return " ".join(part.capitalize() for part in name.replace("-", "_").split("_") if part)


def format_duration(seconds: float) -> str:
    """Short duration string: 45s, 3m5s, 2h10m."""
    seconds = max(0, int(seconds))
    if seconds >= 3600:
        return f"{seconds // 3600}h{(seconds % 3600) // 60}m"
    if seconds >= 60:
        return f"{seconds // 60}m{seconds % 60}s"
    return f"{seconds}s"


def write_centered(surface: RenderSurface, y: int, text: str, color: Color) -> None:
    """Write text horizontally centered on row y."""
    width, _ = surface.get_size()
    text = truncate_middle(text, width)
    x = max(0, (width - len(text)) // 2)
    surface.set_foreground(color)
    surface.write(x, y, text)
