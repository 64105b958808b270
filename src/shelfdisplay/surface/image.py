"""PIL-based rasterization of character surfaces.

Turns a BufferSurface into an image so demo runs and bug reports can show
exactly what a monitor displayed.
"""

import logging
from functools import lru_cache
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from .buffer import BufferSurface

logger = logging.getLogger(__name__)

CELL_WIDTH = 8
CELL_HEIGHT = 12

MONOSPACE_FONTS = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeMono.ttf",
    "/System/Library/Fonts/Menlo.ttc",
)


@lru_cache(maxsize=8)
def cell_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """First installed monospace font at the given pixel size.

    Falls back to PIL's built-in bitmap font, which is also monospace.
    """
    for candidate in MONOSPACE_FONTS:
        if not Path(candidate).is_file():
            continue
        try:
            return ImageFont.truetype(candidate, size)
        except OSError as e:
            logger.warning("Cannot load font %s: %s", candidate, e)
    logger.debug("No monospace font installed, using the PIL bitmap font")
    return ImageFont.load_default()


def render_image(
    surface: BufferSurface,
    cell_width: int = CELL_WIDTH,
    cell_height: int = CELL_HEIGHT,
) -> Image.Image:
    """Rasterize a surface, one cell per character.

    Args:
        surface: Surface to draw
        cell_width: Pixel width of a character cell
        cell_height: Pixel height of a character cell

    Returns:
        RGB image of size (width * cell_width, height * cell_height)
    """
    width, height = surface.get_size()
    image = Image.new("RGB", (width * cell_width, height * cell_height), (0, 0, 0))
    draw = ImageDraw.Draw(image)
    font = cell_font(cell_height - 2)

    for y in range(height):
        for x in range(width):
            cell = surface.cell(x, y)
            left = x * cell_width
            top = y * cell_height
            draw.rectangle(
                [left, top, left + cell_width - 1, top + cell_height - 1],
                fill=cell.bg.to_tuple(),
            )
            if cell.char != " ":
                draw.text((left, top), cell.char, font=font, fill=cell.fg.to_tuple())

    return image


def save_snapshot(surface: BufferSurface, path: str | Path) -> Path:
    """Write a PNG snapshot of the surface.

    Args:
        surface: Surface to capture
        path: Destination file (parent directories are created)

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    render_image(surface).save(path, format="PNG")
    logger.debug("Saved snapshot of %s to %s", surface.surface_id, path)
    return path
