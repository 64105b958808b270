"""Color palette for character-grid monitors.

Monitors support a fixed 16-color palette; each entry also carries an RGB
value so buffers can be rasterized to images.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Color:
    """Palette color with its RGB rendering."""

    name: str
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        if not all(0 <= channel <= 255 for channel in (self.r, self.g, self.b)):
            raise ValueError(f"Color {self.name} has a channel outside 0-255")

    @classmethod
    def from_hex(cls, name: str, hex_color: str) -> "Color":
        """Parse "#RRGGBB" or the short "#RGB" form."""
        digits = hex_color.lstrip("#")
        if len(digits) == 3:
            digits = "".join(c + c for c in digits)
        r, g, b = bytes.fromhex(digits)
        return cls(name, r, g, b)

    def to_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return "#" + bytes(self.to_tuple()).hex()

    def __str__(self) -> str:
        return self.name


class Colors:
    """The 16-color monitor palette."""

    WHITE = Color.from_hex("white", "#F0F0F0")
    ORANGE = Color.from_hex("orange", "#F2B233")
    MAGENTA = Color.from_hex("magenta", "#E57FD8")
    LIGHT_BLUE = Color.from_hex("light_blue", "#99B2F2")
    YELLOW = Color.from_hex("yellow", "#DEDE6C")
    LIME = Color.from_hex("lime", "#7FCC19")
    PINK = Color.from_hex("pink", "#F2B2CC")
    GRAY = Color.from_hex("gray", "#4C4C4C")
    LIGHT_GRAY = Color.from_hex("light_gray", "#999999")
    CYAN = Color.from_hex("cyan", "#4C99B2")
    PURPLE = Color.from_hex("purple", "#B266E5")
    BLUE = Color.from_hex("blue", "#3366CC")
    BROWN = Color.from_hex("brown", "#7F664C")
    GREEN = Color.from_hex("green", "#57A64E")
    RED = Color.from_hex("red", "#CC4C4C")
    BLACK = Color.from_hex("black", "#111111")

    # Status aliases
    GAIN = LIME
    LOSS = RED
    WARNING = ORANGE
    ERROR = RED
    MUTED = GRAY

    @classmethod
    def all(cls) -> list[Color]:
        """Return the 16 palette entries."""
        return [
            cls.WHITE,
            cls.ORANGE,
            cls.MAGENTA,
            cls.LIGHT_BLUE,
            cls.YELLOW,
            cls.LIME,
            cls.PINK,
            cls.GRAY,
            cls.LIGHT_GRAY,
            cls.CYAN,
            cls.PURPLE,
            cls.BLUE,
            cls.BROWN,
            cls.GREEN,
            cls.RED,
            cls.BLACK,
        ]

    @classmethod
    def by_name(cls, name: str) -> Color:
        """Look up a palette color by name.

        Raises:
            KeyError: If name is not in the palette
        """
        for color in cls.all():
            if color.name == name:
                return color
        raise KeyError(name)
