"""Energy storage status view."""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any

from ..providers.base import FEATURE_ENERGY, EnergyReading
from ..surface.colors import Color, Colors
from ..surface.text import format_number, write_centered
from .base import BaseView, ErrorMarker, ViewDescriptor
from .renderers import Header, draw_bar, render_header, sparkline

logger = logging.getLogger(__name__)

HISTORY_SIZE = 60


@dataclass(frozen=True)
class EnergySnapshot:
    reading: EnergyReading
    history: tuple[float, ...]


def level_color(percent: float) -> Color:
    if percent > 50:
        return Colors.GREEN
    if percent > 20:
        return Colors.YELLOW
    return Colors.RED


class EnergyStatusView(BaseView):
    """Stored energy, fill bar, flow rates and fill history."""

    descriptor = ViewDescriptor(
        id="energy_status",
        name="Energy Status",
        description="Stored energy and flow",
        poll_interval_ms=1000,
    )
    requires = (FEATURE_ENERGY,)
    error_message = "Error reading energy"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.history: deque[float] = deque(maxlen=HISTORY_SIZE)

    async def get_data(self) -> EnergySnapshot | ErrorMarker | None:
        provider = self.ensure_provider()
        if provider is None:
            return None

        result = self.query(provider.energy, operation="energy")
        if not result.ok:
            return ErrorMarker.from_result(result, self.error_message)

        reading = result.value
        self.history.append(reading.percent)
        return EnergySnapshot(reading, tuple(self.history))

    def render(self, data: EnergySnapshot) -> None:
        width, height = self.surface.get_size()
        reading = data.reading
        color = level_color(reading.percent)

        y = render_header(self.surface, Header("Energy", secondary=f" {reading.percent:.1f}%"))
        if y < height:
            draw_bar(self.surface, 0, y, width, reading.percent / 100, color)
            y += 1
        if y < height:
            write_centered(
                self.surface,
                y,
                f"{format_number(reading.stored)} / {format_number(reading.capacity)}",
                Colors.WHITE,
            )
            y += 1
        if y < height:
            net = reading.net
            self.surface.set_foreground(Colors.LIME)
            in_text = f"In +{format_number(reading.input)}"
            self.surface.write(0, y, in_text)
            self.surface.set_foreground(Colors.RED)
            out_text = f" Out -{format_number(reading.usage)}"
            self.surface.write(len(in_text), y, out_text)
            y += 1
            if y < height:
                sign = "+" if net > 0 else ""
                self.surface.set_foreground(Colors.GAIN if net >= 0 else Colors.LOSS)
                self.surface.write(0, y, f"Net {sign}{format_number(net)}/t")
                y += 1

        if y < height - 1:
            self.surface.set_foreground(color)
            self.surface.write(0, height - 1, sparkline(list(data.history), width))
