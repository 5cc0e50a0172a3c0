"""Colours and a button that lets the user pick one."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Optional

from suwidgets.signal import Signal

PREVIEW_WIDTH = 48
PREVIEW_HEIGHT = 16


@dataclass(frozen=True)
class Color:
    """An 8-bit RGBA colour."""

    red: int
    green: int
    blue: int
    alpha: int = 255

    def __post_init__(self) -> None:
        for name in ("red", "green", "blue", "alpha"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"{name} component out of range: {value}")

    def with_alpha(self, alpha: int) -> "Color":
        """Return the same colour with a different alpha component."""
        return replace(self, alpha=alpha)


Picker = Callable[[Color], Optional[Color]]


class ColorChooserButton:
    """Holds a colour, renders a preview swatch and notifies on change."""

    def __init__(self, color: Color = Color(0, 0, 0)) -> None:
        self.color_changed = Signal()
        self._color = color
        self._preview = self._render()

    def _render(self) -> tuple[tuple[Color, ...], ...]:
        row = (self._color,) * PREVIEW_WIDTH
        return (row,) * PREVIEW_HEIGHT

    @property
    def color(self) -> Color:
        return self._color

    @color.setter
    def color(self, color: Color) -> None:
        if color != self._color:
            self._color = color
            self.color_changed.emit(color)
        self._preview = self._render()

    def choose(self, picker: Picker) -> Optional[Color]:
        """Ask ``picker`` for a colour; ``None`` means the choice was cancelled."""
        chosen = picker(self._color)
        if chosen is not None:
            self.color = chosen
        return chosen

    def preview(self) -> tuple[tuple[Color, ...], ...]:
        """The preview swatch as rows of pixels."""
        return self._preview