"""Model of a constellation diagram for phase-modulated signals."""

from __future__ import annotations

import cmath
import math
from collections import deque
from collections.abc import Iterable

from suwidgets.color import Color
from suwidgets.signal import Signal

DEFAULT_HISTORY_SIZE = 256
DEFAULT_BACKGROUND = Color(0, 0, 0)
DEFAULT_FOREGROUND = Color(255, 255, 255)
DEFAULT_AXES = Color(128, 128, 128)
CROSS_MARK_REL_DIM = 0.1


class Constellation:
    """Keeps a history of complex samples and maps them to screen points."""

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self.order_hint_changed = Signal()
        self.background_color_changed = Signal()
        self.foreground_color_changed = Signal()
        self.axes_color_changed = Signal()
        self.axes_updated = Signal()

        self._history: deque[complex] = deque(maxlen=history_size)
        self._background = DEFAULT_BACKGROUND
        self._foreground = DEFAULT_FOREGROUND
        self._axes = DEFAULT_AXES
        self._bits = 2
        self.zoom = 0.5
        self.gain = 1.414
        self.axes_drawn = False

        self.width = 0
        self.height = 0
        self.ox = 0
        self.oy = 0

    # Appearance -----------------------------------------------------------
    @property
    def background_color(self) -> Color:
        return self._background

    @background_color.setter
    def background_color(self, color: Color) -> None:
        self._background = color
        self.axes_drawn = False
        self.background_color_changed.emit()

    @property
    def foreground_color(self) -> Color:
        return self._foreground

    @foreground_color.setter
    def foreground_color(self, color: Color) -> None:
        self._foreground = color
        self.axes_drawn = False
        self.foreground_color_changed.emit()

    @property
    def axes_color(self) -> Color:
        return self._axes

    @axes_color.setter
    def axes_color(self, color: Color) -> None:
        self._axes = color
        self.axes_drawn = False
        self.axes_color_changed.emit()

    @property
    def order_hint(self) -> int:
        return self._bits

    @order_hint.setter
    def order_hint(self, bits: int) -> None:
        if bits < 0:
            raise ValueError("order hint must not be negative")
        if bits != self._bits:
            self._bits = bits
            self.axes_drawn = False
            self.order_hint_changed.emit()

    @property
    def history_size(self) -> int:
        return self._history.maxlen or 0

    # Data ------------------------------------------------------------------
    def set_history_size(self, length: int) -> None:
        """Resize the history; stored samples are discarded."""
        if length < 0:
            raise ValueError("history size must not be negative")
        self._history = deque(maxlen=length)

    def feed(self, samples: Iterable[complex]) -> None:
        """Append samples, keeping only the most recent ``history_size``."""
        self._history.extend(complex(s) for s in samples)

    def samples(self) -> list[complex]:
        """Stored samples, oldest first."""
        return list(self._history)

    # Geometry --------------------------------------------------------------
    def resize(self, width: int, height: int) -> None:
        """Set the drawing area; axes are redrawn when geometry changes."""
        if width < 0 or height < 0:
            raise ValueError("geometry must not be negative")
        if (width, height) != (self.width, self.height):
            self.width = width
            self.height = height
            self.axes_drawn = False
        if not self.axes_drawn:
            self.ox = self.width // 2
            self.oy = self.height // 2
            self.axes_drawn = True
            self.axes_updated.emit()

    def to_screen(self, x: float, y: float) -> tuple[int, int]:
        """Map a point of the complex plane to pixel coordinates."""
        return (
            self.ox + int(0.707 * self.width * self.zoom * x),
            self.oy - int(0.707 * self.height * self.zoom * y),
        )

    @property
    def marker_size(self) -> float:
        """Half-size of the cross drawn at each ideal constellation point."""
        if self._bits <= 3:
            return CROSS_MARK_REL_DIM
        return CROSS_MARK_REL_DIM / (1 << (self._bits - 3))

    def marker_positions(self) -> list[tuple[float, float]]:
        """Ideal points of a PSK constellation of the current order."""
        if self._bits == 0:
            return []
        states = 1 << self._bits
        angle = 2 * math.pi / states
        delta = cmath.exp(1j * angle)
        current = cmath.exp(0.5j * angle)
        positions = []
        for _ in range(states):
            positions.append((current.real, current.imag))
            current *= delta
        return positions

    def points(self) -> list[tuple[int, int, int]]:
        """Screen points ``(x, y, alpha)`` for stored samples, oldest faintest."""
        size = self.history_size
        stored = self.samples()
        if not stored:
            return []
        alpha_k = 255.0 / size
        skip = size - len(stored)
        result = []
        for p, sample in enumerate(stored, start=1):
            c = self.gain * sample
            x, y = self.to_screen(c.real, c.imag)
            result.append((x, y, int(alpha_k * (p + skip))))
        return result