"""Frequency entry with automatic SI unit prefixes."""

from __future__ import annotations

from enum import IntEnum

from suwidgets.signal import Signal

DEFAULT_MAXIMUM = 18e9
DEFAULT_UNITS = "Hz"


class FrequencyUnitMultiplier(IntEnum):
    FEMTO = -5
    PICO = -4
    NANO = -3
    MICRO = -2
    MILLI = -1
    NONE = 0
    KILO = 1
    MEGA = 2
    GIGA = 3
    TERA = 4


_PREFIXES = {
    FrequencyUnitMultiplier.FEMTO: "f",
    FrequencyUnitMultiplier.PICO: "p",
    FrequencyUnitMultiplier.NANO: "n",
    FrequencyUnitMultiplier.MICRO: "µ",
    FrequencyUnitMultiplier.MILLI: "m",
    FrequencyUnitMultiplier.NONE: "",
    FrequencyUnitMultiplier.KILO: "k",
    FrequencyUnitMultiplier.MEGA: "M",
    FrequencyUnitMultiplier.GIGA: "G",
    FrequencyUnitMultiplier.TERA: "T",
}

_FACTORS = {
    FrequencyUnitMultiplier.FEMTO: 1e-15,
    FrequencyUnitMultiplier.PICO: 1e-12,
    FrequencyUnitMultiplier.NANO: 1e-9,
    FrequencyUnitMultiplier.MICRO: 1e-6,
    FrequencyUnitMultiplier.MILLI: 1e-3,
    FrequencyUnitMultiplier.NONE: 1.0,
    FrequencyUnitMultiplier.KILO: 1e3,
    FrequencyUnitMultiplier.MEGA: 1e6,
    FrequencyUnitMultiplier.GIGA: 1e9,
    FrequencyUnitMultiplier.TERA: 1e12,
}

# Thresholds for automatic selection, largest first.
_MULTIPLES = (
    (1e12, FrequencyUnitMultiplier.TERA),
    (1e9, FrequencyUnitMultiplier.GIGA),
    (1e6, FrequencyUnitMultiplier.MEGA),
    (1e3, FrequencyUnitMultiplier.KILO),
)

_SUBMULTIPLES = (
    (1.0, FrequencyUnitMultiplier.NONE),
    (1e-3, FrequencyUnitMultiplier.MILLI),
    (1e-6, FrequencyUnitMultiplier.MICRO),
    (1e-9, FrequencyUnitMultiplier.NANO),
    (1e-12, FrequencyUnitMultiplier.PICO),
)


class FrequencySpinBox:
    """A frequency value shown in a unit scaled by an SI multiplier."""

    def __init__(self) -> None:
        self.value_changed = Signal()
        self._unit = FrequencyUnitMultiplier.NONE
        self._units = DEFAULT_UNITS
        self._auto = True
        self._value = 0.0
        self._maximum = DEFAULT_MAXIMUM
        self._minimum = 0.0
        self._extra_decimals = 0
        self._sub_multiples = False
        self.editable = True
        self._spin_value = 0.0
        self._spin_range = (0.0, 0.0)
        self._refresh()

    # Display state ---------------------------------------------------------
    @property
    def multiplier(self) -> float:
        """Factor that converts a displayed number into the base unit."""
        return _FACTORS[self._unit]

    def suffix(self) -> str:
        """Unit text shown after the number, e.g. ``"MHz"``."""
        return _PREFIXES[self._unit] + self._units

    def decimals(self) -> int:
        """Number of decimals shown for the current multiplier."""
        return max(0, int(self._unit) * 3 + self._extra_decimals)

    def display_value(self) -> float:
        """The number currently shown, in scaled units."""
        return self._spin_value

    def display_range(self) -> tuple[float, float]:
        """Minimum and maximum accepted, in scaled units."""
        return self._spin_range

    @property
    def can_increase(self) -> bool:
        return self._unit != FrequencyUnitMultiplier.TERA

    @property
    def can_decrease(self) -> bool:
        if self._sub_multiples:
            return self._unit != FrequencyUnitMultiplier.FEMTO
        return self._unit != FrequencyUnitMultiplier.NONE

    def _clamp_display(self, number: float) -> float:
        low, high = self._spin_range
        return round(min(max(number, low), high), self.decimals())

    def _refresh(self) -> None:
        scale = 1 / self.multiplier
        digits = self.decimals()
        low = round(self._minimum * scale, digits)
        high = max(round(self._maximum * scale, digits), low)
        self._spin_range = (low, high)
        self._spin_value = self._clamp_display(self._value * scale)

    # Value -----------------------------------------------------------------
    @property
    def value(self) -> float:
        """Value in base units, as currently displayed."""
        return self._spin_value * self.multiplier

    @value.setter
    def value(self, value: float) -> None:
        threshold = self._minimum if self._sub_multiples else 1.0
        if abs(value - self._value) >= threshold:
            old = self._value
            self._value = value
            if self._auto:
                self.adjust_unit_multiplier()
            self._refresh()
            if self._value != old:
                self.value_changed.emit(self._value)

    def edit(self, display_value: float) -> float:
        """Accept a number typed by the user in scaled units."""
        if not self.editable:
            raise RuntimeError("frequency spin box is read-only")
        self._spin_value = self._clamp_display(display_value)
        self._value = self._spin_value * self.multiplier
        self.value_changed.emit(self._value)
        return self._value

    @property
    def maximum(self) -> float:
        return self._maximum

    @maximum.setter
    def maximum(self, value: float) -> None:
        self._maximum = value
        self._refresh()

    @property
    def minimum(self) -> float:
        return self._minimum

    @minimum.setter
    def minimum(self, value: float) -> None:
        self._minimum = value
        self._refresh()

    @property
    def extra_decimals(self) -> int:
        return self._extra_decimals

    @extra_decimals.setter
    def extra_decimals(self, extra: int) -> None:
        if extra < 0:
            raise ValueError("extra decimals must not be negative")
        self._extra_decimals = extra
        self._refresh()

    @property
    def units(self) -> str:
        return self._units

    @units.setter
    def units(self, units: str) -> None:
        self._units = units
        self._refresh()

    @property
    def sub_multiples_allowed(self) -> bool:
        return self._sub_multiples

    @sub_multiples_allowed.setter
    def sub_multiples_allowed(self, allowed: bool) -> None:
        self._sub_multiples = allowed
        self._refresh()

    @property
    def auto_unit_multiplier(self) -> bool:
        return self._auto

    @auto_unit_multiplier.setter
    def auto_unit_multiplier(self, enabled: bool) -> None:
        self._auto = enabled
        if enabled:
            self.adjust_unit_multiplier()

    # Multiplier ------------------------------------------------------------
    @property
    def unit_multiplier(self) -> FrequencyUnitMultiplier:
        return self._unit

    @unit_multiplier.setter
    def unit_multiplier(self, unit: FrequencyUnitMultiplier | int) -> None:
        self._unit = FrequencyUnitMultiplier(unit)
        self._refresh()

    def adjust_unit_multiplier(self) -> None:
        """Pick the multiplier that best suits the magnitude of the value."""
        magnitude = abs(self._value)
        for threshold, unit in _MULTIPLES:
            if magnitude >= threshold:
                self.unit_multiplier = unit
                return
        if not self._sub_multiples:
            self.unit_multiplier = FrequencyUnitMultiplier.NONE
            return
        for threshold, unit in _SUBMULTIPLES:
            if magnitude >= threshold:
                self.unit_multiplier = unit
                return
        self.unit_multiplier = FrequencyUnitMultiplier.FEMTO

    def inc_unit_multiplier(self) -> None:
        """Move to the next larger multiplier, if any."""
        if self._unit < FrequencyUnitMultiplier.TERA:
            self.unit_multiplier = self._unit + 1

    def dec_unit_multiplier(self) -> None:
        """Move to the next smaller allowed multiplier, if any."""
        lowest = (
            FrequencyUnitMultiplier.FEMTO
            if self._sub_multiples
            else FrequencyUnitMultiplier.NONE
        )
        if self._unit > lowest:
            self.unit_multiplier = self._unit - 1