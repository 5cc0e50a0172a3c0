"""Spin box whose step size follows the cursor position."""

from __future__ import annotations

import math

DEFAULT_DECIMALS = 2
DEFAULT_MINIMUM = 0.0
DEFAULT_MAXIMUM = 99.99
BLOCK_CURSOR_WIDTH = -9


class ContextAwareSpinBox:
    """A decimal spin box where the digit under the cursor sets the step."""

    def __init__(
        self,
        prefix: str = "",
        suffix: str = "",
        decimals: int = DEFAULT_DECIMALS,
        decimal_separator: str = ".",
    ) -> None:
        if decimals < 0:
            raise ValueError("decimals must not be negative")
        if not decimal_separator:
            raise ValueError("decimal separator must not be empty")
        self.prefix = prefix
        self.suffix = suffix
        self.decimals = decimals
        self.decimal_separator = decimal_separator
        self.minimum = DEFAULT_MINIMUM
        self.maximum = DEFAULT_MAXIMUM
        self.single_step = 1.0
        self.block_enabled = False
        self._value = DEFAULT_MINIMUM
        self._cursor = len(self.text())

    # Value and text --------------------------------------------------------
    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, value: float) -> None:
        bounded = min(max(value, self.minimum), max(self.maximum, self.minimum))
        self._value = round(bounded, self.decimals)
        self._cursor = len(self.text())

    def text(self) -> str:
        """The full text shown, prefix and suffix included."""
        number = f"{self._value:.{self.decimals}f}".replace(".", self.decimal_separator)
        return f"{self.prefix}{number}{self.suffix}"

    @property
    def cursor_position(self) -> int:
        return self._cursor

    @cursor_position.setter
    def cursor_position(self, position: int) -> None:
        self._cursor = min(max(position, 0), len(self.text()))

    # Geometry of the number ------------------------------------------------
    def decimal_length(self) -> int:
        """Characters from the separator to the end of the number, separator included."""
        text = self.text()
        number = text[len(self.prefix): len(text) - len(self.suffix)]
        position = number.find(self.decimal_separator)
        return len(number) - position if position >= 0 else 0

    def _integer_length(self) -> int:
        return (
            len(self.text())
            - self.decimal_length()
            - (len(self.prefix) + len(self.suffix))
        )

    # Step logic ------------------------------------------------------------
    def current_step(self) -> float:
        """Step given by the digit to the left of the cursor."""
        dec_size = self.decimal_length()
        int_len = self._integer_length()
        pos = self._cursor - len(self.prefix)
        if pos < 0:
            pos = int_len
        elif pos > int_len + dec_size:
            pos = int_len + dec_size
        if pos > int_len:
            pos -= 1
        return 10.0 ** (int_len - pos)

    def step_to_cursor(self, step: float) -> int:
        """Cursor position whose digit corresponds to ``step``."""
        if step <= 0:
            raise ValueError("step must be positive")
        decim_pos = math.floor(math.log10(step))
        pos = self._integer_length() - decim_pos
        if decim_pos < 0:
            pos += 1
        return min(max(pos, 0), len(self.text())) + len(self.prefix)

    def step_by(self, steps: int) -> float:
        """Change the value by ``steps`` times the step under the cursor."""
        step = self.current_step()
        self.single_step = step
        self.value = self._value + steps * step
        self.cursor_position = self.step_to_cursor(step)
        return self._value

    def set_single_step(self, step: float) -> None:
        """Set the step and move the cursor to its digit."""
        cursor = self.step_to_cursor(step)
        self.single_step = step
        self.cursor_position = cursor

    def set_minimum_step(self) -> None:
        """Move the cursor to the end so the smallest digit is stepped."""
        self.cursor_position = len(self.text())

    def focus_in(self) -> None:
        """Place the cursor right after the integer part."""
        self.cursor_position = len(self.prefix) + self._integer_length()

    def cursor_width(self, default: int) -> int:
        """Text cursor width; a block cursor when enabled."""
        return BLOCK_CURSOR_WIDTH if self.block_enabled else default