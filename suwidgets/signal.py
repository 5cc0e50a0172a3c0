"""Minimal observer used by widgets to notify interested parties."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class Signal:
    """A list of callables invoked together, in connection order."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        """Register ``slot`` to be called on every emission."""
        if not callable(slot):
            raise TypeError("slot must be callable")
        self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        """Remove one registration of ``slot``."""
        try:
            self._slots.remove(slot)
        except ValueError:
            raise ValueError("slot is not connected") from None

    def emit(self, *args: Any) -> None:
        """Call every connected slot with ``args``."""
        for slot in list(self._slots):
            slot(*args)

    def __len__(self) -> int:
        return len(self._slots)