"""Pure numeric helpers behind the spectrum and waterfall display."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

# Peak picking tolerances, in pixels.
PEAK_CLICK_MAX_H_DISTANCE = 10
PEAK_CLICK_MAX_V_DISTANCE = 20
PEAK_H_TOLERANCE = 2

_STEP_TABLE = (1, 2, 5)

_UNIT_PREFIXES = {
    1: "",
    1000: "K",
    1000000: "M",
    1000000000: "G",
}


def _cdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _cmod(a: int, b: int) -> int:
    """Remainder with the sign of the dividend."""
    return a - _cdiv(a, b) * b


def _bound(low, value, high):
    """Clamp ``value``; when ``low`` exceeds ``high`` the result is ``low``."""
    return max(low, min(value, high))


@dataclass(frozen=True)
class DivisionLayout:
    """Grid layout: first aligned value, distance between lines, line count."""

    adj_low: int
    step: int
    divs: int


def round_freq(freq: int, resolution: int) -> int:
    """Round ``freq`` to the nearest multiple of ``resolution``."""
    if resolution <= 0:
        raise ValueError("resolution must be positive")
    delta = resolution
    half = delta // 2
    if freq >= 0:
        return freq - _cmod(freq + half, delta) + half
    return freq - _cmod(freq + half, delta) - half


def calc_div_size(low: int, high: int, divs_wanted: int) -> Optional[DivisionLayout]:
    """Choose a 1-2-5 grid step giving at most ``divs_wanted`` divisions.

    Returns ``None`` when no divisions are wanted.
    """
    if divs_wanted < 0:
        raise ValueError("number of divisions must not be negative")
    if divs_wanted == 0:
        return None

    multiplier = 1
    step = 1
    divs = high - low
    index = 0
    adj_low = low

    while divs > divs_wanted:
        step = _STEP_TABLE[index] * multiplier
        divs = _cdiv(high - low, step)
        adj_low = _cdiv(low, step) * step
        index += 1
        if index == len(_STEP_TABLE):
            index = 0
            multiplier *= 10

    if adj_low < low:
        adj_low += step

    return DivisionLayout(adj_low=adj_low, step=step, divs=int(divs))


def format_freq_units(units: int) -> str:
    """SI prefix letter for a frequency unit divisor."""
    return _UNIT_PREFIXES.get(units, "")


def screen_fft_data(
    plot_height: int,
    plot_width: int,
    max_db: float,
    min_db: float,
    start_freq: int,
    stop_freq: int,
    data: Sequence[float],
    sample_freq: float,
    gain: float = 0.0,
) -> tuple[list[int], int, int]:
    """Map FFT bins onto screen rows.

    ``start_freq`` and ``stop_freq`` are relative to the centre of ``data``.
    Returns the row of every column (0 is the top), and the first and last
    column that carry data.  When several bins fall on one column the
    highest level wins.
    """
    if plot_width < 0 or plot_height < 0:
        raise ValueError("plot size must not be negative")
    if sample_freq == 0:
        raise ValueError("sample frequency must not be zero")

    min_db -= gain
    max_db -= gain
    if max_db == min_db:
        raise ValueError("level range is empty")

    size = len(data)
    factor = plot_height / abs(max_db - min_db)

    bin_min = int(start_freq * size / sample_freq) + size // 2
    bin_max = int(stop_freq * size / sample_freq) + size // 2
    min_bin = _bound(0, bin_min, size - 1)
    max_bin = _bound(0, bin_max, size - 1)

    out = [plot_height] * plot_width

    def level_to_row(level: float) -> int:
        return _bound(0, int(factor * (max_db - level)), plot_height)

    if max_bin - min_bin > plot_width:
        columns = {
            i: _cdiv((i - bin_min) * plot_width, bin_max - bin_min)
            for i in range(min_bin, max_bin)
        }
        xmin = columns[min_bin]
        xmax = columns[max_bin - 1]
        previous = -1
        best = 10000
        for i in range(min_bin, max_bin):
            y = level_to_row(data[i])
            x = columns[i]
            if x == previous:
                if y < best:
                    out[x] = y
                    best = y
            else:
                out[x] = y
                previous = x
                best = y
        return out, xmin, xmax

    for x in range(plot_width):
        i = bin_min + _cdiv(x * (bin_max - bin_min), plot_width)
        out[x] = plot_height if i < 0 or i >= size else level_to_row(data[i])
    return out, 0, plot_width


def full_fft_size(size: int, sample_freq: float, start_freq: int, end_freq: int) -> int:
    """Power-of-two size of a buffer covering the whole sample rate."""
    if end_freq == start_freq:
        raise ValueError("frequency range is empty")
    full = int(size * sample_freq / (end_freq - start_freq))
    k = 1
    while k < full:
        k <<= 1
    return k


def fit_partial_fft(
    full: Sequence[float],
    data: Sequence[float],
    center_freq: int,
    sample_freq: float,
    start_freq: int,
    end_freq: int,
) -> list[float]:
    """Resample ``data`` (covering ``start_freq``..``end_freq``) into ``full``.

    ``full`` spans ``center_freq`` +/- ``sample_freq / 2``. Bins outside the
    partial range keep their previous value. A new list is returned.
    """
    if not full:
        raise ValueError("full spectrum buffer is empty")
    if not data:
        raise ValueError("partial spectrum is empty")

    size = len(data)
    n = len(full)
    result = list(full)

    full_start = int(center_freq - sample_freq / 2)
    full_bin = sample_freq / n
    partial_bin = _cdiv(end_freq - start_freq, size)
    if full_bin == 0 or partial_bin == 0:
        raise ValueError("bin size is zero")

    first = _bound(0, int((start_freq - full_start) / full_bin), n - 1)
    last = _bound(first + 1, int((end_freq - full_start) / full_bin), n)

    for i in range(first, last):
        bin_freq = full_start + i * full_bin
        next_freq = full_start + (i + 1) * full_bin
        lo = _bound(0, int((bin_freq - start_freq) / partial_bin), size - 1)
        hi = _bound(lo + 1, int((next_freq - start_freq) / partial_bin), size)
        chunk = data[lo:hi]
        result[i] = sum(chunk) / len(chunk)

    return result


def nearest_peak(peaks: Mapping[int, int], x: int, y: int) -> Optional[int]:
    """Column of the detected peak closest to a click, or ``None``."""
    best: Optional[int] = None
    distance = 1.0e10
    for px in sorted(peaks):
        if px < x - PEAK_CLICK_MAX_H_DISTANCE:
            continue
        if px > x + PEAK_CLICK_MAX_H_DISTANCE:
            break
        py = peaks[px]
        if abs(py - y) > PEAK_CLICK_MAX_V_DISTANCE:
            continue
        d = (py - y) ** 2 + (px - x) ** 2
        if d < distance:
            distance = d
            best = px
    return best


def detect_peaks(values: Sequence[float], factor: float) -> dict[int, float]:
    """Find peaks in screen rows (smaller is higher).

    A peak lies at least ``factor`` standard deviations above the mean.
    Returns a mapping from index to row.
    """
    if factor <= 0:
        raise ValueError("peak factor must be positive")
    n = len(values)
    if n == 0:
        return {}

    mean = sum(values) / n
    mean_sq = sum(v * v for v in values) / n
    stdev = math.sqrt(max(0.0, mean_sq - mean * mean))

    peaks: dict[int, float] = {}
    last: Optional[int] = None
    for i, value in enumerate(values):
        threshold = mean - factor * stdev if last is None else values[last]
        if value < threshold:
            last = i
        if last is not None and (i - last > PEAK_H_TOLERANCE or i == n - 1):
            peaks[last] = values[last]
            last = None
    return peaks


class FftAccumulator:
    """Sums FFT lines so that several can be averaged into one."""

    def __init__(self) -> None:
        self._values: list[float] = []
        self._count = 0

    @property
    def count(self) -> int:
        """Number of lines represented by the accumulator."""
        return self._count

    @property
    def values(self) -> list[float]:
        return list(self._values)

    def add(self, data: Sequence[float]) -> None:
        """Add a line; a line of a different size restarts accumulation."""
        if len(data) != len(self._values):
            self._values = [0.0] * len(data)
            self._count = 0
        if self._count == 0:
            self._values = [float(v) for v in data]
        else:
            self._values = [a + b for a, b in zip(self._values, data)]
        self._count += 1

    def average(self) -> list[float]:
        """Turn the sum into a mean; repeated calls leave it unchanged."""
        if self._count:
            k = 1.0 / self._count
            self._values = [v * k for v in self._values]
            self._count = 1
        return list(self._values)

    def reset(self) -> None:
        """Zero the accumulator, keeping its size."""
        self._values = [0.0] * len(self._values)
        self._count = 0