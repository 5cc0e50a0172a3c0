"""Spectrum data intake, averaging and time stamps of a waterfall display."""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from suwidgets.waterfall_math import (
    FftAccumulator,
    detect_peaks,
    fit_partial_fft,
    full_fft_size,
    screen_fft_data,
)
from suwidgets.waterfall_view import WaterfallView

MINIMUM_REFRESH_RATE = 25
TIME_STAMP_SPACING = 64
MAX_LINES = 2048
MAX_LINE_CATCH_UP = 20
EMPTY_BIN_LEVEL = -255.0


def _format_local(moment: Optional[datetime]) -> str:
    if moment is None:
        return ""
    local = moment.astimezone()
    return f"{local:%H:%M:%S}.{local.microsecond // 1000:03d}"


def _format_utc(moment: Optional[datetime]) -> str:
    if moment is None:
        return ""
    utc = moment.astimezone(timezone.utc)
    return f"{utc:%H:%M:%S}.{utc.microsecond // 1000:03d}Z"


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


@dataclass(frozen=True)
class TimeStamp:
    """A label on the waterfall, ``counter`` lines after the previous one."""

    counter: int
    text: str
    utc_text: str
    marker: bool = False

    def label(self, utc: bool) -> str:
        """Text to show, in UTC or local time."""
        return self.utc_text if utc else self.text


class Waterfall(WaterfallView):
    """A waterfall display that receives FFT lines and keeps their history."""

    def __init__(self) -> None:
        super().__init__()
        self.running = False
        self.expected_rate = 0
        self.time_stamps_utc = True
        self.time_stamp_spacing = TIME_STAMP_SPACING
        self.time_stamp_counter = TIME_STAMP_SPACING
        self._time_stamps: deque[TimeStamp] = deque()

        self._fft_data: list[float] = []
        self._last_fft: Optional[datetime] = None
        self._accumulator = FftAccumulator()
        self._lines: deque[list[float]] = deque(maxlen=MAX_LINES)

        self._full_fft: list[float] = []
        self._partial_data: list[float] = []
        self._partial_active = False
        self.partial_freq_start = 0
        self.partial_freq_end = 0

        self.peaks: dict[int, float] = {}
        self.waterfall_cleared.connect(self._lines.clear)

    # Accessors -------------------------------------------------------------
    @property
    def fft_data(self) -> list[float]:
        """The most recent spectrum used by the pandapter."""
        return list(self._fft_data)

    @property
    def time_stamps(self) -> list[TimeStamp]:
        """Time stamps, newest first."""
        return list(self._time_stamps)

    @property
    def partial_active(self) -> bool:
        return self._partial_active

    def lines(self) -> list[list[float]]:
        """Waterfall lines, newest first."""
        return [list(line) for line in self._lines]

    # Data intake -----------------------------------------------------------
    def add_wf_line(self, data: Sequence[float], repeats: int = 1) -> None:
        """Push a line onto the waterfall ``repeats`` times."""
        if repeats < 1:
            raise ValueError("repeats must be at least 1")
        line = [float(v) for v in data]
        for _ in range(repeats):
            self._lines.appendleft(list(line))

    def _push_time_stamp(self, stamp: TimeStamp) -> None:
        self._time_stamps.appendleft(stamp)
        self.time_stamp_counter = 0

    def set_new_fft_data(
        self,
        fft_data: Sequence[float],
        timestamp: Optional[datetime] = None,
        wf_data: Optional[Sequence[float]] = None,
        looped: bool = False,
    ) -> None:
        """Take a new spectrum; ``wf_data`` feeds the waterfall if given."""
        if timestamp is None:
            timestamp = datetime.now().astimezone()
        if wf_data is None:
            wf_data = fft_data
        elif len(wf_data) != len(fft_data):
            raise ValueError("waterfall data and FFT data differ in size")

        self.running = True
        now_ms = _epoch_ms(timestamp)

        if looped:
            self._push_time_stamp(
                TimeStamp(
                    counter=self.time_stamp_counter,
                    text=f"{_format_local(self._last_fft)} - {_format_local(timestamp)}",
                    utc_text=f"{_format_utc(self._last_fft)} - {_format_utc(timestamp)}",
                    marker=True,
                )
            )

        self._fft_data = [float(v) for v in fft_data]
        self.fft_size = len(self._fft_data)
        self._last_fft = timestamp

        if self.tentative_center_freq != 0:
            self.tentative_center_freq = 0
            self.update_overlay()

        if self.time_stamp_counter >= self.time_stamp_spacing:
            self._push_time_stamp(
                TimeStamp(
                    counter=self.time_stamp_counter,
                    text=_format_local(timestamp),
                    utc_text=_format_utc(timestamp),
                )
            )

        size = len(wf_data)
        if size > 0:
            if self.msec_per_wfline > 0:
                self._accumulator.add(wf_data)
                elapsed = now_ms - self.tlast_wf_ms
                if now_ms < self.tlast_wf_ms or elapsed >= self.msec_per_wfline:
                    line_count = int(elapsed / self.msec_per_wfline)
                    if 1 <= line_count <= MAX_LINE_CATCH_UP:
                        self.tlast_wf_ms += self.msec_per_wfline * line_count
                    else:
                        line_count = 1
                        self.tlast_wf_ms = now_ms
                    self.add_wf_line(self._accumulator.average(), line_count)
                    self._accumulator.reset()
                    self.time_stamp_counter += line_count
            else:
                self.tlast_wf_ms = now_ms
                self.add_wf_line(wf_data, 1)
                self.time_stamp_counter += 1

    def set_new_partial_fft_data(
        self,
        data: Sequence[float],
        start_freq: int,
        end_freq: int,
        timestamp: Optional[datetime] = None,
        looped: bool = False,
    ) -> None:
        """Take a spectrum covering only ``start_freq``..``end_freq``."""
        if end_freq <= start_freq:
            raise ValueError("end frequency must be above start frequency")
        if not data:
            raise ValueError("partial spectrum is empty")

        if not self._partial_active:
            size = full_fft_size(len(data), self.sample_freq, start_freq, end_freq)
            self._full_fft = [EMPTY_BIN_LEVEL] * size
            self._partial_active = True

        self._partial_data = [float(v) for v in data]
        self.partial_freq_start = start_freq
        self.partial_freq_end = end_freq

        self._full_fft = fit_partial_fft(
            self._full_fft,
            self._partial_data,
            self.center_freq,
            self.sample_freq,
            start_freq,
            end_freq,
        )
        self.set_new_fft_data(self._full_fft, timestamp, None, looped)

    def clear_partial_fft_data(self) -> None:
        """Leave partial mode; the next partial spectrum starts afresh."""
        self._full_fft = []
        self._partial_data = []
        self._partial_active = False

    # Display ---------------------------------------------------------------
    def screen_fft_data(
        self, plot_height: int, plot_width: int
    ) -> tuple[list[int], int, int]:
        """Rows of the pandapter trace for the visible range.

        Returns the rows, and the first and last column carrying data. Peaks
        are detected along the way when peak detection is on.
        """
        if not self._fft_data:
            raise ValueError("no FFT data")

        limit = (int(self.sample_freq) + self.span) // 2 - 1
        center = max(-limit, min(self.tentative_center_freq + self.fft_center, limit))
        half = int(self.span / 2)
        start = center - half
        stop = center + half

        abs_start = start + self.center_freq
        abs_stop = stop + self.center_freq
        if (
            not self._partial_active
            or abs_start < self.partial_freq_start
            or abs_stop > self.partial_freq_end
        ):
            rows, xmin, xmax = screen_fft_data(
                plot_height,
                plot_width,
                self.pand_max_db,
                self.pand_min_db,
                start,
                stop,
                self._fft_data,
                self.sample_freq,
                self.gain,
            )
        else:
            width = self.partial_freq_end - self.partial_freq_start
            rel_center = self.partial_freq_start + width // 2 - self.center_freq
            rows, xmin, xmax = screen_fft_data(
                plot_height,
                plot_width,
                self.pand_max_db,
                self.pand_min_db,
                start - rel_center,
                stop - rel_center,
                self._partial_data,
                width,
                self.gain,
            )

        if self.peak_detection is not None:
            found = detect_peaks(rows[xmin:xmax], self.peak_detection)
            self.peaks = {index + xmin: row for index, row in found.items()}
        return rows, xmin, xmax

    def is_slow(self) -> bool:
        """Whether spectra arrive too rarely to drive redraws."""
        if self.fft_size == 0:
            return True
        if self.expected_rate != 0 and self.expected_rate < MINIMUM_REFRESH_RATE:
            return True
        return self.sample_freq / self.fft_size < MINIMUM_REFRESH_RATE