"""Geometry, zoom and tuning state of a spectrum and waterfall display."""

from __future__ import annotations

import math
from typing import Optional

from suwidgets.signal import Signal

DEFAULT_CENTER_FREQ = 144500000
DEFAULT_SPAN = 96000
DEFAULT_SAMPLE_RATE = 96000.0
DEFAULT_FFT_RATE = 15
DEFAULT_PERCENT_2D_SCREEN = 30
DEFAULT_UPPER_FREQ_LIMIT = 300000000
MIN_ZOOM_BINS = 5
MIN_ZOOM_RANGE = 10.0


def _trunc_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _clamp(low, value, high):
    """Clamp ``value``; when ``low`` exceeds ``high`` the result is ``low``."""
    return max(low, min(value, high))


def _valid_range(low: float, high: float) -> bool:
    return math.isfinite(low) and math.isfinite(high) and low < high


class WaterfallView:
    """Frequency axis, zoom, demodulator filter and level range of a plot."""

    def __init__(self) -> None:
        self.new_fft_center_freq = Signal()
        self.new_zoom_level = Signal()
        self.waterfall_cleared = Signal()

        self.center_freq = DEFAULT_CENTER_FREQ
        self.fft_center = 0
        self.tentative_center_freq = 0
        self.demod_center_freq = DEFAULT_CENTER_FREQ
        self.demod_hi_cut = 5000
        self.demod_low_cut = -5000

        self.low_cut_min = -25000
        self.low_cut_max = -1000
        self.high_cut_min = 1000
        self.high_cut_max = 25000
        self.symmetric = True

        self.click_resolution = 100
        self.filter_click_resolution = 100
        self.locked = False
        self.freq_drag_locked = False

        self.span = DEFAULT_SPAN
        self.sample_freq = DEFAULT_SAMPLE_RATE
        self.fft_size = 0
        self.freq_units = 1000000
        self._freq_digits = 3

        self.pand_min_db = -150.0
        self.pand_max_db = 0.0
        self.wf_min_db = -150.0
        self.wf_max_db = 0.0
        self.gain = 0.0
        self.zero_point = 0.0
        self.db_per_unit = 1.0
        self.unit_name = "dBFS"

        self.width = 0
        self.height = 0
        self._percent_2d_screen = DEFAULT_PERCENT_2D_SCREEN
        self.spectrum_plot_height = 0
        self.waterfall_height = 0
        self.hdpi_aware = False
        self.device_pixel_ratio = 1.0

        self.enforce_freq_limits = False
        self.lower_freq_limit = 0
        self.upper_freq_limit = DEFAULT_UPPER_FREQ_LIMIT

        self.tlast_wf_ms = 0.0
        self.msec_per_wfline = 0.0
        self.wf_span = 0.0
        self.fft_rate = DEFAULT_FFT_RATE

        self.peak_detection: Optional[float] = None
        self.peak_hold_valid = False
        self.overlay_dirty = True

    # Geometry --------------------------------------------------------------
    @property
    def percent_2d_screen(self) -> int:
        """Percentage of the height used by the spectrum plot."""
        return self._percent_2d_screen

    @percent_2d_screen.setter
    def percent_2d_screen(self, percent: int) -> None:
        if not 0 <= percent <= 100:
            raise ValueError("percentage must be between 0 and 100")
        self._percent_2d_screen = percent
        self._relayout()

    @property
    def freq_digits(self) -> int:
        return self._freq_digits

    @freq_digits.setter
    def freq_digits(self, digits: int) -> None:
        self._freq_digits = max(digits, 0)

    def _dpi_factor(self) -> float:
        return self.device_pixel_ratio if self.hdpi_aware else 1.0

    def _relayout(self) -> None:
        self.spectrum_plot_height = self._percent_2d_screen * self.height // 100
        self.waterfall_height = self.height - self.spectrum_plot_height
        self.peak_hold_valid = False
        if self.wf_span > 0 and self.waterfall_height > 0:
            self.msec_per_wfline = self.wf_span / (
                self.waterfall_height * self._dpi_factor()
            )
        self.update_overlay()

    def resize(self, width: int, height: int) -> None:
        """Set the widget size and split it between spectrum and waterfall."""
        if width < 0 or height < 0:
            raise ValueError("size must not be negative")
        if (width, height) != (self.width, self.height):
            self.width = width
            self.height = height
            self._relayout()
        else:
            self.update_overlay()

    def update_overlay(self) -> None:
        """Mark the axes overlay as needing a redraw."""
        self.overlay_dirty = True

    @property
    def start_freq(self) -> int:
        """Absolute frequency at the left edge of the plot."""
        return self.center_freq + self.fft_center - _trunc_div(self.span, 2)

    def x_from_freq(self, freq: int) -> int:
        """Screen column of an absolute frequency, clamped to the plot."""
        x = int(self.width * (freq - self.start_freq) / self.span)
        return _clamp(0, x, self.width)

    def freq_from_x(self, x: int) -> int:
        """Absolute frequency under a screen column."""
        if self.width == 0:
            raise ValueError("plot has no width")
        return int(self.start_freq + self.span * (x / self.width) + 0.5)

    def msec_from_y(self, y: int) -> int:
        """Time in milliseconds of the waterfall line at row ``y``."""
        if y < self.spectrum_plot_height:
            return 0
        dy = y - self.spectrum_plot_height
        if self.msec_per_wfline > 0:
            value = self.tlast_wf_ms - dy * self.msec_per_wfline
        else:
            value = self.tlast_wf_ms - _trunc_div(dy * 1000, self.fft_rate)
        return max(0, int(value))

    # Tuning ----------------------------------------------------------------
    def _bound_center_freq(self, freq: int) -> int:
        if self.enforce_freq_limits:
            return _clamp(self.lower_freq_limit, freq, self.upper_freq_limit)
        return freq

    def set_center_freq(self, freq: int) -> None:
        """Set the hardware centre frequency, honouring enabled limits."""
        freq = self._bound_center_freq(freq)
        if freq == self.center_freq:
            return
        self.tentative_center_freq += freq - self.center_freq
        self.center_freq = freq
        self.update_overlay()
        self.peak_hold_valid = False

    def set_frequency_limits(self, low: int, high: int) -> None:
        """Set the range the centre frequency may be tuned to."""
        self.lower_freq_limit = low
        self.upper_freq_limit = high
        if self.enforce_freq_limits:
            self.set_center_freq(self.center_freq)

    def set_frequency_limits_enabled(self, enabled: bool) -> None:
        """Turn enforcement of the centre frequency limits on or off."""
        self.enforce_freq_limits = enabled
        if enabled:
            self.set_center_freq(self.center_freq)

    def set_fft_center_freq(self, freq: int) -> None:
        """Pan the plot; ``freq`` is relative to the centre frequency."""
        if self.sample_freq >= self.span:
            limit = _trunc_div(int(self.sample_freq) - self.span, 2)
        else:
            limit = 0
        center = _clamp(-limit, freq, limit)
        if center != self.fft_center:
            self.fft_center = center
            self.new_fft_center_freq.emit(center)

    def set_span_freq(self, span: int) -> None:
        """Set the bandwidth shown; non-positive spans are ignored."""
        if span > 0:
            self.span = span
            self.set_fft_center_freq(self.fft_center)
        self.update_overlay()

    def set_sample_rate(self, rate: float) -> None:
        """Set the full bandwidth; non-positive rates are ignored."""
        if rate > 0.0:
            self.sample_freq = rate
            self.update_overlay()

    def set_filter_offset(self, offset: int) -> None:
        """Move the demodulator to ``offset`` Hz from the centre."""
        self.demod_center_freq = self.center_freq + offset
        self.update_overlay()

    def set_hi_low_cut_frequencies(self, low: int, high: int) -> None:
        """Set the demodulator filter edges relative to its centre."""
        self.demod_low_cut = low
        self.demod_hi_cut = high
        self.update_overlay()

    def filter_offset(self) -> int:
        """Demodulator frequency relative to the centre frequency."""
        return self.demod_center_freq - self.center_freq

    def filter_bandwidth(self) -> int:
        """Width of the demodulator filter."""
        return self.demod_hi_cut - self.demod_low_cut

    # Zoom ------------------------------------------------------------------
    def zoom_level(self) -> float:
        """Ratio of the sample rate to the span shown."""
        return self.sample_freq / self.span

    def zoom_step_x(self, step: float, x: int) -> None:
        """Scale the span by ``step`` keeping the frequency under ``x`` fixed."""
        if step <= 0:
            raise ValueError("zoom step must be positive")
        min_range = (
            MIN_ZOOM_BINS * self.sample_freq / self.fft_size
            if self.fft_size > 0
            else MIN_ZOOM_RANGE
        )
        new_range = int(_clamp(min_range, float(self.span) * step, float(self.sample_freq)))

        ratio = x / self.width if self.width else 0.0
        fixed_hz = self.freq_from_x(x)
        f_min = int(fixed_hz - ratio * new_range + 0.5)
        f_max = f_min + new_range

        min_limit = int(self.center_freq - self.sample_freq / 2)
        max_limit = int(self.center_freq + self.sample_freq / 2)
        if f_min < min_limit:
            f_min = min_limit
            f_max = f_min + new_range
        elif f_max > max_limit:
            f_max = max_limit
            f_min = f_max - new_range

        fc = _trunc_div(f_min + f_max, 2)
        self.update_overlay()

        self.span = new_range
        self.set_fft_center_freq(fc - self.center_freq)
        self.new_zoom_level.emit(self.zoom_level())
        self.peak_hold_valid = False

    def zoom_on_x_axis(self, level: float) -> None:
        """Zoom to an absolute level around the demodulator frequency."""
        if level <= 0:
            raise ValueError("zoom level must be positive")
        current = self.sample_freq / self.span
        self.zoom_step_x(current / level, self.x_from_freq(self.demod_center_freq))

    def reset_horizontal_zoom(self) -> None:
        """Show the whole sample rate, centred."""
        self.set_fft_center_freq(0)
        self.set_span_freq(int(self.sample_freq))
        self.new_zoom_level.emit(1.0)

    def move_to_center_freq(self) -> None:
        """Centre the plot on the centre frequency."""
        self.set_fft_center_freq(0)
        self.update_overlay()
        self.peak_hold_valid = False

    def move_to_demod_freq(self) -> None:
        """Centre the plot on the demodulator frequency."""
        self.set_fft_center_freq(self.demod_center_freq - self.center_freq)
        self.update_overlay()
        self.peak_hold_valid = False

    # Demodulator filter ----------------------------------------------------
    def set_demod_ranges(
        self,
        low_min: int,
        low_max: int,
        high_min: int,
        high_max: int,
        symmetric: bool,
    ) -> None:
        """Set the allowed ranges of the filter edges."""
        self.low_cut_min = low_min
        self.low_cut_max = low_max
        self.high_cut_min = high_min
        self.high_cut_max = high_max
        self.symmetric = symmetric
        self.clamp_demod_parameters()
        self.update_overlay()

    def clamp_demod_parameters(self) -> None:
        """Keep the filter edges within their allowed ranges."""
        if self.demod_low_cut < self.low_cut_min:
            self.demod_low_cut = self.low_cut_min
        if self.demod_low_cut > self.low_cut_max:
            self.demod_low_cut = self.low_cut_max
        if self.demod_hi_cut < self.high_cut_min:
            self.demod_hi_cut = self.high_cut_min
        if self.demod_hi_cut > self.high_cut_max:
            self.demod_hi_cut = self.high_cut_max

    # Levels ----------------------------------------------------------------
    def set_pandapter_range(self, low: float, high: float) -> bool:
        """Set the spectrum level range; invalid ranges are ignored."""
        if not _valid_range(low, high):
            return False
        self.pand_min_db = low
        self.pand_max_db = high
        self.update_overlay()
        self.peak_hold_valid = False
        return True

    def set_waterfall_range(self, low: float, high: float) -> bool:
        """Set the waterfall level range; invalid ranges are ignored."""
        if not _valid_range(low, high):
            return False
        self.wf_min_db = low
        self.wf_max_db = high
        return True

    def set_fft_range(self, low: float, high: float) -> bool:
        """Set both the waterfall and the spectrum level ranges."""
        applied = self.set_waterfall_range(low, high)
        return self.set_pandapter_range(low, high) and applied

    def to_display_units(self, db: float) -> float:
        """Convert a level in dB to the unit shown on the axis."""
        return db / self.db_per_unit - self.zero_point

    # Waterfall timing ------------------------------------------------------
    def set_waterfall_span(self, span_ms: float) -> None:
        """Set the time covered by the waterfall, 0 for automatic."""
        if span_ms < 0:
            raise ValueError("waterfall span must not be negative")
        self.wf_span = span_ms
        if self.waterfall_height > 0:
            self.msec_per_wfline = self.wf_span / (
                self.waterfall_height * self._dpi_factor()
            )
        self.waterfall_cleared.emit()

    def wf_time_res(self) -> float:
        """Milliseconds represented by one waterfall line."""
        if self.msec_per_wfline:
            return self.msec_per_wfline
        return 1000.0 / self.fft_rate

    def set_fft_rate(self, rate: int) -> None:
        """Set the expected FFT rate, used when the span is automatic."""
        if rate <= 0:
            raise ValueError("FFT rate must be positive")
        self.fft_rate = rate
        self.waterfall_cleared.emit()

    def set_peak_detection(self, enabled: bool, factor: float) -> None:
        """Enable peak detection at ``factor`` standard deviations."""
        self.peak_detection = factor if enabled and factor > 0 else None