"""Mouse and wheel interaction with a waterfall display."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime
from enum import Enum, Flag
from typing import Any, Optional

from suwidgets.signal import Signal
from suwidgets.waterfall import Waterfall
from suwidgets.waterfall_math import nearest_peak, round_freq

FFT_MIN_DB = -160.0
FFT_MAX_DB = 0.0
CURSOR_CAPTURE_DELTA = 5
WHEEL_STEP = 8 * 15
BOOKMARK_AREA_HEIGHT = 15 * 10
MIN_DB_RANGE = 10.0

Rect = tuple[int, int, int, int]


class CaptureType(Enum):
    NOCAP = "nocap"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    YAXIS = "yaxis"
    XAXIS = "xaxis"
    BOOKMARK = "bookmark"


class MouseButton(Flag):
    NONE = 0
    LEFT = 1
    RIGHT = 2
    MIDDLE = 4


def _close_to(value: int, ref: int, delta: int) -> bool:
    return ref - delta < value < ref + delta


def _rect_contains(rect: Rect, x: int, y: int) -> bool:
    rx, ry, w, h = rect
    return rx <= x < rx + w and ry <= y < ry + h


def _out_of_range(low: float, high: float) -> bool:
    return (
        not (math.isfinite(low) and math.isfinite(high))
        or low >= high
        or low < FFT_MIN_DB
        or high > FFT_MAX_DB
    )


def _format_khz(freq: float) -> str:
    return f"{freq / 1e3:.3f}"


class WaterfallInput:
    """Turns pointer events into tuning, filter, pan and zoom changes."""

    def __init__(self, waterfall: Waterfall) -> None:
        self.waterfall = waterfall
        self.new_center_freq = Signal()
        self.new_demod_freq = Signal()
        self.new_filter_freq = Signal()
        self.new_modulation = Signal()
        self.pandapter_range_changed = Signal()

        self.captured = CaptureType.NOCAP
        self.capture_delta = CURSOR_CAPTURE_DELTA
        self.grab_position = 0
        self.x_zero = 0
        self.y_zero = 0
        self.cum_wheel_delta = 0
        self.freq_drag_button = MouseButton.MIDDLE

        self.y_axis_width = 0
        self.x_axis_y_center = 0
        self.bookmark_tags: list[tuple[Rect, Any]] = []

        self.cursor = "arrow"
        self.tooltips_enabled = False
        self.tooltip: Optional[str] = None

    # Geometry helpers -----------------------------------------------------
    @property
    def demod_freq_x(self) -> int:
        return self.waterfall.x_from_freq(self.waterfall.demod_center_freq)

    @property
    def demod_low_cut_x(self) -> int:
        wf = self.waterfall
        return wf.x_from_freq(wf.demod_center_freq + wf.demod_low_cut)

    @property
    def demod_hi_cut_x(self) -> int:
        wf = self.waterfall
        return wf.x_from_freq(wf.demod_center_freq + wf.demod_hi_cut)

    def _in_overlay(self, x: int, y: int) -> bool:
        wf = self.waterfall
        return 0 <= x < wf.width and 0 <= y < wf.spectrum_plot_height

    def _in_widget(self, x: int, y: int) -> bool:
        wf = self.waterfall
        return 0 <= x < wf.width and 0 <= y < wf.height

    def _bound_center_freq(self, freq: int) -> int:
        wf = self.waterfall
        if wf.enforce_freq_limits:
            return max(wf.lower_freq_limit, min(freq, wf.upper_freq_limit))
        return freq

    def _release_capture(self) -> None:
        self.cursor = "arrow"
        self.captured = CaptureType.NOCAP

    def _show_tip(self, text: Optional[str]) -> None:
        if self.tooltips_enabled:
            self.tooltip = text

    def _emit_filter(self) -> None:
        wf = self.waterfall
        self.new_filter_freq.emit(int(wf.demod_low_cut), int(wf.demod_hi_cut))

    def _emit_demod(self) -> None:
        wf = self.waterfall
        self.new_demod_freq.emit(
            wf.demod_center_freq, wf.demod_center_freq - wf.center_freq
        )

    # Hover ----------------------------------------------------------------
    def _hover(self, x: int, y: int) -> None:
        wf = self.waterfall
        on_tag = y < BOOKMARK_AREA_HEIGHT and any(
            _rect_contains(rect, x, y) for rect, _ in self.bookmark_tags
        )
        if on_tag:
            self.cursor = "pointing_hand"
            self.captured = CaptureType.BOOKMARK
        elif _close_to(x, self.demod_freq_x, self.capture_delta):
            if self.captured is not CaptureType.CENTER:
                self.cursor = "size_hor"
            self.captured = CaptureType.CENTER
            self._show_tip(f"Demod: {_format_khz(wf.demod_center_freq)} kHz")
        elif _close_to(x, self.demod_hi_cut_x, self.capture_delta):
            if self.captured is not CaptureType.RIGHT:
                self.cursor = "size_fdiag"
            self.captured = CaptureType.RIGHT
            self._show_tip(f"High cut: {wf.demod_hi_cut} Hz")
        elif _close_to(x, self.demod_low_cut_x, self.capture_delta):
            if self.captured is not CaptureType.LEFT:
                self.cursor = "size_bdiag"
            self.captured = CaptureType.LEFT
            self._show_tip(f"Low cut: {wf.demod_low_cut} Hz")
        elif _close_to(x, self.y_axis_width // 2, self.y_axis_width // 2):
            if self.captured is not CaptureType.YAXIS:
                self.cursor = "open_hand"
            self.captured = CaptureType.YAXIS
            self._show_tip(None)
        elif _close_to(y, self.x_axis_y_center, self.capture_delta + 5):
            if self.captured is not CaptureType.XAXIS:
                self.cursor = "open_hand"
            self.captured = CaptureType.XAXIS
            self._show_tip(None)
        else:
            if self.captured is not CaptureType.NOCAP:
                self._release_capture()
            self._show_tip(f"F: {_format_khz(wf.freq_from_x(x))} kHz")
        self.grab_position = 0

    def _time_tip(self, x: int, y: int) -> str:
        ms = self.waterfall.msec_from_y(y)
        moment = datetime.fromtimestamp(ms / 1000)
        stamp = f"{moment:%Y.%m.%d %H:%M:%S}.{ms % 1000:03d}"
        return f"{stamp}\n{_format_khz(self.waterfall.freq_from_x(x))} kHz"

    # Drags ----------------------------------------------------------------
    def _drag_y_axis(self, y: int, buttons: MouseButton) -> None:
        wf = self.waterfall
        if not buttons & MouseButton.LEFT or wf.spectrum_plot_height <= 0:
            return
        self.cursor = "closed_hand"
        delta_px = self.y_zero - y
        delta_db = (
            delta_px * abs(wf.pand_min_db - wf.pand_max_db) / wf.spectrum_plot_height
        )
        low = wf.pand_min_db - delta_db
        high = wf.pand_max_db - delta_db
        if _out_of_range(low, high):
            return
        wf.pand_min_db = low
        wf.pand_max_db = high
        self.pandapter_range_changed.emit(low, high)
        wf.update_overlay()
        wf.peak_hold_valid = False
        self.y_zero = y

    def _drag_x_axis(self, x: int, buttons: MouseButton, shift: bool) -> None:
        wf = self.waterfall
        if not buttons & (MouseButton.LEFT | MouseButton.MIDDLE) or wf.width <= 0:
            return
        self.cursor = "closed_hand"
        delta_px = self.x_zero - x
        product = delta_px * wf.span
        delta_hz = abs(product) // wf.width * (1 if product >= 0 else -1)
        if buttons & self.freq_drag_button or shift:
            if not wf.locked and not wf.freq_drag_locked:
                center = self._bound_center_freq(
                    round_freq(wf.center_freq + delta_hz, wf.click_resolution)
                )
                delta_hz = center - wf.center_freq
                wf.center_freq += delta_hz
                wf.demod_center_freq += delta_hz
                if not wf.running:
                    wf.tentative_center_freq += delta_hz
                if delta_hz != 0:
                    self.new_center_freq.emit(wf.center_freq)
        else:
            wf.set_fft_center_freq(wf.fft_center + delta_hz)
        if delta_hz != 0:
            wf.update_overlay()
            wf.peak_hold_valid = False
            self.x_zero = x

    def _drag_cut(self, x: int, buttons: MouseButton, low_edge: bool) -> None:
        wf = self.waterfall
        if buttons & (MouseButton.LEFT | MouseButton.RIGHT):
            if self.grab_position != 0:
                edge = wf.freq_from_x(x - self.grab_position) - wf.demod_center_freq
                edge = round_freq(edge, wf.filter_click_resolution)
                symmetric = wf.symmetric and bool(buttons & MouseButton.LEFT)
                if low_edge:
                    wf.demod_low_cut = edge
                    if symmetric:
                        wf.demod_hi_cut = -edge
                else:
                    wf.demod_hi_cut = edge
                    if symmetric:
                        wf.demod_low_cut = -edge
                wf.clamp_demod_parameters()
                self._emit_filter()
                wf.update_overlay()
            else:
                ref = self.demod_low_cut_x if low_edge else self.demod_hi_cut_x
                self.grab_position = x - ref
        elif buttons != MouseButton.NONE:
            self._release_capture()

    def _drag_center(self, x: int, buttons: MouseButton) -> None:
        wf = self.waterfall
        if buttons & MouseButton.LEFT:
            if self.grab_position != 0:
                if not wf.locked:
                    wf.demod_center_freq = round_freq(
                        wf.freq_from_x(x - self.grab_position), wf.click_resolution
                    )
                    self._emit_demod()
                    wf.update_overlay()
                    wf.peak_hold_valid = False
            else:
                self.grab_position = x - self.demod_freq_x
        elif buttons != MouseButton.NONE:
            self._release_capture()

    # Events ---------------------------------------------------------------
    def mouse_move(
        self,
        x: int,
        y: int,
        buttons: MouseButton = MouseButton.NONE,
        shift: bool = False,
    ) -> CaptureType:
        """Handle pointer motion; returns the capture state afterwards."""
        if self._in_overlay(x, y):
            if buttons == MouseButton.NONE:
                self._hover(x, y)
        else:
            if buttons == MouseButton.NONE:
                if self.captured is not CaptureType.NOCAP:
                    self.cursor = "arrow"
                self.captured = CaptureType.NOCAP
                self.grab_position = 0
            if self.tooltips_enabled and self.waterfall.width > 0:
                self.tooltip = self._time_tip(x, y)

        if self.captured is CaptureType.YAXIS:
            self._drag_y_axis(y, buttons)
        elif self.captured is CaptureType.XAXIS:
            self._drag_x_axis(x, buttons, shift)
        elif self.captured is CaptureType.LEFT:
            self._drag_cut(x, buttons, low_edge=True)
        elif self.captured is CaptureType.RIGHT:
            self._drag_cut(x, buttons, low_edge=False)
        elif self.captured is CaptureType.CENTER:
            self._drag_center(x, buttons)
        else:
            self.grab_position = 0

        if not self._in_widget(x, y):
            if self.captured is not CaptureType.NOCAP:
                self.cursor = "arrow"
            self.captured = CaptureType.NOCAP
        return self.captured

    def _press_free(self, x: int, y: int, buttons: MouseButton) -> None:
        wf = self.waterfall
        if _close_to(x, self.demod_freq_x, self.capture_delta):
            self.captured = CaptureType.CENTER
            self.grab_position = x - self.demod_freq_x
        elif _close_to(x, self.demod_low_cut_x, self.capture_delta):
            self.captured = CaptureType.LEFT
            self.grab_position = x - self.demod_low_cut_x
        elif _close_to(x, self.demod_hi_cut_x, self.capture_delta):
            self.captured = CaptureType.RIGHT
            self.grab_position = x - self.demod_hi_cut_x
        elif buttons == MouseButton.LEFT:
            if wf.locked:
                return
            best = None
            if wf.peak_detection is not None:
                best = nearest_peak(wf.peaks, x, y)
            if best is not None:
                wf.demod_center_freq = wf.freq_from_x(best)
            else:
                wf.demod_center_freq = round_freq(
                    wf.freq_from_x(x), wf.click_resolution
                )
            self._emit_demod()
            self.captured = CaptureType.CENTER
            self.grab_position = 1
            wf.update_overlay()
        elif buttons == MouseButton.MIDDLE:
            if wf.locked or wf.freq_drag_locked:
                return
            wf.center_freq = self._bound_center_freq(
                round_freq(wf.freq_from_x(x), wf.click_resolution)
            )
            wf.demod_center_freq = wf.center_freq
            self.new_center_freq.emit(wf.center_freq)
            self._emit_demod()
            wf.update_overlay()
        elif buttons == MouseButton.RIGHT:
            wf.reset_horizontal_zoom()
            wf.update_overlay()

    def _press_bookmark(self, x: int, y: int) -> None:
        wf = self.waterfall
        if wf.locked:
            return
        for rect, info in self.bookmark_tags:
            if not _rect_contains(rect, x, y):
                continue
            if info.modulation:
                self.new_modulation.emit(info.modulation)
            wf.demod_center_freq = info.frequency
            self._emit_demod()
            if info.high_freq_cut - info.low_freq_cut != 0:
                self.new_filter_freq.emit(info.low_freq_cut, info.high_freq_cut)
            break

    def mouse_press(self, x: int, y: int, buttons: MouseButton) -> CaptureType:
        """Handle a button press; returns the capture state afterwards."""
        if self.captured is CaptureType.NOCAP:
            self._press_free(x, y, buttons)
        elif self.captured is CaptureType.YAXIS:
            self.y_zero = y
        elif self.captured is CaptureType.XAXIS:
            self.x_zero = x
            if buttons == MouseButton.RIGHT:
                self.waterfall.reset_horizontal_zoom()
                self.waterfall.update_overlay()
        elif self.captured is CaptureType.BOOKMARK:
            self._press_bookmark(x, y)
        return self.captured

    def mouse_release(self, x: int, y: int) -> CaptureType:
        """Handle a button release; returns the capture state afterwards."""
        if not self._in_overlay(x, y):
            if self.captured is not CaptureType.NOCAP:
                self.cursor = "arrow"
            self.captured = CaptureType.NOCAP
            self.grab_position = 0
        elif self.captured is CaptureType.YAXIS:
            self.cursor = "open_hand"
            self.y_zero = -1
        elif self.captured is CaptureType.XAXIS:
            self.cursor = "open_hand"
            self.x_zero = -1
        return self.captured

    def _wheel_y_axis(self, y: float, steps: float) -> None:
        wf = self.waterfall
        if wf.spectrum_plot_height <= 0:
            return
        zoom = 0.9 ** steps
        ratio = y / wf.spectrum_plot_height
        db_range = wf.pand_max_db - wf.pand_min_db
        db_per_pix = db_range / wf.spectrum_plot_height
        fixed_db = wf.pand_max_db - y * db_per_pix
        db_range = max(MIN_DB_RANGE, min(db_range * zoom, FFT_MAX_DB - FFT_MIN_DB))
        wf.pand_max_db = min(fixed_db + ratio * db_range, FFT_MAX_DB)
        wf.pand_min_db = max(wf.pand_max_db - db_range, FFT_MIN_DB)
        wf.peak_hold_valid = False
        self.pandapter_range_changed.emit(wf.pand_min_db, wf.pand_max_db)

    def wheel(
        self,
        x: float,
        y: float,
        delta: int,
        control: bool = False,
        shift: bool = False,
    ) -> None:
        """Handle a wheel turn of ``delta`` eighths of a degree."""
        wf = self.waterfall
        steps = delta / WHEEL_STEP

        if self.captured is CaptureType.YAXIS:
            self._wheel_y_axis(y, steps)
        elif self.captured is CaptureType.XAXIS:
            wf.zoom_step_x(0.9 ** steps, int(x))
        elif control:
            wf.demod_low_cut = int(wf.demod_low_cut - steps * wf.click_resolution)
            wf.demod_hi_cut = int(wf.demod_hi_cut + steps * wf.click_resolution)
            wf.clamp_demod_parameters()
            self._emit_filter()
        elif shift:
            if not wf.locked:
                wf.demod_low_cut = int(wf.demod_low_cut + steps * wf.click_resolution)
                wf.demod_hi_cut = int(wf.demod_hi_cut + steps * wf.click_resolution)
                wf.clamp_demod_parameters()
                self._emit_filter()
        elif not wf.locked:
            self.cum_wheel_delta += delta
            if abs(self.cum_wheel_delta) < WHEEL_STEP:
                return
            steps = self.cum_wheel_delta / WHEEL_STEP
            wf.demod_center_freq = round_freq(
                int(wf.demod_center_freq + steps * wf.click_resolution),
                wf.click_resolution,
            )
            self._emit_demod()

        wf.update_overlay()
        self.cum_wheel_delta = 0

    def set_bookmark_tags(self, tags: Sequence[tuple[Rect, Any]]) -> None:
        """Replace the clickable bookmark labels."""
        self.bookmark_tags = list(tags)