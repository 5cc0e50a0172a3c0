from types import SimpleNamespace

import pytest

from suwidgets.waterfall import Waterfall
from suwidgets.waterfall_input import (
    CaptureType,
    MouseButton,
    WaterfallInput,
)
from suwidgets.waterfall_math import round_freq


@pytest.fixture
def wf():
    w = Waterfall()
    w.resize(1000, 500)
    return w


@pytest.fixture
def ui(wf):
    return WaterfallInput(wf)


def record(signal):
    calls = []
    signal.connect(lambda *a: calls.append(a))
    return calls


def test_hover_on_demod_captures_center(ui):
    x = ui.demod_freq_x
    assert ui.mouse_move(x + 2, 50) is CaptureType.CENTER
    assert ui.cursor == "size_hor"


def test_center_drag_moves_demod(ui, wf):
    calls = record(ui.new_demod_freq)
    x = ui.demod_freq_x
    ui.mouse_move(x + 2, 50)
    ui.mouse_move(x + 2, 50, MouseButton.LEFT)
    assert ui.grab_position == 2
    ui.mouse_move(x + 102, 50, MouseButton.LEFT)
    expected = round_freq(wf.freq_from_x(x + 100), wf.click_resolution)
    assert wf.demod_center_freq == expected
    assert calls[-1] == (expected, expected - wf.center_freq)


def test_low_cut_drag_is_symmetric(ui, wf):
    calls = record(ui.new_filter_freq)
    x = ui.demod_low_cut_x
    assert ui.mouse_move(x + 2, 50) is CaptureType.LEFT
    ui.mouse_move(x + 2, 50, MouseButton.LEFT)
    ui.mouse_move(x - 28, 50, MouseButton.LEFT)
    assert wf.demod_hi_cut == -wf.demod_low_cut
    assert wf.low_cut_min <= wf.demod_low_cut <= wf.low_cut_max
    assert calls[-1] == (wf.demod_low_cut, wf.demod_hi_cut)


def test_press_left_in_free_area_tunes(ui, wf):
    calls = record(ui.new_demod_freq)
    assert ui.mouse_press(800, 50, MouseButton.LEFT) is CaptureType.CENTER
    expected = round_freq(wf.freq_from_x(800), wf.click_resolution)
    assert wf.demod_center_freq == expected
    assert ui.grab_position == 1
    assert len(calls) == 1


def test_press_left_when_locked_does_nothing(ui, wf):
    wf.locked = True
    before = wf.demod_center_freq
    assert ui.mouse_press(800, 50, MouseButton.LEFT) is CaptureType.NOCAP
    assert wf.demod_center_freq == before


def test_press_middle_sets_center(ui, wf):
    centers = record(ui.new_center_freq)
    ui.mouse_press(800, 50, MouseButton.MIDDLE)
    assert wf.demod_center_freq == wf.center_freq
    assert centers == [(wf.center_freq,)]


def test_press_right_resets_zoom(ui, wf):
    wf.set_span_freq(48000)
    ui.mouse_press(800, 50, MouseButton.RIGHT)
    assert wf.span == int(wf.sample_freq)
    assert wf.fft_center == 0


def test_wheel_plain_steps_demod(ui, wf):
    before = wf.demod_center_freq
    ui.wheel(700, 50, 120)
    assert wf.demod_center_freq == before + wf.click_resolution


def test_wheel_small_steps_accumulate(ui, wf):
    before = wf.demod_center_freq
    ui.wheel(700, 50, 60)
    assert wf.demod_center_freq == before
    ui.wheel(700, 50, 60)
    assert wf.demod_center_freq == before + wf.click_resolution
    assert ui.cum_wheel_delta == 0


def test_wheel_control_widens_filter(ui, wf):
    res = wf.click_resolution
    low, high = wf.demod_low_cut, wf.demod_hi_cut
    ui.wheel(700, 50, 120, control=True)
    assert (wf.demod_low_cut, wf.demod_hi_cut) == (low - res, high + res)


def test_wheel_shift_shifts_filter(ui, wf):
    res = wf.click_resolution
    low, high = wf.demod_low_cut, wf.demod_hi_cut
    ui.wheel(700, 50, 120, shift=True)
    assert (wf.demod_low_cut, wf.demod_hi_cut) == (low + res, high + res)


def test_wheel_shift_locked_ignored(ui, wf):
    wf.locked = True
    low = wf.demod_low_cut
    ui.wheel(700, 50, 120, shift=True)
    assert wf.demod_low_cut == low


def test_y_axis_drag_keeps_range_width(ui, wf):
    wf.set_pandapter_range(-100.0, -20.0)
    ui.y_axis_width = 40
    calls = record(ui.pandapter_range_changed)
    assert ui.mouse_move(20, 50) is CaptureType.YAXIS
    ui.mouse_press(20, 50, MouseButton.LEFT)
    ui.mouse_move(20, 20, MouseButton.LEFT)
    assert wf.pand_max_db - wf.pand_min_db == pytest.approx(80.0)
    assert wf.pand_min_db < -100.0
    assert calls[-1] == (wf.pand_min_db, wf.pand_max_db)


def test_y_axis_drag_out_of_range_reverts(ui, wf):
    ui.y_axis_width = 40
    ui.mouse_move(20, 50)
    ui.mouse_press(20, 50, MouseButton.LEFT)
    ui.mouse_move(20, 80, MouseButton.LEFT)
    assert (wf.pand_min_db, wf.pand_max_db) == (-150.0, 0.0)


def test_x_axis_drag_pans(ui, wf):
    wf.set_span_freq(48000)
    ui.x_axis_y_center = 140
    assert ui.mouse_move(300, 140) is CaptureType.XAXIS
    ui.mouse_press(300, 140, MouseButton.LEFT)
    ui.mouse_move(250, 140, MouseButton.LEFT)
    assert wf.fft_center == 2400
    assert ui.x_zero == 250


def test_x_axis_shift_drag_retunes(ui, wf):
    ui.x_axis_y_center = 140
    centers = record(ui.new_center_freq)
    center, demod = wf.center_freq, wf.demod_center_freq
    ui.mouse_move(300, 140)
    ui.mouse_press(300, 140, MouseButton.LEFT)
    ui.mouse_move(250, 140, MouseButton.LEFT, shift=True)
    moved = wf.center_freq - center
    assert moved > 0
    assert wf.demod_center_freq - demod == moved
    assert wf.tentative_center_freq == moved
    assert centers == [(wf.center_freq,)]


def test_wheel_on_x_axis_zooms_in(ui, wf):
    ui.x_axis_y_center = 140
    ui.mouse_move(300, 140)
    ui.wheel(300, 140, 120)
    assert wf.span < int(wf.sample_freq)


def test_wheel_on_y_axis_narrows_range(ui, wf):
    ui.y_axis_width = 40
    calls = record(ui.pandapter_range_changed)
    ui.mouse_move(20, 50)
    ui.wheel(20, 50, 120)
    assert wf.pand_max_db - wf.pand_min_db < 150.0
    assert len(calls) == 1


def test_release_outside_overlay_releases(ui):
    x = ui.demod_freq_x
    ui.mouse_move(x + 2, 50)
    assert ui.mouse_release(x, 400) is CaptureType.NOCAP
    assert ui.grab_position == 0


def test_release_on_y_axis(ui):
    ui.y_axis_width = 40
    ui.mouse_move(20, 50)
    assert ui.mouse_release(20, 50) is CaptureType.YAXIS
    assert ui.y_zero == -1
    assert ui.cursor == "open_hand"


def test_move_outside_widget_releases(ui):
    x = ui.demod_freq_x
    ui.mouse_move(x + 2, 50)
    assert ui.mouse_move(x + 2, 900, MouseButton.LEFT) is CaptureType.NOCAP


def test_bookmark_click(ui, wf):
    info = SimpleNamespace(
        frequency=wf.center_freq + 20000,
        modulation="FM",
        low_freq_cut=-3000,
        high_freq_cut=3000,
    )
    ui.set_bookmark_tags([((700, 10, 50, 12), info)])
    mods = record(ui.new_modulation)
    filters = record(ui.new_filter_freq)
    assert ui.mouse_move(710, 15) is CaptureType.BOOKMARK
    ui.mouse_press(710, 15, MouseButton.LEFT)
    assert mods == [("FM",)]
    assert wf.demod_center_freq == info.frequency
    assert filters == [(-3000, 3000)]


def test_tooltip_shows_demod(ui, wf):
    ui.tooltips_enabled = True
    ui.mouse_move(ui.demod_freq_x + 1, 50)
    assert ui.tooltip == f"Demod: {wf.demod_center_freq / 1e3:.3f} kHz"


def test_hover_free_area_releases(ui):
    ui.mouse_move(ui.demod_freq_x + 2, 50)
    assert ui.mouse_move(800, 50) is CaptureType.NOCAP
    assert ui.cursor == "arrow"