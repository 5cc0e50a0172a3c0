import pytest

from suwidgets.waterfall_math import (
    PEAK_CLICK_MAX_H_DISTANCE,
    PEAK_CLICK_MAX_V_DISTANCE,
    DivisionLayout,
    FftAccumulator,
    calc_div_size,
    detect_peaks,
    fit_partial_fft,
    format_freq_units,
    full_fft_size,
    nearest_peak,
    round_freq,
    screen_fft_data,
)


# round_freq ---------------------------------------------------------------

def test_round_freq_positive_is_multiple_and_close():
    for f in range(0, 1000, 7):
        r = round_freq(f, 100)
        assert r % 100 == 0
        assert abs(r - f) <= 50


@pytest.mark.parametrize("k", [-5, -2, -1, 0, 1, 3, 144])
def test_round_freq_keeps_multiples(k):
    assert round_freq(k * 100, 100) == k * 100


def test_round_freq_resolution_one_is_identity():
    assert round_freq(144500000, 1) == 144500000
    assert round_freq(-1234, 1) == -1234


def test_round_freq_negative_values():
    assert round_freq(-149, 100) == -100
    assert round_freq(-151, 100) == -200


def test_round_freq_rejects_zero_resolution():
    with pytest.raises(ValueError):
        round_freq(10, 0)


# calc_div_size ------------------------------------------------------------

@pytest.mark.parametrize(
    "low,high,wanted",
    [(0, 100, 10), (5, 105, 10), (144452000, 144548000, 12), (-150, 0, 6), (-77, 913, 4)],
)
def test_calc_div_size_invariants(low, high, wanted):
    layout = calc_div_size(low, high, wanted)
    assert layout.divs <= wanted
    assert layout.adj_low >= low
    assert layout.adj_low - low < layout.step
    assert layout.adj_low % layout.step == 0
    mantissa = layout.step
    while mantissa % 10 == 0:
        mantissa //= 10
    assert mantissa in (1, 2, 5)


def test_calc_div_size_small_range_uses_unit_step():
    assert calc_div_size(0, 5, 10) == DivisionLayout(adj_low=0, step=1, divs=5)


def test_calc_div_size_zero_divisions():
    assert calc_div_size(0, 100, 0) is None


def test_calc_div_size_negative_divisions():
    with pytest.raises(ValueError):
        calc_div_size(0, 100, -1)


# format_freq_units --------------------------------------------------------

@pytest.mark.parametrize(
    "units,text",
    [(1, ""), (1000, "K"), (1000000, "M"), (1000000000, "G"), (42, "")],
)
def test_format_freq_units(units, text):
    assert format_freq_units(units) == text


# screen_fft_data ----------------------------------------------------------

def test_screen_fft_top_and_bottom():
    top, xmin, xmax = screen_fft_data(50, 20, 0.0, -100.0, -500, 500, [0.0] * 8, 1000, 0.0)
    assert top == [0] * 20
    assert (xmin, xmax) == (0, 20)
    bottom, _, _ = screen_fft_data(50, 20, 0.0, -100.0, -500, 500, [-100.0] * 8, 1000, 0.0)
    assert bottom == [50] * 20


def test_screen_fft_clamps_to_plot():
    data = [-300.0, 40.0, -50.0, 10.0] * 4
    out, _, _ = screen_fft_data(60, 30, 0.0, -100.0, -500, 500, data, 1000, 0.0)
    assert all(0 <= y <= 60 for y in out)
    assert 0 in out and 60 in out


def test_screen_fft_large_fft_keeps_maximum():
    data = [-100.0] * 1024
    data[600] = 0.0
    out, xmin, xmax = screen_fft_data(50, 100, 0.0, -100.0, -500, 500, data, 1000, 0.0)
    assert len(out) == 100
    assert xmin == 0
    assert xmax <= 99
    assert min(out) == 0
    assert out.count(0) == 1


def test_screen_fft_empty_range_rejected():
    with pytest.raises(ValueError):
        screen_fft_data(50, 10, -10.0, -10.0, -500, 500, [0.0] * 8, 1000, 0.0)


# full_fft_size / fit_partial_fft ------------------------------------------

def test_full_fft_size_is_power_of_two_cover():
    size = full_fft_size(100, 1000, 0, 100)
    assert size & (size - 1) == 0
    assert 1000 <= size < 2000


def test_full_fft_size_empty_range():
    with pytest.raises(ValueError):
        full_fft_size(100, 1000, 50, 50)


def test_fit_partial_fft_places_bins():
    full = [-255.0] * 8
    data = [1.0, 2.0, 3.0, 4.0]
    fitted = fit_partial_fft(full, data, 0, 1000, -500, 0)
    assert fitted[:4] == data
    assert fitted[4:] == [-255.0] * 4
    assert full == [-255.0] * 8


def test_fit_partial_fft_averages_bins():
    data = [1.0, 2.0, 3.0, 4.0]
    fitted = fit_partial_fft([0.0, 0.0], data, 0, 1000, -500, 500)
    assert fitted[0] == pytest.approx(sum(data[:2]) / 2)
    assert fitted[1] == pytest.approx(sum(data[2:]) / 2)


def test_fit_partial_fft_rejects_empty():
    with pytest.raises(ValueError):
        fit_partial_fft([], [1.0], 0, 1000, -500, 500)
    with pytest.raises(ValueError):
        fit_partial_fft([0.0], [], 0, 1000, -500, 500)


# peaks ---------------------------------------------------------------------

def test_nearest_peak_picks_closest():
    peaks = {10: 50, 20: 52}
    assert nearest_peak(peaks, 19, 50) == 20
    assert nearest_peak(peaks, 11, 50) == 10


def test_nearest_peak_none_when_far():
    peaks = {10: 50}
    assert nearest_peak(peaks, 10 + PEAK_CLICK_MAX_H_DISTANCE + 1, 50) is None
    assert nearest_peak(peaks, 10, 50 + PEAK_CLICK_MAX_V_DISTANCE + 1) is None


def test_detect_single_dip():
    values = [100.0] * 20
    values[5] = 10.0
    assert detect_peaks(values, 1.0) == {5: 10.0}


def test_detect_two_dips():
    values = [100.0] * 20
    values[5] = 10.0
    values[15] = 10.0
    assert sorted(detect_peaks(values, 1.0)) == [5, 15]


def test_detect_flat_has_no_peaks():
    assert detect_peaks([30.0] * 16, 2.0) == {}
    assert detect_peaks([], 2.0) == {}


def test_detect_rejects_non_positive_factor():
    with pytest.raises(ValueError):
        detect_peaks([1.0, 2.0], 0)


# FftAccumulator ------------------------------------------------------------

def test_accumulator_single_line():
    acc = FftAccumulator()
    acc.add([1.0, 2.0, 3.0])
    assert acc.average() == [1.0, 2.0, 3.0]
    assert acc.count == 1


def test_accumulator_mean_of_lines():
    acc = FftAccumulator()
    a, b = [1.0, 5.0], [3.0, 7.0]
    acc.add(a)
    acc.add(b)
    assert acc.count == 2
    mean = acc.average()
    assert mean == pytest.approx([(x + y) / 2 for x, y in zip(a, b)])
    assert acc.count == 1
    assert acc.average() == pytest.approx(mean)


def test_accumulator_size_change_restarts():
    acc = FftAccumulator()
    acc.add([1.0, 1.0])
    acc.add([4.0, 4.0, 4.0])
    assert acc.count == 1
    assert acc.values == [4.0, 4.0, 4.0]


def test_accumulator_reset():
    acc = FftAccumulator()
    acc.add([2.0, 3.0])
    acc.reset()
    assert acc.count == 0
    assert acc.values == [0.0, 0.0]
    assert acc.average() == [0.0, 0.0]