# suwidgets

Models behind the widgets of a signal-analysis front end, written in plain
Python with no GUI toolkit attached. Each class holds the state and the
arithmetic a widget needs (coordinate mapping, zoom and pan, filter editing,
unit handling), so that a drawing layer can sit on top of it.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## What is inside

- `suwidgets.signal.Signal`: a small observer with `connect`, `disconnect`
  and `emit`. Slots are called in connection order.
- `suwidgets.color`: `Color`, a frozen 8-bit RGBA value with `with_alpha`,
  and `ColorChooserButton`, which holds a colour, emits `color_changed` when
  it changes, returns a 48×16 `preview()` swatch and takes a new colour from a
  `picker` callable in `choose()` (a picker returning `None` cancels).
- `suwidgets.constellation`: `Constellation` keeps a bounded history of
  complex samples (`feed`, `samples`, `set_history_size`), maps them to pixel
  coordinates after `resize` (`to_screen`, `points`, with older samples
  fainter), and gives the ideal PSK points for the current `order_hint`
  (`marker_positions`).
- `suwidgets.frequency_spinbox`: `FrequencySpinBox` with SI unit multipliers
  from femto to tera (`FrequencyUnitMultiplier`). Setting `value` picks a
  multiplier automatically when `auto_unit_multiplier` is on; `suffix()`,
  `decimals()`, `display_value()` and `display_range()` describe what to show,
  and `edit()` accepts a number typed in scaled units.
- `suwidgets.context_spinbox`: `ContextAwareSpinBox`, a decimal spin box whose
  step is the digit under the cursor (`current_step`, `step_by`,
  `step_to_cursor`, `set_single_step`, `set_minimum_step`, `focus_in`).
- `suwidgets.waterfall_math`: pure helpers for spectrum plots:
  `round_freq`, `calc_div_size` (returns a `DivisionLayout` or `None`),
  `format_freq_units`, `screen_fft_data`, `full_fft_size`,
  `fit_partial_fft`, `detect_peaks`, `nearest_peak` and `FftAccumulator`.
- `suwidgets.waterfall_view`: `WaterfallView`, the frequency axis, zoom, pan,
  demodulator filter, level ranges and waterfall timing of a plot.
- `suwidgets.waterfall`: `Waterfall`, a `WaterfallView` that takes FFT lines
  (`set_new_fft_data`, `set_new_partial_fft_data`), averages them into
  waterfall lines (`lines()`), keeps `TimeStamp` labels and maps the current
  spectrum to screen rows (`screen_fft_data`), detecting peaks when enabled.
- `suwidgets.waterfall_input`: `WaterfallInput` turns mouse moves, presses,
  releases and wheel turns (`MouseButton` flags) into tuning, filter, pan and
  zoom changes on a `Waterfall`, tracking what is grabbed as a `CaptureType`
  and emitting `new_center_freq`, `new_demod_freq`, `new_filter_freq`,
  `new_modulation` and `pandapter_range_changed`.

## Examples

```python
from suwidgets.waterfall_math import round_freq, calc_div_size

round_freq(144_500_049, 100)   # 144500000
calc_div_size(0, 1000, 10)     # DivisionLayout(adj_low=0, step=100, divs=10)
```

```python
from suwidgets.frequency_spinbox import FrequencySpinBox

box = FrequencySpinBox()
box.value = 145_800_000
box.suffix()         # "MHz"
box.display_value()  # 145.8
```

```python
from suwidgets.waterfall import Waterfall

wf = Waterfall()
wf.resize(800, 600)
wf.x_from_freq(wf.center_freq)   # 400
```

## What it does not do

Nothing here draws on a screen or opens a window: there is no rendering
of axes, traces, waterfall images or colour palettes, and no dialog for
picking a colour. The classes compute what a drawing layer needs and leave
the painting to it. There is also no component that turns complex samples
into symbol decisions.