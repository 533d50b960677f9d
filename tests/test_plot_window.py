"""
Tests for the plot module: PlotWindow recording, decimation, transforms
and the PlotCatalog of presets.
"""

import math

import pytest
import numpy as np

from chaospendulum.buffer import SampleBuffer
from chaospendulum.configs import DataScale, PlotConfig, PlotMode
from chaospendulum.errors import ArrayLengthMismatch, InvalidConfiguration, UnknownChannel
from chaospendulum.plot import DEFAULT_PLOTS, PlotCatalog, PlotSpec, PlotTransform, PlotWindow
from chaospendulum.simulation import DoublePendulum

# --- Fixtures ---


@pytest.fixture
def unit_window():
    return PlotWindow(PlotConfig(stride=1, capacity=10, scale=DataScale(1.0, 1.0)))


@pytest.fixture
def pendulum():
    return DoublePendulum([3 * math.pi / 4, math.pi, 0.5, -0.25])


# --- 1. Decimation ---


@pytest.mark.parametrize("stride", [1, 2, 3, 7])
@pytest.mark.parametrize("calls", [1, 5, 6, 20])
def test_decimation_records_ceil_n_over_k(stride, calls):
    window = PlotWindow(PlotConfig(stride=stride, capacity=100))
    recorded = [window.step("c", i, i) for i in range(calls)]
    assert sum(recorded) == math.ceil(calls / stride)
    assert window.slice("c")[2] == math.ceil(calls / stride)
    # The first call is always recorded
    assert recorded[0]


def test_decimation_is_counted_per_channel():
    window = PlotWindow(PlotConfig(stride=2, capacity=100))
    for i in range(3):
        window.step("a", i, 0.0)
    window.step("b", 0.0, 0.0)
    assert window.slice("a")[2] == 2
    assert window.slice("b")[2] == 1


def test_set_decimation_validates():
    window = PlotWindow()
    assert window.set_decimation(4) is window
    assert window.stride == 4
    with pytest.raises(InvalidConfiguration):
        window.set_decimation(0)
    with pytest.raises(InvalidConfiguration):
        window.set_decimation(math.inf)
    assert window.stride == 4


# --- 2. Scaling ---


def test_time_series_scales_time_and_value():
    window = PlotWindow(PlotConfig(stride=1, scale=DataScale(x=3.0, y=2.0, time=5.0)))
    window.step("c", 0.5, 1.5)
    xs, ys, _ = window.slice("c")
    assert xs[0] == pytest.approx(2.5)
    assert ys[0] == pytest.approx(3.0)


def test_phase_scales_state_variables():
    window = PlotWindow(PlotConfig.phase(stride=1, scale=DataScale(x=3.0, y=2.0, time=5.0)))
    window.step("c", 0.5, 1.5)
    xs, ys, _ = window.slice("c")
    assert xs[0] == pytest.approx(1.5)
    assert ys[0] == pytest.approx(3.0)


def test_time_scale_defaults_to_x():
    scale = DataScale(x=7.0, y=1.0)
    assert scale.time == 7.0
    assert DataScale().time == 2000.0


def test_mode_and_scale_changes_are_not_retroactive(unit_window):
    unit_window.step("c", 1.0, 1.0)
    unit_window.set_mode(PlotMode.PHASE).set_scale(DataScale(10.0, 10.0))
    unit_window.step("c", 1.0, 1.0)

    xs, ys, count = unit_window.slice("c")
    assert count == 2
    np.testing.assert_array_equal(xs, [1.0, 10.0])
    np.testing.assert_array_equal(ys, [1.0, 10.0])
    assert unit_window.mode is PlotMode.PHASE


def test_set_mode_accepts_strings_and_rejects_unknown(unit_window):
    unit_window.set_mode("phase")
    assert unit_window.mode is PlotMode.PHASE
    with pytest.raises(InvalidConfiguration):
        unit_window.set_mode("polar")


def test_set_scale_rejects_non_scale(unit_window):
    with pytest.raises(InvalidConfiguration):
        unit_window.set_scale((1.0, 1.0))


def test_capacity_is_respected(unit_window):
    for i in range(25):
        unit_window.step("c", i, i)
    xs, _, count = unit_window.slice("c")
    assert count == 10
    assert xs[0] == 15.0 and xs[-1] == 24.0


# --- 3. Transform ---


def test_newest_time_series_sample_is_centred():
    config = PlotConfig(stride=1, scale=DataScale(x=2000.0, y=100.0))
    window = PlotWindow(config)
    for i in range(50):
        t = i / 60
        window.step("c", t, math.sin(t))
    t_last = 49 / 60

    transform = window.transform(t_last)
    xs, ys, _ = window.slice("c")
    sx, sy = transform.to_screen(xs, ys)
    assert sx[-1] == pytest.approx(config.width / 2)
    assert sy[-1] == pytest.approx(config.height / 2 - 100.0 * math.sin(t_last))
    assert transform.axis_x_max == pytest.approx(config.width + 2000.0 * t_last)
    assert transform.axis_y_max == 300.0


def test_phase_transform_is_stationary():
    window = PlotWindow(PlotConfig.phase())
    a = window.transform(0.0)
    b = window.transform(100.0)
    assert a.offset_x == b.offset_x == window.width / 2
    assert a.offset_y == b.offset_y == window.height / 2
    assert a.mode is PlotMode.PHASE


def test_to_screen_flips_y():
    transform = PlotTransform(PlotMode.PHASE, 10.0, 20.0, 100.0, 300.0)
    sx, sy = transform.to_screen([1.0, -1.0], [5.0, -5.0])
    np.testing.assert_array_equal(sx, [11.0, 9.0])
    np.testing.assert_array_equal(sy, [15.0, 25.0])


def test_to_screen_rejects_unequal_lengths():
    transform = PlotTransform(PlotMode.PHASE, 0.0, 0.0, 1.0, 1.0)
    with pytest.raises(ArrayLengthMismatch) as info:
        transform.to_screen([1.0, 2.0], [1.0])
    assert (info.value.x_length, info.value.y_length) == (2, 1)


# --- 4. Reset & Channels ---


def test_reset_clears_samples_and_restarts_decimation():
    window = PlotWindow(PlotConfig(stride=3))
    window.step("c", 0.0, 0.0)
    window.step("c", 1.0, 1.0)
    window.reset()
    with pytest.raises(UnknownChannel):
        window.slice("c")
    assert window.step("c", 2.0, 2.0)


def test_channels_are_sorted(unit_window):
    unit_window.step("pendulum2", 0.0, 0.0)
    unit_window.step("pendulum1", 0.0, 0.0)
    assert unit_window.channels() == ["pendulum1", "pendulum2"]


def test_external_buffer_is_used():
    buf = SampleBuffer(capacity=3)
    window = PlotWindow(PlotConfig(stride=2), buffer=buf)
    assert window.buffer is buf
    assert buf.stride == 2


# --- 5. Plot Catalog ---


def test_default_presets():
    assert set(DEFAULT_PLOTS) == {"bob1xpos", "bob2xpos", "theta1theta1prime"}
    phase = DEFAULT_PLOTS["theta1theta1prime"].config
    assert phase.mode is PlotMode.PHASE
    assert phase.capacity == 1500
    for name in ("bob1xpos", "bob2xpos"):
        assert DEFAULT_PLOTS[name].config.mode is PlotMode.TIME_SERIES
        assert DEFAULT_PLOTS[name].config.capacity == 500


def test_catalog_activation_builds_fresh_window(pendulum):
    catalog = PlotCatalog()
    assert catalog.active_id == "bob1xpos"
    assert catalog.sample("pendulum1", pendulum, 0.0)
    old = catalog.window

    window = catalog.activate("theta1theta1prime")
    assert window is catalog.window is not old
    assert window.mode is PlotMode.PHASE
    assert window.channels() == []
    # Presets are not shared with the windows built from them
    window.set_decimation(5)
    assert DEFAULT_PLOTS["theta1theta1prime"].config.stride == 1


def test_catalog_rejects_unknown_plot():
    catalog = PlotCatalog(active_id="bob2xpos")
    with pytest.raises(InvalidConfiguration):
        catalog.activate("bob3xpos")
    assert catalog.active_id == "bob2xpos"


def test_catalog_needs_a_plot():
    with pytest.raises(InvalidConfiguration):
        PlotCatalog({})


def test_phase_preset_samples_wrapped_theta1(pendulum):
    catalog = PlotCatalog(active_id="theta1theta1prime")
    pendulum.theta1 = 2 * math.pi + 1.0
    catalog.sample("pendulum1", pendulum, 0.0)
    xs, ys, _ = catalog.window.slice("pendulum1")
    assert xs[0] == pytest.approx(60.0)
    assert ys[0] == pytest.approx(0.5 * 15.0)


def test_custom_spec(pendulum):
    spec = PlotSpec(
        "Energy",
        PlotConfig.time_series(stride=1, scale=DataScale(1.0, 1.0)),
        lambda p, t: (t, p.energy()),
        ("t", "E"),
    )
    catalog = PlotCatalog({"energy": spec})
    catalog.sample("pendulum1", pendulum, 2.0)
    xs, ys, _ = catalog.window.slice("pendulum1")
    assert xs[0] == 2.0
    assert ys[0] == pytest.approx(pendulum.energy())
