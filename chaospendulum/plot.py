"""
plot.py

Real time plot windows on top of SampleBuffer.

A PlotWindow records scaled samples for one or more channels and tells the
renderer where to put them: a scrolling time series (x is elapsed time) or a
stationary phase portrait (both coordinates are state variables). Samples
are scaled when they are recorded, so changing the mode or the scale only
affects samples recorded afterwards; stored samples are never rescaled.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Tuple

import numpy as np

from .buffer import SampleBuffer, Slice
from .configs import DataScale, PlotConfig, PlotMode
from .core import wrap_angle
from .errors import ArrayLengthMismatch, InvalidConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlotTransform:
    """
    Translation from recorded sample coordinates to view coordinates.

    Attributes:
        mode: Plot mode the transform was computed for.
        offset_x, offset_y: Translation applied to recorded samples.
        axis_x_max, axis_y_max: Half extents of the axes to draw.
    """

    mode: PlotMode
    offset_x: float
    offset_y: float
    axis_x_max: float
    axis_y_max: float

    def to_screen(self, xs, ys) -> Tuple[np.ndarray, np.ndarray]:
        """
        Maps recorded samples to view coordinates. The y values are flipped
        so that positive is up on a y-down canvas.
        """
        xs = np.asarray(xs, dtype=float)
        ys = np.asarray(ys, dtype=float)
        if xs.shape != ys.shape:
            raise ArrayLengthMismatch(xs.size, ys.size)
        return xs + self.offset_x, self.offset_y - ys


class PlotWindow:
    """
    Records (x, y) samples per channel for a real time plot.

    In TIME_SERIES mode x is the simulated time and is multiplied by
    scale.time; in PHASE mode x is a state variable multiplied by scale.x.
    y is always multiplied by scale.y. With a decimation stride k, only the
    1st, (k+1)-th, (2k+1)-th... step() call of each channel is recorded.

    Example:
        >>> window = PlotWindow(PlotConfig(stride=1, scale=DataScale(1, 1)))
        >>> window.step("bob1", 0.5, 2.0)
        True
        >>> window.slice("bob1")[2]
        1
    """

    def __init__(self, config: Optional[PlotConfig] = None, buffer: Optional[SampleBuffer] = None):
        config = config if config is not None else PlotConfig()
        self._width = config.width
        self._height = config.height
        self._mode = config.mode
        self._scale = config.scale
        self._buffer = buffer if buffer is not None else SampleBuffer(config.capacity)
        self._buffer.decimate(config.stride)
        self._calls: Dict[Hashable, int] = {}

        logger.debug(
            "PlotWindow created: mode=%s, capacity=%d, stride=%d",
            self._mode.value,
            self._buffer.capacity,
            self._buffer.stride,
        )

    # --- Configuration ---

    @property
    def mode(self) -> PlotMode:
        return self._mode

    @property
    def scale(self) -> DataScale:
        return self._scale

    @property
    def stride(self) -> int:
        return self._buffer.stride

    @property
    def buffer(self) -> SampleBuffer:
        return self._buffer

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    def set_mode(self, mode) -> "PlotWindow":
        """Only samples recorded after the change use the new mode."""
        self._mode = PlotMode.parse(mode)
        return self

    def set_scale(self, scale: DataScale) -> "PlotWindow":
        """Only samples recorded after the change use the new scale."""
        if not isinstance(scale, DataScale):
            raise InvalidConfiguration(f"Expected a DataScale, got {scale!r}")
        self._scale = scale
        return self

    def set_decimation(self, stride: int) -> "PlotWindow":
        self._buffer.decimate(stride)
        return self

    # --- Data ---

    def step(self, channel: Hashable, x: float, y: float) -> bool:
        """
        Offers one sample; returns True if it was recorded.

        Args:
            channel: Series id.
            x: Elapsed time (TIME_SERIES) or a state variable (PHASE).
            y: Plotted value.
        """
        calls = self._calls.get(channel, 0)
        self._calls[channel] = calls + 1
        if calls % self._buffer.stride != 0:
            return False

        if self._mode is PlotMode.TIME_SERIES:
            x_scaled = x * self._scale.time
        else:
            x_scaled = x * self._scale.x
        self._buffer.push(channel, x_scaled, y * self._scale.y)
        return True

    def slice(self, channel: Hashable, copy: bool = False) -> Slice:
        return self._buffer.slice(channel, copy=copy)

    def channels(self) -> List[Hashable]:
        return sorted(self._buffer.channels(), key=str)

    def transform(self, time: float = 0.0) -> PlotTransform:
        """
        Current translation for the renderer.

        In TIME_SERIES mode the view scrolls so that a sample recorded at
        `time` sits at the horizontal centre; in PHASE mode the origin stays
        at the centre.
        """
        scroll = time * self._scale.time
        if self._mode is PlotMode.TIME_SERIES:
            offset_x = self._width / 2 - scroll
        else:
            offset_x = self._width / 2
        return PlotTransform(
            mode=self._mode,
            offset_x=offset_x,
            offset_y=self._height / 2,
            axis_x_max=self._width + scroll,
            axis_y_max=300.0,
        )

    def reset(self) -> None:
        """Deletes all recorded samples and restarts decimation counting."""
        self._buffer.reset()
        self._calls.clear()


# --- Plot presets ---


Sampler = Callable[[object, float], Tuple[float, float]]


@dataclass
class PlotSpec:
    """
    A named plot: how to configure its window and what to sample.

    Attributes:
        title: Human readable name.
        config: PlotConfig used to build the window.
        sampler: Callable (pendulum, time) -> (x, y).
        labels: Axis labels (x, y) for the renderer.
    """

    title: str
    config: PlotConfig
    sampler: Sampler
    labels: Tuple[str, str] = ("", "")


def _bob1_x(pendulum, time):
    return time, pendulum.positions()[0]


def _bob2_x(pendulum, time):
    return time, pendulum.positions()[2]


def _theta1_omega1(pendulum, time):
    return float(wrap_angle(pendulum.theta1)), pendulum.omega1


DEFAULT_PLOTS: Dict[str, PlotSpec] = {
    "bob1xpos": PlotSpec(
        "Bob 1 X Positions",
        PlotConfig.time_series(capacity=500, stride=2, scale=DataScale(x=100.0, y=100.0)),
        _bob1_x,
        ("t", "x1"),
    ),
    "bob2xpos": PlotSpec(
        "Bob 2 X Positions",
        PlotConfig.time_series(capacity=500, stride=2, scale=DataScale(x=100.0, y=75.0)),
        _bob2_x,
        ("t", "x2"),
    ),
    "theta1theta1prime": PlotSpec(
        "theta vs. theta'",
        PlotConfig.phase(capacity=1500, stride=1, scale=DataScale(x=60.0, y=15.0)),
        _theta1_omega1,
        ("theta1", "omega1"),
    ),
}


class PlotCatalog:
    """
    Holds several plot presets and the window of the active one.

    Activating a plot builds a fresh window from its spec, dropping the
    samples of the previously active plot.
    """

    def __init__(self, specs: Optional[Dict[str, PlotSpec]] = None, active_id: Optional[str] = None):
        self._specs = dict(specs if specs is not None else DEFAULT_PLOTS)
        if not self._specs:
            raise InvalidConfiguration("A PlotCatalog needs at least one plot.")
        self._active_id = None
        self._window = None
        self.activate(active_id if active_id is not None else next(iter(self._specs)))

    @property
    def active_id(self) -> str:
        return self._active_id

    @property
    def spec(self) -> PlotSpec:
        return self._specs[self._active_id]

    @property
    def window(self) -> PlotWindow:
        return self._window

    def ids(self) -> List[str]:
        return list(self._specs)

    def activate(self, plot_id: str) -> PlotWindow:
        if plot_id not in self._specs:
            raise InvalidConfiguration(f'No plot with id: "{plot_id}"')
        self._window = PlotWindow(self._specs[plot_id].config.copy())
        self._active_id = plot_id
        logger.info("Active plot set to %s", plot_id)
        return self._window

    def sample(self, channel: Hashable, pendulum, time: float) -> bool:
        """Feeds the active window with the active spec's sample of pendulum."""
        x, y = self.spec.sampler(pendulum, time)
        return self._window.step(channel, x, y)

    def reset(self) -> None:
        self._window.reset()
