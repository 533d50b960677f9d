"""
Configuration objects for integration, plotting and the simulation driver.

This module provides a clean way to manage the mutable run-time settings of
the simulation (step size, integration method, plot mode, decimation...)
without polluting __init__ signatures. Every field is validated on
assignment, so an invalid value is rejected where it is set and not at the
next integration step.
"""

import copy
import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional, Tuple, Union

from .errors import InvalidConfiguration


class IntegrationMethod(Enum):
    """Fixed-step integration schemes supported by the Integrator."""

    EULER_FORWARD = "euler"
    RK4 = "rk4"

    @classmethod
    def parse(cls, value: Union["IntegrationMethod", str]) -> "IntegrationMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            names = ", ".join(m.value for m in cls)
            raise InvalidConfiguration(
                f"Unknown integration method {value!r}; expected one of: {names}"
            ) from None


class PlotMode(Enum):
    """How a PlotWindow interprets the x coordinate of a sample."""

    TIME_SERIES = "time_series"
    PHASE = "phase"

    @classmethod
    def parse(cls, value: Union["PlotMode", str]) -> "PlotMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidConfiguration(f"Unknown plot mode {value!r}") from None


def require_finite(name: str, value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be finite, got {value}")
    return value


def require_positive(name: str, value) -> float:
    value = require_finite(name, value)
    if value <= 0:
        raise InvalidConfiguration(f"{name} must be finite and > 0, got {value}")
    return value


def require_count(name: str, value) -> int:
    try:
        valid = not isinstance(value, bool) and int(value) == value and value >= 1
    except (TypeError, ValueError, OverflowError):
        valid = False
    if not valid:
        raise InvalidConfiguration(f"{name} must be an integer >= 1, got {value!r}")
    return int(value)


class _Config:
    """Shared copy() behaviour for the configuration dataclasses."""

    def copy(self, **overrides):
        """
        Create a copy with optional parameter overrides.

        Example:
            >>> base = IntegratorConfig(step_size=1e-3)
            >>> coarse = base.copy(step_size=1e-2)
        """
        new_config = copy.copy(self)
        names = {f.name for f in fields(self)}
        for key, value in overrides.items():
            if key not in names:
                raise InvalidConfiguration(f"Unknown parameter: {key}")
            setattr(new_config, key, value)
        return new_config


@dataclass
class IntegratorConfig(_Config):
    """
    Configuration of a fixed-step Integrator.

    Both fields may be changed between steps; a change only affects the
    steps taken after it. A single config may be shared by several
    integrators, which then all follow the same settings.

    Attributes:
        step_size: Fixed step h (> 0), in simulated seconds.
        method: IntegrationMethod or its string value ('rk4', 'euler').

    Example:
        >>> config = IntegratorConfig()
        >>> config.method = "euler"
        >>> config.step_size = 1 / 500
    """

    step_size: float = 1 / 1000
    method: IntegrationMethod = IntegrationMethod.RK4

    def __setattr__(self, name, value):
        if name == "step_size":
            value = require_positive("step_size", value)
        elif name == "method":
            value = IntegrationMethod.parse(value)
        super().__setattr__(name, value)

    @classmethod
    def high_accuracy(cls) -> "IntegratorConfig":
        """Preset for reference-quality runs."""
        return cls(step_size=1 / 10000, method=IntegrationMethod.RK4)

    @classmethod
    def fast(cls) -> "IntegratorConfig":
        """Preset for cheap, lower-accuracy runs."""
        return cls(step_size=1 / 100, method=IntegrationMethod.RK4)

    @classmethod
    def euler(cls, step_size: float = 1 / 1000) -> "IntegratorConfig":
        """Forward Euler; only practical for very small step sizes."""
        return cls(step_size=step_size, method=IntegrationMethod.EULER_FORWARD)

    @classmethod
    def from_inverse(
        cls, steps_per_second: float, method=IntegrationMethod.RK4
    ) -> "IntegratorConfig":
        """
        Build a config from an inverse step size (steps per simulated second),
        the unit the step-size control of the UI works in.
        """
        steps_per_second = require_positive("steps_per_second", steps_per_second)
        return cls(step_size=1 / steps_per_second, method=method)


@dataclass
class DataScale:
    """
    Scale factors applied to samples when they are recorded.

    Attributes:
        x: Scale of the x value in phase mode.
        y: Scale of the y value.
        time: Scale of the x value (elapsed time) in time-series mode.
              Defaults to x when not given.
    """

    x: float = 2000.0
    y: float = 100.0
    time: Optional[float] = None

    def __post_init__(self):
        if self.time is None:
            self.time = self.x
        for name in ("x", "y", "time"):
            setattr(self, name, require_finite(f"scale {name}", getattr(self, name)))


@dataclass
class PlotConfig(_Config):
    """
    Configuration of a PlotWindow and its SampleBuffer.

    Attributes:
        mode: PlotMode.TIME_SERIES or PlotMode.PHASE.
        capacity: Sample points kept per channel. Once reached, the
            oldest point is recycled. Phase plots need more points than
            time series to keep a long enough path, since nothing scrolls
            out of the viewport.
        stride: Record only every stride-th step() call ("path simplify").
        scale: DataScale applied at recording time.
        width, height: Size of the view the renderer draws into.
    """

    mode: PlotMode = PlotMode.TIME_SERIES
    capacity: int = 500
    stride: int = 2
    scale: DataScale = field(default_factory=DataScale)
    width: float = 1024.0
    height: float = 384.0

    def __setattr__(self, name, value):
        if name == "mode":
            value = PlotMode.parse(value)
        elif name in ("capacity", "stride"):
            value = require_count(name, value)
        elif name in ("width", "height"):
            value = require_positive(name, value)
        super().__setattr__(name, value)

    def copy(self, **overrides):
        new_config = super().copy(**overrides)
        if "scale" not in overrides:
            new_config.scale = copy.copy(self.scale)
        return new_config

    @classmethod
    def time_series(cls, **kwargs) -> "PlotConfig":
        """Preset for a scrolling time-series plot."""
        return cls(mode=PlotMode.TIME_SERIES, **kwargs)

    @classmethod
    def phase(cls, **kwargs) -> "PlotConfig":
        """Preset for a stationary phase portrait."""
        kwargs.setdefault("capacity", 1500)
        kwargs.setdefault("scale", DataScale(x=60.0, y=15.0))
        return cls(mode=PlotMode.PHASE, **kwargs)


@dataclass
class SimulationConfig(_Config):
    """
    Settings of the two-pendulum chaos experiment.

    Attributes:
        fps: Frames per second of the external tick source.
        time_scale: Simulated seconds per wall-clock second.
        epsilon: Offset (rad) added to theta1 of the second pendulum.
        initial_conditions: [theta1, theta2, omega1, omega2] of pendulum 1.
        trail_length: Points kept in each bob-2 trace path.
        trail_stride: Record every trail_stride-th trace point.
    """

    fps: float = 60.0
    time_scale: float = 1 / 1.15
    epsilon: float = 1e-4
    initial_conditions: Tuple[float, float, float, float] = (
        3 * math.pi / 4,
        math.pi,
        0.0,
        0.0,
    )
    trail_length: int = 150
    trail_stride: int = 2

    def __setattr__(self, name, value):
        if name in ("fps", "time_scale"):
            value = require_positive(name, value)
        elif name in ("trail_length", "trail_stride"):
            value = require_count(name, value)
        elif name == "initial_conditions":
            try:
                value = tuple(require_finite(name, v) for v in value)
            except TypeError:
                raise InvalidConfiguration(
                    f"{name} must be a sequence, got {value!r}"
                ) from None
            if len(value) != 4:
                raise InvalidConfiguration(
                    "initial_conditions must be 4 finite values "
                    "[theta1, theta2, omega1, omega2]"
                )
        elif name == "epsilon":
            value = require_finite(name, value)
        super().__setattr__(name, value)
