"""
simulation.py

The real time driver layer: pendulum instances, the per-frame tick and the
two-pendulum chaos experiment.

Time and the pause flag live in a SimulationContext passed to tick(), so the
package holds no global state. The external tick source (an animation
callback) calls tick() once per frame.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from .configs import DataScale, IntegratorConfig, PlotConfig, SimulationConfig
from .core import state_separation, steps_per_frame
from .integrator import Integrator
from .pendulum.double.physics import (
    OMEGA_1,
    OMEGA_2,
    THETA_1,
    THETA_2,
    DoublePendulumSystem,
    PendulumParams,
    get_coords,
    total_energy,
)
from .plot import PlotCatalog, PlotSpec, PlotWindow
from .errors import InvalidConfiguration, NumericalInstability

logger = logging.getLogger(__name__)


@dataclass
class SimulationContext:
    """
    Mutable run state of the driver: created at app start, reset on an
    explicit reset action.
    """

    time: float = 0.0
    paused: bool = False
    frames: int = 0

    def reset(self) -> None:
        self.time = 0.0
        self.frames = 0

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        return self.paused


class DoublePendulum:
    """
    One simulated double pendulum.

    Owns its state vector and Integrator, and a trace path of bob 2
    positions kept in a phase-mode PlotWindow with unit scale.

    Args:
        y0: Initial conditions [theta1, theta2, omega1, omega2].
        params: PendulumParams (may be shared with other pendulums).
        config: IntegratorConfig (may be shared with other pendulums).
        trail_length: Trace points kept.
        trail_stride: Record every trail_stride-th trace point.
    """

    def __init__(
        self,
        y0,
        params: Optional[PendulumParams] = None,
        config: Optional[IntegratorConfig] = None,
        trail_length: int = 150,
        trail_stride: int = 2,
    ):
        self.initial = np.array(y0, dtype=float)
        self.y = self.initial.copy()
        self.system = DoublePendulumSystem(params)
        self.solver = Integrator(self.y, self.system, config)
        self.trail = PlotWindow(
            PlotConfig.phase(
                capacity=trail_length, stride=trail_stride, scale=DataScale(1.0, 1.0)
            )
        )

    @property
    def params(self) -> PendulumParams:
        return self.system.params

    @property
    def config(self) -> IntegratorConfig:
        return self.solver.config

    # Named views of the state vector
    @property
    def theta1(self) -> float:
        return float(self.y[THETA_1])

    @theta1.setter
    def theta1(self, value: float):
        self.y[THETA_1] = value

    @property
    def theta2(self) -> float:
        return float(self.y[THETA_2])

    @theta2.setter
    def theta2(self, value: float):
        self.y[THETA_2] = value

    @property
    def omega1(self) -> float:
        return float(self.y[OMEGA_1])

    @omega1.setter
    def omega1(self, value: float):
        self.y[OMEGA_1] = value

    @property
    def omega2(self) -> float:
        return float(self.y[OMEGA_2])

    @omega2.setter
    def omega2(self, value: float):
        self.y[OMEGA_2] = value

    def step(self, t: float) -> np.ndarray:
        return self.solver.step(t)

    def positions(self, scale: float = 1.0):
        """Bob positions (x1, y1, x2, y2), pivot at the origin, +y up."""
        p = self.params
        x1, y1, x2, y2 = get_coords(self.y[THETA_1], self.y[THETA_2], p.l1 * scale, p.l2 * scale)
        return float(x1), float(y1), float(x2), float(y2)

    def energy(self) -> float:
        return total_energy(self.y, self.params)

    def record_trail(self) -> bool:
        _, _, x2, y2 = self.positions()
        return self.trail.step("bob2", x2, y2)

    def reset(self, y0=None) -> None:
        """Restores the initial conditions (or new ones) in place and clears the trail."""
        if y0 is not None:
            y0 = np.array(y0, dtype=float)
            if y0.shape != self.initial.shape:
                raise InvalidConfiguration(
                    f"Initial conditions must have shape {self.initial.shape}, got {y0.shape}"
                )
            self.initial = y0
        self.y[:] = self.initial
        self.trail.reset()


class Simulation:
    """
    Two double pendulums started epsilon apart in theta1, stepped in lock
    step, plus the active bottom plot.

    Both pendulums share one IntegratorConfig and one PendulumParams, so
    the step size, method and physical constants always match.

    Example:
        >>> sim = Simulation()
        >>> context = SimulationContext()
        >>> sim.tick(context)
        >>> context.time > 0
        True
    """

    CHANNELS = ("pendulum1", "pendulum2")

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        params: Optional[PendulumParams] = None,
        integrator_config: Optional[IntegratorConfig] = None,
        plots: Optional[Dict[str, PlotSpec]] = None,
    ):
        self.config = config if config is not None else SimulationConfig()
        self.params = params if params is not None else PendulumParams()
        self.integrator_config = (
            integrator_config if integrator_config is not None else IntegratorConfig()
        )
        self.plots = PlotCatalog(plots)

        self.pendulums: List[DoublePendulum] = [
            DoublePendulum(
                y0,
                self.params,
                self.integrator_config,
                self.config.trail_length,
                self.config.trail_stride,
            )
            for y0 in self._initial_pair(self.config.initial_conditions)
        ]
        # Start-of-step states, restored when a step fails
        self._saved = np.empty((len(self.pendulums), 4))

    def _initial_pair(self, initial):
        first = np.array(initial, dtype=float)
        second = first.copy()
        # Only theta1 gets the epsilon offset
        second[THETA_1] += self.config.epsilon
        return first, second

    @property
    def steps_per_frame(self) -> int:
        return steps_per_frame(
            self.integrator_config.step_size, self.config.fps, self.config.time_scale
        )

    def tick(self, context: SimulationContext) -> None:
        """
        Advances one frame: steps_per_frame fixed steps of both pendulums
        (unless paused), then records the trails and the active plot.

        Raises:
            NumericalInstability: Propagated from the integrator. Both
                pendulums are rolled back to the start of the failing step,
                where context.time still points.
        """
        if not context.paused:
            h = self.integrator_config.step_size
            for _ in range(self.steps_per_frame):
                self._step_pair(context.time)
                context.time += h

        for channel, pendulum in zip(self.CHANNELS, self.pendulums):
            pendulum.record_trail()
            self.plots.sample(channel, pendulum, context.time)
        context.frames += 1

    def _step_pair(self, t: float) -> None:
        for pendulum, saved in zip(self.pendulums, self._saved):
            saved[:] = pendulum.y
        try:
            for pendulum in self.pendulums:
                pendulum.step(t)
        except NumericalInstability:
            for pendulum, saved in zip(self.pendulums, self._saved):
                pendulum.y[:] = saved
            raise

    def reset(self, context: Optional[SimulationContext] = None) -> None:
        for pendulum in self.pendulums:
            pendulum.reset()
        self.plots.reset()
        if context is not None:
            context.reset()
        logger.info("Simulation reset")

    def set_initial_conditions(self, initial, context: Optional[SimulationContext] = None) -> None:
        """
        New initial conditions for both pendulums (epsilon only on the
        second pendulum's theta1), followed by a reset.
        """
        self.config.initial_conditions = initial
        first, second = self._initial_pair(self.config.initial_conditions)
        self.pendulums[0].reset(first)
        self.pendulums[1].reset(second)
        self.reset(context)

    def set_active_plot(self, plot_id: str) -> PlotWindow:
        return self.plots.activate(plot_id)

    def separation(self) -> float:
        """Euclidean distance between the two pendulums' state vectors."""
        return state_separation(self.pendulums[0].y, self.pendulums[1].y)
