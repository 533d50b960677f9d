"""
chaospendulum

Real time simulation of a chaotic double pendulum: a fixed-step RK4 /
forward-Euler integrator, the double pendulum equations of motion and
fixed-capacity sample buffers feeding scrolling time-series or stationary
phase-portrait plots.

Modules:
    integrator - Fixed-step Integrator and IntegrationMethod.
    pendulum   - Single and double pendulum physics.
    buffer     - Per-channel ring buffers of (x, y) samples.
    plot       - Plot windows, transforms and plot presets.
    simulation - Pendulum instances and the per-frame tick.
    core       - Trajectories, reference solutions and helpers.
    problems   - Catalogue of test ODEs.

The matplotlib renderer lives in chaospendulum.visualisation and is not
imported here.
"""

from .errors import (
    SimulationError,
    NumericalInstability,
    UnknownChannel,
    InvalidConfiguration,
    ArrayLengthMismatch,
)

from .configs import (
    IntegrationMethod,
    IntegratorConfig,
    PlotMode,
    DataScale,
    PlotConfig,
    SimulationConfig,
)

from .dynamical_system import DynamicalSystem, FunctionSystem

from .integrator import Integrator

from .pendulum.double import PendulumParams, DoublePendulumSystem

from .buffer import SampleBuffer

from .plot import PlotTransform, PlotWindow, PlotSpec, PlotCatalog, DEFAULT_PLOTS

from .simulation import SimulationContext, DoublePendulum, Simulation

from .core import (
    wrap_angle,
    steps_per_frame,
    integrate_fixed,
    solve_trajectory,
    state_separation,
    divergence,
)

from .problems import Problem, get_problem, available_problems
