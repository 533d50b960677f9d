"""
problems.py

A catalogue of small ODE problems for exercising the Integrator, from the
trivially exact to the chaotic.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .configs import PlotMode
from .dynamical_system import DynamicalSystem, FunctionSystem
from .errors import InvalidConfiguration
from .pendulum.double.physics import DoublePendulumSystem
from .pendulum.single import physics as single


@dataclass
class Problem:
    """
    Attributes:
        name: Catalogue key.
        y0: Initial state (a fresh copy on every lookup).
        derivatives: The DynamicalSystem to integrate.
        plot_mode: How the solution is best looked at.
        description: One line summary.
    """

    name: str
    y0: List[float]
    derivatives: DynamicalSystem
    plot_mode: PlotMode
    description: str = ""


V0 = 10.0
G = 9.8


def _constant_velocity(t, y, dydt):
    dydt[0] = V0


def _ballistic(t, y, dydt):
    # Thrown up with V0; y(t) = y0 + V0 t - g t^2 / 2
    dydt[0] = -G * t + V0


def _ode1(t, y, dydt):
    # Has no closed form solution
    dydt[0] = 0.1 * y[0] * math.cos(t + y[0])


def _van_der_pol(t, y, dydt, mu=2.0):
    dydt[0] = y[1]
    dydt[1] = mu * (1 - y[0] * y[0]) * y[1] - y[0]


def _single_pendulum(t, y, dydt):
    single.eom_damped(t, y, dydt, single.SinglePendulumParams())


def _lorenz(t, y, dydt, sigma=10.0, rho=28.0, beta=8 / 3):
    dydt[0] = sigma * (y[1] - y[0])
    dydt[1] = y[0] * (rho - y[2]) - y[1]
    dydt[2] = y[0] * y[1] - beta * y[2]


def _rossler(t, y, dydt, a=0.1, b=0.1, c=14.0):
    dydt[0] = -y[1] - y[2]
    dydt[1] = y[0] + a * y[1]
    dydt[2] = b + y[2] * (y[0] - c)


_PROBLEMS: Dict[str, Tuple] = {
    # name: (y0, factory, plot mode, description)
    "constant_velocity": (
        [0.0],
        lambda: FunctionSystem(_constant_velocity, 1, autonomous=True),
        PlotMode.TIME_SERIES,
        "1D motion at a constant velocity",
    ),
    "ballistic": (
        [10.0],
        lambda: FunctionSystem(_ballistic, 1),
        PlotMode.TIME_SERIES,
        "Object thrown off an initial height with initial velocity",
    ),
    "ode1": (
        [10.0],
        lambda: FunctionSystem(_ode1, 1),
        PlotMode.TIME_SERIES,
        "y' = y cos(t + y) / 10, no analytic solution",
    ),
    "van_der_pol": (
        [1.0, 0.0],
        lambda: FunctionSystem(_van_der_pol, 2, autonomous=True),
        PlotMode.PHASE,
        "Van der Pol oscillator",
    ),
    "single_pendulum": (
        [-3 * math.pi / 4, 0.0],
        lambda: FunctionSystem(_single_pendulum, 2, autonomous=True),
        PlotMode.TIME_SERIES,
        "Non-linear damped single pendulum",
    ),
    "lorenz": (
        [-1.0, 3.0, 4.0],
        lambda: FunctionSystem(_lorenz, 3, autonomous=True),
        PlotMode.PHASE,
        "Lorenz attractor",
    ),
    "rossler": (
        [1.0, 1.0, -1.0],
        lambda: FunctionSystem(_rossler, 3, autonomous=True),
        PlotMode.PHASE,
        "Rossler attractor",
    ),
    "double_pendulum": (
        [3 * math.pi / 4, math.pi, 0.0, 0.0],
        DoublePendulumSystem,
        PlotMode.PHASE,
        "Chaotic double pendulum",
    ),
}


def available_problems() -> List[str]:
    return list(_PROBLEMS)


def get_problem(name: str) -> Problem:
    """
    Looks up a problem by name.

    Raises:
        InvalidConfiguration: Unknown problem name.
    """
    try:
        y0, factory, plot_mode, description = _PROBLEMS[name]
    except KeyError:
        raise InvalidConfiguration(f"Invalid problem name {name!r}") from None
    return Problem(name, list(y0), factory(), plot_mode, description)
