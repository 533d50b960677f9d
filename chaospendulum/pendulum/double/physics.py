"""
physics.py

Equations of motion, coordinate transformations and energy for the Double
Pendulum (4D state space).

State vector: y = [theta1, theta2, omega1, omega2]
Convention: 0 is vertically DOWN, angles in radians, velocities in rad/s.
"""

import math
from dataclasses import dataclass, fields
from typing import Tuple, Union

import numpy as np

from ...dynamical_system import DynamicalSystem
from ...errors import InvalidConfiguration

# Named constants for easier array access
THETA_1 = 0
THETA_2 = 1
OMEGA_1 = 2
OMEGA_2 = 3


@dataclass
class PendulumParams:
    """
    Physical parameters of a double pendulum.

    Every field may be changed at any time; the equations of motion read
    them on each evaluation. Rod lengths and masses must be > 0, gravity
    only has to be finite (the UI lets it go negative).

    Attributes:
        g: Gravitational acceleration.
        l1, m1: Length of rod 1 (top) and mass of bob 1.
        l2, m2: Length of rod 2 (bottom) and mass of bob 2.
    """

    g: float = 9.81
    l1: float = 1.0
    m1: float = 1.0
    l2: float = 1.0
    m2: float = 1.0

    def __setattr__(self, name, value):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise InvalidConfiguration(f"{name} must be a number, got {value!r}") from None
        if not math.isfinite(value):
            raise InvalidConfiguration(f"{name} must be finite, got {value}")
        if name != "g" and value <= 0:
            raise InvalidConfiguration(f"{name} must be > 0, got {value}")
        super().__setattr__(name, value)

    def copy(self, **overrides) -> "PendulumParams":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key in overrides:
            if key not in values:
                raise InvalidConfiguration(f"Unknown parameter: {key}")
        values.update(overrides)
        return PendulumParams(**values)


# --- 1. Equations of Motion (Non-linear) ---


def eom(t: float, y, dydt, params: PendulumParams):
    """
    The differential equations of motion for a double pendulum system.

    Writes [omega1, omega2, alpha1, alpha2] into dydt and returns it. The
    system is time-invariant; t is accepted for the generic signature.

    See http://scienceworld.wolfram.com/physics/DoublePendulum.html
    """
    m1, m2 = params.m1, params.m2
    l1, l2 = params.l1, params.l2
    g = params.g

    th1, th2 = y[THETA_1], y[THETA_2]
    w1, w2 = y[OMEGA_1], y[OMEGA_2]

    d_th = th2 - th1
    sin_th1, sin_th2 = np.sin(th1), np.sin(th2)
    s, c = np.sin(d_th), np.cos(d_th)

    M = m1 + m2  # Total mass of the system

    # dTheta/dt = omega by definition
    dydt[THETA_1] = w1
    dydt[THETA_2] = w2

    den = l1 * (M - m2 * c * c)
    dydt[OMEGA_1] = (
        l1 * m2 * w1 * w1 * s * c
        + l2 * m2 * w2 * w2 * s
        - g * M * sin_th1
        + g * m2 * sin_th2 * c
    ) / den

    # Scale by the ratio of the rod lengths
    den *= l2 / l1
    dydt[OMEGA_2] = -(
        l1 * M * w1 * w1 * s
        + l2 * m2 * w2 * w2 * s * c
        - g * M * sin_th1 * c
        + g * M * sin_th2
    ) / den

    return dydt


class DoublePendulumSystem(DynamicalSystem):
    """
    The double pendulum as a DynamicalSystem.

    Holds a reference to its PendulumParams, so parameter changes take
    effect on the next evaluation.
    """

    def __init__(self, params: PendulumParams = None):
        self.params = params if params is not None else PendulumParams()

    @property
    def dimension(self) -> int:
        return 4

    @property
    def is_autonomous(self) -> bool:
        return True

    def derivatives(self, t, y, dydt):
        return eom(t, y, dydt, self.params)


# --- 2. Coordinates & Energy ---


def get_coords(
    th1: Union[float, np.ndarray],
    th2: Union[float, np.ndarray],
    l1: float = 1.0,
    l2: float = 1.0,
) -> Tuple[Union[float, np.ndarray], ...]:
    """
    Converts angles to Cartesian coordinates for both bobs.
    Convention: (0,0) is the pivot, +y is Up, +x is Right.
    """
    x1 = l1 * np.sin(th1)
    y1 = -l1 * np.cos(th1)
    x2 = x1 + l2 * np.sin(th2)
    y2 = y1 - l2 * np.cos(th2)
    return x1, y1, x2, y2


def total_energy(y, params: PendulumParams) -> float:
    """
    Total mechanical energy T + V of the state y (zero potential at the pivot).

    Conserved by the exact dynamics, so its drift measures integration error.
    """
    th1, th2, w1, w2 = y[THETA_1], y[THETA_2], y[OMEGA_1], y[OMEGA_2]
    m1, m2, l1, l2, g = params.m1, params.m2, params.l1, params.l2, params.g

    T = (
        0.5 * (m1 + m2) * (l1 * w1) ** 2
        + 0.5 * m2 * (l2 * w2) ** 2
        + m2 * l1 * l2 * w1 * w2 * np.cos(th1 - th2)
    )
    V = -(m1 + m2) * g * l1 * np.cos(th1) - m2 * g * l2 * np.cos(th2)
    return float(T + V)
