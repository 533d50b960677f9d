"""
physics.py

Equations of motion for the Single Pendulum (2D state space), used as the
non-chaotic control next to the double pendulum and as solver test problems.

State vector y = [theta, omega]

Includes:
1. Linear (small angle) pendulum and its exact propagator
2. Full non-linear pendulum
3. Damped and damped + forced variants
"""

import math
from dataclasses import dataclass

import numpy as np

from ...configs import require_finite, require_positive


@dataclass
class SinglePendulumParams:
    """
    Every field is validated on assignment, like PendulumParams.

    Attributes:
        g: Gravitational acceleration.
        l: Rod length (> 0).
        damping: Linear damping coefficient on omega.
        drive_amplitude, drive_frequency: Periodic forcing A cos(Omega t).
    """

    g: float = 9.8
    l: float = 1.2
    damping: float = 0.05
    drive_amplitude: float = 1.58
    drive_frequency: float = 1.23

    def __setattr__(self, name, value):
        if name == "l":
            value = require_positive(name, value)
        else:
            value = require_finite(name, value)
        super().__setattr__(name, value)

    @property
    def natural_frequency(self) -> float:
        return math.sqrt(abs(self.g) / self.l)


# --- 1. Linear Pendulum ---


def eom_linear(t, y, dydt, params: SinglePendulumParams):
    """Small angle approximation: theta'' = -(g/l) theta."""
    dydt[0] = y[1]
    dydt[1] = -(params.g / params.l) * y[0]
    return dydt


def get_linear_propagator(t: float, params: SinglePendulumParams) -> np.ndarray:
    """
    Returns the analytical propagator matrix P(t) for the linear system.
    y(t) = P(t) @ y(0)

    Useful for validating numerical solvers.
    """
    omega = params.natural_frequency
    cos_t = np.cos(omega * t)
    sin_t = np.sin(omega * t)
    return np.array([[cos_t, sin_t / omega], [-omega * sin_t, cos_t]])


# --- 2. Non-linear Pendulum ---


def eom(t, y, dydt, params: SinglePendulumParams):
    dydt[0] = y[1]
    dydt[1] = -(params.g / params.l) * np.sin(y[0])
    return dydt


# --- 3. Damped & Forced ---


def eom_damped(t, y, dydt, params: SinglePendulumParams):
    dydt[0] = y[1]
    dydt[1] = -params.damping * y[1] - (params.g / params.l) * np.sin(y[0])
    return dydt


def eom_forced(t, y, dydt, params: SinglePendulumParams):
    """Damped pendulum driven by A cos(Omega t); the only time-dependent variant."""
    dydt[0] = y[1]
    dydt[1] = (
        -params.damping * y[1]
        - (params.g / params.l) * np.sin(y[0])
        + params.drive_amplitude * np.cos(params.drive_frequency * t)
    )
    return dydt
