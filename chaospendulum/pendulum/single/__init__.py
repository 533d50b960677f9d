"""
Single Pendulum Submodule.

The 2D single pendulum family, the non-chaotic control system.
"""

from .physics import (
    SinglePendulumParams,
    eom,
    eom_linear,
    eom_damped,
    eom_forced,
    get_linear_propagator,
)

__all__ = [
    "SinglePendulumParams",
    "eom",
    "eom_linear",
    "eom_damped",
    "eom_forced",
    "get_linear_propagator",
]
