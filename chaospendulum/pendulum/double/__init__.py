"""
Double Pendulum Submodule.

Focuses on the chaotic dynamics of the 4D double pendulum.
"""

from .physics import (
    THETA_1,
    THETA_2,
    OMEGA_1,
    OMEGA_2,
    PendulumParams,
    DoublePendulumSystem,
    eom,
    get_coords,
    total_energy,
)

__all__ = [
    "THETA_1",
    "THETA_2",
    "OMEGA_1",
    "OMEGA_2",
    "PendulumParams",
    "DoublePendulumSystem",
    "eom",
    "get_coords",
    "total_energy",
]
