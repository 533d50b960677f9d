"""
core.py

Dimension-agnostic helpers around the fixed-step Integrator: whole
trajectories, a high-accuracy scipy reference solution, frame pacing and
trajectory separation.
"""

import logging

import numpy as np
from scipy.integrate import solve_ivp

from .configs import IntegratorConfig
from .integrator import Integrator

logger = logging.getLogger(__name__)


# --- Math Utilities ---


def wrap_angle(theta):
    """Wraps an angle or array of angles to the interval [-pi, pi)."""
    return (theta + np.pi) % (2 * np.pi) - np.pi


def steps_per_frame(step_size: float, fps: float, time_scale: float = 1.0) -> int:
    """
    How many integration steps to take in one frame.

    The solver uses a fixed step size, so the speed of the simulation is
    tied to it; this factor makes one second of frames cover time_scale
    simulated seconds. Always at least one step.
    """
    return max(1, int(round((1 / step_size) / fps * time_scale)))


# --- Numerical Solvers ---


def integrate_fixed(y0, derivatives, t_end, config=None, t_start=0.0):
    """
    Integrates one trajectory with the fixed-step Integrator.

    Args:
        y0: Initial state (not modified).
        derivatives: In-place derivative function f(t, y, dydt).
        t_end: Final time.
        config: IntegratorConfig; defaults to RK4 with h = 1/1000.
        t_start: Initial time.

    Returns:
        t_points: Array of n_steps + 1 times.
        trajectory: Array of shape (dim, n_steps + 1).

    Raises:
        NumericalInstability: The integration blew up.
    """
    config = config if config is not None else IntegratorConfig()
    h = config.step_size
    n_steps = int(round((t_end - t_start) / h))

    solver = Integrator(np.array(y0, dtype=float), derivatives, config)
    t_points = t_start + h * np.arange(n_steps + 1)
    trajectory = np.empty((solver.dimension, n_steps + 1))
    trajectory[:, 0] = solver.state

    for i in range(n_steps):
        trajectory[:, i + 1] = solver.step(t_points[i])

    return t_points, trajectory


def solve_trajectory(derivatives, y0, t_points, rtol=1e-10, atol=1e-12, method="DOP853"):
    """
    High-accuracy adaptive reference solution with scipy.

    Wraps the in-place derivative function for solve_ivp; used to check the
    fixed-step integrator, never by the real time pipeline.

    Returns:
        Array of shape (dim, len(t_points)).
    """
    y0 = np.asarray(y0, dtype=float)

    def rhs(t, y):
        dydt = np.empty_like(y)
        derivatives(t, y, dydt)
        return dydt

    t_points = np.asarray(t_points, dtype=float)
    sol = solve_ivp(
        rhs,
        (t_points[0], t_points[-1]),
        y0,
        t_eval=t_points,
        method=method,
        rtol=rtol,
        atol=atol,
    )
    if not sol.success:
        logger.warning("Reference solve failed: %s", sol.message)
    return sol.y


# --- Separation ---


def state_separation(a, b) -> float:
    """Euclidean distance between two state vectors."""
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))


def divergence(traj_ref, traj_pert) -> np.ndarray:
    """Euclidean distance between two (dim, N_time) trajectories at every time."""
    return np.linalg.norm(np.asarray(traj_ref) - np.asarray(traj_pert), axis=0)


def sensitivity_pair(y0, derivatives, t_end, epsilon=1e-4, config=None, component=0):
    """
    Integrates a reference trajectory and one started epsilon away in a
    single state component (theta1 by default), the chaos experiment run
    offline.

    Returns:
        t_points: Array of n_steps + 1 times.
        traj_ref, traj_pert: Arrays of shape (dim, n_steps + 1).
    """
    y0 = np.array(y0, dtype=float)
    perturbed = y0.copy()
    perturbed[component] += epsilon

    t_points, traj_ref = integrate_fixed(y0, derivatives, t_end, config)
    _, traj_pert = integrate_fixed(perturbed, derivatives, t_end, config)
    logger.debug("Sensitivity pair integrated to t = %g (epsilon = %g)", t_end, epsilon)
    return t_points, traj_ref, traj_pert
