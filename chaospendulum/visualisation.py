"""
visualisation.py

matplotlib rendering of the simulation: the pendulums with their trace
paths, real time plot windows and the divergence of the two pendulums.
"""

from typing import List, NamedTuple, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation

from . import core
from .configs import PlotMode
from .errors import UnknownChannel
from .pendulum.double.physics import THETA_1, THETA_2, PendulumParams, get_coords
from .plot import PlotWindow
from .simulation import Simulation, SimulationContext

PENDULUM_COLORS = ("firebrick", "royalblue")


# --- 1. Plot Windows ---


def draw_window(
    ax,
    window: PlotWindow,
    time: float = 0.0,
    colors: Sequence[str] = PENDULUM_COLORS,
    channels: Optional[Sequence] = None,
):
    """
    Draws every channel of a PlotWindow in view coordinates (y down, as
    on a canvas), with a marker on the newest sample of each channel.

    Channels that have no samples yet are skipped.

    Returns:
        The list of Line2D artists drawn.
    """
    channels = window.channels() if channels is None else list(channels)
    if len(colors) < len(channels):
        raise ValueError("Not enough colors specified for the channels.")

    transform = window.transform(time)
    ax.set_xlim(0, window.width)
    ax.set_ylim(window.height, 0)

    artists = []
    # Axes through the plot origin
    artists += ax.plot(
        [transform.offset_x - transform.axis_x_max, transform.offset_x + transform.axis_x_max],
        [transform.offset_y, transform.offset_y],
        "-",
        c="0.6",
        lw=1,
    )
    artists += ax.plot(
        [transform.offset_x, transform.offset_x],
        [transform.offset_y - transform.axis_y_max, transform.offset_y + transform.axis_y_max],
        "-",
        c="0.6",
        lw=1,
    )

    for channel, color in zip(channels, colors):
        try:
            xs, ys, count = window.slice(channel)
        except UnknownChannel:
            continue
        if count == 0:
            continue
        sx, sy = transform.to_screen(xs, ys)
        artists += ax.plot(sx, sy, "-", lw=2, c=color)
        artists += ax.plot(sx[-1:], sy[-1:], "o", markersize=4, c="k")

    return artists


# --- 2. Chaos & Sensitivity ---


def plot_sensitivity_divergence(
    t_points: np.ndarray,
    traj_ref: np.ndarray,
    traj_pert: np.ndarray,
    params: Optional[PendulumParams] = None,
    epsilon: Optional[float] = None,
    title: str = "Two Pendulums, Nearly Identical Start",
):
    """
    Figure of the offline chaos experiment, as produced by
    core.sensitivity_pair.

    Top: horizontal position of bob 2 for both runs, which is what the
    live view shows drifting apart. Bottom: state separation on a log
    scale, with the initial offset and the time at which the separation
    first reaches 1 marked.

    Args:
        t_points: Time array.
        traj_ref, traj_pert: Double pendulum trajectories (4, N_time).
        params: PendulumParams giving the rod lengths (defaults to unit rods).
        epsilon: Initial offset to mark, if known.
    """
    params = params if params is not None else PendulumParams()
    dist = core.divergence(traj_ref, traj_pert)

    fig, (ax_x, ax_err) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)

    labels = ("Pendulum 1", "Pendulum 2")
    for traj, color, label in zip((traj_ref, traj_pert), PENDULUM_COLORS, labels):
        _, _, x2, _ = get_coords(traj[THETA_1], traj[THETA_2], params.l1, params.l2)
        ax_x.plot(t_points, x2, "-", c=color, lw=1.2, label=label)
    ax_x.set_ylabel(r"$x_2$ [m]")
    ax_x.set_title(title)
    ax_x.legend(loc="upper right")

    ax_err.semilogy(t_points, dist, "k-", lw=1.2)
    if epsilon is not None:
        ax_err.axhline(epsilon, ls=":", c="0.5", label=rf"$\varepsilon$ = {epsilon:g}")
    diverged = np.flatnonzero(dist >= 1.0)
    if diverged.size:
        ax_err.axvline(t_points[diverged[0]], ls="--", c="firebrick", label="separation = 1")
    if ax_err.get_legend_handles_labels()[0]:
        ax_err.legend(loc="lower right")
    ax_err.set_ylabel("State separation")
    ax_err.set_xlabel("Time [s]")
    ax_err.grid(True, which="both", alpha=0.3)

    plt.tight_layout()
    plt.show()
    return fig


# --- 3. Animation ---


class Scene(NamedTuple):
    """Artists of the live view, updated in place by draw_frame."""

    fig: object
    ax_scene: object
    ax_plot: object
    rods: List
    trails: List
    time_text: object


def build_scene(simulation: Simulation) -> Scene:
    """Pendulum view on top, the active real time plot below."""
    fig, (ax_scene, ax_plot) = plt.subplots(
        2, 1, figsize=(8, 10), gridspec_kw={"height_ratios": [2, 1]}
    )
    lim = (simulation.params.l1 + simulation.params.l2) * 1.1
    ax_scene.set_xlim(-lim, lim)
    ax_scene.set_ylim(-lim, lim)
    ax_scene.set_aspect("equal")
    ax_scene.set_title("Double Pendulum")

    rods, trails = [], []
    for color in PENDULUM_COLORS:
        (trail,) = ax_scene.plot([], [], "-", lw=1, c=color, alpha=0.4)
        (rod,) = ax_scene.plot([], [], "o-", lw=2, c=color, markersize=6)
        trails.append(trail)
        rods.append(rod)
    time_text = ax_scene.text(0.05, 0.92, "", transform=ax_scene.transAxes)
    return Scene(fig, ax_scene, ax_plot, rods, trails, time_text)


def draw_frame(frame, simulation: Simulation, context: SimulationContext, scene: Scene):
    """
    Frame callback: one simulation.tick(context), then redraws both
    pendulums, their bob-2 trails and the active bottom plot.
    """
    simulation.tick(context)

    for pendulum, rod, trail in zip(simulation.pendulums, scene.rods, scene.trails):
        x1, y1, x2, y2 = pendulum.positions()
        rod.set_data([0, x1, x2], [0, y1, y2])
        try:
            xs, ys, _ = pendulum.trail.slice("bob2", copy=True)
        except UnknownChannel:
            continue
        trail.set_data(xs, ys)

    ax_plot = scene.ax_plot
    ax_plot.clear()
    spec = simulation.plots.spec
    draw_window(ax_plot, simulation.plots.window, context.time, channels=simulation.CHANNELS)
    ax_plot.set_title(spec.title)
    if simulation.plots.window.mode is PlotMode.PHASE:
        ax_plot.set_xlabel(spec.labels[0])
    ax_plot.set_ylabel(spec.labels[1])

    scene.time_text.set_text(f"t = {context.time:.2f} s")
    return scene.rods + scene.trails + [scene.time_text]


def animate_simulation(
    simulation: Simulation,
    context: Optional[SimulationContext] = None,
    frames: Optional[int] = None,
) -> FuncAnimation:
    """
    Live animation of the two-pendulum experiment, paced at the
    simulation's fps. Each frame is one draw_frame call.
    """
    context = context if context is not None else SimulationContext()
    scene = build_scene(simulation)
    return FuncAnimation(
        scene.fig,
        draw_frame,
        frames=frames,
        fargs=(simulation, context, scene),
        interval=1000 / simulation.config.fps,
        blit=False,
        cache_frame_data=False,
    )
