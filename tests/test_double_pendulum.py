import math

import pytest
import numpy as np

import chaospendulum.core as core
import chaospendulum.pendulum.double as double
import chaospendulum.pendulum.single as single
from chaospendulum.configs import IntegratorConfig
from chaospendulum.errors import InvalidConfiguration, NumericalInstability
from chaospendulum.integrator import Integrator

# --- Fixtures ---


@pytest.fixture
def default_params():
    return double.PendulumParams(g=9.81, l1=1.0, l2=1.0, m1=1.0, m2=1.0)


@pytest.fixture
def initial_state():
    """Bob 1 at 135 degrees, bob 2 pointing straight up, at rest."""
    return np.array([3 * math.pi / 4, math.pi, 0.0, 0.0])


@pytest.fixture
def random_state():
    """A generic non-trivial state."""
    return np.array([0.5, -0.5, 0.2, -0.1])


# --- 1. Equations of Motion ---


def test_golden_derivative(default_params, initial_state):
    """
    Delta theta = pi/4, M = 2, D1 = D2 = 1.5:
    alpha1 = -g M sin(3pi/4) / 1.5, alpha2 = g M cos^2(pi/4) / 1.5.
    """
    dydt = np.zeros(4)
    double.eom(0.0, initial_state, dydt, default_params)

    expected = [0.0, 0.0, -9.248956697920043, 6.54]
    np.testing.assert_allclose(dydt, expected, rtol=0, atol=1e-9)


def test_golden_derivative_on_first_integrator_step(default_params, initial_state):
    """The first slope evaluated by an RK4 step is the closed-form value."""
    g, l1, l2, m1, m2 = 9.81, 1.0, 1.0, 1.0, 1.0
    th1, th2, w1, w2 = 3 * math.pi / 4, math.pi, 0.0, 0.0
    d = th2 - th1
    M = m1 + m2
    den1 = l1 * (M - m2 * math.cos(d) ** 2)
    den2 = den1 * l2 / l1
    a1 = (
        l1 * m2 * w1**2 * math.sin(d) * math.cos(d)
        + l2 * m2 * w2**2 * math.sin(d)
        - g * M * math.sin(th1)
        + g * m2 * math.sin(th2) * math.cos(d)
    ) / den1
    a2 = -(
        l1 * M * w1**2 * math.sin(d)
        + l2 * m2 * w2**2 * math.sin(d) * math.cos(d)
        - g * M * math.sin(th1) * math.cos(d)
        + g * M * math.sin(th2)
    ) / den2

    slopes = []
    system = double.DoublePendulumSystem(default_params)

    def recording(t, y, dydt):
        system(t, y, dydt)
        slopes.append(dydt.copy())

    solver = Integrator(initial_state, recording, IntegratorConfig(step_size=0.001))
    solver.step(0.0)

    assert len(slopes) == 4
    np.testing.assert_allclose(slopes[0], [w1, w2, a1, a2], rtol=0, atol=1e-9)


def test_eom_does_not_mutate_input(random_state, default_params):
    y = random_state.copy()
    double.eom(0.0, y, np.zeros(4), default_params)
    np.testing.assert_array_equal(y, random_state)


def test_eom_is_time_invariant(random_state, default_params):
    a = double.eom(0.0, random_state, np.zeros(4), default_params)
    b = double.eom(123.4, random_state, np.zeros(4), default_params)
    np.testing.assert_array_equal(a, b)


def test_parameters_are_read_on_every_evaluation(random_state, default_params):
    system = double.DoublePendulumSystem(default_params)
    before = system(0.0, random_state, np.zeros(4)).copy()
    default_params.g = 1.62
    after = system(0.0, random_state, np.zeros(4))
    assert not np.allclose(before[2:], after[2:])
    np.testing.assert_array_equal(before[:2], after[:2])


def test_system_metadata():
    system = double.DoublePendulumSystem()
    assert system.dimension == 4
    assert system.is_autonomous
    assert system.params == double.PendulumParams()


@pytest.mark.parametrize("name", ["l1", "l2", "m1", "m2"])
@pytest.mark.parametrize("value", [0.0, -1.0, float("nan")])
def test_non_positive_parameters_are_rejected(name, value):
    with pytest.raises(InvalidConfiguration):
        double.PendulumParams(**{name: value})

    params = double.PendulumParams()
    with pytest.raises(InvalidConfiguration):
        setattr(params, name, value)
    assert getattr(params, name) == 1.0


def test_gravity_may_be_negative():
    params = double.PendulumParams(g=-9.81)
    assert params.g == -9.81
    with pytest.raises(InvalidConfiguration):
        params.g = float("inf")


def test_params_copy():
    params = double.PendulumParams()
    heavy = params.copy(m2=2.0)
    assert heavy.m2 == 2.0 and params.m2 == 1.0
    with pytest.raises(InvalidConfiguration):
        params.copy(mass=3.0)


def test_degenerate_denominator_surfaces_as_instability():
    """With m1 -> 0 and aligned rods, D1 = l1 (M - m2 cos^2 0) underflows to 0."""
    params = double.PendulumParams(m1=1e-300)
    solver = Integrator(
        [0.5, 0.5, 1.0, 0.0], double.DoublePendulumSystem(params), IntegratorConfig()
    )
    with pytest.raises(NumericalInstability) as info:
        solver.step(0.0)
    assert info.value.component == double.OMEGA_1


# --- 2. Coordinates & Energy ---


def test_get_coords():
    x1, y1, x2, y2 = double.get_coords(math.pi / 2, 0.0, 1.0, 2.0)
    assert (x1, y1) == pytest.approx((1.0, 0.0))
    assert (x2, y2) == pytest.approx((1.0, -2.0))


def test_total_energy_at_rest(default_params):
    # Hanging straight down: V = -(m1 + m2) g l1 - m2 g l2
    energy = double.total_energy(np.zeros(4), default_params)
    assert energy == pytest.approx(-3 * 9.81)


def test_energy_drift_rk4_vs_euler(default_params, initial_state):
    """RK4 conserves energy to high accuracy, Euler drifts visibly."""
    system = double.DoublePendulumSystem(default_params)
    e0 = double.total_energy(initial_state, default_params)

    drift = {}
    for config in (IntegratorConfig(), IntegratorConfig.euler()):
        _, traj = core.integrate_fixed(initial_state, system, 2.0, config)
        drift[config.method] = abs(double.total_energy(traj[:, -1], default_params) - e0) / abs(e0)

    rk4, euler = drift[IntegratorConfig().method], drift[IntegratorConfig.euler().method]
    assert rk4 < 1e-5
    assert euler > 10 * rk4


def test_rk4_matches_reference_solution(default_params, initial_state):
    system = double.DoublePendulumSystem(default_params)
    t_points, traj = core.integrate_fixed(initial_state, system, 1.0)
    reference = core.solve_trajectory(system, initial_state, t_points)
    np.testing.assert_allclose(traj, reference, rtol=0, atol=1e-6)


# --- 3. Chaos ---


def test_chaotic_sensitivity(default_params, initial_state):
    """
    Two pendulums 1e-4 rad apart separate by far more than 10x within
    10 simulated seconds.
    """
    eps = 1e-4
    system = double.DoublePendulumSystem(default_params)
    t_points, ref, pert = core.sensitivity_pair(initial_state, system, 10.0, epsilon=eps)

    dist = core.divergence(ref, pert)
    assert dist[0] == pytest.approx(eps)
    assert dist.max() > 10 * eps

    # Growth: late separation dominates early separation
    early = dist[t_points <= 1.0].mean()
    late = dist[t_points >= 9.0].mean()
    assert late > 10 * early


def test_sensitivity_pair_offsets_one_component(default_params, initial_state):
    system = double.DoublePendulumSystem(default_params)
    t_points, ref, pert = core.sensitivity_pair(
        initial_state, system, 0.1, epsilon=1e-3, component=double.THETA_2
    )
    assert t_points.shape == (101,)
    assert ref.shape == pert.shape == (4, 101)
    np.testing.assert_allclose(pert[:, 0] - ref[:, 0], [0.0, 1e-3, 0.0, 0.0])
    np.testing.assert_array_equal(ref[:, 0], initial_state)
    # The caller's state is not modified
    np.testing.assert_array_equal(initial_state, [3 * math.pi / 4, math.pi, 0.0, 0.0])


def test_linear_pendulum_is_not_sensitive():
    """The non-chaotic control: the separation stays bounded by ~eps * omega."""
    eps = 1e-4
    params = single.SinglePendulumParams()

    def linear(t, y, dydt):
        single.eom_linear(t, y, dydt, params)

    _, ref = core.integrate_fixed([0.3, 0.0], linear, 10.0)
    _, pert = core.integrate_fixed([0.3 + eps, 0.0], linear, 10.0)

    dist = core.divergence(ref, pert)
    assert dist.max() < 10 * eps
