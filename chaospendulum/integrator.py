"""
integrator.py

A simple fixed-step numerical differential equations solver.

Supports the classical Runge-Kutta method (RK4) and Euler's forward method.
The state vector is advanced in place: the array returned by step() is the
same array the Integrator was constructed with (or converted from).
"""

import logging
from typing import Optional

import numpy as np

from .configs import IntegrationMethod, IntegratorConfig
from .dynamical_system import DerivativeFunction
from .errors import InvalidConfiguration, NumericalInstability

logger = logging.getLogger(__name__)


class Integrator:
    """
    Fixed-step time advance of a state vector y' = f(t, y).

    The derivative function has the in-place signature f(t, y, dydt). If it
    exposes a ``dimension`` attribute (every DynamicalSystem does), it is
    checked against the state length when the Integrator is built.

    Example:
        >>> def f(t, y, dydt):
        ...     dydt[0] = 10.0
        >>> solver = Integrator([0.0], f, IntegratorConfig(step_size=0.1))
        >>> solver.step(0.0)
        array([1.])
    """

    def __init__(
        self,
        y0,
        derivatives: DerivativeFunction,
        config: Optional[IntegratorConfig] = None,
    ):
        if not callable(derivatives):
            raise InvalidConfiguration("The derivative function must be callable.")

        if isinstance(y0, np.ndarray) and y0.dtype == np.float64:
            state = y0
        else:
            state = np.array(y0, dtype=float)
        if state.ndim != 1 or state.size == 0:
            raise InvalidConfiguration(
                f"The state vector must be one-dimensional and non-empty, got shape {state.shape}"
            )

        expected = getattr(derivatives, "dimension", None)
        if expected is not None and expected != state.size:
            raise InvalidConfiguration(
                f"The derivative function expects a state of dimension {expected}, "
                f"but the state vector has {state.size} components."
            )

        self._y = state
        self._f = derivatives
        self.config = config if config is not None else IntegratorConfig()
        self.evaluations = 0

        # Temp storage
        n = state.size
        self._dydt = np.zeros(n)
        self._k2 = np.zeros(n)
        self._k3 = np.zeros(n)
        self._k4 = np.zeros(n)
        self._yt = np.zeros(n)

        logger.debug(
            "Integrator created: dimension=%d, h=%g, method=%s",
            n,
            self.config.step_size,
            self.config.method.value,
        )

    # --- Properties ---

    @property
    def state(self) -> np.ndarray:
        """The state vector (live storage, not a copy)."""
        return self._y

    @property
    def dimension(self) -> int:
        return self._y.size

    @property
    def step_size(self) -> float:
        return self.config.step_size

    @step_size.setter
    def step_size(self, value: float):
        self.config.step_size = value

    @property
    def method(self) -> IntegrationMethod:
        return self.config.method

    @method.setter
    def method(self, value):
        self.config.method = value
        logger.info("Integration method set to %s", self.config.method.value)

    # --- Stepping ---

    def step(self, t: float) -> np.ndarray:
        """
        Advances the state by one step of size h from time t.

        Args:
            t: Simulated time at the start of the step.

        Returns:
            The updated state vector (same storage).

        Raises:
            NumericalInstability: A slope or the resulting state contains
                nan or infinity. The state is left untouched if the failure
                happened while evaluating a slope.
        """
        h = self.config.step_size
        method = self.config.method

        with np.errstate(all="ignore"):
            if method is IntegrationMethod.RK4:
                self._rk4_step(t, h)
            elif method is IntegrationMethod.EULER_FORWARD:
                self._euler_step(t, h)
            else:
                raise InvalidConfiguration(f"Unsupported integration method {method!r}")

        self._check_finite(self._y, t, "state")
        return self._y

    def _rk4_step(self, t: float, h: float) -> None:
        half_step = h / 2
        sixth_step = h / 6
        t_half = t + half_step
        y, yt = self._y, self._yt
        k1, k2, k3, k4 = self._dydt, self._k2, self._k3, self._k4

        self._evaluate(t, y, k1)
        np.multiply(k1, half_step, out=yt)
        yt += y

        self._evaluate(t_half, yt, k2)
        np.multiply(k2, half_step, out=yt)
        yt += y

        self._evaluate(t_half, yt, k3)
        np.multiply(k3, h, out=yt)
        yt += y

        self._evaluate(t + h, yt, k4)

        # k1 + 2 k2 + 2 k3 + k4, accumulated in the k2 buffer
        k2 += k3
        k2 *= 2
        k2 += k1
        k2 += k4
        k2 *= sixth_step
        y += k2

    def _euler_step(self, t: float, h: float) -> None:
        dydt = self._dydt
        self._evaluate(t, self._y, dydt)
        dydt *= h
        self._y += dydt

    def _evaluate(self, t: float, y: np.ndarray, out: np.ndarray) -> None:
        try:
            self._f(t, y, out)
        except (ZeroDivisionError, FloatingPointError) as exc:
            logger.warning("Derivative evaluation failed at t = %g: %s", t, exc)
            raise NumericalInstability(None, t, stage="derivative") from exc
        self.evaluations += 1
        self._check_finite(out, t, "derivative")

    @staticmethod
    def _check_finite(values: np.ndarray, t: float, stage: str) -> None:
        finite = np.isfinite(values)
        if not finite.all():
            component = int(np.flatnonzero(~finite)[0])
            value = float(values[component])
            logger.warning(
                "Non-finite %s component %d (%s) at t = %g", stage, component, value, t
            )
            raise NumericalInstability(component, t, value, stage=stage)
