"""
A module defining the base architecture for dynamical systems integrated by
the fixed-step Integrator.

A system is a derivative function f(t, y, dydt) that writes the rate of
change of the state y at time t into dydt. It must not keep references to
y or dydt after returning: the Integrator calls it several times per step
with different trial states and reuses the same scratch arrays.
"""

from abc import ABC, abstractmethod
from typing import Callable

import numpy as np

from .errors import InvalidConfiguration


DerivativeFunction = Callable[[float, np.ndarray, np.ndarray], object]


class DynamicalSystem(ABC):
    """
    Base abstract class for a dynamical system dy/dt = F(t, y) of fixed
    dimension.
    """

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of the state vector the system expects."""

    @property
    def is_autonomous(self) -> bool:
        """
        Indicates if the system's governing equations are time-independent.
        Defaults to False for a general dynamical system.
        """
        return False

    @abstractmethod
    def derivatives(self, t: float, y: np.ndarray, dydt: np.ndarray) -> np.ndarray:
        """
        Writes F(t, y) into dydt and returns it.

        Args:
            t: The current time.
            y: The current (or trial) state, length == dimension.
            dydt: Output array, length == dimension.
        """

    def __call__(self, t: float, y: np.ndarray, dydt: np.ndarray) -> np.ndarray:
        return self.derivatives(t, y, dydt)


class FunctionSystem(DynamicalSystem):
    """
    Adapts a plain derivative function so that it declares its dimension.

    Example:
        >>> def decay(t, y, dydt):
        ...     dydt[0] = -y[0]
        >>> system = FunctionSystem(decay, dimension=1, autonomous=True)
    """

    def __init__(self, f: DerivativeFunction, dimension: int, autonomous: bool = False):
        if not callable(f):
            raise InvalidConfiguration("The derivative function must be callable.")
        if int(dimension) != dimension or dimension < 1:
            raise InvalidConfiguration(f"Invalid dimension: {dimension!r}")
        self._f = f
        self._dimension = int(dimension)
        self._autonomous = autonomous

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_autonomous(self) -> bool:
        return self._autonomous

    def derivatives(self, t, y, dydt):
        self._f(t, y, dydt)
        return dydt
