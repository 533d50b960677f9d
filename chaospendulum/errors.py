"""
errors.py

Exceptions raised by the simulation pipeline. All of them are raised
synchronously by the call that triggered them and none is retried.
"""

from typing import Hashable, Optional


class SimulationError(Exception):
    """Base class for every error raised by chaospendulum."""


class NumericalInstability(SimulationError, ArithmeticError):
    """
    An integration step produced a non-finite state or slope.

    Attributes:
        component: Index of the first offending state component, or None
            when the derivative function raised before producing a value.
        t: Simulated time at the start of the failing step.
        value: The offending value (nan or +/-inf), if known.
    """

    def __init__(
        self,
        component: Optional[int],
        t: float,
        value: Optional[float] = None,
        stage: str = "state",
    ):
        self.component = component
        self.t = t
        self.value = value
        self.stage = stage
        where = "?" if component is None else str(component)
        super().__init__(
            f"Integration blew up at t = {t:g}: {stage} component {where} "
            f"is {value}; use a smaller step size."
        )


class UnknownChannel(SimulationError, LookupError):
    """A read was attempted on a channel that was never pushed to."""

    def __init__(self, channel: Hashable):
        self.channel = channel
        super().__init__(
            f"No channel {channel!r}; push() must be called before reading it."
        )


class InvalidConfiguration(SimulationError, ValueError):
    """A configuration value violates its constraints."""


class ArrayLengthMismatch(SimulationError, ValueError):
    """Parallel x/y sequences have different lengths."""

    def __init__(self, x_length: int, y_length: int):
        self.x_length = x_length
        self.y_length = y_length
        super().__init__(
            f"Number of x values ({x_length}) has to match "
            f"number of y values ({y_length})."
        )
