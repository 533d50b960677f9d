"""
Pendulum Package.

Modules:
    single - The 2D single pendulum (linear, non-linear, damped, forced).
    double - The 4D double pendulum (chaotic dynamics).
"""

from . import single
from . import double
