"""Scalar Kalman filter over floating-point and fixed-point numbers."""

from .common import *  # noqa: F401,F403
from .common import __all__

__version__ = "0.1.0"
