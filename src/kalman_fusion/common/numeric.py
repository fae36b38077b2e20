from __future__ import annotations

import numbers
from typing import TypeVar

import numpy as np

from .fixed import Fixed

Num = TypeVar("Num", float, np.floating, Fixed)


def is_fixed(value: object) -> bool:
    return isinstance(value, Fixed)


def is_float_like(value: object) -> bool:
    """True for Python/numpy reals (ints included); False for bool and Fixed."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def require_float(*values: object) -> None:
    for v in values:
        if not is_float_like(v):
            raise TypeError(f"floating-point update got {type(v).__name__}")


def require_fixed(*values: object) -> None:
    for v in values:
        if not is_fixed(v):
            raise TypeError(f"fixed-point update got {type(v).__name__}")
