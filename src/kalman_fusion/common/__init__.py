from .fixed import (
    I8F24,
    I16F16,
    I32F32,
    U8F24,
    U16F16,
    U32F32,
    Fixed,
    FixedFormat,
    FixedFormatError,
    FixedOverflowError,
)
from .kalman import (
    FilterState,
    construct,
    iter_filter,
    run_filter,
    steady_state_lag,
    steady_state_uncertainty,
    update_fixed,
    update_float,
)

__all__ = [
    "Fixed",
    "FixedFormat",
    "FixedFormatError",
    "FixedOverflowError",
    "I8F24",
    "I16F16",
    "I32F32",
    "U8F24",
    "U16F16",
    "U32F32",
    "FilterState",
    "construct",
    "iter_filter",
    "run_filter",
    "steady_state_lag",
    "steady_state_uncertainty",
    "update_fixed",
    "update_float",
]
