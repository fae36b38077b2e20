import pytest

from kalman_fusion.common.fixed import (
    I8F24,
    I16F16,
    U8F24,
    U16F16,
    FixedFormat,
    FixedFormatError,
    FixedOverflowError,
)
from kalman_fusion.common.kalman import (
    construct,
    iter_filter,
    steady_state_uncertainty,
    update_fixed,
)
from kalman_fusion.common.sim_single import track_ramp


def _state(fmt, estimate, uncertainty, measurement_uncertainty, process_noise):
    return construct(fmt(estimate), fmt(uncertainty), fmt(measurement_uncertainty), fmt(process_noise))


def test_repeated_observation_converges_i8f24():
    state = _state(I8F24, 0.5, 0.1, 1e-4, 1.0)
    for _ in range(10):
        state = update_fixed(state, I8F24(1.0))
    assert abs(float(state.estimate) - 1.0) < 1e-4


def test_unsigned_ramp_to_max_integer():
    state = _state(U8F24, 0, 1, 1e-6, 2)
    n = int(U8F24.max)
    assert n == 255
    state = track_ramp(state, n, update_fixed, U8F24.from_num)
    assert abs(float(state.estimate) - n) < 1e-3
    expected = steady_state_uncertainty(float(U8F24(1e-6)), float(U8F24(2)))
    assert abs(float(state.uncertainty) - expected) < 1e-5


def test_signed_ramp_to_max_integer():
    state = _state(I8F24, 0, 1, 1e-6, 1e-3)
    n = int(I8F24.max)
    state = track_ramp(state, n, update_fixed, I8F24.from_num)
    assert abs(float(state.estimate) - n) < 2e-3
    assert abs(float(state.uncertainty) - 0.001) < 1e-5


@pytest.mark.parametrize(
    "fmt, start, target",
    [
        (U16F16, 0, 3),
        (U16F16, 10, 3),
        (I16F16, 0, -3),
        (I16F16, -7, 2),
    ],
)
def test_constant_observation_error_is_monotone(fmt, start, target):
    s0 = _state(fmt, start, 1, 0.01, 0.001)
    c = fmt(target)
    errors = [abs(float(c) - float(s.estimate)) for s in iter_filter(s0, [c] * 60, update_fixed)]
    assert all(b <= a for a, b in zip(errors, errors[1:]))
    assert errors[-1] < 1e-3


def test_unsigned_estimate_moves_down_without_underflow():
    s = update_fixed(_state(U16F16, 10, 1, 0.01, 0.001), U16F16(0))
    assert U16F16.zero <= s.estimate < U16F16(10)


def test_sign_normalization_signed():
    s = _state(I16F16, -1, -0.5, -0.25, -0.125)
    assert s.estimate == I16F16(-1)
    assert s.uncertainty == I16F16(0.5)
    assert s.measurement_uncertainty == I16F16(0.25)
    assert s.process_noise == I16F16(0.125)


def test_unsigned_fields_untouched():
    s = _state(U16F16, 1, 0.5, 0.25, 0.125)
    assert s.uncertainty == U16F16(0.5)
    assert s.measurement_uncertainty == U16F16(0.25)


def test_update_is_pure():
    s0 = _state(I16F16, 1, 0.2, 0.1, 0.01)
    assert update_fixed(s0, I16F16(2)) == update_fixed(s0, I16F16(2))
    assert s0.estimate == I16F16(1)


def test_tuning_constants_carry_over():
    s0 = _state(U16F16, 0, 1, 0.3, 0.02)
    s = update_fixed(s0, U16F16(1))
    assert s.measurement_uncertainty == s0.measurement_uncertainty
    assert s.process_noise == s0.process_noise


def test_degenerate_gain_is_a_division_fault():
    with pytest.raises(ZeroDivisionError):
        update_fixed(_state(I16F16, 1, 0, 0, 0), I16F16(2))


def test_overflow_surfaces_from_the_format():
    fmt = FixedFormat(8, 8)
    with pytest.raises(FixedOverflowError):
        update_fixed(_state(fmt, -100, 1, 0.01, 0.01), fmt(100))


def test_saturating_format_absorbs_overflow():
    fmt = FixedFormat(8, 8, overflow="saturate")
    s = update_fixed(_state(fmt, -100, 1, 0.01, 0.01), fmt(100))
    assert s.estimate > fmt(-100)
    assert s.estimate <= fmt.max


def test_format_without_one_cannot_update():
    fmt = FixedFormat(0, 16, signed=False)
    s0 = _state(fmt, 0.5, 0.25, 0.25, 0.01)
    with pytest.raises(FixedFormatError, match="cannot represent one"):
        update_fixed(s0, fmt(0.75))
