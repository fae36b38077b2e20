from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass, replace

OVERFLOW_POLICIES = ("wrap", "saturate", "raise")

_NAME_RE = re.compile(r"^([IU])(\d+)F(\d+)$", re.IGNORECASE)


class FixedFormatError(ValueError):
    """Invalid fixed-point layout, or a constant the layout cannot hold."""


class FixedOverflowError(OverflowError):
    """Result does not fit a fixed-point format whose policy is ``raise``."""


@dataclass(frozen=True)
class FixedFormat:
    """Binary-point layout of a fixed-point number.

    ``int_bits`` counts the sign bit for signed formats, so ``I16F16`` spans
    [-32768, 32768) and ``U16F16`` spans [0, 65536). ``overflow`` decides what
    happens when a result leaves that range:

      - wrap: two's complement modulo 2**total_bits
      - saturate: clamp to min/max
      - raise: FixedOverflowError
    """

    int_bits: int
    frac_bits: int
    signed: bool = True
    overflow: str = "raise"

    def __post_init__(self) -> None:
        if self.int_bits < 0 or self.frac_bits < 0 or self.total_bits == 0:
            raise FixedFormatError(f"Bad bit split: {self.int_bits}.{self.frac_bits}")
        if self.overflow not in OVERFLOW_POLICIES:
            raise FixedFormatError(f"Unknown overflow policy: {self.overflow}")

    @classmethod
    def parse(cls, name: str, overflow: str = "raise") -> FixedFormat:
        """Build a format from a name such as ``U32F32`` or ``i8f24``."""
        m = _NAME_RE.match(name.strip())
        if m is None:
            raise FixedFormatError(f"Unknown fixed-point format: {name}")
        kind, ib, fb = m.groups()
        return cls(int(ib), int(fb), signed=kind.upper() == "I", overflow=overflow)

    def with_overflow(self, overflow: str) -> FixedFormat:
        return replace(self, overflow=overflow)

    @property
    def name(self) -> str:
        return f"{'I' if self.signed else 'U'}{self.int_bits}F{self.frac_bits}"

    @property
    def total_bits(self) -> int:
        return self.int_bits + self.frac_bits

    @property
    def min_bits(self) -> int:
        return -(1 << (self.total_bits - 1)) if self.signed else 0

    @property
    def max_bits(self) -> int:
        if self.signed:
            return (1 << (self.total_bits - 1)) - 1
        return (1 << self.total_bits) - 1

    @property
    def min(self) -> Fixed:
        return Fixed(self, self.min_bits)

    @property
    def max(self) -> Fixed:
        return Fixed(self, self.max_bits)

    @property
    def zero(self) -> Fixed:
        return Fixed(self, 0)

    @property
    def epsilon(self) -> Fixed:
        return Fixed(self, 1)

    @property
    def one(self) -> Fixed:
        bits = 1 << self.frac_bits
        if bits > self.max_bits:
            raise FixedFormatError(f"{self.name} cannot represent one")
        return Fixed(self, bits)

    def fit(self, bits: int) -> int:
        """Bring a raw result back into range according to ``overflow``."""
        lo, hi = self.min_bits, self.max_bits
        if lo <= bits <= hi:
            return bits
        if self.overflow == "saturate":
            return hi if bits > hi else lo
        if self.overflow == "wrap":
            bits &= (1 << self.total_bits) - 1
            if self.signed and bits > hi:
                bits -= 1 << self.total_bits
            return bits
        raise FixedOverflowError(
            f"{self.name} overflow: {math.ldexp(bits, -self.frac_bits)!r} "
            f"outside [{float(self.min)!r}, {float(self.max)!r}]"
        )

    def from_bits(self, bits: int) -> Fixed:
        return Fixed(self, self.fit(int(bits)))

    def from_num(self, value) -> Fixed:
        """Convert an int, float or Fixed, rounding to the nearest step."""
        if isinstance(value, Fixed):
            if value.fmt == self:
                return value
            shift = self.frac_bits - value.fmt.frac_bits
            bits = value.bits << shift if shift >= 0 else value.bits >> -shift
            return self.from_bits(bits)
        if isinstance(value, numbers.Integral) and not isinstance(value, bool):
            return self.from_bits(int(value) << self.frac_bits)
        v = float(value)
        if not math.isfinite(v):
            raise FixedOverflowError(f"{self.name} cannot hold {v!r}")
        return self.from_bits(round(math.ldexp(v, self.frac_bits)))

    __call__ = from_num


@dataclass(frozen=True, eq=False)
class Fixed:
    """Immutable fixed-point value: ``bits / 2**fmt.frac_bits``.

    Products and quotients truncate toward negative infinity; every result is
    passed through ``fmt.fit`` so the format's overflow policy applies.
    """

    fmt: FixedFormat
    bits: int

    def _same(self, other: object) -> Fixed:
        if not isinstance(other, Fixed):
            raise TypeError(f"cannot combine {self.fmt.name} with {type(other).__name__}")
        if other.fmt != self.fmt:
            raise TypeError(f"cannot combine {self.fmt.name} with {other.fmt.name}")
        return other

    def _new(self, bits: int) -> Fixed:
        return Fixed(self.fmt, self.fmt.fit(bits))

    def __add__(self, other: Fixed) -> Fixed:
        return self._new(self.bits + self._same(other).bits)

    def __sub__(self, other: Fixed) -> Fixed:
        return self._new(self.bits - self._same(other).bits)

    def __mul__(self, other: Fixed) -> Fixed:
        return self._new((self.bits * self._same(other).bits) >> self.fmt.frac_bits)

    def __truediv__(self, other: Fixed) -> Fixed:
        d = self._same(other).bits
        if d == 0:
            raise ZeroDivisionError(f"{self.fmt.name} division by zero")
        return self._new((self.bits << self.fmt.frac_bits) // d)

    def __neg__(self) -> Fixed:
        return self._new(-self.bits)

    def __abs__(self) -> Fixed:
        if not self.fmt.signed or self.bits >= 0:
            return self
        return self._new(-self.bits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fixed):
            return NotImplemented
        return self.fmt == other.fmt and self.bits == other.bits

    def __hash__(self) -> int:
        return hash((self.fmt, self.bits))

    def __lt__(self, other: Fixed) -> bool:
        return self.bits < self._same(other).bits

    def __le__(self, other: Fixed) -> bool:
        return self.bits <= self._same(other).bits

    def __gt__(self, other: Fixed) -> bool:
        return self.bits > self._same(other).bits

    def __ge__(self, other: Fixed) -> bool:
        return self.bits >= self._same(other).bits

    def __bool__(self) -> bool:
        return self.bits != 0

    def __float__(self) -> float:
        return math.ldexp(self.bits, -self.fmt.frac_bits)

    def __int__(self) -> int:
        q = abs(self.bits) >> self.fmt.frac_bits
        return q if self.bits >= 0 else -q

    def __round__(self, ndigits: int | None = None):
        return round(float(self), ndigits)

    def __repr__(self) -> str:
        return f"{self.fmt.name}({float(self)!r})"

    def __str__(self) -> str:
        return str(float(self))


I8F24 = FixedFormat(8, 24, signed=True)
I16F16 = FixedFormat(16, 16, signed=True)
I32F32 = FixedFormat(32, 32, signed=True)
U8F24 = FixedFormat(8, 24, signed=False)
U16F16 = FixedFormat(16, 16, signed=False)
U32F32 = FixedFormat(32, 32, signed=False)
