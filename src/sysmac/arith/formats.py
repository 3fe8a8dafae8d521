"""Toy floating-point format definitions and field helpers."""

import math
from dataclasses import dataclass


def to_signed(value: int, bits: int) -> int:
    """Interpret the low `bits` of value as a two's-complement integer."""
    value &= (1 << bits) - 1
    if value >> (bits - 1):
        value -= 1 << bits
    return value


@dataclass(frozen=True)
class FloatFormat:
    """Sign / exponent / mantissa layout with an implicit leading 1.

    The formats have no zero, subnormal, infinity or NaN encodings: every
    bit pattern is a normal number as far as the arithmetic is concerned.

    Attributes:
        exponent_bits: Number of bits in the exponent field.
        mantissa_bits: Number of bits in the mantissa field (excluding hidden bit).
        guard_bits: Trailing zero bits appended to the mantissa for addition.

    """

    exponent_bits: int
    mantissa_bits: int
    guard_bits: int

    @property
    def total_bits(self) -> int:
        return 1 + self.exponent_bits + self.mantissa_bits

    @property
    def mask(self) -> int:
        return (1 << self.total_bits) - 1

    @property
    def sign_shift(self) -> int:
        # |s|eeee|mmm|
        return self.exponent_bits + self.mantissa_bits

    @property
    def exponent_mask(self) -> int:
        """Exponent field mask (unshifted)."""
        return (1 << self.exponent_bits) - 1

    @property
    def mantissa_mask(self) -> int:
        return (1 << self.mantissa_bits) - 1

    @property
    def hidden_bit(self) -> int:
        # |_|____|1mmm|
        return 1 << self.mantissa_bits

    @property
    def bias(self) -> int:
        return (1 << (self.exponent_bits - 1)) - 1

    @property
    def product_bits(self) -> int:
        """Width of the extended-mantissa product (8 for 1-4-3, 22 for 1-5-10)."""
        return 2 * (self.mantissa_bits + 1)

    @property
    def aligned_bits(self) -> int:
        """Width of the guard-extended mantissa used by add (7 / 15)."""
        return self.mantissa_bits + 1 + self.guard_bits

    def unpack(self, bits: int) -> tuple[int, int, int]:
        """Split a bit pattern into (sign, exponent, mantissa) fields."""
        return (
            (bits >> self.sign_shift) & 1,
            (bits >> self.mantissa_bits) & self.exponent_mask,
            bits & self.mantissa_mask,
        )

    def pack(self, sign: int, exponent: int, mantissa: int) -> int:
        """Assemble fields; each one wraps to its own width."""
        return (
            ((sign & 1) << self.sign_shift)
            | ((exponent & self.exponent_mask) << self.mantissa_bits)
            | (mantissa & self.mantissa_mask)
        )

    def to_float(self, bits: int) -> float:
        """Numeric value of a pattern; the all-zero pattern reads as 0.0."""
        bits &= self.mask
        if bits == 0:
            return 0.0
        sign, exponent, mantissa = self.unpack(bits)
        magnitude = (1 + mantissa / self.hidden_bit) * 2.0 ** (exponent - self.bias)
        return -magnitude if sign else magnitude

    def from_float(self, value: float) -> int:
        """Encode a Python float by truncation; out-of-range exponents wrap."""
        if value == 0:
            return 0
        sign = 1 if value < 0 else 0
        fraction, exponent = math.frexp(abs(value))
        # frexp gives 0.5 <= fraction < 1, i.e. 1.m * 2**(exponent - 1)
        mantissa = int((fraction * 2 - 1) * self.hidden_bit)
        return self.pack(sign, exponent - 1 + self.bias, mantissa)


# 1 sign, 4 exponent (bias 7), 3 mantissa
FLOAT8 = FloatFormat(exponent_bits=4, mantissa_bits=3, guard_bits=3)
# 1 sign, 5 exponent (bias 15), 10 mantissa
FLOAT16 = FloatFormat(exponent_bits=5, mantissa_bits=10, guard_bits=4)
