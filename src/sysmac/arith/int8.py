"""Two's-complement INT8 arithmetic with a wrapping wide accumulator."""

from ..config import Precision
from .formats import to_signed
from .unit import ArithmeticUnit


class Int8Unit(ArithmeticUnit):
    """
    INT8 multiply-accumulate.

    multiply() returns the exact 16-bit product; accumulate() adds it,
    sign-extended, into the accumulator with plain wraparound (no saturation).
    """

    precision = Precision.INT8

    @property
    def product_bits(self) -> int:
        return 16

    def multiply(self, a: int, b: int) -> int:
        return (to_signed(a, 8) * to_signed(b, 8)) & 0xFFFF

    def add(self, a: int, b: int) -> int:
        """Accumulator-width two's-complement addition."""
        return (a + b) & self.acc_mask

    def accumulate(self, acc: int, product: int) -> int:
        return self.add(acc, self.sign_extend_into_accumulator(product, self.product_bits))

    def encode(self, value) -> int:
        return int(value) & self.mask

    def decode(self, bits: int) -> int:
        return to_signed(bits, self.width)

    def decode_accumulator(self, bits: int) -> int:
        return to_signed(bits, self.acc_bits)
