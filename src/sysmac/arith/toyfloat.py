"""
Toy floating-point multiply and add.

These are bit-exact models of the array's float datapath, which is
deliberately not IEEE 754:
- no rounding: discarded low bits are truncated
- no special values: exponent fields of all-zeros or all-ones are ordinary
- exponents wrap on overflow and underflow
- normalization selects result bits one position above the leading 1, so
  the hidden bit lands in the mantissa MSB
- add ignores operand signs: magnitudes are always summed, and the sign of
  the operand with the larger exponent (b on a tie) is kept
"""

from ..config import Precision
from .formats import FLOAT8, FLOAT16, FloatFormat
from .unit import ArithmeticUnit


class ToyFloatUnit(ArithmeticUnit):
    """Multiply/add for one FloatFormat; sums are sign-extended into acc_bits."""

    def __init__(self, precision: Precision, acc_bits: int):
        super().__init__(acc_bits)
        self.precision = precision
        self.fmt: FloatFormat = FLOAT16 if precision is Precision.FLOAT16 else FLOAT8

    @property
    def product_bits(self) -> int:
        return self.fmt.total_bits

    def multiply(self, a: int, b: int) -> int:
        fmt = self.fmt
        m = fmt.mantissa_bits
        sign_a, exp_a, man_a = fmt.unpack(a)
        sign_b, exp_b, man_b = fmt.unpack(b)

        exponent = exp_a + exp_b - fmt.bias
        product = (man_a | fmt.hidden_bit) * (man_b | fmt.hidden_bit)

        # Carry out of the extended-mantissa product: bit 2M+1
        if (product >> (2 * m + 1)) & 1:
            exponent += 1
            mantissa = product >> (m + 2)
        else:
            mantissa = product >> (m + 1)

        return fmt.pack(sign_a ^ sign_b, exponent, mantissa)

    def add(self, a: int, b: int) -> int:
        fmt = self.fmt
        m = fmt.mantissa_bits
        top = fmt.aligned_bits
        sign_a, exp_a, man_a = fmt.unpack(a)
        sign_b, exp_b, man_b = fmt.unpack(b)

        aligned_a = (man_a | fmt.hidden_bit) << fmt.guard_bits
        aligned_b = (man_b | fmt.hidden_bit) << fmt.guard_bits

        if exp_a > exp_b:
            sign, exponent = sign_a, exp_a
            aligned_b >>= exp_a - exp_b
        else:
            sign, exponent = sign_b, exp_b
            aligned_a >>= exp_b - exp_a

        total = aligned_a + aligned_b

        if (total >> top) & 1:
            exponent += 1
            mantissa = total >> (top - m + 1)
        else:
            mantissa = total >> (top - m)

        return fmt.pack(sign, exponent, mantissa)

    def accumulate(self, acc: int, product: int) -> int:
        total = self.add(acc & self.mask, product)
        return self.sign_extend_into_accumulator(total, self.width)

    def encode(self, value) -> int:
        return self.fmt.from_float(float(value))

    def decode(self, bits: int) -> float:
        return self.fmt.to_float(bits)

    def decode_accumulator(self, bits: int) -> float:
        return self.fmt.to_float(bits & self.mask)
