"""
ArithmeticUnit - the capability interface the PE is written against.

Each precision supplies a stateless unit with:
- multiply(a, b): operand patterns -> product pattern
- add(a, b): precision-native addition of two patterns
- accumulate(acc, product): the PE's accumulator update
- zero_value(): reset / additive-identity encoding
- sign_extend_into_accumulator(value, from_bits): widen to acc_bits

All functions are total over their input widths and never raise.
"""

from abc import ABC, abstractmethod

from ..config import Precision
from .formats import to_signed


class ArithmeticUnit(ABC):
    """Base class shared by the integer and toy-float units."""

    precision: Precision

    def __init__(self, acc_bits: int):
        self.acc_bits = acc_bits
        self.acc_mask = (1 << acc_bits) - 1

    @property
    def width(self) -> int:
        """Encoded operand width."""
        return self.precision.bits

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1

    @property
    @abstractmethod
    def product_bits(self) -> int:
        """Width of the pattern returned by multiply()."""

    def zero_value(self) -> int:
        return 0

    def sign_extend_into_accumulator(self, value: int, from_bits: int) -> int:
        """Sign-extend (or wrap) a from_bits-wide pattern to the accumulator width."""
        return to_signed(value, from_bits) & self.acc_mask

    @abstractmethod
    def multiply(self, a: int, b: int) -> int: ...

    @abstractmethod
    def add(self, a: int, b: int) -> int: ...

    @abstractmethod
    def accumulate(self, acc: int, product: int) -> int: ...

    @abstractmethod
    def encode(self, value) -> int:
        """Host-side conversion of a Python number to an operand pattern."""

    @abstractmethod
    def decode(self, bits: int):
        """Host-side value of an operand or product pattern."""

    @abstractmethod
    def decode_accumulator(self, bits: int):
        """Host-side value of an accumulator pattern."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(acc_bits={self.acc_bits})"
