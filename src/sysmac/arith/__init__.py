"""
Per-precision arithmetic units.

- Int8Unit: exact 16-bit products, wrapping accumulator
- ToyFloatUnit: truncating 1-4-3 and 1-5-10 float multiply/add
"""

from ..config import Precision
from .formats import FLOAT8, FLOAT16, FloatFormat, to_signed
from .int8 import Int8Unit
from .toyfloat import ToyFloatUnit
from .unit import ArithmeticUnit


def get_unit(precision: Precision, acc_bits: int) -> ArithmeticUnit:
    """Select the arithmetic unit for a precision."""
    if precision is Precision.INT8:
        return Int8Unit(acc_bits)
    return ToyFloatUnit(precision, acc_bits)


__all__ = [
    "ArithmeticUnit",
    "Int8Unit",
    "ToyFloatUnit",
    "FloatFormat",
    "FLOAT8",
    "FLOAT16",
    "get_unit",
    "to_signed",
]
