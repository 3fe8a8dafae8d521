"""
Sysmac - A cycle-accurate simulator of an N x N systolic MAC array.

This package models the array's INT8, FLOAT8 and FLOAT16 datapaths bit for
bit, including the truncating, sign-blind toy-float arithmetic, and provides
an Amaranth RTL twin for cosimulation.
"""

from .arith import ArithmeticUnit, get_unit
from .bus import BusCodec
from .config import ArrayConfig, Dataflow, Precision
from .core import PEPhase, PEState, ProcessingElement, SystolicArray
from .errors import ConfigError, LayoutError, SysmacError
from .gemm import reference_matmul, systolic_matmul

__version__ = "0.1.0"
__all__ = [
    "ArithmeticUnit",
    "ArrayConfig",
    "BusCodec",
    "ConfigError",
    "Dataflow",
    "LayoutError",
    "PEPhase",
    "PEState",
    "Precision",
    "ProcessingElement",
    "SysmacError",
    "SystolicArray",
    "get_unit",
    "reference_matmul",
    "systolic_matmul",
    "__version__",
]
