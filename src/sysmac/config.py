"""
Sysmac Configuration Module

This module defines the configuration dataclass for the systolic MAC array
simulator. All parameters are specified here and propagate through the
functional model, the bus codec and the RTL twin.

The array computes C = A × B over one of three numeric precisions:
- INT8: two's-complement 8-bit operands, wide integer accumulator
- FLOAT8: 1-4-3 toy floating point (bias 7)
- FLOAT16: 1-5-10 toy floating point (bias 15)
"""

from dataclasses import dataclass
from enum import Enum
from numbers import Integral

from .errors import ConfigError

MAX_ACC_BITS = 64
"""Widest accumulator that fits the uint64 result matrices."""


class Precision(Enum):
    """
    Operand precision of the array.

    The value is the string tag accepted by ArrayConfig and SystolicArray.new().
    """

    INT8 = "int8"
    FLOAT8 = "float8"
    FLOAT16 = "float16"

    @property
    def bits(self) -> int:
        """Encoded operand width in bits."""
        return 16 if self is Precision.FLOAT16 else 8

    @property
    def is_float(self) -> bool:
        return self is not Precision.INT8


class Dataflow(Enum):
    """
    Accumulator routing between processing elements.

    For both modes A flows left to right and B flows top to bottom, one hop
    per tick:
    - OUTPUT_STATIONARY: each PE feeds its own accumulator back as c_in, so
      PE (i, j) reduces row i of A against column j of B
    - DIAGONAL: c_out of PE (i, j) feeds c_in of PE (i+1, j+1); row 0 and
      column 0 receive the zero encoding
    """

    OUTPUT_STATIONARY = "output_stationary"
    DIAGONAL = "diagonal"


@dataclass
class ArrayConfig:
    """
    Configuration for one systolic array instance.

    Example:
        >>> config = ArrayConfig(dim=4, precision="float8", acc_bits=16)
        >>> config.operand_bus_bits  # 32 (4 * 8 bits)
        >>> config.settle_ticks()  # 10 (3 * 4 - 2)
    """

    dim: int = 4
    """Number of PE rows and columns (N)."""

    precision: Precision = Precision.INT8
    """Operand precision. String tags are converted in __post_init__."""

    acc_bits: int | None = None
    """
    Accumulator register width. Defaults to 32 for INT8 and to the native
    format width for the float formats, whose sums are sign-extended into it.
    """

    dataflow: Dataflow = Dataflow.OUTPUT_STATIONARY
    """Accumulator routing, see Dataflow."""

    # =========================================================================
    # Computed Properties
    # =========================================================================
    @property
    def input_bits(self) -> int:
        """Width of one encoded operand lane."""
        return self.precision.bits

    @property
    def product_bits(self) -> int:
        """Width of a multiplier result (exact 16-bit product for INT8)."""
        return 16 if self.precision is Precision.INT8 else self.input_bits

    @property
    def total_pes(self) -> int:
        return self.dim * self.dim

    @property
    def operand_bus_bits(self) -> int:
        """Width of one packed operand vector."""
        return self.dim * self.input_bits

    @property
    def result_bus_bits(self) -> int:
        """Width of the packed N x N result matrix."""
        return self.total_pes * self.acc_bits

    def feed_ticks(self, k: int | None = None) -> int:
        """Injection ticks for a skewed reduction of length k (default N)."""
        k = self.dim if k is None else k
        return k + self.dim - 1

    def settle_ticks(self, k: int | None = None) -> int:
        """Ticks after reset until every PE holds its full k-term sum."""
        k = self.dim if k is None else k
        return k + 2 * self.dim - 2

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.dim, bool) or not isinstance(self.dim, Integral) or self.dim <= 0:
            raise ConfigError(f"dim must be a positive integer, got {self.dim!r}")
        self.dim = int(self.dim)

        if not isinstance(self.precision, Precision):
            try:
                self.precision = Precision(self.precision)
            except ValueError:
                raise ConfigError(f"unsupported precision {self.precision!r}") from None

        if not isinstance(self.dataflow, Dataflow):
            try:
                self.dataflow = Dataflow(self.dataflow)
            except ValueError:
                raise ConfigError(f"unsupported dataflow {self.dataflow!r}") from None

        if self.acc_bits is None:
            self.acc_bits = 32 if self.precision is Precision.INT8 else self.input_bits
        if isinstance(self.acc_bits, bool) or not isinstance(self.acc_bits, Integral):
            raise ConfigError(f"acc_bits must be an integer, got {self.acc_bits!r}")
        self.acc_bits = int(self.acc_bits)
        if self.acc_bits < self.input_bits:
            raise ConfigError(
                f"acc_bits ({self.acc_bits}) must be >= {self.precision.value} width "
                f"({self.input_bits})"
            )
        if self.acc_bits > MAX_ACC_BITS:
            raise ConfigError(f"acc_bits ({self.acc_bits}) must be <= {MAX_ACC_BITS}")


# Pre-defined configurations
DEFAULT_CONFIG = ArrayConfig()
"""4x4 INT8 array with a 32-bit accumulator."""

FLOAT8_CONFIG = ArrayConfig(precision=Precision.FLOAT8, acc_bits=16)
"""4x4 FLOAT8 array, sums sign-extended into 16 bits."""

FLOAT16_CONFIG = ArrayConfig(precision=Precision.FLOAT16, acc_bits=32)
"""4x4 FLOAT16 array, sums sign-extended into 32 bits."""
