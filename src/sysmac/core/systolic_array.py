"""
SystolicArray - An N x N grid of PEs advanced in lock-step.

Data flows through the array in a systolic pattern for C = A × B:
- A (left operand): enters at column 0, row i takes lane i, flows right
- B (right operand): enters at row 0, column j takes lane j, flows down
- C (accumulator): per Dataflow, either stays in its PE or hops to the
  PE down-right, with the zero encoding entering on row 0 / column 0

Example 2x2 array:

              b[0]        b[1]
               |           |
    a[0] --> [PE(0,0)] -> [PE(0,1)]
               |     \\     |
    a[1] --> [PE(1,0)] -> [PE(1,1)]

Every tick computes all next states from the complete set of current
states, then replaces the grid at once, so no PE observes a half-updated
neighbour.
"""

import logging
from collections.abc import Sequence

import numpy as np

from ..arith import ArithmeticUnit, get_unit
from ..config import ArrayConfig, Dataflow, Precision
from ..errors import LayoutError, integral
from .pe import PEPhase, PEState, ProcessingElement

logger = logging.getLogger(__name__)

Lane = int | None
"""One operand lane: an encoded pattern, or None for a bubble."""


class SystolicArray:
    """
    Cycle-accurate functional model of the systolic MAC array.

    Example:
        >>> array = SystolicArray.new(2, "int8")
        >>> array.advance(True, [0, 0], [0, 0])
        >>> array.advance(False, [1, None], [5, None])
        >>> array.read_results()[0, 0]  # 5

    Parameters:
        config: ArrayConfig with dimension, precision and accumulator width
    """

    def __init__(self, config: ArrayConfig):
        self.config = config
        self.unit: ArithmeticUnit = get_unit(config.precision, config.acc_bits)
        self.pe = ProcessingElement(self.unit)
        self.cycle = 0
        self.phase = PEPhase.RESET
        self._states = self._reset_grid()
        logger.debug(
            "built %dx%d %s array, acc_bits=%d, dataflow=%s",
            config.dim,
            config.dim,
            config.precision.value,
            config.acc_bits,
            config.dataflow.value,
        )

    @classmethod
    def new(
        cls,
        dim: int,
        precision: Precision | str,
        acc_bits: int | None = None,
        dataflow: Dataflow | str = Dataflow.OUTPUT_STATIONARY,
    ) -> "SystolicArray":
        """Construct from raw parameters; raises ConfigError when invalid."""
        return cls(ArrayConfig(dim=dim, precision=precision, acc_bits=acc_bits, dataflow=dataflow))

    @property
    def dim(self) -> int:
        return self.config.dim

    def _reset_grid(self) -> list[list[PEState]]:
        state = self.pe.reset_state()
        return [[state] * self.dim for _ in range(self.dim)]

    def _lanes(self, vector: Sequence[Lane], name: str) -> list[tuple[int, bool]]:
        """Validate an injected vector into (pattern, valid) pairs."""
        if len(vector) != self.dim:
            raise LayoutError(f"{name} vector has {len(vector)} lanes, expected {self.dim}")

        width = self.unit.width
        lanes = []
        for index, value in enumerate(vector):
            if value is None:
                lanes.append((self.unit.zero_value(), False))
                continue
            value = integral(value, f"{name}[{index}]")
            if not -(1 << (width - 1)) <= value < (1 << width):
                raise LayoutError(f"{name}[{index}] = {value} does not fit a {width}-bit lane")
            lanes.append((value & self.unit.mask, True))
        return lanes

    # =================================================================
    # Tick
    # =================================================================

    def advance(
        self,
        initialize: bool,
        a_vector: Sequence[Lane],
        b_vector: Sequence[Lane],
    ) -> None:
        """
        Advance every PE by one tick.

        Args:
            initialize: Reset all PEs; this tick's operands are discarded
            a_vector: N lanes injected at column 0 (lane i feeds row i)
            b_vector: N lanes injected at row 0 (lane j feeds column j)
        """
        a_lanes = self._lanes(a_vector, "a")
        b_lanes = self._lanes(b_vector, "b")
        self.cycle += 1

        if initialize:
            self._states = self._reset_grid()
            self.phase = PEPhase.RESET
            logger.debug("reset at cycle %d", self.cycle)
            return

        prev = self._states
        diagonal = self.config.dataflow is Dataflow.DIAGONAL
        zero = self.unit.zero_value()
        step = self.pe.step
        n = self.dim

        nxt = []
        for i in range(n):
            row = []
            for j in range(n):
                if j == 0:
                    a_in, a_valid = a_lanes[i]
                else:
                    left = prev[i][j - 1]
                    a_in, a_valid = left.a, left.a_valid

                if i == 0:
                    b_in, b_valid = b_lanes[j]
                else:
                    above = prev[i - 1][j]
                    b_in, b_valid = above.b, above.b_valid

                if not diagonal:
                    c_in = prev[i][j].acc
                elif i == 0 or j == 0:
                    c_in = zero
                else:
                    c_in = prev[i - 1][j - 1].acc

                row.append(step(a_in, b_in, c_in, a_valid, b_valid))
            nxt.append(row)

        self._states = nxt
        self.phase = PEPhase.ACTIVE

    def reset(self) -> None:
        """Assert initialization for one tick with all lanes idle."""
        idle = [None] * self.dim
        self.advance(True, idle, idle)

    # =================================================================
    # Observation
    # =================================================================

    def state(self, row: int, col: int) -> PEState:
        """Registers of one PE (immutable snapshot)."""
        return self._states[row][col]

    def read_results(self) -> np.ndarray:
        """
        Accumulator patterns of every PE, shape (N, N), dtype uint64.

        Valid at any tick; before settle_ticks() after a reset the values are
        partial sums.
        """
        return np.array(
            [[state.acc for state in row] for row in self._states],
            dtype=np.uint64,
        )

    def read_values(self) -> np.ndarray:
        """Decoded accumulators: int64 for INT8, float64 for the float formats."""
        dtype = np.float64 if self.config.precision.is_float else np.int64
        return np.array(
            [[self.unit.decode_accumulator(state.acc) for state in row] for row in self._states],
            dtype=dtype,
        )
