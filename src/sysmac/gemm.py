"""
GEMM driver and golden model.

systolic_matmul() runs one skewed matrix product through a SystolicArray:

    tick 0:                 initialize (all PEs reset)
    ticks 1..K+N-1:         skewed operand injection
    ticks K+N..K+2N-2:      drain (idle lanes)

reference_matmul() computes the same result without the array by folding
the unit's multiply/accumulate over k in increasing order, starting from the
zero encoding, which is the order in which products reach each PE.
"""

import logging
from collections.abc import Sequence

import numpy as np

from .arith import ArithmeticUnit
from .config import Dataflow
from .core import SystolicArray
from .errors import ConfigError, LayoutError, integral
from .memory import OperandSchedule, matmul_shape

logger = logging.getLogger(__name__)


def systolic_matmul(
    array: SystolicArray,
    a: Sequence[Sequence[int]],
    b: Sequence[Sequence[int]],
) -> np.ndarray:
    """
    Multiply encoded matrices on the array.

    Args:
        array: Output-stationary array of dimension N
        a: N x K matrix of operand patterns
        b: K x N matrix of operand patterns

    Returns:
        N x N uint64 accumulator patterns, as read_results()
    """
    if array.config.dataflow is not Dataflow.OUTPUT_STATIONARY:
        raise ConfigError("systolic_matmul requires an output-stationary array")
    if len(a) != array.dim:
        raise LayoutError(f"A has {len(a)} rows, array dimension is {array.dim}")

    schedule = OperandSchedule.for_matmul(a, b)
    logger.debug(
        "matmul %dx%d @ %dx%d: %d feed ticks, settles after %d",
        array.dim,
        schedule.depth,
        schedule.depth,
        array.dim,
        len(schedule),
        array.config.settle_ticks(schedule.depth),
    )

    array.reset()
    for a_vector, b_vector in schedule:
        array.advance(False, a_vector, b_vector)

    idle = [None] * array.dim
    for _ in range(array.config.settle_ticks(schedule.depth) - len(schedule)):
        array.advance(False, idle, idle)

    return array.read_results()


def reference_matmul(
    unit: ArithmeticUnit,
    a: Sequence[Sequence[int]],
    b: Sequence[Sequence[int]],
) -> np.ndarray:
    """
    Left-to-right fold of unit.accumulate over the reduction index.

    Operands follow the lane rules of SystolicArray.advance: integers in
    [-2**(w-1), 2**w), masked to the operand width.

    Raises:
        LayoutError: on mismatched shapes or operands that do not fit a lane
    """
    rows, depth, cols = matmul_shape(a, b)
    a = [[_operand(unit, v, f"a[{i}][{k}]") for k, v in enumerate(row)] for i, row in enumerate(a)]
    b = [[_operand(unit, v, f"b[{k}][{j}]") for j, v in enumerate(row)] for k, row in enumerate(b)]

    result = np.zeros((rows, cols), dtype=np.uint64)
    for i in range(rows):
        for j in range(cols):
            acc = unit.zero_value()
            for k in range(depth):
                acc = unit.accumulate(acc, unit.multiply(a[i][k], b[k][j]))
            result[i, j] = acc
    return result


def _operand(unit: ArithmeticUnit, value, what: str) -> int:
    value = integral(value, what)
    if not -(1 << (unit.width - 1)) <= value < (1 << unit.width):
        raise LayoutError(f"{what} = {value} does not fit a {unit.width}-bit lane")
    return value & unit.mask
