"""
Skew buffer - staggered operand streams for wavefront injection.

For matrix multiply C = A @ B the array consumes one reduction step per
wave: column k of A on the row lanes and row k of B on the column lanes.
Lane i of every wave is delayed by i ticks:

    tick:      0       1       2       3
    lane 0:  w0[0]   w1[0]   w2[0]    -
    lane 1:    -     w0[1]   w1[1]   w2[1]
    ...

so PE (i, j) meets A[i][k] and B[k][j] together on tick k + i + j, and
successive waves reach every PE one tick apart. Idle slots are bubbles
(None).
"""

from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import LayoutError


def skew_waves(waves: Sequence[Sequence[int]], lanes: int) -> list[list[int | None]]:
    """
    Stagger waves across lanes.

    Args:
        waves: K waves, each with `lanes` operand patterns
        lanes: Number of lanes (array dimension)

    Returns:
        K + lanes - 1 per-tick vectors; lane i at tick t carries waves[t - i][i]
    """
    for k, wave in enumerate(waves):
        if len(wave) != lanes:
            raise LayoutError(f"wave {k} has {len(wave)} lanes, expected {lanes}")

    if not waves:
        return []

    ticks = []
    for t in range(len(waves) + lanes - 1):
        vector = []
        for i in range(lanes):
            k = t - i
            vector.append(waves[k][i] if 0 <= k < len(waves) else None)
        ticks.append(vector)
    return ticks


def matmul_shape(a: Sequence[Sequence[int]], b: Sequence[Sequence[int]]) -> tuple[int, int, int]:
    """
    Validate an M x K by K x P product and return (M, K, P).

    Raises:
        LayoutError: on empty or ragged matrices, or when the inner dimensions differ
    """
    rows = len(a)
    depth = len(a[0]) if rows else 0
    if rows == 0 or depth == 0:
        raise LayoutError("empty operand matrix")
    if any(len(row) != depth for row in a):
        raise LayoutError("A rows have unequal lengths")
    if len(b) != depth:
        raise LayoutError(f"A is {rows}x{depth} but B has {len(b)} rows")
    cols = len(b[0])
    if cols == 0 or any(len(row) != cols for row in b):
        raise LayoutError("B rows are empty or have unequal lengths")
    return rows, depth, cols


@dataclass
class OperandSchedule:
    """
    Per-tick A and B vectors for one skewed matrix product.

    Attributes:
        a_ticks: Row-lane vectors, one per tick
        b_ticks: Column-lane vectors, one per tick
        depth: Reduction length K
    """

    a_ticks: list[list[int | None]]
    b_ticks: list[list[int | None]]
    depth: int

    def __len__(self) -> int:
        return len(self.a_ticks)

    def __iter__(self):
        return iter(zip(self.a_ticks, self.b_ticks, strict=True))

    @classmethod
    def for_matmul(
        cls, a: Sequence[Sequence[int]], b: Sequence[Sequence[int]]
    ) -> "OperandSchedule":
        """
        Schedule an N x K by K x N product of encoded patterns.

        Raises:
            LayoutError: if the shapes do not chain or are not N x K / K x N
        """
        rows, depth, cols = matmul_shape(a, b)
        if cols != rows:
            raise LayoutError(f"B must be {depth}x{rows}, got {depth}x{cols}")

        a_waves = [[a[i][k] for i in range(rows)] for k in range(depth)]
        b_waves = [list(b[k]) for k in range(depth)]
        return cls(
            a_ticks=skew_waves(a_waves, rows),
            b_ticks=skew_waves(b_waves, rows),
            depth=depth,
        )
