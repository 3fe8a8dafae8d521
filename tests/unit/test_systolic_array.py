"""
Unit tests for the SystolicArray module.

These tests verify:
1. Construction and configuration errors
2. Tick-by-tick wavefront timing for a 2x2 INT8 product
3. Reset semantics and idempotence for every precision
4. Layout errors leaving the array untouched
5. Output-stationary and diagonal accumulator routing
6. Pipelined waves and the in-order reduction fold
"""

import numpy as np
import pytest

from sysmac import ConfigError, LayoutError
from sysmac.config import ArrayConfig, Dataflow, Precision
from sysmac.core.pe import PEPhase
from sysmac.core.systolic_array import SystolicArray
from sysmac.gemm import reference_matmul, systolic_matmul
from sysmac.memory import skew_waves

PRECISIONS = [Precision.INT8, Precision.FLOAT8, Precision.FLOAT16]


def drive_int8_example(array, advances):
    """Reset, then feed the skewed 2x2 product [[1,2],[3,4]] @ [[5,6],[7,8]]."""
    feed = [
        ([1, None], [5, None]),
        ([2, 3], [7, 6]),
        ([None, 4], [None, 8]),
        ([None, None], [None, None]),
    ]
    array.reset()
    for a_vector, b_vector in feed[:advances]:
        array.advance(False, a_vector, b_vector)


class TestSystolicArrayConstruction:
    """Configuration handling."""

    def test_new_defaults(self):
        array = SystolicArray.new(2, "int8")
        assert array.dim == 2
        assert array.config.acc_bits == 32
        assert array.config.dataflow is Dataflow.OUTPUT_STATIONARY
        assert array.cycle == 0
        assert array.phase is PEPhase.RESET

    def test_initial_results_zero(self):
        array = SystolicArray.new(3, Precision.FLOAT16, 32)
        results = array.read_results()
        assert results.shape == (3, 3)
        assert results.dtype == np.uint64
        assert not results.any()

    @pytest.mark.parametrize(
        "dim, precision, acc_bits",
        [
            (0, "int8", None),
            (-2, "int8", None),
            (2, "bfloat16", None),
            (2, "int8", 4),
            (2, "float16", 8),
            (2, "int8", 65),
        ],
    )
    def test_invalid_configuration(self, dim, precision, acc_bits):
        with pytest.raises(ConfigError):
            SystolicArray.new(dim, precision, acc_bits)


class TestSystolicArrayInt8:
    """2x2 INT8 product [[1,2],[3,4]] @ [[5,6],[7,8]] = [[19,22],[43,50]]."""

    @pytest.fixture
    def array(self):
        return SystolicArray.new(2, "int8", 32)

    def test_settled_result(self, array):
        drive_int8_example(array, 4)
        assert array.config.settle_ticks(2) == 4
        np.testing.assert_array_equal(array.read_results(), [[19, 22], [43, 50]])
        np.testing.assert_array_equal(array.read_values(), [[19, 22], [43, 50]])
        assert array.cycle == 5
        assert array.phase is PEPhase.ACTIVE

    def test_partial_sums_before_settle(self, array):
        drive_int8_example(array, 3)
        results = array.read_results()
        # PE (1, 1) has seen only A[1][0] * B[0][1]
        assert results[1, 1] == 18
        np.testing.assert_array_equal(results[0], [19, 22])
        assert results[1, 0] == 43

    def test_wavefront_timing(self, array):
        drive_int8_example(array, 1)
        np.testing.assert_array_equal(array.read_results(), [[5, 0], [0, 0]])

        array.advance(False, [2, 3], [7, 6])
        np.testing.assert_array_equal(array.read_results(), [[19, 6], [15, 0]])

    def test_operands_registered_through_grid(self, array):
        drive_int8_example(array, 2)
        assert array.state(0, 1).a == 1
        assert array.state(1, 0).b == 5
        assert array.state(1, 1).a_valid is False

    def test_negative_products(self, array):
        array.reset()
        array.advance(False, [-3, None], [4, None])
        assert array.read_results()[0, 0] == 0xFFFFFFF4
        assert array.read_values()[0, 0] == -12

    def test_matches_matmul_driver(self, array):
        results = systolic_matmul(array, [[1, 2], [3, 4]], [[5, 6], [7, 8]])
        np.testing.assert_array_equal(results, [[19, 22], [43, 50]])


class TestSystolicArrayReset:
    """Reset discards inputs and is idempotent."""

    @pytest.mark.parametrize("precision", PRECISIONS)
    def test_reset_idempotent(self, precision):
        array = SystolicArray.new(3, precision)
        rng = np.random.default_rng(3)
        for _ in range(4):
            vector = [int(v) for v in rng.integers(0, 1 << precision.bits, size=3)]
            array.advance(False, vector, vector)

        array.reset()
        once = array.read_results()
        array.reset()
        np.testing.assert_array_equal(array.read_results(), once)
        assert not once.any()
        assert array.phase is PEPhase.RESET

    def test_reset_tick_discards_inputs(self):
        array = SystolicArray.new(2, "int8")
        array.advance(True, [1, 2], [3, 4])
        assert not array.read_results().any()
        assert array.state(0, 0).a == 0
        assert not array.state(0, 0).a_valid

    def test_mid_stream_reset(self):
        array = SystolicArray.new(2, "int8")
        drive_int8_example(array, 2)
        drive_int8_example(array, 4)
        np.testing.assert_array_equal(array.read_results(), [[19, 22], [43, 50]])


class TestSystolicArrayLayoutErrors:
    """Rejected vectors leave state and cycle unchanged."""

    @pytest.fixture
    def array(self):
        array = SystolicArray.new(2, "int8")
        drive_int8_example(array, 2)
        return array

    @pytest.mark.parametrize(
        "a_vector, b_vector",
        [
            ([1, 2, 3], [1, 2]),
            ([1], [1, 2]),
            ([1, 2], []),
            ([256, 0], [0, 0]),
            ([0, 0], [-129, 0]),
            ([1.9, 0], [3, 0]),
            ([1, 0], [3.0, 0]),
            (["1", 0], [3, 0]),
        ],
    )
    def test_rejected_vector(self, array, a_vector, b_vector):
        before = array.read_results()
        cycle = array.cycle
        with pytest.raises(LayoutError):
            array.advance(False, a_vector, b_vector)
        np.testing.assert_array_equal(array.read_results(), before)
        assert array.cycle == cycle

    def test_rejected_on_reset_tick(self, array):
        with pytest.raises(LayoutError):
            array.advance(True, [0], [0, 0])
        assert array.read_results().any()

    def test_non_integer_lane_not_truncated(self):
        array = SystolicArray.new(1, "int8")
        array.reset()
        with pytest.raises(LayoutError, match="not an integer"):
            array.advance(False, [1.9], [3])
        assert array.read_values()[0, 0] == 0
        assert array.cycle == 1

    def test_numpy_integer_lanes(self):
        array = SystolicArray.new(2, "int8")
        array.reset()
        array.advance(False, np.array([-3, 2], dtype=np.int8), [np.int64(4), None])
        assert array.read_values()[0, 0] == -12

    def test_float16_lane_range(self):
        array = SystolicArray.new(2, "float16")
        array.advance(False, [0xFFFF, None], [0x3C00, None])
        with pytest.raises(LayoutError):
            array.advance(False, [0x10000, None], [0, None])

    def test_layout_error_is_value_error(self, array):
        with pytest.raises(ValueError):
            array.advance(False, [0], [0])


class TestSystolicArrayDataflow:
    """Accumulator routing."""

    def test_diagonal_chain(self):
        array = SystolicArray.new(3, "int8", dataflow="diagonal")
        array.reset()
        for _ in range(5):
            array.advance(False, [1, 2, 3], [4, 5, 6])

        np.testing.assert_array_equal(
            array.read_values(),
            [[4, 5, 6], [8, 14, 17], [12, 23, 32]],
        )

    def test_diagonal_edges_hold_single_product(self):
        array = SystolicArray.new(2, "int8", dataflow=Dataflow.DIAGONAL)
        array.reset()
        for _ in range(4):
            array.advance(False, [2, 3], [5, 7])
        # Row 0 / column 0 never accumulate across ticks
        assert array.read_values()[0, 0] == 10

    def test_pipelined_waves(self):
        array = SystolicArray.new(3, "int8")
        p_a, p_b = [1, 2, 3], [4, 5, 6]
        q_a, q_b = [7, 8, 9], [10, 11, 12]
        a_ticks = skew_waves([p_a, q_a], 3)
        b_ticks = skew_waves([p_b, q_b], 3)
        idle = [None] * 3

        array.reset()
        snapshots = [array.read_values()]
        for t in range(7):
            a_vector = a_ticks[t] if t < len(a_ticks) else idle
            b_vector = b_ticks[t] if t < len(b_ticks) else idle
            array.advance(False, a_vector, b_vector)
            snapshots.append(array.read_values())

        for i in range(3):
            for j in range(3):
                p = p_a[i] * p_b[j]
                q = q_a[i] * q_b[j]
                assert snapshots[i + j][i, j] == 0
                assert snapshots[i + j + 1][i, j] == p
                assert snapshots[i + j + 2][i, j] == p + q


class TestSystolicArrayFloat:
    """Toy-float accumulation through the array."""

    def test_fold_order_is_increasing_k(self):
        array = SystolicArray.new(1, "float8", 8)
        forward = systolic_matmul(array, [[0x38, 0x40]], [[0x38], [0x40]])
        assert forward[0, 0] == 0x4F

        backward = systolic_matmul(array, [[0x40, 0x38]], [[0x40], [0x38]])
        assert backward[0, 0] == 0x54

    @pytest.mark.parametrize(
        "config",
        [
            ArrayConfig(dim=3, precision=Precision.FLOAT8, acc_bits=8),
            ArrayConfig(dim=3, precision=Precision.FLOAT8, acc_bits=16),
            ArrayConfig(dim=4, precision=Precision.FLOAT16, acc_bits=16),
            ArrayConfig(dim=2, precision=Precision.FLOAT16, acc_bits=32),
        ],
    )
    def test_matches_reference(self, config):
        array = SystolicArray(config)
        rng = np.random.default_rng(config.dim)
        a = rng.integers(0, 1 << config.input_bits, size=(config.dim, 5)).tolist()
        b = rng.integers(0, 1 << config.input_bits, size=(5, config.dim)).tolist()

        np.testing.assert_array_equal(
            systolic_matmul(array, a, b),
            reference_matmul(array.unit, a, b),
        )

    def test_read_values_decodes(self):
        array = SystolicArray.new(1, "float8", 8)
        array.reset()
        array.advance(False, [0x38], [0x38])
        # add(0x00, 0x3C) keeps the hidden bit of 1.5: 0x3E = 1.75
        assert array.read_results()[0, 0] == 0x3E
        assert array.read_values()[0, 0] == 1.75
        assert array.read_values().dtype == np.float64


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
