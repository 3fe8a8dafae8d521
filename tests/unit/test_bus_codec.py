"""
Unit tests for BusCodec.

These tests verify:
1. Lane 0 occupies the least significant slot
2. Little-endian byte images
3. Row-major result matrices
4. Layout error reporting
"""

import numpy as np
import pytest

from sysmac import ConfigError, LayoutError
from sysmac.arith import Int8Unit
from sysmac.bus import BusCodec
from sysmac.config import ArrayConfig, Precision


class TestBusCodecVectors:
    @pytest.fixture
    def codec(self):
        return BusCodec(4, 8)

    def test_pack_order(self, codec):
        assert codec.pack([1, 2, 3, 4]) == 0x04030201
        assert codec.unpack(0x04030201) == [1, 2, 3, 4]

    @pytest.mark.parametrize("values", [[-1, 0, 0, 0], [0, 0, 0, -128]])
    def test_negative_lanes_rejected(self, codec, values):
        # Elements are bit patterns; encode signed values before packing
        with pytest.raises(LayoutError):
            codec.pack(values)

    def test_encoded_negative_lanes(self, codec):
        unit = Int8Unit(acc_bits=32)
        word = codec.pack([unit.encode(-1), 0, 0, unit.encode(-128)])
        assert word == 0x800000FF
        assert [unit.decode(v) for v in codec.unpack(word)] == [-1, 0, 0, -128]

    @pytest.mark.parametrize("value", [1.9, 2.0, "3", None])
    def test_non_integer_rejected(self, codec, value):
        with pytest.raises(LayoutError, match="not an integer"):
            codec.pack([value, 0, 0, 0])

    def test_numpy_integers_accepted(self, codec):
        values = np.array([1, 2, 3, 255], dtype=np.uint8)
        assert codec.pack(values) == 0xFF030201
        assert codec.unpack(np.uint64(0xFF030201)) == [1, 2, 3, 255]

    def test_sizes(self, codec):
        assert codec.total_bits == 32
        assert codec.total_bytes == 4
        assert BusCodec(3, 12).total_bytes == 5

    def test_bytes_little_endian(self, codec):
        assert codec.pack_bytes([1, 2, 3, 4]) == b"\x01\x02\x03\x04"
        assert codec.unpack_bytes(b"\xff\x00\x10\x20") == [0xFF, 0x00, 0x10, 0x20]

    def test_float16_lanes(self):
        codec = BusCodec.for_operands(ArrayConfig(dim=2, precision="float16"))
        assert codec.slot_bits == 16
        assert codec.pack([0x3C00, 0xC100]) == 0xC1003C00
        assert codec.pack_bytes([0x3C00, 0xC100]) == b"\x00\x3c\x00\xc1"

    @pytest.mark.parametrize("values", [[1, 2, 3], [1, 2, 3, 4, 5], []])
    def test_wrong_lane_count(self, codec, values):
        with pytest.raises(LayoutError):
            codec.pack(values)

    @pytest.mark.parametrize("values", [[256, 0, 0, 0], [0, 0, 0, -129]])
    def test_value_out_of_range(self, codec, values):
        with pytest.raises(LayoutError):
            codec.pack(values)

    @pytest.mark.parametrize("word", [-1, 1 << 32])
    def test_word_out_of_range(self, codec, word):
        with pytest.raises(LayoutError):
            codec.unpack(word)

    def test_wrong_byte_count(self, codec):
        with pytest.raises(LayoutError):
            codec.unpack_bytes(b"\x00\x01\x02")

    @pytest.mark.parametrize("lanes, slot_bits", [(0, 8), (4, 0), (-1, 8)])
    def test_invalid_layout(self, lanes, slot_bits):
        with pytest.raises(ConfigError):
            BusCodec(lanes, slot_bits)


class TestBusCodecRoundTrip:
    """unpack(pack(v)) == v for every precision and array size."""

    @pytest.mark.parametrize("dim", [1, 2, 3, 4, 5])
    @pytest.mark.parametrize("precision", list(Precision), ids=lambda p: p.value)
    def test_operand_vectors(self, precision, dim):
        codec = BusCodec.for_operands(ArrayConfig(dim=dim, precision=precision))
        assert codec.total_bits == dim * precision.bits
        rng = np.random.default_rng(dim)
        for _ in range(50):
            values = [int(v) for v in rng.integers(0, 1 << precision.bits, size=dim)]
            assert codec.unpack(codec.pack(values)) == values
            data = codec.pack_bytes(values)
            assert len(data) == codec.total_bytes
            assert codec.unpack_bytes(data) == values

    @pytest.mark.parametrize("dim", [1, 2, 3, 4, 5])
    @pytest.mark.parametrize("precision", list(Precision), ids=lambda p: p.value)
    def test_extreme_patterns(self, precision, dim):
        codec = BusCodec.for_operands(ArrayConfig(dim=dim, precision=precision))
        top = (1 << precision.bits) - 1
        for values in ([0] * dim, [top] * dim, [top if i % 2 else 0 for i in range(dim)]):
            assert codec.unpack(codec.pack(values)) == values
            assert codec.unpack_bytes(codec.pack_bytes(values)) == values

    @pytest.mark.parametrize("dim", [1, 2, 3, 4, 5])
    @pytest.mark.parametrize("precision", list(Precision), ids=lambda p: p.value)
    def test_result_matrices(self, precision, dim):
        config = ArrayConfig(dim=dim, precision=precision)
        codec = BusCodec.for_results(config)
        rng = np.random.default_rng(dim + config.acc_bits)
        grid = rng.integers(0, 1 << config.acc_bits, size=(dim, dim), dtype=np.uint64)
        np.testing.assert_array_equal(codec.unpack_matrix(codec.pack_matrix(grid)), grid)


class TestBusCodecMatrices:
    @pytest.fixture
    def codec(self):
        return BusCodec.for_results(ArrayConfig(dim=2, acc_bits=32))

    def test_row_major(self, codec):
        word = codec.pack_matrix([[19, 22], [43, 50]])
        assert codec.unpack(word) == [19, 22, 43, 50]
        assert word & 0xFFFFFFFF == 19
        assert word >> 96 == 50

    def test_unpack_matrix(self, codec):
        grid = np.array([[1, 0xFFFFFFFF], [7, 0]], dtype=np.uint64)
        result = codec.unpack_matrix(codec.pack_matrix(grid))
        assert result.dtype == np.uint64
        np.testing.assert_array_equal(result, grid)

    def test_results_layout(self, codec):
        assert codec.lanes == 4
        assert codec.slot_bits == 32
        assert codec.total_bits == ArrayConfig(dim=2, acc_bits=32).result_bus_bits

    def test_wrong_shape(self, codec):
        with pytest.raises(LayoutError):
            codec.pack_matrix([[1, 2, 3], [4, 5, 6]])

    def test_non_square_lane_count(self):
        with pytest.raises(LayoutError):
            BusCodec(3, 8).pack_matrix([[1]])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
