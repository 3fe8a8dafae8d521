"""
BusCodec - packing between per-lane patterns and flat host words.

Element i occupies bits [i*w, (i+1)*w) of the packed word, lane 0 at the
low end. Byte buffers are the little-endian image of that word. Result
matrices are flattened row-major, so element (i, j) takes slot i*N + j.

Example (INT8 lanes, w = 8):
    >>> hex(BusCodec(4, 8).pack([1, 2, 3, 4]))
    '0x4030201'
"""

import math
from collections.abc import Sequence

import numpy as np

from ..config import ArrayConfig
from ..errors import ConfigError, LayoutError, integral


class BusCodec:
    """
    Fixed-slot packer for `lanes` elements of `slot_bits` each.

    Parameters:
        lanes: Number of elements per word
        slot_bits: Width of each element slot
    """

    def __init__(self, lanes: int, slot_bits: int):
        if lanes <= 0 or slot_bits <= 0:
            raise ConfigError(f"invalid bus layout: {lanes} lanes x {slot_bits} bits")
        self.lanes = lanes
        self.slot_bits = slot_bits
        self.slot_mask = (1 << slot_bits) - 1

    @classmethod
    def for_operands(cls, config: ArrayConfig) -> "BusCodec":
        """Operand vectors: N lanes of 8 (INT8/FLOAT8) or 16 (FLOAT16) bits."""
        return cls(config.dim, config.input_bits)

    @classmethod
    def for_results(cls, config: ArrayConfig) -> "BusCodec":
        """Result matrices: N*N accumulator slots of acc_bits each."""
        return cls(config.total_pes, config.acc_bits)

    @property
    def total_bits(self) -> int:
        return self.lanes * self.slot_bits

    @property
    def total_bytes(self) -> int:
        return (self.total_bits + 7) // 8

    def __repr__(self) -> str:
        return f"BusCodec(lanes={self.lanes}, slot_bits={self.slot_bits})"

    # =================================================================
    # Vectors
    # =================================================================

    def pack(self, values: Sequence[int]) -> int:
        """Pack `lanes` patterns into one word."""
        if len(values) != self.lanes:
            raise LayoutError(f"expected {self.lanes} elements, got {len(values)}")

        word = 0
        for i, value in enumerate(values):
            value = integral(value, f"element {i}")
            if not 0 <= value <= self.slot_mask:
                raise LayoutError(f"element {i} = {value} exceeds {self.slot_bits}-bit slot")
            word |= value << (i * self.slot_bits)
        return word

    def unpack(self, word: int) -> list[int]:
        """Split a word into `lanes` unsigned patterns."""
        word = integral(word, "word")
        if word < 0 or word.bit_length() > self.total_bits:
            raise LayoutError(f"word does not fit {self.total_bits} bits")
        return [(word >> (i * self.slot_bits)) & self.slot_mask for i in range(self.lanes)]

    def pack_bytes(self, values: Sequence[int]) -> bytes:
        return self.pack(values).to_bytes(self.total_bytes, "little")

    def unpack_bytes(self, data: bytes) -> list[int]:
        if len(data) != self.total_bytes:
            raise LayoutError(f"expected {self.total_bytes} bytes, got {len(data)}")
        return self.unpack(int.from_bytes(data, "little"))

    # =================================================================
    # Matrices
    # =================================================================

    def _matrix_dim(self) -> int:
        dim = math.isqrt(self.lanes)
        if dim * dim != self.lanes:
            raise LayoutError(f"{self.lanes} lanes do not form a square matrix")
        return dim

    def pack_matrix(self, grid) -> int:
        """Pack an N x N grid row-major; element (i, j) goes to slot i*N + j."""
        dim = self._matrix_dim()
        grid = np.asarray(grid)
        if grid.shape != (dim, dim):
            raise LayoutError(f"expected a {dim}x{dim} matrix, got shape {grid.shape}")
        return self.pack(list(grid.reshape(-1)))

    def unpack_matrix(self, word: int) -> np.ndarray:
        """Inverse of pack_matrix, as an N x N uint64 array."""
        dim = self._matrix_dim()
        return np.array(self.unpack(word), dtype=np.uint64).reshape(dim, dim)
