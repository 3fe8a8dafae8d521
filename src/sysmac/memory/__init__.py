"""Operand staging between the host and the array edges."""

from .skew_buffer import OperandSchedule, matmul_shape, skew_waves

__all__ = ["OperandSchedule", "matmul_shape", "skew_waves"]
