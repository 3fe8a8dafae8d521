"""Host bus layout for operand vectors and result matrices."""

from .codec import BusCodec

__all__ = ["BusCodec"]
