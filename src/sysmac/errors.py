"""
Error taxonomy for the systolic MAC simulator.

Only configuration and data-layout problems are errors. Arithmetic never
fails: overflow, precision loss and the sign-blind float add are silent.
"""

import operator


class SysmacError(Exception):
    """Base class for all simulator errors."""


class ConfigError(SysmacError, ValueError):
    """Invalid construction parameters (dimension, precision, widths)."""


class LayoutError(SysmacError, ValueError):
    """Operand vector or bus buffer with the wrong element count or width."""


def integral(value, what: str) -> int:
    """Exact int of an integer-like value (int, numpy integer); anything else is a LayoutError."""
    try:
        return operator.index(value)
    except TypeError:
        raise LayoutError(f"{what} = {value!r} is not an integer") from None
