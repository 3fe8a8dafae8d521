"""
Processing Element (PE) - The fundamental compute unit of the systolic array.

Each PE performs a multiply-accumulate (MAC) operation:
    c_out = accumulate(c_in, a_in * b_in)

and registers its operands for the neighbours:
    a_out = a_in  (to the PE on the right)
    b_out = b_in  (to the PE below)

All three outputs are registered: values sampled on tick T appear on the
outputs at tick T+1.

Each operand carries a valid bit. When either operand is a bubble the PE
passes c_in through instead of accumulating, so the zero padding around a
skewed wavefront never reaches the accumulator (in the toy float formats
0x00 * 0x00 is not zero).
"""

from dataclasses import dataclass
from enum import IntEnum, auto

from ..arith import ArithmeticUnit


class PEPhase(IntEnum):
    """Array-wide PE state machine."""

    RESET = 0  # initialization asserted on the last tick
    ACTIVE = auto()  # steady operation


@dataclass(frozen=True)
class PEState:
    """
    Registers of one PE.

    Attributes:
        a: Last-seen A operand pattern (zero while a_valid is False)
        b: Last-seen B operand pattern (zero while b_valid is False)
        acc: Accumulator pattern, acc_bits wide
        a_valid: a holds an operand rather than a bubble
        b_valid: b holds an operand rather than a bubble
    """

    a: int = 0
    b: int = 0
    acc: int = 0
    a_valid: bool = False
    b_valid: bool = False


class ProcessingElement:
    """
    Pure transition function for a PE, parameterized by an ArithmeticUnit.

    The PE itself holds no state: SystolicArray owns one PEState per cell and
    replaces the whole grid of states on every tick.
    """

    def __init__(self, unit: ArithmeticUnit):
        self.unit = unit

    def reset_state(self) -> PEState:
        """Registers snapped to the zero encoding, operands marked invalid."""
        zero = self.unit.zero_value()
        return PEState(a=zero, b=zero, acc=zero)

    def step(
        self,
        a_in: int,
        b_in: int,
        c_in: int,
        a_valid: bool = True,
        b_valid: bool = True,
        initialize: bool = False,
    ) -> PEState:
        """
        Compute the registers for the next tick.

        Args:
            a_in: A operand pattern arriving from the left
            b_in: B operand pattern arriving from above
            c_in: Accumulator input selected by the interconnect
            a_valid: a_in is an operand, not a bubble
            b_valid: b_in is an operand, not a bubble
            initialize: Reset dominates; inputs are discarded

        Returns:
            The PEState visible on the next tick
        """
        if initialize:
            return self.reset_state()

        if a_valid and b_valid:
            acc = self.unit.accumulate(c_in, self.unit.multiply(a_in, b_in))
        else:
            acc = c_in

        return PEState(a=a_in, b=b_in, acc=acc, a_valid=a_valid, b_valid=b_valid)
