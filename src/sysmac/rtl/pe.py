"""
MacPE - Amaranth model of one processing element.

Hardware twin of sysmac.core.pe.ProcessingElement. On every clock edge:
    out_a <= in_a, out_b <= in_b (with their valid bits)
    out_c <= accumulate(in_c, in_a * in_b) when both operands are valid,
             in_c otherwise
and `init` forces every register to zero, overriding the update.

All ports carry raw bit patterns (unsigned); INT8 operands are
reinterpreted as signed inside the datapath.
"""

from amaranth import Module, unsigned
from amaranth.lib.wiring import Component, In, Out

from ..arith import FLOAT8, FLOAT16
from ..config import ArrayConfig, Precision
from .arith import float_add, float_multiply, int8_product


class MacPE(Component):
    """
    Processing Element - MAC with registered operand pass-through.

    Ports:
        in_a, in_a_valid: Operand from the left
        in_b, in_b_valid: Operand from above
        in_c: Accumulator input (own out_c or diagonal neighbour)
        init: Synchronous reset, dominant over the MAC update

        out_a, out_a_valid: Registered in_a (to PE on right)
        out_b, out_b_valid: Registered in_b (to PE below)
        out_c: Accumulator register, acc_bits wide

    Parameters:
        config: ArrayConfig with precision and acc_bits
    """

    def __init__(self, config: ArrayConfig):
        self.config = config

        input_width = config.input_bits
        acc_width = config.acc_bits

        super().__init__(
            {
                # Inputs
                "in_a": In(unsigned(input_width)),
                "in_a_valid": In(1),
                "in_b": In(unsigned(input_width)),
                "in_b_valid": In(1),
                "in_c": In(unsigned(acc_width)),
                "init": In(1),
                # Outputs
                "out_a": Out(unsigned(input_width)),
                "out_a_valid": Out(1),
                "out_b": Out(unsigned(input_width)),
                "out_b_valid": Out(1),
                "out_c": Out(unsigned(acc_width)),
            }
        )

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config

        # =================================================================
        # Multiply-Accumulate Computation
        # =================================================================

        if cfg.precision is Precision.INT8:
            product = int8_product(m, self.in_a, self.in_b)
            # Sign-extended product, wrapped to acc_bits on assignment
            accumulated = self.in_c.as_signed() + product
        else:
            fmt = FLOAT16 if cfg.precision is Precision.FLOAT16 else FLOAT8
            product = float_multiply(m, fmt, self.in_a, self.in_b)
            total = float_add(m, fmt, self.in_c[: fmt.total_bits], product)
            # Assigning the signed sum to the wider register sign-extends it
            accumulated = total.as_signed()

        # =================================================================
        # Register Update Logic
        # =================================================================

        with m.If(self.init):
            m.d.sync += [
                self.out_a.eq(0),
                self.out_a_valid.eq(0),
                self.out_b.eq(0),
                self.out_b_valid.eq(0),
                self.out_c.eq(0),
            ]
        with m.Else():
            m.d.sync += [
                self.out_a.eq(self.in_a),
                self.out_a_valid.eq(self.in_a_valid),
                self.out_b.eq(self.in_b),
                self.out_b_valid.eq(self.in_b_valid),
            ]
            with m.If(self.in_a_valid & self.in_b_valid):
                m.d.sync += self.out_c.eq(accumulated)
            with m.Else():
                m.d.sync += self.out_c.eq(self.in_c)

        return m
