"""
MacMesh - An N x N grid of MacPEs wired for systolic flow.

Hardware twin of sysmac.core.SystolicArray:

                 b_0          b_1
                  |            |
    a_0 --> [MacPE(0,0)] -> [MacPE(0,1)]
                  |            |
    a_1 --> [MacPE(1,0)] -> [MacPE(1,1)]

- A: in_a of PE (i, 0) is port a_i, then out_a -> in_a along the row
- B: in_b of PE (0, j) is port b_j, then out_b -> in_b down the column
- C: OUTPUT_STATIONARY feeds each PE its own out_c; DIAGONAL feeds
  out_c of PE (i-1, j-1), zero on row 0 / column 0
- init is broadcast to every PE

All PE-to-PE connections are combinational; the PE outputs are the only
registers, giving one tick per hop.
"""

import logging

from amaranth import Module, unsigned
from amaranth.lib.wiring import Component, In, Out

from ..config import ArrayConfig, Dataflow
from .pe import MacPE

logger = logging.getLogger(__name__)


class MacMesh(Component):
    """
    MacMesh - N x N MacPE grid.

    Ports:
        a_0..N, a_valid_0..N: Row operands (left edge)
        b_0..N, b_valid_0..N: Column operands (top edge)
        init: Reset all PEs this tick
        c_<i>_<j>: Accumulator of PE (i, j)

    Parameters:
        config: ArrayConfig with dimension, precision and dataflow
    """

    def __init__(self, config: ArrayConfig):
        self.config = config
        n = config.dim

        ports = {"init": In(1)}

        # Edge operand inputs - one per row (A) and column (B)
        for i in range(n):
            ports[f"a_{i}"] = In(unsigned(config.input_bits))
            ports[f"a_valid_{i}"] = In(1)
            ports[f"b_{i}"] = In(unsigned(config.input_bits))
            ports[f"b_valid_{i}"] = In(1)

        # Accumulator outputs - one per PE
        for i in range(n):
            for j in range(n):
                ports[f"c_{i}_{j}"] = Out(unsigned(config.acc_bits))

        super().__init__(ports)

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config
        n = cfg.dim

        logger.debug("elaborating %dx%d %s mesh", n, n, cfg.precision.value)

        pes = [[MacPE(cfg) for _ in range(n)] for _ in range(n)]
        for r in range(n):
            for c in range(n):
                m.submodules[f"pe_{r}_{c}"] = pes[r][c]

        # =================================================================
        # Horizontal (A) Wiring - flows left to right
        # =================================================================
        for r in range(n):
            m.d.comb += [
                pes[r][0].in_a.eq(getattr(self, f"a_{r}")),
                pes[r][0].in_a_valid.eq(getattr(self, f"a_valid_{r}")),
            ]
            for c in range(1, n):
                m.d.comb += [
                    pes[r][c].in_a.eq(pes[r][c - 1].out_a),
                    pes[r][c].in_a_valid.eq(pes[r][c - 1].out_a_valid),
                ]

        # =================================================================
        # Vertical (B) Wiring - flows top to bottom
        # =================================================================
        for c in range(n):
            m.d.comb += [
                pes[0][c].in_b.eq(getattr(self, f"b_{c}")),
                pes[0][c].in_b_valid.eq(getattr(self, f"b_valid_{c}")),
            ]
            for r in range(1, n):
                m.d.comb += [
                    pes[r][c].in_b.eq(pes[r - 1][c].out_b),
                    pes[r][c].in_b_valid.eq(pes[r - 1][c].out_b_valid),
                ]

        # =================================================================
        # Accumulator Routing and Outputs
        # =================================================================
        for r in range(n):
            for c in range(n):
                pe = pes[r][c]
                if cfg.dataflow is Dataflow.OUTPUT_STATIONARY:
                    m.d.comb += pe.in_c.eq(pe.out_c)
                elif r > 0 and c > 0:
                    m.d.comb += pe.in_c.eq(pes[r - 1][c - 1].out_c)
                else:
                    m.d.comb += pe.in_c.eq(0)

                m.d.comb += [
                    pe.init.eq(self.init),
                    getattr(self, f"c_{r}_{c}").eq(pe.out_c),
                ]

        return m
