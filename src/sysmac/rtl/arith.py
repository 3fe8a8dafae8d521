"""
Combinational Amaranth datapaths for the MAC arithmetic.

Each builder adds comb statements to a Module and returns the result Signal.
The bit selections match sysmac.arith exactly; see toyfloat.py for the
(non-IEEE) semantics.
"""

from amaranth import Cat, Const, Module, Mux, Signal, signed

from ..arith import FloatFormat


def int8_product(m: Module, a, b, prefix: str = "mul") -> Signal:
    """Exact signed 16-bit product of two 8-bit patterns."""
    product = Signal(signed(16), name=f"{prefix}_product")
    m.d.comb += product.eq(a[:8].as_signed() * b[:8].as_signed())
    return product


def float_multiply(m: Module, fmt: FloatFormat, a, b, prefix: str = "mul") -> Signal:
    """Truncating toy-float multiply; exponent wraps to its field width."""
    e, mb = fmt.exponent_bits, fmt.mantissa_bits
    sign_pos = fmt.sign_shift

    # Wide enough to hold ea + eb - bias without losing the carry
    exponent = Signal(signed(e + 2), name=f"{prefix}_exp")
    m.d.comb += exponent.eq(a[mb : mb + e] + b[mb : mb + e] - fmt.bias)

    product = Signal(fmt.product_bits, name=f"{prefix}_product")
    m.d.comb += product.eq(Cat(a[:mb], Const(1, 1)) * Cat(b[:mb], Const(1, 1)))

    carry = product[2 * mb + 1]
    mantissa = Mux(carry, product[mb + 2 : 2 * mb + 2], product[mb + 1 : 2 * mb + 1])

    result = Signal(fmt.total_bits, name=f"{prefix}_result")
    m.d.comb += result.eq(Cat(mantissa, (exponent + carry)[:e], a[sign_pos] ^ b[sign_pos]))
    return result


def float_add(m: Module, fmt: FloatFormat, a, b, prefix: str = "add") -> Signal:
    """Sign-blind toy-float add: larger exponent (b on a tie) sets sign and exponent."""
    e, mb, g = fmt.exponent_bits, fmt.mantissa_bits, fmt.guard_bits
    top = fmt.aligned_bits
    sign_pos = fmt.sign_shift

    exp_a = a[mb : mb + e]
    exp_b = b[mb : mb + e]
    aligned_a = Cat(Const(0, g), a[:mb], Const(1, 1))
    aligned_b = Cat(Const(0, g), b[:mb], Const(1, 1))

    a_larger = Signal(name=f"{prefix}_a_larger")
    m.d.comb += a_larger.eq(exp_a > exp_b)

    delta = Signal(e, name=f"{prefix}_delta")
    m.d.comb += delta.eq(Mux(a_larger, exp_a - exp_b, exp_b - exp_a))

    big = Signal(top, name=f"{prefix}_big")
    small = Signal(top, name=f"{prefix}_small")
    m.d.comb += [
        big.eq(Mux(a_larger, aligned_a, aligned_b)),
        small.eq(Mux(a_larger, aligned_b, aligned_a)),
    ]

    total = Signal(top + 1, name=f"{prefix}_sum")
    m.d.comb += total.eq(big + (small >> delta))

    carry = total[top]
    mantissa = Mux(carry, total[top - mb + 1 : top + 1], total[top - mb : top])
    exponent = Mux(a_larger, exp_a, exp_b)
    sign = Mux(a_larger, a[sign_pos], b[sign_pos])

    result = Signal(fmt.total_bits, name=f"{prefix}_result")
    m.d.comb += result.eq(Cat(mantissa, (exponent + carry)[:e], sign))
    return result
