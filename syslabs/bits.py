"""Bit-level puzzles on 32-bit two's-complement integers and single-precision floats.

Integer arguments may be given as any Python int; they are reduced to the
32-bit value they denote. Float arguments and results are the unsigned 32-bit
patterns of IEEE single-precision values.
"""

from __future__ import annotations

_WORD = 0xFFFFFFFF
_SIGN = 0x80000000

_EXP_MASK = 0xFF
_SIGN_EXP_MASK = 0xFF800000
_ONE_EXP = 0x00800000
_BIAS = 0x7F

_F2I_EXP_MASK = 0x7F800000
_F2I_FRAC_MASK = 0x0008FFFF
_OUT_OF_RANGE = 0x80000000


def to_int32(x: int) -> int:
    """The signed 32-bit value whose bit pattern is the low 32 bits of *x*."""
    x &= _WORD
    return x - (1 << 32) if x & _SIGN else x


def to_uint32(x: int) -> int:
    """The unsigned 32-bit value whose bit pattern is the low 32 bits of *x*."""
    return x & _WORD


def bit_xor(x: int, y: int) -> int:
    """x ^ y using only complement and and."""
    x, y = to_int32(x), to_int32(y)
    zero_if_both_one = ~(x & y)
    zero_if_both_zero = ~(~x & ~y)
    return zero_if_both_one & zero_if_both_zero


def tmin() -> int:
    """The minimum two's-complement integer."""
    return to_int32((~1 + 1) << 31)


def is_tmax(x: int) -> int:
    """1 if *x* is the maximum two's-complement integer, else 0."""
    x = to_int32(x)
    pos_or_neg = int(~x != 0)
    return int(to_int32(x + x + 1 + pos_or_neg) == 0)


def all_odd_bits(x: int) -> int:
    """1 when *x* equals the complement of the alternating pattern built from 0xAA bytes."""
    x = to_int32(x)
    pattern = 0
    for _ in range(4):
        pattern = (pattern << 8) + 170
    return int(x == to_int32(~pattern))


def negate(x: int) -> int:
    """-x with 32-bit wrap-around."""
    return to_int32(~to_int32(x) + 1)


def is_ascii_digit(x: int) -> int:
    """1 if 0x30 <= x <= 0x39, else 0."""
    x = to_int32(x)
    diff_sum = to_int32((x << 1) + (~105 + 1))
    high = x >> 6
    above = to_int32(~diff_sum + 10) >> 31
    below = to_int32(diff_sum + 9) >> 31
    return int(not (high | above | below))


def conditional(x: int, y: int, z: int) -> int:
    """Same as ``x ? y : z``."""
    x, y, z = to_int32(x), to_int32(y), to_int32(z)
    all_same_bits = ~int(x != 0) + 1
    return to_int32((all_same_bits & y) | (~all_same_bits & z))


def is_less_or_equal(x: int, y: int) -> int:
    """1 if x <= y, else 0."""
    x, y = to_int32(x), to_int32(y)
    x_sign = (x >> 31) & 1
    y_sign = (y >> 31) & 1
    x_negative_y_non_negative = x_sign & int(not y_sign)

    diff = to_int32(x + ~y + 1)
    diff_sign = (diff >> 31) & 1
    same_sign = int(not (x_sign ^ y_sign))
    diff_non_positive = same_sign & (~int(diff != 0) | diff_sign)

    return x_negative_y_non_negative | diff_non_positive


def logical_neg(x: int) -> int:
    """The ``!`` operator: 1 for zero, 0 otherwise, computed by bit smearing."""
    smeared = to_int32(x)
    for shift in (16, 8, 4, 2, 1):
        smeared |= smeared >> shift
    return ~smeared & 1


def how_many_bits(x: int) -> int:
    """Minimum number of bits needed to represent *x* in two's complement."""
    x = to_int32(x)
    mask1 = 0x2
    mask2 = 0xC
    mask4 = 0xF0
    mask8 = 0xFF << 8
    mask16 = (mask8 | 0xFF) << 16

    result = 1
    y = x ^ (x >> 31)
    for mask, shift in ((mask16, 4), (mask8, 3), (mask4, 2), (mask2, 1)):
        bitnum = int(bool(y & mask)) << shift
        result += bitnum
        y >>= bitnum
    bitnum = int(bool(y & mask1))
    result += bitnum
    y >>= bitnum
    return result + (y & 1)


def float_twice(uf: int) -> int:
    """Bit pattern of 2*f for the float with pattern *uf*; NaN is returned unchanged."""
    uf = to_uint32(uf)
    exp = _EXP_MASK & (uf >> 23)
    mantissa = uf & 0x007FFFFF

    if exp == _EXP_MASK:
        return uf
    if exp == 0:
        if mantissa == 0:
            return uf
        return (_SIGN & uf) | ((uf << 1) & _WORD)
    uf = (uf + _ONE_EXP) & _WORD
    if exp + 1 == _EXP_MASK:
        uf &= _SIGN_EXP_MASK
    return uf


def float_i2f(x: int) -> int:
    """Bit pattern of ``(float) x``, rounded to nearest even."""
    xu = to_uint32(x)
    sign_bit = xu & _SIGN
    if sign_bit:
        xu = (-xu) & _WORD
    if xu == 0:
        return 0

    first_one_idx = xu.bit_length() - 1
    without_first_one = xu - (1 << first_one_idx)
    if first_one_idx <= 23:
        frac = (without_first_one << (23 - first_one_idx)) & _WORD
    else:
        round_bit_idx = first_one_idx - 24
        round_bit = (xu >> round_bit_idx) & 1
        frac = without_first_one >> (first_one_idx - 23)
        if round_bit:
            sticky = (xu << (32 - round_bit_idx)) & _WORD if round_bit_idx else 0
            if sticky:
                frac += 1
            elif (xu >> (round_bit_idx + 1)) & 1:
                frac += 1

    exp = first_one_idx + _BIAS
    return (sign_bit + (exp << 23) + frac) & _WORD


def float_f2i(uf: int) -> int:
    """``(int) f`` for the float with pattern *uf*.

    Out-of-range values, NaN and infinity give 0x80000000. The fraction is
    taken with the mask 0x0008FFFF.
    """
    uf = to_uint32(uf)
    if (uf << 1) & _WORD == 0:
        return 0

    exp = (_F2I_EXP_MASK & uf) >> 23
    frac = _F2I_FRAC_MASK & uf
    if exp == 0:
        return 0

    e = exp - _BIAS
    if e < 0:
        return 0
    if e > 30:
        return to_int32(_OUT_OF_RANGE)

    m = _ONE_EXP + frac
    res = (m << (e - 23)) if e > 23 else (m >> (23 - e))
    res &= _WORD
    if uf & _SIGN:
        res = (-res) & _WORD
    return to_int32(res)