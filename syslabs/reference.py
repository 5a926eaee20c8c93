"""Straightforward reference versions of the bit-level puzzles, used to check solutions."""

from __future__ import annotations

import math
import struct

from syslabs.bits import to_int32, to_uint32

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

_SIGN = 0x80000000
_INF = 0x7F800000
_ODD_BITS = 0xAAAAAAAA


def u2f(u: int) -> float:
    """The single-precision value whose bit pattern is *u*."""
    return struct.unpack("<f", struct.pack("<I", to_uint32(u)))[0]


def f2u(f: float) -> int:
    """The bit pattern of *f* rounded to single precision; overflow gives infinity."""
    try:
        return struct.unpack("<I", struct.pack("<f", f))[0]
    except OverflowError:
        return _INF | (_SIGN if f < 0 else 0)


def ref_bit_xor(x: int, y: int) -> int:
    return to_int32(x) ^ to_int32(y)


def ref_tmin() -> int:
    return to_int32(0x80000000)


def ref_is_tmax(x: int) -> int:
    return int(to_int32(x) == 0x7FFFFFFF)


def ref_all_odd_bits(x: int) -> int:
    """1 if every odd-numbered bit of *x* is set."""
    return int(to_uint32(x) & _ODD_BITS == _ODD_BITS)


def ref_negate(x: int) -> int:
    return to_int32(-to_int32(x))


def ref_is_ascii_digit(x: int) -> int:
    return int(0x30 <= to_int32(x) <= 0x39)


def ref_conditional(x: int, y: int, z: int) -> int:
    return to_int32(y) if to_int32(x) else to_int32(z)


def ref_is_less_or_equal(x: int, y: int) -> int:
    return int(to_int32(x) <= to_int32(y))


def ref_logical_neg(x: int) -> int:
    return int(to_int32(x) == 0)


def ref_how_many_bits(x: int) -> int:
    """Bits needed to represent *x* in two's complement."""
    x = to_int32(x)
    magnitude = -x - 1 if x < 0 else x
    return magnitude.bit_length() + 1


def ref_float_twice(uf: int) -> int:
    f = u2f(uf)
    if math.isnan(f):
        return to_uint32(uf)
    return f2u(2 * f)


def ref_float_i2f(x: int) -> int:
    return f2u(float(to_int32(x)))


def ref_float_f2i(uf: int) -> int:
    """``(int) f``; NaN, infinity and out-of-range values give the minimum integer."""
    f = u2f(uf)
    if math.isnan(f) or math.isinf(f):
        return INT_MIN
    value = math.trunc(f)
    if INT_MIN <= value <= INT_MAX:
        return value
    return INT_MIN