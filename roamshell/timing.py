"""Millisecond clocks and 16-bit wrapping timestamps."""

import time

_MODULUS = 1 << 16
_NONE16 = _MODULUS - 1


def timestamp():
    """Return a monotonic clock reading in milliseconds."""
    return time.monotonic_ns() // 1_000_000


def timestamp16():
    """Return the clock modulo 65536, never the reserved value 0xFFFF."""
    ts = timestamp() % _MODULUS
    if ts == _NONE16:
        ts = 0
    return ts


def timestamp_diff(tsnew, tsold):
    """Return the wrapping difference between two 16-bit timestamps."""
    return (tsnew - tsold) % _MODULUS