"""Parsing of UDP port and port-range specifications."""

import re

_LONG_MIN = -(1 << 63)
_LONG_MAX = (1 << 63) - 1
_PORT_MAX = 65535

_NUMBER = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class PortRangeError(ValueError):
    """A port or port range that cannot be used."""


def _read_long(text):
    """Read a leading base-10 integer; return (value, rest, overflowed).

    With no digits the value is 0 and the rest is the whole text.
    """
    match = _NUMBER.match(text)
    if match is None:
        return 0, text, False
    value = int(match.group(1))
    overflowed = not _LONG_MIN <= value <= _LONG_MAX
    return value, text[match.end():], overflowed


def parse_port_range(spec):
    """Parse "PORT" or "LOW:HIGH" and return the (low, high) pair."""
    value, rest, overflowed = _read_long(spec)
    if overflowed or rest[:1] not in ("", ":"):
        raise PortRangeError(f"Invalid (low) port number ({spec})")
    if not 0 <= value <= _PORT_MAX:
        raise PortRangeError(
            f"(Low) port number {value} outside valid range [0..{_PORT_MAX}]"
        )
    low = value
    if not rest:
        return low, low

    high_spec = rest[1:]
    value, rest, overflowed = _read_long(high_spec)
    if overflowed or rest:
        raise PortRangeError(f"Invalid high port number ({high_spec})")
    if not 0 <= value <= _PORT_MAX:
        raise PortRangeError(
            f"High port number {value} outside valid range [0..{_PORT_MAX}]"
        )
    high = value
    if low > high:
        raise PortRangeError(f"Low port {low} greater than high port {high}")
    if low == 0:
        raise PortRangeError("Low port 0 incompatible with port ranges")
    return low, high