"""zlib compression of instruction payloads with a bounded output size."""

import zlib

BUFFER_SIZE = 2048 * 2048
"""Largest compressed or uncompressed payload; an effective limit on screen size."""


def compress(data):
    """Compress bytes with zlib at the default level."""
    result = zlib.compress(bytes(data))
    if len(result) > BUFFER_SIZE:
        raise ValueError("compressed data exceeds buffer size")
    return result


def uncompress(data):
    """Decompress a zlib stream, refusing malformed or oversized input."""
    decompressor = zlib.decompressobj()
    try:
        result = decompressor.decompress(bytes(data), BUFFER_SIZE)
    except zlib.error as exc:
        raise ValueError(f"invalid compressed data: {exc}") from exc
    if not decompressor.eof:
        if decompressor.unconsumed_tail:
            raise ValueError("uncompressed data exceeds buffer size")
        raise ValueError("truncated compressed data")
    return result