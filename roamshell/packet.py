"""Datagram packets: sequence number, direction, timestamps and payload."""

import itertools
import struct
import threading
from dataclasses import dataclass, field
from enum import IntEnum

DIRECTION_MASK = 1 << 63
SEQUENCE_MASK = DIRECTION_MASK - 1
TIMESTAMP_NONE = 0xFFFF

_HEADER = struct.Struct(">HH")

_counter = itertools.count()
_counter_lock = threading.Lock()


class Direction(IntEnum):
    TO_SERVER = 0
    TO_CLIENT = 1


def next_sequence():
    """Return a process-wide unique, increasing sequence number."""
    with _counter_lock:
        return next(_counter)


@dataclass
class Packet:
    """One datagram before encryption."""

    direction: Direction
    timestamp: int
    timestamp_reply: int
    payload: bytes
    seq: int = field(default_factory=next_sequence)

    def to_message(self):
        """Return the (nonce, plaintext) pair to be sealed by the session."""
        nonce = (int(self.direction == Direction.TO_CLIENT) << 63) | (
            self.seq & SEQUENCE_MASK
        )
        text = _HEADER.pack(self.timestamp & 0xFFFF, self.timestamp_reply & 0xFFFF)
        return nonce, text + bytes(self.payload)


def packet_from_message(nonce, text):
    """Rebuild a packet from a decrypted nonce and plaintext."""
    text = bytes(text)
    if len(text) < _HEADER.size:
        raise ValueError("packet too short for timestamps")
    timestamp, timestamp_reply = _HEADER.unpack_from(text)
    direction = Direction.TO_CLIENT if nonce & DIRECTION_MASK else Direction.TO_SERVER
    return Packet(
        direction=direction,
        timestamp=timestamp,
        timestamp_reply=timestamp_reply,
        payload=text[_HEADER.size :],
        seq=nonce & SEQUENCE_MASK,
    )