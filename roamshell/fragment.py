"""Transport instructions and their split into numbered datagram fragments."""

import dataclasses
import struct
from dataclasses import dataclass

from .compressor import compress, uncompress

_U64 = (1 << 64) - 1
_FINAL_BIT = 0x8000
_NUM_MASK = 0x7FFF

_HEADER = struct.Struct(">QH")
FRAG_HEADER_LEN = _HEADER.size
"""Bytes of fragment header: 64-bit instruction id and 16-bit fragment number."""

_INT_FIELDS = {
    1: "protocol_version",
    2: "old_num",
    3: "new_num",
    4: "ack_num",
    5: "throwaway_num",
}
_BYTES_FIELDS = {6: "diff", 7: "chaff"}
_WIRE_VARINT = 0
_WIRE_FIXED64 = 1
_WIRE_BYTES = 2
_WIRE_FIXED32 = 5


def _put_varint(out, value):
    value &= _U64
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return


def _get_varint(data, pos):
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result & _U64, pos
        shift += 7
        if shift >= 70:
            raise ValueError("varint too long")


@dataclass
class Instruction:
    """One transport instruction: a diff from one numbered state to another."""

    protocol_version: int = 0
    old_num: int = 0
    new_num: int = 0
    ack_num: int = 0
    throwaway_num: int = 0
    diff: bytes = b""
    chaff: bytes = b""

    def to_bytes(self):
        """Encode as tagged fields: varints for numbers, length-prefixed bytes."""
        out = bytearray()
        for number, name in _INT_FIELDS.items():
            _put_varint(out, (number << 3) | _WIRE_VARINT)
            _put_varint(out, getattr(self, name))
        for number, name in _BYTES_FIELDS.items():
            value = bytes(getattr(self, name))
            _put_varint(out, (number << 3) | _WIRE_BYTES)
            _put_varint(out, len(value))
            out += value
        return bytes(out)

    @classmethod
    def from_bytes(cls, data):
        """Decode an instruction, skipping unknown fields."""
        data = bytes(data)
        values = {}
        pos = 0
        while pos < len(data):
            tag, pos = _get_varint(data, pos)
            number, wire = tag >> 3, tag & 0x07
            if wire == _WIRE_VARINT:
                value, pos = _get_varint(data, pos)
                if number in _BYTES_FIELDS:
                    raise ValueError(f"field {number} has the wrong wire type")
                if number in _INT_FIELDS:
                    values[_INT_FIELDS[number]] = value
            elif wire == _WIRE_BYTES:
                length, pos = _get_varint(data, pos)
                end = pos + length
                if end > len(data):
                    raise ValueError("truncated length-delimited field")
                if number in _INT_FIELDS:
                    raise ValueError(f"field {number} has the wrong wire type")
                if number in _BYTES_FIELDS:
                    values[_BYTES_FIELDS[number]] = data[pos:end]
                pos = end
            elif wire in (_WIRE_FIXED64, _WIRE_FIXED32):
                size = 8 if wire == _WIRE_FIXED64 else 4
                if number in _INT_FIELDS or number in _BYTES_FIELDS:
                    raise ValueError(f"field {number} has the wrong wire type")
                if pos + size > len(data):
                    raise ValueError("truncated fixed-width field")
                pos += size
            else:
                raise ValueError(f"unsupported wire type {wire}")
        return cls(**values)


@dataclass
class Fragment:
    """A numbered piece of one compressed instruction."""

    id: int = _U64
    fragment_num: int = 0xFFFF
    final: bool = False
    contents: bytes = b""

    def to_bytes(self):
        """Encode header (id, final bit and fragment number) and contents."""
        if self.fragment_num & _FINAL_BIT:
            raise ValueError("fragment number too large")
        combined = (int(bool(self.final)) << 15) | self.fragment_num
        return _HEADER.pack(self.id & _U64, combined) + bytes(self.contents)

    @classmethod
    def from_bytes(cls, data):
        """Decode a fragment received from the network."""
        data = bytes(data)
        if len(data) < FRAG_HEADER_LEN:
            raise ValueError("fragment too short for header")
        frag_id, combined = _HEADER.unpack_from(data)
        return cls(
            id=frag_id,
            fragment_num=combined & _NUM_MASK,
            final=bool(combined & _FINAL_BIT),
            contents=data[FRAG_HEADER_LEN:],
        )


class FragmentAssembly:
    """Collects the fragments of one instruction until it is complete."""

    def __init__(self):
        self._fragments = []
        self._current_id = _U64
        self._arrived = 0
        self._total = -1

    def add_fragment(self, frag):
        """Add a fragment; return True once every fragment has arrived."""
        num = frag.fragment_num
        if self._current_id != frag.id:
            # a new instruction replaces any partial one
            self._fragments = [None] * (num + 1)
            self._fragments[num] = frag
            self._arrived = 1
            self._total = -1
            self._current_id = frag.id
        elif num < len(self._fragments) and self._fragments[num] is not None:
            if self._fragments[num] != frag:
                raise ValueError("duplicate fragment differs from earlier copy")
        else:
            if len(self._fragments) < num + 1:
                self._fragments.extend([None] * (num + 1 - len(self._fragments)))
            self._fragments[num] = frag
            self._arrived += 1

        if frag.final:
            self._total = num + 1
            if len(self._fragments) > self._total:
                raise ValueError("fragment beyond the final fragment")
            self._fragments.extend([None] * (self._total - len(self._fragments)))

        if self._total != -1 and self._arrived > self._total:
            raise ValueError("more fragments than the instruction holds")

        return self._arrived == self._total

    def get_assembly(self):
        """Join, decompress and decode the completed instruction."""
        if self._arrived != self._total:
            raise ValueError("instruction is not complete")
        if any(frag is None for frag in self._fragments):
            raise ValueError("instruction is missing a fragment")
        encoded = b"".join(frag.contents for frag in self._fragments)
        instruction = Instruction.from_bytes(uncompress(encoded))
        self._fragments = []
        self._arrived = 0
        self._total = -1
        return instruction


class Fragmenter:
    """Splits instructions into fragments, numbering each new instruction."""

    def __init__(self):
        self._next_instruction_id = 0
        self._last_instruction = Instruction(old_num=_U64, new_num=_U64)
        self._last_mtu = _U64

    def make_fragments(self, inst, mtu):
        """Return the fragments of inst, each at most mtu bytes on the wire."""
        if mtu <= FRAG_HEADER_LEN:
            raise ValueError("MTU too small for fragment header")
        mtu -= FRAG_HEADER_LEN
        last = self._last_instruction
        if (
            inst.old_num != last.old_num
            or inst.new_num != last.new_num
            or inst.ack_num != last.ack_num
            or inst.throwaway_num != last.throwaway_num
            or inst.chaff != last.chaff
            or inst.protocol_version != last.protocol_version
            or self._last_mtu != mtu
        ):
            self._next_instruction_id += 1

        if (
            inst.old_num == last.old_num
            and inst.new_num == last.new_num
            and inst.diff != last.diff
        ):
            raise ValueError("same state transition with a different diff")

        self._last_instruction = dataclasses.replace(inst)
        self._last_mtu = mtu

        payload = compress(inst.to_bytes())
        chunks = [payload[start:start + mtu] for start in range(0, len(payload), mtu)]
        return [
            Fragment(
                id=self._next_instruction_id,
                fragment_num=number,
                final=number == len(chunks) - 1,
                contents=chunk,
            )
            for number, chunk in enumerate(chunks)
        ]

    def last_ack_sent(self):
        """Return the ack number of the last instruction fragmented."""
        return self._last_instruction.ack_num