import random

import pytest

from roamshell.fragment import (
    FRAG_HEADER_LEN,
    Fragment,
    FragmentAssembly,
    Fragmenter,
    Instruction,
)

U64 = (1 << 64) - 1


def _noisy(seed, size):
    return random.Random(seed).randbytes(size)


def _instruction(**kwargs):
    base = dict(
        protocol_version=2,
        old_num=3,
        new_num=4,
        ack_num=7,
        throwaway_num=1,
        diff=b"hello",
        chaff=b"xy",
    )
    base.update(kwargs)
    return Instruction(**base)


def test_fragment_header_layout():
    frag = Fragment(id=1, fragment_num=2, final=True, contents=b"ab")
    assert frag.to_bytes() == b"\x00" * 7 + b"\x01" + b"\x80\x02" + b"ab"


def test_fragment_round_trip():
    frag = Fragment(id=123456789, fragment_num=5, final=False, contents=b"payload")
    assert Fragment.from_bytes(frag.to_bytes()) == frag


def test_fragment_header_length():
    frag = Fragment(id=9, fragment_num=0, final=True, contents=b"")
    assert len(frag.to_bytes()) == FRAG_HEADER_LEN


def test_fragment_too_short():
    with pytest.raises(ValueError):
        Fragment.from_bytes(b"\x00" * (FRAG_HEADER_LEN - 1))


def test_fragment_number_limit():
    with pytest.raises(ValueError):
        Fragment(id=1, fragment_num=0x8000, final=False, contents=b"").to_bytes()


def test_instruction_round_trip():
    inst = _instruction(old_num=U64, new_num=U64)
    assert Instruction.from_bytes(inst.to_bytes()) == inst


def test_instruction_defaults_round_trip():
    assert Instruction.from_bytes(Instruction().to_bytes()) == Instruction()


def test_instruction_rejects_truncated():
    data = _instruction().to_bytes()
    with pytest.raises(ValueError):
        Instruction.from_bytes(data[:-1])


def test_single_fragment_reassembly():
    inst = _instruction()
    fragments = Fragmenter().make_fragments(inst, 1000)
    assert len(fragments) == 1
    assert fragments[0].final
    assembly = FragmentAssembly()
    wire = Fragment.from_bytes(fragments[0].to_bytes())
    assert assembly.add_fragment(wire) is True
    assert assembly.get_assembly() == inst


def test_multi_fragment_out_of_order():
    inst = _instruction(diff=_noisy(1, 600))
    mtu = 100
    fragments = Fragmenter().make_fragments(inst, mtu)
    assert len(fragments) > 1
    assert all(len(f.to_bytes()) <= mtu for f in fragments)
    assert [f.final for f in fragments].count(True) == 1
    assert fragments[-1].final
    assembly = FragmentAssembly()
    results = [assembly.add_fragment(f) for f in reversed(fragments)]
    assert results[-1] is True
    assert not any(results[:-1])
    assert assembly.get_assembly() == inst


def test_duplicate_fragment_ignored():
    inst = _instruction(diff=_noisy(2, 400))
    fragments = Fragmenter().make_fragments(inst, 100)
    assembly = FragmentAssembly()
    assert assembly.add_fragment(fragments[0]) is False
    assert assembly.add_fragment(fragments[0]) is False
    for frag in fragments[1:]:
        done = assembly.add_fragment(frag)
    assert done is True
    assert assembly.get_assembly() == inst


def test_conflicting_duplicate_rejected():
    assembly = FragmentAssembly()
    assembly.add_fragment(Fragment(id=5, fragment_num=0, final=False, contents=b"a"))
    with pytest.raises(ValueError):
        assembly.add_fragment(
            Fragment(id=5, fragment_num=0, final=False, contents=b"b")
        )


def test_incomplete_assembly_rejected():
    assembly = FragmentAssembly()
    assert assembly.add_fragment(
        Fragment(id=5, fragment_num=1, final=True, contents=b"a")
    ) is False
    with pytest.raises(ValueError):
        assembly.get_assembly()


def test_new_id_discards_partial():
    first = _instruction(diff=_noisy(3, 400))
    second = _instruction(new_num=5, diff=b"short")
    fragmenter = Fragmenter()
    partial = fragmenter.make_fragments(first, 100)
    complete = fragmenter.make_fragments(second, 100)
    assert partial[0].id != complete[0].id
    assembly = FragmentAssembly()
    assembly.add_fragment(partial[0])
    for frag in complete:
        done = assembly.add_fragment(frag)
    assert done is True
    assert assembly.get_assembly() == second


def test_instruction_id_stable_for_identical_instruction():
    fragmenter = Fragmenter()
    inst = _instruction()
    first = fragmenter.make_fragments(inst, 500)
    second = fragmenter.make_fragments(inst, 500)
    assert first[0].id == second[0].id


def test_instruction_id_changes_with_ack_or_mtu():
    fragmenter = Fragmenter()
    first = fragmenter.make_fragments(_instruction(), 500)
    second = fragmenter.make_fragments(_instruction(ack_num=8), 500)
    third = fragmenter.make_fragments(_instruction(ack_num=8), 400)
    assert second[0].id == first[0].id + 1
    assert third[0].id == second[0].id + 1


def test_same_transition_different_diff_rejected():
    fragmenter = Fragmenter()
    fragmenter.make_fragments(_instruction(), 500)
    with pytest.raises(ValueError):
        fragmenter.make_fragments(_instruction(diff=b"other"), 500)


def test_last_ack_sent():
    fragmenter = Fragmenter()
    assert fragmenter.last_ack_sent() == 0
    fragmenter.make_fragments(_instruction(ack_num=U64), 500)
    assert fragmenter.last_ack_sent() == U64


def test_mtu_too_small():
    with pytest.raises(ValueError):
        Fragmenter().make_fragments(_instruction(), FRAG_HEADER_LEN)