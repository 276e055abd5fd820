"""Encode/decode behaviour of the sample-pack wire format."""

from pathlib import Path
import random
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from samplepack.decoder import decode_pack  # noqa: E402
from samplepack.demo import (  # noqa: E402
    BEAT_2_BEAT,
    BEAT_4_BEAT,
    GROOVE_4_BEAT,
    demo_pack,
)
from samplepack.encoder import encode_loop, encode_pack  # noqa: E402
from samplepack.model import (  # noqa: E402
    EMPTY_SLOT,
    LOOPS_PER_PAGE,
    NUM_PAGES,
    LoopData,
    NoteEvent,
    NoteEventTime,
    Page,
    SamplePack,
    is_empty_slot,
    iter_slots,
)
from samplepack.size import FIXED_PREFIX_SIZE, encoded_size  # noqa: E402


def _random_loop(rng: random.Random) -> LoopData:
    count = rng.randint(0, 40)
    ticks = sorted(rng.randint(0, 0xFFFF) for _ in range(count))
    return LoopData(
        length_beats=rng.randint(0, 255),
        events=[
            NoteEventTime(
                tick,
                NoteEvent(
                    note=rng.randint(0, 127),
                    state=rng.randint(0, 1),
                    velocity=rng.randint(0, 127),
                ),
            )
            for tick in ticks
        ],
    )


def _random_pack(seed: int, fill: float = 0.3) -> SamplePack:
    rng = random.Random(seed)
    pages = []
    for _ in range(NUM_PAGES):
        loops = [
            _random_loop(rng) if rng.random() < fill else EMPTY_SLOT
            for _ in range(LOOPS_PER_PAGE)
        ]
        pages.append(Page(id=rng.randint(0, 0xFFFF), loops=loops))
    return SamplePack(
        reserved0=rng.randint(0, 0xFFFFFFFF),
        reserved1=rng.randint(0, 0xFFFFFFFF),
        reserved2=rng.randint(0, 0xFFFFFFFF),
        reserved3=rng.randint(0, 0xFFFFFFFF),
        pages=pages,
    )


@pytest.mark.parametrize("seed", range(8))
def test_roundtrip_random_packs(seed: int) -> None:
    pack = _random_pack(seed)
    data = encode_pack(pack)
    assert decode_pack(data, strict=True) == pack
    assert len(data) == encoded_size(pack)


def test_roundtrip_empty_pack() -> None:
    pack = SamplePack.empty()
    decoded = decode_pack(encode_pack(pack))
    assert decoded == pack
    assert all(is_empty_slot(slot) for _, _, slot in iter_slots(decoded))


def test_present_loop_without_events_is_not_empty_slot() -> None:
    pack = SamplePack.empty()
    pack.pages[4].loops[7] = LoopData(length_beats=1)
    decoded = decode_pack(encode_pack(pack))
    slot = decoded.pages[4].loops[7]
    assert not is_empty_slot(slot)
    assert slot == LoopData(length_beats=1, events=[])


def test_encode_is_deterministic() -> None:
    pack = _random_pack(42)
    assert encode_pack(pack) == encode_pack(pack)


def test_wire_layout() -> None:
    pack = SamplePack(reserved0=1, reserved1=2, reserved2=3, reserved3=0xFFFFFFFF)
    pack.pages[0].id = 0x1234
    pack.pages[0].loops[1] = LoopData(
        length_beats=4,
        events=[
            NoteEventTime(0, NoteEvent(note=60, state=1, velocity=100)),
            NoteEventTime(300, NoteEvent(note=60, state=0, velocity=0)),
        ],
    )
    pack.pages[3].loops[2] = LoopData(length_beats=1)

    data = encode_pack(pack)

    assert len(data) == FIXED_PREFIX_SIZE + 10 + 2
    assert data[0:16] == bytes.fromhex("01000000 02000000 03000000 FFFFFFFF")
    assert data[16:18] == b"\x34\x12"
    assert data[18:36] == b"\xff\xff" * 9
    # offset table: page 0 slot 0 absent, slot 1 at 0, page 3 slot 2 at 10
    assert data[36:38] == b"\xff\xff"
    assert data[38:40] == b"\x00\x00"
    entry = 36 + 2 * (3 * LOOPS_PER_PAGE + 2)
    assert data[entry : entry + 2] == b"\x0a\x00"
    assert data[FIXED_PREFIX_SIZE:] == bytes.fromhex("04 02 3C E4 0000 3C 00 2C01 01 00")


@pytest.mark.parametrize(
    "value, expected",
    [(0, 0), (127, 127), (128, 0), (255, 127)],
)
def test_note_and_velocity_are_masked_to_7_bits(value: int, expected: int) -> None:
    pack = SamplePack.empty()
    pack.pages[0].loops[0] = LoopData(
        length_beats=1,
        events=[NoteEventTime(0, NoteEvent(note=value, state=1, velocity=value))],
    )
    decoded = decode_pack(encode_pack(pack))
    event = decoded.pages[0].loops[0].events[0].event
    assert event.note == expected
    assert event.velocity == expected
    assert event.state == 1


def test_state_bit_does_not_disturb_velocity() -> None:
    loop = LoopData(
        length_beats=1,
        events=[
            NoteEventTime(5, NoteEvent(note=1, state=1, velocity=127)),
            NoteEventTime(6, NoteEvent(note=1, state=0, velocity=127)),
        ],
    )
    assert encode_loop(loop) == bytes.fromhex("01 02 01 FF 0500 01 7F 0600")


@pytest.mark.parametrize("seed", range(5))
def test_sentinel_marks_exactly_the_empty_slots(seed: int) -> None:
    rng = random.Random(seed)
    pack = SamplePack.empty()
    chosen = set()
    for page_index in range(NUM_PAGES):
        for slot_index in range(LOOPS_PER_PAGE):
            if rng.random() < 0.5:
                chosen.add((page_index, slot_index))
                pack.pages[page_index].loops[slot_index] = _random_loop(rng)

    data = encode_pack(pack)
    decoded = decode_pack(data)
    present = {(p, s) for p, s, slot in iter_slots(decoded) if not is_empty_slot(slot)}
    assert present == chosen

    table = data[36:FIXED_PREFIX_SIZE]
    words = [int.from_bytes(table[i : i + 2], "little") for i in range(0, len(table), 2)]
    for index, word in enumerate(words):
        page_index, slot_index = divmod(index, LOOPS_PER_PAGE)
        if (page_index, slot_index) in chosen:
            assert word != 0xFFFF
        else:
            assert word == 0xFFFF


def test_offsets_track_loop_data_position() -> None:
    pack = _random_pack(7, fill=0.6)
    data = encode_pack(pack)
    expected = 0
    for page_index, slot_index, slot in iter_slots(pack):
        entry = 36 + 2 * (page_index * LOOPS_PER_PAGE + slot_index)
        word = int.from_bytes(data[entry : entry + 2], "little")
        if is_empty_slot(slot):
            continue
        assert word == expected
        expected += 2 + 4 * len(slot.events)


def test_last_slot_of_each_page_uses_its_own_presence_bit() -> None:
    pack = SamplePack.empty()
    pack.pages[1].loops[14] = LoopData(length_beats=2)
    pack.pages[2].loops[0] = LoopData(length_beats=3)
    decoded = decode_pack(encode_pack(pack))
    assert decoded == pack


# --- reference pack ---


def _rows(loop: LoopData) -> list:
    return [(t, e.note, e.state, e.velocity) for t, e in loop.events]


def test_reference_pack_roundtrip() -> None:
    pack = demo_pack()
    decoded = decode_pack(encode_pack(pack))

    assert decoded.reserved == (0xFFFFFFFF,) * 4
    assert [page.id for page in decoded.pages] == [0xFFFF, 0xDEAD, 0xBEEF] + [0xFFFF] * 7

    groove = decoded.pages[1].loops[0]
    assert groove.length_beats == 4
    assert _rows(groove) == GROOVE_4_BEAT
    assert all(is_empty_slot(slot) for slot in decoded.pages[1].loops[1:])

    short, long = decoded.pages[2].loops[:2]
    assert short.length_beats == 2
    assert _rows(short) == BEAT_2_BEAT
    assert long.length_beats == 4
    assert _rows(long) == BEAT_4_BEAT
    assert all(is_empty_slot(slot) for slot in decoded.pages[2].loops[2:])

    for page_index in [0] + list(range(3, NUM_PAGES)):
        assert all(is_empty_slot(slot) for slot in decoded.pages[page_index].loops)

    assert decoded == pack
