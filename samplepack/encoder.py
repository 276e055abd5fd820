"""Encode a ``SamplePack`` into the flat byte layout the device loads.

Layout (all little-endian)::

    0x000  4 x u32   reserved header words
    0x010  10 x u16  page ids
    0x024  150 x u16 loop offsets into the loop-data segment, 0xFFFF = absent
    0x150  ...       loop-data segment

Each present loop in the data segment is::

    u8 length_beats, u8 count, count x [u8 note, u8 state<<7 | velocity, u16 tick]

Note and velocity are masked to 7 bits.  Nothing else is narrowed: ticks,
counts, ids and reserved words that do not fit raise ``FieldRangeError``.
"""

from __future__ import annotations

from .bytebuf import ByteBuilder
from .errors import CapacityExceededError, FieldRangeError, LayoutError
from .model import (
    LOOPS_PER_PAGE,
    MAX_EVENTS_PER_LOOP,
    NOTE_MASK,
    NUM_PAGES,
    STATE_OFF,
    STATE_ON,
    VELOCITY_MASK,
    LoopData,
    SamplePack,
    is_empty_slot,
    iter_slots,
)
from .size import ABSENT_OFFSET


def _require_int(value: int, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise FieldRangeError(f"{name} must be an integer, got {value!r}")
    return value


def pack_note_byte(note: int) -> int:
    return _require_int(note, "note") & NOTE_MASK


def pack_state_velocity(state: int, velocity: int) -> int:
    """Pack ``state`` into bit 7 and ``velocity`` (masked) into bits 0-6.

    A state outside {0, 1} would spill into the velocity bits, so it is
    rejected rather than masked.
    """

    if _require_int(state, "note state") not in (STATE_OFF, STATE_ON):
        raise FieldRangeError(f"note state must be 0 or 1, got {state}")
    return (state << 7) | (_require_int(velocity, "velocity") & VELOCITY_MASK)


def _write_loop(buf: ByteBuilder, loop: LoopData) -> None:
    count = len(loop.events)
    if count > MAX_EVENTS_PER_LOOP:
        raise FieldRangeError(
            f"too many events in one loop: {count} > {MAX_EVENTS_PER_LOOP}"
        )
    buf.push_u8(loop.length_beats)
    buf.push_u8(count)
    for tick, event in loop.events:
        buf.push_u8(pack_note_byte(event.note))
        buf.push_u8(pack_state_velocity(event.state, event.velocity))
        buf.push_u16(tick)


def encode_loop(loop: LoopData) -> bytes:
    """Encode a single loop record as it appears in the data segment."""

    buf = ByteBuilder()
    _write_loop(buf, loop)
    return buf.to_bytes()


def check_layout(pack: SamplePack) -> None:
    if len(pack.pages) != NUM_PAGES:
        raise LayoutError(
            f"sample pack must have {NUM_PAGES} pages, got {len(pack.pages)}"
        )
    for page_index, page in enumerate(pack.pages):
        if len(page.loops) != LOOPS_PER_PAGE:
            raise LayoutError(
                f"page {page_index} must have {LOOPS_PER_PAGE} loop slots, "
                f"got {len(page.loops)}"
            )
        for slot_index, slot in enumerate(page.loops):
            if not (is_empty_slot(slot) or isinstance(slot, LoopData)):
                raise LayoutError(
                    f"page {page_index} slot {slot_index} holds "
                    f"{type(slot).__name__}, expected LoopData or EMPTY_SLOT"
                )


def encode_pack(pack: SamplePack) -> bytes:
    check_layout(pack)

    out = ByteBuilder()
    for word in pack.reserved:
        out.push_u32(word)
    for page in pack.pages:
        out.push_u16(page.id)

    offsets = ByteBuilder()
    loop_data = ByteBuilder()
    for page_index, slot_index, slot in iter_slots(pack):
        if is_empty_slot(slot):
            offsets.push_u16(ABSENT_OFFSET)
            continue
        offset = len(loop_data)
        if offset >= ABSENT_OFFSET:
            raise CapacityExceededError(
                f"loop data reaches 0x{offset:X} bytes before page {page_index} "
                f"slot {slot_index}; offsets must stay below 0x{ABSENT_OFFSET:X}"
            )
        offsets.push_u16(offset)
        try:
            _write_loop(loop_data, slot)
        except FieldRangeError as exc:
            raise FieldRangeError(f"page {page_index} slot {slot_index}: {exc}") from exc

    out.append(offsets)
    out.append(loop_data)
    return out.to_bytes()
