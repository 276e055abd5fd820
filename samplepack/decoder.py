"""Decode the flat sample-pack layout back into a ``SamplePack``.

Loops are rebuilt by reading the data segment front to back in the same
page-major order the encoder wrote them; the offset table is only consulted
for presence (0xFFFF = absent).  ``read_loop_at`` is the other access path:
it jumps straight to a loop through its offset, the way a firmware reader
with no room for a full decode would.
"""

from __future__ import annotations

from typing import List, Optional

from .bytebuf import ByteCursor
from .errors import BufferUnderflowError, SamplePackError
from .model import (
    LOOPS_PER_PAGE,
    NOTE_MASK,
    NUM_PAGES,
    NUM_SLOTS,
    VELOCITY_MASK,
    EMPTY_SLOT,
    LoopData,
    LoopSlot,
    NoteEvent,
    NoteEventTime,
    Page,
    SamplePack,
)
from .size import ABSENT_OFFSET, FIXED_PREFIX_SIZE, HEADER_SIZE, PAGE_ID_TABLE_SIZE

OFFSET_TABLE_START = HEADER_SIZE + PAGE_ID_TABLE_SIZE


def unpack_state_velocity(packed: int) -> tuple[int, int]:
    return (packed >> 7) & 0x01, packed & VELOCITY_MASK


def decode_loop(cursor: ByteCursor) -> LoopData:
    length_beats = cursor.pop_u8()
    count = cursor.pop_u8()
    events: List[NoteEventTime] = []
    for _ in range(count):
        note = cursor.pop_u8() & NOTE_MASK
        state, velocity = unpack_state_velocity(cursor.pop_u8())
        tick = cursor.pop_u16()
        events.append(NoteEventTime(tick, NoteEvent(note=note, state=state, velocity=velocity)))
    return LoopData(length_beats=length_beats, events=events)


def _read_presence(cursor: ByteCursor) -> List[bool]:
    return [cursor.pop_u16() != ABSENT_OFFSET for _ in range(NUM_SLOTS)]


def decode_pack(data: bytes, *, strict: bool = False) -> SamplePack:
    """Decode ``data`` into a new ``SamplePack``.

    Parameters
    ----------
    data : bytes
        A buffer produced by ``encode_pack`` (or the device).
    strict : bool
        Reject bytes left over after the last loop.  Off by default, in
        which case anything past the last loop is ignored.

    Raises ``BufferUnderflowError`` if the buffer ends early; no partially
    filled pack is returned.
    """
    cursor = ByteCursor(data)
    reserved = [cursor.pop_u32() for _ in range(4)]
    page_ids = [cursor.pop_u16() for _ in range(NUM_PAGES)]
    present = _read_presence(cursor)

    pages: List[Page] = []
    for page_index, page_id in enumerate(page_ids):
        loops: List[LoopSlot] = []
        for slot_index in range(LOOPS_PER_PAGE):
            if not present[page_index * LOOPS_PER_PAGE + slot_index]:
                loops.append(EMPTY_SLOT)
                continue
            try:
                loops.append(decode_loop(cursor))
            except BufferUnderflowError as exc:
                raise BufferUnderflowError(
                    f"page {page_index} slot {slot_index}: {exc}"
                ) from exc
        pages.append(Page(id=page_id, loops=loops))

    if strict and cursor.remaining():
        raise SamplePackError(
            f"{cursor.remaining()} trailing bytes after loop data at offset {cursor.tell()}"
        )

    return SamplePack(
        reserved0=reserved[0],
        reserved1=reserved[1],
        reserved2=reserved[2],
        reserved3=reserved[3],
        pages=pages,
    )


def read_offset_table(data: bytes) -> List[Optional[int]]:
    """Return the 150 loop offsets in wire order, ``None`` for absent slots."""

    cursor = ByteCursor(data)
    cursor.seek(OFFSET_TABLE_START)
    offsets: List[Optional[int]] = []
    for _ in range(NUM_SLOTS):
        word = cursor.pop_u16()
        offsets.append(None if word == ABSENT_OFFSET else word)
    return offsets


def read_loop_at(data: bytes, page_index: int, slot_index: int) -> Optional[LoopData]:
    """Decode one loop by seeking through the offset table.

    Returns ``None`` for an empty slot.
    """
    if not (0 <= page_index < NUM_PAGES):
        raise IndexError(f"page_index must be 0-{NUM_PAGES - 1}, got {page_index}")
    if not (0 <= slot_index < LOOPS_PER_PAGE):
        raise IndexError(f"slot_index must be 0-{LOOPS_PER_PAGE - 1}, got {slot_index}")

    offset = read_offset_table(data)[page_index * LOOPS_PER_PAGE + slot_index]
    if offset is None:
        return None
    cursor = ByteCursor(data)
    cursor.seek(FIXED_PREFIX_SIZE + offset)
    return decode_loop(cursor)
