"""Byte-size queries for the variable-length loop-data segment.

Nothing here builds a buffer; the numbers must match what ``encode_pack``
emits byte for byte.
"""

from __future__ import annotations

from .model import (
    LOOPS_PER_PAGE,
    NUM_PAGES,
    LoopSlot,
    Page,
    SamplePack,
    is_empty_slot,
)

HEADER_SIZE = 16  # 4 reserved u32 words
PAGE_ID_TABLE_SIZE = NUM_PAGES * 2
OFFSET_TABLE_SIZE = NUM_PAGES * LOOPS_PER_PAGE * 2
FIXED_PREFIX_SIZE = HEADER_SIZE + PAGE_ID_TABLE_SIZE + OFFSET_TABLE_SIZE  # 336

LOOP_HEADER_SIZE = 2  # length_beats + event count
EVENT_SIZE = 4  # note, state/velocity, u16 tick

ABSENT_OFFSET = 0xFFFF


def loop_byte_size(slot: LoopSlot) -> int:
    if is_empty_slot(slot):
        return 0
    return LOOP_HEADER_SIZE + EVENT_SIZE * len(slot.events)


def page_byte_size(page: Page) -> int:
    return sum(loop_byte_size(slot) for slot in page.loops)


def pack_byte_size(pack: SamplePack) -> int:
    """Length of the loop-data segment, excluding the fixed 336-byte prefix."""

    return sum(page_byte_size(page) for page in pack.pages)


def encoded_size(pack: SamplePack) -> int:
    return FIXED_PREFIX_SIZE + pack_byte_size(pack)


def fits_capacity(pack: SamplePack) -> bool:
    """Return True if every present loop starts below the 0xFFFF sentinel."""

    offset = 0
    for page in pack.pages:
        for slot in page.loops:
            if is_empty_slot(slot):
                continue
            if offset >= ABSENT_OFFSET:
                return False
            offset += loop_byte_size(slot)
    return True
