"""Name the field of a sample-pack image that a byte offset falls in.

Used by the tools to report where two images first disagree, e.g.
``offset entry page 2 slot 14`` or ``loop data page 1 slot 0 event 3 tick``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .decoder import OFFSET_TABLE_START, read_offset_table
from .errors import BufferUnderflowError
from .model import LOOPS_PER_PAGE
from .size import EVENT_SIZE, FIXED_PREFIX_SIZE, HEADER_SIZE, LOOP_HEADER_SIZE

EVENT_FIELDS = ("note", "state/velocity", "tick", "tick")


@dataclass(frozen=True)
class Difference:
    offset: int
    left: Optional[int]  # None when ``left`` ends before ``offset``
    right: Optional[int]
    region: str


def _owning_slot(offsets: List[Optional[int]], rel: int) -> Optional[tuple[int, int]]:
    """Return ``(table_index, start)`` of the loop whose record covers ``rel``."""

    best = None
    for index, start in enumerate(offsets):
        if start is None or start > rel:
            continue
        if best is None or start > best[1]:
            best = (index, start)
    return best


def describe_offset(data: bytes, offset: int) -> str:
    if offset < HEADER_SIZE:
        return f"header word {offset // 4}"
    if offset < OFFSET_TABLE_START:
        return f"page id {(offset - HEADER_SIZE) // 2}"
    if offset < FIXED_PREFIX_SIZE:
        page, slot = divmod((offset - OFFSET_TABLE_START) // 2, LOOPS_PER_PAGE)
        return f"offset entry page {page} slot {slot}"

    rel = offset - FIXED_PREFIX_SIZE
    try:
        owner = _owning_slot(read_offset_table(data), rel)
    except BufferUnderflowError:
        owner = None
    if owner is None:
        return f"loop data +0x{rel:04X}"

    index, start = owner
    page, slot = divmod(index, LOOPS_PER_PAGE)
    within = rel - start
    if within == 0:
        field = "length_beats"
    elif within == 1:
        field = "event count"
    else:
        event, byte = divmod(within - LOOP_HEADER_SIZE, EVENT_SIZE)
        field = f"event {event} {EVENT_FIELDS[byte]}"
    return f"loop data page {page} slot {slot} {field}"


def first_difference(left: bytes, right: bytes) -> Optional[Difference]:
    """Locate the first byte where two images differ, or ``None`` if equal.

    The region is named from ``left``'s offset table unless ``left`` is the
    shorter image and the difference lies past its end.
    """
    limit = min(len(left), len(right))
    offset = next((i for i in range(limit) if left[i] != right[i]), None)
    if offset is None:
        if len(left) == len(right):
            return None
        offset = limit
    source = left if offset < len(left) else right
    return Difference(
        offset=offset,
        left=left[offset] if offset < len(left) else None,
        right=right[offset] if offset < len(right) else None,
        region=describe_offset(source, offset),
    )
