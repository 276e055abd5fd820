"""In-memory model of a sample pack.

A pack is 4 reserved u32 words followed by exactly 10 pages; each page has a
u16 id and exactly 15 loop slots.  The page and slot counts are not stored in
the wire format, so the firmware must be built with the same pair.  Changing
either constant breaks every device in the field until it is reflashed.

Ticks run at 24 per beat (MIDI clock resolution).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Tuple, Union

TICKS_PER_BEAT = 24
NUM_PAGES = 10
LOOPS_PER_PAGE = 15
NUM_SLOTS = NUM_PAGES * LOOPS_PER_PAGE

NOTE_MASK = 0x7F
VELOCITY_MASK = 0x7F
STATE_OFF = 0
STATE_ON = 1

MAX_EVENTS_PER_LOOP = 0xFF
MAX_TICK = 0xFFFF
MAX_LENGTH_BEATS = 0xFF

EMPTY_PAGE_ID = 0xFFFF
DEFAULT_RESERVED = 0xFFFFFFFF


@dataclass(frozen=True)
class NoteEvent:
    note: int  # 7-bit MIDI note
    state: int  # 1 = on, 0 = off
    velocity: int  # 7-bit


class NoteEventTime(NamedTuple):
    tick: int  # offset from loop start, 24 per beat
    event: NoteEvent


@dataclass
class LoopData:
    length_beats: int
    events: List[NoteEventTime] = field(default_factory=list)

    @property
    def length_ticks(self) -> int:
        return self.length_beats * TICKS_PER_BEAT


@dataclass(frozen=True)
class EmptySlot:
    """Marker for a slot that holds no loop.

    Distinct from a present ``LoopData`` with no events, which still costs two
    bytes on the wire.
    """

    def __repr__(self) -> str:
        return "EMPTY_SLOT"


EMPTY_SLOT = EmptySlot()

LoopSlot = Union[LoopData, EmptySlot]


def is_empty_slot(slot: LoopSlot) -> bool:
    return isinstance(slot, EmptySlot)


@dataclass
class Page:
    id: int
    loops: List[LoopSlot] = field(
        default_factory=lambda: [EMPTY_SLOT] * LOOPS_PER_PAGE
    )

    @classmethod
    def empty(cls, page_id: int = EMPTY_PAGE_ID) -> "Page":
        return cls(id=page_id)

    def present_loops(self) -> Iterator[Tuple[int, LoopData]]:
        for slot_index, slot in enumerate(self.loops):
            if not is_empty_slot(slot):
                yield slot_index, slot


@dataclass
class SamplePack:
    reserved0: int = DEFAULT_RESERVED
    reserved1: int = DEFAULT_RESERVED
    reserved2: int = DEFAULT_RESERVED
    reserved3: int = DEFAULT_RESERVED
    pages: List[Page] = field(
        default_factory=lambda: [Page.empty() for _ in range(NUM_PAGES)]
    )

    @classmethod
    def empty(cls) -> "SamplePack":
        return cls()

    @property
    def reserved(self) -> Tuple[int, int, int, int]:
        return (self.reserved0, self.reserved1, self.reserved2, self.reserved3)

    def slot(self, page_index: int, slot_index: int) -> LoopSlot:
        return self.pages[page_index].loops[slot_index]


def iter_slots(pack: SamplePack) -> Iterator[Tuple[int, int, LoopSlot]]:
    """Yield ``(page_index, slot_index, slot)`` in wire order (page-major)."""

    for page_index, page in enumerate(pack.pages):
        for slot_index, slot in enumerate(page.loops):
            yield page_index, slot_index, slot
