"""Factory demo pack: a drum groove on page 1 and two short beats on page 2.

The full factory groove page fills all 15 slots; only its first loop is kept
here.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from .model import (
    EMPTY_SLOT,
    LOOPS_PER_PAGE,
    LoopData,
    NoteEvent,
    NoteEventTime,
    Page,
    SamplePack,
)

DEMO_RESERVED = 0xFFFFFFFF
GROOVE_PAGE_ID = 0xDEAD
BEATS_PAGE_ID = 0xBEEF

# (tick, note, state, velocity); GM kick 36, snare 38, closed hat 42, open hat 46
GROOVE_4_BEAT = [
    (0, 36, 1, 99), (0, 42, 1, 99), (4, 42, 0, 99), (12, 36, 0, 99),
    (12, 42, 1, 99), (16, 42, 0, 99), (24, 42, 1, 99), (24, 38, 1, 99),
    (28, 42, 0, 99), (28, 38, 0, 99), (36, 42, 1, 99), (40, 42, 0, 99),
    (42, 36, 1, 99), (46, 36, 0, 99), (48, 42, 1, 99), (52, 42, 0, 99),
    (54, 36, 1, 99), (58, 36, 0, 99), (60, 36, 1, 99), (60, 42, 1, 99),
    (64, 42, 0, 99), (72, 36, 0, 99), (72, 38, 1, 99), (72, 42, 1, 99),
    (76, 42, 0, 99), (84, 38, 0, 99), (84, 42, 1, 99), (88, 42, 0, 99),
    (90, 46, 1, 99), (94, 46, 0, 99),
]

BEAT_2_BEAT = [
    (0, 42, 1, 59), (0, 36, 1, 81), (12, 42, 0, 64), (12, 36, 0, 64),
    (12, 42, 1, 81), (24, 42, 0, 64), (24, 42, 1, 59), (24, 38, 1, 81),
    (24, 36, 1, 81), (36, 42, 0, 64), (36, 38, 0, 64), (36, 36, 0, 64),
    (36, 42, 1, 81), (48, 42, 0, 64),
]

BEAT_4_BEAT = [
    (0, 42, 1, 81), (0, 36, 1, 81), (12, 42, 0, 64), (12, 36, 0, 64),
    (12, 42, 1, 81), (12, 36, 1, 81), (24, 42, 0, 64), (24, 36, 0, 64),
    (24, 42, 1, 81), (24, 38, 1, 81), (36, 42, 0, 64), (36, 38, 0, 64),
    (36, 42, 1, 81), (36, 38, 1, 81), (48, 42, 0, 64), (48, 38, 0, 64),
    (48, 42, 1, 81), (48, 36, 1, 81), (60, 42, 0, 64), (60, 36, 0, 64),
    (60, 42, 1, 81), (72, 42, 0, 64), (72, 42, 1, 81), (72, 38, 1, 81),
    (84, 42, 0, 64), (84, 38, 0, 64), (84, 42, 1, 81), (96, 42, 0, 64),
]


def loop_from_rows(length_beats: int, rows: Iterable[Tuple[int, int, int, int]]) -> LoopData:
    """Build a loop from ``(tick, note, state, velocity)`` rows."""

    return LoopData(
        length_beats=length_beats,
        events=[
            NoteEventTime(tick, NoteEvent(note=note, state=state, velocity=velocity))
            for tick, note, state, velocity in rows
        ],
    )


def _page(page_id: int, *loops: LoopData) -> Page:
    slots = list(loops) + [EMPTY_SLOT] * (LOOPS_PER_PAGE - len(loops))
    return Page(id=page_id, loops=slots)


def demo_pack() -> SamplePack:
    pack = SamplePack(
        reserved0=DEMO_RESERVED,
        reserved1=DEMO_RESERVED,
        reserved2=DEMO_RESERVED,
        reserved3=DEMO_RESERVED,
    )
    pack.pages[1] = _page(GROOVE_PAGE_ID, loop_from_rows(4, GROOVE_4_BEAT))
    pack.pages[2] = _page(
        BEATS_PAGE_ID,
        loop_from_rows(2, BEAT_2_BEAT),
        loop_from_rows(4, BEAT_4_BEAT),
    )
    return pack
