"""Convert between standard MIDI files and pack loops.

Loops run at 24 ticks per beat, so MIDI input is rescaled from its own
``ticks_per_beat``.  Both note_on and note_off become events; a note_on with
velocity 0 is an off event carrying the velocity of the matching on.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import mido

from .errors import FieldRangeError
from .model import (
    MAX_EVENTS_PER_LOOP,
    MAX_LENGTH_BEATS,
    MAX_TICK,
    STATE_OFF,
    STATE_ON,
    TICKS_PER_BEAT,
    LoopData,
    NoteEvent,
    NoteEventTime,
)


def _rescale(abs_tick: int, ticks_per_beat: int) -> int:
    return int(round(abs_tick * TICKS_PER_BEAT / ticks_per_beat))


def loop_from_midi(
    mid: mido.MidiFile,
    *,
    length_beats: Optional[int] = None,
    channel: Optional[int] = None,
) -> LoopData:
    """Flatten every track of ``mid`` into a single loop.

    Parameters
    ----------
    mid : mido.MidiFile
        Source file.  All tracks are merged.
    length_beats : int, optional
        Loop length.  Defaults to the beat after the last event (minimum 1).
    channel : int, optional
        Only take messages on this MIDI channel (0-15).
    """
    ticks_per_beat = mid.ticks_per_beat
    # (tick, track, order) keeps simultaneous events in file order
    collected: List[Tuple[int, int, int, NoteEvent]] = []
    held: Dict[Tuple[int, int], int] = {}

    for track_idx, track in enumerate(mid.tracks):
        abs_tick = 0
        for order, msg in enumerate(track):
            abs_tick += msg.time
            if msg.type not in ("note_on", "note_off"):
                continue
            if channel is not None and msg.channel != channel:
                continue
            key = (msg.channel, msg.note)
            if msg.type == "note_on" and msg.velocity > 0:
                held[key] = msg.velocity
                event = NoteEvent(note=msg.note, state=STATE_ON, velocity=msg.velocity)
            elif msg.type == "note_on":
                event = NoteEvent(note=msg.note, state=STATE_OFF, velocity=held.pop(key, 0))
            else:
                held.pop(key, None)
                event = NoteEvent(note=msg.note, state=STATE_OFF, velocity=msg.velocity)
            tick = _rescale(abs_tick, ticks_per_beat)
            collected.append((tick, track_idx, order, event))

    collected.sort(key=lambda item: (item[0], item[1], item[2]))
    if len(collected) > MAX_EVENTS_PER_LOOP:
        raise FieldRangeError(
            f"MIDI input has {len(collected)} note events; a loop holds {MAX_EVENTS_PER_LOOP}"
        )
    events = [NoteEventTime(tick, event) for tick, _, _, event in collected]
    if events and events[-1].tick > MAX_TICK:
        raise FieldRangeError(
            f"last event at tick {events[-1].tick} is past the 16-bit tick limit"
        )

    if length_beats is None:
        last_tick = events[-1].tick if events else 0
        length_beats = max(1, math.ceil(last_tick / TICKS_PER_BEAT))
    if not (0 <= length_beats <= MAX_LENGTH_BEATS):
        raise FieldRangeError(
            f"loop length {length_beats} beats does not fit in 8 bits"
        )
    return LoopData(length_beats=length_beats, events=events)


def load_midi_loop(
    path: Path | str,
    *,
    length_beats: Optional[int] = None,
    channel: Optional[int] = None,
) -> LoopData:
    mid = mido.MidiFile(str(path))
    return loop_from_midi(mid, length_beats=length_beats, channel=channel)


def loop_to_midi(loop: LoopData, *, channel: int = 0) -> mido.MidiFile:
    """Render ``loop`` as a single-track MIDI file at 24 ticks per beat."""

    mid = mido.MidiFile(ticks_per_beat=TICKS_PER_BEAT)
    track = mido.MidiTrack()
    mid.tracks.append(track)

    now = 0
    for tick, event in sorted(loop.events, key=lambda e: e.tick):
        msg_type = "note_on" if event.state == STATE_ON else "note_off"
        track.append(
            mido.Message(
                msg_type,
                channel=channel,
                note=event.note,
                velocity=event.velocity,
                time=tick - now,
            )
        )
        now = tick
    track.append(mido.MetaMessage("end_of_track", time=max(0, loop.length_ticks - now)))
    return mid
