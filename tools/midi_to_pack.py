#!/usr/bin/env python3
"""Place a MIDI clip into one slot of a JSON pack description.

Examples
--------
    python tools/midi_to_pack.py groove.mid --spec packs/live.json --page 3 --slot 0
    python tools/midi_to_pack.py hats.mid --spec packs/live.json --page 3 --slot 1 --beats 2 --channel 9
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from samplepack.json_spec import PackSpec, dump_pack_spec, load_pack_spec  # noqa: E402
from samplepack.midi import load_midi_loop  # noqa: E402
from samplepack.model import LOOPS_PER_PAGE, NUM_PAGES, SamplePack  # noqa: E402
from samplepack.size import fits_capacity  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert a MIDI file into a loop inside a JSON pack description."
    )
    parser.add_argument("midi", type=Path, help="Input .mid file")
    parser.add_argument(
        "--spec",
        type=Path,
        required=True,
        help="JSON pack description to update (created if missing)",
    )
    parser.add_argument("--page", type=int, required=True, help=f"Page index 0-{NUM_PAGES - 1}")
    parser.add_argument("--slot", type=int, required=True, help=f"Slot index 0-{LOOPS_PER_PAGE - 1}")
    parser.add_argument("--beats", type=int, default=None, help="Loop length in beats")
    parser.add_argument("--channel", type=int, default=None, help="Only use this MIDI channel (0-15)")
    parser.add_argument("--page-id", type=lambda s: int(s, 0), default=None, help="Set the page id")
    args = parser.parse_args(argv)

    if not (0 <= args.page < NUM_PAGES):
        parser.error(f"--page must be 0-{NUM_PAGES - 1}")
    if not (0 <= args.slot < LOOPS_PER_PAGE):
        parser.error(f"--slot must be 0-{LOOPS_PER_PAGE - 1}")
    if args.page_id is not None and not (0 <= args.page_id <= 0xFFFF):
        parser.error("--page-id must fit in 16 bits")

    try:
        if args.spec.exists():
            spec = load_pack_spec(args.spec)
        else:
            spec = PackSpec(version=1, pack=SamplePack.empty())
        loop = load_midi_loop(args.midi, length_beats=args.beats, channel=args.channel)
    except ValueError as exc:
        print(f"ERR  {exc}")
        return 1

    pack = spec.pack
    page = pack.pages[args.page]
    page.loops[args.slot] = loop
    if args.page_id is not None:
        page.id = args.page_id
    if not fits_capacity(pack):
        print("ERR  pack loop data would reach the 0xFFFF offset limit")
        return 1

    out_path = dump_pack_spec(pack, args.spec, output=spec.output)
    print(
        f"OK   {args.midi} -> page {args.page} slot {args.slot}: "
        f"beats={loop.length_beats} events={len(loop.events)}"
    )
    print(f"Wrote {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
