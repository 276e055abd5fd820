#!/usr/bin/env python3
"""Print the layout of a sample-pack image."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from samplepack.decoder import decode_pack, read_offset_table  # noqa: E402
from samplepack.json_spec import pack_to_spec  # noqa: E402
from samplepack.model import LOOPS_PER_PAGE, STATE_ON, is_empty_slot  # noqa: E402
from samplepack.size import FIXED_PREFIX_SIZE, loop_byte_size  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect a sample-pack .bin file")
    parser.add_argument("path", type=Path, help="Path to .bin file")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Dump the pack as a JSON description instead of a summary",
    )
    parser.add_argument(
        "--events",
        action="store_true",
        help="List every event of every loop",
    )
    args = parser.parse_args(argv)

    data = args.path.read_bytes()
    try:
        pack = decode_pack(data)
        offsets = read_offset_table(data)
    except ValueError as exc:
        print(f"ERR  {args.path}: {exc}")
        return 1

    if args.json:
        print(json.dumps(pack_to_spec(pack), indent=2))
        return 0

    print(f"File: {args.path}")
    print(f"Size: {len(data)} bytes (prefix {FIXED_PREFIX_SIZE}, loop data {len(data) - FIXED_PREFIX_SIZE})")
    print("Reserved: " + " ".join(f"0x{w:08X}" for w in pack.reserved))
    for page_index, page in enumerate(pack.pages):
        present = sum(1 for _ in page.present_loops())
        print(f"Page {page_index}: id=0x{page.id:04X} loops={present}/{LOOPS_PER_PAGE}")
        for slot_index, slot in enumerate(page.loops):
            if is_empty_slot(slot):
                continue
            offset = offsets[page_index * LOOPS_PER_PAGE + slot_index]
            ons = sum(1 for _, ev in slot.events if ev.state == STATE_ON)
            print(
                f"  slot {slot_index:2d} @0x{offset:04X} beats={slot.length_beats} "
                f"events={len(slot.events)} (on={ons}) bytes={loop_byte_size(slot)}"
            )
            if args.events:
                for tick, ev in slot.events:
                    state = "on " if ev.state == STATE_ON else "off"
                    print(f"      t={tick:5d} {state} note={ev.note:3d} vel={ev.velocity:3d}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
