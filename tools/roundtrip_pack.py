#!/usr/bin/env python3
"""Decode and re-encode sample-pack images, reporting any field that changes.

Accepts files, directories (every ``*.bin`` inside) and glob patterns.
"""

from __future__ import annotations

import argparse
import glob
from pathlib import Path
import sys
from typing import Iterable, List

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from samplepack.decoder import decode_pack  # noqa: E402
from samplepack.encoder import encode_pack  # noqa: E402
from samplepack.regions import first_difference  # noqa: E402


def expand_targets(items: Iterable[str]) -> List[Path]:
    targets: List[Path] = []
    for item in items:
        path = Path(item)
        if path.is_dir():
            found = sorted(path.glob("*.bin"))
        elif path.exists():
            found = [path]
        else:
            found = sorted(Path(p) for p in glob.glob(item, recursive=True))
        for candidate in found:
            if candidate not in targets:
                targets.append(candidate)
    return targets


def _byte(value: int | None) -> str:
    return "EOF" if value is None else f"0x{value:02X}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Round-trip sample-pack .bin files through decode_pack/encode_pack."
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Files, directories or glob patterns (quote wildcards).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject bytes after the last loop instead of ignoring them.",
    )
    args = parser.parse_args(argv)

    targets = expand_targets(args.paths)
    if not targets:
        parser.error("nothing to check: no .bin files matched")

    failures = 0
    for path in targets:
        data = path.read_bytes()
        try:
            pack = decode_pack(data, strict=args.strict)
            rebuilt = encode_pack(pack)
        except ValueError as exc:
            failures += 1
            print(f"ERR  {path}: {exc}")
            continue

        diff = first_difference(data, rebuilt)
        if diff is None:
            loops = sum(len(list(page.present_loops())) for page in pack.pages)
            print(f"OK   {path} ({loops} loops, {len(data)} bytes)")
            continue

        failures += 1
        print(
            f"FAIL {path}: {diff.region} @0x{diff.offset:04X} "
            f"file={_byte(diff.left)} rebuilt={_byte(diff.right)}"
        )

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
