#!/usr/bin/env python3
"""Encode a JSON pack description (or the demo pack) into a .bin image.

Every image is decoded again before it is written; ``--expect`` compares the
result against an image taken from a device and names the first field that
differs.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Optional, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from samplepack.decoder import decode_pack  # noqa: E402
from samplepack.demo import demo_pack  # noqa: E402
from samplepack.encoder import encode_pack  # noqa: E402
from samplepack.json_spec import load_pack_spec  # noqa: E402
from samplepack.model import SamplePack  # noqa: E402
from samplepack.regions import first_difference  # noqa: E402
from samplepack.size import FIXED_PREFIX_SIZE, encoded_size  # noqa: E402


def _summary(pack: SamplePack, data: bytes) -> str:
    loops = [loop for page in pack.pages for _, loop in page.present_loops()]
    used_pages = sum(1 for page in pack.pages if any(True for _ in page.present_loops()))
    events = sum(len(loop.events) for loop in loops)
    return (
        f"pages={used_pages} loops={len(loops)} events={events} "
        f"loop_data={len(data) - FIXED_PREFIX_SIZE}B"
    )


def _select_pack(args: argparse.Namespace) -> Tuple[SamplePack, Optional[Path]]:
    if args.demo:
        return demo_pack(), args.output
    spec = load_pack_spec(args.spec)
    return spec.pack, args.output if args.output is not None else spec.output


def _verify(pack: SamplePack, data: bytes) -> None:
    if len(data) != encoded_size(pack):
        raise ValueError(
            f"encoded size {len(data)} disagrees with size query {encoded_size(pack)}"
        )
    if decode_pack(data, strict=True) != pack:
        raise ValueError("encoded image does not decode back to the same pack")


def _matches_expected(data: bytes, expect_path: Path) -> bool:
    expected = expect_path.read_bytes()
    diff = first_difference(expected, data)
    if diff is None:
        print(f"expect match: yes  file={expect_path}")
        return True
    built = "EOF" if diff.right is None else f"0x{diff.right:02X}"
    wanted = "EOF" if diff.left is None else f"0x{diff.left:02X}"
    print("expect match: no")
    print(f"  built {len(data)}B, expected {len(expected)}B ({expect_path})")
    print(f"  first diff in {diff.region} @0x{diff.offset:04X}: built={built} expected={wanted}")
    return False


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Build a sample-pack .bin image")
    parser.add_argument("spec", type=Path, nargs="?", help="JSON pack description")
    parser.add_argument("--demo", action="store_true", help="Build the factory demo pack")
    parser.add_argument("-o", "--output", type=Path, help="Output path (overrides spec output)")
    parser.add_argument("--dry-run", action="store_true", help="Encode and verify only")
    parser.add_argument("--expect", type=Path, help="Reference .bin to compare against")
    args = parser.parse_args(argv)

    if args.demo == (args.spec is not None):
        parser.error("pass exactly one of SPEC or --demo")

    try:
        pack, out_path = _select_pack(args)
        data = encode_pack(pack)
    except ValueError as exc:
        print(f"ERR  {args.spec or 'demo'}: {exc}")
        return 1
    if not args.dry_run and out_path is None:
        parser.error("no output path: set \"output\" in the description or pass -o")

    _verify(pack, data)
    matched = True
    if args.expect is not None:
        matched = _matches_expected(data, args.expect.expanduser().resolve())

    if args.dry_run:
        print(f"dry-run OK: size={len(data)}B {_summary(pack, data)}")
    else:
        out_path = out_path.expanduser().resolve()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(data)
        print(f"Wrote {len(data)} bytes -> {out_path}")
        print(f"  {_summary(pack, data)}")

    return 0 if matched else 2


if __name__ == "__main__":
    raise SystemExit(main())
