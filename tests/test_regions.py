from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from samplepack.demo import demo_pack  # noqa: E402
from samplepack.encoder import encode_pack  # noqa: E402
from samplepack.regions import describe_offset, first_difference  # noqa: E402


@pytest.fixture(scope="module")
def demo_bytes() -> bytes:
    return encode_pack(demo_pack())


@pytest.mark.parametrize(
    "offset, region",
    [
        (0, "header word 0"),
        (15, "header word 3"),
        (16, "page id 0"),
        (35, "page id 9"),
        (36, "offset entry page 0 slot 0"),
        (36 + 2 * 29, "offset entry page 1 slot 14"),
        (335, "offset entry page 9 slot 14"),
        (336, "loop data page 1 slot 0 length_beats"),
        (337, "loop data page 1 slot 0 event count"),
        (338, "loop data page 1 slot 0 event 0 note"),
        (339, "loop data page 1 slot 0 event 0 state/velocity"),
        (341, "loop data page 1 slot 0 event 0 tick"),
        (336 + 122, "loop data page 2 slot 0 length_beats"),
        (336 + 180 + 2 + 4 * 27 + 2, "loop data page 2 slot 1 event 27 tick"),
    ],
)
def test_describe_offset(demo_bytes: bytes, offset: int, region: str) -> None:
    assert describe_offset(demo_bytes, offset) == region


def test_describe_offset_without_offset_table() -> None:
    assert describe_offset(b"\x00" * 40, 400) == "loop data +0x0040"


def test_first_difference(demo_bytes: bytes) -> None:
    assert first_difference(demo_bytes, demo_bytes) is None

    changed = bytearray(demo_bytes)
    changed[18] ^= 0x01
    diff = first_difference(demo_bytes, bytes(changed))
    assert diff is not None
    assert (diff.offset, diff.region) == (18, "page id 1")
    assert (diff.left, diff.right) == (0xAD, 0xAC)


def test_first_difference_on_length(demo_bytes: bytes) -> None:
    diff = first_difference(demo_bytes, demo_bytes[:-2])
    assert diff is not None
    assert diff.offset == len(demo_bytes) - 2
    assert diff.right is None
    assert diff.region == "loop data page 2 slot 1 event 27 tick"

    diff = first_difference(demo_bytes, demo_bytes + b"\x00")
    assert diff is not None
    assert (diff.left, diff.right) == (None, 0)
