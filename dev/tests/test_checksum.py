"""
s3saveedit - Checksum Engine Tests

Known vectors and self-consistency for the section checksum.

Can be run standalone: python test_checksum.py
Or via main runner: python tests.py --codec
"""

import sys
from pathlib import Path

# Path setup
TESTS_DIR = Path(__file__).parent
SUITE_DIR = TESTS_DIR.parent.parent
SRC_DIR = SUITE_DIR / "src"

sys.path.insert(0, str(SRC_DIR))

from formats.s3save.checksum import (
    POLYNOMIAL, checksum, stored_checksum, strip_checksum, update_in_place, verify,
)


def test_single_word_with_carry():
    # 0x0001 shifts out a set bit, so only the polynomial remains
    assert checksum(b"\x00\x01\x00\x00") == POLYNOMIAL


def test_single_word_without_carry():
    assert checksum(b"\x00\x02\x00\x00") == 0x0001


def test_two_words():
    # 0x8810 ^ 0x0001 = 0x8811 -> carry, 0x4408 ^ 0x8810
    assert checksum(b"\x00\x01\x00\x01\xAA\xBB") == 0xCC18


def test_trailing_word_ignored():
    assert checksum(b"\x12\x34\x00\x00") == checksum(b"\x12\x34\xFF\xFF")


def test_zero_run_checksums_to_zero():
    assert checksum(bytes(84)) == 0
    assert verify(bytes(84))


def test_update_then_verify():
    for length in (2, 4, 52, 84):
        data = bytearray((i * 37 + 11) & 0xFF for i in range(length))
        assert verify(update_in_place(data)), f"length {length}"


def test_update_returns_same_buffer():
    data = bytearray(range(10))
    assert update_in_place(data) is data
    assert stored_checksum(data) == checksum(data)


def test_single_bit_flip_detected():
    data = update_in_place(bytearray(range(52)))
    data[10] ^= 0x01
    assert not verify(data)


def test_short_runs():
    assert not verify(b"")
    assert not verify(b"\x01")
    assert stored_checksum(b"\x01") == 0


def test_strip_checksum():
    data = update_in_place(bytearray(range(1, 11)))
    stripped = strip_checksum(data)
    assert stripped[:-2] == data[:-2]
    assert stripped[-2:] == b"\x00\x00"
    assert data[-2:] != b"\x00\x00"


TESTS = [
    test_single_word_with_carry,
    test_single_word_without_carry,
    test_two_words,
    test_trailing_word_ignored,
    test_zero_run_checksums_to_zero,
    test_update_then_verify,
    test_update_returns_same_buffer,
    test_single_bit_flip_detected,
    test_short_runs,
    test_strip_checksum,
]


def run_all_tests(results):
    results.run("CHECKSUM ENGINE", TESTS)


if __name__ == "__main__":
    from tests import TestResults
    standalone = TestResults()
    run_all_tests(standalone)
    sys.exit(0 if standalone.summary() else 1)
