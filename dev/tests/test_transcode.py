"""
s3saveedit - Platform Transcoder Tests

Format detection, per-platform round trips through decode/encode, PC record
layout transforms, the A.I.R. container and the error taxonomy.

Can be run standalone: python test_transcode.py
Or via main runner: python tests.py --codec
"""

import sys
from pathlib import Path

# Path setup
TESTS_DIR = Path(__file__).parent
SUITE_DIR = TESTS_DIR.parent.parent
SRC_DIR = SUITE_DIR / "src"

sys.path.insert(0, str(SRC_DIR))

from formats.s3save import (
    CanonicalSave, Character, CompetitionRow, DataWidth, EmeraldState, FormatUnrecognized,
    Game, NoValidSection, Platform, S3KSlot, S3Slot, SaveFormat, Section,
    UnsupportedCombination, decode, detect, detect_options, encode,
)
from formats.s3save.air import AirRecordParser, read_air, write_air
from formats.s3save.checksum import checksum, strip_checksum
from formats.s3save.constants import (
    AIR_SIZE, CONSOLE_SIZE, CP_STAGES, PC_SIZE, SECTION_LAYOUTS, STEAM_PREFIX, STEAM_SIZE,
)
from formats.s3save.sections import blank_section
from formats.s3save.transcode import (
    read_pc, reverse_competition_rows, swap_emerald_bytes, write_pc,
)
from utils.binary import ByteOrder, write_uint16_be

S3K_SLOT = S3KSlot(
    is_new=False, character=Character.KNUCKLES, emerald_count=3, zone=5, rings=0b101,
    emeralds=[EmeraldState.COLLECTED, EmeraldState.UPGRADED, EmeraldState.ABSENT,
              EmeraldState.COLLECTED] + [EmeraldState.ABSENT] * 4,
    lives=7, continues=2,
)
S3_SLOT = S3Slot(is_new=False, character=Character.TAILS, zone=4, last=3,
                 emerald_count=2, emeralds=0b101, rings=0x11)
CP_ROW = CompetitionRow(is_new=False, minutes=1, seconds=23, ticks=45, character=2)

# (platform, data width, byte order, filler, expected format, expected size)
TARGETS = [
    (Platform.CONSOLE, DataWidth.BYTE, ByteOrder.BIG_ENDIAN, 0x00,
     SaveFormat.CONSOLE_BYTE, CONSOLE_SIZE),
    (Platform.CONSOLE, DataWidth.WORD, ByteOrder.BIG_ENDIAN, 0x00,
     SaveFormat.CONSOLE_WORD_BE, CONSOLE_SIZE * 2),
    (Platform.CONSOLE, DataWidth.WORD, ByteOrder.LITTLE_ENDIAN, 0xFF,
     SaveFormat.CONSOLE_WORD_LE, CONSOLE_SIZE * 2),
    (Platform.PC, None, None, None, SaveFormat.PC, PC_SIZE),
    (Platform.STEAM, None, None, None, SaveFormat.STEAM, STEAM_SIZE),
    (Platform.AIR, None, None, None, SaveFormat.AIR, AIR_SIZE),
]


def make_save() -> CanonicalSave:
    save = CanonicalSave.blank()
    save.set_slot(Game.S3K, 0, S3K_SLOT)
    save.set_slot(Game.S3, 1, S3_SLOT)
    save.set_competition_row(2, 1, CP_ROW)
    return save


def _encode(save, platform, width, order, filler):
    return encode(save, platform, width, order, filler)


# ═══════════════════════════════════════════════════════════════════════════════
# DETECTION
# ═══════════════════════════════════════════════════════════════════════════════

def test_detect_each_target():
    for platform, width, order, filler, expected, size in TARGETS:
        raw = _encode(make_save(), platform, width, order, filler)
        assert len(raw) == size, f"{expected.value}: {len(raw)} bytes"
        assert detect(raw) is expected, f"{expected.value}: got {detect(raw).value}"


def test_detect_order_pc_first():
    raw = bytearray(PC_SIZE)
    raw[0x50:0x52] = b"DL"
    raw[0x58:0x5A] = b"LD"
    assert detect(raw) is SaveFormat.PC


def test_detect_unrecognized():
    try:
        detect(bytes(CONSOLE_SIZE))
    except FormatUnrecognized:
        return
    raise AssertionError("all-zero buffer should not be recognised")


def test_detect_short_buffer():
    try:
        decode(b"LD")
    except FormatUnrecognized:
        return
    raise AssertionError("two-byte buffer should not be recognised")


def test_detect_options_word_filler():
    raw = _encode(make_save(), Platform.CONSOLE, DataWidth.WORD, ByteOrder.LITTLE_ENDIAN, 0xFF)
    save_format, options = detect_options(raw)
    assert save_format is SaveFormat.CONSOLE_WORD_LE
    assert options.platform == Platform.CONSOLE
    assert options.data_width == DataWidth.WORD
    assert options.byte_order == ByteOrder.LITTLE_ENDIAN
    assert options.filler_byte == 0xFF


# ═══════════════════════════════════════════════════════════════════════════════
# ROUND TRIPS
# ═══════════════════════════════════════════════════════════════════════════════

def test_round_trip_all_platforms():
    for platform, width, order, filler, expected, _ in TARGETS:
        raw = _encode(make_save(), platform, width, order, filler)
        save = decode(raw)
        label = expected.value

        assert save.options.platform == platform, label
        assert save.get_slot(Game.S3K, 0) == S3K_SLOT, label
        assert save.get_competition_row(2, 1) == CP_ROW, label
        assert save.get_competition_row(0, 0).is_new, label

        if platform == Platform.AIR:
            # A.I.R. has no Sonic 3 section
            assert not save.write_enabled[Game.S3], label
            assert save.get_slot(Game.S3, 1).is_new, label
        else:
            assert save.get_slot(Game.S3, 1) == S3_SLOT, label
            assert save.write_enabled[Game.S3], label
        assert save.write_enabled[Game.S3K], label


def test_console_byte_is_canonical_image():
    save = make_save()
    raw = encode(save, Platform.CONSOLE, DataWidth.BYTE)
    assert raw == bytes(save.buffer)


def test_word_image_filler():
    raw = encode(make_save(), Platform.CONSOLE, DataWidth.WORD, ByteOrder.BIG_ENDIAN, 0xFF)
    assert set(raw[0::2]) == {0xFF}


def test_steam_layout():
    save = make_save()
    raw = encode(save, Platform.STEAM)
    assert raw[:3] == STEAM_PREFIX
    assert raw[4] == save.buffer[0]
    assert raw[4 + 2 * 0x58] == ord("L")
    assert not any(raw[4 + 2 * 510:])


def test_disabled_game_not_written():
    save = make_save()
    save.set_write(Game.S3, False)
    raw = encode(save, Platform.CONSOLE, DataWidth.BYTE)
    layout = SECTION_LAYOUTS[Section.S3]
    assert not any(raw[layout.primary:layout.primary + layout.length])
    # the in-memory data survives
    assert save.get_slot(Game.S3, 1) == S3_SLOT

    restored = decode(raw)
    assert not restored.write_enabled[Game.S3]


def test_disabled_game_not_written_pc():
    save = make_save()
    save.set_write(Game.S3, False)
    raw = encode(save, Platform.PC)
    layout = SECTION_LAYOUTS[Section.S3]
    assert not any(raw[layout.pc_offset:layout.pc_offset + layout.length])


# ═══════════════════════════════════════════════════════════════════════════════
# PC RECORD LAYOUT
# ═══════════════════════════════════════════════════════════════════════════════

def test_pc_transforms_are_involutions():
    s3k = bytearray(range(84))
    assert swap_emerald_bytes(swap_emerald_bytes(bytearray(s3k))) == s3k

    competition = bytearray(range(100, 184))
    assert reverse_competition_rows(reverse_competition_rows(bytearray(competition))) == competition


def test_pc_emerald_swap():
    s3k = bytearray(84)
    s3k[6], s3k[7] = 0x11, 0x22
    swap_emerald_bytes(s3k)
    assert (s3k[6], s3k[7]) == (0x22, 0x11)


def test_pc_competition_reversed():
    competition = blank_section(Section.COMPETITION)
    reverse_competition_rows(competition)
    assert competition[0:4] == bytes([0, 0, 0, 0x80])
    assert competition[80:82] == b"DL"


def test_pc_fixed_point():
    sections = {s: blank_section(s) for s in Section}
    sections[Section.S3K][6] = 0x4D
    restored = read_pc(write_pc(sections))
    for section in Section:
        assert restored[section] == strip_checksum(sections[section]), section.value


# ═══════════════════════════════════════════════════════════════════════════════
# A.I.R.
# ═══════════════════════════════════════════════════════════════════════════════

def test_air_container_layout():
    sections = {s: blank_section(s) for s in Section}
    raw = write_air(sections)
    assert len(raw) == AIR_SIZE
    assert raw.startswith(b"OXY.PDATA\x00\x01")
    assert raw[11] == 2
    assert raw[0x13:0x13 + 16] == b"SRAM_SaveslotsP\x00"


def test_air_parser_records():
    sections = {s: blank_section(s) for s in Section}
    records = AirRecordParser(write_air(sections)).parse()
    assert set(records) == {"SRAM_SaveslotsP", "SRAM_SaveslotsExt"}
    # two-byte field, then the section
    assert len(records["SRAM_SaveslotsP"]) == 2 + 84


def test_air_read_strips_checksum():
    sections = {s: blank_section(s) for s in Section}
    restored = read_air(write_air(sections))
    assert restored[Section.S3] == bytearray()
    assert restored[Section.S3K] == strip_checksum(sections[Section.S3K])
    assert restored[Section.COMPETITION] == strip_checksum(sections[Section.COMPETITION])


def test_air_missing_record():
    raw = bytearray(b"OXY.PDATA\x00\x01" + bytes(AIR_SIZE - 11))
    sections = read_air(raw)
    assert sections[Section.S3K] == bytearray()
    assert sections[Section.COMPETITION] == bytearray()


def test_missing_competition_round_trip():
    raw = bytearray(encode(make_save(), Platform.CONSOLE, DataWidth.BYTE))
    layout = SECTION_LAYOUTS[Section.COMPETITION]
    for start in (layout.primary, layout.secondary):
        raw[start + layout.length - 1] ^= 0xFF
    damaged = decode(bytes(raw))
    assert not damaged.has_data(Section.COMPETITION)

    for platform, width, order, filler, expected, _ in TARGETS:
        save = decode(_encode(damaged.copy(), platform, width, order, filler))
        label = expected.value
        assert save.has_data(Section.COMPETITION), label
        assert save.get_slot(Game.S3K, 0) == S3K_SLOT, label
        for stage in range(CP_STAGES):
            assert all(row.is_new for row in save.get_stage(stage)), label


# ═══════════════════════════════════════════════════════════════════════════════
# ERRORS
# ═══════════════════════════════════════════════════════════════════════════════

def _expect(error, func, *args):
    try:
        func(*args)
    except error:
        return
    raise AssertionError(f"expected {error.__name__}")


def test_unsupported_without_s3k():
    save = make_save()
    save.set_write(Game.S3K, False)
    _expect(UnsupportedCombination, encode, save, Platform.AIR)
    _expect(UnsupportedCombination, encode, save, Platform.STEAM)
    # console and PC can carry Sonic 3 alone
    assert len(encode(save, Platform.CONSOLE, DataWidth.BYTE)) == CONSOLE_SIZE
    assert len(encode(save, Platform.PC)) == PC_SIZE


def test_unsupported_nothing_enabled():
    save = make_save()
    save.set_write(Game.S3, False)
    save.set_write(Game.S3K, False)
    _expect(UnsupportedCombination, encode, save, Platform.CONSOLE)


def test_no_valid_section():
    raw = bytearray(b"\x11" * CONSOLE_SIZE)
    raw[0x58:0x5A] = b"LD"
    for layout in SECTION_LAYOUTS.values():
        for start in (layout.primary, layout.secondary):
            region = raw[start:start + layout.length]
            end = start + layout.length - 2
            write_uint16_be(raw, end, checksum(region) ^ 0xFFFF)
    assert detect(raw) is SaveFormat.CONSOLE_BYTE
    _expect(NoValidSection, decode, bytes(raw))


def test_decode_falls_back_to_secondary():
    save = make_save()
    raw = bytearray(encode(save, Platform.CONSOLE, DataWidth.BYTE))
    layout = SECTION_LAYOUTS[Section.S3K]
    raw[layout.primary + 4] ^= 0xFF
    assert decode(bytes(raw)).get_slot(Game.S3K, 0) == S3K_SLOT


def test_air_read_rejects_bad_header():
    _expect(FormatUnrecognized, read_air, b"OXY.PDATA\x00\x01")
    _expect(FormatUnrecognized, read_air, bytes(AIR_SIZE))


TESTS = [
    test_detect_each_target,
    test_detect_order_pc_first,
    test_detect_unrecognized,
    test_detect_short_buffer,
    test_detect_options_word_filler,
    test_round_trip_all_platforms,
    test_console_byte_is_canonical_image,
    test_word_image_filler,
    test_steam_layout,
    test_disabled_game_not_written,
    test_disabled_game_not_written_pc,
    test_pc_transforms_are_involutions,
    test_pc_emerald_swap,
    test_pc_competition_reversed,
    test_pc_fixed_point,
    test_air_container_layout,
    test_air_parser_records,
    test_air_read_strips_checksum,
    test_air_missing_record,
    test_missing_competition_round_trip,
    test_unsupported_without_s3k,
    test_unsupported_nothing_enabled,
    test_no_valid_section,
    test_decode_falls_back_to_secondary,
    test_air_read_rejects_bad_header,
]


def run_all_tests(results):
    results.run("PLATFORM TRANSCODER", TESTS)


if __name__ == "__main__":
    from tests import TestResults
    standalone = TestResults()
    run_all_tests(standalone)
    sys.exit(0 if standalone.summary() else 1)
