"""
s3saveedit - Editor Session Tests

SaveManager editing operations, file and last-session round trips, Storage,
hex view. Uses temporary directories only.

Can be run standalone: python test_editor.py
Or via main runner: python tests.py --editor
"""

import sys
import tempfile
from pathlib import Path

# Path setup
TESTS_DIR = Path(__file__).parent
SUITE_DIR = TESTS_DIR.parent.parent
SRC_DIR = SUITE_DIR / "src"

sys.path.insert(0, str(SRC_DIR))

from formats.s3save import (
    ClearState, CompetitionRow, EmeraldState, Game, NoValidSection, Platform,
    CanonicalSave, Section,
)
from formats.s3save.constants import Character, TAILS_LAST_ZONE
from Tools.save_editor import (
    SaveManager, Storage, default_filename, hex_dump, slot_count, zone_name,
)


def _manager(directory: str) -> SaveManager:
    manager = SaveManager(Storage(directory=directory))
    manager.restore_defaults()
    return manager


def _expect(error, func, *args, **kwargs):
    try:
        func(*args, **kwargs)
    except error:
        return
    raise AssertionError(f"expected {error.__name__}")


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def test_hex_dump():
    text = hex_dump(b"ABC\x00")
    assert text.startswith("0000  41 42 43 00")
    assert text.endswith("  ABC.")
    assert "\n" not in text


def test_hex_dump_rows():
    lines = hex_dump(bytes(range(32))).splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("0010  10 11 12")


def test_default_filenames():
    assert default_filename(Platform.CONSOLE, True) == "s3&k.srm"
    assert default_filename(Platform.CONSOLE, False) == "sonic3.srm"
    assert default_filename(Platform.PC) == "sonic3k.bin"
    assert default_filename(Platform.STEAM) == "bs.sav"
    assert default_filename(Platform.AIR) == "persistentdata.bin"


def test_zone_names():
    assert slot_count(Game.S3) == 6
    assert slot_count(Game.S3K) == 8
    assert zone_name(Game.S3K, 0) == "Angel Island"
    assert zone_name(Game.S3K, 13) == "The Doomsday"
    assert zone_name(Game.S3, 5) == "Launch Base"
    assert zone_name(Game.S3, 9) == "Zone 0x09"


# ═══════════════════════════════════════════════════════════════════════════════
# SESSION
# ═══════════════════════════════════════════════════════════════════════════════

def test_restore_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        assert manager.is_loaded
        assert manager.current_game is Game.S3K
        assert manager.is_writing(Game.S3K)
        assert not manager.is_writing(Game.S3)
        assert manager.get_slot().is_new
        assert manager.slot_preview() == "new"


def test_open_rejects_invalid_save():
    manager = SaveManager(Storage(directory=tempfile.gettempdir(), name="unused"))
    save = CanonicalSave.blank()
    save.sections = {section: bytearray() for section in Section}
    _expect(NoValidSection, manager.open, save)


def test_selection_bounds():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        manager.set_slot(7)
        _expect(IndexError, manager.set_slot, 8)
        _expect(IndexError, manager.set_stage, 5)

        # switching to Sonic 3 pulls the slot back into range
        manager.set_game(Game.S3)
        assert manager.current_slot == 5


def test_update_slot():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        slot = manager.update_slot(is_new=False, character=Character.TAILS, zone=0x0D, lives=12)
        # Tails cannot be saved past Death Egg
        assert slot.zone == TAILS_LAST_ZONE
        assert slot.lives == 12
        assert manager.zone_limit() == TAILS_LAST_ZONE
        assert manager.slot_preview() == f"zone-{TAILS_LAST_ZONE:02d}"
        assert manager.slot_characters()[0] == Character.TAILS

        _expect(KeyError, manager.update_slot, rank=1)


def test_cycle_s3k_emerald():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        manager.update_slot(is_new=False)

        slot = manager.cycle_emerald(0)
        assert slot.emeralds[0] == EmeraldState.COLLECTED
        assert slot.emerald_count == 1

        slot = manager.cycle_emerald(0)
        assert slot.emeralds[0] == EmeraldState.UPGRADED

        slot = manager.cycle_emerald(0)
        assert slot.emeralds[0] == EmeraldState.ABSENT
        assert slot.emerald_count == 0

        _expect(IndexError, manager.cycle_emerald, 8)


def test_cycle_s3_emerald():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        manager.set_game(Game.S3)
        manager.set_write(Game.S3, True)
        manager.update_slot(is_new=False)

        slot = manager.cycle_emerald(2)
        assert slot.emeralds == 0b100
        assert slot.emerald_count == 1

        slot = manager.cycle_emerald(2)
        assert slot.emeralds == 0
        assert slot.emerald_count == 0

        _expect(IndexError, manager.cycle_emerald, 7)


def test_clear_follows_emeralds():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        emeralds = [EmeraldState.COLLECTED] * 7 + [EmeraldState.ABSENT]
        manager.update_slot(is_new=False, emeralds=emeralds)

        slot = manager.set_clear(True)
        assert slot.clear == ClearState.CHAOS_CLEAR
        assert manager.slot_preview() == "clear-sonic-chaos"

        slot = manager.set_clear(False)
        assert slot.clear == ClearState.NONE


def test_toggle_ring():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        manager.update_slot(is_new=False)
        assert manager.toggle_ring(3).rings == 0b1000
        assert manager.toggle_ring(3).rings == 0
        _expect(IndexError, manager.toggle_ring, 8)


def test_disabled_game_preview():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        manager.set_game(Game.S3)
        assert manager.slot_preview() == "static"
        assert manager.slot_characters() == [Character.NOBODY] * 6


def test_update_competition_row():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        manager.set_stage(3)
        row = manager.update_row(2, is_new=False, minutes=2, seconds=61, character=1)
        assert row == CompetitionRow(is_new=False, minutes=2, seconds=59, ticks=0, character=1)
        assert manager.get_stage()[2] == row
        _expect(IndexError, manager.update_row, 3, minutes=1)


# ═══════════════════════════════════════════════════════════════════════════════
# FILES AND STORAGE
# ═══════════════════════════════════════════════════════════════════════════════

def test_save_and_load_file():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        manager.update_slot(index=4, is_new=False, character=Character.KNUCKLES, zone=7)
        manager.set_options(platform=Platform.PC)

        written = manager.save_file(tmp)
        assert written.name == "sonic3k.bin"
        assert written.stat().st_size == 1024

        other = SaveManager(Storage(directory=tmp))
        other.load_file(written)
        assert other.path == written
        assert other.save.options.platform == Platform.PC
        slot = other.get_slot(4)
        assert slot.character == Character.KNUCKLES
        assert slot.zone == 7


def test_save_bytes_names():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        name, data = manager.save_bytes()
        assert name == "s3&k.srm"
        assert len(data) == 1024  # default options are word wide

        manager.set_write(Game.S3, True)
        manager.set_write(Game.S3K, False)
        name, _ = manager.save_bytes()
        assert name == "sonic3.srm"


def test_session_storage_round_trip():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        manager.update_slot(index=1, is_new=False, lives=42)
        result = manager.save_to_storage()
        assert result.success, result.message
        assert Path(result.path).exists()

        other = SaveManager(Storage(directory=tmp))
        assert other.load_from_storage()
        assert other.get_slot(1).lives == 42


def test_storage_starts_with_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        manager = SaveManager(Storage(directory=tmp))
        assert not manager.load_from_storage()
        assert manager.is_loaded
        assert manager.get_slot().is_new


def test_unreadable_storage_is_reset():
    with tempfile.TemporaryDirectory() as tmp:
        storage = Storage(directory=tmp)
        storage.path.write_text("{broken", encoding="utf-8")
        assert storage.load() is None
        assert not storage.exists


def test_unusable_blob_is_discarded():
    with tempfile.TemporaryDirectory() as tmp:
        storage = Storage(directory=tmp)
        storage.save({"file": ["x"] * 512})
        manager = SaveManager(storage)
        assert not manager.load_from_storage()
        assert manager.is_loaded
        assert not storage.exists


def test_storage_value_types():
    with tempfile.TemporaryDirectory() as tmp:
        storage = Storage(name="prefs", directory=tmp)
        assert storage.path.name == ".s3saveedit_prefs.json"
        assert storage.save('{"a": 1}').success
        assert storage.load() == {"a": 1}
        assert storage.save(None).success
        assert not storage.exists


def test_storage_rejects_bad_serialized_value():
    with tempfile.TemporaryDirectory() as tmp:
        storage = Storage(name="prefs", directory=tmp)
        result = storage.save("{broken")
        assert not result.success
        assert not storage.exists


def test_hex_view():
    with tempfile.TemporaryDirectory() as tmp:
        manager = _manager(tmp)
        lines = manager.hex_view().splitlines()
        assert len(lines) == 32
        assert lines[-1].startswith("01f0  ")


TESTS = [
    test_hex_dump,
    test_hex_dump_rows,
    test_default_filenames,
    test_zone_names,
    test_restore_defaults,
    test_open_rejects_invalid_save,
    test_selection_bounds,
    test_update_slot,
    test_cycle_s3k_emerald,
    test_cycle_s3_emerald,
    test_clear_follows_emeralds,
    test_toggle_ring,
    test_disabled_game_preview,
    test_update_competition_row,
    test_save_and_load_file,
    test_save_bytes_names,
    test_session_storage_round_trip,
    test_storage_starts_with_defaults,
    test_unreadable_storage_is_reset,
    test_unusable_blob_is_discarded,
    test_storage_value_types,
    test_storage_rejects_bad_serialized_value,
    test_hex_view,
]


def run_all_tests(results):
    results.run("EDITOR SESSION", TESTS)


if __name__ == "__main__":
    from tests import TestResults
    standalone = TestResults()
    run_all_tests(standalone)
    sys.exit(0 if standalone.summary() else 1)
