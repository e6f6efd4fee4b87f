"""
Save Editor Backend for Sonic 3 / Sonic 3 & Knuckles

UI-independent editing session. Front ends (GUI panel, command line) call
into SaveManager and render whatever it reports; the codec itself lives in
formats.s3save.

Provides high-level API for:
- Loading saves from disk or from the last-session store
- Selecting game, slot and competition stage
- Editing slot fields, emeralds, rings and competition times
- Writing the save back in any supported platform format
"""

import logging
from dataclasses import fields, replace
from pathlib import Path
from typing import Optional, Dict, List, Tuple, Any, Union

from formats.s3save import (
    CanonicalSave, CompetitionRow, ClearState, DataWidth, EmeraldState, Game,
    NoValidSection, Platform, S3KSlot, S3Slot, SaveFileError, Section,
    SECTION_LAYOUTS, FORMATS, decode, encode,
    serialize_for_persistence, deserialize_from_persistence,
)
from formats.s3save.constants import (
    CP_RANKINGS, CP_STAGES, EMERALDS, S3_LAST_ZONE, S3_SAVE_NAME, S3K_SAVE_NAME, Character,
)
from formats.s3save.records import EMERALD_POSITIONS, max_zone
from formats.s3save.sections import blank_section

from .storage import Storage, StorageResult

logger = logging.getLogger(__name__)

HEX_VIEW_WIDTH = 16
S3_EMERALD_BITS = 7
RING_BITS = 8

Slot = Union[S3Slot, S3KSlot]

S3_ZONES = (
    "Angel Island", "Hydrocity", "Marble Garden", "Carnival Night",
    "IceCap", "Launch Base",
)
S3K_ZONES = (
    "Angel Island", "Hydrocity", "Marble Garden", "Carnival Night",
    "Flying Battery", "IceCap", "Launch Base", "Mushroom Hill",
    "Sandopolis", "Lava Reef", "Hidden Palace", "Sky Sanctuary",
    "Death Egg", "The Doomsday",
)
COMPETITION_STAGES = (
    "Azure Lake", "Balloon Park", "Chrome Gadget", "Desert Palace", "Endless Mine",
)
# competition character byte
COMPETITION_CHARACTERS = ("Sonic", "Tails", "Knuckles")


def zone_name(game: Game, zone: int) -> str:
    zones = S3_ZONES if game is Game.S3 else S3K_ZONES
    return zones[zone] if 0 <= zone < len(zones) else f"Zone {zone:#04x}"


def default_filename(platform: Platform, write_s3k: bool = True) -> str:
    """File name a platform expects its save under."""
    if platform == Platform.CONSOLE:
        return S3K_SAVE_NAME if write_s3k else S3_SAVE_NAME
    return FORMATS[platform].default_filename


def slot_count(game: Game) -> int:
    return SECTION_LAYOUTS[game.section].record_count


def hex_dump(data: bytes, width: int = HEX_VIEW_WIDTH) -> str:
    """Offset, hex and printable-ASCII columns, ``width`` bytes per row."""
    lines = []
    for start in range(0, len(data), width):
        row = data[start:start + width]
        hex_part = " ".join(f"{b:02x}" for b in row)
        asc_part = "".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in row)
        lines.append(f"{start:04x}  {hex_part:<{width * 3 - 1}}  {asc_part}")
    return "\n".join(lines)


class SaveManager:
    """
    High-level save editing session.

    Holds one CanonicalSave plus the editor selection (game, slot, stage)
    and the advanced-mode preference.
    """

    def __init__(self, storage: Storage = None):
        self.save: Optional[CanonicalSave] = None
        self.path: Optional[Path] = None
        self.storage = storage or Storage()

        self.current_game = Game.S3K
        self.current_slot = 0
        self.current_stage = 0
        self.advanced = False

    # ========================================================================
    # Session lifecycle
    # ========================================================================

    @property
    def is_loaded(self) -> bool:
        return self.save is not None

    def _require_save(self) -> CanonicalSave:
        if self.save is None:
            raise SaveFileError("No save loaded.")
        return self.save

    def open(self, save: CanonicalSave):
        """
        Start editing ``save``.

        Missing sections are filled with blank data; the write flags keep
        whatever the file had. The game with data is selected, S3&K first.
        """
        if not save.is_valid:
            raise NoValidSection()

        for section in (Section.S3, Section.S3K, Section.COMPETITION):
            if not save.has_data(section):
                save.sections[section] = blank_section(section)

        self.save = save
        self.set_game(Game.S3K if save.write_enabled[Game.S3K] else Game.S3)
        self.set_stage(0)

        logger.info(f"Opened {save!r} (S3 {'on' if save.write_enabled[Game.S3] else 'off'}, "
                    f"S3&K {'on' if save.write_enabled[Game.S3K] else 'off'})")

    def load_bytes(self, data: bytes) -> CanonicalSave:
        """Decode raw file contents and open them."""
        save = decode(data)
        self.open(save)
        return save

    def load_file(self, path: Union[str, Path]) -> CanonicalSave:
        """Load a save file from disk."""
        path = Path(path)
        with open(path, 'rb') as f:
            data = f.read()

        save = self.load_bytes(data)
        self.path = path
        return save

    def restore_defaults(self) -> CanonicalSave:
        """Replace the session with a blank save (Sonic 3 disabled)."""
        options = self.save.options if self.save else None
        save = CanonicalSave.blank(options)
        self.open(save)
        self.set_write(Game.S3, False)
        self.path = None
        return save

    # ========================================================================
    # Output
    # ========================================================================

    def save_bytes(self) -> Tuple[str, bytes]:
        """Encode with the current options; returns (filename, contents)."""
        save = self._require_save()
        data = encode(save)
        name = default_filename(save.options.platform, save.write_enabled[Game.S3K])
        return name, data

    def save_file(self, target: Union[str, Path, None] = None) -> Path:
        """
        Write the save to disk.

        ``target`` may be a directory (the platform's default file name is
        used), a file path, or None for the directory the save came from.
        """
        name, data = self.save_bytes()

        if target is None:
            target = self.path.parent if self.path else Path.cwd()
        target = Path(target)
        if target.is_dir():
            target = target / name

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'wb') as f:
            f.write(data)

        logger.info(f"Wrote {len(data)} bytes to {target}")
        return target

    def load_from_storage(self) -> bool:
        """
        Restore the last session, or defaults if nothing usable is stored.

        Returns True if the stored save was used.
        """
        blob = self.storage.load()
        if blob is not None:
            try:
                self.open(deserialize_from_persistence(blob))
                return True
            except SaveFileError as e:
                logger.warning(f"Stored save discarded: {e}")
                self.storage.reset()

        self.restore_defaults()
        return False

    def save_to_storage(self) -> StorageResult:
        if self.save is None:
            return self.storage.save(None)
        return self.storage.save(serialize_for_persistence(self.save))

    def hex_view(self) -> str:
        """Hex dump of the committed canonical buffer."""
        return hex_dump(bytes(self._require_save().commit()))

    # ========================================================================
    # Selection
    # ========================================================================

    def set_game(self, game: Game):
        self.current_game = game
        self.set_slot(min(self.current_slot, slot_count(game) - 1))

    def set_slot(self, index: int = 0):
        if not 0 <= index < slot_count(self.current_game):
            raise IndexError(f"{self.current_game.label} has no slot {index}")
        self.current_slot = index

    def set_stage(self, index: int = 0):
        if not 0 <= index < CP_STAGES:
            raise IndexError(f"No competition stage {index}")
        self.current_stage = index

    def set_write(self, game: Game, enabled: bool):
        self._require_save().set_write(game, enabled)

    def is_writing(self, game: Game) -> bool:
        return self.save is not None and self.save.write_enabled[game]

    def set_options(self, platform: Platform = None, data_width: DataWidth = None,
                    byte_order=None, filler_byte: int = None, advanced: bool = None):
        """Change output format preferences and editor mode."""
        save = self._require_save()
        save.options = save.options.with_changes(
            platform=platform, data_width=data_width,
            byte_order=byte_order, filler_byte=filler_byte,
        )
        if advanced is not None:
            self.advanced = advanced

    # ========================================================================
    # Slots
    # ========================================================================

    def get_slot(self, index: int = None) -> Slot:
        save = self._require_save()
        index = self.current_slot if index is None else index
        return save.get_slot(self.current_game, index, self.advanced)

    def set_slot_data(self, slot: Slot, index: int = None):
        save = self._require_save()
        index = self.current_slot if index is None else index
        save.set_slot(self.current_game, index, slot)

    def update_slot(self, index: int = None, **changes) -> Slot:
        """Apply field changes to a slot and return it as stored."""
        slot = self.get_slot(index)
        names = {f.name for f in fields(slot)}
        unknown = set(changes) - names
        if unknown:
            raise KeyError(f"Unknown slot field(s): {', '.join(sorted(unknown))}")

        slot = replace(slot, **changes)
        if isinstance(slot, S3KSlot) and slot.is_clear:
            # clear level follows the emeralds held
            slot.clear = ClearState.for_emeralds(slot.emeralds)

        self.set_slot_data(slot, index)
        return self.get_slot(index)

    def set_clear(self, cleared: bool, index: int = None) -> Slot:
        if self.current_game is Game.S3:
            return self.update_slot(index, is_clear=cleared)
        slot = self.get_slot(index)
        clear = ClearState.for_emeralds(slot.emeralds) if cleared else ClearState.NONE
        return self.update_slot(index, clear=clear)

    def cycle_emerald(self, emerald: int, index: int = None) -> Slot:
        """
        Advance one emerald to its next state.

        Sonic 3 emeralds toggle collected/absent; S3&K emeralds rotate through
        absent, collected and upgraded.
        """
        slot = self.get_slot(index)

        if isinstance(slot, S3Slot):
            if not 0 <= emerald < S3_EMERALD_BITS:
                raise IndexError(f"No emerald {emerald}")
            mask = slot.emeralds ^ (1 << emerald)
            count = bin(mask & ((1 << S3_EMERALD_BITS) - 1)).count("1")
            return self.update_slot(index, emeralds=mask, emerald_count=count)

        if not 0 <= emerald < EMERALD_POSITIONS:
            raise IndexError(f"No emerald {emerald}")
        states = list(slot.emeralds)
        states[emerald] = EmeraldState(states[emerald]).next()
        collected = sum(1 for s in states if s != EmeraldState.ABSENT)
        return self.update_slot(index, emeralds=states, emerald_count=collected)

    def toggle_ring(self, ring: int, index: int = None) -> Slot:
        if not 0 <= ring < RING_BITS:
            raise IndexError(f"No giant ring {ring}")
        slot = self.get_slot(index)
        return self.update_slot(index, rings=slot.rings ^ (1 << ring))

    def zone_limit(self, index: int = None) -> int:
        """Highest zone selectable for a slot of the current game."""
        slot = self.get_slot(index)
        if isinstance(slot, S3Slot):
            return S3_LAST_ZONE
        return max_zone(slot.character, slot.collected_emeralds, self.advanced)

    def slot_characters(self) -> List[int]:
        """Characters for the slot tabs; NOBODY everywhere if the game is disabled."""
        save = self._require_save()
        count = slot_count(self.current_game)
        if not save.write_enabled[self.current_game]:
            return [Character.NOBODY] * count
        return save.slot_characters(self.current_game)

    def slot_preview(self, index: int = None) -> str:
        """Name of the picture describing a slot."""
        game = self.current_game
        if not self.is_writing(game):
            return "static"

        slot = self.get_slot(index)
        if slot.is_new:
            return "new"

        if isinstance(slot, S3Slot):
            if slot.is_clear:
                # Sonic 3 shows Sonic regardless of character
                return "clear-sonic-chaos" if slot.emerald_count >= EMERALDS else "clear-sonic"
            return f"zone-{slot.zone:02d}"

        if not slot.is_clear:
            return f"zone-{slot.zone:02d}"
        if slot.clear == ClearState.SUPER_CLEAR:
            return "clear-super"

        if slot.character == Character.TAILS:
            image = "clear-tails"
        elif slot.character in (Character.KNUCKLES, Character.KNUCKLES_TAILS):
            image = "clear-knuckles"
        else:
            image = "clear-sonic"
        if slot.clear == ClearState.CHAOS_CLEAR:
            image += "-chaos"
        return image

    # ========================================================================
    # Competition
    # ========================================================================

    def get_stage(self, stage: int = None) -> List[CompetitionRow]:
        stage = self.current_stage if stage is None else stage
        return self._require_save().get_stage(stage)

    def update_row(self, rank: int, stage: int = None, **changes) -> CompetitionRow:
        """Apply field changes to one ranking of a stage."""
        save = self._require_save()
        stage = self.current_stage if stage is None else stage
        if not 0 <= rank < CP_RANKINGS:
            raise IndexError(f"No ranking {rank}")

        row = replace(save.get_competition_row(stage, rank), **changes)
        save.set_competition_row(stage, rank, row)
        return save.get_competition_row(stage, rank)

    # ========================================================================
    # Reporting
    # ========================================================================

    def summary(self) -> Dict[str, Any]:
        """Plain-data overview of the session (CLI json output)."""
        save = self._require_save()
        options = save.options
        return {
            "path": str(self.path) if self.path else None,
            "platform": options.platform.name,
            "data_width": options.data_width.name,
            "byte_order": options.byte_order.name,
            "filler_byte": options.filler_byte,
            "sections": {s.value: save.has_data(s) for s in Section},
            "write": {g.value: save.write_enabled[g] for g in Game},
        }
