"""
In-memory save and the public decode/encode entry points.

A CanonicalSave owns the 512-byte console image. Sections are resolved out
of it on parse and written back by commit(); the record accessors operate on
the resolved section bytes.
"""

import logging
from typing import Dict, List, Optional, Sequence, Union

from .checksum import stored_checksum
from .constants import (
    CONSOLE_SIZE, SECTION_LAYOUTS, SECTION_ORDER, DataWidth, Game, Platform, Section,
)
from .detect import SaveFormat, detect_options
from .errors import NoValidSection, UnsupportedCombination
from .options import SaveOptions
from .records import (
    CompetitionRow, S3KSlot, S3Slot, decode_competition_row, decode_s3_slot,
    decode_s3k_slot, decode_stage, encode_competition_row, encode_s3_slot,
    encode_s3k_slot, encode_stage, slot_characters,
)
from .sections import blank_section, read_section, write_section
from .transcode import export_buffer, import_buffer
from utils.binary import ByteOrder

logger = logging.getLogger(__name__)

Slot = Union[S3Slot, S3KSlot]


class CanonicalSave:
    """Console-shaped save image plus its resolved sections."""

    def __init__(self, buffer: Optional[bytes] = None, options: Optional[SaveOptions] = None):
        data = bytearray(buffer[:CONSOLE_SIZE]) if buffer is not None else bytearray()
        data += bytes(CONSOLE_SIZE - len(data))

        self.buffer = data
        self.options = options or SaveOptions()
        self.sections: Dict[Section, bytearray] = {}
        self.write_enabled: Dict[Game, bool] = {Game.S3: False, Game.S3K: False}
        self.parse()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_sections(cls, sections: Dict[Section, bytes],
                      options: Optional[SaveOptions] = None) -> "CanonicalSave":
        """Build a canonical image from section bodies (PC and AIR imports)."""
        buffer = bytearray(CONSOLE_SIZE)
        for section in SECTION_ORDER:
            body = bytearray(sections.get(section) or b"")
            write_section(buffer, SECTION_LAYOUTS[section], body)
        return cls(buffer, options)

    @classmethod
    def blank(cls, options: Optional[SaveOptions] = None) -> "CanonicalSave":
        """A save where every section exists, every record is new and both games are enabled."""
        save = cls.from_sections({s: blank_section(s) for s in SECTION_ORDER}, options)
        save.write_enabled = {game: True for game in Game}
        return save

    def parse(self):
        """Resolve all sections from the buffer and derive the write flags."""
        for section in SECTION_ORDER:
            self.sections[section] = read_section(self.buffer, SECTION_LAYOUTS[section])

        for game in Game:
            data = self.sections[game.section]
            self.write_enabled[game] = bool(data) and stored_checksum(data) != 0

    @property
    def is_valid(self) -> bool:
        """True if at least one section resolved."""
        return any(self.sections[s] for s in SECTION_ORDER)

    def has_data(self, section: Section) -> bool:
        return bool(self.sections[section])

    def section(self, section: Section) -> bytearray:
        """Section bytes, materialised as a blank section if missing."""
        if not self.sections[section]:
            logger.debug(f"Creating blank {section.value} section")
            self.sections[section] = blank_section(section)
        return self.sections[section]

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def get_slot(self, game: Game, index: int, advanced: bool = False) -> Slot:
        data = self.sections[game.section]
        if game is Game.S3:
            return decode_s3_slot(data, index)
        return decode_s3k_slot(data, index, advanced)

    def set_slot(self, game: Game, index: int, slot: Slot):
        data = self.section(game.section)
        if game is Game.S3:
            encode_s3_slot(data, index, slot)
        else:
            encode_s3k_slot(data, index, slot)

    def get_competition_row(self, stage: int, rank: int) -> CompetitionRow:
        return decode_competition_row(self.sections[Section.COMPETITION], stage, rank)

    def set_competition_row(self, stage: int, rank: int, row: CompetitionRow):
        encode_competition_row(self.section(Section.COMPETITION), stage, rank, row)

    def get_stage(self, stage: int) -> List[CompetitionRow]:
        return decode_stage(self.sections[Section.COMPETITION], stage)

    def set_stage(self, stage: int, rows: Sequence[CompetitionRow]):
        encode_stage(self.section(Section.COMPETITION), stage, rows)

    def slot_characters(self, game: Game) -> List[int]:
        return slot_characters(self.sections[game.section], game)

    def set_write(self, game: Game, enabled: bool):
        """
        Enable or disable persisting a game's section.

        Enabling a game without save data (missing or zero checksum) starts it
        from a blank section.
        """
        if enabled and stored_checksum(self.sections[game.section]) == 0:
            self.sections[game.section] = blank_section(game.section)
        self.write_enabled[game] = enabled

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def commit(self) -> bytearray:
        """Write every section back into the buffer and return it."""
        for section in SECTION_ORDER:
            if section is Section.COMPETITION:
                write_section(self.buffer, SECTION_LAYOUTS[section], self.section(section))
                continue
            enabled = self.write_enabled[Game(section.value)]
            write_section(self.buffer, SECTION_LAYOUTS[section], self.sections[section], enabled)
        return self.buffer

    def export_sections(self) -> Dict[Section, bytes]:
        """Section bodies as they would be persisted (disabled games zero-filled)."""
        out = {}
        for section in SECTION_ORDER:
            if section is Section.COMPETITION:
                # competition is always written, with every ranking new if missing
                data = self.section(section)
            elif self.write_enabled[Game(section.value)]:
                data = self.sections[section]
            else:
                data = bytearray()
            out[section] = bytes(data)
        return out

    def copy(self) -> "CanonicalSave":
        clone = CanonicalSave(bytes(self.buffer), SaveOptions(**vars(self.options)))
        clone.sections = {s: bytearray(d) for s, d in self.sections.items()}
        clone.write_enabled = dict(self.write_enabled)
        return clone

    def __repr__(self):
        present = ", ".join(s.value for s in SECTION_ORDER if self.sections[s]) or "empty"
        return f"CanonicalSave({self.options.platform.name}, {present})"


# ============================================================================
# Public entry points
# ============================================================================

def to_canonical(raw: bytes) -> CanonicalSave:
    """Detect the format of ``raw`` and normalise it (no validity check)."""
    save_format, options = detect_options(raw)
    canonical, sections = import_buffer(raw, save_format)

    if sections is not None:
        save = CanonicalSave.from_sections(sections, options)
    else:
        save = CanonicalSave(canonical, options)

    logger.info(f"Loaded {save_format.value} save: {save!r}")
    return save


def decode(raw: bytes) -> CanonicalSave:
    """Decode any supported save file; raises FormatUnrecognized or NoValidSection."""
    save = to_canonical(raw)
    if not save.is_valid:
        raise NoValidSection()
    return save


def check_combination(save: CanonicalSave, platform: Platform):
    """Raise UnsupportedCombination if ``platform`` cannot carry the enabled data."""
    if not any(save.write_enabled.values()):
        raise UnsupportedCombination("Enable at least one game before saving.")
    if platform in (Platform.STEAM, Platform.AIR) and not save.write_enabled[Game.S3K]:
        raise UnsupportedCombination(
            f"{platform.name} saves require {Game.S3K.label} data to be enabled.")


def from_canonical(save: CanonicalSave, options: SaveOptions) -> bytes:
    """Commit ``save`` and produce the on-disk image described by ``options``."""
    check_combination(save, options.platform)
    canonical = save.commit()
    return export_buffer(
        canonical, save.export_sections(), options.platform,
        options.data_width, options.byte_order, options.filler_byte,
    )


def encode(save: CanonicalSave, platform: Optional[Platform] = None,
           data_width: Optional[DataWidth] = None, byte_order: Optional[ByteOrder] = None,
           filler_byte: Optional[int] = None) -> bytes:
    """
    Encode a save for a target platform.

    Arguments left as None fall back to the save's own options.
    """
    options = save.options.with_changes(
        platform=platform, data_width=data_width,
        byte_order=byte_order, filler_byte=filler_byte,
    )
    return from_canonical(save, options)


__all__ = [
    "CanonicalSave", "SaveFormat", "decode", "encode", "to_canonical",
    "from_canonical", "check_combination",
]
