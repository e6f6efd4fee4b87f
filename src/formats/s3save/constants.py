"""
Sonic 3 / Sonic 3 & Knuckles save layout constants.

Every on-disk format is normalised to the 512-byte console SRAM image.
Offsets below are canonical (console, byte-wide) unless named *_PC / AIR_*.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from utils.binary import ByteOrder


# ============================================================================
# Platforms and data widths
# ============================================================================

class Platform(IntEnum):
    """Save file ecosystems (values match the persisted preference)."""
    CONSOLE = 0
    PC = 1
    STEAM = 2
    AIR = 3


class DataWidth(Enum):
    """Console images are stored either one byte or one word per SRAM byte."""
    BYTE = "byte"
    WORD = "word"


# total size of save file
CONSOLE_SIZE = 512
PC_SIZE = 1024
STEAM_SIZE = 163888
AIR_SIZE = 398


# ============================================================================
# Sections
# ============================================================================

class Section(Enum):
    """The three checksum-protected, twice-stored regions of a save."""
    S3 = "s3"
    S3K = "s3k"
    COMPETITION = "competition"


class Game(Enum):
    """Single-player rule-sets."""
    S3 = "s3"
    S3K = "s3k"

    @property
    def section(self) -> Section:
        return Section(self.value)

    @property
    def label(self) -> str:
        return "Sonic 3" if self is Game.S3 else "Sonic 3 & Knuckles"


@dataclass(frozen=True)
class SectionLayout:
    """Fixed geometry of one section."""
    section: Section
    length: int
    record_length: int
    record_count: int
    primary: int
    secondary: int
    pc_offset: int
    air_name: Optional[str] = None


SECTION_LAYOUTS = {
    Section.S3: SectionLayout(
        Section.S3, length=52, record_length=8, record_count=6,
        primary=0x0B4, secondary=0x0FA, pc_offset=0x0C0,
    ),
    Section.S3K: SectionLayout(
        Section.S3K, length=84, record_length=10, record_count=8,
        primary=0x140, secondary=0x196, pc_offset=0x180,
        air_name="SRAM_SaveslotsP",
    ),
    Section.COMPETITION: SectionLayout(
        Section.COMPETITION, length=84, record_length=4, record_count=5 * 3,
        primary=0x008, secondary=0x05E, pc_offset=0x000,
        air_name="SRAM_SaveslotsExt",
    ),
}

# Sections in the order they are merged into the canonical buffer
SECTION_ORDER = (Section.S3, Section.S3K, Section.COMPETITION)

# competition mode
CP_STAGES = 5
CP_RANKINGS = 3
CP_STAGE_LENGTH = 4 * (CP_RANKINGS + 1)

# two ASCII bytes right before the competition checksum
CP_FOOTER_OFFSET = 80
CP_FOOTER = b"LD"


# ============================================================================
# Format descriptors
# ============================================================================

@dataclass(frozen=True)
class FormatDescriptor:
    """Per-platform file shape."""
    platform: Platform
    size: int
    data_width: DataWidth
    byte_order: ByteOrder
    default_filename: str


FORMATS = {
    Platform.CONSOLE: FormatDescriptor(
        Platform.CONSOLE, CONSOLE_SIZE, DataWidth.BYTE, ByteOrder.BIG_ENDIAN, "s3&k.srm"),
    Platform.PC: FormatDescriptor(
        Platform.PC, PC_SIZE, DataWidth.BYTE, ByteOrder.LITTLE_ENDIAN, "sonic3k.bin"),
    Platform.STEAM: FormatDescriptor(
        Platform.STEAM, STEAM_SIZE, DataWidth.WORD, ByteOrder.BIG_ENDIAN, "bs.sav"),
    Platform.AIR: FormatDescriptor(
        Platform.AIR, AIR_SIZE, DataWidth.BYTE, ByteOrder.LITTLE_ENDIAN, "persistentdata.bin"),
}

S3_SAVE_NAME = "sonic3.srm"
S3K_SAVE_NAME = "s3&k.srm"

# Steam: constant prefix, then a big-endian word image starting at offset 3
STEAM_PREFIX = bytes([0x2C, 0x80, 0x02])
STEAM_DATA_START = 4
STEAM_IMAGE_BYTES = CONSOLE_SIZE - 2

# AIR container
AIR_IDENTIFIER = b"OXY.PDATA\x00\x01"
AIR_START = 0x013
AIR_PREFIX = b"SRAM_"
AIR_HEADER_TRAILER = bytes([0x00, 0x00, 0x00, 0x0E, 0x00, 0x00, 0x00])
AIR_NAME_PADDING = 2
AIR_LENGTH_FIELD = 2


# ============================================================================
# Game mechanics
# ============================================================================

class Character(IntEnum):
    """Playable characters (S3K packs these into the high nibble)."""
    NOBODY = -1
    SONIC_TAILS = 0
    SONIC = 1
    TAILS = 2
    KNUCKLES = 3
    KNUCKLES_TAILS = 4  # Sonic 3 A.I.R. only


NEW = 0x80

EMERALDS = 7
S3_LAST_ZONE = 0x05
# Sonic 3 skips one zone index compared to S3K numbering
S3_ZONE_GAP = 4
SONIC_LAST_ZONE = 0x0D
TAILS_LAST_ZONE = 0x0C
KNUCKLES_LAST_ZONE = 0x0B

# (minimum, maximum) of editable numeric fields
FIELD_LIMITS = {
    "lives": (0, 99),
    "continues": (0, 99),
    "minutes": (0, 9),
    "seconds": (0, 59),
    "ticks": (0, 99),
    "last": (0, 0xFF),
    "rings": (0, 0xFF),
    "emerald_mask": (0, 0xFF),
    "s3_emerald_count": (0, EMERALDS),
    "s3k_emerald_count": (0, 0x0F),
    "character": (0, 0x0F),
    "cp_character": (0, 0xFF),
}
