"""
Gameplay records packed inside the sections.

Sonic 3 slot (8 bytes):
    0  sentinel (0x80 = new slot)
    1  always zero
    2  character
    3  zone (one index higher than S3&K numbering past Flying Battery)
    4  last special stage reached
    5  number of emeralds
    6  emerald bitmask
    7  giant ring bitmask

Sonic 3 & Knuckles slot (10 bytes):
    0  clear state (0x80 = new slot)
    1  always zero
    2  character << 4 | emerald counter
    3  zone
    4  giant ring bitmask
    5  always zero
    6  emeralds, four 2-bit states
    7  emeralds, four 2-bit states
    8  lives
    9  continues

Competition (16 bytes per stage):
    three rankings of [sentinel, minutes, seconds, ticks],
    then one character byte per ranking, then one spare byte.

Decoding never fails: values out of range are clamped or defaulted.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Sequence

from .constants import (
    CP_RANKINGS, CP_STAGE_LENGTH, CP_STAGES, EMERALDS, FIELD_LIMITS,
    KNUCKLES_LAST_ZONE, NEW, S3_LAST_ZONE, S3_ZONE_GAP, SECTION_LAYOUTS,
    SONIC_LAST_ZONE, TAILS_LAST_ZONE, Character, Game,
)

logger = logging.getLogger(__name__)

S3_SLOT = SECTION_LAYOUTS[Game.S3.section]
S3K_SLOT = SECTION_LAYOUTS[Game.S3K.section]

# emerald positions per S3K slot (two bytes of four 2-bit states)
EMERALD_POSITIONS = 8


class ClearState(IntEnum):
    """Completion level of a Sonic 3 & Knuckles slot."""
    NONE = 0
    CLEAR = 1
    CHAOS_CLEAR = 2  # all chaos emeralds
    SUPER_CLEAR = 3  # all super emeralds

    @classmethod
    def for_emeralds(cls, states: Sequence["EmeraldState"]) -> "ClearState":
        """Clear level earned by finishing the game holding ``states``."""
        collected = sum(1 for s in states if s != EmeraldState.ABSENT)
        upgraded = sum(1 for s in states if s == EmeraldState.UPGRADED)
        if upgraded >= EMERALDS:
            return cls.SUPER_CLEAR
        if collected >= EMERALDS:
            return cls.CHAOS_CLEAR
        return cls.CLEAR


class EmeraldState(IntEnum):
    """bit0 = collected, bit1 = Hidden Palace visited."""
    ABSENT = 0
    COLLECTED = 1
    VISITED = 2
    UPGRADED = 3

    def next(self) -> "EmeraldState":
        """
        Editor rotation: absent, collected, upgraded, absent.

        VISITED is only ever read from a file, never written, so it is skipped
        and moves on to UPGRADED.
        """
        if self == EmeraldState.ABSENT:
            return EmeraldState.COLLECTED
        if self == EmeraldState.UPGRADED:
            return EmeraldState.ABSENT
        return EmeraldState.UPGRADED


# ============================================================================
# Record types
# ============================================================================

@dataclass
class S3Slot:
    """Sonic 3 save slot."""
    is_new: bool = True
    is_clear: bool = False
    character: int = Character.SONIC_TAILS
    zone: int = 0
    last: int = 0
    emerald_count: int = 0
    emeralds: int = 0
    rings: int = 0


@dataclass
class S3KSlot:
    """Sonic 3 & Knuckles save slot."""
    is_new: bool = True
    clear: ClearState = ClearState.NONE
    character: int = Character.SONIC_TAILS
    emerald_count: int = 0
    zone: int = 0
    rings: int = 0
    emeralds: List[EmeraldState] = field(
        default_factory=lambda: [EmeraldState.ABSENT] * EMERALD_POSITIONS)
    lives: int = 0
    continues: int = 0

    @property
    def is_clear(self) -> bool:
        return self.clear != ClearState.NONE

    @property
    def collected_emeralds(self) -> int:
        return sum(1 for s in self.emeralds if s != EmeraldState.ABSENT)

    @property
    def upgraded_emeralds(self) -> int:
        return sum(1 for s in self.emeralds if s == EmeraldState.UPGRADED)


@dataclass
class CompetitionRow:
    """One ranking of a competition stage."""
    is_new: bool = True
    minutes: int = 0
    seconds: int = 0
    ticks: int = 0
    character: int = 0


# ============================================================================
# Helpers
# ============================================================================

def _clamp(value: int, limit: str) -> int:
    low, high = FIELD_LIMITS[limit]
    clamped = max(low, min(int(value), high))
    if clamped != value:
        logger.debug(f"Clamped {limit} {value} -> {clamped}")
    return clamped


def _as_character(value: int) -> int:
    try:
        return Character(value)
    except ValueError:
        return value


def _record_offset(index: int, count: int, length: int) -> int:
    if not 0 <= index < count:
        raise IndexError(f"Record index {index} out of range 0-{count - 1}")
    return index * length


def _unpack_emeralds(first: int, second: int) -> List[EmeraldState]:
    states = []
    for value in (first, second):
        for i in range(4):
            states.append(EmeraldState((value >> (i * 2)) & 0x03))
    return states


def _pack_emeralds(states: Sequence[EmeraldState]) -> bytes:
    packed = [0, 0]
    for i, state in enumerate(list(states)[:EMERALD_POSITIONS]):
        state = EmeraldState(int(state) & 0x03)
        if state == EmeraldState.VISITED:
            # a visited emerald has been collected
            state = EmeraldState.COLLECTED
        packed[i // 4] |= int(state) << ((i % 4) * 2)
    return bytes(packed)


def max_zone(character: int, collected_emeralds: int, advanced: bool = False) -> int:
    """Highest zone a character can be saved in."""
    if character == Character.TAILS:
        return TAILS_LAST_ZONE
    if character == Character.KNUCKLES:
        # advanced mode allows Death Egg for Knuckles
        return KNUCKLES_LAST_ZONE + 1 if advanced else KNUCKLES_LAST_ZONE
    if collected_emeralds >= EMERALDS:
        return SONIC_LAST_ZONE
    return SONIC_LAST_ZONE - 1


def clear_zone(character: int, clear: ClearState) -> int:
    """Zone value stored for a cleared game."""
    if character == Character.TAILS:
        zone = TAILS_LAST_ZONE
    elif character == Character.KNUCKLES:
        zone = KNUCKLES_LAST_ZONE
    elif clear in (ClearState.CHAOS_CLEAR, ClearState.SUPER_CLEAR):
        zone = SONIC_LAST_ZONE  # Doomsday
    else:
        zone = SONIC_LAST_ZONE - 1  # Death Egg
    return zone + 1


# ============================================================================
# Sonic 3
# ============================================================================

def decode_s3_slot(section: bytes, index: int) -> S3Slot:
    """Read a Sonic 3 slot; an empty section yields a new slot."""
    pos = _record_offset(index, S3_SLOT.record_count, S3_SLOT.record_length)
    if not section:
        return S3Slot()

    zone = section[pos + 3]

    # adjusts zones after Flying Battery to match S3&K
    if zone > S3_ZONE_GAP:
        zone -= 1

    return S3Slot(
        is_new=section[pos] == NEW,
        is_clear=zone > S3_LAST_ZONE,
        character=_as_character(section[pos + 2]),
        zone=min(zone, S3_LAST_ZONE),
        last=section[pos + 4],
        emerald_count=section[pos + 5],
        emeralds=section[pos + 6],
        rings=section[pos + 7],
    )


def encode_s3_slot(section: bytearray, index: int, slot: S3Slot):
    """Write a Sonic 3 slot into its byte range."""
    pos = _record_offset(index, S3_SLOT.record_count, S3_SLOT.record_length)

    if slot.is_new:
        section[pos:pos + S3_SLOT.record_length] = bytes([NEW]) + bytes(S3_SLOT.record_length - 1)
        return

    if slot.is_clear:
        zone = S3_LAST_ZONE + 1
    else:
        zone = max(0, min(int(slot.zone), S3_LAST_ZONE))

    # adjust from S3&K numbering
    if zone >= S3_ZONE_GAP:
        zone += 1

    section[pos:pos + S3_SLOT.record_length] = bytes([
        0,
        0,
        _clamp(slot.character, "character"),
        zone,
        _clamp(slot.last, "last"),
        _clamp(slot.emerald_count, "s3_emerald_count"),
        _clamp(slot.emeralds, "emerald_mask"),
        _clamp(slot.rings, "rings"),
    ])


# ============================================================================
# Sonic 3 & Knuckles
# ============================================================================

def decode_s3k_slot(section: bytes, index: int, advanced: bool = False) -> S3KSlot:
    """Read a Sonic 3 & Knuckles slot, clamping the zone to what the character can reach."""
    pos = _record_offset(index, S3K_SLOT.record_count, S3K_SLOT.record_length)
    if not section:
        return S3KSlot()

    clear = section[pos]
    if clear > ClearState.SUPER_CLEAR:
        clear = ClearState.NONE

    character = _as_character((section[pos + 2] & 0xF0) >> 4)
    emeralds = _unpack_emeralds(section[pos + 6], section[pos + 7])

    slot = S3KSlot(
        is_new=section[pos] == NEW,
        clear=ClearState(clear),
        character=character,
        emerald_count=section[pos + 2] & 0x0F,
        zone=section[pos + 3],
        rings=section[pos + 4],
        emeralds=emeralds,
        lives=section[pos + 8],
        continues=section[pos + 9],
    )

    last = max_zone(character, slot.collected_emeralds, advanced)
    if slot.zone > last:
        logger.debug(f"Slot {index}: zone {slot.zone:#04x} clamped to {last:#04x}")
        slot.zone = last

    return slot


def encode_s3k_slot(section: bytearray, index: int, slot: S3KSlot):
    """Write a Sonic 3 & Knuckles slot into its byte range."""
    pos = _record_offset(index, S3K_SLOT.record_count, S3K_SLOT.record_length)

    if slot.is_new:
        section[pos:pos + S3K_SLOT.record_length] = bytes([NEW]) + bytes(S3K_SLOT.record_length - 1)
        return

    emerald_count = _clamp(slot.emerald_count, "s3k_emerald_count")

    # goes back to 0 when all emeralds collected
    if emerald_count >= EMERALDS:
        emerald_count = 0

    clear = ClearState(max(0, min(int(slot.clear), ClearState.SUPER_CLEAR)))
    character = _clamp(slot.character, "character")

    if clear:
        zone = clear_zone(character, clear)
    else:
        zone = max(0, min(int(slot.zone), 0xFF))

    section[pos:pos + S3K_SLOT.record_length] = bytes([
        clear,
        0,
        character << 4 | emerald_count,
        zone,
        _clamp(slot.rings, "rings"),
        0,
    ]) + _pack_emeralds(slot.emeralds) + bytes([
        _clamp(slot.lives, "lives"),
        _clamp(slot.continues, "continues"),
    ])


# ============================================================================
# Competition
# ============================================================================

def _competition_offsets(stage: int, rank: int):
    if not 0 <= stage < CP_STAGES:
        raise IndexError(f"Stage {stage} out of range 0-{CP_STAGES - 1}")
    if not 0 <= rank < CP_RANKINGS:
        raise IndexError(f"Ranking {rank} out of range 0-{CP_RANKINGS - 1}")
    start = stage * CP_STAGE_LENGTH
    return start + rank * 4, start + 4 * CP_RANKINGS + rank


def decode_competition_row(section: bytes, stage: int, rank: int) -> CompetitionRow:
    """Combine a ranking's time block with its character byte."""
    pos, character = _competition_offsets(stage, rank)
    if not section:
        return CompetitionRow()

    return CompetitionRow(
        is_new=section[pos] == NEW,
        minutes=section[pos + 1],
        seconds=section[pos + 2],
        ticks=section[pos + 3],
        character=section[character],
    )


def encode_competition_row(section: bytearray, stage: int, rank: int, row: CompetitionRow):
    """Write a ranking back into its two disjoint regions."""
    pos, character = _competition_offsets(stage, rank)

    if row.is_new:
        section[pos:pos + 4] = bytes([NEW, 0, 0, 0])
        section[character] = 0
        return

    section[pos:pos + 4] = bytes([
        0,
        _clamp(row.minutes, "minutes"),
        _clamp(row.seconds, "seconds"),
        _clamp(row.ticks, "ticks"),
    ])
    section[character] = _clamp(row.character, "cp_character")


def decode_stage(section: bytes, stage: int) -> List[CompetitionRow]:
    """All rankings of one competition stage."""
    return [decode_competition_row(section, stage, rank) for rank in range(CP_RANKINGS)]


def encode_stage(section: bytearray, stage: int, rows: Sequence[CompetitionRow]):
    for rank, row in enumerate(list(rows)[:CP_RANKINGS]):
        encode_competition_row(section, stage, rank, row)


# ============================================================================
# Slot overview
# ============================================================================

def slot_characters(section: bytes, game: Game) -> List[int]:
    """Character per slot for slot tabs, NOBODY for new slots or missing data."""
    layout = SECTION_LAYOUTS[game.section]
    characters = []

    for i in range(layout.record_count):
        pos = i * layout.record_length
        if not section or section[pos] == NEW:
            characters.append(Character.NOBODY)
            continue

        value = section[pos + 2]
        if game is Game.S3K:
            value = (value & 0xF0) >> 4
        characters.append(_as_character(value))

    return characters
