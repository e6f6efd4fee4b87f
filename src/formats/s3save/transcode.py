"""
Conversion between on-disk images and the canonical console image.

    CONSOLE byte   identity
    CONSOLE word   every canonical byte paired with a filler byte
    PC             byte-wide, own offsets, 1 KB, records laid out differently
    STEAM          big-endian word image after a 3-byte prefix, ~160 KB
    AIR            named records, see air.py

Importers return either a canonical buffer (console, Steam) or resolved
section bodies (PC, AIR) that still need committing into a fresh buffer.
"""

import logging
from typing import Dict

from .air import read_air, write_air
from .checksum import strip_checksum
from .constants import (
    CONSOLE_SIZE, CP_FOOTER_OFFSET, CP_RANKINGS, CP_STAGE_LENGTH, CP_STAGES,
    PC_SIZE, SECTION_LAYOUTS, SECTION_ORDER, STEAM_DATA_START, STEAM_IMAGE_BYTES,
    STEAM_PREFIX, STEAM_SIZE, DataWidth, Platform, Section,
)
from .detect import SaveFormat
from utils.binary import ByteOrder, deinterleave, interleave

logger = logging.getLogger(__name__)


def _fit(data: bytes, size: int) -> bytearray:
    """Pad with zeros or truncate to ``size``."""
    out = bytearray(data[:size])
    out += bytes(size - len(out))
    return out


# ============================================================================
# PC record layout differences
# ============================================================================

def swap_emerald_bytes(section: bytearray) -> bytearray:
    """Exchange the two emerald bytes of every S3&K slot (in place)."""
    layout = SECTION_LAYOUTS[Section.S3K]
    if not section:
        return section
    for i in range(layout.record_count):
        pos = i * layout.record_length
        section[pos + 6], section[pos + 7] = section[pos + 7], section[pos + 6]
    return section


def reverse_competition_rows(section: bytearray) -> bytearray:
    """
    Reverse the four bytes of every competition ranking (in place).

    The footer marker is stored reversed on PC as well.
    """
    if not section:
        return section
    for stage in range(CP_STAGES):
        start = stage * CP_STAGE_LENGTH
        for rank in range(CP_RANKINGS):
            pos = start + rank * 4
            section[pos:pos + 4] = section[pos:pos + 4][::-1]
    footer = section[CP_FOOTER_OFFSET:CP_FOOTER_OFFSET + 2]
    section[CP_FOOTER_OFFSET:CP_FOOTER_OFFSET + 2] = footer[::-1]
    return section


def _pc_transform(section: Section, data: bytearray) -> bytearray:
    if section is Section.S3K:
        return swap_emerald_bytes(data)
    if section is Section.COMPETITION:
        return reverse_competition_rows(data)
    return data


def read_pc(data: bytes) -> Dict[Section, bytearray]:
    """Pull the three sections out of a PC image, in canonical record layout."""
    data = _fit(data, PC_SIZE)
    sections = {}
    for section in SECTION_ORDER:
        layout = SECTION_LAYOUTS[section]
        body = bytearray(data[layout.pc_offset:layout.pc_offset + layout.length])
        sections[section] = _pc_transform(section, body)
    return sections


def write_pc(sections: Dict[Section, bytes]) -> bytes:
    """Build a 1 KB PC image (checksums zeroed, PC record layout)."""
    out = bytearray(PC_SIZE)
    for section in SECTION_ORDER:
        body = sections.get(section)
        if not body:
            continue
        layout = SECTION_LAYOUTS[section]
        body = _pc_transform(section, strip_checksum(body))
        out[layout.pc_offset:layout.pc_offset + len(body)] = body
    return bytes(out)


# ============================================================================
# Steam
# ============================================================================

def read_steam(data: bytes) -> bytearray:
    """Canonical image embedded after the Steam prefix."""
    image = deinterleave(data[STEAM_DATA_START - 1:CONSOLE_SIZE * 2], ByteOrder.BIG_ENDIAN)
    return _fit(image, CONSOLE_SIZE)


def write_steam(canonical: bytes) -> bytes:
    out = bytearray(STEAM_SIZE)

    # file always starts with these bytes
    out[:len(STEAM_PREFIX)] = STEAM_PREFIX

    image = bytes(canonical[:STEAM_IMAGE_BYTES])
    out[STEAM_DATA_START:STEAM_DATA_START + 2 * len(image):2] = image
    return bytes(out)


# ============================================================================
# Dispatch
# ============================================================================

def import_buffer(data: bytes, save_format: SaveFormat):
    """
    Normalise a detected image.

    Returns ``(canonical_buffer, None)`` for console and Steam images, or
    ``(None, sections)`` for PC and AIR containers.
    """
    if save_format is SaveFormat.PC:
        return None, read_pc(data)
    if save_format is SaveFormat.AIR:
        return None, read_air(data)
    if save_format is SaveFormat.STEAM:
        return read_steam(data), None
    if save_format is SaveFormat.CONSOLE_WORD_LE:
        return _fit(deinterleave(data, ByteOrder.LITTLE_ENDIAN), CONSOLE_SIZE), None
    if save_format is SaveFormat.CONSOLE_WORD_BE:
        return _fit(deinterleave(data, ByteOrder.BIG_ENDIAN), CONSOLE_SIZE), None
    return _fit(data, CONSOLE_SIZE), None


def export_buffer(canonical: bytes, sections: Dict[Section, bytes], platform: Platform,
                  data_width: DataWidth, byte_order: ByteOrder, filler_byte: int) -> bytes:
    """Produce the on-disk image for ``platform``."""
    if platform == Platform.PC:
        return write_pc(sections)
    if platform == Platform.STEAM:
        return write_steam(canonical)
    if platform == Platform.AIR:
        return write_air(sections)
    if data_width == DataWidth.BYTE:
        return bytes(canonical)
    logger.debug(f"Word image, {byte_order.name}, filler {filler_byte:#04x}")
    return bytes(interleave(canonical, filler_byte, byte_order))
