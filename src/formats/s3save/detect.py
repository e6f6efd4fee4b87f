"""
Save format detection.

Each format is recognised by the two ASCII bytes that close the competition
section ("LD", stored as "DL" on PC) at a format-specific offset, or by the
AIR container identifier. Probes run in a fixed order and the first match
wins.
"""

import logging
from enum import Enum
from typing import Tuple

from .constants import AIR_IDENTIFIER, DataWidth, Platform
from .errors import FormatUnrecognized
from .options import SaveOptions
from utils.binary import ByteOrder

logger = logging.getLogger(__name__)

L = 0x4C
D = 0x44


class SaveFormat(Enum):
    """Concrete on-disk layouts that can be told apart."""
    PC = "pc"
    CONSOLE_BYTE = "console-byte"
    STEAM = "steam"
    CONSOLE_WORD_LE = "console-word-le"
    CONSOLE_WORD_BE = "console-word-be"
    AIR = "air"

    @property
    def platform(self) -> Platform:
        if self is SaveFormat.PC:
            return Platform.PC
        if self is SaveFormat.STEAM:
            return Platform.STEAM
        if self is SaveFormat.AIR:
            return Platform.AIR
        return Platform.CONSOLE


# (format, first offset, first byte, second offset, second byte) in probe order
MARKER_PROBES: Tuple[Tuple[SaveFormat, int, int, int, int], ...] = (
    (SaveFormat.PC, 0x50, D, 0x51, L),
    (SaveFormat.CONSOLE_BYTE, 0x58, L, 0x59, D),
    (SaveFormat.STEAM, 0xB4, L, 0xB6, D),
    (SaveFormat.CONSOLE_WORD_LE, 0xB0, L, 0xB2, D),
    (SaveFormat.CONSOLE_WORD_BE, 0xB1, L, 0xB3, D),
)

# where the filler byte of a word-wide image can be read
FILLER_PROBES = {
    SaveFormat.CONSOLE_WORD_LE: 0xB1,
    SaveFormat.CONSOLE_WORD_BE: 0xB2,
}


def _byte_at(buffer: bytes, offset: int) -> int:
    return buffer[offset] if offset < len(buffer) else -1


def detect(buffer: bytes) -> SaveFormat:
    """Return the format that produced ``buffer`` or raise FormatUnrecognized."""
    for save_format, first, first_value, second, second_value in MARKER_PROBES:
        if _byte_at(buffer, first) == first_value and _byte_at(buffer, second) == second_value:
            logger.debug(f"Detected {save_format.value} save ({len(buffer)} bytes)")
            return save_format

    if bytes(buffer[:len(AIR_IDENTIFIER)]) == AIR_IDENTIFIER:
        logger.debug(f"Detected AIR container ({len(buffer)} bytes)")
        return SaveFormat.AIR

    raise FormatUnrecognized()


def detect_options(buffer: bytes) -> Tuple[SaveFormat, SaveOptions]:
    """Detect the format and the matching output preferences."""
    save_format = detect(buffer)

    if save_format in (SaveFormat.PC, SaveFormat.AIR):
        options = SaveOptions(save_format.platform, DataWidth.BYTE, ByteOrder.LITTLE_ENDIAN)
    elif save_format is SaveFormat.CONSOLE_BYTE:
        options = SaveOptions(Platform.CONSOLE, DataWidth.BYTE, ByteOrder.BIG_ENDIAN)
    elif save_format is SaveFormat.STEAM:
        options = SaveOptions(Platform.STEAM, DataWidth.WORD, ByteOrder.BIG_ENDIAN, 0x00)
    else:
        order = (ByteOrder.LITTLE_ENDIAN if save_format is SaveFormat.CONSOLE_WORD_LE
                 else ByteOrder.BIG_ENDIAN)
        filler = buffer[FILLER_PROBES[save_format]]
        options = SaveOptions(Platform.CONSOLE, DataWidth.WORD, order, filler)

    return save_format, options
