"""
Sonic 3 A.I.R. persistent data container.

Layout:
    "OXY.PDATA\\0\\1"                      identifier (11 bytes)
    count, 00 00 00, 0E 00 00 00            header (records start at 0x13)
    per record:
        name, NUL                           e.g. "SRAM_SaveslotsP"
        2-byte field                        not needed by the canonical model
        section bytes                       checksum zeroed

Only the S3&K single-player and competition sections exist in AIR.

The reader is a two-state machine over the bytes after the header:

    state      byte                          action                    next
    SCANNING   'S' starting "SRAM_"          begin name                IN_NAME
    SCANNING   any other                     append to open record     SCANNING
    IN_NAME    NUL                           open record for name      SCANNING
    IN_NAME    any other                     extend name               IN_NAME
"""

import logging
from enum import Enum
from typing import Dict, Optional

from .checksum import strip_checksum
from .constants import (
    AIR_HEADER_TRAILER, AIR_IDENTIFIER, AIR_LENGTH_FIELD, AIR_NAME_PADDING,
    AIR_PREFIX, AIR_SIZE, AIR_START, SECTION_LAYOUTS, Section,
)
from .errors import FormatUnrecognized
from .sections import blank_section
from utils.binary import IoBuffer

logger = logging.getLogger(__name__)

AIR_SECTIONS = (Section.S3K, Section.COMPETITION)


class ParserState(Enum):
    SCANNING = "scanning"
    IN_NAME = "in_name"


class AirRecordParser:
    """Collects named record payloads from an AIR container."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.state = ParserState.SCANNING
        self.name = ""
        self.current: Optional[str] = None
        self.records: Dict[str, bytearray] = {}

    def _starts_record(self, pos: int) -> bool:
        return self.data[pos:pos + len(AIR_PREFIX)] == AIR_PREFIX

    def feed(self, pos: int):
        """Advance the state machine by the byte at ``pos``."""
        byte = self.data[pos]

        if self.state is ParserState.SCANNING:
            if byte == AIR_PREFIX[0] and self._starts_record(pos):
                self.state = ParserState.IN_NAME
                self.name = chr(byte)
            elif self.current is not None:
                self.records[self.current].append(byte)
        else:
            if byte == 0x00:
                self.state = ParserState.SCANNING
                self.current = self.name
                self.records[self.current] = bytearray()
            else:
                self.name += chr(byte)

    def parse(self, start: int = AIR_START) -> Dict[str, bytearray]:
        for pos in range(start, len(self.data)):
            self.feed(pos)
        logger.debug(f"AIR records: {', '.join(self.records) or '(none)'}")
        return self.records


def read_air(data: bytes) -> Dict[Section, bytearray]:
    """Extract the S3&K and competition section bodies (checksums zeroed)."""
    header = IoBuffer.from_bytes(bytes(data))
    if len(data) < AIR_START or header.read_bytes(len(AIR_IDENTIFIER)) != AIR_IDENTIFIER:
        raise FormatUnrecognized("Not an A.I.R. persistent data file.")
    count = header.read_byte()
    header.read_bytes(len(AIR_HEADER_TRAILER))

    records = AirRecordParser(data).parse(header.position)
    logger.debug(f"AIR header announces {count} records, found {len(records)}")
    sections: Dict[Section, bytearray] = {}

    for section in AIR_SECTIONS:
        layout = SECTION_LAYOUTS[section]
        payload = records.get(layout.air_name)
        if payload is None:
            sections[section] = bytearray()
            continue

        body = payload[AIR_LENGTH_FIELD:AIR_LENGTH_FIELD + layout.length]
        if len(body) < layout.length:
            logger.warning(f"AIR record {layout.air_name} is short ({len(body)} bytes), padding")
            body += bytes(layout.length - len(body))
        sections[section] = bytearray(body)

    sections[Section.S3] = bytearray()
    return sections


def write_air(sections: Dict[Section, bytes]) -> bytes:
    """Build an AIR container from the S3&K and competition sections."""
    out = IoBuffer.empty()
    out.write_bytes(AIR_IDENTIFIER)
    out.write_byte(len(AIR_SECTIONS))
    out.write_bytes(AIR_HEADER_TRAILER)

    for section in AIR_SECTIONS:
        layout = SECTION_LAYOUTS[section]
        out.write_ascii(layout.air_name)
        out.write_byte(0x00)
        out.write_bytes(bytes(AIR_NAME_PADDING))
        out.write_bytes(strip_checksum(sections.get(section) or blank_section(section)))

    data = out.getvalue()
    return data + bytes(max(0, AIR_SIZE - len(data)))
