"""
Section resolution and commit.

All data is stored twice in the canonical image. The first copy is used if
its checksum passes, otherwise the second one; a section where neither copy
passes is treated as empty, which simply means no save data is present.
"""

import logging
from typing import Tuple

from .checksum import update_in_place, verify
from .constants import (
    CP_FOOTER, CP_FOOTER_OFFSET, CP_RANKINGS, CP_STAGE_LENGTH, CP_STAGES,
    NEW, SECTION_LAYOUTS, Section, SectionLayout,
)

logger = logging.getLogger(__name__)


def resolve(primary: bytes, secondary: bytes) -> bytearray:
    """Pick the first copy that verifies, or return an empty section."""
    if verify(primary):
        return bytearray(primary)
    if verify(secondary):
        logger.warning("Primary copy failed checksum, using secondary copy")
        return bytearray(secondary)
    return bytearray()


def commit(section: bytearray, write_enabled: bool = True) -> Tuple[bytes, bytes]:
    """
    Refresh the checksum of ``section`` and return the bytes for both copies.

    A disabled section commits as zero fill so the persisted image no longer
    carries it; the in-memory section keeps its data.
    """
    if not section:
        return b"", b""

    update_in_place(section)
    data = bytes(section) if write_enabled else bytes(len(section))
    return data, data


def read_section(buffer: bytes, layout: SectionLayout) -> bytearray:
    """Resolve a section from its twin offsets in the canonical buffer."""
    primary = buffer[layout.primary:layout.primary + layout.length]
    secondary = buffer[layout.secondary:layout.secondary + layout.length]
    section = resolve(primary, secondary)
    if not section:
        logger.debug(f"Section {layout.section.value}: no valid copy")
    return section


def write_section(buffer: bytearray, layout: SectionLayout, section: bytearray,
                  write_enabled: bool = True):
    """Commit a section into both of its canonical offsets."""
    primary, secondary = commit(section, write_enabled)
    if not primary:
        return
    buffer[layout.primary:layout.primary + len(primary)] = primary
    buffer[layout.secondary:layout.secondary + len(secondary)] = secondary


def blank_section(section: Section) -> bytearray:
    """A valid section where every slot and ranking is new."""
    layout = SECTION_LAYOUTS[section]
    data = bytearray(layout.length)

    if section is Section.COMPETITION:
        for stage in range(CP_STAGES):
            for rank in range(CP_RANKINGS):
                data[stage * CP_STAGE_LENGTH + rank * 4] = NEW
        data[CP_FOOTER_OFFSET:CP_FOOTER_OFFSET + 2] = CP_FOOTER
    else:
        for index in range(layout.record_count):
            data[index * layout.record_length] = NEW

    return update_in_place(data)
