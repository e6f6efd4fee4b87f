"""
Sonic 3 / Sonic 3 & Knuckles save data codec.

Reads console (byte or word wide), PC, Steam and A.I.R. saves into one
canonical console image and writes any of them back.
"""
from .constants import (
    Platform, DataWidth, Section, Game, Character, SectionLayout, FormatDescriptor,
    SECTION_LAYOUTS, FORMATS,
)
from .errors import SaveFileError, FormatUnrecognized, NoValidSection, UnsupportedCombination
from .checksum import checksum, verify, update_in_place
from .detect import SaveFormat, detect, detect_options
from .options import SaveOptions
from .records import S3Slot, S3KSlot, CompetitionRow, ClearState, EmeraldState
from .save import CanonicalSave, decode, encode, to_canonical, from_canonical
from .persistence import serialize_for_persistence, deserialize_from_persistence

__all__ = [
    # Layout
    'Platform', 'DataWidth', 'Section', 'Game', 'Character',
    'SectionLayout', 'FormatDescriptor', 'SECTION_LAYOUTS', 'FORMATS',
    # Errors
    'SaveFileError', 'FormatUnrecognized', 'NoValidSection', 'UnsupportedCombination',
    # Codec
    'checksum', 'verify', 'update_in_place',
    'SaveFormat', 'detect', 'detect_options', 'SaveOptions',
    'S3Slot', 'S3KSlot', 'CompetitionRow', 'ClearState', 'EmeraldState',
    'CanonicalSave', 'decode', 'encode', 'to_canonical', 'from_canonical',
    'serialize_for_persistence', 'deserialize_from_persistence',
]
