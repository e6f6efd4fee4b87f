# Save Editor Backend for Sonic 3 / Sonic 3 & Knuckles
# Editing session and last-session storage on top of formats.s3save

from .save_manager import (
    SaveManager, default_filename, hex_dump, slot_count, zone_name,
    S3_ZONES, S3K_ZONES, COMPETITION_STAGES, COMPETITION_CHARACTERS,
)
from .storage import Storage, StorageResult

__all__ = [
    'SaveManager', 'default_filename', 'hex_dump', 'slot_count', 'zone_name',
    'S3_ZONES', 'S3K_ZONES', 'COMPETITION_STAGES', 'COMPETITION_CHARACTERS',
    'Storage', 'StorageResult',
]
