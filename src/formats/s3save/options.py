"""Output format preferences carried alongside a canonical save."""

from dataclasses import dataclass, replace
from typing import Dict, Any

from .constants import DataWidth, Platform
from utils.binary import ByteOrder

FILLER_BYTES = (0x00, 0xFF)


@dataclass
class SaveOptions:
    """Platform, data width, byte order and filler used when writing."""
    platform: Platform = Platform.CONSOLE
    data_width: DataWidth = DataWidth.WORD
    byte_order: ByteOrder = ByteOrder.BIG_ENDIAN
    filler_byte: int = 0x00

    def with_changes(self, **changes) -> "SaveOptions":
        """Copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @property
    def is_word(self) -> bool:
        return self.data_width == DataWidth.WORD

    def to_dict(self) -> Dict[str, Any]:
        """Storage shape: booleans for width/order."""
        return {
            "platform": int(self.platform),
            "dataSize": self.data_width == DataWidth.WORD,
            "byteOrder": self.byte_order == ByteOrder.BIG_ENDIAN,
            "fillerByte": self.filler_byte,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SaveOptions":
        """Create from the storage shape (missing keys keep defaults)."""
        options = cls()
        if "platform" in data:
            options.platform = Platform(int(data["platform"]))
        if "dataSize" in data:
            options.data_width = DataWidth.WORD if data["dataSize"] else DataWidth.BYTE
        if "byteOrder" in data:
            options.byte_order = ByteOrder.BIG_ENDIAN if data["byteOrder"] else ByteOrder.LITTLE_ENDIAN
        if "fillerByte" in data:
            options.filler_byte = int(data["fillerByte"]) & 0xFF
        return options
