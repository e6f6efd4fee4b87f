"""
Section checksum.

Every section ends in a big-endian 16-bit value computed by a table-free
LFSR over the preceding big-endian words. The same routine is used for all
platforms because checksums are always evaluated on the canonical image.
"""

from utils.binary import read_uint16_be, write_uint16_be

POLYNOMIAL = 0x8810


def checksum(data: bytes) -> int:
    """Compute the checksum of a section (its last two bytes are ignored)."""
    value = 0
    for i in range(0, len(data) - 2, 2):
        value ^= (data[i] << 8) | data[i + 1]

        carry = value & 1  # least significant bit before shift
        value >>= 1

        if carry:
            value ^= POLYNOMIAL

    return value


def stored_checksum(data: bytes) -> int:
    """Checksum value stored in the trailing two bytes (0 for short runs)."""
    if len(data) < 2:
        return 0
    return read_uint16_be(data, len(data) - 2)


def verify(data: bytes) -> bool:
    """True if the stored checksum matches the computed one."""
    if len(data) < 2:
        return False
    return stored_checksum(data) == checksum(data)


def update_in_place(data: bytearray) -> bytearray:
    """Write the recomputed checksum into the last two bytes and return ``data``."""
    if len(data) >= 2:
        write_uint16_be(data, len(data) - 2, checksum(data))
    return data


def strip_checksum(data: bytes) -> bytearray:
    """Copy of ``data`` with the checksum bytes zeroed."""
    out = bytearray(data)
    if len(out) >= 2:
        out[-2:] = b"\x00\x00"
    return out
