"""Errors raised by the save codec."""


class SaveFileError(ValueError):
    """Base class for unusable save data."""


class FormatUnrecognized(SaveFileError):
    """No platform marker or container identifier matched."""

    def __init__(self, message: str = "Could not determine format of file."):
        super().__init__(message)


class NoValidSection(SaveFileError):
    """Format was detected but no section passed its checksum."""

    def __init__(self, message: str = "File contained no valid data."):
        super().__init__(message)


class UnsupportedCombination(SaveFileError):
    """The requested output format cannot carry the enabled sections."""
