"""s3saveedit formats package - save file codecs."""
from .s3save import CanonicalSave, decode, encode, SaveFileError

__all__ = [
    'CanonicalSave', 'decode', 'encode', 'SaveFileError',
]
