"""
Key-value store blob for the last edited save.

Current shape:
    {"file": [512 ints], "options": {"platform", "dataSize", "byteOrder", "fillerByte"}}

Older editors stored the bare byte list, which is still accepted.
"""

import json
import logging
from typing import Any

from .errors import SaveFileError
from .options import SaveOptions
from .save import CanonicalSave

logger = logging.getLogger(__name__)


def serialize_for_persistence(save: CanonicalSave) -> str:
    """Commit ``save`` and return the JSON blob."""
    buffer = save.commit()
    return json.dumps({
        "file": list(buffer),
        "options": save.options.to_dict(),
    })


def _load_blob(blob: Any) -> Any:
    if isinstance(blob, (str, bytes, bytearray)):
        try:
            return json.loads(blob)
        except json.JSONDecodeError as e:
            raise SaveFileError(f"Stored save is not valid JSON: {e}") from e
    return blob


def deserialize_from_persistence(blob: Any) -> CanonicalSave:
    """
    Rebuild a save from a stored blob (JSON text or already parsed value).

    Raises SaveFileError if the blob has neither shape.
    """
    data = _load_blob(blob)

    if isinstance(data, list):
        logger.debug("Restoring legacy byte-list blob")
        file, options = data, {}
    elif isinstance(data, dict):
        file, options = data.get("file") or [], data.get("options") or {}
    else:
        raise SaveFileError(f"Unexpected stored save type: {type(data).__name__}")

    try:
        buffer = bytes(int(b) & 0xFF for b in file)
        save_options = SaveOptions.from_dict(options)
    except (TypeError, ValueError) as e:
        raise SaveFileError(f"Stored save is malformed: {e}") from e

    return CanonicalSave(buffer, save_options)
