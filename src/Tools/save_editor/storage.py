"""
Storage - Last Edited Save Persistence

Named JSON key-value store that keeps the last edited save between editor
sessions. One file per store name, in the user's home directory unless a
directory is given.

A store that cannot be read is reset rather than reported; the editor then
starts from defaults.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# RESULT TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class StorageResult:
    """Result of a storage write."""
    success: bool
    message: str
    path: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════════════════
# STORAGE
# ═══════════════════════════════════════════════════════════════════════════════

class Storage:
    """
    JSON-backed store for a single value.

    The value is whatever the editor hands over (usually the persistence
    blob of the current save); it is stored as JSON text.
    """

    DEFAULT_NAME = "sonic3"
    FILENAME_TEMPLATE = ".s3saveedit_{name}.json"

    def __init__(self, name: str = DEFAULT_NAME, directory: str = None):
        self.name = name
        self.directory = Path(directory) if directory else Path.home()

    @property
    def path(self) -> Path:
        return self.directory / self.FILENAME_TEMPLATE.format(name=self.name)

    @property
    def exists(self) -> bool:
        return self.path.exists()

    # ─── Load ─────────────────────────────────────────────────────────────────

    def load(self) -> Any:
        """
        Return the stored value, or None if nothing is stored.

        Unreadable contents are discarded.
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Discarding unreadable store {self.path.name}: {e}")
            self.reset()
            return None

    # ─── Save ─────────────────────────────────────────────────────────────────

    def save(self, value: Any) -> StorageResult:
        """Store ``value``; None clears the store."""
        if value is None:
            self.reset()
            return StorageResult(True, f"Cleared {self.path.name}", str(self.path))

        try:
            if isinstance(value, (str, bytes, bytearray)):
                # already serialized
                value = json.loads(value)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(value, f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not write {self.path}: {e}")
            return StorageResult(False, f"Save failed: {e}")

        return StorageResult(True, f"Saved to {self.path.name}", str(self.path))

    def reset(self):
        """Remove the stored value."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Could not remove {self.path}: {e}")
