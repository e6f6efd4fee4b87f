"""
Global application state.
Single source of truth for the UI.
"""

import time
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from Tools.save_editor import SaveManager, Storage


@dataclass
class AppState:
    """Global application state container."""

    # Editing session (created on first use)
    save_manager: Optional[SaveManager] = None

    # Loaded data
    current_file: Optional[Path] = None
    last_directory: Optional[Path] = None

    # Logs (append-only)
    logs: list = field(default_factory=list)
    max_logs: int = 1000

    def get_manager(self, storage: Storage = None) -> SaveManager:
        """Return the editing session, creating it on first use."""
        if self.save_manager is None:
            self.save_manager = SaveManager(storage)
        return self.save_manager

    def set_file(self, file_path: Optional[Path]):
        """Remember the file being edited and its folder for the next dialog."""
        self.current_file = file_path
        if file_path is not None:
            self.last_directory = Path(file_path).parent

    def log(self, message: str, level: str = "INFO"):
        """Add log entry."""
        entry = {
            "time": time.strftime("%H:%M:%S"),
            "level": level,
            "message": message
        }
        self.logs.append(entry)
        if len(self.logs) > self.max_logs:
            self.logs = self.logs[-self.max_logs:]

    def clear(self):
        """Clear all state."""
        self.save_manager = None
        self.current_file = None
        self.logs = []


# Singleton instance
STATE = AppState()
