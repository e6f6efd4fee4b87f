"""
Status Bar Component.
Shows the file being edited and the last editor message.
"""

import dearpygui.dearpygui as dpg

from ..events import EventBus, Events
from ..state import STATE
from ..theme import Colors


class StatusBar:
    """Application status bar."""

    TAG = "status_bar"
    FILE_TAG = "status_file"
    TEXT_TAG = "status_text"

    def __init__(self, width: int = 900, height: int = 30, y_pos: int = 870):
        self.width = width
        self.height = height
        self.y_pos = y_pos
        self._create_bar()
        self._subscribe_events()

    def _create_bar(self):
        """Create the status bar."""
        with dpg.window(
            tag=self.TAG,
            no_title_bar=True,
            no_resize=True,
            no_move=True,
            no_close=True,
            no_collapse=True,
            no_scrollbar=True,
            pos=(0, self.y_pos),
            width=self.width,
            height=self.height
        ):
            with dpg.group(horizontal=True):
                dpg.add_text("s3saveedit", color=Colors.ACCENT_GREEN)
                dpg.add_text(" | ", color=Colors.SEPARATOR)
                dpg.add_text("(defaults)", tag=self.FILE_TAG, color=Colors.ACCENT_BLUE)
                dpg.add_text(" | ", color=Colors.SEPARATOR)
                dpg.add_text("Ready", tag=self.TEXT_TAG, color=Colors.TEXT_DIM)

    def _subscribe_events(self):
        """Subscribe to status events."""
        EventBus.subscribe(Events.STATUS_UPDATE, self._on_status_update)
        EventBus.subscribe(Events.SAVE_LOADED, self._on_file_changed)
        EventBus.subscribe(Events.SAVE_WRITTEN, self._on_file_changed)

    def _on_status_update(self, message: str):
        """Handle status update event."""
        dpg.set_value(self.TEXT_TAG, message)

    def _on_file_changed(self, _):
        name = STATE.current_file.name if STATE.current_file else "(defaults)"
        dpg.set_value(self.FILE_TAG, name)

    @classmethod
    def update(cls, message: str):
        """Directly update the status bar text."""
        if dpg.does_item_exist(cls.TEXT_TAG):
            dpg.set_value(cls.TEXT_TAG, message)
