"""
s3saveedit Main Application Frame

DearPyGUI window setup, menu bar, and panel initialization.
"""

import logging
import dearpygui.dearpygui as dpg
from pathlib import Path
import sys

# Add paths for imports
sys.path.insert(0, str(Path(__file__).parent))

from Tools.gui.panels.save_editor_panel import SaveEditorPanel
from Tools.gui.panels.status_bar import StatusBar
from Tools.gui.theme import setup_theme
from Tools.gui.events import EventBus, Events

logger = logging.getLogger(__name__)


class MainApp:
    """Main application frame and window manager."""

    def __init__(self, width: int = 560, height: int = 900):
        self.width = width
        self.height = height
        self.panels = {}

        # Setup DearPyGUI
        dpg.create_context()
        setup_theme()

        dpg.create_viewport(
            title="s3saveedit - Sonic 3 & Knuckles Save Editor",
            width=width,
            height=height,
        )

        self._create_menu_bar()
        self._init_panels()

    def _create_menu_bar(self):
        """Create the application menu bar."""
        with dpg.viewport_menu_bar():
            with dpg.menu(label="File"):
                dpg.add_menu_item(label="Open Save...",
                                  callback=lambda: EventBus.publish(Events.BROWSE_REQUESTED))
                dpg.add_menu_item(label="Save As...",
                                  callback=lambda: self.panels["save_editor"]._browse_save())
                dpg.add_menu_item(label="Restore Defaults",
                                  callback=lambda: self.panels["save_editor"]._restore_defaults())
                dpg.add_separator()
                dpg.add_menu_item(label="Exit", callback=lambda: dpg.stop_dearpygui())

            with dpg.menu(label="View"):
                dpg.add_menu_item(label="Save Editor", callback=lambda: self._show_panel("save_editor"))
                dpg.add_menu_item(label="Hex View",
                                  callback=lambda: self.panels["save_editor"]._toggle_hex_view())

            with dpg.menu(label="Help"):
                dpg.add_menu_item(label="About", callback=self._show_about)

    def _show_panel(self, panel_name: str):
        """Show a panel by name."""
        panel = self.panels.get(panel_name)
        if panel and hasattr(panel, 'TAG'):
            if dpg.does_item_exist(panel.TAG):
                dpg.configure_item(panel.TAG, show=True)
                dpg.focus_item(panel.TAG)

    def _show_about(self):
        """Show about dialog."""
        with dpg.window(label="About s3saveedit", modal=True, width=350, height=200) as about:
            dpg.add_text("s3saveedit", color=(0, 212, 255))
            dpg.add_text("Sonic 3 / Sonic 3 & Knuckles save editor")
            dpg.add_separator()
            dpg.add_text("Console (SRAM), PC, Steam and A.I.R. saves")
            dpg.add_spacer(height=10)
            dpg.add_button(label="Close", callback=lambda: dpg.delete_item(about))

    def _init_panels(self):
        """Initialize all UI panels."""
        self.panels["save_editor"] = SaveEditorPanel(
            width=self.width - 20,
            height=self.height - 80,
            pos=(10, 30)
        )

        self.panels["status_bar"] = StatusBar(
            width=self.width,
            height=30,
            y_pos=self.height - 35
        )

    def show(self):
        """Show the main window."""
        dpg.setup_dearpygui()
        dpg.show_viewport()

    def run(self):
        """Run the main event loop."""
        while dpg.is_dearpygui_running():
            dpg.render_dearpygui_frame()

    def shutdown(self):
        """Store the session, then tear down DearPyGUI."""
        self.panels["save_editor"].store_session()
        dpg.destroy_context()


def main():
    """Entry point."""
    try:
        app = MainApp()
        app.show()
        app.run()
        app.shutdown()
    except Exception as e:
        logger.exception(f"Error: {e}")


if __name__ == "__main__":
    main()
