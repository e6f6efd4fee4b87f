# Panel modules
from .save_editor_panel import SaveEditorPanel
from .status_bar import StatusBar

__all__ = [
    "SaveEditorPanel",
    "StatusBar",
]
