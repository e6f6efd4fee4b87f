"""
Theme and color definitions for the save editor GUI.
"""

import dearpygui.dearpygui as dpg


# =============================================================================
# APPLICATION COLORS (RGBA 0-255)
# =============================================================================
class Colors:
    """Global application color palette."""
    BG_PANEL = (28, 28, 35, 255)
    BG_CHILD = (35, 35, 45, 255)
    TITLE_BG = (40, 45, 55, 255)
    TITLE_ACTIVE = (55, 65, 85, 255)
    FRAME_BG = (45, 45, 55, 255)
    BUTTON = (55, 75, 100, 255)
    BUTTON_HOVER = (75, 95, 130, 255)
    BUTTON_ACTIVE = (65, 85, 115, 255)
    TEXT_DIM = (140, 140, 150, 255)
    TEXT_BRIGHT = (220, 220, 230, 255)
    ACCENT_GREEN = (100, 200, 120, 255)
    ACCENT_BLUE = (100, 150, 220, 255)
    ACCENT_YELLOW = (220, 200, 100, 255)
    ACCENT_RED = (220, 100, 100, 255)
    SEPARATOR = (60, 60, 70, 255)


# =============================================================================
# EMERALD COLORS (slot order, S3&K keeps the first four in the first byte)
# =============================================================================
class EmeraldColors:
    """Emerald button colors in slot order."""
    ORDER = (
        ("green", (60, 200, 90, 255)),
        ("yellow", (230, 210, 60, 255)),
        ("orange", (240, 150, 50, 255)),
        ("purple", (170, 90, 200, 255)),
        ("grey", (170, 170, 180, 255)),
        ("blue", (70, 120, 230, 255)),
        ("red", (220, 70, 70, 255)),
        ("cyan", (80, 210, 220, 255)),
    )


def setup_theme():
    """Apply the global application theme."""
    with dpg.theme() as global_theme:
        with dpg.theme_component(dpg.mvAll):
            # Window backgrounds
            dpg.add_theme_color(dpg.mvThemeCol_WindowBg, Colors.BG_PANEL)
            dpg.add_theme_color(dpg.mvThemeCol_ChildBg, Colors.BG_CHILD)
            dpg.add_theme_color(dpg.mvThemeCol_PopupBg, Colors.BG_PANEL)

            # Title bars
            dpg.add_theme_color(dpg.mvThemeCol_TitleBg, Colors.TITLE_BG)
            dpg.add_theme_color(dpg.mvThemeCol_TitleBgActive, Colors.TITLE_ACTIVE)

            # Frames and buttons
            dpg.add_theme_color(dpg.mvThemeCol_FrameBg, Colors.FRAME_BG)
            dpg.add_theme_color(dpg.mvThemeCol_Button, Colors.BUTTON)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonHovered, Colors.BUTTON_HOVER)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonActive, Colors.BUTTON_ACTIVE)

            # Text
            dpg.add_theme_color(dpg.mvThemeCol_Separator, Colors.SEPARATOR)
            dpg.add_theme_color(dpg.mvThemeCol_Text, Colors.TEXT_BRIGHT)
            dpg.add_theme_color(dpg.mvThemeCol_TextDisabled, Colors.TEXT_DIM)

            # Tabs (game and stage selectors)
            dpg.add_theme_color(dpg.mvThemeCol_Tab, Colors.TITLE_BG)
            dpg.add_theme_color(dpg.mvThemeCol_TabHovered, Colors.BUTTON_HOVER)
            dpg.add_theme_color(dpg.mvThemeCol_TabActive, Colors.TITLE_ACTIVE)

            # Style
            dpg.add_theme_style(dpg.mvStyleVar_FrameRounding, 4)
            dpg.add_theme_style(dpg.mvStyleVar_WindowRounding, 6)
            dpg.add_theme_style(dpg.mvStyleVar_FramePadding, 8, 4)
            dpg.add_theme_style(dpg.mvStyleVar_ItemSpacing, 8, 6)

    dpg.bind_theme(global_theme)
    return global_theme


_emerald_themes: dict = {}


def emerald_theme(color: tuple, filled: bool) -> int:
    """Button theme for one emerald: full color when held, dimmed otherwise."""
    key = (color, filled)
    if key not in _emerald_themes:
        if not filled:
            color = tuple(c // 3 for c in color[:3]) + (255,)
        with dpg.theme() as theme:
            with dpg.theme_component(dpg.mvButton):
                dpg.add_theme_color(dpg.mvThemeCol_Button, color)
        _emerald_themes[key] = theme
    return _emerald_themes[key]
