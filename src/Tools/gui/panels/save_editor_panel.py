"""
Save Editor Panel - Sonic 3 / Sonic 3 & Knuckles Save File Editor

Game selector, slot tabs, slot fields, competition times and output format.
Every edit goes straight into the SaveManager session; the form is then
redrawn from what was actually stored, so clamped values show up at once.
"""

import logging
from pathlib import Path

import dearpygui.dearpygui as dpg

from formats.s3save import (
    Character, DataWidth, EmeraldState, Game, Platform, S3Slot, SaveFileError,
)
from formats.s3save.constants import CP_RANKINGS
from formats.s3save.options import FILLER_BYTES
from formats.s3save.records import EMERALD_POSITIONS
from utils.binary import ByteOrder
from Tools.save_editor import (
    COMPETITION_CHARACTERS, COMPETITION_STAGES, S3_ZONES, S3K_ZONES, slot_count,
)
from Tools.save_editor.save_manager import RING_BITS, S3_EMERALD_BITS

from ..events import EventBus, Events
from ..state import STATE
from ..theme import EmeraldColors, emerald_theme

logger = logging.getLogger(__name__)

GAME_LABELS = {Game.S3: "Sonic 3", Game.S3K: "Sonic 3 & Knuckles"}
CHARACTER_LABELS = {
    Character.SONIC_TAILS: "Sonic & Tails",
    Character.SONIC: "Sonic",
    Character.TAILS: "Tails",
    Character.KNUCKLES: "Knuckles",
    Character.KNUCKLES_TAILS: "Knuckles & Tails",
}
PLATFORM_LABELS = {
    Platform.CONSOLE: "Console",
    Platform.PC: "PC",
    Platform.STEAM: "Steam",
    Platform.AIR: "A.I.R.",
}
MAX_SLOTS = max(slot_count(g) for g in Game)


def _label_to_key(labels: dict, label: str):
    for key, value in labels.items():
        if value == label:
            return key
    raise KeyError(label)


class SaveEditorPanel:
    """Save editor panel - slots, emeralds, competition times, output format."""

    TAG = "save_editor"
    STATUS_TAG = "save_status"
    MESSAGE_TAG = "save_message"
    GAME_TAG = "save_game"
    WRITE_TAG = "save_write"
    SLOT_TAG_PREFIX = "save_slot_"
    PREVIEW_TAG = "save_preview"
    NEW_TAG = "save_slot_new"
    CLEAR_TAG = "save_slot_clear"
    CHARACTER_TAG = "save_character"
    ZONE_TAG = "save_zone"
    LAST_TAG = "save_last"
    LIVES_TAG = "save_lives"
    CONTINUES_TAG = "save_continues"
    S3_ONLY_TAG = "save_s3_fields"
    S3K_ONLY_TAG = "save_s3k_fields"
    EMERALD_TAG_PREFIX = "save_emerald_"
    RING_TAG_PREFIX = "save_ring_"
    STAGE_TAG = "save_stage"
    ROW_TAG_PREFIX = "save_row_"
    PLATFORM_TAG = "save_platform"
    WIDTH_TAG = "save_width"
    ORDER_TAG = "save_order"
    FILLER_TAG = "save_filler"
    ADVANCED_TAG = "save_advanced"
    OPEN_DIALOG_TAG = "save_open_dialog"
    SAVE_DIALOG_TAG = "save_save_dialog"
    HEX_WINDOW_TAG = "save_hex_window"
    HEX_TEXT_TAG = "save_hex_text"

    COLORS = {
        'cyan': (0, 212, 255),
        'red': (233, 69, 96),
        'green': (76, 175, 80),
        'yellow': (255, 213, 79),
        'blue': (148, 179, 253),
        'text': (238, 238, 238),
        'dim': (136, 136, 136),
    }

    def __init__(self, width: int = 520, height: int = 820, pos: tuple = (10, 30)):
        self.width = width
        self.height = height
        self.pos = pos
        self.manager = STATE.get_manager()
        self._refreshing = False
        self._create_panel()
        self._create_dialogs()
        self._subscribe_events()
        self._restore_session()

    def _subscribe_events(self):
        EventBus.subscribe(Events.SAVE_LOADED, lambda _: self.refresh())
        EventBus.subscribe(Events.SAVE_MODIFIED, lambda _: self.refresh())
        EventBus.subscribe(Events.BROWSE_REQUESTED, lambda _: self._browse_open())

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _create_panel(self):
        """Create the save editor panel."""
        with dpg.window(
            label="Save Editor",
            tag=self.TAG,
            width=self.width,
            height=self.height,
            pos=self.pos,
            on_close=self._on_close
        ):
            dpg.add_text("Sonic 3 Save Editor", color=self.COLORS['cyan'])
            dpg.add_text("Console, PC, Steam and A.I.R. saves", color=self.COLORS['dim'])
            dpg.add_separator()

            with dpg.collapsing_header(label="File", default_open=True):
                with dpg.group(horizontal=True):
                    dpg.add_button(label="Open...", callback=self._browse_open, width=90)
                    dpg.add_button(label="Save...", callback=self._browse_save, width=90)
                    dpg.add_button(label="Defaults", callback=self._restore_defaults, width=90)
                    dpg.add_button(label="Hex View", callback=self._toggle_hex_view, width=90)
                dpg.add_text("No save loaded", tag=self.STATUS_TAG, color=self.COLORS['dim'])

            dpg.add_separator()
            self._create_single_player()
            dpg.add_separator()
            self._create_competition()
            dpg.add_separator()
            self._create_options()
            dpg.add_separator()

            dpg.add_text("", tag=self.MESSAGE_TAG, color=self.COLORS['green'])

    def _create_single_player(self):
        with dpg.collapsing_header(label="Single Player", default_open=True):
            with dpg.group(horizontal=True):
                dpg.add_radio_button(
                    items=[GAME_LABELS[Game.S3], GAME_LABELS[Game.S3K]],
                    default_value=GAME_LABELS[Game.S3K],
                    horizontal=True,
                    tag=self.GAME_TAG,
                    callback=self._on_game,
                )
                dpg.add_checkbox(label="Save", tag=self.WRITE_TAG, callback=self._on_write)

            with dpg.group(horizontal=True):
                for i in range(MAX_SLOTS):
                    dpg.add_button(
                        label=str(i + 1),
                        tag=f"{self.SLOT_TAG_PREFIX}{i}",
                        width=52,
                        callback=self._on_slot,
                        user_data=i,
                    )

            dpg.add_text("", tag=self.PREVIEW_TAG, color=self.COLORS['yellow'])

            with dpg.group(horizontal=True):
                dpg.add_checkbox(label="New", tag=self.NEW_TAG, callback=self._on_slot_field,
                                 user_data="is_new")
                dpg.add_checkbox(label="Clear", tag=self.CLEAR_TAG, callback=self._on_clear)

            dpg.add_combo(
                items=list(CHARACTER_LABELS.values()),
                label="Character",
                tag=self.CHARACTER_TAG,
                width=200,
                callback=self._on_character,
            )
            dpg.add_combo(items=list(S3K_ZONES), label="Zone", tag=self.ZONE_TAG,
                          width=200, callback=self._on_zone)

            with dpg.group(tag=self.S3_ONLY_TAG):
                dpg.add_input_int(label="Last special stage", tag=self.LAST_TAG, width=120,
                                  min_value=0, max_value=255, min_clamped=True, max_clamped=True,
                                  callback=self._on_slot_field, user_data="last")

            with dpg.group(tag=self.S3K_ONLY_TAG):
                dpg.add_input_int(label="Lives", tag=self.LIVES_TAG, width=120,
                                  min_value=0, max_value=99, min_clamped=True, max_clamped=True,
                                  callback=self._on_slot_field, user_data="lives")
                dpg.add_input_int(label="Continues", tag=self.CONTINUES_TAG, width=120,
                                  min_value=0, max_value=99, min_clamped=True, max_clamped=True,
                                  callback=self._on_slot_field, user_data="continues")

            dpg.add_text("Emeralds:", color=self.COLORS['blue'])
            with dpg.group(horizontal=True):
                for i in range(EMERALD_POSITIONS):
                    dpg.add_button(label=" ", tag=f"{self.EMERALD_TAG_PREFIX}{i}", width=32,
                                   callback=self._on_emerald, user_data=i)

            dpg.add_text("Giant rings:", color=self.COLORS['blue'])
            with dpg.group(horizontal=True):
                for i in range(RING_BITS):
                    dpg.add_checkbox(label="", tag=f"{self.RING_TAG_PREFIX}{i}",
                                     callback=self._on_ring, user_data=i)

    def _create_competition(self):
        with dpg.collapsing_header(label="Competition", default_open=False):
            dpg.add_radio_button(
                items=list(COMPETITION_STAGES),
                default_value=COMPETITION_STAGES[0],
                tag=self.STAGE_TAG,
                callback=self._on_stage,
            )
            with dpg.table(header_row=True, borders_innerH=True):
                dpg.add_table_column(label="New")
                dpg.add_table_column(label="Min")
                dpg.add_table_column(label="Sec")
                dpg.add_table_column(label="Tick")
                dpg.add_table_column(label="Character")

                for rank in range(CP_RANKINGS):
                    prefix = f"{self.ROW_TAG_PREFIX}{rank}_"
                    with dpg.table_row():
                        dpg.add_checkbox(tag=f"{prefix}new", callback=self._on_row,
                                         user_data=(rank, "is_new"))
                        dpg.add_input_int(tag=f"{prefix}min", width=60, step=0, min_value=0,
                                          max_value=9, min_clamped=True, max_clamped=True,
                                          callback=self._on_row, user_data=(rank, "minutes"))
                        dpg.add_input_int(tag=f"{prefix}sec", width=60, step=0, min_value=0,
                                          max_value=59, min_clamped=True, max_clamped=True,
                                          callback=self._on_row, user_data=(rank, "seconds"))
                        dpg.add_input_int(tag=f"{prefix}tick", width=60, step=0, min_value=0,
                                          max_value=99, min_clamped=True, max_clamped=True,
                                          callback=self._on_row, user_data=(rank, "ticks"))
                        dpg.add_combo(items=list(COMPETITION_CHARACTERS), tag=f"{prefix}char",
                                      width=100, callback=self._on_row,
                                      user_data=(rank, "character"))

    def _create_options(self):
        with dpg.collapsing_header(label="Output Format", default_open=False):
            dpg.add_radio_button(
                items=list(PLATFORM_LABELS.values()),
                tag=self.PLATFORM_TAG,
                horizontal=True,
                callback=self._on_options,
            )
            dpg.add_radio_button(items=["Byte", "Word"], tag=self.WIDTH_TAG,
                                 horizontal=True, callback=self._on_options)
            dpg.add_radio_button(items=["Big endian", "Little endian"], tag=self.ORDER_TAG,
                                 horizontal=True, callback=self._on_options)
            dpg.add_radio_button(items=[f"{b:#04x}" for b in FILLER_BYTES], tag=self.FILLER_TAG,
                                 horizontal=True, callback=self._on_options)
            dpg.add_checkbox(label="Advanced (Death Egg for Knuckles)", tag=self.ADVANCED_TAG,
                             callback=self._on_options)

    def _create_dialogs(self):
        with dpg.file_dialog(
            directory_selector=False, show=False, tag=self.OPEN_DIALOG_TAG,
            callback=self._on_open_selected, width=600, height=400,
        ):
            dpg.add_file_extension(".*")
            dpg.add_file_extension(".srm", color=self.COLORS['green'])
            dpg.add_file_extension(".bin", color=self.COLORS['yellow'])
            dpg.add_file_extension(".sav", color=self.COLORS['cyan'])

        dpg.add_file_dialog(
            directory_selector=True, show=False, tag=self.SAVE_DIALOG_TAG,
            callback=self._on_save_selected, width=600, height=400,
        )

        with dpg.window(label="Hex View", tag=self.HEX_WINDOW_TAG, show=False,
                        width=560, height=600, pos=(self.pos[0] + 40, self.pos[1] + 40)):
            dpg.add_input_text(tag=self.HEX_TEXT_TAG, multiline=True, readonly=True,
                               width=-1, height=-1)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def _message(self, text: str, color: str = 'green'):
        dpg.set_value(self.MESSAGE_TAG, text)
        dpg.configure_item(self.MESSAGE_TAG, color=self.COLORS[color])
        EventBus.publish(Events.STATUS_UPDATE, text)
        STATE.log(text, "ERROR" if color == 'red' else "INFO")

    def _error(self, err: Exception):
        logger.warning(f"Save editor: {err}")
        self._message(str(err), 'red')

    # ------------------------------------------------------------------
    # File operations
    # ------------------------------------------------------------------

    def _restore_session(self):
        try:
            restored = self.manager.load_from_storage()
        except SaveFileError as e:
            self._error(e)
            return
        dpg.set_value(self.STATUS_TAG, "Restored last session" if restored else "Default save")
        self.refresh()

    def _browse_open(self, *_):
        if STATE.last_directory:
            dpg.configure_item(self.OPEN_DIALOG_TAG, default_path=str(STATE.last_directory))
        dpg.show_item(self.OPEN_DIALOG_TAG)

    def _browse_save(self, *_):
        dpg.show_item(self.SAVE_DIALOG_TAG)

    def _on_open_selected(self, sender, app_data):
        path = Path(app_data.get("file_path_name", ""))
        self.load_path(path)

    def _on_save_selected(self, sender, app_data):
        directory = Path(app_data.get("file_path_name", ""))
        try:
            written = self.manager.save_file(directory)
        except (OSError, SaveFileError) as e:
            self._error(e)
            return
        STATE.set_file(written)
        self._message(f"Saved {written.name}")
        EventBus.publish(Events.SAVE_WRITTEN, written)

    def load_path(self, path: Path):
        """Open a save file from disk."""
        try:
            self.manager.load_file(path)
        except (OSError, SaveFileError) as e:
            self._error(e)
            return
        STATE.set_file(path)
        dpg.set_value(self.STATUS_TAG, f"Loaded: {path.name}")
        dpg.configure_item(self.STATUS_TAG, color=self.COLORS['green'])
        self._message(f"Opened {path.name}")
        EventBus.publish(Events.SAVE_LOADED, path)

    def _restore_defaults(self, *_):
        self.manager.restore_defaults()
        STATE.set_file(None)
        dpg.set_value(self.STATUS_TAG, "Default save")
        dpg.configure_item(self.STATUS_TAG, color=self.COLORS['dim'])
        EventBus.publish(Events.SAVE_LOADED, None)

    def _toggle_hex_view(self, *_):
        if dpg.is_item_shown(self.HEX_WINDOW_TAG):
            dpg.hide_item(self.HEX_WINDOW_TAG)
            return
        dpg.set_value(self.HEX_TEXT_TAG, self.manager.hex_view())
        dpg.show_item(self.HEX_WINDOW_TAG)

    def store_session(self):
        """Persist the session for the next start (called on shutdown)."""
        result = self.manager.save_to_storage()
        if not result.success:
            logger.warning(result.message)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def _edited(self):
        EventBus.publish(Events.SAVE_MODIFIED, None)

    def _on_game(self, sender, app_data, user_data=None):
        if self._refreshing:
            return
        self.manager.set_game(_label_to_key(GAME_LABELS, app_data))
        EventBus.publish(Events.GAME_SELECTED, self.manager.current_game)
        self.refresh()

    def _on_write(self, sender, app_data, user_data=None):
        if self._refreshing:
            return
        self.manager.set_write(self.manager.current_game, bool(app_data))
        self._edited()

    def _on_slot(self, sender, app_data, user_data):
        self.manager.set_slot(user_data)
        EventBus.publish(Events.SLOT_SELECTED, user_data)
        self.refresh()

    def _on_slot_field(self, sender, app_data, user_data):
        if self._refreshing:
            return
        self.manager.update_slot(**{user_data: app_data})
        self._edited()

    def _on_clear(self, sender, app_data, user_data=None):
        if self._refreshing:
            return
        self.manager.set_clear(bool(app_data))
        self._edited()

    def _on_character(self, sender, app_data, user_data=None):
        if self._refreshing:
            return
        self.manager.update_slot(character=_label_to_key(CHARACTER_LABELS, app_data))
        self._edited()

    def _on_zone(self, sender, app_data, user_data=None):
        if self._refreshing:
            return
        zones = S3_ZONES if self.manager.current_game is Game.S3 else S3K_ZONES
        self.manager.update_slot(zone=zones.index(app_data))
        self._edited()

    def _on_emerald(self, sender, app_data, user_data):
        self.manager.cycle_emerald(user_data)
        self._edited()

    def _on_ring(self, sender, app_data, user_data):
        if self._refreshing:
            return
        self.manager.toggle_ring(user_data)
        self._edited()

    def _on_stage(self, sender, app_data, user_data=None):
        self.manager.set_stage(COMPETITION_STAGES.index(app_data))
        EventBus.publish(Events.STAGE_SELECTED, self.manager.current_stage)
        self.refresh()

    def _on_row(self, sender, app_data, user_data):
        if self._refreshing:
            return
        rank, field_name = user_data
        value = app_data
        if field_name == "character":
            value = COMPETITION_CHARACTERS.index(app_data)
        changes = {field_name: value}
        if field_name != "is_new":
            changes["is_new"] = False
        self.manager.update_row(rank, **changes)
        self._edited()

    def _on_options(self, sender, app_data, user_data=None):
        if self._refreshing:
            return
        self.manager.set_options(
            platform=_label_to_key(PLATFORM_LABELS, dpg.get_value(self.PLATFORM_TAG)),
            data_width=DataWidth.WORD if dpg.get_value(self.WIDTH_TAG) == "Word" else DataWidth.BYTE,
            byte_order=(ByteOrder.BIG_ENDIAN if dpg.get_value(self.ORDER_TAG) == "Big endian"
                        else ByteOrder.LITTLE_ENDIAN),
            filler_byte=int(dpg.get_value(self.FILLER_TAG), 16),
            advanced=dpg.get_value(self.ADVANCED_TAG),
        )
        self.refresh()

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def refresh(self):
        """Redraw the whole form from the session."""
        if not self.manager.is_loaded:
            return
        self._refreshing = True
        try:
            self._refresh_single_player()
            self._refresh_competition()
            self._refresh_options()
        finally:
            self._refreshing = False

    def _refresh_single_player(self):
        mgr = self.manager
        game = mgr.current_game
        writing = mgr.is_writing(game)
        count = slot_count(game)

        dpg.set_value(self.GAME_TAG, GAME_LABELS[game])
        dpg.set_value(self.WRITE_TAG, writing)

        for i, character in enumerate(mgr.slot_characters() + [None] * (MAX_SLOTS - count)):
            tag = f"{self.SLOT_TAG_PREFIX}{i}"
            label = str(i + 1)
            if character not in (None, Character.NOBODY):
                label = f"{i + 1} {CHARACTER_LABELS.get(character, '?')[:2]}"
            dpg.configure_item(tag, label=label, enabled=i < count, show=i < count)

        slot = mgr.get_slot()
        editable = writing and not slot.is_new
        zones = S3_ZONES if game is Game.S3 else S3K_ZONES
        limit = mgr.zone_limit()

        dpg.set_value(self.PREVIEW_TAG, mgr.slot_preview())
        dpg.set_value(self.NEW_TAG, slot.is_new)
        dpg.set_value(self.CLEAR_TAG, slot.is_clear)
        dpg.configure_item(self.NEW_TAG, enabled=writing)
        dpg.configure_item(self.CLEAR_TAG, enabled=editable)
        dpg.set_value(self.CHARACTER_TAG, CHARACTER_LABELS.get(slot.character, ""))
        dpg.configure_item(self.CHARACTER_TAG, enabled=editable)
        dpg.configure_item(self.ZONE_TAG, items=list(zones[:limit + 1]),
                           enabled=editable and not slot.is_clear)
        dpg.set_value(self.ZONE_TAG, zones[min(slot.zone, limit)])

        is_s3 = isinstance(slot, S3Slot)
        dpg.configure_item(self.S3_ONLY_TAG, show=is_s3)
        dpg.configure_item(self.S3K_ONLY_TAG, show=not is_s3)
        if is_s3:
            dpg.set_value(self.LAST_TAG, slot.last)
        else:
            dpg.set_value(self.LIVES_TAG, slot.lives)
            dpg.set_value(self.CONTINUES_TAG, slot.continues)

        for i in range(EMERALD_POSITIONS):
            tag = f"{self.EMERALD_TAG_PREFIX}{i}"
            name, color = EmeraldColors.ORDER[i]
            if is_s3:
                shown = i < S3_EMERALD_BITS
                held = bool(slot.emeralds & (1 << i))
                mark = " "
            else:
                shown = True
                state = slot.emeralds[i]
                held = state != EmeraldState.ABSENT
                mark = "S" if state == EmeraldState.UPGRADED else " "
            dpg.configure_item(tag, show=shown, enabled=editable, label=mark)
            dpg.bind_item_theme(tag, emerald_theme(color, held))

        for i in range(RING_BITS):
            tag = f"{self.RING_TAG_PREFIX}{i}"
            dpg.set_value(tag, bool(slot.rings & (1 << i)))
            dpg.configure_item(tag, enabled=editable)

    def _refresh_competition(self):
        mgr = self.manager
        dpg.set_value(self.STAGE_TAG, COMPETITION_STAGES[mgr.current_stage])

        for rank, row in enumerate(mgr.get_stage()):
            prefix = f"{self.ROW_TAG_PREFIX}{rank}_"
            dpg.set_value(f"{prefix}new", row.is_new)
            dpg.set_value(f"{prefix}min", row.minutes)
            dpg.set_value(f"{prefix}sec", row.seconds)
            dpg.set_value(f"{prefix}tick", row.ticks)
            if row.character < len(COMPETITION_CHARACTERS):
                dpg.set_value(f"{prefix}char", COMPETITION_CHARACTERS[row.character])
            for suffix in ("min", "sec", "tick", "char"):
                dpg.configure_item(f"{prefix}{suffix}", enabled=not row.is_new)

    def _refresh_options(self):
        options = self.manager.save.options
        console = options.platform == Platform.CONSOLE
        word = options.data_width == DataWidth.WORD

        dpg.set_value(self.PLATFORM_TAG, PLATFORM_LABELS[options.platform])
        dpg.set_value(self.WIDTH_TAG, "Word" if word else "Byte")
        dpg.set_value(self.ORDER_TAG, "Big endian" if options.byte_order == ByteOrder.BIG_ENDIAN
                      else "Little endian")
        dpg.set_value(self.FILLER_TAG, f"{options.filler_byte:#04x}")
        dpg.set_value(self.ADVANCED_TAG, self.manager.advanced)

        dpg.configure_item(self.WIDTH_TAG, enabled=console)
        dpg.configure_item(self.ORDER_TAG, enabled=console and word)
        dpg.configure_item(self.FILLER_TAG, enabled=console and word)

    def _on_close(self):
        """Handle panel close."""
        dpg.configure_item(self.TAG, show=False)

    @classmethod
    def show(cls):
        """Show the panel."""
        if dpg.does_item_exist(cls.TAG):
            dpg.configure_item(cls.TAG, show=True)
            dpg.focus_item(cls.TAG)
