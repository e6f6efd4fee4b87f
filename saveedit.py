#!/usr/bin/env python3
"""saveedit.py - command line tool for Sonic 3 / Sonic 3 & Knuckles saves.

Reads console (byte or word wide), PC, Steam and A.I.R. save files,
shows their contents, edits slots and competition times, and converts
between platforms.

Usage:
    python saveedit.py inspect <save>
    python saveedit.py slots <save> [--game s3|s3k]
    python saveedit.py competition <save> [--stage N]
    python saveedit.py set-slot <save> <slot> [--game s3k] [--character knuckles] [--zone 5] ...
    python saveedit.py set-time <save> <stage> <rank> <min> <sec> <tick> [--character N]
    python saveedit.py convert <save> --platform pc [--output <path>]
    python saveedit.py hexdump <save>
    python saveedit.py new <output> [--platform console]

Output formats (append to any command):
    --format table    (default, human-readable)
    --format json     (machine-readable)
"""

import sys
import json
import logging
import argparse
from pathlib import Path

# Add src to path
_src_dir = Path(__file__).parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from formats.s3save import (
    Character, DataWidth, EmeraldState, Game, Platform, S3Slot, SaveFileError,
)
from formats.s3save.constants import CP_STAGES
from utils.binary import ByteOrder
from Tools.save_editor import (
    COMPETITION_CHARACTERS, COMPETITION_STAGES, SaveManager, default_filename, slot_count, zone_name,
)


CHARACTER_NAMES = {
    Character.SONIC_TAILS: "sonic-tails",
    Character.SONIC: "sonic",
    Character.TAILS: "tails",
    Character.KNUCKLES: "knuckles",
    Character.KNUCKLES_TAILS: "knuckles-tails",
}
CHARACTER_BY_NAME = {v: k for k, v in CHARACTER_NAMES.items()}

GAMES = {"s3": Game.S3, "s3k": Game.S3K}
PLATFORMS = {p.name.lower(): p for p in Platform}
WIDTHS = {"byte": DataWidth.BYTE, "word": DataWidth.WORD}
ORDERS = {"big": ByteOrder.BIG_ENDIAN, "little": ByteOrder.LITTLE_ENDIAN}

EMERALD_MARKS = {
    EmeraldState.ABSENT: ".",
    EmeraldState.COLLECTED: "c",
    EmeraldState.VISITED: "v",
    EmeraldState.UPGRADED: "S",
}


def character_name(value: int) -> str:
    return CHARACTER_NAMES.get(value, f"unknown ({value})")


def competition_character(value: int) -> str:
    if 0 <= value < len(COMPETITION_CHARACTERS):
        return COMPETITION_CHARACTERS[value]
    return f"unknown ({value})"


def load_save(path: str) -> SaveManager:
    """Load a save file. Exits on failure."""
    mgr = SaveManager()
    try:
        mgr.load_file(path)
    except (OSError, SaveFileError) as e:
        print(f"ERROR: Failed to load {path}: {e}", file=sys.stderr)
        sys.exit(1)
    return mgr


def write_save(mgr: SaveManager, output: str = None) -> Path:
    """Encode and write. Exits on failure."""
    try:
        return mgr.save_file(output if output else mgr.path)
    except (OSError, SaveFileError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


def slot_to_dict(index: int, slot) -> dict:
    """Plain-data view of a slot for json output."""
    data = {
        "slot": index,
        "new": slot.is_new,
        "character": character_name(slot.character),
        "zone": slot.zone,
        "rings": slot.rings,
        "emerald_count": slot.emerald_count,
    }
    if isinstance(slot, S3Slot):
        data.update(clear=slot.is_clear, last=slot.last, emeralds=slot.emeralds)
    else:
        data.update(
            clear=slot.clear.name.lower(),
            emeralds=[s.name.lower() for s in slot.emeralds],
            lives=slot.lives,
            continues=slot.continues,
        )
    return data


def format_slot_row(index: int, slot) -> str:
    if slot.is_new:
        return f"  [{index}] new"

    if isinstance(slot, S3Slot):
        state = "clear" if slot.is_clear else zone_name(Game.S3, slot.zone)
        return (f"  [{index}] {character_name(slot.character):<15} {state:<16} "
                f"emeralds={slot.emerald_count} mask={slot.emeralds:07b} rings={slot.rings:08b}")

    state = slot.clear.name.lower() if slot.is_clear else zone_name(Game.S3K, slot.zone)
    marks = "".join(EMERALD_MARKS[s] for s in slot.emeralds)
    return (f"  [{index}] {character_name(slot.character):<15} {state:<16} "
            f"emeralds={marks} lives={slot.lives} continues={slot.continues}")


# ============================================================================
# Commands
# ============================================================================

def cmd_inspect(args):
    """Show detected format and which sections hold data."""
    mgr = load_save(args.file)
    summary = mgr.summary()

    if args.format == "json":
        print(json.dumps(summary, indent=2))
        return

    print(f"Save: {args.file}")
    print(f"Platform: {summary['platform']}  |  Width: {summary['data_width']}  |  "
          f"Order: {summary['byte_order']}  |  Filler: {summary['filler_byte']:#04x}\n")
    print("SECTIONS")
    print("─" * 50)
    for game in Game:
        state = "enabled" if summary["write"][game.value] else "disabled"
        print(f"  {game.label:<22} {state}")
    print(f"  {'Competition':<22} always written")


def cmd_slots(args):
    """List single-player slots of one game."""
    mgr = load_save(args.file)
    mgr.set_game(GAMES[args.game])
    slots = [mgr.get_slot(i) for i in range(slot_count(mgr.current_game))]

    if args.format == "json":
        print(json.dumps({
            "game": args.game,
            "enabled": mgr.is_writing(mgr.current_game),
            "slots": [slot_to_dict(i, s) for i, s in enumerate(slots)],
        }, indent=2))
        return

    enabled = "" if mgr.is_writing(mgr.current_game) else "  (not saved)"
    print(f"{mgr.current_game.label}{enabled}")
    print("─" * 50)
    for i, slot in enumerate(slots):
        print(format_slot_row(i, slot))


def cmd_competition(args):
    """Show competition best times."""
    mgr = load_save(args.file)
    stages = [args.stage] if args.stage is not None else range(CP_STAGES)
    result = {}

    for stage in stages:
        result[stage] = mgr.get_stage(stage)

    if args.format == "json":
        print(json.dumps({
            str(stage): [
                {"rank": rank, "new": row.is_new, "minutes": row.minutes,
                 "seconds": row.seconds, "ticks": row.ticks, "character": row.character}
                for rank, row in enumerate(rows)
            ]
            for stage, rows in result.items()
        }, indent=2))
        return

    for stage, rows in result.items():
        print(COMPETITION_STAGES[stage])
        for rank, row in enumerate(rows):
            if row.is_new:
                print(f"  {rank + 1}. --'--\"--")
            else:
                print(f"  {rank + 1}. {row.minutes}'{row.seconds:02d}\"{row.ticks:02d}  "
                      f"{competition_character(row.character)}")


def cmd_set_slot(args):
    """Edit one single-player slot and write the file back."""
    mgr = load_save(args.file)
    game = GAMES[args.game]
    mgr.set_game(game)

    try:
        mgr.set_slot(args.slot)
    except IndexError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    if not mgr.is_writing(game):
        mgr.set_write(game, True)

    changes = {}
    if args.new:
        changes["is_new"] = True
    elif any(v is not None for v in (args.character, args.zone, args.lives, args.continues, args.rings)):
        changes["is_new"] = False
    if args.character is not None:
        changes["character"] = CHARACTER_BY_NAME[args.character]
    if args.zone is not None:
        changes["zone"] = args.zone
    if args.rings is not None:
        changes["rings"] = args.rings
    if game is Game.S3K:
        if args.lives is not None:
            changes["lives"] = args.lives
        if args.continues is not None:
            changes["continues"] = args.continues
    elif args.lives is not None or args.continues is not None:
        print("ERROR: Sonic 3 slots have no lives or continues", file=sys.stderr)
        sys.exit(1)

    slot = mgr.update_slot(**changes)
    if args.clear is not None:
        slot = mgr.set_clear(args.clear)

    path = write_save(mgr, args.output)
    print(format_slot_row(mgr.current_slot, slot))
    print(f"Saved to {path}")


def cmd_set_time(args):
    """Edit one competition ranking and write the file back."""
    mgr = load_save(args.file)

    try:
        mgr.set_stage(args.stage)
        if args.new:
            row = mgr.update_row(args.rank, is_new=True)
        else:
            row = mgr.update_row(
                args.rank, is_new=False, minutes=args.minutes, seconds=args.seconds,
                ticks=args.ticks, character=args.character,
            )
    except IndexError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    path = write_save(mgr, args.output)
    print(f"Stage {args.stage} rank {args.rank + 1}: "
          f"{row.minutes}'{row.seconds:02d}\"{row.ticks:02d}")
    print(f"Saved to {path}")


def cmd_convert(args):
    """Write the save in another platform format."""
    mgr = load_save(args.file)
    platform = PLATFORMS[args.platform]

    if args.enable_s3:
        mgr.set_write(Game.S3, True)

    mgr.set_options(
        platform=platform,
        data_width=WIDTHS[args.width] if args.width else None,
        byte_order=ORDERS[args.order] if args.order else None,
        filler_byte=args.filler,
    )

    output = args.output
    if output is None:
        name = default_filename(platform, mgr.is_writing(Game.S3K))
        output = Path(args.file).parent / name
        if output.resolve() == Path(args.file).resolve():
            print("ERROR: Refusing to overwrite the input; pass --output", file=sys.stderr)
            sys.exit(1)

    path = write_save(mgr, str(output))
    if args.format == "json":
        print(json.dumps({"output": str(path), "platform": platform.name,
                          "size": path.stat().st_size}))
    else:
        print(f"Wrote {platform.name} save to {path} ({path.stat().st_size} bytes)")


def cmd_hexdump(args):
    """Dump the canonical 512-byte image."""
    mgr = load_save(args.file)
    if args.format == "json":
        print(json.dumps({"canonical": list(mgr.save.commit())}))
    else:
        print(mgr.hex_view())


def cmd_new(args):
    """Create a blank save."""
    mgr = SaveManager()
    mgr.restore_defaults()
    mgr.set_options(platform=PLATFORMS[args.platform])
    if args.enable_s3:
        mgr.set_write(Game.S3, True)

    path = write_save(mgr, args.output)
    print(f"Created {path}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="saveedit",
        description="Read, edit and convert Sonic 3 / Sonic 3 & Knuckles save files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Platforms: console (emulator SRAM), pc (S&K Collection), "
               "steam (Mega Drive Classics), air (Sonic 3 A.I.R.).",
    )
    parser.add_argument("--format", choices=["table", "json"],
                        default="table", help="Output format (default: table)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log codec details to stderr")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    # inspect
    p = sub.add_parser("inspect", help="Show format and sections")
    p.add_argument("file", help="Path to save file")

    # slots
    p = sub.add_parser("slots", help="List single-player slots")
    p.add_argument("file", help="Path to save file")
    p.add_argument("--game", choices=list(GAMES), default="s3k")

    # competition
    p = sub.add_parser("competition", help="Show competition times")
    p.add_argument("file", help="Path to save file")
    p.add_argument("--stage", type=int, choices=range(CP_STAGES), help="Single stage")

    # set-slot
    p = sub.add_parser("set-slot", help="Edit a single-player slot")
    p.add_argument("file", help="Path to save file")
    p.add_argument("slot", type=int, help="Slot index (0-based)")
    p.add_argument("--game", choices=list(GAMES), default="s3k")
    p.add_argument("--new", action="store_true", help="Reset the slot to new")
    p.add_argument("--character", choices=list(CHARACTER_BY_NAME))
    p.add_argument("--zone", type=int)
    p.add_argument("--rings", type=int, help="Giant ring bitmask")
    p.add_argument("--lives", type=int)
    p.add_argument("--continues", type=int)
    p.add_argument("--clear", dest="clear", action="store_true", default=None)
    p.add_argument("--not-clear", dest="clear", action="store_false")
    p.add_argument("--output", "-o", help="Output file (default: overwrite input)")

    # set-time
    p = sub.add_parser("set-time", help="Edit a competition ranking")
    p.add_argument("file", help="Path to save file")
    p.add_argument("stage", type=int)
    p.add_argument("rank", type=int, help="Ranking (0-based)")
    p.add_argument("minutes", type=int, nargs="?", default=0)
    p.add_argument("seconds", type=int, nargs="?", default=0)
    p.add_argument("ticks", type=int, nargs="?", default=0)
    p.add_argument("--character", type=int, default=0)
    p.add_argument("--new", action="store_true", help="Clear the ranking")
    p.add_argument("--output", "-o", help="Output file (default: overwrite input)")

    # convert
    p = sub.add_parser("convert", help="Convert to another platform")
    p.add_argument("file", help="Path to save file")
    p.add_argument("--platform", choices=list(PLATFORMS), required=True)
    p.add_argument("--width", choices=list(WIDTHS), help="Console data width")
    p.add_argument("--order", choices=list(ORDERS), help="Console word byte order")
    p.add_argument("--filler", type=lambda s: int(s, 0), choices=[0x00, 0xFF],
                   help="Console word filler byte (0 or 0xff)")
    p.add_argument("--enable-s3", action="store_true", help="Also write Sonic 3 data")
    p.add_argument("--output", "-o", help="Output file (default: platform file name)")

    # hexdump
    p = sub.add_parser("hexdump", help="Hex dump of the canonical image")
    p.add_argument("file", help="Path to save file")

    # new
    p = sub.add_parser("new", help="Create a blank save")
    p.add_argument("output", help="Output file or directory")
    p.add_argument("--platform", choices=list(PLATFORMS), default="console")
    p.add_argument("--enable-s3", action="store_true", help="Also write Sonic 3 data")

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        sys.exit(0)

    commands = {
        "inspect": cmd_inspect,
        "slots": cmd_slots,
        "competition": cmd_competition,
        "set-slot": cmd_set_slot,
        "set-time": cmd_set_time,
        "convert": cmd_convert,
        "hexdump": cmd_hexdump,
        "new": cmd_new,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        cmd_func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
