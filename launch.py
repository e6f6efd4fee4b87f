#!/usr/bin/env python3
"""
s3saveedit - Sonic 3 & Knuckles Save Editor

Standalone application for editing Sonic 3 and Sonic 3 & Knuckles saves
from the Mega Drive, the PC collection, the Steam release and A.I.R.

Usage:
    python launch.py
"""

import sys
import os
from pathlib import Path

# Setup paths
root_dir = Path(__file__).parent
src_dir = root_dir / "src"
sys.path.insert(0, str(root_dir))
sys.path.insert(0, str(src_dir))

os.chdir(root_dir)

VERSION = "1.0.0"
APP_NAME = "s3saveedit"


def show_splash():
    """Show splash screen info."""
    banner = f"""
+----------------------------------------------------------+
|                                                          |
|   {APP_NAME:<12} Sonic 3 & Knuckles Save Editor            |
|   Version {VERSION:<10}                                     |
|                                                          |
|   Console, PC, Steam and A.I.R. save files               |
|                                                          |
+----------------------------------------------------------+
"""
    print(banner)


def check_dependencies():
    """Check that required dependencies are available."""
    missing = []

    try:
        import dearpygui
    except ImportError:
        missing.append("dearpygui")

    if missing:
        print("\nMissing dependencies:")
        for dep in missing:
            print(f"   - {dep}")
        print("\n   Install with: pip install -e .\n")
        return False

    return True


def main():
    """Launch the application."""
    show_splash()

    if not check_dependencies():
        return 1

    try:
        from src.main_app import MainApp

        print("Starting application...")

        app = MainApp()
        app.show()

        print("Application ready.\n")

        app.run()
        app.shutdown()

        print("\nApplication closed.")
        return 0

    except ImportError as e:
        print(f"\nError: Failed to import required modules: {e}")
        print("\n   Make sure you have installed dependencies:")
        print("   pip install -e .")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
