#!/usr/bin/env python3
"""
s3saveedit - UNIFIED TEST SYSTEM

Main test runner that loads and executes test modules.

USAGE:
  python tests.py                    # Run ALL tests
  python tests.py --codec            # Codec tests only (checksum .. persistence)
  python tests.py --editor           # Editor session and storage tests only
  python tests.py --verbose          # Debug logging while tests run

TEST MODULES:
  test_checksum.py     - checksum engine
  test_sections.py     - twin-copy resolution and commit
  test_records.py      - slot and competition record codec
  test_transcode.py    - detection, platform round trips, AIR container
  test_persistence.py  - key-value store blob
  test_editor.py       - SaveManager, Storage, hex view

Every module also runs under pytest:  pytest dev/tests
"""

import sys
import logging
import argparse
import importlib
from typing import List
from datetime import datetime

CODEC_MODULES = [
    "test_checksum",
    "test_sections",
    "test_records",
    "test_transcode",
    "test_persistence",
]
EDITOR_MODULES = [
    "test_editor",
]


class TestResults:
    """Shared test results tracker."""
    def __init__(self):
        self.passed = 0
        self.failed = 0
        self.skipped = 0
        self.errors: List[str] = []

    def record(self, name: str, passed: bool, reason: str = ""):
        if passed:
            self.passed += 1
            print(f"  [OK] {name}")
        else:
            self.failed += 1
            self.errors.append(f"{name}: {reason}")
            print(f"  [FAIL] {name}: {reason}")

    def skip(self, name: str, reason: str):
        self.skipped += 1
        print(f"  [SKIP] {name}: {reason}")

    def run(self, title: str, tests):
        """Run plain assert-style test functions, recording each one."""
        print("\n" + "=" * 60)
        print(title)
        print("=" * 60)
        for test in tests:
            try:
                test()
                self.record(test.__name__, True)
            except AssertionError as e:
                self.record(test.__name__, False, str(e) or "assertion failed")
            except Exception as e:
                self.record(test.__name__, False, f"{type(e).__name__}: {e}")

    def summary(self):
        total = self.passed + self.failed + self.skipped
        print(f"\n{'='*60}")
        print("TEST SUMMARY")
        print(f"{'='*60}")
        print(f"Total:   {total}")
        print(f"Passed:  {self.passed} [OK]")
        print(f"Failed:  {self.failed} [FAIL]")
        print(f"Skipped: {self.skipped} [SKIP]")
        for error in self.errors:
            print(f"  - {error}")
        return self.failed == 0


def main():
    parser = argparse.ArgumentParser(
        description="s3saveedit - Unified Test System",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python tests.py           # Run all tests
  python tests.py --codec   # Codec tests only
  python tests.py --editor  # Editor tests only
"""
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('--codec', action='store_true', help='Run codec tests only')
    parser.add_argument('--editor', action='store_true', help='Run editor tests only')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    run_codec = args.codec or not args.editor
    run_editor = args.editor or not args.codec

    modules = (CODEC_MODULES if run_codec else []) + (EDITOR_MODULES if run_editor else [])

    print("=" * 62)
    print("  S3SAVEEDIT - UNIFIED TEST SYSTEM")
    print("  " + datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    print("=" * 62)

    results = TestResults()
    for name in modules:
        try:
            module = importlib.import_module(name)
        except ImportError as e:
            results.record(f"import {name}", False, str(e))
            continue
        module.run_all_tests(results)

    success = results.summary()
    if success:
        print("\nALL TESTS PASSED!")
        return 0

    print(f"\n{results.failed} TESTS FAILED")
    return 1


if __name__ == "__main__":
    sys.exit(main())
