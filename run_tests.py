#!/usr/bin/env python3
"""
Simple test runner for the Emblem combat engine.

Wraps pytest so the whole suite or a single test module can be run with
one short command.
"""

import argparse
import subprocess
import sys
from pathlib import Path


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and report whether it succeeded."""
    print(f"=== {description} ===")
    print(f"Running: {' '.join(cmd)}")

    result = subprocess.run(cmd)
    if result.returncode == 0:
        print(f"{description} completed successfully\n")
        return True
    print(f"{description} failed with exit code {result.returncode}\n")
    return False


def find_test_file(name: str) -> Path:
    """Find tests/**/test_<name>.py for a short test name."""
    if not name.startswith("test_"):
        name = f"test_{name}"
    if not name.endswith(".py"):
        name = f"{name}.py"
    matches = sorted(Path("tests").rglob(name))
    if not matches:
        raise SystemExit(f"No test file named {name} under tests/")
    return matches[0]


def main():
    parser = argparse.ArgumentParser(
        description="Simple test runner for the Emblem combat engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tests.py                       # Run all tests
  python run_tests.py --quiet               # Run tests with minimal output
  python run_tests.py --test combat_session # Run tests/**/test_combat_session.py
        """
    )
    parser.add_argument("--test", help="Run a specific test file (e.g., 'sequence_builder')")
    parser.add_argument("--quiet", "-q", action="store_true", help="Run with minimal output")
    args = parser.parse_args()

    cmd = [sys.executable, "-m", "pytest"]
    if args.test:
        test_path = find_test_file(args.test)
        cmd.append(str(test_path))
        description = f"Test: {test_path}"
    else:
        cmd.append("tests/")
        description = "All Tests"
    cmd.append("-q" if args.quiet else "-v")

    sys.exit(0 if run_command(cmd, description) else 1)


if __name__ == "__main__":
    main()
