"""
JIT Flags Test Suite Runner

Runs every test file as its own process, so each one starts with fresh
process-wide registry and configuration state:
1. Flag table tests (descriptors, parsing, appends)
2. Registry tests (defaults, overrides, fatal errors, concurrency, CLI)

Usage:
    python run_all_tests.py
    python run_all_tests.py --verbose
    python run_all_tests.py --suite flag_table
"""

import argparse
import subprocess
import sys
import time
from pathlib import Path
from typing import Dict, List, Tuple

# Fix Unicode encoding for Windows terminal
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding='utf-8')
    sys.stderr.reconfigure(encoding='utf-8')


TESTS_DIR = Path(__file__).parent / "jit_flags_tests"

SUITES: Dict[str, List[Tuple[str, str]]] = {
    "flag_table": [
        ("test_flag_table.py", "Descriptors, parsing and appends"),
    ],
    "registry": [
        ("test_registry.py", "Defaults, overrides and fatal errors"),
        ("test_concurrent_initialization.py", "Exactly-once initialization across threads"),
        ("test_config_and_cli.py", "Configuration and CLI"),
    ],
}


def run_test(test_file: str, verbose: bool = False) -> bool:
    """Run a single test file and report the outcome."""
    print(f"\n{'='*60}")
    print(f"🧪 RUNNING {test_file}")
    print(f"{'='*60}")

    start_time = time.time()
    result = subprocess.run([sys.executable, str(TESTS_DIR / test_file)],
                            capture_output=not verbose, text=True)
    duration = time.time() - start_time

    if result.returncode == 0:
        if not verbose and result.stdout:
            print(result.stdout)
        print(f"\n✅ {test_file} completed successfully in {duration:.2f}s")
        return True

    print(f"\n❌ {test_file} failed in {duration:.2f}s")
    if not verbose:
        if result.stdout:
            print("STDOUT:", result.stdout)
        if result.stderr:
            print("STDERR:", result.stderr)
    return False


def run_suite(suite_name: str, verbose: bool = False) -> Tuple[int, int]:
    """Run all tests in a suite."""
    tests = SUITES[suite_name]
    print(f"\n🚀 STARTING {suite_name.upper()} TEST SUITE")

    passed = sum(1 for test_file, _ in tests if run_test(test_file, verbose))

    print(f"\n📊 {suite_name.upper()} SUITE RESULTS:")
    print(f"✅ Passed: {passed}/{len(tests)}")
    return passed, len(tests)


def main():
    """Main test runner entry point."""
    parser = argparse.ArgumentParser(description="Run JIT flags tests")
    parser.add_argument("--suite", choices=["all", *SUITES], default="all", help="Test suite to run")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--list", action="store_true", help="List available test suites")
    args = parser.parse_args()

    if args.list:
        for suite_name, tests in SUITES.items():
            print(f"\n🔧 {suite_name}:")
            for test_file, description in tests:
                print(f"   • {test_file}: {description}")
        return True

    suite_names = list(SUITES) if args.suite == "all" else [args.suite]
    total_passed = total_tests = 0
    for suite_name in suite_names:
        passed, total = run_suite(suite_name, args.verbose)
        total_passed += passed
        total_tests += total

    print("\n" + "=" * 60)
    print(f"✅ Total Passed: {total_passed}")
    print(f"❌ Total Failed: {total_tests - total_passed}")
    if total_passed == total_tests:
        print("\n🎉 ALL TESTS PASSED!")
    return total_passed == total_tests


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
