#!/usr/bin/env python3
"""Test runner script for the Reading Quest API.

Usage: python run_tests.py [unit|integration|all|coverage]
"""
import os
import subprocess
import sys

PYTEST = [sys.executable, "-m", "pytest", "-v", "--tb=short"]


def _run(cmd):
    return subprocess.run(cmd).returncode


def run_unit_tests():
    print("🧪 Running unit tests")
    return _run(PYTEST + ["tests/", "-m", "not integration"])


def run_integration_tests():
    """Migrate the configured database, then run the integration suite against it."""
    print("🧪 Running integration tests")
    migrated = _run([sys.executable, "-m", "alembic", "upgrade", "head"])
    if migrated != 0:
        print("❌ Migrations failed, skipping integration tests")
        return migrated
    return _run(PYTEST + ["tests/integration/", "-m", "integration"])


def run_all_tests():
    unit_result = run_unit_tests()
    if unit_result != 0:
        print("❌ Unit tests failed, skipping integration tests")
        return unit_result
    integration_result = run_integration_tests()
    if integration_result == 0:
        print("\n🎉 All tests passed!")
    return integration_result


def run_coverage():
    print("🧪 Running unit tests with coverage")
    result = _run(PYTEST + [
        "tests/",
        "-m", "not integration",
        "--cov=reading_quest",
        "--cov-report=term-missing",
        "--cov-report=html:htmlcov",
    ])
    if result == 0:
        print("\n📊 Coverage report generated in htmlcov/index.html")
    return result


MODES = {
    "unit": run_unit_tests,
    "integration": run_integration_tests,
    "all": run_all_tests,
    "coverage": run_coverage,
}


def main():
    mode = sys.argv[1].lower() if len(sys.argv) > 1 else ""
    if mode not in MODES:
        print(__doc__.strip())
        sys.exit(1)

    os.chdir(os.path.dirname(os.path.abspath(__file__)))
    sys.exit(MODES[mode]())


if __name__ == "__main__":
    main()
