#!/usr/bin/env python3
"""
Test runner for the Scholarship Portal application.

Usage:
    python run_tests.py                           # Run all tests
    python run_tests.py -k test_submit            # Run specific test pattern
    python run_tests.py --api                     # Run HTTP endpoint tests only
    python run_tests.py --services                # Run service tests only
    python run_tests.py --cov                     # Run with coverage
"""

import sys
import subprocess
from pathlib import Path

API_TESTS = ["tests/test_api.py"]
SERVICE_TESTS = [
    "tests/test_application_service.py",
    "tests/test_review_service.py",
    "tests/test_admin_services.py",
    "tests/test_auth_service.py",
]


def run_tests(targets=None, args=None):
    """Run tests with pytest."""
    cmd = [sys.executable, "-m", "pytest", *(targets or ["tests"]), "-v", "--tb=short"]
    cmd.extend(args or [])

    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=Path(__file__).parent)
    return result.returncode


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the Scholarship Portal tests")
    parser.add_argument("-k", "--keyword", help="Run tests matching keyword")
    parser.add_argument("--cov", action="store_true", help="Run with coverage")
    parser.add_argument("--api", action="store_true", help="Run endpoint tests only")
    parser.add_argument("--services", action="store_true", help="Run service tests only")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--pdb", action="store_true", help="Drop into debugger on failure")

    args = parser.parse_args()

    targets = None
    if args.api:
        targets = API_TESTS
    elif args.services:
        targets = SERVICE_TESTS

    pytest_args = []

    if args.keyword:
        pytest_args.extend(["-k", args.keyword])

    if args.cov:
        pytest_args.extend(
            ["--cov=app", "--cov-report=html", "--cov-report=term-missing"]
        )

    if args.verbose:
        pytest_args.append("-vv")

    if args.pdb:
        pytest_args.append("--pdb")

    return run_tests(targets, pytest_args)


if __name__ == "__main__":
    sys.exit(main())
