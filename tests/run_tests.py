#!/usr/bin/env python3
"""
Test Runner for Lineage Proofs

Runs every test suite of the package and prints a per-suite and overall
summary. Equivalent to ``pytest tests/`` but without the pytest dependency.
"""

import unittest
import sys
import os
from io import StringIO

# Make the test modules importable by name
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

TEST_SUITES = [
    ('test_field_encoding', 'Field Encoder Tests'),
    ('test_merkle_engine', 'Merkle Engine Tests'),
    ('test_lineage_resolver', 'Lineage Resolver Tests'),
    ('test_proof_service', 'Proof Service Tests'),
    ('test_oracles', 'HTTP Collaborator Tests'),
    ('test_cli', 'CLI Tests'),
]


def run_test_suite(test_module_name, description):
    """
    Run a specific test suite and return results.

    Args:
        test_module_name: Name of the test module to run
        description: Human-readable description of the test suite

    Returns:
        Tuple of (success_count, failure_count, error_count, skip_count)
    """
    print(f"\n{'='*60}")
    print(f"Running {description}")
    print('='*60)

    test_module = __import__(test_module_name)
    suite = unittest.TestLoader().loadTestsFromModule(test_module)

    stream = StringIO()
    runner = unittest.TextTestRunner(stream=stream, verbosity=2)
    result = runner.run(suite)
    print(stream.getvalue())

    failures = len(result.failures)
    errors = len(result.errors)
    skipped = len(result.skipped)
    success = result.testsRun - failures - errors - skipped

    print(f"{description} Summary: {success} passed, {failures} failed, {errors} errors, {skipped} skipped")
    return success, failures, errors, skipped


def main():
    """Run all test suites and report the totals."""
    print("Starting Lineage Proofs Test Suite")
    print(f"Python version: {sys.version}")

    totals = [0, 0, 0, 0]
    for module_name, description in TEST_SUITES:
        try:
            counts = run_test_suite(module_name, description)
        except ImportError as e:
            print(f"\nError importing {module_name}: {e}")
            counts = (0, 0, 1, 0)
        totals = [t + c for t, c in zip(totals, counts)]

    success, failures, errors, skipped = totals
    print(f"\n{'='*60}")
    print("OVERALL TEST SUMMARY")
    print('='*60)
    print(f"Successful: {success}")
    print(f"Failed: {failures}")
    print(f"Errors: {errors}")
    print(f"Skipped: {skipped}")

    if failures == 0 and errors == 0:
        print("\nALL TESTS PASSED")
        return 0
    print(f"\nTests failed: {failures + errors} issues found")
    return 1


if __name__ == '__main__':
    sys.exit(main())
