#!/usr/bin/env python3
"""
Simple Test Runner for auto_sub

Runs the unit and integration suites module by module with unittest and
prints a per-category summary. `pytest tests/` runs the same tests.
"""

import os
import sys
import time
import unittest
from pathlib import Path

CATEGORIES = {
    'unit': [
        'tests.unit.test_file_classifier',
        'tests.unit.test_command_builder',
        'tests.unit.test_progress_parser',
        'tests.unit.test_media_utils',
        'tests.unit.test_system_utils',
        'tests.unit.test_user_input',
        'tests.unit.test_logging',
    ],
    'integration': [
        'tests.integration.test_progress_monitoring',
        'tests.integration.test_muxing_engine',
        'tests.integration.test_cli',
    ],
    'config': [
        'tests.test_config',
    ],
}


def main():
    """Main test execution function."""
    print("auto_sub Test Suite")
    print("=" * 60)

    tests_dir = Path(__file__).parent
    os.chdir(tests_dir.parent)  # Go to project root

    start_time = time.time()
    all_success = True
    total_tests = 0

    for category, test_modules in CATEGORIES.items():
        print(f"\nRunning {category.upper()} Tests")
        print("-" * 50)

        category_success = True
        category_tests = 0

        for test_module in test_modules:
            print(f"Running {test_module.split('.')[-1]}...")

            suite = unittest.TestLoader().loadTestsFromName(test_module)
            runner = unittest.TextTestRunner(verbosity=1, stream=sys.stdout, buffer=True)
            result = runner.run(suite)

            tests_run = result.testsRun
            failed = len(result.failures) + len(result.errors)

            if result.wasSuccessful():
                print(f"  {tests_run} tests passed\n")
            else:
                print(f"  {failed}/{tests_run} tests failed\n")
                category_success = False

            category_tests += tests_run

        total_tests += category_tests
        status = "PASS" if category_success else "FAIL"
        print(f"{category.upper()}: {category_tests} tests, {status}")

        if not category_success:
            all_success = False

    execution_time = time.time() - start_time
    print(f"\n{'=' * 60}")
    print("EXECUTION SUMMARY")
    print(f"{'=' * 60}")
    print(f"Total time: {execution_time:.2f} seconds")
    print(f"Total tests: {total_tests}")
    print(f"Status: {'SUCCESS' if all_success else 'FAILURES'}")
    print(f"{'=' * 60}")

    return 0 if all_success else 1


if __name__ == '__main__':
    sys.exit(main())
