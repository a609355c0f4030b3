#!/usr/bin/env python3
"""
Report Workflow Test Runner

Runs all test modules in order:
1. Normalizer (payload shapes)
2. Fallback (candidate probing)
3. Client (REST operations)
4. Workflow (lifecycle and gates)
5. Summary (report card derivation)
6. Polling (cancellation and fan-out)
7. End-to-end (multi-role flows)
8. Review queue, learner page, rendering and CLI

Usage:
    python -m tests.run_all
    python -m tests.run_all --verbose   # show client debug logging
"""

import sys
from datetime import datetime

from report_workflow.config import configure_logging

from tests.conftest import Colors, log_fail, log_pass, log_section
from tests import test_00_normalizer
from tests import test_01_fallback
from tests import test_02_client
from tests import test_03_workflow
from tests import test_04_summary
from tests import test_05_polling
from tests import test_06_end_to_end
from tests import test_07_review_learner


def run_test_module(module_name, tests):
    """Run a list of tests and return (passed, failed) counts."""
    log_section(module_name)

    passed = 0
    failed = 0

    for name, test_fn in tests:
        try:
            test_fn()
            log_pass(name)
            passed += 1
        except AssertionError as e:
            log_fail(name, str(e))
            failed += 1
        except Exception as e:
            log_fail(name, f"{type(e).__name__}: {e}")
            failed += 1

    return passed, failed


def run_all_tests():
    """Run all test modules."""
    print(f"\n🧪 {Colors.CYAN}Report Workflow Tests{Colors.END}")
    print(f"   Timestamp: {datetime.now().isoformat()}")

    total_passed = 0
    total_failed = 0

    modules = [
        ("NORMALIZER", test_00_normalizer.get_tests()),
        ("FALLBACK", test_01_fallback.get_tests()),
        ("CLIENT", test_02_client.get_tests()),
        ("WORKFLOW", test_03_workflow.get_tests()),
        ("SUMMARY", test_04_summary.get_tests()),
        ("POLLING", test_05_polling.get_tests()),
        ("END TO END", test_06_end_to_end.get_tests()),
        ("REVIEW / LEARNER / CLI", test_07_review_learner.get_tests()),
    ]

    for module_name, tests in modules:
        passed, failed = run_test_module(module_name, tests)
        total_passed += passed
        total_failed += failed

    print(f"\n{'='*60}")
    if total_failed == 0:
        print(f"{Colors.GREEN}📊 ALL TESTS PASSED: {total_passed}/{total_passed + total_failed}{Colors.END}")
    else:
        print(f"{Colors.RED}📊 RESULTS: {total_passed} passed, {total_failed} failed{Colors.END}")
    print(f"{'='*60}")

    return total_failed == 0


def main():
    """Main entry point."""
    if "--verbose" in sys.argv:
        configure_logging(verbose=True)

    success = run_all_tests()
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
