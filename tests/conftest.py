"""
Brief: Global pytest configuration and shared fakes.

Inputs:
  - None

Outputs:
  - FakeResolver helpers and a per-test 10s timeout.
"""

import os
import signal
import sys
from typing import Dict, List, Optional, Tuple

import pytest

# Ensure 'src' is on sys.path so 'portfoliocheck' is importable in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from portfoliocheck.checker.outcome import ResolutionOutcome  # noqa: E402


def _alarm_handler(signum, frame):
    raise TimeoutError("Test exceeded 10 seconds")


if hasattr(signal, "SIGALRM"):
    signal.signal(signal.SIGALRM, _alarm_handler)


@pytest.fixture(autouse=True)
def enforce_test_timeout():
    """
    Brief: Enforce a hard 10-second timeout for each test.

    Inputs:
      - None

    Outputs:
      - None: Cancels alarm after test
    """
    if hasattr(signal, "SIGALRM"):
        signal.alarm(10)
        try:
            yield
        finally:
            signal.alarm(0)
    else:
        yield


class FakeResolver:
    """
    Brief: In-memory Resolver Client returning canned outcomes by name.

    Inputs:
      - outcomes: mapping of name -> ResolutionOutcome; unknown names get an
        insecure outcome with data.
      - calls: shared list that records (name, rdtype, rdclass, validate).
      - error: optional exception raised from every lookup.

    Outputs:
      - Object implementing lookup().
    """

    def __init__(
        self,
        outcomes: Optional[Dict[str, ResolutionOutcome]] = None,
        calls: Optional[List[Tuple]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.outcomes = outcomes or {}
        self.calls = calls if calls is not None else []
        self.error = error

    def lookup(self, name, rdtype, rdclass, validate):
        self.calls.append((name, rdtype, rdclass, validate))
        if self.error is not None:
            raise self.error
        return self.outcomes.get(name, ResolutionOutcome(name, has_data=True))


@pytest.fixture
def fake_resolver_factory():
    """
    Brief: Build factories of FakeResolver instances sharing one call log.

    Inputs:
      - None

    Outputs:
      - callable(outcomes=None, error=None) -> (factory, calls, instances)
    """

    def _make(outcomes=None, error=None):
        calls: List[Tuple] = []
        instances: List[FakeResolver] = []

        def factory():
            r = FakeResolver(outcomes, calls, error)
            instances.append(r)
            return r

        return factory, calls, instances

    return _make
