"""
Brief: Tests for portfoliocheck.checker.verdict (classify and format_line).

Inputs:
  - None

Outputs:
  - None
"""

from __future__ import annotations

import itertools

import pytest

from portfoliocheck.checker.outcome import (
    Bogus,
    Insecure,
    NoData,
    ResolutionOutcome,
    Secure,
    SecurityLevel,
)
from portfoliocheck.checker.verdict import (
    EMPTY_MARKER,
    Verdict,
    classify,
    format_line,
)


def test_empty_marker_is_two_double_quotes() -> None:
    assert EMPTY_MARKER == '""'
    assert len(EMPTY_MARKER) == 2


@pytest.mark.parametrize(
    "is_secure,is_bogus,reason,status",
    [
        (s, b, r, st)
        for s, b, r, st in itertools.product(
            [False, True], [False, True], [None, "", "sig expired"], [None, "", "SERVFAIL"]
        )
        if not (s and b)
    ],
)
def test_no_data_is_nodata_without_security_level(is_secure, is_bogus, reason, status) -> None:
    """Brief: has_data=False always yields nodata and no security level.

    Inputs:
      - every combination of the remaining outcome fields

    Outputs:
      - None; asserts error_code and security_level
    """

    outcome = ResolutionOutcome(
        "a.test",
        has_data=False,
        is_secure=is_secure,
        is_bogus=is_bogus,
        bogus_reason=reason,
        resolver_status=status,
    )
    verdict = classify(outcome)
    assert verdict.error_code == "nodata"
    assert verdict.security_level is None
    assert outcome.state() == NoData()


def test_secure_outcome() -> None:
    verdict = classify(ResolutionOutcome("a.test", has_data=True, is_secure=True))
    assert verdict.security_level is SecurityLevel.SECURE
    assert verdict.error_code is None
    assert verdict.message is None
    assert format_line("a.test", verdict) == 'a.test,"",secure,""'


def test_bogus_outcome_carries_reason() -> None:
    outcome = ResolutionOutcome(
        "a.test", has_data=True, is_bogus=True, bogus_reason="signature expired"
    )
    verdict = classify(outcome)
    assert outcome.state() == Bogus("signature expired")
    assert verdict.security_level is SecurityLevel.BOGUS
    assert verdict.is_bogus
    assert verdict.message == "signature expired"
    assert format_line("a.test", verdict) == 'a.test,"",bogus,signature expired'


def test_insecure_outcome() -> None:
    outcome = ResolutionOutcome("a.test", has_data=True)
    verdict = classify(outcome)
    assert outcome.state() == Insecure()
    assert verdict.security_level is SecurityLevel.INSECURE
    assert format_line("a.test", verdict) == 'a.test,"",insecure,""'


def test_resolver_status_becomes_error_code() -> None:
    verdict = classify(
        ResolutionOutcome("a.test", has_data=True, resolver_status="SERVFAIL")
    )
    assert verdict.error_code == "SERVFAIL"
    assert format_line("a.test", verdict) == 'a.test,SERVFAIL,insecure,""'


def test_empty_resolver_status_is_absent() -> None:
    verdict = classify(ResolutionOutcome("a.test", has_data=True, resolver_status=""))
    assert verdict.error_code is None


def test_no_data_line() -> None:
    verdict = classify(ResolutionOutcome("gone.test", has_data=False))
    assert format_line("gone.test", verdict) == 'gone.test,nodata,"",""'


@pytest.mark.parametrize(
    "has_data,is_secure",
    [(True, True), (True, False), (False, False)],
)
def test_message_follows_reason_independent_of_security_level(has_data, is_secure) -> None:
    """Brief: A non-empty bogus reason is the message even outside the bogus state.

    Inputs:
      - has_data / is_secure combinations that are not bogus

    Outputs:
      - None; asserts message equals the reason
    """

    verdict = classify(
        ResolutionOutcome(
            "a.test", has_data=has_data, is_secure=is_secure, bogus_reason="why"
        )
    )
    assert not verdict.is_bogus
    assert verdict.message == "why"


def test_empty_reason_renders_marker() -> None:
    verdict = classify(
        ResolutionOutcome("a.test", has_data=True, is_bogus=True, bogus_reason="")
    )
    assert verdict.message is None
    assert format_line("a.test", verdict).endswith(',bogus,""')


def test_secure_and_bogus_together_is_rejected() -> None:
    with pytest.raises(ValueError):
        ResolutionOutcome("a.test", has_data=True, is_secure=True, is_bogus=True)


def test_secure_state() -> None:
    assert ResolutionOutcome("a.test", has_data=True, is_secure=True).state() == Secure()


@pytest.mark.parametrize(
    "verdict",
    [
        Verdict("a.test", None, SecurityLevel.SECURE, None),
        Verdict("b.test", "nodata", None, None),
        Verdict("c.test", "REFUSED", SecurityLevel.INSECURE, None),
        Verdict("d.test", None, SecurityLevel.BOGUS, "no DNSKEY for zone"),
    ],
)
def test_line_splits_back_into_four_fields(verdict: Verdict) -> None:
    """Brief: Splitting a rendered comma-free line recovers its four fields."""

    def _expected(value):
        return EMPTY_MARKER if value is None else value

    fields = format_line(verdict.name, verdict).split(",")
    level = verdict.security_level.value if verdict.security_level else None
    assert fields == [
        verdict.name,
        _expected(verdict.error_code),
        _expected(level),
        _expected(verdict.message),
    ]


def test_embedded_comma_is_not_escaped() -> None:
    verdict = Verdict("a.test", None, SecurityLevel.BOGUS, "bad, very bad")
    line = format_line("a.test", verdict)
    assert line == 'a.test,"",bogus,bad, very bad'
    assert len(line.split(",")) == 5
