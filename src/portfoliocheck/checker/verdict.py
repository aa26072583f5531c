"""Outcome classification and result-line rendering.

Brief:
  classify() turns a ResolutionOutcome into a three-field Verdict and
  format_line() renders it as the comma-joined record returned to clients:

      <name>,<errorCode>,<securityLevel>,<message>

  Absent fields are None inside a Verdict and only become the two-character
  EMPTY_MARKER when rendered. Embedded commas are not escaped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .outcome import (
    Bogus,
    Insecure,
    NoData,
    ResolutionOutcome,
    Secure,
    SecurityLevel,
    SecurityState,
)

EMPTY_MARKER = '""'
NODATA = "nodata"
FIELD_SEPARATOR = ","


@dataclass(frozen=True)
class Verdict:
    """Client-facing classification of one queried name."""

    name: str
    error_code: Optional[str]
    security_level: Optional[SecurityLevel]
    message: Optional[str]

    @property
    def is_bogus(self) -> bool:
        return self.security_level is SecurityLevel.BOGUS


def _security_level(state: SecurityState) -> Optional[SecurityLevel]:
    if isinstance(state, NoData):
        return None
    if isinstance(state, Secure):
        return SecurityLevel.SECURE
    if isinstance(state, Bogus):
        return SecurityLevel.BOGUS
    if isinstance(state, Insecure):
        return SecurityLevel.INSECURE
    raise TypeError(f"unknown security state: {state!r}")


def _error_code(outcome: ResolutionOutcome) -> Optional[str]:
    if not outcome.has_data:
        return NODATA
    return outcome.resolver_status or None


def classify(outcome: ResolutionOutcome) -> Verdict:
    """Brief: Derive the verdict for one resolution outcome.

    Inputs:
      - outcome: ResolutionOutcome produced by a Resolver Client.

    Outputs:
      - Verdict with error_code, security_level and message set as follows:
        * error_code: "nodata" without data, else the resolver status text
          when non-empty, else None.
        * security_level: None without data, else secure/bogus/insecure.
        * message: the bogus reason whenever one is present, independent of
          the security level.

    Example:
      >>> classify(ResolutionOutcome("a.test", has_data=False)).error_code
      'nodata'
    """

    return Verdict(
        name=outcome.queried_name,
        error_code=_error_code(outcome),
        security_level=_security_level(outcome.state()),
        message=outcome.bogus_reason or None,
    )


def _field(value: Optional[str]) -> str:
    if value is None or value == "":
        return EMPTY_MARKER
    return str(value)


def format_line(name: str, verdict: Verdict) -> str:
    """Brief: Render a verdict as one comma-separated record.

    Inputs:
      - name: Queried name placed in the first field.
      - verdict: Verdict supplying the remaining three fields.

    Outputs:
      - str without a trailing newline.

    Example:
      >>> v = Verdict("a.test", None, SecurityLevel.SECURE, None)
      >>> format_line("a.test", v)
      'a.test,"",secure,""'
    """

    level = verdict.security_level.value if verdict.security_level else None
    return FIELD_SEPARATOR.join(
        [name, _field(verdict.error_code), _field(level), _field(verdict.message)]
    )
