"""Resolution outcomes as reported by a Resolver Client.

Brief:
  A ResolutionOutcome is the raw, per-name result of one DNSSEC-enabled lookup.
  The boolean flags mirror what validating resolvers report; state() folds them
  into one tagged security state so the classifier never has to combine flags
  by hand.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union


class SecurityLevel(str, enum.Enum):
    """DNSSEC security level rendered in the third output field."""

    SECURE = "secure"
    BOGUS = "bogus"
    INSECURE = "insecure"


@dataclass(frozen=True)
class NoData:
    """The resolver returned no answer data."""


@dataclass(frozen=True)
class Secure:
    """Answer data validated against a trusted chain."""


@dataclass(frozen=True)
class Bogus:
    """DNSSEC validation was attempted and failed."""

    reason: Optional[str] = None


@dataclass(frozen=True)
class Insecure:
    """Answer data present but not validated as secure."""


SecurityState = Union[NoData, Secure, Bogus, Insecure]


@dataclass(frozen=True)
class ResolutionOutcome:
    """Brief: Immutable result of one resolver lookup.

    Inputs:
      - queried_name: Name as resolved (after trimming).
      - has_data: True when any answer data was returned.
      - is_secure: DNSSEC validation succeeded.
      - is_bogus: DNSSEC validation was attempted and failed.
      - bogus_reason: Optional human-readable reason for a validation failure.
      - resolver_status: Optional free-form resolver status text.

    Outputs:
      - ResolutionOutcome instance.

    Raises:
      - ValueError: when both is_secure and is_bogus are set.

    Example:
      >>> ResolutionOutcome("example.test", has_data=True, is_secure=True).state()
      Secure()
    """

    queried_name: str
    has_data: bool
    is_secure: bool = False
    is_bogus: bool = False
    bogus_reason: Optional[str] = None
    resolver_status: Optional[str] = None

    def __post_init__(self) -> None:
        if self.is_secure and self.is_bogus:
            raise ValueError(
                f"outcome for {self.queried_name!r} cannot be both secure and bogus"
            )

    def state(self) -> SecurityState:
        """Return the tagged security state for this outcome.

        The security flags are ignored when no data was returned.
        """

        if not self.has_data:
            return NoData()
        if self.is_secure:
            return Secure()
        if self.is_bogus:
            return Bogus(self.bogus_reason)
        return Insecure()
