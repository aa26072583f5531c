"""Resolver Client contract consumed by the lookup orchestrator."""

from __future__ import annotations

from typing import Protocol

import dns.rdataclass
import dns.rdatatype

from ..checker.outcome import ResolutionOutcome


class ResolverError(Exception):
    """
    Brief: Transport or protocol-level failure inside a Resolver Client.

    Inputs:
    - message: description

    Outputs:
    - Exception instance
    """

    pass


class ResolverClient(Protocol):
    """Protocol for performing one DNSSEC-enabled name resolution.

    Inputs:
      - name: Domain name to resolve (already trimmed).
      - rdtype: Record type to query.
      - rdclass: Record class to query.
      - validate: Strictness flag passed through by the orchestrator; its
        meaning belongs to the implementation.

    Outputs:
      - ResolutionOutcome for the name.

    Raises:
      - ResolverError on transport/protocol failures the client does not
        report as an outcome.
    """

    def lookup(
        self,
        name: str,
        rdtype: dns.rdatatype.RdataType,
        rdclass: dns.rdataclass.RdataClass,
        validate: bool,
    ) -> ResolutionOutcome:
        """Resolve name and return its outcome."""
