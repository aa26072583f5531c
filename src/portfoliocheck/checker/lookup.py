"""Lookup orchestration for single names and uploaded batches.

Brief:
  Checker wires a Resolver Client to the classifier, formatter and batch
  orderer. Every name gets a freshly built resolver from the factory, so
  nothing is shared across names or requests and one Checker can serve
  concurrent requests from several threads.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

import dns.exception
import dns.rdataclass
import dns.rdatatype

from .ordering import order_lines
from .verdict import Verdict, classify, format_line

if TYPE_CHECKING:
    from ..resolver.base import ResolverClient

logger = logging.getLogger("portfoliocheck.checker")

DEFAULT_RECORD_TYPE = dns.rdatatype.NS
RECORD_CLASS = dns.rdataclass.IN


def parse_record_type(token: Optional[str]) -> dns.rdatatype.RdataType:
    """Brief: Parse a record-type token, defaulting to NS.

    Inputs:
      - token: Record type mnemonic such as "A" or "ds" (case-insensitive), or
        None.

    Outputs:
      - dns.rdatatype.RdataType; NS when the token is absent, blank or not a
        known type.

    Example:
      >>> parse_record_type("aaaa") == dns.rdatatype.AAAA
      True
      >>> parse_record_type("bogus-type") == dns.rdatatype.NS
      True
    """

    if token is None or not token.strip():
        return DEFAULT_RECORD_TYPE
    try:
        return dns.rdatatype.from_text(token.strip())
    except (dns.exception.DNSException, ValueError):
        logger.debug("Unknown record type %r; using NS", token)
        return DEFAULT_RECORD_TYPE


class Checker:
    """Single-name and batch DNSSEC checks.

    Inputs:
      - resolver_factory: zero-argument callable returning a new Resolver
        Client; called once per name.

    Example:
      >>> from portfoliocheck.resolver import DnsPythonResolver
      >>> checker = Checker(DnsPythonResolver)
    """

    def __init__(self, resolver_factory: Callable[[], "ResolverClient"]) -> None:
        self._resolver_factory = resolver_factory

    def _resolve(
        self, name: str, rdtype: dns.rdatatype.RdataType, validate: bool
    ) -> Verdict:
        qname = name.strip()
        resolver = self._resolver_factory()
        outcome = resolver.lookup(qname, rdtype, RECORD_CLASS, validate)
        verdict = classify(outcome)
        logger.debug(
            "%s %s: error=%s level=%s",
            qname,
            dns.rdatatype.to_text(rdtype),
            verdict.error_code,
            verdict.security_level.value if verdict.security_level else None,
        )
        return verdict

    def check_one(self, name: str, record_type: Optional[str] = None) -> str:
        """Brief: Check one name and return its rendered line.

        Inputs:
          - name: Domain name; surrounding whitespace is ignored.
          - record_type: Optional record type token; absent or unknown tokens
            query NS.

        Outputs:
          - str: one rendered result line.

        Raises:
          - ResolverError: propagated unchanged from the resolver (strict mode).
        """

        rdtype = parse_record_type(record_type)
        verdict = self._resolve(name, rdtype, validate=True)
        return format_line(verdict.name, verdict)

    def check_many(self, names: Iterable[str]) -> List[str]:
        """Brief: Check names in order and return bogus-first rendered lines.

        Inputs:
          - names: Domain names in upload order. Always queried as NS.

        Outputs:
          - list[str]: rendered lines ordered by order_lines().
        """

        verdicts = [
            self._resolve(name, DEFAULT_RECORD_TYPE, validate=False) for name in names
        ]
        bogus = sum(1 for v in verdicts if v.is_bogus)
        logger.info("Checked %d names, %d bogus", len(verdicts), bogus)
        return order_lines(verdicts)
