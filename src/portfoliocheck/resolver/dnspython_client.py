"""Resolver Client backed by dnspython and an upstream validating resolver.

Brief:
  DnsPythonResolver sends one DO=1 query per lookup to the configured (or
  system) recursive resolvers and reads the DNSSEC verdict the upstream
  validator reports:

    - AD flag set on an answer               -> secure
    - answer without AD                      -> insecure
    - SERVFAIL, but data with CD=1           -> bogus
    - NOERROR without answer / NXDOMAIN      -> no data

  No signatures are checked locally; the upstream resolver must validate.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import dns.exception
import dns.flags
import dns.message
import dns.name
import dns.query
import dns.rcode
import dns.rdataclass
import dns.rdatatype
import dns.resolver
from pydantic import BaseModel, Field, IPvAnyAddress

from ..checker.outcome import ResolutionOutcome
from .base import ResolverError

logger = logging.getLogger("portfoliocheck.resolver")


def _parse_resolv_conf_nameservers(path: str = "/etc/resolv.conf") -> list[str]:
    """Brief: Best-effort parse of nameserver entries from a resolv.conf file.

    Inputs:
      - path: Filesystem path to a resolv.conf-format file.

    Outputs:
      - List of nameserver IP strings in the order encountered. Returns an empty
        list when the file cannot be read or contains no nameserver entries.

    Notes:
      - search/domain directives are ignored; only nameservers are needed and
        dnspython's strict parser rejects some malformed search suffixes.
    """

    servers: list[str] = []
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                raw = line.split("#", 1)[0].strip()
                if not raw:
                    continue
                parts = raw.split()
                if len(parts) >= 2 and parts[0].lower() == "nameserver":
                    servers.append(parts[1])
    except OSError:
        return []
    return servers


class ResolverConfig(BaseModel):
    """Brief: Typed configuration model for DnsPythonResolver.

    Inputs:
      - nameservers: IP addresses of upstream validating resolvers, in order. When
        empty, the system resolver configuration is used.
      - port: UDP/TCP port of the upstream resolvers.
      - timeout_seconds: Per-server timeout for one query.
      - payload_size: EDNS(0) UDP payload size advertised in queries.

    Outputs:
      - ResolverConfig instance with normalized field types.
    """

    nameservers: List[IPvAnyAddress] = Field(default_factory=list)
    port: int = Field(default=53, ge=1, le=65535)
    timeout_seconds: float = Field(default=5.0, gt=0)
    payload_size: int = Field(default=1232, ge=512, le=65535)

    class Config:
        extra = "forbid"


class DnsPythonResolver:
    """Resolver Client that asks an upstream validating resolver.

    Each instance is cheap and holds only its configuration; the orchestrator
    builds a new one per lookup.

    The ``validate`` flag selects strictness: when true, transport faults
    raise ResolverError; when false they are logged and reported as a
    no-data outcome carrying the fault text as resolver status.
    """

    def __init__(self, config: Optional[ResolverConfig] = None) -> None:
        self.config = config or ResolverConfig()

    def lookup(
        self,
        name: str,
        rdtype: dns.rdatatype.RdataType,
        rdclass: dns.rdataclass.RdataClass,
        validate: bool,
    ) -> ResolutionOutcome:
        try:
            return self._lookup(name, rdtype, rdclass)
        except ResolverError as exc:
            if validate:
                raise
            logger.warning("Lookup of %s failed: %s", name, exc)
            return ResolutionOutcome(name, has_data=False, resolver_status=str(exc))

    def _lookup(
        self,
        name: str,
        rdtype: dns.rdatatype.RdataType,
        rdclass: dns.rdataclass.RdataClass,
    ) -> ResolutionOutcome:
        try:
            qname = dns.name.from_text(name)
        except dns.exception.DNSException as exc:
            raise ResolverError(f"invalid name {name!r}: {exc}") from exc

        response = self._send(self._make_query(qname, rdtype, rdclass))
        rcode = response.rcode()

        if rcode == dns.rcode.SERVFAIL:
            return self._probe_servfail(name, qname, rdtype, rdclass)

        status = None if rcode == dns.rcode.NOERROR else dns.rcode.to_text(rcode)
        if not response.answer:
            return ResolutionOutcome(name, has_data=False, resolver_status=status)

        return ResolutionOutcome(
            name,
            has_data=True,
            is_secure=bool(response.flags & dns.flags.AD),
            resolver_status=status,
        )

    def _probe_servfail(
        self,
        name: str,
        qname: dns.name.Name,
        rdtype: dns.rdatatype.RdataType,
        rdclass: dns.rdataclass.RdataClass,
    ) -> ResolutionOutcome:
        """Repeat a failed query with CD=1 to tell bogus data from a broken zone.

        A validating resolver answers SERVFAIL for data that fails validation
        but hands the same data out when checking is disabled.
        """

        response = self._send(
            self._make_query(qname, rdtype, rdclass, checking_disabled=True)
        )
        if response.rcode() == dns.rcode.NOERROR and response.answer:
            reason = (
                f"validation failure <{qname.to_text()} "
                f"{dns.rdatatype.to_text(rdtype)} {dns.rdataclass.to_text(rdclass)}>: "
                "SERVFAIL from upstream resolver; answer present with checking disabled"
            )
            return ResolutionOutcome(
                name, has_data=True, is_bogus=True, bogus_reason=reason
            )
        return ResolutionOutcome(name, has_data=False, resolver_status="SERVFAIL")

    def _make_query(
        self,
        qname: dns.name.Name,
        rdtype: dns.rdatatype.RdataType,
        rdclass: dns.rdataclass.RdataClass,
        *,
        checking_disabled: bool = False,
    ) -> dns.message.QueryMessage:
        query = dns.message.make_query(
            qname,
            rdtype,
            rdclass,
            use_edns=0,
            want_dnssec=True,
            payload=self.config.payload_size,
        )
        if checking_disabled:
            query.flags |= dns.flags.CD
        return query

    def _nameservers(self) -> List[str]:
        if self.config.nameservers:
            return [str(ns) for ns in self.config.nameservers]
        try:
            system = dns.resolver.Resolver(configure=True)
            return [str(ns) for ns in system.nameservers]
        except (dns.exception.DNSException, ValueError, OSError) as exc:
            logger.warning(
                "Could not parse system resolv.conf; falling back to nameserver-only config: %s",
                exc,
            )
            return _parse_resolv_conf_nameservers()

    def _send(self, query: dns.message.Message) -> dns.message.Message:
        servers = self._nameservers()
        if not servers:
            raise ResolverError("no nameservers configured")

        last_error: Optional[Exception] = None
        for server in servers:
            try:
                response, _used_tcp = dns.query.udp_with_fallback(
                    query,
                    server,
                    timeout=self.config.timeout_seconds,
                    port=self.config.port,
                )
                return response
            except (dns.exception.DNSException, OSError, ValueError) as exc:
                logger.debug("Nameserver %s failed: %s", server, exc)
                last_error = exc
        raise ResolverError(f"no nameserver answered: {last_error}")
