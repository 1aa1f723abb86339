from __future__ import annotations

import ipaddress
import logging
from typing import List, Optional

import dns.exception
import dns.flags
import dns.message
import dns.query
import dns.rdatatype
import dns.resolver

from .errors import NetworkError

log = logging.getLogger(__name__)


class DnsTransport:
    """
    Sends DNSSEC-OK, non-recursive queries to one named server.

    Servers are given by hostname (as found in NS records) and resolved with the
    system resolver. Every way of not getting an answer (timeout, socket error,
    garbage reply) comes back as None; callers decide what that means.
    """

    def __init__(self, timeout: float = 30.0, ipv4_only: bool = False, edns_size: int = 4096):
        self.timeout = float(timeout)
        self.ipv4_only = bool(ipv4_only)
        self.edns_size = int(edns_size)

        self._resolver: Optional[dns.resolver.Resolver] = None

    # Created on first use; a host with no resolver configuration is a NetworkError.
    @property
    def resolver(self) -> dns.resolver.Resolver:
        if self._resolver is None:
            try:
                r = dns.resolver.Resolver(configure=True)
            except dns.resolver.NoResolverConfiguration as e:
                raise NetworkError(f"No resolver configuration to look up nameserver addresses: {e}") from e
            r.timeout = self.timeout
            r.lifetime = self.timeout
            self._resolver = r
        return self._resolver

    def make_query(self, qname: str, qtype: str) -> dns.message.Message:
        msg = dns.message.make_query(
            qname,
            dns.rdatatype.from_text(qtype),
            want_dnssec=True,
            use_edns=0,
            payload=self.edns_size,
        )
        msg.flags &= ~dns.flags.RD
        return msg

    def addresses(self, host: str) -> List[str]:
        try:
            ip = ipaddress.ip_address(host)
        except ValueError:
            pass
        else:
            if self.ipv4_only and ip.version != 4:
                return []
            return [str(ip)]

        resolver = self.resolver
        rdtypes = ("A",) if self.ipv4_only else ("A", "AAAA")
        out: List[str] = []
        for rdtype in rdtypes:
            try:
                ans = resolver.resolve(host, rdtype)
            except dns.exception.DNSException as e:
                log.debug("%s %s lookup failed: %s", host, rdtype, type(e).__name__)
                continue
            for r in ans:
                if r.address not in out:
                    out.append(r.address)
        return out

    def query(self, host: str, msg: dns.message.Message, tcp: bool = False) -> Optional[dns.message.Message]:
        for ip in self.addresses(host):
            try:
                if tcp:
                    return dns.query.tcp(msg, ip, timeout=self.timeout)
                resp = dns.query.udp(msg, ip, timeout=self.timeout)
                if resp.flags & dns.flags.TC:
                    log.debug("truncated UDP answer from %s (%s), retrying over TCP", host, ip)
                    resp = dns.query.tcp(msg, ip, timeout=self.timeout)
                return resp
            except (dns.exception.DNSException, OSError) as e:
                log.debug("no answer from %s (%s) over %s: %s: %s",
                          host, ip, "tcp" if tcp else "udp", type(e).__name__, e)
                continue
        return None
