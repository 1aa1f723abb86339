from __future__ import annotations

import logging
from typing import Optional

import dns.message
import dns.rdatatype

from .models import CheckContext
from .targets import fqdn, same_name
from .transport import DnsTransport

log = logging.getLogger(__name__)


class AuthoritativeQueryRunner:
    """
    Asks every authoritative nameserver of the zone directly for <zone> <qtype>.

    A server that gives nothing over UDP gets one more try over TCP. NS records
    for the zone seen in any answer are added to the set, so a nameserver only
    one server knows about is still queried before the run ends.
    """

    def __init__(self, transport: DnsTransport):
        self.transport = transport

    def run(self, ctx: CheckContext) -> None:
        cfg = ctx.config
        qname = fqdn(cfg.zone)

        while ctx.pending:
            ns = ctx.pending.popleft()
            if ns.queried:
                continue

            msg = self.transport.make_query(qname, cfg.qtype)
            resp = self.transport.query(ns.hostname, msg)
            used = "udp"
            if resp is None:
                log.debug("no UDP answer from %s, retrying over TCP", ns.hostname)
                resp = self.transport.query(ns.hostname, msg, tcp=True)
                used = "tcp"

            ns.mark_done(resp, used)
            if resp is None:
                log.debug("no answer from %s", ns.hostname)
                continue

            log.debug("%s answered over %s", ns.hostname, used)
            self._harvest_nameservers(ctx, resp, ns.hostname)

    @staticmethod
    def _harvest_nameservers(ctx: CheckContext, resp: dns.message.Message, source: Optional[str]) -> None:
        zone = ctx.config.zone
        for rrset in list(resp.answer) + list(resp.authority):
            if rrset.rdtype != dns.rdatatype.NS or not same_name(rrset.name.to_text(), zone):
                continue
            for r in rrset:
                if ctx.add_nameserver(str(r.target)):
                    log.debug("%s also lists nameserver %s", source, str(r.target).rstrip("."))
