from __future__ import annotations

import logging
import random
from typing import List, Optional

import dns.rcode
import dns.rdatatype

from .errors import NetworkError, ProtocolError
from .models import CheckContext
from .targets import fqdn, normalize_zone, same_name
from .transport import DnsTransport

log = logging.getLogger(__name__)


class DelegationWalker:
    """
    Follows NS referrals from the root servers down to the zone's own nameservers.

    Each round asks one candidate server (candidates shuffled, the next one tried
    only if the previous did not answer) for <zone> <qtype> without recursion.
      - NS in AUTHORITY owned by the zone itself: those are the authoritative
        nameservers, the walk is over.
      - NS owned by some other (closer) zone: they become the next candidates.
      - no NS at all: the walk ends with nothing found.
    """

    def __init__(self, transport: DnsTransport, rng: Optional[random.Random] = None):
        self.transport = transport
        self.rng = rng or random.Random()

    def walk(self, ctx: CheckContext) -> List[str]:
        cfg = ctx.config
        qname = fqdn(cfg.zone)
        refs = list(cfg.root_servers)

        rounds = 0
        while refs:
            rounds += 1
            if rounds > cfg.max_referrals:
                raise ProtocolError(f"Too many referrals while looking for {qname} nameservers")
            self.rng.shuffle(refs)
            log.debug("Refs: %s", " ".join(refs))

            msg = self.transport.make_query(qname, cfg.qtype)
            resp = None
            server = None
            for server in refs:
                resp = self.transport.query(server, msg)
                if resp is not None:
                    break
                log.debug("no response from %s, trying next", server)

            if resp is None:
                raise NetworkError("No response to seed query")

            rcode = resp.rcode()
            if rcode != dns.rcode.NOERROR:
                raise ProtocolError(f"{dns.rcode.to_text(rcode)} from {server}")

            refs = []
            for rrset in resp.authority:
                if rrset.rdtype != dns.rdatatype.NS:
                    continue
                targets = [str(r.target) for r in rrset]
                if same_name(rrset.name.to_text(), cfg.zone):
                    for t in targets:
                        ctx.add_nameserver(t)
                    log.debug("%s is served by %s (answer from %s)", qname, " ".join(ctx.nameservers), server)
                    return list(ctx.nameservers)
                for t in targets:
                    t = normalize_zone(t)
                    if t not in refs:
                        refs.append(t)

        log.debug("no NS records for %s found in referral chain", qname)
        return list(ctx.nameservers)
