from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import List, Optional

import dns.message
import dns.rcode
import dns.rdatatype

from .errors import DataAbsent, ProtocolError
from .models import CRITICAL, OK, WARNING, CheckContext, CheckResult, ExpirationSummary, SignatureRecord

DAY = 86400

_SIGTIME = re.compile(r"^\d{14}$")


def parse_sigtime(text: str) -> int:
    """
    Decode an RRSIG presentation timestamp (YYYYMMDDHHMMSS, UTC) into POSIX seconds.

    Raises ProtocolError for anything that isn't a real 14-digit calendar time.
    """
    s = (text or "").strip()
    if not _SIGTIME.match(s):
        raise ProtocolError(f"Malformed signature expiration '{s}'")
    try:
        dt = datetime.strptime(s, "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise ProtocolError(f"Malformed signature expiration '{s}': {e}") from e
    return int(dt.timestamp())


def format_time(posix: int) -> str:
    return datetime.fromtimestamp(posix, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def signatures_in(resp: dns.message.Message, nameserver: str) -> List[SignatureRecord]:
    """RRSIGs in the ANSWER section, read from their presentation form (as dig shows them)."""
    out: List[SignatureRecord] = []
    for rrset in resp.answer:
        if rrset.rdtype != dns.rdatatype.RRSIG:
            continue
        for r in rrset:
            # <type covered> <alg> <labels> <orig ttl> <expiration> <inception> <key tag> <signer> <sig>
            fields = r.to_text().split()
            if len(fields) < 5:
                raise ProtocolError(f"Malformed RRSIG from {nameserver}: {r.to_text()}")
            out.append(
                SignatureRecord(
                    type_covered=fields[0].upper(),
                    expiration=parse_sigtime(fields[4]),
                    nameserver=nameserver,
                )
            )
    return out


class ExpirationAnalyzer:
    def __init__(self, critical_days: float = 2.0, warning_days: float = 3.0):
        self.critical_days = float(critical_days)
        self.warning_days = float(warning_days)

    def summarize(self, ctx: CheckContext) -> ExpirationSummary:
        """Validate every authoritative answer and collect its signatures."""
        if not ctx.nameservers:
            raise DataAbsent(f"No nameservers found.  Is '{ctx.config.zone}' a zone?")

        summary = ExpirationSummary()
        for name, ns in ctx.nameservers.items():
            resp = ns.response
            if resp is None:
                raise ProtocolError(f"No response from {name}")
            if resp.rcode() != dns.rcode.NOERROR:
                raise ProtocolError(f"{dns.rcode.to_text(resp.rcode())} from {name}")
            if not resp.answer:
                raise ProtocolError(f"{name} is lame")
            for sig in signatures_in(resp, name):
                summary.add(sig)

        if not summary.count:
            raise DataAbsent("No RRSIGs found")
        return summary

    def evaluate(self, summary: ExpirationSummary, zone: str, now: Optional[float] = None) -> CheckResult:
        now = time.time() if now is None else float(now)
        earliest = summary.earliest()
        if earliest is None:
            raise DataAbsent("No RRSIGs found")
        rrtype, expiration, ns = earliest

        if expiration < now:
            return CheckResult(zone=zone, state=CRITICAL, summary=summary,
                               message=f"{rrtype} RRSIG expired at {format_time(expiration)} on {ns}")

        days = (expiration - now) / DAY
        detail = f"{rrtype} RRSIG expires in {days:.1f} days ({format_time(expiration)}) on {ns}"
        if days < self.critical_days:
            return CheckResult(zone=zone, state=CRITICAL, message=detail, summary=summary)
        if days < self.warning_days:
            return CheckResult(zone=zone, state=WARNING, message=detail, summary=summary)
        return CheckResult(zone=zone, state=OK, summary=summary,
                           message=f"No RRSIGs expiring in the next {self.warning_days:.1f} days")

    def analyze(self, ctx: CheckContext, now: Optional[float] = None) -> CheckResult:
        result = self.evaluate(self.summarize(ctx), ctx.config.zone, now=now)
        result.nameservers = list(ctx.nameservers)
        return result

