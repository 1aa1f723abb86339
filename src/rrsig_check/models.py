from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Tuple

import dns.message

from .status import CRITICAL, OK, STATE_NAMES, UNKNOWN, WARNING
from .targets import normalize_zone

ROOT_SERVERS = [f"{letter}.root-servers.net" for letter in "abcdefghijklm"]


@dataclass
class CheckConfig:
    zone: str
    timeout: float = 30.0
    critical_days: float = 2.0
    warning_days: float = 3.0
    qtype: str = "SOA"
    ipv4_only: bool = False
    edns_size: int = 4096
    debug: bool = False
    root_servers: List[str] = field(default_factory=lambda: list(ROOT_SERVERS))
    max_referrals: int = 30


@dataclass
class NameserverRecord:
    hostname: str
    queried: bool = False
    response: Optional[dns.message.Message] = None
    transport: Optional[str] = None  # udp|tcp|None

    def mark_done(self, response: Optional[dns.message.Message], transport: Optional[str]) -> None:
        self.queried = True
        self.response = response
        self.transport = transport if response is not None else None


@dataclass(frozen=True)
class SignatureRecord:
    type_covered: str
    expiration: int  # POSIX seconds, UTC
    nameserver: str


@dataclass
class ExpirationSummary:
    """
    Latest expiration seen per type-covered, across all nameservers.

    The latest one is kept so a single server still serving an old signature
    doesn't decide the result; the soonest of those per-type maxima is what
    the check alarms on.
    """

    per_type: Dict[str, Tuple[int, str]] = field(default_factory=dict)  # type -> (expiration, ns)
    count: int = 0

    def add(self, sig: SignatureRecord) -> None:
        self.count += 1
        current = self.per_type.get(sig.type_covered)
        if current is None or sig.expiration > current[0]:
            self.per_type[sig.type_covered] = (sig.expiration, sig.nameserver)

    def earliest(self) -> Optional[Tuple[str, int, str]]:
        if not self.per_type:
            return None
        rrtype, (expiration, ns) = min(self.per_type.items(), key=lambda kv: kv[1][0])
        return rrtype, expiration, ns

    def to_dict(self) -> Dict[str, Any]:
        return {
            rrtype: {"expiration": exp, "nameserver": ns}
            for rrtype, (exp, ns) in sorted(self.per_type.items())
        }


@dataclass
class CheckContext:
    """Mutable state handed from stage to stage during one check run."""

    config: CheckConfig
    started: float = field(default_factory=time.perf_counter)
    nameservers: Dict[str, NameserverRecord] = field(default_factory=dict)
    pending: Deque[NameserverRecord] = field(default_factory=deque)

    def add_nameserver(self, hostname: str) -> bool:
        """Register a nameserver; returns True (and queues it) only the first time it is seen."""
        name = normalize_zone(hostname)
        if not name or name in self.nameservers:
            return False
        rec = NameserverRecord(hostname=name)
        self.nameservers[name] = rec
        self.pending.append(rec)
        return True

    def elapsed(self) -> float:
        return time.perf_counter() - self.started


@dataclass
class CheckResult:
    zone: str
    state: int
    message: str
    elapsed: float = 0.0
    nameservers: List[str] = field(default_factory=list)
    summary: Optional[ExpirationSummary] = None

    @property
    def state_name(self) -> str:
        return STATE_NAMES.get(self.state, "UNKNOWN")

    def to_dict(self) -> Dict[str, Any]:
        from .reporter import format_line

        return {
            "zone": self.zone,
            "state": self.state_name,
            "exit_code": self.state,
            "message": self.message,
            "elapsed": round(self.elapsed, 6),
            "line": format_line(self),
            "nameservers": self.nameservers,
            "expirations": self.summary.to_dict() if self.summary else {},
        }
