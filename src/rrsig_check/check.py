from __future__ import annotations

import logging
import random
from typing import Optional

from .analyzer import ExpirationAnalyzer
from .delegation import DelegationWalker
from .errors import CheckError
from .models import CheckConfig, CheckContext, CheckResult
from .query import AuthoritativeQueryRunner
from .transport import DnsTransport

log = logging.getLogger(__name__)


class ZoneRrsigCheck:
    """
    One run of the RRSIG expiration check:
      1) walk the delegation to find the zone's nameservers
      2) query each of them directly
      3) find the soonest-expiring signature family and compare it to the thresholds

    The first terminal condition (CheckError) ends the run; its state and message
    become the result.
    """

    def __init__(
        self,
        config: CheckConfig,
        transport: Optional[DnsTransport] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.transport = transport or DnsTransport(
            timeout=config.timeout,
            ipv4_only=config.ipv4_only,
            edns_size=config.edns_size,
        )
        self.walker = DelegationWalker(self.transport, rng=rng)
        self.runner = AuthoritativeQueryRunner(self.transport)
        self.analyzer = ExpirationAnalyzer(
            critical_days=config.critical_days,
            warning_days=config.warning_days,
        )

    def run(self, ctx: Optional[CheckContext] = None, now: Optional[float] = None) -> CheckResult:
        ctx = ctx or CheckContext(config=self.config)
        try:
            self.walker.walk(ctx)
            self.runner.run(ctx)
            result = self.analyzer.analyze(ctx, now=now)
        except CheckError as e:
            log.debug("%s: %s", type(e).__name__, e.message)
            result = CheckResult(zone=self.config.zone, state=e.state, message=e.message)
            result.nameservers = list(ctx.nameservers)

        result.elapsed = ctx.elapsed()
        return result
