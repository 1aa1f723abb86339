"""
DNSSEC RRSIG expiration check for a single zone.

Walks the delegation from the root servers to the zone's authoritative
nameservers, asks each of them for a signed record type and reports how soon
the earliest RRSIG family expires, in Nagios plugin format.

Public entrypoint: ZoneRrsigCheck
"""

from .check import ZoneRrsigCheck
from .models import CheckConfig, CheckResult

__all__ = ["ZoneRrsigCheck", "CheckConfig", "CheckResult"]
