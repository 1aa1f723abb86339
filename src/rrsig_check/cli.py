import argparse
import logging
import math
import sys
import time
from typing import List, Optional

import dns.rdatatype

from .check import ZoneRrsigCheck
from .errors import UsageError
from .models import UNKNOWN, CheckConfig, CheckContext, CheckResult
from .reporter import emit
from .targets import require_zone
from .transport import DnsTransport

"""
Command-line entrypoint, installed as check_zone_rrsig.

  1) Parse + validate the flags (any problem => ZONE UNKNOWN, exit 3)
  2) Run the check once
  3) Print one plugin line and exit with its state
"""


class PluginArgumentParser(argparse.ArgumentParser):
    # argparse exits with 2 on bad input, which a monitoring system reads as CRITICAL.
    def error(self, message: str):
        raise UsageError(message)


# Parse the command-line arguments
def build_parser() -> argparse.ArgumentParser:
    p = PluginArgumentParser(
        prog="check_zone_rrsig",
        description="Nagios check for DNSSEC RRSIG expiration at a zone's authoritative nameservers",
    )
    p.add_argument("-Z", dest="zone", required=True, help="Zone to check (e.g., example.com)")
    p.add_argument("-t", dest="timeout", type=float, default=30.0, help="Query timeout in seconds")
    p.add_argument("-C", dest="critical_days", type=float, default=2.0, help="Critical if an RRSIG expires within this many days")
    p.add_argument("-W", dest="warning_days", type=float, default=3.0, help="Warning if an RRSIG expires within this many days")
    p.add_argument("-T", dest="qtype", default="SOA", help="Record type to query (default SOA)")
    p.add_argument("-4", dest="ipv4_only", action="store_true", help="Use IPv4 only")
    p.add_argument("-U", dest="edns_size", type=int, default=4096, help="EDNS UDP buffer size")
    p.add_argument("-d", dest="debug", action="store_true", help="Debug trace on standard error")
    return p


def parse_config(argv: Optional[List[str]] = None) -> CheckConfig:
    args = build_parser().parse_args(argv)

    zone = require_zone(args.zone)
    qtype = args.qtype.strip().upper()
    try:
        dns.rdatatype.from_text(qtype)
    except dns.rdatatype.UnknownRdatatype:
        raise UsageError(f"Unknown record type '{args.qtype}'")

    for flag, value in (("-t", args.timeout), ("-C", args.critical_days), ("-W", args.warning_days)):
        if not math.isfinite(value):
            raise UsageError(f"{flag} must be a finite number, got {value}")

    if args.timeout <= 0:
        raise UsageError("Timeout must be positive")
    if args.edns_size < 512 or args.edns_size > 65535:
        raise UsageError("EDNS buffer size must be between 512 and 65535")
    if args.critical_days < 0 or args.warning_days < args.critical_days:
        raise UsageError("Warning days must be >= critical days >= 0")

    return CheckConfig(
        zone=zone,
        timeout=args.timeout,
        critical_days=args.critical_days,
        warning_days=args.warning_days,
        qtype=qtype,
        ipv4_only=args.ipv4_only,
        edns_size=args.edns_size,
        debug=args.debug,
    )


def configure_logging(debug: bool) -> None:
    root = logging.getLogger("rrsig_check")
    if not debug:
        root.setLevel(logging.WARNING)
        return
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(relativeCreated)7.0fms %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def main(argv: Optional[List[str]] = None, transport: Optional[DnsTransport] = None) -> int:
    """
    CLI entrypoint.

    Returns:
        Process exit code (0 OK, 1 WARNING, 2 CRITICAL, 3 UNKNOWN).
    """
    started = time.perf_counter()

    try:
        config = parse_config(argv)
    except UsageError as e:
        result = CheckResult(zone="", state=UNKNOWN, message=e.message,
                             elapsed=time.perf_counter() - started)
        build_parser().print_usage(sys.stderr)
        return emit(result)

    configure_logging(config.debug)

    check = ZoneRrsigCheck(config, transport=transport)
    result = check.run(CheckContext(config=config, started=started))
    return emit(result)


if __name__ == "__main__":
    raise SystemExit(main())
