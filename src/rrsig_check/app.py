import math
import os
from typing import Optional

import dns.rdatatype

# FastAPI creates the app object and defines the routes
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from .check import ZoneRrsigCheck
from .errors import InvalidZone
from .models import CheckConfig
from .targets import require_zone
from .transport import DnsTransport

# Per-query timeout for checks run through the API; a browser won't wait 30s per server.
CHECK_TIMEOUT = float(os.getenv("RRSIG_CHECK_TIMEOUT", "5"))

app = FastAPI(title="Zone RRSIG Expiration Checker")


# Swapped out in tests via app.dependency_overrides
def get_transport() -> Optional[DnsTransport]:
    return None


@app.get("/health")
def health():
    return {"ok": True}


# Check a zone; the body carries the same state/message a monitoring system would see
@app.get("/check")
def check(
    zone: str = Query(..., min_length=1, max_length=253),
    warning_days: float = Query(3.0, ge=0),
    critical_days: float = Query(2.0, ge=0),
    qtype: str = Query("SOA", min_length=1, max_length=16),
    transport: Optional[DnsTransport] = Depends(get_transport),
):
    try:
        zone = require_zone(zone)
    except InvalidZone as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not (math.isfinite(warning_days) and math.isfinite(critical_days)):
        raise HTTPException(status_code=400, detail="warning_days and critical_days must be finite numbers")

    if warning_days < critical_days:
        raise HTTPException(status_code=400, detail="warning_days must be >= critical_days")

    qtype = qtype.strip().upper()
    try:
        dns.rdatatype.from_text(qtype)
    except dns.rdatatype.UnknownRdatatype:
        raise HTTPException(status_code=400, detail=f"Unknown record type '{qtype}'")

    config = CheckConfig(
        zone=zone,
        timeout=CHECK_TIMEOUT,
        warning_days=warning_days,
        critical_days=critical_days,
        qtype=qtype,
    )
    result = ZoneRrsigCheck(config, transport=transport).run()
    return jsonable_encoder(result.to_dict())
