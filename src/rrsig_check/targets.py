import re

from .errors import InvalidZone


# Normalize the user input by trimming white space, removing the trailing dot and lower-casing it.
def normalize_zone(raw: str) -> str:
    return (raw or "").strip().rstrip(".").lower()


# Compare two DNS names the way the delegation walk needs: case-insensitive, trailing dot ignored.
def same_name(a: str, b: str) -> bool:
    return normalize_zone(a) == normalize_zone(b)


# Label rules as for any domain target (leading underscore allowed). Checks only format, not existence;
# the root zone has no labels and is handled separately in require_zone.
_LABEL = re.compile(r"^_?[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
def is_domain(s: str) -> bool:
    if not s or len(s) > 253 or any(c.isspace() for c in s):
        return False

    labels = s.split(".")
    if any(label == "" or len(label) > 63 for label in labels):
        return False

    return all(_LABEL.match(label) for label in labels)


# Normalizes the zone argument and checks it. The root zone is accepted as ".".
def require_zone(raw: str) -> str:
    if (raw or "").strip() == ".":
        return "."
    s = normalize_zone(raw)
    if not is_domain(s):
        raise InvalidZone(f"Invalid zone name '{(raw or '').strip()}'")
    return s


# Fully-qualified form used on the wire.
def fqdn(zone: str) -> str:
    z = normalize_zone(zone)
    return z + "." if z else "."
