from .status import CRITICAL, UNKNOWN, WARNING


class CheckError(Exception):
    """Terminal condition; the check stops and reports `state` with this message."""

    state = UNKNOWN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Bad or missing command-line input
class UsageError(CheckError):
    state = UNKNOWN


# Zone argument is not a syntactically valid DNS name
class InvalidZone(UsageError):
    """Raised when a target is not a valid domain/zone."""


# No candidate server answered at all
class NetworkError(CheckError):
    state = CRITICAL


# A server answered, but with something we can't accept (rcode, lame, bad field)
class ProtocolError(CheckError):
    state = CRITICAL


# Nothing to evaluate: might just be a non-existent zone, not a signing failure
class DataAbsent(CheckError):
    state = WARNING
