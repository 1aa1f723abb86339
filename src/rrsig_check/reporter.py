import sys
from typing import Optional, TextIO

from .models import CheckResult


def format_line(result: CheckResult) -> str:
    # Nagios plugin output: status text, then perfdata after the pipe
    return (
        f"ZONE {result.state_name}: {result.message}; "
        f"({result.elapsed:.2f}s) |time={result.elapsed:.6f}s;;;0.000000"
    )


def emit(result: CheckResult, stream: Optional[TextIO] = None) -> int:
    """Print the plugin line and hand back the exit code for it."""
    print(format_line(result), file=stream or sys.stdout)
    return result.state
