import sys

from .base import (
    Reporter,
    TaskStatus,
    get_reporter,
    set_reporter,
    set_verbosity,
    get_verbosity,
)
from .plain import PlainReporter
from .jsonl import JsonLinesReporter
from .silent import SilentReporter
from .rich_reporter import RichReporter

REPORTER_CHOICES = ("plain", "rich", "json", "silent")


def make_reporter(name: str) -> Reporter:
    """Build a reporter by CLI name; ``rich`` degrades to plain off a TTY."""
    if name == "json":
        return JsonLinesReporter()
    if name == "silent":
        return SilentReporter()
    if name == "rich" and sys.stderr.isatty():
        return RichReporter()
    return PlainReporter()


__all__ = [
    "Reporter",
    "TaskStatus",
    "get_reporter",
    "set_reporter",
    "set_verbosity",
    "get_verbosity",
    "PlainReporter",
    "JsonLinesReporter",
    "SilentReporter",
    "RichReporter",
    "REPORTER_CHOICES",
    "make_reporter",
]
