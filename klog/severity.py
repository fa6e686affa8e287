"""Log severity levels: info, warning, error and fatal."""

from __future__ import annotations

from enum import IntEnum

CHAR = "IWEF"
NUM_SEVERITY = 4


class Severity(IntEnum):
    """Severity of a log entry, in order of increasing severity.

    A message written to a high-severity log is also written to each
    lower-severity log.
    """

    INFO = 0
    WARNING = 1
    ERROR = 2
    FATAL = 3

    def char(self) -> str:
        """Return the one-letter shortcut used in log headers."""
        return CHAR[self]


NAMES = tuple(s.name for s in Severity)


def by_name(s: str) -> Severity:
    """Look up a severity level by name, ignoring case.

    Raises ValueError if the name is unknown.
    """
    try:
        return Severity[s.upper()]
    except KeyError:
        raise ValueError(f"unknown severity name {s!r}") from None