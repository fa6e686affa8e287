"""Formatting of the fixed-width log line header."""

from __future__ import annotations

import os
from datetime import datetime

from .severity import Severity

PID = os.getpid()


def _two_digits(d: int) -> str:
    return f"{(d // 10) % 10}{d % 10}"


def _n_digits(n: int, d: int, pad: str) -> str:
    """Format the last n digits of d, padded on the left with pad.

    A value of zero yields padding only.
    """
    digits = str(d) if d > 0 else ""
    return digits[-n:].rjust(n, pad)


def _clamp(s: int) -> Severity:
    if s > Severity.FATAL:
        return Severity.INFO
    return Severity(s)


def _time_part(s: Severity, now: datetime) -> str:
    return (
        f"{s.char()}{_two_digits(now.month)}{_two_digits(now.day)} "
        f"{_two_digits(now.hour)}:{_two_digits(now.minute)}:{_two_digits(now.second)}"
        f".{_n_digits(6, now.microsecond, '0')}"
    )


def format_header(
    s: int, file: str, line: int, now: datetime, pid: int | None = None
) -> str:
    """Return the header ``Lmmdd hh:mm:ss.uuuuuu pid file:line] ``."""
    if line < 0:
        line = 0
    if pid is None:
        pid = PID
    sev = _clamp(s)
    return f"{_time_part(sev, now)} {_n_digits(7, pid, ' ')} {file}:{line}] "


def sprint_header(s: int, now: datetime) -> str:
    """Return the short header ``Lmmdd hh:mm:ss.uuuuuu]``."""
    return f"{_time_part(_clamp(s), now)}]"