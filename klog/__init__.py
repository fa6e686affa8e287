"""Leveled logging building blocks: severities, log headers, key/value serialization, object references, verbosity, clocks and stack dumps."""

__version__ = "0.1.0"

__all__ = [
    "buffer",
    "clock",
    "dbg",
    "formatting",
    "references",
    "serialize",
    "severity",
    "verbosity",
]