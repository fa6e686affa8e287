"""Wrapping of arbitrary values so that they are logged as JSON."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .serialize import _ENCODE_ERRORS, _encode_json, _to_plain


@dataclass(frozen=True)
class FormatAny:
    """Wraps a value: str() gives pretty-printed JSON, marshal_log() plain data.

    Useful for values whose own string or log representation is broken or
    less readable than their fields.
    """

    obj: Any

    def __str__(self) -> str:
        try:
            return _encode_json(self.obj, indent=2) + "\n"
        except _ENCODE_ERRORS as err:
            return f"error marshaling {type(self).__name__} to JSON: {err}"

    def marshal_log(self) -> Any:
        """Return the value as plain data without any special methods."""
        try:
            return _to_plain(self.obj)
        except _ENCODE_ERRORS:
            return self.obj


def format_any(obj: Any) -> FormatAny:
    """Wrap obj so that it gets logged as JSON."""
    return FormatAny(obj)