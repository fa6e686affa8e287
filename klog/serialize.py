"""Text serialization of structured key/value pairs for log lines."""

from __future__ import annotations

import base64
import dataclasses
import io
import json
from collections.abc import Mapping
from typing import Any, Callable, Optional, Sequence

MISSING_VALUE = "(MISSING)"

AnyToStringFunc = Callable[[Any], str]

_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}

_PLAIN_TYPES = (
    str,
    bytes,
    bytearray,
    int,
    float,
    complex,
    list,
    tuple,
    dict,
    set,
    frozenset,
    type(None),
    BaseException,
)

_ENCODE_ERRORS = (TypeError, ValueError, RecursionError)


def with_values(old_kv: Sequence[Any], new_kv: Sequence[Any]) -> Sequence[Any]:
    """Append new key/value pairs to old ones, padding a missing value.

    The old pairs are assumed to be well-formed. Without new pairs the old
    sequence itself is returned, otherwise a new list.
    """
    if not new_kv:
        return old_kv
    kv = [*old_kv, *new_kv]
    if len(kv) % 2:
        kv.append(MISSING_VALUE)
    return kv


def _pairs(seq: Sequence[Any]):
    items = list(seq)
    return zip(items[0::2], items[1::2])


def _is_overridden(key: Any, overrides: Sequence[Any]) -> bool:
    return any(type(o) is type(key) and o == key for o in overrides)


def merge_kvs(first: Sequence[Any], second: Sequence[Any]) -> list:
    """Merge two key/value sequences, letting keys in second win.

    The first sequence must be well-formed; an odd second sequence gets the
    missing value appended.
    """
    if not first and not second:
        return []
    if not first and len(second) % 2 == 0:
        return list(second)
    overrides = list(second)[0::2]
    merged: list = []
    for key, value in _pairs(first):
        if _is_overridden(key, overrides):
            continue
        merged += [key, value]
    merged.extend(second)
    if len(merged) % 2:
        merged.append(MISSING_VALUE)
    return merged


def _quote(s: str, ascii_only: bool = False, raw_bytes: bool = False) -> str:
    """Quote s with escapes for quotes and non-printable characters."""
    out = ['"']
    for ch in s:
        code = ord(ch)
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif raw_bytes and 0xDC80 <= code <= 0xDCFF:
            out.append(f"\\x{code - 0xDC00:02x}")
        elif ch.isprintable() and (code < 0x80 or not ascii_only):
            out.append(ch)
        elif code < 0x20 or code == 0x7F:
            out.append(f"\\x{code:02x}")
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def _json_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    raise TypeError(f"unsupported map key type: {type(key).__name__}")


def _to_plain(value: Any) -> Any:
    """Convert a value into plain JSON-compatible data without special methods."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: _to_plain(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if not f.name.startswith("_")
        }
    if isinstance(value, Mapping):
        items = sorted(
            ((_json_key(k), item) for k, item in value.items()),
            key=lambda kv: kv[0],
        )
        return {k: _to_plain(item) for k, item in items}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_plain(item) for item in value]
    raise TypeError(f"unsupported type: {type(value).__name__}")


def _escape_html(text: str) -> str:
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _encode_json(value: Any, indent: Optional[int] = None) -> str:
    """Encode value as JSON, compact unless an indent is given."""
    plain = _to_plain(value)
    if indent is None:
        text = json.dumps(
            plain, ensure_ascii=False, allow_nan=False, separators=(",", ":")
        )
    else:
        text = json.dumps(plain, ensure_ascii=False, allow_nan=False, indent=indent)
    return _escape_html(text)


def _is_text_writer(v: Any) -> bool:
    return not isinstance(v, type) and callable(getattr(v, "write_text", None))


def _is_marshaler(v: Any) -> bool:
    return not isinstance(v, type) and callable(getattr(v, "marshal_log", None))


def _is_stringer(v: Any) -> bool:
    return (
        not isinstance(v, _PLAIN_TYPES)
        and not isinstance(v, type)
        and type(v).__str__ is not object.__str__
    )


def stringer_to_string(s: Any) -> str:
    """Convert s to a string, reporting an exception instead of raising it."""
    try:
        return str(s)
    except Exception as err:  # noqa: BLE001
        return f"<panic: {err}>"


def marshaler_to_value(m: Any) -> Any:
    """Call m.marshal_log(), reporting an exception instead of raising it."""
    try:
        return m.marshal_log()
    except Exception as err:  # noqa: BLE001
        return f"<panic: {err}>"


def error_to_string(err: BaseException) -> str:
    """Convert an exception to its message, reporting a failure instead of raising."""
    try:
        return str(err)
    except Exception as exc:  # noqa: BLE001
        return f"<panic: {exc}>"


def _text_writer_value(v: Any) -> str:
    out = io.StringIO()
    out.write("=")
    try:
        v.write_text(out)
    except Exception as err:  # noqa: BLE001
        out.write(f'"<panic: {err}>"')
    return out.getvalue()


def _string_value(s: str) -> str:
    if "\n" not in s:
        return "=" + _quote(s)
    *complete, rest = s.split("\n")
    body = "".join(f"\t{line}\n" for line in complete)
    if rest:
        return f"=<\n{body}\t{rest}\n >"
    return f"=<\n{body} >"


@dataclasses.dataclass(frozen=True)
class Formatter:
    """Formats key/value pairs, optionally with a hook for arbitrary values."""

    any_to_string_hook: Optional[AnyToStringFunc] = None

    def merge_and_format_kvs(self, first: Sequence[Any], second: Sequence[Any]) -> str:
        """Merge two key/value sequences like merge_kvs and format the result."""
        if not first and not second:
            return ""
        if not first and len(second) % 2 == 0:
            return "".join(self.kv_format(k, v) for k, v in _pairs(second))
        overrides = list(second)[0::2]
        parts = [
            self.kv_format(k, v)
            for k, v in _pairs(first)
            if not _is_overridden(k, overrides)
        ]
        parts.extend(self.kv_format(k, v) for k, v in _pairs(second))
        if len(second) % 2:
            parts.append(self.kv_format(second[-1], MISSING_VALUE))
        return "".join(parts)

    def kv_list_format(self, *keys_and_values: Any) -> str:
        """Format all pairs, each preceded by a space."""
        parts = [self.kv_format(k, v) for k, v in _pairs(keys_and_values)]
        if len(keys_and_values) % 2:
            parts.append(self.kv_format(keys_and_values[-1], MISSING_VALUE))
        return "".join(parts)

    def kv_format(self, k: Any, v: Any) -> str:
        """Format one pair as `` key=value``."""
        key = k if isinstance(k, str) else stringer_to_string(k)
        return f" {key}{self._format_value(v)}"

    def _format_value(self, v: Any) -> str:
        if _is_text_writer(v):
            return _text_writer_value(v)
        if isinstance(v, str):
            return _string_value(v)
        if isinstance(v, BaseException):
            return _string_value(error_to_string(v))
        if _is_stringer(v):
            return _string_value(stringer_to_string(v))
        if _is_marshaler(v):
            value = marshaler_to_value(v)
            if isinstance(value, str):
                return _string_value(value)
            return self._format_any(value)
        if isinstance(v, (bytes, bytearray)):
            text = bytes(v).decode("utf-8", "surrogateescape")
            return "=" + _quote(text, ascii_only=True, raw_bytes=True)
        return self._format_any(v)

    def _format_any(self, v: Any) -> str:
        if self.any_to_string_hook is not None:
            return "=" + self.any_to_string_hook(v)
        try:
            return "=" + _encode_json(v)
        except _ENCODE_ERRORS as err:
            return f'="<internal error: {err}>"'


_DEFAULT = Formatter()


def merge_and_format_kvs(first: Sequence[Any], second: Sequence[Any]) -> str:
    """Merge and format with the default formatter."""
    return _DEFAULT.merge_and_format_kvs(first, second)


def kv_list_format(*keys_and_values: Any) -> str:
    """Format all pairs with the default formatter."""
    return _DEFAULT.kv_list_format(*keys_and_values)


def kv_format(k: Any, v: Any) -> str:
    """Format one pair with the default formatter."""
    return _DEFAULT.kv_format(k, v)