"""Support for the -v and -vmodule settings that control verbose logging."""

from __future__ import annotations

import os
import re
import sys
import threading
from dataclasses import dataclass, field
from typing import Optional

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_VMODULE_SYNTAX = "syntax error: expect comma-separated list of filename=N"
_META_CHARS = set("\\*?[]")


class VerbositySyntaxError(ValueError):
    """A -v or -vmodule value could not be parsed."""


def _parse_int32(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise VerbositySyntaxError(f"parsing {text!r}: invalid syntax")
    value = int(text)
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise VerbositySyntaxError(f"parsing {text!r}: value out of range")
    return value


def _class_char(pattern: str, i: int) -> tuple[Optional[str], int]:
    if i >= len(pattern) or pattern[i] in "-]":
        return None, i
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            return None, i
    return pattern[i], i + 1


def _parse_class(pattern: str, i: int) -> tuple[Optional[str], int]:
    negate = i < len(pattern) and pattern[i] == "^"
    if negate:
        i += 1
    ranges: list[tuple[str, str]] = []
    while True:
        if i < len(pattern) and pattern[i] == "]" and ranges:
            i += 1
            break
        lo, i = _class_char(pattern, i)
        if lo is None:
            return None, i
        hi = lo
        if i < len(pattern) and pattern[i] == "-":
            hi, i = _class_char(pattern, i + 1)
            if hi is None:
                return None, i
        ranges.append((lo, hi))
    items = [f"{re.escape(lo)}-{re.escape(hi)}" for lo, hi in ranges if lo <= hi]
    if not items:
        return ("[\\s\\S]" if negate else "(?!)"), i
    return "[" + ("^" if negate else "") + "".join(items) + "]", i


def _compile_glob(pattern: str) -> Optional[re.Pattern]:
    """Translate a file glob into a regex; None for a malformed pattern."""
    parts = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "*":
            parts.append("[^/]*")
            i += 1
        elif c == "?":
            parts.append("[^/]")
            i += 1
        elif c == "\\":
            if i + 1 >= len(pattern):
                return None
            parts.append(re.escape(pattern[i + 1]))
            i += 2
        elif c == "[":
            cls, i = _parse_class(pattern, i + 1)
            if cls is None:
                return None
            parts.append(cls)
        else:
            parts.append(re.escape(c))
            i += 1
    return re.compile("".join(parts), re.DOTALL)


def _is_literal(pattern: str) -> bool:
    return not _META_CHARS.intersection(pattern)


@dataclass(frozen=True)
class _ModulePat:
    pattern: str
    level: int
    literal: bool = field(init=False)
    regex: Optional[re.Pattern] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        literal = _is_literal(self.pattern)
        object.__setattr__(self, "literal", literal)
        object.__setattr__(
            self, "regex", None if literal else _compile_glob(self.pattern)
        )

    def match(self, file: str) -> bool:
        if self.literal:
            return file == self.pattern
        return self.regex is not None and self.regex.fullmatch(file) is not None


class LevelSpec:
    """The global verbosity level (-v)."""

    def __init__(self, vs: VState):
        self._vs = vs
        self._level = 0

    def get(self) -> int:
        """Return the current verbosity level."""
        return self._level

    def set(self, value: str) -> None:
        """Parse and apply a verbosity level."""
        level = _parse_int32(value)
        with self._vs._lock:
            self._vs._set(level, self._vs._vmodule._filter, False)

    def type(self) -> str:
        return "Level"

    def __str__(self) -> str:
        return str(self._level)


class ModuleSpec:
    """Per-file verbosity levels (-vmodule), as pattern=N pairs."""

    def __init__(self, vs: VState):
        self._vs = vs
        self._filter: tuple[_ModulePat, ...] = ()

    def get(self) -> tuple[tuple[str, int], ...]:
        """Return the active filter as (pattern, level) pairs, in order."""
        with self._vs._lock:
            return tuple((f.pattern, f.level) for f in self._filter)

    def set(self, value: str) -> None:
        """Parse and apply a comma-separated list of pattern=N entries."""
        filters = []
        for pat in value.split(","):
            if not pat:
                continue
            pieces = pat.split("=")
            if len(pieces) != 2 or not pieces[0] or not pieces[1]:
                raise VerbositySyntaxError(_VMODULE_SYNTAX)
            pattern, level_text = pieces
            try:
                level = _parse_int32(level_text)
            except VerbositySyntaxError:
                raise VerbositySyntaxError(_VMODULE_SYNTAX) from None
            if level < 0:
                raise ValueError("negative value for vmodule level")
            if level == 0:
                continue
            filters.append(_ModulePat(pattern, level))
        with self._vs._lock:
            self._vs._set(self._vs._verbosity._level, tuple(filters), True)

    def type(self) -> str:
        return "pattern=N,..."

    def __str__(self) -> str:
        with self._vs._lock:
            return ",".join(f"{f.pattern}={f.level}" for f in self._filter)


class VState:
    """Verbosity settings with thread-safe checks per call site."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._verbosity = LevelSpec(self)
        self._vmodule = ModuleSpec(self)
        self._vmap: dict = {}
        self._filter_length = 0

    def v(self) -> LevelSpec:
        """Return the -v setting."""
        return self._verbosity

    def vmodule(self) -> ModuleSpec:
        """Return the -vmodule setting."""
        return self._vmodule

    def _set(self, level: int, filters: tuple, set_filter: bool) -> None:
        # Caller holds the lock.
        self._verbosity._level = 0
        self._filter_length = 0
        if set_filter:
            self._vmodule._filter = filters
            self._vmap = {}
        self._filter_length = len(filters)
        self._verbosity._level = level

    def enabled(self, level: int, depth: int = 0) -> bool:
        """Report whether logging at level is enabled for the caller.

        depth=0 refers to the direct caller; higher values skip more frames.
        """
        if self._verbosity._level >= level:
            return True
        if self._filter_length <= 0:
            return False
        with self._lock:
            try:
                frame = sys._getframe(depth + 1)
            except ValueError:
                return False
            key = (frame.f_code, frame.f_lasti)
            v = self._vmap.get(key)
            if v is None:
                v = self._set_v(key, frame.f_code.co_filename)
            return v >= level

    def _set_v(self, key, file: str) -> int:
        # Caller holds the lock.
        if file.endswith(".py"):
            file = file[:-3]
        file = os.path.basename(file.replace("\\", "/").rsplit("/", 1)[-1])
        for pat in self._vmodule._filter:
            if pat.match(file):
                self._vmap[key] = pat.level
                return pat.level
        self._vmap[key] = 0
        return 0