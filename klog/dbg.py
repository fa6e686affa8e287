"""Helpers for call traces."""

from __future__ import annotations

import sys
import threading
import traceback


def _format_thread(ident: int, frame) -> str:
    names = {t.ident: t.name for t in threading.enumerate()}
    name = names.get(ident, "unknown")
    header = f"thread {ident} [{name}]:\n"
    return header + "".join(traceback.format_stack(frame))


def stacks(all_threads: bool) -> str:
    """Return the stack trace of the calling thread, or of all threads."""
    current = threading.get_ident()
    caller = sys._getframe(1)
    if not all_threads:
        return _format_thread(current, caller)
    frames = sys._current_frames()
    frames[current] = caller
    parts = [_format_thread(current, caller)]
    parts.extend(
        _format_thread(ident, frame)
        for ident, frame in frames.items()
        if ident != current
    )
    return "\n".join(parts)