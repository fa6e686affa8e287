# klog

Building blocks for leveled, structured text logs with lines of the form
`I0102 15:04:05.000000    1234 main.py:42] "message" key="value"`.

## Modules

- `klog.severity`: the `Severity` enum (`INFO`, `WARNING`, `ERROR`, `FATAL`).
  `Severity.char()` returns the one-letter code (`I`, `W`, `E`, `F`).
  `by_name(s)` looks up a level without regard to case and raises
  `ValueError` for an unknown name.
- `klog.buffer`: `format_header(s, file, line, now, pid=None)` returns the
  header `Lmmdd hh:mm:ss.uuuuuu pid file:line] `. The pid defaults to the
  current process id, is padded to 7 characters, and a negative line becomes
  0. `sprint_header(s, now)` returns the short form `Lmmdd hh:mm:ss.uuuuuu]`.
  A severity above `FATAL` is shown as `INFO`.
- `klog.serialize`: formats key/value pairs as text.
  - `kv_format(k, v)` returns one pair as `" key=value"`. Strings are quoted.
    A multi-line string becomes an indented block between `=<` and ` >`.
    Objects with `write_text(out)` write their own text. Exceptions and
    objects with their own `__str__` are logged as their string. Objects with
    `marshal_log()` are logged as what it returns. Bytes are quoted with
    non-ASCII escaped. Everything else is written as compact JSON, and
    dataclasses and mappings are supported.
  - `kv_list_format(*args)` formats a whole list. When the list has an odd
    length, the last key gets the value `(MISSING)`.
  - `with_values(old_kv, new_kv)` and `merge_kvs(first, second)` combine
    key/value lists. In `merge_kvs`, keys in the second list win.
  - `merge_and_format_kvs(first, second)` merges the lists and formats the
    result in one step.
  - `Formatter(any_to_string_hook=...)` replaces the JSON fallback with
    your own function.
  - `stringer_to_string`, `marshaler_to_value` and `error_to_string` never
    raise. If the conversion fails they return `<panic: ...>`.
- `klog.formatting`: `format_any(obj)` wraps a value in `FormatAny`.
  `str()` of it gives JSON indented by two spaces with a trailing newline.
  `marshal_log()` gives the value as plain data.
- `klog.references`: `ObjectRef(name, namespace)` prints as
  `namespace/name`, or just `name` when there is no namespace.
  - `kref(namespace, name)` builds one from a namespace and a name.
  - `kobj(obj)` builds one from any object with `get_name()` and
    `get_namespace()` (the `KMetadata` protocol).
  - `kobjs(seq)` converts a list or tuple at once.
  - `kobj_slice(seq)` returns a `KObjSlice`, which does the conversion only
    when the value is logged.
- `klog.verbosity`: `VState` holds the `-v` level (`v()`, a `LevelSpec`)
  and the `-vmodule` per-file overrides (`vmodule()`, a `ModuleSpec` parsed
  from `pattern=N,...`). Patterns are matched against the caller's file
  name without `.py`, with glob syntax. `enabled(level, depth=0)` reports
  whether `level` is on for the calling code. Bad input raises
  `VerbositySyntaxError`. A negative vmodule level raises `ValueError`.
- `klog.clock`: `RealClock` with `now`, `since`, `after`, `new_timer`,
  `after_func`, `tick`, `new_ticker` and `sleep`.
  - Durations are seconds or `timedelta`.
  - `Timer` and `Ticker` deliver times through a `queue.Queue` returned by
    `c()`.
- `klog.dbg`: `stacks(all_threads)` returns the formatted stack of the
  calling thread, or of every thread.

## Example

```python
from datetime import datetime

from klog.buffer import format_header
from klog.references import kref
from klog.serialize import kv_list_format
from klog.severity import Severity
from klog.verbosity import VState

header = format_header(Severity.INFO, "main.py", 42, datetime.now(), pid=1234)
line = header + '"Pod started"' + kv_list_format("pod", kref("default", "web-0"), "attempt", 1)
print(line)
# I.... ....    1234 main.py:42] "Pod started" pod="default/web-0" attempt=1

vs = VState()
vs.v().set("2")
vs.vmodule().set("worker=4")
if vs.enabled(3, 0):
    print("verbose output")
```

## What the package does not do

These are the pieces a logger is made from, not a logger. The package has no
logging calls such as info or error. It does not write to stderr or log files
and does not handle flags or the command line. It provides no command to run.

## Installation and tests

```
pip install .
pip install .[test]
pytest
```