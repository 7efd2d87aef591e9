"""Tracing of context switches, probes and option access.

Set ``OPTSCOPE_TRACE=1`` to record. Each finished span, and each point, becomes
one JSON line in ``OPTSCOPE_TRACE_PATH`` (``/tmp/optscope-trace.jsonl`` unless
set). ``OPTSCOPE_TRACE_RESET=1`` empties the file when this module is imported.

Spans opened inside another span carry its id as ``parent_id``, so a single
``options.get`` with a filetype shows up as::

    options.get
      probe.filetype
        context.switch

Note
----
This is an internal API not covered by versioning policy.
"""

from __future__ import annotations

import contextlib
import contextvars
import dataclasses
import itertools
import json
import os
import pathlib
import time
import typing as t

TRACE_PATH = os.getenv("OPTSCOPE_TRACE_PATH", "/tmp/optscope-trace.jsonl")

#: Keys every event writes itself. Caller fields may not shadow them.
RESERVED_FIELDS = frozenset(
    {"event", "span_id", "parent_id", "depth", "duration_ns", "error", "point"},
)


def _env_flag(name: str) -> bool:
    """Return whether environment variable *name* holds a truthy flag.

    >>> import os
    >>> os.environ["OPTSCOPE_DOCTEST_FLAG"] = "no"
    >>> _env_flag("OPTSCOPE_DOCTEST_FLAG")
    False
    >>> os.environ["OPTSCOPE_DOCTEST_FLAG"] = "1"
    >>> _env_flag("OPTSCOPE_DOCTEST_FLAG")
    True
    >>> del os.environ["OPTSCOPE_DOCTEST_FLAG"]
    """
    return os.getenv(name, "").lower() not in {"", "0", "false", "no", "off"}


TRACE_ENABLED = _env_flag("OPTSCOPE_TRACE")
TRACE_RESET = _env_flag("OPTSCOPE_TRACE_RESET")

#: Ids of the spans open in the current context, innermost last.
_open_spans: contextvars.ContextVar[tuple[int, ...]] = contextvars.ContextVar(
    "optscope_open_spans",
    default=(),
)
_span_ids = itertools.count(1)


def reset_trace(path: str | None = None) -> None:
    """Empty the trace file."""
    if TRACE_ENABLED:
        pathlib.Path(path or TRACE_PATH).write_text("", encoding="utf-8")


def _record(event: str, fields: dict[str, t.Any], **meta: t.Any) -> None:
    clashing = RESERVED_FIELDS.intersection(fields)
    if clashing:
        msg = f"trace fields shadow reserved keys: {sorted(clashing)}"
        raise ValueError(msg)
    line = {"event": event, **meta, **fields, "pid": os.getpid()}
    with pathlib.Path(TRACE_PATH).open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(line, default=str) + "\n")


@contextlib.contextmanager
def span(event: str, /, **fields: t.Any) -> t.Iterator[None]:
    """Time the block and record it as *event*, nested under open spans.

    *fields* are stored alongside the timing, e.g. ``option="shiftwidth"``.
    An exception leaving the block is recorded by type name and re-raised.
    """
    if not TRACE_ENABLED:
        yield
        return

    outer = _open_spans.get()
    span_id = next(_span_ids)
    token = _open_spans.set((*outer, span_id))
    meta: dict[str, t.Any] = {
        "span_id": span_id,
        "parent_id": outer[-1] if outer else None,
        "depth": len(outer),
    }
    started = time.perf_counter_ns()
    try:
        yield
    except BaseException as e:
        meta["error"] = type(e).__name__
        raise
    finally:
        _open_spans.reset(token)
        meta["duration_ns"] = time.perf_counter_ns() - started
        _record(event, fields, **meta)


def point(event: str, /, **fields: t.Any) -> None:
    """Record an instant *event*, attached to the innermost open span."""
    if not TRACE_ENABLED:
        return
    outer = _open_spans.get()
    _record(event, fields, point=True, parent_id=outer[-1] if outer else None)


@dataclasses.dataclass
class SpanStats:
    """Aggregated timings for one event name."""

    count: int = 0
    errors: int = 0
    total_ns: int = 0
    max_ns: int = 0

    @property
    def avg_ns(self) -> int:
        return self.total_ns // max(self.count, 1)

    def add(self, duration_ns: int, failed: bool) -> None:
        self.count += 1
        self.errors += failed
        self.total_ns += duration_ns
        self.max_ns = max(self.max_ns, duration_ns)


def collect(path: str | None = None) -> dict[str, SpanStats]:
    """Aggregate the spans in the trace file by event name.

    Points and lines that are not valid JSON are skipped.
    """
    target = pathlib.Path(path or TRACE_PATH)
    stats: dict[str, SpanStats] = {}
    if not target.exists():
        return stats
    for raw in target.read_text(encoding="utf-8").splitlines():
        if not raw.strip():
            continue
        try:
            event = json.loads(raw)
        except json.JSONDecodeError:
            continue
        if event.get("point"):
            continue
        stats.setdefault(str(event.get("event", "unknown")), SpanStats()).add(
            int(event.get("duration_ns", 0)),
            "error" in event,
        )
    return stats


def summarize(path: str | None = None, limit: int = 20) -> str:
    """Summarize collected spans by total time, slowest first."""
    if not pathlib.Path(path or TRACE_PATH).exists():
        return "optscope trace: no data collected"
    stats = collect(path)
    if not stats:
        return "optscope trace: no span data collected"

    ranked = sorted(stats.items(), key=lambda item: item[1].total_ns, reverse=True)
    lines = ["optscope trace summary (ns):"]
    lines.extend(
        f"- {event}: count={s.count} errors={s.errors} "
        f"total={s.total_ns} avg={s.avg_ns} max={s.max_ns}"
        for event, s in ranked[:limit]
    )
    return "\n".join(lines)


if TRACE_ENABLED and TRACE_RESET:
    reset_trace()
