"""
DispatchMetrics and DispatchMetricsRecorder for Switchboard.

Purpose
-------
Counters for interaction routing and gateway event fan-out, so operators can
see what was handled, ignored, unmatched or failing.

Design Decisions
----------------
- **Immutable snapshots**: DispatchMetrics is frozen; mutations go through
  the recorder.
- **Defaultdict usage**: counting by handler kind without key checks.
- **Single event loop**: the recorder is not thread-safe and does not need
  to be.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DispatchMetrics:
    """
    Immutable snapshot of dispatch counters, keyed by handler kind.

    >>> metrics = DispatchMetrics(dispatched={"button": 10}, errors={"button": 1})
    >>> metrics.get_summary()["error_rate"]
    10.0
    """

    dispatched: dict[str, int] = field(default_factory=dict)
    not_found: dict[str, int] = field(default_factory=dict)
    errors: dict[str, int] = field(default_factory=dict)
    ignored: dict[str, int] = field(default_factory=dict)

    def get_summary(self) -> dict[str, Any]:
        total_dispatched = sum(self.dispatched.values())
        total_errors = sum(self.errors.values())
        error_rate = (total_errors / max(1, total_dispatched)) * 100.0

        return {
            "total_dispatched": total_dispatched,
            "dispatched_by_kind": dict(self.dispatched),
            "total_not_found": sum(self.not_found.values()),
            "not_found_by_kind": dict(self.not_found),
            "total_errors": total_errors,
            "errors_by_kind": dict(self.errors),
            "ignored": dict(self.ignored),
            "error_rate": round(error_rate, 2),
        }


class DispatchMetricsRecorder:
    """
    Mutable recorder; ``snapshot()`` produces a DispatchMetrics.

    >>> recorder = DispatchMetricsRecorder()
    >>> recorder.record_dispatch("button")
    >>> recorder.record_error("button")
    >>> recorder.snapshot().errors["button"]
    1
    """

    def __init__(self) -> None:
        self._dispatched: defaultdict[str, int] = defaultdict(int)
        self._not_found: defaultdict[str, int] = defaultdict(int)
        self._errors: defaultdict[str, int] = defaultdict(int)
        self._ignored: defaultdict[str, int] = defaultdict(int)

    def record_dispatch(self, kind: str) -> None:
        """A handler was found and invoked."""
        self._dispatched[kind] += 1

    def record_not_found(self, kind: str) -> None:
        self._not_found[kind] += 1

    def record_error(self, kind: str) -> None:
        """A handler raised."""
        self._errors[kind] += 1

    def record_ignored(self, reason: str) -> None:
        """An interaction was dropped before lookup (unsupported or gated off)."""
        self._ignored[reason] += 1

    def snapshot(self) -> DispatchMetrics:
        return DispatchMetrics(
            dispatched=dict(self._dispatched),
            not_found=dict(self._not_found),
            errors=dict(self._errors),
            ignored=dict(self._ignored),
        )
