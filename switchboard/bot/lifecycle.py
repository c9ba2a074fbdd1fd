"""
Client Lifecycle Management for Switchboard

Purpose
-------
Own the client's initialization state and enforce the preconditions that
depend on it.

Responsibilities
----------------
- Model the two lifecycle states and their single legal transition
- Guard operations that require a completed init (connecting)
- Reject a second init
- Log the init summary with per-kind handler counts and timings

Non-Responsibilities
--------------------
- Loading handlers (handled by ManifestLoader)
- Populating or sealing the registry (handled by SwitchboardClient.init)
- Discord connection management (handled by discord.Client)

Architecture Notes
------------------
- NOT_INITIALIZED -> INITIALIZED is one-way; INITIALIZED is terminal.
- The transition table is explicit so an illegal move is an error rather
  than a silently ignored flag write.
- InitSummary is a dataclass for clear state modeling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from switchboard.core.exceptions import AlreadyInitializedError, LifecycleError, NotInitializedError
from switchboard.core.logging.logger import get_logger

logger = get_logger(__name__)


class LifecycleState(Enum):
    NOT_INITIALIZED = "not_initialized"
    INITIALIZED = "initialized"


_TRANSITIONS: Dict[LifecycleState, FrozenSet[LifecycleState]] = {
    LifecycleState.NOT_INITIALIZED: frozenset({LifecycleState.INITIALIZED}),
    LifecycleState.INITIALIZED: frozenset(),
}


@dataclass
class InitSummary:
    """Metrics collected during one successful init."""

    total_time_ms: float
    handler_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def total_handlers(self) -> int:
        return sum(self.handler_counts.values())


class ClientLifecycle:
    """
    Two-state lifecycle of a Switchboard client.

    >>> lifecycle = ClientLifecycle()
    >>> lifecycle.require_initialized()
    Traceback (most recent call last):
    NotInitializedError: client.init() has not been completed
    >>> lifecycle.mark_initialized()
    >>> lifecycle.is_initialized
    True
    """

    def __init__(self) -> None:
        self._state = LifecycleState.NOT_INITIALIZED
        self.summary: Optional[InitSummary] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is LifecycleState.INITIALIZED

    # ════════════════════════════════════════════════════════════════════════
    # TRANSITIONS
    # ════════════════════════════════════════════════════════════════════════

    def transition(self, target: LifecycleState) -> None:
        """
        Move to ``target``.

        Raises
        ------
        LifecycleError
            If ``target`` is not reachable from the current state.
        """
        if target not in _TRANSITIONS[self._state]:
            raise LifecycleError(
                f"Illegal lifecycle transition {self._state.value} -> {target.value}",
                details={"from": self._state.value, "to": target.value},
            )

        logger.debug(
            "Lifecycle transition",
            extra={"from_state": self._state.value, "to_state": target.value},
        )
        self._state = target

    def require_not_initialized(self) -> None:
        """Raise AlreadyInitializedError unless init may still run."""
        if self.is_initialized:
            raise AlreadyInitializedError()

    def require_initialized(self) -> None:
        """Raise NotInitializedError unless init has completed."""
        if not self.is_initialized:
            raise NotInitializedError()

    def mark_initialized(self, summary: Optional[InitSummary] = None) -> None:
        self.require_not_initialized()
        self.transition(LifecycleState.INITIALIZED)
        if summary is not None:
            self.summary = summary
            self.log_init_summary(summary)

    # ════════════════════════════════════════════════════════════════════════
    # METRICS
    # ════════════════════════════════════════════════════════════════════════

    def log_init_summary(self, summary: InitSummary) -> None:
        logger.info(
            "Client initialization complete",
            extra={
                "total_time_ms": round(summary.total_time_ms, 2),
                "total_handlers": summary.total_handlers,
                "handler_counts": summary.handler_counts,
            },
        )

        if summary.total_handlers == 0:
            logger.warning("No handlers were registered; check the configured directories")
