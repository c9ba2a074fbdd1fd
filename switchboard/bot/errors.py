"""
Error reporting helpers for interaction routing and event fan-out.

Purpose
-------
One place that logs a RoutingError and updates dispatch metrics, so the
router and the event dispatcher report failures identically.

Design Decisions
----------------
- **Error isolation**: reporting never raises; one failing handler cannot
  affect the next interaction or event.
- **Severity-driven level**: HandlerNotFoundError logs at warning,
  HandlerExecutionError at error with the original traceback.
"""

from __future__ import annotations

from logging import Logger
from typing import Optional

from switchboard.bot.metrics import DispatchMetricsRecorder
from switchboard.core.exceptions import HandlerExecutionError, HandlerNotFoundError, RoutingError


def report_routing_error(
    *,
    logger: Logger,
    error: RoutingError,
    metrics: Optional[DispatchMetricsRecorder],
) -> None:
    """
    Log a routing failure and update metrics.

    Examples
    --------
    >>> try:
    ...     await descriptor.execute(interaction, client)
    ... except Exception as exc:
    ...     report_routing_error(
    ...         logger=logger,
    ...         error=HandlerExecutionError("button", "confirm", exc),
    ...         metrics=recorder,
    ...     )
    """
    if isinstance(error, HandlerNotFoundError):
        if metrics is not None:
            metrics.record_not_found(error.kind)
        logger.warning(
            error.message,
            extra={"error": error.to_dict()},
        )
        return

    if metrics is not None:
        metrics.record_error(error.kind)

    original = error.original if isinstance(error, HandlerExecutionError) else error
    logger.error(
        "Handler raised during dispatch",
        extra={
            "kind": error.kind,
            "key": error.key,
            "error": str(original),
            "error_type": type(original).__name__,
        },
        exc_info=original,
    )
