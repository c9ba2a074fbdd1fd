"""
EventDispatcher: fan gateway events out to registered EventHandlers.

discord.py calls ``Client.dispatch(event, *args)`` for every gateway event.
The client forwards each call here; if an EventHandler is registered under
the same name it is scheduled as its own task and receives
``(client, *args)``.

Failures are logged and contained. ``once`` handlers run for the first
occurrence only.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Optional, Set

from switchboard.bot.errors import report_routing_error
from switchboard.bot.metrics import DispatchMetricsRecorder
from switchboard.core.exceptions import HandlerExecutionError
from switchboard.core.logging.logger import LogContext, get_logger
from switchboard.handlers.registry import HandlerRegistry
from switchboard.handlers.types import EventHandler, HandlerKind

if TYPE_CHECKING:
    from switchboard.bot.client import SwitchboardClient

logger = get_logger(__name__)


class EventDispatcher:
    def __init__(
        self,
        client: "SwitchboardClient",
        registry: HandlerRegistry,
        metrics: Optional[DispatchMetricsRecorder] = None,
    ) -> None:
        self._client = client
        self._registry = registry
        self.metrics = metrics or DispatchMetricsRecorder()
        self._fired_once: Set[str] = set()
        self._tasks: Set["asyncio.Task[None]"] = set()

    def dispatch(self, event: str, *args: Any) -> Optional["asyncio.Task[None]"]:
        """
        Schedule the handler registered for ``event``, if any.

        Must be called from the running event loop. Returns the scheduled task.
        """
        handler = self._registry.get(HandlerKind.EVENT, event)
        if not isinstance(handler, EventHandler):
            return None

        if handler.once:
            if event in self._fired_once:
                return None
            self._fired_once.add(event)

        self.metrics.record_dispatch(HandlerKind.EVENT.value)
        task = asyncio.create_task(
            self._run(event, handler, args),
            name=f"switchboard:event:{event}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, event: str, handler: EventHandler, args: tuple) -> None:
        async with LogContext(handler_kind=HandlerKind.EVENT.value, dispatch_key=event):
            try:
                await handler.execute(self._client, *args)
            except Exception as exc:
                report_routing_error(
                    logger=logger,
                    error=HandlerExecutionError(HandlerKind.EVENT.value, event, exc),
                    metrics=self.metrics,
                )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every scheduled event handler to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
