"""
Discord integration layer for Switchboard.

Purpose
-------
Expose the client and the runtime pieces it is assembled from:

- Main client implementation (SwitchboardClient)
- Immutable toggles (ClientOptions)
- Lifecycle state machine (ClientLifecycle, LifecycleState, InitSummary)
- Interaction routing (InteractionRouter, RouteKind) and event fan-out
  (EventDispatcher)

Non-Responsibilities
--------------------
- Contain any runtime logic or side effects

Example
-------
    from switchboard.bot import ClientOptions, SwitchboardClient

    client = SwitchboardClient(intents=intents, options=ClientOptions(receive_modals=True))
    await client.init("handlers/events", "handlers/commands", modal_path="handlers/modals")
    await client.start(token)
"""

from __future__ import annotations

from switchboard.bot.client import SwitchboardClient
from switchboard.bot.events import EventDispatcher
from switchboard.bot.lifecycle import ClientLifecycle, InitSummary, LifecycleState
from switchboard.bot.metrics import DispatchMetrics, DispatchMetricsRecorder
from switchboard.bot.options import ClientOptions
from switchboard.bot.router import InteractionRouter, RouteKind, classify, split_custom_id

__all__ = [
    # Client
    "SwitchboardClient",
    "ClientOptions",
    # Lifecycle
    "ClientLifecycle",
    "LifecycleState",
    "InitSummary",
    # Dispatch
    "InteractionRouter",
    "RouteKind",
    "classify",
    "split_custom_id",
    "EventDispatcher",
    "DispatchMetrics",
    "DispatchMetricsRecorder",
]
