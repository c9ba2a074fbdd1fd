"""
InteractionRouter: classify an inbound interaction and run its handler.

Purpose
-------
Resolve every Discord interaction to at most one registered handler and
invoke it with the interaction and the client.

Routing Steps
-------------
1. Classify the interaction into a RouteKind (unsupported kinds are ignored).
2. Gate: components need ``receive_message_components``, modals need
   ``receive_modals``, autocomplete needs ``receive_autocomplete``. Gated-off
   interactions are dropped with no lookup and no error.
3. Compute the dispatch key: the command name for commands and autocomplete,
   the custom id for components and modals (its first segment when
   ``split_custom_id`` is on).
4. Look the key up in the matching registry table.
5. Invoke the handler. Failures are reported, optionally answered, and never
   propagated to discord.py.

Design Decisions
----------------
- **Stateless between interactions**: apart from metrics, nothing is shared
  across routes, so concurrent interactions need no locking.
- **Replies are best-effort**: a failed error reply is logged and dropped.
- **No reply for autocomplete**: Discord only accepts choices there.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

import discord

from switchboard.bot.errors import report_routing_error
from switchboard.bot.metrics import DispatchMetricsRecorder
from switchboard.bot.options import ClientOptions
from switchboard.core.exceptions import HandlerExecutionError, HandlerNotFoundError, RoutingError
from switchboard.core.logging.logger import LogContext, get_logger
from switchboard.core.services.error_response_service import ErrorResponseService
from switchboard.handlers.registry import HandlerRegistry
from switchboard.handlers.types import ChatCommand, HandlerDescriptor, HandlerKind, InteractionCallback

if TYPE_CHECKING:
    from switchboard.bot.client import SwitchboardClient

logger = get_logger(__name__)


# Discord application command types (interaction.data["type"])
_CHAT_INPUT = 1
_USER_CONTEXT = 2
_MESSAGE_CONTEXT = 3

# Discord component types (interaction.data["component_type"])
_BUTTON = 2
_SELECT_TYPES = frozenset({3, 5, 6, 7, 8})


class RouteKind(Enum):
    CHAT_COMMAND = "chat_command"
    CONTEXT_MENU = "context_menu"
    AUTOCOMPLETE = "autocomplete"
    BUTTON = "button"
    SELECT_MENU = "select_menu"
    MODAL = "modal"
    UNSUPPORTED = "unsupported"

    @property
    def handler_kind(self) -> Optional[HandlerKind]:
        """Registry table this route looks up; autocomplete shares the chat table."""
        return _ROUTE_TABLES.get(self)

    @property
    def uses_custom_id(self) -> bool:
        return self in (RouteKind.BUTTON, RouteKind.SELECT_MENU, RouteKind.MODAL)


_ROUTE_TABLES: Dict[RouteKind, HandlerKind] = {
    RouteKind.CHAT_COMMAND: HandlerKind.CHAT_COMMAND,
    RouteKind.CONTEXT_MENU: HandlerKind.CONTEXT_MENU,
    RouteKind.AUTOCOMPLETE: HandlerKind.CHAT_COMMAND,
    RouteKind.BUTTON: HandlerKind.BUTTON,
    RouteKind.SELECT_MENU: HandlerKind.SELECT_MENU,
    RouteKind.MODAL: HandlerKind.MODAL,
}


def classify(interaction: discord.Interaction) -> RouteKind:
    """Map an interaction onto the route it should take."""
    data: Dict[str, Any] = interaction.data or {}
    interaction_type = interaction.type

    if interaction_type is discord.InteractionType.application_command:
        command_type = data.get("type", _CHAT_INPUT)
        if command_type == _CHAT_INPUT:
            return RouteKind.CHAT_COMMAND
        if command_type in (_USER_CONTEXT, _MESSAGE_CONTEXT):
            return RouteKind.CONTEXT_MENU
        return RouteKind.UNSUPPORTED

    if interaction_type is discord.InteractionType.autocomplete:
        return RouteKind.AUTOCOMPLETE

    if interaction_type is discord.InteractionType.component:
        component_type = data.get("component_type")
        if component_type == _BUTTON:
            return RouteKind.BUTTON
        if component_type in _SELECT_TYPES:
            return RouteKind.SELECT_MENU
        return RouteKind.UNSUPPORTED

    if interaction_type is discord.InteractionType.modal_submit:
        return RouteKind.MODAL

    return RouteKind.UNSUPPORTED


def split_custom_id(custom_id: str, delimiter: str) -> str:
    """
    First segment of ``custom_id``; the whole id when the delimiter is absent.

    >>> split_custom_id("confirm_42", "_")
    'confirm'
    >>> split_custom_id("confirm", "_")
    'confirm'
    """
    return custom_id.split(delimiter, 1)[0]


class InteractionRouter:
    """
    Routes interactions to handlers held by a sealed HandlerRegistry.

    >>> router = InteractionRouter(client, registry, ClientOptions(receive_message_components=True))
    >>> await router.route(interaction)
    """

    def __init__(
        self,
        client: "SwitchboardClient",
        registry: HandlerRegistry,
        options: ClientOptions,
        error_responses: Optional[ErrorResponseService] = None,
        metrics: Optional[DispatchMetricsRecorder] = None,
    ) -> None:
        self._client = client
        self._registry = registry
        self._options = options
        self._error_responses = error_responses or ErrorResponseService()
        self.metrics = metrics or DispatchMetricsRecorder()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def route(self, interaction: discord.Interaction) -> None:
        """Route one interaction. Never raises for handler failures."""
        route = classify(interaction)

        if route is RouteKind.UNSUPPORTED:
            self.metrics.record_ignored("unsupported")
            logger.debug(
                "Ignoring unsupported interaction",
                extra={"interaction_type": str(interaction.type)},
            )
            return

        if not self.is_enabled(route):
            self.metrics.record_ignored(f"{route.value}_disabled")
            return

        key = self.dispatch_key(route, interaction)

        async with LogContext(
            user_id=getattr(interaction.user, "id", None),
            guild_id=interaction.guild_id,
            interaction_id=interaction.id,
            handler_kind=route.value,
            dispatch_key=key,
        ):
            await self._dispatch(route, key, interaction)

    def is_enabled(self, route: RouteKind) -> bool:
        """Whether the options allow ``route`` to be handled at all."""
        if route in (RouteKind.BUTTON, RouteKind.SELECT_MENU):
            return self._options.receive_message_components
        if route is RouteKind.MODAL:
            return self._options.receive_modals
        if route is RouteKind.AUTOCOMPLETE:
            return self._options.receive_autocomplete
        return route is not RouteKind.UNSUPPORTED

    def dispatch_key(self, route: RouteKind, interaction: discord.Interaction) -> Optional[str]:
        """
        Lookup key for ``interaction``.

        Command names are never split; custom ids are split only when
        ``split_custom_id`` is enabled.
        """
        data: Dict[str, Any] = interaction.data or {}

        if not route.uses_custom_id:
            return data.get("name")

        custom_id = data.get("custom_id")
        if custom_id is None:
            return None
        if self._options.split_custom_id:
            return split_custom_id(custom_id, self._options.split_custom_id_on)
        return custom_id

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    async def _dispatch(
        self,
        route: RouteKind,
        key: Optional[str],
        interaction: discord.Interaction,
    ) -> None:
        table_kind = route.handler_kind
        if table_kind is None:
            self.metrics.record_ignored(route.value)
            logger.debug("No handler table for route", extra={"route": route.value})
            return

        descriptor = self._registry.get(table_kind, key)
        callback = self._resolve_callback(route, descriptor)

        if callback is None:
            await self._handle_error(route, interaction, HandlerNotFoundError(route.value, key))
            return

        self.metrics.record_dispatch(route.value)
        start_time = time.perf_counter()

        try:
            await callback(interaction, self._client)
        except Exception as exc:
            await self._handle_error(
                route,
                interaction,
                HandlerExecutionError(route.value, key, exc),
            )
            return

        logger.debug(
            "Interaction handled",
            extra={"duration_ms": round((time.perf_counter() - start_time) * 1000, 2)},
        )

    @staticmethod
    def _resolve_callback(
        route: RouteKind,
        descriptor: Optional[HandlerDescriptor],
    ) -> Optional[InteractionCallback]:
        if descriptor is None:
            return None
        if route is RouteKind.AUTOCOMPLETE:
            if not isinstance(descriptor, ChatCommand):
                return None
            return descriptor.autocomplete
        return descriptor.execute  # type: ignore[attr-defined]

    # ------------------------------------------------------------------ #
    # Error handling
    # ------------------------------------------------------------------ #

    async def _handle_error(
        self,
        route: RouteKind,
        interaction: discord.Interaction,
        error: RoutingError,
    ) -> None:
        report_routing_error(logger=logger, error=error, metrics=self.metrics)

        if route is RouteKind.AUTOCOMPLETE or not self._options.reply_on_error:
            return

        await self._reply_with_error(interaction, error)

    async def _reply_with_error(self, interaction: discord.Interaction, error: RoutingError) -> None:
        embed = self._error_responses.build_embed(error)

        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException as exc:
            logger.warning(
                "Failed to send error reply",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
