"""
Switchboard Discord Client

Purpose
-------
A ``discord.Client`` that discovers its handlers from the filesystem, keeps
them in a sealed registry and routes every interaction and gateway event to
them.

Responsibilities
----------------
- Initialization: load the six handler directories concurrently, populate
  and seal the registry, flip the lifecycle to INITIALIZED
- Guard connecting: no login before init, no login without a token
- Route interactions through InteractionRouter
- Fan gateway events out through EventDispatcher
- Publish application commands on the first ready

Non-Responsibilities
--------------------
- Discovering and validating handler modules (handled by ManifestLoader)
- Classification and lookup of interactions (handled by InteractionRouter)
- Process bootstrap, logging setup and signals (handled by main)

Architecture Notes
------------------
- Handlers receive the client explicitly as an argument; nothing is
  attached to discord.py objects.
- Options are immutable for the lifetime of the client.
- Lifecycle state lives in ClientLifecycle, not in a bare flag.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

import discord

from switchboard.bot.events import EventDispatcher
from switchboard.bot.lifecycle import ClientLifecycle, InitSummary
from switchboard.bot.metrics import DispatchMetricsRecorder
from switchboard.bot.options import ClientOptions
from switchboard.bot.router import InteractionRouter
from switchboard.core.exceptions import LifecycleError, MissingCredentialError
from switchboard.core.logging.logger import get_logger
from switchboard.handlers.loader import ManifestLoader, PathLike
from switchboard.handlers.registry import HandlerRegistry
from switchboard.handlers.types import HandlerKind

logger = get_logger(__name__)


class SwitchboardClient(discord.Client):
    """
    Discord client with filesystem-registered handlers.

    >>> client = SwitchboardClient(intents=discord.Intents.default())
    >>> await client.init("handlers/events", "handlers/commands", button_path="handlers/buttons")
    >>> await client.start(token)
    """

    def __init__(
        self,
        *,
        intents: discord.Intents,
        options: Optional[ClientOptions] = None,
        loader: Optional[ManifestLoader] = None,
        **kwargs: Any,
    ) -> None:
        """
        Args:
            intents: Gateway intents, passed to discord.Client
            options: Router and publishing toggles (all off by default)
            loader: Handler module loader
            **kwargs: Forwarded to discord.Client
        """
        super().__init__(intents=intents, **kwargs)

        self.options = options or ClientOptions()
        self.registry = HandlerRegistry()
        self.lifecycle = ClientLifecycle()
        self.dispatch_metrics = DispatchMetricsRecorder()

        self._loader = loader or ManifestLoader()
        self._init_in_progress = False
        self._commands_published = False

        self.router = InteractionRouter(
            self, self.registry, self.options, metrics=self.dispatch_metrics
        )
        self.events = EventDispatcher(self, self.registry, metrics=self.dispatch_metrics)

        logger.debug("SwitchboardClient created", extra={"options": self.options.to_dict()})

    # --------------------------------------------------------------- #
    # Initialization
    # --------------------------------------------------------------- #

    @property
    def is_initialized(self) -> bool:
        return self.lifecycle.is_initialized

    async def init(
        self,
        event_path: PathLike,
        command_path: PathLike,
        context_menu_path: Optional[PathLike] = None,
        button_path: Optional[PathLike] = None,
        select_menu_path: Optional[PathLike] = None,
        modal_path: Optional[PathLike] = None,
    ) -> "SwitchboardClient":
        """
        Load every handler directory and seal the registry.

        The six loads run concurrently. If any of them fails the remaining
        loads are cancelled, the error propagates, nothing is registered and
        the client stays uninitialized.

        Raises:
            AlreadyInitializedError: init already completed.
            LifecycleError: another init is still running.
            MissingNameError / InvalidHandlerError / OSError: a load failed.
        """
        self.lifecycle.require_not_initialized()
        if self._init_in_progress:
            raise LifecycleError("client.init() is already running")

        self._init_in_progress = True
        start_time = time.perf_counter()
        logger.info("=" * 60)
        logger.info("SWITCHBOARD INIT")
        logger.info("=" * 60)

        roots: Dict[HandlerKind, Optional[PathLike]] = {
            HandlerKind.EVENT: event_path,
            HandlerKind.CHAT_COMMAND: command_path,
            HandlerKind.CONTEXT_MENU: context_menu_path,
            HandlerKind.BUTTON: button_path,
            HandlerKind.SELECT_MENU: select_menu_path,
            HandlerKind.MODAL: modal_path,
        }

        loads = [
            asyncio.create_task(
                self._loader.load(kind, root), name=f"switchboard:load:{kind.value}"
            )
            for kind, root in roots.items()
        ]
        try:
            collections = await asyncio.gather(*loads)
        except Exception as exc:
            # Sibling loads must not keep importing modules after init has failed
            for task in loads:
                task.cancel()
            await asyncio.gather(*loads, return_exceptions=True)
            logger.critical(
                "Client initialization failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            raise
        finally:
            self._init_in_progress = False

        self.registry.add_events(collections[0])
        self.registry.add_chat_commands(collections[1])
        self.registry.add_context_commands(collections[2])
        self.registry.add_buttons(collections[3])
        self.registry.add_select_menus(collections[4])
        self.registry.add_modals(collections[5])
        self.registry.seal()

        self.lifecycle.mark_initialized(
            InitSummary(
                total_time_ms=(time.perf_counter() - start_time) * 1000,
                handler_counts=self.registry.counts(),
            )
        )
        return self

    # --------------------------------------------------------------- #
    # Connection
    # --------------------------------------------------------------- #

    async def login(self, token: str) -> None:
        """
        Log in with ``token``; ``start`` and ``run`` go through here too.

        Raises:
            NotInitializedError: init has not completed.
            MissingCredentialError: ``token`` is empty or None.
        """
        self.lifecycle.require_initialized()
        if not token:
            raise MissingCredentialError()

        await super().login(token)

    # --------------------------------------------------------------- #
    # Discord Events
    # --------------------------------------------------------------- #

    def dispatch(self, event_name: str, /, *args: Any, **kwargs: Any) -> None:
        super().dispatch(event_name, *args, **kwargs)
        if self.lifecycle.is_initialized:
            self.events.dispatch(event_name, *args)

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        await self.router.route(interaction)

    async def on_ready(self) -> None:
        logger.info("=" * 60)
        logger.info("Client is ONLINE as %s", self.user)
        logger.info("Guilds: %d", len(self.guilds))
        logger.info("=" * 60)

        if not self._commands_published:
            self._commands_published = True
            await self.publish_commands()

    # --------------------------------------------------------------- #
    # Application Commands
    # --------------------------------------------------------------- #

    async def publish_commands(self) -> int:
        """
        Bulk-overwrite application commands with the registered ones.

        Publishes per guild when ``use_guild_commands`` is on, globally
        otherwise. Failures are logged, not raised.

        Returns:
            Number of successful bulk upserts.
        """
        payload = self.registry.application_commands()
        if not payload:
            logger.debug("No application commands to publish")
            return 0

        application_id = self.application_id
        if application_id is None:
            logger.warning("Cannot publish commands before the application id is known")
            return 0

        published = 0
        if self.options.use_guild_commands:
            for guild in self.guilds:
                try:
                    await self.http.bulk_upsert_guild_commands(application_id, guild.id, payload)
                    published += 1
                except discord.HTTPException as exc:
                    logger.error(
                        "Failed to publish guild commands",
                        extra={
                            "target_guild_id": guild.id,
                            "error": str(exc),
                            "error_type": type(exc).__name__,
                        },
                    )
        else:
            try:
                await self.http.bulk_upsert_global_commands(application_id, payload)
                published += 1
            except discord.HTTPException as exc:
                logger.error(
                    "Failed to publish global commands",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                )

        logger.info(
            "Application commands published",
            extra={
                "commands": len(payload),
                "scope": "guild" if self.options.use_guild_commands else "global",
                "targets": published,
            },
        )
        return published

    # --------------------------------------------------------------- #
    # Shutdown
    # --------------------------------------------------------------- #

    async def close(self) -> None:
        logger.info("=" * 60)
        logger.info("SWITCHBOARD SHUTDOWN")
        logger.info("=" * 60)

        summary = self.dispatch_metrics.snapshot().get_summary()
        logger.info("Final dispatch statistics", extra={"dispatch": summary})

        await super().close()
        await self.events.drain()

        logger.info("Client shutdown complete")
