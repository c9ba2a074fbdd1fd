"""
Switchboard - Application Entry Point
=====================================

Bootstrap
---------
- Logging setup
- Config validation
- Client construction from static config
- Handler initialization
- Graceful shutdown
"""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import Optional

import discord

from switchboard.bot.client import SwitchboardClient
from switchboard.bot.options import ClientOptions
from switchboard.core.config.config import Config
from switchboard.core.logging.logger import get_logger, setup_logging, shutdown_logging

logger = get_logger(__name__)


# ============================================================================
# Application Bootstrap
# ============================================================================

def _build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.members = True
    return intents


async def _startup() -> SwitchboardClient:
    """Validate configuration and build an initialized client."""
    logger.info("========== SWITCHBOARD STARTUP ==========")

    # Step 1: Validate configuration early
    try:
        Config.validate()
        logger.info("✓ Configuration validated")
    except ValueError as exc:
        logger.critical("Configuration validation failed: %s", exc)
        raise

    # Step 2: Build client
    options = ClientOptions.from_config()
    client = SwitchboardClient(intents=_build_intents(), options=options)
    logger.info("✓ Client constructed", extra={"options": options.to_dict()})

    # Step 3: Load handlers
    await client.init(
        event_path=Config.EVENT_PATH,
        command_path=Config.COMMAND_PATH,
        context_menu_path=Config.CONTEXT_MENU_PATH,
        button_path=Config.BUTTON_PATH,
        select_menu_path=Config.SELECT_MENU_PATH,
        modal_path=Config.MODAL_PATH,
    )
    logger.info("✓ Handlers loaded")

    return client


# ============================================================================
# Application Shutdown
# ============================================================================

async def _shutdown(client: Optional[SwitchboardClient]) -> None:
    logger.info("========== SWITCHBOARD SHUTDOWN ==========")

    if client is not None and not client.is_closed():
        try:
            await client.close()
            logger.info("✓ Client closed")
        except Exception as exc:
            logger.error("Error while closing client: %s", exc, exc_info=True)

    logger.info("========== SHUTDOWN COMPLETE ==========")


# ============================================================================
# Application Entrypoint
# ============================================================================

async def main() -> int:
    """
    Lifecycle:
        1. Validate configuration
        2. Initialize the client and its handlers
        3. Connect
        4. Shut down gracefully

    Returns the process exit code.
    """
    client: Optional[SwitchboardClient] = None
    _install_signal_handlers(asyncio.get_running_loop())

    try:
        client = await _startup()

        logger.info("Connecting to Discord...")
        await client.start(Config.DISCORD_TOKEN)
        return 0

    except asyncio.CancelledError:
        logger.warning("Shutdown requested; closing gracefully.")
        return 0

    except Exception as exc:
        logger.critical("Fatal startup error: %s", exc, exc_info=True)
        return 1

    finally:
        await _shutdown(client)


# ============================================================================
# Process Startup
# ============================================================================

def _install_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel the main task on SIGTERM so shutdown runs in ``finally``."""
    main_task = asyncio.current_task(loop)
    if main_task is None:
        return

    try:
        loop.add_signal_handler(signal.SIGTERM, main_task.cancel)
        logger.debug("SIGTERM handler installed")
    except NotImplementedError:
        logger.debug("SIGTERM not supported on this platform (likely Windows)")


def run() -> None:
    """Console script entry point."""
    setup_logging()
    exit_code = 1

    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Client manually stopped via keyboard interrupt.")
        exit_code = 0
    finally:
        shutdown_logging()

    sys.exit(exit_code)


if __name__ == "__main__":
    run()
