"""
Pytest Configuration and Fixtures for Switchboard Tests
=======================================================

Purpose
-------
Centralized fixtures for the Switchboard test suite: handler files on disk,
Discord interaction mocks and pre-wired clients.

Responsibilities
----------------
- Write handler modules into a temporary directory tree
- Build mocked ``discord.Interaction`` objects for routing tests
- Build SwitchboardClient instances backed by a stub loader

Non-Responsibilities
--------------------
- Test implementation (delegated to test files)
- Network access (nothing here talks to Discord)

Architecture Notes
------------------
- Unit tests use mocks (fast, isolated)
- Async tests use pytest-asyncio markers
"""

from __future__ import annotations

import os
import textwrap
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import discord
import pytest

from switchboard.bot.client import SwitchboardClient
from switchboard.bot.options import ClientOptions
from switchboard.handlers.registry import HandlerRegistry


# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Configure pytest environment."""
    os.environ["ENVIRONMENT"] = "testing"
    os.environ["LOG_LEVEL"] = "DEBUG"


# ============================================================================
# HANDLER FILES
# ============================================================================


@pytest.fixture
def write_handler(tmp_path: Path) -> Callable[[str, str], Path]:
    """
    Write a handler module relative to ``tmp_path``.

    >>> write_handler("buttons/confirm.py", BUTTON_TEMPLATE.format(name="confirm"))
    """

    def _write(relative_path: str, source: str) -> Path:
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


def button_module(name: str, marker: str = "") -> str:
    """Source of a button handler module; ``marker`` identifies the file."""
    return f'''
        from switchboard.handlers import ButtonCallback

        MARKER = {marker!r}

        async def execute(interaction, client):
            return MARKER

        handler = ButtonCallback(name={name!r}, execute=execute)
    '''


def chat_command_module(name: str, description: str = "Test command") -> str:
    return f'''
        from switchboard.handlers import ChatCommand, CommandBuilder

        async def execute(interaction, client):
            return None

        handler = ChatCommand(
            builder=CommandBuilder(name={name!r}, description={description!r}),
            execute=execute,
        )
    '''


def event_module(name: str, once: bool = False) -> str:
    return f'''
        from switchboard.handlers import EventHandler

        async def execute(client, *args):
            return None

        handler = EventHandler(name={name!r}, execute=execute, once={once!r})
    '''


# ============================================================================
# DISCORD MOCKS
# ============================================================================


@pytest.fixture
def make_interaction(mocker) -> Callable[..., Any]:
    """
    Factory for mocked interactions.

    >>> interaction = make_interaction(discord.InteractionType.component,
    ...                                {"component_type": 2, "custom_id": "confirm_42"})
    """

    def _make(
        interaction_type: discord.InteractionType,
        data: Optional[Dict[str, Any]] = None,
        *,
        response_done: bool = False,
    ) -> Any:
        interaction = mocker.MagicMock()
        interaction.type = interaction_type
        interaction.data = data
        interaction.id = 1111
        interaction.guild_id = 2222
        interaction.user.id = 3333

        interaction.response.is_done = mocker.MagicMock(return_value=response_done)
        interaction.response.send_message = mocker.AsyncMock()
        interaction.followup.send = mocker.AsyncMock()
        return interaction

    return _make


@pytest.fixture
def button_interaction(make_interaction) -> Callable[[str], Any]:
    def _make(custom_id: str, **kwargs: Any) -> Any:
        return make_interaction(
            discord.InteractionType.component,
            {"component_type": 2, "custom_id": custom_id},
            **kwargs,
        )

    return _make


@pytest.fixture
def command_interaction(make_interaction) -> Callable[[str], Any]:
    def _make(name: str, **kwargs: Any) -> Any:
        return make_interaction(
            discord.InteractionType.application_command,
            {"type": 1, "name": name},
            **kwargs,
        )

    return _make


# ============================================================================
# CLIENT / REGISTRY
# ============================================================================


@pytest.fixture
def registry() -> HandlerRegistry:
    return HandlerRegistry()


@pytest.fixture
def mock_client(mocker):
    """Stand-in for the client passed to handlers by the router."""
    return mocker.MagicMock(name="client")


@pytest.fixture
def stub_loader(mocker):
    """
    Loader returning preset collections per kind.

    Tests fill ``stub_loader.collections[HandlerKind.X]`` before calling init.
    """
    loader = mocker.MagicMock()
    loader.collections = {}

    async def _load(kind, root):
        return dict(loader.collections.get(kind, {}))

    loader.load = mocker.AsyncMock(side_effect=_load)
    return loader


@pytest.fixture
def make_client(stub_loader) -> Callable[..., SwitchboardClient]:
    def _make(options: Optional[ClientOptions] = None, **kwargs: Any) -> SwitchboardClient:
        return SwitchboardClient(
            intents=discord.Intents.none(),
            options=options,
            loader=stub_loader,
            **kwargs,
        )

    return _make
