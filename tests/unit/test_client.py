"""
Unit tests for SwitchboardClient.

Covers the init/login preconditions, registry population, event fan-out,
interaction routing and application command publishing.
"""

import asyncio

import discord
import pytest

from switchboard.bot.options import ClientOptions
from switchboard.core.exceptions import (
    AlreadyInitializedError,
    InvalidHandlerError,
    MissingCredentialError,
    NotInitializedError,
    RegistrySealedError,
)
from switchboard.handlers.types import (
    ButtonCallback,
    ChatCommand,
    CommandBuilder,
    EventHandler,
    HandlerKind,
)
from tests.conftest import event_module


async def _noop(*args):
    return None


async def _init(client):
    return await client.init("handlers/events", "handlers/commands")


@pytest.fixture
def patched_login(mocker):
    return mocker.patch.object(discord.Client, "login", new_callable=mocker.AsyncMock)


@pytest.mark.asyncio
class TestLoginGuard:
    async def test_login_before_init_raises(self, make_client, patched_login):
        client = make_client()

        with pytest.raises(NotInitializedError):
            await client.login("token")

        patched_login.assert_not_awaited()

    async def test_start_before_init_raises(self, make_client, patched_login):
        client = make_client()

        with pytest.raises(NotInitializedError):
            await client.start("token")

    @pytest.mark.parametrize("token", ["", None])
    async def test_login_without_token_raises(self, make_client, patched_login, token):
        client = await _init(make_client())

        with pytest.raises(MissingCredentialError):
            await client.login(token)

        patched_login.assert_not_awaited()

    async def test_login_after_init_delegates(self, make_client, patched_login):
        client = await _init(make_client())

        await client.login("token")

        patched_login.assert_awaited_once_with("token")


@pytest.mark.asyncio
class TestInit:
    async def test_init_populates_and_seals_registry(self, make_client, stub_loader):
        stub_loader.collections[HandlerKind.BUTTON] = {
            "confirm": ButtonCallback(name="confirm", execute=_noop)
        }
        stub_loader.collections[HandlerKind.EVENT] = {
            "ready": EventHandler(name="ready", execute=_noop)
        }
        client = make_client()

        result = await client.init("events", "commands", button_path="buttons")

        assert result is client
        assert client.is_initialized is True
        assert client.registry.size(HandlerKind.BUTTON) == 1
        assert client.registry.size(HandlerKind.EVENT) == 1
        assert client.lifecycle.summary.total_handlers == 2
        with pytest.raises(RegistrySealedError):
            client.registry.add_buttons({})

    async def test_init_loads_all_six_kinds(self, make_client, stub_loader):
        await make_client().init("e", "c", "ctx", "b", "s", "m")

        loaded = {call.args[0]: call.args[1] for call in stub_loader.load.await_args_list}
        assert loaded == {
            HandlerKind.EVENT: "e",
            HandlerKind.CHAT_COMMAND: "c",
            HandlerKind.CONTEXT_MENU: "ctx",
            HandlerKind.BUTTON: "b",
            HandlerKind.SELECT_MENU: "s",
            HandlerKind.MODAL: "m",
        }

    async def test_second_init_raises(self, make_client):
        client = await _init(make_client())

        with pytest.raises(AlreadyInitializedError):
            await _init(client)

    async def test_failed_load_leaves_client_uninitialized(
        self, make_client, stub_loader, patched_login
    ):
        async def _fail(kind, root):
            if kind is HandlerKind.MODAL:
                raise InvalidHandlerError("modals/broken.py", "modal", "boom")
            return {"confirm": ButtonCallback(name="confirm", execute=_noop)}

        stub_loader.load.side_effect = _fail
        client = make_client()

        with pytest.raises(InvalidHandlerError):
            await client.init("e", "c", modal_path="m")

        assert client.is_initialized is False
        assert len(client.registry) == 0
        with pytest.raises(NotInitializedError):
            await client.login("token")

    async def test_failed_load_cancels_sibling_loads(self, make_client, stub_loader):
        finished = []
        blocker = asyncio.Event()

        async def _load(kind, root):
            if kind is HandlerKind.MODAL:
                raise InvalidHandlerError("modals/broken.py", "modal", "boom")
            await blocker.wait()
            finished.append(kind)
            return {}

        stub_loader.load.side_effect = _load
        client = make_client()

        with pytest.raises(InvalidHandlerError):
            await client.init("e", "c", modal_path="m")

        blocker.set()
        await asyncio.sleep(0)

        assert finished == []
        assert client.is_initialized is False

    async def test_init_from_real_directories(self, tmp_path, write_handler):
        """End to end with the real ManifestLoader and a missing optional root."""
        from switchboard.bot.client import SwitchboardClient

        write_handler("events/ready.py", event_module("ready", once=True))
        client = SwitchboardClient(intents=discord.Intents.none())

        await client.init(
            tmp_path / "events",
            tmp_path / "commands",
            button_path=tmp_path / "buttons",
        )

        assert client.is_initialized is True
        assert list(client.registry.events) == ["ready"]
        assert client.registry.size(HandlerKind.CHAT_COMMAND) == 0


@pytest.mark.asyncio
class TestDispatch:
    async def test_gateway_events_reach_event_handlers(
        self, mocker, make_client, stub_loader
    ):
        execute = mocker.AsyncMock()
        stub_loader.collections[HandlerKind.EVENT] = {
            "custom_ping": EventHandler(name="custom_ping", execute=execute)
        }
        client = await _init(make_client())

        client.dispatch("custom_ping", 42)
        await client.events.drain()

        execute.assert_awaited_once_with(client, 42)

    async def test_on_interaction_routes_with_client(
        self, mocker, make_client, stub_loader, button_interaction
    ):
        execute = mocker.AsyncMock()
        stub_loader.collections[HandlerKind.BUTTON] = {
            "confirm": ButtonCallback(name="confirm", execute=execute)
        }
        client = await _init(
            make_client(ClientOptions(receive_message_components=True, split_custom_id=True))
        )
        interaction = button_interaction("confirm_42")

        await client.on_interaction(interaction)

        execute.assert_awaited_once_with(interaction, client)


@pytest.mark.asyncio
class TestPublishCommands:
    @pytest.fixture
    def command_loader(self, stub_loader):
        stub_loader.collections[HandlerKind.CHAT_COMMAND] = {
            "ping": ChatCommand(
                builder=CommandBuilder(name="ping", description="Ping"), execute=_noop
            )
        }
        return stub_loader

    async def test_publishes_globally_by_default(self, mocker, make_client, command_loader):
        client = await _init(make_client(application_id=1234))
        upsert = mocker.patch.object(
            client.http, "bulk_upsert_global_commands", new_callable=mocker.AsyncMock
        )

        published = await client.publish_commands()

        assert published == 1
        upsert.assert_awaited_once()
        application_id, payload = upsert.await_args.args
        assert application_id == 1234
        assert [entry["name"] for entry in payload] == ["ping"]

    async def test_publishes_per_guild_when_enabled(self, mocker, make_client, command_loader):
        client = await _init(
            make_client(ClientOptions(use_guild_commands=True), application_id=1234)
        )
        guilds = [mocker.MagicMock(id=1), mocker.MagicMock(id=2)]
        mocker.patch.object(
            type(client), "guilds", new_callable=mocker.PropertyMock, return_value=guilds
        )
        upsert = mocker.patch.object(
            client.http, "bulk_upsert_guild_commands", new_callable=mocker.AsyncMock
        )

        published = await client.publish_commands()

        assert published == 2
        assert [call.args[1] for call in upsert.await_args_list] == [1, 2]

    async def test_publish_failure_is_logged_not_raised(
        self, mocker, make_client, command_loader
    ):
        client = await _init(make_client(application_id=1234))
        response = mocker.MagicMock(status=403, reason="Forbidden")
        mocker.patch.object(
            client.http,
            "bulk_upsert_global_commands",
            new_callable=mocker.AsyncMock,
            side_effect=discord.Forbidden(response, "missing access"),
        )

        assert await client.publish_commands() == 0

    async def test_nothing_to_publish(self, mocker, make_client):
        client = await _init(make_client(application_id=1234))
        upsert = mocker.patch.object(
            client.http, "bulk_upsert_global_commands", new_callable=mocker.AsyncMock
        )

        assert await client.publish_commands() == 0
        upsert.assert_not_awaited()
