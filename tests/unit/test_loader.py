"""
Unit tests for ManifestLoader.

Covers discovery order, the one-level sub-directory rule, naming contracts
and the missing-directory policy.
"""

import pytest

from switchboard.core.exceptions import InvalidHandlerError, MissingNameError
from switchboard.handlers.loader import ManifestLoader
from switchboard.handlers.types import ButtonCallback, ChatCommand, HandlerKind
from tests.conftest import button_module, chat_command_module, event_module


@pytest.fixture
def loader():
    return ManifestLoader()


@pytest.mark.asyncio
class TestDiscovery:
    """Which files end up in a collection."""

    async def test_loads_every_root_file(self, loader, write_handler, tmp_path):
        """N well-formed root files produce N entries keyed by name."""
        for name in ("confirm", "cancel", "retry"):
            write_handler(f"buttons/{name}.py", button_module(name))

        collection = await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

        assert set(collection) == {"confirm", "cancel", "retry"}
        assert all(isinstance(h, ButtonCallback) for h in collection.values())

    async def test_loads_one_level_of_subdirectories(self, loader, write_handler, tmp_path):
        write_handler("buttons/root.py", button_module("root"))
        write_handler("buttons/admin/ban.py", button_module("ban"))
        write_handler("buttons/admin/deep/nested.py", button_module("nested"))

        collection = await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

        assert set(collection) == {"root", "ban"}

    async def test_ignores_non_python_and_private_files(self, loader, write_handler, tmp_path):
        write_handler("buttons/confirm.py", button_module("confirm"))
        write_handler("buttons/README.md", "not a handler")
        write_handler("buttons/__init__.py", "")
        write_handler("buttons/_helpers.py", "raise RuntimeError('must not be imported')")
        write_handler("buttons/_private/hidden.py", button_module("hidden"))

        collection = await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

        assert list(collection) == ["confirm"]

    async def test_manifest_orders_root_files_before_subdirectories(
        self, loader, write_handler, tmp_path
    ):
        write_handler("buttons/b.py", button_module("b"))
        write_handler("buttons/a.py", button_module("a"))
        write_handler("buttons/group/c.py", button_module("c"))

        manifest = await loader.discover(HandlerKind.BUTTON, tmp_path / "buttons")

        assert [p.name for p in manifest.paths] == ["a.py", "b.py", "c.py"]
        assert [e.group for e in manifest.entries] == [None, None, "group"]

    async def test_chat_command_keyed_by_builder_name(self, loader, write_handler, tmp_path):
        write_handler("commands/whatever.py", chat_command_module("user_info"))

        collection = await loader.load(HandlerKind.CHAT_COMMAND, tmp_path / "commands")

        assert list(collection) == ["user_info"]
        assert isinstance(collection["user_info"], ChatCommand)

    async def test_event_once_flag_preserved(self, loader, write_handler, tmp_path):
        write_handler("events/ready.py", event_module("ready", once=True))

        collection = await loader.load(HandlerKind.EVENT, tmp_path / "events")

        assert collection["ready"].once is True


@pytest.mark.asyncio
class TestCollisions:
    """Same name declared twice within one kind."""

    async def test_later_root_file_wins(self, loader, write_handler, tmp_path):
        write_handler("buttons/a.py", button_module("confirm", marker="a"))
        write_handler("buttons/b.py", button_module("confirm", marker="b"))

        collection = await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

        assert len(collection) == 1
        assert await collection["confirm"].execute(None, None) == "b"

    async def test_subdirectory_file_wins_over_root_file(self, loader, write_handler, tmp_path):
        write_handler("buttons/z.py", button_module("confirm", marker="root"))
        write_handler("buttons/group/a.py", button_module("confirm", marker="group"))

        collection = await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

        assert await collection["confirm"].execute(None, None) == "group"


@pytest.mark.asyncio
class TestMissingDirectories:
    async def test_missing_directory_yields_empty_collection(self, loader, tmp_path):
        collection = await loader.load(HandlerKind.MODAL, tmp_path / "does-not-exist")

        assert collection == {}

    async def test_missing_mandatory_directory_is_not_fatal(self, loader, tmp_path):
        collection = await loader.load(HandlerKind.EVENT, tmp_path / "events")

        assert collection == {}

    async def test_none_path_for_optional_kind(self, loader):
        assert await loader.load(HandlerKind.SELECT_MENU, None) == {}

    async def test_none_path_for_mandatory_kind_raises(self, loader):
        with pytest.raises(ValueError):
            await loader.load(HandlerKind.CHAT_COMMAND, None)


@pytest.mark.asyncio
class TestContractViolations:
    """Fatal errors that abort initialization."""

    async def test_empty_name_raises_missing_name(self, loader, write_handler, tmp_path):
        write_handler("buttons/nameless.py", button_module(""))

        with pytest.raises(MissingNameError) as exc_info:
            await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

        assert exc_info.value.message == "nameless.py is missing a name"

    async def test_missing_name_in_subdirectory_raises(self, loader, write_handler, tmp_path):
        write_handler("commands/group/nameless.py", chat_command_module(""))

        with pytest.raises(MissingNameError):
            await loader.load(HandlerKind.CHAT_COMMAND, tmp_path / "commands")

    async def test_missing_export_raises_invalid_handler(self, loader, write_handler, tmp_path):
        write_handler("buttons/empty.py", "VALUE = 1\n")

        with pytest.raises(InvalidHandlerError):
            await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

    async def test_wrong_kind_raises_invalid_handler(self, loader, write_handler, tmp_path):
        write_handler("modals/confirm.py", button_module("confirm"))

        with pytest.raises(InvalidHandlerError) as exc_info:
            await loader.load(HandlerKind.MODAL, tmp_path / "modals")

        assert "ButtonCallback" in exc_info.value.reason

    async def test_import_error_propagates(self, loader, write_handler, tmp_path):
        write_handler("buttons/broken.py", "raise RuntimeError('boom')\n")

        with pytest.raises(RuntimeError, match="boom"):
            await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

    async def test_file_as_root_is_fatal(self, loader, write_handler, tmp_path):
        path = write_handler("buttons.py", button_module("confirm"))

        with pytest.raises(NotADirectoryError):
            await loader.load(HandlerKind.BUTTON, path)

    async def test_event_name_with_on_prefix_raises(self, loader, write_handler, tmp_path):
        write_handler("events/message.py", event_module("on_message"))

        with pytest.raises(InvalidHandlerError) as exc_info:
            await loader.load(HandlerKind.EVENT, tmp_path / "events")

        assert "'message'" in exc_info.value.reason


SHARED_LABEL_BUTTON = """
    from switchboard.handlers import ButtonCallback
    from ._shared import LABEL

    async def execute(interaction, client):
        return LABEL

    handler = ButtonCallback(name="confirm", execute=execute)
"""


@pytest.mark.asyncio
class TestSiblingImports:
    """Handler modules importing private helpers next to them."""

    async def test_root_module_imports_private_sibling(self, loader, write_handler, tmp_path):
        write_handler("buttons/_shared.py", "LABEL = 'root helper'\n")
        write_handler("buttons/confirm.py", SHARED_LABEL_BUTTON)

        collection = await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

        assert await collection["confirm"].execute(None, None) == "root helper"

    async def test_group_module_imports_group_and_root_helpers(
        self, loader, write_handler, tmp_path
    ):
        write_handler("buttons/_shared.py", "PREFIX = 'admin'\n")
        write_handler("buttons/admin/_perms.py", "ACTION = 'ban'\n")
        write_handler(
            "buttons/admin/ban.py",
            """
            from switchboard.handlers import ButtonCallback
            from .._shared import PREFIX
            from ._perms import ACTION

            async def execute(interaction, client):
                return None

            handler = ButtonCallback(name=f"{PREFIX}-{ACTION}", execute=execute)
            """,
        )

        collection = await loader.load(HandlerKind.BUTTON, tmp_path / "buttons")

        assert list(collection) == ["admin-ban"]

    async def test_helpers_come_from_the_root_being_loaded(
        self, loader, write_handler, tmp_path
    ):
        write_handler("first/buttons/_shared.py", "LABEL = 'first'\n")
        write_handler("first/buttons/confirm.py", SHARED_LABEL_BUTTON)
        write_handler("second/buttons/_shared.py", "LABEL = 'second'\n")
        write_handler("second/buttons/confirm.py", SHARED_LABEL_BUTTON)

        await loader.load(HandlerKind.BUTTON, tmp_path / "first" / "buttons")
        collection = await loader.load(HandlerKind.BUTTON, tmp_path / "second" / "buttons")

        assert await collection["confirm"].execute(None, None) == "second"
