"""
Unit tests for EventDispatcher.
"""

import pytest

from switchboard.bot.events import EventDispatcher
from switchboard.handlers.types import EventHandler


@pytest.fixture
def make_dispatcher(registry, mock_client):
    def _make():
        return EventDispatcher(mock_client, registry)

    return _make


@pytest.mark.asyncio
class TestEventDispatcher:
    async def test_handler_receives_client_and_event_args(
        self, mocker, registry, make_dispatcher, mock_client
    ):
        execute = mocker.AsyncMock()
        registry.add_events({"member_join": EventHandler(name="member_join", execute=execute)})
        dispatcher = make_dispatcher()
        member = mocker.MagicMock()

        task = dispatcher.dispatch("member_join", member)
        await task

        execute.assert_awaited_once_with(mock_client, member)

    async def test_unregistered_event_is_ignored(self, make_dispatcher):
        assert make_dispatcher().dispatch("message", object()) is None

    async def test_once_handler_runs_for_first_occurrence_only(
        self, mocker, registry, make_dispatcher
    ):
        execute = mocker.AsyncMock()
        registry.add_events({"ready": EventHandler(name="ready", execute=execute, once=True)})
        dispatcher = make_dispatcher()

        dispatcher.dispatch("ready")
        assert dispatcher.dispatch("ready") is None
        await dispatcher.drain()

        execute.assert_awaited_once()

    async def test_repeating_handler_runs_every_time(self, mocker, registry, make_dispatcher):
        execute = mocker.AsyncMock()
        registry.add_events({"message": EventHandler(name="message", execute=execute)})
        dispatcher = make_dispatcher()

        for _ in range(3):
            dispatcher.dispatch("message", mocker.MagicMock())
        await dispatcher.drain()

        assert execute.await_count == 3
        assert dispatcher.pending == 0

    async def test_failing_handler_is_contained(self, mocker, registry, make_dispatcher):
        registry.add_events(
            {
                "message": EventHandler(
                    name="message", execute=mocker.AsyncMock(side_effect=RuntimeError("boom"))
                )
            }
        )
        dispatcher = make_dispatcher()

        await dispatcher.dispatch("message", mocker.MagicMock())

        assert dispatcher.metrics.snapshot().errors == {"event": 1}
