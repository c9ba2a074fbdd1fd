"""
Immutable client options for Switchboard.

Every toggle defaults to off. Options are fixed at construction and never
change for the lifetime of a client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from switchboard.core.config import Config

DEFAULT_SPLIT_DELIMITER = "_"


@dataclass(frozen=True)
class ClientOptions:
    """
    Router and publishing toggles.

    Attributes
    ----------
    receive_message_components:
        Route button and select menu interactions.
    receive_modals:
        Route modal submissions.
    receive_autocomplete:
        Route autocomplete requests to ``ChatCommand.autocomplete``.
    reply_on_error:
        Answer the user with an ephemeral embed when routing fails.
    split_custom_id:
        Route components and modals on the first segment of their custom id.
    split_custom_id_on:
        Delimiter used when splitting. An empty value falls back to ``"_"``.
    use_guild_commands:
        Publish application commands per guild instead of globally.
    """

    receive_message_components: bool = False
    receive_modals: bool = False
    receive_autocomplete: bool = False
    reply_on_error: bool = False
    split_custom_id: bool = False
    split_custom_id_on: str = DEFAULT_SPLIT_DELIMITER
    use_guild_commands: bool = False

    def __post_init__(self) -> None:
        if not self.split_custom_id_on:
            object.__setattr__(self, "split_custom_id_on", DEFAULT_SPLIT_DELIMITER)

    @classmethod
    def from_config(cls) -> "ClientOptions":
        """Build options from the loaded static Config."""
        return cls(
            receive_message_components=Config.RECEIVE_MESSAGE_COMPONENTS,
            receive_modals=Config.RECEIVE_MODALS,
            receive_autocomplete=Config.RECEIVE_AUTOCOMPLETE,
            reply_on_error=Config.REPLY_ON_ERROR,
            split_custom_id=Config.SPLIT_CUSTOM_ID,
            split_custom_id_on=Config.SPLIT_CUSTOM_ID_ON,
            use_guild_commands=Config.USE_GUILD_COMMANDS,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "receive_message_components": self.receive_message_components,
            "receive_modals": self.receive_modals,
            "receive_autocomplete": self.receive_autocomplete,
            "reply_on_error": self.reply_on_error,
            "split_custom_id": self.split_custom_id,
            "split_custom_id_on": self.split_custom_id_on,
            "use_guild_commands": self.use_guild_commands,
        }
