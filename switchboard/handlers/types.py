"""
Handler descriptor types for Switchboard.

Purpose
-------
Define the six handler kinds the runtime understands and the immutable
descriptors that handler modules export.

Module Contract
---------------
Every handler module exports a module-level ``handler`` attribute holding a
descriptor of its directory's kind:

>>> # handlers/buttons/confirm.py
>>> from switchboard.handlers import ButtonCallback
>>>
>>> async def execute(interaction, client):
...     await interaction.response.send_message("Confirmed")
>>>
>>> handler = ButtonCallback(name="confirm", execute=execute)

Canonical Names
---------------
- ChatCommand / ContextAction: ``builder.name`` is authoritative and
  ``name`` is derived from it.
- Every other kind: ``name`` as declared.

Callback Signatures
-------------------
- Interaction handlers: ``async (interaction, client) -> None``
- Autocomplete: ``async (interaction, client) -> None``
- Event handlers: ``async (client, *event_args) -> None``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, ClassVar, Dict, Optional, Tuple, Union

import discord

if TYPE_CHECKING:
    from switchboard.bot.client import SwitchboardClient


InteractionCallback = Callable[[discord.Interaction, "SwitchboardClient"], Awaitable[Any]]
EventCallback = Callable[..., Awaitable[Any]]


class HandlerKind(Enum):
    """The six handler kinds; each has its own registry table and directory root."""

    EVENT = "event"
    CHAT_COMMAND = "chat_command"
    CONTEXT_MENU = "context_menu"
    BUTTON = "button"
    SELECT_MENU = "select_menu"
    MODAL = "modal"

    @property
    def uses_builder(self) -> bool:
        """Whether the canonical name comes from ``builder.name``."""
        return self in (HandlerKind.CHAT_COMMAND, HandlerKind.CONTEXT_MENU)


# ============================================================================
# Application command builders
# ============================================================================


@dataclass(frozen=True)
class CommandChoice:
    name: str
    value: Union[str, int, float]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class CommandOption:
    """A single chat command option."""

    name: str
    description: str
    type: discord.AppCommandOptionType = discord.AppCommandOptionType.string
    required: bool = False
    autocomplete: bool = False
    choices: Tuple[CommandChoice, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.type.value,
            "name": self.name,
            "description": self.description,
            "required": self.required,
        }
        if self.autocomplete:
            payload["autocomplete"] = True
        if self.choices:
            payload["choices"] = [choice.to_dict() for choice in self.choices]
        return payload


@dataclass(frozen=True)
class CommandBuilder:
    """
    Definition of a chat input (slash) command.

    ``to_dict()`` produces the application command payload Discord expects.
    """

    name: str
    description: str
    options: Tuple[CommandOption, ...] = ()
    default_member_permissions: Optional[int] = None
    dm_permission: bool = True
    nsfw: bool = False

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": discord.AppCommandType.chat_input.value,
            "name": self.name,
            "description": self.description,
            "options": [option.to_dict() for option in self.options],
            "dm_permission": self.dm_permission,
            "nsfw": self.nsfw,
        }
        if self.default_member_permissions is not None:
            payload["default_member_permissions"] = str(self.default_member_permissions)
        return payload


@dataclass(frozen=True)
class ContextMenuBuilder:
    """Definition of a user or message context menu command."""

    name: str
    type: discord.AppCommandType = discord.AppCommandType.message
    default_member_permissions: Optional[int] = None
    dm_permission: bool = True

    def __post_init__(self) -> None:
        if self.type is discord.AppCommandType.chat_input:
            raise ValueError("Context menu commands must be of type user or message")

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.type.value,
            "name": self.name,
            "dm_permission": self.dm_permission,
        }
        if self.default_member_permissions is not None:
            payload["default_member_permissions"] = str(self.default_member_permissions)
        return payload


# ============================================================================
# Descriptors
# ============================================================================


class HandlerDescriptor:
    """Common base of all descriptors. ``kind`` is fixed per subclass."""

    kind: ClassVar[HandlerKind]
    name: Optional[str]


@dataclass(frozen=True)
class EventHandler(HandlerDescriptor):
    """
    Gateway event listener.

    ``name`` is the discord.py event name without the ``on_`` prefix
    (``ready``, ``message``, ``member_join``...). ``once`` handlers only run
    for the first occurrence.
    """

    kind: ClassVar[HandlerKind] = HandlerKind.EVENT

    name: str
    execute: EventCallback
    once: bool = False


@dataclass(frozen=True)
class ChatCommand(HandlerDescriptor):
    kind: ClassVar[HandlerKind] = HandlerKind.CHAT_COMMAND

    builder: CommandBuilder
    execute: InteractionCallback
    autocomplete: Optional[InteractionCallback] = None

    @property
    def name(self) -> Optional[str]:
        return getattr(self.builder, "name", None)


@dataclass(frozen=True)
class ContextAction(HandlerDescriptor):
    kind: ClassVar[HandlerKind] = HandlerKind.CONTEXT_MENU

    builder: ContextMenuBuilder
    execute: InteractionCallback

    @property
    def name(self) -> Optional[str]:
        return getattr(self.builder, "name", None)


@dataclass(frozen=True)
class ButtonCallback(HandlerDescriptor):
    kind: ClassVar[HandlerKind] = HandlerKind.BUTTON

    name: str
    execute: InteractionCallback


@dataclass(frozen=True)
class SelectMenuCallback(HandlerDescriptor):
    kind: ClassVar[HandlerKind] = HandlerKind.SELECT_MENU

    name: str
    execute: InteractionCallback


@dataclass(frozen=True)
class ModalCallback(HandlerDescriptor):
    kind: ClassVar[HandlerKind] = HandlerKind.MODAL

    name: str
    execute: InteractionCallback


DESCRIPTOR_TYPES: Dict[HandlerKind, type] = {
    HandlerKind.EVENT: EventHandler,
    HandlerKind.CHAT_COMMAND: ChatCommand,
    HandlerKind.CONTEXT_MENU: ContextAction,
    HandlerKind.BUTTON: ButtonCallback,
    HandlerKind.SELECT_MENU: SelectMenuCallback,
    HandlerKind.MODAL: ModalCallback,
}


def canonical_name(descriptor: HandlerDescriptor) -> Optional[str]:
    """
    Return the lookup key of ``descriptor``, or None when it has none.

    Command-like kinds read ``builder.name``; all others read ``name``.
    """
    if descriptor.kind.uses_builder:
        builder = getattr(descriptor, "builder", None)
        name = getattr(builder, "name", None)
    else:
        name = getattr(descriptor, "name", None)

    if not isinstance(name, str) or not name:
        return None
    return name


__all__ = [
    "HandlerKind",
    "HandlerDescriptor",
    "EventHandler",
    "ChatCommand",
    "ContextAction",
    "ButtonCallback",
    "SelectMenuCallback",
    "ModalCallback",
    "CommandBuilder",
    "CommandOption",
    "CommandChoice",
    "ContextMenuBuilder",
    "DESCRIPTOR_TYPES",
    "InteractionCallback",
    "EventCallback",
    "canonical_name",
]
