"""
Switchboard: filesystem-registered handlers and interaction routing for
discord.py clients.

    from switchboard import ButtonCallback, ClientOptions, SwitchboardClient
"""

from switchboard.bot import ClientOptions, SwitchboardClient
from switchboard.handlers import (
    ButtonCallback,
    ChatCommand,
    CommandBuilder,
    CommandChoice,
    CommandOption,
    ContextAction,
    ContextMenuBuilder,
    EventHandler,
    HandlerKind,
    ModalCallback,
    SelectMenuCallback,
)

__version__ = "0.1.0"

__all__ = [
    "SwitchboardClient",
    "ClientOptions",
    "HandlerKind",
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
]
