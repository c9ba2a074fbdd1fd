"""
Handler definitions, discovery and registry.

Handler modules import their descriptor types from here:

    from switchboard.handlers import ButtonCallback, ChatCommand, CommandBuilder
"""

from switchboard.handlers.loader import HandlerManifest, ManifestEntry, ManifestLoader
from switchboard.handlers.registry import HandlerRegistry
from switchboard.handlers.types import (
    ButtonCallback,
    ChatCommand,
    CommandBuilder,
    CommandChoice,
    CommandOption,
    ContextAction,
    ContextMenuBuilder,
    EventHandler,
    HandlerDescriptor,
    HandlerKind,
    ModalCallback,
    SelectMenuCallback,
    canonical_name,
)

__all__ = [
    # Descriptors
    "HandlerKind",
    "HandlerDescriptor",
    "EventHandler",
    "ChatCommand",
    "ContextAction",
    "ButtonCallback",
    "SelectMenuCallback",
    "ModalCallback",
    # Builders
    "CommandBuilder",
    "CommandOption",
    "CommandChoice",
    "ContextMenuBuilder",
    "canonical_name",
    # Loading & registry
    "ManifestLoader",
    "HandlerManifest",
    "ManifestEntry",
    "HandlerRegistry",
]
