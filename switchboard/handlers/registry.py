"""
HandlerRegistry: typed lookup tables for Switchboard handlers.

Purpose
-------
Holds one ``name -> descriptor`` table per handler kind. Populated once by the
client's init from loader collections, then sealed and read-only for the rest
of the process.

Design Decisions
----------------
- **No async/await**: all writes happen on the event loop after the loads
  complete, and reads after sealing need no synchronization.
- **Insert-or-overwrite**: a name already present in a table is replaced by
  the later collection. The overwrite is logged, never raised.
- **No removal**: the registry is append/overwrite-only until sealed.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from switchboard.core.exceptions import RegistrySealedError
from switchboard.core.logging.logger import get_logger
from switchboard.handlers.types import (
    ButtonCallback,
    ChatCommand,
    ContextAction,
    EventHandler,
    HandlerDescriptor,
    HandlerKind,
    ModalCallback,
    SelectMenuCallback,
)

logger = get_logger(__name__)


class HandlerRegistry:
    """
    Six independent handler tables keyed by canonical name.

    Examples
    --------
    >>> registry = HandlerRegistry()
    >>> registry.add_buttons({"confirm": confirm_button})
    >>> registry.get(HandlerKind.BUTTON, "confirm") is confirm_button
    True
    >>> registry.seal()
    >>> registry.add_buttons({})
    Traceback (most recent call last):
    RegistrySealedError: ...
    """

    def __init__(self) -> None:
        self._tables: Dict[HandlerKind, Dict[str, HandlerDescriptor]] = {
            kind: {} for kind in HandlerKind
        }
        self._sealed = False

    # ------------------------------------------------------------------ #
    # Modification
    # ------------------------------------------------------------------ #

    def add(self, kind: HandlerKind, collection: Mapping[str, HandlerDescriptor]) -> int:
        """
        Merge ``collection`` into the table for ``kind``.

        Returns:
            Number of entries that replaced an existing name.

        Raises:
            RegistrySealedError: the registry has been sealed.
        """
        if self._sealed:
            raise RegistrySealedError(kind.value)

        table = self._tables[kind]
        overwritten = 0
        for name, descriptor in collection.items():
            if name in table:
                overwritten += 1
                logger.warning(
                    "Overwriting registered handler",
                    extra={"kind": kind.value, "handler_name": name},
                )
            table[name] = descriptor
        return overwritten

    def add_events(self, collection: Mapping[str, EventHandler]) -> int:
        return self.add(HandlerKind.EVENT, collection)

    def add_chat_commands(self, collection: Mapping[str, ChatCommand]) -> int:
        return self.add(HandlerKind.CHAT_COMMAND, collection)

    def add_context_commands(self, collection: Mapping[str, ContextAction]) -> int:
        return self.add(HandlerKind.CONTEXT_MENU, collection)

    def add_buttons(self, collection: Mapping[str, ButtonCallback]) -> int:
        return self.add(HandlerKind.BUTTON, collection)

    def add_select_menus(self, collection: Mapping[str, SelectMenuCallback]) -> int:
        return self.add(HandlerKind.SELECT_MENU, collection)

    def add_modals(self, collection: Mapping[str, ModalCallback]) -> int:
        return self.add(HandlerKind.MODAL, collection)

    def seal(self) -> None:
        """Make the registry read-only for the rest of the process."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def get(self, kind: HandlerKind, name: Optional[str]) -> Optional[HandlerDescriptor]:
        if name is None:
            return None
        return self._tables[kind].get(name)

    def table(self, kind: HandlerKind) -> Mapping[str, HandlerDescriptor]:
        """Read-only view of one table."""
        return MappingProxyType(self._tables[kind])

    def size(self, kind: HandlerKind) -> int:
        return len(self._tables[kind])

    @property
    def events(self) -> Mapping[str, EventHandler]:
        return self.table(HandlerKind.EVENT)  # type: ignore[return-value]

    @property
    def chat_commands(self) -> Mapping[str, ChatCommand]:
        return self.table(HandlerKind.CHAT_COMMAND)  # type: ignore[return-value]

    @property
    def context_commands(self) -> Mapping[str, ContextAction]:
        return self.table(HandlerKind.CONTEXT_MENU)  # type: ignore[return-value]

    @property
    def buttons(self) -> Mapping[str, ButtonCallback]:
        return self.table(HandlerKind.BUTTON)  # type: ignore[return-value]

    @property
    def select_menus(self) -> Mapping[str, SelectMenuCallback]:
        return self.table(HandlerKind.SELECT_MENU)  # type: ignore[return-value]

    @property
    def modals(self) -> Mapping[str, ModalCallback]:
        return self.table(HandlerKind.MODAL)  # type: ignore[return-value]

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def counts(self) -> Dict[str, int]:
        return {kind.value: len(table) for kind, table in self._tables.items()}

    def application_commands(self) -> List[Dict[str, Any]]:
        """Application command payloads for every chat command and context action."""
        payload = [command.builder.to_dict() for command in self.chat_commands.values()]
        payload.extend(action.builder.to_dict() for action in self.context_commands.values())
        return payload

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())
