"""
Handler Manifest Loader for Switchboard

Purpose
-------
Discover handler modules under a directory root, import them, validate their
exported descriptor and return an ordered ``name -> descriptor`` collection.

Responsibilities
----------------
- Build a manifest of ``*.py`` files in a root directory, then in each of its
  immediate sub-directories (one level, never recursive)
- Import each module from its file path and read its ``handler`` export
- Validate the export: descriptor of the directory's kind with a canonical name
- Expose the root and each sub-directory as a package so handler modules can
  import private siblings (``_shared.py``) relatively
- Treat a missing root directory as zero handlers (logged, not raised)
- Log a per-kind loading summary with timings

Non-Responsibilities
--------------------
- Merging collections into the registry (handled by HandlerRegistry)
- Running loads concurrently (handled by the client's init)

Ordering
--------
Root files sorted by name, then each sub-directory (sorted by name) with its
files sorted by name. A name declared twice within one kind resolves to the
file that comes later in this order.

Error Policy
------------
- Root directory absent: DirectoryNotFoundError logged, empty collection
- Missing export / wrong kind: InvalidHandlerError (fatal)
- Event name carrying discord.py's ``on_`` prefix: InvalidHandlerError (fatal)
- Missing name: MissingNameError (fatal), for root and sub-directory files alike
- Any other I/O or import error: propagated unchanged (fatal)
"""

from __future__ import annotations

import asyncio
import importlib.machinery
import importlib.util
import os
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Dict, List, Optional, Union

from switchboard.core.exceptions import (
    DirectoryNotFoundError,
    InvalidHandlerError,
    MissingNameError,
)
from switchboard.core.logging.logger import get_logger
from switchboard.handlers.types import (
    DESCRIPTOR_TYPES,
    HandlerDescriptor,
    HandlerKind,
    canonical_name,
)

logger = get_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class ManifestEntry:
    """One discovered handler module."""

    path: Path
    group: Optional[str] = None  # sub-directory name, None for root files


@dataclass
class HandlerManifest:
    """Ordered list of handler modules discovered under one root."""

    kind: HandlerKind
    root: Optional[Path]
    entries: List[ManifestEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def paths(self) -> List[Path]:
        return [entry.path for entry in self.entries]


class ManifestLoader:
    """
    Loads handler modules of one kind from a directory root.

    >>> loader = ManifestLoader()
    >>> buttons = await loader.load(HandlerKind.BUTTON, "handlers/buttons")
    >>> buttons["confirm"]
    ButtonCallback(name='confirm', execute=<function execute ...>)
    """

    MODULE_SUFFIX: str = ".py"
    EXPORT_NAME: str = "handler"
    PACKAGE_ROOT: str = "switchboard_handlers"
    OPTIONAL_KINDS = frozenset(
        {
            HandlerKind.CONTEXT_MENU,
            HandlerKind.BUTTON,
            HandlerKind.SELECT_MENU,
            HandlerKind.MODAL,
        }
    )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def load(
        self,
        kind: HandlerKind,
        root: Optional[PathLike],
    ) -> Dict[str, HandlerDescriptor]:
        """
        Discover, import and validate every handler module under ``root``.

        Returns:
            Collection keyed by canonical name, in scan order.

        Raises:
            ValueError: ``root`` is None for a mandatory kind.
            MissingNameError / InvalidHandlerError: a module breaks its contract.
            OSError / ImportError: any failure other than an absent root.
        """
        if root is None:
            if kind in self.OPTIONAL_KINDS:
                logger.debug("No directory configured", extra={"kind": kind.value})
                return {}
            raise ValueError(f"A directory path is required for {kind.value} handlers")

        start_time = time.perf_counter()

        try:
            manifest = await self.discover(kind, root)
        except DirectoryNotFoundError as exc:
            logger.warning(exc.message, extra={"error": exc.to_dict()})
            return {}

        self._register_package(self._package_name(kind), manifest.root)

        collection: Dict[str, HandlerDescriptor] = {}
        for entry in manifest.entries:
            name, descriptor = self._load_entry(kind, entry)
            if name in collection:
                logger.warning(
                    "Handler name collision; later file wins",
                    extra={"kind": kind.value, "handler_name": name, "path": str(entry.path)},
                )
            collection[name] = descriptor

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Loaded %d %s handlers",
            len(collection),
            kind.value,
            extra={
                "kind": kind.value,
                "path": str(manifest.root),
                "files": len(manifest),
                "duration_ms": round(duration_ms, 2),
            },
        )
        return collection

    async def discover(self, kind: HandlerKind, root: PathLike) -> HandlerManifest:
        """
        Build the manifest for ``root`` without importing anything.

        Directory listing runs in a worker thread so the event loop stays free.
        """
        root_path = Path(root)
        entries = await asyncio.to_thread(self._scan, kind, root_path)
        return HandlerManifest(kind=kind, root=root_path, entries=entries)

    # ------------------------------------------------------------------ #
    # Discovery
    # ------------------------------------------------------------------ #

    def _scan(self, kind: HandlerKind, root: Path) -> List[ManifestEntry]:
        try:
            with os.scandir(root) as it:
                dirents = sorted(it, key=lambda d: d.name)
        except FileNotFoundError as exc:
            raise DirectoryNotFoundError(root, kind.value) from exc

        entries = [
            ManifestEntry(path=Path(d.path))
            for d in dirents
            if self._is_module_file(d)
        ]

        for directory in dirents:
            if not directory.is_dir() or self._is_hidden(directory.name):
                continue
            with os.scandir(directory.path) as it:
                sub_files = sorted(
                    (d for d in it if self._is_module_file(d)),
                    key=lambda d: d.name,
                )
            entries.extend(
                ManifestEntry(path=Path(d.path), group=directory.name) for d in sub_files
            )

        return entries

    def _is_module_file(self, dirent: os.DirEntry) -> bool:
        return (
            dirent.is_file()
            and dirent.name.endswith(self.MODULE_SUFFIX)
            and not self._is_hidden(dirent.name)
        )

    @staticmethod
    def _is_hidden(name: str) -> bool:
        # __init__.py, __pycache__, .git and friends
        return name.startswith(("_", "."))

    # ------------------------------------------------------------------ #
    # Import & validation
    # ------------------------------------------------------------------ #

    def _load_entry(
        self,
        kind: HandlerKind,
        entry: ManifestEntry,
    ) -> tuple[str, HandlerDescriptor]:
        module = self._import_module(kind, entry)

        if not hasattr(module, self.EXPORT_NAME):
            raise InvalidHandlerError(
                entry.path,
                kind.value,
                f"module does not export '{self.EXPORT_NAME}'",
            )

        descriptor = getattr(module, self.EXPORT_NAME)
        expected = DESCRIPTOR_TYPES[kind]
        if not isinstance(descriptor, expected):
            raise InvalidHandlerError(
                entry.path,
                kind.value,
                f"expected {expected.__name__}, got {type(descriptor).__name__}",
            )

        name = canonical_name(descriptor)
        if name is None:
            raise MissingNameError(entry.path, kind.value)

        # discord.py dispatches "message", never "on_message"
        if kind is HandlerKind.EVENT and name.startswith("on_"):
            raise InvalidHandlerError(
                entry.path,
                kind.value,
                f"event names omit the 'on_' prefix, use '{name[3:]}'",
            )

        logger.debug(
            "Handler module loaded",
            extra={
                "kind": kind.value,
                "handler_name": name,
                "path": str(entry.path),
                "group": entry.group,
            },
        )
        return name, descriptor

    def _import_module(self, kind: HandlerKind, entry: ManifestEntry) -> ModuleType:
        if entry.group:
            self._register_package(self._package_name(kind, entry.group), entry.path.parent)

        module_name = self._module_name(kind, entry)
        spec = importlib.util.spec_from_file_location(module_name, entry.path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot import handler module at {entry.path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module

    def _register_package(self, name: str, location: Path) -> None:
        """
        Expose ``location`` as the namespace package ``name``.

        Handler modules import their siblings relatively through it, e.g.
        ``from ._shared import LABEL`` or ``from .._shared import LABEL`` in a
        sub-directory. Pointing the package at a new location drops the
        sub-modules cached from the previous one.
        """
        existing = sys.modules.get(name)
        if existing is not None and list(getattr(existing, "__path__", [])) == [str(location)]:
            return

        for cached in [m for m in sys.modules if m.startswith(name + ".")]:
            del sys.modules[cached]

        parent_name, _, child_name = name.rpartition(".")
        if parent_name not in sys.modules:
            sys.modules[parent_name] = self._new_package(parent_name, [])

        package = self._new_package(name, [str(location)])
        sys.modules[name] = package
        setattr(sys.modules[parent_name], child_name, package)

    @staticmethod
    def _new_package(name: str, search_locations: List[str]) -> ModuleType:
        spec = importlib.machinery.ModuleSpec(name, None, is_package=True)
        spec.submodule_search_locations = search_locations
        return importlib.util.module_from_spec(spec)

    @classmethod
    def _package_name(cls, kind: HandlerKind, group: Optional[str] = None) -> str:
        parts = [cls.PACKAGE_ROOT, kind.value]
        if group:
            parts.append(group)
        return ".".join(parts)

    @classmethod
    def _module_name(cls, kind: HandlerKind, entry: ManifestEntry) -> str:
        return f"{cls._package_name(kind, entry.group)}.{entry.path.stem}"
