"""
Exceptions for the Switchboard dispatch runtime.

Purpose
-------
Define the structured exception hierarchy for handler loading, lifecycle
preconditions and interaction routing.

Design Notes
------------
- All exceptions inherit from ``SwitchboardError``.
- Each exception carries:
  - ``message``: human-readable description
  - ``details``: additional structured context (dict)
  - ``severity``: ``ErrorSeverity`` value for logging decisions
  - ``error_code``: short, stable identifier for programmatic use
- Initialization errors (missing names, invalid modules, I/O) are fatal and
  abort ``init()``. Routing errors are contained per interaction.

Exception Hierarchy
-------------------
SwitchboardError
├── HandlerLoadError
│   ├── MissingNameError
│   ├── InvalidHandlerError
│   └── DirectoryNotFoundError
├── LifecycleError
│   ├── NotInitializedError
│   ├── AlreadyInitializedError
│   └── MissingCredentialError
├── RegistrySealedError
└── RoutingError
    ├── HandlerNotFoundError
    └── HandlerExecutionError
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class ErrorSeverity(Enum):
    """Error severity levels for logging decisions."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class SwitchboardError(Exception):
    """
    Base exception for all Switchboard errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        error_code: Optional code for programmatic handling

    Example:
        >>> raise SwitchboardError("Something broke", {"path": "handlers/"})
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
        }

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}"
            ")"
        )


# ============================================================================
# Handler loading
# ============================================================================


class HandlerLoadError(SwitchboardError):
    """Base class for failures while discovering or importing handler modules."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL


class MissingNameError(HandlerLoadError):
    """
    Raised when a handler module's descriptor has no derivable name.

    Command-like kinds take their name from ``builder.name``; every other
    kind from ``name``.
    """

    def __init__(self, path: Union[str, Path], kind: str) -> None:
        self.path = Path(path)
        self.kind = kind
        super().__init__(
            f"{self.path.name} is missing a name",
            details={"path": str(self.path), "kind": kind},
        )


class InvalidHandlerError(HandlerLoadError):
    """Raised when a module does not export a descriptor of its directory's kind."""

    def __init__(self, path: Union[str, Path], kind: str, reason: str) -> None:
        self.path = Path(path)
        self.kind = kind
        self.reason = reason
        super().__init__(
            f"{self.path.name} is not a valid {kind} handler: {reason}",
            details={"path": str(self.path), "kind": kind, "reason": reason},
        )


class DirectoryNotFoundError(HandlerLoadError):
    """
    An optional handler root does not exist.

    Recovered by the loader: logged and treated as zero handlers.
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING

    def __init__(self, path: Union[str, Path], kind: str) -> None:
        self.path = Path(path)
        self.kind = kind
        super().__init__(
            f"Directory not found at {self.path}",
            details={"path": str(self.path), "kind": kind},
        )


# ============================================================================
# Lifecycle
# ============================================================================


class LifecycleError(SwitchboardError):
    """Raised on an illegal lifecycle transition."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)


class NotInitializedError(LifecycleError):
    """Raised when connecting before ``init()`` has completed."""

    def __init__(self) -> None:
        super().__init__("client.init() has not been completed")


class AlreadyInitializedError(LifecycleError):
    """Raised when ``init()`` is invoked on an initialized client."""

    def __init__(self) -> None:
        super().__init__("client.init() has already been completed")


class MissingCredentialError(LifecycleError):
    """Raised when connecting without a token."""

    def __init__(self) -> None:
        super().__init__("Missing token")


# ============================================================================
# Registry
# ============================================================================


class RegistrySealedError(SwitchboardError):
    """Raised when the registry is written to after initialization."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(
            f"Registry is sealed; cannot add {kind} handlers after initialization",
            details={"kind": kind},
        )


# ============================================================================
# Routing
# ============================================================================


class RoutingError(SwitchboardError):
    """Base class for per-interaction routing failures. Never crashes the client."""

    def __init__(
        self,
        message: str,
        kind: str,
        key: Optional[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.kind = kind
        self.key = key
        super().__init__(message, details={"kind": kind, "key": key, **(details or {})})


class HandlerNotFoundError(RoutingError):
    """No registered handler matches the dispatch key."""

    DEFAULT_SEVERITY = ErrorSeverity.WARNING

    def __init__(self, kind: str, key: Optional[str]) -> None:
        super().__init__(f"No {kind} handler registered for '{key}'", kind, key)


class HandlerExecutionError(RoutingError):
    """A handler raised while processing an interaction."""

    def __init__(self, kind: str, key: Optional[str], original: BaseException) -> None:
        self.original = original
        super().__init__(
            f"{kind} handler '{key}' raised {type(original).__name__}: {original}",
            kind,
            key,
            details={"original_type": type(original).__name__},
        )


__all__ = [
    "ErrorSeverity",
    "SwitchboardError",
    "HandlerLoadError",
    "MissingNameError",
    "InvalidHandlerError",
    "DirectoryNotFoundError",
    "LifecycleError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "MissingCredentialError",
    "RegistrySealedError",
    "RoutingError",
    "HandlerNotFoundError",
    "HandlerExecutionError",
]
