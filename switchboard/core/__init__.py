"""
Core infrastructure layer for Switchboard.

Purpose
-------
Provide a single import surface for the infrastructure subsystems:

- Configuration (Config, Environment)
- Logging (structured logging, logger factory, LogContext)
- Exceptions (SwitchboardError hierarchy)

Non-Responsibilities
--------------------
- Handler discovery or routing (see switchboard.handlers / switchboard.bot)
- Any side effects beyond simple re-exports
"""

from switchboard.core.config import Config, Environment
from switchboard.core.exceptions import ErrorSeverity, SwitchboardError
from switchboard.core.logging import LogContext, get_logger, setup_logging, shutdown_logging

__all__ = [
    "Config",
    "Environment",
    "ErrorSeverity",
    "SwitchboardError",
    "LogContext",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
