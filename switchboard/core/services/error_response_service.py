"""
Error Response Service for Switchboard.

Purpose
-------
Centralized service for turning routing failures into the user-friendly
embeds sent when ``reply_on_error`` is enabled.

Responsibilities
----------------
- Map routing exceptions to title / description / help text
- Provide structured response dicts for EmbedFactory
- Handle fallback for unknown exception types

Non-Responsibilities
--------------------
- Logging (handled by the router)
- Deciding whether to reply at all (gated by ClientOptions.reply_on_error)
- Sending the reply (handled by the router)

Architecture Notes
------------------
- Handlers raise arbitrary exceptions; the router wraps them into
  HandlerExecutionError before they reach this service.
- The original exception text is never shown to the user.
"""

from __future__ import annotations

from typing import Any, Dict

import discord

from switchboard.core.exceptions import (
    ErrorSeverity,
    HandlerExecutionError,
    HandlerNotFoundError,
    SwitchboardError,
)
from switchboard.ui.embeds import EmbedFactory


_NOT_FOUND_TITLES: Dict[str, str] = {
    "chat_command": "Unknown Command",
    "context_menu": "Unknown Command",
    "button": "Unknown Button",
    "select_menu": "Unknown Menu",
    "modal": "Unknown Form",
}


class ErrorResponseService:
    """
    Service for formatting routing exceptions into user-facing replies.

    Keeps a clean separation between what went wrong (exceptions) and how
    to communicate it to users (formatted messages).
    """

    def format_error(self, error: Exception) -> Dict[str, Any]:
        """
        Format an exception into a user-friendly response structure.

        Args:
            error: Exception to format

        Returns:
            Dict containing:
                - title: Short error title
                - description: Detailed error message
                - help_text: Optional helpful guidance
                - severity: ErrorSeverity level for visual styling

        Example:
            >>> service.format_error(HandlerNotFoundError("button", "confirm"))
            {'title': 'Unknown Button', 'description': ..., 'severity': ErrorSeverity.WARNING}
        """
        if isinstance(error, HandlerNotFoundError):
            return {
                "title": _NOT_FOUND_TITLES.get(error.kind, "Unknown Interaction"),
                "description": "This interaction is not handled by the bot.",
                "help_text": "It may have been removed or renamed. Try running the command again.",
                "severity": error.severity,
            }

        if isinstance(error, HandlerExecutionError):
            return {
                "title": "Something Went Wrong",
                "description": "An error occurred while handling this interaction.",
                "help_text": "The issue has been logged. If this persists, contact the bot owner.",
                "severity": error.severity,
            }

        return self._format_fallback_error(error)

    def _format_fallback_error(self, error: Exception) -> Dict[str, Any]:
        """Generic response for exceptions without a dedicated format."""
        if isinstance(error, SwitchboardError):
            severity = error.severity
        else:
            severity = ErrorSeverity.ERROR

        return {
            "title": "Something Went Wrong",
            "description": "An unexpected error occurred.",
            "help_text": "The issue has been logged. If this persists, contact the bot owner.",
            "severity": severity,
        }

    def build_embed(self, error: Exception) -> discord.Embed:
        """Render ``error`` as an embed; warnings get the warning color."""
        response = self.format_error(error)

        if response["severity"] in (ErrorSeverity.WARNING, ErrorSeverity.INFO):
            return EmbedFactory.warning(
                response["title"],
                response["description"],
                footer=response.get("help_text"),
            )

        return EmbedFactory.error(
            response["title"],
            response["description"],
            help_text=response.get("help_text"),
        )
