# switchboard/ui/embeds.py
"""
Embed factory for the replies Switchboard sends on behalf of handlers.

Features:
- Consistent colors from Config
- Automatic Discord limits enforcement
- Error embeds with optional help text

Usage:
    >>> from switchboard.ui.embeds import EmbedFactory
    >>> embed = EmbedFactory.error("Unknown Action", "That button is no longer handled.")
"""

import discord
from datetime import datetime, timezone
from typing import Optional

from switchboard.core.config import Config


EMBED_TITLE_LIMIT = 256
EMBED_DESCRIPTION_LIMIT = 4096
EMBED_FOOTER_LIMIT = 2048


def truncate_text(text: str, limit: int, suffix: str = "...") -> str:
    """Truncate text to fit within a Discord limit."""
    if len(text) <= limit:
        return text
    return text[: limit - len(suffix)] + suffix


class EmbedFactory:
    """
    Factory for standardized Discord embeds.

    All embeds automatically include timestamps and enforce Discord limits.
    """

    @staticmethod
    def _base_embed(
        title: str,
        description: str,
        color: int,
        footer: Optional[str] = None
    ) -> discord.Embed:
        """
        Create base embed with automatic limit enforcement.

        Args:
            title: Embed title (max 256 chars)
            description: Embed description (max 4096 chars)
            color: Discord color integer
            footer: Optional footer text (max 2048 chars)
        """
        embed = discord.Embed(
            title=truncate_text(title, EMBED_TITLE_LIMIT),
            description=truncate_text(description, EMBED_DESCRIPTION_LIMIT),
            color=color,
            timestamp=datetime.now(timezone.utc)
        )

        if footer:
            embed.set_footer(text=truncate_text(footer, EMBED_FOOTER_LIMIT))

        return embed

    @staticmethod
    def error(
        title: str,
        description: str,
        help_text: Optional[str] = None
    ) -> discord.Embed:
        """
        Error embeds with optional help text.

        Args:
            title: Error title
            description: Error description
            help_text: Optional helpful suggestion for user
        """
        desc = description
        if help_text:
            desc += f"\n\n**Help:** {help_text}"
        return EmbedFactory._base_embed(title, desc, Config.EMBED_COLOR_ERROR)

    @staticmethod
    def warning(
        title: str,
        description: str,
        footer: Optional[str] = None
    ) -> discord.Embed:
        """For recoverable issues such as an unknown component."""
        return EmbedFactory._base_embed(
            title, description, Config.EMBED_COLOR_WARNING, footer
        )
