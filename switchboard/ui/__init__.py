"""User-facing presentation helpers."""

from switchboard.ui.embeds import EmbedFactory

__all__ = ["EmbedFactory"]
