"""Presentation-adjacent services shared by the bot layer."""

from switchboard.core.services.error_response_service import ErrorResponseService

__all__ = ["ErrorResponseService"]
