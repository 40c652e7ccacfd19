"""
Centralized error handling for the application.
"""

import json
from typing import Dict, Any, Optional

from tubechat.config import config
from tubechat.utils.logger import logging


class TubeChatError(Exception):
    """Base class for errors carrying a user-facing message."""

    def __init__(self, message: str, video_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.video_id = video_id


class InvalidInputError(TubeChatError, ValueError):
    """The supplied URL is not a recognizable YouTube video link."""


class VideoUnavailableError(TubeChatError):
    """The video is private, deleted, age-restricted or region-locked."""


class NoCaptionsError(TubeChatError):
    """The video has no caption track to build a transcript from."""


class SessionNotFoundError(TubeChatError, KeyError):
    """A session update was requested for a video that is not cached."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class UpstreamServiceError(TubeChatError):
    """A collaborator (caption source or chat model) failed unexpectedly."""


def user_message(error: Exception) -> str:
    """
    Turn an exception into a message that is safe to show to the user.

    Args:
        error: The exception that occurred

    Returns:
        The error's own message for known errors, a generic one otherwise
    """
    if isinstance(error, TubeChatError):
        return error.message
    return f"Unexpected error: {error}"


def log_diagnostic_info(context: Dict[str, Any]):
    """
    Log diagnostic information for debugging.

    Args:
        context: Dictionary of diagnostic information
    """
    if not config.DEBUG:
        return

    try:
        logging.debug(f"Diagnostic info: {json.dumps(context, default=str)}")
    except (TypeError, ValueError) as e:
        logging.error(f"Error logging diagnostic info: {str(e)}")
