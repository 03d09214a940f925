"""
Core — Session data for one status line run
"""

from .session import (
    StatuslineInput, SessionMessage, UsageStatistics,
    SessionContext, parse_input, load_session, load_transcript,
    SessionError, TranscriptNotFoundError, TranscriptTimeoutError,
)

__all__ = [
    "StatuslineInput", "SessionMessage", "UsageStatistics",
    "SessionContext", "parse_input", "load_session", "load_transcript",
    "SessionError", "TranscriptNotFoundError", "TranscriptTimeoutError",
]
