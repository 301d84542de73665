"""
Exception hierarchy for speak-mcp.

Every per-call failure is one of these types. The tool boundary converts
them into MCP error responses tagged with ``kind``, so a calling agent can
tell an offline engine from bad arguments from a failed playback.
"""

from __future__ import annotations

from typing import Any


class SpeakError(Exception):
    """Base exception for all speak-mcp errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary of additional error context
    """

    kind = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> str:
        """Render the error as the text payload of a failed tool call."""
        return f"[{self.kind}] {self.message}"


class DiscoveryUnavailable(SpeakError):
    """An engine's speaker catalog could not be fetched.

    Never fatal: the catalog fetcher turns it into "no catalog" and the
    schema degrades to its permissive form.
    """

    kind = "discovery_unavailable"


class ArgumentError(SpeakError):
    """A tool call carried missing or malformed arguments."""

    kind = "invalid_arguments"


class TransportError(SpeakError):
    """Network failure, non-2xx status or malformed document from an engine.

    Attributes:
        status_code: HTTP status returned by the engine, if any
    """

    kind = "engine_unreachable"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class PlaybackError(SpeakError):
    """The audio player or native speech command failed.

    Attributes:
        returncode: Exit status of the command, or None if it never launched
    """

    kind = "playback_failed"

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.returncode = returncode


class ConfigIOError(SpeakError):
    """The config file could not be written."""

    kind = "config_io"


__all__ = [
    "SpeakError",
    "DiscoveryUnavailable",
    "ArgumentError",
    "TransportError",
    "PlaybackError",
    "ConfigIOError",
]
