"""User-facing errors for devtracker.

The CLI prints the message and exits with status 1; MCP tools return it as
{"error": message}.
"""

from __future__ import annotations


class TrackerError(Exception):
    """A request the user made that cannot be honoured."""

    message = "Request rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidDateError(TrackerError):
    message = "Invalid date format"


class FutureDateError(TrackerError):
    message = "Cannot freeze future dates"


class NotFoundError(TrackerError):
    message = "Not found"
