from __future__ import annotations

from typing import Optional


class PlayinMapError(Exception):
    """Base class for errors raised by playin_map."""


class RemoteError(PlayinMapError):
    """A backend query failed: transport, HTTP status or payload decoding."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source

    def __str__(self) -> str:
        message = super().__str__()
        if self.source:
            return f"{self.source}: {message}"
        return message
