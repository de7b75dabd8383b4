"""Error types raised by the core."""

from __future__ import annotations


class TransportUnavailableError(RuntimeError):
    """The chat transport is not connected, so live reads cannot be served."""

    def __init__(self, message: str = "Chat transport not connected") -> None:
        super().__init__(message)
