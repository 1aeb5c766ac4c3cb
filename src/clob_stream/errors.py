"""Exception hierarchy for CLOB streaming.

Session-ending errors (``TransportError``, ``ConnectionClosedError``) are
raised by a session stream and trigger a reconnect. Message-scoped errors
(``DecodeError`` and its subclasses) are yielded as values and leave the
session open.
"""

from typing import Optional


class ClobStreamError(Exception):
    """Base exception for all CLOB streaming errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class TransportError(ClobStreamError):
    """Raised when connecting, handshaking or sending on the socket fails."""

    pass


class ConnectionClosedError(ClobStreamError):
    """Raised when the server ends the session."""

    def __init__(
        self,
        message: str = "Connection closed",
        code: Optional[int] = None,
        reason: str = "",
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause)
        self.code = code
        self.reason = reason

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"{self.message} (code={self.code}, reason={self.reason!r})"


class DecodeError(ClobStreamError):
    """A single inbound message could not be decoded."""

    MAX_PAYLOAD_PREVIEW = 200

    def __init__(self, message: str, payload: str = "", cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.payload = payload[:self.MAX_PAYLOAD_PREVIEW]


class UnsupportedFrameError(DecodeError):
    """The server sent a binary frame on a text-only feed."""

    pass
