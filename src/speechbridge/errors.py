"""Exception hierarchy for provider calls.

Every failure surfaces as exactly one of these. Callers can branch on the
class and on ``provider`` to tell which service failed.

Hierarchy:
    SpeechBridgeError (base)
    ├── InvalidURLError - request URL could not be built
    ├── SerializationError - request body could not be serialized
    ├── NetworkError - transport-level failure (connect, timeout, ...)
    ├── HTTPStatusError - unexpected HTTP status
    ├── EmptyBodyError - success response without usable content
    └── DecodeError - response bytes are not valid text / JSON
"""

from __future__ import annotations


class SpeechBridgeError(Exception):
    """Base exception for all provider call errors."""

    def __init__(self, message: str, provider: str = "unknown"):
        self.message = message
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class InvalidURLError(SpeechBridgeError):
    """The endpoint URL could not be constructed."""


class SerializationError(SpeechBridgeError):
    """The JSON request body could not be serialized."""


class NetworkError(SpeechBridgeError):
    """Transport-level failure.

    Attributes:
        original_error: The underlying httpx exception.
    """

    def __init__(
        self, message: str, provider: str = "unknown", original_error: Exception | None = None
    ):
        self.original_error = original_error
        super().__init__(message, provider)


class HTTPStatusError(SpeechBridgeError):
    """The provider answered with a status outside the accepted range.

    Attributes:
        status_code: Observed status, or -1 when no HTTP status was available.
        payload: Response body text, if any.
    """

    def __init__(self, status_code: int, payload: str = "", provider: str = "unknown"):
        self.status_code = status_code
        self.payload = payload
        message = f"Failed with status code: {status_code}"
        if payload:
            message = f"{message}, {payload}"
        super().__init__(message, provider)


class EmptyBodyError(SpeechBridgeError):
    """A successful response carried no data."""


class DecodeError(SpeechBridgeError):
    """Response bytes could not be decoded."""
