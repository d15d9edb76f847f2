"""Error taxonomy shared by every layer of the adapter.

All errors are terminal for the call that raised them; nothing in the
package retries.  Input problems (:class:`InvalidWindowFormat`,
:class:`InvalidBaseURL`) also subclass :class:`ValueError` so callers that
only care about "bad argument" can catch that instead.
"""

from __future__ import annotations


class KubecostError(Exception):
    """Base class for every error raised by kubecost_adapter."""


class InvalidWindowFormat(KubecostError, ValueError):
    """Raised when a window token is neither ``"Nd"`` nor a valid duration."""

    def __init__(self, window: str) -> None:
        super().__init__(f"invalid duration format: {window}")
        self.window = window


class InvalidBaseURL(KubecostError, ValueError):
    """Raised when the configured backend base URL cannot be used."""

    def __init__(self, base_url: str, reason: str = "") -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(f"invalid base URL {base_url!r}{detail}")
        self.base_url = base_url


class BackendHTTPError(KubecostError):
    """Non-success HTTP status from the backend.

    Carries the raw body for diagnostics; it is never decoded.
    """

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"kubecost API error: status={status}, body={body}")
        self.status = status
        self.body = body


class BackendApplicationError(KubecostError):
    """HTTP succeeded but the payload's top-level ``code`` signals failure."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"kubecost API returned error code {code}: {message}")
        self.code = code
        self.message = message


class DecodeError(KubecostError):
    """The backend body is not valid JSON or does not match the expected shape."""


class TransportError(KubecostError):
    """Network-level failure, including timeouts."""
