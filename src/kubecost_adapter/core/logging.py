"""Sanitizing log filter that redacts credentials before they reach handlers.

Prevents accidental leakage of the backend API token through request
dumps, exception messages, or config reprs that end up in log output.
"""

from __future__ import annotations

import logging
import re
from typing import Final

_SENSITIVE_KEYS: Final[tuple[str, ...]] = (
    "api_token",
    "apitoken",
    "token",
    "password",
)

_REDACTED: Final[str] = "[REDACTED]"

_SENSITIVE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?P<key>"
    + "|".join(re.escape(k) for k in _SENSITIVE_KEYS)
    + r")\s*[=:]\s*(?P<value>\"[^\"]*\"|'[^']*'|\S+)",
    re.IGNORECASE,
)

_BEARER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?P<scheme>Bearer)\s+\S+",
    re.IGNORECASE,
)


def redact_message(message: str) -> str:
    """Replace credentials in *message* with redaction markers.

    Handles ``key=value`` / ``key: value`` pairs for token-like keys and
    ``Bearer <token>`` authorization values.

    Args:
        message: Raw log message string.

    Returns:
        Message with sensitive values replaced by ``[REDACTED]``.
    """
    message = _BEARER_PATTERN.sub(lambda m: f"{m.group('scheme')} {_REDACTED}", message)
    return _SENSITIVE_PATTERN.sub(
        lambda m: f"{m.group('key')}={_REDACTED}", message,
    )


class SanitizingFilter(logging.Filter):
    """Redacts the backend API token from messages and tracebacks.

    The message is formatted with its args before redaction so a token
    passed as an argument is caught too.  Exception text is rendered and
    redacted up front; handlers reuse ``record.exc_text`` as-is.
    """

    _formatter = logging.Formatter()

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact_message(record.getMessage())
        record.args = None
        if record.exc_info and not record.exc_text:
            record.exc_text = self._formatter.formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = redact_message(record.exc_text)
        return True


def install_sanitizing_filter(
    logger: logging.Logger | None = None,
    *,
    handler_level: bool = False,
) -> SanitizingFilter:
    """Attach a token-redacting :class:`SanitizingFilter` to *logger*.

    Defaults to the root logger.  With ``handler_level=True`` the filter goes
    on each of the logger's handlers, which also covers records propagated
    from child loggers.
    """
    filt = SanitizingFilter()
    target = logger or logging.getLogger()
    targets = target.handlers if handler_level else [target]
    for t in targets:
        t.addFilter(filt)
    return filt


def configure_logging(level: int = logging.INFO) -> None:
    """Set up root logging for the CLI and install the sanitizing filter on its handlers."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    install_sanitizing_filter(logging.getLogger(), handler_level=True)
