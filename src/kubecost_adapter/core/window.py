"""Window resolution: turn a caller's time specification into a backend window.

The allocation API accepts either an explicit ``"<start>,<end>"`` range of
RFC3339 timestamps or a relative shorthand such as ``"30d"``.  Callers may
hand us any of:

* ``None`` or an explicit pair with an empty endpoint -- resolves to the
  default shorthand (``"30d"``), never to a half-open range.
* An explicit ``(start, end)`` pair -- datetimes are formatted as RFC3339
  UTC, strings pass through verbatim.
* A day token ``"Nd"`` -- ``N`` must be an integer; resolves to
  ``now - N days, now``.
* A duration in the ``1h30m45s`` grammar (units ``ns``, ``us``, ``ms``,
  ``s``, ``m``, ``h``; optional sign; decimals allowed) -- resolves to
  ``now - duration, now``.

Zero and negative durations are legal: ``"0s"`` yields ``start == end`` and
``"-1h"`` yields a start after *now*.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta
from typing import Final, Union

from kubecost_adapter.core.defaults import DEFAULT_WINDOW
from kubecost_adapter.core.errors import InvalidWindowFormat

WindowSpec = Union[str, tuple[str | datetime | None, str | datetime | None], None]

_RFC3339_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%SZ"

_UNIT_SECONDS: Final[dict[str, float]] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # U+00B5 micro sign
    "μs": 1e-6,  # U+03BC greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# Longer units first so "ms" wins over "m".
_COMPONENT_RE: Final[re.Pattern[str]] = re.compile(
    r"(?P<value>\d*\.?\d*)(?P<unit>ns|us|µs|μs|ms|s|m|h)"
)
_DAY_COUNT_RE: Final[re.Pattern[str]] = re.compile(r"[+-]?\d+")


def format_rfc3339(ts: datetime) -> str:
    """Format *ts* as an RFC3339 UTC timestamp with second precision.

    Naive datetimes are taken to be UTC already.
    """
    if ts.tzinfo is not None:
        ts = ts.astimezone(UTC)
    return ts.strftime(_RFC3339_FORMAT)


def format_time_window(start: datetime, end: datetime) -> str:
    """Render an explicit window as ``"<start>,<end>"``."""
    return f"{format_rfc3339(start)},{format_rfc3339(end)}"


def parse_duration(token: str) -> timedelta:
    """Parse a composable duration such as ``"1h30m45s"`` or ``"-1.5h"``.

    Raises:
        InvalidWindowFormat: If *token* does not match the grammar.
    """
    s = token
    sign = 1.0
    if s[:1] in ("-", "+"):
        sign = -1.0 if s[0] == "-" else 1.0
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise InvalidWindowFormat(token)

    total = 0.0
    pos = 0
    while pos < len(s):
        m = _COMPONENT_RE.match(s, pos)
        if m is None or not any(ch.isdigit() for ch in m.group("value")):
            raise InvalidWindowFormat(token)
        total += float(m.group("value")) * _UNIT_SECONDS[m.group("unit")]
        pos = m.end()

    try:
        return timedelta(seconds=sign * total)
    except OverflowError as exc:
        raise InvalidWindowFormat(token) from exc


def parse_duration_window(
    window: str,
    *,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Resolve a relative window token into an aware-UTC ``(start, end)`` pair.

    Args:
        window: ``"Nd"`` day token or a standard duration string.
        now: Anchor for the window end.  Defaults to the current UTC time.

    Returns:
        ``(now - span, now)``.

    Raises:
        InvalidWindowFormat: If *window* is neither form, or its span does
            not fit the datetime range.
    """
    end = now if now is not None else datetime.now(UTC)

    if window.endswith("d"):
        days = window[:-1]
        if not _DAY_COUNT_RE.fullmatch(days):
            raise InvalidWindowFormat(window)
        span = _day_span(days, window)
    else:
        span = parse_duration(window)

    try:
        return end - span, end
    except OverflowError as exc:
        raise InvalidWindowFormat(window) from exc


def _day_span(days: str, window: str) -> timedelta:
    try:
        return timedelta(days=int(days))
    except (OverflowError, ValueError) as exc:
        raise InvalidWindowFormat(window) from exc


def _endpoint_to_str(value: str | datetime) -> str:
    if isinstance(value, datetime):
        return format_rfc3339(value)
    return value


def resolve_window(
    spec: WindowSpec,
    *,
    now: datetime | None = None,
    default: str = DEFAULT_WINDOW,
) -> str:
    """Resolve *spec* into the string sent as the ``window`` query parameter.

    Args:
        spec: ``None``, an explicit ``(start, end)`` pair, or a relative token.
        now: Anchor for relative tokens.  Defaults to the current UTC time.
        default: Shorthand used when no usable window was supplied.

    Returns:
        ``"<start>,<end>"`` or the default shorthand.

    Raises:
        InvalidWindowFormat: If a relative token cannot be parsed.
    """
    if spec is None:
        return default

    if isinstance(spec, tuple):
        start, end = spec
        if not start or not end:
            return default
        return f"{_endpoint_to_str(start)},{_endpoint_to_str(end)}"

    if not spec:
        return default

    start_ts, end_ts = parse_duration_window(spec, now=now)
    return format_time_window(start_ts, end_ts)
