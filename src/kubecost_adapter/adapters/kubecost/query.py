"""Backend URL construction for allocation and prediction queries.

Allocation queries always carry ``accumulate=false``, ``idle=false`` and
``shareIdle=false``: results come back per period rather than summed, and no
synthetic ``__idle__`` allocation is mixed in.

Query parameters are encoded in sorted key order so identical inputs always
produce byte-identical URLs.
"""

from __future__ import annotations

from typing import Final, Sequence
from urllib.parse import urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, Field

from kubecost_adapter.core.defaults import ALLOCATION_PATH, PREDICTION_PATH
from kubecost_adapter.core.errors import InvalidBaseURL
from kubecost_adapter.core.types import AllocationFilterSet

_ALLOWED_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})

_FIXED_ALLOCATION_PARAMS: Final[dict[str, str]] = {
    "accumulate": "false",
    "idle": "false",
    "shareIdle": "false",
}


class AllocationQuery(BaseModel, frozen=True):
    """Inputs for one ``/model/allocation`` request.

    ``window`` is either ``"<start>,<end>"`` or a shorthand such as ``"30d"``.
    ``filter`` keys are backend-defined (``namespace``, ``pod``,
    ``controller``, ``node``, ``label:app`` ...) and are not validated.
    """

    window: str
    filter: AllocationFilterSet = Field(default_factory=dict)
    aggregate_by: list[str] = Field(default_factory=list)


def encode_filter(filters: AllocationFilterSet) -> str:
    """Render filters as ``key:"value"`` terms joined by ``+`` in insertion order."""
    return "+".join(f'{key}:"{value}"' for key, value in filters.items())


def _endpoint_url(base_url: str, path: str, params: dict[str, str]) -> str:
    try:
        parts = urlsplit(base_url)
    except ValueError as exc:
        raise InvalidBaseURL(base_url, str(exc)) from exc

    if parts.scheme not in _ALLOWED_SCHEMES:
        raise InvalidBaseURL(base_url, "scheme must be http or https")
    if not parts.netloc:
        raise InvalidBaseURL(base_url, "missing host")

    query = urlencode(sorted(params.items()))
    return urlunsplit((parts.scheme, parts.netloc, path, query, ""))


def build_allocation_url(
    base_url: str,
    window: str,
    filters: AllocationFilterSet | None = None,
    aggregate_by: Sequence[str] | None = None,
) -> str:
    """Build a fully encoded ``/model/allocation`` URL.

    Args:
        base_url: Backend root, e.g. ``"http://kubecost:9090"``.  Any path on
            it is replaced by the allocation endpoint.
        window: Window string, sent verbatim.
        filters: Optional filter set; omitted from the URL when empty.
        aggregate_by: Optional aggregation keys, joined with ``,``.

    Returns:
        The encoded URL.

    Raises:
        InvalidBaseURL: If *base_url* is not an absolute http(s) URL.
    """
    params: dict[str, str] = {"window": window}
    if filters:
        params["filter"] = encode_filter(filters)
    if aggregate_by:
        params["aggregate"] = ",".join(aggregate_by)
    params.update(_FIXED_ALLOCATION_PARAMS)
    return _endpoint_url(base_url, ALLOCATION_PATH, params)


def build_query_url(base_url: str, query: AllocationQuery) -> str:
    """Convenience wrapper around :func:`build_allocation_url` for an :class:`AllocationQuery`."""
    return build_allocation_url(base_url, query.window, query.filter, query.aggregate_by)


def build_prediction_url(
    base_url: str,
    *,
    cluster_id: str,
    default_namespace: str,
    window: str = "",
    no_usage: bool = False,
) -> str:
    """Build the ``/model/prediction/speccost`` URL.

    ``window`` and ``noUsage`` are only sent when set.

    Raises:
        InvalidBaseURL: If *base_url* is not an absolute http(s) URL.
    """
    params: dict[str, str] = {
        "clusterID": cluster_id,
        "defaultNamespace": default_namespace,
    }
    if window:
        params["window"] = window
    if no_usage:
        params["noUsage"] = "true"
    return _endpoint_url(base_url, PREDICTION_PATH, params)
