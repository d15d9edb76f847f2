"""Allocation response decoding and normalization into :class:`CostPoint` sequences.

The detailed payload looks like::

    {"code": 200, "status": "success",
     "data": [{"<name>": {...entry...}, "<name>": {...}},   # period 1
              {"<name>": {...entry...}}]}                   # period 2

Names are opaque, so they are dropped and every entry value becomes one
point, in outer-list order and then map order.  Map order inside a period
is whatever the backend serialised and carries no meaning.

Failures are reported in the order they can be detected:

1. HTTP status >= 400 -> :class:`BackendHTTPError` (body is never decoded).
2. Body is not JSON or not the expected shape -> :class:`DecodeError`.
3. Envelope ``code`` is not 200 -> :class:`BackendApplicationError`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from kubecost_adapter.adapters.kubecost.types import (
    AllocationEntry,
    DetailedAllocationResponse,
)
from kubecost_adapter.core.defaults import BACKEND_SUCCESS_CODE, HTTP_CLIENT_ERROR
from kubecost_adapter.core.errors import (
    BackendApplicationError,
    BackendHTTPError,
    DecodeError,
)
from kubecost_adapter.core.types import CostPoint, NormalizedCostResponse

logger = logging.getLogger(__name__)

RawPayload = bytes | str | Mapping[str, Any]


def check_http_status(status: int, body: bytes | str) -> None:
    """Raise :class:`BackendHTTPError` for any status >= 400."""
    if status >= HTTP_CLIENT_ERROR:
        text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
        raise BackendHTTPError(status, text)


def _load_json(raw: RawPayload) -> Any:
    if isinstance(raw, Mapping):
        return raw
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"decoding response: {exc}") from exc


def decode_allocation_response(raw: RawPayload) -> DetailedAllocationResponse:
    """Decode and validate a detailed allocation envelope.

    Raises:
        DecodeError: If *raw* is not JSON or does not match the envelope.
        BackendApplicationError: If the envelope ``code`` is not 200.
    """
    try:
        detailed = DetailedAllocationResponse.model_validate(_load_json(raw))
    except ValidationError as exc:
        raise DecodeError(f"decoding response: {exc}") from exc

    if detailed.code != BACKEND_SUCCESS_CODE:
        raise BackendApplicationError(detailed.code, detailed.message)
    return detailed


def entry_to_cost_point(entry: AllocationEntry) -> CostPoint:
    """Map one backend entry onto the canonical record.

    Start/end prefer the entry's own fields and fall back to the nested
    ``window``.  ``total_cost`` is copied, never recomputed.
    """
    return CostPoint(
        start=entry.start or entry.window.start,
        end=entry.end or entry.window.end,
        total_cost=entry.total_cost,
        cpu_cost=entry.cpu_cost,
        ram_cost=entry.ram_cost,
        gpu_cost=entry.gpu_cost,
        pv_cost=entry.pv_cost,
        network_cost=entry.network_cost,
    )


def to_cost_points(detailed: DetailedAllocationResponse) -> NormalizedCostResponse:
    """Flatten per-period maps into one ordered list of points."""
    items = [
        entry_to_cost_point(entry)
        for period in detailed.data
        for entry in period.values()
    ]
    logger.debug("Normalized %d allocation(s) across %d period(s)", len(items), len(detailed.data))
    return NormalizedCostResponse(items=items)


def _flat_items(payload: Mapping[str, Any]) -> NormalizedCostResponse:
    try:
        return NormalizedCostResponse.model_validate(
            {
                "items": [
                    {
                        "start": item.get("start", ""),
                        "end": item.get("end", ""),
                        "total_cost": item.get("cost", 0.0),
                        "cpu_cost": item.get("cpuCost", 0.0),
                        "ram_cost": item.get("ramCost", 0.0),
                        "gpu_cost": item.get("gpuCost", 0.0),
                        "pv_cost": item.get("pvcCost", item.get("pvCost", 0.0)),
                        "network_cost": item.get("networkCost", 0.0),
                    }
                    for item in payload["items"] or []
                ]
            }
        )
    except (ValidationError, AttributeError, TypeError) as exc:
        raise DecodeError(f"decoding response: {exc}") from exc


def normalize(raw: RawPayload) -> NormalizedCostResponse:
    """Decode a backend payload and collapse it into cost points.

    Accepts the detailed ``{"code", "data": [...]}`` envelope and the flat
    ``{"items": [...]}`` shape some proxies return.

    Args:
        raw: Response body as bytes/str, or an already decoded mapping.

    Returns:
        Points in backend order.

    Raises:
        DecodeError: If the payload cannot be decoded.
        BackendApplicationError: If the envelope reports a failure code.
    """
    payload = _load_json(raw)
    if isinstance(payload, Mapping) and "items" in payload and "data" not in payload:
        return _flat_items(payload)
    return to_cost_points(decode_allocation_response(payload))
