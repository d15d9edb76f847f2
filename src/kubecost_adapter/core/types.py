"""Core data contracts: canonical cost points, projections, and predictions."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from kubecost_adapter.core.defaults import COST_SOURCE, DEFAULT_CURRENCY

AllocationFilterSet = dict[str, str]
"""Backend filter key (``namespace``, ``pod``, label keys, ...) -> value."""


class ResourceKind(StrEnum):
    """First segment of a resource selector such as ``pod/default/api``.

    The ``Supports`` allow-list is derived from these members, so adding a
    kind here without teaching the selector mapper about it is a bug.
    """

    NAMESPACE = "namespace"
    POD = "pod"
    CONTROLLER = "controller"
    NODE = "node"


class CostPoint(BaseModel, frozen=True):
    """Cost of one allocation over one backend period.

    ``total_cost`` is authoritative.  The category fields are informational
    and need not add up to it: the backend also bills load balancers, shared
    and external costs that have no canonical category here.
    """

    start: str = Field(description="Period start (ISO-8601, as sent by the backend).")
    end: str = Field(description="Period end (ISO-8601, as sent by the backend).")
    total_cost: float = Field(description="Backend total cost, copied verbatim.")
    cpu_cost: float = 0.0
    ram_cost: float = 0.0
    gpu_cost: float = 0.0
    pv_cost: float = 0.0
    network_cost: float = 0.0


class NormalizedCostResponse(BaseModel, frozen=True):
    """Cost points in backend response order (never re-sorted)."""

    items: list[CostPoint] = Field(default_factory=list)


class ProjectedCost(BaseModel, frozen=True):
    """Monthly extrapolation derived from a daily average."""

    unit_price: float = Field(default=0.0, description="Average cost per observed period.")
    currency: str = DEFAULT_CURRENCY
    cost_per_month: float = Field(default=0.0, description="unit_price x 30.")
    billing_detail: str = Field(default="", description="How the figure was derived.")


class ActualCostResult(BaseModel, frozen=True):
    """One observed cost sample as exposed over the RPC front end."""

    timestamp: datetime | None = None
    cost: float
    usage_amount: float = 0.0
    usage_unit: str = ""
    source: str = COST_SOURCE


class PricingSpec(BaseModel, frozen=True):
    """Synthetic pricing description for a resource type."""

    provider: str
    resource_type: str
    sku: str = ""
    region: str = ""
    billing_mode: str
    rate_per_unit: float = 0.0
    currency: str = DEFAULT_CURRENCY
    description: str = ""
    plugin_metadata: dict[str, str] = Field(default_factory=dict)


class PredictionRequest(BaseModel, frozen=True):
    """What-if request for the backend's spec-cost prediction.

    Empty ``cluster_id``, ``default_namespace`` and ``window`` are filled from
    configuration, each independently.
    """

    cluster_id: str = ""
    default_namespace: str = ""
    window: str = ""
    no_usage: bool = False
    workload_spec: str = Field(description="Workload manifest, YAML or JSON.")


class PredictionResult(BaseModel, frozen=True):
    """Backend cost strings, passed through without parsing."""

    cost_before: str = ""
    cost_after: str = ""
    cost_change: str = ""
