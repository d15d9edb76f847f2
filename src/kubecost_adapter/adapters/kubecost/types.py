"""Raw Kubecost payload shapes, as returned by ``/model/allocation``.

Field names follow the backend's camelCase via aliases.  Unknown fields are
ignored so additions on the backend side never break decoding; missing
numeric fields default to zero.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _BackendModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class AllocationWindow(_BackendModel):
    start: str = ""
    end: str = ""


class AllocationProperties(_BackendModel):
    """Metadata the backend attaches to an allocation."""

    cluster: str = ""
    node: str = ""
    container: str = ""
    controller: str = ""
    controller_kind: str = Field(default="", alias="controllerKind")
    namespace: str = ""
    pod: str = ""
    services: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class AllocationEntry(_BackendModel):
    """One named allocation inside a period map.

    ``start``/``end`` are usually set directly; older backends only fill the
    nested ``window``.  ``total_cost`` includes load-balancer, shared and
    external cost, so it is not the sum of the per-category fields.
    """

    name: str = ""
    properties: AllocationProperties = Field(default_factory=AllocationProperties)
    window: AllocationWindow = Field(default_factory=AllocationWindow)
    start: str = ""
    end: str = ""
    minutes: float = 0.0
    cpu_cores: float = Field(default=0.0, alias="cpuCores")
    cpu_core_hours: float = Field(default=0.0, alias="cpuCoreHours")
    cpu_cost: float = Field(default=0.0, alias="cpuCost")
    cpu_efficiency: float = Field(default=0.0, alias="cpuEfficiency")
    gpu_count: float = Field(default=0.0, alias="gpuCount")
    gpu_hours: float = Field(default=0.0, alias="gpuHours")
    gpu_cost: float = Field(default=0.0, alias="gpuCost")
    network_cost: float = Field(default=0.0, alias="networkCost")
    load_balancer_cost: float = Field(default=0.0, alias="loadBalancerCost")
    pv_cost: float = Field(default=0.0, alias="pvCost")
    ram_bytes: float = Field(default=0.0, alias="ramBytes")
    ram_byte_hours: float = Field(default=0.0, alias="ramByteHours")
    ram_cost: float = Field(default=0.0, alias="ramCost")
    ram_efficiency: float = Field(default=0.0, alias="ramEfficiency")
    shared_cost: float = Field(default=0.0, alias="sharedCost")
    external_cost: float = Field(default=0.0, alias="externalCost")
    total_cost: float = Field(default=0.0, alias="totalCost")
    total_efficiency: float = Field(default=0.0, alias="totalEfficiency")
    raw_allocation_only: dict[str, Any] | None = Field(default=None, alias="rawAllocationOnly")


class DetailedAllocationResponse(_BackendModel):
    """Top-level allocation envelope.

    ``data`` holds one map per period, keyed by an opaque allocation name.
    """

    code: int = 0
    status: str = ""
    message: str = ""
    data: list[dict[str, AllocationEntry]] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _drop_null_periods(cls, value: Any) -> Any:
        # Empty windows come back as ``null`` or ``[null]``.
        if value is None:
            return []
        if isinstance(value, list):
            return [period for period in value if period is not None]
        return value


class PredictionResponse(_BackendModel):
    """Before/after/delta strings; numbers are stringified, never parsed."""

    cost_before: str = Field(default="", alias="costBefore")
    cost_after: str = Field(default="", alias="costAfter")
    cost_change: str = Field(default="", alias="costChange")

    @field_validator("cost_before", "cost_after", "cost_change", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value
