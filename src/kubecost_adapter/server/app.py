"""FastAPI front end exposing the cost-source plugin procedures.

Each procedure is a ``POST /rpc/<Name>`` taking and returning JSON:

* ``Name`` -- plugin identity.
* ``Supports`` -- whether a ``k8s-*`` resource type can be priced.
* ``GetActualCost`` -- observed cost samples for a selector and time range.
* ``GetProjectedCost`` -- monthly projection from the trailing 30 days.
* ``GetPricingSpec`` -- synthetic per-day pricing description.
* ``PredictSpecCost`` -- what-if cost for a workload manifest.

Backend failures map to HTTP status codes: bad windows are 400, backend
HTTP/application/decode errors are 502, transport failures are 504.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from kubecost_adapter.adapters.kubecost.client import KubecostClient
from kubecost_adapter.adapters.kubecost.mapping import supports
from kubecost_adapter.core.defaults import (
    COST_SOURCE,
    DEFAULT_CURRENCY,
    PLUGIN_NAME,
    PRICING_BILLING_MODE,
    PRICING_PROVIDER,
)
from kubecost_adapter.core.errors import (
    BackendApplicationError,
    BackendHTTPError,
    DecodeError,
    InvalidWindowFormat,
    KubecostError,
    TransportError,
)
from kubecost_adapter.core.types import (
    ActualCostResult,
    PredictionRequest,
    PredictionResult,
    PricingSpec,
    ProjectedCost,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class PluginName(BaseModel):
    name: str


class ResourceDescriptor(BaseModel):
    resource_type: str = ""
    resource_id: str = ""


class SupportsResponse(BaseModel):
    supported: bool


class ActualCostQuery(BaseModel):
    resource_id: str = ""
    start: str = ""
    end: str = ""


class ActualCostResultList(BaseModel):
    results: list[ActualCostResult]


class HealthResponse(BaseModel):
    status: str


def _status_for(exc: KubecostError) -> int:
    if isinstance(exc, InvalidWindowFormat):
        return 400
    if isinstance(exc, (BackendHTTPError, BackendApplicationError, DecodeError)):
        return 502
    if isinstance(exc, TransportError):
        return 504
    return 500


def _parse_timestamp(raw: str) -> datetime | None:
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(client: KubecostClient) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        client: Backend client shared by every request.
    """
    app = FastAPI(
        title="kubecost-adapter",
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )

    @app.exception_handler(KubecostError)
    async def kubecost_error_handler(_request: Request, exc: KubecostError) -> JSONResponse:
        status = _status_for(exc)
        logger.warning("Request failed with %d: %s", status, exc)
        return JSONResponse(
            status_code=status,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    @app.get("/healthz")
    async def healthz() -> HealthResponse:
        return HealthResponse(status="ok")

    # -- identity / capability --------------------------------------------------

    @app.post("/rpc/Name")
    async def name() -> PluginName:
        return PluginName(name=PLUGIN_NAME)

    @app.post("/rpc/Supports")
    async def supports_resource(body: ResourceDescriptor) -> SupportsResponse:
        return SupportsResponse(supported=supports(body.resource_type))

    # -- cost ---------------------------------------------------------------------

    @app.post("/rpc/GetActualCost")
    def get_actual_cost(body: ActualCostQuery) -> ActualCostResultList:
        actual = client.fetch_actual_cost(body.resource_id, (body.start, body.end))
        return ActualCostResultList(
            results=[
                ActualCostResult(
                    timestamp=_parse_timestamp(point.start),
                    cost=point.total_cost,
                    source=COST_SOURCE,
                )
                for point in actual.items
            ]
        )

    @app.post("/rpc/GetProjectedCost")
    def get_projected_cost(body: ResourceDescriptor) -> ProjectedCost:
        return client.fetch_projected_cost(body.resource_id)

    @app.post("/rpc/GetPricingSpec")
    async def get_pricing_spec(body: ResourceDescriptor) -> PricingSpec:
        return PricingSpec(
            provider=PRICING_PROVIDER,
            resource_type=body.resource_type,
            billing_mode=PRICING_BILLING_MODE,
            currency=DEFAULT_CURRENCY,
            description=f"Kubecost-derived projection for {body.resource_type}",
            plugin_metadata={"source": COST_SOURCE},
        )

    @app.post("/rpc/PredictSpecCost")
    def predict_spec_cost(body: PredictionRequest) -> PredictionResult:
        return client.predict(body)

    return app
