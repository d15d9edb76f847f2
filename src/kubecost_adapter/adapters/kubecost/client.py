"""Kubecost REST client: allocation queries, projections, and spec-cost predictions.

Every public call is one blocking round trip:

* :meth:`KubecostClient.fetch_actual_cost` -- selector + window ->
  ``/model/allocation`` -> normalized :class:`CostPoint` list.
* :meth:`KubecostClient.fetch_projected_cost` -- the same over a trailing
  30-day window, reduced to a monthly projection.
* :meth:`KubecostClient.predict` -- posts a workload manifest to
  ``/model/prediction/speccost`` and returns the backend's cost strings.

Nothing is retried and nothing is cached; errors from any stage propagate
unchanged.  The HTTP transport (an ``OpenerDirector`` carrying the TLS
settings) is built on first use, at most once per client, and shared by
concurrent callers.  Each call may pass ``timeout`` (seconds) as its
deadline; otherwise the configured timeout applies.
"""

from __future__ import annotations

import http.client
import json
import logging
import ssl
import threading
import urllib.error
import urllib.request
from datetime import UTC, datetime, timedelta
from typing import Sequence
from urllib.parse import urlsplit

from pydantic import ValidationError

from kubecost_adapter.adapters.kubecost.mapping import map_selector
from kubecost_adapter.adapters.kubecost.normalize import (
    check_http_status,
    decode_allocation_response,
    to_cost_points,
)
from kubecost_adapter.adapters.kubecost.query import (
    AllocationQuery,
    build_prediction_url,
    build_query_url,
)
from kubecost_adapter.adapters.kubecost.types import (
    DetailedAllocationResponse,
    PredictionResponse,
)
from kubecost_adapter.core.config import KubecostConfig
from kubecost_adapter.core.defaults import DEFAULT_CURRENCY, PROJECTION_LOOKBACK_DAYS
from kubecost_adapter.core.errors import DecodeError, TransportError
from kubecost_adapter.core.types import (
    NormalizedCostResponse,
    PredictionRequest,
    PredictionResult,
    ProjectedCost,
)
from kubecost_adapter.core.window import WindowSpec, resolve_window
from kubecost_adapter.report.projection import project

logger = logging.getLogger(__name__)

_JSON_CONTENT_TYPE = "application/json"
_YAML_CONTENT_TYPE = "application/yaml"


def is_json(text: str) -> bool:
    """Return True if *text* parses as a JSON document."""
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def detect_content_type(workload_spec: str) -> str:
    """``application/json`` for valid JSON, ``application/yaml`` for anything else."""
    return _JSON_CONTENT_TYPE if is_json(workload_spec) else _YAML_CONTENT_TYPE


class KubecostClient:
    """Client for one Kubecost backend.

    Args:
        config: Read-only settings (base URL, token, defaults, TLS, timeout).
        opener: Prebuilt transport to use instead of one derived from
            *config*.  The TLS setting in *config* is then not applied.
    """

    def __init__(
        self,
        config: KubecostConfig,
        *,
        opener: urllib.request.OpenerDirector | None = None,
    ) -> None:
        self._config = config
        self._opener: urllib.request.OpenerDirector | None = opener
        self._opener_lock = threading.Lock()

    @property
    def config(self) -> KubecostConfig:
        return self._config

    # -- transport -------------------------------------------------------------

    def _build_opener(self) -> urllib.request.OpenerDirector:
        context = ssl.create_default_context()
        if self._config.tls_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        # Empty ProxyHandler: talk to the backend directly, ignoring *_proxy env vars.
        return urllib.request.build_opener(
            urllib.request.ProxyHandler({}),
            urllib.request.HTTPSHandler(context=context),
        )

    @property
    def transport(self) -> urllib.request.OpenerDirector:
        """The shared opener, created on first access."""
        if self._opener is None:
            with self._opener_lock:
                if self._opener is None:
                    self._opener = self._build_opener()
        return self._opener

    def _send(
        self,
        url: str,
        *,
        method: str = "GET",
        body: bytes | None = None,
        content_type: str | None = None,
        timeout: float | None = None,
    ) -> bytes:
        """Issue one request and return the body of a successful response.

        Raises:
            BackendHTTPError: On status >= 400, before anything is decoded.
            TransportError: On connection failures and timeouts.
        """
        headers = {"Accept": _JSON_CONTENT_TYPE}
        if content_type:
            headers["Content-Type"] = content_type
        if self._config.api_token:
            headers["Authorization"] = f"Bearer {self._config.api_token}"

        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        deadline = timeout if timeout is not None else self._config.timeout_seconds
        path = urlsplit(url).path
        logger.debug("%s %s (timeout=%ss)", method, path, deadline)

        try:
            with self.transport.open(req, timeout=deadline) as resp:
                status, payload = resp.status, resp.read()
        except urllib.error.HTTPError as exc:
            status = exc.code
            try:
                payload = exc.read()
            except (http.client.HTTPException, OSError) as read_exc:
                logger.warning("Reading HTTP %d body from %s failed: %s", status, path, read_exc)
                raise TransportError(f"reading response: {read_exc}") from read_exc
            finally:
                exc.close()
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            logger.warning("Request to %s failed: %s", path, exc)
            raise TransportError(f"executing request: {exc}") from exc

        if status >= 400:
            logger.warning("Backend returned HTTP %d for %s", status, path)
        check_http_status(status, payload)
        return payload

    # -- allocation ------------------------------------------------------------

    def get_detailed_allocation(
        self,
        query: AllocationQuery,
        *,
        timeout: float | None = None,
    ) -> DetailedAllocationResponse:
        """Fetch the raw detailed allocation envelope for *query*.

        Raises:
            InvalidBaseURL: If the configured base URL is unusable.
            BackendHTTPError: On HTTP status >= 400.
            TransportError: On network failure or timeout.
            DecodeError: If the body is not a valid envelope.
            BackendApplicationError: If the envelope ``code`` is not 200.
        """
        url = build_query_url(self._config.base_url, query)
        return decode_allocation_response(self._send(url, timeout=timeout))

    def fetch_actual_cost(
        self,
        selector: str,
        window: WindowSpec = None,
        *,
        aggregate_by: Sequence[str] | None = None,
        timeout: float | None = None,
    ) -> NormalizedCostResponse:
        """Observed cost points for *selector* over *window*.

        Args:
            selector: Resource selector, e.g. ``"pod/default/api-7f9c"``.
                Unrecognised selectors query every allocation.
            window: Relative token, explicit ``(start, end)`` pair, or ``None``
                for the configured default window.
            aggregate_by: Optional backend aggregation keys.
            timeout: Per-call deadline in seconds.

        Returns:
            Points in backend order.

        Raises:
            InvalidWindowFormat: If *window* cannot be resolved.
            KubecostError: Any failure from the round trip (see
                :meth:`get_detailed_allocation`).
        """
        query = AllocationQuery(
            window=resolve_window(window, default=self._config.default_window),
            filter=map_selector(selector),
            aggregate_by=list(aggregate_by or []),
        )
        detailed = self.get_detailed_allocation(query, timeout=timeout)
        return to_cost_points(detailed)

    def fetch_projected_cost(
        self,
        selector: str,
        *,
        now: datetime | None = None,
        timeout: float | None = None,
    ) -> ProjectedCost:
        """Monthly projection from the trailing 30 days ending at *now*.

        The window is always anchored at call time; callers cannot widen or
        narrow it.
        """
        end = now if now is not None else datetime.now(UTC)
        start = end - timedelta(days=PROJECTION_LOOKBACK_DAYS)
        actual = self.fetch_actual_cost(selector, (start, end), timeout=timeout)
        return project(actual.items, currency=DEFAULT_CURRENCY)

    # -- prediction ------------------------------------------------------------

    def predict(
        self,
        request: PredictionRequest,
        *,
        timeout: float | None = None,
    ) -> PredictionResult:
        """Ask the backend what *request*'s workload would cost.

        Empty ``cluster_id``, ``default_namespace`` and ``window`` fall back to
        the configured values independently of one another.  The manifest is
        sent as the raw body; its Content-Type is sniffed (JSON if it parses,
        YAML otherwise).  The returned strings are not interpreted.
        """
        url = build_prediction_url(
            self._config.base_url,
            cluster_id=request.cluster_id or self._config.cluster_id,
            default_namespace=request.default_namespace or self._config.default_namespace,
            window=request.window or self._config.prediction_window,
            no_usage=request.no_usage,
        )
        payload = self._send(
            url,
            method="POST",
            body=request.workload_spec.encode("utf-8"),
            content_type=detect_content_type(request.workload_spec),
            timeout=timeout,
        )
        try:
            resp = PredictionResponse.model_validate_json(payload)
        except ValidationError as exc:
            raise DecodeError(f"decoding response: {exc}") from exc

        return PredictionResult(
            cost_before=resp.cost_before,
            cost_after=resp.cost_after,
            cost_change=resp.cost_change,
        )
