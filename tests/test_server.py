"""Tests for the FastAPI plugin front end (server.app)."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import FakeBackend, allocation_entry, allocation_payload
from kubecost_adapter.adapters.kubecost.client import KubecostClient
from kubecost_adapter.core.config import KubecostConfig
from kubecost_adapter.core.errors import (
    BackendHTTPError,
    InvalidBaseURL,
    InvalidWindowFormat,
    KubecostError,
    TransportError,
)
from kubecost_adapter.server.app import _status_for, create_app


@pytest.fixture()
def api(client: KubecostClient) -> TestClient:
    return TestClient(create_app(client))


class TestIdentity:
    def test_healthz(self, api: TestClient) -> None:
        resp = api.get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_name(self, api: TestClient) -> None:
        resp = api.post("/rpc/Name")
        assert resp.status_code == 200
        assert resp.json() == {"name": "kubecost"}

    @pytest.mark.parametrize(
        ("resource_type", "expected"),
        [
            ("k8s-namespace", True),
            ("k8s-pod", True),
            ("k8s-controller", True),
            ("k8s-node", True),
            ("k8s-service", False),
            ("aws:ec2/instance:Instance", False),
        ],
    )
    def test_supports(self, api: TestClient, resource_type: str, expected: bool) -> None:
        resp = api.post("/rpc/Supports", json={"resource_type": resource_type})
        assert resp.status_code == 200
        assert resp.json() == {"supported": expected}


class TestGetActualCost:
    def test_results(self, api: TestClient, backend: FakeBackend) -> None:
        backend.reply_json(
            allocation_payload(
                {"default/test-pod": allocation_entry("default/test-pod", 220.9)},
                {"default/test-pod": allocation_entry(
                    "default/test-pod", 110.0, start="2024-01-02T00:00:00Z", end="2024-01-03T00:00:00Z",
                )},
            )
        )
        resp = api.post(
            "/rpc/GetActualCost",
            json={
                "resource_id": "pod/default/test-pod",
                "start": "2024-01-01T00:00:00Z",
                "end": "2024-01-03T00:00:00Z",
            },
        )
        assert resp.status_code == 200
        results = resp.json()["results"]
        assert [r["cost"] for r in results] == [220.9, 110.0]
        assert all(r["source"] == "kubecost" for r in results)
        assert results[0]["timestamp"].startswith("2024-01-01T00:00:00")
        assert backend.last.query["window"] == ["2024-01-01T00:00:00Z,2024-01-03T00:00:00Z"]

    def test_missing_range_uses_default_window(self, api: TestClient, backend: FakeBackend) -> None:
        backend.reply_json(allocation_payload())
        resp = api.post("/rpc/GetActualCost", json={"resource_id": "namespace/default"})
        assert resp.status_code == 200
        assert resp.json() == {"results": []}
        assert backend.last.query["window"] == ["30d"]

    def test_backend_http_error_is_502(self, api: TestClient, backend: FakeBackend) -> None:
        backend.reply_json({"error": "Bad request"}, status=400)
        resp = api.post("/rpc/GetActualCost", json={"resource_id": "namespace/default"})
        assert resp.status_code == 502
        assert resp.json()["error"] == "BackendHTTPError"

    def test_application_error_is_502(self, api: TestClient, backend: FakeBackend) -> None:
        backend.reply_json(allocation_payload(code=500, message="boom"))
        resp = api.post("/rpc/GetActualCost", json={"resource_id": "namespace/default"})
        assert resp.status_code == 502
        assert resp.json()["error"] == "BackendApplicationError"

    def test_decode_error_is_502(self, api: TestClient, backend: FakeBackend) -> None:
        backend.body = b"not json"
        resp = api.post("/rpc/GetActualCost", json={"resource_id": "namespace/default"})
        assert resp.status_code == 502
        assert resp.json()["error"] == "DecodeError"

    def test_transport_error_is_504(self) -> None:
        client = KubecostClient(KubecostConfig(base_url="http://127.0.0.1:1", timeout_seconds=2))
        api = TestClient(create_app(client))
        resp = api.post("/rpc/GetActualCost", json={"resource_id": "namespace/default"})
        assert resp.status_code == 504
        assert resp.json()["error"] == "TransportError"

    def test_invalid_base_url_is_500(self) -> None:
        api = TestClient(create_app(KubecostClient(KubecostConfig(base_url="://invalid-url"))))
        resp = api.post("/rpc/GetActualCost", json={"resource_id": "namespace/default"})
        assert resp.status_code == 500
        assert resp.json()["error"] == "InvalidBaseURL"

    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (InvalidWindowFormat("30x"), 400),
            (BackendHTTPError(500, ""), 502),
            (TransportError("timed out"), 504),
            (InvalidBaseURL("://x"), 500),
        ],
    )
    def test_status_mapping(self, exc: KubecostError, status: int) -> None:
        assert _status_for(exc) == status


class TestGetProjectedCost:
    def test_projection(self, api: TestClient, backend: FakeBackend) -> None:
        backend.reply_json(
            allocation_payload({"a": allocation_entry("a", 100.0)}, {"a": allocation_entry("a", 200.0)})
        )
        resp = api.post("/rpc/GetProjectedCost", json={"resource_id": "namespace/default"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["unit_price"] == pytest.approx(150.0)
        assert body["cost_per_month"] == pytest.approx(4500.0)
        assert body["currency"] == "USD"
        assert body["billing_detail"] == "kubecost-avg-daily"

    def test_empty_history(self, api: TestClient, backend: FakeBackend) -> None:
        backend.reply_json(allocation_payload())
        body = api.post("/rpc/GetProjectedCost", json={"resource_id": "namespace/empty"}).json()
        assert body["unit_price"] == 0.0
        assert body["cost_per_month"] == 0.0
        assert body["currency"] == "USD"
        assert body["billing_detail"] == ""


class TestGetPricingSpec:
    def test_synthetic_spec(self, api: TestClient) -> None:
        resp = api.post("/rpc/GetPricingSpec", json={"resource_type": "k8s-pod"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["provider"] == "kubernetes"
        assert body["resource_type"] == "k8s-pod"
        assert body["billing_mode"] == "per_day"
        assert body["currency"] == "USD"
        assert body["description"] == "Kubecost-derived projection for k8s-pod"
        assert body["plugin_metadata"] == {"source": "kubecost"}

    def test_no_backend_call(self, api: TestClient, backend: FakeBackend) -> None:
        api.post("/rpc/GetPricingSpec", json={"resource_type": "k8s-node"})
        assert backend.requests == []


class TestPredictSpecCost:
    def test_prediction(self, api: TestClient, backend: FakeBackend) -> None:
        backend.reply_json({"costBefore": "$10.00", "costAfter": "$15.50", "costChange": "+$5.50"})
        resp = api.post(
            "/rpc/PredictSpecCost",
            json={"workload_spec": "kind: Deployment\n", "no_usage": True},
        )
        assert resp.status_code == 200
        assert resp.json() == {"cost_before": "$10.00", "cost_after": "$15.50", "cost_change": "+$5.50"}
        assert backend.last.query["clusterID"] == ["cluster-one"]
        assert backend.last.query["noUsage"] == ["true"]

    def test_missing_spec_rejected(self, api: TestClient) -> None:
        resp = api.post("/rpc/PredictSpecCost", json={"cluster_id": "c1"})
        assert resp.status_code == 422
