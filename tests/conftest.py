"""Shared fixtures for the kubecost_adapter test suite."""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass, field
from email.message import Message
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Iterator
from urllib.parse import parse_qs, urlsplit

import pytest

from kubecost_adapter.adapters.kubecost.client import KubecostClient
from kubecost_adapter.core.config import KubecostConfig


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: dict[str, list[str]]
    headers: Message
    body: bytes


@dataclass
class FakeBackend:
    """Canned Kubecost stand-in: every request gets ``status`` + ``body``."""

    url: str = ""
    status: int = 200
    body: bytes = b"{}"
    content_type: str = "application/json"
    delay_seconds: float = 0.0
    requests: list[RecordedRequest] = field(default_factory=list)

    def reply_json(self, payload: Any, status: int = 200) -> None:
        self.status = status
        self.body = json.dumps(payload).encode("utf-8")
        self.content_type = "application/json"

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]


class _Handler(BaseHTTPRequestHandler):
    def _handle(self) -> None:
        backend: FakeBackend = self.server.backend  # type: ignore[attr-defined]
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        parts = urlsplit(self.path)
        backend.requests.append(
            RecordedRequest(
                method=self.command,
                path=parts.path,
                query=parse_qs(parts.query, keep_blank_values=True),
                headers=self.headers,
                body=body,
            )
        )
        if backend.delay_seconds:
            time.sleep(backend.delay_seconds)
        self.send_response(backend.status)
        self.send_header("Content-Type", backend.content_type)
        self.send_header("Content-Length", str(len(backend.body)))
        self.end_headers()
        self.wfile.write(backend.body)

    do_GET = _handle
    do_POST = _handle

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        pass


@pytest.fixture()
def backend() -> Iterator[FakeBackend]:
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    fake = FakeBackend(url=f"http://127.0.0.1:{server.server_address[1]}")
    server.backend = fake  # type: ignore[attr-defined]
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield fake
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture()
def config(backend: FakeBackend) -> KubecostConfig:
    return KubecostConfig(
        base_url=backend.url,
        api_token="test-token",
        timeout_seconds=5.0,
        cluster_id="cluster-one",
        default_namespace="default",
        prediction_window="2d",
    )


@pytest.fixture()
def client(config: KubecostConfig) -> KubecostClient:
    return KubecostClient(config)


def allocation_entry(
    name: str,
    total_cost: float,
    *,
    start: str = "2024-01-01T00:00:00Z",
    end: str = "2024-01-02T00:00:00Z",
    **costs: float,
) -> dict[str, Any]:
    """A backend allocation entry with camelCase cost fields."""
    entry: dict[str, Any] = {
        "name": name,
        "properties": {"cluster": "test-cluster", "namespace": "default"},
        "window": {"start": start, "end": end},
        "start": start,
        "end": end,
        "totalCost": total_cost,
    }
    entry.update(costs)
    return entry


def allocation_payload(*periods: dict[str, Any], code: int = 200, message: str = "") -> dict[str, Any]:
    """Wrap period maps in the detailed allocation envelope."""
    payload: dict[str, Any] = {"code": code, "status": "success", "data": list(periods)}
    if message:
        payload["message"] = message
    return payload
