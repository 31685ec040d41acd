from __future__ import annotations

import json
import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from drivescore.core.config import settings
from drivescore.core.logging_setup import JsonFormatter
from drivescore.core.observability import setup_observability
from drivescore.main import app


def test_health_sets_request_id_header() -> None:
    client = TestClient(app)
    response = client.get("/health")

    assert response.status_code == 200
    assert response.headers.get("x-request-id")


def test_request_id_is_forwarded_from_header() -> None:
    client = TestClient(app)
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.headers.get("x-request-id") == "req-123"


def test_unhandled_exception_returns_request_id() -> None:
    test_app = FastAPI()
    setup_observability(test_app, settings)

    @test_app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    client = TestClient(test_app)
    response = client.get("/boom", headers={"X-Request-ID": "req-boom"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error", "request_id": "req-boom"}
    assert response.headers.get("x-request-id") == "req-boom"


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="drivescore.services.drive_session",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Drive segment finished",
        args=(),
        exc_info=None,
    )
    record.uid = "u-1"
    record.distance_m = 1234.5

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Drive segment finished"
    assert payload["service"] == "drivescore"
    assert payload["uid"] == "u-1"
    assert payload["distance_m"] == 1234.5
