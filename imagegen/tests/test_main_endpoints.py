"""Tests covering the FastAPI routes defined in :mod:`imagegen.main`."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))
from imagegen.aiservices.huggingfaceimagegenerationclient import HuggingFaceImageGenerationClient
from imagegen.config import Settings, get_settings
from imagegen.main import app
from imagegen.service import ImageGenerationService, get_image_generation_service

PNG_BYTES = b"\x89PNG\r\n\x1a\nstub-image-bytes"


class UpstreamStub:
    """Stands in for the Hugging Face Inference API behind an ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.content = PNG_BYTES
        self.headers: Dict[str, str] = {"Content-Type": "image/png"}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.content, headers=self.headers)

    def fail(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.content = body.encode("utf-8")
        self.headers = {"Content-Type": "text/plain"}


class ExplodingService:
    def generate(self, body: Any):  # pragma: no cover - exercised via API
        raise RuntimeError("unexpected failure")


def _settings(token: str = "test-token") -> Settings:
    return Settings(hf_token=token, _env_file=None)


def _valid_body(**overrides: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "model": "flux",
        "prompt": "A luxury perfume bottle on a marble surface",
        "negative_prompt": "blurry",
        "width": 768,
        "height": 1024,
        "steps": 20,
        "guidance_scale": 3.5,
    }
    body.update(overrides)
    return body


def _build_client(upstream: UpstreamStub, token: str = "test-token", service: Optional[Any] = None) -> TestClient:
    settings = _settings(token)
    if service is None:
        service = ImageGenerationService(
            settings,
            client=HuggingFaceImageGenerationClient(settings, transport=httpx.MockTransport(upstream)),
        )
    app.dependency_overrides[get_image_generation_service] = lambda: service
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
def client(upstream):
    """Yield a :class:`TestClient` whose upstream calls hit :class:`UpstreamStub`."""

    with _build_client(upstream) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_client(upstream):
    with _build_client(upstream, token="") as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_healthcheck_reports_models_and_token_state(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "models": ["flux", "sdxl"], "tokenConfigured": True}


def test_healthcheck_reports_missing_token(unconfigured_client: TestClient) -> None:
    response = unconfigured_client.get("/health")

    assert response.status_code == 200
    assert response.json()["tokenConfigured"] is False


def test_models_endpoint_lists_catalog_defaults(client: TestClient) -> None:
    response = client.get("/api/models")

    assert response.status_code == 200
    payload = response.json()
    assert payload["default_model"] == "flux"
    by_id = {model["id"]: model for model in payload["models"]}
    assert by_id["flux"]["repo_id"] == "black-forest-labs/FLUX.1-schnell"
    assert by_id["flux"]["steps"] == 20
    assert by_id["sdxl"]["guidance_scale"] == 7.5


@pytest.mark.parametrize("field", ["model", "prompt", "width", "height", "steps", "guidance_scale"])
def test_generate_rejects_missing_field_without_calling_upstream(
    client: TestClient, upstream: UpstreamStub, field: str
) -> None:
    body = _valid_body()
    del body[field]

    response = client.post("/api/generate", json=body)

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "Missing required fields"
    assert field in payload["details"]
    assert upstream.requests == []


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("model", None),
        ("prompt", None),
        ("width", None),
        ("height", None),
        ("steps", None),
        ("guidance_scale", None),
        ("model", ""),
    ],
)
def test_generate_treats_null_and_blank_fields_as_missing(
    client: TestClient, upstream: UpstreamStub, field: str, value: Any
) -> None:
    response = client.post("/api/generate", json=_valid_body(**{field: value}))

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "Missing required fields"
    assert payload["details"] == f"Missing: {field}"
    assert upstream.requests == []


def test_generate_treats_blank_prompt_as_missing(client: TestClient, upstream: UpstreamStub) -> None:
    response = client.post("/api/generate", json=_valid_body(prompt="   "))

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"
    assert upstream.requests == []


@pytest.mark.parametrize(
    ("field", "value"),
    [("width", 300), ("height", 2048), ("steps", 0), ("steps", 51), ("guidance_scale", 25.0)],
)
def test_generate_rejects_out_of_range_values(
    client: TestClient, upstream: UpstreamStub, field: str, value: Any
) -> None:
    response = client.post("/api/generate", json=_valid_body(**{field: value}))

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "Invalid request fields"
    assert field in payload["details"]
    assert upstream.requests == []


def test_generate_rejects_unknown_model(client: TestClient, upstream: UpstreamStub) -> None:
    response = client.post("/api/generate", json=_valid_body(model="dalle"))

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "Invalid model specified"
    assert "dalle" in payload["details"]
    assert upstream.requests == []


def test_generate_rejects_malformed_json(client: TestClient, upstream: UpstreamStub) -> None:
    response = client.post(
        "/api/generate",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["details"] == "Request body must be valid JSON"
    assert upstream.requests == []


def test_generate_requires_configured_token(unconfigured_client: TestClient, upstream: UpstreamStub) -> None:
    response = unconfigured_client.post("/api/generate", json=_valid_body())

    assert response.status_code == 500
    assert response.json() == {"error": "HF_TOKEN not configured", "details": None}
    assert upstream.requests == []


def test_generate_relays_upstream_image_bytes(client: TestClient, upstream: UpstreamStub) -> None:
    response = client.post("/api/generate", json=_valid_body())

    assert response.status_code == 200
    assert response.content == PNG_BYTES
    assert response.headers["content-type"] == "image/png"
    assert response.headers["content-length"] == str(len(PNG_BYTES))
    assert len(upstream.requests) == 1


def test_generate_forwards_shaped_payload_with_credentials(client: TestClient, upstream: UpstreamStub) -> None:
    client.post("/api/generate", json=_valid_body(model="sdxl", negative_prompt=""))

    request = upstream.requests[0]
    assert str(request.url) == (
        "https://api-inference.huggingface.co/models/stabilityai/stable-diffusion-xl-base-1.0"
    )
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.headers["Accept"] == "image/png"
    assert json.loads(request.content) == {
        "inputs": "A luxury perfume bottle on a marble surface",
        "parameters": {
            "negative_prompt": "low quality, blurry, watermark, text",
            "width": 768,
            "height": 1024,
            "num_inference_steps": 20,
            "guidance_scale": 3.5,
        },
    }


def test_generate_passes_through_upstream_failure(client: TestClient, upstream: UpstreamStub) -> None:
    upstream.fail(503, "Model black-forest-labs/FLUX.1-schnell is currently loading")

    response = client.post("/api/generate", json=_valid_body())

    assert response.status_code == 503
    payload = response.json()
    assert payload["error"] == "Hugging Face API error: 503"
    assert "currently loading" in payload["details"]


def test_generate_does_not_log_upstream_errors_as_rejected_requests(
    client: TestClient, upstream: UpstreamStub, caplog: pytest.LogCaptureFixture
) -> None:
    upstream.fail(429, "Rate limit reached")

    with caplog.at_level(logging.INFO):
        response = client.post("/api/generate", json=_valid_body())

    assert response.status_code == 429
    messages = [record.getMessage() for record in caplog.records]
    assert not any("Rejected generation request" in message for message in messages)
    assert any(message.startswith("HF API Error: 429") for message in messages)


def test_generate_reports_unexpected_errors_generically(upstream: UpstreamStub) -> None:
    with _build_client(upstream, service=ExplodingService()) as test_client:
        response = test_client.post("/api/generate", json=_valid_body())

    app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "details": None}


def test_generate_reports_unreachable_upstream_generically(upstream: UpstreamStub) -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    settings = _settings()
    service = ImageGenerationService(
        settings,
        client=HuggingFaceImageGenerationClient(settings, transport=httpx.MockTransport(_refuse)),
    )
    with _build_client(upstream, service=service) as test_client:
        response = test_client.post("/api/generate", json=_valid_body())

    app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"
