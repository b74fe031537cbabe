from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

import app.main as main_module
from app.services import llm_client

DESCRIBE = "/api/ai/describe"


@pytest.fixture()
def client() -> TestClient:
    return TestClient(main_module.app)


@pytest.fixture()
def fake_openai(monkeypatch):
    client_cls = MagicMock(name="OpenAI")
    monkeypatch.setattr(llm_client, "OpenAI", client_cls)
    return client_cls


def test_missing_key_serves_fallback(client) -> None:
    resp = client.post(DESCRIBE, json={"address": "123 Main St", "bedrooms": 2, "area": 850})

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["source"] == "fallback"
    assert body["llm_status"] == "missing_key"
    assert body["llm_error"] == "MISSING_API_KEY"
    assert "2" in body["title"] and "850" in body["title"]
    assert body["texts"]["business"]
    assert body["texts"]["emotional"]


def test_malformed_body_is_treated_as_empty(client) -> None:
    resp = client.post(
        DESCRIBE,
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["source"] == "fallback"
    assert body["title"] == "Modern Home"


def test_title_mode_omits_texts(client) -> None:
    resp = client.post(DESCRIBE, json={"mode": "title", "rooms": 3})

    body = resp.json()
    assert body["title"] == "3-Bedroom"
    assert "texts" not in body


def test_provider_failure_reports_status(monkeypatch, client, fake_openai) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    response = httpx.Response(500, request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    fake_openai.return_value.chat.completions.create.side_effect = openai.InternalServerError(
        "boom", response=response, body={"message": "upstream exploded"}
    )

    resp = client.post(DESCRIBE, json={"bedrooms": 2, "area": 850})

    assert resp.status_code == 200
    body = resp.json()
    assert body["source"] == "fallback_llm_error"
    assert body["llm_status"] == "500"
    assert body["llm_error"] == "upstream exploded"
    assert body["title"] == "2-Bedroom 850 ft²"


def test_provider_success_returns_llm_copy(monkeypatch, client, fake_openai) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    content = '{"title": "Cozy 2BR", "texts": {"business": "Facts.", "emotional": "Feelings."}}'
    fake_openai.return_value.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )

    body = client.post(DESCRIBE, json={"bedrooms": 2}).json()

    assert body == {
        "ok": True,
        "source": "llm",
        "llm_status": "ok",
        "title": "Cozy 2BR",
        "texts": {"business": "Facts.", "emotional": "Feelings."},
    }


def test_fatal_failure_returns_500(monkeypatch, client) -> None:
    def explode(*args, **kwargs):
        raise RuntimeError("fallback broke")

    monkeypatch.setattr(main_module, "describe_listing", explode)

    resp = client.post(DESCRIBE, json={})

    assert resp.status_code == 500
    assert resp.json() == {"ok": False, "error": "AI_FATAL"}


def test_oversized_body_is_blocked(client) -> None:
    resp = client.post(
        DESCRIBE,
        content=b"x" * 300_000,
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 413
    body = resp.json()
    assert body["error"] == "REQUEST_BODY_BLOCKED"
    assert body["reason"] == "oversize:300000"


def test_service_info_and_health(client) -> None:
    info = client.get(DESCRIBE)
    assert info.status_code == 200
    assert info.json()["methods"] == ["POST"]
    assert info.json()["path"] == DESCRIBE

    assert client.get("/health").json() == {"ok": True}
    assert client.get("/").json() == {"service": "listing-copy", "ok": True}
    assert client.head("/").status_code == 200


def test_trace_header_echoes_request_id(client) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "abcdef1234"})
    assert resp.headers["X-Request-Trace"] == "abcdef12"

    generated = client.get("/health").headers["X-Request-Trace"]
    assert len(generated) == 8


def test_cors_preflight(client) -> None:
    resp = client.options(
        DESCRIBE,
        headers={
            "Origin": "https://reality.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "POST" in resp.headers["access-control-allow-methods"]


def test_huge_integer_does_not_override_title_mode(client) -> None:
    body = b'{"mode": "title", "address": "123 Main St", "bedrooms": 1' + b"0" * 400 + b"}"

    resp = client.post(DESCRIBE, content=body, headers={"Content-Type": "application/json"})

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["source"] == "fallback"
    assert payload["title"] == "Modern Home in 123 Main St"
    assert "texts" not in payload


def test_service_logs_through_one_named_logger() -> None:
    assert main_module.log.name == "listing-copy"
    assert not hasattr(main_module, "logger")
