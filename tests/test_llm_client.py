from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from app.config import OpenAIConfig
from app.schemas import ListingInput
from app.services import llm_client
from app.services.llm_client import (
    INTERNAL_EXCEPTION,
    PARSE_ERROR,
    PROVIDER_ERROR,
    request_copy,
)

_URL = "https://api.openai.com/v1/chat/completions"


def _completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture()
def fake_openai(monkeypatch):
    client_cls = MagicMock(name="OpenAI")
    monkeypatch.setattr(llm_client, "OpenAI", client_cls)
    return client_cls


@pytest.fixture()
def config() -> OpenAIConfig:
    return OpenAIConfig(api_key="sk-test")


@pytest.fixture()
def listing() -> ListingInput:
    return ListingInput.model_validate({"address": "123 Main St", "bedrooms": 2, "area": 850})


def _create(fake_openai) -> MagicMock:
    return fake_openai.return_value.chat.completions.create


def test_missing_key_skips_provider(fake_openai, listing) -> None:
    outcome = request_copy(listing, OpenAIConfig(api_key=None))

    assert outcome.status == "missing_key"
    assert outcome.ok is False
    fake_openai.assert_not_called()


def test_successful_completion(fake_openai, config, listing) -> None:
    _create(fake_openai).return_value = _completion(
        'Here you go: {"title": "Cozy 2BR", "texts": {"business": "Facts.", "emotional": "Feelings."}}'
    )

    outcome = request_copy(listing, config, trace_id="abc12345")

    assert outcome.ok
    assert (outcome.title, outcome.business, outcome.emotional) == ("Cozy 2BR", "Facts.", "Feelings.")

    client_kwargs = fake_openai.call_args.kwargs
    assert client_kwargs["api_key"] == "sk-test"
    assert client_kwargs["max_retries"] == 0
    assert client_kwargs["timeout"] == 20.0
    assert "organization" not in client_kwargs
    assert "http_client" not in client_kwargs

    create_kwargs = _create(fake_openai).call_args.kwargs
    assert create_kwargs["model"] == "gpt-4o-mini"
    assert create_kwargs["temperature"] == 0.7
    assert create_kwargs["max_tokens"] == 600
    assert create_kwargs["response_format"] == {"type": "json_object"}
    assert create_kwargs["messages"][0]["role"] == "system"


def test_max_tokens_follow_length(fake_openai, config) -> None:
    _create(fake_openai).return_value = _completion('{"title": "x"}')

    request_copy(ListingInput(length="long"), config)

    assert _create(fake_openai).call_args.kwargs["max_tokens"] == 900


def test_status_error_keeps_http_status(fake_openai, config, listing) -> None:
    response = httpx.Response(500, request=httpx.Request("POST", _URL))
    _create(fake_openai).side_effect = openai.InternalServerError(
        "boom", response=response, body={"message": "upstream exploded"}
    )

    outcome = request_copy(listing, config)

    assert outcome.status == "error"
    assert outcome.error_kind == PROVIDER_ERROR
    assert outcome.http_status == 500
    assert outcome.error == "upstream exploded"


def test_nested_error_body_message(fake_openai, config, listing) -> None:
    response = httpx.Response(401, request=httpx.Request("POST", _URL))
    _create(fake_openai).side_effect = openai.AuthenticationError(
        "denied", response=response, body={"error": {"message": "Incorrect API key provided"}}
    )

    outcome = request_copy(listing, config)

    assert outcome.http_status == 401
    assert outcome.error == "Incorrect API key provided"


def test_timeout_is_a_provider_error(fake_openai, listing) -> None:
    _create(fake_openai).side_effect = openai.APITimeoutError(request=httpx.Request("POST", _URL))

    outcome = request_copy(listing, OpenAIConfig(api_key="sk-test", timeout=7.5))

    assert outcome.error_kind == PROVIDER_ERROR
    assert outcome.http_status is None
    assert outcome.error == "timeout after 7.5s"


def test_connection_error_is_a_provider_error(fake_openai, config, listing) -> None:
    _create(fake_openai).side_effect = openai.APIConnectionError(request=httpx.Request("POST", _URL))

    outcome = request_copy(listing, config)

    assert outcome.error_kind == PROVIDER_ERROR
    assert outcome.error.startswith("connection_error")


def test_empty_content_is_a_provider_error(fake_openai, config, listing) -> None:
    _create(fake_openai).return_value = _completion("   ")

    outcome = request_copy(listing, config)

    assert outcome.error_kind == PROVIDER_ERROR
    assert outcome.error == "empty_response"


def test_unparseable_content_is_a_parse_error(fake_openai, config, listing) -> None:
    _create(fake_openai).return_value = _completion("I cannot help with that.")

    outcome = request_copy(listing, config)

    assert outcome.error_kind == PARSE_ERROR
    assert outcome.http_status is None


def test_unexpected_exception_is_captured(fake_openai, config, listing) -> None:
    _create(fake_openai).side_effect = RuntimeError("socket melted")

    outcome = request_copy(listing, config)

    assert outcome.error_kind == INTERNAL_EXCEPTION
    assert outcome.error == "socket melted"


def test_proxy_client_is_injected_and_closed(monkeypatch, fake_openai, listing) -> None:
    http_client_cls = MagicMock(name="httpx.Client")
    monkeypatch.setattr(llm_client.httpx, "Client", http_client_cls)
    _create(fake_openai).return_value = _completion('{"title": "Loft"}')
    config = OpenAIConfig(api_key="sk-test", proxy="http://proxy.local:3128", organization="org-1")

    outcome = request_copy(listing, config)

    assert outcome.title == "Loft"
    assert http_client_cls.call_args.kwargs["proxy"] == "http://proxy.local:3128"
    assert fake_openai.call_args.kwargs["http_client"] is http_client_cls.return_value
    assert fake_openai.call_args.kwargs["organization"] == "org-1"
    http_client_cls.return_value.close.assert_called_once()
