"""Tests for wire API resolution and request URL construction."""
from __future__ import annotations

from types import SimpleNamespace

import pytest

from compat_executor.auth import Auth
from compat_executor.wire_api import (
    CHAT_COMPLETIONS_PATH,
    RESPONSES_PATH,
    WireAPI,
    build_request_url,
    resolve_wire_api,
    suffix_for,
)


@pytest.mark.parametrize(
    ("auth", "expected"),
    [
        pytest.param(None, WireAPI.CHAT, id="nil auth"),
        pytest.param(Auth(), WireAPI.CHAT, id="nil attributes"),
        pytest.param(Auth(attributes={}), WireAPI.CHAT, id="empty attributes"),
        pytest.param(Auth(attributes={"base_url": "https://example.com"}), WireAPI.CHAT, id="wire_api not set"),
        pytest.param(Auth(attributes={"wire_api": "chat"}), WireAPI.CHAT, id="chat"),
        pytest.param(Auth(attributes={"wire_api": "responses"}), WireAPI.RESPONSES, id="responses"),
        pytest.param(Auth(attributes={"wire_api": "  responses  "}), WireAPI.RESPONSES, id="whitespace"),
        pytest.param(Auth(attributes={"wire_api": "\tchat\n"}), WireAPI.CHAT, id="chat with whitespace"),
        pytest.param(Auth(attributes={"wire_api": "invalid"}), WireAPI.CHAT, id="invalid value"),
        pytest.param(Auth(attributes={"wire_api": ""}), WireAPI.CHAT, id="empty value"),
        pytest.param(Auth(attributes={"wire_api": "   "}), WireAPI.CHAT, id="blank value"),
        pytest.param(Auth(attributes={"wire_api": "Responses"}), WireAPI.CHAT, id="case sensitive"),
        pytest.param(Auth(attributes={"wire_api": "RESPONSES"}), WireAPI.CHAT, id="upper case"),
    ],
)
def test_resolve_wire_api(auth, expected):
    assert resolve_wire_api(auth) is expected


def test_resolve_wire_api_accepts_duck_typed_records():
    record = SimpleNamespace(attributes={"wire_api": "responses"})
    assert resolve_wire_api(record) is WireAPI.RESPONSES
    assert resolve_wire_api(SimpleNamespace(attributes=None)) is WireAPI.CHAT
    assert resolve_wire_api(SimpleNamespace()) is WireAPI.CHAT


def test_resolve_wire_api_ignores_non_string_values():
    record = SimpleNamespace(attributes={"wire_api": 42})
    assert resolve_wire_api(record) is WireAPI.CHAT


def test_wire_api_members_compare_as_strings():
    assert WireAPI.CHAT == "chat"
    assert WireAPI.RESPONSES == "responses"
    assert {member.value for member in WireAPI} == {"chat", "responses"}
    assert WireAPI.default() is WireAPI.CHAT


def test_suffix_for_each_variant():
    assert suffix_for(WireAPI.CHAT) == CHAT_COMPLETIONS_PATH == "chat/completions"
    assert suffix_for(WireAPI.RESPONSES) == RESPONSES_PATH == "responses"


@pytest.mark.parametrize(
    ("base_url", "auth", "expected"),
    [
        pytest.param(
            "https://api.openai.com/v1",
            None,
            "https://api.openai.com/v1/chat/completions",
            id="OpenAI chat completions with nil auth",
        ),
        pytest.param(
            "https://openrouter.ai/api/v1",
            Auth(attributes={}),
            "https://openrouter.ai/api/v1/chat/completions",
            id="OpenRouter default chat endpoint",
        ),
        pytest.param(
            "https://api.openai.com/v1",
            Auth(attributes={"wire_api": "responses"}),
            "https://api.openai.com/v1/responses",
            id="OpenAI responses endpoint",
        ),
        pytest.param(
            "https://my-resource.openai.azure.com/openai/deployments/gpt-4/",
            Auth(attributes={"wire_api": "chat"}),
            "https://my-resource.openai.azure.com/openai/deployments/gpt-4/chat/completions",
            id="Azure OpenAI with trailing slash",
        ),
        pytest.param(
            "https://api.together.xyz/v1",
            Auth(attributes={"wire_api": "chat"}),
            "https://api.together.xyz/v1/chat/completions",
            id="Together AI chat endpoint",
        ),
        pytest.param(
            "https://api.fireworks.ai/inference/v1/",
            Auth(attributes={"wire_api": "responses"}),
            "https://api.fireworks.ai/inference/v1/responses",
            id="Fireworks AI responses endpoint with trailing slash",
        ),
        pytest.param(
            "https://api.openai.com/v1",
            Auth(attributes={"wire_api": "invalid"}),
            "https://api.openai.com/v1/chat/completions",
            id="invalid wire_api falls back to chat",
        ),
    ],
)
def test_build_request_url(base_url, auth, expected):
    assert build_request_url(base_url, auth) == expected


@pytest.mark.parametrize("base_url", ["http://localhost:8080", "HTTPS://Example.COM/Path", "not a url"])
def test_build_request_url_extends_base_verbatim(base_url):
    auth = Auth(attributes={"wire_api": "responses"})
    assert build_request_url(base_url, auth) == base_url + "/responses"
    assert build_request_url(base_url + "/", auth) == base_url + "/responses"


def test_build_request_url_does_not_mutate_auth():
    attributes = {"wire_api": " responses "}
    auth = Auth(attributes=attributes)
    build_request_url("https://api.openai.com/v1", auth)
    assert auth.attributes == {"wire_api": " responses "}


def test_auth_records_are_hashable():
    first = Auth(provider="openai", attributes={"wire_api": "responses", "base_url": "https://api.openai.com/v1"})
    second = Auth(provider="openai", attributes={"base_url": "https://api.openai.com/v1", "wire_api": "responses"})

    assert hash(first) == hash(second)
    assert first == second
    assert len({first, second, Auth(), Auth(attributes={})}) == 3
