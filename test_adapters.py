"""
Tests for vendor adapters, wire formats and the agent catalog
"""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError, HTTPError

from patchbay.agents import AdapterError, ExternalAdapter
from patchbay.agents.catalog import DEFAULT_AGENTS, build_registry, seed_participants
from patchbay.agents.participants import ParticipantSet
from patchbay.config.settings import Settings
from patchbay.models import AgentStatus, Capability, Role, ViewedMessage
from patchbay.workers.api_worker import AnthropicAdapter, GeminiAdapter, OpenAIAdapter
from patchbay.workers.api_worker.payloads import (
    NO_GEMINI_RESPONSE,
    build_gemini_contents,
    build_openai_messages,
    parse_anthropic_response,
    parse_gemini_response,
    parse_openai_response,
)
from patchbay.workers.bridge_worker import BridgeAdapter

POST = "patchbay.workers.api_worker.base.requests.post"

VIEW = [
    ViewedMessage(role=Role.USER, content="hello"),
    ViewedMessage(role=Role.ASSISTANT, content="hi there"),
    ViewedMessage(role=Role.USER, content="@Beta wrote:\nhey"),
]


class UsageRecorder:
    def __init__(self):
        self.usage = []

    def record_usage(self, agent_id, input_tokens, output_tokens):
        self.usage.append((agent_id, input_tokens, output_tokens))


def _response(data, status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = data
    response.text = json.dumps(data)
    if status >= 400:
        response.raise_for_status.side_effect = HTTPError(response=response)
    return response


def _openai(api_key="sk-test", observer=None):
    return OpenAIAdapter(
        "openai-gpt-5-mini", "GPT-5 Mini", "gpt-5-mini",
        endpoint="http://proxy/api/openai/", api_key=api_key, usage_observer=observer,
    )


# Wire formats

def test_openai_messages_start_with_persona():
    messages = build_openai_messages("persona", VIEW)
    assert messages[0] == {"role": "system", "content": "persona"}
    assert messages[2] == {"role": "assistant", "content": "hi there"}
    assert len(messages) == 4


def test_gemini_contents_prefix_persona_to_first_user_turn():
    contents = build_gemini_contents("persona", VIEW)
    assert contents[0] == {"role": "user", "parts": [{"text": "persona\n\nhello"}]}
    assert contents[1]["role"] == "model"
    assert contents[2]["parts"][0]["text"] == "@Beta wrote:\nhey"


def test_gemini_contents_without_user_turn():
    contents = build_gemini_contents("persona", [ViewedMessage(role=Role.ASSISTANT, content="x")])
    assert contents[0] == {"role": "user", "parts": [{"text": "persona"}]}
    assert contents[1]["role"] == "model"


def test_response_parsers():
    assert parse_openai_response({"choices": [{"message": {"content": "a"}}]}) == "a"
    assert parse_gemini_response({"candidates": [{"content": {"parts": [{"text": "b"}]}}]}) == "b"
    assert parse_gemini_response({"candidates": []}) == NO_GEMINI_RESPONSE
    assert parse_anthropic_response({"content": [{"type": "text", "text": "c"}, {"type": "text", "text": "d"}]}) == "cd"

    with pytest.raises(AdapterError):
        parse_openai_response({"choices": []})
    with pytest.raises(AdapterError):
        parse_anthropic_response({"content": []})


# Direct API adapters

def test_persona_names_the_agent():
    assert _openai().persona_prompt().startswith("You are @GPT-5Mini (GPT-5 Mini).")


def test_openai_adapter_posts_through_proxy():
    observer = UsageRecorder()
    adapter = _openai(observer=observer)
    data = {
        "choices": [{"message": {"content": "reply"}}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 3},
    }

    with patch(POST, return_value=_response(data)) as post:
        reply = asyncio.run(adapter.send_prompt("hello", VIEW))

    assert reply == "reply"
    url = post.call_args.args[0]
    kwargs = post.call_args.kwargs
    assert url == "http://proxy/api/openai/v1/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["json"]["model"] == "gpt-5-mini"
    assert kwargs["json"]["messages"][0]["role"] == "system"
    assert observer.usage == [("openai-gpt-5-mini", 12, 3)]


def test_missing_key_reports_and_fails():
    adapter = _openai(api_key=None)

    assert asyncio.run(adapter.check_status()) == AgentStatus.AUTH_MISSING
    with patch(POST) as post:
        with pytest.raises(AdapterError, match="Missing API Key for GPT-5 Mini"):
            asyncio.run(adapter.send_prompt("hello", VIEW))
    post.assert_not_called()


def test_http_errors_become_adapter_errors():
    adapter = _openai()

    with patch(POST, return_value=_response({"error": "bad key"}, status=401)):
        with pytest.raises(AdapterError, match="OpenAI Error: 401"):
            asyncio.run(adapter.send_prompt("hello", VIEW))

    with patch(POST, side_effect=RequestsConnectionError("refused")):
        with pytest.raises(AdapterError, match="request failed"):
            asyncio.run(adapter.send_prompt("hello", VIEW))


def test_anthropic_adapter_sends_persona_as_system():
    adapter = AnthropicAdapter(
        "anthropic-claude-4.5-haiku", "Claude 4.5 Haiku", "claude-haiku-4-5",
        endpoint="http://proxy/api/anthropic", api_key="ak",
    )
    data = {"content": [{"type": "text", "text": "claude says"}], "usage": {"input_tokens": 1, "output_tokens": 2}}

    with patch(POST, return_value=_response(data)) as post:
        reply = asyncio.run(adapter.send_prompt("hello", VIEW))

    assert reply == "claude says"
    kwargs = post.call_args.kwargs
    assert post.call_args.args[0] == "http://proxy/api/anthropic/v1/messages"
    assert kwargs["headers"]["x-api-key"] == "ak"
    assert kwargs["headers"]["anthropic-version"] == "2023-06-01"
    assert kwargs["json"]["system"].startswith("You are @Claude4.5Haiku")
    assert kwargs["json"]["messages"][0] == {"role": "user", "content": "hello"}


def _gemini(generate):
    adapter = GeminiAdapter(
        "google-gemini-3-flash", "Gemini 3 Flash", "gemini-3-flash-preview",
        endpoint="http://proxy/api/google", api_key="gk", usage_observer=UsageRecorder(),
    )
    client = MagicMock()
    client.aio.models.generate_content = generate
    adapter._client = client
    return adapter


def test_gemini_adapter_uses_async_client():
    response = SimpleNamespace(
        text="gemini says",
        candidates=[SimpleNamespace(finish_reason="STOP")],
        usage_metadata=SimpleNamespace(prompt_token_count=7, candidates_token_count=5),
    )
    generate = AsyncMock(return_value=response)
    adapter = _gemini(generate)

    reply = asyncio.run(adapter.send_prompt("hello", VIEW))

    assert reply == "gemini says"
    kwargs = generate.call_args.kwargs
    assert kwargs["model"] == "gemini-3-flash-preview"
    assert kwargs["contents"][0]["parts"][0]["text"].endswith("\n\nhello")
    assert adapter.usage_observer.usage == [("google-gemini-3-flash", 7, 5)]


def test_gemini_empty_reply_and_failures():
    empty = SimpleNamespace(text=None, candidates=[], usage_metadata=None)
    assert asyncio.run(_gemini(AsyncMock(return_value=empty)).send_prompt("x", VIEW)) == NO_GEMINI_RESPONSE

    broken = _gemini(AsyncMock(side_effect=RuntimeError("socket closed")))
    with pytest.raises(AdapterError, match="Gemini request failed"):
        asyncio.run(broken.send_prompt("x", VIEW))


# Bridge adapter

def _bridge(bridge_url="http://bridge/relay", provider_type="gemini"):
    return BridgeAdapter(
        "bridge-gemini-2.5-flash", "Gemini Bridge", "gemini-2.5-flash",
        endpoint="https://generativelanguage.googleapis.com", api_key="gk",
        provider_type=provider_type, bridge_url=bridge_url,
    )


def test_bridge_wraps_request_in_envelope():
    reply = {"success": True, "data": {"ok": True, "status": 200, "body": {
        "candidates": [{"content": {"parts": [{"text": "via bridge"}]}}],
    }}}

    with patch(POST, return_value=_response(reply)) as post:
        text = asyncio.run(_bridge().send_prompt("hello", VIEW))

    assert text == "via bridge"
    assert post.call_args.args[0] == "http://bridge/relay"
    envelope = post.call_args.kwargs["json"]
    assert envelope["type"] == "API_REQUEST"
    assert envelope["payload"]["url"].endswith("/v1beta/models/gemini-2.5-flash:generateContent?key=gk")
    assert envelope["payload"]["options"]["method"] == "POST"
    assert json.loads(envelope["payload"]["options"]["body"])["contents"][1]["role"] == "model"


def test_bridge_errors():
    failure = {"success": False, "error": {"message": "Extension not connected"}}
    with patch(POST, return_value=_response(failure)):
        with pytest.raises(AdapterError, match="Extension not connected"):
            asyncio.run(_bridge().send_prompt("hello", VIEW))

    not_ok = {"success": True, "data": {"ok": False, "status": 429, "body": {"error": "quota"}}}
    with patch(POST, return_value=_response(not_ok)):
        with pytest.raises(AdapterError, match="gemini Error: 429"):
            asyncio.run(_bridge().send_prompt("hello", VIEW))


def test_bridge_status_and_validation():
    assert _bridge().capability == Capability.REMOTE_BRIDGE
    assert asyncio.run(_bridge().check_status()) == AgentStatus.READY
    assert asyncio.run(_bridge(bridge_url=None).check_status()) == AgentStatus.UNREACHABLE
    with pytest.raises(ValueError):
        _bridge(provider_type="anthropic")


# Catalog

def test_default_registry_from_settings():
    settings = Settings(
        OPENAI_API_KEY="sk", ANTHROPIC_API_KEY=None, BRIDGE_URL=None, PROXY_BASE_URL="http://proxy:3000/",
    )
    registry = build_registry(settings)

    ids = [adapter.id for adapter in registry.list_agents()]
    assert ids[0] == "openai-gpt-5.2-pro"
    assert "bridge-gemini-2.5-flash" not in ids
    assert len(ids) == len(DEFAULT_AGENTS) - 1
    assert isinstance(registry.get_agent("claude-web"), ExternalAdapter)
    assert registry.get_agent("google-gemma-3-27b").endpoint == "http://proxy:3000/api/google"
    assert asyncio.run(registry.get_agent("anthropic-claude-4.5-opus").check_status()) == AgentStatus.AUTH_MISSING


def test_bridge_agent_registered_when_configured():
    registry = build_registry(Settings(BRIDGE_URL="http://bridge/relay"))
    assert registry.get_agent("bridge-gemini-2.5-flash").bridge_url == "http://bridge/relay"


def test_first_dispatchable_agent_seeds_empty_participants():
    registry = build_registry(Settings(BRIDGE_URL=None))
    participants = ParticipantSet(registry)

    seed_participants(participants)
    seed_participants(participants)

    assert participants.ids == ("openai-gpt-5.2-pro",)
