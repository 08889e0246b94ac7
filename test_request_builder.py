#!/usr/bin/env python3
"""
Tests for the Gemini request builder.
"""

import pytest

from llm_adapter.llm.exceptions import AuthError
from llm_adapter.llm.models import GenerationConfig, LLMMessage
from llm_adapter.llm.providers.gemini import (
    DEFAULT_BASE_URL,
    GeminiProvider,
    build_body,
    system_instruction,
)

MODEL = "gemini-1.5-flash"


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def generation():
    return GenerationConfig(model=MODEL, temperature=0.3, max_tokens=256)


class TestBody:
    """Body construction rules."""

    def test_turns_map_roles_and_skip_system(self, generation):
        messages = [
            LLMMessage.system("Be terse."),
            LLMMessage.user("Hi"),
            LLMMessage.assistant("Hello"),
            LLMMessage.user("Bye"),
        ]
        body = build_body(messages, generation)

        assert body["contents"] == [
            {"role": "user", "parts": [{"text": "Hi"}]},
            {"role": "model", "parts": [{"text": "Hello"}]},
            {"role": "user", "parts": [{"text": "Bye"}]},
        ]

    def test_system_messages_concatenated_in_order(self, generation):
        messages = [
            LLMMessage.system("First."),
            LLMMessage.user("Hi"),
            LLMMessage.system("Second."),
        ]
        body = build_body(messages, generation)

        assert body["systemInstruction"] == {
            "parts": [{"text": "First.\n\nSecond."}]
        }

    def test_only_system_messages(self, generation):
        body = build_body([LLMMessage.system("Rules")], generation)

        assert body["contents"] == []
        assert body["systemInstruction"]["parts"][0]["text"] == "Rules"

    def test_no_system_messages_omits_instruction_key(self, generation):
        body = build_body([LLMMessage.user("Hi")], generation)

        assert "systemInstruction" not in body
        assert system_instruction([LLMMessage.user("Hi")]) == ""

    def test_empty_system_message_omits_instruction(self, generation):
        body = build_body([LLMMessage.system(""), LLMMessage.user("Hi")], generation)
        assert "systemInstruction" not in body

    def test_generation_config_passed_through_verbatim(self):
        generation = GenerationConfig(model=MODEL, temperature=7.5, max_tokens=-1)
        body = build_body([LLMMessage.user("Hi")], generation)

        assert body["generationConfig"]["temperature"] == 7.5
        assert body["generationConfig"]["maxOutputTokens"] == -1

    @pytest.mark.parametrize(
        ("json_mode", "mime_type"),
        [(True, "application/json"), (False, "text/plain")],
    )
    def test_response_mime_type(self, json_mode, mime_type):
        generation = GenerationConfig(model=MODEL, json_mode=json_mode)
        body = build_body([LLMMessage.user("Hi")], generation)

        assert body["generationConfig"]["responseMimeType"] == mime_type


class TestBuildRequest:
    """Endpoint and query selection."""

    def test_non_streaming_endpoint(self, api_key, generation):
        request = GeminiProvider().build_request([LLMMessage.user("Hi")], generation)

        assert request.url == f"{DEFAULT_BASE_URL}/models/{MODEL}:generateContent"
        assert request.params == {"key": api_key}
        assert request.method == "POST"
        assert request.streaming is False

    def test_streaming_endpoint(self, api_key, generation):
        request = GeminiProvider().build_request(
            [LLMMessage.user("Hi")], generation, streaming=True
        )

        assert request.url == f"{DEFAULT_BASE_URL}/models/{MODEL}:streamGenerateContent"
        assert request.params == {"key": api_key, "alt": "sse"}
        assert request.streaming is True

    def test_body_matches_build_body(self, api_key, generation):
        messages = [LLMMessage.system("S"), LLMMessage.user("Hi")]
        request = GeminiProvider().build_request(messages, generation)

        assert request.json == build_body(messages, generation)

    def test_custom_base_url_and_key_env(self, monkeypatch, generation):
        monkeypatch.setenv("MY_GEMINI_KEY", "abc")
        provider = GeminiProvider(
            base_url="http://localhost:8080/v1/", api_key_env="MY_GEMINI_KEY"
        )
        request = provider.build_request([LLMMessage.user("Hi")], generation)

        assert request.url == f"http://localhost:8080/v1/models/{MODEL}:generateContent"
        assert request.params["key"] == "abc"

    def test_missing_api_key_raises_auth_error(self, monkeypatch, generation):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

        with pytest.raises(AuthError) as exc_info:
            GeminiProvider().build_request([LLMMessage.user("Hi")], generation)

        assert exc_info.value.provider == "gemini"
        assert exc_info.value.model == MODEL

    def test_empty_api_key_raises_auth_error(self, monkeypatch, generation):
        monkeypatch.setenv("GOOGLE_API_KEY", "")

        with pytest.raises(AuthError):
            GeminiProvider().build_request(
                [LLMMessage.user("Hi")], generation, streaming=True
            )

    def test_api_key_source_takes_precedence(self, monkeypatch, generation):
        monkeypatch.setenv("GOOGLE_API_KEY", "from-env")
        provider = GeminiProvider(api_key_source=lambda: "from-source")

        request = provider.build_request([LLMMessage.user("Hi")], generation)

        assert request.params["key"] == "from-source"

    def test_api_key_source_failure_gets_model(self, generation):
        def no_key():
            raise AuthError("API key 'CUSTOM' not found", provider="gemini")

        with pytest.raises(AuthError, match="CUSTOM") as exc_info:
            GeminiProvider(api_key_source=no_key).build_request(
                [LLMMessage.user("Hi")], generation
            )

        assert exc_info.value.model == MODEL
