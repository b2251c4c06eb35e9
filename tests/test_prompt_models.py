import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from ai_debugger.config import ProviderConfig
from ai_debugger.debugging.exceptions import ProviderError
from ai_debugger.prompt.models import GroqPromptModel, OpenAIPromptModel, PromptModelFactory

OPENAI_CONFIG = ProviderConfig(provider="openai", api_keys={"openai": "sk-test"}, timeout=12.5)


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def stub_create(model, handler):
    """Replace the SDK's create call with ``handler``."""
    model._client = SimpleNamespace(
        chat=SimpleNamespace(completions=SimpleNamespace(create=handler))
    )


class TestFactory:

    def test_registered_providers(self):
        assert set(PromptModelFactory.list_providers()) >= {"openai", "groq"}
        assert PromptModelFactory.model("groq") is GroqPromptModel

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            PromptModelFactory.create("acme", OPENAI_CONFIG)

    def test_missing_key(self):
        with pytest.raises(ValueError):
            PromptModelFactory.create("groq", OPENAI_CONFIG)


class TestOpenAIPromptModel:

    def test_client_settings(self):
        model = PromptModelFactory.create("openai", OPENAI_CONFIG)

        assert model._client.max_retries == 0
        assert model._client.timeout == 12.5

    def test_groq_base_url(self):
        config = ProviderConfig(provider="groq", api_keys={"groq": "gsk-test"})

        model = PromptModelFactory.create("groq", config)

        assert str(model._client.base_url).startswith("https://api.groq.com/openai/v1")

    def test_generate_response(self):
        model = OpenAIPromptModel("gpt-4o-mini", OPENAI_CONFIG)
        seen = {}

        async def create(**params):
            seen.update(params)
            return completion('{"summary": "ok"}')

        stub_create(model, create)

        text = asyncio.run(model.generate_response("system", "user", temperature=0.0, max_tokens=900))

        assert text == '{"summary": "ok"}'
        assert seen["model"] == "gpt-4o-mini"
        assert seen["max_tokens"] == 900
        assert seen["temperature"] == 0.0
        assert seen["messages"][0] == {"role": "system", "content": "system"}

    def test_missing_content_is_empty(self):
        model = OpenAIPromptModel("gpt-4o-mini", OPENAI_CONFIG)

        async def create(**params):
            return completion(None)

        stub_create(model, create)

        assert asyncio.run(model.generate_response("s", "u")) == ""

    def test_status_error_is_wrapped(self):
        model = OpenAIPromptModel("gpt-4o-mini", OPENAI_CONFIG)
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(401, request=request)

        async def create(**params):
            raise openai.APIStatusError(
                "Incorrect API key", response=response, body={"error": {"code": "invalid_api_key"}}
            )

        stub_create(model, create)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(model.generate_response("s", "u"))

        assert exc_info.value.status == 401
        assert exc_info.value.body == {"error": {"code": "invalid_api_key"}}
        assert exc_info.value.provider == "openai"

    def test_connection_error_is_wrapped(self):
        model = OpenAIPromptModel("gpt-4o-mini", OPENAI_CONFIG)
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")

        async def create(**params):
            raise openai.APIConnectionError(request=request)

        stub_create(model, create)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(model.generate_response("s", "u"))

        assert exc_info.value.status is None

    def test_rejects_bad_parameters(self):
        model = OpenAIPromptModel("gpt-4o-mini", OPENAI_CONFIG)

        with pytest.raises(ValueError):
            asyncio.run(model.generate_response("s", "u", temperature=1.5))
        with pytest.raises(ValueError):
            asyncio.run(model.generate_response("s", "u", max_tokens=0))
