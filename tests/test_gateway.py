import asyncio

import pytest

from ai_debugger.config import ProviderConfig
from ai_debugger.debugging.exceptions import (
    CodeTooLargeError,
    IllegalTransitionError,
    MissingFieldsError,
    ProviderError,
)
from ai_debugger.debugging.gateway import (
    FIRST_CALL_MAX_TOKENS,
    REPAIR_CALL_MAX_TOKENS,
    DebugTransaction,
    GatewayState,
    ProviderGateway,
    parse_result,
)
from ai_debugger.debugging.models import DebugOutcome, DebugRequest
from ai_debugger.prompt.models import GroqPromptModel, OpenAIPromptModel

REQUEST = DebugRequest(code="print(1/0)", language="python", error_output="ZeroDivisionError")


def run(coro):
    return asyncio.run(coro)


class TestTransaction:

    def test_repair_only_follows_failed_first_parse(self):
        transaction = DebugTransaction(GatewayState.CALLING_FIRST)

        with pytest.raises(IllegalTransitionError):
            transaction.advance(GatewayState.CALLING_REPAIR)

    def test_no_second_repair(self):
        transaction = DebugTransaction(GatewayState.CALLING_FIRST)
        for state in (
            GatewayState.PARSE_FIRST,
            GatewayState.CALLING_REPAIR,
            GatewayState.PARSE_SECOND,
        ):
            transaction.advance(state)

        with pytest.raises(IllegalTransitionError):
            transaction.advance(GatewayState.CALLING_REPAIR)

    def test_terminal_states_have_no_exit(self):
        transaction = DebugTransaction(GatewayState.NO_PROVIDER)
        transaction.advance(GatewayState.MOCK_RETURN)

        with pytest.raises(IllegalTransitionError):
            transaction.advance(GatewayState.CALLING_FIRST)
        assert transaction.history == [GatewayState.NO_PROVIDER, GatewayState.MOCK_RETURN]


class TestParseResult:

    def test_object_parses(self, valid_reply):
        result = parse_result(valid_reply)

        assert result is not None
        assert result.confidence == "high"

    @pytest.mark.parametrize("text", ["", "not json", "```json\n{}\n```", "[1, 2]", '"text"', "42"])
    def test_non_objects_do_not_parse(self, text):
        assert parse_result(text) is None

    def test_deeply_nested_reply_does_not_parse(self):
        assert parse_result("[" * 100_000) is None


class TestGateway:

    def test_mock_mode(self):
        gateway = ProviderGateway(None)

        response = run(gateway.debug(REQUEST))

        assert gateway.mocked
        assert response.outcome == DebugOutcome.MOCKED
        assert response.provider == "mock"
        assert response.calls == 0
        assert response.result.summary == "Mock analysis for python."

    def test_validation_runs_in_mock_mode(self):
        gateway = ProviderGateway(None)

        with pytest.raises(MissingFieldsError):
            run(gateway.debug(DebugRequest(code="", language="python")))
        with pytest.raises(CodeTooLargeError):
            run(gateway.debug(DebugRequest(code="x" * 100_001, language="python")))

    def test_first_call_parameters(self, scripted_model, valid_reply):
        model = scripted_model([valid_reply])

        response = run(ProviderGateway(model, "openai").debug(REQUEST))

        assert response.outcome == DebugOutcome.PARSED_FIRST
        assert response.calls == 1
        call = model.calls[0]
        assert call["temperature"] == 0.0
        assert call["max_tokens"] == FIRST_CALL_MAX_TOKENS
        assert "VALID JSON ONLY" in call["system_prompt"]
        assert "Language: python" in call["user_prompt"]
        assert "print(1/0)" in call["user_prompt"]

    def test_repair_call_embeds_previous_reply(self, scripted_model, valid_reply):
        model = scripted_model(["Here you go: {summary: nope}", valid_reply])

        response = run(ProviderGateway(model, "openai").debug(REQUEST))

        assert response.outcome == DebugOutcome.PARSED_SECOND
        assert response.calls == 2
        repair = model.calls[1]
        assert repair["max_tokens"] == REPAIR_CALL_MAX_TOKENS
        assert repair["temperature"] == 0.0
        assert "Here you go: {summary: nope}" in repair["user_prompt"]
        assert "not valid JSON" in repair["system_prompt"]

    def test_empty_replies_are_unparseable(self, scripted_model):
        model = scripted_model([None, ""])

        response = run(ProviderGateway(model, "openai").debug(REQUEST))

        assert response.outcome == DebugOutcome.UNPARSEABLE
        assert response.result is None
        assert response.raw_attempts == ("", "")

    def test_provider_error_is_tagged_with_stage(self, scripted_model):
        model = scripted_model(["nope", ProviderError("timeout", "openai")])
        gateway = ProviderGateway(model, "groq")

        with pytest.raises(ProviderError) as exc_info:
            run(gateway.debug(REQUEST))

        assert exc_info.value.stage == "repair"
        assert exc_info.value.provider == "groq"
        assert exc_info.value.error == "Provider repair call failed"


class TestFromConfig:

    def test_without_key_is_mock(self):
        gateway = ProviderGateway.from_config(ProviderConfig(provider="openai"))

        assert gateway.mocked
        assert gateway.provider == "mock"

    def test_unknown_provider_is_mock(self):
        config = ProviderConfig(provider="acme", api_keys={"acme": "key"})

        assert ProviderGateway.from_config(config).provider == "mock"

    def test_openai(self):
        config = ProviderConfig(provider="openai", api_keys={"openai": "sk-test"})

        gateway = ProviderGateway.from_config(config)

        assert gateway.provider == "openai"
        assert isinstance(gateway._prompt_model, OpenAIPromptModel)
        assert gateway._prompt_model.model_name == "gpt-4o-mini"

    def test_groq(self):
        config = ProviderConfig(provider="groq", api_keys={"groq": "gsk-test"}, model_name="llama-3.3-70b")

        gateway = ProviderGateway.from_config(config)

        assert gateway.provider == "groq"
        assert isinstance(gateway._prompt_model, GroqPromptModel)
        assert gateway._prompt_model.model_name == "llama-3.3-70b"
