"""
Provider gateway: forwards a debug request to the LLM provider.

Each request walks a small state machine. The first reply is parsed as JSON;
if that fails the provider is asked once to reformat its reply, and if the
second reply does not parse either both raw texts are handed back. Transport
and API failures abort the request on the spot and never trigger the repair
pass.

    NO_PROVIDER -> MOCK_RETURN
    CALLING_FIRST -> PARSE_FIRST -> PARSED
                                 -> CALLING_REPAIR -> PARSE_SECOND -> PARSED
                                                                   -> UNPARSEABLE
"""

import json
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from ai_debugger.config import MOCK_PROVIDER, ProviderConfig
from ai_debugger.debugging.exceptions import (
    CodeTooLargeError,
    IllegalTransitionError,
    MissingFieldsError,
    ProviderError,
)
from ai_debugger.debugging.models import (
    MAX_CODE_LENGTH,
    Confidence,
    DebugOutcome,
    DebugRequest,
    DebugResult,
    Fix,
    Issue,
    IssueType,
    ProviderResponse,
)
from ai_debugger.debugging.prompts import Prompts, build_prompts, build_repair_prompts
from ai_debugger.logging.logger import get_logger
from ai_debugger.prompt.models import PromptModel, PromptModelFactory

logger = get_logger(__name__)

FIRST_CALL_MAX_TOKENS = 900
REPAIR_CALL_MAX_TOKENS = 700
TEMPERATURE = 0.0


class GatewayState(str, Enum):
    """States of a single request passing through the gateway."""
    NO_PROVIDER = "no_provider"
    MOCK_RETURN = "mock_return"
    CALLING_FIRST = "calling_first"
    PARSE_FIRST = "parse_first"
    CALLING_REPAIR = "calling_repair"
    PARSE_SECOND = "parse_second"
    PARSED = "parsed"
    UNPARSEABLE = "unparseable"


TRANSITIONS: Dict[GatewayState, FrozenSet[GatewayState]] = {
    GatewayState.NO_PROVIDER: frozenset({GatewayState.MOCK_RETURN}),
    GatewayState.CALLING_FIRST: frozenset({GatewayState.PARSE_FIRST}),
    GatewayState.PARSE_FIRST: frozenset({GatewayState.PARSED, GatewayState.CALLING_REPAIR}),
    GatewayState.CALLING_REPAIR: frozenset({GatewayState.PARSE_SECOND}),
    GatewayState.PARSE_SECOND: frozenset({GatewayState.PARSED, GatewayState.UNPARSEABLE}),
    GatewayState.MOCK_RETURN: frozenset(),
    GatewayState.PARSED: frozenset(),
    GatewayState.UNPARSEABLE: frozenset(),
}


class DebugTransaction:
    """Tracks the state of one request and the raw replies it collected."""

    def __init__(self, initial: GatewayState):
        self.state = initial
        self.history: List[GatewayState] = [initial]
        self.replies: List[str] = []

    def advance(self, target: GatewayState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise IllegalTransitionError(self.state, target)
        self.state = target
        self.history.append(target)


def validate_request(request: DebugRequest) -> None:
    """
    Reject requests that must never reach the provider.

    Raises:
        MissingFieldsError: If code or language is missing or empty
        CodeTooLargeError: If the code is longer than MAX_CODE_LENGTH characters
    """
    if not request.code or not request.language:
        raise MissingFieldsError()
    if len(request.code) > MAX_CODE_LENGTH:
        raise CodeTooLargeError(len(request.code), MAX_CODE_LENGTH)


def parse_result(text: str) -> Optional[DebugResult]:
    """Parse a provider reply, returning None unless it is a JSON object."""
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return DebugResult.from_untrusted(data)


def build_mock_result(language: str) -> DebugResult:
    """Fixed result returned when no provider credential is configured."""
    return DebugResult(
        summary=f"Mock analysis for {language}.",
        issues=[Issue(line=1, type=IssueType.LOGIC, explanation="Potential divide by zero.")],
        fixes=[
            Fix(
                line_range=(1, 3),
                suggested_fix=(
                    "function safeDivide(a,b){ if(b===0) throw new Error('div by zero'); "
                    "return a/b; }"
                ),
                explanation="Add guard for b === 0",
            )
        ],
        confidence=Confidence.MEDIUM,
        tests_to_run=[
            "Call safeDivide(4,2) -> expect 2",
            "Call safeDivide(1,0) -> expect error",
        ],
    )


class ProviderGateway:
    """
    Stateless pass-through to the configured provider.

    A gateway without a prompt model runs in mock mode. Every request makes at
    most two provider calls, and they are made one after the other.
    """

    def __init__(self, prompt_model: Optional[PromptModel], provider: str = MOCK_PROVIDER):
        """
        Initialize the gateway.

        Args:
            prompt_model: Model used to reach the provider, None for mock mode
            provider: Name reported back to clients
        """
        self._prompt_model = prompt_model
        self._provider = provider if prompt_model is not None else MOCK_PROVIDER

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "ProviderGateway":
        """Build the gateway for the provider selected in the configuration."""
        provider = config.provider_used
        if provider == MOCK_PROVIDER:
            logger.warning(
                f"No API key configured for provider '{config.provider}', using mock responses"
            )
            return cls(None)

        prompt_model = PromptModelFactory.create(provider, config)
        logger.info(f"Using provider '{provider}' with model '{prompt_model.model_name}'")
        return cls(prompt_model, provider)

    @property
    def provider(self) -> str:
        """Name of the provider in use, ``mock`` in mock mode."""
        return self._provider

    @property
    def mocked(self) -> bool:
        return self._prompt_model is None

    async def debug(self, request: DebugRequest) -> ProviderResponse:
        """
        Run a debug request through the provider.

        Args:
            request: The code, language and optional error output

        Returns:
            The parsed result or the raw replies, tagged with how they were produced

        Raises:
            MissingFieldsError: If code or language is missing
            CodeTooLargeError: If the code exceeds the size limit
            ProviderError: If a provider call fails
        """
        validate_request(request)

        if self._prompt_model is None:
            transaction = DebugTransaction(GatewayState.NO_PROVIDER)
            transaction.advance(GatewayState.MOCK_RETURN)
            return ProviderResponse(
                outcome=DebugOutcome.MOCKED,
                provider=self._provider,
                result=build_mock_result(request.language),
            )

        transaction = DebugTransaction(GatewayState.CALLING_FIRST)

        prompts = build_prompts(request.language, request.code, request.error_output)
        first_text = await self._call(transaction, prompts, FIRST_CALL_MAX_TOKENS, "first")
        transaction.advance(GatewayState.PARSE_FIRST)

        result = parse_result(first_text)
        if result is not None:
            transaction.advance(GatewayState.PARSED)
            logger.info("Provider reply parsed on first attempt")
            return ProviderResponse(
                outcome=DebugOutcome.PARSED_FIRST,
                provider=self._provider,
                result=result,
                raw=first_text,
                calls=len(transaction.replies),
            )

        logger.warning("Provider reply was not valid JSON, requesting a repair")
        transaction.advance(GatewayState.CALLING_REPAIR)
        second_text = await self._call(
            transaction, build_repair_prompts(first_text), REPAIR_CALL_MAX_TOKENS, "repair"
        )
        transaction.advance(GatewayState.PARSE_SECOND)

        result = parse_result(second_text)
        if result is not None:
            transaction.advance(GatewayState.PARSED)
            logger.info("Provider reply parsed after repair")
            return ProviderResponse(
                outcome=DebugOutcome.PARSED_SECOND,
                provider=self._provider,
                result=result,
                raw=second_text,
                calls=len(transaction.replies),
            )

        transaction.advance(GatewayState.UNPARSEABLE)
        logger.warning("Provider reply could not be parsed after repair")
        return ProviderResponse(
            outcome=DebugOutcome.UNPARSEABLE,
            provider=self._provider,
            raw_attempts=(first_text, second_text),
            calls=len(transaction.replies),
        )

    async def _call(
        self, transaction: DebugTransaction, prompts: Prompts, max_tokens: int, stage: str
    ) -> str:
        try:
            text = await self._prompt_model.generate_response(
                system_prompt=prompts.system,
                user_prompt=prompts.user,
                temperature=TEMPERATURE,
                max_tokens=max_tokens,
            )
        except ProviderError as e:
            e.provider = self._provider
            e.stage = stage
            raise

        text = text or ""
        transaction.replies.append(text)
        return text
