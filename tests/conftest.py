"""Pytest configuration and fixtures for AI debugger tests."""

import json
from typing import List, Optional, Union

import pytest
from fastapi.testclient import TestClient

from ai_debugger.client.client import DebugClient
from ai_debugger.debugging.gateway import ProviderGateway
from ai_debugger.interfaces.api.main import create_app
from ai_debugger.logging.logger import LoggingConfig
from ai_debugger.prompt.models import PromptModel

VALID_RESULT = {
    "summary": "Guard against division by zero",
    "issues": [{"line": 1, "type": "logic", "explanation": "b may be zero"}],
    "fixes": [
        {
            "line_range": [1, 1],
            "suggested_fix": "function divide(a,b){ if(b===0) throw new Error('div by zero'); return a/b; }",
            "explanation": "Add guard",
        }
    ],
    "confidence": "high",
    "tests_to_run": ["divide(4,2) => 2", "divide(1,0) throws"],
}


class ScriptedPromptModel(PromptModel):
    """Prompt model that replays canned replies and records every call."""

    provider_name = "openai"

    def __init__(self, replies: List[Union[str, Exception, None]]):
        super().__init__("scripted-model")
        self._replies = list(replies)
        self.calls: List[dict] = []

    async def generate_response(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep test output free of request logs."""
    LoggingConfig().enabled = False
    yield
    LoggingConfig().enabled = True


@pytest.fixture
def valid_reply() -> str:
    return json.dumps(VALID_RESULT)


@pytest.fixture
def valid_result() -> dict:
    return json.loads(json.dumps(VALID_RESULT))


@pytest.fixture
def scripted_model():
    """Factory for scripted prompt models."""
    return ScriptedPromptModel


@pytest.fixture
def make_client():
    """Factory building a TestClient around a gateway backed by scripted replies."""

    def _make(replies=None, provider: str = "openai", **kwargs):
        model = ScriptedPromptModel(replies) if replies is not None else None
        app = create_app(gateway=ProviderGateway(model, provider))
        return TestClient(app, **kwargs), model

    return _make


@pytest.fixture
def mock_client():
    """TestClient for an app running without provider credentials."""
    app = create_app(gateway=ProviderGateway(None))
    return TestClient(app)


@pytest.fixture
def debug_client(mock_client):
    """DebugClient talking to the mock-mode app in-process."""
    return DebugClient("http://testserver", http_client=mock_client)
