"""
Process-wide configuration.

The configuration is read from environment variables once at startup and is
immutable afterwards. The server builds its provider gateway from it and
never consults the environment again while handling requests.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

SUPPORTED_PROVIDERS = ("openai", "groq")

DEFAULT_MODELS: Dict[str, str] = {
    "openai": "gpt-4o-mini",
    "groq": "llama3-70b",
}

PROVIDER_BASE_URLS: Dict[str, Optional[str]] = {
    "openai": None,
    "groq": "https://api.groq.com/openai/v1",
}

MOCK_PROVIDER = "mock"


@dataclass(frozen=True)
class ProviderConfig:
    """Provider selection and credentials."""
    provider: str = "openai"
    api_keys: Mapping[str, str] = field(default_factory=dict)
    model_name: Optional[str] = None
    timeout: float = 60.0  # Seconds per provider call

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProviderConfig":
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Returns:
            A frozen ProviderConfig
        """
        environ = os.environ if environ is None else environ

        api_keys = {}
        if environ.get("OPENAI_API_KEY"):
            api_keys["openai"] = environ["OPENAI_API_KEY"]
        if environ.get("GROQ_API_KEY"):
            api_keys["groq"] = environ["GROQ_API_KEY"]

        return cls(
            provider=(environ.get("OPENAI_PROVIDER") or "openai").strip().lower(),
            api_keys=api_keys,
            model_name=environ.get("MODEL_NAME") or None,
            timeout=float(environ.get("PROVIDER_TIMEOUT_SECONDS") or 60.0),
        )

    @property
    def api_key(self) -> Optional[str]:
        """Credential for the selected provider, if configured."""
        return self.api_keys.get(self.provider)

    @property
    def provider_used(self) -> str:
        """Name of the provider actually in use, ``mock`` when unavailable."""
        if self.provider in SUPPORTED_PROVIDERS and self.api_key:
            return self.provider
        return MOCK_PROVIDER

    @property
    def model(self) -> str:
        """Model name sent to the provider."""
        return self.model_name or DEFAULT_MODELS.get(self.provider, DEFAULT_MODELS["openai"])


@dataclass(frozen=True)
class ServerConfig:
    """Settings for running the HTTP server."""
    host: str = "0.0.0.0"
    port: int = 4000
    reload: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        environ = os.environ if environ is None else environ
        return cls(
            host=environ.get("HOST") or "0.0.0.0",
            port=int(environ.get("PORT") or 4000),
            reload=environ.get("ENV") == "development",
        )


def default_server_url(environ: Optional[Mapping[str, str]] = None) -> str:
    """Base URL the client talks to."""
    environ = os.environ if environ is None else environ
    return environ.get("AI_DEBUGGER_URL") or "http://localhost:4000"
