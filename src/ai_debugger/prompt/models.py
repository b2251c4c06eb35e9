from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from ai_debugger.config import PROVIDER_BASE_URLS, ProviderConfig
from ai_debugger.debugging.exceptions import ProviderError
from ai_debugger.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound="PromptModel")


class PromptModelFactory:
    """
    Factory for creating prompt model instances.

    Maps provider names (as selected by ``OPENAI_PROVIDER``) to the prompt
    model class that talks to that provider.
    """

    _models: Dict[str, Type[T]] = {}

    @classmethod
    def register(cls, *names: str) -> Callable[[Type[T]], Type[T]]:
        """
        Decorator to register a model class with the providers it supports.

        Args:
            *names: Variable number of provider names that this class supports

        Returns:
            Decorator function that registers the model class
        """

        def decorator(model_class: Type[T]) -> Type[T]:
            for name in names:
                cls._models[name] = model_class
            return model_class

        return decorator

    @classmethod
    def model(cls, provider: str) -> Optional[Type[T]]:
        """Get the registered model class for a provider, if any."""
        return cls._models.get(provider)

    @classmethod
    def create(cls, provider: str, config: ProviderConfig, *args: Any, **kwargs: Any) -> T:
        """
        Create and return a prompt model for the given provider.

        Args:
            provider: Name of the provider
            config: Provider configuration holding credentials and model name
            *args: Passed on to the model constructor
            **kwargs: Passed on to the model constructor

        Returns:
            An instance of PromptModel

        Raises:
            ValueError: If the provider is not supported
        """
        if provider not in cls._models:
            raise ValueError(
                f"Unsupported provider: {provider}. "
                f"Supported providers are: {list(cls._models.keys())}"
            )
        return cls._models[provider](config.model, config, *args, **kwargs)

    @classmethod
    def list_providers(cls) -> list[str]:
        """Get a list of all registered provider names."""
        return list(cls._models.keys())


class PromptModel(ABC):
    """
    Abstract base class for all prompt models.

    A prompt model turns a system and user prompt into a text completion.
    Implementations raise ProviderError for transport and API failures and
    never retry on their own.
    """

    provider_name = "unknown"

    def __init__(self, model_name: str):
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        """Get the name of the model being used."""
        return self._model_name

    @abstractmethod
    async def generate_response(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate a response from the model for the given prompts.

        Args:
            system_prompt: The system context/instruction for the model
            user_prompt: The specific user query or instruction
            temperature: Controls randomness in the response (0.0 to 1.0)
            max_tokens: Optional maximum length of the response

        Returns:
            The generated text, or an empty string if the provider sent none

        Raises:
            ProviderError: If the provider call fails
        """
        pass


@PromptModelFactory.register("openai")
class OpenAIPromptModel(PromptModel):
    """OpenAI Chat Completions implementation of the prompt model interface."""

    provider_name = "openai"

    def __init__(self, model_name: str, config: ProviderConfig):
        """
        Initialize the OpenAI prompt model.

        Args:
            model_name: Name of the specific model to use
            config: Provider configuration holding the credential

        Raises:
            ValueError: If no credential is configured for this provider
        """
        from openai import AsyncOpenAI

        super().__init__(model_name)

        api_key = config.api_keys.get(self.provider_name)
        if not api_key:
            error_msg = f"No API key configured for provider '{self.provider_name}'"
            logger.error(error_msg)
            raise ValueError(error_msg)

        client_kwargs = {"api_key": api_key, "timeout": config.timeout, "max_retries": 0}
        base_url = PROVIDER_BASE_URLS.get(self.provider_name)
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = AsyncOpenAI(**client_kwargs)

    async def generate_response(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate a response using the Chat Completions API.

        Raises:
            ValueError: If temperature or max_tokens is out of valid range
            ProviderError: If the API call fails
        """
        import openai

        if not 0.0 <= temperature <= 1.0:
            raise ValueError("Temperature must be between 0.0 and 1.0")

        params = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }

        if max_tokens is not None:
            if max_tokens <= 0:
                raise ValueError("max_tokens must be greater than 0")
            params["max_tokens"] = max_tokens

        try:
            response = await self._client.chat.completions.create(**params)
        except openai.APIStatusError as e:
            logger.error(f"{self.provider_name} API call failed with status {e.status_code}: {e}")
            raise ProviderError(
                str(e), self.provider_name, status=e.status_code, body=e.body
            ) from e
        except openai.APIError as e:
            logger.error(f"{self.provider_name} API call failed: {e}")
            raise ProviderError(
                str(e), self.provider_name, body=getattr(e, "body", None)
            ) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


@PromptModelFactory.register("groq")
class GroqPromptModel(OpenAIPromptModel):
    """
    Groq implementation of the prompt model interface.
    Groq serves an OpenAI-compatible API, so only the base URL differs.
    """

    provider_name = "groq"
