"""
Exceptions raised while handling a debug request.

Input problems are raised before any provider call and map onto 4xx
responses. Provider problems cover transport and API failures only; a reply
that cannot be parsed is not an error and is handled by the gateway's repair
pass instead.
"""

from typing import Any, Optional


class DebuggerError(Exception):
    """Base class for debugger errors."""
    pass


class RequestValidationError(DebuggerError):
    """Raised when a debug request is rejected before reaching the provider."""

    status_code = 400

    def __init__(self, message: str = "invalid request body"):
        super().__init__(message)
        self.message = message


class MissingFieldsError(RequestValidationError):
    """Raised when code or language is missing or empty."""

    def __init__(self):
        super().__init__("code and language required")


class CodeTooLargeError(RequestValidationError):
    """Raised when the submitted code exceeds the size limit."""

    status_code = 413

    def __init__(self, length: int, limit: int):
        super().__init__("code too large")
        self.length = length
        self.limit = limit


class ProviderError(DebuggerError):
    """
    Raised when a call to the LLM provider fails at the transport or API level.

    Attributes:
        provider: Name of the provider that was called
        stage: ``first`` for the initial call, ``repair`` for the repair call
        status: HTTP status reported by the provider, if any
        body: Response body reported by the provider, if any
    """

    def __init__(
        self,
        message: str,
        provider: str,
        stage: str = "first",
        status: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.stage = stage
        self.status = status
        self.body = body

    @property
    def error(self) -> str:
        """Short description of which call failed."""
        if self.stage == "repair":
            return "Provider repair call failed"
        return "Provider API call failed"


class IllegalTransitionError(DebuggerError):
    """Raised when a request tries to leave its state along an undefined edge."""

    def __init__(self, current, target):
        super().__init__(f"Illegal gateway transition {current} -> {target}")
        self.current = current
        self.target = target
