"""
Data model of a debug request and of the result the provider is asked for.

The provider's reply only follows the result schema by convention, so every
field of DebugResult is optional or defaulted and malformed values are coerced
to the "absent" value of that field instead of failing validation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

MAX_CODE_LENGTH = 100_000


class IssueType(str, Enum):
    """Category of a detected issue."""
    SYNTAX = "syntax"
    LOGIC = "logic"
    DEPENDENCY = "dependency"
    STYLE = "style"
    OTHER = "other"


class Confidence(str, Enum):
    """Model certainty reported with a result."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DebugOutcome(str, Enum):
    """How the structured result of a request was produced."""
    PARSED_FIRST = "parsed_first"
    PARSED_SECOND = "parsed_second"
    UNPARSEABLE = "unparseable"
    MOCKED = "mocked"


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _utf8(text: str) -> str:
    # JSON escapes can decode to lone surrogates, which cannot be re-encoded.
    return text.encode("utf-8", "replace").decode("utf-8")


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return _utf8(value)
    if isinstance(value, (int, float, bool)):
        return str(value)
    return None


def _objects(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, (dict, BaseModel))]


class Issue(BaseModel):
    """A problem the provider found in the code."""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    line: Optional[int] = None
    type: IssueType = IssueType.OTHER
    explanation: str = ""

    @field_validator("line", mode="before")
    @classmethod
    def _coerce_line(cls, v: Any) -> Optional[int]:
        return _optional_int(v)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> IssueType:
        if isinstance(v, IssueType):
            return v
        try:
            return IssueType(str(v).strip().lower())
        except ValueError:
            return IssueType.OTHER

    @field_validator("explanation", mode="before")
    @classmethod
    def _coerce_explanation(cls, v: Any) -> str:
        return _optional_str(v) or ""


class Fix(BaseModel):
    """A suggested replacement for a 1-based inclusive line range."""

    line_range: Optional[Tuple[int, int]] = None
    suggested_fix: str = ""
    explanation: str = ""
    patch: Optional[str] = None

    @field_validator("line_range", mode="before")
    @classmethod
    def _coerce_line_range(cls, v: Any) -> Optional[Tuple[int, int]]:
        if not isinstance(v, (list, tuple)) or len(v) != 2:
            return None
        start, end = _optional_int(v[0]), _optional_int(v[1])
        if start is None or end is None:
            return None
        return start, end

    @field_validator("suggested_fix", "explanation", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return _optional_str(v) or ""

    @field_validator("patch", mode="before")
    @classmethod
    def _coerce_patch(cls, v: Any) -> Optional[str]:
        return _optional_str(v)


class DebugResult(BaseModel):
    """Structured analysis returned by the provider."""

    model_config = ConfigDict(use_enum_values=True)

    summary: Optional[str] = None
    issues: List[Issue] = []
    fixes: List[Fix] = []
    confidence: Optional[Confidence] = None
    tests_to_run: List[str] = []

    @field_validator("summary", mode="before")
    @classmethod
    def _coerce_summary(cls, v: Any) -> Optional[str]:
        return _optional_str(v)

    @field_validator("issues", "fixes", mode="before")
    @classmethod
    def _coerce_objects(cls, v: Any) -> list:
        return _objects(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, v: Any) -> Optional[Confidence]:
        if isinstance(v, Confidence):
            return v
        try:
            return Confidence(str(v).strip().lower())
        except ValueError:
            return None

    @field_validator("tests_to_run", mode="before")
    @classmethod
    def _coerce_tests(cls, v: Any) -> List[str]:
        if not isinstance(v, list):
            return []
        return [_utf8(item) for item in v if isinstance(item, str)]

    @classmethod
    def from_untrusted(cls, data: Any) -> Optional["DebugResult"]:
        """
        Build a result from decoded provider JSON.

        Returns:
            The coerced result, or None if the top level is not an object
        """
        if not isinstance(data, dict):
            return None
        return cls.model_validate(data)


@dataclass(frozen=True)
class DebugRequest:
    """Code submitted for debugging."""
    code: str
    language: str
    error_output: Optional[str] = None


@dataclass(frozen=True)
class ProviderResponse:
    """Outcome of one pass through the provider gateway."""
    outcome: DebugOutcome
    provider: str
    result: Optional[DebugResult] = None
    raw: Optional[str] = None
    raw_attempts: Optional[Tuple[str, str]] = None
    calls: int = 0

    def to_payload(self) -> dict:
        """Response body for a successful ``/api/debug`` call."""
        payload = {
            "success": True,
            "result": self.result.model_dump(mode="json") if self.result is not None else None,
            "debug": self.outcome.value,
            "provider": self.provider,
        }
        if self.raw is not None:
            payload["raw"] = _utf8(self.raw)
        if self.raw_attempts is not None:
            payload["raw_attempts"] = [_utf8(attempt) for attempt in self.raw_attempts]
        return payload
