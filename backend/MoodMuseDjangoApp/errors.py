# MoodMuseDjangoApp/errors.py
from enum import Enum
from typing import Any, List, Optional


class ProviderErrorKind(str, Enum):
    UNCONFIGURED = "unconfigured"
    HTTP = "http"
    MALFORMED_RESPONSE = "malformed_response"
    NO_IMAGES_GENERATED = "no_images_generated"


class ProviderError(RuntimeError):
    """
    Failure of one third-party provider call.

    - UNCONFIGURED: credential missing (expected, not exceptional)
    - HTTP: non-success status; status is None for transport errors / timeouts
    - MALFORMED_RESPONSE: call succeeded but payload broke the schema;
      `problems` lists each missing/invalid field
    - NO_IMAGES_GENERATED: every attempt in an image batch failed
    """

    def __init__(
        self,
        provider: str,
        kind: ProviderErrorKind,
        message: str = "",
        *,
        status: Optional[int] = None,
        problems: Optional[List[str]] = None,
        payload: Any = None,
    ):
        self.provider = provider
        self.kind = kind
        self.status = status
        self.problems = list(problems or [])
        self.payload = payload
        super().__init__(message or self._default_message())

    def _default_message(self) -> str:
        if self.kind is ProviderErrorKind.HTTP:
            return f"{self.provider} HTTP {self.status if self.status is not None else 'transport error'}"
        if self.kind is ProviderErrorKind.MALFORMED_RESPONSE and self.problems:
            return f"{self.provider} returned a malformed response: {'; '.join(self.problems)}"
        return f"{self.provider}: {self.kind.value}"

    @classmethod
    def unconfigured(cls, provider: str, message: str = "") -> "ProviderError":
        return cls(provider, ProviderErrorKind.UNCONFIGURED, message)

    @classmethod
    def http(cls, provider: str, status: Optional[int], payload: Any = None, message: str = "") -> "ProviderError":
        return cls(provider, ProviderErrorKind.HTTP, message, status=status, payload=payload)

    @classmethod
    def malformed(cls, provider: str, problems: List[str], payload: Any = None) -> "ProviderError":
        return cls(provider, ProviderErrorKind.MALFORMED_RESPONSE, problems=problems, payload=payload)

    def as_dict(self) -> dict:
        return {
            "provider": self.provider,
            "kind": self.kind.value,
            "status": self.status,
            "problems": self.problems,
        }


class OrchestrationError(RuntimeError):
    """Moodboard creation failed at a stage that has no fallback."""

    COMPLETION = "completion"

    def __init__(self, stage: str, cause: ProviderError):
        super().__init__(f"Failed to create moodboard at {stage} stage: {cause}")
        self.stage = stage
        self.cause = cause
