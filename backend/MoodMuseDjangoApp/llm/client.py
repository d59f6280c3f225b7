# MoodMuseDjangoApp/llm/client.py
import os
from typing import Any, Dict, Optional

from openai import APIStatusError, OpenAI, OpenAIError

from MoodMuseDjangoApp.errors import ProviderError

PROVIDER = "openai"

OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL")  # optional (Azure/proxy/gateway)


def get_openai_client(
    api_key: Optional[str] = None,
    *,
    base_url: Optional[str] = OPENAI_BASE_URL,
    timeout: Optional[float] = None,
) -> Optional[OpenAI]:
    """
    Build an OpenAI SDK client, or None when no key is available so callers
    can report themselves unconfigured instead of failing at startup.
    SDK-level retries are disabled; each provider call is a single attempt.
    """
    api_key = api_key if api_key is not None else os.getenv("OPENAI_API_KEY")
    if not api_key:
        return None
    kwargs: Dict[str, Any] = {"api_key": api_key, "max_retries": 0}
    if base_url:
        kwargs["base_url"] = base_url
    if timeout:
        kwargs["timeout"] = timeout
    return OpenAI(**kwargs)


def provider_error_from_openai(exc: OpenAIError) -> ProviderError:
    if isinstance(exc, APIStatusError):
        return ProviderError.http(
            PROVIDER,
            exc.status_code,
            payload=exc.body,
            message=f"OpenAI HTTP {exc.status_code}: {exc.message}",
        )
    # connection errors and timeouts carry no status
    return ProviderError.http(PROVIDER, None, message=f"OpenAI request failed: {exc}")
