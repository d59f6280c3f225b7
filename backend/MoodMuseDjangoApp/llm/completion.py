# MoodMuseDjangoApp/llm/completion.py

import os
import re
import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError
from openai import OpenAI, OpenAIError

from MoodMuseDjangoApp.errors import ProviderError
from .client import PROVIDER, provider_error_from_openai
from .completion_schema import CompletionResult

log = logging.getLogger(__name__)


# =============================================================================
# Config
# =============================================================================
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4")
TEMPERATURE = 0.7
MAX_TOKENS = 1200

SYSTEM_MSG = (
    "You are an empathetic AI that creates beautiful, poetic interpretations of human "
    "emotions and suggests matching music and art. Always respond with valid JSON only."
)

USER_PROMPT = "\n".join([
    'A user has described their current mood as: "{mood}"',
    "",
    "Respond with ONE JSON object containing exactly these fields:",
    '1. "poeticCaption": a poetic 1-2 sentence interpretation of the mood, written like the',
    "   user's own inner voice: empathetic, understanding, slightly poetic.",
    '2. "spotifyQuery": a 3-5 word music search query matching this emotional state',
    '   (e.g. "melancholy indie acoustic" or "upbeat nostalgic pop").',
    '3. "visualPrompt": a detailed prompt for AI image generation of abstract, dreamy artwork',
    "   for this mood. Include colors, textures, lighting and artistic style.",
    '4. "suggestedTracks": an array of exactly 6 real songs matching the mood, each an object',
    '   with "name", "artist", "album" and "duration" ("m:ss"). Use songs that exist.',
    "",
    "Rules:",
    "- Respond only with valid JSON, no prose and no code fences.",
    "- Escape quotes inside strings; no trailing commas.",
])


# =============================================================================
# Helpers
# =============================================================================
_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def extract_json_text(maybe: str) -> str:
    """
    Carve the JSON object out of a model reply that may be wrapped in prose
    or code fences: everything from the first '{' through the last '}'.

    No opening brace, no closing brace, or a closing brace that precedes the
    opening one -> MALFORMED_RESPONSE. Partial objects are never repaired.
    """
    text = _FENCE_RE.sub("", (maybe or "").strip())
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ProviderError.malformed(PROVIDER, ["no JSON object in reply"], payload=maybe)
    return text[start : end + 1]


def _validation_problems(ve: ValidationError) -> List[str]:
    problems: List[str] = []
    for err in ve.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        problems.append(f"{loc}: {err.get('msg')}")
    return problems


def parse_completion_text(raw_text: str) -> CompletionResult:
    """Reply text -> CompletionResult, or MALFORMED_RESPONSE naming what failed."""
    body = extract_json_text(raw_text)
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ProviderError.malformed(PROVIDER, [f"invalid JSON: {e.msg}"], payload=body)
    if not isinstance(data, dict):
        raise ProviderError.malformed(PROVIDER, ["reply is not a JSON object"], payload=body)

    try:
        return CompletionResult.model_validate(data)
    except ValidationError as ve:
        raise ProviderError.malformed(PROVIDER, _validation_problems(ve), payload=data)


# =============================================================================
# Client
# =============================================================================
class CompletionClient:
    """
    Mood text -> CompletionResult via OpenAI chat completions.
    Single attempt; retry policy (none) belongs to the caller.
    """

    def __init__(self, client: Optional[OpenAI], *, model: str = OPENAI_MODEL):
        self.client = client
        self.model = model

    def is_configured(self) -> bool:
        return self.client is not None

    def _messages(self, mood: str) -> List[dict]:
        return [
            {"role": "system", "content": SYSTEM_MSG},
            {"role": "user", "content": USER_PROMPT.format(mood=mood)},
        ]

    def _call_chat_completions(self, mood: str) -> str:
        try:
            chat = self.client.chat.completions.create(
                model=self.model,
                messages=self._messages(mood),
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except OpenAIError as e:
            raise provider_error_from_openai(e)

        choices: Any = getattr(chat, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise ProviderError.malformed(PROVIDER, ["empty completion content"])
        return content

    def analyze(self, mood: str) -> CompletionResult:
        if not self.is_configured():
            raise ProviderError.unconfigured(PROVIDER, "OPENAI_API_KEY is not set.")

        raw_text = self._call_chat_completions(mood)
        try:
            return parse_completion_text(raw_text)
        except ProviderError as e:
            log.warning("Completion reply rejected: %s", e)
            log.debug("Rejected completion body: %s", raw_text)
            raise
