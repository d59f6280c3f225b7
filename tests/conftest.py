from types import SimpleNamespace

import httpx
import openai
import pytest
from rest_framework.test import APIClient

from MoodMuseDjangoApp.errors import ProviderError, ProviderErrorKind
from MoodMuseDjangoApp.llm.completion_schema import CompletionResult
from MoodMuseDjangoApp.moodboard.schema import Track


SIX_SUGGESTIONS = [
    {"name": "Holocene", "artist": "Bon Iver", "album": "Bon Iver, Bon Iver", "duration": "5:36"},
    {"name": "Mad World", "artist": "Gary Jules"},
    {"name": "The Night We Met", "artist": "Lord Huron"},
    {"name": "Skinny Love", "artist": "Bon Iver"},
    {"name": "Hurt", "artist": "Johnny Cash"},
    {"name": "Black", "artist": "Pearl Jam"},
]


@pytest.fixture(autouse=True)
def _plain_http(settings):
    settings.SECURE_SSL_REDIRECT = False


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def completion_payload():
    return {
        "poeticCaption": "You're dancing with shadows of memories that were never yours.",
        "spotifyQuery": "nostalgic indie folk",
        "visualPrompt": "Golden hour haze over an empty train platform",
        "suggestedTracks": [dict(t) for t in SIX_SUGGESTIONS],
    }


@pytest.fixture
def analysis(completion_payload):
    return CompletionResult.model_validate(completion_payload)


# ---------------- OpenAI SDK doubles ----------------

def openai_status_error(code: int, url: str = "https://api.openai.com/v1/chat/completions"):
    request = httpx.Request("POST", url)
    return openai.APIStatusError("provider said no", response=httpx.Response(code, request=request), body=None)


def openai_connection_error(url: str = "https://api.openai.com/v1/images/generations"):
    return openai.APIConnectionError(request=httpx.Request("POST", url))


class FakeChatCompletions:
    def __init__(self, content=None, exc=None):
        self.content = content
        self.exc = exc
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeImagesAPI:
    """Each outcome is either a URL string or an exception to raise."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def generate(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes[len(self.calls) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(data=[SimpleNamespace(url=outcome)])


def fake_openai(content=None, exc=None, image_outcomes=()):
    return SimpleNamespace(
        chat=SimpleNamespace(completions=FakeChatCompletions(content, exc)),
        images=FakeImagesAPI(image_outcomes),
    )


# ---------------- orchestrator collaborators ----------------

class FakeCompletion:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def is_configured(self):
        return not (self.error is not None and self.error.kind is ProviderErrorKind.UNCONFIGURED)

    def analyze(self, mood):
        self.calls.append(mood)
        if self.error is not None:
            raise self.error
        return self.result


class FakeCatalog:
    def __init__(self, configured=True, resolved=None, searched=None, resolve_error=None, search_error=None):
        self.configured = configured
        self.resolved = resolved
        self.searched = searched or []
        self.resolve_error = resolve_error
        self.search_error = search_error
        self.search_calls = []

    def is_configured(self):
        return self.configured

    def resolve(self, candidates):
        if self.resolve_error is not None:
            raise self.resolve_error
        if self.resolved is not None:
            return list(self.resolved)
        return [
            Track(name=c.name, artist=c.artist, album="Catalog Album", duration="4:01",
                  spotify_id=f"id-{i}", spotify_url=f"https://open.spotify.com/track/id-{i}")
            for i, c in enumerate(candidates)
        ]

    def search_by_query(self, query, limit):
        self.search_calls.append((query, limit))
        if self.search_error is not None:
            raise self.search_error
        return list(self.searched)[:limit]


class FakeImages:
    def __init__(self, urls=None, error=None):
        self.urls = urls
        self.error = error
        self.calls = []

    def is_configured(self):
        return True

    def generate(self, prompt, count=4):
        self.calls.append((prompt, count))
        if self.error is not None:
            raise self.error
        return list(self.urls or [])


def unconfigured(provider="openai"):
    return ProviderError.unconfigured(provider)
