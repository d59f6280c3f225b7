"""
Process-wide wiring of provider clients.

Clients are built once from the environment and injected into the
orchestrator; views go through get_orchestrator()/get_store() so tests can
swap in fakes.
"""

import os
import logging
from functools import lru_cache
from typing import Optional

from MoodMuseDjangoApp.llm.client import get_openai_client
from MoodMuseDjangoApp.llm.completion import CompletionClient
from MoodMuseDjangoApp.llm.images import ImageClient
from MoodMuseDjangoApp.music.spotify_client import SpotifyCatalogClient
from .orchestrator import MoodboardOrchestrator
from .store import MoodboardStore

log = logging.getLogger(__name__)

PROVIDER_TIMEOUT_SECONDS = float(os.getenv("MOODMUSE_PROVIDER_TIMEOUT_SECONDS", "30"))


def build_orchestrator(
    *,
    openai_api_key: Optional[str] = None,
    spotify_client_id: Optional[str] = None,
    spotify_client_secret: Optional[str] = None,
    timeout: float = PROVIDER_TIMEOUT_SECONDS,
) -> MoodboardOrchestrator:
    openai_client = get_openai_client(openai_api_key, timeout=timeout)
    completion = CompletionClient(openai_client)
    images = ImageClient(openai_client)
    catalog = SpotifyCatalogClient(
        spotify_client_id if spotify_client_id is not None else os.getenv("SPOTIFY_CLIENT_ID"),
        spotify_client_secret if spotify_client_secret is not None else os.getenv("SPOTIFY_CLIENT_SECRET"),
        timeout=timeout,
    )

    if not completion.is_configured():
        log.warning("OpenAI API key not found. Set OPENAI_API_KEY to enable moodboard generation.")
    if not catalog.is_configured():
        log.warning("Spotify credentials not found. Set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET "
                    "to resolve real tracks; AI suggestions will be used instead.")

    return MoodboardOrchestrator(completion, catalog, images)


@lru_cache(maxsize=1)
def get_orchestrator() -> MoodboardOrchestrator:
    return build_orchestrator()


@lru_cache(maxsize=1)
def get_store() -> MoodboardStore:
    return MoodboardStore()
