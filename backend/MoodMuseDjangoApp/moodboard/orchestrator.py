"""
Moodboard pipeline: one completion call, then catalog lookup and image
generation side by side, merged into a MoodboardResult.

Only the completion stage can fail the whole request. Catalog and image
failures are logged and replaced with fallback content; the result carries
no "degraded" marker.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional

from MoodMuseDjangoApp.errors import OrchestrationError, ProviderError
from MoodMuseDjangoApp.llm.completion import CompletionClient
from MoodMuseDjangoApp.llm.completion_schema import CompletionResult, SuggestedTrack
from MoodMuseDjangoApp.llm.images import FALLBACK_IMAGES, ImageClient
from MoodMuseDjangoApp.music.spotify_client import SpotifyCatalogClient
from .schema import IMAGE_COUNT, PLAYLIST_LENGTH, MoodboardResult, Track, clamp_mood

log = logging.getLogger(__name__)

_stage_timeout = os.getenv("MOODMUSE_STAGE_TIMEOUT_SECONDS")
STAGE_TIMEOUT_SECONDS: Optional[float] = float(_stage_timeout) if _stage_timeout else None


def suggestions_as_tracks(suggested: List[SuggestedTrack]) -> List[Track]:
    return [Track.placeholder(s.name, s.artist) for s in suggested][:PLAYLIST_LENGTH]


class MoodboardOrchestrator:
    def __init__(
        self,
        completion: CompletionClient,
        catalog: SpotifyCatalogClient,
        images: ImageClient,
        *,
        stage_timeout: Optional[float] = STAGE_TIMEOUT_SECONDS,
    ):
        self.completion = completion
        self.catalog = catalog
        self.images = images
        self.stage_timeout = stage_timeout

    # ----------- stages -----------

    def _interpret(self, mood: str) -> CompletionResult:
        try:
            return self.completion.analyze(mood)
        except ProviderError as e:
            log.error("Completion stage failed (%s): %s", e.kind.value, e)
            raise OrchestrationError(OrchestrationError.COMPLETION, e) from e

    def build_playlist(self, analysis: CompletionResult) -> List[Track]:
        suggested = list(analysis.suggested_tracks)
        if not self.catalog.is_configured():
            log.warning("Spotify not configured, using AI suggestions")
            return suggestions_as_tracks(suggested)

        try:
            playlist = self.catalog.resolve(suggested)
            if len(playlist) < PLAYLIST_LENGTH:
                playlist += self.catalog.search_by_query(
                    analysis.catalog_query, PLAYLIST_LENGTH - len(playlist)
                )
            return playlist[:PLAYLIST_LENGTH]
        except Exception:
            log.warning("Spotify integration failed, using AI suggestions", exc_info=True)
            return suggestions_as_tracks(suggested)

    def build_images(self, analysis: CompletionResult) -> List[str]:
        try:
            images = self.images.generate(analysis.image_prompt, IMAGE_COUNT)
        except Exception:
            log.warning("Image generation failed, using fallback images", exc_info=True)
            return list(FALLBACK_IMAGES)
        if not images:
            log.warning("Image generation returned nothing, using fallback images")
            return list(FALLBACK_IMAGES)
        return list(images)[:IMAGE_COUNT]

    # ----------- public API -----------

    def create_moodboard(self, mood: str) -> MoodboardResult:
        """
        Raises ValueError for a blank mood and OrchestrationError when the
        completion stage fails; every other failure is absorbed.
        """
        mood = clamp_mood(mood)
        analysis = self._interpret(mood)

        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="moodboard")
        try:
            playlist_future = executor.submit(self.build_playlist, analysis)
            images_future = executor.submit(self.build_images, analysis)

            # both stages share one deadline
            wait([playlist_future, images_future], timeout=self.stage_timeout)

            if playlist_future.done():
                playlist = playlist_future.result()
            else:
                log.warning("Playlist stage exceeded %ss, using AI suggestions", self.stage_timeout)
                playlist = suggestions_as_tracks(list(analysis.suggested_tracks))

            if images_future.done():
                images = images_future.result()
            else:
                log.warning("Image stage exceeded %ss, using fallback images", self.stage_timeout)
                images = list(FALLBACK_IMAGES)
        finally:
            # a timed-out worker keeps running; don't hold the request for it
            executor.shutdown(wait=False)

        return MoodboardResult(
            original_mood=mood,
            poetic_caption=analysis.poetic_caption,
            playlist=playlist,
            images=images,
        )
