import threading
import time

import pytest

from MoodMuseDjangoApp.errors import OrchestrationError, ProviderError, ProviderErrorKind
from MoodMuseDjangoApp.llm.images import FALLBACK_IMAGES
from MoodMuseDjangoApp.moodboard.orchestrator import MoodboardOrchestrator
from MoodMuseDjangoApp.moodboard.schema import Track

from conftest import FakeCatalog, FakeCompletion, FakeImages, unconfigured

MOOD = "  I feel nostalgic, like missing someone I never knew  "


def make(analysis, catalog=None, images=None, completion=None, **kw):
    return MoodboardOrchestrator(
        completion or FakeCompletion(result=analysis),
        catalog or FakeCatalog(),
        images or FakeImages(urls=["i1", "i2", "i3", "i4"]),
        **kw,
    )


def test_happy_path(analysis):
    result = make(analysis).create_moodboard(MOOD)

    assert result.original_mood == MOOD
    assert result.poetic_caption == analysis.poetic_caption
    assert [t.name for t in result.playlist] == [t.name for t in analysis.suggested_tracks]
    assert all(t.is_catalog_resolved for t in result.playlist)
    assert result.images == ["i1", "i2", "i3", "i4"]


@pytest.mark.parametrize("error", [
    unconfigured(),
    ProviderError.http("openai", 500),
    ProviderError.malformed("openai", ["visualPrompt: Field required"]),
])
def test_completion_failure_fails_whole_pipeline(analysis, error):
    catalog = FakeCatalog()
    images = FakeImages(urls=["i1"])
    orchestrator = make(analysis, catalog=catalog, images=images, completion=FakeCompletion(error=error))

    with pytest.raises(OrchestrationError) as exc:
        orchestrator.create_moodboard(MOOD)

    assert exc.value.stage == "completion"
    assert exc.value.cause is error
    assert images.calls == []
    assert catalog.search_calls == []


def test_unconfigured_catalog_uses_placeholders(analysis):
    result = make(analysis, catalog=FakeCatalog(configured=False)).create_moodboard(MOOD)

    assert len(result.playlist) == 6
    for track, suggestion in zip(result.playlist, analysis.suggested_tracks):
        assert track.name == suggestion.name
        assert track.album == "Unknown Album"
        assert track.duration == "3:30"
        assert track.spotify_id is None and track.spotify_url is None and track.preview_url is None


def test_catalog_failure_uses_placeholders(analysis):
    catalog = FakeCatalog(resolve_error=ProviderError.http("spotify", 401))
    result = make(analysis, catalog=catalog).create_moodboard(MOOD)
    assert [t for t in result.playlist if t.is_catalog_resolved] == []
    assert len(result.playlist) == 6


def test_short_resolution_is_padded_from_keyword_search(analysis):
    resolved = [Track(name="a", artist="x", spotify_id="r1"), Track(name="b", artist="y", spotify_id="r2")]
    searched = [Track(name=f"s{i}", artist="z", spotify_id=f"s{i}") for i in range(10)]
    catalog = FakeCatalog(resolved=resolved, searched=searched)

    result = make(analysis, catalog=catalog).create_moodboard(MOOD)

    assert catalog.search_calls == [("nostalgic indie folk", 4)]
    assert [t.spotify_id for t in result.playlist] == ["r1", "r2", "s0", "s1", "s2", "s3"]


def test_padding_search_failure_falls_back_to_suggestions(analysis):
    catalog = FakeCatalog(resolved=[Track(name="a", artist="x", spotify_id="r1")],
                          search_error=ProviderError.http("spotify", 503))
    result = make(analysis, catalog=catalog).create_moodboard(MOOD)
    assert [t.name for t in result.playlist] == [s.name for s in analysis.suggested_tracks]


def test_full_resolution_skips_keyword_search(analysis):
    catalog = FakeCatalog()
    make(analysis, catalog=catalog).create_moodboard(MOOD)
    assert catalog.search_calls == []


def test_short_suggestion_list_gives_short_playlist(completion_payload):
    from MoodMuseDjangoApp.llm.completion_schema import CompletionResult

    completion_payload["suggestedTracks"] = completion_payload["suggestedTracks"][:3]
    short = CompletionResult.model_validate(completion_payload)
    result = make(short, catalog=FakeCatalog(configured=False)).create_moodboard(MOOD)
    assert len(result.playlist) == 3


def test_duplicates_are_kept(analysis):
    dup = Track(name="same", artist="x", spotify_id="d")
    catalog = FakeCatalog(resolved=[dup] * 6)
    result = make(analysis, catalog=catalog).create_moodboard(MOOD)
    assert [t.spotify_id for t in result.playlist] == ["d"] * 6


def test_partial_images_are_kept(analysis):
    result = make(analysis, images=FakeImages(urls=["i1", "i3"])).create_moodboard(MOOD)
    assert result.images == ["i1", "i3"]


def test_image_failure_uses_static_set(analysis):
    images = FakeImages(error=ProviderError("openai", ProviderErrorKind.NO_IMAGES_GENERATED))
    result = make(analysis, images=images).create_moodboard(MOOD)
    assert result.images == FALLBACK_IMAGES


def test_empty_image_list_uses_static_set(analysis):
    result = make(analysis, images=FakeImages(urls=[])).create_moodboard(MOOD)
    assert result.images == FALLBACK_IMAGES


def test_every_downstream_failure_still_gives_full_result(analysis):
    catalog = FakeCatalog(resolve_error=RuntimeError("boom"))
    images = FakeImages(error=RuntimeError("boom"))
    result = make(analysis, catalog=catalog, images=images).create_moodboard(MOOD)

    assert result.poetic_caption
    assert len(result.playlist) == 6
    assert result.images == FALLBACK_IMAGES


def test_downstream_stages_run_concurrently(analysis):
    both_started = threading.Barrier(2, timeout=2)

    class WaitingCatalog(FakeCatalog):
        def resolve(self, candidates):
            both_started.wait()
            return super().resolve(candidates)

    class WaitingImages(FakeImages):
        def generate(self, prompt, count=4):
            both_started.wait()
            return super().generate(prompt, count)

    result = make(analysis, catalog=WaitingCatalog(), images=WaitingImages(urls=["i1"])).create_moodboard(MOOD)

    # a sequential run would break the barrier and fall back
    assert result.images == ["i1"]
    assert all(t.is_catalog_resolved for t in result.playlist)


def test_stage_timeout_uses_fallback(analysis):
    release = threading.Event()

    class SlowImages(FakeImages):
        def generate(self, prompt, count=4):
            release.wait(timeout=2)
            return ["late"]

    started = time.monotonic()
    result = make(analysis, images=SlowImages(), stage_timeout=0.2).create_moodboard(MOOD)
    release.set()

    assert result.images == FALLBACK_IMAGES
    assert time.monotonic() - started < 1.5


def test_stage_timeout_is_one_deadline_for_both_stages(analysis):
    release = threading.Event()

    class SlowCatalog(FakeCatalog):
        def resolve(self, candidates):
            release.wait(timeout=3)
            return super().resolve(candidates)

    class SlowImages(FakeImages):
        def generate(self, prompt, count=4):
            release.wait(timeout=3)
            return ["late"]

    started = time.monotonic()
    result = make(analysis, catalog=SlowCatalog(), images=SlowImages(), stage_timeout=0.4).create_moodboard(MOOD)
    elapsed = time.monotonic() - started
    release.set()

    assert result.images == FALLBACK_IMAGES
    assert [t.name for t in result.playlist] == [s.name for s in analysis.suggested_tracks]
    assert not any(t.is_catalog_resolved for t in result.playlist)
    assert elapsed < 0.75


def test_mood_is_clamped_to_500_chars(analysis):
    completion = FakeCompletion(result=analysis)
    result = make(analysis, completion=completion).create_moodboard("x" * 600)
    assert result.original_mood == "x" * 500
    assert completion.calls == ["x" * 500]


def test_blank_mood_is_rejected(analysis):
    with pytest.raises(ValueError):
        make(analysis).create_moodboard("   ")
