import os
import logging
from typing import Callable, Optional

from django.db import IntegrityError, transaction
from django.db.models import F

from MoodMuseDjangoApp.models import SharedMoodboard, gen_moodboard_slug
from .schema import MoodboardResult, SharedMoodboardRecord, Track

log = logging.getLogger(__name__)

BASE_URL = os.getenv("MOODMUSE_BASE_URL", "http://localhost:3000")
MAX_SLUG_ATTEMPTS = 5


def record_from_row(row: SharedMoodboard) -> SharedMoodboardRecord:
    return SharedMoodboardRecord(
        id=row.id,
        original_mood=row.original_mood,
        poetic_caption=row.poetic_caption,
        playlist=[Track.model_validate(t) for t in (row.playlist or [])],
        images=list(row.images or []),
        created_at=row.created_at,
        view_count=row.view_count,
    )


class MoodboardStore:
    """
    Persists MoodboardResults under a generated slug and serves them back.
    Reads have a side effect: each successful get() bumps view_count by one.
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        slug_factory: Callable[[], str] = gen_moodboard_slug,
        max_attempts: int = MAX_SLUG_ATTEMPTS,
    ):
        self.base_url = base_url.rstrip("/")
        self.slug_factory = slug_factory
        self.max_attempts = max(1, max_attempts)

    def is_configured(self) -> bool:
        return True

    def save(self, result: MoodboardResult) -> str:
        data = result.to_json()
        attempt = 0
        while True:
            attempt += 1
            slug = self.slug_factory()
            try:
                with transaction.atomic():
                    SharedMoodboard.objects.create(
                        id=slug,
                        original_mood=data["originalMood"],
                        poetic_caption=data["poeticCaption"],
                        playlist=data["playlist"],
                        images=data["images"],
                        view_count=0,
                    )
            except IntegrityError:
                if attempt >= self.max_attempts:
                    raise
                log.warning("Moodboard slug %s already taken, drawing another (attempt %d)", slug, attempt)
                continue
            log.info("Saved moodboard %s", slug)
            return slug

    def get(self, moodboard_id: str) -> Optional[SharedMoodboardRecord]:
        """None for an unknown id; otherwise the record with its view already counted."""
        updated = SharedMoodboard.objects.filter(pk=moodboard_id).update(view_count=F("view_count") + 1)
        if not updated:
            return None
        row = SharedMoodboard.objects.filter(pk=moodboard_id).first()
        if row is None:
            return None
        return record_from_row(row)

    def share_url(self, moodboard_id: str) -> str:
        return f"{self.base_url}/board/{moodboard_id}"
