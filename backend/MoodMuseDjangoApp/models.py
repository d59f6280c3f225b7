import random

from django.db import models
from django.core.validators import MinValueValidator


# ---- ID generation: "{adjective}-{noun}-{1..999}" share slugs ----
SLUG_ADJECTIVES = [
    "dreamy", "cosmic", "ethereal", "vibrant", "serene",
    "mystic", "golden", "velvet", "crystal", "lunar",
]
SLUG_NOUNS = [
    "melody", "whisper", "echo", "rhythm", "harmony",
    "breeze", "glow", "spark", "wave", "muse",
]
SLUG_MAX_NUMBER = 999

_rng = random.SystemRandom()


def gen_moodboard_slug(rng: random.Random = _rng) -> str:
    """
    Short, human-readable id used both as primary key and share-link path.
    10 * 10 * 999 combinations; uniqueness is enforced at insert time.
    """
    adjective = rng.choice(SLUG_ADJECTIVES)
    noun = rng.choice(SLUG_NOUNS)
    number = rng.randint(1, SLUG_MAX_NUMBER)
    return f"{adjective}-{noun}-{number}"


class SharedMoodboard(models.Model):
    """
    A saved moodboard, retrievable by its slug. Rows are never deleted by the app;
    view_count goes up by one on every successful read.
    """
    id = models.CharField(primary_key=True, max_length=40, default=gen_moodboard_slug, editable=False)

    original_mood = models.CharField(max_length=500)
    poetic_caption = models.TextField()

    # ordered lists; order is meaningful and must survive a round trip
    playlist = models.JSONField(default=list, blank=True)   # array of track objects
    images = models.JSONField(default=list, blank=True)     # array of image URLs

    view_count = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "moodboards"
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(original_mood=""),
                name="moodboard_mood_not_empty",
            ),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.id} (views:{self.view_count})"
