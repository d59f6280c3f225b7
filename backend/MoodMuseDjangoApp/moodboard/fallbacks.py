# Static content served when the completion provider isn't configured at all.
from MoodMuseDjangoApp.llm.images import FALLBACK_IMAGES
from .schema import MoodboardResult, Track, clamp_mood

DEMO_PLAYLIST = [
    Track(name="Holocene", artist="Bon Iver", album="Bon Iver, Bon Iver", duration="5:36"),
    Track(name="Mad World", artist="Gary Jules", album="Donnie Darko Soundtrack", duration="3:07"),
    Track(name="The Night We Met", artist="Lord Huron", album="Strange Trails", duration="3:28"),
    Track(name="Skinny Love", artist="Bon Iver", album="For Emma, Forever Ago", duration="3:58"),
    Track(name="Hurt", artist="Johnny Cash", album="American IV", duration="3:38"),
    Track(name="Black", artist="Pearl Jam", album="Ten", duration="5:43"),
]


def demo_caption(mood: str) -> str:
    return (
        f'Your mood "{mood}" is like a beautiful melody waiting to be discovered. '
        "There's depth in what you're feeling right now."
    )


def demo_moodboard(mood: str) -> MoodboardResult:
    mood = clamp_mood(mood)
    return MoodboardResult(
        original_mood=mood,
        poetic_caption=demo_caption(mood),
        playlist=[t.model_copy() for t in DEMO_PLAYLIST],
        images=list(FALLBACK_IMAGES),
    )
