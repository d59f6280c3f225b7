from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, conlist

MOOD_MAX_LENGTH = 500
PLAYLIST_LENGTH = 6
IMAGE_COUNT = 4

UNKNOWN_ALBUM = "Unknown Album"
PLACEHOLDER_DURATION = "3:30"


def clamp_mood(text: str) -> str:
    """
    Accept a raw mood description: non-blank, at most 500 chars.
    Longer text is cut to 500; nothing else is normalized (no trimming).
    """
    if not isinstance(text, str) or not text.strip():
        raise ValueError("Mood must be a non-empty string.")
    return text[:MOOD_MAX_LENGTH]


class Track(BaseModel):
    """
    A playlist entry. Provider-suggested tracks carry no Spotify fields;
    catalog-resolved ones have spotify_id / spotify_url (preview_url may be null).
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str
    artist: str
    album: str = UNKNOWN_ALBUM
    duration: str = Field(PLACEHOLDER_DURATION, description="m:ss")
    spotify_url: Optional[str] = Field(None, alias="spotifyUrl")
    spotify_id: Optional[str] = Field(None, alias="spotifyId")
    preview_url: Optional[str] = Field(None, alias="previewUrl")

    @classmethod
    def placeholder(cls, name: str, artist: str) -> "Track":
        return cls(name=name, artist=artist, album=UNKNOWN_ALBUM, duration=PLACEHOLDER_DURATION)

    @property
    def is_catalog_resolved(self) -> bool:
        return bool(self.spotify_id or self.spotify_url)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class MoodboardResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original_mood: str = Field(..., alias="originalMood", min_length=1, max_length=MOOD_MAX_LENGTH)
    poetic_caption: str = Field(..., alias="poeticCaption", min_length=1)
    playlist: conlist(Track, max_length=PLAYLIST_LENGTH) = Field(default_factory=list)
    images: conlist(str, max_length=IMAGE_COUNT) = Field(default_factory=list)

    def to_json(self) -> dict:
        return {
            "originalMood": self.original_mood,
            "poeticCaption": self.poetic_caption,
            "playlist": [t.to_json() for t in self.playlist],
            "images": list(self.images),
        }


class SharedMoodboardRecord(MoodboardResult):
    id: str
    created_at: datetime = Field(..., alias="createdAt")
    view_count: int = Field(0, alias="viewCount", ge=0)

    def result(self) -> MoodboardResult:
        return MoodboardResult(
            original_mood=self.original_mood,
            poetic_caption=self.poetic_caption,
            playlist=self.playlist,
            images=self.images,
        )

    def to_json(self) -> dict:
        data = super().to_json()
        data.update({
            "id": self.id,
            "createdAt": self.created_at.isoformat(),
            "viewCount": self.view_count,
        })
        return data
