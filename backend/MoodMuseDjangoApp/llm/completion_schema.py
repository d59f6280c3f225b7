from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, conlist


class SuggestedTrack(BaseModel):
    # album/duration are informational; the model often guesses them
    name: str = Field(..., min_length=1)
    artist: str = Field(..., min_length=1)
    album: Optional[str] = None
    duration: Optional[str] = None


class CompletionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    poetic_caption: str = Field(..., alias="poeticCaption", min_length=1, description="1-2 sentence inner-voice caption")
    catalog_query: str = Field(..., alias="spotifyQuery", min_length=1, description="3-5 word music search query")
    image_prompt: str = Field(..., alias="visualPrompt", min_length=1, description="image generation prompt")
    suggested_tracks: conlist(SuggestedTrack, min_length=1) = Field(..., alias="suggestedTracks")
