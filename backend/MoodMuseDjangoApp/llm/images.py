# MoodMuseDjangoApp/llm/images.py

import os
import time
import logging
from typing import Callable, List, Optional

from openai import OpenAI, OpenAIError

from MoodMuseDjangoApp.errors import ProviderError, ProviderErrorKind
from .client import PROVIDER, provider_error_from_openai

log = logging.getLogger(__name__)

OPENAI_IMAGE_MODEL = os.getenv("OPENAI_IMAGE_MODEL", "dall-e-3")
IMAGE_DELAY_SECONDS = float(os.getenv("MOODMUSE_IMAGE_DELAY_SECONDS", "1.0"))
MAX_IMAGES = 4

# One framing per image so a batch is four different takes, not four near-duplicates.
STYLE_TEMPLATES = [
    ("lifestyle", "{prompt}. Pinterest-style lifestyle photography, aesthetic flat lay, cozy atmosphere, "
                  "natural lighting, real objects and spaces that evoke this mood."),
    ("nature", "{prompt}. Beautiful nature photography, landscapes, flowers or natural scenes that capture "
               "this emotional feeling. Pinterest aesthetic, high quality photography."),
    ("interior", "{prompt}. Aesthetic interior design, cozy spaces, room decor or architectural details that "
                 "reflect this mood. Pinterest home decor style, warm and inviting."),
    ("fashion", "{prompt}. Fashion photography, outfit styling, accessories or beauty shots that embody this "
                "emotional state. Pinterest fashion aesthetic, stylish and mood-driven."),
]

FALLBACK_IMAGES = [
    "https://images.unsplash.com/photo-1518837695005-2083093ee35b?w=400&h=400&fit=crop&crop=center",
    "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=400&h=400&fit=crop&crop=center",
    "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=400&h=400&fit=crop&crop=center",
    "https://images.unsplash.com/photo-1511593358241-7eea1f3c84e5?w=400&h=400&fit=crop&crop=center",
]


def styled_prompt(prompt: str, index: int) -> str:
    _, template = STYLE_TEMPLATES[index % len(STYLE_TEMPLATES)]
    return template.format(prompt=prompt)


class ImageClient:
    def __init__(
        self,
        client: Optional[OpenAI],
        *,
        model: str = OPENAI_IMAGE_MODEL,
        delay_seconds: float = IMAGE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.model = model
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def is_configured(self) -> bool:
        return self.client is not None

    def _generate_one(self, prompt: str) -> str:
        try:
            resp = self.client.images.generate(
                model=self.model,
                prompt=prompt,
                n=1,
                size="1024x1024",
                quality="standard",
                style="natural",
            )
        except OpenAIError as e:
            raise provider_error_from_openai(e)
        data = getattr(resp, "data", None) or []
        url = getattr(data[0], "url", None) if data else None
        if not url:
            raise ProviderError.malformed(PROVIDER, ["data[0].url: missing"])
        return url

    def generate(self, prompt: str, count: int = MAX_IMAGES) -> List[str]:
        """
        Up to `count` (max 4) images, one style template each, in generation order.

        A failed attempt is logged and skipped, so a short list is still a success.
        Only a batch with zero images raises NO_IMAGES_GENERATED.
        """
        if not self.is_configured():
            raise ProviderError.unconfigured(PROVIDER, "OPENAI_API_KEY is not set.")

        count = max(0, min(MAX_IMAGES, int(count)))
        if count == 0:
            return []
        urls: List[str] = []
        for i in range(count):
            style_name = STYLE_TEMPLATES[i][0]
            try:
                urls.append(self._generate_one(styled_prompt(prompt, i)))
            except ProviderError as e:
                log.warning("Failed to generate %s image: %s", style_name, e)

            if i < count - 1 and self.delay_seconds > 0:
                self._sleep(self.delay_seconds)

        if not urls:
            raise ProviderError(
                PROVIDER,
                ProviderErrorKind.NO_IMAGES_GENERATED,
                f"Failed to generate any of {count} images",
            )
        return urls
