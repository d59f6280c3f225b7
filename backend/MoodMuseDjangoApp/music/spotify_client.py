import os
import time
import base64
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests
from django.utils import timezone

from MoodMuseDjangoApp.errors import ProviderError
from MoodMuseDjangoApp.moodboard.schema import Track

log = logging.getLogger(__name__)

PROVIDER = "spotify"

SPOTIFY_API = "https://api.spotify.com/v1"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_OPEN_URL = "https://open.spotify.com/"

CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID")
CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET")

# Pause between per-candidate lookups (rate-limit politeness only)
LOOKUP_DELAY_SECONDS = float(os.getenv("MOODMUSE_CATALOG_DELAY_SECONDS", "0.1"))
TOKEN_SAFETY_MARGIN = timedelta(seconds=60)


def format_duration(ms: Optional[int]) -> str:
    ms = int(ms or 0)
    minutes, rem = divmod(ms, 60_000)
    return f"{minutes}:{rem // 1000:02d}"


def track_from_spotify(item: Dict[str, Any]) -> Track:
    artists = [a.get("name") or "" for a in (item.get("artists") or []) if a.get("name")]
    return Track(
        name=item.get("name") or "",
        artist=", ".join(artists),
        album=(item.get("album") or {}).get("name") or "",
        duration=format_duration(item.get("duration_ms")),
        spotify_url=(item.get("external_urls") or {}).get("spotify"),
        spotify_id=item.get("id"),
        preview_url=item.get("preview_url"),
    )


def playlist_share_url(tracks: Sequence[Track]) -> str:
    ids = [t.spotify_id for t in tracks if t.spotify_id]
    if ids:
        return f"{SPOTIFY_OPEN_URL}playlist/temp?tracks={','.join(ids)}"
    return SPOTIFY_OPEN_URL


# ---------------- credential cache ----------------

@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: datetime

    @classmethod
    def from_payload(cls, payload: Any, now: datetime) -> "AccessToken":
        if not isinstance(payload, dict):
            raise ProviderError.malformed(PROVIDER, ["token response is not a JSON object"], payload=payload)
        value = payload.get("access_token")
        if not isinstance(value, str) or not value:
            raise ProviderError.malformed(PROVIDER, ["access_token: missing"], payload=payload)
        try:
            expires_in = int(payload.get("expires_in", 3600))
        except (TypeError, ValueError):
            raise ProviderError.malformed(PROVIDER, ["expires_in: not an integer"], payload=payload)
        return cls(value=value, expires_at=now + timedelta(seconds=expires_in) - TOKEN_SAFETY_MARGIN)

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at


class TokenCache:
    """
    Holds the current client-credentials token and refreshes it *before* expiry.

    Tokens are immutable; a refresh swaps in a new AccessToken, so a request
    that already attached the old value is unaffected. The lock makes
    concurrent callers share one exchange instead of each re-authenticating.
    """

    def __init__(
        self,
        fetch: Callable[[], Dict[str, Any]],
        *,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self._fetch = fetch
        self._clock = clock
        self._lock = threading.Lock()
        self._token: Optional[AccessToken] = None

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        token = self._token
        return token is not None and token.is_valid(now or self._clock())

    def refresh(self) -> AccessToken:
        payload = self._fetch()
        token = AccessToken.from_payload(payload, self._clock())
        self._token = token
        return token

    def get(self) -> str:
        token = self._token
        if token is not None and token.is_valid(self._clock()):
            return token.value
        with self._lock:
            # another thread may have refreshed while we waited
            token = self._token
            if token is None or not token.is_valid(self._clock()):
                token = self.refresh()
            return token.value


# ---------------- client ----------------

class SpotifyCatalogClient:
    """
    Catalog lookups against the Spotify Web API using the client-credentials
    flow (search only, no user scopes).
    """

    def __init__(
        self,
        client_id: Optional[str] = CLIENT_ID,
        client_secret: Optional[str] = CLIENT_SECRET,
        *,
        timeout: float = 15,
        delay_seconds: float = LOOKUP_DELAY_SECONDS,
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = timezone.now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.delay_seconds = delay_seconds
        self.session = session or requests.Session()
        self._sleep = sleep
        self.tokens = TokenCache(self._request_token, clock=clock)

    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    # ---------------- token / headers ----------------

    def _request_token(self) -> Dict[str, Any]:
        basic = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode()).decode()
        headers = {
            "Authorization": "Basic " + basic,
            "Content-Type": "application/x-www-form-urlencoded",
        }
        try:
            r = self.session.post(
                SPOTIFY_TOKEN_URL,
                data={"grant_type": "client_credentials"},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderError.http(PROVIDER, None, message=f"Spotify auth failed: {e}")
        if r.status_code != 200:
            raise ProviderError.http(PROVIDER, r.status_code, payload=self._safe_json(r),
                                     message=f"Spotify auth HTTP {r.status_code}")
        return self._json_object(r)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.tokens.get()}"}

    # ---------------- core request ----------------

    def _req(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self.is_configured():
            raise ProviderError.unconfigured(PROVIDER, "Server missing SPOTIFY_CLIENT_ID/SECRET.")
        url = f"{SPOTIFY_API}{path}"
        headers = self._headers()
        try:
            r = self.session.request(method, url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ProviderError.http(PROVIDER, None, message=f"Spotify request failed: {e}")
        if r.status_code < 200 or r.status_code >= 300:
            raise ProviderError.http(PROVIDER, r.status_code, payload=self._safe_json(r))
        return self._json_object(r)

    @staticmethod
    def _safe_json(r: requests.Response) -> Any:
        try:
            return r.json()
        except Exception:
            return {"text": r.text}

    @staticmethod
    def _json_object(r: requests.Response) -> Dict[str, Any]:
        try:
            data = r.json()
        except ValueError:
            raise ProviderError.malformed(PROVIDER, ["response body is not JSON"], payload={"text": r.text})
        if not isinstance(data, dict):
            raise ProviderError.malformed(PROVIDER, ["response body is not a JSON object"], payload=data)
        return data

    # ---------------- search ----------------

    def _search_items(self, q: str, limit: int) -> List[Dict[str, Any]]:
        limit = max(1, min(50, limit))
        data = self._req("GET", "/search", params={"q": q, "type": "track", "limit": limit})
        tracks = data.get("tracks") or {}
        items = tracks.get("items") if isinstance(tracks, dict) else None
        if items is not None and not isinstance(items, list):
            raise ProviderError.malformed(PROVIDER, ["tracks.items: not a list"], payload=data)
        return items or []

    def search_track(self, q: str) -> Optional[Dict[str, Any]]:
        items = self._search_items(q, 1)
        return items[0] if items else None

    def search_by_query(self, q: str, limit: int = 6) -> List[Track]:
        """Keyword search. Zero hits is an empty list; a failed call raises ProviderError."""
        if limit <= 0:
            return []
        return [track_from_spotify(t) for t in self._search_items(q, limit) if t]

    def _lookup(self, name: str, artist: str) -> Optional[Dict[str, Any]]:
        hit = self.search_track(f'track:"{name}" artist:"{artist}"')
        if hit is None:
            hit = self.search_track(f"{name} {artist}")
        return hit

    def resolve(self, candidates: Sequence[Any]) -> List[Track]:
        """
        One Track per candidate, same order. Exact field query first, then one
        broad query; a miss or a lookup error keeps the suggestion as a
        placeholder track.
        """
        if not self.is_configured():
            raise ProviderError.unconfigured(PROVIDER, "Server missing SPOTIFY_CLIENT_ID/SECRET.")

        out: List[Track] = []
        for i, cand in enumerate(candidates):
            name, artist = _name_and_artist(cand)
            try:
                hit = self._lookup(name, artist)
            except ProviderError as e:
                log.warning("Failed to find track %r by %r: %s", name, artist, e)
                hit = None

            out.append(track_from_spotify(hit) if hit else Track.placeholder(name, artist))

            if i < len(candidates) - 1 and self.delay_seconds > 0:
                self._sleep(self.delay_seconds)
        return out


def _name_and_artist(cand: Any):
    if isinstance(cand, dict):
        return cand.get("name") or "", cand.get("artist") or ""
    return getattr(cand, "name", "") or "", getattr(cand, "artist", "") or ""
