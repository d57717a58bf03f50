from __future__ import annotations

import logging
import warnings
from typing import Callable

import spotipy
from requests.exceptions import HTTPError, RequestException
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from music_search.config import Settings
from music_search.errors import SearchFetchError, TokenFetchError
from music_search.models import Track

logger = logging.getLogger(__name__)


def _status_of(exc: Exception) -> int | None:
    if isinstance(exc, HTTPError) and exc.response is not None:
        return exc.response.status_code
    if isinstance(exc, SpotifyException):
        return exc.http_status
    return None


class TokenBroker:
    """Obtains a catalog bearer token with server-side client credentials."""

    def __init__(self, settings: Settings) -> None:
        client_id, client_secret = settings.require_catalog_credentials()
        self._credentials = SpotifyClientCredentials(
            client_id=client_id,
            client_secret=client_secret,
            cache_handler=MemoryCacheHandler(),
        )
        self._token: str | None = None

    @property
    def token(self) -> str | None:
        return self._token

    def fetch_token(self) -> str:
        try:
            token = self._credentials.get_access_token(as_dict=False, check_cache=False)
        except (SpotifyOauthError, RequestException) as exc:
            logger.error("Error fetching token: %s", exc)
            raise TokenFetchError() from exc
        if not token:
            logger.error("Error fetching token: empty access_token")
            raise TokenFetchError()
        self._token = token
        logger.info("Fetched catalog token")
        return token


def _default_client(token: str) -> spotipy.Spotify:
    # retries=0: failures surface to the caller immediately.
    return spotipy.Spotify(auth=token, retries=0, status_retries=0)


class SearchClient:
    # Each page advances a full upstream page; only its first rows are shown.
    PAGE_STEP = 20
    DISPLAY_LIMIT = 10
    SEARCH_PAGE_LIMIT = 20

    def __init__(self, client_factory: Callable[[str], spotipy.Spotify] = _default_client) -> None:
        self._client_factory = client_factory

    def search(self, token: str, keyword: str, offset: int = 0) -> list[Track]:
        if offset < 0:
            raise ValueError("offset must be non-negative")
        client = self._client_factory(token)
        try:
            page = client.search(q=keyword, type="track", offset=offset, limit=self.SEARCH_PAGE_LIMIT)
        except (RequestException, SpotifyException) as exc:
            status = _status_of(exc)
            if status == 400:
                warnings.warn(
                    f"Spotify search returned 400 Bad Request (q={keyword!r}, offset={offset}).",
                    RuntimeWarning,
                    stacklevel=2,
                )
            logger.error("Error fetching music data (status=%s): %s", status, exc)
            raise SearchFetchError(status=status) from exc

        items = (page or {}).get("tracks", {}).get("items") or []
        return [Track.from_item(item) for item in items[: self.DISPLAY_LIMIT] if item and item.get("id")]
