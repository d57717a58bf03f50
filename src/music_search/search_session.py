"""Client-side search state: keyword, pagination cursor and the current page.

Every issued search is numbered. A response is applied only when it belongs
to the most recent search, so a slow earlier response can never overwrite a
later one.
"""
from __future__ import annotations

import logging

from music_search.errors import SearchFetchError
from music_search.models import Track
from music_search.spotify_service import SearchClient

logger = logging.getLogger(__name__)


class SearchSession:
    def __init__(self, client: SearchClient, token: str | None = None) -> None:
        self.client = client
        self.token = token
        self.keyword = ""
        self.offset = 0
        self.results: list[Track] = []
        self.has_searched = False
        self.message = ""
        self.is_loading = False
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def can_go_previous(self) -> bool:
        return self.offset != 0

    @property
    def show_pagination(self) -> bool:
        return self.has_searched and len(self.results) > 0

    @property
    def page_labels(self) -> tuple[str, str]:
        page = self.offset // SearchClient.PAGE_STEP
        return f"Previous Page: {page}", f"Next Page: {page + 2}"

    def begin(self) -> int:
        self._generation += 1
        self.results = []
        self.message = ""
        self.is_loading = True
        return self._generation

    def complete(self, generation: int, tracks: list[Track]) -> bool:
        if generation != self._generation:
            logger.debug("Discarding stale search response %d (latest %d)", generation, self._generation)
            return False
        self.results = list(tracks[: SearchClient.DISPLAY_LIMIT])
        self.has_searched = True
        self.is_loading = False
        return True

    def fail(self, generation: int, error: SearchFetchError) -> bool:
        if generation != self._generation:
            logger.debug("Discarding stale search failure %d (latest %d)", generation, self._generation)
            return False
        self.results = []
        self.message = error.message
        self.has_searched = True
        self.is_loading = False
        return True

    def run(self, keyword: str | None = None, offset: int | None = None) -> bool:
        """Search ``keyword`` at ``offset``. Returns False when nothing was issued."""
        query = (self.keyword if keyword is None else keyword).strip()
        if not self.token:
            logger.warning("No token available; search for %r not sent", query)
            return False
        if not query:
            return False

        offset = self.offset if offset is None else max(offset, 0)
        generation = self.begin()
        try:
            tracks = self.client.search(self.token, query, offset)
        except SearchFetchError as exc:
            self.fail(generation, exc)
        else:
            self.complete(generation, tracks)
        return True

    def start(self, keyword: str) -> bool:
        self.keyword = keyword.strip()
        self.offset = 0
        return self.run(self.keyword, 0)

    def next_page(self) -> bool:
        if not self.show_pagination:
            return False
        self.offset += SearchClient.PAGE_STEP
        return self.run(self.keyword, self.offset)

    def previous_page(self) -> bool:
        if not self.show_pagination or not self.can_go_previous:
            return False
        self.offset = max(self.offset - SearchClient.PAGE_STEP, 0)
        return self.run(self.keyword, self.offset)
