import datetime as dt
from typing import Any, List, Mapping, Optional, Tuple

from .errors import NotFoundError
from .models import normalize_record, resolve_source
from .store import Document, DocumentStore

MOVIES = "movies"

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
SEARCH_MIN_CHARS = 3
SEARCH_LIMIT = 20
SUGGESTION_LIMIT = 10
SORT_KEYS = ("uploadDate", "releaseDate")


def _int_arg(value: Any, default: int) -> int:
    try:
        num = int(value)
    except (TypeError, ValueError):
        return default
    return num if num > 0 else default


class ListingQuery:
    """Pagination / sort / filter options of the browse page."""

    def __init__(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        sort_by: str = "uploadDate",
        order: str = "desc",
        category: Optional[str] = None,
    ) -> None:
        self.page = page
        self.limit = min(limit, MAX_PAGE_SIZE)
        self.sort_by = sort_by if sort_by in SORT_KEYS else "uploadDate"
        self.order = "asc" if order == "asc" else "desc"
        self.category = category if category in ("movie", "series") else None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "ListingQuery":
        # unknown or malformed values fall back to the defaults
        return cls(
            page=_int_arg(args.get("page"), 1),
            limit=_int_arg(args.get("limit"), DEFAULT_PAGE_SIZE),
            sort_by=args.get("sortBy") or "uploadDate",
            order=args.get("order") or "desc",
            category=args.get("cat"),
        )


class CatalogService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def list_movies(self, query: ListingQuery) -> Tuple[List[Document], int]:
        if query.category:
            docs = self.store.find(MOVIES, lambda d: d.get("type") == query.category)
        else:
            docs = self.store.find(MOVIES)
        docs.sort(key=lambda d: d.get(query.sort_by) or "", reverse=query.order == "desc")
        start = (query.page - 1) * query.limit
        return docs[start : start + query.limit], len(docs)

    def get_movie(self, movie_id: str) -> Document:
        doc = self.store.get(MOVIES, movie_id)
        if doc is None:
            raise NotFoundError("Movie not found")
        return doc

    def search(self, text: Optional[str]) -> List[Document]:
        """Case-insensitive title substring match; too-short queries match nothing."""
        if not text or len(text) < SEARCH_MIN_CHARS:
            return []
        needle = text.casefold()
        return self.store.find(MOVIES, lambda d: needle in str(d.get("title", "")).casefold())[:SEARCH_LIMIT]

    def suggestions(self, exclude: Optional[str] = None, limit: Any = None) -> List[Document]:
        count = _int_arg(limit, SUGGESTION_LIMIT)
        return self.store.find(MOVIES, lambda d: d.get("id") != exclude)[:count]

    def create_movie(self, payload: Any) -> Document:
        record = normalize_record(payload)
        record["uploadDate"] = dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds")
        return self.store.insert(MOVIES, record)

    def update_movie(self, movie_id: str, payload: Any) -> Document:
        fields = normalize_record(payload, partial=True)
        doc = self.store.update(MOVIES, movie_id, fields)
        if doc is None:
            raise NotFoundError("Movie not found")
        return doc

    def playable_source(
        self, movie_id: str, source: int = 0, season: int = 0, episode: int = 0
    ) -> Tuple[Document, Optional[str]]:
        doc = self.get_movie(movie_id)
        return doc, resolve_source(doc, source, season, episode)

