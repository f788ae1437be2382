import json

import pytest

from catalog.errors import NotFoundError, ValidationError
from catalog.models import normalize_record, resolve_source
from catalog.service import CatalogService, ListingQuery
from catalog.store import DocumentStore


@pytest.fixture
def service():
    return CatalogService(DocumentStore())


def _seed(service, count, **overrides):
    made = []
    for i in range(count):
        payload = {
            "title": f"Film {i:02d}",
            "image": "img.jpg",
            "movieLinks": [{"link": f"https://cdn/{i}.mp4", "source": "S1"}],
            "genre": ["Drama"],
            "description": "desc",
            "releaseDate": f"20{i:02d}-01-01",
            "type": "series" if i % 3 == 0 else "movie",
        }
        payload.update(overrides)
        doc = service.create_movie(payload)
        # deterministic upload order for sorting
        service.store.update("movies", doc["id"], {"uploadDate": f"2024-01-{i + 1:02d}T00:00:00+00:00"})
        made.append(doc["id"])
    return made


# ---------- records ----------


def test_normalize_splits_csv_and_coerces(movie_payload):
    record = normalize_record(movie_payload)

    assert record["genre"] == ["Action", "Sci-Fi"]
    assert record["director"] == ["Lana Wachowski", "Lilly Wachowski"]
    assert record["imdbRating"] == 8.7
    assert record["duration"] == 136.0
    assert record["releaseDate"] == "1999-03-31"
    assert record["seasons"] == []


@pytest.mark.parametrize("field", ["title", "image", "movieLinks", "genre", "description"])
def test_missing_required_field(movie_payload, field):
    movie_payload.pop(field)
    with pytest.raises(ValidationError, match="Missing required fields"):
        normalize_record(movie_payload)


def test_empty_link_rows_are_dropped(movie_payload):
    movie_payload["movieLinks"] = [{"link": "", "source": ""}]
    with pytest.raises(ValidationError):
        normalize_record(movie_payload)


@pytest.mark.parametrize(
    "field,value",
    [("type", "documentary"), ("imdbRating", "great"), ("releaseDate", "31/03/1999"), ("seasons", "none")],
)
def test_invalid_fields(movie_payload, field, value):
    movie_payload[field] = value
    with pytest.raises(ValidationError):
        normalize_record(movie_payload)


def test_partial_update_only_returns_given_fields():
    assert normalize_record({"quality": "4K", "id": "hijack"}, partial=True) == {"quality": "4K"}
    with pytest.raises(ValidationError, match="cannot be empty"):
        normalize_record({"title": "  "}, partial=True)


def test_resolve_source_movie_and_series(movie_payload, series_payload):
    movie = normalize_record(movie_payload)
    series = normalize_record(series_payload)

    assert resolve_source(movie) == "https://cdn.example.com/matrix-1080.mp4"
    assert resolve_source(movie, source=1) == "https://cdn.example.com/matrix-720.mp4"
    assert resolve_source(series, season=0, episode=1) == "https://cdn.example.com/dark-s1e2.mp4"
    # season 2 has no episodes yet
    assert resolve_source(series, season=1) is None
    assert resolve_source(movie, source=5) is None
    assert resolve_source(movie, source=-1) is None


# ---------- service ----------


def test_listing_defaults_newest_first(service):
    ids = _seed(service, 3)
    movies, total = service.list_movies(ListingQuery())

    assert total == 3
    assert [m["id"] for m in movies] == list(reversed(ids))


def test_listing_pagination_and_filter(service):
    _seed(service, 25)
    page2, total = service.list_movies(ListingQuery(page=2, limit=10, sort_by="releaseDate", order="asc"))
    assert total == 25
    assert [m["title"] for m in page2] == [f"Film {i:02d}" for i in range(10, 20)]

    series, total = service.list_movies(ListingQuery(category="series", limit=100))
    assert total == 9
    assert all(m["type"] == "series" for m in series)


def test_listing_query_from_args_falls_back():
    query = ListingQuery.from_args({"page": "zero", "limit": "-4", "sortBy": "title", "order": "sideways", "cat": "anime"})
    assert (query.page, query.limit, query.sort_by, query.order, query.category) == (1, 20, "uploadDate", "desc", None)


def test_search(service):
    _seed(service, 25)
    assert service.search("fi") == []
    assert service.search(None) == []
    assert len(service.search("FILM")) == 20
    assert [m["title"] for m in service.search("m 07")] == ["Film 07"]


def test_search_treats_query_literally(service):
    _seed(service, 2)
    assert service.search("Film (") == []


def test_suggestions_exclude(service):
    ids = _seed(service, 4)
    suggestions = service.suggestions(exclude=ids[0], limit="2")
    assert len(suggestions) == 2
    assert ids[0] not in [s["id"] for s in suggestions]


def test_update_and_not_found(service, movie_payload):
    movie = service.create_movie(movie_payload)
    updated = service.update_movie(movie["id"], {"quality": "4K"})

    assert updated["quality"] == "4K"
    assert updated["title"] == "The Matrix"
    assert updated["uploadDate"] == movie["uploadDate"]
    with pytest.raises(NotFoundError):
        service.update_movie("missing", {"quality": "4K"})
    with pytest.raises(NotFoundError):
        service.get_movie("missing")


# ---------- store ----------


def test_store_persists_to_json(tmp_path, movie_payload):
    path = tmp_path / "data" / "catalog.json"
    service = CatalogService(DocumentStore(str(path)))
    movie = service.create_movie(movie_payload)

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk["movies"][0]["id"] == movie["id"]

    reopened = CatalogService(DocumentStore(str(path)))
    assert reopened.get_movie(movie["id"])["title"] == "The Matrix"


def test_store_ignores_corrupt_file(tmp_path, capsys):
    path = tmp_path / "catalog.json"
    path.write_text("{not json", encoding="utf-8")

    store = DocumentStore(str(path))
    assert store.find("movies") == []
    assert "[Store] Error loading" in capsys.readouterr().out


def test_store_returns_copies():
    store = DocumentStore()
    doc = store.insert("movies", {"title": "A", "genre": ["x"]})
    doc["genre"].append("y")
    assert store.get("movies", doc["id"])["genre"] == ["x"]
