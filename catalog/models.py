"""
Catalog record normalisation.

Records are plain dicts (the document store keeps JSON). ``normalize_record``
checks an incoming payload from the admin forms and returns a clean dict with
only known fields; it raises ``ValidationError`` with a readable message.

Record shape::

    {
      "id": str, "uploadDate": ISO timestamp (server-set),
      "title": str, "type": "movie" | "series", "image": str,
      "description": str, "quality": str,
      "movieLinks": [{"link": str, "source": str}],
      "genre": [str], "cast": [str], "director": [str],
      "imdbRating": float | None, "releaseDate": "YYYY-MM-DD" | None,
      "duration": float | None,
      "subtitles": [{"link": str, "language": str}],
      "seasons": [{"seasonNumber": int,
                   "episodes": [{"episodeNumber": int, "title": str,
                                 "videoLinks": [{"link": str}],
                                 "duration": float | None}]}],
      "comments": [{"username": str, "comment": str, "date": str}],
    }
"""
import datetime as dt
from typing import Any, Dict, List, Optional

from .errors import ValidationError

RECORD_TYPES = ("movie", "series")
REQUIRED_FIELDS = ("title", "image", "movieLinks", "genre", "description")
SERVER_FIELDS = ("id", "uploadDate")


def _text(value: Any, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, (str, int, float)):
        raise ValidationError(f"{field} must be a string")
    return str(value).strip()


def _string_list(value: Any, field: str) -> List[str]:
    # admin forms send "a, b, c"; API clients send lists
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = value
    else:
        raise ValidationError(f"{field} must be a list or a comma-separated string")
    return [s for s in (_text(v, field) for v in items) if s]


def _number(value: Any, field: str) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number") from None
    if num != num or num < 0:
        raise ValidationError(f"{field} must be a non-negative number")
    return num


def _date(value: Any, field: str) -> Optional[str]:
    if value is None or value == "":
        return None
    text = _text(value, field)
    try:
        return dt.date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)") from None


def _dict_list(value: Any, field: str) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ValidationError(f"{field} must be a list of objects")
    return value


def _movie_links(value: Any) -> List[Dict[str, str]]:
    links = []
    for i, item in enumerate(_dict_list(value, "movieLinks")):
        link = _text(item.get("link"), "movieLinks.link")
        if not link:
            # empty rows left over from the form
            continue
        source = _text(item.get("source"), "movieLinks.source") or f"Source {i + 1}"
        links.append({"link": link, "source": source})
    return links


def _subtitles(value: Any) -> List[Dict[str, str]]:
    subs = []
    for item in _dict_list(value, "subtitles"):
        link = _text(item.get("link"), "subtitles.link")
        if not link:
            continue
        language = _text(item.get("language"), "subtitles.language") or "English"
        subs.append({"link": link, "language": language})
    return subs


def _seasons(value: Any) -> List[Dict[str, Any]]:
    seasons = []
    for si, season in enumerate(_dict_list(value, "seasons")):
        episodes = []
        for ei, ep in enumerate(_dict_list(season.get("episodes"), "seasons.episodes")):
            video_links = [
                {"link": _text(v.get("link"), "videoLinks.link")}
                for v in _dict_list(ep.get("videoLinks"), "seasons.episodes.videoLinks")
                if _text(v.get("link"), "videoLinks.link")
            ]
            number = _number(ep.get("episodeNumber"), "episodeNumber")
            episodes.append(
                {
                    "episodeNumber": int(number) if number is not None else ei + 1,
                    "title": _text(ep.get("title"), "episode title"),
                    "videoLinks": video_links,
                    "duration": _number(ep.get("duration"), "episode duration"),
                }
            )
        number = _number(season.get("seasonNumber"), "seasonNumber")
        seasons.append(
            {
                "seasonNumber": int(number) if number is not None else si + 1,
                "episodes": episodes,
            }
        )
    return seasons


def _comments(value: Any) -> List[Dict[str, str]]:
    return [
        {
            "username": _text(c.get("username"), "comments.username"),
            "comment": _text(c.get("comment"), "comments.comment"),
            "date": _text(c.get("date"), "comments.date"),
        }
        for c in _dict_list(value, "comments")
    ]


_FIELDS = {
    "title": lambda v: _text(v, "title"),
    "image": lambda v: _text(v, "image"),
    "description": lambda v: _text(v, "description"),
    "quality": lambda v: _text(v, "quality") or "HD",
    "movieLinks": _movie_links,
    "genre": lambda v: _string_list(v, "genre"),
    "cast": lambda v: _string_list(v, "cast"),
    "director": lambda v: _string_list(v, "director"),
    "imdbRating": lambda v: _number(v, "imdbRating"),
    "releaseDate": lambda v: _date(v, "releaseDate"),
    "duration": lambda v: _number(v, "duration"),
    "subtitles": _subtitles,
    "seasons": _seasons,
    "comments": _comments,
}


def _record_type(value: Any) -> str:
    kind = _text(value, "type").lower() or "movie"
    if kind not in RECORD_TYPES:
        raise ValidationError("type must be 'movie' or 'series'")
    return kind


def normalize_record(payload: Any, partial: bool = False) -> Dict[str, Any]:
    """
    Validate an admin payload.

    With ``partial=False`` (create) every field is present in the result and
    the required fields must be non-empty. With ``partial=True`` (update)
    only the fields present in the payload are returned; a required field
    may not be blanked.
    """
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")

    record: Dict[str, Any] = {}
    if "type" in payload or not partial:
        record["type"] = _record_type(payload.get("type"))
    for field, convert in _FIELDS.items():
        if field in payload or not partial:
            record[field] = convert(payload.get(field))

    check = [f for f in REQUIRED_FIELDS if f in record] if partial else REQUIRED_FIELDS
    missing = [f for f in check if not record.get(f)]
    if missing:
        if partial:
            raise ValidationError(f"Fields cannot be empty: {', '.join(missing)}")
        raise ValidationError("Missing required fields")
    return record


def resolve_source(record: Dict[str, Any], source: int = 0, season: int = 0, episode: int = 0) -> Optional[str]:
    """
    Pick the link a player should load for a record.

    Movies use ``movieLinks[source]``; series use the first video link of
    ``seasons[season].episodes[episode]``. Anything out of range resolves to
    None, which mounts the player disabled.
    """
    if min(source, season, episode) < 0:
        return None
    try:
        if record.get("type") == "series":
            ep = record["seasons"][season]["episodes"][episode]
            return ep["videoLinks"][0]["link"] or None
        return record["movieLinks"][source]["link"] or None
    except (KeyError, IndexError, TypeError):
        return None
