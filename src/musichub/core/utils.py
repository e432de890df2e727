import re
import unicodedata
from typing import Iterable, List

from musichub.core.models import Track


def lower_lay_string(s: str) -> str:
    """
    Normalize a string and drop accents ("Beyoncé" -> "Beyonce").
    """
    normalized = unicodedata.normalize('NFKD', s)
    return ''.join(c for c in normalized if not unicodedata.combining(c))


def collapse(s: str) -> str:
    """
    Merge runs of whitespace into one space and trim both ends.
    """
    return re.sub(r'\s+', ' ', s).strip()


def prepare_input(input_str: str) -> str:
    # Normalize and strip accents
    prepared_input = lower_lay_string(input_str)

    # Punctuation becomes whitespace
    prepared_input = re.sub(r"[`~!@#$%^&*()_|+\-=?;:\",.<>{}\[\]\\\/]", " ", prepared_input)

    # Apostrophes are dropped
    prepared_input = re.sub(r"[’']", "", prepared_input)

    prepared_input = prepared_input.lower()

    return collapse(prepared_input)


def search_tracks(tracks: Iterable[Track], query: str) -> List[Track]:
    """Tracks whose title or artist contains the query (case and accent insensitive)."""
    q = prepare_input(query or "")
    if not q:
        return list(tracks)
    return [
        t for t in tracks
        if q in prepare_input(t.title) or q in prepare_input(t.artist)
    ]


def tracks_by_artist(tracks: Iterable[Track], artist: str) -> List[Track]:
    return [t for t in tracks if t.artist == artist]


def unique_artists(tracks: Iterable[Track]) -> List[str]:
    """Artists in catalog order, each listed once."""
    seen: set[str] = set()
    out: List[str] = []
    for t in tracks:
        if t.artist and t.artist not in seen:
            seen.add(t.artist)
            out.append(t.artist)
    return out
