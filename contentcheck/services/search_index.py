import datetime
import logging
from typing import Iterable, List, Optional

from contentcheck.schemas.post import Post
from contentcheck.schemas.search import SearchEntry
from contentcheck.services.cross_links import strip_code
from contentcheck.settings import settings
from contentcheck.utils import calculate_reading_time

logger = logging.getLogger(__name__)


def build_search_index(
    posts: Iterable[Post],
    *,
    base_url: Optional[str] = None,
    include_drafts: bool = False,
) -> List[SearchEntry]:
    """Build the search index the theme fetches from ``/index.json``, newest first."""
    base = (settings.BASE_URL if base_url is None else base_url).rstrip("/")
    prefix = "/" + settings.posts_section + "/" if settings.posts_section else "/"

    entries = []
    for post in posts:
        if post.draft and not include_drafts:
            continue
        entries.append(
            (
                _sort_key(post.date),
                SearchEntry(
                    title=post.title or post.slug,
                    permalink=f"{base}{prefix}{post.slug}/",
                    date=post.date.isoformat() if post.date else None,
                    summary=post.summary or post.description,
                    tags=post.tags,
                    categories=post.categories,
                    content=" ".join(strip_code(post.content).split()),
                    readingTime=calculate_reading_time(post.content),
                ),
            )
        )

    # Stable sort keeps load order for posts sharing a date.
    entries.sort(key=lambda item: item[0], reverse=True)
    logger.info(f"Built search index with {len(entries)} entries")
    return [entry for _, entry in entries]


def _sort_key(value: Optional[datetime.datetime]):
    # Undated posts sort last; naive timestamps are read as UTC.
    if value is None:
        return (False, datetime.datetime.min.replace(tzinfo=datetime.timezone.utc))
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return (True, value)


def search(index: Iterable[SearchEntry], query: str, limit: int = 10) -> List[SearchEntry]:
    """Case-insensitive substring search over title, content and tags."""
    query = (query or "").strip().lower()
    if not query:
        return []

    results = []
    for entry in index:
        haystack = f"{entry.title} {entry.content} {' '.join(entry.tags)}".lower()
        if query in haystack:
            results.append(entry)
            if len(results) >= limit:
                break
    return results
