import datetime
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, List, Optional, Pattern, Tuple, Union

from contentcheck.schemas.post import RECOGNIZED_FIELDS, KnownField, Post, UnknownField
from contentcheck.schemas.report import ErrorKind, ValidationError
from contentcheck.services.front_matter_parser import MissingFrontMatterError, parse_segment
from contentcheck.services.segment_splitter import compile_separator, split_segments
from contentcheck.settings import settings

logger = logging.getLogger(__name__)

FileResult = Tuple[List[Post], List[ValidationError]]


class ContentRootError(Exception):
    """The content root is missing or is not a readable directory."""


def load_all(
    root_dir: Union[str, Path],
    *,
    separator: Union[str, Pattern, None] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    file_glob: Optional[str] = None,
) -> Tuple[List[Post], List[ValidationError]]:
    """Load every post under ``root_dir``.

    Returns all posts that carry parseable front matter plus the load-time
    defects (missing front matter, unknown fields). A bad segment or file is
    recorded and skipped; it never stops the rest of the run. When
    ``cancel_event`` is set, files not yet started are skipped and whatever
    was already loaded is returned.
    """
    root = Path(root_dir)
    if not root.is_dir():
        raise ContentRootError(f"content root {root} is not a directory")

    pattern = compile_separator(separator)
    files = list_content_files(root, file_glob or settings.FILE_GLOB)
    logger.info(f"Loading {len(files)} files from {root}")

    def _load(path: Path) -> Optional[FileResult]:
        if cancel_event is not None and cancel_event.is_set():
            return None
        return load_file(path, root, separator=pattern)

    workers = max_workers or settings.MAX_WORKERS
    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        results = list(executor.map(_load, files))

    posts: List[Post] = []
    errors: List[ValidationError] = []
    skipped = 0
    for result in results:
        if result is None:
            skipped += 1
            continue
        file_posts, file_errors = result
        posts.extend(file_posts)
        errors.extend(file_errors)

    if skipped:
        logger.warning(f"Load cancelled, skipped {skipped}/{len(files)} files")
    logger.info(f"Loaded {len(posts)} posts with {len(errors)} load issues")
    return posts, errors


def list_content_files(root: Path, file_glob: str) -> List[Path]:
    return sorted(p for p in root.glob(file_glob) if p.is_file())


def load_file(
    path: Path, root: Path, *, separator: Union[str, Pattern, None] = None
) -> FileResult:
    """Load the posts bundled in a single file."""
    source = path.relative_to(root).as_posix()
    try:
        text = path.read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"Failed to read {source}: {e}")
        return [], [
            ValidationError(
                kind=ErrorKind.MISSING_FRONT_MATTER,
                source=source,
                message=f"file could not be read: {e}",
            )
        ]

    posts: List[Post] = []
    errors: List[ValidationError] = []
    slug = derive_slug(path)

    for index, segment in enumerate(split_segments(text, separator)):
        try:
            metadata, content = parse_segment(segment)
        except MissingFrontMatterError as e:
            logger.warning(f"Skipped {source} segment {index}: {e}")
            errors.append(
                ValidationError(
                    kind=ErrorKind.MISSING_FRONT_MATTER,
                    source=source,
                    segment=index,
                    message=str(e),
                )
            )
            continue

        post = build_post(metadata, content, source=source, segment=index, slug=slug)
        posts.append(post)
        errors.extend(
            ValidationError(
                kind=ErrorKind.UNKNOWN_FIELD,
                source=source,
                path=post.path,
                segment=index,
                field=field.name,
                message=f"unknown front-matter field '{field.name}'",
            )
            for field in post.unknown_fields
        )

    logger.debug(f"Loaded {len(posts)} posts from {source}")
    return posts, errors


def build_post(
    metadata: dict, content: str, *, source: str, segment: int, slug: str
) -> Post:
    """Construct a Post, coercing recognized fields leniently.

    Malformed values are kept verbatim in ``front_matter`` so the validator can
    report them; the typed attributes fall back to their defaults.
    """
    front_matter = [
        KnownField(name=name, value=value)
        if name in RECOGNIZED_FIELDS
        else UnknownField(name=name, raw_value=value)
        for name, value in metadata.items()
    ]

    return Post(
        path=post_path(source, segment),
        source=source,
        segment=segment,
        slug=slug,
        title=_normalize_text(metadata.get("title")) or "",
        date=parse_timestamp(metadata.get("date")),
        draft=metadata.get("draft") is True,
        authors=_normalize_list(metadata.get("authors")),
        categories=_normalize_list(metadata.get("categories")),
        tags=_normalize_list(metadata.get("tags")),
        summary=_normalize_text(metadata.get("summary")),
        description=_normalize_text(metadata.get("description")),
        readTime=_normalize_text(metadata.get("readTime")),
        content=content,
        front_matter=front_matter,
    )


def post_path(source: str, segment: int) -> str:
    return source if segment == 0 else f"{source}#{segment}"


def derive_slug(path: Path) -> str:
    # Page bundles (posts/my-post/index.md) take the directory name.
    if path.stem in ("index", "_index") and path.parent.name:
        return path.parent.name
    return path.stem


def parse_timestamp(value: Any) -> Optional[datetime.datetime]:
    """Return ``value`` as a datetime, or None when it is not a timestamp.

    YAML already turns unquoted timestamps into datetimes; quoted ones arrive
    as strings and go through ``fromisoformat``.
    """
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return datetime.datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _normalize_text(value) -> Optional[str]:
    if value is None or isinstance(value, (list, tuple, set, dict)):
        return None
    return str(value)


def _normalize_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [
            str(item)
            for item in value
            if item is not None and not isinstance(item, (list, dict))
        ]
    return []
