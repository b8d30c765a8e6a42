from typing import List

from contentcheck.schemas.post import Post
from contentcheck.schemas.report import ErrorKind, ValidationError
from contentcheck.services.post_loader import parse_timestamp

TAXONOMY_FIELDS = ("categories", "tags")


def validate(post: Post) -> List[ValidationError]:
    """Check a post's front matter. Every check reports independently."""
    errors: List[ValidationError] = []
    errors.extend(_check_title(post))
    errors.extend(_check_date(post))
    errors.extend(_check_authors(post))
    errors.extend(_check_draft(post))
    for name in TAXONOMY_FIELDS:
        errors.extend(_check_taxonomy(post, name))
    return errors


def _error(post: Post, kind: ErrorKind, field: str, message: str) -> ValidationError:
    return ValidationError(
        kind=kind,
        source=post.source,
        path=post.path,
        segment=post.segment,
        field=field,
        message=message,
    )


def _check_title(post: Post) -> List[ValidationError]:
    if not post.has_field("title"):
        return [_error(post, ErrorKind.SCHEMA_ERROR, "title", "title is missing")]
    if isinstance(post.raw("title"), (list, dict)):
        return [_error(post, ErrorKind.SCHEMA_ERROR, "title", "title must be a string")]
    if not post.title.strip():
        return [_error(post, ErrorKind.SCHEMA_ERROR, "title", "title is empty")]
    return []


def _check_date(post: Post) -> List[ValidationError]:
    if not post.has_field("date"):
        return [_error(post, ErrorKind.SCHEMA_ERROR, "date", "date is missing")]
    raw = post.raw("date")
    if parse_timestamp(raw) is None:
        return [
            _error(
                post,
                ErrorKind.SCHEMA_ERROR,
                "date",
                f"date {raw!r} is not a valid timestamp",
            )
        ]
    return []


def _check_authors(post: Post) -> List[ValidationError]:
    if not post.has_field("authors"):
        return [_error(post, ErrorKind.SCHEMA_ERROR, "authors", "authors is missing")]
    if not any(author.strip() for author in post.authors):
        return [
            _error(
                post,
                ErrorKind.SCHEMA_ERROR,
                "authors",
                "authors must list at least one non-empty name",
            )
        ]
    return []


def _check_draft(post: Post) -> List[ValidationError]:
    if post.has_field("draft") and not isinstance(post.raw("draft"), bool):
        return [
            _error(
                post,
                ErrorKind.SCHEMA_ERROR,
                "draft",
                f"draft must be true or false, got {post.raw('draft')!r}",
            )
        ]
    return []


def _check_taxonomy(post: Post, name: str) -> List[ValidationError]:
    if not post.has_field(name):
        return []

    raw = post.raw(name)
    if raw is not None and not isinstance(raw, (str, list)):
        return [
            _error(
                post,
                ErrorKind.SCHEMA_ERROR,
                name,
                f"{name} must be a list of strings",
            )
        ]
    if isinstance(raw, list) and any(isinstance(v, (list, dict)) for v in raw):
        return [
            _error(
                post,
                ErrorKind.SCHEMA_ERROR,
                name,
                f"{name} must be a list of strings",
            )
        ]

    errors = []
    seen = {}
    reported = set()
    for value in getattr(post, name):
        key = value.strip().casefold()
        if key in seen and key not in reported:
            reported.add(key)
            errors.append(
                _error(
                    post,
                    ErrorKind.DUPLICATE_TAXONOMY_ENTRY,
                    name,
                    f"duplicate {name} entry {value!r} (already listed as {seen[key]!r})",
                )
            )
        seen.setdefault(key, value)
    return errors
