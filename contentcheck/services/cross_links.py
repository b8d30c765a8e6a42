import logging
import posixpath
import re
from typing import Dict, Iterable, List, Optional, Tuple

from contentcheck.schemas.post import Post
from contentcheck.schemas.report import ErrorKind, ValidationError
from contentcheck.settings import settings

logger = logging.getLogger(__name__)

# Pre-compile regex patterns for better performance
_fenced_code_pattern = re.compile(
    r"^[ \t]*(`{3,}|~{3,})[^\n]*\n.*?(?:^[ \t]*\1[ \t]*$|\Z)",
    re.MULTILINE | re.DOTALL,
)
_inline_code_pattern = re.compile(r"`[^`\n]+`")
# [text](/target "title"), but not images: ![alt](/img/x.png)
_link_pattern = re.compile(
    r"(?<!!)\[[^\]\n]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)"
)
# {{< ref "slug" >}}, {{< relref "posts/slug.md" >}}, {{% ref ... %}}
_ref_pattern = re.compile(r"\{\{[<%]\s*(?:rel)?ref\s+\"([^\"]+)\"\s*[>%]\}\}")


def strip_code(content: str) -> str:
    """Remove fenced and inline code so quoted snippets aren't read as links."""
    content = _fenced_code_pattern.sub("", content)
    return _inline_code_pattern.sub("", content)


def extract_link_targets(content: str) -> List[Tuple[str, str]]:
    """Return ``(raw_target, slug)`` pairs for links that point at posts."""
    text = strip_code(content)
    targets = []

    for match in _link_pattern.finditer(text):
        raw = match.group(1)
        slug = _slug_from_url(raw)
        if slug:
            targets.append((raw, slug))

    for match in _ref_pattern.finditer(text):
        raw = match.group(1)
        slug = _slug_from_ref(raw)
        if slug:
            targets.append((raw, slug))

    return targets


def resolve_cross_links(
    posts: Iterable[Post],
) -> Tuple[Dict[str, List[str]], List[ValidationError]]:
    """Resolve post-to-post links against the known slugs.

    Returns a mapping of post path to the paths it links to, plus a
    DanglingLink warning for every target that matches no post.
    """
    posts = list(posts)
    by_slug: Dict[str, str] = {}
    for post in posts:
        by_slug.setdefault(post.slug, post.path)

    links: Dict[str, List[str]] = {}
    warnings: List[ValidationError] = []

    for post in posts:
        resolved: List[str] = []
        dangling = set()
        for raw, slug in extract_link_targets(post.content):
            target = by_slug.get(slug)
            if target is None:
                if raw not in dangling:
                    dangling.add(raw)
                    warnings.append(
                        ValidationError(
                            kind=ErrorKind.DANGLING_LINK,
                            source=post.source,
                            path=post.path,
                            segment=post.segment,
                            message=f"link to '{raw}' does not match any known post",
                        )
                    )
                continue
            if target not in resolved:
                resolved.append(target)
        links[post.path] = resolved

    logger.debug(
        f"Resolved links for {len(posts)} posts, {len(warnings)} dangling targets"
    )
    return links, warnings


def _slug_from_url(url: str) -> Optional[str]:
    if not url.startswith("/") or url.startswith("//"):
        return None

    path = re.split(r"[?#]", url, maxsplit=1)[0]
    parts = [p for p in path.split("/") if p]
    if not parts:
        return None
    if len(parts) > 1 and parts[0] != settings.posts_section:
        return None
    if len(parts) == 1 and parts[0] == settings.posts_section:
        return None

    return _strip_markdown_ext(parts[-1], parts)


def _slug_from_ref(ref: str) -> Optional[str]:
    path = ref.split("#", 1)[0]
    parts = [p for p in path.split("/") if p]
    if not parts:
        return None
    return _strip_markdown_ext(parts[-1], parts)


def _strip_markdown_ext(name: str, parts: List[str]) -> Optional[str]:
    stem, ext = posixpath.splitext(name)
    if not ext:
        return name
    if ext.lower() != ".md":
        # /img/diagram.png and friends are assets
        return None
    if stem in ("index", "_index"):
        return parts[-2] if len(parts) > 1 else None
    return stem
