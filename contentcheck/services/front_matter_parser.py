from typing import Any, Dict, Tuple

import yaml
from frontmatter.default_handlers import YAMLHandler


class MissingFrontMatterError(ValueError):
    """Raised when a segment has no parseable ``---`` delimited YAML block."""


_handler = YAMLHandler()


def parse_segment(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a segment into its front-matter mapping and markdown body.

    Unlike ``frontmatter.loads`` this never falls back to "no metadata": a
    block without a closing ``---`` or with broken YAML is an error.
    """
    text = text.lstrip("\ufeff").strip()
    if not _handler.detect(text):
        raise MissingFrontMatterError("segment does not start with a '---' line")

    try:
        fm, content = _handler.split(text)
    except ValueError:
        raise MissingFrontMatterError("front matter is missing its closing '---'")

    try:
        metadata = _handler.load(fm)
    except (yaml.YAMLError, ValueError) as e:
        raise MissingFrontMatterError(f"front matter is not valid YAML: {e}")

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise MissingFrontMatterError(
            f"front matter must be a mapping, got {type(metadata).__name__}"
        )

    return {str(k): v for k, v in metadata.items()}, content.strip()
