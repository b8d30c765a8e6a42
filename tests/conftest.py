import textwrap
from pathlib import Path

import pytest

from contentcheck.services.front_matter_parser import parse_segment
from contentcheck.services.post_loader import build_post

SEP = "<|RELATED_DOC_SEP-magic-7f3a|>"

VALID_POST = """
---
title: "Hello"
date: 2024-01-01T00:00:00Z
authors: ["yen"]
categories: [Infrastructure]
tags: [docker, kubernetes]
summary: A short hello.
readTime: "16 min"
---
Hello body.
"""


def write_post(root: Path, name: str, raw: str) -> Path:
    """Write dedented markdown under ``root``, creating parent directories."""
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(raw).lstrip(), encoding="utf-8")
    return path


def make_post(raw: str, *, source: str = "post.md", segment: int = 0, slug: str = "post"):
    """Build a Post straight from a markdown string, skipping the filesystem."""
    metadata, content = parse_segment(textwrap.dedent(raw))
    return build_post(metadata, content, source=source, segment=segment, slug=slug)


@pytest.fixture
def content_root(tmp_path) -> Path:
    root = tmp_path / "content" / "posts"
    root.mkdir(parents=True)
    return root
