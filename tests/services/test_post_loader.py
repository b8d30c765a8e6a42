import datetime
import re
import threading
from pathlib import Path

import pytest

from contentcheck.schemas.post import KnownField, UnknownField
from contentcheck.schemas.report import ErrorKind
from contentcheck.services import post_loader
from contentcheck.services.post_loader import (
    ContentRootError,
    derive_slug,
    load_all,
    parse_timestamp,
)
from tests.conftest import SEP, VALID_POST, write_post


def test_single_post_fields_match_front_matter(content_root):
    write_post(content_root, "hello.md", VALID_POST)

    posts, errors = load_all(content_root)

    assert errors == []
    assert len(posts) == 1
    post = posts[0]
    assert post.path == "hello.md"
    assert post.slug == "hello"
    assert post.title == "Hello"
    assert post.date == datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    assert post.authors == ["yen"]
    assert post.categories == ["Infrastructure"]
    assert post.tags == ["docker", "kubernetes"]
    assert post.summary == "A short hello."
    assert post.readTime == "16 min"
    assert post.draft is False
    assert post.content == "Hello body."


def test_separated_segments_become_separate_posts(content_root):
    segments = [
        f"---\ntitle: Part {i}\ndate: 2024-0{i}-01T00:00:00+02:00\nauthors: [a]\n---\nbody {i}\n"
        for i in range(1, 4)
    ]
    write_post(content_root, "bundle.md", f"\n{SEP}\n".join(segments))

    posts, errors = load_all(content_root)

    assert errors == []
    assert [p.title for p in posts] == ["Part 1", "Part 2", "Part 3"]
    assert [p.path for p in posts] == ["bundle.md", "bundle.md#1", "bundle.md#2"]
    assert {p.slug for p in posts} == {"bundle"}
    assert posts[2].content == "body 3"


def test_example_corpus_two_files(content_root):
    write_post(
        content_root,
        "a.md",
        """
        ---
        title: "Hello"
        date: 2024-01-01T00:00:00Z
        authors: ["yen"]
        ---
        a body
        """,
    )
    write_post(
        content_root,
        "b.md",
        f"""
        ---
        title: "Second"
        date: 2024-02-01T00:00:00Z
        authors: ["yen"]
        ---
        b body
        {SEP}
        Just prose, no front matter here.
        """,
    )

    posts, errors = load_all(content_root)

    assert [p.path for p in posts] == ["a.md", "b.md"]
    assert len(errors) == 1
    assert errors[0].kind is ErrorKind.MISSING_FRONT_MATTER
    assert errors[0].source == "b.md"
    assert errors[0].segment == 1
    assert errors[0].is_hard


def test_unclosed_front_matter_only_affects_its_file(content_root):
    write_post(content_root, "good.md", VALID_POST)
    write_post(content_root, "broken.md", "---\ntitle: Broken\ndate: 2024-01-01\n\nbody\n")

    posts, errors = load_all(content_root)

    assert [p.path for p in posts] == ["good.md"]
    assert [(e.kind, e.source) for e in errors] == [
        (ErrorKind.MISSING_FRONT_MATTER, "broken.md")
    ]


def test_unknown_fields_are_kept_and_flagged(content_root):
    write_post(
        content_root,
        "extra.md",
        """
        ---
        title: Extra
        date: 2024-01-01T00:00:00Z
        authors: [yen]
        image: /img/cover.png
        weight: 3
        ---
        body
        """,
    )

    posts, errors = load_all(content_root)

    post = posts[0]
    assert post.front_matter[0] == KnownField(name="title", value="Extra")
    assert UnknownField(name="image", raw_value="/img/cover.png") in post.front_matter
    assert post.raw("weight") == 3
    assert [(e.kind, e.field) for e in errors] == [
        (ErrorKind.UNKNOWN_FIELD, "image"),
        (ErrorKind.UNKNOWN_FIELD, "weight"),
    ]
    assert not any(e.is_hard for e in errors)


def test_malformed_values_keep_raw_and_default_typed_fields(content_root):
    write_post(
        content_root,
        "odd.md",
        """
        ---
        title: [not, a, string]
        date: "yesterday"
        draft: "yes"
        authors: Solo Author
        tags: {nested: map}
        ---
        body
        """,
    )

    posts, _ = load_all(content_root)

    post = posts[0]
    assert post.title == ""
    assert post.date is None
    assert post.raw("date") == "yesterday"
    assert post.draft is False
    assert post.authors == ["Solo Author"]
    assert post.tags == []


def test_nested_files_and_page_bundles(content_root):
    write_post(content_root, "2024/flat.md", VALID_POST)
    write_post(content_root, "bundle-post/index.md", VALID_POST)
    write_post(content_root, "notes.txt", "not markdown")

    posts, _ = load_all(content_root)

    assert sorted(p.source for p in posts) == ["2024/flat.md", "bundle-post/index.md"]
    assert sorted(p.slug for p in posts) == ["bundle-post", "flat"]


def test_custom_separator(content_root):
    write_post(content_root, "x.md", f"{VALID_POST}\n@@@@\n{VALID_POST}")

    posts, _ = load_all(content_root, separator=re.compile(r"^@@@@$", re.MULTILINE))

    assert len(posts) == 2


def test_results_are_in_file_order_regardless_of_workers(content_root):
    for name in ["c.md", "a.md", "b.md"]:
        write_post(content_root, name, VALID_POST)

    single, _ = load_all(content_root, max_workers=1)
    many, _ = load_all(content_root, max_workers=8)

    assert [p.path for p in single] == ["a.md", "b.md", "c.md"]
    assert [p.path for p in many] == [p.path for p in single]


def test_cancelled_load_returns_partial_results(content_root):
    for name in ["a.md", "b.md"]:
        write_post(content_root, name, VALID_POST)
    cancel = threading.Event()
    cancel.set()

    posts, errors = load_all(content_root, cancel_event=cancel)

    assert posts == []
    assert errors == []


def test_cancel_mid_run_keeps_finished_files(content_root, monkeypatch):
    for name in ["a.md", "b.md", "c.md"]:
        write_post(content_root, name, VALID_POST)
    cancel = threading.Event()
    original = post_loader.load_file

    def load_then_cancel(path, root, **kwargs):
        result = original(path, root, **kwargs)
        cancel.set()
        return result

    monkeypatch.setattr(post_loader, "load_file", load_then_cancel)

    posts, errors = load_all(content_root, max_workers=1, cancel_event=cancel)

    assert [p.path for p in posts] == ["a.md"]
    assert errors == []


def test_unreadable_file_is_reported(content_root, monkeypatch):
    write_post(content_root, "a.md", VALID_POST)
    write_post(content_root, "locked.md", VALID_POST)
    original = Path.read_bytes

    def fake_read_bytes(self):
        if self.name == "locked.md":
            raise PermissionError("denied")
        return original(self)

    monkeypatch.setattr(Path, "read_bytes", fake_read_bytes)

    posts, errors = load_all(content_root)

    assert [p.path for p in posts] == ["a.md"]
    assert [(e.kind, e.source) for e in errors] == [
        (ErrorKind.MISSING_FRONT_MATTER, "locked.md")
    ]


def test_missing_root_raises(tmp_path):
    with pytest.raises(ContentRootError):
        load_all(tmp_path / "nope")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-01-01T00:00:00Z", datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)),
        ("2024-03-05T10:00:00+02:00", datetime.datetime(2024, 3, 5, 8, tzinfo=datetime.timezone.utc)),
        (datetime.date(2023, 5, 1), datetime.datetime(2023, 5, 1)),
        ("not a date", None),
        ("", None),
        (None, None),
        (20240101, None),
    ],
)
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


def test_derive_slug():
    assert derive_slug(Path("posts/k8s-hpa.md")) == "k8s-hpa"
    assert derive_slug(Path("posts/cdk-stack/index.md")) == "cdk-stack"
