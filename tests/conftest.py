from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from mdpress.posts import Post

UTC = dt.timezone.utc


def write_md(path: Path, frontmatter: str, body: str = "Body text.") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\n{frontmatter.strip()}\n---\n{body}\n", encoding="utf-8")
    return path


@pytest.fixture
def make_post():
    """Factory for Post records without touching the filesystem."""

    def factory(path: str = "hello.md", **overrides) -> Post:
        stem = path[: -len(".md")]
        values = {
            "slug": stem.rsplit("/", 1)[-1],
            "filename": path.rsplit("/", 1)[-1],
            "path": path,
            "url": f"blog/{stem}.html",
            "language": "en",
            "title": stem.rsplit("/", 1)[-1].replace("-", " ").title(),
            "date": dt.datetime(2025, 1, 10, tzinfo=UTC),
            "created_at": dt.datetime(2025, 1, 1, tzinfo=UTC),
            "content": "Some content for the post.",
        }
        values.update(overrides)
        return Post(**values)

    return factory
