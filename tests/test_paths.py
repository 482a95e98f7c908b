"""Tests for path classification helpers."""

from __future__ import annotations

import pytest

from mdpress.paths import (
    detect_language,
    filename_slug,
    is_archive_page,
    is_excluded,
    is_index_page,
    matches_glob,
    normalize_path,
    slugify,
)


class TestDetectLanguage:
    """Language precedence: frontmatter, then directory, then default."""

    def test_frontmatter_wins(self) -> None:
        assert detect_language("en/post.md", {"language": "ro"}, ["en", "ro"], "en") == "ro"

    def test_directory_prefix(self) -> None:
        assert detect_language("ro/post.md", {}, ["en", "ro"], "en") == "ro"

    def test_unknown_directory_falls_back(self) -> None:
        assert detect_language("guides/post.md", {}, ["en", "ro"], "en") == "en"

    def test_top_level_file_uses_default(self) -> None:
        """A file named like a language is not a directory."""
        assert detect_language("ro.md", {}, ["en", "ro"], "de") == "de"

    def test_blank_frontmatter_ignored(self) -> None:
        assert detect_language("ro/post.md", {"language": "  "}, ["en", "ro"], "en") == "ro"


class TestSlugs:
    """Tests for filename_slug and slugify."""

    def test_filename_slug(self) -> None:
        assert filename_slug("My Post_v2!.md") == "my-post-v2"

    def test_filename_slug_collapses_hyphens(self) -> None:
        assert filename_slug("--a---b--.md") == "a-b"

    def test_slugify_spaces_and_punctuation(self) -> None:
        assert slugify("Web Development!") == "web-development"

    def test_slugify_keeps_underscores(self) -> None:
        assert slugify("snake_case tag") == "snake_case-tag"

    def test_slugify_none(self) -> None:
        assert slugify(None) == ""

    @pytest.mark.parametrize("text", ["Hello World", "  C++ & Rust ", "a -- b", "Ünïcode Tag"])
    def test_slugify_is_idempotent(self, text: str) -> None:
        once = slugify(text)
        assert slugify(once) == once

    @pytest.mark.parametrize("name", ["Hello World.md", "a__b.md", "x.md"])
    def test_filename_slug_is_idempotent(self, name: str) -> None:
        once = filename_slug(name)
        assert filename_slug(once, "") == once


class TestGlobs:
    """Tests for exclusion glob matching."""

    @pytest.mark.parametrize(
        ("path", "pattern"),
        [
            ("drafts/a.md", "drafts/**"),
            ("drafts", "drafts/**"),
            ("drafts/deep/a.md", "drafts/**"),
            ("a.md", "**/*.md"),
            ("x/y/z.md", "**/*.md"),
            ("notes/todo.md", "notes/*.md"),
            ("a1.md", "a?.md"),
            ("b.md", "[ab].md"),
        ],
    )
    def test_matches(self, path: str, pattern: str) -> None:
        assert matches_glob(path, pattern)

    @pytest.mark.parametrize(
        ("path", "pattern"),
        [
            ("notes/deep/todo.md", "notes/*.md"),
            ("draftsx/a.md", "drafts/**"),
            ("c.md", "[!c].md"),
            ("a12.md", "a?.md"),
        ],
    )
    def test_does_not_match(self, path: str, pattern: str) -> None:
        assert not matches_glob(path, pattern)

    def test_is_excluded_any_pattern(self) -> None:
        assert is_excluded("private/x.md", ["drafts/**", "private/**"])
        assert not is_excluded("public/x.md", ["drafts/**", "private/**"])

    def test_normalize_path(self) -> None:
        assert normalize_path("./blog\\en/post.md") == "blog/en/post.md"


class TestClassification:
    """Tests for index and archive page detection."""

    def test_index_pages(self) -> None:
        assert is_index_page("blog/index.md")
        assert is_index_page("INDEX.md")
        assert is_index_page("en/index.markdown")
        assert not is_index_page("blog/indexes.md")

    def test_archive_pages(self) -> None:
        assert is_archive_page("category/python.md")
        assert is_archive_page("en/tag/web.md")
        assert not is_archive_page("category.md")
        assert not is_archive_page("posts/categories.md")
