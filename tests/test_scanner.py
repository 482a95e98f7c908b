"""Tests for DirectoryScanner."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from mdpress.scanner import DirectoryScanner, ScanPolicy

from conftest import write_md


def scanned_paths(documents) -> list[str]:
    return sorted(document.path for document in documents)


class TestDirectoryScanner:
    """Scanning a content tree into Documents."""

    def test_missing_root_returns_empty(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            assert DirectoryScanner().scan(tmp_path / "missing") == []
        assert "not found" in caplog.text

    def test_reads_nested_markdown(self, tmp_path: Path) -> None:
        write_md(tmp_path / "a.md", "title: A")
        write_md(tmp_path / "sub" / "b.md", "title: B")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

        documents = DirectoryScanner().scan(tmp_path)

        assert scanned_paths(documents) == ["a.md", "sub/b.md"]
        by_path = {document.path: document for document in documents}
        assert by_path["a.md"].frontmatter == {"title": "A"}
        assert by_path["sub/b.md"].slug == "b"
        assert by_path["sub/b.md"].filename == "b.md"

    def test_top_level_only(self, tmp_path: Path) -> None:
        write_md(tmp_path / "a.md", "title: A")
        write_md(tmp_path / "sub" / "b.md", "title: B")
        documents = DirectoryScanner(ScanPolicy(scan_subfolders=False)).scan(tmp_path)
        assert scanned_paths(documents) == ["a.md"]

    def test_excluded_directory_and_file(self, tmp_path: Path) -> None:
        write_md(tmp_path / "keep.md", "title: Keep")
        write_md(tmp_path / "drafts" / "wip.md", "title: Wip")
        write_md(tmp_path / "private.md", "title: Private")
        policy = ScanPolicy(exclude_paths=("drafts/**", "private.md"))
        assert scanned_paths(DirectoryScanner(policy).scan(tmp_path)) == ["keep.md"]

    def test_skip_index_pages(self, tmp_path: Path) -> None:
        write_md(tmp_path / "index.md", "title: Home")
        write_md(tmp_path / "post.md", "title: Post")
        with_index = DirectoryScanner(ScanPolicy()).scan(tmp_path)
        without_index = DirectoryScanner(ScanPolicy(skip_index_pages=True)).scan(tmp_path)
        assert scanned_paths(with_index) == ["index.md", "post.md"]
        assert scanned_paths(without_index) == ["post.md"]

    def test_oversized_file_skipped_with_warning(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """One oversized file among two valid ones yields exactly two documents."""
        write_md(tmp_path / "one.md", "title: One")
        write_md(tmp_path / "two.md", "title: Two")
        write_md(tmp_path / "big.md", "title: Big", "x" * 4096)

        with caplog.at_level(logging.WARNING):
            documents = DirectoryScanner(ScanPolicy(max_file_size=1024)).scan(tmp_path)

        assert scanned_paths(documents) == ["one.md", "two.md"]
        assert "big.md" in caplog.text

    def test_invalid_frontmatter_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        write_md(tmp_path / "ok.md", "title: Ok")
        write_md(tmp_path / "bad.md", "title: [broken")
        with caplog.at_level(logging.ERROR):
            documents = DirectoryScanner().scan(tmp_path)
        assert scanned_paths(documents) == ["ok.md"]
        assert "bad.md" in caplog.text

    def test_undecodable_file_skipped(self, tmp_path: Path) -> None:
        write_md(tmp_path / "ok.md", "title: Ok")
        (tmp_path / "binary.md").write_bytes(b"\xff\xfe\x00bad")
        assert scanned_paths(DirectoryScanner().scan(tmp_path)) == ["ok.md"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinks_not_followed(self, tmp_path: Path) -> None:
        outside = tmp_path / "outside"
        write_md(outside / "secret.md", "title: Secret")
        root = tmp_path / "content"
        write_md(root / "real.md", "title: Real")
        try:
            (root / "linked").symlink_to(outside, target_is_directory=True)
            (root / "alias.md").symlink_to(root / "real.md")
        except OSError:
            pytest.skip("cannot create symlinks here")
        assert scanned_paths(DirectoryScanner().scan(root)) == ["real.md"]

    def test_read_limit_truncates(self, tmp_path: Path) -> None:
        write_md(tmp_path / "long.md", "title: Long", "y" * 500)
        documents = DirectoryScanner(ScanPolicy(read_limit=100)).scan(tmp_path)
        assert len(documents) == 1
        assert documents[0].truncated
        assert documents[0].frontmatter == {"title": "Long"}
        assert len(documents[0].body) < 100

    def test_read_limit_counts_bytes(self, tmp_path: Path) -> None:
        write_md(tmp_path / "wide.md", "title: Wide", "\u00e9" * 200)
        documents = DirectoryScanner(ScanPolicy(read_limit=101)).scan(tmp_path)
        assert documents[0].truncated
        assert documents[0].frontmatter == {"title": "Wide"}
        assert 0 < len(documents[0].body.encode("utf-8")) < 101
        assert set(documents[0].body.strip()) == {"\u00e9"}

    def test_base_path_prefix_and_language(self, tmp_path: Path) -> None:
        write_md(tmp_path / "hello.md", "title: Salut")
        policy = ScanPolicy(languages=("en", "ro"), default_locale="en")
        documents = DirectoryScanner(policy).scan(tmp_path, "ro")
        assert documents[0].path == "ro/hello.md"
        assert documents[0].language == "ro"

    def test_low_concurrency_same_result(self, tmp_path: Path) -> None:
        for number in range(12):
            write_md(tmp_path / f"post-{number:02d}.md", f"title: Post {number}")
        wide = DirectoryScanner(ScanPolicy(concurrency_limit=50)).scan(tmp_path)
        narrow = DirectoryScanner(ScanPolicy(concurrency_limit=1)).scan(tmp_path)
        assert scanned_paths(wide) == scanned_paths(narrow)
        assert len(narrow) == 12
