"""Tests for the command line entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from mdpress.cli import configure_logging, main

from conftest import write_md


@pytest.fixture
def project(tmp_path: Path) -> Path:
    content = tmp_path / "content"
    for day in range(1, 4):
        write_md(content / "blog" / f"post-{day}.md", f"title: Post {day}\ndate: 2025-01-0{day}")
    (tmp_path / "site.toml").write_text(
        "\n".join(
            [
                "[site]",
                f'content_dir = "{content.as_posix()}"',
                f'output_dir = "{(tmp_path / "dist").as_posix()}"',
                'site_url = "https://blog.example"',
                "[blog]",
                "posts_per_page = 2",
            ]
        ),
        encoding="utf-8",
    )
    return tmp_path


class TestConfigureLogging:
    """Verbosity flags map to log levels."""

    @pytest.mark.parametrize(
        ("verbose", "quiet", "level"),
        [(True, False, logging.DEBUG), (False, False, logging.INFO), (False, True, logging.WARNING)],
    )
    def test_levels(self, verbose: bool, quiet: bool, level: int) -> None:
        with patch("mdpress.cli.logging.basicConfig") as mock_config:
            configure_logging(verbose, quiet)
        assert mock_config.call_args[1]["level"] == level


class TestMain:
    """End-to-end builds through main()."""

    def test_build(self, project: Path, capsys: pytest.CaptureFixture) -> None:
        main(["build", "--config", str(project / "site.toml"), "-q"])

        dist = project / "dist"
        assert (dist / "blog" / "feed.xml").exists()
        assert (dist / "blog" / "atom.xml").exists()
        assert (dist / "search-index.json").exists()
        pages = json.loads((dist / "blog" / "pages.json").read_text(encoding="utf-8"))
        assert [page["path"] for page in pages] == ["blog/page-2.md"]
        contexts = json.loads((dist / "blog" / "page-context.json").read_text(encoding="utf-8"))
        assert {"blog/index.md", "blog/post-1.md", "blog/page-2.md"} <= set(contexts)
        assert [view["title"] for view in contexts["blog/page-2.md"]["blog"]["posts"]] == ["Post 1"]
        assert contexts["blog/post-1.md"]["prev"]["title"] == "Post 2"
        assert (project / ".blog-counter").exists()
        out = capsys.readouterr().out
        assert "Built 3 posts" in out
        assert "5 enriched pages" in out
        assert "Build completed in" in out

    def test_flags_skip_outputs(self, project: Path) -> None:
        output = project / "other"
        main(["--config", str(project / "site.toml"), "--output", str(output), "--no-feeds", "--no-search", "-q"])
        assert not (output / "blog" / "feed.xml").exists()
        assert not (output / "search-index.json").exists()
        assert (output / "blog" / "pages.json").exists()

    def test_invalid_config_exits(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        config = tmp_path / "site.toml"
        config.write_text("[blog]\nposts_per_page = 0\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["build", "--config", str(config)])
        assert excinfo.value.code == 1
        assert "posts_per_page" in capsys.readouterr().err

    def test_missing_content_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["build", "--config", str(tmp_path / "site.toml"), "--content", str(tmp_path / "none")])
