"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdpress.config import ConfigError, Settings, SiteConfig, load_config, load_settings


class TestLoadConfig:
    """Reading TOML, YAML and JSON config files."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "site.toml") == {}

    def test_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "site.toml"
        path.write_text('[site]\nsite_url = "https://blog.example"\n', encoding="utf-8")
        assert load_config(path) == {"site": {"site_url": "https://blog.example"}}

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "site.yaml"
        path.write_text("blog:\n  postsPerPage: 5\n", encoding="utf-8")
        assert load_config(path) == {"blog": {"postsPerPage": 5}}

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "site.json"
        path.write_text('{"search": {"enabled": false}}', encoding="utf-8")
        assert load_config(path) == {"search": {"enabled": False}}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "site.toml"
        path.write_text("[site\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "site.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)


class TestSettings:
    """Typed settings built from raw mappings."""

    def test_defaults(self) -> None:
        settings = Settings.from_mapping({})
        assert settings.blog.posts_per_page == 10
        assert settings.blog.max_archive_pages == 500
        assert settings.blog.feed_limit == 20
        assert settings.search.max_content_length == 5000
        assert settings.search.read_limit == 15000
        assert settings.site.languages == ("en",)
        assert not settings.site.multilingual

    def test_camel_case_keys(self) -> None:
        settings = Settings.from_mapping(
            {"blog": {"postsPerPage": 3, "excludePaths": ["drafts/**"]}}
        )
        assert settings.blog.posts_per_page == 3
        assert settings.blog.exclude_paths == ("drafts/**",)

    def test_languages(self) -> None:
        settings = Settings.from_mapping({"site": {"locale": "ro", "languages": ["ro", "en"]}})
        assert settings.site.languages == ("ro", "en")
        assert settings.site.multilingual

    def test_repeated_languages_collapsed(self) -> None:
        settings = Settings.from_mapping({"site": {"languages": ["en", "ro", "en"]}})
        assert settings.site.languages == ("en", "ro")
        assert not SiteConfig(languages=("en", "en")).multilingual

    @pytest.mark.parametrize(
        "data",
        [
            {"blog": {"posts_per_page": 0}},
            {"blog": {"posts_per_page": "many"}},
            {"blog": {"exclude_paths": [1, 2]}},
            {"site": {"locale": ""}},
            {"search": "yes"},
            {"blog": {"max_file_size": True}},
        ],
    )
    def test_invalid_values(self, data: dict) -> None:
        with pytest.raises(ConfigError):
            Settings.from_mapping(data)

    def test_load_settings_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "site.toml"
        path.write_text('[blog]\nblog_name = "Notes"\nmax_archive_pages = 0\n', encoding="utf-8")
        settings = load_settings(path)
        assert settings.blog.blog_name == "Notes"
        assert settings.blog.max_archive_pages == 0
