from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .scanner import DEFAULT_CONCURRENCY, DEFAULT_MAX_FILE_SIZE
from .utils import parse_bool

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

CAMEL_RE = re.compile(r"_([a-z])")


class ConfigError(ValueError):
    pass


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        if toml is None:
            raise ConfigError("TOML config requires tomllib (Python 3.11+) or tomli.")
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    return data


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    if key in data:
        return data[key]
    return data.get(CAMEL_RE.sub(lambda m: m.group(1).upper(), key))


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"[{name}] must be a table")
    return value


def _str(data: Mapping[str, Any], key: str, default: str) -> str:
    value = _lookup(data, key)
    if value is None:
        return default
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ConfigError(f"{key} must be a string")
    return str(value)


def _bool(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = _lookup(data, key)
    return default if value is None else parse_bool(value)


def _int(data: Mapping[str, Any], key: str, default: int, minimum: int = 1) -> int:
    value = _lookup(data, key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer")
    try:
        number = int(str(value).strip())
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc
    if number < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {number}")
    return number


def _strings(data: Mapping[str, Any], key: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    value = _lookup(data, key)
    if value is None:
        return default
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key} must be a list of strings")
    return tuple(item.strip() for item in value if item.strip())


@dataclass(frozen=True)
class SiteConfig:
    content_dir: Path = Path("content")
    output_dir: Path = Path("dist")
    templates_dir: Path = Path("templates")
    site_url: str = "https://example.com"
    site_name: str = "Blog"
    site_description: str = ""
    locale: str = "en"
    languages: tuple[str, ...] = ("en",)

    @property
    def multilingual(self) -> bool:
        return len(set(self.languages)) > 1

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SiteConfig":
        locale = _str(data, "locale", "en").strip()
        if not locale:
            raise ConfigError("locale must not be empty")
        languages = tuple(dict.fromkeys(_strings(data, "languages"))) or (locale,)
        return cls(
            content_dir=Path(_str(data, "content_dir", "content")),
            output_dir=Path(_str(data, "output_dir", "dist")),
            templates_dir=Path(_str(data, "templates_dir", "templates")),
            site_url=_str(data, "site_url", "https://example.com").rstrip("/"),
            site_name=_str(data, "site_name", "Blog"),
            site_description=_str(data, "site_description", ""),
            locale=locale,
            languages=languages,
        )


@dataclass(frozen=True)
class BlogConfig:
    enabled: bool = True
    blog_name: str = "Blog"
    blog_description: str = ""
    scan_subfolders: bool = True
    exclude_paths: tuple[str, ...] = ()
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    concurrency_limit: int = DEFAULT_CONCURRENCY
    posts_per_page: int = 10
    excerpt_length: int = 150
    max_tags_per_post: int = 20
    max_categories_per_post: int = 10
    max_archive_pages: int = 500
    enable_rss: bool = True
    enable_atom: bool = True
    feed_limit: int = 20
    counter_file: Path = Path(".blog-counter")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BlogConfig":
        return cls(
            enabled=_bool(data, "enabled", True),
            blog_name=_str(data, "blog_name", "Blog"),
            blog_description=_str(data, "blog_description", ""),
            scan_subfolders=_bool(data, "scan_subfolders", True),
            exclude_paths=_strings(data, "exclude_paths"),
            max_file_size=_int(data, "max_file_size", DEFAULT_MAX_FILE_SIZE),
            concurrency_limit=_int(data, "concurrency_limit", DEFAULT_CONCURRENCY),
            posts_per_page=_int(data, "posts_per_page", 10),
            excerpt_length=_int(data, "excerpt_length", 150),
            max_tags_per_post=_int(data, "max_tags_per_post", 20, minimum=0),
            max_categories_per_post=_int(data, "max_categories_per_post", 10, minimum=0),
            max_archive_pages=_int(data, "max_archive_pages", 500, minimum=0),
            enable_rss=_bool(data, "enable_rss", True),
            enable_atom=_bool(data, "enable_atom", True),
            feed_limit=_int(data, "feed_limit", 20),
            counter_file=Path(_str(data, "counter_file", ".blog-counter")),
        )


@dataclass(frozen=True)
class SearchConfig:
    enabled: bool = True
    scan_subfolders: bool = True
    exclude_paths: tuple[str, ...] = ()
    multilingual_aware: bool = True
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_content_length: int = 5000
    max_title_length: int = 200
    max_description_length: int = 500
    max_headings: int = 50
    max_keywords: int = 20
    concurrency_limit: int = DEFAULT_CONCURRENCY

    @property
    def read_limit(self) -> int:
        return min(self.max_file_size, self.max_content_length * 3)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SearchConfig":
        return cls(
            enabled=_bool(data, "enabled", True),
            scan_subfolders=_bool(data, "scan_subfolders", True),
            exclude_paths=_strings(data, "exclude_paths"),
            multilingual_aware=_bool(data, "multilingual_aware", True),
            max_file_size=_int(data, "max_file_size", DEFAULT_MAX_FILE_SIZE),
            max_content_length=_int(data, "max_content_length", 5000),
            max_title_length=_int(data, "max_title_length", 200),
            max_description_length=_int(data, "max_description_length", 500),
            max_headings=_int(data, "max_headings", 50, minimum=0),
            max_keywords=_int(data, "max_keywords", 20, minimum=0),
            concurrency_limit=_int(data, "concurrency_limit", DEFAULT_CONCURRENCY),
        )


@dataclass(frozen=True)
class Settings:
    site: SiteConfig = field(default_factory=SiteConfig)
    blog: BlogConfig = field(default_factory=BlogConfig)
    search: SearchConfig = field(default_factory=SearchConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        return cls(
            site=SiteConfig.from_mapping(_section(data, "site")),
            blog=BlogConfig.from_mapping(_section(data, "blog")),
            search=SearchConfig.from_mapping(_section(data, "search")),
        )


def load_settings(path: Path) -> Settings:
    return Settings.from_mapping(load_config(path))
