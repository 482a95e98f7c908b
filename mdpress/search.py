from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from .config import SearchConfig, SiteConfig
from .content import Document, parse_list
from .render import extract_headings, html_to_text, render_markdown, write_text
from .scanner import DirectoryScanner, ScanPolicy
from .utils import iso_date, utc_now

LOGGER = logging.getLogger(__name__)

INDEX_VERSION = "2.0"
INDEX_FILENAME = "search-index.json"
EXTENSION = ".md"


@dataclass(frozen=True)
class SearchEntry:
    id: str
    title: str
    description: str
    url: str
    language: str
    content: str
    headings: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        data = asdict(self)
        data["headings"] = list(self.headings)
        data["keywords"] = list(self.keywords)
        return data


class SearchIndex:
    def __init__(self, site: SiteConfig, config: SearchConfig | None = None) -> None:
        self.site = site
        self.config = config or SearchConfig()
        self.entries: list[SearchEntry] = []
        self.languages: list[str] = []

    def policy(self) -> ScanPolicy:
        return ScanPolicy(
            extension=EXTENSION,
            scan_subfolders=self.config.scan_subfolders,
            exclude_paths=tuple(self.config.exclude_paths),
            max_file_size=self.config.max_file_size,
            concurrency_limit=self.config.concurrency_limit,
            skip_index_pages=False,
            read_limit=self.config.read_limit,
            languages=tuple(self.site.languages),
            default_locale=self.site.locale,
        )

    def generate(self, content_root: Path) -> list[SearchEntry]:
        self.entries = []
        self.languages = []
        content_root = Path(content_root)
        if not content_root.is_dir():
            LOGGER.warning("Content directory not found: %s", content_root)
            return self.entries

        LOGGER.info(
            "Generating search index for %s (subfolders=%s)", content_root, self.config.scan_subfolders
        )
        for document in DirectoryScanner(self.policy()).scan(content_root):
            entry = self.build_entry(document)
            self.entries.append(entry)
            if entry.language not in self.languages:
                self.languages.append(entry.language)
        LOGGER.info("Search index generated: %d pages, languages %s", len(self.entries), self.languages)
        return self.entries

    def build_entry(self, document: Document) -> SearchEntry:
        config = self.config
        frontmatter = document.frontmatter
        html_text = render_markdown(document.body)
        stem = document.path[: -len(EXTENSION)] if document.path.endswith(EXTENSION) else document.path
        entry = SearchEntry(
            id=stem,
            title=str(frontmatter.get("title") or "Untitled")[: config.max_title_length],
            description=str(frontmatter.get("description") or "")[: config.max_description_length],
            url=f"{stem}.html",
            language=document.language,
            content=html_to_text(html_text)[: config.max_content_length],
            headings=tuple(extract_headings(html_text, config.max_headings)),
            keywords=tuple(parse_list(frontmatter.get("keywords"))[: config.max_keywords]),
        )
        LOGGER.debug(
            "File indexed: %s (%s, %d headings, %d chars)",
            entry.id,
            entry.language,
            len(entry.headings),
            len(entry.content),
        )
        return entry

    def to_dict(self) -> dict:
        return {
            "version": INDEX_VERSION,
            "generated": iso_date(utc_now()),
            "totalPages": len(self.entries),
            "languages": list(self.languages),
            "config": {
                "multilingualAware": self.config.multilingual_aware,
                "scanSubfolders": self.config.scan_subfolders,
            },
            "pages": [entry.to_dict() for entry in self.entries],
        }

    def save(self, output_dir: Path) -> Path:
        index_path = Path(output_dir) / INDEX_FILENAME
        write_text(index_path, json.dumps(self.to_dict(), indent=2, ensure_ascii=False))
        LOGGER.info("Search index saved: %s (%d pages)", index_path, len(self.entries))
        return index_path
