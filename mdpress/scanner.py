from __future__ import annotations

import datetime as dt
import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from .content import Document, FrontmatterError, parse_front_matter
from .paths import detect_language, filename_slug, is_excluded, is_index_page, normalize_path

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024
DEFAULT_CONCURRENCY = 50


@dataclass(frozen=True)
class ScanPolicy:
    extension: str = ".md"
    scan_subfolders: bool = True
    exclude_paths: tuple[str, ...] = ()
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    concurrency_limit: int = DEFAULT_CONCURRENCY
    skip_index_pages: bool = False
    read_limit: int | None = None
    languages: tuple[str, ...] = ()
    default_locale: str = "en"


def file_created_at(stat: os.stat_result) -> dt.datetime:
    timestamp = getattr(stat, "st_birthtime", None) or stat.st_mtime
    return dt.datetime.fromtimestamp(timestamp, dt.timezone.utc)


class DirectoryScanner:
    """Per-file problems are logged and the file is dropped, never raised."""

    def __init__(self, policy: ScanPolicy | None = None) -> None:
        self.policy = policy or ScanPolicy()

    def scan(self, root_dir: Path, base_path: str = "") -> list[Document]:
        root_dir = Path(root_dir)
        if not root_dir.is_dir():
            LOGGER.info("Content directory not found: %s", root_dir)
            return []
        documents: list[Document] = []
        workers = max(1, int(self.policy.concurrency_limit))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            self._scan_directory(executor, root_dir, normalize_path(base_path), documents)
        LOGGER.debug("Scanned %s: %d documents", root_dir, len(documents))
        return documents

    def _scan_directory(
        self,
        executor: ThreadPoolExecutor,
        directory: Path,
        base_path: str,
        documents: list[Document],
    ) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as exc:
            LOGGER.error("Error scanning directory %s: %s", directory, exc)
            return

        policy = self.policy
        pending: list[Future] = []
        subdirectories: list[tuple[Path, str]] = []
        for entry in entries:
            relative = f"{base_path}/{entry.name}" if base_path else entry.name
            try:
                if entry.is_symlink():
                    continue
                if entry.is_dir(follow_symlinks=False):
                    if not policy.scan_subfolders:
                        continue
                    if is_excluded(relative, policy.exclude_paths):
                        LOGGER.debug("Skipping excluded directory: %s", relative)
                        continue
                    subdirectories.append((Path(entry.path), relative))
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue
            except OSError as exc:
                LOGGER.error("Cannot inspect %s: %s", relative, exc)
                continue
            if not entry.name.endswith(policy.extension):
                continue
            if is_excluded(relative, policy.exclude_paths):
                LOGGER.debug("Skipping excluded file: %s", relative)
                continue
            if policy.skip_index_pages and is_index_page(relative, policy.extension):
                LOGGER.debug("Skipping index page: %s", relative)
                continue
            pending.append(executor.submit(self._read_document, Path(entry.path), relative))

        for future in pending:
            document = future.result()
            if document is not None:
                documents.append(document)

        for path, relative in subdirectories:
            self._scan_directory(executor, path, relative, documents)

    def _read_document(self, path: Path, relative: str) -> Document | None:
        policy = self.policy
        try:
            stat = path.stat()
            if stat.st_size > policy.max_file_size:
                LOGGER.warning(
                    "File too large to index: %s (%d bytes, max %d)",
                    relative,
                    stat.st_size,
                    policy.max_file_size,
                )
                return None
            data = path.read_bytes()
            truncated = policy.read_limit is not None and len(data) > policy.read_limit
            if truncated:
                LOGGER.debug(
                    "Truncating large file %s from %d to %d bytes",
                    relative,
                    len(data),
                    policy.read_limit,
                )
                text = data[: policy.read_limit].decode("utf-8", errors="ignore")
            else:
                text = data.decode("utf-8")
            frontmatter, body = parse_front_matter(text)
        except (OSError, UnicodeDecodeError, FrontmatterError) as exc:
            LOGGER.error("Error parsing file %s: %s", relative, exc)
            return None

        return Document(
            path=relative,
            frontmatter=frontmatter,
            body=body,
            language=detect_language(relative, frontmatter, policy.languages, policy.default_locale),
            slug=filename_slug(path.name, policy.extension),
            created_at=file_created_at(stat),
            modified_at=dt.datetime.fromtimestamp(stat.st_mtime, dt.timezone.utc),
            size=stat.st_size,
            truncated=truncated,
        )
