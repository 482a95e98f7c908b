from __future__ import annotations

import functools
import os
import re
from typing import Iterable, Mapping

ARCHIVE_SEGMENTS = frozenset({"category", "tag", "author"})

FILENAME_SLUG_RE = re.compile(r"[^a-z0-9-]+")
HYPHENS_RE = re.compile(r"-{2,}")
WHITESPACE_RE = re.compile(r"\s+")
NON_WORD_RE = re.compile(r"[^\w-]+")


def normalize_path(path: object) -> str:
    text = str(path).replace(os.sep, "/").replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    return text.strip("/")


def detect_language(
    path: str, frontmatter: Mapping[str, object], languages: Iterable[str], default_locale: str
) -> str:
    """Resolve a document language.

    Frontmatter ``language`` wins, then the first directory of the relative
    path when it names a configured language, then the default locale.
    """
    explicit = frontmatter.get("language")
    if explicit is not None and str(explicit).strip():
        return str(explicit).strip()
    parts = normalize_path(path).split("/")
    if len(parts) > 1 and parts[0] in set(languages):
        return parts[0]
    return default_locale


def filename_slug(filename: str, extension: str = ".md") -> str:
    text = filename.lower()
    if extension and text.endswith(extension.lower()):
        text = text[: -len(extension)]
    text = FILENAME_SLUG_RE.sub("-", text)
    text = HYPHENS_RE.sub("-", text)
    return text.strip("-")


def slugify(text: object) -> str:
    if text is None:
        return ""
    value = str(text).lower().strip()
    value = WHITESPACE_RE.sub("-", value)
    value = NON_WORD_RE.sub("", value)
    value = HYPHENS_RE.sub("-", value)
    return value.strip("-")


def _translate_glob(pattern: str) -> str:
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        char = pattern[i]
        if char == "*":
            if pattern.startswith("**", i):
                end = i + 2
                segment_start = i == 0 or pattern[i - 1] == "/"
                if segment_start and end < n and pattern[end] == "/":
                    out.append("(?:.*/)?")
                    i = end + 1
                    continue
                if segment_start and end == n:
                    out.append(".*")
                    i = end
                    continue
                out.append("[^/]*")
                i = end
                continue
            out.append("[^/]*")
            i += 1
        elif char == "?":
            out.append("[^/]")
            i += 1
        elif char == "[":
            close = pattern.find("]", i + 2)
            if close == -1:
                out.append(re.escape(char))
                i += 1
                continue
            body = pattern[i + 1 : close]
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append("[" + body.replace("\\", "\\\\") + "]")
            i = close + 1
        elif char == "/" and pattern.startswith("/**", i) and i + 3 == n:
            # "dir/**" also matches "dir" itself
            out.append("(?:/.*)?")
            i = n
        else:
            out.append(re.escape(char))
            i += 1
    return "".join(out)


@functools.lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern:
    return re.compile(_translate_glob(normalize_path(pattern)))


def matches_glob(path: str, pattern: str) -> bool:
    return compile_glob(pattern).fullmatch(normalize_path(path)) is not None


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    normalized = normalize_path(path)
    return any(compile_glob(pattern).fullmatch(normalized) for pattern in patterns)


def is_index_page(path: str, extension: str = ".md") -> bool:
    filename = normalize_path(path).rsplit("/", 1)[-1]
    return filename.lower() in {f"index{extension}".lower(), "index.markdown"}


def is_archive_page(path: str) -> bool:
    directories = normalize_path(path).split("/")[:-1]
    return any(part in ARCHIVE_SEGMENTS for part in directories)
