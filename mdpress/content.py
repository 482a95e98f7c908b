from __future__ import annotations

import datetime as dt
import html as html_lib
import math
import re
from dataclasses import dataclass
from typing import Any

import yaml

from .utils import as_utc

CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af]")
WORD_RE = re.compile(r"[A-Za-z0-9]+(?:'[A-Za-z0-9]+)?")
WORDS_PER_MINUTE = 200


class FrontmatterError(ValueError):
    pass


@dataclass(frozen=True)
class Document:
    path: str
    frontmatter: dict[str, Any]
    body: str
    language: str
    slug: str
    created_at: dt.datetime
    modified_at: dt.datetime
    size: int = 0
    truncated: bool = False

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]


def parse_front_matter(text: str) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    block = "\n".join(lines[1:end])
    try:
        meta = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"invalid YAML frontmatter: {exc}") from exc
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise FrontmatterError(f"frontmatter must be a mapping, got {type(meta).__name__}")
    body = "\n".join(lines[end + 1 :])
    return {str(key): value for key, value in meta.items()}, body


def parse_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value if item is not None]
    else:
        value = str(value).strip()
        if value.startswith("[") and value.endswith("]"):
            value = value[1:-1]
        items = [item.strip().strip("'\"") for item in value.split(",")]
    return [item for item in items if item]


def parse_date(value: object) -> dt.datetime | None:
    """Coerce a frontmatter date into an aware UTC datetime.

    YAML already turns most ISO dates into ``date``/``datetime`` objects;
    strings are accepted for the forms it leaves alone (``2025-01-10 10:00``,
    a trailing ``Z``). Returns None when the value is missing or unusable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, dt.datetime):
        return as_utc(value)
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day, tzinfo=dt.timezone.utc)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(dt.datetime.fromisoformat(text))
    except ValueError:
        return None


def count_words(text: str) -> int:
    text = html_lib.unescape(text)
    cjk_count = len(CJK_RE.findall(text))
    text = CJK_RE.sub(" ", text)
    word_count = len(WORD_RE.findall(text))
    return cjk_count + word_count


def reading_time(text: str) -> int:
    return max(1, math.ceil(count_words(text) / WORDS_PER_MINUTE))
