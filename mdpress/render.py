from __future__ import annotations

import html as html_lib
import re
from pathlib import Path

import markdown

TAG_RE = re.compile(r"<[^>]+>")
HEADING_RE = re.compile(r"<h[1-6][^>]*>(.*?)</h[1-6]>", re.IGNORECASE | re.DOTALL)
SPACE_RE = re.compile(r"\s+")
MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]


def render_markdown(text: str) -> str:
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    return md.convert(text)


def html_to_text(html_text: str) -> str:
    text = html_lib.unescape(TAG_RE.sub(" ", html_text))
    return SPACE_RE.sub(" ", text).strip()


def extract_headings(html_text: str, limit: int | None = None) -> list[str]:
    headings = []
    for match in HEADING_RE.finditer(html_text):
        if limit is not None and len(headings) >= limit:
            break
        heading = html_to_text(match.group(1))
        if heading:
            headings.append(heading)
    return headings


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
