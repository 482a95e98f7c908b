from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from .paths import slugify
from .posts import Post, listable_posts

LOGGER = logging.getLogger(__name__)

ARCHIVE_TYPES = ("category", "tag", "author")
TITLE_PREFIXES = {"category": "Category", "tag": "Tag", "author": "Author"}


@dataclass
class TaxonomyTerm:
    name: str
    count: int = 0
    url: str | None = None
    avatar: str | None = None


@dataclass(frozen=True)
class Archive:
    type: str
    slug: str
    name: str
    title: str
    count: int
    posts: tuple[Post, ...]
    url: str | None = None
    avatar: str | None = None

    @property
    def path(self) -> str:
        return f"blog/{self.type}/{self.slug}"


@dataclass(frozen=True)
class ArchiveData:
    categories: dict[str, TaxonomyTerm] = field(default_factory=dict)
    tags: dict[str, TaxonomyTerm] = field(default_factory=dict)
    authors: dict[str, TaxonomyTerm] = field(default_factory=dict)
    archives: tuple[Archive, ...] = ()

    def terms(self, archive_type: str) -> dict[str, TaxonomyTerm]:
        return {"category": self.categories, "tag": self.tags, "author": self.authors}[archive_type]

    def find(self, archive_type: str, slug: str) -> Archive | None:
        for archive in self.archives:
            if archive.type == archive_type and archive.slug == slug:
                return archive
        return None


def archive_title(archive_type: str, name: str) -> str:
    return f"{TITLE_PREFIXES.get(archive_type, 'Archive')}: {name}"


def post_terms(post: Post, archive_type: str) -> tuple[str, ...]:
    if archive_type == "category":
        return post.categories
    if archive_type == "tag":
        return post.tags
    if archive_type == "author":
        return (post.author,) if post.author else ()
    raise ValueError(f"Unknown archive type: {archive_type}")


def filter_posts(posts: Iterable[Post], archive_type: str, slug: str) -> list[Post]:
    return [
        post for post in posts if any(slugify(term) == slug for term in post_terms(post, archive_type))
    ]


def count_terms(posts: Iterable[Post], archive_type: str) -> dict[str, TaxonomyTerm]:
    counts: dict[str, TaxonomyTerm] = {}
    for post in posts:
        for term in post_terms(post, archive_type):
            slug = slugify(term)
            if not slug:
                continue
            if slug not in counts:
                if archive_type == "author":
                    counts[slug] = TaxonomyTerm(term, url=post.author_url, avatar=post.author_avatar)
                else:
                    counts[slug] = TaxonomyTerm(term)
            counts[slug].count += 1
    return counts


class ArchiveAggregator:
    def generate(self, posts: Sequence[Post]) -> ArchiveData:
        posts = listable_posts(posts)
        if not posts:
            LOGGER.warning("No blog posts found, skipping archive generation")
            return ArchiveData()

        terms = {archive_type: count_terms(posts, archive_type) for archive_type in ARCHIVE_TYPES}
        archives = []
        for archive_type in ARCHIVE_TYPES:
            for slug, term in terms[archive_type].items():
                archives.append(
                    Archive(
                        type=archive_type,
                        slug=slug,
                        name=term.name,
                        title=archive_title(archive_type, term.name),
                        count=term.count,
                        posts=tuple(filter_posts(posts, archive_type, slug)),
                        url=term.url,
                        avatar=term.avatar,
                    )
                )

        data = ArchiveData(
            categories=terms["category"],
            tags=terms["tag"],
            authors=terms["author"],
            archives=tuple(archives),
        )
        LOGGER.info(
            "Archive metadata generated: %d categories, %d tags, %d authors, %d archives",
            len(data.categories),
            len(data.tags),
            len(data.authors),
            len(data.archives),
        )
        return data


def archive_pages_allowed(archives: Sequence[Archive], max_archive_pages: int) -> bool:
    if len(archives) > max_archive_pages:
        LOGGER.warning(
            "Found %d unique archives, which exceeds the safety limit of %d. "
            "Skipping archive page generation; blog posts are still generated.",
            len(archives),
            max_archive_pages,
        )
        return False
    return True


def template_hierarchy(archive_type: str, slug: str) -> list[str]:
    if archive_type in ARCHIVE_TYPES:
        return [f"{archive_type}-{slug}", archive_type, "archive", "blog-index"]
    if archive_type == "date":
        return ["date", "archive", "blog-index"]
    return ["archive", "blog-index"]


def resolve_archive_template(
    archive_type: str, slug: str, templates_dir: Path, suffix: str = ".html"
) -> str | None:
    for name in template_hierarchy(archive_type, slug):
        candidate = f"{name}{suffix}"
        if (Path(templates_dir) / candidate).exists():
            return candidate
    return None
