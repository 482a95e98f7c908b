from __future__ import annotations

import datetime as dt
import logging
from collections import Counter
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from .cache import PostIdCounter
from .config import BlogConfig, SiteConfig
from .content import Document, parse_date, parse_list, reading_time
from .paths import filename_slug, is_archive_page, is_index_page, slugify
from .scanner import DirectoryScanner, ScanPolicy
from .utils import parse_bool, parse_int

LOGGER = logging.getLogger(__name__)

EXTENSION = ".md"
MAX_KEYWORDS = 20
OLDEST = dt.datetime.min.replace(tzinfo=dt.timezone.utc)


@dataclass(frozen=True)
class Post:
    slug: str
    filename: str
    path: str
    url: str
    language: str
    title: str
    date: dt.datetime | None
    created_at: dt.datetime
    description: str = ""
    author: str | None = None
    author_url: str | None = None
    author_avatar: str | None = None
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    featured_image: str | None = None
    featured_image_alt: str = ""
    excerpt: str = ""
    excerpt_length: int | None = None
    content: str = ""
    published: bool = True
    status: str = "publish"
    template: str = "blog-post"
    updated: dt.datetime | None = None
    reading_time: int | None = None
    related_posts: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    post_id: int | None = None

    @property
    def is_draft(self) -> bool:
        return self.status == "draft"

    @property
    def category_slugs(self) -> tuple[str, ...]:
        return tuple(slugify(name) for name in self.categories)

    @property
    def tag_slugs(self) -> tuple[str, ...]:
        return tuple(slugify(name) for name in self.tags)

    @property
    def author_slug(self) -> str:
        return slugify(self.author) if self.author else ""


def _first(frontmatter: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = frontmatter.get(key)
        if value is not None and value != "":
            return value
    return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _positive_int(value: Any) -> int | None:
    number = parse_int(value, 0)
    return number if number > 0 else None


def validate_frontmatter(frontmatter: Mapping[str, Any], path: str) -> list[str]:
    errors = []
    if not _optional_str(frontmatter.get("title")):
        errors.append("Missing required field: title")
    date_value = frontmatter.get("date")
    date_exempt = is_index_page(path, EXTENSION) or is_archive_page(path)
    if date_value is None or date_value == "":
        if not date_exempt:
            errors.append("Missing required field: date")
    elif parse_date(date_value) is None:
        errors.append(f"Invalid date format: {date_value}")
    return errors


def truncate_terms(values: list[str], limit: int, kind: str, title: str, path: str) -> list[str]:
    if len(values) <= limit:
        return values
    LOGGER.warning(
        'Post "%s" (%s) has %d %s, exceeds limit of %d; using only the first %d.',
        title,
        path,
        len(values),
        kind,
        limit,
        limit,
    )
    return values[:limit]


def sort_posts(posts: Iterable[Post]) -> list[Post]:
    """Newest date first, then newest file creation, then path.

    Undated pages (index and archive pages) go after every dated post.
    """
    ordered = sorted(posts, key=lambda post: post.path)
    ordered.sort(
        key=lambda post: (post.date is not None, post.date or OLDEST, post.created_at),
        reverse=True,
    )
    return ordered


def listable_posts(posts: Iterable[Post]) -> list[Post]:
    return [post for post in posts if not post.is_draft and not is_archive_page(post.path)]


def group_by_language(posts: Iterable[Post]) -> dict[str, list[Post]]:
    grouped: dict[str, list[Post]] = {}
    for post in posts:
        grouped.setdefault(post.language, []).append(post)
    return grouped


def assign_post_ids(posts: Sequence[Post], counter: PostIdCounter) -> list[Post]:
    for post in reversed(posts):
        counter.id_for(post.path)
    counter.persist()
    assigned = [replace(post, post_id=counter.id_for(post.path)) for post in posts]
    LOGGER.info("Assigned IDs to %d posts (counter: %d)", len(assigned), counter.counter)
    return assigned


class PostRepository:
    def __init__(self, site: SiteConfig, blog: BlogConfig) -> None:
        self.site = site
        self.blog = blog

    def policy(self, languages: Sequence[str]) -> ScanPolicy:
        return ScanPolicy(
            extension=EXTENSION,
            scan_subfolders=self.blog.scan_subfolders,
            exclude_paths=tuple(self.blog.exclude_paths),
            max_file_size=self.blog.max_file_size,
            concurrency_limit=self.blog.concurrency_limit,
            skip_index_pages=True,
            languages=tuple(languages),
            default_locale=self.site.locale,
        )

    def discover(self, content_root: Path, languages: Sequence[str] | None = None) -> list[Post]:
        languages = tuple(dict.fromkeys(languages or self.site.languages))
        blog_root = Path(content_root) / "blog"
        scanner = DirectoryScanner(self.policy(languages))
        multilingual = len(languages) > 1
        LOGGER.info("Scanning for blog posts (multilingual=%s, languages=%s)", multilingual, list(languages))

        documents: list[Document] = []
        if multilingual:
            for language in languages:
                language_root = blog_root / language
                if not language_root.is_dir():
                    LOGGER.debug("Blog directory not found for %s: %s", language, language_root)
                    continue
                documents.extend(scanner.scan(language_root, language))
        elif blog_root.is_dir():
            documents = scanner.scan(blog_root)
        else:
            LOGGER.debug("Blog directory not found: %s", blog_root)

        posts = []
        seen: set[str] = set()
        for document in documents:
            if document.path in seen:
                LOGGER.debug("Skipping duplicate document: %s", document.path)
                continue
            seen.add(document.path)
            post = self.build_post(document)
            if post is None:
                continue
            if not post.published:
                LOGGER.debug("Skipping unpublished post: %s", document.path)
                continue
            posts.append(post)
        posts = sort_posts(posts)
        by_language = Counter(post.language for post in posts)
        LOGGER.info("Blog scan completed: %d posts %s", len(posts), dict(by_language))
        return posts

    def build_post(self, document: Document) -> Post | None:
        frontmatter = document.frontmatter
        errors = validate_frontmatter(frontmatter, document.path)
        if errors:
            LOGGER.error("Invalid frontmatter in %s: %s", document.path, "; ".join(errors))
            return None

        title = str(frontmatter["title"]).strip()
        categories = parse_list(_first(frontmatter, "categories", "category"))
        tags = parse_list(frontmatter.get("tags"))
        categories = truncate_terms(
            categories, self.blog.max_categories_per_post, "categories", title, document.path
        )
        tags = truncate_terms(tags, self.blog.max_tags_per_post, "tags", title, document.path)

        explicit_slug = _optional_str(frontmatter.get("slug"))
        slug = filename_slug(explicit_slug, "") if explicit_slug else document.slug
        stem = document.path[: -len(EXTENSION)] if document.path.endswith(EXTENSION) else document.path
        published = frontmatter.get("published")
        status = str(frontmatter.get("status") or "publish").strip().lower()

        return Post(
            slug=slug,
            filename=document.filename,
            path=document.path,
            url=f"blog/{stem}.html",
            language=document.language,
            title=title,
            date=parse_date(frontmatter.get("date")),
            created_at=document.created_at,
            description=str(frontmatter.get("description") or ""),
            author=_optional_str(frontmatter.get("author")),
            author_url=_optional_str(_first(frontmatter, "author_url", "authorUrl")),
            author_avatar=_optional_str(_first(frontmatter, "author_avatar", "authorAvatar")),
            categories=tuple(categories),
            tags=tuple(tags),
            featured_image=_optional_str(_first(frontmatter, "featured_image", "featuredImage")),
            featured_image_alt=str(_first(frontmatter, "featured_image_alt", "featuredImageAlt") or ""),
            excerpt=str(frontmatter.get("excerpt") or ""),
            excerpt_length=_positive_int(_first(frontmatter, "excerpt_length", "excerptLength")),
            content=document.body,
            published=True if published is None else parse_bool(published),
            status="draft" if status == "draft" else "publish",
            template=str(frontmatter.get("template") or "blog-post"),
            updated=parse_date(_first(frontmatter, "updated", "update_date", "updateDate")),
            reading_time=_positive_int(_first(frontmatter, "reading_time", "readingTime"))
            or reading_time(document.body),
            related_posts=tuple(parse_list(_first(frontmatter, "related_posts", "relatedPosts"))),
            keywords=tuple(parse_list(frontmatter.get("keywords"))[:MAX_KEYWORDS]),
        )
