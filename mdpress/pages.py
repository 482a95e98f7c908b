from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Sequence

from .archives import Archive, archive_pages_allowed, filter_posts, resolve_archive_template
from .config import BlogConfig
from .pagination import PaginationPlan, base_path, page_items, page_url, plan, total_pages
from .paths import normalize_path, slugify
from .posts import Post, listable_posts
from .render import html_to_text, render_markdown
from .utils import iso_date

LOGGER = logging.getLogger(__name__)

INDEX_RE = re.compile(r"^blog/index\.md$")
INDEX_PAGE_RE = re.compile(r"^blog/page-(\d+)\.md$")
ARCHIVE_RE = re.compile(r"^blog/(category|tag|author)/([^/]+?)(?:/page-(\d+))?\.md$")
TITLE_PREFIXES = {"category": "Category", "tag": "Tag", "author": "Author"}
INDEX_TEMPLATE = "blog-index.html"


@dataclass(frozen=True)
class VirtualPage:
    path: str
    output_name: str
    title: str
    description: str
    template: str
    current_page: int
    total_pages: int
    archive_type: str | None = None
    archive_slug: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def plan_virtual_pages(
    posts: Sequence[Post], archives: Sequence[Archive], blog: BlogConfig
) -> list[VirtualPage]:
    listed = listable_posts(posts)
    page_size = blog.posts_per_page
    blog_name = blog.blog_name
    pages: list[VirtualPage] = []

    index_pages = total_pages(len(listed), page_size)
    for number in range(2, index_pages + 1):
        pages.append(
            VirtualPage(
                path=f"blog/page-{number}.md",
                output_name=page_url(number),
                title=blog_name,
                description=f"{blog_name} - Page {number}",
                template=INDEX_TEMPLATE,
                current_page=number,
                total_pages=index_pages,
            )
        )

    archive_count = 0
    if archive_pages_allowed(archives, blog.max_archive_pages):
        LOGGER.info(
            "Generating archive pages for %d archives (limit %d)", len(archives), blog.max_archive_pages
        )
        for archive in archives:
            archive_pages = total_pages(len(archive.posts), page_size)
            base = base_path(archive.type, archive.slug)
            for number in range(2, archive_pages + 1):
                archive_count += 1
                pages.append(
                    VirtualPage(
                        path=f"{base}/page-{number}.md",
                        output_name=page_url(number, archive.type, archive.slug),
                        title=archive.title,
                        description=f"{archive.title} - Page {number}",
                        template=f"{archive.type}.html",
                        current_page=number,
                        total_pages=archive_pages,
                        archive_type=archive.type,
                        archive_slug=archive.slug,
                    )
                )

    if pages:
        LOGGER.info(
            "Blog pagination pages planned: %d index, %d archive",
            len(pages) - archive_count,
            archive_count,
        )
    return pages


def make_excerpt(post: Post, length: int) -> str:
    text = post.excerpt or post.description
    if not text:
        text = html_to_text(render_markdown(post.content))
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."


def format_date(post: Post) -> str:
    if post.date is None:
        return ""
    return f"{post.date:%B} {post.date.day}, {post.date.year}"


def post_view(post: Post, excerpt_length: int) -> dict[str, Any]:
    return {
        "id": post.post_id,
        "slug": post.slug,
        "title": post.title,
        "url": post.url,
        "permalink": post.url,
        "language": post.language,
        "author": post.author,
        "author_slug": post.author_slug,
        "author_url": post.author_url,
        "author_avatar": post.author_avatar,
        "description": post.description,
        "featured_image": post.featured_image,
        "featured_image_alt": post.featured_image_alt,
        "reading_time": post.reading_time,
        "status": post.status,
        "date_formatted": format_date(post),
        "date_iso": iso_date(post.date) if post.date else "",
        "categories": [{"name": name, "slug": slugify(name)} for name in post.categories],
        "tags": [{"name": name, "slug": slugify(name)} for name in post.tags],
        "excerpt_text": make_excerpt(post, post.excerpt_length or excerpt_length),
    }


@dataclass(frozen=True)
class PageEnrichment:
    kind: str
    blog_name: str
    blog_description: str
    excerpt_length: int
    posts: tuple[dict, ...] = ()
    pagination: PaginationPlan | None = None
    total_posts: int = 0
    archive_type: str | None = None
    archive_slug: str | None = None
    archive_title: str | None = None
    title: str | None = None
    template: str | None = None
    breadcrumb: tuple[dict, ...] = ()
    feed_links: tuple[dict, ...] = ()
    prev: dict | None = None
    next: dict | None = None

    def to_context(self) -> dict[str, Any]:
        context: dict[str, Any] = {
            "kind": self.kind,
            "blog_name": self.blog_name,
            "blog_description": self.blog_description,
            "excerpt_length": self.excerpt_length,
        }
        if self.kind == "post":
            context["prev"] = self.prev
            context["next"] = self.next
            return context
        context["breadcrumb"] = {"enabled": True, "custom": True, "items": list(self.breadcrumb)}
        context["feed_links"] = list(self.feed_links)
        if self.title:
            context["title"] = self.title
        if self.template:
            context["template"] = self.template
        context["blog"] = {
            "posts": list(self.posts),
            "pagination": self.pagination.to_dict() if self.pagination else None,
            "total_posts": self.total_posts,
            "archive_type": self.archive_type,
            "archive_slug": self.archive_slug,
            "archive_title": self.archive_title,
        }
        return context


class BlogPageEnricher:
    def __init__(
        self,
        posts: Sequence[Post],
        blog: BlogConfig,
        templates_dir: Path | None = None,
    ) -> None:
        self.posts = listable_posts(posts)
        self.blog = blog
        self.templates_dir = Path(templates_dir) if templates_dir else None

    def feed_links(self) -> tuple[dict, ...]:
        links = []
        name = self.blog.blog_name
        if self.blog.enable_rss:
            links.append({"type": "application/rss+xml", "title": f"{name} RSS Feed", "href": "blog/feed.xml"})
        if self.blog.enable_atom:
            links.append({"type": "application/atom+xml", "title": f"{name} Atom Feed", "href": "blog/atom.xml"})
        return tuple(links)

    def enrich(self, path: str, title: str | None = None) -> PageEnrichment | None:
        path = normalize_path(path)
        if not path.startswith("blog/") or not self.posts:
            return None

        if INDEX_RE.match(path):
            return self.index_page(1)
        match = INDEX_PAGE_RE.match(path)
        if match:
            return self.index_page(int(match.group(1)))
        match = ARCHIVE_RE.match(path)
        if match:
            archive_type, slug, number = match.groups()
            return self.archive_page(archive_type, slug, int(number) if number else 1, title)
        return self.post_page(path)

    def _base(self, kind: str, **values: Any) -> PageEnrichment:
        return PageEnrichment(
            kind=kind,
            blog_name=self.blog.blog_name,
            blog_description=self.blog.blog_description,
            excerpt_length=self.blog.excerpt_length,
            **values,
        )

    def _views(self, posts: Sequence[Post]) -> tuple[dict, ...]:
        return tuple(post_view(post, self.blog.excerpt_length) for post in posts)

    def index_page(self, current_page: int) -> PageEnrichment:
        size = self.blog.posts_per_page
        shown = page_items(self.posts, size, current_page)
        LOGGER.debug("Blog index page %d: %d of %d posts", current_page, len(shown), len(self.posts))
        return self._base(
            "index",
            posts=self._views(shown),
            pagination=plan(len(self.posts), size, current_page),
            total_posts=len(self.posts),
            title=self.blog.blog_name if current_page > 1 else None,
            breadcrumb=({"label": self.blog.blog_name, "current": True},),
            feed_links=self.feed_links(),
        )

    def archive_page(
        self, archive_type: str, slug: str, current_page: int, title: str | None = None
    ) -> PageEnrichment:
        size = self.blog.posts_per_page
        label = title or slug.replace("-", " ").title()
        heading = f"{TITLE_PREFIXES[archive_type]}: {label}"
        matched = filter_posts(self.posts, archive_type, slug)
        shown = page_items(matched, size, current_page)
        template = None
        if self.templates_dir is not None:
            template = resolve_archive_template(archive_type, slug, self.templates_dir)
            if template:
                LOGGER.debug("Archive template resolved for %s/%s: %s", archive_type, slug, template)
        LOGGER.debug(
            "Archive %s/%s page %d: %d of %d posts", archive_type, slug, current_page, len(shown), len(matched)
        )
        return self._base(
            "archive",
            posts=self._views(shown),
            pagination=plan(len(matched), size, current_page, archive_type, slug),
            total_posts=len(matched),
            archive_type=archive_type,
            archive_slug=slug,
            archive_title=heading,
            template=template,
            breadcrumb=(
                {"label": self.blog.blog_name, "url": page_url(1)},
                {"label": heading, "current": True},
            ),
            feed_links=self.feed_links(),
        )

    def post_page(self, path: str) -> PageEnrichment | None:
        url = re.sub(r"\.md$", ".html", path)
        position = next((i for i, post in enumerate(self.posts) if post.url == url), None)
        if position is None:
            filename = url.rsplit("/", 1)[-1]
            position = next((i for i, post in enumerate(self.posts) if post.url.endswith(f"/{filename}")), None)
        if position is None:
            return None

        def link(post: Post) -> dict:
            return {"path": re.sub(r"\.html$", ".md", post.url), "url": post.url, "title": post.title}

        newer = self.posts[position - 1] if position > 0 else None
        older = self.posts[position + 1] if position < len(self.posts) - 1 else None
        return self._base(
            "post",
            prev=link(newer) if newer else None,
            next=link(older) if older else None,
        )
