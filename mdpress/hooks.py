from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .archives import ArchiveAggregator, ArchiveData
from .cache import PostIdCounter
from .config import BlogConfig, SearchConfig, SiteConfig
from .feeds import FeedGenerator
from .pages import BlogPageEnricher, PageEnrichment, VirtualPage, plan_virtual_pages
from .posts import Post, PostRepository, assign_post_ids
from .search import SearchIndex

LOGGER = logging.getLogger(__name__)


@dataclass
class BlogBuild:
    posts: list[Post] = field(default_factory=list)
    archives: ArchiveData = field(default_factory=ArchiveData)
    virtual_pages: list[VirtualPage] = field(default_factory=list)


class BlogPlugin:
    def __init__(self, site: SiteConfig, blog: BlogConfig, counter: PostIdCounter | None = None) -> None:
        self.site = site
        self.blog = blog
        self.counter = counter or PostIdCounter(blog.counter_file)
        self.build: BlogBuild | None = None
        self._enricher: BlogPageEnricher | None = None

    def build_start(self) -> BlogBuild:
        if not self.blog.enabled:
            LOGGER.info("Blog disabled, skipping post discovery")
            self.build = BlogBuild()
            return self.build
        posts = PostRepository(self.site, self.blog).discover(self.site.content_dir)
        if posts:
            posts = assign_post_ids(posts, self.counter)
        archives = ArchiveAggregator().generate(posts)
        virtual_pages = plan_virtual_pages(posts, archives.archives, self.blog)
        self.build = BlogBuild(posts=posts, archives=archives, virtual_pages=virtual_pages)
        self._enricher = BlogPageEnricher(posts, self.blog, self.site.templates_dir)
        return self.build

    def before_render(self, path: str, title: str | None = None) -> PageEnrichment | None:
        if self._enricher is None:
            return None
        return self._enricher.enrich(path, title)

    def build_end(self, output_dir: Path | None = None) -> dict[str, Path]:
        if self.build is None or not self.build.posts:
            LOGGER.debug("No blog posts to process")
            return {}
        if not (self.blog.enable_rss or self.blog.enable_atom):
            return {}
        output_dir = Path(output_dir or self.site.output_dir)
        written = FeedGenerator(self.site, self.blog).write(output_dir, self.build.posts)
        LOGGER.info(
            "Blog build completed: %d posts, %d virtual pages, feeds %s",
            len(self.build.posts),
            len(self.build.virtual_pages),
            sorted(written),
        )
        return written


class SearchPlugin:
    def __init__(self, site: SiteConfig, search: SearchConfig) -> None:
        self.site = site
        self.search = search

    def build_end(self, output_dir: Path | None = None) -> Path | None:
        if not self.search.enabled:
            LOGGER.debug("Search index disabled")
            return None
        index = SearchIndex(self.site, self.search)
        index.generate(self.site.content_dir)
        return index.save(Path(output_dir or self.site.output_dir))
