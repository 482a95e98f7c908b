from __future__ import annotations

import html
import logging
from pathlib import Path
from typing import Iterable

from .config import BlogConfig, SiteConfig
from .posts import Post
from .render import html_to_text, render_markdown, write_text
from .utils import iso_date, join_url, rfc822_date, utc_now

LOGGER = logging.getLogger(__name__)

GENERATOR = "mdpress"
SUMMARY_LENGTH = 200


def summary_for(post: Post, html_content: str) -> str:
    summary = post.excerpt or post.description
    if summary:
        return summary
    text = html_to_text(html_content)
    return text[:SUMMARY_LENGTH] + ("..." if len(text) > SUMMARY_LENGTH else "")


class FeedGenerator:
    def __init__(self, site: SiteConfig, blog: BlogConfig) -> None:
        self.site = site
        self.blog = blog
        self.site_url = site.site_url.rstrip("/")

    def feed_posts(self, posts: Iterable[Post]) -> list[Post]:
        dated = [post for post in posts if post.date is not None and not post.is_draft]
        dated.sort(key=lambda post: post.date, reverse=True)
        return dated[: self.blog.feed_limit]

    def post_link(self, post: Post) -> str:
        return join_url(self.site_url, post.url)

    def rss(self, posts: Iterable[Post]) -> str:
        posts = self.feed_posts(posts)
        blog_url = join_url(self.site_url, "blog/")
        feed_url = join_url(self.site_url, "blog/feed.xml")
        last_build = rfc822_date(posts[0].date) if posts else rfc822_date(utc_now())
        items = []
        for post in posts:
            link = html.escape(self.post_link(post))
            content = render_markdown(post.content)
            lines = [
                "<item>",
                f"<title>{html.escape(post.title)}</title>",
                f"<link>{link}</link>",
                f'<guid isPermaLink="true">{link}</guid>',
                f"<pubDate>{rfc822_date(post.date)}</pubDate>",
            ]
            if post.author:
                lines.append(f"<dc:creator>{html.escape(post.author)}</dc:creator>")
            lines.append(f"<description>{html.escape(summary_for(post, content))}</description>")
            lines.append(f"<content:encoded><![CDATA[{content.replace(']]>', ']]&gt;')}]]></content:encoded>")
            lines.extend(f"<category>{html.escape(name)}</category>" for name in post.categories)
            lines.append("</item>")
            items.append("\n".join(lines))
        return "\n".join(
            [
                '<?xml version="1.0" encoding="UTF-8"?>',
                '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom"'
                ' xmlns:content="http://purl.org/rss/1.0/modules/content/"'
                ' xmlns:dc="http://purl.org/dc/elements/1.1/">',
                "<channel>",
                f"<title>{html.escape(self.blog.blog_name or self.site.site_name)}</title>",
                f"<link>{html.escape(blog_url)}</link>",
                f"<description>{html.escape(self.blog.blog_description or self.site.site_description)}</description>",
                f"<language>{html.escape(self.site.locale)}</language>",
                f"<lastBuildDate>{last_build}</lastBuildDate>",
                f'<atom:link href="{html.escape(feed_url)}" rel="self" type="application/rss+xml" />',
                f"<generator>{GENERATOR}</generator>",
                "\n".join(items),
                "</channel>",
                "</rss>",
            ]
        )

    def atom(self, posts: Iterable[Post]) -> str:
        posts = self.feed_posts(posts)
        blog_url = join_url(self.site_url, "blog/")
        feed_url = join_url(self.site_url, "blog/atom.xml")
        updated = iso_date(posts[0].date) if posts else iso_date(utc_now())
        entries = []
        for post in posts:
            link = html.escape(self.post_link(post))
            content = render_markdown(post.content)
            lines = [
                "<entry>",
                f"<title>{html.escape(post.title)}</title>",
                f'<link href="{link}" rel="alternate" />',
                f"<id>{link}</id>",
                f"<published>{iso_date(post.date)}</published>",
                f"<updated>{iso_date(post.updated or post.date)}</updated>",
            ]
            if post.author:
                lines.append(f"<author><name>{html.escape(post.author)}</name></author>")
            lines.append(f"<summary>{html.escape(summary_for(post, content))}</summary>")
            lines.append(f'<content type="html">{html.escape(content)}</content>')
            lines.extend(f'<category term="{html.escape(name)}" />' for name in post.categories)
            lines.append("</entry>")
            entries.append("\n".join(lines))
        return "\n".join(
            [
                '<?xml version="1.0" encoding="UTF-8"?>',
                '<feed xmlns="http://www.w3.org/2005/Atom">',
                f"<title>{html.escape(self.blog.blog_name or self.site.site_name)}</title>",
                f"<id>{html.escape(blog_url)}</id>",
                f"<updated>{updated}</updated>",
                f'<link href="{html.escape(feed_url)}" rel="self" />',
                f'<link href="{html.escape(blog_url)}" rel="alternate" />',
                f"<generator>{GENERATOR}</generator>",
                "\n".join(entries),
                "</feed>",
            ]
        )

    def write(self, output_dir: Path, posts: Iterable[Post]) -> dict[str, Path]:
        posts = list(posts)
        written: dict[str, Path] = {}
        if not self.feed_posts(posts):
            LOGGER.warning("No posts available for feed generation")
            return written
        targets = []
        if self.blog.enable_rss:
            targets.append(("rss", Path(output_dir) / "blog" / "feed.xml", self.rss))
        if self.blog.enable_atom:
            targets.append(("atom", Path(output_dir) / "blog" / "atom.xml", self.atom))
        for name, path, build in targets:
            try:
                write_text(path, build(posts))
            except OSError as exc:
                LOGGER.error("Failed to write %s feed %s: %s", name, path, exc)
                continue
            written[name] = path
            LOGGER.info("%s feed generated: %s", name.upper(), path)
        return written
