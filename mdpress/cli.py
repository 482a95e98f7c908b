from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

from .cache import PostIdCounter
from .config import ConfigError, Settings, load_settings
from .hooks import BlogPlugin, SearchPlugin
from .render import write_text

LOGGER = logging.getLogger(__name__)

PAGES_FILE = Path("blog") / "pages.json"
CONTEXT_FILE = Path("blog") / "page-context.json"


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    site = settings.site
    if args.content:
        site = replace(site, content_dir=Path(args.content))
    if args.output:
        site = replace(site, output_dir=Path(args.output))
    blog = settings.blog
    if args.no_feeds:
        blog = replace(blog, enable_rss=False, enable_atom=False)
    search = settings.search
    if args.no_search:
        search = replace(search, enabled=False)
    return Settings(site=site, blog=blog, search=search)


def resolve_counter_path(settings: Settings, config_path: Path) -> Path:
    counter_path = settings.blog.counter_file
    if not counter_path.is_absolute():
        counter_path = config_path.resolve().parent / counter_path
    return counter_path


def build_site(settings: Settings, config_path: Path) -> dict:
    site = settings.site
    output_dir = site.output_dir
    if not site.content_dir.exists():
        print(f"Content directory not found: {site.content_dir}", file=sys.stderr)
        sys.exit(1)

    blog = BlogPlugin(site, settings.blog, PostIdCounter(resolve_counter_path(settings, config_path)))
    search = SearchPlugin(site, settings.search)

    build = blog.build_start()
    contexts = {}
    targets = [("blog/index.md", None)]
    targets.extend((f"blog/{post.path}", post.title) for post in build.posts)
    targets.extend((page.path, page.title) for page in build.virtual_pages)
    for path, title in targets:
        enrichment = blog.before_render(path, title)
        if enrichment is not None:
            contexts[path] = enrichment.to_context()
    if contexts:
        context_path = output_dir / CONTEXT_FILE
        write_text(context_path, json.dumps(contexts, indent=2, ensure_ascii=False))
        LOGGER.info("Page context written: %s (%d pages)", context_path, len(contexts))

    if build.virtual_pages:
        pages_path = output_dir / PAGES_FILE
        write_text(pages_path, json.dumps([page.to_dict() for page in build.virtual_pages], indent=2))
        LOGGER.info("Virtual pages written: %s", pages_path)

    feeds = blog.build_end(output_dir)
    index_path = search.build_end(output_dir)
    return {
        "posts": len(build.posts),
        "archives": len(build.archives.archives),
        "virtual_pages": len(build.virtual_pages),
        "enriched": len(contexts),
        "feeds": feeds,
        "search_index": index_path,
    }


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Markdown blog and search index builder.")
    parser.add_argument("command", nargs="?", default="build", choices=["build"], help="Command to run.")
    parser.add_argument("--config", default="site.toml", help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--content", default=None, help="Content directory (overrides config).")
    parser.add_argument("--output", default=None, help="Output directory (overrides config).")
    parser.add_argument("--no-search", action="store_true", help="Skip the search index.")
    parser.add_argument("--no-feeds", action="store_true", help="Skip RSS/Atom feeds.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only warnings and errors.")
    args = parser.parse_args(argv)

    configure_logging(args.verbose, args.quiet)
    config_path = Path(args.config)
    try:
        settings = apply_overrides(load_settings(config_path), args)
    except ConfigError as exc:
        print(f"Invalid config {config_path}: {exc}", file=sys.stderr)
        sys.exit(1)

    start = time.perf_counter()
    summary = build_site(settings, config_path)
    elapsed = time.perf_counter() - start
    print(
        f"Built {summary['posts']} posts, {summary['archives']} archives, "
        f"{summary['virtual_pages']} virtual pages, "
        f"{summary['enriched']} enriched pages."
    )
    if summary["search_index"]:
        print(f"Search index: {summary['search_index']}")
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Output written to: {settings.site.output_dir}")


if __name__ == "__main__":
    main()
