from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Sequence, TypeVar, Union

T = TypeVar("T")

ELLIPSIS = "..."
PageNumber = Union[int, str]


def total_pages(total_items: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    if total_items < 0:
        raise ValueError(f"total_items must be >= 0, got {total_items}")
    return math.ceil(total_items / page_size)


def base_path(archive_type: str | None = None, archive_slug: str | None = None) -> str:
    if archive_type and archive_slug:
        return f"blog/{archive_type}/{archive_slug}"
    return "blog"


def page_url(page: int, archive_type: str | None = None, archive_slug: str | None = None) -> str:
    base = base_path(archive_type, archive_slug)
    if page > 1:
        return f"{base}/page-{page}.html"
    if archive_type and archive_slug:
        return f"{base}.html"
    return "blog/index.html"


def page_numbers(current_page: int, pages: int, delta: int = 1) -> list[PageNumber]:
    """First, last and a window around the current page, with ELLIPSIS for gaps."""
    if pages < 1:
        return []
    numbers: list[PageNumber] = [1]
    if pages == 1:
        return numbers
    range_start = max(2, current_page - delta)
    range_end = min(pages - 1, current_page + delta)
    if range_start > 2:
        numbers.append(ELLIPSIS)
    numbers.extend(range(range_start, range_end + 1))
    if range_end < pages - 1:
        numbers.append(ELLIPSIS)
    numbers.append(pages)
    return numbers


@dataclass(frozen=True)
class PaginationPlan:
    current_page: int
    total_pages: int
    has_prev: bool
    has_next: bool
    prev_page: int | None
    next_page: int | None
    prev_url: str | None
    next_url: str | None
    page_numbers: tuple[PageNumber, ...]
    archive_type: str | None = None
    archive_slug: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["page_numbers"] = list(self.page_numbers)
        return data


def plan(
    total_items: int,
    page_size: int,
    current_page: int = 1,
    archive_type: str | None = None,
    archive_slug: str | None = None,
) -> PaginationPlan:
    if current_page < 1:
        raise ValueError(f"current_page must be >= 1, got {current_page}")
    pages = total_pages(total_items, page_size)
    prev_page = current_page - 1 if current_page > 1 else None
    next_page = current_page + 1 if current_page < pages else None
    return PaginationPlan(
        current_page=current_page,
        total_pages=pages,
        has_prev=prev_page is not None,
        has_next=next_page is not None,
        prev_page=prev_page,
        next_page=next_page,
        prev_url=page_url(prev_page, archive_type, archive_slug) if prev_page else None,
        next_url=page_url(next_page, archive_type, archive_slug) if next_page else None,
        page_numbers=tuple(page_numbers(current_page, pages)),
        archive_type=archive_type,
        archive_slug=archive_slug,
    )


def page_items(items: Sequence[T], page_size: int, page: int) -> list[T]:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


def paginate(items: Sequence[T], page_size: int) -> list[list[T]]:
    return [page_items(items, page_size, page) for page in range(1, total_pages(len(items), page_size) + 1)]
