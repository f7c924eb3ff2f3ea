"""Pagination of a derived record list."""

import math
from typing import Sequence, TypeVar

T = TypeVar("T")


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed for count rows; zero rows means zero pages."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(count / page_size)


def clamp_page(page: int, count: int, page_size: int) -> int:
    """Keep page within [1, total_pages], with 1 as the floor for empty lists."""
    last = max(1, total_pages(count, page_size))
    return min(max(1, page), last)


def page_slice(rows: Sequence[T], page: int, page_size: int) -> list[T]:
    """Rows [(page-1)*page_size, page*page_size)."""
    start = (page - 1) * page_size
    return list(rows[start:start + page_size])
