"""Page window arithmetic shared by the ranked and relational search paths."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from ruido.settings import PAGE_SIZE

# OFFSET is bound as a signed 64-bit integer
MAX_OFFSET = 2**63 - 1


def max_page(page_size: int = PAGE_SIZE) -> int:
    return MAX_OFFSET // page_size + 1


@dataclass(frozen=True)
class Pagination:
    page: int
    take: int
    skip: int


def coerce_page(raw: Any) -> int:
    """Return a 1-indexed page; anything missing, non-numeric, non-finite or < 1 becomes 1.

    Pages past the last representable OFFSET are clamped; they are empty anyway.
    """
    if raw is None or isinstance(raw, bool):
        return 1
    try:
        value = float(str(raw).strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(value):
        return 1
    page = int(value)
    if page < 1:
        return 1
    return min(page, max_page())


def get_pagination(page: Any = 1, page_size: int = PAGE_SIZE) -> Pagination:
    current = min(coerce_page(page), max_page(page_size))
    return Pagination(page=current, take=page_size, skip=(current - 1) * page_size)


def total_pages(total: int, page_size: int = PAGE_SIZE) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / page_size)


__all__ = ["MAX_OFFSET", "Pagination", "coerce_page", "get_pagination", "total_pages"]
