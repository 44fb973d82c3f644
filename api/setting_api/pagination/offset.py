"""Offset pagination helpers for page-numbered list endpoints."""

import math
from typing import Tuple


def offset_window(page: int = 1, per_page: int = 10) -> Tuple[int, int]:
    """Translate a page number into ``(take, skip)``.

    Args:
        page: 1-based page number
        per_page: Items per page

    Returns:
        Tuple of (take, skip)
    """
    page = max(1, int(page))
    take = max(1, int(per_page))
    return take, (page - 1) * take


def total_pages(total: int, per_page: int) -> int:
    """Number of pages needed for ``total`` items."""
    if total <= 0:
        return 0
    return math.ceil(total / per_page)
