"""
utils/pagination.py
───────────────────
Limit / offset helpers shared by every list endpoint.
"""

from __future__ import annotations

import math
from typing import Any, Optional

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
DEFAULT_PAGE_OFFSET = 0


def normalize_pagination(
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    default_limit: int = DEFAULT_PAGE_LIMIT,
    max_limit: int = MAX_PAGE_LIMIT,
) -> tuple[int, int]:
    """Clamp limit to [1, max_limit] and offset to >= 0. Missing or zero values fall back to defaults."""
    norm_limit = min(max(1, limit or default_limit), max_limit)
    norm_offset = max(0, offset or DEFAULT_PAGE_OFFSET)
    return norm_limit, norm_offset


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def pagination_metadata(total: int, limit: int, offset: int) -> dict[str, Any]:
    return {
        "total":        total,
        "limit":        limit,
        "offset":       offset,
        "total_pages":  total_pages(total, limit),
        "current_page": offset // limit + 1,
        "has_more":     offset + limit < total,
        "has_previous": offset > 0,
    }
