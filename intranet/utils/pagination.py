"""
Pagination helpers shared by the list endpoints
"""
import math
from typing import Dict, Tuple

MAX_LIMIT = 100


def get_pagination_params(page: int = 1, limit: int = 10) -> Tuple[int, int]:
    """
    Convert page/limit into (skip, limit).

    Page is at least 1 and limit is clamped to 1..MAX_LIMIT.
    """
    page = max(1, page or 1)
    limit = min(MAX_LIMIT, max(1, limit or 1))
    return (page - 1) * limit, limit


def get_pagination_meta(page: int, limit: int, total: int) -> Dict[str, int]:
    """Build the `meta` block returned next to a page of rows"""
    page = max(1, page or 1)
    limit = min(MAX_LIMIT, max(1, limit or 1))
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPage": math.ceil(total / limit),
    }
