"""
Pagination Utilities
Pure functions for offset/limit pagination
"""

from typing import Dict, Any

from product_registry.core.exceptions import ValidationError


def validate_pagination_params(
    offset: Any = 0,
    limit: Any = 20,
    max_limit: int = 100
) -> Dict[str, int]:
    """
    Validate and normalize offset/limit parameters

    Args:
        offset: Number of items to skip (can be string or int)
        limit: Items to return (can be string or int)
        max_limit: Maximum allowed items per request

    Returns:
        Dict with validated offset and limit

    Raises:
        ValidationError: If offset is negative or limit is not positive
    """
    try:
        offset = int(offset) if offset not in (None, '') else 0
        limit = int(limit) if limit not in (None, '') else 20
    except (ValueError, TypeError):
        raise ValidationError("offset and limit must be integers")

    if offset < 0:
        raise ValidationError("offset cannot be negative")
    if limit <= 0:
        raise ValidationError("limit must be positive")

    return {
        'offset': offset,
        'limit': min(limit, max_limit)
    }


def create_pagination_metadata(
    total_count: int,
    offset: int,
    limit: int
) -> Dict[str, Any]:
    """
    Create pagination metadata for API response

    Args:
        total_count: Total number of items
        offset: Items skipped
        limit: Items per page

    Returns:
        Dict with pagination metadata
    """
    has_next = offset + limit < total_count

    return {
        'offset': offset,
        'limit': limit,
        'total_items': total_count,
        'has_next': has_next,
        'has_prev': offset > 0,
        'next_offset': offset + limit if has_next else None,
        'prev_offset': max(0, offset - limit) if offset > 0 else None
    }


def descending_id_window(total_count: int, offset: int, limit: int) -> range:
    """
    Ids covered by an offset/limit window over sequential ids 1..total_count, newest first
    """
    start = total_count - offset
    stop = max(start - limit, 0)
    if start <= 0:
        return range(0)
    return range(start, stop, -1)
