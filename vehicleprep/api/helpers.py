"""
Helper functions shared by the endpoint wrappers.
"""
from typing import Any, Dict


def compact_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset values so they are not sent as empty query parameters or body fields."""
    return {k: v for k, v in params.items() if v is not None}


def normalize_pagination(pagination: Dict[str, Any]) -> Dict[str, Any]:
    """
    Make `pages` and `totalPages` both present.

    Older list endpoints return one name, newer ones the other; both fall back to 1.
    """
    pages = pagination.get("pages") or pagination.get("totalPages") or 1
    total_pages = pagination.get("totalPages") or pagination.get("pages") or 1
    return {**pagination, "pages": pages, "totalPages": total_pages}


def is_paginated_list(data: Any, items_key: str) -> bool:
    """True when `data` looks like ``{items_key: [...], "pagination": {page, total, pages|totalPages}}``."""
    if not isinstance(data, dict) or not isinstance(data.get(items_key), list):
        return False
    pagination = data.get("pagination")
    if not isinstance(pagination, dict):
        return False
    return (
        isinstance(pagination.get("page"), int)
        and isinstance(pagination.get("total"), int)
        and (isinstance(pagination.get("pages"), int) or isinstance(pagination.get("totalPages"), int))
    )


def clean_filters(filters: Dict[str, Any]) -> Dict[str, Any]:
    """Remove empty strings, None and empty lists from a filter mapping."""
    cleaned = {}
    for key, value in (filters or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, (list, tuple)) and not value:
            continue
        cleaned[key] = value
    return cleaned
