"""
Normalization of list payloads returned by the admin service.

List endpoints answer in one of these shapes:
- a bare array
- {"data": [...], "pagination": {"page", "limit", "total", "totalPages"}}
- {"data": [...], "totalPages": n}

Anything else becomes an empty page instead of an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ListPage:
    rows: List[Mapping[str, Any]]
    page: int = 1
    total_pages: int = 1
    total: int = 0


def _as_int(value: Any, default: int) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        return default
    return result if result > 0 else default


def _mapping_rows(items: List[Any]) -> List[Mapping[str, Any]]:
    return [item for item in items if isinstance(item, Mapping)]


def normalize_list_payload(payload: Any) -> ListPage:
    if isinstance(payload, list):
        rows = _mapping_rows(payload)
        return ListPage(rows=rows, total=len(rows))

    if isinstance(payload, Mapping):
        items = payload.get("data")
        if isinstance(items, list):
            rows = _mapping_rows(items)
            pagination = payload.get("pagination")
            if isinstance(pagination, Mapping):
                return ListPage(
                    rows=rows,
                    page=_as_int(pagination.get("page"), 1),
                    total_pages=_as_int(pagination.get("totalPages"), 1),
                    total=_as_int(pagination.get("total"), len(rows)),
                )
            return ListPage(
                rows=rows,
                total_pages=_as_int(payload.get("totalPages"), 1),
                total=_as_int(payload.get("total"), len(rows)),
            )

    logger.warning("Unrecognized list payload shape: %s", type(payload).__name__)
    return ListPage(rows=[])


__all__ = ["ListPage", "normalize_list_payload"]
