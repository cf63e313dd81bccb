# Overview: Shared helpers for paginated, date-filtered list queries.

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from ..validation import ValidationError
from storefront.time_utils import end_of_range, parse_iso_datetime


@dataclass
class Page:
    items: list
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def parse_page_args(args, default_limit: int | None = None) -> tuple[int, int]:
    """Read ?page=&limit= from request args; page is 1-based."""
    if default_limit is None:
        default_limit = current_app.config.get("DEFAULT_PAGE_SIZE", 10)
    max_limit = current_app.config.get("MAX_PAGE_SIZE", 200)

    page = args.get("page", 1, type=int) or 1
    limit = args.get("limit", default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), max_limit)


def paginate(query, page: int, limit: int) -> Page:
    total = query.order_by(None).count()
    items = query.limit(limit).offset((page - 1) * limit).all()
    return Page(items=items, total=total, page=page, limit=limit)


def parse_date_range(start_raw: str | None, end_raw: str | None) -> tuple[datetime | None, datetime | None]:
    """
    Parse startDate/endDate query values into an inclusive-start,
    exclusive-end UTC window. A date-only endDate covers that whole day.
    """
    try:
        return parse_iso_datetime(start_raw), end_of_range(end_raw)
    except ValueError:
        raise ValidationError("startDate and endDate must be ISO-8601 dates")


def apply_date_range(query, column, start: datetime | None, end: datetime | None):
    if start is not None:
        query = query.filter(column >= start)
    if end is not None:
        query = query.filter(column < end)
    return query


def page_response(key: str, page: Page, serialize=None) -> dict:
    """List envelope shared by paginated endpoints."""
    serialize = serialize or (lambda item: item.to_dict())
    return {
        key: [serialize(item) for item in page.items],
        "totalPages": page.total_pages,
        "currentPage": page.page,
        "total": page.total,
    }
