from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Mapping

from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "PageRequest":
        """Out-of-range or malformed values fall back to the defaults."""

        try:
            page = int(args.get("page", 1))
        except (TypeError, ValueError):
            page = 1
        try:
            limit = int(args.get("limit", DEFAULT_PAGE_LIMIT))
        except (TypeError, ValueError):
            limit = DEFAULT_PAGE_LIMIT

        if page < 1:
            page = 1
        if limit < 1 or limit > MAX_PAGE_LIMIT:
            limit = DEFAULT_PAGE_LIMIT
        return cls(page=page, limit=limit)


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: PageRequest, total: int) -> "Pagination":
        total_pages = int(math.ceil(total / page.limit)) if page.limit else 0
        return cls(
            page=page.page,
            limit=page.limit,
            total=int(total),
            total_pages=total_pages,
            has_next=page.page < total_pages,
            has_prev=page.page > 1,
        )

    def to_dict(self) -> dict:
        return asdict(self)
