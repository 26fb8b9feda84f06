from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from boto3.dynamodb.conditions import Attr

from spendwise.utils.dates import format_timestamp

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 1000


@dataclass
class ExpenseFilters:
    """Filters accepted by the expense list endpoint. Unset fields match everything."""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    category: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None

    def to_condition(self):
        """
        DynamoDB filter for everything except the title search, which has to
        be case-insensitive and is applied by ``matches`` instead.
        """
        conditions = []
        if self.start_date is not None:
            conditions.append(Attr("date").gte(format_timestamp(self.start_date)))
        if self.end_date is not None:
            conditions.append(Attr("date").lte(format_timestamp(self.end_date)))
        if self.category:
            conditions.append(Attr("category").eq(self.category))
        if self.type:
            conditions.append(Attr("type").eq(self.type))

        if not conditions:
            return None
        combined = conditions[0]
        for condition in conditions[1:]:
            combined = combined & condition
        return combined

    def matches(self, expense: Dict[str, Any]) -> bool:
        date = expense.get("date", "")
        if self.start_date is not None and date < format_timestamp(self.start_date):
            return False
        if self.end_date is not None and date > format_timestamp(self.end_date):
            return False
        if self.category and expense.get("category") != self.category:
            return False
        if self.type and expense.get("type", "expense") != self.type:
            return False
        if self.title and self.title.lower() not in str(expense.get("title", "")).lower():
            return False
        return True


def coerce_page_args(page: Any, limit: Any) -> Tuple[int, int]:
    """Lenient page/limit parsing: anything non-positive or non-numeric falls back to defaults."""

    def _positive_int(value: Any, default: int) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        return number if number > 0 else default

    page = _positive_int(page, DEFAULT_PAGE)
    limit = min(_positive_int(limit, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
    return page, limit


def sort_by_date_desc(expenses: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # sorted() is stable with reverse=True, so equal dates keep their order.
    return sorted(expenses, key=lambda e: e.get("date", ""), reverse=True)


def paginate(items: List[Any], page: int, limit: int) -> Tuple[List[Any], Dict[str, Any]]:
    total_count = len(items)
    total_pages = math.ceil(total_count / limit) if limit else 0
    start = (page - 1) * limit
    meta = {
        "totalCount": total_count,
        "totalPages": total_pages,
        "currentPage": page,
        "limit": limit,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }
    return items[start:start + limit], meta


def build_page(
    expenses: List[Dict[str, Any]],
    filters: ExpenseFilters,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """Filter, order newest first and slice out one page."""
    matching = [e for e in expenses if filters.matches(e)]
    return paginate(sort_by_date_desc(matching), page, limit)
