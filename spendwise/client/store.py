import logging
from typing import Any, Dict, List, Optional, Tuple

from spendwise.client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

EMPTY_META = {
    "totalCount": 0,
    "totalPages": 0,
    "currentPage": 1,
    "limit": 10,
    "hasNext": False,
    "hasPrev": False,
}

EMPTY_STATS = {
    "totalExpenses": 0,
    "totalIncome": 0,
    "highestExpense": 0,
    "averageExpense": 0,
    "count": 0,
}


class ExpenseStore:
    """
    Client-side cache of the expense list and stats.

    The server is the source of truth: created and updated records are
    replaced by the server's copies, and any failed mutation invalidates the
    cache by refetching the last list query and the stats.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.expenses: List[Dict[str, Any]] = []
        self.meta: Dict[str, Any] = dict(EMPTY_META)
        self.stats: Dict[str, Any] = dict(EMPTY_STATS)
        self.error: Optional[str] = None
        self.loading = True
        self._last_query: Tuple[int, Dict[str, Any]] = (1, {})

    def refresh(self, page: int = 1, **filters) -> None:
        self._last_query = (page, dict(filters))
        try:
            body = self.api.list_expenses(page, **filters)
        except ApiError as e:
            self.error = e.message
            return
        self.expenses = body.get("data") or []
        self.meta = body.get("meta") or self.meta
        self.error = None
        self.loading = False

    def refresh_stats(self) -> None:
        try:
            self.stats = self.api.stats()
            self.error = None
        except ApiError as e:
            self.error = e.message

    def add(self, expense: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            created = self.api.create_expense(expense)
        except ApiError as e:
            self._invalidate(e)
            return None
        self.expenses = [created] + self.expenses
        self.error = None
        return created

    def update(self, expense_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        try:
            updated = self.api.update_expense(expense_id, changes)
        except ApiError as e:
            self._invalidate(e)
            raise
        self.expenses = [updated if e["id"] == expense_id else e for e in self.expenses]
        self.error = None
        return updated

    def delete(self, expense_id: str) -> bool:
        try:
            self.api.delete_expense(expense_id)
        except ApiError as e:
            self._invalidate(e)
            return False
        self.expenses = [e for e in self.expenses if e["id"] != expense_id]
        self.error = None
        return True

    def bulk_delete(self, expense_ids: List[str]) -> Tuple[List[str], Dict[str, str]]:
        """
        Delete one by one, in order, so each failure maps to its id.
        Returns (deleted ids, {failed id: message}).
        """
        deleted: List[str] = []
        failed: Dict[str, str] = {}
        for expense_id in expense_ids:
            try:
                self.api.delete_expense(expense_id)
            except ApiError as e:
                failed[expense_id] = e.message
                continue
            deleted.append(expense_id)

        gone = set(deleted)
        self.expenses = [e for e in self.expenses if e["id"] not in gone]
        if failed:
            logger.warning(f"Bulk delete: {len(failed)} of {len(expense_ids)} failed")
            self.error = next(iter(failed.values()))
            self._refetch()
        return deleted, failed

    def _invalidate(self, error: ApiError) -> None:
        self.error = error.message
        if error.status == 401:
            # Session already cleared by the client; nothing to refetch with.
            self.expenses = []
            self.meta = dict(EMPTY_META)
            self.stats = dict(EMPTY_STATS)
            return
        self._refetch()

    def _refetch(self) -> None:
        error = self.error
        page, filters = self._last_query
        self.refresh(page, **filters)
        self.refresh_stats()
        # Keep the mutation's error visible after a successful refetch.
        self.error = self.error or error
