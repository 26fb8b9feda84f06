"""
Budgets Router
Per-category spending limits and how the current spend measures up.
"""
import logging
import math
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import field_validator

from spendwise.core.security import get_current_user
from spendwise.db import dynamo
from spendwise.models.common import ApiModel
from spendwise.models.expense import EXPENSE
from spendwise.models.user import budget_limits_of
from spendwise.utils.budget import effective_limits, evaluate_budget
from spendwise.utils.dates import month_bounds, utcnow, utcnow_iso
from spendwise.utils.query import ExpenseFilters

router = APIRouter()
logger = logging.getLogger(__name__)


class BudgetLimitUpdate(ApiModel):
    limit: float

    @field_validator("limit", mode="before")
    @classmethod
    def positive(cls, v):
        try:
            value = float(v)
        except (TypeError, ValueError):
            raise ValueError("Limit must be a number")
        if math.isnan(value) or math.isinf(value) or value <= 0:
            raise ValueError("Limit must be greater than 0")
        return value


def period_filters(month: str) -> ExpenseFilters:
    """Expense-type filter for a YYYY-MM month, or all time."""
    if month == "all":
        return ExpenseFilters(type=EXPENSE)
    try:
        start, end = month_bounds(month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ExpenseFilters(start_date=start, end_date=end, type=EXPENSE)


def _save_limits(current_user: dict, limits: Dict[str, float]) -> Dict[str, Any]:
    stored_settings = dict(current_user.get("settings") or {})
    stored_settings["budget_limits"] = limits
    updated = dynamo.update_user(
        current_user["user_id"],
        {"settings": stored_settings, "updated_at": utcnow_iso()},
    )
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to save budget limits")
    return updated


def _report_for(user: dict, month: Optional[str]) -> Dict[str, Any]:
    month = month or utcnow().strftime("%Y-%m")
    filters = period_filters(month)
    expenses = dynamo.query_expenses(user["user_id"], filters.to_condition())
    report = evaluate_budget(budget_limits_of(user), expenses).to_dict()
    report["month"] = month
    return report


@router.get("")
def get_budgets(
    month: Optional[str] = Query(None, description="YYYY-MM, or 'all'"),
    current_user: dict = Depends(get_current_user),
) -> Dict:
    return {"success": True, "data": _report_for(current_user, month)}


@router.put("/{category}")
def set_budget_limit(
    category: str,
    update: BudgetLimitUpdate,
    current_user: dict = Depends(get_current_user),
) -> Dict:
    """
    Set one category limit. A user still on the default table gets the
    defaults materialized first, so the other categories keep their limits.
    """
    category = category.strip()
    if not category:
        raise HTTPException(status_code=400, detail="Budget category is required")

    limits = effective_limits(budget_limits_of(current_user))
    limits[category] = update.limit
    updated = _save_limits(current_user, limits)
    logger.info(f"Budget limit for {category} set to {update.limit} by user {current_user['user_id']}")
    return {"success": True, "data": _report_for(updated, None)}


@router.delete("/{category}")
def delete_budget_limit(category: str, current_user: dict = Depends(get_current_user)) -> Dict:
    category = category.strip()
    limits = effective_limits(budget_limits_of(current_user))
    if category not in limits:
        raise HTTPException(status_code=404, detail=f"No budget set for {category}")

    del limits[category]
    updated = _save_limits(current_user, limits)
    logger.info(f"Budget limit for {category} removed by user {current_user['user_id']}")
    return {"success": True, "data": _report_for(updated, None)}
