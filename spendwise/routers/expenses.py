import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from spendwise.core.security import get_current_user
from spendwise.db import dynamo
from spendwise.models.common import ApiModel, Envelope, MessageResponse
from spendwise.models.expense import ExpenseCreate, ExpenseInDB, ExpensePublic, ExpenseUpdate
from spendwise.utils.analyzer import FinanceAnalyzer
from spendwise.utils.dates import parse_timestamp, utcnow_iso
from spendwise.utils.query import ExpenseFilters, build_page, coerce_page_args

router = APIRouter()
logger = logging.getLogger(__name__)
finance_analyzer = FinanceAnalyzer()


class PageMeta(ApiModel):
    total_count: int
    total_pages: int
    current_page: int
    limit: int
    has_next: bool
    has_prev: bool


class ExpensePage(ApiModel):
    success: bool = True
    data: List[ExpensePublic]
    meta: PageMeta


class ExpenseStats(ApiModel):
    total_expenses: float
    total_income: float
    highest_expense: float
    average_expense: float
    count: int


class MonthlyGroup(ApiModel):
    year: int
    month: int
    amount: float
    count: int


def _validate_expense_id(expense_id: str) -> str:
    try:
        uuid.UUID(expense_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid expense ID format")
    return expense_id


def _parse_date_param(value: Optional[str], name: str):
    if not value:
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}")


def _owned_expense(user_id: str, expense_id: str) -> Dict[str, Any]:
    # Another user's expense is simply not found under this user's key.
    expense = dynamo.get_expense(user_id, _validate_expense_id(expense_id))
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found or not authorized")
    return expense


@router.get("", response_model=ExpensePage)
def list_expenses(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    title: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    current_user: dict = Depends(get_current_user),
):
    page_number, page_size = coerce_page_args(page, limit)
    filters = ExpenseFilters(
        start_date=_parse_date_param(start_date, "startDate"),
        end_date=_parse_date_param(end_date, "endDate"),
        category=category or None,
        type=type or None,
        title=title or None,
    )

    expenses = dynamo.query_expenses(current_user["user_id"], filters.to_condition())
    items, meta = build_page(expenses, filters, page_number, page_size)
    return {
        "success": True,
        "data": [ExpensePublic.from_item(item) for item in items],
        "meta": meta,
    }


@router.get("/stats", response_model=Envelope[ExpenseStats])
def get_stats(current_user: dict = Depends(get_current_user)):
    expenses = dynamo.query_expenses(current_user["user_id"])
    return {"success": True, "data": finance_analyzer.stats(expenses)}


@router.get("/summary", response_model=Envelope[List[MonthlyGroup]])
def get_monthly_summary(current_user: dict = Depends(get_current_user)):
    expenses = dynamo.query_expenses(current_user["user_id"])
    return {"success": True, "data": finance_analyzer.monthly_summary(expenses)}


@router.get("/{expense_id}", response_model=Envelope[ExpensePublic])
def get_expense(expense_id: str, current_user: dict = Depends(get_current_user)):
    expense = _owned_expense(current_user["user_id"], expense_id)
    return Envelope(data=ExpensePublic.from_item(expense))


@router.post("", response_model=Envelope[ExpensePublic], status_code=status.HTTP_201_CREATED)
def create_expense(expense: ExpenseCreate, current_user: dict = Depends(get_current_user)):
    expense_db = ExpenseInDB.from_create(current_user["user_id"], expense)
    if not dynamo.put_expense(expense_db.to_item()):
        raise HTTPException(status_code=500, detail="Failed to save expense")
    return Envelope(data=ExpensePublic.from_item(expense_db.to_item()))


@router.put("/{expense_id}", response_model=Envelope[ExpensePublic])
def update_expense(
    expense_id: str,
    expense_update: ExpenseUpdate,
    current_user: dict = Depends(get_current_user),
):
    user_id = current_user["user_id"]
    _owned_expense(user_id, expense_id)

    changes = expense_update.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    changes["updated_at"] = utcnow_iso()

    # Conditional write: a concurrent delete turns into a 404 here.
    updated = dynamo.update_expense(user_id, expense_id, changes)
    if not updated:
        raise HTTPException(status_code=404, detail="Expense not found or not authorized")
    return Envelope(data=ExpensePublic.from_item(updated))


@router.delete("/{expense_id}", response_model=MessageResponse)
def delete_expense(expense_id: str, current_user: dict = Depends(get_current_user)):
    deleted = dynamo.delete_expense(current_user["user_id"], _validate_expense_id(expense_id))
    if not deleted:
        raise HTTPException(status_code=404, detail="Expense not found or not authorized")
    return MessageResponse(message="Expense removed successfully")
