import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from spendwise.core.security import get_current_user
from spendwise.db import dynamo
from spendwise.models.user import budget_limits_of
from spendwise.utils import pdf_report
from spendwise.utils.analyzer import FinanceAnalyzer
from spendwise.utils.budget import evaluate_budget
from spendwise.utils.dates import month_bounds, utcnow
from spendwise.utils.query import ExpenseFilters, sort_by_date_desc

router = APIRouter()
logger = logging.getLogger(__name__)
finance_analyzer = FinanceAnalyzer()


@router.get("/overview")
def report_overview(
    time_range: str = Query("6m", alias="range", description="30d, 6m or all"),
    current_user: dict = Depends(get_current_user),
) -> Dict:
    expenses = dynamo.query_expenses(current_user["user_id"])
    try:
        overview = finance_analyzer.overview(expenses, time_range)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "data": overview}


@router.get("/export.csv")
def export_csv(current_user: dict = Depends(get_current_user)):
    expenses = sort_by_date_desc(dynamo.query_expenses(current_user["user_id"]))
    if not expenses:
        raise HTTPException(status_code=404, detail="No data available to export")

    filename = f"SpendWise_Report_{utcnow().strftime('%Y-%m-%d')}.csv"
    logger.info(f"Exporting {len(expenses)} records for user {current_user['user_id']}")
    return Response(
        content=pdf_report.generate_csv(expenses),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/monthly/{month}")
def monthly_report(month: str, current_user: dict = Depends(get_current_user)):
    """
    PDF report for the given month (e.g. '2025-11').
    """
    user_id = current_user["user_id"]
    try:
        start, end = month_bounds(month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    expenses = dynamo.query_expenses(user_id, ExpenseFilters(start_date=start, end_date=end).to_condition())
    logger.info(f"Found {len(expenses)} records for user {user_id} in month {month}")
    if not expenses:
        raise HTTPException(status_code=404, detail="No expenses found for this month.")

    summary = finance_analyzer.summarize(expenses)
    budget = evaluate_budget(budget_limits_of(current_user), expenses).to_dict()

    content = pdf_report.generate_monthly_pdf(current_user.get("name", ""), month, summary, budget)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="SpendWise_{month}.pdf"'},
    )
