from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from spendwise.models.expense import EXPENSE, INCOME
from spendwise.utils.dates import parse_timestamp, utcnow

REPORT_RANGES = {"30d": 30, "6m": 180, "all": None}
TOP_CATEGORY_COUNT = 4
TREND_DAYS = 7


@dataclass
class CategoryInsight:
    """Represents calculated insights for a single expense category."""

    category: str
    total: float
    average: float
    transaction_count: int
    share: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _amount(exp: Dict[str, Any]) -> float:
    return float(exp.get("amount", 0) or 0)


def _is_income(exp: Dict[str, Any]) -> bool:
    return exp.get("type", EXPENSE) == INCOME


class FinanceAnalyzer:
    """
    Aggregations over a user's transactions. Every method works on plain
    dicts as returned by the data layer and never touches storage, so the
    same numbers come out of the API, the reports and the tests.
    """

    def stats(self, expenses: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Totals over the full transaction set, computed in a single pass."""
        total_expenses = 0.0
        total_income = 0.0
        highest_expense = 0.0
        expense_count = 0

        for exp in expenses:
            amount = _amount(exp)
            if _is_income(exp):
                total_income += amount
            else:
                total_expenses += amount
                expense_count += 1
                highest_expense = max(highest_expense, amount)

        average = total_expenses / expense_count if expense_count else 0.0
        return {
            "totalExpenses": round(total_expenses, 2),
            "totalIncome": round(total_income, 2),
            "highestExpense": round(highest_expense, 2),
            "averageExpense": round(average, 2),
            "count": len(expenses),
        }

    def monthly_summary(self, expenses: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Amount and count per (year, month), newest month first. Both types are included."""
        groups: Dict[tuple, Dict[str, float]] = defaultdict(lambda: {"amount": 0.0, "count": 0})
        for exp in expenses:
            when = parse_timestamp(exp["date"])
            group = groups[(when.year, when.month)]
            group["amount"] += _amount(exp)
            group["count"] += 1

        return [
            {"year": year, "month": month, "amount": round(g["amount"], 2), "count": g["count"]}
            for (year, month), g in sorted(groups.items(), reverse=True)
        ]

    def category_totals(self, expenses: List[Dict[str, Any]]) -> Dict[str, float]:
        """Spend per category; income is ignored."""
        totals: Dict[str, float] = defaultdict(float)
        for exp in expenses:
            if _is_income(exp):
                continue
            totals[exp.get("category") or "Other"] += _amount(exp)
        return {cat: round(total, 2) for cat, total in totals.items()}

    def summarize(self, expenses: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Month-style summary used by the PDF report."""
        spending = [exp for exp in expenses if not _is_income(exp)]
        total_spent = round(sum(_amount(exp) for exp in spending), 2)
        total_income = round(sum(_amount(exp) for exp in expenses if _is_income(exp)), 2)

        category_map: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for exp in spending:
            category_map[exp.get("category") or "Other"].append(exp)

        insights = []
        for category, items in category_map.items():
            total = round(sum(_amount(item) for item in items), 2)
            insights.append(
                CategoryInsight(
                    category=category,
                    total=total,
                    average=round(total / len(items), 2),
                    transaction_count=len(items),
                    share=round(total / total_spent * 100, 2) if total_spent else 0.0,
                )
            )
        insights.sort(key=lambda insight: insight.total, reverse=True)

        return {
            "total_spent": total_spent,
            "total_income": total_income,
            "net": round(total_income - total_spent, 2),
            "transaction_count": len(expenses),
            "insights": [insight.to_dict() for insight in insights],
        }

    def overview(
        self,
        expenses: List[Dict[str, Any]],
        time_range: str = "6m",
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Reports page data for a time window: income vs spending per month,
        top categories, recent daily trend and the spend totals.
        """
        if time_range not in REPORT_RANGES:
            raise ValueError(f"range must be one of {', '.join(REPORT_RANGES)}")
        now = now or utcnow()
        max_days = REPORT_RANGES[time_range]

        in_window = []
        for exp in expenses:
            when = parse_timestamp(exp["date"])
            if max_days is not None:
                days = math.ceil(abs((now - when).total_seconds()) / 86400)
                if days > max_days:
                    continue
            in_window.append((when, exp))

        monthly: Dict[tuple, Dict[str, Any]] = {}
        daily: Dict[str, float] = defaultdict(float)
        for when, exp in in_window:
            key = (when.year, when.month)
            if key not in monthly:
                monthly[key] = {"name": when.strftime("%b %Y"), "income": 0.0, "spending": 0.0}
            if _is_income(exp):
                monthly[key]["income"] += _amount(exp)
            else:
                monthly[key]["spending"] += _amount(exp)
                daily[when.strftime("%Y-%m-%d")] += _amount(exp)

        income_vs_spending = [
            {"name": row["name"], "income": round(row["income"], 2), "spending": round(row["spending"], 2)}
            for _, row in sorted(monthly.items())
        ]
        spending_trend = [
            {"name": day, "value": round(value, 2)}
            for day, value in sorted(daily.items())[-TREND_DAYS:]
        ]

        spending = [exp for _, exp in in_window if not _is_income(exp)]
        category_spend = self.category_totals(spending)
        top_categories = [
            {"name": name, "value": value}
            for name, value in sorted(category_spend.items(), key=lambda kv: kv[1], reverse=True)[:TOP_CATEGORY_COUNT]
        ]

        total_spent = sum(_amount(exp) for exp in spending)
        average = total_spent / len(spending) if spending else 0.0

        return {
            "range": time_range,
            "incomeVsSpending": income_vs_spending,
            "topCategories": top_categories,
            "spendingTrend": spending_trend,
            "totalSpent": round(total_spent, 2),
            "averageTransaction": round(average, 2),
        }
