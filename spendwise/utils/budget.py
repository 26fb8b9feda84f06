from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from spendwise.models.expense import INCOME

DEFAULT_BUDGET_LIMITS: Dict[str, float] = {
    "Food": 500,
    "Transport": 200,
    "Shopping": 300,
    "Housing": 1000,
    "Utilities": 200,
    "Entertainment": 150,
    "Health": 100,
    "Other": 400,
}

WARNING_PERCENTAGE = 80
HEALTH_GOOD = "good"
HEALTH_WARNING = "warning"
HEALTH_OVER = "over"


@dataclass
class CategoryBudget:
    category: str
    spent: float
    limit: float
    percentage: float
    is_over_budget: bool
    remaining: float
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "spent": self.spent,
            "limit": self.limit,
            "percentage": self.percentage,
            "isOverBudget": self.is_over_budget,
            "remaining": self.remaining,
            "status": self.status,
        }


@dataclass
class BudgetReport:
    categories: List[CategoryBudget] = field(default_factory=list)
    total_spent: float = 0.0
    total_limit: float = 0.0
    health_percentage: float = 0.0
    health_status: str = HEALTH_GOOD
    using_defaults: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": [c.to_dict() for c in self.categories],
            "totalSpent": self.total_spent,
            "totalLimit": self.total_limit,
            "healthPercentage": self.health_percentage,
            "healthStatus": self.health_status,
            "usingDefaults": self.using_defaults,
        }


def effective_limits(user_limits: Mapping[str, float] | None) -> Dict[str, float]:
    """
    The user's limits, or the default table when none are configured.
    The two are never mixed.
    """
    if user_limits:
        return dict(user_limits)
    return dict(DEFAULT_BUDGET_LIMITS)


def usage_percentage(spent: float, limit: float) -> float:
    """Share of the limit used, clamped to 100. Spend against a zero limit counts as fully used."""
    if limit > 0:
        return min(spent / limit * 100, 100.0)
    return 100.0 if spent > 0 else 0.0


def health_status(percentage: float) -> str:
    if percentage > 100:
        return HEALTH_OVER
    if percentage > WARNING_PERCENTAGE:
        return HEALTH_WARNING
    return HEALTH_GOOD


def category_spend(expenses: Iterable[Dict[str, Any]]) -> Dict[str, float]:
    spend: Dict[str, float] = defaultdict(float)
    for exp in expenses:
        if exp.get("type") == INCOME:
            continue
        spend[exp.get("category") or "Other"] += float(exp.get("amount", 0) or 0)
    return dict(spend)


def evaluate_budget(user_limits: Mapping[str, float] | None, expenses: Iterable[Dict[str, Any]]) -> BudgetReport:
    """
    Merge configured limits with actual spend.

    Every configured category is shown, in configured order, followed by
    categories that have spend but no limit (alphabetically, limit 0).
    """
    limits = effective_limits(user_limits)
    # Totals in cents before any comparison.
    spend = {category: round(total, 2) for category, total in category_spend(expenses).items()}

    shown = list(limits) + sorted(cat for cat in spend if cat not in limits)

    categories = []
    for category in shown:
        spent = spend.get(category, 0.0)
        limit = round(float(limits.get(category, 0) or 0), 2)
        percentage = round(usage_percentage(spent, limit), 2)
        over = spent > limit
        if over:
            status = HEALTH_OVER
        elif percentage > WARNING_PERCENTAGE:
            status = HEALTH_WARNING
        else:
            status = "ok"
        categories.append(
            CategoryBudget(
                category=category,
                spent=spent,
                limit=limit,
                percentage=percentage,
                is_over_budget=over,
                remaining=round(limit - spent, 2),
                status=status,
            )
        )

    total_spent = round(sum(spend.values()), 2)
    total_limit = round(sum(float(v or 0) for v in limits.values()), 2)
    health = round(total_spent / total_limit * 100, 2) if total_limit > 0 else 0.0

    return BudgetReport(
        categories=categories,
        total_spent=total_spent,
        total_limit=total_limit,
        health_percentage=health,
        health_status=health_status(health),
        using_defaults=not user_limits,
    )
