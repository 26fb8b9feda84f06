import pytest

from spendwise.utils.budget import (
    DEFAULT_BUDGET_LIMITS,
    effective_limits,
    evaluate_budget,
    health_status,
    usage_percentage,
)


def _spend(category, amount, type="expense"):
    return {"category": category, "amount": amount, "type": type}


def test_over_budget_category_is_clamped():
    report = evaluate_budget({"Food": 500}, [_spend("Food", 600)])
    food = report.categories[0]
    assert food.is_over_budget is True
    assert food.remaining == -100
    assert food.percentage == 100
    assert food.status == "over"


def test_zero_limit_and_zero_spend():
    assert usage_percentage(0, 0) == 0
    report = evaluate_budget({"Food": 0}, [])
    assert report.categories[0].is_over_budget is False
    assert report.categories[0].percentage == 0


def test_spend_against_zero_limit_counts_as_full():
    assert usage_percentage(25, 0) == 100


def test_spend_without_limit_still_shows_up():
    report = evaluate_budget({"Food": 100}, [_spend("Food", 50), _spend("Health", 30), _spend("Gift", 10)])
    assert [c.category for c in report.categories] == ["Food", "Gift", "Health"]
    health = report.categories[2]
    assert health.limit == 0
    assert health.is_over_budget is True
    assert health.percentage == 100


def test_income_is_not_spend():
    report = evaluate_budget({"Food": 100}, [_spend("Food", 40), _spend("Salary", 3000, type="income")])
    assert report.total_spent == 40
    assert [c.category for c in report.categories] == ["Food"]


def test_warning_status_above_eighty_percent():
    report = evaluate_budget({"Food": 100}, [_spend("Food", 85)])
    assert report.categories[0].status == "warning"
    assert report.health_status == "warning"


@pytest.mark.parametrize(
    "percentage, expected",
    [(0, "good"), (80, "good"), (80.5, "warning"), (100, "warning"), (100.01, "over")],
)
def test_health_status_bands(percentage, expected):
    assert health_status(percentage) == expected


def test_health_uses_unclamped_totals():
    report = evaluate_budget({"Food": 100, "Transport": 100}, [_spend("Food", 250)])
    assert report.health_percentage == 125
    assert report.health_status == "over"


def test_defaults_replace_empty_limits_wholesale():
    assert effective_limits({}) == DEFAULT_BUDGET_LIMITS
    assert effective_limits(None) == DEFAULT_BUDGET_LIMITS

    partial = {"Food": 50}
    assert effective_limits(partial) == {"Food": 50}

    report = evaluate_budget({}, [])
    assert report.using_defaults is True
    assert report.total_limit == sum(DEFAULT_BUDGET_LIMITS.values())


def test_report_serializes_camel_case():
    data = evaluate_budget({"Food": 200}, [_spend("Food", 50)]).to_dict()
    assert data["categories"][0] == {
        "category": "Food",
        "spent": 50,
        "limit": 200,
        "percentage": 25,
        "isOverBudget": False,
        "remaining": 150,
        "status": "ok",
    }
    assert data["healthPercentage"] == 25
    assert data["healthStatus"] == "good"


def test_spend_equal_to_limit_is_not_over():
    report = evaluate_budget({"Food": 126.8}, [_spend("Food", 60.1), _spend("Food", 66.7)])
    food = report.categories[0]
    assert food.spent == 126.8
    assert food.is_over_budget is False
    assert food.remaining == 0
    assert food.percentage == 100
    assert food.status == "warning"
    assert report.health_percentage == 100
    assert report.health_status == "warning"
