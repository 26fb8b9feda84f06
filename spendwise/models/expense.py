import math
from datetime import datetime
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import BaseModel, BeforeValidator, Field

from spendwise.models.common import ApiModel
from spendwise.utils.dates import format_timestamp, parse_timestamp, to_utc, utcnow_iso

EXPENSE_CATEGORIES = [
    "Food",
    "Transport",
    "Shopping",
    "Housing",
    "Utilities",
    "Entertainment",
    "Health",
    "Other",
]
INCOME_CATEGORIES = ["Salary", "Business", "Freelance", "Investments", "Gift", "Other"]
CATEGORIES = EXPENSE_CATEGORIES + [c for c in INCOME_CATEGORIES if c not in EXPENSE_CATEGORIES]

EXPENSE = "expense"
INCOME = "income"
TRANSACTION_TYPES = (EXPENSE, INCOME)


def round_amount(value: float) -> float:
    """Half-up rounding to cents."""
    return math.floor(value * 100 + 0.5) / 100


def _amount(v: Any) -> float:
    if v is None or isinstance(v, bool):
        raise ValueError("Amount must be a number")
    try:
        value = float(v)
    except (TypeError, ValueError):
        raise ValueError("Amount must be a number")
    if math.isnan(value) or math.isinf(value):
        raise ValueError("Amount must be a number")
    if value <= 0:
        raise ValueError("Amount must be greater than 0")
    value = round_amount(value)
    if value <= 0:
        raise ValueError("Amount must be greater than 0")
    return value


def _title(v: Any) -> str:
    if not isinstance(v, str) or not v.strip():
        raise ValueError("Title is required")
    return v.strip()


def _category(v: Any) -> str:
    if not isinstance(v, str) or not v.strip():
        raise ValueError("Category is required")
    if v not in CATEGORIES:
        raise ValueError("Invalid category")
    return v


def _date(v: Any) -> datetime:
    if isinstance(v, datetime):
        return to_utc(v)
    if not isinstance(v, str) or not v.strip():
        raise ValueError("Please provide a valid date")
    try:
        return parse_timestamp(v)
    except ValueError:
        raise ValueError("Please provide a valid date")


def _type(v: Any) -> str:
    if v not in TRANSACTION_TYPES:
        raise ValueError("Invalid type")
    return v


def _notes(v: Any) -> Optional[str]:
    if v is None:
        return None
    if not isinstance(v, str):
        raise ValueError("Notes must be text")
    return v.strip()


def _date_or_now(v: Any) -> Optional[datetime]:
    # Missing or null date means "now".
    return None if v is None else _date(v)


Title = Annotated[str, BeforeValidator(_title)]
Amount = Annotated[float, BeforeValidator(_amount)]
Category = Annotated[str, BeforeValidator(_category)]
TransactionType = Annotated[str, BeforeValidator(_type)]
Notes = Annotated[Optional[str], BeforeValidator(_notes)]


class ExpenseCreate(ApiModel):
    title: Title
    amount: Amount
    category: Category
    date: Annotated[Optional[datetime], BeforeValidator(_date_or_now)] = None
    type: TransactionType = EXPENSE
    notes: Notes = None


class ExpenseUpdate(ApiModel):
    # An explicit null is validated like any other value, so it can't blank a required field.
    title: Annotated[Optional[str], BeforeValidator(_title)] = None
    amount: Annotated[Optional[float], BeforeValidator(_amount)] = None
    category: Annotated[Optional[str], BeforeValidator(_category)] = None
    date: Annotated[Optional[datetime], BeforeValidator(_date)] = None
    type: Annotated[Optional[str], BeforeValidator(_type)] = None
    notes: Notes = None

    def changes(self) -> dict:
        """Fields the caller actually sent, in storage form."""
        updates = self.model_dump(exclude_unset=True)
        if "date" in updates:
            updates["date"] = format_timestamp(updates["date"])
        if "notes" in updates and updates["notes"] is None:
            updates["notes"] = ""
        return updates


class ExpenseInDB(BaseModel):
    user_id: str
    expense_id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    amount: float
    category: str
    date: str = Field(default_factory=utcnow_iso)
    type: str = EXPENSE
    notes: Optional[str] = None
    created_at: str = Field(default_factory=utcnow_iso)
    updated_at: str = Field(default_factory=utcnow_iso)

    @classmethod
    def from_create(cls, user_id: str, expense: ExpenseCreate) -> "ExpenseInDB":
        data = expense.model_dump(exclude={"date"})
        if expense.date is not None:
            data["date"] = format_timestamp(expense.date)
        return cls(user_id=user_id, **data)

    def to_item(self) -> dict:
        return self.model_dump(exclude_none=True)


class ExpensePublic(ApiModel):
    id: str
    title: str
    amount: float
    category: str
    date: str
    type: str = EXPENSE
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_item(cls, item: dict) -> "ExpensePublic":
        return cls(
            id=item["expense_id"],
            title=item["title"],
            amount=item["amount"],
            category=item["category"],
            date=item["date"],
            type=item.get("type", EXPENSE),
            notes=item.get("notes"),
            created_at=item.get("created_at"),
            updated_at=item.get("updated_at"),
        )
