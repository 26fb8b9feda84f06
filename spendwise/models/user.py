import math
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from spendwise.models.common import ApiModel
from spendwise.utils.dates import utcnow_iso

MIN_PASSWORD_LENGTH = 6


def normalize_email(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Please provide a valid email")
    try:
        _, email = validate_email(value.strip())
    except PydanticCustomError:
        raise ValueError("Please provide a valid email")
    return email.lower()


def _check_limits(limits: Optional[Dict[str, Any]]) -> Optional[Dict[str, float]]:
    if limits is None:
        return None
    cleaned: Dict[str, float] = {}
    for category, amount in limits.items():
        category = str(category).strip()
        if not category:
            raise ValueError("Budget category is required")
        try:
            value = float(amount)
        except (TypeError, ValueError):
            raise ValueError(f"Budget limit for {category} must be a number")
        if math.isnan(value) or math.isinf(value) or value <= 0:
            raise ValueError(f"Budget limit for {category} must be positive")
        cleaned[category] = value
    return cleaned


class UserSettings(ApiModel):
    budget_limits: Dict[str, float] = Field(default_factory=dict)

    @field_validator("budget_limits", mode="before")
    @classmethod
    def validate_limits(cls, v):
        return _check_limits(v) if v is not None else {}


class UserSettingsUpdate(ApiModel):
    budget_limits: Optional[Dict[str, float]] = None

    @field_validator("budget_limits", mode="before")
    @classmethod
    def validate_limits(cls, v):
        return _check_limits(v)


class UserCreate(ApiModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def valid_email(cls, v):
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError("Password must be at least 6 characters long")
        return v


class UserLogin(ApiModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def valid_email(cls, v):
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserUpdate(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    settings: Optional[UserSettingsUpdate] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        # Blank name keeps the current one.
        return v or None

    @field_validator("email", mode="before")
    @classmethod
    def valid_email(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError("Password must be at least 6 characters long")
        return v


class UserInDB(BaseModel):
    user_id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    email: str
    password_hash: str
    settings: Dict[str, Any] = Field(default_factory=lambda: {"budget_limits": {}})
    created_at: str = Field(default_factory=utcnow_iso)
    updated_at: str = Field(default_factory=utcnow_iso)


class UserPublic(ApiModel):
    id: str
    name: str
    email: str
    settings: UserSettings
    created_at: str


class AuthPayload(ApiModel):
    user: UserPublic
    token: str


def budget_limits_of(user: dict) -> Dict[str, float]:
    return dict((user.get("settings") or {}).get("budget_limits") or {})


def to_public(user: dict) -> UserPublic:
    return UserPublic(
        id=user["user_id"],
        name=user.get("name", ""),
        email=user["email"],
        settings=UserSettings(budget_limits=budget_limits_of(user)),
        created_at=user.get("created_at", ""),
    )
