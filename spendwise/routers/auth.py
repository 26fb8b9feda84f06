import logging

from fastapi import APIRouter, Depends, HTTPException, status

from spendwise.core.rate_limit import api_rate_limit, login_rate_limit
from spendwise.core.security import get_current_user, get_password_hash, issue_token, verify_password
from spendwise.db import dynamo
from spendwise.models.common import Envelope
from spendwise.models.user import (
    AuthPayload,
    UserCreate,
    UserInDB,
    UserLogin,
    UserPublic,
    UserUpdate,
    budget_limits_of,
    to_public,
)
from spendwise.utils.dates import utcnow_iso

router = APIRouter()
logger = logging.getLogger(__name__)

# Limits are per route here: slowapi checks only the first limit dependency of a request.


@router.post(
    "/signup",
    response_model=Envelope[AuthPayload],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(api_rate_limit)],
)
def signup(user: UserCreate):
    if dynamo.get_user_by_email(user.email):
        raise HTTPException(status_code=400, detail="User already exists")

    user_db = UserInDB(
        name=user.name,
        email=user.email,
        password_hash=get_password_hash(user.password),
    )
    if not dynamo.put_user(user_db.model_dump()):
        raise HTTPException(status_code=500, detail="Error saving user")

    logger.info(f"Registered user {user_db.user_id}")
    return Envelope(data=AuthPayload(user=to_public(user_db.model_dump()), token=issue_token(user_db.user_id)))


@router.post("/login", response_model=Envelope[AuthPayload], dependencies=[Depends(login_rate_limit)])
def login(login_data: UserLogin):
    user = dynamo.get_user_by_email(login_data.email)

    # Same answer for unknown email and wrong password.
    if not user or not verify_password(login_data.password, user.get("password_hash", "")):
        logger.warning(f"Failed login for email: {login_data.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    logger.info(f"Login successful for user: {user['user_id']}")
    return Envelope(data=AuthPayload(user=to_public(user), token=issue_token(user["user_id"])))


@router.get("/me", response_model=Envelope[UserPublic], dependencies=[Depends(api_rate_limit)])
def me(current_user: dict = Depends(get_current_user)):
    """Get current user profile"""
    return Envelope(data=to_public(current_user))


@router.put("/update", response_model=Envelope[AuthPayload], dependencies=[Depends(api_rate_limit)])
def update_profile(patch: UserUpdate, current_user: dict = Depends(get_current_user)):
    """
    Partial profile update. Budget limits in ``settings.budgetLimits`` are
    merged into the stored ones key by key.
    """
    user_id = current_user["user_id"]
    updates = {}

    if patch.name:
        updates["name"] = patch.name

    if patch.email and patch.email != current_user["email"]:
        owner = dynamo.get_user_by_email(patch.email)
        if owner and owner["user_id"] != user_id:
            raise HTTPException(status_code=400, detail="Email is already in use")
        updates["email"] = patch.email

    if patch.password:
        updates["password_hash"] = get_password_hash(patch.password)

    if patch.settings is not None and patch.settings.budget_limits:
        limits = budget_limits_of(current_user)
        limits.update(patch.settings.budget_limits)
        stored_settings = dict(current_user.get("settings") or {})
        stored_settings["budget_limits"] = limits
        updates["settings"] = stored_settings

    if updates:
        updates["updated_at"] = utcnow_iso()
        updated = dynamo.update_user(user_id, updates)
        if not updated:
            raise HTTPException(status_code=500, detail="Failed to update user")
        logger.info(f"Updated profile for user {user_id}: {', '.join(sorted(updates))}")
    else:
        updated = current_user

    return Envelope(data=AuthPayload(user=to_public(updated), token=issue_token(user_id)))
