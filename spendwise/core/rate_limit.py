"""
Per-client request budgets.

Both limits are slowapi decorators on small FastAPI dependencies, so a
request is counted before authentication and body validation run.
Routers attach ``api_rate_limit``; the login route attaches
``login_rate_limit``, which carries the API budget plus its own.
"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from spendwise.core.config import settings

API_LIMIT = f"{settings.RATE_LIMIT_MAX}/{settings.RATE_LIMIT_WINDOW_SECONDS} seconds"
LOGIN_LIMIT = f"{settings.LOGIN_RATE_LIMIT_MAX}/{settings.RATE_LIMIT_WINDOW_SECONDS} seconds"

limiter = Limiter(key_func=get_remote_address)

api_limit = limiter.shared_limit(
    API_LIMIT,
    scope="api",
    error_message="Too many requests, please try again later.",
)


@api_limit
def api_rate_limit(request: Request) -> None:
    pass


@api_limit
@limiter.limit(LOGIN_LIMIT, error_message="Too many login attempts, please try again later.")
def login_rate_limit(request: Request) -> None:
    pass
