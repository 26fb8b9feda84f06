"""
spendwise.client
~~~~~~~~~~~~~~~~

Python client for the SpendWise API. ``Session`` holds the credentials,
``ApiClient`` speaks HTTP, and ``ExpenseStore`` keeps a reconciled local copy
of the user's transactions and stats.
"""

from .api import ApiClient, ApiError
from .session import Session
from .store import ExpenseStore

__all__ = ["ApiClient", "ApiError", "ExpenseStore", "Session"]
