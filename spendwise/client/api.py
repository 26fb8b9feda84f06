import logging
from typing import Any, Dict, Optional

import httpx

from spendwise.client.session import Session

logger = logging.getLogger(__name__)

NETWORK_ERROR = "Network error. Please check your connection."


class ApiError(Exception):
    """Error answer from the API, or no answer at all (status is None)."""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class ApiClient:
    """
    Thin JSON client for the SpendWise API.

    Pass ``http_client`` to reuse an existing ``httpx.Client`` (for example
    FastAPI's TestClient); otherwise one is created for ``base_url``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000/api",
        session: Optional[Session] = None,
        http_client: Optional[httpx.Client] = None,
        api_prefix: str = "",
        timeout: float = 10.0,
    ):
        self.session = session or Session()
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._prefix = api_prefix.rstrip("/")

    def close(self) -> None:
        self._http.close()

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(self.session.auth_headers())
        try:
            response = self._http.request(method, self._prefix + path, headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(None, NETWORK_ERROR) from e

        if response.status_code == 401:
            # Any 401 ends the session.
            self.session.clear()

        if response.is_error:
            try:
                message = response.json().get("message") or "Something went wrong"
            except ValueError:
                message = "Something went wrong"
            raise ApiError(response.status_code, message)
        return response

    def _json(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        return self.request(method, path, **kwargs).json()

    def _data(self, method: str, path: str, **kwargs) -> Any:
        return self._json(method, path, **kwargs).get("data")

    # Auth ---------------------------------------------------------------

    def signup(self, name: str, email: str, password: str) -> Dict[str, Any]:
        data = self._data("POST", "/auth/signup", json={"name": name, "email": email, "password": password})
        self.session.acquire(data["token"], data["user"])
        return data["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._data("POST", "/auth/login", json={"email": email, "password": password})
        self.session.acquire(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        # Tokens are stateless; dropping ours is the whole logout.
        self.session.clear()

    def me(self) -> Dict[str, Any]:
        user = self._data("GET", "/auth/me")
        self.session.user = user
        return user

    def update_profile(self, **patch) -> Dict[str, Any]:
        data = self._data("PUT", "/auth/update", json=patch)
        self.session.acquire(data["token"], data["user"])
        return data["user"]

    # Expenses -----------------------------------------------------------

    def list_expenses(self, page: int = 1, **filters) -> Dict[str, Any]:
        params = {"page": page}
        params.update({k: v for k, v in filters.items() if v not in (None, "")})
        return self._json("GET", "/expenses", params=params)

    def get_expense(self, expense_id: str) -> Dict[str, Any]:
        return self._data("GET", f"/expenses/{expense_id}")

    def create_expense(self, expense: Dict[str, Any]) -> Dict[str, Any]:
        return self._data("POST", "/expenses", json=expense)

    def update_expense(self, expense_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._data("PUT", f"/expenses/{expense_id}", json=changes)

    def delete_expense(self, expense_id: str) -> None:
        self.request("DELETE", f"/expenses/{expense_id}")

    def stats(self) -> Dict[str, Any]:
        return self._data("GET", "/expenses/stats")

    def summary(self) -> list:
        return self._data("GET", "/expenses/summary")

    # Budgets / reports --------------------------------------------------

    def budgets(self, month: Optional[str] = None) -> Dict[str, Any]:
        params = {"month": month} if month else None
        return self._data("GET", "/budgets", params=params)

    def set_budget(self, category: str, limit: float) -> Dict[str, Any]:
        return self._data("PUT", f"/budgets/{category}", json={"limit": limit})

    def delete_budget(self, category: str) -> Dict[str, Any]:
        return self._data("DELETE", f"/budgets/{category}")

    def report_overview(self, time_range: str = "6m") -> Dict[str, Any]:
        return self._data("GET", "/reports/overview", params={"range": time_range})

    def export_csv(self) -> str:
        return self.request("GET", "/reports/export.csv").text
