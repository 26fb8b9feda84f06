import uuid

import httpx
import pytest

from spendwise.client import ApiClient, ApiError, ExpenseStore, Session


@pytest.fixture
def api(client):
    return ApiClient(http_client=client, api_prefix="/api")


@pytest.fixture
def signed_in(api):
    api.signup("Alice", "alice@example.com", "secret123")
    return api


def _expense(**fields):
    body = {"title": "Coffee", "amount": 4.5, "category": "Food", "date": "2025-11-03T12:00:00Z"}
    body.update(fields)
    return body


def test_signup_and_login_acquire_session(api):
    user = api.signup("Alice", "alice@example.com", "secret123")
    assert api.session.is_authenticated
    assert api.session.user == user

    api.logout()
    assert not api.session.is_authenticated

    api.login("alice@example.com", "secret123")
    assert api.me()["email"] == "alice@example.com"


def test_error_answer_becomes_api_error(api):
    with pytest.raises(ApiError) as exc_info:
        api.login("nobody@example.com", "secret123")
    assert exc_info.value.status == 401
    assert exc_info.value.message == "Invalid email or password"


def test_unauthorized_answer_clears_session(api):
    api.session.acquire("not-a-token", {"name": "Ghost"})
    with pytest.raises(ApiError) as exc_info:
        api.me()
    assert exc_info.value.status == 401
    assert api.session.token is None
    assert api.session.user is None


def test_transport_failure_is_network_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = ApiClient(http_client=httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://spendwise"))
    with pytest.raises(ApiError) as exc_info:
        api.stats()
    assert exc_info.value.status is None
    assert exc_info.value.message == "Network error. Please check your connection."


def test_session_headers():
    session = Session()
    assert session.auth_headers() == {}
    session.acquire("abc", {})
    assert session.auth_headers() == {"Authorization": "Bearer abc"}


def test_store_add_update_delete(signed_in):
    store = ExpenseStore(signed_in)
    store.refresh()
    assert store.expenses == []
    assert store.loading is False

    created = store.add(_expense())
    assert store.expenses[0]["id"] == created["id"]

    updated = store.update(created["id"], {"title": "Espresso"})
    assert updated["title"] == "Espresso"
    assert store.expenses[0]["title"] == "Espresso"

    assert store.delete(created["id"]) is True
    assert store.expenses == []
    assert store.error is None


def test_store_failed_add_refetches_and_keeps_error(signed_in):
    store = ExpenseStore(signed_in)
    store.add(_expense(title="Kept"))

    assert store.add(_expense(amount=-1)) is None
    assert store.error == "Amount must be greater than 0"
    assert [e["title"] for e in store.expenses] == ["Kept"]
    assert store.stats["count"] == 1


def test_store_failed_update_reraises(signed_in):
    store = ExpenseStore(signed_in)
    created = store.add(_expense())
    with pytest.raises(ApiError):
        store.update(created["id"], {"category": "Nope"})
    assert store.error == "Invalid category"
    assert store.expenses[0]["category"] == "Food"


def test_store_bulk_delete_reports_failures(signed_in):
    store = ExpenseStore(signed_in)
    first = store.add(_expense(title="One"))
    second = store.add(_expense(title="Two"))
    missing = str(uuid.uuid4())

    deleted, failed = store.bulk_delete([first["id"], missing, second["id"]])
    assert deleted == [first["id"], second["id"]]
    assert failed == {missing: "Expense not found or not authorized"}
    assert store.expenses == []
    assert store.error == "Expense not found or not authorized"


def test_store_clears_cache_on_unauthorized(signed_in):
    store = ExpenseStore(signed_in)
    store.add(_expense())
    signed_in.session.acquire("expired-token", signed_in.session.user)

    assert store.add(_expense()) is None
    assert store.expenses == []
    assert store.stats["count"] == 0
    assert signed_in.session.is_authenticated is False


def test_budget_and_report_calls(signed_in):
    signed_in.create_expense(_expense())
    report = signed_in.set_budget("Food", 120)
    assert {c["category"]: c["limit"] for c in report["categories"]}["Food"] == 120

    overview = signed_in.report_overview("all")
    assert overview["totalSpent"] == 4.5
    assert signed_in.export_csv().startswith("Date,Title")
