"""
EduFin API Client

Thin wrapper over the REST API for the Streamlit app. Request bodies go
out as the same pydantic request models the server validates against;
responses come back as models too.

Reads are retried on connection failures (the API may still be starting).
Writes are never retried: a POST that timed out may already have landed.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

import requests
from pydantic import BaseModel
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from edufin.models import (
    AuthResponse,
    Expense,
    ExpenseCreate,
    ExpensePatch,
    ExpenseSummary,
    Goal,
    GoalCreate,
    GoalPatch,
    LoginRequest,
    PublicUser,
    PurchaseRequest,
    QuizItem,
    RegisterRequest,
    Resource,
    Tip,
)


class ApiError(Exception):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list):
        # FastAPI validation errors
        return "; ".join(str(item.get("msg", item)) for item in detail)
    return str(detail or body)


def _bounds(date_from: Optional[date], date_to: Optional[date]) -> dict:
    params = {}
    if date_from:
        params["from"] = date_from.isoformat()
    if date_to:
        params["to"] = date_to.isoformat()
    return params


class ApiClient:
    """
    Client for one signed-in (or anonymous) user.

    Usage:
        client = ApiClient("http://localhost:5000/api")
        client.login("demo@edufin.test", "password123")
        summary = client.expense_summary(date(2024, 1, 1), date(2024, 2, 1))
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self.token = token

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _headers(self) -> dict:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(
        self,
        method: str,
        path: str,
        body: Optional[BaseModel] = None,
        params: Optional[dict] = None,
    ) -> Any:
        response = self._session.request(
            method,
            f"{self._base_url}{path}",
            headers=self._headers(),
            json=body.model_dump(mode="json", exclude_unset=True) if body is not None else None,
            params=params,
            timeout=self._timeout,
        )
        if not response.ok:
            raise ApiError(response.status_code, _detail(response))
        return response.json() if response.content else None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        reraise=True,
    )
    def _get(self, path: str, params: Optional[dict] = None) -> Any:
        return self._request("GET", path, params=params)

    # =========================================================================
    # AUTH
    # =========================================================================

    def health(self) -> bool:
        return bool(self._get("/health").get("ok"))

    def register(self, email: str, password: str, name: str = "") -> PublicUser:
        body = RegisterRequest(email=email, password=password, name=name)
        auth = AuthResponse.model_validate(self._request("POST", "/auth/register", body))
        self.token = auth.token
        return auth.user

    def login(self, email: str, password: str) -> PublicUser:
        body = LoginRequest(email=email, password=password)
        auth = AuthResponse.model_validate(self._request("POST", "/auth/login", body))
        self.token = auth.token
        return auth.user

    def logout(self) -> None:
        self.token = None

    def me(self) -> PublicUser:
        return PublicUser.model_validate(self._get("/auth/me")["user"])

    # =========================================================================
    # CONTENT
    # =========================================================================

    def tips(self) -> list[Tip]:
        return [Tip.model_validate(item) for item in self._get("/tips")]

    def quiz(self) -> list[QuizItem]:
        return [QuizItem.model_validate(item) for item in self._get("/quiz")]

    def resources(
        self,
        q: str = "",
        category: str = "",
        tag: str = "",
        language: str = "",
        limit: int = 50,
    ) -> list[Resource]:
        params = {"q": q, "category": category, "tag": tag, "language": language}
        params = {key: value for key, value in params.items() if value}
        params["limit"] = limit
        return [Resource.model_validate(item) for item in self._get("/resources", params)]

    # =========================================================================
    # GOALS
    # =========================================================================

    def goals(self) -> list[Goal]:
        return [Goal.model_validate(item) for item in self._get("/goals")]

    def create_goal(
        self,
        item_name: str,
        target_price: Decimal,
        saved_amount: Decimal = Decimal("0"),
    ) -> Goal:
        body = GoalCreate(item_name=item_name, target_price=target_price, saved_amount=saved_amount)
        return Goal.model_validate(self._request("POST", "/goals", body))

    def update_goal(self, goal_id: str, **changes) -> Goal:
        body = GoalPatch(**changes)
        return Goal.model_validate(self._request("PATCH", f"/goals/{goal_id}", body))

    def delete_goal(self, goal_id: str) -> None:
        self._request("DELETE", f"/goals/{goal_id}")

    def purchase_goal(
        self,
        goal_id: str,
        purchase_price: Decimal,
        purchased_at: Optional[date] = None,
    ) -> Goal:
        body = PurchaseRequest(purchase_price=purchase_price, purchased_at=purchased_at)
        return Goal.model_validate(self._request("POST", f"/goals/{goal_id}/purchase", body))

    # =========================================================================
    # EXPENSES
    # =========================================================================

    def expenses(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
        limit: int = 50,
    ) -> list[Expense]:
        params = {**_bounds(date_from, date_to), "page": page, "limit": limit}
        return [Expense.model_validate(item) for item in self._get("/expenses", params)]

    def create_expense(self, amount: Decimal, **fields) -> Expense:
        body = ExpenseCreate(amount=amount, **fields)
        return Expense.model_validate(self._request("POST", "/expenses", body))

    def update_expense(self, expense_id: str, **changes) -> Expense:
        body = ExpensePatch(**changes)
        return Expense.model_validate(self._request("PATCH", f"/expenses/{expense_id}", body))

    def delete_expense(self, expense_id: str) -> None:
        self._request("DELETE", f"/expenses/{expense_id}")

    def expense_summary(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> ExpenseSummary:
        data = self._get("/expenses/summary", _bounds(date_from, date_to))
        return ExpenseSummary.model_validate(data)
