"""
API tests.

The app runs on in-memory storage seeded with the starter tips and quiz,
through FastAPI's TestClient. No database or network needed.
"""

import asyncio
import pytest
from datetime import date

from fastapi.testclient import TestClient

from edufin.api import create_app
from edufin.audit import AuditLogger
from edufin.config import AppSettings, AuthSettings
from edufin.models import AuditEventType
from edufin.orchestrator import ExpenseFlow, create_app_components
from edufin.services.storage import InMemoryAuditStorage, InMemoryExpenseStorage, StorageError


@pytest.fixture
def client():
    components = create_app_components(
        use_storage=False,
        auth_settings=AuthSettings(secret="test-secret-value", bcrypt_rounds=4),
        app_settings=AppSettings(),
    )
    return TestClient(create_app(components))


def register(client, email="sam@edufin.test", password="password123", name="Sam"):
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth(client):
    return register(client)


class TestHealthAndAuth:

    def test_health(self, client):
        assert client.get("/api/health").json() == {"ok": True}

    def test_register_returns_token_and_public_user(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": " Sam@EduFin.test ", "password": "password123"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["token"]
        assert body["user"]["email"] == "sam@edufin.test"
        assert body["user"]["name"] == ""
        assert "password_hash" not in body["user"]

    def test_duplicate_email(self, client, auth):
        response = client.post(
            "/api/auth/register",
            json={"email": "SAM@edufin.test", "password": "x"},
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Email in use"

    def test_register_missing_fields(self, client):
        assert client.post("/api/auth/register", json={"email": "a@b.c"}).status_code == 422

    def test_login(self, client, auth):
        response = client.post(
            "/api/auth/login",
            json={"email": "sam@edufin.test", "password": "password123"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Sam"

    @pytest.mark.parametrize("email, password", [
        ("sam@edufin.test", "wrong"),
        ("nobody@edufin.test", "password123"),
    ])
    def test_login_failures_look_the_same(self, client, auth, email, password):
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_me(self, client, auth):
        response = client.get("/api/auth/me", headers=auth)
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "sam@edufin.test"

    def test_missing_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Missing token"

    def test_invalid_token(self, client):
        response = client.get("/api/goals", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"


class TestContent:

    def test_tips(self, client):
        tips = client.get("/api/tips").json()
        assert len(tips) == 4
        assert all(tip["id"] and tip["text"] for tip in tips)

    def test_quiz(self, client):
        items = client.get("/api/quiz").json()
        assert len(items) == 4
        assert {item["answer"] for item in items} == {"need", "want"}

    def test_resources_pinned_first(self, client):
        resources = client.get("/api/resources").json()
        assert resources
        assert resources[0]["pinned"] is True

    def test_resources_limit_is_clamped(self, client):
        assert len(client.get("/api/resources", params={"limit": 1}).json()) == 1
        assert len(client.get("/api/resources", params={"limit": 0}).json()) == 1

    def test_resources_language_filter(self, client):
        resources = client.get("/api/resources", params={"language": "ES"}).json()
        assert resources
        assert all(r["language"] == "es" for r in resources)


class TestGoals:

    def test_goal_lifecycle(self, client, auth):
        created = client.post(
            "/api/goals",
            json={"item_name": "Gaming Laptop", "target_price": 1000, "saved_amount": 300},
            headers=auth,
        )
        assert created.status_code == 201
        goal = created.json()
        assert goal["status"] == "active"
        assert goal["saved_amount"] == 300.0

        patched = client.patch(f"/api/goals/{goal['id']}", json={"saved_amount": 1000}, headers=auth)
        assert patched.json()["saved_amount"] == 1000.0

        purchased = client.post(
            f"/api/goals/{goal['id']}/purchase",
            json={"purchase_price": 949.99},
            headers=auth,
        )
        assert purchased.status_code == 200
        body = purchased.json()
        assert body["status"] == "purchased"
        assert body["purchase_price"] == 949.99
        assert body["purchased_at"] == date.today().isoformat()

        assert client.delete(f"/api/goals/{goal['id']}", headers=auth).json() == {"ok": True}
        assert client.get("/api/goals", headers=auth).json() == []

    def test_goals_newest_first(self, client, auth):
        for name in ("First", "Second"):
            client.post("/api/goals", json={"item_name": name, "target_price": 10}, headers=auth)
        names = [g["item_name"] for g in client.get("/api/goals", headers=auth).json()]
        assert names == ["Second", "First"]

    def test_other_users_goal_is_not_found(self, client, auth):
        goal = client.post(
            "/api/goals",
            json={"item_name": "Bike", "target_price": 300},
            headers=auth,
        ).json()
        other = register(client, email="alex@edufin.test")

        assert client.patch(f"/api/goals/{goal['id']}", json={"saved_amount": 1}, headers=other).status_code == 404
        assert client.delete(f"/api/goals/{goal['id']}", headers=other).status_code == 404
        assert client.get("/api/goals", headers=other).json() == []

    def test_unknown_goal(self, client, auth):
        response = client.post("/api/goals/nope/purchase", json={"purchase_price": 1}, headers=auth)
        assert response.status_code == 404

    def test_negative_price_rejected(self, client, auth):
        response = client.post("/api/goals", json={"item_name": "Bike", "target_price": -1}, headers=auth)
        assert response.status_code == 422


class TestExpenses:

    def add(self, client, auth, **body):
        response = client.post("/api/expenses", json=body, headers=auth)
        assert response.status_code == 201
        return response.json()

    def test_create_defaults(self, client, auth):
        expense = self.add(client, auth, amount=12.5)
        assert expense["category"] == "other"
        assert expense["note"] == ""
        assert expense["date"] == date.today().isoformat()
        assert expense["amount"] == 12.5

    @pytest.mark.parametrize("body", [
        {"amount": "lots"},
        {"amount": -5},
        {"category": "purchase"},
        {"amount": 5, "category": "snacks"},
        {"amount": 5, "colour": "red"},
    ])
    def test_invalid_bodies(self, client, auth, body):
        assert client.post("/api/expenses", json=body, headers=auth).status_code == 422

    def test_list_sorted_and_filtered(self, client, auth):
        self.add(client, auth, amount=10, date="2024-01-05")
        self.add(client, auth, amount=20, date="2024-02-01")
        self.add(client, auth, amount=30, date="2024-01-20")

        everything = client.get("/api/expenses", headers=auth).json()
        assert [e["amount"] for e in everything] == [20.0, 30.0, 10.0]

        january = client.get(
            "/api/expenses",
            params={"from": "2024-01-01", "to": "2024-02-01"},
            headers=auth,
        ).json()
        assert [e["amount"] for e in january] == [30.0, 10.0]

    def test_paging_is_clamped(self, client, auth):
        for n in range(3):
            self.add(client, auth, amount=n + 1, date=f"2024-01-0{n + 1}")

        page = client.get("/api/expenses", params={"page": 2, "limit": 2}, headers=auth).json()
        assert [e["amount"] for e in page] == [1.0]

        clamped = client.get("/api/expenses", params={"page": 0, "limit": 0}, headers=auth).json()
        assert len(clamped) == 1

    def test_patch_and_delete(self, client, auth):
        expense = self.add(client, auth, amount=10, category="purchase")

        patched = client.patch(
            f"/api/expenses/{expense['id']}",
            json={"note": "headphones", "category": "accessory"},
            headers=auth,
        ).json()
        assert patched["note"] == "headphones"
        assert patched["category"] == "accessory"
        assert patched["amount"] == 10.0

        assert client.delete(f"/api/expenses/{expense['id']}", headers=auth).json() == {"ok": True}
        assert client.delete(f"/api/expenses/{expense['id']}", headers=auth).status_code == 404

    def test_expenses_are_private(self, client, auth):
        expense = self.add(client, auth, amount=10)
        other = register(client, email="alex@edufin.test")
        assert client.get("/api/expenses", headers=other).json() == []
        assert client.patch(f"/api/expenses/{expense['id']}", json={"note": "x"}, headers=other).status_code == 404

    def test_summary(self, client, auth):
        self.add(client, auth, amount=50, category="purchase", date="2024-01-05")
        self.add(client, auth, amount=30, category="other", date="2024-01-20")
        self.add(client, auth, amount=20, category="purchase", date="2024-02-01")

        response = client.get(
            "/api/expenses/summary",
            params={"from": "2024-01-01", "to": "2024-02-01"},
            headers=auth,
        )
        assert response.status_code == 200
        assert response.json() == {
            "total": 80.0,
            "byCategory": [
                {"category": "purchase", "total": 50.0, "share": 0.625},
                {"category": "other", "total": 30.0, "share": 0.375},
            ],
            "byMonth": [{"month": "2024-01", "total": 80.0}],
            "topCategory": {"category": "purchase", "total": 50.0, "share": 0.625},
        }

    def test_empty_summary(self, client, auth):
        response = client.get("/api/expenses/summary", headers=auth)
        assert response.json() == {"total": 0.0, "byCategory": [], "byMonth": [], "topCategory": None}

    @pytest.mark.parametrize("params", [
        {"from": "yesterday"},
        {"to": "2024-13-01"},
        {"from": "2024-02-01", "to": "2024-01-01"},
    ])
    def test_summary_rejects_bad_bounds(self, client, auth, params):
        response = client.get("/api/expenses/summary", params=params, headers=auth)
        assert response.status_code == 400

    def test_list_rejects_bad_bounds(self, client, auth):
        response = client.get("/api/expenses", params={"from": "soon"}, headers=auth)
        assert response.status_code == 400

    def test_summary_requires_auth(self, client):
        assert client.get("/api/expenses/summary").status_code == 401


class UnreachableExpenseStorage(InMemoryExpenseStorage):
    """Expense backend whose reads fail."""

    async def list_expenses(self, owner_id, date_from=None, date_to=None, limit=None, offset=0):
        raise StorageError("expenses collection unavailable")


class TestStorageFailure:

    def test_storage_error_is_503_and_audited(self):
        components = create_app_components(
            use_storage=False,
            auth_settings=AuthSettings(secret="test-secret-value", bcrypt_rounds=4),
            app_settings=AppSettings(),
        )
        audit_storage = InMemoryAuditStorage()
        audit = AuditLogger(audit_storage)
        components = components._replace(
            expenses=ExpenseFlow(UnreachableExpenseStorage(), components.app_settings, audit),
            audit=audit,
        )
        client = TestClient(create_app(components))
        headers = register(client)

        response = client.get("/api/expenses/summary", headers=headers)
        assert response.status_code == 503
        assert response.json()["detail"] == "Storage unavailable"

        events = asyncio.run(audit_storage.get_recent_events())
        errors = [e for e in events if e.event_type == AuditEventType.SYSTEM_ERROR]
        assert len(errors) == 1
        assert errors[0].error_message == "expenses collection unavailable"
        assert errors[0].details == {"path": "/api/expenses/summary", "method": "GET"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
