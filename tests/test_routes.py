"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from services import expenses_service


def post_expense(client: TestClient, **body):
    return client.post("/expenses", json=body)


class TestCreateExpense:
    """Test POST /expenses."""

    def test_create_with_date(self, client: TestClient):
        response = post_expense(client, category="Food", amount=12.5, date="2024-03-10")
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        assert body["data"] == {"id": 1, "category": "Food", "amount": 12.5, "date": "2024-03-10"}

    def test_create_without_date(self, client: TestClient):
        """The date defaults to the current UTC instant."""
        response = post_expense(client, category="Bills", amount=80)
        assert response.status_code == 201
        assert response.json()["data"]["date"].endswith("Z")

    def test_ids_increment(self, client: TestClient):
        ids = [post_expense(client, category="Food", amount=1).json()["data"]["id"] for _ in range(3)]
        assert ids == [1, 2, 3]

    def test_invalid_category(self, client: TestClient):
        response = post_expense(client, category="Rent", amount=10)
        assert response.status_code == 400
        assert response.json()["detail"] == {"status": "error", "error": "Invalid category."}

    def test_invalid_amount(self, client: TestClient):
        response = post_expense(client, category="Food", amount="10")
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Amount must be a positive number."

    def test_amount_overflowing_float(self, client: TestClient):
        """A huge integer amount is a validation failure, not a server error."""
        response = client.post(
            "/expenses",
            content='{"category": "Food", "amount": ' + "9" * 400 + "}",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Amount must be a positive number."

    def test_compact_date_rejected(self, client: TestClient):
        response = post_expense(client, category="Food", amount=10, date="20240310")
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Invalid date format."

    def test_invalid_date(self, client: TestClient):
        response = post_expense(client, category="Food", amount=10, date="next tuesday")
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Invalid date format."

    def test_empty_body(self, client: TestClient):
        response = client.post("/expenses", json={})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Invalid category."


class TestGetExpenses:
    """Test GET /expenses."""

    def seed(self, client: TestClient):
        post_expense(client, category="Food", amount=10, date="2024-01-02")
        post_expense(client, category="Travel", amount=50, date="2024-01-20")
        post_expense(client, category="Food", amount=5, date="2024-02-05")

    def test_all(self, client: TestClient):
        self.seed(client)
        response = client.get("/expenses")
        assert response.status_code == 200
        assert [e["id"] for e in response.json()["data"]] == [1, 2, 3]

    def test_by_category(self, client: TestClient):
        self.seed(client)
        data = client.get("/expenses", params={"category": "Food"}).json()["data"]
        assert [e["id"] for e in data] == [1, 3]

    def test_by_date_range(self, client: TestClient):
        self.seed(client)
        params = {"startDate": "2024-01-02", "endDate": "2024-01-20"}
        data = client.get("/expenses", params=params).json()["data"]
        assert [e["id"] for e in data] == [1, 2]

    def test_invalid_date_bound(self, client: TestClient):
        response = client.get("/expenses", params={"endDate": "soon"})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Invalid date format."

    def test_empty_store(self, client: TestClient):
        assert client.get("/expenses").json() == {"status": "success", "data": []}


class TestAnalysis:
    """Test GET /expenses/analysis."""

    def test_analysis(self, client: TestClient):
        post_expense(client, category="Food", amount=10, date="2024-01-15")
        post_expense(client, category="Food", amount=5, date="2024-01-02")
        post_expense(client, category="Travel", amount=20, date="2024-02-01")

        data = client.get("/expenses/analysis").json()["data"]
        assert data == {
            "totalByCategory": {"Food": 15, "Travel": 20},
            "highestCategory": "Travel",
            "monthlyTotals": {"2024-01": 15, "2024-02": 20},
        }

    def test_analysis_empty(self, client: TestClient):
        data = client.get("/expenses/analysis").json()["data"]
        assert data == {"totalByCategory": {}, "highestCategory": None, "monthlyTotals": {}}


class TestPeriodSummary:
    """Test GET /expenses/summary/{period}."""

    def test_daily_includes_todays_expense(self, client: TestClient):
        post_expense(client, category="Food", amount=10)
        post_expense(client, category="Food", amount=10, date="2000-01-01")
        data = client.get("/expenses/summary/daily").json()["data"]
        assert [e["id"] for e in data] == [1]

    def test_unknown_period(self, client: TestClient):
        assert client.get("/expenses/summary/yearly").status_code == 400

    def test_unexpected_error_returns_500(self, client: TestClient, monkeypatch):
        """Failures inside the summary are logged and reported as a 500."""
        def broken_summary(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(expenses_service, "summarize_period", broken_summary)
        response = client.get("/expenses/summary/weekly")
        assert response.status_code == 500
        assert "weekly" in response.json()["detail"]


class TestStoreDependency:
    """Test behaviour when the app was not started through its lifespan."""

    def test_missing_store_returns_503(self):
        from main import app

        response = TestClient(app).get("/expenses")
        assert response.status_code == 503
