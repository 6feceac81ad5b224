"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient
from cerebral_finance.domain.narrative import SECTION_ORDER, TITLE


@pytest.fixture
def card_payload() -> dict:
    return {
        "name": "Everyday Visa",
        "last_four_digits": "4242",
        "credit_limit": 2000,
        "current_balance": 1000,
        "apr": "18.99",
        "bank": "Chase",
    }


@pytest.fixture
def stored_card(client: TestClient, card_payload: dict) -> dict:
    response = client.post("/v1/credit-cards", json=card_payload)
    assert response.status_code == 201
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "cerebral-finance", "database": "ok"}


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.get("/v1/financial-profile")

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "cerebral_profile_generated_total" in response.text
    assert "http_request_duration_seconds" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    generated = client.get("/health")
    assert generated.headers["X-Request-ID"]


# --- Calculator ---------------------------------------------------------------


def test_minimum_payment_calculation(client: TestClient):
    response = client.post("/v1/calculations/minimum-payment", json={"balance": "1000", "apr": "18.99"})

    assert response.status_code == 200
    data = response.json()
    assert data["minimum_payment"] == 25.83
    assert data["interest_portion"] == 15.83
    assert data["principal_portion"] == 10.0
    assert data["payoff_time_months"] == 61
    assert isinstance(data["total_interest_if_minimum_only"], float)


def test_minimum_payment_zero_balance(client: TestClient):
    response = client.post("/v1/calculations/minimum-payment", json={"balance": 0, "apr": 24.99})

    assert response.status_code == 200
    assert response.json() == {
        "minimum_payment": 0.0,
        "interest_portion": 0.0,
        "principal_portion": 0.0,
        "payoff_time_months": 0,
        "total_interest_if_minimum_only": 0.0,
    }


def test_minimum_payment_rejects_negative_balance(client: TestClient):
    response = client.post("/v1/calculations/minimum-payment", json={"balance": -50, "apr": 18.99})

    assert response.status_code == 422


def test_minimum_payment_rejects_oversized_balance(client: TestClient):
    """Balances too large to round to cents are a client error, not a crash"""
    response = client.post("/v1/calculations/minimum-payment", json={"balance": "1e30", "apr": 18.99})

    assert response.status_code == 422
    assert "balance must be below" in response.json()["detail"]


# --- Credit cards -------------------------------------------------------------


def test_create_credit_card_returns_derived_figures(stored_card: dict):
    assert stored_card["name"] == "Everyday Visa"
    assert stored_card["minimum_payment"] == 25.83
    assert stored_card["payoff_time_months"] == 61
    assert stored_card["utilization"] == 50.0
    assert stored_card["available_credit"] == 1000.0
    assert stored_card["minimum_payment_percentage"] == 0.02


def test_credit_card_lifecycle(client: TestClient, stored_card: dict):
    card_id = stored_card["id"]

    listed = client.get("/v1/credit-cards").json()
    assert [card["id"] for card in listed] == [card_id]

    updated = client.put(f"/v1/credit-cards/{card_id}", json={"current_balance": 500})
    assert updated.status_code == 200
    assert updated.json()["current_balance"] == 500.0
    assert updated.json()["utilization"] == 25.0
    assert updated.json()["name"] == "Everyday Visa"

    deleted = client.delete(f"/v1/credit-cards/{card_id}")
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Credit card deleted successfully"}

    assert client.get("/v1/credit-cards").json() == []
    assert client.put(f"/v1/credit-cards/{card_id}", json={"apr": 10}).status_code == 404
    assert client.delete(f"/v1/credit-cards/{card_id}").status_code == 404


def test_credit_card_invalid_id(client: TestClient):
    response = client.put("/v1/credit-cards/not-a-uuid", json={"apr": 10})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid ID format"


def test_credit_card_validation(client: TestClient, card_payload: dict):
    card_payload["last_four_digits"] = "42"

    assert client.post("/v1/credit-cards", json=card_payload).status_code == 422


def test_records_are_scoped_per_user(client: TestClient, stored_card: dict):
    other = client.get("/v1/credit-cards", headers={"X-User-ID": "someone-else"})

    assert other.status_code == 200
    assert other.json() == []
    assert client.delete(f"/v1/credit-cards/{stored_card['id']}", headers={"X-User-ID": "someone-else"}).status_code == 404


# --- Debts --------------------------------------------------------------------


def test_debt_with_payment_below_interest(client: TestClient):
    response = client.post(
        "/v1/debts",
        json={"name": "Personal Loan", "type": "personal", "balance": 10000, "interest_rate": 24, "minimum_payment": 150},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["minimum_payment"] == 150.0
    assert data["payoff_time_months"] is None
    assert data["total_interest_if_minimum_only"] == "Infinity"


def test_debt_lifecycle(client: TestClient):
    created = client.post("/v1/debts", json={"name": "Family Loan", "balance": 2000})
    assert created.status_code == 201
    debt = created.json()
    assert debt["type"] == "loan"
    # No contractual payment: card-style minimum, no interest
    assert debt["minimum_payment"] == 40.0
    assert debt["payoff_time_months"] == 50

    updated = client.put(f"/v1/debts/{debt['id']}", json={"minimum_payment": 100})
    assert updated.json()["minimum_payment"] == 100.0
    assert updated.json()["payoff_time_months"] == 20

    cleared = client.put(f"/v1/debts/{debt['id']}", json={"minimum_payment": None})
    assert cleared.json()["minimum_payment"] == 40.0

    assert client.delete(f"/v1/debts/{debt['id']}").json() == {"message": "Debt deleted successfully"}
    assert client.get("/v1/debts").json() == []
    assert client.delete(f"/v1/debts/{debt['id']}").status_code == 404


# --- Crypto -------------------------------------------------------------------


def test_crypto_asset_lifecycle(client: TestClient):
    created = client.post(
        "/v1/crypto-assets",
        json={"symbol": "btc", "quantity": "0.5", "average_cost": 30000, "current_price": 40000},
    )

    assert created.status_code == 201
    asset = created.json()
    assert asset["symbol"] == "BTC"
    assert asset["total_value"] == 20000.0
    assert asset["total_cost"] == 15000.0
    assert asset["gain_loss"] == 5000.0
    assert asset["gain_loss_percentage"] == pytest.approx(33.333, rel=1e-3)

    updated = client.put(f"/v1/crypto-assets/{asset['id']}", json={"current_price": 20000})
    assert updated.json()["gain_loss"] == -5000.0

    assert client.delete(f"/v1/crypto-assets/{asset['id']}").json() == {"message": "Crypto asset deleted successfully"}
    assert client.get("/v1/crypto-assets").json() == []


# --- Goals --------------------------------------------------------------------


def test_goals_lifecycle(client: TestClient):
    assert client.get("/v1/goals").json() is None

    created = client.post(
        "/v1/goals",
        json={"primary_goal": "debt_payoff", "secondary_goals": ["retirement"], "debt_payoff_timeframe": 24},
    )
    assert created.status_code == 201
    goals = created.json()

    current = client.get("/v1/goals").json()
    assert current["id"] == goals["id"]
    assert current["secondary_goals"] == ["retirement"]

    updated = client.put(f"/v1/goals/{goals['id']}", json={"notes": "Snowball method"})
    assert updated.json()["notes"] == "Snowball method"
    assert updated.json()["primary_goal"] == "debt_payoff"

    assert client.put(f"/v1/goals/{goals['id']}", json={"primary_goal": None}).status_code == 422

    assert client.delete(f"/v1/goals/{goals['id']}").json() == {"message": "User goals deleted successfully"}
    assert client.get("/v1/goals").json() is None


def test_newest_goals_are_current(client: TestClient):
    client.post("/v1/goals", json={"primary_goal": "debt_payoff"})
    client.post("/v1/goals", json={"primary_goal": "emergency_fund"})

    assert client.get("/v1/goals").json()["primary_goal"] == "emergency_fund"


# --- Client state -------------------------------------------------------------


def test_client_state_round_trip(client: TestClient):
    assert client.get("/v1/client-state/balances").json() == {"key": "balances", "value": None}

    saved = client.put("/v1/client-state/balances", json={"value": {"monthlyIncome": 5000}})
    assert saved.status_code == 200

    assert client.get("/v1/client-state/balances").json()["value"] == {"monthlyIncome": 5000}


def test_client_state_unknown_key(client: TestClient):
    assert client.get("/v1/client-state/passwords").status_code == 404
    assert client.put("/v1/client-state/passwords", json={"value": 1}).status_code == 404


# --- Financial profile --------------------------------------------------------


def test_financial_profile_json(client: TestClient, stored_card: dict):
    client.put("/v1/client-state/balances", json={"value": {"monthlyIncome": 5000, "monthlyExpenses": 3000}})
    client.put("/v1/client-state/custom_assets", json={"value": {"bank": 2500}})

    response = client.get("/v1/financial-profile")

    assert response.status_code == 200
    data = response.json()
    assert data["net_worth"] == 1500.0
    assert data["assets"]["cash"] == 2500.0
    assert data["liabilities"]["credit_cards"]["utilization_rate"] == 50.0
    assert data["liabilities"]["credit_cards"]["cards"][0]["minimum_payment"] == 25.83
    assert isinstance(data["liabilities"]["total_interest_if_minimum"], float)
    assert data["cash_flow"]["monthly_income"] == 5000.0
    assert data["cash_flow"]["debt_service_ratio"] == pytest.approx(0.5166, rel=1e-3)
    assert any("Credit utilization is high" in rec for rec in data["recommendations"])


def test_financial_profile_empty(client: TestClient):
    data = client.get("/v1/financial-profile").json()

    assert data["net_worth"] == 0.0
    assert data["cash_flow"]["debt_service_ratio"] is None
    assert data["liabilities"]["credit_cards"]["utilization_rate"] is None
    assert data["recommendations"] == []


def test_financial_profile_includes_stored_loans(client: TestClient):
    client.put(
        "/v1/client-state/loans",
        json={
            "value": [
                {"name": "Car", "currentBalance": 10000, "interestRate": 24, "monthlyPayment": 150, "type": "auto"},
                {"name": "Old card", "balance": 999, "interestRate": 20, "type": "credit_card"},
            ]
        },
    )

    data = client.get("/v1/financial-profile").json()

    loans = data["liabilities"]["other_debts"]
    assert [loan["name"] for loan in loans["loans"]] == ["Car"]
    assert loans["total_interest_if_minimum"] == "Infinity"
    assert data["liabilities"]["total_interest_if_minimum"] == "Infinity"
    assert data["liabilities"]["total_debt"] == 10000.0


def test_financial_profile_invalid_stored_state(client: TestClient):
    client.put("/v1/client-state/expenses", json={"value": [{"amount": -5}]})

    response = client.get("/v1/financial-profile")

    assert response.status_code == 422
    assert response.json()["detail"] == "Stored client state is invalid"


def test_narrative_as_plain_text(client: TestClient, stored_card: dict):
    response = client.get("/v1/financial-profile/llm", headers={"Accept": "text/plain"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    text = response.text
    assert text.startswith(TITLE)
    for header in SECTION_ORDER:
        assert header in text
    assert "Credit cards: 1 card with $1,000.00 balance (50.0% utilization)." in text


def test_narrative_as_json(client: TestClient):
    response = client.get("/v1/financial-profile/llm")

    assert response.status_code == 200
    data = response.json()
    assert data["profile"].startswith(TITLE)
    assert data["generated_at"]
    assert "advisory purposes" in data["disclaimer"]


def test_narrative_with_client_data_in_body(client: TestClient):
    response = client.post(
        "/v1/financial-profile/llm",
        json={
            "clientData": {
                "balances": {"monthlyIncome": 1000},
                "loans": [{"name": "Payday", "balance": 2000, "interestRate": 36, "monthlyPayment": 50}],
                "expenses": [{"name": "Rent", "amount": 800, "frequency": "monthly", "category": "Housing"}],
            }
        },
        headers={"Accept": "text/plain"},
    )

    assert response.status_code == 200
    assert "does not cover its monthly interest" in response.text
    assert "- Housing: $800.00/month" in response.text
    assert "Monthly income: $1,000.00." in response.text


def test_narrative_post_without_body_uses_stored_state(client: TestClient):
    client.put("/v1/client-state/balances", json={"value": {"monthlyIncome": 4200}})

    response = client.post("/v1/financial-profile/llm", headers={"Accept": "text/plain"})

    assert response.status_code == 200
    assert "Monthly income: $4,200.00." in response.text


def test_download_profile(client: TestClient):
    response = client.get("/v1/financial-profile/download")

    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="financial-profile-')
    assert disposition.endswith('.txt"')
    assert response.text.startswith(TITLE)


def test_narrative_rejects_oversized_client_loan(client: TestClient):
    response = client.post(
        "/v1/financial-profile/llm",
        json={"clientData": {"loans": [{"name": "Typo", "balance": "1e30", "interestRate": 5, "monthlyPayment": 100}]}},
    )

    assert response.status_code == 422
    assert "balance must be below" in response.json()["detail"]
