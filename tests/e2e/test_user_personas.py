"""
E2E tests for 5 user personas driven entirely through the REST API.

Each persona stores records and client state, then reads back the
financial profile and checks which recommendations fire.

User personas:
- user_overleveraged: Maxed high-APR cards plus a large loan, thin margins
- user_saver: No debt, strong savings, already building an emergency fund
- user_crypto: Most assets held in crypto
- user_underwater: Loan payment smaller than its monthly interest
- user_new: Nothing entered yet
"""

import pytest
from fastapi.testclient import TestClient


def _as(user_id: str) -> dict:
    return {"X-User-ID": user_id}


def _profile(client: TestClient, user_id: str) -> dict:
    response = client.get("/v1/financial-profile", headers=_as(user_id))
    assert response.status_code == 200
    return response.json()


@pytest.mark.integration
def test_user_overleveraged(client: TestClient):
    """
    user_overleveraged: 93% utilization, ~21.7% average APR, ~41% of income to debt
    Expected: every debt and cash-flow rule fires
    """
    headers = _as("user_overleveraged")
    for card in (
        {"name": "Rewards Card", "last_four_digits": "1111", "credit_limit": 3000, "current_balance": 2800, "apr": 27.99},
        {"name": "Store Card", "last_four_digits": "2222", "credit_limit": 1500, "current_balance": 1400, "apr": 24.99},
    ):
        assert client.post("/v1/credit-cards", json=card, headers=headers).status_code == 201
    client.post(
        "/v1/debts",
        json={"name": "Consolidation Loan", "balance": 20000, "interest_rate": 12, "minimum_payment": 700},
        headers=headers,
    )
    client.put("/v1/client-state/balances", json={"value": {"monthlyIncome": 2000, "monthlyExpenses": 1800}}, headers=headers)

    data = _profile(client, "user_overleveraged")
    recommendations = data["recommendations"]

    assert data["liabilities"]["credit_cards"]["utilization_rate"] > 90
    assert data["cash_flow"]["debt_service_ratio"] > 36
    assert data["cash_flow"]["savings_rate"] < 0
    assert len(recommendations) == 5, "Utilization, APR, debt service, savings and emergency fund"
    assert "Credit utilization is high" in recommendations[0]
    assert "aim for $5,400.00" in recommendations[-1]


@pytest.mark.integration
def test_user_saver(client: TestClient):
    """
    user_saver: Income and expenses only on the goals record
    Expected: strong savings, no emergency fund nudge
    """
    client.post(
        "/v1/goals",
        json={
            "primary_goal": "emergency_fund",
            "emergency_fund_target": 15000,
            "monthly_income": 8000,
            "monthly_expenses": 3000,
        },
        headers=_as("user_saver"),
    )

    data = _profile(client, "user_saver")

    assert data["cash_flow"]["savings_rate"] == 62.5
    assert data["goals"]["primary"] == "emergency_fund"
    assert data["goals"]["emergency_fund_target"] == 15000.0
    assert len(data["recommendations"]) == 1
    assert "Excellent savings rate" in data["recommendations"][0]


@pytest.mark.integration
def test_user_crypto(client: TestClient):
    """
    user_crypto: $20,000 in BTC, $5,000 in the bank
    Expected: concentration warning only
    """
    headers = _as("user_crypto")
    client.post(
        "/v1/crypto-assets",
        json={"symbol": "BTC", "quantity": 0.5, "average_cost": 20000, "current_price": 40000},
        headers=headers,
    )
    client.put("/v1/client-state/custom_assets", json={"value": {"bank": 5000}}, headers=headers)

    data = _profile(client, "user_crypto")

    assert data["assets"]["total_value"] == 25000.0
    assert data["assets"]["crypto"]["gain_loss_percentage"] == 100.0
    assert data["recommendations"] == [
        "Crypto allocation may be high for a diversified portfolio. Consider rebalancing into traditional investments."
    ]


@pytest.mark.integration
def test_user_underwater(client: TestClient):
    """
    user_underwater: $200/month interest against a $150 payment
    Expected: never-amortizes surfaced as "Infinity" and as text
    """
    headers = _as("user_underwater")
    client.post(
        "/v1/debts",
        json={"name": "High-rate Loan", "balance": 10000, "interest_rate": 24, "minimum_payment": 150},
        headers=headers,
    )

    data = _profile(client, "user_underwater")
    loan = data["liabilities"]["other_debts"]["loans"][0]

    assert loan["payoff_time_months"] is None
    assert loan["total_interest_if_minimum_only"] == "Infinity"
    assert data["liabilities"]["total_interest_if_minimum"] == "Infinity"

    text = client.get("/v1/financial-profile/llm", headers={**headers, "Accept": "text/plain"}).text
    assert "does not cover its monthly interest" in text


@pytest.mark.integration
def test_user_new(client: TestClient):
    """
    user_new: No records, no client state
    Expected: zeroed profile, undefined ratios, no recommendations
    """
    data = _profile(client, "user_new")

    assert data["net_worth"] == 0.0
    assert data["cash_flow"]["savings_rate"] is None
    assert data["goals"]["description"] == "No financial goals currently set."
    assert data["recommendations"] == []
