"""Integration tests for API endpoints"""

import uuid

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from finplan_gateway.domain.models import FinancialSnapshot
from finplan_gateway.domain.exceptions import PortfolioAPIError


@pytest.fixture
def loans_payload() -> list[dict]:
    return [
        {"id": "card", "name": "Personal loan", "principal": 8000, "annual_rate": 0.11, "min_repayment": 250},
        {"id": "home", "name": "Home loan", "principal": 300000, "annual_rate": 0.055, "min_repayment": 1900},
    ]


@pytest.fixture
def snapshot_payload() -> dict:
    return {
        "user_id": "user_api",
        "as_of": "2026-06-30",
        "current_age": 38,
        "properties": [
            {"id": "prop_home", "current_value": 750000, "state": "VIC", "purchase_price": 600000, "purchase_date": "2018-03-01"}
        ],
        "loans": [
            {
                "id": "loan_home",
                "principal": 420000,
                "annual_rate": 0.058,
                "min_repayment": 2600,
                "property_id": "prop_home",
            }
        ],
        "accounts": [{"id": "acc_savings", "balance": 25000, "account_type": "savings"}],
        "incomes": [{"id": "inc_salary", "amount": 9500, "income_type": "salary"}],
        "expenses": [{"id": "exp_living", "amount": 4200}],
        "investments": [
            {"id": "inv_etf", "units": 400, "average_price": 90, "current_price": 100, "income_yield": 0.03}
        ],
        "preferences": {"risk_appetite": "MODERATE", "retirement_age": 65},
    }


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "finplan_debt_plan_total" in response.text


def test_request_id_header(client: TestClient):
    """Test every response carries a request id"""
    response = client.get("/health")
    assert response.headers["X-Request-ID"]


def test_incoming_request_id_propagated(client: TestClient):
    """Test a caller-supplied request id is echoed back"""
    response = client.get("/health", headers={"X-Request-ID": "trace-abc-123"})
    assert response.headers["X-Request-ID"] == "trace-abc-123"


def test_oversized_request_id_replaced(client: TestClient):
    """Test an oversized request id is replaced with a generated one"""
    response = client.get("/health", headers={"X-Request-ID": "x" * 500})
    assert response.headers["X-Request-ID"] != "x" * 500
    assert len(response.headers["X-Request-ID"]) == 36


def test_request_metrics_use_route_template(client: TestClient):
    """Test path parameters are collapsed to the route template in latency labels"""
    ids = [str(uuid.uuid4()) for _ in range(2)]
    for recommendation_id in ids:
        client.get(f"/v1/strategies/{recommendation_id}", params={"user_id": "user_metrics"})

    text = client.get("/metrics").text
    assert 'endpoint="/v1/strategies/{recommendation_id}"' in text
    for recommendation_id in ids:
        assert recommendation_id not in text


def test_unknown_path_metrics_label(client: TestClient):
    """Test unrouted paths share a single label value"""
    client.get("/no/such/path/123")
    text = client.get("/metrics").text
    assert 'endpoint="unmatched"' in text
    assert "/no/such/path/123" not in text


# ---------------------------------------------------------------------------
# Debt plan
# ---------------------------------------------------------------------------


def test_debt_plan_endpoint(client: TestClient, loans_payload: list[dict]):
    """Test POST /v1/debt-plan returns a strategic plan with savings"""
    response = client.post(
        "/v1/debt-plan",
        json={
            "loans": loans_payload,
            "settings": {"strategy": "avalanche", "surplus_amount": 1000, "start_date": "2026-07-01"},
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["strategy"] == "AVALANCHE"
    assert data["horizon_reached"] is False
    assert data["interest_saved"] > 0
    assert data["months_to_debt_free"] < 600
    assert data["debt_free_date"] is not None
    assert {loan["loan_id"] for loan in data["loans"]} == {"card", "home"}
    assert data["allocations"][0]["loan_id"] == "card"


def test_debt_plan_missing_settings(client: TestClient, loans_payload: list[dict]):
    """Test missing settings are a configuration error"""
    response = client.post("/v1/debt-plan", json={"loans": loans_payload})
    assert response.status_code == 400


def test_debt_plan_invalid_custom_order(client: TestClient, loans_payload: list[dict]):
    """Test a custom order that omits a loan is rejected"""
    response = client.post(
        "/v1/debt-plan",
        json={"loans": loans_payload, "settings": {"strategy": "CUSTOM", "surplus_amount": 100, "custom_order": ["home"]}},
    )
    assert response.status_code == 400
    assert "Custom order" in response.json()["detail"]


def test_debt_plan_unknown_surplus_frequency(client: TestClient, loans_payload: list[dict]):
    """Test an unsupported surplus frequency is rejected instead of treated as monthly"""
    response = client.post(
        "/v1/debt-plan",
        json={
            "loans": loans_payload,
            "settings": {"strategy": "AVALANCHE", "surplus_amount": 100, "surplus_frequency": "DAILY"},
        },
    )
    assert response.status_code == 400
    assert "surplus frequency" in response.json()["detail"]


def test_debt_plan_no_loans(client: TestClient):
    """Test an empty loan list is insufficient data"""
    response = client.post(
        "/v1/debt-plan", json={"loans": [], "settings": {"strategy": "SNOWBALL", "surplus_amount": 100}}
    )
    assert response.status_code == 422


def test_debt_plan_schema_validation(client: TestClient):
    """Test negative principals fail request validation"""
    response = client.post(
        "/v1/debt-plan",
        json={
            "loans": [{"id": "x", "principal": -5, "annual_rate": 0.05}],
            "settings": {"strategy": "SNOWBALL", "surplus_amount": 100},
        },
    )
    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------


def test_forecast_endpoint(client: TestClient, snapshot_payload: dict):
    """Test POST /v1/forecast returns years + 1 projections"""
    response = client.post("/v1/forecast", json={"snapshot": snapshot_payload, "years": 10, "scenario": "conservative"})

    assert response.status_code == 200
    data = response.json()
    assert data["scenario"] == "CONSERVATIVE"
    assert len(data["projections"]) == 11
    assert data["projections"][0]["age"] == 38
    assert data["assumptions"]["portfolio_return_rate"] == pytest.approx(0.056)
    assert data["summary"]["retirement_age"] == 65


def test_forecast_invalid_horizon(client: TestClient, snapshot_payload: dict):
    """Test an unsupported horizon is a configuration error"""
    response = client.post("/v1/forecast", json={"snapshot": snapshot_payload, "years": 15})
    assert response.status_code == 400


def test_forecast_unknown_assumption(client: TestClient, snapshot_payload: dict):
    """Test an unknown custom assumption is a configuration error"""
    response = client.post(
        "/v1/forecast",
        json={"snapshot": snapshot_payload, "years": 5, "custom_assumptions": {"lottery_rate": 0.5}},
    )
    assert response.status_code == 400


def test_forecast_custom_retirement_age(client: TestClient, snapshot_payload: dict):
    """Test an integer retirement age override drives the retirement summary"""
    response = client.post(
        "/v1/forecast",
        json={"snapshot": snapshot_payload, "years": 10, "custom_assumptions": {"retirement_age": 60}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["assumptions"]["retirement_age"] == 60
    assert data["summary"]["years_to_retirement"] == 22
    assert len(data["projections"]) == 11


def test_forecast_fractional_retirement_age(client: TestClient, snapshot_payload: dict):
    """Test a fractional retirement age is a configuration error"""
    response = client.post(
        "/v1/forecast",
        json={"snapshot": snapshot_payload, "years": 10, "custom_assumptions": {"retirement_age": 60.5}},
    )
    assert response.status_code == 400


def test_forecast_compare_endpoint(client: TestClient, snapshot_payload: dict):
    """Test POST /v1/forecast/compare returns every scenario"""
    response = client.post("/v1/forecast/compare", json={"snapshot": snapshot_payload, "years": 20})

    assert response.status_code == 200
    data = response.json()
    assert set(data["scenarios"]) == {"CONSERVATIVE", "DEFAULT", "AGGRESSIVE"}
    assert len(data["comparison"]) == 3
    assert all(len(s["projections"]) == 21 for s in data["scenarios"].values())


# ---------------------------------------------------------------------------
# Tax and portfolio
# ---------------------------------------------------------------------------


def test_taxability_franked_dividend(client: TestClient):
    """Test POST /v1/tax/taxability grosses up franked dividends"""
    response = client.post(
        "/v1/tax/taxability", json={"income_type": "dividend", "amount": 700, "franking_percentage": 100}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["tax_category"] == "DIVIDENDS_FRANKED"
    assert data["franking_credits"] == pytest.approx(300)
    assert data["taxable_amount"] == pytest.approx(1000)
    assert data["category_label"] == "Franked Dividends"


def test_taxability_unknown_type_is_assessable(client: TestClient):
    """Test unrecognised income types are taxable"""
    response = client.post("/v1/tax/taxability", json={"income_type": "mystery", "amount": 100})

    assert response.status_code == 200
    assert response.json()["is_taxable"] is True
    assert response.json()["tax_category"] == "OTHER_ASSESSABLE"


def test_portfolio_intelligence_endpoint(client: TestClient, snapshot_payload: dict):
    """Test POST /v1/portfolio/intelligence returns every section"""
    response = client.post("/v1/portfolio/intelligence", json={"snapshot": snapshot_payload})

    assert response.status_code == 200
    data = response.json()
    assert data["net_worth"]["net_worth"] == pytest.approx(750000 + 40000 + 25000 - 420000)
    assert data["gearing"]["portfolio_lvr"] == pytest.approx(56.0)
    assert len(data["risk"]["stress_tests"]) == 3
    assert data["properties"][0]["property_id"] == "prop_home"


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


@patch("finplan_gateway.infrastructure.clients.portfolio.PortfolioClient.get_snapshot")
def test_generate_strategies_endpoint(
    mock_portfolio: AsyncMock,
    client: TestClient,
    household_snapshot: FinancialSnapshot,
):
    """Test POST /v1/strategies/generate persists and returns recommendations"""
    mock_portfolio.return_value = household_snapshot

    response = client.post("/v1/strategies/generate", json={"user_id": "user_household"})

    assert response.status_code == 200
    data = response.json()
    metadata = data["metadata"]
    assert len(metadata["analyzers_run"]) == 8
    assert metadata["analyzers_failed"] == []
    assert metadata["created"] == len(data["recommendations"]) > 0
    assert metadata["limited_mode"] is False
    assert all(r["status"] == "PENDING" for r in data["recommendations"])
    scores = [r["sbs_score"] for r in data["recommendations"]]
    assert scores == sorted(scores, reverse=True)


@patch("finplan_gateway.infrastructure.clients.portfolio.PortfolioClient.get_snapshot")
def test_generate_strategies_idempotent(
    mock_portfolio: AsyncMock,
    client: TestClient,
    household_snapshot: FinancialSnapshot,
):
    """Test regenerating without changes creates nothing new"""
    mock_portfolio.return_value = household_snapshot

    first = client.post("/v1/strategies/generate", json={"user_id": "user_household"}).json()
    second = client.post("/v1/strategies/generate", json={"user_id": "user_household"}).json()

    assert second["metadata"]["created"] == 0
    assert second["metadata"]["skipped"] == first["metadata"]["created"]
    assert {r["id"] for r in second["recommendations"]} == {r["id"] for r in first["recommendations"]}


@patch("finplan_gateway.infrastructure.clients.portfolio.PortfolioClient.get_snapshot")
def test_generate_strategies_portfolio_unavailable(mock_portfolio: AsyncMock, client: TestClient):
    """Test portfolio API failures map to 503"""
    mock_portfolio.side_effect = PortfolioAPIError("Portfolio API timeout after 5.0s")

    response = client.post("/v1/strategies/generate", json={"user_id": "user_household"})

    assert response.status_code == 503


@patch("finplan_gateway.infrastructure.clients.portfolio.PortfolioClient.get_snapshot")
def test_recommendation_lifecycle(
    mock_portfolio: AsyncMock,
    client: TestClient,
    household_snapshot: FinancialSnapshot,
):
    """Test list, get, accept, re-accept and alternatives"""
    mock_portfolio.return_value = household_snapshot
    generated = client.post("/v1/strategies/generate", json={"user_id": "user_household"}).json()
    rec_id = generated["recommendations"][0]["id"]

    listed = client.get("/v1/strategies", params={"user_id": "user_household"})
    assert listed.status_code == 200
    assert [r["id"] for r in listed.json()] == [r["id"] for r in generated["recommendations"]]

    fetched = client.get(f"/v1/strategies/{rec_id}", params={"user_id": "user_household"})
    assert fetched.status_code == 200
    assert fetched.json()["id"] == rec_id

    alternatives = client.get(f"/v1/strategies/{rec_id}/alternatives", params={"user_id": "user_household"})
    assert alternatives.status_code == 200
    assert len(alternatives.json()["alternatives"]) == 2

    accepted = client.patch(
        f"/v1/strategies/{rec_id}",
        json={"user_id": "user_household", "status": "accepted", "notes": "Booked a broker call"},
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "ACCEPTED"
    assert accepted.json()["user_notes"] == "Booked a broker call"
    assert accepted.json()["accepted_at"] is not None

    again = client.patch(f"/v1/strategies/{rec_id}", json={"user_id": "user_household", "status": "DISMISSED"})
    assert again.status_code == 409

    remaining = client.get("/v1/strategies", params={"user_id": "user_household"}).json()
    assert rec_id not in {r["id"] for r in remaining}


@patch("finplan_gateway.infrastructure.clients.portfolio.PortfolioClient.get_snapshot")
def test_recommendation_not_found_for_other_user(
    mock_portfolio: AsyncMock,
    client: TestClient,
    household_snapshot: FinancialSnapshot,
):
    """Test recommendations are scoped to their owner"""
    mock_portfolio.return_value = household_snapshot
    generated = client.post("/v1/strategies/generate", json={"user_id": "user_household"}).json()
    rec_id = generated["recommendations"][0]["id"]

    assert client.get(f"/v1/strategies/{rec_id}", params={"user_id": "intruder"}).status_code == 404
    assert client.patch(
        f"/v1/strategies/{rec_id}", json={"user_id": "intruder", "status": "ACCEPTED"}
    ).status_code == 404
    assert client.get("/v1/strategies/not-a-uuid", params={"user_id": "user_household"}).status_code == 404


@patch("finplan_gateway.infrastructure.clients.portfolio.PortfolioClient.get_snapshot")
def test_invalid_status_rejected(
    mock_portfolio: AsyncMock,
    client: TestClient,
    household_snapshot: FinancialSnapshot,
):
    """Test only ACCEPTED and DISMISSED can be requested"""
    mock_portfolio.return_value = household_snapshot
    generated = client.post("/v1/strategies/generate", json={"user_id": "user_household"}).json()
    rec_id = generated["recommendations"][0]["id"]

    response = client.patch(f"/v1/strategies/{rec_id}", json={"user_id": "user_household", "status": "EXPIRED"})

    assert response.status_code == 409
