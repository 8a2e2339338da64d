"""
API tests for portfolio, quote and health endpoints.

Tests cover:
- Portfolio listing (main first)
- Snapshots with values from the quote cache
- Cached quote lookup (no fetch, unknown symbols omitted)
- Error responses (404)
"""

import pytest
from fastapi.testclient import TestClient

from tests.conftest import wait_until


@pytest.fixture
def warm_client(client: TestClient, app_context) -> TestClient:
    """Client whose quote cache holds every symbol in the sample data."""
    wait_until(
        lambda: all(
            app_context.quotes.get(s) is not None for s in ("AAPL", "MSFT", "HKDUSD=X", "SPY")
        )
    )
    return client


# =============================================================================
# PORTFOLIO LIST TESTS
# =============================================================================


class TestListPortfoliosAPI:
    """Tests for GET /api/portfolios."""

    def test_list_portfolios(self, client: TestClient):
        """
        GIVEN a data dir with root files and a Retirement folder
        WHEN I GET /api/portfolios
        THEN main is listed first, then retirement
        """
        response = client.get("/api/portfolios")

        assert response.status_code == 200
        assert response.json() == {
            "portfolios": [
                {"id": "main", "name": "Main"},
                {"id": "retirement", "name": "Retirement"},
            ]
        }


# =============================================================================
# SNAPSHOT TESTS
# =============================================================================


class TestSnapshotAPI:
    """Tests for GET /api/portfolios/{id}/snapshot."""

    def test_main_snapshot(self, warm_client: TestClient):
        """
        GIVEN AAPL x10 @150, MSFT x2 @378.25 and an HKD loan
        WHEN I GET the main snapshot
        THEN position values, cash and margin figures are returned
        """
        response = warm_client.get("/api/portfolios/main/snapshot")

        assert response.status_code == 200
        data = response.json()
        assert data["portfolio_id"] == "main"
        positions = {p["symbol"]: p for p in data["positions"]}
        assert positions["AAPL"]["value"] == pytest.approx(1500.0)
        assert positions["AAPL"]["day_change_dollars"] == pytest.approx(20.0)
        assert positions["MSFT"]["value"] == pytest.approx(756.5)
        assert data["holdings_value"] == pytest.approx(2256.5)
        assert data["loading_progress"] == 100.0

        cash = {c["label"]: c for c in data["cash"]}
        assert cash["Brokerage"]["usd_value"] == pytest.approx(1000.0)
        assert cash["Loan"]["usd_value"] == pytest.approx(-2_530_000 * 0.1282)
        assert data["margin_total_usd"] == pytest.approx(-2_530_000 * 0.1282)

    def test_sub_portfolio_snapshot(self, warm_client: TestClient):
        response = warm_client.get("/api/portfolios/retirement/snapshot")

        assert response.status_code == 200
        data = response.json()
        assert data["holdings_value"] == pytest.approx(4 * 485.25)
        assert data["cash"] == []
        assert data["margin_total_usd"] is None

    def test_unknown_portfolio_returns_404(self, client: TestClient):
        response = client.get("/api/portfolios/ghost/snapshot")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"


# =============================================================================
# QUOTE TESTS
# =============================================================================


class TestQuotesAPI:
    """Tests for GET /api/quotes."""

    def test_returns_cached_quotes(self, client: TestClient):
        response = client.get("/api/quotes", params={"symbols": "aapl"})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["symbol"] == "AAPL"
        assert data[0]["current_price"] == 150.0
        assert data[0]["previous_close"] == 148.0

    def test_duplicates_and_unknown_symbols(self, client: TestClient, market_provider):
        """
        GIVEN AAPL cached and NOPE never polled
        WHEN I request AAPL twice and NOPE
        THEN one AAPL quote is returned and NOPE is not fetched
        """
        response = client.get("/api/quotes", params={"symbols": "AAPL, AAPL ,NOPE"})

        assert [q["symbol"] for q in response.json()] == ["AAPL"]
        assert "NOPE" not in market_provider.calls

    def test_symbols_parameter_required(self, client: TestClient):
        assert client.get("/api/quotes").status_code == 422


class TestHealthAPI:
    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
