"""
Tests for calculation, session and property API endpoints.
"""

import pytest

from propvest.calculations.analysis import FinancingAssumptions, OperatingExpenses, compute_analysis


@pytest.fixture
def test_session(client):
    """Create a session at the dashboard defaults."""
    response = client.post("/api/sessions/")
    assert response.status_code == 201
    return response.json()


# ============================================================================
# CALCULATION API TESTS
# ============================================================================

class TestCalculationAPI:
    """Test the stateless analysis endpoint."""

    def test_analysis_defaults(self, client):
        """Test analysis at the dashboard defaults."""
        response = client.post("/api/calculate/analysis", json={})
        assert response.status_code == 200
        data = response.json()

        expected = compute_analysis(FinancingAssumptions(), OperatingExpenses())
        assert data["cash_flow"] == pytest.approx(expected.cash_flow)
        assert data["monthly_mortgage"] == pytest.approx(2275.44, abs=0.01)
        assert data["initial_investment"] == 93500
        assert data["loan_amount"] == 360000
        assert data["down_payment_amount"] == 90000

    def test_analysis_without_body(self, client):
        """Test a missing body falls back to defaults."""
        response = client.post("/api/calculate/analysis")
        assert response.status_code == 200
        assert response.json()["monthly_income"] == pytest.approx(4875)

    def test_analysis_zero_interest(self, client):
        """Test zero-interest financing over HTTP."""
        response = client.post(
            "/api/calculate/analysis",
            json={
                "assumptions": {
                    "purchase_price": 200000,
                    "down_payment_percent": 50,
                    "interest_rate": 0,
                    "loan_term_years": 15,
                }
            },
        )
        assert response.status_code == 200
        assert response.json()["monthly_mortgage"] == pytest.approx(555.56, abs=0.01)

    def test_analysis_partial_expenses(self, client):
        """Test partial expense input keeps other defaults."""
        response = client.post(
            "/api/calculate/analysis",
            json={"expenses": {"management_fee_percent": 20}},
        )
        assert response.status_code == 200
        data = response.json()
        # Other expense fields keep their defaults
        expected = compute_analysis(
            FinancingAssumptions(), OperatingExpenses(management_fee_percent=20)
        )
        assert data["total_monthly_expenses"] == pytest.approx(expected.total_monthly_expenses)

    def test_analysis_invalid_input(self, client):
        """Test invalid input returns 422 naming the field."""
        response = client.post(
            "/api/calculate/analysis",
            json={"assumptions": {"purchase_price": 0}},
        )
        assert response.status_code == 422
        assert "purchase_price" in response.json()["detail"]

    def test_analysis_tiny_interest_rate(self, client):
        """A rate below float resolution is analyzed as straight-line."""
        response = client.post(
            "/api/calculate/analysis",
            json={"assumptions": {"interest_rate": 1e-15}},
        )
        assert response.status_code == 200
        assert response.json()["monthly_mortgage"] == pytest.approx(1000.0)

    def test_analysis_invalid_percent(self, client):
        """Test out-of-range percentage returns 422."""
        response = client.post(
            "/api/calculate/analysis",
            json={"expenses": {"management_fee_percent": 120}},
        )
        assert response.status_code == 422


# ============================================================================
# SESSION API TESTS
# ============================================================================

class TestSessionAPI:
    """Test the session endpoints that back the dashboard sliders."""

    def test_create_session(self, test_session):
        """Test session creation at defaults."""
        assert test_session["id"]
        assert test_session["assumptions"]["purchase_price"] == 450000
        assert test_session["expenses"]["hoa_monthly"] == 50
        assert test_session["analysis"]["initial_investment"] == 93500

    def test_create_session_with_inputs(self, client):
        """Test session creation with starting inputs."""
        response = client.post(
            "/api/sessions/",
            json={"assumptions": {"down_payment_percent": 0}},
        )
        assert response.status_code == 201
        assert response.json()["analysis"]["initial_investment"] == 3500

    def test_create_session_invalid(self, client):
        """Test invalid starting inputs return 422."""
        response = client.post(
            "/api/sessions/",
            json={"assumptions": {"loan_term_years": 0}},
        )
        assert response.status_code == 422

    def test_get_session(self, client, test_session):
        """Test session retrieval."""
        response = client.get(f"/api/sessions/{test_session['id']}")
        assert response.status_code == 200
        assert response.json() == test_session

    def test_get_missing_session(self, client):
        """Test 404 for unknown session."""
        response = client.get("/api/sessions/nonexistent-id")
        assert response.status_code == 404

    def test_patch_assumption(self, client, test_session):
        """Test a financing edit recomputes the analysis."""
        response = client.patch(
            f"/api/sessions/{test_session['id']}/assumptions",
            json={"occupancy_rate": 80},
        )
        assert response.status_code == 200
        data = response.json()

        assert data["assumptions"]["occupancy_rate"] == 80
        assert data["assumptions"]["purchase_price"] == 450000
        assert data["analysis"]["monthly_income"] == pytest.approx(6000)
        assert data["analysis"]["cash_flow"] > test_session["analysis"]["cash_flow"]

    def test_patch_expense(self, client, test_session):
        """Test an expense edit recomputes the analysis."""
        response = client.patch(
            f"/api/sessions/{test_session['id']}/expenses",
            json={"other_monthly": 100},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["analysis"]["total_monthly_expenses"] == pytest.approx(
            test_session["analysis"]["total_monthly_expenses"] + 100
        )

    def test_invalid_patch_keeps_state(self, client, test_session):
        """Test a rejected edit leaves the session unchanged."""
        response = client.patch(
            f"/api/sessions/{test_session['id']}/assumptions",
            json={"down_payment_percent": 150},
        )
        assert response.status_code == 422

        current = client.get(f"/api/sessions/{test_session['id']}").json()
        assert current == test_session

    def test_patch_tiny_interest_rate(self, client, test_session):
        """Session edits accept a rate below float resolution."""
        response = client.patch(
            f"/api/sessions/{test_session['id']}/assumptions",
            json={"interest_rate": 1e-15},
        )
        assert response.status_code == 200
        assert response.json()["analysis"]["monthly_mortgage"] == pytest.approx(1000.0)

    def test_patch_missing_session(self, client):
        """Test 404 when editing an unknown session."""
        response = client.patch(
            "/api/sessions/nonexistent-id/expenses",
            json={"hoa_monthly": 0},
        )
        assert response.status_code == 404

    def test_reset_session(self, client, test_session):
        """Test reset returns to the starting inputs."""
        client.patch(
            f"/api/sessions/{test_session['id']}/assumptions",
            json={"interest_rate": 3},
        )
        response = client.post(f"/api/sessions/{test_session['id']}/reset")
        assert response.status_code == 200
        assert response.json() == test_session

    def test_delete_session(self, client, test_session):
        """Test session deletion."""
        response = client.delete(f"/api/sessions/{test_session['id']}")
        assert response.status_code == 200
        assert response.json()["deleted"] is True

        response = client.get(f"/api/sessions/{test_session['id']}")
        assert response.status_code == 404


# ============================================================================
# PROPERTY API TESTS
# ============================================================================

class TestPropertyAPI:
    """Test the demo listing endpoints."""

    def test_list_properties(self, client):
        """Test listing the demo property."""
        response = client.get("/api/properties/")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["properties"][0]["address"] == "1204 Willow Creek Dr"

    def test_get_property(self, client):
        """Test property retrieval."""
        response = client.get("/api/properties/1")
        assert response.status_code == 200
        assert response.json()["price"] == 450000

    def test_get_missing_property(self, client):
        """Test 404 for unknown property."""
        response = client.get("/api/properties/999")
        assert response.status_code == 404

    def test_start_session_from_listing(self, client):
        """Test a listing session is priced at the listing price."""
        response = client.post("/api/properties/1/sessions")
        assert response.status_code == 201
        assert response.json()["assumptions"]["purchase_price"] == 450000


# ============================================================================
# PAGES
# ============================================================================

class TestPages:
    """Dashboard page and health check."""

    def test_health(self, client):
        """Test health endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_dashboard(self, client):
        """Test the dashboard renders the listing and sliders."""
        response = client.get("/")
        assert response.status_code == 200
        assert "1204 Willow Creek Dr" in response.text
        assert 'name="occupancy_rate"' in response.text

    def test_dashboard_tool_tabs(self, client):
        """Test the AI tool tabs are on the page and their script is served."""
        response = client.get("/")
        for tab in ("editor", "video", "research", "voice"):
            assert f'data-panel="{tab}"' in response.text
        assert "/static/tools.js" in response.text

        script = client.get("/static/tools.js")
        assert script.status_code == 200
        assert "/api/tools/voice" in script.text

    def test_dashboard_script_renders_latest_edit_only(self, client):
        """Test the slider script drops responses to superseded edits."""
        script = client.get("/static/dashboard.js")
        assert script.status_code == 200
        assert "seq !== latest" in script.text
