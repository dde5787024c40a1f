"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os
from types import SimpleNamespace

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from propvest.main import app
from propvest.api.sessions import get_session_store
from propvest.calculations.analysis import FinancingAssumptions, OperatingExpenses
from propvest.services.genai import GenAIService, get_genai_service
from propvest.session import SessionStore


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture(scope="session")
def anyio_backend():
    """Backend for async tests."""
    return "asyncio"


@pytest.fixture
def baseline_assumptions():
    """Dashboard defaults for the demo listing."""
    return FinancingAssumptions(
        purchase_price=450000,
        down_payment_percent=20,
        interest_rate=6.5,
        loan_term_years=30,
        nightly_rate=250,
        occupancy_rate=65,
    )


@pytest.fixture
def baseline_expenses():
    return OperatingExpenses(
        property_tax_yearly=8000,
        insurance_yearly=2000,
        hoa_monthly=50,
        utilities_monthly=300,
        maintenance_monthly=150,
        management_fee_percent=0,
        other_monthly=0,
    )


class FakeAsync:
    """Awaitable stand-in that records calls and returns queued values."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    async def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


def make_fake_client(generate_content=None, generate_videos=None, get_operation=None, live=None):
    """Build an object shaped like genai.Client for the parts the service uses."""
    return SimpleNamespace(
        aio=SimpleNamespace(
            models=SimpleNamespace(
                generate_content=generate_content or FakeAsync(None),
                generate_videos=generate_videos or FakeAsync(None),
            ),
            operations=SimpleNamespace(get=get_operation or FakeAsync(None)),
            live=live,
        )
    )


def unconfigured_genai_service():
    service = GenAIService()
    service.client = None
    return service


@pytest.fixture
def session_store():
    """Fresh session store per test."""
    return SessionStore()


@pytest.fixture
def client(session_store):
    """Create test client with an isolated session store and no AI client."""
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_genai_service] = unconfigured_genai_service
    yield TestClient(app)
    app.dependency_overrides.clear()
