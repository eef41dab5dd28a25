"""
Pytest configuration and shared test helpers for backend tests.
"""
import os
import sys
import tempfile
from pathlib import Path

# Skip MongoDB connection at startup when running under pytest.
os.environ.setdefault("PYTEST_RUNNING", "1")
# Keep the process locale preference out of the source tree.
os.environ.setdefault(
    "LOCALE_PREFERENCE_PATH",
    str(Path(tempfile.mkdtemp(prefix="esg-locale-")) / "preferences.json"),
)

# Ensure backend root is on path
backend_root = Path(__file__).resolve().parent.parent
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))

import pytest
from datetime import datetime, timedelta, timezone

# Shared TestClient fixture so tests can use in-process requests without a running server.
from fastapi.testclient import TestClient
from server import app

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def client():
    """Return a TestClient for the main FastAPI app (server:app). Use for unit-style API tests."""
    return TestClient(app)


@pytest.fixture
def now():
    """Fixed wall clock for trial arithmetic."""
    return FIXED_NOW


@pytest.fixture(autouse=True)
def fresh_entitlement_cache():
    """Singleton resolver cache must not leak answers between tests."""
    from services.feature_entitlement import feature_entitlement_resolver
    feature_entitlement_resolver.invalidate()
    yield
    feature_entitlement_resolver.invalidate()


def company_doc(**overrides):
    """Company document as stored in the companies collection."""
    doc = {
        "company_id": "company-1",
        "name": "Acme Textiles",
        "plan": "starter",
        "is_trial": False,
        "trial_end_date": None,
        "subscription_status": "active",
        "custom_features": [],
        "feature_overrides": {},
    }
    doc.update(overrides)
    return doc


def trial_ending_in(delta: timedelta, **overrides):
    return company_doc(
        plan=overrides.pop("plan", "pro"),
        is_trial=True,
        trial_end_date=FIXED_NOW + delta,
        subscription_status=overrides.pop("subscription_status", "trial"),
        **overrides,
    )
