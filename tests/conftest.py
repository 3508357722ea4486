"""
Pytest configuration for invoicing backend tests.

Sets up test environment and global fixtures.
"""
import os

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-service-key")
os.environ.setdefault("GOOGLE_API_KEY", "test-google-api-key")
os.environ["DEFAULT_LOGO_PATH"] = ""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from invoicing.agents.extraction import get_extractor, parse_customer_lines
from invoicing.db.client import get_supabase_client
from invoicing.main import app
from tests.fakes import FakeSupabaseClient

TEST_SESSION_TOKEN = "1760000000000-testsessiontoken"


@pytest.fixture
def fake_db():
    """Fresh in-memory Supabase stand-in per test."""
    return FakeSupabaseClient()


@pytest.fixture
def extractor():
    """
    Extractor used by the bulk endpoint.

    Defaults to the rule-based parser; tests can change ``side_effect`` or
    ``return_value`` to simulate model output.
    """
    return Mock(side_effect=parse_customer_lines)


@pytest.fixture
def client(fake_db, extractor):
    """TestClient with storage and extractor swapped for fakes."""
    app.dependency_overrides[get_supabase_client] = lambda: fake_db
    app.dependency_overrides[get_extractor] = lambda: extractor
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_headers(fake_db):
    """Headers carrying the currently active session token."""
    fake_db.seed_setting("active_session", TEST_SESSION_TOKEN)
    return {"x-app-session": TEST_SESSION_TOKEN}
