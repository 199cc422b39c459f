"""
Pytest Configuration and Centralized Fixtures.

Provides mocked Supabase clients and a TestClient wired with dependency
overrides so no test talks to a real Supabase project.
"""

import os
from unittest.mock import MagicMock

import pytest

# Set required environment variables BEFORE importing app modules
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("SITE_URL", "https://cms.example.com")

from fastapi.testclient import TestClient
from postgrest.exceptions import APIError
from supabase_auth.errors import AuthApiError

from app.core.dependencies import get_admin_client, get_current_user_id
from app.database.supabase_client import SupabaseClient
from app.main import app
from app.modules.auth.service import clear_auth_cache
from app.modules.user_admin.service import UserAdminService

SITE_URL = "https://cms.example.com"


def auth_error(message: str, status: int = 400) -> AuthApiError:
    """Error as raised by supabase.auth when the service rejects a call."""
    return AuthApiError(message, status, None)


def postgrest_error(message: str) -> APIError:
    """Error as raised by a PostgREST query."""
    return APIError({"message": message, "code": "PGRST116", "hint": None, "details": None})


# ============================================================================
# Supabase Client Fixtures
# ============================================================================


@pytest.fixture
def admin_client() -> MagicMock:
    """Mock service-role client; every call succeeds with an empty result."""
    client = MagicMock()
    client.table.return_value.select.return_value.execute.return_value = MagicMock(data=[])
    client.table.return_value.update.return_value.eq.return_value.execute.return_value = MagicMock(data=[])
    return client


@pytest.fixture
def service(admin_client: MagicMock) -> UserAdminService:
    return UserAdminService(admin_client, site_url=SITE_URL)


@pytest.fixture(autouse=True)
def reset_state():
    """Drop cached clients and auth lookups between tests."""
    SupabaseClient.reset_client()
    clear_auth_cache()
    yield
    SupabaseClient.reset_client()
    clear_auth_cache()
    app.dependency_overrides.clear()


# ============================================================================
# API Client Fixtures
# ============================================================================


ADMIN_USER = {
    "id": "admin-1",
    "email": "admin@example.com",
    "user_metadata": {},
    "app_metadata": {"role": "admin"},
}

CLIENT_USER = {
    "id": "client-1",
    "email": "client@example.com",
    "user_metadata": {"role": "client"},
    "app_metadata": {"role": "client"},
}


@pytest.fixture
def api_client(admin_client: MagicMock) -> TestClient:
    """TestClient authenticated as an admin, backed by the mock admin client."""
    app.dependency_overrides[get_current_user_id] = lambda: ADMIN_USER
    app.dependency_overrides[get_admin_client] = lambda: admin_client
    return TestClient(app)
