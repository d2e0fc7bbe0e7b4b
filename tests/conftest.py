"""Shared fixtures."""
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from app.core.dependencies import get_auth_service, get_current_user_id, get_user_supabase
from app.main import app
from app.modules.expenses.service import ExpenseService
from fakes import FakeAuthService, FakeSupabase


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def expense_service(fake_supabase) -> ExpenseService:
    return ExpenseService(fake_supabase)


@pytest.fixture
def auth_service() -> FakeAuthService:
    return FakeAuthService()


@pytest.fixture
def client(fake_supabase, auth_service):
    # keep the token check in front of the fake client, as the real dependency does
    def user_supabase(user_data: dict = Depends(get_current_user_id)):
        return fake_supabase

    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_user_supabase] = user_supabase
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
