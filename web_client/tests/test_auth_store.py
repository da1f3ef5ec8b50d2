"""
Unit tests for the client-side auth store.
"""
import pytest
from unittest.mock import AsyncMock, Mock

from clients.auth_store import AuthStore
from clients.records_api_client import APIError, RecordsAPIClient
from navigation.guard import SessionState

DOCTOR = {"id": 7, "name": "Dr. Smith", "email": "smith@example.com", "role": "DOCTOR"}


@pytest.fixture
def api_client():
    client = Mock(spec=RecordsAPIClient)
    client.login = AsyncMock(return_value=DOCTOR)
    client.logout = AsyncMock(return_value=None)
    client.me = AsyncMock(return_value=DOCTOR)
    return client


@pytest.fixture
def store(api_client):
    return AuthStore(api_client=api_client)


def test_starts_anonymous(store):
    assert store.is_authenticated is False
    assert store.role is None
    assert store.session_state() == SessionState.anonymous()


@pytest.mark.asyncio
async def test_login_sets_user(store, api_client):
    user = await store.login("smith@example.com", "secret123")

    assert user == DOCTOR
    assert store.is_authenticated is True
    assert store.role == "DOCTOR"
    assert store.session_state() == SessionState.authenticated_as("DOCTOR")
    api_client.login.assert_called_once_with("smith@example.com", "secret123")


@pytest.mark.asyncio
async def test_failed_login_stays_anonymous(store, api_client):
    api_client.login.side_effect = APIError(401, "Invalid email or password")

    with pytest.raises(APIError):
        await store.login("smith@example.com", "wrong")

    assert store.is_authenticated is False


@pytest.mark.asyncio
async def test_logout_clears_user(store, api_client):
    await store.login("smith@example.com", "secret123")
    await store.logout()

    assert store.is_authenticated is False
    api_client.logout.assert_called_once_with()


@pytest.mark.asyncio
async def test_logout_clears_user_even_if_request_fails(store, api_client):
    await store.login("smith@example.com", "secret123")
    api_client.logout.side_effect = ConnectionError("down")

    with pytest.raises(ConnectionError):
        await store.logout()

    assert store.user is None


@pytest.mark.asyncio
async def test_refresh_loads_current_user(store):
    assert await store.refresh() == DOCTOR
    assert store.role == "DOCTOR"


@pytest.mark.asyncio
async def test_refresh_with_expired_session_goes_anonymous(store, api_client):
    await store.login("smith@example.com", "secret123")
    api_client.me.side_effect = APIError(401, "Unauthorized: No user ID found in session")

    assert await store.refresh() is None
    assert store.is_authenticated is False


@pytest.mark.asyncio
async def test_refresh_propagates_other_errors(store, api_client):
    api_client.me.side_effect = APIError(500, "An internal server error occurred")

    with pytest.raises(APIError):
        await store.refresh()
