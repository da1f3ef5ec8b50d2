"""
Client-side authentication state.

Holds the user returned by the service after login and exposes the
session state the navigation guard evaluates. The service's session
cookie lives in the API client; this store only mirrors who is logged in.
"""
import logging
from typing import Optional, Dict, Any

from clients.records_api_client import APIError, RecordsAPIClient, get_records_api_client
from navigation.guard import SessionState

logger = logging.getLogger(__name__)


class AuthStore:
    """Current user and login/logout actions."""

    def __init__(self, api_client: Optional[RecordsAPIClient] = None):
        self.api_client = api_client or get_records_api_client()
        self.user: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> Optional[str]:
        if self.user is None:
            return None
        return self.user.get("role")

    def session_state(self) -> SessionState:
        """Snapshot of the state for a navigation check."""
        if self.user is None:
            return SessionState.anonymous()
        return SessionState.authenticated_as(self.role)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in and remember the user.

        Raises:
            APIError: 400/401 from the service; the store is left logged out
        """
        try:
            self.user = await self.api_client.login(email, password)
        except APIError:
            self.user = None
            raise
        logger.info(f"Logged in as user {self.user.get('id')} ({self.role})")
        return self.user

    async def logout(self) -> None:
        try:
            await self.api_client.logout()
        finally:
            self.user = None
        logger.info("Logged out")

    async def refresh(self) -> Optional[Dict[str, Any]]:
        """
        Reload the current user from the service.

        A 401 means the session is gone (expired or logged out elsewhere)
        and leaves the store anonymous. Other errors propagate.
        """
        try:
            self.user = await self.api_client.me()
        except APIError as e:
            if e.status_code != 401:
                raise
            self.user = None
        return self.user
