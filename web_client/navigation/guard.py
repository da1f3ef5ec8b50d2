"""
Navigation guard.

Route metadata is compiled into a single Requirement and evaluated by one
function against the session state:

    NONE                                 -> proceed
    anonymous, anything but NONE         -> redirect to login
    ROLE(R), session role not R or ADMIN -> redirect to dashboard
    otherwise                            -> proceed

A role mismatch never sends an authenticated user back to login.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from navigation.routes import (
    ADMIN_ROLE,
    DASHBOARD_ROUTE,
    LOGIN_ROUTE,
    PUBLIC_ROUTES,
    ROUTES,
    Route,
)

logger = logging.getLogger(__name__)


class RequirementKind(str, Enum):
    NONE = "none"
    AUTHENTICATED = "authenticated"
    ROLE = "role"


@dataclass(frozen=True)
class Requirement:
    kind: RequirementKind
    role: Optional[str] = None

    @classmethod
    def none(cls) -> "Requirement":
        return cls(RequirementKind.NONE)

    @classmethod
    def authenticated(cls) -> "Requirement":
        return cls(RequirementKind.AUTHENTICATED)

    @classmethod
    def for_role(cls, role: str) -> "Requirement":
        return cls(RequirementKind.ROLE, role)


@dataclass(frozen=True)
class SessionState:
    authenticated: bool
    role: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls(False)

    @classmethod
    def authenticated_as(cls, role: Optional[str]) -> "SessionState":
        return cls(True, role)


@dataclass(frozen=True)
class NavigationDecision:
    """Either proceed, or redirect to the named route."""

    redirect_to: Optional[str] = None

    @property
    def proceed(self) -> bool:
        return self.redirect_to is None

    @classmethod
    def allow(cls) -> "NavigationDecision":
        return cls()

    @classmethod
    def redirect(cls, route_name: str) -> "NavigationDecision":
        return cls(route_name)


def compile_requirement(route: Route) -> Requirement:
    """Turn a route's metadata into the requirement the guard evaluates."""
    if route.name in PUBLIC_ROUTES:
        return Requirement.none()
    if route.requires_admin:
        return Requirement.for_role(ADMIN_ROLE)
    if route.role:
        return Requirement.for_role(route.role)
    return Requirement.authenticated()


def evaluate(requirement: Requirement, session: SessionState) -> NavigationDecision:
    if requirement.kind is RequirementKind.NONE:
        return NavigationDecision.allow()
    if not session.authenticated:
        return NavigationDecision.redirect(LOGIN_ROUTE)
    if requirement.kind is RequirementKind.ROLE:
        if session.role != requirement.role and session.role != ADMIN_ROLE:
            return NavigationDecision.redirect(DASHBOARD_ROUTE)
    return NavigationDecision.allow()


class AccessGuard:
    """Checks navigation attempts against the route table."""

    def __init__(self, routes=None):
        self.routes = routes if routes is not None else ROUTES

    def check(self, route_name: str, session: SessionState) -> NavigationDecision:
        """
        Decide a navigation to a named route.

        Raises:
            KeyError: If no route has that name
        """
        route = self.routes[route_name]
        decision = evaluate(compile_requirement(route), session)
        if not decision.proceed:
            logger.info(
                f"Navigation to '{route_name}' redirected to '{decision.redirect_to}' "
                f"(role={session.role})"
            )
        return decision

    def check_path(self, path: str, session: SessionState) -> NavigationDecision:
        """Decide a navigation by URL path; unknown paths are treated as authenticated-only."""
        route = next((r for r in self.routes.values() if r.match(path) is not None), None)
        if route is None:
            return evaluate(Requirement.authenticated(), session)
        return self.check(route.name, session)
