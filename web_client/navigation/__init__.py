from navigation.guard import (
    AccessGuard,
    NavigationDecision,
    Requirement,
    RequirementKind,
    SessionState,
    compile_requirement,
    evaluate,
)
from navigation.routes import ROUTES, Route, find_route

__all__ = [
    "AccessGuard",
    "NavigationDecision",
    "Requirement",
    "RequirementKind",
    "SessionState",
    "compile_requirement",
    "evaluate",
    "ROUTES",
    "Route",
    "find_route",
]
