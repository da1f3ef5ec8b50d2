"""
Route table for the staff web client.

Each route carries the metadata the navigation guard reads:
`requires_auth`, `requires_admin` and an optional `role`. Every route
outside PUBLIC_ROUTES needs a logged-in user whatever its metadata says.
"""
import re
from dataclasses import dataclass
from typing import Dict, Optional

LOGIN_ROUTE = "login"
REGISTER_ROUTE = "register"
DASHBOARD_ROUTE = "dashboard"

PUBLIC_ROUTES = frozenset({LOGIN_ROUTE, REGISTER_ROUTE})

ADMIN_ROLE = "ADMIN"
DOCTOR_ROLE = "DOCTOR"

_PARAM = re.compile(r":(\w+)")


@dataclass(frozen=True)
class Route:
    name: str
    path: str
    requires_auth: bool = False
    requires_admin: bool = False
    role: Optional[str] = None

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """Path parameters if `path` matches this route's pattern, else None."""
        pattern = _PARAM.sub(r"(?P<\1>[^/]+)", self.path.rstrip("/"))
        found = re.fullmatch(pattern + "/?", path)
        if found is None:
            return None
        return found.groupdict()


ROUTES: Dict[str, Route] = {
    route.name: route
    for route in [
        Route("login", "/login"),
        Route("register", "/register"),
        Route("patients", "/patients"),
        Route("lab", "/lab"),
        Route("record", "/record"),
        Route("prescription", "/prescription"),
        Route("dashboard", "/dashboard"),
        Route("edit-patient", "/patient/:id/"),
        Route("admin", "/staff", requires_admin=True),
        Route("my-patients", "/my-patients", requires_auth=True, role=DOCTOR_ROLE),
        Route("my-lab-results", "/my-lab-results", requires_auth=True, role=DOCTOR_ROLE),
        Route("my-health-records", "/my-health-records", requires_auth=True, role=DOCTOR_ROLE),
        Route("my-prescriptions", "/my-prescriptions", requires_auth=True, role=DOCTOR_ROLE),
    ]
}


def find_route(path: str) -> Optional[Route]:
    """First route whose pattern matches `path`."""
    for route in ROUTES.values():
        if route.match(path) is not None:
            return route
    return None
