"""
Tests for the navigation guard and route table.
"""
import pytest

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

ANONYMOUS = SessionState.anonymous()
DOCTOR = SessionState.authenticated_as("DOCTOR")
NURSE = SessionState.authenticated_as("NURSE")
ADMIN = SessionState.authenticated_as("ADMIN")


@pytest.fixture
def guard():
    return AccessGuard()


class TestCompileRequirement:
    def test_public_routes_need_nothing(self):
        assert compile_requirement(ROUTES["login"]) == Requirement.none()
        assert compile_requirement(ROUTES["register"]) == Requirement.none()

    def test_plain_routes_need_authentication(self):
        assert compile_requirement(ROUTES["patients"]) == Requirement.authenticated()
        assert compile_requirement(ROUTES["edit-patient"]) == Requirement.authenticated()

    def test_admin_route_needs_admin_role(self):
        requirement = compile_requirement(ROUTES["admin"])
        assert requirement.kind is RequirementKind.ROLE
        assert requirement.role == "ADMIN"

    def test_doctor_routes_need_doctor_role(self):
        for name in ("my-patients", "my-lab-results", "my-health-records", "my-prescriptions"):
            assert compile_requirement(ROUTES[name]) == Requirement.for_role("DOCTOR")

    def test_public_name_wins_over_metadata(self):
        route = Route("login", "/login", requires_admin=True)
        assert compile_requirement(route) == Requirement.none()


class TestEvaluate:
    def test_none_always_proceeds(self):
        assert evaluate(Requirement.none(), ANONYMOUS).proceed
        assert evaluate(Requirement.none(), DOCTOR).proceed

    @pytest.mark.parametrize("requirement", [
        Requirement.authenticated(),
        Requirement.for_role("ADMIN"),
        Requirement.for_role("DOCTOR"),
    ])
    def test_anonymous_goes_to_login(self, requirement):
        assert evaluate(requirement, ANONYMOUS) == NavigationDecision.redirect("login")

    def test_authenticated_proceeds(self):
        assert evaluate(Requirement.authenticated(), NURSE).proceed

    def test_wrong_role_goes_to_dashboard(self):
        decision = evaluate(Requirement.for_role("ADMIN"), DOCTOR)
        assert not decision.proceed
        assert decision.redirect_to == "dashboard"

    def test_matching_role_proceeds(self):
        assert evaluate(Requirement.for_role("DOCTOR"), DOCTOR).proceed

    def test_admin_satisfies_any_role(self):
        assert evaluate(Requirement.for_role("DOCTOR"), ADMIN).proceed


class TestAccessGuard:
    def test_doctor_to_admin_route_goes_to_dashboard_not_login(self, guard):
        decision = guard.check("admin", DOCTOR)
        assert decision.redirect_to == "dashboard"

    def test_admin_reaches_staff_page(self, guard):
        assert guard.check("admin", ADMIN).proceed

    def test_anonymous_to_dashboard_goes_to_login(self, guard):
        assert guard.check("dashboard", ANONYMOUS).redirect_to == "login"

    def test_anonymous_can_register(self, guard):
        assert guard.check("register", ANONYMOUS).proceed

    def test_nurse_cannot_open_doctor_pages(self, guard):
        assert guard.check("my-patients", NURSE).redirect_to == "dashboard"

    def test_doctor_opens_own_pages(self, guard):
        assert guard.check("my-lab-results", DOCTOR).proceed

    def test_unknown_route_name(self, guard):
        with pytest.raises(KeyError):
            guard.check("nowhere", DOCTOR)

    def test_check_path_with_parameter(self, guard):
        assert guard.check_path("/patient/12/", ANONYMOUS).redirect_to == "login"
        assert guard.check_path("/patient/12", NURSE).proceed

    def test_check_path_admin(self, guard):
        assert guard.check_path("/staff", DOCTOR).redirect_to == "dashboard"

    def test_check_path_unknown_needs_authentication(self, guard):
        assert guard.check_path("/does-not-exist", ANONYMOUS).redirect_to == "login"
        assert guard.check_path("/does-not-exist", DOCTOR).proceed


class TestRoutes:
    def test_match_extracts_params(self):
        assert ROUTES["edit-patient"].match("/patient/5/") == {"id": "5"}
        assert ROUTES["edit-patient"].match("/patient/") is None

    def test_find_route(self):
        assert find_route("/my-patients").name == "my-patients"
        assert find_route("/nowhere") is None
