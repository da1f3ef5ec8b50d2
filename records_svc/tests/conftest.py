"""
Shared pytest fixtures for API tests.

Key patterns:

1. Database Isolation: Each test gets a fresh temporary database
2. DI Override: Use app.dependency_overrides to inject test dependencies
3. Service Injection: Services are created with test repositories
4. Sessions: `login_as` stores a real session and sets the cookie on the client

Fixture Hierarchy:
    temp_db → repositories → services → test_app → client
"""
import os
import tempfile

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Cheap password hashing and a throwaway data dir; must happen before any
# config import
os.environ.setdefault("MEDREC_SVC_PASSWORD_ITERATIONS", "1000")
os.environ.setdefault("MEDREC_SVC_DB_DIR", tempfile.mkdtemp(prefix="medrec-test-"))

from core import dependencies as deps
from core.config import SESSION_COOKIE_NAME
from core.exceptions import setup_exception_handlers
from core.security import hash_password
from models import BloodGroup, Role, Sex
from repositories import (
    Database,
    LabResultRepository,
    MedicalRecordRepository,
    PatientRepository,
    SessionRepository,
    UserRepository,
)
from services import (
    AuthService,
    LabResultService,
    MedicalRecordService,
    PatientService,
    UserService,
)

TEST_PASSWORD = "correct horse battery staple"
TEST_ITERATIONS = 1000


@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    This fixture creates a fresh SQLite database in a temp file,
    ensuring complete isolation between tests.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(db_path=db_path)
    yield db

    # Cleanup, including WAL side files
    for path in (db_path, db_path + "-wal", db_path + "-shm"):
        if os.path.exists(path):
            os.unlink(path)


# =============================================================================
# REPOSITORIES
# =============================================================================

@pytest.fixture
def user_repo(temp_db):
    return UserRepository(db=temp_db)


@pytest.fixture
def patient_repo(temp_db):
    return PatientRepository(db=temp_db)


@pytest.fixture
def record_repo(temp_db):
    return MedicalRecordRepository(db=temp_db)


@pytest.fixture
def lab_repo(temp_db):
    return LabResultRepository(db=temp_db)


@pytest.fixture
def session_repo(temp_db):
    return SessionRepository(db=temp_db)


# =============================================================================
# SERVICES
# =============================================================================

@pytest.fixture
def patient_service(patient_repo, record_repo, lab_repo):
    return PatientService(
        patient_repository=patient_repo,
        medical_record_repository=record_repo,
        lab_result_repository=lab_repo,
    )


@pytest.fixture
def record_service(record_repo, patient_repo):
    return MedicalRecordService(
        medical_record_repository=record_repo,
        patient_repository=patient_repo,
    )


@pytest.fixture
def lab_service(lab_repo, patient_repo):
    return LabResultService(lab_result_repository=lab_repo, patient_repository=patient_repo)


@pytest.fixture
def auth_service(user_repo, session_repo):
    return AuthService(
        user_repository=user_repo,
        session_repository=session_repo,
        session_ttl_seconds=3600,
        password_iterations=TEST_ITERATIONS,
    )


@pytest.fixture
def user_service(user_repo):
    return UserService(user_repository=user_repo)


# =============================================================================
# APP AND CLIENT
# =============================================================================

@pytest.fixture
def test_app(
    temp_db, user_repo, patient_repo, record_repo, lab_repo, session_repo,
    patient_service, record_service, lab_service, auth_service, user_service
):
    """
    Create a FastAPI test app with dependency overrides.

    Uses the real routers; only the DI providers are replaced so that every
    layer talks to the temporary database.
    """
    from api.routers import (
        auth_router,
        health_router,
        lab_results_router,
        medical_records_router,
        patients_router,
        users_router,
    )

    app = FastAPI(title="Medical Records Service API Test")

    # Register exception handlers (same as production)
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_database] = lambda: temp_db
    app.dependency_overrides[deps.get_user_repository] = lambda: user_repo
    app.dependency_overrides[deps.get_patient_repository] = lambda: patient_repo
    app.dependency_overrides[deps.get_medical_record_repository] = lambda: record_repo
    app.dependency_overrides[deps.get_lab_result_repository] = lambda: lab_repo
    app.dependency_overrides[deps.get_session_repository] = lambda: session_repo
    app.dependency_overrides[deps.get_patient_service] = lambda: patient_service
    app.dependency_overrides[deps.get_medical_record_service] = lambda: record_service
    app.dependency_overrides[deps.get_lab_result_service] = lambda: lab_service
    app.dependency_overrides[deps.get_auth_service] = lambda: auth_service
    app.dependency_overrides[deps.get_user_service] = lambda: user_service

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(patients_router)
    app.include_router(medical_records_router)
    app.include_router(lab_results_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)


# =============================================================================
# DATA HELPERS
# =============================================================================

@pytest.fixture
def make_user(user_repo):
    """Factory: store a user with TEST_PASSWORD and return it."""
    counter = {"n": 0}

    def _make_user(role=Role.DOCTOR, name=None, email=None):
        counter["n"] += 1
        n = counter["n"]
        return user_repo.add(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            password_hash=hash_password(TEST_PASSWORD, TEST_ITERATIONS),
            role=role,
        )

    return _make_user


@pytest.fixture
def login_as(client, make_user, session_repo):
    """
    Factory: create a user with the given role, open a session for it and
    put the session cookie on the test client.
    """
    def _login_as(role=Role.DOCTOR, **kwargs):
        user = make_user(role=role, **kwargs)
        session = session_repo.create(user.id, user.role, ttl_seconds=3600)
        client.cookies.set(SESSION_COOKIE_NAME, session.id)
        return user

    return _login_as


@pytest.fixture
def make_patient(patient_repo):
    """Factory: store a patient directly through the repository."""
    def _make_patient(full_name="John Doe", sex=Sex.MALE, user_id=None, **fields):
        values = {"full_name": full_name, "sex": sex, "user_id": user_id}
        values.update(fields)
        return patient_repo.add(values)

    return _make_patient


@pytest.fixture
def sample_patient(make_patient, make_user):
    owner = make_user(role=Role.DOCTOR, name="Dr. Owner", email="owner@example.com")
    return make_patient(
        full_name="Jane Roe",
        sex=Sex.FEMALE,
        user_id=owner.id,
        blood_group=BloodGroup.O_PLUS,
    )
