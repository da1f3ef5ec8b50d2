"""
API routers module.

This module contains all API route definitions organized by domain.
"""
from api.routers.health import router as health_router
from api.routers.auth import router as auth_router
from api.routers.users import router as users_router
from api.routers.patients import router as patients_router
from api.routers.medical_records import router as medical_records_router
from api.routers.lab_results import router as lab_results_router

__all__ = [
    "health_router",
    "auth_router",
    "users_router",
    "patients_router",
    "medical_records_router",
    "lab_results_router",
]
