"""
FastAPI application entry point for the Medical Records Service API.

This module configures and creates the FastAPI application with:
- Structured JSON Logging: Request/response logging with request ids
- Dependency Injection: Services and repositories injected via Depends()
- Exception Handling: {"error": <message>} bodies via setup_exception_handlers()
- CORS Middleware: Credentialed requests from the browser client
- Lifespan Management: Database initialization

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware Stack (order matters!)                          │
    │    ├── LoggingMiddleware  - Request logging, X-Request-ID   │
    │    └── CORSMiddleware     - Cross-origin support            │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py          - /, /health, /ready              │
    │    ├── auth.py            - register, login, logout, me     │
    │    ├── users.py           - user administration (ADMIN)     │
    │    ├── patients.py        - patients and their records      │
    │    ├── medical_records.py - medical records                 │
    │    └── lab_results.py     - lab results                     │
    ├─────────────────────────────────────────────────────────────┤
    │  Caller identity (core/auth.py) ← session cookie, Depends() │
    ├─────────────────────────────────────────────────────────────┤
    │  Services (services/)     ← Injected via Depends()          │
    ├─────────────────────────────────────────────────────────────┤
    │  Repositories (repositories/)   ← Injected into Services    │
    ├─────────────────────────────────────────────────────────────┤
    │  Database (SQLite)              ← Injected into Repositories│
    └─────────────────────────────────────────────────────────────┘
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD, CORS_ORIGINS
from core.dependencies import get_database
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import (
    auth_router,
    health_router,
    lab_results_router,
    medical_records_router,
    patients_router,
    users_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        - Configures structured JSON logging
        - Initializes the database (triggers schema creation)

    Shutdown:
        - Logs shutdown message
    """
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info("Starting Medical Records Service API...")

    db = get_database()
    logger.info("Database initialized", extra={"db_path": db.db_path})

    yield

    logger.info("Medical Records Service API shutting down...")


def create_app() -> FastAPI:
    """Build the application; tests call this to get a fresh instance."""
    application = FastAPI(
        title="Medical Records Service API",
        description="REST API for patients, medical records and lab results, "
                    "with session-based authentication.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    setup_exception_handlers(application)

    # Middleware is executed in REVERSE order of registration.
    # Session cookies need credentialed CORS, which rules out a "*" origin.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(LoggingMiddleware)

    application.include_router(health_router)
    application.include_router(auth_router)
    application.include_router(users_router)
    application.include_router(patients_router)
    application.include_router(medical_records_router)
    application.include_router(lab_results_router)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
