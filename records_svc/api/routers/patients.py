"""
Patients router - patient management endpoints.

Architecture:
    HTTP Request → Router (this file) → PatientService → Repositories → Database

Request bodies are taken as raw JSON objects and validated by the service,
so a missing field is answered with 400 and a specific message, e.g.
{"error": "Full name is required"}.

Path ids are declared as strings for the same reason: "abc" must produce
{"error": "Invalid ID"} rather than a framework validation error.

Note: the fixed paths (/mine, /search, /statistics) are registered before
the /{patient_id} routes.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from core.auth import CallerIdentity, get_caller_identity
from core.dependencies import get_patient_service
from services import PatientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Patients"])


# =============================================================================
# COLLECTION
# =============================================================================

@router.post("/patients", summary="Create a patient")
async def create_patient(
    body: Optional[Dict[str, Any]] = Body(None),
    caller: CallerIdentity = Depends(get_caller_identity),
    patient_service: PatientService = Depends(get_patient_service)
):
    """
    Create a patient owned by the logged-in user.

    - **fullName**, **sex**: required
    - **dateOfBirth**, **phone**, **email**, **address**, **bloodGroup**: optional
    """
    return {"Patient data:": patient_service.create_patient(body, caller)}


@router.get("/patients", summary="List patients")
async def list_patients(
    full_name: Optional[str] = Query(None, alias="fullName", description="Exact full name"),
    sex: Optional[str] = Query(None, description="MALE, FEMALE or OTHER"),
    blood_group: Optional[str] = Query(None, alias="bloodGroup", description="e.g. A_PLUS"),
    patient_service: PatientService = Depends(get_patient_service)
):
    patients = patient_service.list_patients(full_name=full_name, sex=sex, blood_group=blood_group)
    return {"patients": patients}


@router.get("/patients/mine", summary="Patients owned by the logged-in user")
async def list_my_patients(
    caller: CallerIdentity = Depends(get_caller_identity),
    patient_service: PatientService = Depends(get_patient_service)
):
    return {"patients": patient_service.list_my_patients(caller)}


@router.get("/patients/search", summary="Search patients by name")
async def search_patients(
    name: Optional[str] = Query(None, description="Substring of the full name"),
    caller: CallerIdentity = Depends(get_caller_identity),
    patient_service: PatientService = Depends(get_patient_service)
):
    return {"patients": patient_service.search_patients(name, caller)}


@router.get("/patients/statistics", summary="Patient register statistics")
async def patient_statistics(
    caller: CallerIdentity = Depends(get_caller_identity),
    patient_service: PatientService = Depends(get_patient_service)
):
    return {"statistics": patient_service.get_statistics(caller)}


# =============================================================================
# SINGLE PATIENT
# =============================================================================

@router.get("/patient/{patient_id}", summary="Get a patient")
async def get_patient(
    patient_id: str,
    caller: CallerIdentity = Depends(get_caller_identity),
    patient_service: PatientService = Depends(get_patient_service)
):
    return {"patient": patient_service.get_patient(patient_id, caller)}


@router.put("/patients/{patient_id}", summary="Update a patient")
async def update_patient(
    patient_id: str,
    body: Optional[Dict[str, Any]] = Body(None),
    caller: CallerIdentity = Depends(get_caller_identity),
    patient_service: PatientService = Depends(get_patient_service)
):
    """Only the fields present in the body are changed."""
    return {"updated": patient_service.update_patient(patient_id, body, caller)}


@router.delete("/patients/{patient_id}", summary="Delete a patient")
async def delete_patient(
    patient_id: str,
    caller: CallerIdentity = Depends(get_caller_identity),
    patient_service: PatientService = Depends(get_patient_service)
):
    """Deletes the patient's medical records and lab results too."""
    return {"deleted": patient_service.delete_patient(patient_id, caller)}


# =============================================================================
# PER-PATIENT RECORDS
# =============================================================================

@router.post("/patients/{patient_id}/medical-record", summary="Add a medical record")
async def add_medical_record(
    patient_id: str,
    body: Optional[Dict[str, Any]] = Body(None),
    caller: CallerIdentity = Depends(get_caller_identity),
    patient_service: PatientService = Depends(get_patient_service)
):
    """
    - **diagnosis**: required, must not be blank
    - **notes**: optional
    """
    return {"updated": patient_service.add_medical_record(patient_id, body, caller)}


@router.get("/patients/{patient_id}/medical-record", summary="A patient's medical records")
async def get_medical_records(
    patient_id: str,
    patient_service: PatientService = Depends(get_patient_service)
):
    return {"Medical Records": patient_service.get_medical_records(patient_id)}


@router.get("/patients/{patient_id}/lab-results", summary="A patient's lab results")
async def get_lab_results(
    patient_id: str,
    patient_service: PatientService = Depends(get_patient_service)
):
    return {"Lab Results": patient_service.get_lab_results(patient_id)}
