"""
Medical records router.

Records are created under a patient (POST /api/v1/patients/{id}/medical-record);
this router lists, reads, updates and deletes them.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from core.auth import CallerIdentity, get_caller_identity
from core.dependencies import get_medical_record_service
from services import MedicalRecordService

router = APIRouter(prefix="/api/v1/medical-records", tags=["Medical Records"])


@router.get("", summary="List all medical records")
async def list_medical_records(
    record_service: MedicalRecordService = Depends(get_medical_record_service)
):
    return {"Medical Records": record_service.list_records()}


@router.get("/mine", summary="Medical records of the logged-in user's patients")
async def list_my_medical_records(
    caller: CallerIdentity = Depends(get_caller_identity),
    record_service: MedicalRecordService = Depends(get_medical_record_service)
):
    return {"medicalRecords": record_service.list_my_records(caller)}


@router.get("/{record_id}", summary="Get a medical record")
async def get_medical_record(
    record_id: str,
    record_service: MedicalRecordService = Depends(get_medical_record_service)
):
    return {"Medical Record": record_service.get_record(record_id)}


@router.put("/{record_id}", summary="Update a medical record")
async def update_medical_record(
    record_id: str,
    body: Optional[Dict[str, Any]] = Body(None),
    record_service: MedicalRecordService = Depends(get_medical_record_service)
):
    """
    Any of **diagnosis**, **notes**, **patientId**, **patientFullName**.
    A patientFullName is resolved to the patient's id.
    """
    return {"updated": record_service.update_record(record_id, body)}


@router.delete("/{record_id}", summary="Delete a medical record")
async def delete_medical_record(
    record_id: str,
    record_service: MedicalRecordService = Depends(get_medical_record_service)
):
    return {"message": record_service.delete_record(record_id)}
