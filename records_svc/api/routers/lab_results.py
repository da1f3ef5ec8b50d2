"""
Lab results router.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from core.auth import CallerIdentity, get_caller_identity
from core.dependencies import get_lab_result_service
from services import LabResultService

router = APIRouter(prefix="/api/v1/lab-results", tags=["Lab Results"])


@router.post("", summary="Record a lab result")
async def create_lab_result(
    body: Optional[Dict[str, Any]] = Body(None),
    caller: CallerIdentity = Depends(get_caller_identity),
    lab_service: LabResultService = Depends(get_lab_result_service)
):
    """
    - **testName**, **result**, **patientFullName**: required
    - **notes**: optional
    - **performedAt**: optional, defaults to now (UTC)
    """
    return {"Lab result": lab_service.create_lab_result(body, caller)}


@router.get("", summary="List lab results")
async def list_lab_results(
    patient_id: Optional[str] = Query(None, alias="patientId"),
    test_name: Optional[str] = Query(None, alias="testName"),
    lab_service: LabResultService = Depends(get_lab_result_service)
):
    return {"Lab results": lab_service.list_lab_results(patient_id=patient_id, test_name=test_name)}


@router.get("/mine", summary="Lab results recorded by the logged-in user")
async def list_my_lab_results(
    caller: CallerIdentity = Depends(get_caller_identity),
    lab_service: LabResultService = Depends(get_lab_result_service)
):
    return {"labResults": lab_service.list_my_lab_results(caller)}


@router.get("/{lab_result_id}", summary="Get a lab result")
async def get_lab_result(
    lab_result_id: str,
    lab_service: LabResultService = Depends(get_lab_result_service)
):
    return {"Lab result": lab_service.get_lab_result(lab_result_id)}


@router.put("/{lab_result_id}", summary="Update a lab result")
async def update_lab_result(
    lab_result_id: str,
    body: Optional[Dict[str, Any]] = Body(None),
    lab_service: LabResultService = Depends(get_lab_result_service)
):
    return {"updated": lab_service.update_lab_result(lab_result_id, body)}


@router.delete("/{lab_result_id}", summary="Delete a lab result")
async def delete_lab_result(
    lab_result_id: str,
    lab_service: LabResultService = Depends(get_lab_result_service)
):
    return {"result": lab_service.delete_lab_result(lab_result_id)}
