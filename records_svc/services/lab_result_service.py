"""
Service layer for lab result operations.

Architecture:
    API Layer (routers) → LabResultService → LabResultRepository → Database

Lab results are filed against a patient by full name; the name is
resolved to an id before anything is written.
"""
import logging
import sqlite3
from typing import Any, List, Mapping, Optional

from core.auth import CallerIdentity
from core.exceptions import DatabaseError, NotFoundError
from core.payload import UNSET, build_partial
from core.validation import (
    optional_id,
    optional_string,
    optional_timestamp,
    parse_id,
    require_string,
    require_update_fields,
    timestamp_or_now,
    updated_string,
)
from repositories import LabResultRepository, PatientRepository
from schemas import LabResultResponse
from services.medical_record_service import (
    INVALID_PATIENT_ID,
    NO_PATIENT_FOUND,
    patient_full_name_field,
)

logger = logging.getLogger(__name__)

LAB_RESULT_NOT_FOUND = "Lab result not found"


class LabResultService:
    """Business logic for lab results."""

    def __init__(
        self,
        lab_result_repository: LabResultRepository,
        patient_repository: PatientRepository,
    ):
        self._repo = lab_result_repository
        self._patient_repo = patient_repository

    def _resolve_patient_name(self, full_name: str) -> int:
        patient = self._patient_repo.get_first_by_full_name(full_name)
        if patient is None:
            logger.warning(f"Lab result names unknown patient: {full_name}")
            raise NotFoundError(NO_PATIENT_FOUND, patient_full_name=full_name)
        return patient.id

    def create_lab_result(
        self,
        body: Optional[Mapping[str, Any]],
        caller: CallerIdentity
    ) -> LabResultResponse:
        """
        Record a lab result for the patient named in the body.

        Args:
            body: Raw JSON body. testName, result and patientFullName are
                required; notes and performedAt are optional, performedAt
                defaulting to now.
            caller: Identity of the requesting user, recorded as author.

        Returns:
            LabResultResponse: The created lab result.

        Raises:
            ValidationError: If a required field is missing or a value is malformed.
            NotFoundError: If no patient has the given full name.
            UnauthorizedError: If the caller has no session.
            DatabaseError: If the insert fails.
        """
        test_name = require_string(body, "testName", "Test name")
        result = require_string(body, "result", "Result")
        patient_full_name = require_string(body, "patientFullName", "Patient full name")
        notes = optional_string(body, "notes", "Notes") or None
        performed_at = timestamp_or_now(body, "performedAt", "Performed at")

        patient_id = self._resolve_patient_name(patient_full_name)
        user_id = caller.require_user_id()

        logger.info(f"Saving lab result '{test_name}' for patient: {patient_full_name}")
        try:
            lab_result = self._repo.add(
                patient_id=patient_id,
                user_id=user_id,
                test_name=test_name,
                result=result,
                performed_at=performed_at,
                notes=notes,
            )
        except sqlite3.Error as e:
            logger.error(f"Database error saving lab result: {e}", exc_info=True)
            raise DatabaseError(operation="create_lab_result") from e

        logger.info(f"Lab result saved: id={lab_result.id}, patient_id={patient_id}")
        return LabResultResponse.model_validate(lab_result)

    def list_lab_results(
        self,
        patient_id: Optional[str] = None,
        test_name: Optional[str] = None
    ) -> List[LabResultResponse]:
        """
        Lab results, optionally filtered by patient id and exact test name.

        Raises:
            ValidationError: If patient_id is given but not a positive integer.
        """
        filters = build_partial({
            "patient_id": (
                parse_id(patient_id, INVALID_PATIENT_ID, INVALID_PATIENT_ID)
                if patient_id else UNSET
            ),
            "test_name": test_name if test_name else UNSET,
        })
        return [LabResultResponse.model_validate(r) for r in self._repo.find(filters)]

    def list_my_lab_results(self, caller: CallerIdentity) -> List[LabResultResponse]:
        """
        Lab results authored by the caller.

        Raises:
            UnauthorizedError: If the caller has no session.
        """
        user_id = caller.require_user_id()
        results = self._repo.find({"user_id": user_id})
        return [LabResultResponse.model_validate(r) for r in results]

    def get_lab_result(self, raw_id: Any) -> LabResultResponse:
        lab_result_id = parse_id(raw_id)
        lab_result = self._repo.get_by_id(lab_result_id)
        if lab_result is None:
            raise NotFoundError(LAB_RESULT_NOT_FOUND, lab_result_id=lab_result_id)
        return LabResultResponse.model_validate(lab_result)

    def update_lab_result(
        self,
        raw_id: Any,
        body: Optional[Mapping[str, Any]]
    ) -> LabResultResponse:
        """
        Apply a partial update to a lab result.

        Body fields: patientId, patientFullName, testName, result, notes,
        performedAt. A patientFullName is resolved to an id and takes
        precedence over patientId.

        Raises:
            ValidationError: If the id or a supplied value is invalid, or
                nothing was supplied.
            NotFoundError: "No patient found" or "Lab result not found".
        """
        lab_result_id = parse_id(raw_id)
        candidate = {
            "patient_id": optional_id(body, "patientId", INVALID_PATIENT_ID),
            "patient_full_name": patient_full_name_field(body),
            "test_name": updated_string(body, "testName", "Test name"),
            "result": updated_string(body, "result", "Result"),
            "notes": optional_string(body, "notes", "Notes"),
            "performed_at": optional_timestamp(body, "performedAt", "Performed at", nullable=False),
        }
        require_update_fields(candidate)

        patient_name = candidate.pop("patient_full_name")
        if patient_name is not UNSET:
            candidate["patient_id"] = self._resolve_patient_name(patient_name)
        elif candidate["patient_id"] is not UNSET:
            if self._patient_repo.get_by_id(candidate["patient_id"]) is None:
                raise NotFoundError(NO_PATIENT_FOUND, patient_id=candidate["patient_id"])

        fields = build_partial(candidate)
        try:
            lab_result = self._repo.update(lab_result_id, fields)
        except sqlite3.Error as e:
            logger.error(f"Database error updating lab result {lab_result_id}: {e}", exc_info=True)
            raise DatabaseError(operation="update_lab_result") from e

        if lab_result is None:
            raise NotFoundError(LAB_RESULT_NOT_FOUND, lab_result_id=lab_result_id)

        logger.info(f"Lab result updated: id={lab_result_id}, fields={sorted(fields)}")
        return LabResultResponse.model_validate(lab_result)

    def delete_lab_result(self, raw_id: Any) -> LabResultResponse:
        lab_result_id = parse_id(raw_id)
        try:
            lab_result = self._repo.delete(lab_result_id)
        except sqlite3.Error as e:
            logger.error(f"Database error deleting lab result {lab_result_id}: {e}", exc_info=True)
            raise DatabaseError(operation="delete_lab_result") from e

        if lab_result is None:
            raise NotFoundError(LAB_RESULT_NOT_FOUND, lab_result_id=lab_result_id)

        logger.info(f"Lab result deleted: id={lab_result_id}")
        return LabResultResponse.model_validate(lab_result)
