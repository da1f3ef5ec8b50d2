"""
Service layer for medical record operations.

Architecture:
    API Layer (routers) → MedicalRecordService → MedicalRecordRepository → Database

Records are created through PatientService.add_medical_record (they always
belong to a patient in the URL); this service covers the record-centric
endpoints.
"""
import logging
import sqlite3
from typing import Any, List, Mapping, Optional

from core.auth import CallerIdentity
from core.exceptions import DatabaseError, NotFoundError, ValidationError
from core.payload import UNSET, build_partial
from core.validation import (
    field,
    optional_id,
    optional_string,
    parse_id,
    require_update_fields,
    updated_string,
)
from repositories import MedicalRecordRepository, PatientRepository
from schemas import MedicalRecordResponse

logger = logging.getLogger(__name__)

RECORD_NOT_FOUND = "Medical record not found"
NO_PATIENT_FOUND = "No patient found"
INVALID_PATIENT_ID = "Invalid patient ID provided"
INVALID_PATIENT_NAME = "Invalid patient full name provided"


def patient_full_name_field(body: Optional[Mapping[str, Any]]) -> Any:
    """
    The patientFullName lookup key of an update body.

    UNSET when absent; anything but a non-blank string is rejected.
    """
    value = field(body, "patientFullName")
    if value is UNSET:
        return UNSET
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(INVALID_PATIENT_NAME)
    return value.strip()


class MedicalRecordService:
    """Business logic for listing, updating and deleting medical records."""

    def __init__(
        self,
        medical_record_repository: MedicalRecordRepository,
        patient_repository: PatientRepository,
    ):
        self._repo = medical_record_repository
        self._patient_repo = patient_repository

    def list_records(self) -> List[MedicalRecordResponse]:
        """All medical records, newest first, with patient and author names."""
        return [MedicalRecordResponse.model_validate(r) for r in self._repo.get_all()]

    def list_my_records(self, caller: CallerIdentity) -> List[MedicalRecordResponse]:
        """Records of every patient the caller owns."""
        user_id = caller.require_user_id()
        records = self._repo.get_by_patient_owner(user_id)
        return [MedicalRecordResponse.model_validate(r) for r in records]

    def get_record(self, raw_id: Any) -> MedicalRecordResponse:
        """
        Raises:
            ValidationError: If the id is missing or not a positive integer.
            NotFoundError: If no record has this id.
        """
        record_id = parse_id(raw_id)
        record = self._repo.get_by_id(record_id)
        if record is None:
            raise NotFoundError(RECORD_NOT_FOUND, record_id=record_id)
        return MedicalRecordResponse.model_validate(record)

    def update_record(
        self,
        raw_id: Any,
        body: Optional[Mapping[str, Any]]
    ) -> MedicalRecordResponse:
        """
        Apply a partial update to a medical record.

        The record can be moved to another patient either by patientId or by
        patientFullName; when both are given the name wins. The target
        patient must exist.

        Args:
            raw_id: Record id from the path.
            body: Raw JSON body with any of diagnosis, notes, patientId,
                patientFullName.

        Returns:
            MedicalRecordResponse: The updated record including patientFullName.

        Raises:
            ValidationError: If the id or a supplied value is invalid, or
                nothing was supplied.
            NotFoundError: "No patient found" for an unknown target patient,
                "Medical record not found" for an unknown record.
            DatabaseError: If the update fails.
        """
        record_id = parse_id(raw_id)
        candidate = {
            "diagnosis": updated_string(
                body, "diagnosis", "Diagnosis", blank_message="Diagnosis cannot be empty"
            ),
            "notes": optional_string(body, "notes", "Notes"),
            "patient_id": optional_id(body, "patientId", INVALID_PATIENT_ID),
            "patient_full_name": patient_full_name_field(body),
        }
        require_update_fields(candidate)

        patient_name = candidate.pop("patient_full_name")
        if patient_name is not UNSET:
            patient = self._patient_repo.get_first_by_full_name(patient_name)
            if patient is None:
                logger.warning(f"Medical record update names unknown patient: {patient_name}")
                raise NotFoundError(NO_PATIENT_FOUND, patient_full_name=patient_name)
            candidate["patient_id"] = patient.id
        elif candidate["patient_id"] is not UNSET:
            if self._patient_repo.get_by_id(candidate["patient_id"]) is None:
                raise NotFoundError(NO_PATIENT_FOUND, patient_id=candidate["patient_id"])

        fields = build_partial(candidate)
        try:
            record = self._repo.update(record_id, fields)
        except sqlite3.Error as e:
            logger.error(f"Database error updating medical record {record_id}: {e}", exc_info=True)
            raise DatabaseError(operation="update_medical_record") from e

        if record is None:
            raise NotFoundError(RECORD_NOT_FOUND, record_id=record_id)

        logger.info(f"Medical record updated: id={record_id}, fields={sorted(fields)}")
        return MedicalRecordResponse.model_validate(record)

    def delete_record(self, raw_id: Any) -> MedicalRecordResponse:
        """
        Raises:
            ValidationError: If the id is missing or not a positive integer.
            NotFoundError: If no record has this id.
        """
        record_id = parse_id(raw_id)
        try:
            record = self._repo.delete(record_id)
        except sqlite3.Error as e:
            logger.error(f"Database error deleting medical record {record_id}: {e}", exc_info=True)
            raise DatabaseError(operation="delete_medical_record") from e

        if record is None:
            logger.warning(f"Delete of unknown medical record: id={record_id}")
            raise NotFoundError(RECORD_NOT_FOUND, record_id=record_id)

        logger.info(f"Medical record deleted: id={record_id}")
        return MedicalRecordResponse.model_validate(record)
