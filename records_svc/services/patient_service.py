"""
Service layer for patient operations.

This service contains business logic for patient management
and orchestrates calls to repositories.

Architecture:
    API Layer (routers) → PatientService → PatientRepository → Database

Dependency Injection:
    PatientService receives its repositories via constructor injection.
    Use core.dependencies.get_patient_service() in routers with Depends().

Every public method validates its input before it checks the caller's
identity or touches a repository.
"""
import logging
import sqlite3
from typing import Any, List, Mapping, Optional

from core.auth import CallerIdentity
from core.exceptions import DatabaseError, NotFoundError
from core.payload import UNSET, build_partial
from core.validation import (
    optional_enum,
    optional_string,
    optional_timestamp,
    parse_enum,
    parse_id,
    query_string,
    require_enum,
    require_string,
    require_update_fields,
    updated_string,
)
from models import BloodGroup, Sex
from repositories import LabResultRepository, MedicalRecordRepository, PatientRepository
from schemas import LabResultResponse, MedicalRecordResponse, PatientResponse, PatientStatistics

logger = logging.getLogger(__name__)

PATIENT_NOT_FOUND = "Patient not found"
NO_PATIENT_FOUND = "No patient found"
SEARCH_QUERY_REQUIRED = "Search query is required"


class PatientService:
    """
    Service layer for patient operations.

    Handles validation of patient input, ownership assignment and the
    per-patient medical record and lab result views.
    """

    def __init__(
        self,
        patient_repository: PatientRepository,
        medical_record_repository: MedicalRecordRepository,
        lab_result_repository: LabResultRepository,
    ):
        """
        Initialize the patient service.

        Args:
            patient_repository: Data access for patients.
            medical_record_repository: Data access for a patient's medical records.
            lab_result_repository: Data access for a patient's lab results.
                All three are injected via core.dependencies.get_patient_service().
        """
        self._repo = patient_repository
        self._record_repo = medical_record_repository
        self._lab_repo = lab_result_repository

    def _existing_patient_id(self, raw_id: Any, message: str) -> int:
        patient_id = parse_id(raw_id)
        if self._repo.get_by_id(patient_id) is None:
            logger.warning(f"Patient not found: id={patient_id}")
            raise NotFoundError(message, patient_id=patient_id)
        return patient_id

    # =========================================================================
    # PATIENTS
    # =========================================================================

    def create_patient(
        self,
        body: Optional[Mapping[str, Any]],
        caller: CallerIdentity
    ) -> PatientResponse:
        """
        Create a patient owned by the caller.

        Args:
            body: Raw JSON body. fullName and sex are required; dateOfBirth,
                phone, email, address and bloodGroup are optional.
            caller: Identity of the requesting user.

        Returns:
            PatientResponse: The created patient.

        Raises:
            ValidationError: If a required field is missing or a value is malformed.
            UnauthorizedError: If the caller has no session.
            DatabaseError: If the insert fails.
        """
        fields = build_partial({
            "full_name": require_string(body, "fullName", "Full name"),
            "sex": require_enum(body, "sex", Sex, "Sex"),
            "date_of_birth": optional_timestamp(body, "dateOfBirth", "Date of birth"),
            "phone": optional_string(body, "phone", "Phone"),
            "email": optional_string(body, "email", "Email"),
            "address": optional_string(body, "address", "Address"),
            "blood_group": optional_enum(body, "bloodGroup", BloodGroup, "Blood group"),
        })
        fields["user_id"] = caller.require_user_id()

        logger.info(f"Creating patient: {fields['full_name']}")
        try:
            patient = self._repo.add(fields)
        except sqlite3.Error as e:
            logger.error(f"Database error creating patient: {e}", exc_info=True)
            raise DatabaseError(operation="create_patient") from e

        logger.info(f"Patient created successfully: {patient.full_name} (id={patient.id})")
        return PatientResponse.model_validate(patient)

    def list_patients(
        self,
        full_name: Optional[str] = None,
        sex: Optional[str] = None,
        blood_group: Optional[str] = None
    ) -> List[PatientResponse]:
        """
        All patients, optionally filtered by exact full name, sex and blood group.

        Raises:
            ValidationError: If sex or blood group is not a known value.
        """
        filters = build_partial({
            "full_name": full_name if full_name else UNSET,
            "sex": parse_enum(sex, Sex, "Sex") if sex else UNSET,
            "blood_group": parse_enum(blood_group, BloodGroup, "Blood group") if blood_group else UNSET,
        })
        patients = self._repo.get_all(filters)
        return [PatientResponse.model_validate(p) for p in patients]

    def list_my_patients(self, caller: CallerIdentity) -> List[PatientResponse]:
        """Patients owned by the caller."""
        user_id = caller.require_user_id()
        patients = self._repo.get_all({"user_id": user_id})
        return [PatientResponse.model_validate(p) for p in patients]

    def search_patients(self, name: Optional[str], caller: CallerIdentity) -> List[PatientResponse]:
        """
        Case-insensitive substring search on full name.

        Raises:
            ValidationError: If the query is missing or blank.
        """
        term = query_string(name, SEARCH_QUERY_REQUIRED)
        caller.require_user_id()
        patients = self._repo.search_by_name(term)
        logger.debug(f"Patient search '{term}' matched {len(patients)}")
        return [PatientResponse.model_validate(p) for p in patients]

    def get_statistics(self, caller: CallerIdentity) -> PatientStatistics:
        caller.require_user_id()
        return PatientStatistics.model_validate(self._repo.statistics())

    def get_patient(self, raw_id: Any, caller: CallerIdentity) -> PatientResponse:
        """
        Get a patient by id, including the owner's name as createdBy.

        Raises:
            ValidationError: If the id is missing or not a positive integer.
            UnauthorizedError: If the caller has no session.
            NotFoundError: If no patient has this id.
        """
        patient_id = parse_id(raw_id)
        caller.require_user_id()

        patient = self._repo.get_by_id(patient_id)
        if patient is None:
            raise NotFoundError(PATIENT_NOT_FOUND, patient_id=patient_id)
        return PatientResponse.model_validate(patient)

    def update_patient(
        self,
        raw_id: Any,
        body: Optional[Mapping[str, Any]],
        caller: CallerIdentity
    ) -> PatientResponse:
        """
        Apply a partial update; only fields present in the body are changed.

        Raises:
            ValidationError: If the id or a supplied value is invalid, or no
                updatable field was supplied.
            UnauthorizedError: If the caller has no session.
            NotFoundError: If no patient has this id.
        """
        patient_id = parse_id(raw_id)
        candidate = {
            "full_name": updated_string(body, "fullName", "Full name"),
            "sex": optional_enum(body, "sex", Sex, "Sex", nullable=False),
            "date_of_birth": optional_timestamp(body, "dateOfBirth", "Date of birth"),
            "phone": optional_string(body, "phone", "Phone"),
            "email": optional_string(body, "email", "Email"),
            "address": optional_string(body, "address", "Address"),
            "blood_group": optional_enum(body, "bloodGroup", BloodGroup, "Blood group"),
        }
        require_update_fields(candidate)
        caller.require_user_id()

        fields = build_partial(candidate)
        try:
            patient = self._repo.update(patient_id, fields)
        except sqlite3.Error as e:
            logger.error(f"Database error updating patient {patient_id}: {e}", exc_info=True)
            raise DatabaseError(operation="update_patient") from e

        if patient is None:
            raise NotFoundError(PATIENT_NOT_FOUND, patient_id=patient_id)

        logger.info(f"Patient updated: id={patient_id}, fields={sorted(fields)}")
        return PatientResponse.model_validate(patient)

    def delete_patient(self, raw_id: Any, caller: CallerIdentity) -> PatientResponse:
        """Delete a patient together with its medical records and lab results."""
        patient_id = parse_id(raw_id)
        caller.require_user_id()

        try:
            patient = self._repo.delete(patient_id)
        except sqlite3.Error as e:
            logger.error(f"Database error deleting patient {patient_id}: {e}", exc_info=True)
            raise DatabaseError(operation="delete_patient") from e

        if patient is None:
            raise NotFoundError(PATIENT_NOT_FOUND, patient_id=patient_id)

        logger.info(f"Patient deleted: id={patient_id}")
        return PatientResponse.model_validate(patient)

    # =========================================================================
    # PER-PATIENT RECORDS
    # =========================================================================

    def add_medical_record(
        self,
        raw_id: Any,
        body: Optional[Mapping[str, Any]],
        caller: CallerIdentity
    ) -> MedicalRecordResponse:
        """
        Add a medical record authored by the caller to a patient.

        Raises:
            ValidationError: If the id is invalid or the diagnosis is missing or blank.
            UnauthorizedError: If the caller has no session.
            NotFoundError: If the patient does not exist.
        """
        patient_id = parse_id(raw_id)
        diagnosis = require_string(
            body, "diagnosis", "Diagnosis", blank_message="Diagnosis cannot be empty"
        )
        notes = optional_string(body, "notes", "Notes") or None
        user_id = caller.require_user_id()

        if self._repo.get_by_id(patient_id) is None:
            logger.warning(f"Medical record for unknown patient: id={patient_id}")
            raise NotFoundError(NO_PATIENT_FOUND, patient_id=patient_id)

        try:
            record = self._record_repo.add(
                patient_id=patient_id,
                user_id=user_id,
                diagnosis=diagnosis,
                notes=notes,
            )
        except sqlite3.Error as e:
            logger.error(f"Database error adding medical record: {e}", exc_info=True)
            raise DatabaseError(operation="add_medical_record") from e

        logger.info(f"Medical record added: id={record.id}, patient_id={patient_id}")
        return MedicalRecordResponse.model_validate(record)

    def get_medical_records(self, raw_id: Any) -> List[MedicalRecordResponse]:
        patient_id = self._existing_patient_id(raw_id, NO_PATIENT_FOUND)
        records = self._record_repo.get_by_patient(patient_id)
        return [MedicalRecordResponse.model_validate(r) for r in records]

    def get_lab_results(self, raw_id: Any) -> List[LabResultResponse]:
        patient_id = self._existing_patient_id(raw_id, NO_PATIENT_FOUND)
        results = self._lab_repo.find({"patient_id": patient_id})
        return [LabResultResponse.model_validate(r) for r in results]
