"""
HTTP client for the Medical Records Service API.

The service authenticates by session cookie, so the client keeps the
cookies it receives (login) and sends them with every later request until
logout clears them.
"""
import httpx
import logging
from typing import Optional, List, Dict, Any

from clients.config import MEDREC_API_URL, MEDREC_API_TIMEOUT

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class APIError(ValueError):
    """An error response from the API, carrying its status and message."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"API error {status_code}: {message}")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return response.text


class RecordsAPIClient:
    """Client for the Medical Records Service REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url or MEDREC_API_URL
        if not self.base_url:
            raise ValueError("MEDREC_API_URL must be set in config")

        # Remove trailing slash
        self.base_url = self.base_url.rstrip("/")
        self.timeout = timeout or MEDREC_API_TIMEOUT
        self.cookies = httpx.Cookies()
        self._transport = transport

    async def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make HTTP request to API.

        Raises:
            APIError: For HTTP error responses
            ConnectionError: For connection/request errors
        """
        url = f"{self.base_url}{API_PREFIX}{endpoint}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                cookies=self.cookies,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, **kwargs)
                self.cookies = httpx.Cookies(client.cookies)
        except httpx.RequestError as e:
            error_msg = f"Request error: {e}"
            logger.error(error_msg)
            raise ConnectionError(error_msg) from e

        if response.is_error:
            error = APIError(response.status_code, _error_message(response))
            logger.error(str(error))
            raise error
        return response.json()

    # Auth methods
    async def register(
        self,
        name: str,
        email: str,
        password: str,
        role: Optional[str] = None
    ) -> Dict[str, Any]:
        payload = {"name": name, "email": email, "password": password}
        if role is not None:
            payload["role"] = role
        data = await self._request("POST", "/auth/register", json=payload)
        return data["user"]

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in; the session cookie is kept for later requests.

        Raises:
            APIError: 401 for bad credentials
        """
        data = await self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password}
        )
        return data["user"]

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")
        self.cookies = httpx.Cookies()

    async def me(self) -> Dict[str, Any]:
        data = await self._request("GET", "/auth/me")
        return data["user"]

    # User administration (ADMIN)
    async def get_users(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/users")
        return data["users"]

    async def update_user(self, user_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request("PUT", f"/users/{user_id}", json=fields)
        return data["updated"]

    async def delete_user(self, user_id: int) -> Dict[str, Any]:
        data = await self._request("DELETE", f"/users/{user_id}")
        return data["deleted"]

    # Patient methods
    async def create_patient(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a patient.

        Args:
            fields: camelCase patient fields; fullName and sex are required

        Raises:
            APIError: 400 with the validation message, 401 without a session
            ConnectionError: If connection fails
        """
        data = await self._request("POST", "/patients", json=fields)
        return data["Patient data:"]

    async def get_patients(
        self,
        full_name: Optional[str] = None,
        sex: Optional[str] = None,
        blood_group: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {}
        if full_name:
            params["fullName"] = full_name
        if sex:
            params["sex"] = sex
        if blood_group:
            params["bloodGroup"] = blood_group

        data = await self._request("GET", "/patients", params=params)
        return data["patients"]

    async def get_my_patients(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/patients/mine")
        return data["patients"]

    async def search_patients(self, name: str) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/patients/search", params={"name": name})
        return data["patients"]

    async def get_patient_statistics(self) -> Dict[str, Any]:
        data = await self._request("GET", "/patients/statistics")
        return data["statistics"]

    async def get_patient(self, patient_id: int) -> Dict[str, Any]:
        data = await self._request("GET", f"/patient/{patient_id}")
        return data["patient"]

    async def update_patient(self, patient_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Send only the fields to change."""
        data = await self._request("PUT", f"/patients/{patient_id}", json=fields)
        return data["updated"]

    async def delete_patient(self, patient_id: int) -> Dict[str, Any]:
        data = await self._request("DELETE", f"/patients/{patient_id}")
        return data["deleted"]

    # Medical record methods
    async def add_medical_record(
        self,
        patient_id: int,
        diagnosis: str,
        notes: Optional[str] = None
    ) -> Dict[str, Any]:
        payload = {"diagnosis": diagnosis}
        if notes is not None:
            payload["notes"] = notes
        data = await self._request(
            "POST",
            f"/patients/{patient_id}/medical-record",
            json=payload
        )
        return data["updated"]

    async def get_patient_medical_records(self, patient_id: int) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/patients/{patient_id}/medical-record")
        return data["Medical Records"]

    async def get_medical_records(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/medical-records")
        return data["Medical Records"]

    async def get_my_medical_records(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/medical-records/mine")
        return data["medicalRecords"]

    async def get_medical_record(self, record_id: int) -> Dict[str, Any]:
        data = await self._request("GET", f"/medical-records/{record_id}")
        return data["Medical Record"]

    async def update_medical_record(self, record_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request("PUT", f"/medical-records/{record_id}", json=fields)
        return data["updated"]

    async def delete_medical_record(self, record_id: int) -> Dict[str, Any]:
        data = await self._request("DELETE", f"/medical-records/{record_id}")
        return data["message"]

    # Lab result methods
    async def create_lab_result(
        self,
        patient_full_name: str,
        test_name: str,
        result: str,
        notes: Optional[str] = None,
        performed_at: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Record a lab result for the patient with this full name.

        Args:
            performed_at: ISO 8601 timestamp; the server uses now if omitted
        """
        payload = {
            "patientFullName": patient_full_name,
            "testName": test_name,
            "result": result,
        }
        if notes is not None:
            payload["notes"] = notes
        if performed_at is not None:
            payload["performedAt"] = performed_at

        data = await self._request("POST", "/lab-results", json=payload)
        return data["Lab result"]

    async def get_lab_results(
        self,
        patient_id: Optional[int] = None,
        test_name: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {}
        if patient_id:
            params["patientId"] = patient_id
        if test_name:
            params["testName"] = test_name

        data = await self._request("GET", "/lab-results", params=params)
        return data["Lab results"]

    async def get_patient_lab_results(self, patient_id: int) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/patients/{patient_id}/lab-results")
        return data["Lab Results"]

    async def get_my_lab_results(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/lab-results/mine")
        return data["labResults"]

    async def get_lab_result(self, lab_result_id: int) -> Dict[str, Any]:
        data = await self._request("GET", f"/lab-results/{lab_result_id}")
        return data["Lab result"]

    async def update_lab_result(self, lab_result_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request("PUT", f"/lab-results/{lab_result_id}", json=fields)
        return data["updated"]

    async def delete_lab_result(self, lab_result_id: int) -> Dict[str, Any]:
        data = await self._request("DELETE", f"/lab-results/{lab_result_id}")
        return data["result"]


# Global client instance
_client_instance: Optional[RecordsAPIClient] = None


def get_records_api_client() -> RecordsAPIClient:
    """Get or create the global API client instance."""
    global _client_instance
    if _client_instance is None:
        _client_instance = RecordsAPIClient()
    return _client_instance
