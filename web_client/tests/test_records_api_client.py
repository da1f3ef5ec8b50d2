"""
Unit tests for records_api_client.
Tests that the HTTP client sends the right requests to the Medical Records
Service API and unwraps its labelled responses.
"""
import pytest
from unittest.mock import AsyncMock, patch
import httpx

from clients.records_api_client import (
    APIError,
    RecordsAPIClient,
    get_records_api_client,
)


TEST_PATIENT = {
    "id": 1,
    "fullName": "John Doe",
    "sex": "MALE",
    "bloodGroup": None,
    "userId": 7,
}

TEST_USER = {"id": 7, "name": "Dr. Smith", "email": "smith@example.com", "role": "DOCTOR"}


@pytest.fixture
def mock_client():
    """Create a RecordsAPIClient with a test base URL."""
    return RecordsAPIClient(base_url="http://test-server")


@pytest.mark.asyncio
async def test_create_patient_unwraps_label(mock_client):
    with patch.object(mock_client, '_request', new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"Patient data:": TEST_PATIENT}

        result = await mock_client.create_patient({"fullName": "John Doe", "sex": "MALE"})

        assert result == TEST_PATIENT
        mock_request.assert_called_once_with(
            "POST", "/patients", json={"fullName": "John Doe", "sex": "MALE"}
        )


@pytest.mark.asyncio
async def test_get_patients_with_filters(mock_client):
    with patch.object(mock_client, '_request', new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"patients": [TEST_PATIENT]}

        result = await mock_client.get_patients(sex="MALE", blood_group="O_PLUS")

        assert result == [TEST_PATIENT]
        mock_request.assert_called_once_with(
            "GET", "/patients", params={"sex": "MALE", "bloodGroup": "O_PLUS"}
        )


@pytest.mark.asyncio
async def test_get_patients_without_filters_sends_no_params(mock_client):
    with patch.object(mock_client, '_request', new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"patients": []}

        result = await mock_client.get_patients()

        assert result == []
        mock_request.assert_called_once_with("GET", "/patients", params={})


@pytest.mark.asyncio
async def test_get_patient_uses_singular_path(mock_client):
    with patch.object(mock_client, '_request', new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"patient": TEST_PATIENT}

        result = await mock_client.get_patient(1)

        assert result == TEST_PATIENT
        mock_request.assert_called_once_with("GET", "/patient/1")


@pytest.mark.asyncio
async def test_update_patient_sends_only_given_fields(mock_client):
    with patch.object(mock_client, '_request', new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"updated": {**TEST_PATIENT, "phone": "555"}}

        result = await mock_client.update_patient(1, {"phone": "555"})

        assert result["phone"] == "555"
        mock_request.assert_called_once_with("PUT", "/patients/1", json={"phone": "555"})


@pytest.mark.asyncio
async def test_add_medical_record_omits_missing_notes(mock_client):
    with patch.object(mock_client, '_request', new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"updated": {"id": 3, "diagnosis": "Flu"}}

        result = await mock_client.add_medical_record(1, "Flu")

        assert result["diagnosis"] == "Flu"
        mock_request.assert_called_once_with(
            "POST", "/patients/1/medical-record", json={"diagnosis": "Flu"}
        )


@pytest.mark.asyncio
async def test_create_lab_result_payload(mock_client):
    with patch.object(mock_client, '_request', new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"Lab result": {"id": 2, "testName": "CBC"}}

        result = await mock_client.create_lab_result(
            "John Doe", "CBC", "Normal", performed_at="2025-01-01T10:00:00Z"
        )

        assert result["testName"] == "CBC"
        mock_request.assert_called_once_with(
            "POST",
            "/lab-results",
            json={
                "patientFullName": "John Doe",
                "testName": "CBC",
                "result": "Normal",
                "performedAt": "2025-01-01T10:00:00Z",
            }
        )


@pytest.mark.asyncio
async def test_get_my_lab_results(mock_client):
    with patch.object(mock_client, '_request', new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"labResults": []}

        result = await mock_client.get_my_lab_results()

        assert result == []
        mock_request.assert_called_once_with("GET", "/lab-results/mine")


@pytest.mark.asyncio
async def test_delete_medical_record(mock_client):
    with patch.object(mock_client, '_request', new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"message": {"id": 4}}

        result = await mock_client.delete_medical_record(4)

        assert result == {"id": 4}
        mock_request.assert_called_once_with("DELETE", "/medical-records/4")


@pytest.mark.asyncio
async def test_request_error_response_raises_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Full name is required"})

    client = RecordsAPIClient(base_url="http://test-server", transport=httpx.MockTransport(handler))

    with pytest.raises(APIError) as exc_info:
        await client.create_patient({"sex": "MALE"})

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Full name is required"
    assert isinstance(exc_info.value, ValueError)


@pytest.mark.asyncio
async def test_request_error_without_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    client = RecordsAPIClient(base_url="http://test-server", transport=httpx.MockTransport(handler))

    with pytest.raises(APIError) as exc_info:
        await client.get_patients()

    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Bad Gateway"


@pytest.mark.asyncio
async def test_request_transport_failure_raises_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    client = RecordsAPIClient(base_url="http://test-server", transport=httpx.MockTransport(handler))

    with pytest.raises(ConnectionError):
        await client.get_patients()


@pytest.mark.asyncio
async def test_session_cookie_kept_until_logout():
    seen_cookies = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_cookies.append(request.headers.get("cookie"))
        if request.url.path == "/api/v1/auth/login":
            return httpx.Response(
                200,
                json={"user": TEST_USER},
                headers={"set-cookie": "medrec_session=abc123; Path=/; HttpOnly"},
            )
        if request.url.path == "/api/v1/auth/logout":
            return httpx.Response(200, json={"message": "Logged out"})
        return httpx.Response(200, json={"patients": []})

    client = RecordsAPIClient(base_url="http://api.example.com", transport=httpx.MockTransport(handler))

    user = await client.login("smith@example.com", "secret123")
    await client.get_my_patients()
    await client.logout()
    await client.get_patients()

    assert user == TEST_USER
    assert seen_cookies[0] is None
    assert seen_cookies[1] == "medrec_session=abc123"
    assert seen_cookies[2] == "medrec_session=abc123"
    assert seen_cookies[3] is None


@pytest.mark.asyncio
async def test_request_builds_prefixed_url():
    urls = []

    def handler(request: httpx.Request) -> httpx.Response:
        urls.append(str(request.url))
        return httpx.Response(200, json={"statistics": {"totalPatients": 0}})

    client = RecordsAPIClient(base_url="http://test-server/", transport=httpx.MockTransport(handler))

    await client.get_patient_statistics()

    assert urls == ["http://test-server/api/v1/patients/statistics"]


def test_client_strips_trailing_slash():
    client = RecordsAPIClient(base_url="http://test-server/")
    assert client.base_url == "http://test-server"


def test_get_records_api_client_singleton():
    """Test that get_records_api_client returns a singleton."""
    client1 = get_records_api_client()
    client2 = get_records_api_client()

    assert client1 is client2
    assert isinstance(client1, RecordsAPIClient)
