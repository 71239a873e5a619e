import pytest

from medibot.config import settings
from medibot.exceptions import TransientNetworkError, ValidationFailure
from medibot.services.auth import AuthClient
from medibot.services.transport import build_client


async def test_analysis_rejection_carries_details(backend, analysis):
    backend.reply(settings.analysis_path, status=400, json={"details": "Not a prescription"})

    with pytest.raises(ValidationFailure) as excinfo:
        await analysis.analyze(b"img")

    assert excinfo.value.message == "Not a prescription"


async def test_analysis_blank_details_fall_back(backend, analysis):
    backend.reply(settings.analysis_path, status=400, json={"details": "   "})

    with pytest.raises(TransientNetworkError) as excinfo:
        await analysis.analyze(b"img")

    assert excinfo.value.message == settings.generic_failure_message
    assert excinfo.value.status_code == 400


async def test_analysis_non_json_success_is_malformed(backend, analysis):
    backend.reply(settings.analysis_path, content=b"<html>")

    with pytest.raises(ValidationFailure):
        await analysis.analyze(b"img")


async def test_analysis_parses_optional_fields(backend, analysis):
    backend.reply(settings.analysis_path, json={"medicines": [
        {"name": "Amoxicillin", "dosage": "500mg", "scheduleHints": "1-0-1", "purpose": "infection"},
    ]})

    result = await analysis.analyze(b"img")

    [medicine] = result.medicines
    assert medicine.dosage == "500mg"
    assert medicine.schedule_hints == "1-0-1"


async def test_history_rejects_non_list_field(backend, history_client):
    backend.reply(settings.history_path, json={"history": "nope"})

    with pytest.raises(ValidationFailure):
        await history_client.list_history()


async def test_history_http_error_is_transient(backend, history_client):
    backend.reply(settings.history_path, status=401, json={"error": "Unauthorized"})

    with pytest.raises(TransientNetworkError) as excinfo:
        await history_client.list_history()

    assert excinfo.value.status_code == 401


async def test_history_empty_list_is_data(backend, history_client):
    backend.reply(settings.history_path, json={"history": []})

    assert await history_client.list_history() == []


@pytest.mark.parametrize("status,body", [
    (200, {}),
    (200, None),
    (401, {"error": "no session"}),
    (200, {"user": "not-an-object"}),
])
async def test_session_status_unauthenticated(backend, http, status, body):
    backend.reply(settings.session_path, status=status, json=body)

    session = await AuthClient(http).session_status()

    assert session.status == "unauthenticated"


async def test_session_status_authenticated(backend, http):
    backend.reply(settings.session_path, json={
        "user": {"id": 12, "name": "Asha", "email": "asha@example.com"},
        "expires": "2026-11-01T00:00:00Z",
    })

    session = await AuthClient(http).session_status()

    assert session.is_authenticated
    assert session.user.id == "12"
    assert session.user.email == "asha@example.com"


async def test_session_status_server_error_raises(backend, http):
    backend.reply(settings.session_path, status=502, content=b"bad gateway")

    with pytest.raises(TransientNetworkError):
        await AuthClient(http).session_status()


async def test_default_client_uses_configured_backend():
    client = build_client()
    try:
        assert str(client.base_url).rstrip("/") == settings.api_base_url.rstrip("/")
        assert client.timeout.read == settings.request_timeout
    finally:
        await client.aclose()
