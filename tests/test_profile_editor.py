import asyncio

import pytest

from conftest import wait_for
from medibot.config import settings
from medibot.schemas.prescription import ProfileData
from medibot.schemas.session import SessionUser
from medibot.state.profile import ProfileEditor


async def test_empty_fields_are_allowed(backend, profile_client):
    editor = ProfileEditor(profile_client)
    editor.update(age="", medical_history="")

    outcome = await editor.save()

    assert outcome.ok
    assert outcome.message == settings.profile_ack_message
    assert editor.last_outcome == outcome


async def test_seeded_from_session_user(profile_client):
    user = SessionUser(name="Asha", age="64", medicalHistory="Hypertension")

    editor = ProfileEditor.from_session(profile_client, user)

    assert editor.data == ProfileData(age="64", medical_history="Hypertension")


async def test_missing_identity_fields_start_blank(profile_client):
    editor = ProfileEditor.from_session(profile_client, SessionUser(name="Asha"))

    assert editor.data.age == ""
    assert editor.data.medical_history == ""


async def test_unknown_field_is_rejected(profile_client):
    editor = ProfileEditor(profile_client)

    with pytest.raises(ValueError):
        editor.set_field("gender", "Other")


async def test_server_failure_is_reported_not_raised(backend, profile_client):
    backend.reply(settings.profile_path, status=500, json={"error": "nope"})
    editor = ProfileEditor(profile_client)

    outcome = await editor.save()

    assert not outcome.ok
    assert outcome.message == settings.profile_failure_message
    assert editor.saving is False


async def test_rejection_details_are_shown(backend, profile_client):
    backend.reply(settings.profile_path, status=400, json={"details": "Age must be a number"})
    editor = ProfileEditor(profile_client)

    outcome = await editor.save()

    assert outcome.message == "Age must be a number"


async def test_network_failure_is_reported(backend, profile_client):
    backend.fail(settings.profile_path)
    editor = ProfileEditor(profile_client)

    outcome = await editor.save()

    assert not outcome.ok


async def test_edits_after_save_starts_are_not_sent(backend, profile_client):
    gate = backend.hold(settings.profile_path)
    editor = ProfileEditor(profile_client)
    editor.update(age="40")
    task = asyncio.create_task(editor.save())
    await wait_for(lambda: len(backend.calls(settings.profile_path)) == 1)

    editor.update(age="41")
    gate.set()
    await task

    [request] = backend.calls(settings.profile_path)
    assert b'"40"' in request.content
    assert editor.data.age == "41"


async def test_discarded_editor_ignores_late_outcome(backend, profile_client):
    gate = backend.hold(settings.profile_path)
    editor = ProfileEditor(profile_client)
    task = asyncio.create_task(editor.save())
    await wait_for(lambda: len(backend.calls(settings.profile_path)) == 1)

    editor.discard()
    gate.set()
    outcome = await task

    assert outcome.ok
    assert editor.last_outcome is None
