"""Tests for API endpoints."""

import pytest
from httpx import AsyncClient

from speechpro.config import get_settings

WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt \x10\x00\x00\x00"


async def _upload(client: AsyncClient, headers: dict, name: str = "demo.wav") -> int:
    response = await client.post(
        "/v1/audio-files",
        headers=headers,
        files={"file": (name, WAV_BYTES, "audio/wav")},
        data={"language": "English", "duration_seconds": "3.5"},
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health check endpoint."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"
    assert data["encryption"] == "ok"


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    """Test root endpoint."""
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "SpeechPro Record Service"


@pytest.mark.asyncio
async def test_info_endpoint(client: AsyncClient):
    response = await client.get("/v1/info")
    assert response.status_code == 200
    data = response.json()
    assert "activity_logs" in data["collections"]
    assert data["action_types"] == ["upload", "transcribe", "translate", "s2s", "streaming", "tts"]


@pytest.mark.asyncio
async def test_history_without_auth(client: AsyncClient):
    """Test that records cannot be read without an API key."""
    response = await client.get("/v1/history")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_api_key_format(client: AsyncClient):
    response = await client.get("/v1/stats", headers={"X-API-Key": "not-a-key"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_api_key(client: AsyncClient):
    response = await client.get("/v1/stats", headers={"X-API-Key": "ask_" + "0" * 32})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_read_only_key_cannot_write(client: AsyncClient, read_only_headers: dict):
    response = await client.post(
        "/v1/transcriptions",
        headers=read_only_headers,
        json={"text": "hello", "language": "en"},
    )
    assert response.status_code == 403

    response = await client.get("/v1/transcriptions", headers=read_only_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_upload_and_download_audio(client: AsyncClient, auth_headers: dict):
    audio_id = await _upload(client, auth_headers)
    assert audio_id == 1

    response = await client.get("/v1/audio-files", headers=auth_headers)
    assert response.status_code == 200
    [audio] = response.json()
    assert audio["filename"] == "demo.wav"
    assert audio["language"] == "english"
    assert audio["duration_seconds"] == 3.5
    assert audio["file_path"] == "users/user-a/audio/1"
    assert "data" not in audio

    response = await client.get(f"/v1/audio-files/{audio_id}/content", headers=auth_headers)
    assert response.status_code == 200
    assert response.content == WAV_BYTES
    assert response.headers["content-type"] == "audio/wav"


@pytest.mark.asyncio
async def test_missing_audio_content(client: AsyncClient, auth_headers: dict):
    response = await client.get("/v1/audio-files/99/content", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Not found"


@pytest.mark.asyncio
async def test_upload_then_transcribe_flow(client: AsyncClient, auth_headers: dict):
    """Upload, transcribe, then read history and stats."""
    audio_id = await _upload(client, auth_headers)

    response = await client.post(
        "/v1/transcriptions",
        headers=auth_headers,
        json={
            "audio_id": audio_id,
            "text": "hello world",
            "language": "English",
            "confidence": 0.95,
            "method": "batch",
        },
    )
    assert response.status_code == 201
    assert response.json()["id"] == 1

    response = await client.get("/v1/history", headers=auth_headers)
    assert response.status_code == 200
    history = response.json()
    assert [(e["action_type"], e["related_id"]) for e in history] == [
        ("transcribe", 1),
        ("upload", 1),
    ]
    assert history[0]["title"] == "Transcription"

    response = await client.get("/v1/stats", headers=auth_headers)
    assert response.json() == {
        "audio_files": 1,
        "transcriptions": 1,
        "translations": 0,
        "speech_to_speech": 0,
        "streaming_sessions": 0,
    }


@pytest.mark.asyncio
async def test_list_transcriptions_encrypted_by_default(client: AsyncClient, auth_headers: dict):
    await client.post(
        "/v1/transcriptions",
        headers=auth_headers,
        json={"audio_id": 3, "text": "secret words", "language": "en", "confidence": 0.8},
    )

    response = await client.get("/v1/transcriptions", headers=auth_headers)
    [record] = response.json()
    assert record["encrypted"] is True
    assert record["text"] != "secret words"

    response = await client.get(
        "/v1/transcriptions", headers=auth_headers, params={"decrypt": "true", "audio_id": 3}
    )
    [record] = response.json()
    assert record["encrypted"] is False
    assert record["text"] == "secret words"

    response = await client.get(
        "/v1/transcriptions", headers=auth_headers, params={"audio_id": 4}
    )
    assert response.json() == []


@pytest.mark.asyncio
async def test_translation_and_speech_to_speech(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/v1/translations",
        headers=auth_headers,
        json={
            "transcription_id": 1,
            "source_language": "en",
            "target_language": "fr",
            "original_text": "hello",
            "translated_text": "bonjour",
        },
    )
    assert response.status_code == 201
    translation_id = response.json()["id"]

    response = await client.post(
        "/v1/speech-to-speech",
        headers=auth_headers,
        json={
            "translation_id": translation_id,
            "source_language": "en",
            "target_language": "fr",
            "original_audio_url": "blob:in",
            "transcribed_text": "hello",
            "translated_text": "bonjour",
            "synthesized_audio_url": "blob:out",
        },
    )
    assert response.status_code == 201

    response = await client.get(
        "/v1/translations", headers=auth_headers, params={"decrypt": "true"}
    )
    [translation] = response.json()
    assert translation["translated_text"] == "bonjour"

    response = await client.get(
        "/v1/speech-to-speech",
        headers=auth_headers,
        params={"decrypt": "true", "translation_id": translation_id},
    )
    [s2s] = response.json()
    assert s2s["transcribed_text"] == "hello"
    assert s2s["synthesized_audio_url"] == "blob:out"

    response = await client.get(
        "/v1/history", headers=auth_headers, params={"action_type": "s2s"}
    )
    assert [e["action_type"] for e in response.json()] == ["s2s"]


@pytest.mark.asyncio
async def test_text_to_speech(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/v1/text-to-speech",
        headers=auth_headers,
        json={"original_text": "read this", "language": "en", "audio_url": "blob:tts"},
    )
    assert response.status_code == 201

    response = await client.get(
        "/v1/text-to-speech", headers=auth_headers, params={"decrypt": "true"}
    )
    [record] = response.json()
    assert record["original_text"] == "read this"
    assert record["voice_type"] == "NEUTRAL"

    response = await client.get("/v1/usage", headers=auth_headers)
    assert response.json()["text_to_speech_requests"] == 1


@pytest.mark.asyncio
async def test_invalid_confidence_rejected(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/v1/transcriptions",
        headers=auth_headers,
        json={"text": "hello", "language": "en", "confidence": 1.5},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_streaming_session_flow(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/v1/streaming-sessions", headers=auth_headers, json={"source_language": "en"}
    )
    assert response.status_code == 201
    started = response.json()
    stream_id = started["id"]

    response = await client.get(
        f"/v1/streaming-sessions/by-session/{started['session_id']}", headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["finalized"] is False
    assert response.json()["end_time"] == 0

    update = {"final_text": "live words", "average_confidence": 0.9, "audio_url": "blob:live"}
    response = await client.put(
        f"/v1/streaming-sessions/{stream_id}", headers=auth_headers, json=update
    )
    assert response.status_code == 200
    finalized = response.json()
    assert finalized["finalized"] is True
    assert finalized["end_time"] > finalized["start_time"]

    # Same request again changes nothing
    response = await client.put(
        f"/v1/streaming-sessions/{stream_id}", headers=auth_headers, json=update
    )
    assert response.json()["end_time"] == finalized["end_time"]

    response = await client.get(
        "/v1/streaming-sessions", headers=auth_headers, params={"decrypt": "true"}
    )
    [session] = response.json()
    assert session["final_text"] == "live words"

    response = await client.get("/v1/history", headers=auth_headers)
    assert [e["action_type"] for e in response.json()] == ["streaming"]


@pytest.mark.asyncio
async def test_finalize_missing_session(client: AsyncClient, auth_headers: dict):
    response = await client.put(
        "/v1/streaming-sessions/42",
        headers=auth_headers,
        json={"final_text": "x", "average_confidence": 0.5, "audio_url": ""},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_users_are_isolated(
    client: AsyncClient, auth_headers: dict, other_auth_headers: dict
):
    audio_id = await _upload(client, auth_headers)
    response = await client.post(
        "/v1/streaming-sessions", headers=auth_headers, json={"source_language": "en"}
    )
    stream_id = response.json()["id"]

    response = await client.get("/v1/history", headers=other_auth_headers)
    assert response.json() == []

    response = await client.get("/v1/stats", headers=other_auth_headers)
    assert response.json()["audio_files"] == 0

    response = await client.get(
        f"/v1/audio-files/{audio_id}/content", headers=other_auth_headers
    )
    assert response.status_code == 404

    response = await client.put(
        f"/v1/streaming-sessions/{stream_id}",
        headers=other_auth_headers,
        json={"final_text": "hijack", "average_confidence": 0.1, "audio_url": ""},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_history_invalid_action_type(client: AsyncClient, auth_headers: dict):
    response = await client.get(
        "/v1/history", headers=auth_headers, params={"action_type": "dance"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_history_limit(client: AsyncClient, auth_headers: dict):
    for _ in range(3):
        await client.post(
            "/v1/text-to-speech",
            headers=auth_headers,
            json={"original_text": "hi", "language": "en", "audio_url": "blob:tts"},
        )

    response = await client.get("/v1/history", headers=auth_headers, params={"limit": 2})
    assert [e["related_id"] for e in response.json()] == [3, 2]


@pytest.mark.asyncio
async def test_profile(client: AsyncClient, auth_headers: dict, other_auth_headers: dict):
    response = await client.get("/v1/profile", headers=auth_headers)
    assert response.status_code == 404

    response = await client.put(
        "/v1/profile",
        headers=auth_headers,
        json={"email": "a@example.com", "display_name": "User A"},
    )
    assert response.status_code == 200
    assert response.json()["user_id"] == "user-a"

    response = await client.get("/v1/profile", headers=auth_headers)
    assert response.json()["display_name"] == "User A"

    response = await client.put(
        "/v1/profile", headers=other_auth_headers, json={"email": "a@example.com"}
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_admin_requires_key(client: AsyncClient):
    response = await client.get("/v1/admin/api-keys")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_key_lifecycle(client: AsyncClient):
    admin = {"X-Admin-Key": get_settings().secret_key}

    response = await client.post(
        "/v1/admin/api-keys",
        headers=admin,
        json={"name": "Mobile app", "user_id": "user-c", "scopes": ["read"]},
    )
    assert response.status_code == 201
    created = response.json()
    assert created["api_key"].startswith("ask_")
    assert created["user_id"] == "user-c"

    user_headers = {"Authorization": f"Bearer {created['api_key']}"}
    response = await client.get("/v1/stats", headers=user_headers)
    assert response.status_code == 200

    response = await client.get(
        "/v1/admin/api-keys", headers=admin, params={"user_id": "user-c"}
    )
    assert [k["id"] for k in response.json()] == [created["id"]]

    response = await client.delete(f"/v1/admin/api-keys/{created['id']}", headers=admin)
    assert response.status_code == 204

    response = await client.get("/v1/stats", headers=user_headers)
    assert response.status_code == 403

    response = await client.get(f"/v1/admin/api-keys/{created['id']}", headers=admin)
    assert response.json()["is_active"] is False


@pytest.mark.asyncio
async def test_upload_language_too_long(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/v1/audio-files",
        headers=auth_headers,
        files={"file": ("demo.wav", WAV_BYTES, "audio/wav")},
        data={"language": "x" * 33},
    )
    assert response.status_code == 422

    response = await client.get("/v1/audio-files", headers=auth_headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_upload_with_playback_url(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/v1/audio-files",
        headers=auth_headers,
        files={"file": ("demo.wav", WAV_BYTES, "audio/wav")},
        data={"audio_url": "blob:recording-1"},
    )
    assert response.status_code == 201

    response = await client.get("/v1/audio-files", headers=auth_headers)
    [audio] = response.json()
    assert audio["audio_url"] == "blob:recording-1"
    assert audio["language"] == "auto"


@pytest.mark.asyncio
async def test_usage_counts_translated_characters(client: AsyncClient, auth_headers: dict):
    for text in ("hello", "see you tomorrow"):
        response = await client.post(
            "/v1/translations",
            headers=auth_headers,
            json={
                "source_language": "en",
                "target_language": "fr",
                "original_text": text,
                "translated_text": "...",
            },
        )
        assert response.status_code == 201

    response = await client.get("/v1/usage", headers=auth_headers)
    assert response.json()["characters_translated"] == len("hello") + len("see you tomorrow")

    response = await client.get("/v1/translations", headers=auth_headers)
    assert sorted(t["character_count"] for t in response.json()) == [5, 16]


@pytest.mark.asyncio
async def test_wrong_authorization_scheme(client: AsyncClient):
    response = await client.get(
        "/v1/stats", headers={"Authorization": "Basic ask_" + "0" * 32}
    )
    assert response.status_code == 401
    assert "Bearer" in response.json()["detail"]
