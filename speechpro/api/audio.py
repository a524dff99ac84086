"""Audio file upload and retrieval routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from speechpro.auth.security import require_read_scope, require_write_scope
from speechpro.db.models import ApiKey
from speechpro.db.session import get_db
from speechpro.middleware.rate_limit import rate_limit_writes
from speechpro.schemas.schemas import (
    AudioFileResponse,
    RecordCreatedResponse,
    normalize_language,
)
from speechpro.services.record_store import RecordStore, get_record_store

router = APIRouter(prefix="/v1/audio-files", tags=["Audio Files"])


@router.post(
    "",
    response_model=RecordCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an audio file",
    description="Store an audio file encrypted at rest and log the upload.",
)
@rate_limit_writes()
async def upload_audio_file(
    request: Request,
    file: UploadFile = File(...),
    language: str = Form("auto", min_length=1, max_length=32),
    duration_seconds: float = Form(0.0, ge=0.0),
    audio_url: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_write_scope),
    store: RecordStore = Depends(get_record_store),
):
    """
    Upload an audio file.

    - **file**: The audio file (any format)
    - **language**: Spoken language, "auto" when unknown
    - **duration_seconds**: Length of the audio if the client knows it
    - **audio_url**: Playback URL for the audio, if there is one
    """
    audio_id = await store.save_audio_file(
        db,
        file,
        api_key.user_id,
        language=normalize_language(language),
        duration_seconds=duration_seconds,
        content_type=file.content_type,
        audio_url=audio_url,
    )
    return RecordCreatedResponse(id=audio_id)


@router.get(
    "",
    response_model=list[AudioFileResponse],
    summary="List audio files",
)
async def list_audio_files(
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """List the caller's audio files, newest first."""
    records = await store.list_audio_files(db, api_key.user_id)
    return [AudioFileResponse.model_validate(r) for r in records]


@router.get(
    "/{audio_id}/content",
    summary="Download audio content",
    description="Decrypt and return the stored audio bytes.",
    responses={200: {"content": {"application/octet-stream": {}}}},
)
async def get_audio_content(
    audio_id: int,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Return the decrypted audio payload."""
    record = await store.get_audio_file(db, audio_id, api_key.user_id)
    return Response(
        content=store.decrypt_audio(record),
        media_type=record.content_type or "application/octet-stream",
    )
