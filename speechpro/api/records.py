"""Routes for transcription, translation, speech-to-speech and TTS records."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from speechpro.auth.security import require_read_scope, require_write_scope
from speechpro.db.models import ApiKey
from speechpro.db.session import get_db
from speechpro.middleware.rate_limit import rate_limit_writes
from speechpro.schemas.schemas import (
    RecordCreatedResponse,
    SpeechToSpeechCreate,
    SpeechToSpeechResponse,
    TextToSpeechCreate,
    TextToSpeechResponse,
    TranscriptionCreate,
    TranscriptionResponse,
    TranslationCreate,
    TranslationResponse,
)
from speechpro.services.record_store import RecordStore, get_record_store

router = APIRouter(prefix="/v1")

DECRYPT_QUERY = Query(False, description="Return plaintext instead of ciphertext")


# ============== Transcriptions ==============


@router.post(
    "/transcriptions",
    response_model=RecordCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Transcriptions"],
    summary="Store a transcription",
)
@rate_limit_writes()
async def create_transcription(
    request: Request,
    body: TranscriptionCreate,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_write_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Store a transcription result; the text is encrypted at rest."""
    record_id = await store.save_transcription(
        db,
        body.audio_id,
        api_key.user_id,
        body.text,
        body.language,
        body.confidence,
        method=body.method,
        audio_url=body.audio_url,
    )
    return RecordCreatedResponse(id=record_id)


@router.get(
    "/transcriptions",
    response_model=list[TranscriptionResponse],
    tags=["Transcriptions"],
    summary="List transcriptions",
)
async def list_transcriptions(
    audio_id: Optional[int] = Query(None, ge=0, description="Only for this audio file"),
    decrypt: bool = DECRYPT_QUERY,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """List the caller's transcriptions, newest first."""
    records = await store.list_transcriptions(db, api_key.user_id, audio_id=audio_id)
    return [store.transcription_to_response(r, decrypt=decrypt) for r in records]


# ============== Translations ==============


@router.post(
    "/translations",
    response_model=RecordCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Translations"],
    summary="Store a translation",
)
@rate_limit_writes()
async def create_translation(
    request: Request,
    body: TranslationCreate,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_write_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Store a translation result; both texts are encrypted at rest."""
    record_id = await store.save_translation(
        db,
        body.transcription_id,
        api_key.user_id,
        body.source_language,
        body.target_language,
        body.original_text,
        body.translated_text,
        audio_url=body.audio_url,
    )
    return RecordCreatedResponse(id=record_id)


@router.get(
    "/translations",
    response_model=list[TranslationResponse],
    tags=["Translations"],
    summary="List translations",
)
async def list_translations(
    transcription_id: Optional[int] = Query(None, ge=0, description="Only for this transcription"),
    decrypt: bool = DECRYPT_QUERY,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """List the caller's translations, newest first."""
    records = await store.list_translations(
        db, api_key.user_id, transcription_id=transcription_id
    )
    return [store.translation_to_response(r, decrypt=decrypt) for r in records]


# ============== Speech-to-Speech ==============


@router.post(
    "/speech-to-speech",
    response_model=RecordCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Speech-to-Speech"],
    summary="Store a speech-to-speech translation",
)
@rate_limit_writes()
async def create_speech_to_speech(
    request: Request,
    body: SpeechToSpeechCreate,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_write_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Store a speech-to-speech result; both texts are encrypted at rest."""
    record_id = await store.save_speech_to_speech(
        db,
        body.translation_id,
        api_key.user_id,
        body.source_language,
        body.target_language,
        body.original_audio_url,
        body.transcribed_text,
        body.translated_text,
        body.synthesized_audio_url,
    )
    return RecordCreatedResponse(id=record_id)


@router.get(
    "/speech-to-speech",
    response_model=list[SpeechToSpeechResponse],
    tags=["Speech-to-Speech"],
    summary="List speech-to-speech translations",
)
async def list_speech_to_speech(
    translation_id: Optional[int] = Query(None, ge=0, description="Only for this translation"),
    decrypt: bool = DECRYPT_QUERY,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """List the caller's speech-to-speech records, newest first."""
    records = await store.list_speech_to_speech(
        db, api_key.user_id, translation_id=translation_id
    )
    return [store.speech_to_speech_to_response(r, decrypt=decrypt) for r in records]


# ============== Text-to-Speech ==============


@router.post(
    "/text-to-speech",
    response_model=RecordCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Text-to-Speech"],
    summary="Store a text-to-speech result",
)
@rate_limit_writes()
async def create_text_to_speech(
    request: Request,
    body: TextToSpeechCreate,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_write_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Store a text-to-speech result; the source text is encrypted at rest."""
    record_id = await store.save_text_to_speech(
        db,
        api_key.user_id,
        body.original_text,
        body.language,
        body.audio_url,
        voice_type=body.voice_type,
    )
    return RecordCreatedResponse(id=record_id)


@router.get(
    "/text-to-speech",
    response_model=list[TextToSpeechResponse],
    tags=["Text-to-Speech"],
    summary="List text-to-speech results",
)
async def list_text_to_speech(
    decrypt: bool = DECRYPT_QUERY,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """List the caller's text-to-speech records, newest first."""
    records = await store.list_text_to_speech(db, api_key.user_id)
    return [store.text_to_speech_to_response(r, decrypt=decrypt) for r in records]
