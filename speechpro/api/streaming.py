"""Streaming transcription session routes."""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from speechpro.auth.security import require_read_scope, require_write_scope
from speechpro.db.models import ApiKey
from speechpro.db.session import get_db
from speechpro.middleware.rate_limit import rate_limit_writes
from speechpro.schemas.schemas import (
    StreamingSessionResponse,
    StreamingSessionStart,
    StreamingSessionStartResponse,
    StreamingSessionUpdate,
)
from speechpro.services.record_store import RecordStore, get_record_store

router = APIRouter(prefix="/v1/streaming-sessions", tags=["Streaming Sessions"])


@router.post(
    "",
    response_model=StreamingSessionStartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a streaming session",
)
@rate_limit_writes()
async def start_streaming_session(
    request: Request,
    body: StreamingSessionStart,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_write_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Open a session; it stays in progress (end_time 0) until finalized."""
    stream_id = await store.start_streaming_session(db, api_key.user_id, body.source_language)
    session = await store.get_streaming_session(db, stream_id, api_key.user_id)
    return StreamingSessionStartResponse(
        id=stream_id,
        session_id=session.session_id,
        start_time=session.start_time,
    )


@router.put(
    "/{stream_id}",
    response_model=StreamingSessionResponse,
    summary="Finalize a streaming session",
    description="Replace the session's final text, confidence and audio URL. "
    "Repeating the same request has no further effect.",
)
@rate_limit_writes()
async def finalize_streaming_session(
    request: Request,
    stream_id: int,
    body: StreamingSessionUpdate,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_write_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Finalize one of the caller's sessions."""
    session = await store.update_streaming_session(
        db,
        stream_id,
        body.final_text,
        body.average_confidence,
        body.audio_url,
        user_id=api_key.user_id,
    )
    return store.streaming_session_to_response(session, decrypt=False)


@router.get(
    "",
    response_model=list[StreamingSessionResponse],
    summary="List streaming sessions",
)
async def list_streaming_sessions(
    decrypt: bool = Query(False, description="Return plaintext instead of ciphertext"),
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """List the caller's streaming sessions, newest first."""
    sessions = await store.list_streaming_sessions(db, api_key.user_id)
    return [store.streaming_session_to_response(s, decrypt=decrypt) for s in sessions]


@router.get(
    "/by-session/{session_id}",
    response_model=StreamingSessionResponse,
    summary="Get a streaming session by session id",
)
async def get_streaming_session(
    session_id: str,
    decrypt: bool = Query(False, description="Return plaintext instead of ciphertext"),
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Look up a session by the random id issued when it started."""
    session = await store.get_streaming_session_by_session_id(db, session_id, api_key.user_id)
    return store.streaming_session_to_response(session, decrypt=decrypt)
