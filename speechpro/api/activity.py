"""Activity history and usage statistics routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from speechpro.auth.security import require_read_scope
from speechpro.config import get_settings
from speechpro.db.models import ActionType, ApiKey
from speechpro.db.session import get_db
from speechpro.schemas.schemas import ActivityLogResponse, UsageTotals, UserStats
from speechpro.services.record_store import RecordStore, get_record_store

router = APIRouter(prefix="/v1", tags=["Activity"])

settings = get_settings()


@router.get(
    "/history",
    response_model=list[ActivityLogResponse],
    summary="Activity history",
    description="Get the caller's activity log, most recent first.",
)
async def get_history(
    limit: Optional[int] = Query(
        None, ge=1, le=settings.history_page_max, description="Maximum entries to return"
    ),
    action_type: Optional[str] = Query(
        None, description="Filter by action (upload, transcribe, translate, s2s, streaming, tts)"
    ),
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """List activity log entries."""
    action_enum = None
    if action_type:
        try:
            action_enum = ActionType(action_type)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid action type: {action_type}",
            )

    entries = await store.get_user_history(
        db, api_key.user_id, limit=limit, action_type=action_enum
    )
    return [store.activity_to_response(e) for e in entries]


@router.get(
    "/stats",
    response_model=UserStats,
    summary="Record counts",
    description="Count the caller's audio files, transcriptions, translations, "
    "speech-to-speech records and streaming sessions.",
)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Get per-collection record counts."""
    return await store.get_user_stats(db, api_key.user_id)


@router.get(
    "/usage",
    response_model=UsageTotals,
    summary="Usage totals",
    description="Total uploaded audio time, streaming time and text-to-speech requests.",
)
async def get_usage(
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(require_read_scope),
    store: RecordStore = Depends(get_record_store),
):
    """Get aggregate usage."""
    return await store.get_usage_totals(db, api_key.user_id)
