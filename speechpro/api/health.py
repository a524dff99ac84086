"""Health check and system info routes."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from speechpro.config import get_settings
from speechpro.db.session import get_db
from speechpro.schemas.schemas import HealthResponse
from speechpro.services.exceptions import EncryptionError
from speechpro.services.record_store import RecordStore, get_record_store

router = APIRouter(tags=["System"])

settings = get_settings()

VERSION = "1.0.0"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health status of the service and its dependencies.",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    store: RecordStore = Depends(get_record_store),
):
    """
    Health check endpoint.

    Returns the status of:
    - API server
    - Database connection
    - Field encryption round trip
    """
    db_status = "ok"
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        db_status = "error"

    encryption_status = "ok"
    try:
        if store.cipher.decrypt(store.cipher.encrypt("health")) != "health":
            encryption_status = "error"
    except EncryptionError:
        encryption_status = "error"

    overall_status = "healthy"
    if "error" in (db_status, encryption_status):
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=VERSION,
        database=db_status,
        encryption=encryption_status,
    )


@router.get(
    "/v1/info",
    summary="Service information",
    description="Get general information about the service.",
)
async def service_info():
    """Get service information."""
    return {
        "name": settings.app_name,
        "version": VERSION,
        "environment": settings.app_env,
        "collections": [
            "audio_files",
            "transcriptions",
            "translations",
            "speech_to_speech",
            "streaming_sessions",
            "text_to_speech",
            "activity_logs",
        ],
        "action_types": list(settings.action_labels.keys()),
        "field_encryption": "fernet",
        "documentation": "/docs",
        "redoc": "/redoc",
    }
